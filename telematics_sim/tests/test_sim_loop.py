"""Tests for telematics_sim.sim_loop -- factory and emission runs."""

from __future__ import annotations

import asyncio
import os
import signal
import sys

import pytest

from telematics_sim.config import SimulatorSettings
from telematics_sim.exceptions import ConnectFailure, TransportWriteFailure
from telematics_sim.sensors.random_source import RandomSensorSource
from telematics_sim.sim_loop import create_source, run_simulator
from telematics_sim.transport import StreamTransport


def _make_settings(**overrides) -> SimulatorSettings:
    defaults = dict(
        device_id="SIM-TEST-01",
        server_host="127.0.0.1",
        server_port=9,
        interval_seconds=1,
        connect_timeout_seconds=2.0,
        random_seed=1,
    )
    defaults.update(overrides)
    return SimulatorSettings(**defaults)


class _FlakyTransport(StreamTransport):
    """Dry-run transport whose Nth send fails."""

    def __init__(self, settings: SimulatorSettings, fail_on: int) -> None:
        super().__init__(settings)
        self._fail_on = fail_on
        self.closed = False

    async def send(self, data: bytes, *, frame_number=None) -> None:
        if frame_number == self._fail_on:
            raise TransportWriteFailure("broken pipe", frame_number=frame_number)
        await super().send(data, frame_number=frame_number)

    async def close(self) -> None:
        self.closed = True
        await super().close()


def test_factory_returns_random_source() -> None:
    source = create_source(_make_settings(sensor_profile="sao_paulo"))
    assert isinstance(source, RandomSensorSource)
    assert source.profile_name == "sao_paulo"


@pytest.mark.asyncio
async def test_single_frame_reaches_server(tcp_sink, unstuff) -> None:
    async with tcp_sink:
        settings = _make_settings(server_port=tcp_sink.port)
        sent = await run_simulator(settings, once=True)
        await tcp_sink.wait_for_bytes(60)
    assert sent == 1
    frames = tcp_sink.frames()
    assert len(frames) == 1
    inner = unstuff(frames[0])
    assert inner[0] == 0x01
    assert inner[2:17] == b"SIM-TEST-01".ljust(15, b"\x00")
    assert inner[21] == 0x01


@pytest.mark.asyncio
async def test_frames_arrive_in_emission_order(tcp_sink, unstuff) -> None:
    async with tcp_sink:
        settings = _make_settings(server_port=tcp_sink.port)
        loop = asyncio.get_running_loop()
        started = loop.time()
        sent = await run_simulator(settings, max_frames=2)
        elapsed = loop.time() - started
        await tcp_sink.wait_for_bytes(2 * 58)
    assert sent == 2
    # First frame at t=0, second one interval later.
    assert 0.9 <= elapsed < 3.0
    locations = [unstuff(frame)[21] for frame in tcp_sink.frames()]
    assert locations == [0x01, 0x02]


@pytest.mark.asyncio
async def test_connect_failure_propagates(unused_tcp_port: int) -> None:
    with pytest.raises(ConnectFailure):
        await run_simulator(_make_settings(server_port=unused_tcp_port), once=True)


@pytest.mark.asyncio
async def test_transport_failure_aborts_and_closes() -> None:
    settings = _make_settings(dry_run=True)
    transport = _FlakyTransport(settings, fail_on=1)
    with pytest.raises(TransportWriteFailure):
        await run_simulator(settings, max_frames=5, transport=transport)
    assert transport.closed


@pytest.mark.asyncio
async def test_dry_run_once() -> None:
    settings = _make_settings(dry_run=True)
    assert await run_simulator(settings, once=True) == 1


@pytest.mark.asyncio
async def test_injected_source_is_used(fixed_source) -> None:
    settings = _make_settings(dry_run=True)
    await run_simulator(settings, once=True, source=fixed_source)
    assert fixed_source.gps_reads == [False]


@pytest.mark.asyncio
@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals only")
@pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
async def test_signal_stops_between_ticks(sig) -> None:
    """A signal during the wait ends the run cleanly without another frame."""
    settings = _make_settings(dry_run=True, interval_seconds=5)
    loop = asyncio.get_running_loop()
    loop.call_later(0.3, os.kill, os.getpid(), sig)
    started = loop.time()
    sent = await run_simulator(settings)
    assert sent == 1
    assert loop.time() - started < 2.0
