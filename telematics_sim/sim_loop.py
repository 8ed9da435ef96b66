"""Main asyncio emission loop for the simulator."""

from __future__ import annotations

import asyncio
import random
import signal
import sys
from typing import Optional

import structlog

from telematics_sim.config import SimulatorSettings
from telematics_sim.emitter import FrameEmitter, make_clock
from telematics_sim.exceptions import TransportWriteFailure
from telematics_sim.sensors.base import SensorSource
from telematics_sim.session import DeviceSession
from telematics_sim.transport import StreamTransport

logger = structlog.get_logger(__name__)


def create_source(settings: SimulatorSettings) -> SensorSource:
    """Factory: return the sensor source for the current config."""
    from telematics_sim.sensors.random_source import RandomSensorSource

    return RandomSensorSource(
        profile=settings.sensor_profile,
        rng=random.Random(settings.random_seed),
    )


async def run_simulator(
    settings: SimulatorSettings,
    *,
    once: bool = False,
    max_frames: Optional[int] = None,
    transport: Optional[StreamTransport] = None,
    source: Optional[SensorSource] = None,
) -> int:
    """Connect, then emit one frame per interval until stopped.

    Parameters
    ----------
    settings:
        Fully-resolved simulator configuration.
    once:
        Shorthand for ``max_frames=1``.
    max_frames:
        Stop cleanly after this many frames (``None`` runs until a
        signal arrives).

    Returns the number of frames sent.  ``ConnectFailure``,
    ``TransportWriteFailure`` and ``EncodeFailure`` propagate after the
    socket has been closed.
    """
    if once:
        max_frames = 1

    shutdown_event = asyncio.Event()

    # --- signal handling ---------------------------------------------------
    def _request_shutdown() -> None:
        logger.info("shutdown_requested")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    installed: list = []
    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, _request_shutdown)
            except (RuntimeError, ValueError):
                # Not on the main thread (e.g. under a test runner).
                continue
            installed.append(sig)

    transport = transport if transport is not None else StreamTransport(settings)
    source = source if source is not None else create_source(settings)
    emitter = FrameEmitter(
        DeviceSession(device_id=settings.device_id),
        source,
        clock=make_clock(settings.timestamp_clock),
    )

    try:
        await transport.open()
        logger.info(
            "simulation_started",
            server=settings.server_address,
            interval=settings.interval_seconds,
            device_id=settings.device_id,
        )
        sent = await _loop(
            emitter,
            transport,
            settings.interval_seconds,
            shutdown_event,
            max_frames=max_frames,
        )
    except TransportWriteFailure as exc:
        logger.error(
            "transport_write_failed",
            frame_number=exc.frame_number,
            error=str(exc),
        )
        raise
    finally:
        await transport.close()
        for sig in installed:
            loop.remove_signal_handler(sig)

    logger.info("simulation_stopped", frames_sent=sent)
    return sent


async def _loop(
    emitter: FrameEmitter,
    transport: StreamTransport,
    interval: float,
    shutdown_event: asyncio.Event,
    *,
    max_frames: Optional[int],
) -> int:
    """Fixed-rate emit loop; first frame at t=0, no drift between ticks."""
    loop = asyncio.get_running_loop()
    next_tick = loop.time()
    sent = 0

    while not shutdown_event.is_set():
        await emitter.emit(transport)
        sent += 1
        if max_frames is not None and sent >= max_frames:
            break

        next_tick += interval
        if await _wait_until(next_tick, shutdown_event):
            break

    return sent


async def _wait_until(deadline: float, event: asyncio.Event) -> bool:
    """Wait for the loop clock to reach *deadline*.

    Returns ``True`` if *event* was set first (shutdown requested).
    """
    remaining = deadline - asyncio.get_running_loop().time()
    if remaining <= 0:
        return event.is_set()
    try:
        await asyncio.wait_for(event.wait(), timeout=remaining)
    except asyncio.TimeoutError:
        return False
    return True
