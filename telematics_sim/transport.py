"""Stream-socket transport to the collection server.

One TCP connection per run.  Every frame is written and drained before
``send`` returns, so frames reach the socket in emission order.  There
is no retry and no buffering: a failed write ends the run.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from telematics_sim.config import SimulatorSettings
from telematics_sim.exceptions import ConnectFailure, TransportWriteFailure

logger = structlog.get_logger(__name__)


class StreamTransport:
    """Writes wrapped frames to a TCP socket."""

    def __init__(self, settings: SimulatorSettings) -> None:
        self._host = settings.server_host
        self._port = settings.server_port
        self._connect_timeout = settings.connect_timeout_seconds
        self._dry_run = settings.dry_run
        self._writer: Optional[asyncio.StreamWriter] = None
        self._bytes_sent = 0

    # -- lifecycle ----------------------------------------------------------

    async def open(self) -> None:
        if self._dry_run:
            logger.info("transport_dry_run", host=self._host, port=self._port)
            return
        try:
            _, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port),
                timeout=self._connect_timeout,
            )
        except (OSError, asyncio.TimeoutError) as exc:
            reason = str(exc) or "timed out"
            raise ConnectFailure(
                f"cannot connect to {self._host}:{self._port}: {reason}",
                host=self._host,
                port=self._port,
            ) from exc
        logger.info("transport_connected", host=self._host, port=self._port)

    async def close(self) -> None:
        if self._writer is None:
            return
        writer, self._writer = self._writer, None
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as exc:
            logger.warning("transport_close_failed", error=str(exc))
        logger.info("transport_closed", bytes_sent=self._bytes_sent)

    def is_open(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    @property
    def bytes_sent(self) -> int:
        return self._bytes_sent

    # -- public API ---------------------------------------------------------

    async def send(self, data: bytes, *, frame_number: Optional[int] = None) -> None:
        """Write *data* and wait until the OS buffer has accepted it."""
        if self._dry_run:
            self._bytes_sent += len(data)
            return
        if not self.is_open():
            raise TransportWriteFailure(
                "transport is not open", frame_number=frame_number
            )
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as exc:
            raise TransportWriteFailure(
                f"write to {self._host}:{self._port} failed: {exc}",
                frame_number=frame_number,
            ) from exc
        self._bytes_sent += len(data)
