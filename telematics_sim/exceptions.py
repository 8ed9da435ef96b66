"""Exception hierarchy for the telematics simulator."""

from __future__ import annotations


class TelematicsError(Exception):
    """Base exception for all simulator errors."""


class ConnectFailure(TelematicsError):
    """The collection server could not be reached."""

    def __init__(self, message: str, *, host: str = "", port: int = 0) -> None:
        self.host = host
        self.port = port
        super().__init__(message)


class EncodeFailure(TelematicsError):
    """A value does not fit its declared wire width.

    Always a programming error: readings are validated before they reach
    the encoder, so hitting this means a builder or range is wrong.
    """

    def __init__(self, message: str, *, field: str = "") -> None:
        self.field = field
        super().__init__(message)


class TransportWriteFailure(TelematicsError):
    """Writing or flushing a frame to the socket failed."""

    def __init__(self, message: str, *, frame_number: int | None = None) -> None:
        self.frame_number = frame_number
        super().__init__(message)
