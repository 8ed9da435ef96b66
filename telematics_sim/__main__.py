"""CLI entry point: ``python -m telematics_sim [--host H] [--port P] ...``."""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog
from pydantic import ValidationError

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONNECT_FAILURE = 2
EXIT_TRANSPORT_ABORT = 3


def _renderer(fmt: str):
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _configure_logging(level: str, fmt: str) -> None:
    """Route structlog through stdlib logging on stderr."""
    import logging

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=False),
            structlog.processors.format_exc_info,
            _renderer(fmt),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="telematics_sim",
        description="Simulated OBD-II telematics device streaming binary frames over TCP",
    )
    parser.add_argument("--device-id", help="Device identifier (ASCII, max 15 bytes)")
    parser.add_argument("--host", dest="server_host", help="Collection server host")
    parser.add_argument("--port", dest="server_port", type=int, help="Collection server port")
    parser.add_argument(
        "--interval",
        dest="interval_seconds",
        type=int,
        help="Seconds between frames",
    )
    parser.add_argument("--seed", dest="random_seed", type=int, help="Random seed")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Build and log frames; never open a socket",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Send a single frame then exit",
    )
    parser.add_argument(
        "--count",
        type=_positive_int,
        default=None,
        help="Stop after sending this many frames",
    )
    return parser


def main(argv: list | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Load settings from env / .env file first, then override with CLI flags.
    from telematics_sim.config import SimulatorSettings

    overrides = {
        key: value
        for key, value in vars(args).items()
        if key not in ("once", "count") and value is not None
    }
    try:
        settings = SimulatorSettings(**overrides)
    except ValidationError as exc:
        print(f"telematics_sim: invalid configuration\n{exc}", file=sys.stderr)
        return EXIT_ERROR

    _configure_logging(settings.log_level, settings.log_format)

    logger = structlog.get_logger("telematics_sim")
    logger.info(
        "simulator_starting",
        version=__import__("telematics_sim").__version__,
        device_id=settings.device_id,
        server=settings.server_address,
        interval=settings.interval_seconds,
        dry_run=settings.dry_run,
        once=args.once,
        count=args.count,
    )

    from telematics_sim.exceptions import (
        ConnectFailure,
        EncodeFailure,
        TransportWriteFailure,
    )
    from telematics_sim.sim_loop import run_simulator

    try:
        asyncio.run(run_simulator(settings, once=args.once, max_frames=args.count))
    except ConnectFailure as exc:
        logger.error("connect_failed", host=exc.host, port=exc.port, error=str(exc))
        return EXIT_CONNECT_FAILURE
    except TransportWriteFailure:
        return EXIT_TRANSPORT_ABORT
    except EncodeFailure:
        logger.exception("encode_failed")
        return EXIT_ERROR
    except KeyboardInterrupt:
        logger.info("simulator_interrupted")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
