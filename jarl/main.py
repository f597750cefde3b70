"""Command line entry point.

Flags mirror the settings groups and override the environment; any flag
left out falls back to ``LIMITER_*``, ``SERVER_*`` and ``LOG_*`` values.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Sequence

from pydantic import ValidationError

from jarl.adapters.keeper.base import AbstractDelayKeeper
from jarl.core.admission import build_keeper
from jarl.core.config import LimiterSettings, ServerSettings, Settings, settings
from jarl.core.errors import ConfigurationAppError, TransportAppError
from jarl.core.logging import configure_logging
from jarl.server import http as http_server
from jarl.server import tcp as tcp_server

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_TRANSPORT_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jarl",
        description="Tell callers how long to wait before hitting a rate-limited service",
    )
    parser.add_argument(
        "--service",
        help="Name of the service to rate-limit (reference only, shows up in logs)",
    )
    parser.add_argument(
        "--requests",
        type=int,
        help="Maximum number of requests to allow within the period",
    )
    parser.add_argument(
        "--period",
        type=int,
        help="Period to enforce rate over, in seconds",
    )
    parser.add_argument(
        "--ip",
        help="IPv4 interface to bind to, normally 0.0.0.0",
    )
    parser.add_argument("--port", type=int, help="Port to bind to")
    parser.add_argument(
        "--transport",
        choices=("tcp", "http"),
        help="Reply over raw TCP (default) or serve the HTTP API",
    )
    parser.add_argument("--log-level", help="Root log level, e.g. DEBUG or INFO")
    return parser


def _overrides(pairs: dict[str, object]) -> dict[str, object]:
    return {key: value for key, value in pairs.items() if value is not None}


def resolve_settings(args: argparse.Namespace, base: Settings = settings) -> Settings:
    """Layer command line flags over already resolved settings.

    Groups are rebuilt from ``base`` plus the flags through their own
    constructors, so the flags are validated like any other value.

    Raises:
        ValidationError: If a resulting value is out of range.
    """
    limiter = LimiterSettings(
        **{
            **base.limiter.model_dump(),
            **_overrides(
                {
                    "service": args.service,
                    "requests": args.requests,
                    "period": args.period,
                }
            ),
        }
    )
    server = ServerSettings(
        **{
            **base.server.model_dump(),
            **_overrides(
                {
                    "host": args.ip,
                    "port": args.port,
                    "transport": args.transport,
                }
            ),
        }
    )
    log = base.log
    if args.log_level:
        log = log.model_copy(update={"level": args.log_level})

    return Settings(app_env=base.app_env, limiter=limiter, server=server, log=log)


def run(keeper: AbstractDelayKeeper, server_settings: ServerSettings) -> None:
    """Serve on the configured transport until interrupted.

    Raises:
        TransportAppError: If the listener cannot be started.
    """

    if server_settings.transport == "http":
        asyncio.run(http_server.serve(keeper, server_settings))
        return

    asyncio.run(tcp_server.serve(keeper, server_settings))


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = resolve_settings(args)
    except ValidationError as exc:
        configure_logging(settings.log)
        logger.error(
            "startup.invalid_configuration",
            extra={
                "errors": [
                    f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                    for error in exc.errors()
                ],
            },
        )
        return EXIT_CONFIG_ERROR

    configure_logging(cfg.log)

    try:
        keeper = build_keeper(cfg.limiter)
    except ConfigurationAppError as exc:
        logger.error(
            "startup.invalid_configuration",
            extra={"error_code": exc.code, "error_message": exc.message},
        )
        return EXIT_CONFIG_ERROR

    try:
        run(keeper, cfg.server)
    except TransportAppError as exc:
        logger.error(
            "startup.transport_failed",
            extra={"error_code": exc.code, "error_message": exc.message},
        )
        return EXIT_TRANSPORT_ERROR
    except KeyboardInterrupt:
        logger.info("server.stopped")

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
