"""Command-line launcher that serves the trivia duel API with uvicorn."""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn

from triviaduel.backend.api import create_app
from triviaduel.backend.channel import create_channel
from triviaduel.backend.config import BackendSettings, load_settings
from triviaduel.backend.coordinator import SessionCoordinator


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Trivia Duel launcher")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--agent-url", default=None)
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--no-auto-start", action="store_true")
    return parser.parse_args(argv)


def merge_settings(args: argparse.Namespace, settings: BackendSettings) -> BackendSettings:
    return BackendSettings(
        agent_url=args.agent_url or settings.agent_url,
        agent_id=settings.agent_id,
        api_key=settings.api_key,
        timeout_s=settings.timeout_s,
        host=args.host or settings.host,
        port=args.port if args.port is not None else settings.port,
        auto_start=settings.auto_start and not args.no_auto_start,
        log_level=(args.log_level or settings.log_level).upper(),
    )


def main(argv: list[str] | None = None) -> int:
    settings = merge_settings(parse_args(argv), load_settings())
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    coordinator = SessionCoordinator(channel=create_channel(settings))
    app = create_app(coordinator=coordinator, auto_start=settings.auto_start)
    try:
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    except KeyboardInterrupt:
        print("Stopped.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
