"""Serve the account-linking API."""

from __future__ import annotations

import argparse
from typing import Optional

import uvicorn

from mailtrack.cli.worker import configure_logging
from mailtrack.infrastructure import get_settings


def main(argv: Optional[list[str]] = None) -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(prog="mailtrack-serve", description="Mailtrack HTTP API")
    parser.add_argument("--host", default=None, help="bind host (default: API_HOST)")
    parser.add_argument("--port", type=int, default=None, help="bind port (default: API_PORT)")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)

    from mailtrack.api.main import create_app

    uvicorn.run(
        create_app(),
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
