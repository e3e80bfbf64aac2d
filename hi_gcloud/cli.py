"""Command-line entry point for the Hi-GCloud MCP server."""

import argparse
import asyncio
import os
import sys

from .core.config import Config
from .core.logger import setup_logger
from .server import HiGcloudServer


TRANSPORTS = ("stdio", "sse", "streamable-http")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hi-gcloud",
        description="Hi-GCloud MCP Server - GCP operations via the gcloud CLI",
    )
    parser.add_argument("--transport", choices=TRANSPORTS, help="MCP transport (default: $MCP_TRANSPORT or stdio)")
    parser.add_argument("--workdir", help="Directory holding .hi-gcloud.json (default: current directory)")
    parser.add_argument("--log-level", help="Log level (default: $LOG_LEVEL or INFO)")
    parser.add_argument("--check", action="store_true", help="Print config and gcloud auth status, then exit")
    return parser


def main(argv=None) -> int:
    """Main server entry point."""
    args = build_parser().parse_args(argv)

    # The logger decides between stdout and stderr from the environment
    if args.transport:
        os.environ["MCP_TRANSPORT"] = args.transport

    config = Config(workdir=args.workdir)
    if args.log_level:
        config.log_level = args.log_level
    logger = setup_logger("hi_gcloud", config.log_level)

    server = HiGcloudServer(config, logger)

    if args.check:
        logger.info("🧪 Checking Hi-GCloud setup...")
        report = asyncio.run(server.check())
        server.print_check(report)
        return 0 if report["authenticated"] else 1

    try:
        server.run(args.transport)
    except KeyboardInterrupt:
        logger.info("👋 Shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
