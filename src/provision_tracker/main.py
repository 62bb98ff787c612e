"""
Command line entry point for the provision tracker.

This module configures logging, builds the tracker selected by the
environment, and runs a single get/set/clear operation for a node.
"""

import argparse
import logging
import sys

import redis
import structlog
from pydantic import ValidationError

from .config import Settings, get_settings
from .exceptions import ProvisionTrackerError
from .tracker import TrackerFactory


def setup_logging(settings: Settings) -> None:
    """Configure structured logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level), format="%(message)s"
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            (
                structlog.processors.JSONRenderer()
                if settings.log_format == "json"
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="provision-tracker",
        description="Query or update the post-deployment provisioning status of a node",
    )
    parser.add_argument(
        "operation",
        choices=["get", "set", "clear"],
        help="get: show status, set: mark provisioned, clear: forget status",
    )
    parser.add_argument("node", help="Node identity")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        structlog.get_logger().error("Invalid configuration", error=str(e))
        return 1

    setup_logging(settings)
    logger = structlog.get_logger()

    try:
        tracker = TrackerFactory.from_settings(settings)

        if args.operation == "get":
            status = "provisioned" if tracker.get(args.node) else "not provisioned"
            print(f"{args.node}: {status}")
        elif args.operation == "set":
            tracker.set(args.node)
        else:
            tracker.clear(args.node)

    except (ProvisionTrackerError, redis.exceptions.RedisError) as e:
        logger.error(
            "Tracker operation failed",
            operation=args.operation,
            node=args.node,
            error=str(e),
        )
        return 1

    logger.info(
        "Tracker operation completed",
        operation=args.operation,
        node=args.node,
        backend=tracker.backend.value,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
