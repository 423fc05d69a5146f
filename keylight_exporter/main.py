"""
Exporter entry point.

Parses flags, loads configuration, configures logging, and serves metrics.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import structlog
from prometheus_client import CollectorRegistry, GCCollector, PlatformCollector, ProcessCollector

from .config import ExporterConfig, load_config
from .server import ExporterServer


def configure_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog with the specified level and format."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[level.upper()]
        ),
    )


def build_registry() -> CollectorRegistry:
    """Create a registry carrying the process and runtime collectors."""
    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)
    return registry


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Prometheus exporter for Elgato Key Light devices")
    parser.add_argument(
        "-c", "--config",
        help="Path to an optional YAML configuration file",
    )
    parser.add_argument(
        "--metrics.addr",
        dest="metrics_addr",
        help="address for Elgato Key Light exporter (default: :9288)",
    )
    parser.add_argument(
        "--metrics.path",
        dest="metrics_path",
        help="URL path for surfacing collected metrics (default: /metrics)",
    )
    parser.add_argument("--log-level", dest="log_level", help="Log level (default: info)")
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=["json", "text"],
        help="Log output format (default: json)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ExporterConfig:
    """Load the configuration file, if any, and apply flag overrides."""
    config = load_config(args.config) if args.config else ExporterConfig()

    raw = config.model_dump()
    if args.metrics_addr is not None:
        raw["metrics"]["addr"] = args.metrics_addr
    if args.metrics_path is not None:
        raw["metrics"]["path"] = args.metrics_path
    if args.log_level is not None:
        raw["logging"]["level"] = args.log_level
    if args.log_format is not None:
        raw["logging"]["format"] = args.log_format

    return ExporterConfig.model_validate(raw)


def run(argv: list[str] | None = None) -> None:
    """CLI entry point for the exporter."""
    args = parse_args(argv)

    try:
        config = build_config(args)
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.logging.level, config.logging.format)
    log = structlog.get_logger()
    log.info("exporter.starting", addr=config.metrics.addr, path=config.metrics.path)

    server = ExporterServer(config, registry=build_registry())
    try:
        asyncio.run(server.run_forever())
    except KeyboardInterrupt:
        pass
    except OSError as exc:
        log.error("exporter.start_failed", addr=config.metrics.addr, error=str(exc))
        sys.exit(1)


if __name__ == "__main__":
    run()
