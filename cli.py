"""Command-line interface for running the MCP workbench server."""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from config import RuntimeConfig, load_runtime_config
from errors import ConfigError
from server import WorkbenchServer, serve
from session.settings import WorkbenchConfig, load_workbench_config
from tools.instructions import NO_DESCRIPTION

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve configured MCP toolboxes through open_toolbox/use_tool")
    parser.add_argument("--config", type=Path, help="Path to the workbench JSON or TOML config (env: WORKBENCH_CONFIG)")
    parser.add_argument(
        "--connect-timeout",
        type=float,
        default=None,
        help="Seconds allowed per server to start, handshake and list tools",
    )
    parser.add_argument(
        "--close-grace",
        type=float,
        default=None,
        help="Seconds to wait for a server to exit before terminating it",
    )
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--check", action="store_true", help="Validate the configuration, print a summary and exit")
    return parser.parse_args(argv)


def configure_logging(level: str, console: Console) -> None:
    """Send log records to stderr; stdout carries the protocol."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


def resolve_runtime(args: argparse.Namespace, base: RuntimeConfig) -> RuntimeConfig:
    return RuntimeConfig(
        config_path=args.config or base.config_path,
        connect_timeout=_positive_or(args.connect_timeout, base.connect_timeout),
        close_grace=_positive_or(args.close_grace, base.close_grace),
        log_level=(args.log_level or base.log_level).upper(),
    )


def render_summary(config: WorkbenchConfig, console: Console) -> None:
    table = Table(title=f"Toolboxes ({config.source})" if config.source else "Toolboxes")
    table.add_column("Toolbox")
    table.add_column("Servers")
    table.add_column("Description")
    for name, toolbox in config.toolboxes.items():
        table.add_row(name, ", ".join(toolbox.servers), toolbox.description or NO_DESCRIPTION)
    console.print(table)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    runtime = resolve_runtime(args, load_runtime_config())
    err_console = Console(stderr=True)
    configure_logging(runtime.log_level, err_console)

    try:
        config = load_workbench_config(runtime.config_path)
    except ConfigError as exc:
        err_console.print(f"[bold red]Failed to start MCP workbench:[/] {exc.message}", highlight=False)
        err_console.print(
            "Ensure WORKBENCH_CONFIG or --config points to a valid configuration file. "
            f"Current path: {runtime.config_path}",
            highlight=False,
        )
        return 1

    logger.info("Loaded configuration from %s", config.source)
    logger.info("Available toolboxes: %s", ", ".join(config.names()) or "(none)")

    if args.check:
        render_summary(config, Console())
        return 0

    server = WorkbenchServer(
        config,
        connect_timeout=runtime.connect_timeout,
        close_grace=runtime.close_grace,
    )
    try:
        asyncio.run(serve(server))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


def _positive_or(value: Optional[float], fallback: float) -> float:
    if value is None or value <= 0:
        return fallback
    return value


if __name__ == "__main__":
    raise SystemExit(main())
