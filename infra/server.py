#!/usr/bin/env python3
"""
AIDA Orchestrator Server
------------------------
Runs the FastAPI service bus with an orchestrator.

Usage:
    python -m infra.server --port 8000
    python -m infra.server --config config.yaml --log-level DEBUG
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn
from rich.console import Console

from infra.config import AppConfig, ConfigError
from infra.logging import configure_logging
from infra.service_bus import ServiceBus

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AIDA Orchestrator Server")
    parser.add_argument("--config", "-c", default="config.yaml", help="Path to configuration file")
    parser.add_argument("--host", default=None, help="Host to bind to (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (overrides config)")
    parser.add_argument("--registry", default=None, help="Trigger map YAML (overrides config)")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    from commands import RegistryError
    from core import ErrorHandler, Orchestrator, OrchestratorConfig, create_config_error

    error_handler = ErrorHandler()

    try:
        settings = AppConfig.load(args.config)
    except ConfigError as e:
        error_handler.handle(create_config_error(e, source=args.config))
        console.print(f"[bold red]Config error:[/bold red] {e}")
        return 2

    host = args.host or settings.host
    port = args.port or settings.port
    log_level = args.log_level or settings.log_level

    configure_logging(
        level=getattr(logging, log_level),
        log_dir=settings.log_dir,
        console=settings.log_console,
        file=settings.log_file,
    )

    console.print("[dim]Creating orchestrator...[/dim]")
    orchestrator = Orchestrator(OrchestratorConfig(
        registry_path=args.registry or settings.registry_path,
        dialogue=settings.dialogue,
    ), error_handler=error_handler)

    try:
        orchestrator.initialize()
    except (ConfigError, RegistryError, FileNotFoundError) as e:
        console.print(f"[bold red]Startup failed:[/bold red] {e}")
        return 1

    bus = ServiceBus(orchestrator)
    app = bus.create_app()

    console.print("\n[bold green]AIDA Orchestrator[/bold green]")
    console.print(f"Running on http://{host}:{port}")
    console.print(f"API docs: http://{host}:{port}/docs")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    try:
        uvicorn.run(app, host=host, port=port, log_level=log_level.lower())
    finally:
        orchestrator.shutdown()

    return 0


if __name__ == "__main__":
    sys.exit(main())
