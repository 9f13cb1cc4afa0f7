#!/usr/bin/env python3
"""
AIDA Command Gate - Text Console
================================

Interactive console for the orchestrator's command gate.

Usage:
    python main.py                  # Route messages (gate + mock dialogue)
    python main.py --detect-only    # Show gate verdicts only
    python main.py --help           # Show help

Type a message: explicit commands such as /gallery or "mostra stili" are
dispatched to their action, everything else goes to the dialogue handler.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from commands import RegistryError
from core import Orchestrator, OrchestratorConfig, MessageResult, ErrorHandler, create_config_error
from infra.config import AppConfig, ConfigError
from infra.logging import configure_logging


# Setup rich console
console = Console()

SYSTEM_COMMANDS = ("help", "status", "commands", "quit")


def print_banner(detect_only: bool) -> None:
    """Print the console banner."""
    banner = Text()
    banner.append("AIDA", style="bold cyan")
    banner.append(" - Command Gate Console\n", style="dim")
    if detect_only:
        banner.append("Mode: detection only\n\n", style="yellow")
    else:
        banner.append("Mode: gate + dialogue\n\n", style="green")
    banner.append("Type ", style="dim")
    banner.append("help", style="bold green")
    banner.append(" for commands, ", style="dim")
    banner.append("quit", style="bold red")
    banner.append(" to exit", style="dim")

    console.print(Panel(banner, title="Welcome", border_style="blue"))


def print_status(orchestrator: Orchestrator) -> None:
    """Print current system status."""
    status = orchestrator.get_status()
    console.print(
        f"[dim]Intents: {status['intents_loaded']} | "
        f"Triggers: {status['triggers_loaded']} | "
        f"Dialogue: {status['dialogue']} | "
        f"Messages: {status['messages_processed']} | "
        f"Commands: {status['commands_detected']}[/dim]"
    )


def print_commands(orchestrator: Orchestrator) -> None:
    """Print the registered trigger vocabulary."""
    table = Table(title="Registered commands")
    table.add_column("Intent", style="cyan")
    table.add_column("Action", style="green")
    table.add_column("Triggers")

    for intent in orchestrator.preprocessor.registry.list_intents():
        triggers = sorted(intent.commands) + sorted(intent.phrases)
        table.add_row(intent.command_type.value, intent.action, ", ".join(triggers))

    console.print(table)


def print_result(result: MessageResult) -> None:
    """Print one routing result."""
    if result.is_command:
        console.print(
            f"[bold yellow]Command:[/bold yellow] {result.detection.command_type.value} "
            f"[dim](trigger: {result.detection.matched_trigger})[/dim]"
        )
        console.print(f"[bold green]Action:[/bold green] {result.action}")
    elif result.success:
        console.print(f"[bold blue]Reply:[/bold blue] {result.reply}")
    else:
        console.print(f"[bold red]Error:[/bold red] {result.reply}")

    console.print(f"[dim]{result.turn_id} | {result.execution_time_ms:.2f}ms[/dim]")


def run_text_mode(orchestrator: Orchestrator, detect_only: bool = False) -> None:
    """Read messages from stdin until quit."""
    print_banner(detect_only)
    print_status(orchestrator)

    preprocessor = orchestrator.preprocessor

    while True:
        try:
            text = console.input("\n[bold cyan]>[/bold cyan] ")
        except (KeyboardInterrupt, EOFError):
            break

        lowered = text.strip().lower()

        if lowered in ("quit", "exit", "q"):
            break

        if lowered == "help":
            console.print(
                "[bold]System commands:[/bold] " + ", ".join(SYSTEM_COMMANDS) +
                "\nAnything else is treated as a chat message."
            )
            continue

        if lowered == "status":
            print_status(orchestrator)
            continue

        if lowered == "commands":
            print_commands(orchestrator)
            continue

        if detect_only:
            detection = preprocessor.detect(text)
            payload = detection.to_dict()
            payload["action"] = preprocessor.resolve_action(detection)
            console.print_json(json.dumps(payload, ensure_ascii=False))
            continue

        print_result(orchestrator.process_message(text))

    console.print("\n[yellow]Shutting down...[/yellow]")
    orchestrator.shutdown()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="AIDA - Command Gate Console"
    )
    parser.add_argument(
        "--config", "-c",
        default="config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--registry", "-r",
        default=None,
        help="Trigger map YAML (overrides config)"
    )
    parser.add_argument(
        "--detect-only",
        action="store_true",
        help="Only show command gate verdicts"
    )
    parser.add_argument(
        "--log-level", "-l",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )

    args = parser.parse_args(argv)
    error_handler = ErrorHandler()

    try:
        settings = AppConfig.load(args.config)
    except ConfigError as e:
        error_handler.handle(create_config_error(e, source=args.config))
        console.print(f"[bold red]Config error:[/bold red] {e}")
        return 2

    configure_logging(
        level=getattr(logging, args.log_level or settings.log_level),
        log_dir=settings.log_dir,
        console=settings.log_console,
        file=settings.log_file,
    )
    logger = logging.getLogger("aida.main")

    try:
        orchestrator = Orchestrator(OrchestratorConfig(
            registry_path=args.registry or settings.registry_path,
            dialogue=settings.dialogue,
        ), error_handler=error_handler)
        orchestrator.initialize()
        run_text_mode(orchestrator, detect_only=args.detect_only)
        return 0

    except (RegistryError, FileNotFoundError, ConfigError) as e:
        logger.error(f"Startup failed: {e}")
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    except Exception as e:
        logger.exception("Fatal error")
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
