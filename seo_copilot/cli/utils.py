"""Shared CLI utilities.

Provides common functionality for all CLI commands.
"""

import asyncio
import functools
import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog
import typer

from seo_copilot.models.llm import Settings
from seo_copilot.observability.logging import configure_logging
from seo_copilot.orchestration.container import Orchestrator
from seo_copilot.services.config_manager import ConfigManager, ConfigValidationError
from seo_copilot.utils.exceptions import SeoCopilotError

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable)
T = TypeVar("T")


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings and configure logging from them.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    manager = ConfigManager(config_path=str(config_path) if config_path else None)
    try:
        settings = manager.load_settings()
    except (FileNotFoundError, ConfigValidationError) as e:
        typer.secho(f"Configuration Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    configure_logging(level=settings.log_level, json_output=settings.log_json)
    return settings


def build_orchestrator(config_path: Optional[Path] = None) -> Orchestrator:
    return Orchestrator.from_settings(load_settings(config_path))


def run_with_orchestrator(
    orchestrator: Orchestrator,
    operation: Callable[[Orchestrator], Awaitable[T]],
) -> T:
    """Run one async operation and release provider clients afterwards."""

    async def _run() -> T:
        try:
            return await operation(orchestrator)
        finally:
            await orchestrator.close()

    return asyncio.run(_run())


def handle_errors(func: F) -> F:
    """Decorator for consistent error handling.

    Catches exceptions and displays user-friendly error messages.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except SeoCopilotError as e:
            logger.warning("command_failed", error_code=e.code, error=e.message)
            typer.secho(f"Error [{e.code}]: {e.message}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        except Exception as e:
            logger.exception("command_failed")
            typer.secho(f"Error: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)

    return wrapper  # type: ignore[return-value]


def print_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        typer.secho(f"Cannot read {path}: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


def display_success(message: str) -> None:
    typer.secho(message, fg=typer.colors.GREEN)


def display_warning(message: str) -> None:
    typer.secho(message, fg=typer.colors.YELLOW)


def display_error(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)


def display_info(message: str) -> None:
    typer.secho(message, fg=typer.colors.CYAN)
