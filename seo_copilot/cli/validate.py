"""Validate-env command.

Checks provider credentials and settings without calling any provider.
"""

from pathlib import Path
from typing import Optional

import typer

from seo_copilot.cli.utils import (
    display_error,
    display_success,
    display_warning,
    handle_errors,
    load_settings,
)
from seo_copilot.services.config_manager import validate_environment


@handle_errors
def validate_env_command(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Optional YAML settings file"
    ),
    strict: bool = typer.Option(
        True, "--strict/--lenient", help="Fail when any provider key is missing"
    ),
):
    """Validate environment variables and settings."""
    settings = load_settings(config_path)
    valid, missing = validate_environment()

    for name, config in settings.providers.items():
        if config.has_credentials:
            display_success(f"✓ {name.value}: {config.model}")
        else:
            display_warning(f"✗ {name.value}: no API key")

    if valid:
        display_success("Environment is valid! ✅")
        return

    display_error(f"Missing environment variables: {', '.join(missing)}")
    if strict:
        raise typer.Exit(code=1)
