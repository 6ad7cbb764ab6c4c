"""Providers command: router, usage and cache status per provider."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from seo_copilot.cli.utils import (
    build_orchestrator,
    display_info,
    handle_errors,
    print_json,
)


@handle_errors
def providers_command(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Optional YAML settings file"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print raw JSON"),
):
    """Show configured providers and their router status."""
    orchestrator = build_orchestrator(config_path)
    try:
        status = orchestrator.provider_status()
    finally:
        asyncio.run(orchestrator.close())

    if json_output:
        print_json(status)
        return

    display_info("Providers:")
    for entry in status:
        router = (
            f"priority {entry['priority']}, "
            f"{'available' if entry['available'] else 'unavailable'}"
            f"{', current' if entry['isCurrent'] else ''}"
            if entry["inRouter"]
            else "fan-out only"
        )
        configured = "configured" if entry["configured"] else "missing key"
        typer.echo(f"  {entry['name']:<11} {entry['model'] or '-':<28} {configured:<12} {router}")
        if entry.get("lastError"):
            typer.echo(f"  {'':<11} last error: {entry['lastError']}")
