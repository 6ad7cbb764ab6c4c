"""Serve command for the HTTP API."""

from pathlib import Path
from typing import Optional

import typer

from seo_copilot.cli.utils import build_orchestrator, display_info, handle_errors


@handle_errors
def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Optional YAML settings file"
    ),
):
    """Start the SEO Copilot HTTP API."""
    from seo_copilot.api.server import run_server

    orchestrator = build_orchestrator(config_path)
    display_info(f"Starting SEO Copilot API at http://{host}:{port}")
    run_server(orchestrator, host=host, port=port)
