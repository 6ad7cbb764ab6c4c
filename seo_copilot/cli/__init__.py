"""SEO Copilot CLI Package.

Provides the command-line interface for the multi-provider SEO assistant.

Usage:
    python -m seo_copilot.cli serve --port 8000
    python -m seo_copilot.cli validate-env
    python -m seo_copilot.cli providers
    python -m seo_copilot.cli competitors example.com -k "seo tools"
    python -m seo_copilot.cli content draft.md --title "My post"
    python -m seo_copilot.cli enhance draft.md --mode human
    python -m seo_copilot.cli keywords "seo tools" "rank tracking"
    python -m seo_copilot.cli check draft.md --focus originality
"""

import typer

from seo_copilot.cli.analyze import (
    check_command,
    competitors_command,
    content_command,
    enhance_command,
    keywords_command,
)
from seo_copilot.cli.providers import providers_command
from seo_copilot.cli.serve import serve_command
from seo_copilot.cli.validate import validate_env_command

app = typer.Typer(help="SEO Copilot: multi-provider LLM assistant for SEO content")

app.command(name="serve")(serve_command)
app.command(name="validate-env")(validate_env_command)
app.command(name="providers")(providers_command)
app.command(name="competitors")(competitors_command)
app.command(name="content")(content_command)
app.command(name="enhance")(enhance_command)
app.command(name="keywords")(keywords_command)
app.command(name="check")(check_command)

__all__ = [
    "app",
    "serve_command",
    "validate_env_command",
    "providers_command",
    "competitors_command",
    "content_command",
    "enhance_command",
    "keywords_command",
    "check_command",
]
