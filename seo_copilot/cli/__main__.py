"""CLI entry point.

Allows running the CLI as a module: python -m seo_copilot.cli
"""

from seo_copilot.cli import app

if __name__ == "__main__":
    app()
