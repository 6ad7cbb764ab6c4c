"""HTTP API for SEO Copilot."""

from seo_copilot.api.server import create_app, run_server

__all__ = ["create_app", "run_server"]
