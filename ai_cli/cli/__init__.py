"""ai-cli command line entry point."""

from ai_cli.cli.main import app

__all__ = ["app"]
