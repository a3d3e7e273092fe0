"""worklane command-line interface."""

from worklane.cli.app import app

__all__ = ["app"]
