"""Campaign Studio HTTP API."""

from .server import app, create_app

__all__ = ["app", "create_app"]
