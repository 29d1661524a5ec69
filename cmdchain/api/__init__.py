"""HTTP surface for cmdchain."""

from .app import create_app, create_registry


__all__ = ["create_app", "create_registry"]
