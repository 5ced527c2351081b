"""HTTP surface for price widgets."""

from .app import create_app

__all__ = ["create_app"]
