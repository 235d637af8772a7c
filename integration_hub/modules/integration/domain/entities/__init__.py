"""Integration domain entities."""

from .api_connection import ApiConnection

__all__ = ["ApiConnection"]
