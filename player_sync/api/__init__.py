"""API layer for the player config endpoints."""

from .config_api import ConfigAPI

__all__ = ["ConfigAPI"]
