"""Utility modules for prq."""

from .config import ConfigManager

__all__ = ["ConfigManager"]
