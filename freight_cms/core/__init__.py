"""
Core infrastructure for the portal client.

This module provides:
- Config: Configuration management
- Logger: structlog setup
- Errors: Error taxonomy surfaced to the portals
- Session: Token storage, event channel and per-session state
"""

from .config import ConfigManager, get_config
from .logger import configure_logging

__all__ = ["ConfigManager", "configure_logging", "get_config"]
