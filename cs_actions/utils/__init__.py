"""Utility modules for connector actions."""

from .logging import setup_logging
from .polling import PollingHandler

__all__ = ["setup_logging", "PollingHandler"]
