"""Small shared utilities."""

from .env import env_flag
from .device import resolve_device

__all__ = ["env_flag", "resolve_device"]
