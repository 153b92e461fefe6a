"""Application-scoped state shared by every request."""

from .context import AppContext, GenerationSettings
from .singleton import AsyncSingleton
from .loader import (
    load_index,
    set_app_context,
    get_app_context,
    load_app_context,
    app_context_ready,
    generation_settings,
    shutdown_app_context,
)

__all__ = [
    "AppContext",
    "AsyncSingleton",
    "GenerationSettings",
    "app_context_ready",
    "generation_settings",
    "get_app_context",
    "load_app_context",
    "load_index",
    "set_app_context",
    "shutdown_app_context",
]
