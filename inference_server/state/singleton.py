"""Lazily built, process-wide shared objects.

The served models and the similarity index are expensive to load and are
shared read-only by every request, so they are built once on first access
and reused afterwards.

Usage:
    class ContextHolder(AsyncSingleton[AppContext]):
        async def _create_instance(self) -> AppContext:
            return await asyncio.to_thread(load_app_context)

    holder = ContextHolder()
    ctx = await holder.get()
    await holder.shutdown()
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class AsyncSingleton(ABC, Generic[T]):
    """Builds its instance at most once, even under concurrent first calls."""

    def __init__(self) -> None:
        self._instance: T | None = None
        self._lock = asyncio.Lock()

    @abstractmethod
    async def _create_instance(self) -> T:
        """Build the instance. Called once, under the lock."""
        ...

    async def _shutdown_instance(self, instance: T) -> None:
        """Release the instance. Nothing to do by default."""

    async def get(self) -> T:
        if self._instance is not None:
            return self._instance
        async with self._lock:
            # Another caller may have finished building while we waited
            if self._instance is None:
                self._instance = await self._create_instance()
            return self._instance

    def set(self, instance: T) -> None:
        """Install a prebuilt instance (tests, embedding the server)."""
        self._instance = instance

    async def shutdown(self) -> None:
        if self._instance is None:
            return
        async with self._lock:
            instance, self._instance = self._instance, None
            if instance is not None:
                await self._shutdown_instance(instance)

    @property
    def is_initialized(self) -> bool:
        return self._instance is not None


__all__ = ["AsyncSingleton"]
