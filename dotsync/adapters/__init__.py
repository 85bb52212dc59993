"""Adapters — bindings for the external tools dotsync drives.

Public re-exports for convenient access.
"""

from dotsync.adapters.base import Adapter, ExecutionContext
from dotsync.adapters.mock import MockAdapter
from dotsync.adapters.registry import AdapterRegistry, default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
]
