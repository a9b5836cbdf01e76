"""
Core interfaces (protocols) for swappable backends.
"""

from .store import KeyValueStore

__all__ = ["KeyValueStore"]
