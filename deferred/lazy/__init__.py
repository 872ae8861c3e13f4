"""
Lazy values
===========

Lazy[A] - отложенное значение (Now / Later / Always / Defer) и его Sync.
"""

from .value import Always, Defer, FlatMap, Later, Lazy, Now
from .sync import LazySync, lazy_sync

__all__ = (
    "Lazy",
    "Now",
    "Later",
    "Always",
    "Defer",
    "FlatMap",
    "LazySync",
    "lazy_sync",
)
