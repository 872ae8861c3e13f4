"""
Core type definitions for deferred.

Типы и алиасы используемые по всей библиотеке.
"""

from __future__ import annotations

from collections.abc import Callable

# ============================================================================
# Type aliases
# ============================================================================

# Thunk = deferred zero-argument expression, evaluated only when called
type Thunk[T] = Callable[[], T]

# Recovery = function that turns a raised error into a new computation
# NOTE: F is the computation type (Lazy[A], StateT[S, A], ...).
#       Python has no higher-kinded types, so capabilities speak in terms of
#       the concrete computation type instead of F[_].
type Recovery[F] = Callable[[Exception], F]

# StateFn = state-passing function S -> F[(S, A)]
type StateFn[S, F] = Callable[[S], F]

__all__ = (
    "Thunk",
    "Recovery",
    "StateFn",
)
