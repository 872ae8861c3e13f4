"""
Loop steps for tail_rec_m.

Continue(seed) - продолжить цикл с новым seed.
Done(value)    - выйти из цикла с результатом.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Continue[A]:
    """Keep looping with a new seed."""

    seed: A


@dataclass(frozen=True, slots=True)
class Done[B]:
    """Exit the loop with a result."""

    value: B


type Step[A, B] = Continue[A] | Done[B]

__all__ = ("Continue", "Done", "Step")
