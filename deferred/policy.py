"""Evaluation policy for the lazy-value realization."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EvalPolicy:
    """Configuration for LazySync.

    thread_safe: guard the memo cell of Later values with a lock.
    max_iterations: cap on tail_rec_m iterations, None means unbounded.
    """

    thread_safe: bool = True
    max_iterations: int | None = None

    def __post_init__(self) -> None:
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ValueError("EvalPolicy.max_iterations must be >= 1 or None")


DEFAULT_POLICY = EvalPolicy()

__all__ = ("DEFAULT_POLICY", "EvalPolicy")
