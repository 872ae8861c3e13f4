"""Sync laws

Law equations for any Sync instance. Each law returns IsEq(lhs, rhs): two
computations that must be indistinguishable when run. How to run them is
up to the caller (force a Lazy, run a StateT from some state, ...).

    laws = SyncLaws(lazy_sync)
    assert laws.suspend_flatten(lazy_sync.pure(1)).holds(run)
"""

from __future__ import annotations

import typing
from collections.abc import Callable
from dataclasses import dataclass

from ._types import Thunk
from .capability import Sync
from .step import Continue, Done


@dataclass(frozen=True, slots=True)
class IsEq[T]:
    """Pair of computations that a law says are equivalent."""

    lhs: T
    rhs: T

    def holds(self, run: Callable[[T], object]) -> bool:
        return run(self.lhs) == run(self.rhs)


def _raising(error: Exception) -> Thunk[typing.Never]:
    def thunk() -> typing.Never:
        raise error

    return thunk


class SyncLaws[F]:
    """Laws every Sync realization must satisfy."""

    __slots__ = ("F",)

    def __init__(self, F: Sync[F]) -> None:
        self.F = F

    # Suspension

    def suspend_does_not_evaluate[A](self, a: A) -> IsEq[F]:
        """Building suspend(thunk) calls thunk zero times."""
        F = self.F
        calls: list[A] = []

        def thunk() -> F:
            calls.append(a)
            return F.pure(a)

        F.suspend(thunk)
        return IsEq(F.delay(lambda: len(calls)), F.pure(0))

    def delay_does_not_evaluate[A](self, a: A) -> IsEq[F]:
        """Building delay(thunk) calls thunk zero times."""
        F = self.F
        calls: list[A] = []

        def thunk() -> A:
            calls.append(a)
            return a

        F.delay(thunk)
        return IsEq(F.delay(lambda: len(calls)), F.pure(0))

    def delay_constant_is_pure[A](self, a: A) -> IsEq[F]:
        return IsEq(self.F.delay(lambda: a), self.F.pure(a))

    def suspend_constant_is_pure_const[A](self, a: A) -> IsEq[F]:
        return IsEq(self.F.suspend(lambda: self.F.pure(a)), self.F.pure(a))

    def delay_is_suspend_pure[A](self, thunk: Thunk[A]) -> IsEq[F]:
        F = self.F
        return IsEq(F.delay(thunk), F.suspend(lambda: F.pure(thunk())))

    def suspend_flatten(self, fa: F) -> IsEq[F]:
        F = self.F
        return IsEq(F.suspend(lambda: F.suspend(lambda: fa)), F.suspend(lambda: fa))

    def suspend_bind_distributes[A, B](
        self,
        thunk: Thunk[F],
        f: Callable[[A], F],
    ) -> IsEq[F]:
        F = self.F
        return IsEq(
            F.flat_map(F.suspend(thunk), f),
            F.suspend(lambda: F.flat_map(thunk(), f)),
        )

    def bind_suspends_evaluation[A](self, a: A) -> IsEq[F]:
        """Building flat_map(fa, f) calls f zero times."""
        F = self.F
        calls: list[A] = []

        def f(value: A) -> F:
            calls.append(value)
            return F.pure(value)

        F.flat_map(F.pure(a), f)
        return IsEq(F.delay(lambda: len(calls)), F.pure(0))

    def map_suspends_evaluation[A](self, a: A) -> IsEq[F]:
        """Building map(fa, f) calls f zero times."""
        F = self.F
        calls: list[A] = []

        def f(value: A) -> A:
            calls.append(value)
            return value

        F.map(F.pure(a), f)
        return IsEq(F.delay(lambda: len(calls)), F.pure(0))

    # Errors

    def suspend_throw_is_raise_error(self, error: Exception) -> IsEq[F]:
        return IsEq(self.F.suspend(_raising(error)), self.F.raise_error(error))

    def delay_throw_is_raise_error(self, error: Exception) -> IsEq[F]:
        return IsEq(self.F.delay(_raising(error)), self.F.raise_error(error))

    def raise_error_handled[A](self, error: Exception, a: A) -> IsEq[F]:
        F = self.F
        return IsEq(F.handle_error_with(F.raise_error(error), lambda _: F.pure(a)), F.pure(a))

    def handle_error_pure[A](self, a: A) -> IsEq[F]:
        """Recovery is not consulted when nothing fails."""
        F = self.F
        return IsEq(F.handle_error_with(F.pure(a), F.raise_error), F.pure(a))

    def propagate_errors_through_bind_suspend[A](self, error: Exception, a: A) -> IsEq[F]:
        F = self.F
        return IsEq(
            F.flat_map(F.delay(_raising(error)), lambda _: F.pure(a)),
            F.raise_error(error),
        )

    # Stack safety

    def tail_rec_m_stack_safety(self, iterations: int = 100_000) -> IsEq[F]:
        F = self.F
        return IsEq(
            F.tail_rec_m(
                0,
                lambda n: F.pure(Continue(n + 1) if n < iterations else Done(n)),
            ),
            F.pure(iterations),
        )

    def stack_safety_on_repeated_left_binds(self, iterations: int = 10_000) -> IsEq[F]:
        F = self.F
        fa = F.pure(0)
        for _ in range(iterations):
            fa = F.flat_map(fa, lambda n: F.pure(n + 1))
        return IsEq(fa, F.pure(iterations))

    def stack_safety_on_repeated_right_binds(self, iterations: int = 10_000) -> IsEq[F]:
        F = self.F
        fa = F.pure(iterations)
        for _ in range(iterations):
            fa = F.flat_map(F.pure(None), lambda _, acc=fa: acc)
        return IsEq(fa, F.pure(iterations))

    def stack_safety_on_repeated_suspends(self, iterations: int = 10_000) -> IsEq[F]:
        F = self.F
        fa = F.pure(iterations)
        for _ in range(iterations):
            fa = F.suspend(lambda acc=fa: acc)
        return IsEq(fa, F.pure(iterations))


__all__ = ("IsEq", "SyncLaws")
