"""Sync capability for Lazy."""

from __future__ import annotations

import logging
import typing
from collections.abc import Callable

from .._errors import InvalidStepError, LoopLimitExceededError
from .._types import Recovery, Thunk
from ..capability import Sync
from ..policy import DEFAULT_POLICY, EvalPolicy
from ..step import Continue, Done, Step
from .value import Lazy

logger = logging.getLogger(__name__)


class LazySync(Sync[Lazy[typing.Any]]):
    """
    Sync for Lazy.

    - suspend -> Defer (re-evaluated on every force)
    - delay   -> Later (memoized)
    - raise_error / handle_error_with are deferred: nothing is raised or
      caught until the result is forced.
    """

    __slots__ = ("_policy",)

    def __init__(self, policy: EvalPolicy = DEFAULT_POLICY) -> None:
        self._policy = policy

    @property
    def policy(self) -> EvalPolicy:
        return self._policy

    def pure[A](self, value: A, /) -> Lazy[A]:
        return Lazy.now(value)

    def map[A, B](self, fa: Lazy[A], f: Callable[[A], B], /) -> Lazy[B]:
        return fa.map(f)

    def flat_map[A, B](self, fa: Lazy[A], f: Callable[[A], Lazy[B]], /) -> Lazy[B]:
        return fa.flat_map(f)

    def raise_error(self, error: Exception, /) -> Lazy[typing.Never]:
        def fail() -> Lazy[typing.Never]:
            raise error

        return Lazy.defer(fail)

    def handle_error_with[A](self, fa: Lazy[A], f: Recovery[Lazy[A]], /) -> Lazy[A]:
        def guarded() -> Lazy[A]:
            try:
                return Lazy.now(fa.value())
            except Exception as exc:
                return f(exc)

        return Lazy.defer(guarded)

    def tail_rec_m[A, B](self, a: A, f: Callable[[A], Lazy[Step[A, B]]], /) -> Lazy[B]:
        max_iterations = self._policy.max_iterations

        def run_loop() -> Lazy[B]:
            seed = a
            iterations = 0
            while True:
                if max_iterations is not None and iterations >= max_iterations:
                    raise LoopLimitExceededError(iterations)
                step = f(seed).value()
                iterations += 1
                match step:
                    case Continue(next_seed):
                        seed = next_seed
                    case Done(result):
                        logger.debug("tail_rec_m finished after %d iterations", iterations)
                        return Lazy.now(result)
                    case _:
                        raise InvalidStepError(step)

        return Lazy.defer(run_loop)

    def suspend[A](self, thunk: Thunk[Lazy[A]], /) -> Lazy[A]:
        return Lazy.defer(thunk)

    def delay[A](self, thunk: Thunk[A], /) -> Lazy[A]:
        return Lazy.later(thunk, thread_safe=self._policy.thread_safe)

    def __repr__(self) -> str:
        return f"LazySync({self._policy!r})"


# Default instance
lazy_sync: typing.Final = LazySync()

__all__ = ("LazySync", "lazy_sync")
