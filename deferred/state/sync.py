"""Sync capability for StateT, lifted from the base capability."""

from __future__ import annotations

import logging
import typing
from collections.abc import Callable

from .._types import Recovery, Thunk
from ..capability import Sync
from ..step import Step
from .monad import StateT

logger = logging.getLogger(__name__)


class StateTSync[S](Sync[StateT[S, typing.Any]]):
    """
    Sync for StateT[S, ·] over a base Sync.

    Suspension and errors are delegated to the base capability; this class
    only threads the state through them.
    """

    __slots__ = ("_base",)

    def __init__(self, base: Sync[typing.Any]) -> None:
        self._base = base

    @property
    def base(self) -> Sync[typing.Any]:
        return self._base

    def pure[A](self, value: A, /) -> StateT[S, A]:
        return StateT.pure(value, self._base)

    def map[A, B](self, fa: StateT[S, A], f: Callable[[A], B], /) -> StateT[S, B]:
        return fa.map(f)

    def flat_map[A, B](
        self,
        fa: StateT[S, A],
        f: Callable[[A], StateT[S, B]],
        /,
    ) -> StateT[S, B]:
        return fa.flat_map(f)

    def raise_error(self, error: Exception, /) -> StateT[S, typing.Never]:
        base = self._base
        return StateT(lambda _: base.raise_error(error), base)

    def handle_error_with[A](
        self,
        st: StateT[S, A],
        f: Recovery[StateT[S, A]],
        /,
    ) -> StateT[S, A]:
        """
        Two-tier recovery.

        Tier 1: st fails -> run f(error) from the state handed to this call.
        Tier 2: that recovery fails too -> run f(nested_error) once more from
        the state the recovery started at. A third failure propagates.
        """
        base = self._base

        def run(state: S) -> typing.Any:
            def recover_once(error: Exception) -> typing.Any:
                logger.debug("StateT recovery, tier 1: %r", error)

                def recover_again(nested: Exception) -> typing.Any:
                    logger.debug("StateT recovery, tier 2: %r", nested)
                    return f(nested).run(state)

                return base.handle_error_with(
                    base.suspend(lambda: f(error).run(state)),
                    recover_again,
                )

            return base.handle_error_with(
                base.suspend(lambda: st.run(state)),
                recover_once,
            )

        return StateT(run, base)

    def tail_rec_m[A, B](
        self,
        a: A,
        f: Callable[[A], StateT[S, Step[A, B]]],
        /,
    ) -> StateT[S, B]:
        return StateT.tail_rec_m(a, f, self._base)

    def suspend[A](self, thunk: Thunk[StateT[S, A]], /) -> StateT[S, A]:
        base = self._base
        return StateT(lambda state: base.suspend(lambda: thunk().run(state)), base)

    def __repr__(self) -> str:
        return f"StateTSync({self._base!r})"


def state_sync[S](
    base: Sync[typing.Any],
    state_type: type[S] | None = None,
) -> StateTSync[S]:
    """
    Lift a base Sync to StateT[S, ·].

    Example:
        counter = state_sync(lazy_sync, int)
        program = counter.delay(lambda: print("tick"))
        program.run(0).value()  # prints "tick", returns (0, None)
    """
    _ = state_type  # Used only for type inference
    return StateTSync(base)


__all__ = ("StateTSync", "state_sync")
