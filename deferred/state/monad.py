"""StateT

State-passing computation over a base capability F:

    run: S -> F[(S, A)]

State is a value: every step receives the current state and returns the
next one alongside its result. Nothing is mutated in place."""

from __future__ import annotations

import typing
from collections.abc import Callable

from .._errors import InvalidStepError
from .._types import StateFn
from ..capability import MonadError
from ..step import Continue, Done, Step


class StateT[S, A]:
    """State transformer over base computation F.

    Monadic laws:
    - Left identity: pure(a).flat_map(f) ≡ f(a)
    - Right identity: m.flat_map(pure) ≡ m
    - Associativity: m.flat_map(f).flat_map(g) ≡ m.flat_map(x => f(x).flat_map(g))
    """

    __slots__ = ("_run", "_base")

    def __init__(
        self,
        run: StateFn[S, typing.Any],
        base: MonadError[typing.Any],
        /,
    ) -> None:
        """Create StateT from a state function returning F[(S, A)]."""
        self._run = run
        self._base = base

    @property
    def base(self) -> MonadError[typing.Any]:
        """Capability of the underlying computation type."""
        return self._base

    # Constructors

    @staticmethod
    def pure[St, V](value: V, base: MonadError[typing.Any]) -> StateT[St, V]:
        """Lift a value, leaving the state untouched."""
        return StateT(lambda state: base.pure((state, value)), base)

    @staticmethod
    def lift[St, V](fa: typing.Any, base: MonadError[typing.Any]) -> StateT[St, V]:
        """Lift a base computation F[V], leaving the state untouched."""
        return StateT(lambda state: base.map(fa, lambda value: (state, value)), base)

    @staticmethod
    def get[St](base: MonadError[typing.Any]) -> StateT[St, St]:
        """Read the current state."""
        return StateT(lambda state: base.pure((state, state)), base)

    @staticmethod
    def set[St](new_state: St, base: MonadError[typing.Any]) -> StateT[St, None]:
        """Replace the state."""
        return StateT(lambda _: base.pure((new_state, None)), base)

    @staticmethod
    def modify[St](f: Callable[[St], St], base: MonadError[typing.Any]) -> StateT[St, None]:
        """Transform the state. f runs when the base computation is run."""
        return StateT(
            lambda state: base.flat_map(base.pure(state), lambda current: base.pure((f(current), None))),
            base,
        )

    @staticmethod
    def inspect[St, V](f: Callable[[St], V], base: MonadError[typing.Any]) -> StateT[St, V]:
        """Read a value derived from the state. f runs when the base computation is run."""
        return StateT(
            lambda state: base.flat_map(base.pure(state), lambda current: base.pure((current, f(current)))),
            base,
        )

    @staticmethod
    def tail_rec_m[St, Seed, V](
        a: Seed,
        f: Callable[[Seed], StateT[St, Step[Seed, V]]],
        base: MonadError[typing.Any],
    ) -> StateT[St, V]:
        """
        Stack-safe loop for StateT, built on base.tail_rec_m.

        The base loop carries (state, seed) pairs, so stack safety is
        whatever the base capability guarantees.
        """

        def run(state: St) -> typing.Any:
            def step(pair: tuple[St, Seed]) -> typing.Any:
                current_state, seed = pair

                def widen(result: tuple[St, Step[Seed, V]]) -> Step[tuple[St, Seed], tuple[St, V]]:
                    next_state, outcome = result
                    match outcome:
                        case Continue(next_seed):
                            return Continue((next_state, next_seed))
                        case Done(value):
                            return Done((next_state, value))
                        case _:
                            raise InvalidStepError(outcome)

                return base.map(f(seed).run(current_state), widen)

            return base.tail_rec_m((state, a), step)

        return StateT(run, base)

    # Running

    def run(self, state: S, /) -> typing.Any:
        """Run from state, returning F[(S, A)]."""
        return self._run(state)

    def run_s(self, state: S, /) -> typing.Any:
        """Run from state, keeping only the final state: F[S]."""
        return self._base.map(self._run(state), lambda pair: pair[0])

    def run_a(self, state: S, /) -> typing.Any:
        """Run from state, keeping only the result: F[A]."""
        return self._base.map(self._run(state), lambda pair: pair[1])

    # Functor / monad operations

    def map[U](self, f: Callable[[A], U], /) -> StateT[S, U]:
        """Functor fmap - apply function to result, preserve state."""
        base = self._base
        return self.flat_map(lambda value: StateT.pure(f(value), base))

    def flat_map[U](self, f: Callable[[A], StateT[S, U]], /) -> StateT[S, U]:
        """
        Monadic bind (>>=), threading the state.

        NOTE: Starting from base.pure(state) keeps run() from recursing
              through long left-nested chains when the base flat_map is lazy.
        """
        base = self._base

        def run(state: S) -> typing.Any:
            return base.flat_map(
                base.pure(state),
                lambda current: base.flat_map(
                    self._run(current),
                    lambda pair: f(pair[1]).run(pair[0]),
                ),
            )

        return StateT(run, base)

    def __repr__(self) -> str:
        return f"StateT(<fn>, base={self._base!r})"


__all__ = ("StateT",)
