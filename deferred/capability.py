"""Capabilities

MonadError - sequencing with an error channel:
- pure / flat_map (monad)
- raise_error / handle_error_with (errors)
- tail_rec_m (stack-safe recursion)

Sync - MonadError that can also suspend side effects:
- suspend (defer a computation-producing thunk)
- delay (defer a value-producing thunk, derived from suspend)

Capabilities are plain objects passed explicitly where they are needed;
there is no global registry."""

from __future__ import annotations

import abc
import typing
from collections.abc import Callable

from kungfu import Error, Ok, Result

from ._errors import ErrorValueError
from ._types import Recovery, Thunk
from .step import Step


class MonadError[F](abc.ABC):
    """Sequencing capability with an Exception error channel.

    F is the computation type the capability is for. Laws:
    - Left identity: flat_map(pure(a), f) ≡ f(a)
    - Right identity: flat_map(m, pure) ≡ m
    - Associativity: flat_map(flat_map(m, f), g) ≡ flat_map(m, x => flat_map(f(x), g))
    - Raise/handle: handle_error_with(raise_error(e), f) ≡ f(e)
    """

    __slots__ = ()

    @abc.abstractmethod
    def pure[A](self, value: A, /) -> F:
        """Lift a value into F."""

    @abc.abstractmethod
    def flat_map[A](self, fa: F, f: Callable[[A], F], /) -> F:
        """Monadic bind (>>=)."""

    @abc.abstractmethod
    def raise_error(self, error: Exception, /) -> F:
        """Computation that fails with error when run."""

    @abc.abstractmethod
    def handle_error_with(self, fa: F, f: Recovery[F], /) -> F:
        """Recover from a failure of fa by switching to f(error)."""

    @abc.abstractmethod
    def tail_rec_m[A, B](self, a: A, f: Callable[[A], F], /) -> F:
        """
        Stack-safe monadic loop.

        f returns F[Step[A, B]]: Continue(seed) loops again, Done(value) exits.
        Must not grow the call stack with the number of iterations.
        """

    # Derived operations

    def map[A, B](self, fa: F, f: Callable[[A], B], /) -> F:
        """Functor fmap via flat_map + pure."""
        return self.flat_map(fa, lambda a: self.pure(f(a)))

    def attempt(self, fa: F, /) -> F:
        """Materialize the error channel: F[A] -> F[Result[A, Exception]]."""
        return self.handle_error_with(
            self.map(fa, Ok),
            lambda error: self.pure(Error(error)),
        )

    def from_result[A, E](self, result: Result[A, E], /) -> F:
        """
        Lift a kungfu Result into F. Dual of attempt().

        NOTE: Error values that are not exceptions are wrapped in ErrorValueError
              so they can travel through the Exception error channel.
        """
        match result:
            case Ok(value):
                return self.pure(value)
            case Error(err):
                if isinstance(err, Exception):
                    return self.raise_error(err)
                return self.raise_error(ErrorValueError(err))
            case _ as unreachable:
                typing.assert_never(unreachable)

    def recover[A](self, fa: F, default: A, /) -> F:
        """Turn any failure into pure(default)."""
        return self.handle_error_with(fa, lambda _: self.pure(default))

    def redeem[A, B](
        self,
        fa: F,
        recover: Callable[[Exception], B],
        f: Callable[[A], B],
        /,
    ) -> F:
        """Fold both channels into a value. Errors raised by f are not caught."""

        def fold(result: Result[A, Exception]) -> B:
            match result:
                case Ok(value):
                    return f(value)
                case Error(err):
                    return recover(err)
                case _ as unreachable:
                    typing.assert_never(unreachable)

        return self.map(self.attempt(fa), fold)

    def ensure[A](
        self,
        fa: F,
        predicate: Callable[[A], bool],
        error: Thunk[Exception],
        /,
    ) -> F:
        """Fail with error() when the value does not satisfy predicate."""
        return self.flat_map(
            fa,
            lambda a: self.pure(a) if predicate(a) else self.raise_error(error()),
        )

    def loop[A, B](self, a: A, f: Callable[[A], Step[A, B]], /) -> F:
        """tail_rec_m for a pure step function."""
        return self.tail_rec_m(a, lambda seed: self.pure(f(seed)))


class Sync[F](MonadError[F]):
    """
    MonadError that can suspend side effects.

    Laws:
    - No premature evaluation: building suspend(thunk) never calls thunk
    - Flatten: suspend(lambda: suspend(c)) ≡ suspend(c)
    - Bind: suspend(t).flat_map(f) ≡ suspend(lambda: flat_map(t(), f))
    - delay(t) ≡ suspend(lambda: pure(t()))
    """

    __slots__ = ()

    @abc.abstractmethod
    def suspend(self, thunk: Thunk[F], /) -> F:
        """
        Defer the construction of a computation until it is run.

        Exceptions raised by thunk are delivered through the error channel
        (observable with handle_error_with), never at construction time.
        """

    def delay[A](self, thunk: Thunk[A], /) -> F:
        """
        Lift a side-effecting expression into F.

        Realizations may override this to pick a cheaper representation,
        but the result must stay equivalent to suspend(lambda: pure(thunk())).
        """
        return self.suspend(lambda: self.pure(thunk()))


__all__ = ("MonadError", "Sync")
