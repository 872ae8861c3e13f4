"""Lazy value

Lazy[A] - значение, вычисляемое из thunk:
- Now: already known (eager)
- Later: evaluated once, then cached (memoized)
- Always: evaluated on every force (repeatable)
- Defer / FlatMap: deferred composition, forced by a trampoline

Forcing never recurses through Defer/FlatMap chains, so chains of any
depth are stack-safe."""

from __future__ import annotations

import abc
import logging
import threading
import typing
from collections.abc import Callable

from kungfu import Error, LazyCoroResult, Ok, Result

from .._errors import ReentrantForceError
from .._types import Thunk

logger = logging.getLogger(__name__)


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<unset>"


_UNSET: typing.Final = _Unset()


class Lazy[A](abc.ABC):
    """
    Lazily evaluated value.

    Monadic laws:
    - Left identity: Lazy.now(a).flat_map(f) ≡ f(a)
    - Right identity: m.flat_map(Lazy.now) ≡ m
    - Associativity: m.flat_map(f).flat_map(g) ≡ m.flat_map(x => f(x).flat_map(g))

    Constructing a Lazy never runs user code; value() does.
    """

    __slots__ = ()

    # Constructors

    @staticmethod
    def now[V](value: V, /) -> Lazy[V]:
        """Already evaluated value."""
        return Now(value)

    @staticmethod
    def later[V](thunk: Thunk[V], /, *, thread_safe: bool = True) -> Lazy[V]:
        """Evaluate thunk on first force, cache the result."""
        return Later(thunk, thread_safe=thread_safe)

    @staticmethod
    def always[V](thunk: Thunk[V], /) -> Lazy[V]:
        """Evaluate thunk on every force."""
        return Always(thunk)

    @staticmethod
    def defer[V](thunk: Thunk[Lazy[V]], /) -> Lazy[V]:
        """Defer building a Lazy until it is forced. Re-evaluated on every force."""
        return Defer(thunk)

    @staticmethod
    def unit() -> Lazy[None]:
        return _UNIT

    # Functor / monad operations

    def map[U](self, f: Callable[[A], U], /) -> Lazy[U]:
        """Functor fmap."""
        return FlatMap(self, lambda a: Now(f(a)))

    def flat_map[U](self, f: Callable[[A], Lazy[U]], /) -> Lazy[U]:
        """Monadic bind (>>=). Nothing runs until the result is forced."""
        return FlatMap(self, f)

    def memoize(self) -> Lazy[A]:
        """Cache the result - only compute once."""
        return Later(self.value)

    # Forcing

    def value(self) -> A:
        """Force the computation. Exceptions raised on the way propagate."""
        return _evaluate(self)

    def to_result(self) -> Result[A, Exception]:
        """Force, capturing failures as Error."""
        try:
            return Ok(self.value())
        except Exception as exc:
            return Error(exc)

    def to_lazy_coro_result(self) -> LazyCoroResult[A, Exception]:
        """Convert to kungfu LazyCoroResult. Forced when awaited."""

        async def run() -> Result[A, Exception]:
            return self.to_result()

        return LazyCoroResult(run)

    @abc.abstractmethod
    def _force_leaf(self) -> A: ...


class Now[A](Lazy[A]):
    __slots__ = ("_value",)
    __match_args__ = ("_value",)

    def __init__(self, value: A) -> None:
        self._value = value

    def _force_leaf(self) -> A:
        return self._value

    def memoize(self) -> Lazy[A]:
        return self

    def __repr__(self) -> str:
        return f"Now({self._value!r})"


class _Failed:
    __slots__ = ("error",)

    def __init__(self, error: Exception) -> None:
        self.error = error

    def __repr__(self) -> str:
        return f"<failed: {self.error!r}>"


class _InProgress:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<in progress>"


_IN_PROGRESS: typing.Final = _InProgress()


class Later[A](Lazy[A]):
    """
    Memoized value.

    Unevaluated -> Evaluated(value) | Failed(error), one way. The cell is
    written at most once: a failed force caches the error and every later
    force re-raises it without running thunk again. The thunk reference is
    dropped once the cell is written.
    """

    __slots__ = ("_thunk", "_value", "_lock")

    def __init__(self, thunk: Thunk[A], *, thread_safe: bool = True) -> None:
        self._thunk: Thunk[A] | None = thunk
        self._value: A | _Unset | _InProgress | _Failed = _UNSET
        self._lock = threading.RLock() if thread_safe else None

    @property
    def is_evaluated(self) -> bool:
        """True once the cell holds a value or a cached failure."""
        return self._thunk is None

    @property
    def is_failed(self) -> bool:
        return isinstance(self._value, _Failed)

    def _force_leaf(self) -> A:
        if self._thunk is None:
            return self._cached()
        if self._lock is None:
            return self._compute()
        with self._lock:
            # Another thread may have filled the cell while we waited.
            if self._thunk is None:
                return self._cached()
            return self._compute()

    def _cached(self) -> A:
        match self._value:
            case _Failed(error=error):
                raise error
            case value:
                return typing.cast(A, value)

    def _compute(self) -> A:
        # The lock is reentrant, so only this thread can get here mid-compute.
        if self._value is _IN_PROGRESS:
            raise ReentrantForceError(self)
        thunk = typing.cast(Thunk[A], self._thunk)
        self._value = _IN_PROGRESS
        try:
            value = thunk()
        except Exception as exc:
            self._value = _Failed(exc)
            self._thunk = None
            logger.debug("Later failure cached: %r", exc)
            raise
        except BaseException:
            self._value = _UNSET
            raise
        # Value first: readers check _thunk without the lock.
        self._value = value
        self._thunk = None
        logger.debug("Later value cached: %r", value)
        return value

    def memoize(self) -> Lazy[A]:
        return self

    def __repr__(self) -> str:
        if self._thunk is None:
            return f"Later({self._value!r})"
        return "Later(<unevaluated>)"


class Always[A](Lazy[A]):
    __slots__ = ("_thunk",)
    __match_args__ = ("_thunk",)

    def __init__(self, thunk: Thunk[A]) -> None:
        self._thunk = thunk

    def _force_leaf(self) -> A:
        return self._thunk()

    def __repr__(self) -> str:
        return "Always(<thunk>)"


class Defer[A](Lazy[A]):
    __slots__ = ("_thunk",)
    __match_args__ = ("_thunk",)

    def __init__(self, thunk: Thunk[Lazy[A]]) -> None:
        self._thunk = thunk

    def _force_leaf(self) -> A:
        return _evaluate(self)

    def __repr__(self) -> str:
        return "Defer(<thunk>)"


class FlatMap[S, A](Lazy[A]):
    __slots__ = ("_source", "_f")
    __match_args__ = ("_source", "_f")

    def __init__(self, source: Lazy[S], f: Callable[[S], Lazy[A]]) -> None:
        self._source = source
        self._f = f

    def _force_leaf(self) -> A:
        return _evaluate(self)

    def __repr__(self) -> str:
        return f"FlatMap({self._source!r}, <fn>)"


_UNIT: typing.Final[Lazy[None]] = Now(None)


def _evaluate[A](lazy: Lazy[A]) -> A:
    """Trampoline: continuations live on a heap list, not the call stack."""
    continuations: list[Callable[[typing.Any], Lazy[typing.Any]]] = []
    current: Lazy[typing.Any] = lazy

    while True:
        match current:
            case FlatMap(source, f):
                continuations.append(f)
                current = source
            case Defer(thunk):
                current = thunk()
            case Now() | Later() | Always():
                value = current._force_leaf()
                if not continuations:
                    return typing.cast(A, value)
                current = continuations.pop()(value)
            case _:
                raise TypeError(f"Expected Lazy, got {current!r}")


__all__ = (
    "Lazy",
    "Now",
    "Later",
    "Always",
    "Defer",
    "FlatMap",
)
