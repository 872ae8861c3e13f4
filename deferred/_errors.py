from __future__ import annotations

import typing


class InvalidStepError(TypeError):
    """tail_rec_m step produced something other than Continue or Done."""

    step: object

    def __init__(self, step: object) -> None:
        self.step = step
        super().__init__(f"Expected Continue or Done from tail_rec_m step, got {step!r}")


class LoopLimitExceededError(Exception):
    """tail_rec_m ran past EvalPolicy.max_iterations."""

    iterations: int

    def __init__(self, iterations: int) -> None:
        self.iterations = iterations
        super().__init__(f"Loop did not finish after {iterations} iterations")


class ErrorValueError(Exception):
    """Non-exception error value lifted from a kungfu Error."""

    value: typing.Any

    def __init__(self, value: typing.Any) -> None:
        self.value = value
        super().__init__(f"Error value: {value!r}")


class ReentrantForceError(RuntimeError):
    """Memoized value forced again from inside its own thunk."""

    lazy: object

    def __init__(self, lazy: object) -> None:
        self.lazy = lazy
        super().__init__("Later value forced while its thunk was running")


__all__ = ("ErrorValueError", "InvalidStepError", "LoopLimitExceededError", "ReentrantForceError")
