"""Unit tests for StateT and its lifted Sync capability."""

import pytest

from deferred import Continue, Done, Lazy, StateT, StateTSync, lazy_sync, state_sync

S = state_sync(lazy_sync, int)


class Boom(Exception):
    """Error used to exercise the error channel."""


def run(st: StateT[int, object], state: int = 0) -> tuple[int, object]:
    return st.run(state).value()


def test_state_sync_builds_capability():
    assert isinstance(S, StateTSync)
    assert S.base is lazy_sync


def test_pure_keeps_state():
    assert run(S.pure("a"), 7) == (7, "a")


def test_get_set_modify_inspect():
    program = (
        StateT.get(lazy_sync)
        .flat_map(lambda start: StateT.set(start * 10, lazy_sync))
        .flat_map(lambda _: StateT.modify(lambda s: s + 1, lazy_sync))
        .flat_map(lambda _: StateT.inspect(lambda s: f"state={s}", lazy_sync))
    )
    assert run(program, 4) == (41, "state=41")


def test_modify_and_inspect_fail_through_the_error_channel():
    """Building the base computation never runs f; forcing it does."""
    modify = StateT.modify(lambda s: s // 0, lazy_sync).run(1)
    inspect = StateT.inspect(lambda s: s // 0, lazy_sync).run(1)

    with pytest.raises(ZeroDivisionError):
        modify.value()
    with pytest.raises(ZeroDivisionError):
        inspect.value()

    recovered = lazy_sync.handle_error_with(
        StateT.modify(lambda s: s // 0, lazy_sync).run(1),
        lambda err: lazy_sync.pure((1, type(err).__name__)),
    )
    assert recovered.value() == (1, "ZeroDivisionError")


def test_state_recovery_catches_modify_failure():
    program = S.handle_error_with(
        StateT.modify(lambda s: s // 0, lazy_sync).map(lambda _: "unreachable"),
        lambda err: S.pure(type(err).__name__),
    )
    assert run(program, 5) == (5, "ZeroDivisionError")


def test_run_s_and_run_a():
    program = StateT.modify(lambda s: s + 2, lazy_sync).map(lambda _: "done")
    assert program.run_s(1).value() == 3
    assert program.run_a(1).value() == "done"


def test_lift():
    program = StateT.lift(Lazy.now("lifted"), lazy_sync)
    assert run(program, 5) == (5, "lifted")


def test_flat_map_threads_state():
    program = S.flat_map(
        StateT.modify(lambda s: s + 1, lazy_sync),
        lambda _: StateT.inspect(lambda s: s * 2, lazy_sync),
    )
    assert run(program, 1) == (2, 4)


def test_suspend_is_deferred():
    calls: list[int] = []

    def thunk() -> StateT[int, str]:
        calls.append(1)
        return S.pure("x")

    program = S.suspend(thunk)
    lazy = program.run(0)
    assert calls == []
    assert lazy.value() == (0, "x")
    assert lazy.value() == (0, "x")
    assert len(calls) == 2


def test_delay_runs_once_per_run():
    calls: list[int] = []

    def thunk() -> int:
        calls.append(1)
        return len(calls)

    program = S.delay(thunk)
    assert calls == []
    assert run(program, 3) == (3, 1)
    assert run(program, 3) == (3, 2)


def test_suspend_errors_reach_the_error_channel():
    def explode() -> StateT[int, int]:
        raise Boom("in thunk")

    program = S.handle_error_with(S.suspend(explode), lambda error: S.pure(str(error)))
    assert run(program, 9) == (9, "in thunk")


def test_raise_error_ignores_state():
    with pytest.raises(Boom):
        run(S.raise_error(Boom()), 1)


def test_recovery_starts_from_input_state():
    """A failing computation that stopped halfway does not leak its state."""
    failing = StateT.modify(lambda s: s + 5, lazy_sync).flat_map(lambda _: S.raise_error(Boom()))
    program = S.handle_error_with(failing, lambda _: S.pure("fallback"))
    assert run(program, 10) == (10, "fallback")


def test_single_layer_failure():
    s0 = 100
    program = S.handle_error_with(S.raise_error(Boom()), lambda _: S.pure("fallback"))
    assert run(program, s0) == (s0, "fallback")


def test_second_recovery_restarts_from_input_state():
    """A failing recovery gets one more try, run from the handler's input state."""
    seen: list[str] = []

    def recover(error: Exception) -> StateT[int, str]:
        seen.append(str(error))
        if len(seen) == 1:
            return StateT.modify(lambda s: s + 100, lazy_sync).flat_map(
                lambda _: S.raise_error(Boom("again")),
            )
        return StateT.modify(lambda s: s + 1, lazy_sync).map(lambda _: "recovered")

    s0 = 0
    program = S.handle_error_with(S.raise_error(Boom("first")), recover)
    final_state, value = run(program, s0)

    # The +100 of the failed recovery is discarded: the second recovery
    # starts again from s0, and only its own +1 moves the state.
    assert value == "recovered"
    assert final_state == s0 + 1
    assert seen == ["first", "again"]


def test_third_failure_propagates():
    seen: list[str] = []

    def recover(error: Exception) -> StateT[int, str]:
        seen.append(str(error))
        return S.raise_error(Boom(f"recovery {len(seen)}"))

    program = S.handle_error_with(S.raise_error(Boom("original")), recover)
    with pytest.raises(Boom, match="recovery 2"):
        run(program)
    assert seen == ["original", "recovery 1"]


def test_recovery_function_errors_are_recovered():
    calls: list[int] = []

    def recover(_: Exception) -> StateT[int, str]:
        calls.append(1)
        if len(calls) == 1:
            raise Boom("recovery crashed")
        return S.pure("ok")

    program = S.handle_error_with(S.raise_error(Boom()), recover)
    assert run(program, 2) == (2, "ok")


def test_handle_error_with_passes_success_through():
    program = S.handle_error_with(
        StateT.modify(lambda s: s * 3, lazy_sync).map(lambda _: "fine"),
        lambda _: S.pure("unused"),
    )
    assert run(program, 2) == (6, "fine")


def test_tail_rec_m_threads_state():
    def step(n: int) -> StateT[int, Continue[int] | Done[str]]:
        if n == 0:
            return S.pure(Done("liftoff"))
        return StateT.modify(lambda s: s + n, lazy_sync).map(lambda _: Continue(n - 1))

    assert run(S.tail_rec_m(4, step), 0) == (10, "liftoff")


def test_tail_rec_m_is_stack_safe():
    program = S.tail_rec_m(
        0,
        lambda n: StateT.modify(lambda s: s + 1, lazy_sync).map(
            lambda _: Continue(n + 1) if n < 100_000 else Done(n),
        ),
    )
    assert run(program, 0) == (100_001, 100_000)


def test_deep_left_nested_flat_map_is_stack_safe():
    program = S.pure(0)
    for _ in range(20_000):
        program = program.flat_map(lambda n: S.pure(n + 1))
    assert run(program, 0) == (0, 20_000)


def test_state_over_state():
    """The lift works over any Sync base, including another StateT."""
    inner = state_sync(lazy_sync, str)
    outer = state_sync(inner, int)

    program = outer.flat_map(
        StateT.modify(lambda n: n + 1, inner),
        lambda _: outer.delay(lambda: "effect"),
    )
    inner_program = program.run(1)
    assert inner_program.run("log").value() == ("log", (2, "effect"))

    recovered = outer.handle_error_with(outer.raise_error(Boom()), lambda _: outer.pure("ok"))
    assert recovered.run(5).run("log").value() == ("log", (5, "ok"))


def test_repr():
    assert repr(S) == "StateTSync(LazySync(EvalPolicy(thread_safe=True, max_iterations=None)))"
