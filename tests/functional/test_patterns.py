"""Functional tests for common usage patterns."""

import logging

import pytest
from kungfu import Error

from deferred import Continue, Done, Lazy, StateT, lazy_sync, state_sync


class InsufficientFunds(Exception):
    def __init__(self, balance: int, amount: int) -> None:
        self.balance = balance
        self.amount = amount
        super().__init__(f"balance {balance} < {amount}")


Account = state_sync(lazy_sync, int)


def withdraw(amount: int, journal: list[str]) -> StateT[int, int]:
    """Withdraw from the balance held in the state, journaling the attempt."""

    def check(balance: int) -> StateT[int, int]:
        if balance < amount:
            return Account.raise_error(InsufficientFunds(balance, amount))
        return StateT.set(balance - amount, lazy_sync).map(lambda _: amount)

    return Account.delay(lambda: journal.append(f"withdraw {amount}")).flat_map(
        lambda _: StateT.get(lazy_sync).flat_map(check),
    )


def test_program_runs_only_when_forced():
    journal: list[str] = []
    program = withdraw(30, journal).flat_map(lambda _: withdraw(20, journal))

    lazy = program.run(100)
    assert journal == []

    assert lazy.value() == (50, 20)
    assert journal == ["withdraw 30", "withdraw 20"]


def test_failed_withdrawal_keeps_balance():
    journal: list[str] = []
    program = Account.handle_error_with(
        withdraw(30, journal).flat_map(lambda _: withdraw(500, journal)),
        lambda error: Account.pure(-1),
    )

    assert program.run(100).value() == (100, -1)
    assert journal == ["withdraw 30", "withdraw 500"]


def test_unhandled_error_propagates_to_caller():
    with pytest.raises(InsufficientFunds) as exc_info:
        withdraw(10, []).run(5).value()
    assert exc_info.value.balance == 5


def test_drain_account_with_loop():
    """Withdraw in fixed chunks until the balance is too small."""
    journal: list[str] = []

    def step(taken: int) -> StateT[int, Continue[int] | Done[int]]:
        return StateT.get(lazy_sync).flat_map(
            lambda balance: withdraw(7, journal).map(lambda amount: Continue(taken + amount))
            if balance >= 7
            else Account.pure(Done(taken)),
        )

    final_balance, taken = Account.tail_rec_m(0, step).run(50).value()
    assert (final_balance, taken) == (1, 49)
    assert len(journal) == 7


def test_attempt_on_state():
    balance, result = Account.attempt(withdraw(10, [])).run(5).value()
    assert balance == 5
    match result:
        case Error(err):
            assert isinstance(err, InsufficientFunds)
            assert str(err) == "balance 5 < 10"
        case other:
            pytest.fail(f"expected Error, got {other!r}")


def test_retry_with_tail_rec_m():
    """Retry a flaky effect until it succeeds, without recursion."""
    attempts: list[int] = []

    def flaky() -> str:
        attempts.append(1)
        if len(attempts) < 5:
            raise ConnectionError("try again")
        return "connected"

    def attempt(n: int) -> Lazy[Continue[int] | Done[str]]:
        return lazy_sync.handle_error_with(
            lazy_sync.map(lazy_sync.suspend(lambda: Lazy.always(flaky)), Done),
            lambda _: lazy_sync.pure(Continue(n + 1)),
        )

    assert lazy_sync.tail_rec_m(0, attempt).value() == "connected"
    assert len(attempts) == 5


def test_debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="deferred")

    lazy_sync.delay(lambda: "cached").value()
    lazy_sync.tail_rec_m(0, lambda n: lazy_sync.pure(Continue(n + 1) if n < 3 else Done(n))).value()
    Account.handle_error_with(
        Account.raise_error(ValueError("first")),
        lambda _: Account.pure(0),
    ).run(0).value()

    messages = [record.getMessage() for record in caplog.records]
    assert "Later value cached: 'cached'" in messages
    assert "tail_rec_m finished after 4 iterations" in messages
    assert "StateT recovery, tier 1: ValueError('first')" in messages
