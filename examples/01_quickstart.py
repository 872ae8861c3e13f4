from __future__ import annotations

import logging

from kungfu import Error, Ok

from deferred import Continue, Done, StateT, lazy_sync, state_sync


def banner(title: str) -> None:
    print()
    print("=" * len(title))
    print(title)
    print("=" * len(title))


def main() -> None:
    banner("01_quickstart: delay + suspend + state lift")

    # Nothing is printed until value() is called.
    greeting = lazy_sync.delay(lambda: print("computing greeting...") or "hello")
    print("built greeting")
    print(greeting.value())
    print(greeting.value())  # memoized, no second "computing"

    # Stack-safe loop.
    total = lazy_sync.tail_rec_m(
        (0, 0),
        lambda acc: lazy_sync.pure(
            Continue((acc[0] + 1, acc[1] + acc[0])) if acc[0] < 100_000 else Done(acc[1]),
        ),
    )
    print(f"sum: {total.value()}")

    # Same capability, lifted over a counter state.
    counter = state_sync(lazy_sync, int)
    tick = StateT.modify(lambda n: n + 1, lazy_sync)
    program = counter.flat_map(
        tick,
        lambda _: counter.handle_error_with(
            tick.flat_map(lambda _: counter.raise_error(ValueError("boom"))),
            lambda err: counter.pure(f"recovered from {err}"),
        ),
    )

    match counter.attempt(program).run(0).to_result():
        case Ok((state, result)):
            print(f"state={state} result={result}")
        case Error(err):
            print(f"error: {err!r}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    main()
