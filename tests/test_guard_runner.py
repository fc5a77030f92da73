"""Tests for the single-phase guard runner."""

import asyncio

import pytest

from smartnav import Route
from smartnav.core.guard import (
    GuardKind,
    GuardOutcome,
    GuardRunner,
    GuardTimeoutError,
    OutcomeKind,
)

HOME = Route(path="/home", name="home")
LOGIN = Route(path="/login", name="login")


def make_runner(is_hook=False, **kwargs):
    return GuardRunner(LOGIN, HOME, is_hook, **kwargs)


def test_allow_all_invokes_every_guard_once_in_order():
    calls = []
    runner = make_runner()

    def sync_guard(to, from_):
        calls.append("sync")

    def continuation_guard(to, from_, next):
        calls.append("continuation")
        next()

    def explicit_true(to, from_):
        calls.append("true")
        return True

    runner.add(sync_guard)
    runner.add(continuation_guard)
    runner.add(explicit_true)

    outcome = runner.run()
    assert outcome == GuardOutcome(OutcomeKind.ALLOW, True)
    assert outcome.allowed
    assert calls == ["sync", "continuation", "true"]


def test_false_return_halts_remaining_guards():
    calls = []
    runner = make_runner()
    runner.add(lambda to, from_: calls.append(0))
    runner.add(lambda to, from_: False)
    runner.add(lambda to, from_: calls.append(2))

    outcome = runner.run()
    assert outcome.kind is OutcomeKind.DENY
    assert outcome.value is False
    assert calls == [0]


def test_redirect_value_is_returned_unchanged():
    target = {"path": "/login"}
    calls = []
    runner = make_runner()
    runner.add(lambda to, from_: target)
    runner.add(lambda to, from_: calls.append("late"))

    outcome = runner.run()
    assert outcome.kind is OutcomeKind.REDIRECT
    assert outcome.value is target
    assert calls == []


def test_error_value_is_returned_unchanged():
    error = RuntimeError("session expired")
    calls = []
    runner = make_runner()
    runner.add(lambda to, from_: error)
    runner.add(lambda to, from_: calls.append("late"))

    outcome = runner.run()
    assert outcome.kind is OutcomeKind.FAIL
    assert outcome.value is error
    assert calls == []


def test_next_false_wins_over_true_return():
    calls = []
    runner = make_runner()

    def guard(to, from_, next):
        next(False)
        next("/ignored")
        return True

    runner.add(guard)
    runner.add(lambda to, from_: calls.append("late"))

    outcome = runner.run()
    assert outcome.kind is OutcomeKind.DENY
    assert calls == []


def test_next_with_target_redirects_and_halts():
    calls = []
    runner = make_runner()

    def guard(to, from_, next):
        next("/first")
        next("/second")

    runner.add(guard)
    runner.add(lambda to, from_: calls.append("late"))

    outcome = runner.run()
    assert outcome == GuardOutcome(OutcomeKind.REDIRECT, "/second")
    assert calls == []


def test_return_value_overrides_next_redirect():
    runner = make_runner()

    def guard(to, from_, next):
        next("/from-next")
        return "/from-return"

    runner.add(guard)
    assert runner.run().value == "/from-return"


def test_stale_next_from_finished_guard_is_ignored():
    saved = []
    calls = []
    runner = make_runner()

    def first(to, from_, next):
        saved.append(next)

    def second(to, from_):
        saved[0](False)
        calls.append("second")

    runner.add(first)
    runner.add(second)
    runner.add(lambda to, from_: calls.append("third"))

    assert runner.run().allowed
    assert calls == ["second", "third"]


def test_non_callables_are_skipped_and_duplicates_run_twice():
    calls = []

    def guard(to, from_):
        calls.append(to.path)

    runner = make_runner()
    runner.add("not-a-guard")
    runner.add(None)
    runner.add(guard)
    runner.add(guard)

    assert runner.run().allowed
    assert calls == ["/login", "/login"]


def test_async_guards_are_awaited_in_order():
    calls = []
    runner = make_runner()

    async def slow_allow(to, from_):
        await asyncio.sleep(0)
        calls.append("async")

    def sync_guard(to, from_):
        calls.append("sync")

    async def async_with_next(to, from_, next):
        await asyncio.sleep(0)
        calls.append("async-next")
        next("/elsewhere")

    runner.add(sync_guard)
    runner.add(slow_allow)
    runner.add(async_with_next)
    runner.add(sync_guard)

    outcome = runner.run()
    assert outcome == GuardOutcome(OutcomeKind.REDIRECT, "/elsewhere")
    assert calls == ["sync", "async", "async-next"]


def test_async_guard_false_denies():
    runner = make_runner()

    async def deny(to, from_):
        return False

    runner.add(deny)
    assert runner.run().kind is OutcomeKind.DENY


def test_arun_awaits_guards_on_the_running_loop():
    runner = make_runner()
    runner.add(lambda to, from_: None)

    async def redirect(to, from_):
        await asyncio.sleep(0)
        return "/redirected"

    runner.add(redirect)

    async def main():
        return await runner.arun()

    outcome = asyncio.run(main())
    assert outcome.value == "/redirected"


def test_hook_mode_ignores_results_and_runs_everything():
    seen = []
    runner = make_runner(is_hook=True)

    def hook(to, from_):
        seen.append((to.name, from_.name))
        return False

    async def async_hook(to, from_):
        seen.append("async")

    runner.add(hook)
    runner.add(async_hook)
    runner.add(hook)

    assert runner.run().allowed
    assert seen == [("login", "home"), "async", ("login", "home")]


def test_guard_exception_propagates():
    runner = make_runner()

    def broken(to, from_):
        raise ValueError("boom")

    runner.add(broken)
    with pytest.raises(ValueError, match="boom"):
        runner.run()


def test_set_routes_retargets_and_resets_cancellation():
    seen = []
    runner = GuardRunner()

    def guard(to, from_):
        seen.append((to, from_))
        return False if to is LOGIN else None

    runner.add(guard)
    runner.set_routes(LOGIN, HOME)
    assert runner.run().kind is OutcomeKind.DENY

    runner.set_routes(HOME, LOGIN)
    assert runner.run().allowed
    assert seen == [(LOGIN, HOME), (HOME, LOGIN)]


def test_timeout_turns_stalled_guard_into_failure():
    runner = make_runner(timeout=0.01)

    async def stalled(to, from_):
        await asyncio.sleep(5)

    runner.add(stalled)
    outcome = runner.run()
    assert outcome.kind is OutcomeKind.FAIL
    assert isinstance(outcome.value, GuardTimeoutError)


def test_kind_is_chosen_at_registration():
    runner = make_runner()

    async def coroutine_guard(to, from_):
        return None

    def continuation(to, from_, next):
        return None

    assert runner.add(lambda to, from_: None).kind is GuardKind.SYNC
    assert runner.add(continuation).kind is GuardKind.CONTINUATION
    assert runner.add(coroutine_guard).kind is GuardKind.ASYNC
    assert runner.add(lambda *args: None, kind="sync").kind is GuardKind.SYNC
    assert make_runner(is_hook=True).add(continuation).kind is GuardKind.HOOK


def test_explicit_kind_controls_invocation_shape():
    received = []
    runner = make_runner()

    def flexible(*args):
        received.append(len(args))

    runner.add(flexible, kind=GuardKind.SYNC)
    runner.add(flexible, kind="continuation")
    runner.run()
    assert received == [2, 3]


def test_hook_kind_rejected_on_guard_runner():
    with pytest.raises(ValueError):
        make_runner().add(lambda to, from_: None, kind="hook")


def test_sync_run_inside_event_loop_runs_sync_guards_inline():
    calls = []
    runner = make_runner()
    runner.add(lambda to, from_: calls.append("sync"))
    runner.add(lambda to, from_, next: next("/target"))

    async def main():
        return runner.run()

    outcome = asyncio.run(main())
    assert outcome == GuardOutcome(OutcomeKind.REDIRECT, "/target")
    assert calls == ["sync"]


def test_sync_run_cannot_settle_async_guard_inside_event_loop():
    runner = make_runner()

    async def slow(to, from_):
        return None

    runner.add(slow)

    async def main():
        runner.run()

    with pytest.raises(RuntimeError, match="running event loop"):
        asyncio.run(main())


def test_values_that_are_not_routes_allow():
    calls = []
    runner = make_runner()
    runner.add(lambda to, from_, next: next(lambda vm: None))
    runner.add(lambda to, from_: 42)
    runner.add(lambda to, from_: calls.append("last"))

    assert runner.run() == GuardOutcome(OutcomeKind.ALLOW, True)
    assert calls == ["last"]


def test_route_like_values_redirect():
    assert GuardOutcome.from_context("/login").kind is OutcomeKind.REDIRECT
    assert GuardOutcome.from_context({"name": "login"}).kind is OutcomeKind.REDIRECT
    assert GuardOutcome.from_context(LOGIN) == GuardOutcome(OutcomeKind.REDIRECT, LOGIN)
    assert GuardOutcome.from_context(print).allowed
    assert GuardOutcome.from_context(3.5).allowed
