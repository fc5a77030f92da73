"""Single guard phase executor.

``GuardRunner`` runs an ordered list of guard callbacks against a fixed
``(to, from)`` route pair and resolves them to one :class:`GuardOutcome`.

Guard kinds
-----------
Every callback is tagged with a :class:`GuardKind` when it is added; the kind is
either passed explicitly or inferred once from the callable:

- ``SYNC``: ``callback(to, from)``; the return value is the verdict.
- ``CONTINUATION``: ``callback(to, from, next)``; verdict via ``next`` and/or
  the return value. Inferred for plain callables accepting three positional
  arguments.
- ``ASYNC``: coroutine function, awaited; receives ``next`` when its
  signature accepts a third positional argument.
- ``HOOK``: ``callback(to, from)``; result ignored (awaited when the callable
  is a coroutine function). Every callback of a hook runner is a hook.

Run semantics
-------------
- The context defaults to ``True`` (allow). Callbacks run in insertion order;
  values that are not callable are skipped.
- ``next()`` / ``next(None)`` is a no-op, ``next(False)`` cancels, any other
  value replaces the last known context. Calls after cancellation, or after
  the callback's own turn, are ignored.
- Once a callback returns, its return value wins over its ``next`` calls.
  ``True`` never undoes an earlier ``next(False)``.
- Contexts resolve as follows: ``None``/``True`` allow, ``False`` denies, an
  exception fails, a path, name, mapping or :class:`Route` redirects. Any
  other value (e.g. the ``next(vm => ...)`` callback idiom) allows.
- The first callback producing a non-allow context halts the run.
- Exceptions raised by callbacks propagate to the caller.
- With ``timeout`` set, each awaited callback is bounded; expiry produces a
  :class:`GuardTimeoutError` failure.

Sync and async runs
-------------------
``run()`` is synchronous: sync and continuation guards are called inline and
no event loop is involved. An async guard met by ``run()`` is settled on a
fresh loop through ``smartasync``; when a loop is already running in the
thread this is impossible and ``run()`` raises ``RuntimeError`` (use
``await arun()`` there). ``arun()`` awaits async guards on the running loop.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generator, List, Optional, Union

from smartasync import smartasync

from .route import Route

__all__ = [
    "Guard",
    "GuardKind",
    "GuardOutcome",
    "GuardRunner",
    "GuardTimeoutError",
    "OutcomeKind",
    "RedirectLoopError",
]


class GuardTimeoutError(Exception):
    """An async guard did not settle within the configured timeout."""


class RedirectLoopError(Exception):
    """A chain of redirects exceeded the allowed number of hops."""


class GuardKind(str, Enum):
    SYNC = "sync"
    ASYNC = "async"
    CONTINUATION = "continuation"
    HOOK = "hook"


class OutcomeKind(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    REDIRECT = "redirect"
    FAIL = "fail"


@dataclass(frozen=True)
class GuardOutcome:
    """Resolved verdict of a guard phase."""

    kind: OutcomeKind
    value: Any = None

    @classmethod
    def from_context(cls, context: Any) -> "GuardOutcome":
        if context is False:
            return cls(OutcomeKind.DENY, False)
        if isinstance(context, Exception):
            return cls(OutcomeKind.FAIL, context)
        if isinstance(context, (str, Mapping, Route)):
            return cls(OutcomeKind.REDIRECT, context)
        return cls(OutcomeKind.ALLOW, True)

    @classmethod
    def fail(cls, error: Exception) -> "GuardOutcome":
        return cls(OutcomeKind.FAIL, error)

    @property
    def allowed(self) -> bool:
        return self.kind is OutcomeKind.ALLOW


@dataclass
class Guard:
    """A registered callback with its invocation shape."""

    func: Any
    kind: Optional[GuardKind]
    takes_next: bool = False
    is_coroutine: bool = False


def _is_coroutine_callable(func: Any) -> bool:
    if inspect.iscoroutinefunction(func):
        return True
    call = getattr(func, "__call__", None)
    return inspect.iscoroutinefunction(call)


def _accepts_next(func: Any) -> bool:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    positional = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            positional += 1
    return positional >= 3


def _loop_is_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class _Continuation:
    """``next`` callable handed to one guard for the duration of its turn."""

    __slots__ = ("_runner", "_active")

    def __init__(self, runner: "GuardRunner"):
        self._runner = runner
        self._active = True

    def __call__(self, context: Any = None) -> None:
        runner = self._runner
        if not self._active or runner._cancelled or context is None:
            return
        runner._last_context = context
        if context is False:
            runner._cancelled = True

    def close(self) -> None:
        self._active = False


class GuardRunner:
    """Ordered guard list bound to one ``(to, from)`` pair at a time."""

    __slots__ = (
        "route_to",
        "route_from",
        "is_hook",
        "timeout",
        "_guards",
        "_cancelled",
        "_last_context",
    )

    def __init__(
        self,
        to: Any = None,
        from_: Any = None,
        is_hook: bool = False,
        *,
        timeout: Optional[float] = None,
    ) -> None:
        self.is_hook = bool(is_hook)
        self.timeout = timeout
        self._guards: List[Guard] = []
        self._last_context: Any = True
        self.set_routes(to, from_)

    def __len__(self) -> int:
        return len(self._guards)

    def add(self, callback: Any, kind: Union[GuardKind, str, None] = None) -> Guard:
        """Append a callback; ``kind`` overrides the inferred invocation shape."""
        guard = self._classify(callback, kind)
        self._guards.append(guard)
        return guard

    def _classify(self, callback: Any, kind: Union[GuardKind, str, None]) -> Guard:
        if not callable(callback):
            return Guard(func=callback, kind=None)
        is_coroutine = _is_coroutine_callable(callback)
        takes_next = _accepts_next(callback)
        if self.is_hook:
            resolved = GuardKind.HOOK
        elif kind is not None:
            resolved = GuardKind(kind)
            if resolved is GuardKind.HOOK:
                raise ValueError("Hook callbacks belong to a hook runner")
        elif is_coroutine:
            resolved = GuardKind.ASYNC
        elif takes_next:
            resolved = GuardKind.CONTINUATION
        else:
            resolved = GuardKind.SYNC
        return Guard(
            func=callback,
            kind=resolved,
            takes_next=takes_next,
            is_coroutine=is_coroutine,
        )

    def set_routes(self, to: Any, from_: Any) -> None:
        self.route_to = to
        self.route_from = from_
        # A new pair always starts uncancelled
        self._cancelled = False

    def run(self) -> GuardOutcome:
        """Run all guards in the calling thread and return the outcome."""
        steps = self._steps()
        try:
            pending = next(steps)
            while True:
                try:
                    result = self._settle_blocking(pending)
                except Exception as exc:
                    pending = steps.throw(exc)
                else:
                    pending = steps.send(result)
        except StopIteration as stop:
            return stop.value

    async def arun(self) -> GuardOutcome:
        """Run all guards, awaiting async ones on the running loop."""
        steps = self._steps()
        try:
            pending = next(steps)
            while True:
                try:
                    result = await self._settle(pending)
                except Exception as exc:
                    pending = steps.throw(exc)
                else:
                    pending = steps.send(result)
        except StopIteration as stop:
            return stop.value

    def _steps(self) -> Generator[Any, Any, GuardOutcome]:
        # Yields each awaitable produced by an async guard; the driver sends
        # back its settled value.
        self._last_context = True
        self._cancelled = False
        for guard in self._guards:
            if not callable(guard.func):
                continue
            if self._cancelled:
                break
            if guard.kind is GuardKind.HOOK:
                result = guard.func(self.route_to, self.route_from)
                if guard.is_coroutine:
                    yield result
                continue
            continuation = _Continuation(self)
            try:
                result = self._invoke(guard, continuation)
                if guard.kind is GuardKind.ASYNC and inspect.isawaitable(result):
                    result = yield result
            finally:
                continuation.close()
            if result is not None and result is not True:
                self._last_context = result
            if not GuardOutcome.from_context(self._last_context).allowed:
                self._cancelled = True
                break
            self._last_context = True
        return GuardOutcome.from_context(self._last_context)

    def _invoke(self, guard: Guard, next_: Callable) -> Any:
        to, from_ = self.route_to, self.route_from
        if guard.kind is GuardKind.CONTINUATION:
            return guard.func(to, from_, next_)
        if guard.kind is GuardKind.ASYNC and guard.takes_next:
            return guard.func(to, from_, next_)
        return guard.func(to, from_)

    def _settle_blocking(self, awaitable: Any) -> Any:
        if _loop_is_running():
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise RuntimeError(
                "Async guard cannot settle synchronously inside a running event loop; "
                "use the awaitable API"
            )
        return smartasync(self._settle)(awaitable)

    async def _settle(self, awaitable: Any) -> Any:
        if self.timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, self.timeout)
        except asyncio.TimeoutError:
            return GuardTimeoutError(f"Guard did not settle within {self.timeout}s")
