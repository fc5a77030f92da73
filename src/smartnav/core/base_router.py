"""Plugin-free navigation controller.

:class:`BaseRouter` owns the route table and the navigation state (current
route, pending route, navigating flag, history) and drives the guard phases at
the right points of a navigation. Subclasses add plugins but keep these
semantics.

Constructor
-----------
::

    BaseRouter(routes=None, host=None, *, logger=None,
               route_to_callback=None, route_back_callback=None,
               route_back_fallback_path="", guard_timeout=None,
               max_redirects=10, share_route_props=True)

- ``routes``: sequence of :class:`Route` or mappings; duplicate paths or names
  raise ``ValueError``. The table is fixed afterwards.
- ``host``: object implementing :class:`NavigationHost`; ``None`` runs the
  state machine without any screen transition.
- Options are merged over defaults with ``SmartOptions``.

Navigation
----------
``push(route, options=None)`` and ``back(options=None, fallback_path=None)``
return nothing and never raise for navigation outcomes: a missing route is
logged, a denial is silent, failures (guard errors, host transition errors)
go to the ``on_error`` callbacks (or the logger when none is registered) and
redirects restart the whole pipeline on the new target.

The public methods are synchronous and run to completion in the calling
thread, so a host may fire ``invoke_before_resolve()`` and
``invoke_after_each()`` from inside ``navigate_forward``. ``apush``,
``aback``, ``ainvoke_before_resolve`` and ``ainvoke_after_each`` are the
awaitable counterparts for code running on an event loop; only they can await
async guards there (a sync call meeting an async guard inside a running loop
fails the navigation with ``RuntimeError``).

The route is committed (current route, history) right before the host
transition; if the transition raises, the previous state is restored.

State machine: Idle → Resolving (``beforeEach`` then the route's
``before_enter``) → Idle on deny/fail, Resolving again on redirect,
Transitioning on allow. The host binding then calls
``invoke_before_resolve()`` (deny/fail → Idle) and ``invoke_after_each()``
(→ Idle). Only one navigation may be in flight: ``push``/``back`` issued while
``is_navigating`` is true are logged and dropped.

Props merging
-------------
Each navigation writes ``meta["props"]`` on the target as
``meta`` (minus ``props``) < ``meta["props"]`` < caller ``props``. With
``share_route_props`` (default) the table entry itself is updated, so the last
props stick to the route; otherwise a per-navigation copy of the route is
used and the table stays untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generator, Iterable, List, Optional, Union

from pydantic import ValidationError
from smartseeds import SmartOptions

from .guard import Guard, GuardKind, GuardOutcome, GuardRunner, OutcomeKind, RedirectLoopError
from .guards import GuardPhases
from .host import ModalContext
from .route import Route, RouteOptions, route_key

__all__ = ["BaseRouter"]

Steps = Generator[GuardRunner, GuardOutcome, Any]

_DEFAULT_OPTIONS: Dict[str, Any] = {
    "route_to_callback": None,
    "route_back_callback": None,
    "route_back_fallback_path": "",
    "guard_timeout": None,
    "max_redirects": 10,
    "share_route_props": True,
}


class BaseRouter:
    """Route table, navigation state and guard orchestration."""

    __slots__ = (
        "routes",
        "host",
        "history",
        "current_route",
        "pending_route",
        "is_navigating",
        "modal_page",
        "route_to_callback",
        "route_back_callback",
        "route_back_fallback_path",
        "guard_timeout",
        "max_redirects",
        "share_route_props",
        "_guards",
        "_error_callbacks",
        "_logger",
    )

    def __init__(
        self,
        routes: Optional[Iterable[Any]] = None,
        host: Any = None,
        *,
        logger: Optional[logging.Logger] = None,
        **options: Any,
    ) -> None:
        opts = SmartOptions(options, defaults=_DEFAULT_OPTIONS)
        self.routes: List[Route] = []
        for item in routes or ():
            self._add_route(Route.from_value(item))
        self.host = host
        self.route_to_callback: Optional[Callable] = getattr(opts, "route_to_callback", None)
        self.route_back_callback: Optional[Callable] = getattr(opts, "route_back_callback", None)
        self.route_back_fallback_path: str = getattr(opts, "route_back_fallback_path", "") or ""
        self.guard_timeout: Optional[float] = getattr(opts, "guard_timeout", None)
        self.max_redirects: int = int(getattr(opts, "max_redirects", 10))
        self.share_route_props: bool = bool(getattr(opts, "share_route_props", True))
        self._logger = logger or logging.getLogger("smartnav")
        self.history: List[str] = []
        self.current_route: Optional[Route] = None
        self.pending_route: Optional[Route] = None
        self.is_navigating = False
        self.modal_page: Optional[ModalContext] = None
        self._error_callbacks: List[Callable[[Exception], Any]] = []
        self._guards = GuardPhases(timeout=self.guard_timeout)

    def _add_route(self, route: Route) -> None:
        for existing in self.routes:
            if existing.path == route.path:
                raise ValueError(f"Route path collision: {route.path}")
            if route.name and existing.name == route.name:
                raise ValueError(f"Route name collision: {route.name}")
        self.routes.append(route)

    # ------------------------------------------------------------------
    # Public API (Vue-Router compatible)
    # ------------------------------------------------------------------
    def push(self, route: Union[Route, str, Dict[str, Any]], options: Any = None) -> None:
        """Navigate forward to a route given by path, name, mapping or Route."""
        self._drive(self._push(route, options))

    async def apush(self, route: Union[Route, str, Dict[str, Any]], options: Any = None) -> None:
        await self._adrive(self._push(route, options))

    def back(self, options: Any = None, fallback_path: Optional[str] = None) -> None:
        """Go back in history, or to the fallback path when history is exhausted."""
        self._drive(self._back(options, fallback_path))

    async def aback(self, options: Any = None, fallback_path: Optional[str] = None) -> None:
        await self._adrive(self._back(options, fallback_path))

    def on_error(self, callback: Callable[[Exception], Any]) -> None:
        if not callable(callback):
            raise TypeError("on_error() requires a callable")
        self._error_callbacks.append(callback)

    def before_each(self, callback: Any, kind: Union[GuardKind, str, None] = None) -> Guard:
        """Run before any host event fires, ahead of the page's own leave hooks."""
        return self._guards.add_before_each(callback, kind)

    def before_resolve(self, callback: Any, kind: Union[GuardKind, str, None] = None) -> Guard:
        """Run while the host is entering the new page."""
        return self._guards.add_before_resolve(callback, kind)

    def after_each(self, callback: Any) -> Guard:
        return self._guards.add_after_each(callback)

    add_before_each = before_each
    add_before_resolve = before_resolve
    add_after_each = after_each

    def invoke_before_resolve(self) -> bool:
        """Host hook: the new page is about to become active. Returns False on veto."""
        return self._drive(self._resolve())

    async def ainvoke_before_resolve(self) -> bool:
        return await self._adrive(self._resolve())

    def invoke_after_each(self) -> None:
        """Host hook: the new page is active; runs afterEach hooks and ends navigation."""
        self._drive(self._finish())

    async def ainvoke_after_each(self) -> None:
        await self._adrive(self._finish())

    # ------------------------------------------------------------------
    # Route table and state helpers
    # ------------------------------------------------------------------
    def get_route(self, route: Any) -> Optional[Route]:
        """Find a table entry by exact path first, then by name."""
        key = route_key(route)
        if not key:
            return None
        for entry in self.routes:
            if entry.path == key:
                return entry
        for entry in self.routes:
            if entry.name == key:
                return entry
        return None

    def get_current_route(self) -> Optional[Route]:
        return self.get_route(self.current_route)

    def set_current_route(self, route: Optional[Route]) -> None:
        self.current_route = route
        hook = getattr(self.host, "on_route_changed", None)
        if callable(hook):
            hook(route)

    def get_new_route(self) -> Optional[Route]:
        return self.pending_route

    def get_previous_route(self) -> Optional[Route]:
        if not self.history:
            return None
        return self.get_route(self.history[-1])

    def set_navigation_state(self, toggle: bool) -> None:
        self.is_navigating = bool(toggle)
        if not self.is_navigating:
            self.pending_route = None

    def append_route_history(self, route_path: str) -> None:
        self.history.append(route_path)

    def clear_route_history(self) -> None:
        del self.history[:]

    def set_modal_page(self, instance: Any, data: Any) -> None:
        """Record the page that opened a modal (called by the host binding)."""
        self.modal_page = ModalContext(instance=instance, data=data)

    def update_host(self, host: Any) -> None:
        self.host = host

    # ------------------------------------------------------------------
    # Navigation pipeline
    # ------------------------------------------------------------------
    # Navigations are generators yielding the GuardRunner of each phase; a
    # driver runs the phase (inline or awaited) and sends the outcome back.
    def _drive(self, steps: Steps) -> Any:
        try:
            runner = next(steps)
            while True:
                runner = steps.send(self._run_phase(runner))
        except StopIteration as stop:
            return stop.value

    async def _adrive(self, steps: Steps) -> Any:
        try:
            runner = next(steps)
            while True:
                runner = steps.send(await self._arun_phase(runner))
        except StopIteration as stop:
            return stop.value

    def _run_phase(self, runner: GuardRunner) -> GuardOutcome:
        try:
            return runner.run()
        except Exception as exc:
            return GuardOutcome.fail(exc)

    async def _arun_phase(self, runner: GuardRunner) -> GuardOutcome:
        try:
            return await runner.arun()
        except Exception as exc:
            return GuardOutcome.fail(exc)

    def _push(self, route: Any, options: Any) -> Steps:
        if self._reject_busy(route):
            return
        yield from self._navigate_to(route, options)

    def _back(self, options: Any, fallback_path: Optional[str]) -> Steps:
        if self._reject_busy("back"):
            return
        target = self.get_previous_route()
        if target is not None and self._host_can_go_back():
            yield from self._navigate_to(target, options, backwards=True)
            return
        alternative = fallback_path or self.route_back_fallback_path
        if not alternative:
            self._logger.warning("No route to go back to")
            return
        # Fallback is a plain forward navigation that starts a fresh history
        yield from self._navigate_to(alternative, options, clear_history=True)

    def _resolve(self) -> Steps:
        outcome = yield self._guards.before_resolve
        return (yield from self._perform_context_action(outcome))

    def _finish(self) -> Steps:
        outcome = yield self._guards.after_each
        if outcome.kind is OutcomeKind.FAIL:
            self._notify_error(outcome.value)
        self.set_navigation_state(False)

    def _navigate_to(
        self,
        route: Any,
        options: Any = None,
        *,
        backwards: bool = False,
        clear_history: bool = False,
        hops: int = 0,
    ) -> Steps:
        if not self._is_valid_route(route):
            return
        previous = self.get_current_route()
        target = self.get_route(route)
        try:
            route_options = self._resolve_options(options)
        except ValidationError as exc:
            self._logger.error("Invalid navigation options for %s: %s", target.path, exc)
            return
        if clear_history:
            route_options.clear_history = True
        if not self.share_route_props:
            target = target.isolated()
        self._merge_props(target, route_options)

        self.set_navigation_state(True)
        self.pending_route = target
        self._guards.set_routes(target, previous)

        outcome = yield self._guards.before_each
        if outcome.allowed and target.before_enter is not None:
            runner = GuardRunner(target, previous, timeout=self.guard_timeout)
            runner.add(target.before_enter)
            outcome = yield runner
        if not (yield from self._perform_context_action(outcome, hops=hops)):
            return

        self._leave_modal()
        # Commit before the transition so host lifecycle calls fired from
        # inside it see the new route.
        snapshot = (self.current_route, list(self.history))
        self._commit(target, previous, route_options, backwards)
        try:
            self._perform_transition(target, route_options, backwards)
        except Exception as exc:
            self.current_route, self.history[:] = snapshot
            self.set_navigation_state(False)
            self._notify_error(exc)

    def _perform_context_action(self, outcome: GuardOutcome, *, hops: int = 0) -> Steps:
        """Apply a phase outcome; returns True when the navigation may proceed."""
        if outcome.allowed:
            return True
        pending = self.pending_route
        self.set_navigation_state(False)
        if outcome.kind is OutcomeKind.DENY:
            self._logger.debug("Navigation to %s cancelled by guard", getattr(pending, "path", None))
        elif outcome.kind is OutcomeKind.FAIL:
            self._notify_error(outcome.value)
        elif hops >= self.max_redirects:
            self._notify_error(
                RedirectLoopError(
                    f"Redirect to {route_key(outcome.value)!r} exceeds {self.max_redirects} hops"
                )
            )
        else:
            yield from self._navigate_to(outcome.value, hops=hops + 1)
        return False

    def _perform_transition(self, target: Route, options: RouteOptions, backwards: bool) -> None:
        if backwards:
            if self.route_back_callback is not None:
                self.route_back_callback(target, options)
            if self.host is not None:
                self.host.navigate_backward(options)
            return
        if self.route_to_callback is not None:
            self.route_to_callback(target, options)
        if self.host is not None:
            self.host.navigate_forward(target.component, options)

    def _commit(
        self,
        target: Route,
        previous: Optional[Route],
        options: RouteOptions,
        backwards: bool,
    ) -> None:
        self.set_current_route(target)
        if options.clear_history:
            self.clear_route_history()
        elif backwards:
            if self.history:
                self.history.pop()
        elif previous is not None and previous.path != target.path:
            self.append_route_history(previous.path)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _reject_busy(self, request: Any) -> bool:
        if not self.is_navigating:
            return False
        self._logger.warning(
            "Navigation to %s ignored: navigation to %s in progress",
            route_key(request) or request,
            getattr(self.pending_route, "path", None),
        )
        return True

    def _is_valid_route(self, route: Any) -> bool:
        if self.get_route(route) is not None:
            return True
        self._logger.warning("Route %s is missing", route_key(route) or route)
        return False

    def _resolve_options(self, options: Any) -> RouteOptions:
        if options is None:
            return RouteOptions()
        if isinstance(options, RouteOptions):
            return options.model_copy()
        return RouteOptions.model_validate(dict(options))

    def _merge_props(self, target: Route, options: RouteOptions) -> None:
        if target.meta is None:
            target.meta = {}
        meta = target.meta
        merged = {key: value for key, value in meta.items() if key != "props"}
        merged.update(meta.get("props") or {})
        merged.update(options.props)
        meta["props"] = merged

    def _leave_modal(self) -> None:
        modal = self.modal_page
        if modal is None:
            return
        if modal.instance is not None and modal.data is not None:
            hook = getattr(modal.instance, "on_navigating_from", None)
            if callable(hook):
                hook(modal.data)
        self.modal_page = None

    def _host_can_go_back(self) -> bool:
        depth = getattr(self.host, "back_stack_depth", None)
        if not callable(depth):
            return True
        return depth() > 0

    def _notify_error(self, error: Exception) -> None:
        if not self._error_callbacks:
            self._logger.error("Navigation failed: %s", error)
            return
        for callback in list(self._error_callbacks):
            callback(error)
