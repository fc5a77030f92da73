"""Logging plugin.

Responsibilities
----------------
- Register a ``beforeEach`` guard and an ``afterEach`` hook on the router and
  emit configurable messages:
  * ``before`` (default True): ``"navigating <from> -> <to>"``
  * ``after`` (default True): ``"navigated <from> -> <to> (<ms> ms)"`` with the
    time elapsed since the ``beforeEach`` message, ``{elapsed:.2f}`` formatted.
- The guard never vetoes: it always lets the navigation through.
- Sinks:
  * when ``print`` is true → always ``print(message)``;
  * else when ``log`` is true → ``logger.info(message)`` if the logger reports
    handlers via ``hasHandlers()``, otherwise ``print(message)`` to avoid drops;
  * else → no output.
- ``enabled`` gates the plugin entirely (default True), router-wide or per
  route (``configure(_target="login", enabled=False)``).
- Routes are labelled by name, falling back to path; ``-`` when there is no
  previous route.

Registration
------------
At module import, the plugin registers itself globally as ``"logging"``.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from smartnav.core.route import route_key
from smartnav.core.router import Router
from smartnav.plugins._base_plugin import BasePlugin


def _label(route: Any) -> str:
    return route_key(route) or "-"


class LoggingPlugin(BasePlugin):
    """Logs each navigation with its duration."""

    plugin_code = "logging"
    plugin_description = "Logs navigations with timing"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: Optional[logging.Logger] = None, **cfg):
        self._logger = logger or logging.getLogger("smartnav")
        super().__init__(router, **cfg)

    def configure(
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - shadowing builtin intentionally
    ):
        """Configure logging plugin options.

        The wrapper added by __init_subclass__ handles writing to store.
        """
        pass  # Storage is handled by the wrapper

    def on_plug(self, router: Router) -> None:
        router.before_each(self._log_start, kind="sync")
        router.after_each(self._log_end)

    def _emit(self, message: str, *, cfg: Optional[dict] = None):
        if cfg is None:
            return
        if cfg.get("print"):
            print(message)
            return
        if cfg.get("log"):
            logger = self._logger
            has_handlers = getattr(logger, "hasHandlers", None) or getattr(
                logger, "has_handlers", None
            )
            can_log = callable(has_handlers) and has_handlers()
            if can_log:
                logger.info(message)
            else:
                print(message)

    def _log_start(self, to, from_):
        if not self.is_active(to):
            return None
        cfg = self._effective_config(to)
        self._router.set_runtime_data(route_key(to), self.name, "started", time.perf_counter())
        if cfg["before"]:
            self._emit(f"navigating {_label(from_)} -> {_label(to)}", cfg=cfg)
        return None

    def _log_end(self, to, from_):
        if not self.is_active(to):
            return
        cfg = self._effective_config(to)
        if not cfg["after"]:
            return
        started = self._router.get_runtime_data(route_key(to), self.name, "started")
        elapsed = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        self._emit(f"navigated {_label(from_)} -> {_label(to)} ({elapsed:.2f} ms)", cfg=cfg)

    def _effective_config(self, route: Any) -> dict:
        defaults = {"enabled": True, "before": True, "after": True, "log": True, "print": False}
        cfg = defaults | self.configuration(route)

        def to_bool(key: str) -> bool:
            val = cfg.get(key)
            return defaults[key] if val is None else bool(val)

        return {key: to_bool(key) for key in defaults}


Router.register_plugin(LoggingPlugin)
