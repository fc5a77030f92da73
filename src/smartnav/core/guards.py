"""Guard phases of one router.

``GuardPhases`` owns three long-lived :class:`GuardRunner` instances:
``before_each`` and ``before_resolve`` (veto capable) and ``after_each``
(hook mode). They share the ``(to, from)`` pair of the navigation in flight
but keep separate cancellation state, so a denial in one phase never leaks
into another. ``set_routes`` retargets all three at once.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from .guard import Guard, GuardKind, GuardRunner

__all__ = ["GuardPhases"]


class GuardPhases:
    """beforeEach / beforeResolve / afterEach runners sharing one route pair."""

    __slots__ = ("before_each", "before_resolve", "after_each")

    def __init__(self, to: Any = None, from_: Any = None, *, timeout: Optional[float] = None):
        self.before_each = GuardRunner(to, from_, timeout=timeout)
        self.before_resolve = GuardRunner(to, from_, timeout=timeout)
        self.after_each = GuardRunner(to, from_, True, timeout=timeout)

    def add_before_each(self, callback: Any, kind: Union[GuardKind, str, None] = None) -> Guard:
        return self.before_each.add(callback, kind)

    def add_before_resolve(self, callback: Any, kind: Union[GuardKind, str, None] = None) -> Guard:
        return self.before_resolve.add(callback, kind)

    def add_after_each(self, callback: Any) -> Guard:
        return self.after_each.add(callback)

    def run_before_each(self) -> Any:
        return self.before_each.run()

    def run_before_resolve(self) -> Any:
        return self.before_resolve.run()

    def run_after_each(self) -> Any:
        return self.after_each.run()

    def set_routes(self, to: Any, from_: Any) -> None:
        self.before_each.set_routes(to, from_)
        self.before_resolve.set_routes(to, from_)
        self.after_each.set_routes(to, from_)
