"""Store dispatch from route metadata.

``MetaDispatcher`` turns a mapping into store actions: every key is an action
type and its value the payload, dispatched in the mapping's key order through
``store.dispatch(type, payload)``. ``dispatch_from_meta`` returns ``False``
without dispatching anything when the mapping or the store is missing, or when
the store has no ``dispatch`` callable (logged as an error).

``DispatchPlugin`` (``"dispatch"``) wires a dispatcher into the router as a
``beforeResolve`` guard: when the host enters a page, ``meta[meta_key]`` of the
resolved route (``"store"`` by default) is dispatched. The guard never vetoes.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from smartnav.core.router import Router
from smartnav.plugins._base_plugin import BasePlugin

__all__ = ["DispatchPlugin", "MetaDispatcher"]


class MetaDispatcher:
    """Dispatch route metadata as store actions."""

    def __init__(self, store: Any = None, *, logger: Optional[logging.Logger] = None):
        self.store = store
        self._logger = logger or logging.getLogger("smartnav")

    def dispatch_from_meta(self, meta: Optional[Mapping[str, Any]]) -> bool:
        if not meta or self.store is None:
            return False
        if not callable(getattr(self.store, "dispatch", None)):
            self._logger.error("Store %r does not expose dispatch()", self.store)
            return False
        for key, payload in meta.items():
            self.dispatch(key, payload)
        return True

    def dispatch(self, type_: str, payload: Any) -> Any:
        return self.store.dispatch(type_, payload)


class DispatchPlugin(BasePlugin):
    """Dispatch ``meta["store"]`` actions whenever a route resolves."""

    plugin_code = "dispatch"
    plugin_description = "Dispatches route meta as store actions"

    __slots__ = ("dispatcher",)

    def __init__(self, router, *, store: Any = None, logger: Optional[logging.Logger] = None, **cfg):
        self.dispatcher = MetaDispatcher(store, logger=logger)
        super().__init__(router, **cfg)

    def configure(self, enabled: bool = True, meta_key: str = "store"):
        pass  # Storage is handled by the wrapper

    def on_plug(self, router: Router) -> None:
        router.before_resolve(self._dispatch_route_meta, kind="sync")

    def _dispatch_route_meta(self, to, from_):
        if to is None or not self.is_active(to):
            return None
        route = self._router.get_route(to)
        if route is None or not route.meta:
            return None
        meta_key = self.configuration(to).get("meta_key", "store")
        self.dispatcher.dispatch_from_meta(route.meta.get(meta_key))
        return None


Router.register_plugin(DispatchPlugin)
