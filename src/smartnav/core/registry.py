"""Explicit router registry and bootstrap helper.

``RouterRegistry``
    Created by the application at bootstrap and passed around explicitly; there
    is no module-level router list. Routers are appended with
    ``register(router, name=None)``, which returns their index. Lookup works
    by index or by name (``get``/``[]``); ``use(index=0)`` mirrors the classic
    ``useRouter`` accessor. Registering the same name twice raises
    ``ValueError``; missing names raise ``KeyError`` and missing indexes
    ``IndexError``.

``create_router(routes, *, host=None, store=None, registry=None, name=None, **options)``
    Build a :class:`Router`; plug ``"dispatch"`` bound to ``store`` when a
    store is given; register the router when a registry is given.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from smartseeds.typeutils import safe_is_instance

from .router import Router

__all__ = ["RouterRegistry", "create_router"]


class RouterRegistry:
    """Ordered collection of routers addressable by index or name."""

    __slots__ = ("_routers", "_names")

    def __init__(self) -> None:
        self._routers: List[Router] = []
        self._names: Dict[str, int] = {}

    def register(self, router: Router, name: Optional[str] = None) -> int:
        if not safe_is_instance(router, "smartnav.core.base_router.BaseRouter"):
            raise TypeError("register() requires a router instance")
        if name is not None and name in self._names:
            raise ValueError(f"Router name collision: {name!r}")
        for index, existing in enumerate(self._routers):
            if existing is router:
                if name is not None:
                    self._names[name] = index
                return index
        self._routers.append(router)
        index = len(self._routers) - 1
        if name is not None:
            self._names[name] = index
        return index

    def get(self, key: Union[int, str]) -> Router:
        if isinstance(key, str):
            try:
                return self._routers[self._names[key]]
            except KeyError:
                raise KeyError(f"No router registered as {key!r}") from None
        if not 0 <= key < len(self._routers):
            raise IndexError(f"No router at index {key}")
        return self._routers[key]

    __getitem__ = get

    def use(self, index: Union[int, str] = 0) -> Router:
        return self.get(index)

    def names(self) -> Dict[str, int]:
        return dict(self._names)

    def clear(self) -> None:
        self._routers.clear()
        self._names.clear()

    def __len__(self) -> int:
        return len(self._routers)

    def __iter__(self) -> Iterator[Router]:
        return iter(list(self._routers))


def create_router(
    routes: Iterable[Any],
    *,
    host: Any = None,
    store: Any = None,
    registry: Optional[RouterRegistry] = None,
    name: Optional[str] = None,
    **options: Any,
) -> Router:
    """Build a router, wire the store dispatcher and register it."""
    router = Router(routes, host, **options)
    if store is not None:
        router.plug("dispatch", store=store)
    if registry is not None:
        registry.register(router, name=name)
    return router
