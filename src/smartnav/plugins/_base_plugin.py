"""Plugin contract used by the Router runtime.

``BasePlugin``
    Base class every plugin subclasses. Responsibilities:

    - offer config helpers that delegate to the owning router's
      ``_plugin_info`` store (no hidden per-plugin globals)
    - provide the ``on_plug(router)`` hook where a plugin registers its
      guards and hooks on the router

    Required class attributes:

    - ``plugin_code`` – unique identifier used for registration (e.g. "logging")
    - ``plugin_description`` – human-readable description of the plugin

    Constructor signature: ``BasePlugin(router, **config)``. ``**config`` is
    passed to ``configure()``.

    ``configure(**config)``
        Subclasses declare accepted parameters through the method signature.
        ``__init_subclass__`` wraps it so that it:

        - parses ``flags`` (e.g. ``"enabled,before:off"``) into booleans
        - honours ``_target``: ``"--base--"`` (default) for router-level
          config, a route name or path for a per-route override,
          ``"a,b,c"`` for several routes
        - validates parameters with Pydantic's ``validate_call``
        - writes the validated values to the store

    ``configuration(route=None)``
        Merged configuration: router-level, then the bucket keyed by the
        route's path, then the bucket keyed by its name.

    ``is_active(route)``
        True when the plugin is enabled by configuration and not switched off
        at runtime for that route (``Router.set_plugin_enabled``).
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from pydantic import validate_call

from smartnav.core.route import Route, route_key

__all__ = ["BasePlugin"]


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() to handle flags, _target, validation and storage."""
    validated = validate_call(original_configure)

    def wrapper(self: "BasePlugin", *, _target: str = "--base--", flags: Optional[str] = None, **kwargs: Any) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if "," in _target:
            targets = [t.strip() for t in _target.split(",") if t.strip()]
            for t in targets:
                wrapper(self, _target=t, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface + configuration helpers for router plugins."""

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    @property
    def router(self) -> Any:
        return self._router

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "--base--", {"config": {"enabled": True}, "locals": {}}
        )

    def configure(self, *, _target: str = "--base--", flags: Optional[str] = None) -> None:
        """Override in subclasses to define accepted configuration parameters."""
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def _write_config(self, target: str, config: Dict[str, Any]) -> None:
        if not config:
            return
        store = self._get_store()
        plugin_bucket = store.setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, route: Any = None) -> Dict[str, Any]:
        """Read merged configuration (base + optional per-route overrides)."""
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("--base--", {}).get("config", {}))
        for key in self._route_keys(route):
            merged.update(plugin_bucket.get(key, {}).get("config", {}))
        return merged

    def is_active(self, route: Any) -> bool:
        if not self.configuration(route).get("enabled", True):
            return False
        return self._router.is_plugin_enabled(route_key(route), self.name)

    def _route_keys(self, route: Any) -> List[str]:
        if route is None:
            return []
        if isinstance(route, Route):
            return [key for key in (route.path, route.name) if key]
        key = route_key(route)
        return [key] if key else []

    def _parse_flags(self, flags: str) -> Dict[str, bool]:
        mapping: Dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def on_plug(self, router: Any) -> None:  # pragma: no cover - default no-op
        """Hook run once the plugin is attached; register guards here."""

    def _get_store(self) -> Dict[str, Any]:
        return getattr(self._router, "_plugin_info")
