"""Router with plugin registry.

``Router`` extends :class:`BaseRouter` with a global plugin registry,
per-router plugin instances and plugin state stored on the router instance.

Internal state
--------------
- ``_plugins``: instantiated plugins in the order they were attached.
- ``_plugins_by_name``: name → plugin instance (first wins).
- ``_plugin_info``: per-plugin state store on the router.

Global registry
---------------
``Router.register_plugin(plugin_class, name=None)`` validates that
``plugin_class`` is a ``BasePlugin`` subclass with a ``plugin_code``.
Registering a different class under an existing code raises ``ValueError``
unless ``name`` is passed explicitly (intentional replacement).
``available_plugins`` returns a shallow copy of the registry.

Attaching plugins
-----------------
``plug(plugin_name, **config)`` looks up the class by name (``ValueError``
listing the available names when missing), instantiates it bound to this
router, calls ``plugin.on_plug(router)`` so the plugin can register its
guards, and returns ``self``. ``__getattr__`` exposes attached plugins by name
or raises ``AttributeError``.

Runtime flags and data
----------------------
Stored under ``_plugin_info[plugin_code]`` with a reserved ``"--base--"``
bucket for router-level values and one bucket per route key (route name, or
path when unnamed), each with ``config`` and ``locals``.
``set_plugin_enabled`` / ``is_plugin_enabled`` and ``set_runtime_data`` /
``get_runtime_data`` read and write these buckets.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from smartnav.core.base_router import BaseRouter
from smartnav.plugins._base_plugin import BasePlugin

__all__ = ["Router"]

_PLUGIN_REGISTRY: Dict[str, Type[BasePlugin]] = {}


class Router(BaseRouter):
    """Navigation router with plugin support."""

    __slots__ = BaseRouter.__slots__ + (
        "_plugins",
        "_plugins_by_name",
        "_plugin_info",
    )

    def __init__(self, *args, **kwargs):
        self._plugins: List[BasePlugin] = []
        self._plugins_by_name: Dict[str, BasePlugin] = {}
        self._plugin_info: Dict[str, Dict[str, Any]] = {}
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: Type[BasePlugin], name: Optional[str] = None) -> None:
        """Register a plugin class globally.

        Args:
            plugin_class: A BasePlugin subclass with plugin_code defined
            name: Optional override name. If provided, overwrites any existing
                  registration. If not provided, uses plugin_code and raises
                  if already registered with another class.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> Dict[str, Type[BasePlugin]]:
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> "Router":
        """Attach a plugin by name (previously registered globally)."""
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        instance = plugin_class(router=self, **config)
        self._plugins.append(instance)
        self._plugins_by_name.setdefault(instance.name, instance)
        instance.on_plug(self)
        return self

    def iter_plugins(self) -> List[BasePlugin]:
        """Return attached plugin instances in attachment order."""
        return list(self._plugins)

    def get_config(self, plugin_name: str, route: Any = None) -> Dict[str, Any]:
        """Return plugin config (router-level + per-route overrides)."""
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{plugin_name}' attached to router")
        return plugin.configuration(route)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        plugin = self._plugins_by_name.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to router")
        return plugin

    def _get_plugin_bucket(self, plugin_name: str) -> Optional[Dict[str, Any]]:
        bucket = self._plugin_info.get(plugin_name)
        if bucket is not None and "--base--" not in bucket:
            bucket["--base--"] = {"config": {}, "locals": {}}
        return bucket

    def _require_bucket(self, plugin_name: str) -> Dict[str, Any]:
        bucket = self._get_plugin_bucket(plugin_name)
        if bucket is None:
            raise AttributeError(f"No plugin named '{plugin_name}' attached to router")
        return bucket

    # ------------------------------------------------------------------
    # Runtime helpers (state stored on plugin_info)
    # ------------------------------------------------------------------
    def set_plugin_enabled(self, route_key: str, plugin_name: str, enabled: bool = True) -> None:
        bucket = self._require_bucket(plugin_name)
        entry = bucket.setdefault(route_key, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})["enabled"] = bool(enabled)

    def is_plugin_enabled(self, route_key: Optional[str], plugin_name: str) -> bool:
        bucket = self._require_bucket(plugin_name)
        entry_locals = bucket.get(route_key, {}).get("locals", {}) if route_key else {}
        if "enabled" in entry_locals:
            return bool(entry_locals["enabled"])
        base_locals = bucket.get("--base--", {}).get("locals", {})
        return bool(base_locals.get("enabled", True))

    def set_runtime_data(self, route_key: str, plugin_name: str, key: str, value: Any) -> None:
        bucket = self._require_bucket(plugin_name)
        entry = bucket.setdefault(route_key, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})[key] = value

    def get_runtime_data(
        self, route_key: str, plugin_name: str, key: str, default: Any = None
    ) -> Any:
        bucket = self._require_bucket(plugin_name)
        entry_locals = bucket.get(route_key, {}).get("locals", {})
        return entry_locals.get(key, default)
