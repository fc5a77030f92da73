"""SmartNav public API surface.

- Public exports: ``Router``, ``Route``, ``RouteOptions``, ``GuardKind``,
  ``GuardOutcome``, ``OutcomeKind``, ``RouterRegistry``, ``create_router``.
- Plugin registration: built-in plugins (``logging``, ``dispatch``) are
  imported for their side effect of calling ``Router.register_plugin``.
  Imports are done lazily via ``import_module`` to avoid cycles.
- Import stays lightweight: no router instantiation.
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    GuardKind,
    GuardOutcome,
    OutcomeKind,
    Route,
    RouteOptions,
    Router,
    RouterRegistry,
    create_router,
)

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging", "dispatch"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "GuardKind",
    "GuardOutcome",
    "OutcomeKind",
    "Route",
    "RouteOptions",
    "Router",
    "RouterRegistry",
    "create_router",
]
