"""Core runtime aggregator.

Expose the runtime building blocks from a single module. No extra logic beyond
imports/exports:

* ``route`` → ``Route``, ``RouteOptions``
* ``guard`` → ``GuardRunner`` and guard/outcome types
* ``guards`` → ``GuardPhases``
* ``base_router`` → ``BaseRouter`` (plugin-free controller)
* ``router`` → ``Router`` (plugin-enabled)
* ``registry`` → ``RouterRegistry``, ``create_router``
"""

from .base_router import BaseRouter
from .guard import (
    Guard,
    GuardKind,
    GuardOutcome,
    GuardRunner,
    GuardTimeoutError,
    OutcomeKind,
    RedirectLoopError,
)
from .guards import GuardPhases
from .host import ModalContext, NavigationHost
from .registry import RouterRegistry, create_router
from .route import Route, RouteOptions
from .router import Router

__all__ = [
    "BaseRouter",
    "Guard",
    "GuardKind",
    "GuardOutcome",
    "GuardPhases",
    "GuardRunner",
    "GuardTimeoutError",
    "ModalContext",
    "NavigationHost",
    "OutcomeKind",
    "RedirectLoopError",
    "Route",
    "RouteOptions",
    "Router",
    "RouterRegistry",
    "create_router",
]
