"""Host view-stack contract consumed by the router.

The router never draws anything: it hands the resolved route to a host that
pushes or pops native screens. Only ``navigate_forward`` and
``navigate_backward`` are required. ``back_stack_depth`` lets the router know
when the native stack is exhausted (hosts without it are assumed to have
entries). ``on_route_changed`` is notified after every committed navigation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

__all__ = ["ModalContext", "NavigationHost"]


@runtime_checkable
class NavigationHost(Protocol):
    def navigate_forward(self, component: Any, options: Any) -> None: ...

    def navigate_backward(self, options: Any) -> None: ...


@dataclass
class ModalContext:
    """Page that opened a modal, recorded by the host binding.

    When a navigation leaves the modal, the router replays the
    ``on_navigating_from(data)`` notification on ``instance`` because the host
    suppressed it while the modal was shown.
    """

    instance: Any
    data: Any
