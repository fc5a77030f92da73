"""Route records and per-navigation options.

``Route``
    Dataclass describing one entry of the route table. ``path`` is required
    and unique; ``name`` is optional and unique when present. ``meta`` is free
    form; the dispatch plugin reads ``meta["store"]`` and the router merges
    navigation props into ``meta["props"]``. ``before_enter`` is a route-level
    guard run right after the global ``beforeEach`` phase.

``Route.from_value(value)``
    Accepts a ``Route`` (returned unchanged) or a mapping. Mapping keys use
    the dataclass field names; the camelCase ``beforeEnter`` is accepted too.
    Unknown keys are kept in ``extra``. A mapping without ``path`` raises
    ``ValueError``.

``RouteOptions``
    Pydantic model validating the options passed to ``push``/``back``. Missing
    values take the documented defaults (``transition={"duration": 100}``,
    ``meta={"props": {}}``, empty ``props``). ``context`` always mirrors
    ``props`` after validation. Host specific keys are allowed and preserved
    (``model_extra``).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

__all__ = ["DEFAULT_TRANSITION_DURATION", "Route", "RouteOptions", "route_key"]

DEFAULT_TRANSITION_DURATION = 100

_ALIASES = {"beforeEnter": "before_enter"}


@dataclass
class Route:
    """A navigation target addressable by path or name."""

    path: str
    name: Optional[str] = None
    component: Any = None
    meta: Dict[str, Any] = field(default_factory=dict)
    props: Dict[str, Any] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)
    before_enter: Optional[Callable] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> "Route":
        if isinstance(value, Route):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Route entries must be Route or mapping, got {type(value).__name__}")
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, item in value.items():
            key = _ALIASES.get(key, key)
            if key in known and key != "extra":
                kwargs[key] = item
            else:
                extra[key] = item
        if not kwargs.get("path"):
            raise ValueError(f"Route definition requires a path: {dict(value)!r}")
        for key in ("meta", "props", "context"):
            if kwargs.get(key) is None:
                kwargs.pop(key, None)
            else:
                kwargs[key] = dict(kwargs[key])
        return cls(extra=extra, **kwargs)

    def isolated(self) -> "Route":
        """Return a copy whose mappings can be mutated without touching ``self``."""
        return replace(
            self,
            meta=dict(self.meta),
            props=dict(self.props),
            context=dict(self.context),
            extra=dict(self.extra),
        )


def route_key(value: Any) -> Optional[str]:
    """Return the lookup key for a route identifier (name first, then path)."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, Route):
        return value.name or value.path
    if isinstance(value, Mapping):
        return value.get("name") or value.get("path")
    return None


class RouteOptions(BaseModel):
    """Options for a single navigation, merged over the defaults."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, arbitrary_types_allowed=True)

    transition: Dict[str, Any] = Field(
        default_factory=lambda: {"duration": DEFAULT_TRANSITION_DURATION}
    )
    duration: Optional[int] = None
    meta: Dict[str, Any] = Field(default_factory=lambda: {"props": {}})
    props: Dict[str, Any] = Field(default_factory=dict)
    context: Dict[str, Any] = Field(default_factory=dict)
    clear_history: bool = Field(default=False, alias="clearHistory")

    @field_validator("props", mode="before")
    @classmethod
    def _props_default(cls, value: Any) -> Any:
        # Props must exist so guards never see a missing mapping
        return {} if value is None else value

    @model_validator(mode="after")
    def _context_mirrors_props(self) -> "RouteOptions":
        self.context = self.props
        return self
