"""Tests for the explicit router registry."""

import pytest

from conftest import ROUTES, RecordingHost, RecordingStore
from smartnav import Router, RouterRegistry, create_router


def test_register_returns_index_and_use_defaults_to_first():
    registry = RouterRegistry()
    main = Router(ROUTES)
    modal = Router(ROUTES)

    assert registry.register(main) == 0
    assert registry.register(modal, name="modal") == 1

    assert registry.use() is main
    assert registry.use(1) is modal
    assert registry.use("modal") is modal
    assert registry["modal"] is modal
    assert len(registry) == 2
    assert list(registry) == [main, modal]
    assert registry.names() == {"modal": 1}


def test_registering_same_router_twice_keeps_its_index():
    registry = RouterRegistry()
    router = Router(ROUTES)
    assert registry.register(router) == 0
    assert registry.register(router, name="main") == 0
    assert len(registry) == 1
    assert registry.get("main") is router


def test_registry_errors():
    registry = RouterRegistry()
    registry.register(Router(ROUTES), name="main")

    with pytest.raises(ValueError):
        registry.register(Router(ROUTES), name="main")
    with pytest.raises(TypeError):
        registry.register(object())  # type: ignore[arg-type]
    with pytest.raises(KeyError):
        registry.get("missing")
    with pytest.raises(IndexError):
        registry.use(3)
    with pytest.raises(IndexError):
        registry.get(-1)


def test_registries_are_independent():
    first, second = RouterRegistry(), RouterRegistry()
    first.register(Router(ROUTES))
    assert len(second) == 0
    with pytest.raises(IndexError):
        second.use()

    first.clear()
    assert len(first) == 0


def test_create_router_wires_host_store_and_registry():
    registry = RouterRegistry()
    host = RecordingHost()
    store = RecordingStore()

    router = create_router(
        ROUTES,
        host=host,
        store=store,
        registry=registry,
        name="main",
        route_back_fallback_path="/login",
    )

    assert router.host is host
    assert router.dispatch.dispatcher.store is store  # type: ignore[attr-defined]
    assert router.route_back_fallback_path == "/login"
    assert registry.use("main") is router


def test_create_router_without_store_skips_dispatch():
    router = create_router(ROUTES)
    assert router.iter_plugins() == []
    assert router.host is None
