import pytest

from smartnav import Router

ROUTES = [
    {"path": "/a", "name": "a", "component": "PageA"},
    {"path": "/b", "name": "b", "component": "PageB", "meta": {"store": {"setFlag": True}}},
    {"path": "/login", "name": "login", "component": "LoginPage"},
]


class RecordingHost:
    """Host double recording the screen transitions it is asked to perform."""

    def __init__(self, depth=None):
        self.calls = []
        self.routes_seen = []
        self.depth = depth

    def navigate_forward(self, component, options):
        self.calls.append(("forward", component, options))

    def navigate_backward(self, options):
        self.calls.append(("backward", options))

    def on_route_changed(self, route):
        self.routes_seen.append(route.path)


class NativeStackHost(RecordingHost):
    def back_stack_depth(self):
        return self.depth


class RecordingStore:
    def __init__(self):
        self.dispatched = []

    def dispatch(self, type_, payload):
        self.dispatched.append((type_, payload))


def settle(router):
    """Fire the host lifecycle notifications that follow a transition."""
    allowed = router.invoke_before_resolve()
    router.invoke_after_each()
    return allowed


@pytest.fixture
def host():
    return RecordingHost()


@pytest.fixture
def router(host):
    router = Router(ROUTES, host)
    router.set_current_route(router.get_route("/a"))
    host.routes_seen.clear()
    return router
