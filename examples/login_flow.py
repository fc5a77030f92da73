"""
Example showing a guarded login flow driven by a console host.
"""

from __future__ import annotations

import logging

from smartnav import RouterRegistry, create_router


class ConsoleHost:
    def navigate_forward(self, component, options):
        print(f"show {component} props={options.props}")

    def navigate_backward(self, options):
        print("pop")


class Store:
    def __init__(self):
        self.state = {}

    def dispatch(self, type_, payload):
        self.state[type_] = payload


ROUTES = [
    {"path": "/home", "name": "home", "component": "HomePage"},
    {"path": "/login", "name": "login", "component": "LoginPage"},
    {
        "path": "/account",
        "name": "account",
        "component": "AccountPage",
        "meta": {"store": {"section": "account"}, "requiresAuth": True},
    },
]


def main():
    logging.basicConfig(level=logging.INFO)
    session = {"user": None}
    store = Store()
    registry = RouterRegistry()
    router = create_router(ROUTES, host=ConsoleHost(), store=store, registry=registry)
    router.plug("logging")

    def require_auth(to, from_, next):
        if to.meta.get("requiresAuth") and session["user"] is None:
            next({"name": "login"})

    router.before_each(require_auth)

    def settle():
        router.invoke_before_resolve()
        router.invoke_after_each()

    router.push("/home")
    settle()
    router.push("account")
    settle()

    session["user"] = "ada"
    registry.use().push("account", {"props": {"tab": "profile"}})
    settle()
    print("history", router.history, "store", store.state)

    router.back()
    settle()
    print("current", router.current_route.path)


if __name__ == "__main__":
    main()
