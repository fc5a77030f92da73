"""Navigation driven from a running event loop."""

import asyncio

from conftest import ROUTES, RecordingHost, RecordingStore
from smartnav import create_router


def test_push_and_lifecycle_are_awaitable():
    store = RecordingStore()
    host = RecordingHost()
    router = create_router(ROUTES, host=host, store=store)
    calls = []

    async def check_session(to, from_):
        await asyncio.sleep(0)
        calls.append(to.path)

    router.before_each(check_session)

    async def main():
        await router.apush("/a")
        await router.ainvoke_after_each()
        await router.apush("/b")
        allowed = await router.ainvoke_before_resolve()
        await router.ainvoke_after_each()
        return allowed

    assert asyncio.run(main()) is True
    assert calls == ["/a", "/b"]
    assert router.history == ["/a"]
    assert store.dispatched == [("setFlag", True)]
    assert router.is_navigating is False


def test_async_redirect_and_back():
    router = create_router(ROUTES, host=RecordingHost())

    async def only_logged_in(to, from_, next):
        await asyncio.sleep(0)
        if to.path == "/b":
            next("/login")
        else:
            next()

    router.before_each(only_logged_in)

    async def main():
        await router.apush("/a")
        await router.ainvoke_after_each()
        await router.apush("/b")
        await router.ainvoke_after_each()
        await router.aback()

    asyncio.run(main())
    assert router.current_route.path == "/a"
    assert router.history == []


def test_sync_call_from_running_loop_completes_with_sync_guards():
    store = RecordingStore()
    router = create_router(ROUTES, host=RecordingHost(), store=store)
    router.before_each(lambda to, from_: None)

    async def main():
        router.push("/b")
        return router.invoke_before_resolve()

    assert asyncio.run(main()) is True
    assert router.current_route.path == "/b"
    assert store.dispatched == [("setFlag", True)]


def test_sync_call_meeting_async_guard_in_running_loop_is_reported():
    errors = []
    router = create_router(ROUTES, host=RecordingHost())
    router.on_error(errors.append)

    async def check(to, from_):
        return None

    router.before_each(check)

    async def main():
        router.push("/b")

    asyncio.run(main())
    assert len(errors) == 1
    assert isinstance(errors[0], RuntimeError)
    assert router.current_route is None
    assert router.is_navigating is False
