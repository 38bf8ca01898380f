import asyncio
import os

import httpx
import pytest
from httpx import ASGITransport
from unittest.mock import MagicMock, patch

from carlot.client.api_client import ApiClient
from carlot.client.hooks import DROPDOWN_LOAD_FAILED, DropdownOptionsHook, UnreadCountHook
from carlot.main import app
from carlot.store.backend import BackendStore
from carlot.store.null import create_client_store

PUBLIC_KEY = os.environ["BACKEND_PUBLIC_KEY"]


def mock_client(handler) -> ApiClient:
    return ApiClient("http://test", PUBLIC_KEY, token="t", transport=httpx.MockTransport(handler))


def options_response(*labels):
    return httpx.Response(200, json={"data": [{"label": label, "value": label.lower()} for label in labels]})


@pytest.mark.asyncio
async def test_dropdown_hook_loads_options():
    requests = []

    def handler(request):
        requests.append(request)
        return options_response("Red", "Blue")

    hook = DropdownOptionsHook(mock_client(handler), MagicMock())
    options = await hook.load("exterior_color")

    assert options == [{"label": "Red", "value": "red"}, {"label": "Blue", "value": "blue"}]
    assert hook.is_loading is False
    assert hook.error is None
    assert requests[0].headers["apikey"] == PUBLIC_KEY
    assert requests[0].url.params["active_only"] == "true"


@pytest.mark.asyncio
async def test_dropdown_hook_skips_unchanged_inputs():
    calls = []

    def handler(request):
        calls.append(request.url.params["category"])
        return options_response("Red")

    hook = DropdownOptionsHook(mock_client(handler), MagicMock())
    await hook.load("exterior_color")
    await hook.load("exterior_color")
    await hook.load("exterior_color", active_only=False)

    assert calls == ["exterior_color", "exterior_color"]


@pytest.mark.asyncio
async def test_dropdown_hook_does_not_fetch_empty_category():
    handler = MagicMock()

    hook = DropdownOptionsHook(mock_client(handler), MagicMock())
    assert await hook.load("") == []

    handler.assert_not_called()
    assert hook.is_loading is False


@pytest.mark.asyncio
async def test_dropdown_hook_failure_resets_and_notifies():
    responses = iter([options_response("Red"), httpx.Response(500, json={"error": "Failed to fetch dropdown options"})])
    notifier = MagicMock()

    hook = DropdownOptionsHook(mock_client(lambda request: next(responses)), notifier)
    await hook.load("exterior_color")
    await hook.load("interior_color")

    assert hook.options == []
    assert hook.error == "Failed to fetch dropdown options"
    assert hook.is_loading is False
    notifier.error.assert_called_once_with(DROPDOWN_LOAD_FAILED)


@pytest.mark.asyncio
async def test_dropdown_hook_network_failure_notifies():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    notifier = MagicMock()
    hook = DropdownOptionsHook(mock_client(handler), notifier)
    await hook.load("exterior_color")

    assert hook.error
    notifier.error.assert_called_once_with(DROPDOWN_LOAD_FAILED)


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(200, json={"data": [{"name": "x"}]}),
    httpx.Response(200, text="<html>gateway timeout</html>"),
])
async def test_dropdown_hook_malformed_body_notifies(response):
    notifier = MagicMock()
    hook = DropdownOptionsHook(mock_client(lambda request: response), notifier)

    assert await hook.load("exterior_color") == []
    assert hook.is_loading is False
    assert hook.error
    notifier.error.assert_called_once_with(DROPDOWN_LOAD_FAILED)


@pytest.mark.asyncio
async def test_dropdown_hook_discards_superseded_response():
    release_slow = asyncio.Event()

    async def handler(request):
        if request.url.params["category"] == "slow":
            await release_slow.wait()
            return options_response("Stale")
        return options_response("Fresh")

    hook = DropdownOptionsHook(mock_client(handler), MagicMock())
    slow = asyncio.create_task(hook.load("slow"))
    await asyncio.sleep(0)
    await hook.load("fast")
    release_slow.set()
    await slow

    assert hook.options == [{"label": "Fresh", "value": "fresh"}]
    assert hook.is_loading is False


@pytest.mark.asyncio
async def test_dropdown_hook_against_api(async_client, store, seller_headers):
    await store.insert("dropdown_settings", {"category": "trim", "label": "LX", "value": "lx"})
    token = seller_headers["Authorization"].split(" ", 1)[1]

    async with ApiClient("http://test", PUBLIC_KEY, token=token, transport=ASGITransport(app=app)) as client:
        hook = DropdownOptionsHook(client, MagicMock())
        assert await hook.load("trim") == [{"label": "LX", "value": "lx"}]


async def send(session_factory, feed, sender, receiver, content="hi"):
    async with session_factory() as session:
        return await BackendStore(session, feed).insert(
            "messages", {"sender_id": sender, "receiver_id": receiver, "content": content}
        )


@pytest.mark.asyncio
async def test_unread_count_follows_new_messages(session_factory, feed):
    for i in range(3):
        await send(session_factory, feed, "u2", "u1", f"message {i}")
    await send(session_factory, feed, "u2", "u3")

    async with UnreadCountHook(create_client_store(session_factory, feed)) as hook:
        await hook.set_user("u1")
        assert hook.unread_count == 3

        await send(session_factory, feed, "u2", "u1", "one more")
        assert hook.unread_count == 4

        await send(session_factory, feed, "u2", "u3", "not for u1")
        assert hook.unread_count == 4

    assert feed.subscriber_count() == 0


@pytest.mark.asyncio
async def test_mark_as_read_refetches(session_factory, feed):
    first = await send(session_factory, feed, "u2", "u1")
    await send(session_factory, feed, "u2", "u1")

    hook = UnreadCountHook(create_client_store(session_factory, feed))
    await hook.set_user("u1")

    assert await hook.mark_as_read(first["id"]) is True
    assert hook.unread_count == 1
    await hook.close()


@pytest.mark.asyncio
async def test_mark_as_read_ignores_other_users_messages(session_factory, feed):
    theirs = await send(session_factory, feed, "u1", "u3")

    hook = UnreadCountHook(create_client_store(session_factory, feed))
    await hook.set_user("u1")

    assert await hook.mark_as_read(theirs["id"]) is False
    await hook.close()


@pytest.mark.asyncio
async def test_switching_users_releases_previous_subscription(session_factory, feed):
    await send(session_factory, feed, "u2", "u1")
    hook = UnreadCountHook(create_client_store(session_factory, feed))

    for user in ("u1", "u3", "u1", "u3"):
        await hook.set_user(user)
        assert feed.subscriber_count("messages") == 1

    assert hook.unread_count == 0
    await hook.set_user(None)
    assert feed.subscriber_count() == 0
    assert hook.unread_count == 0

    await hook.close()
    await hook.close()


@pytest.mark.asyncio
async def test_none_user_does_not_fetch():
    store_factory = MagicMock()
    hook = UnreadCountHook(store_factory)

    await hook.set_user(None)

    store_factory.assert_not_called()
    assert hook.unread_count == 0


@pytest.mark.asyncio
async def test_close_during_first_fetch_leaves_no_subscription(session_factory, feed):
    await send(session_factory, feed, "u2", "u1")
    started, release = asyncio.Event(), asyncio.Event()
    count = BackendStore.count

    async def gated_count(self, *args, **kwargs):
        started.set()
        await release.wait()
        return await count(self, *args, **kwargs)

    hook = UnreadCountHook(create_client_store(session_factory, feed))
    with patch.object(BackendStore, "count", gated_count):
        pending = asyncio.create_task(hook.set_user("u1"))
        await started.wait()
        await hook.close()
        release.set()
        await pending

    assert feed.subscriber_count() == 0
    assert hook.unread_count == 0

    await hook.set_user("u1")
    assert feed.subscriber_count() == 0
