import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from conftest import HINDI
from page_translator.config.settings import GATEWAY_FAILURE_MESSAGE
from page_translator.core.languages import Language
from page_translator.storage import LanguagePreferenceStore, MemoryStorage
from page_translator.translation import (
    GatewayError,
    HttpGatewayTransport,
    QueueNotifier,
    TranslationGatewayClient,
)


def _gateway_app(received):
    """Gateway stand-in; the path picks the behaviour."""

    async def translate(request):
        body = await request.json()
        received.append((body, request.headers.get("Authorization")))
        table = HINDI if body["targetLanguage"] == "hi" else {}
        return web.json_response({"translations": [table.get(text, text) for text in body["texts"]]})

    async def bad_gateway(request):
        return web.Response(status=502, text="Bad Gateway")

    async def html_error_page(request):
        return web.Response(text="<html><body>Maintenance</body></html>", content_type="text/html")

    async def multiple_choices(request):
        return web.json_response({"translations": ["खेल"]}, status=300)

    async def gateway_error(request):
        return web.json_response({"error": "quota exceeded"})

    app = web.Application()
    app.router.add_post("/translate", translate)
    app.router.add_post("/bad-gateway", bad_gateway)
    app.router.add_post("/html", html_error_page)
    app.router.add_post("/multiple-choices", multiple_choices)
    app.router.add_post("/error", gateway_error)
    return app


def _call(path, texts, token="", reuse_session=False):
    received = []

    async def scenario():
        async with TestServer(_gateway_app(received)) as server:
            url = str(server.make_url(path))
            if not reuse_session:
                return await HttpGatewayTransport(url=url, token=token)(texts, Language.HI)

            async with aiohttp.ClientSession() as session:
                transport = HttpGatewayTransport(url=url, token=token, session=session)
                first = await transport(texts, Language.HI)
                second = await transport(texts, Language.HI)
                assert not session.closed
                return first, second

    return asyncio.run(scenario()), received


def test_posts_payload_and_returns_translations():
    result, received = _call("/translate", ["Sports", "Weather"], token="secret")

    assert result == [HINDI["Sports"], HINDI["Weather"]]
    assert received == [
        ({"texts": ["Sports", "Weather"], "targetLanguage": "hi"}, "Bearer secret"),
    ]


def test_shared_session_is_reused_and_left_open():
    (first, second), received = _call("/translate", ["Sports"], reuse_session=True)

    assert first == second == [HINDI["Sports"]]
    assert len(received) == 2
    assert received[0][1] is None


@pytest.mark.parametrize("path, message", [
    ("/bad-gateway", "502"),
    ("/multiple-choices", "300"),
    ("/html", "not valid JSON"),
    ("/error", "quota exceeded"),
])
def test_unusable_responses_raise_gateway_error(path, message):
    with pytest.raises(GatewayError, match=message):
        _call(path, ["Sports"])


def test_connection_failure_raises_gateway_error():
    async def scenario():
        server = TestServer(web.Application())
        await server.start_server()
        url = str(server.make_url("/translate"))
        await server.close()
        return await HttpGatewayTransport(url=url, timeout=2)(["Sports"], Language.HI)

    with pytest.raises(GatewayError, match="request failed"):
        asyncio.run(scenario())


def test_client_fails_open_on_error_status():
    store = LanguagePreferenceStore(MemoryStorage(), max_entries=None)
    notifier = QueueNotifier()

    async def scenario():
        async with TestServer(_gateway_app([])) as server:
            transport = HttpGatewayTransport(url=str(server.make_url("/bad-gateway")))
            client = TranslationGatewayClient(store, transport=transport, notifier=notifier)
            return await client.translate(["Sports", "Weather"], Language.HI), client

    result, client = asyncio.run(scenario())

    assert result == ["Sports", "Weather"]
    assert client.failure_count == 1
    assert isinstance(client.last_error, GatewayError)
    assert notifier.messages == [GATEWAY_FAILURE_MESSAGE]
    assert len(store) == 0
