import asyncio
import json

from shopify_mcp.dispatch import Dispatcher
from shopify_mcp.errors import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, UpstreamError


def request(request_id, method, params=None):
    message = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


def call(name, arguments=None, request_id=1):
    return request(request_id, "tools/call", {"name": name, "arguments": arguments or {}})


def dispatch(dispatcher, message):
    return asyncio.run(dispatcher.dispatch(message))


def test_tools_list_is_stable_across_calls(settings, make_catalog):
    dispatcher = Dispatcher(make_catalog(), settings.server)
    first = dispatch(dispatcher, request(1, "tools/list"))
    dispatch(dispatcher, call("search_products", {"keyword": "shirt"}))
    dispatch(dispatcher, call("unknown_tool"))
    second = dispatch(dispatcher, request(2, "tools/list"))

    assert [t["name"] for t in first.result["tools"]] == ["search_products", "recommend_products"]
    assert first.result == second.result
    assert second.to_envelope()["id"] == 2


def test_search_products_result(settings, make_catalog):
    catalog = make_catalog()
    reply = dispatch(Dispatcher(catalog, settings.server), call("search_products", {"keyword": "shirt"}, request_id="abc"))

    assert not reply.is_error
    assert reply.result["isError"] is False
    (content,) = reply.result["content"]
    assert content["type"] == "text"
    products = json.loads(content["text"])
    assert [p["id"] for p in products] == [101, 102, 104]
    assert set(products[0]) == {"id", "title", "price", "image"}
    assert catalog.calls == [("search_products", "shirt")]


def test_missing_keyword_never_reaches_catalog(settings, make_catalog):
    catalog = make_catalog()
    reply = dispatch(Dispatcher(catalog, settings.server), call("search_products", {}))

    envelope = reply.to_envelope()
    assert envelope["error"]["code"] == INVALID_PARAMS
    assert "keyword" in envelope["error"]["message"]
    assert "result" not in envelope
    assert catalog.calls == []


def test_unknown_tool_is_error_reply(settings, make_catalog):
    reply = dispatch(Dispatcher(make_catalog(), settings.server), call("unknown_tool", request_id=7))
    assert reply.to_envelope() == {
        "jsonrpc": "2.0",
        "id": 7,
        "error": {"code": INVALID_PARAMS, "message": "Unknown tool: unknown_tool"},
    }


def test_upstream_error_is_tool_error_result(settings, make_catalog):
    catalog = make_catalog(error=UpstreamError("Catalog API returned status 503"))
    reply = dispatch(Dispatcher(catalog, settings.server), call("recommend_products"))

    assert not reply.is_error
    assert reply.result == {"content": [{"type": "text", "text": "Error: Catalog API returned status 503"}], "isError": True}


def test_unexpected_exception_is_internal_error(settings, make_catalog):
    catalog = make_catalog(error=RuntimeError("boom"))
    reply = dispatch(Dispatcher(catalog, settings.server), call("recommend_products"))
    assert reply.to_envelope()["error"]["code"] == INTERNAL_ERROR


def test_recommend_products_is_idempotent(settings, make_catalog):
    dispatcher = Dispatcher(make_catalog(), settings.server)
    first = dispatch(dispatcher, call("recommend_products"))
    second = dispatch(dispatcher, call("recommend_products"))
    assert first.result == second.result


def test_initialize_and_ping(settings, make_catalog):
    dispatcher = Dispatcher(make_catalog(), settings.server)
    reply = dispatch(dispatcher, request(0, "initialize", {"protocolVersion": "2024-11-05", "clientInfo": {"name": "pytest"}}))
    assert reply.result["protocolVersion"] == settings.server.protocol_version
    assert reply.result["serverInfo"] == {"name": "shopify-mcp-server", "version": "1.0.0"}
    assert "tools" in reply.result["capabilities"]

    assert dispatch(dispatcher, request(1, "ping")).to_envelope() == {"jsonrpc": "2.0", "id": 1, "result": {}}


def test_notifications_and_responses_get_no_reply(settings, make_catalog):
    dispatcher = Dispatcher(make_catalog(), settings.server)
    assert dispatch(dispatcher, {"jsonrpc": "2.0", "method": "notifications/initialized"}) is None
    assert dispatch(dispatcher, {"jsonrpc": "2.0", "id": 5, "result": {}}) is None


def test_malformed_requests(settings, make_catalog):
    dispatcher = Dispatcher(make_catalog(), settings.server)
    assert dispatch(dispatcher, request(1, "resources/list")).error.code == METHOD_NOT_FOUND
    assert dispatch(dispatcher, request(2, "tools/call", ["search_products"])).error.code == INVALID_PARAMS
    assert dispatch(dispatcher, request(3, "tools/call", {"name": 42})).error.code == INVALID_PARAMS
