# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Quart application exposing the MCP session transport over HTTP.

  GET  /healthz   -> liveness probe
  GET  /sse       -> opens the event stream (endpoint event, then message events)
  POST /messages  -> JSON-RPC messages for the open stream (202, reply goes out on the stream)
"""

import logging

from quart import Quart, make_response, request
from quart_cors import cors

from shopify_mcp.catalog import CatalogClient
from shopify_mcp.config import Settings
from shopify_mcp.dispatch import Dispatcher
from shopify_mcp.errors import InvalidRequest, NoActiveSession, ParseError
from shopify_mcp.session import SessionTransport

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


def create_app(settings: Settings, catalog: CatalogClient | None = None) -> Quart:
    """Build the Quart app; catalog can be injected for testing"""
    app = Quart(__name__)
    # Streams stay open until the client leaves
    app.config["RESPONSE_TIMEOUT"] = None

    catalog = catalog or CatalogClient(settings.catalog)
    dispatcher = Dispatcher(catalog, settings.server)
    transport = SessionTransport(dispatcher, settings.server.messages_path, settings.server.keepalive_interval)
    app.extensions["mcp_transport"] = transport

    @app.after_serving
    async def shutdown():
        await transport.shutdown()
        logger.info("MCP transport shut down")

    @app.route("/healthz", methods=["GET"])
    async def healthz():
        """Health check endpoint."""
        return "OK", 200

    @app.route("/sse", methods=["GET"])
    async def sse():
        """Open the long-lived event stream and make it the active session."""
        session = await transport.open_stream()

        async def generate():
            try:
                async for frame in session.frames():
                    yield frame.encode("utf-8")
            finally:
                await transport.close_stream(session)

        response = await make_response(generate(), 200, SSE_HEADERS)
        response.timeout = None
        return response

    @app.route(settings.server.messages_path, methods=["POST"])
    async def messages():
        """Side channel for client messages; replies are delivered on the stream."""
        body = await request.get_data()
        try:
            ack = await transport.post_message(body, request.args.get("sessionId"))
        except NoActiveSession as e:
            return str(e), 400
        except (ParseError, InvalidRequest) as e:
            logger.warning(f"[SSE] Rejected message: {e.message}")
            return e.message, 400
        return ack, 202

    return cors(app, allow_origin=settings.server.allow_origin)
