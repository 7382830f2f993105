# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Dispatch engine: routes decoded JSON-RPC requests to the tool registry and the
catalog client, and turns every outcome into a Reply.

Nothing raised while handling one request escapes dispatch(); the transport
only ever sees a Reply (or None for messages that take no reply).
"""

import json
import logging
from enum import Enum
from typing import Any

from shopify_mcp.catalog import CatalogClient
from shopify_mcp.config import ServerConfig
from shopify_mcp.errors import InvalidArguments, McpError, MethodNotFound, UpstreamError
from shopify_mcp.protocol import Reply, is_notification, is_response
from shopify_mcp.tools import get_tool, list_tools, validate_arguments

logger = logging.getLogger(__name__)


class RequestState(Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


class Dispatcher:
    """Handles initialize, ping, tools/list and tools/call"""

    def __init__(self, catalog: CatalogClient, server: ServerConfig):
        self.catalog = catalog
        self.server = server
        self._handlers = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    async def dispatch(self, message: dict) -> Reply | None:
        """Handle one decoded message, returning the reply to send on the stream"""
        if is_response(message):
            logger.debug(f"[DISPATCH] Ignoring client response for id={message.get('id')!r}")
            return None

        method = message["method"]
        if is_notification(message):
            logger.debug(f"[DISPATCH] Notification received: {method}")
            return None

        request_id = message.get("id")
        params = message.get("params") or {}
        self._log_state(request_id, method, RequestState.RECEIVED)

        try:
            handler = self._handlers.get(method)
            if handler is None:
                raise MethodNotFound(f"Method not found: {method}")
            if not isinstance(params, dict):
                raise InvalidArguments("params must be an object")
            result = await handler(request_id, params)
        except McpError as e:
            self._log_state(request_id, method, RequestState.FAILED)
            logger.warning(f"[DISPATCH] {method} (id={request_id!r}) failed: {e.message}")
            return Reply(request_id, error=e)
        except Exception as e:
            self._log_state(request_id, method, RequestState.FAILED)
            logger.exception(f"[DISPATCH] {method} (id={request_id!r}) raised")
            return Reply(request_id, error=McpError(f"Internal error: {e}"))

        self._log_state(request_id, method, RequestState.COMPLETED)
        return Reply(request_id, result=result)

    def list_tools(self) -> dict[str, Any]:
        """Return a JSON-serializable listing of all registered tools."""
        return {"tools": [tool.to_descriptor() for tool in list_tools()]}

    async def call_tool(self, name: Any, arguments: Any, request_id: Any = None) -> dict[str, Any]:
        """Validate and run one tool.

        Catalog failures come back as a result with isError set; only
        validation problems raise.

        Raises:
            UnknownTool: If name is not registered
            InvalidArguments: If the arguments don't satisfy the tool's schema
        """
        if not isinstance(name, str):
            raise InvalidArguments("Tool name must be a string")
        tool = get_tool(name)
        arguments = validate_arguments(tool, arguments)
        self._log_state(request_id, "tools/call", RequestState.VALIDATED)

        self._log_state(request_id, "tools/call", RequestState.EXECUTING)
        try:
            products = await tool.handler(self.catalog, arguments)
        except UpstreamError as e:
            logger.error(f"[DISPATCH] Tool {name} failed upstream: {e}")
            return {"content": [{"type": "text", "text": f"Error: {e}"}], "isError": True}

        payload = json.dumps([product.to_dict() for product in products], indent=2)
        return {"content": [{"type": "text", "text": payload}], "isError": False}

    async def _initialize(self, request_id, params: dict) -> dict:
        client_info = params.get("clientInfo") or {}
        logger.info(f"[DISPATCH] Initialize from client {client_info.get('name', 'unknown')} (protocol {params.get('protocolVersion')})")
        return {
            "protocolVersion": self.server.protocol_version,
            "capabilities": {
                "tools": {},
                "experimental": {},
                "prompts": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
            },
            "serverInfo": {"name": self.server.name, "version": self.server.version},
        }

    async def _ping(self, request_id, params: dict) -> dict:
        return {}

    async def _tools_list(self, request_id, params: dict) -> dict:
        return self.list_tools()

    async def _tools_call(self, request_id, params: dict) -> dict:
        return await self.call_tool(params.get("name"), params.get("arguments"), request_id=request_id)

    @staticmethod
    def _log_state(request_id, method: str, state: RequestState) -> None:
        logger.debug(f"[DISPATCH] {method} (id={request_id!r}) -> {state.value}")
