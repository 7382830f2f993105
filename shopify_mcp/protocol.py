# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
JSON-RPC envelope helpers and Server-Sent Events framing.

Every server-to-client frame on the stream is one SSE event whose data line
holds a single JSON-RPC envelope.
"""

import json
from dataclasses import dataclass
from typing import Any

from shopify_mcp.errors import InvalidRequest, McpError, ParseError

JSONRPC_VERSION = "2.0"


@dataclass(frozen=True)
class Reply:
    """Outcome of dispatching one request: either a result or an error, never both"""

    request_id: Any
    result: dict | None = None
    error: McpError | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_envelope(self) -> dict:
        envelope = {"jsonrpc": JSONRPC_VERSION, "id": self.request_id}
        if self.error is not None:
            envelope["error"] = self.error.to_dict()
        else:
            envelope["result"] = self.result if self.result is not None else {}
        return envelope


def decode_message(raw: bytes | str) -> dict:
    """Decode and shape-check one client-to-server message.

    Raises:
        ParseError: If the body is not JSON
        InvalidRequest: If the body is JSON but not a JSON-RPC 2.0 message
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Invalid message: {e}") from e
    try:
        message = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid message: {e}") from e

    if not isinstance(message, dict):
        raise InvalidRequest("Invalid message: expected a JSON object")
    if message.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidRequest("Invalid message: jsonrpc must be '2.0'")
    if "method" in message:
        if not isinstance(message["method"], str):
            raise InvalidRequest("Invalid message: method must be a string")
    elif "result" not in message and "error" not in message:
        raise InvalidRequest("Invalid message: missing method")
    return message


def is_notification(message: dict) -> bool:
    return "method" in message and "id" not in message


def is_response(message: dict) -> bool:
    return "method" not in message


def format_event(event: str, data: str) -> str:
    """Encode one SSE event. Multi-line data is split across data lines."""
    lines = [f"event: {event}"]
    for line in data.splitlines() or [""]:
        lines.append(f"data: {line}")
    return "\n".join(lines) + "\n\n"


def format_message(envelope: dict) -> str:
    return format_event("message", json.dumps(envelope, separators=(",", ":")))


def format_comment(text: str) -> str:
    return f": {text}\n\n"
