# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Error types shared by the catalog client, the session transport and the dispatcher.

Protocol errors carry their JSON-RPC code so the dispatcher can encode them
without knowing every subclass.
"""

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class McpError(Exception):
    """Base class for errors that are reported as JSON-RPC error objects"""

    code = INTERNAL_ERROR

    def __init__(self, message: str, data=None):
        super().__init__(message)
        self.message = message
        self.data = data

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class ParseError(McpError):
    code = PARSE_ERROR


class InvalidRequest(McpError):
    code = INVALID_REQUEST


class MethodNotFound(McpError):
    code = METHOD_NOT_FOUND


class InvalidArguments(McpError):
    """A tools/call request whose arguments do not satisfy the tool's input schema"""

    code = INVALID_PARAMS


class UnknownTool(InvalidArguments):
    """A tools/call request naming a tool that is not registered"""

    def __init__(self, name):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class NoActiveSession(Exception):
    """A side-channel message arrived while no SSE stream is open"""

    def __init__(self, message: str = "No active SSE client"):
        super().__init__(message)


class UpstreamError(Exception):
    """The product catalog failed or answered with an unexpected shape"""


class ConfigError(Exception):
    """Required configuration is missing or invalid; the server must not start"""
