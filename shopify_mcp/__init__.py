# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""MCP server exposing Shopify product search and recommendation tools over SSE"""

__version__ = "1.0.0"
