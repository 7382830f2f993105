#!/usr/bin/env python3
# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Example client for the Shopify MCP server.

Opens the SSE stream, waits for the endpoint event, then posts initialize,
tools/list and tools/call messages and prints the replies that arrive on the stream.
"""

import asyncio
import json
import sys

import aiohttp

# Server configuration
SERVER_URL = "http://localhost:3000"


async def read_events(response: aiohttp.ClientResponse):
    """Yield (event, data) pairs from an SSE response."""
    event, data = "message", []
    async for raw in response.content:
        line = raw.decode("utf-8").rstrip("\r\n")
        if not line:
            if data:
                yield event, "\n".join(data)
            event, data = "message", []
        elif line.startswith(":"):
            continue
        elif line.startswith("event:"):
            event = line[len("event:") :].strip()
        elif line.startswith("data:"):
            data.append(line[len("data:") :].strip())


async def main(keyword: str = "shirt"):
    """Main function to demonstrate the protocol flow."""
    print("🛒 Shopify MCP Server Demo")
    print("=" * 50)

    requests = [
        {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {"protocolVersion": "2024-11-05", "capabilities": {}, "clientInfo": {"name": "example-client", "version": "1.0.0"}}},
        {"jsonrpc": "2.0", "method": "notifications/initialized"},
        {"jsonrpc": "2.0", "id": 2, "method": "tools/list"},
        {"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "search_products", "arguments": {"keyword": keyword}}},
        {"jsonrpc": "2.0", "id": 4, "method": "tools/call", "params": {"name": "recommend_products", "arguments": {}}},
    ]
    pending = {r["id"] for r in requests if "id" in r}

    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=None, sock_read=120)) as session:
        async with session.get(f"{SERVER_URL}/sse") as stream:
            events = read_events(stream)
            event, endpoint = await anext(events)
            if event != "endpoint":
                print(f"❌ Expected endpoint event, got {event}")
                return
            print(f"✅ Stream open, posting to {endpoint}")

            for message in requests:
                async with session.post(f"{SERVER_URL}{endpoint}", json=message) as ack:
                    print(f"📤 {message['method']} -> {ack.status} {await ack.text()}")

            async for event, data in events:
                reply = json.loads(data)
                print(f"\n--- Reply {reply.get('id')} ---")
                print(json.dumps(reply.get("result", reply.get("error")), indent=2))
                pending.discard(reply.get("id"))
                if not pending:
                    break


if __name__ == "__main__":
    asyncio.run(main(*sys.argv[1:2]))
