# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
SSE session transport.

One long-lived GET stream carries every server-to-client frame; client messages
arrive separately on POST and are routed into whichever stream is currently
registered. Only one stream is registered at a time: opening a new one swaps the
slot, and the older stream stops receiving anything posted after the swap.

Responses are written to the session that received the request, so a reply is
never delivered to a stream other than the one its request was posted for. If
that stream has gone away by the time the reply is ready, the reply is dropped.
"""

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator

from shopify_mcp.dispatch import Dispatcher
from shopify_mcp.errors import NoActiveSession
from shopify_mcp.protocol import decode_message, format_comment, format_event, format_message

logger = logging.getLogger(__name__)

_CLOSE = None


class Session:
    """One open SSE stream plus the queue of client messages addressed to it"""

    def __init__(self, messages_path: str = "/messages", keepalive_interval: float = 15.0):
        self.session_id = uuid.uuid4().hex
        self.endpoint = f"{messages_path}?sessionId={self.session_id}"
        self.keepalive_interval = keepalive_interval
        self.closed = False
        self._frames: asyncio.Queue[str | None] = asyncio.Queue()
        self._inbox: asyncio.Queue[dict] = asyncio.Queue()

    async def send(self, envelope: dict) -> bool:
        """Queue one JSON-RPC envelope for the stream. Returns False if the stream is gone."""
        if self.closed:
            logger.debug(f"[SSE] Dropping frame for closed session {self.session_id}: id={envelope.get('id')!r}")
            return False
        await self._frames.put(format_message(envelope))
        return True

    def deliver(self, message: dict) -> None:
        """Hand a decoded client message to this session's pump"""
        if self.closed:
            raise NoActiveSession("SSE client disconnected")
        self._inbox.put_nowait(message)

    async def next_message(self) -> dict:
        return await self._inbox.get()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._frames.put_nowait(_CLOSE)

    async def frames(self) -> AsyncIterator[str]:
        """Yield encoded SSE frames until the session is closed.

        The first frame tells the client where to POST its messages. An SSE
        comment is sent whenever the stream has been idle for keepalive_interval.
        """
        yield format_event("endpoint", self.endpoint)
        while True:
            try:
                frame = await asyncio.wait_for(self._frames.get(), timeout=self.keepalive_interval)
            except asyncio.TimeoutError:
                yield format_comment("ping")
                continue
            if frame is _CLOSE:
                return
            yield frame


class SessionRegistry:
    """Single slot holding the active session.

    set() and clear() are serialized; get() is a plain read and always returns
    either the previous or the new session.
    """

    def __init__(self):
        self._current: Session | None = None
        self._lock = asyncio.Lock()

    def get(self) -> Session | None:
        return self._current

    async def set(self, session: Session) -> Session | None:
        """Make session the active one and return the session it replaced"""
        async with self._lock:
            previous, self._current = self._current, session
            return previous

    async def clear(self, session: Session) -> bool:
        """Clear the slot if it still holds session. Returns whether it did."""
        async with self._lock:
            if self._current is not session:
                return False
            self._current = None
            return True


class SessionTransport:
    """Correlates POSTed client messages with the registered SSE stream"""

    def __init__(self, dispatcher: Dispatcher, messages_path: str = "/messages", keepalive_interval: float = 15.0, registry: SessionRegistry | None = None):
        self.dispatcher = dispatcher
        self.messages_path = messages_path
        self.keepalive_interval = keepalive_interval
        self.registry = registry or SessionRegistry()
        self._pumps: dict[str, asyncio.Task] = {}
        self._inflight: set[asyncio.Task] = set()

    async def open_stream(self) -> Session:
        """Register a new stream as the active session and start relaying to it"""
        session = Session(self.messages_path, self.keepalive_interval)
        previous = await self.registry.set(session)
        if previous is not None:
            logger.info(f"[SSE] Session {session.session_id} replaces {previous.session_id}")
        else:
            logger.info(f"[SSE] Session {session.session_id} opened")
        self._pumps[session.session_id] = asyncio.create_task(self._pump(session))
        return session

    async def close_stream(self, session: Session) -> None:
        """Tear down a stream whose client went away"""
        session.close()
        pump = self._pumps.pop(session.session_id, None)
        if pump is not None:
            pump.cancel()
        if await self.registry.clear(session):
            logger.info(f"[SSE] Session {session.session_id} closed, no active session")
        else:
            logger.info(f"[SSE] Superseded session {session.session_id} closed")

    async def post_message(self, raw: bytes | str, session_id: str | None = None) -> str:
        """Accept one client message for the active session.

        Returns the acknowledgement text; the reply itself goes out on the stream.

        Raises:
            NoActiveSession: If no stream is registered
            ParseError: If the body is not JSON
            InvalidRequest: If the body is not a JSON-RPC message
        """
        session = self.registry.get()
        if session is None:
            logger.warning("[SSE] Message received with no active SSE client")
            raise NoActiveSession()

        message = decode_message(raw)
        if session_id and session_id != session.session_id:
            logger.warning(f"[SSE] Message for session {session_id} routed to active session {session.session_id}")

        session.deliver(message)
        logger.debug(f"[SSE] Accepted {message.get('method', 'response')} (id={message.get('id')!r}) for session {session.session_id}")
        return "Accepted"

    async def shutdown(self) -> None:
        """Close the active stream, stop all pumps and cancel dispatches still running"""
        session = self.registry.get()
        if session is not None:
            await self.close_stream(session)
        for pump in self._pumps.values():
            pump.cancel()
        self._pumps.clear()

        inflight = list(self._inflight)
        for task in inflight:
            task.cancel()
        await asyncio.gather(*inflight, return_exceptions=True)

    async def _pump(self, session: Session) -> None:
        # Dispatch starts in arrival order; replies go out as they complete.
        while True:
            message = await session.next_message()
            task = asyncio.create_task(self._process(session, message))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _process(self, session: Session, message: dict) -> None:
        reply = await self.dispatcher.dispatch(message)
        if reply is not None:
            await session.send(reply.to_envelope())
