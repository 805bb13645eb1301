"""
Chat client module.

This module owns the client side of the connection: it opens the TCP
stream, writes events, reads events and hands them to registered handlers,
and reconnects with exponential backoff when the server goes away.
"""

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional

from common.constants import (
    DEFAULT_HOST, DEFAULT_PORT, MAX_MESSAGE_BYTES, MAX_RETRY_ATTEMPTS,
    RECONNECT_ATTEMPTS, RECONNECT_DELAY_BASE
)
from common.protocol_definitions import ProtocolError, decode_event, encode_event
from client.utils.logger import logger

EventHandler = Callable[[dict], Awaitable[None]]
ConnectionHook = Callable[[], Awaitable[None]]


class ChatClient:
    """Client-side connection to the chat server."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                 reconnect_attempts: int = RECONNECT_ATTEMPTS,
                 reconnect_delay_base: float = RECONNECT_DELAY_BASE,
                 max_message_bytes: int = MAX_MESSAGE_BYTES):
        self.host = host
        self.port = port
        self.max_message_bytes = max_message_bytes
        self.reconnect_attempts = reconnect_attempts
        self.reconnect_delay_base = reconnect_delay_base

        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.running = False
        self.connected = False
        self._closing = False

        self.handlers: Dict[str, List[EventHandler]] = {}
        self.connect_hooks: List[ConnectionHook] = []
        self.disconnect_hooks: List[ConnectionHook] = []

    def on(self, event: str, handler: EventHandler) -> bool:
        """Register a handler for an inbound event. Returns False if already registered."""
        handlers = self.handlers.setdefault(event, [])
        if handler in handlers:
            return False
        handlers.append(handler)
        return True

    def on_connect(self, hook: ConnectionHook) -> bool:
        """Register a hook fired after every successful (re)connection."""
        if hook in self.connect_hooks:
            return False
        self.connect_hooks.append(hook)
        return True

    def on_disconnect(self, hook: ConnectionHook) -> bool:
        """Register a hook fired whenever the connection drops or is closed."""
        if hook in self.disconnect_hooks:
            return False
        self.disconnect_hooks.append(hook)
        return True

    async def connect(self, retry_count: int = MAX_RETRY_ATTEMPTS, base_delay: float = 1.0) -> bool:
        """Establish connection to the server with retry logic and exponential backoff."""
        self._closing = False
        return await self._open(retry_count, base_delay)

    async def _open(self, retry_count: int, base_delay: float = 1.0) -> bool:
        attempt = 0

        while attempt < retry_count:
            try:
                reader, writer = await asyncio.open_connection(
                    self.host, self.port, limit=self.max_message_bytes + 1
                )
            except OSError as e:
                attempt += 1
                logger.log_connection(self.host, self.port, False)
                logger.log_error("connection", e)

                if attempt < retry_count:
                    delay = base_delay * (2 ** (attempt - 1))  # Exponential backoff
                    logger.info(f"[INFO] Retrying connection in {delay}s (attempt {attempt}/{retry_count})...")
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"[ERROR] Failed to connect after {retry_count} attempts")
                return False

            if self._closing:
                # close() was called while the connection was being opened
                writer.close()
                return False

            self.reader, self.writer = reader, writer
            logger.log_connection(self.host, self.port, True)
            self.running = True
            self.connected = True
            await self._run_hooks(self.connect_hooks, "connect hook")
            return True
        return False

    async def send_message(self, message: dict) -> bool:
        """Send one event to the server. Fire-and-forget; False if it could not be written."""
        if not self.writer or not self.connected:
            logger.error("[ERROR] Not connected to server")
            return False

        try:
            self.writer.write(encode_event(message))
            await self.writer.drain()
            return True
        except (ConnectionError, OSError) as e:
            logger.error(f"[ERROR] Failed to send message: {e}")
            return False

    async def dispatch(self, event: str, payload: dict):
        """Hand one inbound event to its handlers, in registration order."""
        handlers = self.handlers.get(event)
        if not handlers:
            logger.debug(f"No handler for event '{event}'")
            return
        for handler in list(handlers):
            try:
                await handler(payload)
            except Exception as e:
                logger.error(f"[ERROR] Handler for '{event}' failed: {e}")

    async def listen(self):
        """Listen for incoming events with automatic reconnection."""
        while self.running:
            try:
                data = await self.reader.readline()
            except asyncio.CancelledError:
                logger.info("[INFO] Listener cancelled")
                raise
            except ValueError as e:
                # Line longer than the stream limit; readline already discarded it
                logger.warning(f"[WARNING] Dropped oversized line: {e}")
                continue
            except (ConnectionError, OSError) as e:
                logger.error(f"[ERROR] Connection lost: {e}")
                data = b''

            if not self.running:
                break

            if not data:
                logger.info("[INFO] Server closed connection, attempting to reconnect...")
                await self._drop_connection()
                if not await self._reconnect():
                    break
                continue

            try:
                event, payload = decode_event(data)
            except ProtocolError as e:
                logger.error(f"[ERROR] Malformed event received: {e}")
                continue

            await self.dispatch(event, payload)

    async def _reconnect(self) -> bool:
        """Reconnect to the server with exponential backoff."""
        for attempt in range(self.reconnect_attempts):
            delay = self.reconnect_delay_base * (2 ** attempt)
            logger.info(f"[INFO] Attempting to reconnect in {delay}s (attempt {attempt + 1}/{self.reconnect_attempts})...")
            await asyncio.sleep(delay)
            if self._closing:
                return False

            if await self._open(retry_count=1):
                logger.info("[INFO] Reconnected successfully!")
                return True

        logger.error("[ERROR] Failed to reconnect after multiple attempts")
        self.running = False
        return False

    async def close(self):
        """Close the connection on purpose; no reconnection afterwards."""
        self._closing = True
        self.running = False
        await self._drop_connection()

    async def _drop_connection(self):
        was_connected = self.connected
        self.connected = False

        writer, self.writer = self.writer, None
        if writer is not None:
            try:
                writer.close()
                await writer.wait_closed()
            except (ConnectionError, OSError) as e:
                logger.debug(f"Error while closing connection: {e}")

        if was_connected:
            await self._run_hooks(self.disconnect_hooks, "disconnect hook")

    async def _run_hooks(self, hooks: List[ConnectionHook], name: str):
        for hook in list(hooks):
            try:
                await hook()
            except Exception as e:
                logger.error(f"[ERROR] {name} failed: {e}")
