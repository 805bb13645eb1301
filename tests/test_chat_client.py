#!/usr/bin/env python3
"""
Unit tests for client/chat/chat_client.py

Covers handler registration, fire-and-forget sends, dispatch isolation and
reconnection against a loopback server that hangs up after every greeting.
"""

import asyncio
from datetime import datetime
import unittest
from unittest.mock import AsyncMock, patch

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from client.chat.chat_client import ChatClient
from common.constants import Events
from common.protocol_definitions import (
    create_chat_message, create_new_message, create_welcome_message, encode_event
)
from tests.helpers import FakeWriter, wait_for


class TestRegistration(unittest.TestCase):

    def test_same_handler_registered_once(self):
        client = ChatClient()

        async def handler(payload):
            pass

        self.assertTrue(client.on(Events.NEW_MESSAGE, handler))
        self.assertFalse(client.on(Events.NEW_MESSAGE, handler))
        self.assertTrue(client.on(Events.LOGGED_IN, handler))
        self.assertEqual(len(client.handlers[Events.NEW_MESSAGE]), 1)

    def test_hooks_registered_once(self):
        client = ChatClient()

        async def hook():
            pass

        self.assertTrue(client.on_connect(hook))
        self.assertFalse(client.on_connect(hook))
        self.assertTrue(client.on_disconnect(hook))
        self.assertFalse(client.on_disconnect(hook))


class TestSendAndDispatch(unittest.IsolatedAsyncioTestCase):

    async def test_send_without_connection_returns_false(self):
        client = ChatClient()
        self.assertFalse(await client.send_message({"type": Events.SET_USERNAME, "username": "x"}))

    async def test_send_writes_one_line(self):
        client = ChatClient()
        writer = FakeWriter()
        with patch('client.chat.chat_client.asyncio.open_connection',
                   AsyncMock(return_value=(asyncio.StreamReader(), writer))):
            self.assertTrue(await client.connect())

        self.assertTrue(await client.send_message({"type": Events.SET_USERNAME, "username": "alice"}))
        self.assertEqual(writer.buffer, [b'{"type": "setUsername", "username": "alice"}\n'])

    async def test_connect_gives_up_after_retries(self):
        client = ChatClient()
        opener = AsyncMock(side_effect=ConnectionRefusedError("refused"))
        with patch('client.chat.chat_client.asyncio.open_connection', opener):
            self.assertFalse(await client.connect(retry_count=3, base_delay=0))
        self.assertEqual(opener.await_count, 3)
        self.assertFalse(client.connected)

    async def test_failing_handler_does_not_stop_others(self):
        client = ChatClient()
        received = []

        async def broken(payload):
            raise RuntimeError("boom")

        async def working(payload):
            received.append(payload)

        client.on(Events.NEW_MESSAGE, broken)
        client.on(Events.NEW_MESSAGE, working)
        await client.dispatch(Events.NEW_MESSAGE, {"message": {}})

        self.assertEqual(received, [{"message": {}}])

    async def test_unknown_event_is_ignored(self):
        client = ChatClient()
        await client.dispatch("somethingElse", {})


class TestListenAndReconnect(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.accepted = 0

        async def greet_and_hang_up(reader, writer):
            self.accepted += 1
            writer.write(encode_event(create_welcome_message(f"s{self.accepted}")))
            writer.write(b"garbage\n")
            await writer.drain()
            writer.close()

        self.server = await asyncio.start_server(greet_and_hang_up, '127.0.0.1', 0)
        self.port = self.server.sockets[0].getsockname()[1]

    async def asyncTearDown(self):
        self.server.close()
        await self.server.wait_closed()

    async def test_reconnects_and_fires_hooks(self):
        client = ChatClient('127.0.0.1', self.port, reconnect_attempts=5, reconnect_delay_base=0.01)
        welcomes, connects, disconnects = [], [], []

        async def on_welcome(payload):
            welcomes.append(payload["connectionInfo"]["sessionId"])

        async def on_connect():
            connects.append(True)

        async def on_disconnect():
            disconnects.append(True)

        client.on(Events.WELCOME, on_welcome)
        client.on_connect(on_connect)
        client.on_disconnect(on_disconnect)

        self.assertTrue(await client.connect())
        listener = asyncio.create_task(client.listen())

        await wait_for(lambda: len(welcomes) >= 2)
        await client.close()
        await asyncio.wait_for(listener, timeout=2.0)

        self.assertEqual(welcomes[:2], ["s1", "s2"])
        self.assertGreaterEqual(len(connects), 2)
        self.assertEqual(len(disconnects), len(connects))
        self.assertFalse(client.running)

    async def test_stops_when_reconnect_is_exhausted(self):
        client = ChatClient('127.0.0.1', self.port, reconnect_attempts=1, reconnect_delay_base=0.01)
        self.assertTrue(await client.connect())

        self.server.close()
        await self.server.wait_closed()

        await asyncio.wait_for(client.listen(), timeout=2.0)
        self.assertFalse(client.running)
        self.assertFalse(client.connected)


class TestOversizedLines(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        async def send_long_line_then_message(reader, writer):
            writer.write(encode_event(create_welcome_message("s1")))
            writer.write(b"y" * 5000 + b"\n")
            writer.write(encode_event(create_new_message(create_chat_message("bob", "after", datetime(2026, 1, 1)).to_dict())))
            await writer.drain()
            # Hold the connection until the client leaves
            await reader.read()
            writer.close()

        self.server = await asyncio.start_server(send_long_line_then_message, "127.0.0.1", 0)
        self.port = self.server.sockets[0].getsockname()[1]

    async def asyncTearDown(self):
        self.server.close()
        await self.server.wait_closed()

    async def test_long_line_is_skipped_without_reconnecting(self):
        client = ChatClient("127.0.0.1", self.port, reconnect_attempts=1,
                            reconnect_delay_base=0.01, max_message_bytes=1024)
        received, disconnects = [], []

        async def on_new_message(payload):
            received.append(payload["message"]["text"])

        async def on_disconnect():
            disconnects.append(True)

        client.on(Events.NEW_MESSAGE, on_new_message)
        client.on_disconnect(on_disconnect)

        self.assertTrue(await client.connect())
        listener = asyncio.create_task(client.listen())

        await wait_for(lambda: received == ["after"])
        self.assertTrue(client.connected)
        self.assertEqual(disconnects, [])

        await client.close()
        await asyncio.wait_for(listener, timeout=2.0)


if __name__ == '__main__':
    unittest.main()
