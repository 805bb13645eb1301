#!/usr/bin/env python3
"""
Unit tests for client/main_client.py

Checks how typed lines are routed: first a username claim, then chat
messages, and re-claiming the same name after a reconnect.
"""

import asyncio
import unittest
from unittest.mock import AsyncMock, patch

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from client.main_client import ChatSessionClient, build_parser
from common.constants import Events
from common.protocol_definitions import RosterEntry, create_logged_in_message
from tests.helpers import FakeWriter


class TestInputRouting(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.app = ChatSessionClient(host='127.0.0.1', port=1)

    async def connect(self) -> FakeWriter:
        writer = FakeWriter()
        with patch('client.chat.chat_client.asyncio.open_connection',
                   AsyncMock(return_value=(asyncio.StreamReader(), writer))):
            self.assertTrue(await self.app.chat_client.connect())
        return writer

    async def log_in(self, username: str):
        await self.app.chat_client.dispatch(
            Events.LOGGED_IN, create_logged_in_message([RosterEntry("s1", username)]))

    async def test_first_line_claims_then_lines_are_messages(self):
        writer = await self.connect()

        self.assertTrue(await self.app.handle_input("alice\n"))
        self.assertEqual(writer.of_type(Events.SET_USERNAME)[0]["username"], "alice")

        # Still waiting for loggedIn: nothing is sent
        self.assertTrue(await self.app.handle_input("too soon\n"))
        self.assertEqual(len(writer.events()), 1)

        await self.log_in("alice")
        self.assertTrue(await self.app.handle_input("hello\n"))

        sent = writer.of_type(Events.SEND_MESSAGE)
        self.assertEqual(len(sent), 1)
        self.assertEqual(sent[0]["message"]["sender"], "alice")
        self.assertEqual(sent[0]["message"]["text"], "hello")

    async def test_commands(self):
        await self.connect()
        self.assertTrue(await self.app.handle_input("/who\n"))
        self.assertTrue(await self.app.handle_input("   \n"))
        self.assertFalse(await self.app.handle_input("/quit\n"))

    async def test_reconnect_claims_same_name(self):
        await self.connect()
        await self.app.handle_input("alice\n")
        await self.log_in("alice")
        await self.app.chat_client.close()

        writer = await self.connect()

        self.assertEqual(writer.of_type(Events.SET_USERNAME), [{"type": Events.SET_USERNAME, "username": "alice"}])
        self.assertFalse(self.app.session.logged_in)
        self.assertTrue(self.app.session.awaiting_login)

    async def test_first_connect_does_not_claim(self):
        writer = await self.connect()
        self.assertEqual(writer.buffer, [])


class TestParser(unittest.TestCase):

    def test_defaults(self):
        args = build_parser().parse_args([])
        self.assertEqual(args.server_ip, 'localhost')
        self.assertEqual(args.port, 3005)
        self.assertIsNone(args.username)

    def test_overrides(self):
        args = build_parser().parse_args(['--username', 'bob', '--server-ip', '10.0.0.2', '--port', '4000'])
        self.assertEqual((args.username, args.server_ip, args.port), ('bob', '10.0.0.2', 4000))


if __name__ == '__main__':
    unittest.main()
