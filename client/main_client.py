#!/usr/bin/env python3
"""
LAN Chat Session Client - Main Entry Point

This is the main entry point for the client application.
It connects to the server, claims a username and lets the user chat from the
terminal. Rendering is plain log output.
"""

import argparse
import asyncio
import sys
from typing import Optional

from common.constants import Events, DEFAULT_HOST, DEFAULT_PORT
from client.chat.chat_client import ChatClient
from client.chat.session_state import ChatSession, ClientViewState
from client.utils.config import ClientConfig
from client.utils.logger import logger


class ChatSessionClient:
    """Main client class that integrates connection, session state and terminal I/O."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, username: Optional[str] = None):
        self.config = ClientConfig(host, port, username)
        self.chat_client = ChatClient(
            host=self.config.host,
            port=self.config.port,
            reconnect_attempts=self.config.reconnect_attempts,
            reconnect_delay_base=self.config.reconnect_delay_base
        )
        self.session = ChatSession(self.chat_client)
        self.session.set_change_handler(self.render)

        # Registered after the session so its reset runs first
        self.chat_client.on_connect(self._reclaim_username)
        self._claimed_once = False

    def render(self, reason: str, state: ClientViewState):
        """Show state changes in the terminal."""
        if reason == Events.LOGGED_IN:
            logger.show_login_success(state.local_username)
            logger.show_participants(state.roster)
        elif reason == Events.UPDATE_ONLINE_USERS_LIST:
            logger.show_participants(state.roster)
        elif reason == Events.NEW_MESSAGE:
            logger.show_message(state.message_log[-1])
        elif reason == 'disconnect':
            logger.info("[INFO] Disconnected; login will be claimed again after reconnecting")

    async def _reclaim_username(self):
        # A reconnect is a fresh session; claim the same name again
        if self._claimed_once and self.config.username:
            await self.session.claim_username(self.config.username)

    async def claim_username(self, username: str) -> bool:
        self.config.username = username
        self._claimed_once = True
        return await self.session.claim_username(username)

    async def handle_input(self, line: str) -> bool:
        """Handle one line typed by the user. Returns False to quit."""
        text = line.strip()
        if not text:
            return True

        if text == '/quit':
            return False
        if text == '/who':
            logger.show_participants(self.session.roster)
            return True

        if self.session.can_send_message:
            await self.session.send_message(text)
        elif self.session.can_claim_username:
            await self.claim_username(text)
        else:
            logger.warning("[WARN] Waiting for login to complete...")
        return True

    async def interactive_mode(self):
        """Run client with interactive chat input."""
        if not await self.chat_client.connect(retry_count=self.config.connect_attempts):
            return

        if self.config.username:
            await self.claim_username(self.config.username)

        # Start listening for messages
        listener_task = asyncio.create_task(self.chat_client.listen())

        logger.show_interactive_mode_info(self._claimed_once)

        loop = asyncio.get_running_loop()
        try:
            while self.chat_client.running:
                # Blocking read in a worker thread
                user_input = await loop.run_in_executor(None, sys.stdin.readline)
                if not user_input:
                    break
                if not await self.handle_input(user_input):
                    break
        except asyncio.CancelledError:
            pass
        finally:
            await self.chat_client.close()
            listener_task.cancel()
            try:
                await listener_task
            except asyncio.CancelledError:
                pass

            logger.info("[INFO] Disconnected from server")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='LAN Chat Session Client')
    parser.add_argument('--username', type=str, default=None,
                        help='Username for chat (default: asked interactively)')
    parser.add_argument('--server-ip', type=str, default=DEFAULT_HOST,
                        help=f'Server IP address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    client = ChatSessionClient(
        host=args.server_ip,
        port=args.port,
        username=args.username
    )

    try:
        asyncio.run(client.interactive_mode())
    except KeyboardInterrupt:
        print("\n[INFO] Interrupted by user")


if __name__ == "__main__":
    main()
