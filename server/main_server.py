#!/usr/bin/env python3
"""
LAN Chat Session Server - Main Entry Point

This is the main entry point for the server application.
It accepts TCP connections, reads line-delimited JSON events and hands them to
the chat coordinator.
"""

import argparse
import asyncio
import logging
from typing import Optional

from common.constants import Events, DEFAULT_SERVER_HOST, DEFAULT_PORT
from common.protocol_definitions import ProtocolError, decode_event
from server.chat.chat_server import ChatServer
from server.utils.config import ServerConfig
from server.utils.logger import logger


class ChatSessionServer:
    """Main server class that wires the transport to the coordinator."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 logs_dir: Optional[str] = None, debug: bool = False):
        self.config = ServerConfig(host, port, logs_dir, debug)
        self.chat_server = ChatServer(write_timeout=self.config.write_timeout)
        self.server: Optional[asyncio.AbstractServer] = None

        log_settings = self.config.get_log_settings()
        logger.configure(
            logs_dir=log_settings['logs_dir'],
            log_level=logging.DEBUG if log_settings['debug'] else logging.INFO
        )

    async def dispatch(self, session_id: str, msg_type: str, message: dict):
        """Route one inbound event to the coordinator."""
        if msg_type == Events.SET_USERNAME:
            username = message.get('username')
            if not isinstance(username, str):
                logger.warning(f"setUsername without a string username from sessionId={session_id}")
                return
            await self.chat_server.on_set_username(session_id, username)
        elif msg_type == Events.SEND_MESSAGE:
            await self.chat_server.on_send_message(session_id, message.get('message'))
        else:
            logger.warning(f"Unknown event type '{msg_type}' from sessionId={session_id}")

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        addr = writer.get_extra_info('peername')
        session = await self.chat_server.on_connect(writer)
        session_id = session.session_id

        logger.log_connection(addr, session_id)

        try:
            while True:
                # Read line-delimited JSON
                try:
                    data = await reader.readline()
                except ValueError as e:
                    # Line exceeded the stream limit; readline already discarded it
                    logger.warning(f"Dropped oversized line from sessionId={session_id}: {e}")
                    continue
                if not data:
                    break

                # Validate message size BEFORE parsing
                if len(data) > self.config.max_message_bytes:
                    logger.warning(f"Message too large from sessionId={session_id}: {len(data)} bytes")
                    continue

                try:
                    msg_type, message = decode_event(data)
                except ProtocolError as e:
                    logger.warning(f"Dropped line from sessionId={session_id}: {e}")
                    continue

                logger.debug(f"Received from sessionId={session_id}: {msg_type}")

                try:
                    await self.dispatch(session_id, msg_type, message)
                except Exception as e:
                    logger.error(f"Error processing {msg_type} from sessionId={session_id}: {e}")

        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for sessionId={session_id}")
        except OSError as e:
            logger.error(f"Socket error for sessionId={session_id}: {e}")
        finally:
            await self.chat_server.on_disconnect(session_id)
            logger.debug(f"{self.chat_server.get_participant_count()} users online")

    async def start_server(self) -> asyncio.AbstractServer:
        """Bind the listening socket without blocking."""
        self.server = await asyncio.start_server(
            self.handle_client,
            self.config.host,
            self.config.port,
            limit=self.config.max_message_bytes + 1
        )

        addr = ', '.join(str(sock.getsockname()) for sock in self.server.sockets)
        logger.info(f"Server listening on {addr}")
        return self.server

    async def start(self):
        """Start the server and serve until cancelled."""
        server = await self.start_server()
        async with server:
            await server.serve_forever()

    async def stop(self):
        """Stop accepting connections."""
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()
            self.server = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='LAN Chat Session Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'TCP port (default: {DEFAULT_PORT})')
    parser.add_argument('--logs-dir', type=str, default=None,
                        help='Directory for the chat transcript log (default: no transcript)')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    server = ChatSessionServer(
        host=args.host,
        port=args.port,
        logs_dir=args.logs_dir,
        debug=args.debug
    )
    logger.info(f"Server binding to {args.host}:{args.port}")
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")


if __name__ == "__main__":
    main()
