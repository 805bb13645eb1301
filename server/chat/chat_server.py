"""
Chat server module.

This module handles server-side session, presence and message broadcast.

ChatServer owns the session registry and the roster. Every mutation runs
under one asyncio lock together with the broadcast it triggers, so a roster
snapshot sent to clients always reflects the change that caused it and two
fan-outs never interleave.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from common.constants import WRITE_TIMEOUT
from common.protocol_definitions import (
    RosterEntry, encode_event,
    create_welcome_message, create_logged_in_message,
    create_update_online_users_message, create_new_message
)
from server.utils.logger import logger


@dataclass
class Session:
    """One live connection and its identity state."""
    session_id: str
    writer: asyncio.StreamWriter
    username: Optional[str] = None
    stalled: bool = False  # Stopped reading; nothing more is written to it
    connected_at: str = field(default_factory=lambda: datetime.now().isoformat())


class ChatServer:
    """Server-side chat functionality."""

    def __init__(self, write_timeout: float = WRITE_TIMEOUT):
        self.write_timeout = write_timeout  # Seconds a peer may take to accept one event
        self.sessions: Dict[str, Session] = {}  # sessionId -> session
        self.roster: Dict[str, RosterEntry] = {}  # sessionId -> entry, login order
        self.lock = asyncio.Lock()  # Serializes mutations and their broadcasts

    def get_roster(self) -> List[RosterEntry]:
        """Snapshot of the roster in login order."""
        return list(self.roster.values())

    def get_participant_count(self) -> int:
        """Get the number of logged-in sessions."""
        return len(self.roster)

    def new_session_id(self) -> str:
        return uuid.uuid4().hex

    async def _write(self, session: Session, data: bytes) -> bool:
        """Write one encoded event. Failures and stalled peers are logged and dropped."""
        if session.stalled:
            return False
        try:
            session.writer.write(data)
            await asyncio.wait_for(session.writer.drain(), timeout=self.write_timeout)
            return True
        except asyncio.TimeoutError:
            # The read loop sees EOF and runs on_disconnect once the lock is free
            logger.warning(f"sessionId={session.session_id} stopped reading, dropping connection")
            session.stalled = True
            session.writer.transport.abort()
            return False
        except Exception as e:
            logger.error(f"Failed to send to sessionId={session.session_id}: {e}")
            return False

    async def _broadcast(self, message: dict, exclude_id: Optional[str] = None) -> int:
        """
        Send a message to every connected session except ``exclude_id``.

        Must be called with ``self.lock`` held. Returns the number of
        successful deliveries.
        """
        msg_data = encode_event(message)
        delivered = 0
        for session_id, session in list(self.sessions.items()):
            if exclude_id is not None and session_id == exclude_id:
                continue
            if await self._write(session, msg_data):
                delivered += 1
        logger.debug(f"[BROADCAST] type={message.get('type')} delivered to {delivered} sessions, exclude={exclude_id}")
        return delivered

    async def on_connect(self, writer: asyncio.StreamWriter) -> Session:
        """Register a new session and greet it."""
        async with self.lock:
            session = Session(session_id=self.new_session_id(), writer=writer)
            self.sessions[session.session_id] = session
            await self._write(session, encode_event(create_welcome_message(session.session_id)))
        return session

    async def on_set_username(self, session_id: str, username: str):
        """Process a username claim."""
        async with self.lock:
            session = self.sessions.get(session_id)
            if session is None:
                logger.warning(f"setUsername from unknown sessionId={session_id}")
                return

            # No uniqueness check: two sessions may share a display name
            session.username = username
            self.roster[session_id] = RosterEntry(sessionId=session_id, username=username)
            roster = self.get_roster()

            logger.log_login(username, session_id)

            # Requester gets the snapshot; everyone else gets the update
            await self._write(session, encode_event(create_logged_in_message(roster)))
            await self._broadcast(create_update_online_users_message(roster), exclude_id=session_id)

    async def on_send_message(self, session_id: str, message: dict):
        """Relay a chat message to everybody but the sender."""
        async with self.lock:
            session = self.sessions.get(session_id)
            username = session.username if session else None
            logger.log_chat(username, session_id, message)
            await self._broadcast(create_new_message(message), exclude_id=session_id)

    async def on_disconnect(self, session_id: str):
        """Remove a session and notify the remaining ones."""
        async with self.lock:
            session = self.sessions.pop(session_id, None)
            if session is None:
                return

            self.roster.pop(session_id, None)
            logger.log_disconnect(session.username, session_id)

            try:
                session.writer.close()
            except Exception as e:
                logger.debug(f"Error closing writer for sessionId={session_id}: {e}")

            await self._broadcast(create_update_online_users_message(self.get_roster()))
