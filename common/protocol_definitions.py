"""
Protocol definitions for the LAN chat session.

This module defines the message structures and data formats used in communication
between client and server components.

Every event travels as one JSON object per line: the event name sits in the
``type`` field and the payload fields sit next to it.
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Any, Optional, List, Tuple

from common.constants import Events


class ProtocolError(ValueError):
    """Raised when a line on the wire is not a valid event."""


@dataclass(frozen=True)
class RosterEntry:
    """One logged-in session as seen by clients."""
    sessionId: str
    username: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RosterEntry':
        return cls(sessionId=str(data.get('sessionId', '')),
                   username=str(data.get('username', '')))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ChatMessage:
    """Chat message structure. ``createdAt`` is stamped by the sender."""
    sender: str
    text: str
    createdAt: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChatMessage':
        return cls(sender=str(data.get('sender', '')),
                   text=str(data.get('text', '')),
                   createdAt=str(data.get('createdAt', '')))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def format_created_at(moment: Optional[datetime] = None) -> str:
    """Format a local time the way an en-US locale string reads (4/7/2026, 3:05:09 PM)."""
    moment = moment or datetime.now()
    hour = moment.hour % 12 or 12
    meridiem = 'AM' if moment.hour < 12 else 'PM'
    return (f"{moment.month}/{moment.day}/{moment.year}, "
            f"{hour}:{moment.minute:02d}:{moment.second:02d} {meridiem}")


def create_chat_message(sender: str, text: str, moment: Optional[datetime] = None) -> ChatMessage:
    """Build a ChatMessage stamped with the local clock."""
    return ChatMessage(sender=sender, text=text, createdAt=format_created_at(moment))


def roster_to_payload(roster: List[RosterEntry]) -> List[Dict[str, Any]]:
    return [entry.to_dict() for entry in roster]


def roster_from_payload(payload: Dict[str, Any]) -> List[RosterEntry]:
    entries = payload.get('roster') or []
    return [RosterEntry.from_dict(entry) for entry in entries if isinstance(entry, dict)]


def message_from_payload(payload: Dict[str, Any]) -> ChatMessage:
    message = payload.get('message')
    if not isinstance(message, dict):
        message = {}
    return ChatMessage.from_dict(message)


# Server to client

def create_welcome_message(session_id: str) -> Dict[str, Any]:
    """Create a welcome message."""
    return {
        "type": Events.WELCOME,
        "connectionInfo": {
            "sessionId": session_id,
            "message": f"Welcome! Your session id is {session_id}"
        }
    }


def create_logged_in_message(roster: List[RosterEntry]) -> Dict[str, Any]:
    """Create a logged in message."""
    return {
        "type": Events.LOGGED_IN,
        "roster": roster_to_payload(roster)
    }


def create_update_online_users_message(roster: List[RosterEntry]) -> Dict[str, Any]:
    """Create an online users list update message."""
    return {
        "type": Events.UPDATE_ONLINE_USERS_LIST,
        "roster": roster_to_payload(roster)
    }


def create_new_message(message: Dict[str, Any]) -> Dict[str, Any]:
    """Create a new message relay. The sender's record is passed through untouched."""
    return {
        "type": Events.NEW_MESSAGE,
        "message": message
    }


# Client to server

def create_set_username_message(username: str) -> Dict[str, Any]:
    """Create a set username message."""
    return {
        "type": Events.SET_USERNAME,
        "username": username
    }


def create_send_message(message: ChatMessage) -> Dict[str, Any]:
    """Create a send message."""
    return {
        "type": Events.SEND_MESSAGE,
        "message": message.to_dict()
    }


# Framing

def encode_event(message: Dict[str, Any]) -> bytes:
    """Serialize one event to a newline-terminated JSON line."""
    return json.dumps(message).encode('utf-8') + b'\n'


def decode_event(data: bytes) -> Tuple[str, Dict[str, Any]]:
    """
    Parse one line from the wire.

    Returns ``(event_name, payload)``; the payload is the decoded object itself.
    Raises ProtocolError if the line is not a JSON object with a non-empty
    string ``type``.
    """
    try:
        message = json.loads(data.decode('utf-8').strip())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProtocolError(f"Malformed JSON: {e}") from e

    if not isinstance(message, dict):
        raise ProtocolError("Event must be a JSON object")

    msg_type = message.get('type', '')
    if not isinstance(msg_type, str) or len(msg_type) == 0:
        raise ProtocolError("Event has no valid type")

    return msg_type, message
