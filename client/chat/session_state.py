"""
Client session state.

ChatSession follows one client through
Disconnected -> Connected -> AwaitingLogin -> LoggedIn.
It keeps the cached roster and the ordered message log, and it is driven only
by events from the server plus the two user actions (claim a username, send a
message). Listeners are attached to the connection once, when the session is
created.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from common.constants import Events
from common.protocol_definitions import (
    ChatMessage, RosterEntry,
    create_chat_message, create_set_username_message, create_send_message,
    message_from_payload, roster_from_payload
)
from client.chat.chat_client import ChatClient
from client.utils.logger import logger


class ConnectionStatus(Enum):
    DISCONNECTED = 'disconnected'
    CONNECTED = 'connected'
    AWAITING_LOGIN = 'awaitingLogin'
    LOGGED_IN = 'loggedIn'


@dataclass
class ClientViewState:
    """Everything a view needs to render one client."""
    connection_status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    session_id: Optional[str] = None
    local_username: Optional[str] = None
    roster: List[RosterEntry] = field(default_factory=list)
    logged_in: bool = False
    message_log: List[ChatMessage] = field(default_factory=list)


ChangeHandler = Callable[[str, ClientViewState], None]


class ChatSession:
    """Client-side state machine for one chat session."""

    def __init__(self, client: ChatClient, clock: Callable[[], datetime] = datetime.now):
        self.client = client
        self.clock = clock
        self.state = ClientViewState()
        self.change_handler: Optional[ChangeHandler] = None
        self._pending_username: Optional[str] = None
        self._listeners_registered = False
        self._register_listeners()

    def _register_listeners(self):
        if self._listeners_registered:
            return
        self.client.on(Events.WELCOME, self._on_welcome)
        self.client.on(Events.LOGGED_IN, self._on_logged_in)
        self.client.on(Events.UPDATE_ONLINE_USERS_LIST, self._on_update_online_users)
        self.client.on(Events.NEW_MESSAGE, self._on_new_message)
        self.client.on_connect(self._on_transport_connect)
        self.client.on_disconnect(self._on_transport_disconnect)
        self._listeners_registered = True

    def set_change_handler(self, handler: ChangeHandler):
        """Set the callback invoked after each applied update."""
        self.change_handler = handler

    def _notify(self, reason: str):
        if self.change_handler is not None:
            self.change_handler(reason, self.state)

    @property
    def connection_status(self) -> ConnectionStatus:
        return self.state.connection_status

    @property
    def logged_in(self) -> bool:
        return self.state.logged_in

    @property
    def roster(self) -> List[RosterEntry]:
        return list(self.state.roster)

    @property
    def message_log(self) -> List[ChatMessage]:
        return list(self.state.message_log)

    @property
    def can_claim_username(self) -> bool:
        return self.state.connection_status is ConnectionStatus.CONNECTED

    @property
    def awaiting_login(self) -> bool:
        """A username was claimed on this connection and loggedIn has not arrived yet."""
        return self.state.connection_status is ConnectionStatus.AWAITING_LOGIN

    @property
    def can_send_message(self) -> bool:
        return self.state.logged_in and self.client.connected

    # Transport events

    async def _on_transport_connect(self):
        # Every connection is a fresh session; anything from a previous one is stale
        self.state = ClientViewState(connection_status=ConnectionStatus.CONNECTED)
        self._pending_username = None
        self._notify('connect')

    async def _on_transport_disconnect(self):
        self.state.connection_status = ConnectionStatus.DISCONNECTED
        self.state.session_id = None
        self.state.roster = []
        self.state.logged_in = False
        self._pending_username = None
        self._notify('disconnect')

    # Protocol events

    async def _on_welcome(self, payload: dict):
        info = payload.get('connectionInfo') or {}
        if isinstance(info, dict):
            self.state.session_id = info.get('sessionId')
            logger.show_welcome(info)
        self._notify(Events.WELCOME)

    async def _on_logged_in(self, payload: dict):
        self.state.roster = roster_from_payload(payload)
        self.state.logged_in = True
        self.state.connection_status = ConnectionStatus.LOGGED_IN
        if self._pending_username is not None:
            self.state.local_username = self._pending_username
            self._pending_username = None
        self._notify(Events.LOGGED_IN)

    async def _on_update_online_users(self, payload: dict):
        self.state.roster = roster_from_payload(payload)
        self._notify(Events.UPDATE_ONLINE_USERS_LIST)

    async def _on_new_message(self, payload: dict):
        self._append_message(message_from_payload(payload))
        self._notify(Events.NEW_MESSAGE)

    def _append_message(self, message: ChatMessage):
        # Always append to the log held right now, never to an earlier copy
        self.state.message_log.append(message)

    # User actions

    async def claim_username(self, username: str) -> bool:
        """Ask the server for a display name. Login is applied only when loggedIn arrives.

        Only one claim may be outstanding per connection.
        """
        if not self.can_claim_username:
            logger.warning(f"Cannot claim username in state {self.state.connection_status.value}")
            return False

        self._pending_username = username
        self.state.connection_status = ConnectionStatus.AWAITING_LOGIN
        self._notify(Events.SET_USERNAME)
        logger.show_login_info(username)

        if await self.client.send_message(create_set_username_message(username)):
            return True
        if self.state.connection_status is ConnectionStatus.AWAITING_LOGIN:
            # Nothing went out; the claim can be tried again
            self.state.connection_status = ConnectionStatus.CONNECTED
            self._pending_username = None
        return False

    async def send_message(self, text: str) -> bool:
        """Append a message locally and send it to everybody else."""
        if not self.can_send_message:
            logger.warning("Cannot send a message before logging in")
            return False

        message = create_chat_message(self.state.local_username or '', text, self.clock())
        self._append_message(message)
        self._notify(Events.SEND_MESSAGE)
        return await self.client.send_message(create_send_message(message))
