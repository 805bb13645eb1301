"""
Shared constants for the LAN chat session.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 3005

# Limits
MAX_MESSAGE_BYTES = 1024 * 1024  # one JSON line, 1MB
WRITE_TIMEOUT = 5.0  # seconds to flush one event to a peer

# Reconnection
MAX_RETRY_ATTEMPTS = 3
RECONNECT_ATTEMPTS = 5
RECONNECT_DELAY_BASE = 1.0  # seconds, doubled each attempt

# Logging
CHAT_LOG_FILE = 'chat_history.log'


# Event names
class Events:
    # Server to Client
    WELCOME = 'welcome'
    LOGGED_IN = 'loggedIn'
    UPDATE_ONLINE_USERS_LIST = 'updateOnlineUsersList'
    NEW_MESSAGE = 'newMessage'

    # Client to Server
    SET_USERNAME = 'setUsername'
    SEND_MESSAGE = 'sendMessage'
