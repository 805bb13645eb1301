"""
Client configuration module.

This module handles client-side configuration settings.
"""

from typing import Optional

from common.constants import (
    DEFAULT_HOST, DEFAULT_PORT, MAX_RETRY_ATTEMPTS,
    RECONNECT_ATTEMPTS, RECONNECT_DELAY_BASE
)


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, username: Optional[str] = None):
        self.host = host
        self.port = port
        # Claimed after connecting; None means ask the user
        self.username = username

        # Connection settings
        self.connect_attempts = MAX_RETRY_ATTEMPTS
        self.reconnect_attempts = RECONNECT_ATTEMPTS
        self.reconnect_delay_base = RECONNECT_DELAY_BASE
