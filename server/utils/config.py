"""
Server configuration module.

This module handles server-side configuration settings.
"""

from typing import Optional

from common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT, MAX_MESSAGE_BYTES, WRITE_TIMEOUT


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 logs_dir: Optional[str] = None, debug: bool = False):
        self.host = host
        self.port = port

        # Logging configuration; no chat transcript unless a dir is given
        self.logs_dir = logs_dir
        self.debug = debug

        # Connection settings
        self.max_message_bytes = MAX_MESSAGE_BYTES
        self.write_timeout = WRITE_TIMEOUT

    def get_log_settings(self):
        """Get logging settings."""
        return {
            'logs_dir': self.logs_dir,
            'debug': self.debug
        }
