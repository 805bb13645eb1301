"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from common.constants import CHAT_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, log_level: int = logging.INFO):
        # Set up main logger
        self.logger = logging.getLogger('chat_session_server')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

        # Chat transcript is off until a logs dir is configured
        self.chat_log_path: Optional[Path] = None

    def configure(self, logs_dir: Optional[str] = None, log_level: Optional[int] = None):
        """Apply runtime settings from ServerConfig."""
        if log_level is not None:
            self.logger.setLevel(log_level)
        if logs_dir:
            logs_path = Path(logs_dir)
            logs_path.mkdir(parents=True, exist_ok=True)
            self.chat_log_path = logs_path / CHAT_LOG_FILE
        else:
            self.chat_log_path = None

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr, session_id: str):
        """Log client connection."""
        self.info(f"New connection from {addr}, assigned sessionId={session_id}")

    def log_login(self, username: str, session_id: str):
        """Log user login."""
        self.info(f"User '{username}' logged in with sessionId={session_id}")

    def log_disconnect(self, username: Optional[str], session_id: str):
        """Log session disconnect."""
        if username is None:
            self.info(f"Anonymous session {session_id} disconnected")
        else:
            self.info(f"User {username} (sessionId={session_id}) disconnected")

    def log_chat(self, username: Optional[str], session_id: str, message: dict):
        """Log chat message."""
        text = message.get('text', '') if isinstance(message, dict) else message
        self.info(f"Chat from {username} (sessionId={session_id}): {text}")
        if self.chat_log_path is not None:
            self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | {username} ({session_id}) | {text}")

    def _write_to_file(self, file_path: Path, content: str):
        """Write content to log file."""
        try:
            with open(file_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except OSError as e:
            self.error(f"Failed to write to log file {file_path}: {e}")


# Global logger instance
logger = ServerLogger()
