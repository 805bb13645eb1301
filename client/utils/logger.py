"""
Client logging module.

This module handles client-side logging functionality, including the plain
terminal rendering used by the interactive client.
"""

import logging
import sys


class ClientLogger:
    """Client logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_session_client')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

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

    def log_connection(self, host: str, port: int, success: bool):
        """Log connection attempt."""
        status = "Connected" if success else "Failed to connect"
        self.info(f"{status} to {host}:{port}")

    def show_welcome(self, connection_info: dict):
        """Show the server greeting."""
        self.info(f"[WELCOME] {connection_info.get('message', connection_info)}")

    def show_login_info(self, username: str):
        """Show login information."""
        self.info(f"[INFO] Logging in as '{username}'...")

    def show_login_success(self, username: str):
        """Show login success."""
        self.info(f"[SUCCESS] Logged in as '{username}'")

    def show_participants(self, participants: list):
        """Show participant list."""
        if not participants:
            self.info("[INFO] Log in to check who's online!")
            return
        self.info(f"[INFO] Connected users ({len(participants)}):")
        for p in participants:
            self.info(f"  - {p.username}")

    def show_message(self, message):
        """Show one chat message."""
        self.info(f"[CHAT] {message.sender} | {message.text} at {message.createdAt}")

    def show_interactive_mode_info(self, username_claimed: bool):
        """Show interactive mode information."""
        if not username_claimed:
            self.info("[INFO] Type your username and press Enter")
        self.info("[INFO] Type messages to chat (Ctrl+C to exit)")
        self.info("[INFO] Commands: /who /quit")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ClientLogger()
