"""
Client package for the LAN chat session.

This package contains all client-side functionality including:
- Server connection and reconnection
- Session state (login, roster, message log)
- Terminal interface
- Configuration and utilities
"""
