"""
Server package for the LAN chat session.

This package contains all server-side functionality including:
- Client connection management
- Session registry and online-user roster
- Login and chat message broadcasting
- Configuration and utilities
"""
