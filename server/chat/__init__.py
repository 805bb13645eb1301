"""
Chat module for server-side messaging functionality.

Handles:
- Session registry
- User presence tracking
- Chat message broadcasting
"""
