"""
Chat module for client-side messaging functionality.

Handles:
- Sending and receiving events
- Login state and roster cache
- The ordered message log
"""
