"""
Shared package for the LAN chat session.

Holds the constants and event definitions used by both client and server.
"""
