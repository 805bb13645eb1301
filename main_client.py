#!/usr/bin/env python3
"""
LAN Chat Session Client - Main Entry Point

Terminal client: the first line typed claims the username (unless
--username is given), every following line is sent as a chat message.

Usage:
    python main_client.py [--username NAME] [--server-ip HOST] [--port PORT]
"""

from client.main_client import main


if __name__ == "__main__":
    main()
