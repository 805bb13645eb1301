#!/usr/bin/env python3
"""
LAN Chat Session Server - Main Entry Point

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0)
    --port PORT           TCP port (default: 3005)
    --logs-dir DIR        Write a chat transcript to DIR/chat_history.log
    --debug               Enable debug logging
"""

from server.main_server import main


if __name__ == "__main__":
    main()
