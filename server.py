#!/usr/bin/env python3
"""
NoodleSeed MCP Server - Main Entry Point

Serves the NoodleSeed widget catalog to MCP clients over HTTP+SSE.

Usage:
    python server.py [--host HOST] [--port PORT] [--debug] [--assets-dir DIR] [--env-file PATH]

Example:
    python server.py --host localhost --port 8000 --debug
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from noodleseed_mcp.mcp.server import main


if __name__ == "__main__":
    sys.exit(main())
