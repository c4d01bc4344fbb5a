"""
NoodleSeed MCP Server

Serves a catalog of interactive widgets to MCP clients over a long-lived
SSE stream plus a per-message POST endpoint.
"""

__version__ = "2.0.0"
