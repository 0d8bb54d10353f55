"""Booking MCP Server - Model Context Protocol integration.

This package exposes organization, staff and offering management to AI
assistants as MCP tools.

Modules:
- server: stdio MCP server implementation
- http_app: streamable HTTP MCP server implementation
- sessions: session table for the HTTP transport
- formatters: Response envelope formatting
- tools: MCP tool definitions
- handlers: Tool implementation handlers
- defaults: Staff contact default generation
"""

__version__ = "1.0.0"

# Export shared modules for use by both transports
from . import formatters
from . import tools
from . import handlers

__all__ = ["formatters", "tools", "handlers", "__version__"]
