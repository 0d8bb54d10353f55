"""Booking MCP Server - Expose organization, staff and offering management to AI assistants."""
import sys
import asyncio
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, Tool

from booking_core.config import Settings, get_settings
from booking_core.database import build_engine, build_session_factory
from booking_core.gateway import StoreGateway

# Import shared tools, handlers and defaults
from . import tools
from . import handlers
from .defaults import contact_defaults_for

logger = logging.getLogger("booking-mcp")


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout carries the stdio protocol stream."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
        force=True
    )


def build_gateway(settings: Settings) -> StoreGateway:
    """Create a store gateway for the configured database."""
    return StoreGateway(build_session_factory(build_engine(settings.database_url)))


def create_server(gateway: StoreGateway, settings: Optional[Settings] = None) -> Server:
    """Create the MCP server instance with tools bound to ``gateway``."""
    settings = settings or get_settings()
    handler_map = handlers.get_handler_map(contact_defaults_for(settings.staff_contact_synthesis))
    app = Server("booking-mcp")

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List available MCP tools."""
        return tools.get_tools()

    # Arguments are validated by the handlers so failures come back as envelopes
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Any) -> CallToolResult:
        """Handle MCP tool calls by delegating to shared handlers."""
        logger.info(f"Tool call: {name} with arguments: {arguments}")
        return await handlers.dispatch(name, arguments, gateway, handler_map)

    return app


async def probe_store(gateway: StoreGateway) -> None:
    """Exit the process if the store is unreachable."""
    if not await gateway.ping():
        logger.critical("Failed to connect to the database, shutting down")
        sys.exit(1)
    logger.info("Connected to the database")


async def main():
    """Run the MCP server over stdio."""
    settings = get_settings()
    configure_logging(settings.log_level)
    gateway = build_gateway(settings)
    await probe_store(gateway)

    app = create_server(gateway, settings)
    logger.info(f"MCP Server starting on stdio with {len(tools.get_tools())} tools")
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
