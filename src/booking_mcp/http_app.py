"""Booking MCP over streamable HTTP.

Routes:
- POST /mcp without a session id and with an ``initialize`` body opens a session
- POST/GET/DELETE /mcp with a known ``mcp-session-id`` header reuse it
  (DELETE terminates it)
- anything else on /mcp is rejected with a JSON-RPC error
- GET /health reports store connectivity
"""
import json
import logging
from contextlib import asynccontextmanager
from typing import Optional
from uuid import uuid4

import anyio
import uvicorn
from anyio.abc import TaskGroup
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mcp.server import Server
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from booking_core.config import Settings, get_settings
from booking_core.gateway import StoreGateway

from .server import build_gateway, configure_logging, create_server, probe_store
from .sessions import SessionStore

logger = logging.getLogger("booking-mcp.http")

BAD_SESSION = {
    "jsonrpc": "2.0",
    "error": {"code": -32000, "message": "Bad Request: No valid session ID provided"},
    "id": None,
}


def is_initialize_request(body: bytes) -> bool:
    """Whether a POST body carries an MCP ``initialize`` request."""
    try:
        message = json.loads(body)
    except ValueError:
        return False
    messages = message if isinstance(message, list) else [message]
    return any(isinstance(m, dict) and m.get("method") == "initialize" for m in messages)


class McpEndpoint:
    """ASGI endpoint routing /mcp requests to per-session transports."""

    def __init__(self, server: Server, sessions: SessionStore):
        self.server = server
        self.sessions = sessions
        self.task_group: Optional[TaskGroup] = None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        transport = self.sessions.lookup(session_id)

        if transport is None:
            body = await request.body() if request.method == "POST" else b""
            if session_id is not None or not is_initialize_request(body):
                logger.warning(f"Rejected {request.method} /mcp (session: {session_id})")
                await JSONResponse(BAD_SESSION, status_code=400)(scope, receive, send)
                return
            transport = await self._open_session()
            receive = _replay(body, receive)

        await transport.handle_request(scope, receive, send)

        if request.method == "DELETE" and transport.mcp_session_id:
            self.sessions.evict(transport.mcp_session_id)

    async def _open_session(self) -> StreamableHTTPServerTransport:
        if self.task_group is None:
            raise RuntimeError("MCP endpoint is not running (application lifespan not started)")

        transport = StreamableHTTPServerTransport(mcp_session_id=uuid4().hex)
        session_id = transport.mcp_session_id

        async def run_server(*, task_status=anyio.TASK_STATUS_IGNORED):
            async with transport.connect() as (read_stream, write_stream):
                task_status.started()
                try:
                    await self.server.run(
                        read_stream,
                        write_stream,
                        self.server.create_initialization_options(),
                    )
                finally:
                    self.sessions.evict(session_id)

        await self.task_group.start(run_server)
        return self.sessions.create(session_id, transport)


def _replay(body: bytes, receive: Receive) -> Receive:
    """Re-deliver an already consumed request body, then defer to ``receive``."""
    sent = False

    async def replay():
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


def create_app(
    gateway: StoreGateway,
    settings: Optional[Settings] = None,
    sessions: Optional[SessionStore] = None,
) -> FastAPI:
    """Create the FastAPI application serving MCP over HTTP."""
    settings = settings or get_settings()
    sessions = sessions if sessions is not None else SessionStore()
    endpoint = McpEndpoint(create_server(gateway, settings), sessions)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await probe_store(gateway)
        async with anyio.create_task_group() as task_group:
            endpoint.task_group = task_group
            logger.info(f"MCP HTTP server listening on {settings.http_host}:{settings.http_port}/mcp")
            try:
                yield
            finally:
                logger.info("Shutting down MCP HTTP server")
                await sessions.close_all()
                task_group.cancel_scope.cancel()
                endpoint.task_group = None

    app = FastAPI(title="Booking MCP", version="1.0.0", lifespan=lifespan)
    app.state.sessions = sessions

    # CORS for browser clients; the session header must be readable
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", MCP_SESSION_ID_HEADER],
        expose_headers=[MCP_SESSION_ID_HEADER],
    )

    app.router.routes.append(Route("/mcp", endpoint=endpoint, methods=["GET", "POST", "DELETE"]))

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        connected = await gateway.ping()
        return JSONResponse(
            {"status": "healthy" if connected else "unhealthy", "database": connected, "sessions": len(sessions)},
            status_code=200 if connected else 503,
        )

    return app


def run():
    """Console script entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app = create_app(build_gateway(settings), settings)
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_config=None)


if __name__ == "__main__":
    run()
