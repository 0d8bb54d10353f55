"""Session table for the streamable HTTP transport.

Each MCP client that initializes over HTTP gets its own transport, keyed by the
``mcp-session-id`` header the server hands back. ``SessionStore`` owns that
mapping; the HTTP app receives one at construction instead of keeping a
module-level dict.
"""
import logging
from typing import Generic, Optional, Protocol, TypeVar

logger = logging.getLogger("booking-mcp.sessions")


class Terminable(Protocol):
    async def terminate(self) -> None: ...


T = TypeVar("T", bound=Terminable)


class SessionStore(Generic[T]):
    """In-process map of session id to live transport."""

    def __init__(self):
        self._sessions: dict[str, T] = {}

    def create(self, session_id: str, transport: T) -> T:
        """Register a new session. Re-using a live id is a programming error."""
        if session_id in self._sessions:
            raise KeyError(f"Session {session_id} already exists")
        self._sessions[session_id] = transport
        logger.info(f"Session {session_id} created ({len(self._sessions)} active)")
        return transport

    def lookup(self, session_id: Optional[str]) -> Optional[T]:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def evict(self, session_id: str) -> Optional[T]:
        """Forget a session. Returns the removed transport, if any."""
        transport = self._sessions.pop(session_id, None)
        if transport is not None:
            logger.info(f"Session {session_id} evicted ({len(self._sessions)} active)")
        return transport

    async def close_all(self) -> None:
        """Terminate and forget every session (server shutdown)."""
        for session_id in list(self._sessions):
            transport = self._sessions.pop(session_id)
            await transport.terminate()
        logger.info("All sessions closed")

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
