"""
Async HTTP client for the OpenCode server, using aiohttp.
"""

import asyncio
import json
import re
from typing import Any

import aiohttp
from pydantic import TypeAdapter, ValidationError

from .config import REQUEST_TIMEOUT
from .models import Message, SessionInfo, SessionSnapshot


class OpenCodeError(Exception):
    """The OpenCode server could not be reached or returned unusable data."""


class ServerStartError(OpenCodeError):
    """A local OpenCode server could not be started."""


_SESSIONS = TypeAdapter(list[SessionInfo])
_MESSAGES = TypeAdapter(list[Message])


def _clean_json(raw: str) -> str:
    """Clean control characters from JSON response"""
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", " ", raw)


class OpenCodeClient:
    """Client for the OpenCode session API.

    Use as an async context manager; the underlying connection pool lives
    as long as the ``async with`` block:

        async with OpenCodeClient("http://127.0.0.1:4096") as client:
            sessions = await client.list_sessions()
    """

    def __init__(self, base_url: str, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "OpenCodeClient":
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_json(self, path: str) -> Any:
        if self._session is None:
            raise RuntimeError("OpenCodeClient used outside 'async with'")
        url = f"{self.base_url}{path}"
        try:
            async with self._session.get(url, headers={"Accept": "application/json"}) as response:
                raw = await response.text()
                if response.status != 200:
                    raise OpenCodeError(
                        f"GET {path} failed with HTTP {response.status}: {raw[:200]}"
                    )
        except asyncio.TimeoutError as e:
            raise OpenCodeError(f"GET {path} timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise OpenCodeError(f"GET {path} failed: {e}") from e

        try:
            return json.loads(_clean_json(raw))
        except json.JSONDecodeError as e:
            raise OpenCodeError(f"GET {path} returned invalid JSON: {e}") from e

    async def list_sessions(self) -> list[SessionInfo]:
        """All sessions known to the server."""
        data = await self._get_json("/session")
        try:
            return _SESSIONS.validate_python(data)
        except ValidationError as e:
            raise OpenCodeError(f"Unexpected session list: {e}") from e

    async def get_session(self, session_id: str) -> SessionInfo:
        """Metadata for one session."""
        data = await self._get_json(f"/session/{session_id}")
        try:
            return SessionInfo.model_validate(data)
        except ValidationError as e:
            raise OpenCodeError(f"Unexpected session {session_id}: {e}") from e

    async def get_messages(self, session_id: str) -> list[Message]:
        """All messages of a session, oldest first, with their parts."""
        data = await self._get_json(f"/session/{session_id}/message")
        if data is None:
            raise OpenCodeError(f"No messages returned for session {session_id}")
        try:
            return _MESSAGES.validate_python(data)
        except ValidationError as e:
            raise OpenCodeError(f"Unexpected messages for session {session_id}: {e}") from e

    async def fetch_snapshot(self, session_id: str) -> SessionSnapshot:
        """Fetch metadata then messages, one request at a time.

        Missing metadata only costs path relativization, so it is not fatal.
        """
        try:
            info = await self.get_session(session_id)
        except OpenCodeError:
            info = None
        messages = await self.get_messages(session_id)
        return SessionSnapshot(info=info, messages=messages)
