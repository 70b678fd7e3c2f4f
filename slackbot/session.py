"""Slack real-time messaging session.

Connects to the Slack RTM API over a WebSocket, keeps the workspace's
known-users directory, delivers every inbound frame to a callback and
sends messages back out over the same socket.

Key classes:
    SessionClient: Protocol the dispatcher and Sender depend on.
    RtmSession: aiohttp-backed implementation against slack.com.
"""

import asyncio
import itertools
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable

import aiohttp
import structlog
from pydantic import ValidationError

from .exceptions import ErrorCategory, SendError, SessionError
from .models import SlackUser

logger = structlog.get_logger("slackbot.session")

DEFAULT_API_URL = "https://slack.com/api"

EventCallback = Callable[[str], Awaitable[None]]


@runtime_checkable
class SessionClient(Protocol):
    """What the command core needs from a chat session."""

    def get_user(self, user_id: str) -> Optional[SlackUser]:
        """Look up a workspace member in the known-users directory."""
        ...

    async def send_message(self, channel_id: str, text: str) -> int:
        """Post text to a channel. Returns the outbound message id."""
        ...

    async def run(self, on_event: EventCallback) -> None:
        """Connect and deliver every inbound frame to ``on_event`` until disconnect."""
        ...


class RtmSession:
    """Slack RTM client built on aiohttp.

    Inbound frames are handed to the callback one at a time, in the
    order they arrive; the next frame is not read until the callback
    returns. Transport errors trigger a reconnect with exponential
    backoff. Errors raised by the callback end the session.

    Args:
        token: Bot token (``xoxb-...``).
        api_url: Base URL of the Slack Web API.
        reconnect_max_attempts: Consecutive failed connections before
            giving up.
        reconnect_base_delay: Seconds to wait before the first
            reconnect; doubled after each failure.
    """

    MAX_RECONNECT_DELAY = 300

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        reconnect_max_attempts: int = 5,
        reconnect_base_delay: float = 5,
    ):
        self._token = token
        self.api_url = api_url.rstrip("/")
        self.reconnect_max_attempts = reconnect_max_attempts
        self.reconnect_base_delay = reconnect_base_delay

        self.http: Optional[aiohttp.ClientSession] = None
        self.ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self.self_id: Optional[str] = None
        self.team_id: Optional[str] = None
        self._ws_url: Optional[str] = None
        self._users: Dict[str, SlackUser] = {}
        self._message_ids = itertools.count(1)
        self._frames_received = 0

    # --- Known-users directory ---

    @property
    def users(self) -> Mapping[str, SlackUser]:
        """Read-only snapshot of the known-users directory."""
        return dict(self._users)

    def get_user(self, user_id: str) -> Optional[SlackUser]:
        return self._users.get(user_id)

    # --- Web API ---

    async def _api_call(self, method: str, params: Optional[dict] = None) -> Dict[str, Any]:
        """Call a Slack Web API method and return the decoded body.

        Raises:
            SessionError: On transport failure or an ``ok: false`` reply.
        """
        url = f"{self.api_url}/{method}"
        headers = {"Authorization": f"Bearer {self._token}"}
        try:
            async with self.http.post(
                url, data=params or {}, headers=headers,
                timeout=aiohttp.ClientTimeout(total=30),
            ) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise SessionError(
                        f"{method} returned HTTP {resp.status}",
                        category=ErrorCategory.TRANSIENT,
                        status=resp.status,
                        body=body[:200],
                    )
                result = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SessionError(
                f"{method} request failed",
                category=ErrorCategory.TRANSIENT,
                error=str(e),
            ) from e

        if not result.get("ok"):
            error = result.get("error", "unknown_error")
            raise SessionError(f"{method} failed: {error}", slack_error=error)
        return result

    async def _load_users(self) -> None:
        """Page through users.list into the known-users directory."""
        users: Dict[str, SlackUser] = {}
        cursor = ""
        while True:
            params = {"limit": "200"}
            if cursor:
                params["cursor"] = cursor
            result = await self._api_call("users.list", params)
            for member in result.get("members", []):
                try:
                    user = SlackUser.model_validate(member)
                except ValidationError:
                    logger.warning("user_entry_invalid", entry=str(member)[:100])
                    continue
                users[user.id] = user
            cursor = (result.get("response_metadata") or {}).get("next_cursor", "")
            if not cursor:
                break
        self._users = users
        logger.info("users_loaded", count=len(users))

    async def connect(self) -> None:
        """Authenticate with rtm.connect and load the user directory."""
        if self.http is None or self.http.closed:
            self.http = aiohttp.ClientSession()

        result = await self._api_call("rtm.connect")
        self._ws_url = result["url"]
        self._frames_received = 0
        self.self_id = (result.get("self") or {}).get("id")
        self.team_id = (result.get("team") or {}).get("id")
        logger.info("rtm_connected", self_id=self.self_id, team=self.team_id)

        await self._load_users()

    # --- WebSocket ---

    async def send_message(self, channel_id: str, text: str) -> int:
        """Send a message frame over the RTM socket.

        Raises:
            SendError: If the socket is not open or the write fails.
        """
        if self.ws is None or self.ws.closed:
            raise SendError("RTM socket is not connected", channel_id=channel_id)

        message_id = next(self._message_ids)
        frame = {
            "id": message_id,
            "type": "message",
            "channel": channel_id,
            "text": text,
        }
        try:
            await self.ws.send_json(frame)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as e:
            logger.error("send_error", channel=channel_id, error=str(e))
            raise SendError(
                "Failed to write message frame", channel_id=channel_id, error=str(e)
            ) from e
        return message_id

    async def _receive(self, on_event: EventCallback) -> Optional[Exception]:
        """Read frames until the socket closes.

        Returns:
            The exception raised by ``on_event``, if one ended the
            session; None when the server closed the socket.
        """
        async with self.http.ws_connect(self._ws_url, heartbeat=30) as ws:
            self.ws = ws
            logger.info("websocket_connected")
            try:
                async for msg in ws:
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        self._frames_received += 1
                        try:
                            await on_event(msg.data)
                        except Exception as e:
                            return e
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        raise SessionError(
                            "WebSocket error",
                            category=ErrorCategory.TRANSIENT,
                            error=str(ws.exception()),
                        )
                    elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED):
                        break
            finally:
                self.ws = None
        logger.info("websocket_closed")
        return None

    async def run(self, on_event: EventCallback) -> None:
        """Connect and pump frames into ``on_event`` until the server closes.

        Raises:
            SessionError: If the API refuses the token, or every
                reconnect attempt fails.
            Exception: Whatever ``on_event`` raised, unchanged.
        """
        attempt = 0
        try:
            while True:
                try:
                    await self.connect()
                    failure = await self._receive(on_event)
                except (SessionError, aiohttp.ClientError, asyncio.TimeoutError) as e:
                    retryable = (
                        e.is_retryable if isinstance(e, SessionError) else True
                    )
                    if self._frames_received:
                        attempt = 0
                        self._frames_received = 0
                    attempt += 1
                    if not retryable or attempt >= self.reconnect_max_attempts:
                        logger.error(
                            "session_failed", error=str(e), attempts=attempt,
                        )
                        if isinstance(e, SessionError):
                            raise
                        raise SessionError(
                            "Connection lost",
                            category=ErrorCategory.TRANSIENT,
                            error=str(e),
                        ) from e
                    delay = min(
                        self.reconnect_base_delay * 2 ** (attempt - 1),
                        self.MAX_RECONNECT_DELAY,
                    )
                    logger.warning(
                        "session_reconnecting", error=str(e),
                        attempt=attempt, retry_delay=delay,
                    )
                    await asyncio.sleep(delay)
                    continue

                if failure is not None:
                    logger.error(
                        "event_callback_failed",
                        error=str(failure), error_type=type(failure).__name__,
                    )
                    raise failure
                return
        finally:
            await self.close()

    async def close(self) -> None:
        """Close the socket and the HTTP session."""
        if self.ws is not None and not self.ws.closed:
            await self.ws.close()
        self.ws = None
        if self.http is not None and not self.http.closed:
            await self.http.close()
        self.http = None
