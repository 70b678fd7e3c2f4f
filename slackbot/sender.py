"""Reply capability handed to command handlers.

A Sender is created for exactly one dispatched command. It can post
back into the channel the command arrived on and tells the handler who
asked; it cannot address any other channel, and it stops working once
the handler returns.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from .models import SlackUser

if TYPE_CHECKING:
    from .session import SessionClient

logger = structlog.get_logger("slackbot.bot")


class _ChannelWriter:
    """Send-only view of the session, pinned to one channel."""

    def __init__(self, channel_id: str, session: "SessionClient"):
        self.channel_id = channel_id
        self._session = session

    async def write(self, message: str) -> int:
        return await self._session.send_message(self.channel_id, message)


class Sender:
    """The sender of a command to the bot.

    Attributes:
        user: The workspace member who issued the command (read-only).
        channel_id: The channel the command came from (read-only).
    """

    def __init__(self, session: "SessionClient", channel_id: str, user: SlackUser):
        self._writer = _ChannelWriter(channel_id, session)
        self._user = user
        self._released = False

    @property
    def user(self) -> SlackUser:
        return self._user

    @property
    def channel_id(self) -> str:
        return self._writer.channel_id

    async def respond_in_channel(self, message: str) -> int:
        """Send a message to the channel that the command came from.

        Each call sends one message; call again to send more.

        Args:
            message: Text to post.

        Returns:
            The outbound message id assigned by the session.

        Raises:
            SendError: If the session could not deliver the message.
                Not retried.
            RuntimeError: If called after the handler has returned.
        """
        if self._released:
            raise RuntimeError(
                "Sender used after its command finished; replies must be sent "
                "before the handler returns"
            )
        message_id = await self._writer.write(str(message))
        logger.debug(
            "reply_sent",
            channel=self.channel_id,
            message_id=message_id,
            length=len(str(message)),
        )
        return message_id

    def release(self) -> None:
        """Invalidate this sender. Called by the dispatcher after the handler returns."""
        self._released = True

    def __repr__(self) -> str:
        return f"Sender(channel_id={self.channel_id!r}, user={self._user.id!r})"
