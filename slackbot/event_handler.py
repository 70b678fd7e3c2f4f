"""Per-frame command dispatch.

The session calls EventDispatcher.on_event once for every inbound
frame. Frames that are not commands for this bot, commands from
users the session does not know, and commands nobody registered are
all dropped without a reply.
"""

import inspect
from typing import Sequence

import structlog

from .commands.base import Handler, HandlerRegistry
from .exceptions import MalformedPayloadError
from .parser import parse_command
from .sender import Sender
from .session import SessionClient

logger = structlog.get_logger("slackbot.bot")


class EventDispatcher:
    """Routes parsed commands to registered handlers.

    Args:
        bot_name: Name the bot answers to (``!<bot_name> <command>``).
        registry: Handler table, read-only while dispatching.
        session: Source of the user directory and the send operation.
    """

    def __init__(self, bot_name: str, registry: HandlerRegistry, session: SessionClient):
        self.bot_name = bot_name
        self.registry = registry
        self.session = session

    async def on_event(self, raw_payload: str) -> None:
        """Dispatch one inbound frame.

        The handler runs to completion before this returns. Anything
        the handler raises propagates to the caller unchanged.
        """
        try:
            cmd = parse_command(self.bot_name, raw_payload)
        except MalformedPayloadError as e:
            logger.warning("malformed_payload", error=str(e), payload=e.payload[:100])
            return

        if cmd is None:
            return

        user = self.session.get_user(cmd.user_id)
        if user is None:
            logger.warning(
                "unknown_sender", user_id=cmd.user_id, channel=cmd.channel_id,
                command=cmd.name,
            )
            return

        handler = self.registry.get(cmd.name)
        if handler is None:
            logger.debug("unknown_command", command=cmd.name, channel=cmd.channel_id)
            return

        logger.info(
            "command_dispatched",
            command=cmd.name,
            user=user.name,
            channel=cmd.channel_id,
            arg_count=len(cmd.arguments),
        )
        sender = Sender(self.session, cmd.channel_id, user)
        try:
            await self._invoke(handler, sender, list(cmd.arguments))
        finally:
            sender.release()

    @staticmethod
    async def _invoke(handler: Handler, sender: Sender, args: Sequence[str]) -> None:
        result = handler(sender, args)
        if inspect.isawaitable(result):
            await result
