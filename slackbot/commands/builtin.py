"""Built-in commands shipped with the bot.

echo: Repeats its arguments back into the channel.
help: Lists every registered command. Bound to the bare prefix
    (``!bot`` with nothing after it parses as ``help``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import structlog

from ..parser import command_prefix
from .base import CommandHandler, HandlerRegistry

if TYPE_CHECKING:
    from ..sender import Sender

logger = structlog.get_logger("slackbot.commands")


async def handle_echo(sender: "Sender", args: Sequence[str]) -> None:
    """Repeat the arguments, or ``echo echo echo`` when there are none."""
    if args:
        await sender.respond_in_channel(" ".join(args))
    else:
        await sender.respond_in_channel("echo echo echo")


class HelpCommand(CommandHandler):
    """Lists the registered commands.

    Reads the registry at call time, so commands registered after the
    help handler still show up.

    Args:
        bot_name: Name the bot answers to, used to render usage lines.
        registry: Registry to list.
    """

    def __init__(self, bot_name: str, registry: HandlerRegistry):
        self.bot_name = bot_name
        self.registry = registry

    def build_help_text(self) -> str:
        prefix = command_prefix(self.bot_name)
        lines = ["*Available commands:*"]
        for name in sorted(self.registry.command_names):
            lines.append(f"• `{prefix} {name}`")
        return "\n".join(lines)

    async def handle(self, sender: "Sender", args: Sequence[str]) -> None:
        await sender.respond_in_channel(self.build_help_text())


def register_builtin_commands(bot_name: str, registry: HandlerRegistry) -> None:
    """Register echo and help on a registry."""
    registry.register("echo", handle_echo)
    registry.register("help", HelpCommand(bot_name, registry))
    logger.debug("builtin_commands_registered", commands=["echo", "help"])
