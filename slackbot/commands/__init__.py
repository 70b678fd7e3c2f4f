"""Command handler framework for slackbot.

Provides the CommandHandler ABC, the HandlerRegistry mapping command
names to handlers, and the built-in echo and help commands.
"""

from .base import CommandHandler, Handler, HandlerRegistry
from .builtin import HelpCommand, handle_echo, register_builtin_commands

__all__ = [
    "CommandHandler",
    "Handler",
    "HandlerRegistry",
    "HelpCommand",
    "handle_echo",
    "register_builtin_commands",
]
