"""Base classes for the command handler framework.

Defines the single capability every command handler implements,
``handle(sender, args)``, and the registry that maps command names to
handlers.

Key classes:
    CommandHandler: ABC for stateful handler objects.
    HandlerRegistry: Maps command names to handlers.

Any callable taking ``(sender, args)`` works as a handler too; both
sync and async implementations are accepted.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Sequence, Union

import structlog

if TYPE_CHECKING:
    from ..sender import Sender

logger = structlog.get_logger("slackbot.commands")


class CommandHandler(ABC):
    """Abstract base class for handler objects.

    Subclass this when a command needs state between invocations;
    a plain function is enough otherwise.

    Example::

        class CounterCommand(CommandHandler):
            def __init__(self):
                self.count = 0

            async def handle(self, sender, args):
                self.count += 1
                await sender.respond_in_channel(f"Called {self.count} times")
    """

    @abstractmethod
    def handle(self, sender: "Sender", args: Sequence[str]) -> Optional[Awaitable[Any]]:
        """Handle one command.

        Args:
            sender: Reply capability bound to the originating channel.
            args: Tokens that followed the command name.
        """
        ...

    def __call__(self, sender: "Sender", args: Sequence[str]) -> Optional[Awaitable[Any]]:
        return self.handle(sender, args)


Handler = Union[CommandHandler, Callable[["Sender", Sequence[str]], Optional[Awaitable[Any]]]]


class HandlerRegistry:
    """Maps command names to handlers.

    Populated before the bot runs, then frozen: lookups during
    dispatch never race with registration. Names are matched exactly
    and case-sensitively, and the last registration for a name wins.
    """

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}
        self._frozen = False

    def register(self, name: str, handler: Handler) -> None:
        """Register a handler under a command name.

        Args:
            name: Command name, matched exactly against the first token
                after the bot prefix.
            handler: A CommandHandler or a callable ``(sender, args)``.

        Raises:
            RuntimeError: If the registry is frozen (the bot is running).
            ValueError: If the name is empty or contains whitespace.
            TypeError: If the handler is not callable.
        """
        if self._frozen:
            raise RuntimeError("Bot is running: handlers can no longer be registered")
        if not name or any(c.isspace() for c in name):
            raise ValueError(f"Invalid command name: {name!r}")
        if not callable(handler):
            raise TypeError(f"Handler for {name!r} is not callable")

        if name in self._handlers:
            logger.warning(
                "command_handler_conflict",
                command=name,
                handler=type(handler).__name__,
            )
        self._handlers[name] = handler
        logger.debug("command_registered", command=name)

    def get(self, name: str) -> Optional[Handler]:
        """Look up a handler for a command name."""
        return self._handlers.get(name)

    def freeze(self) -> None:
        """Disallow further registration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        """Whether registration is closed."""
        return self._frozen

    @property
    def command_names(self) -> frozenset:
        """All registered command names."""
        return frozenset(self._handlers.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
