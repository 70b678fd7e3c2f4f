"""slackbot: command dispatch for Slack real-time messaging bots.

Messages of the form ``!<bot-name> <command> [args...]`` are parsed,
matched against registered handlers, and answered through a Sender
bound to the channel the command came from.
"""

from .bot import SlackBot
from .commands import CommandHandler, HandlerRegistry
from .event_handler import EventDispatcher
from .exceptions import (
    ConfigurationError,
    ErrorCategory,
    MalformedPayloadError,
    SendError,
    SessionError,
    SlackBotError,
)
from .models import SlackUser
from .parser import Command, parse_command
from .sender import Sender
from .session import RtmSession, SessionClient

__version__ = "0.2.0"

__all__ = [
    # Facade
    "SlackBot",
    # Core
    "Command",
    "parse_command",
    "CommandHandler",
    "HandlerRegistry",
    "EventDispatcher",
    "Sender",
    # Session
    "SessionClient",
    "RtmSession",
    "SlackUser",
    # Errors
    "SlackBotError",
    "ErrorCategory",
    "MalformedPayloadError",
    "SendError",
    "SessionError",
    "ConfigurationError",
]
