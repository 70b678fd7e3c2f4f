"""Command parsing for inbound RTM frames.

Turns one raw frame into a Command when the frame is a message
addressed to the bot, e.g. ``!bot echo hello world`` for a bot named
``bot``. Everything else parses to None.
"""

import json
from dataclasses import dataclass
from typing import Optional, Tuple

from pydantic import ValidationError

from .exceptions import MalformedPayloadError
from .models import MessageEvent

# Command used when the message is just the bare prefix
DEFAULT_COMMAND = "help"


@dataclass(frozen=True)
class Command:
    """A request addressed to the bot, extracted from one message event."""
    name: str
    arguments: Tuple[str, ...]
    user_id: str
    channel_id: str


def command_prefix(bot_name: str) -> str:
    """The bang prefix that addresses a bot, e.g. ``!bot``."""
    return "!" + bot_name


def _decode(raw_payload: str) -> dict:
    try:
        data = json.loads(raw_payload)
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(
            "Frame is not valid JSON", payload=str(raw_payload), error=str(e)
        ) from e
    if not isinstance(data, dict):
        raise MalformedPayloadError(
            "Frame is not a JSON object",
            payload=raw_payload,
            json_type=type(data).__name__,
        )
    return data


def parse_command(bot_name: str, raw_payload: str) -> Optional[Command]:
    """Parse a raw RTM frame into a Command.

    Args:
        bot_name: Name the bot answers to (without the ``!``).
        raw_payload: The frame text exactly as received.

    Returns:
        The Command, or None when the frame is not a message, carries
        no text, lacks a user or channel, or is not addressed to this
        bot. The prefix must be followed by whitespace or end the text,
        so ``!bots`` does not address a bot named ``bot``.

    Raises:
        MalformedPayloadError: If the frame is not a JSON object.

    Examples:
        >>> parse_command("bot", '{"type": "message", "text": "!bot echo hi", '
        ...               '"user": "U1", "channel": "C1"}')
        Command(name='echo', arguments=('hi',), user_id='U1', channel_id='C1')
    """
    data = _decode(raw_payload)

    try:
        event = MessageEvent.model_validate(data)
    except ValidationError:
        return None

    prefix = command_prefix(bot_name)
    text = event.text
    if not text.startswith(prefix):
        return None
    remainder = text[len(prefix):]
    if remainder and not remainder[0].isspace():
        return None

    tokens = remainder.split()
    name = tokens[0] if tokens else DEFAULT_COMMAND
    return Command(
        name=name,
        arguments=tuple(tokens[1:]),
        user_id=event.user,
        channel_id=event.channel,
    )
