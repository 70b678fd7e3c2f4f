"""Tests for the Sender reply capability."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from slackbot.exceptions import SendError
from slackbot.models import SlackUser
from slackbot.sender import Sender


def _make_session(send_result=1):
    session = MagicMock()
    session.send_message = AsyncMock(return_value=send_result)
    return session


def _user():
    return SlackUser(id="U1", name="alice", real_name="Alice Liddell")


@pytest.mark.asyncio
async def test_respond_targets_bound_channel():
    session = _make_session(send_result=7)
    sender = Sender(session, "C42", _user())

    message_id = await sender.respond_in_channel("hello")

    assert message_id == 7
    session.send_message.assert_awaited_once_with("C42", "hello")


@pytest.mark.asyncio
async def test_each_call_sends_one_message_to_same_channel():
    session = _make_session()
    sender = Sender(session, "C42", _user())

    await sender.respond_in_channel("one")
    await sender.respond_in_channel("#general two")

    channels = [call.args[0] for call in session.send_message.await_args_list]
    assert channels == ["C42", "C42"]


@pytest.mark.asyncio
async def test_send_error_reaches_caller():
    session = _make_session()
    session.send_message.side_effect = SendError("socket closed", channel_id="C42")
    sender = Sender(session, "C42", _user())

    with pytest.raises(SendError) as exc_info:
        await sender.respond_in_channel("hello")
    assert exc_info.value.is_retryable is True
    session.send_message.assert_awaited_once()


@pytest.mark.asyncio
async def test_released_sender_refuses_to_send():
    session = _make_session()
    sender = Sender(session, "C42", _user())
    sender.release()

    with pytest.raises(RuntimeError):
        await sender.respond_in_channel("too late")
    session.send_message.assert_not_awaited()


def test_user_and_channel_are_read_only():
    sender = Sender(_make_session(), "C42", _user())
    assert sender.user.name == "alice"
    assert sender.channel_id == "C42"
    with pytest.raises(AttributeError):
        sender.user = SlackUser(id="U2", name="mallory")
    with pytest.raises(AttributeError):
        sender.channel_id = "C666"


def test_user_mention_markup():
    assert _user().mention == "<@U1>"
