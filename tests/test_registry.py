"""Tests for the handler registry."""

import pytest

from slackbot.commands.base import CommandHandler, HandlerRegistry


class _Recorder(CommandHandler):
    def __init__(self):
        self.calls = []

    def handle(self, sender, args):
        self.calls.append(list(args))


def test_lookup_returns_registered_handler():
    registry = HandlerRegistry()
    handler = _Recorder()
    registry.register("echo", handler)
    assert registry.get("echo") is handler


def test_lookup_of_unknown_name_returns_none():
    registry = HandlerRegistry()
    registry.register("echo", _Recorder())
    assert registry.get("help") is None


def test_lookup_is_case_sensitive_and_exact():
    registry = HandlerRegistry()
    registry.register("echo", _Recorder())
    assert registry.get("Echo") is None
    assert registry.get("ech") is None
    assert registry.get("echoes") is None


def test_last_registration_wins():
    registry = HandlerRegistry()
    first, second = _Recorder(), _Recorder()
    registry.register("echo", first)
    registry.register("echo", second)
    assert registry.get("echo") is second
    assert len(registry) == 1


def test_plain_functions_are_accepted():
    registry = HandlerRegistry()

    def ping(sender, args):
        return None

    registry.register("ping", ping)
    assert registry.get("ping") is ping


def test_command_names_lists_all_registered():
    registry = HandlerRegistry()
    registry.register("echo", _Recorder())
    registry.register("help", _Recorder())
    assert registry.command_names == frozenset({"echo", "help"})
    assert "echo" in registry


def test_register_after_freeze_raises():
    registry = HandlerRegistry()
    registry.register("echo", _Recorder())
    registry.freeze()
    assert registry.frozen is True
    with pytest.raises(RuntimeError):
        registry.register("help", _Recorder())
    assert registry.get("help") is None


@pytest.mark.parametrize("name", ["", "two words", "tab\tname"])
def test_invalid_names_rejected(name):
    registry = HandlerRegistry()
    with pytest.raises(ValueError):
        registry.register(name, _Recorder())


def test_non_callable_handler_rejected():
    registry = HandlerRegistry()
    with pytest.raises(TypeError):
        registry.register("echo", "not a handler")


def test_command_handler_is_callable():
    handler = _Recorder()
    handler(None, ["a", "b"])
    assert handler.calls == [["a", "b"]]
