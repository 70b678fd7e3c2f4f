"""Exception hierarchy for slackbot.

Every error raised by the package derives from SlackBotError, so
embedders can catch broadly while handlers can still target the
precise failure (a failed reply, a broken session, a bad payload).
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Classification of errors for retry decisions."""
    TRANSIENT = "transient"          # Worth retrying (dropped socket, timeout)
    PERMANENT = "permanent"          # Not worth retrying (bad payload, API refusal)
    INFRASTRUCTURE = "infrastructure"  # Missing token, bad settings


class SlackBotError(Exception):
    """Base exception for all slackbot errors.

    Attributes:
        message: Human-readable error description.
        category: Error classification for retry decisions.
        module: Originating module name (e.g. "session").
        context: Arbitrary key-value pairs for structured logging.
    """

    def __init__(
        self,
        message: str = "",
        *,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.category = category
        self.module = module
        self.context = context
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether this error is worth retrying."""
        return self.category == ErrorCategory.TRANSIENT

    def __str__(self) -> str:
        parts = [self.message or self.__class__.__name__]
        if self.module:
            parts.append(f"[module={self.module}]")
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({ctx})")
        return " ".join(parts)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return (
            f"{cls}({self.message!r}, category={self.category.value!r}, "
            f"module={self.module!r})"
        )


class MalformedPayloadError(SlackBotError):
    """An inbound frame could not be decoded into a JSON object.

    Attributes:
        payload: The first 200 characters of the offending frame.
    """

    def __init__(
        self,
        message: str = "",
        *,
        payload: str = "",
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.payload = payload[:200]
        super().__init__(
            message, category=category, module=module or "parser", **context
        )


class SendError(SlackBotError):
    """An outbound message could not be delivered.

    Attributes:
        channel_id: The channel the message was addressed to.
    """

    def __init__(
        self,
        message: str = "",
        *,
        channel_id: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.TRANSIENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.channel_id = channel_id
        super().__init__(
            message, category=category, module=module or "session", **context
        )


class SessionError(SlackBotError):
    """The Slack session failed to connect or the API refused a call.

    Attributes:
        slack_error: The ``error`` code returned by the Slack Web API,
            if the failure came from an ``ok: false`` response.
    """

    def __init__(
        self,
        message: str = "",
        *,
        slack_error: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.slack_error = slack_error
        super().__init__(
            message, category=category, module=module or "session", **context
        )


class ConfigurationError(SlackBotError):
    """Invalid or missing configuration.

    Defaults to INFRASTRUCTURE because config issues are environmental
    and won't resolve by retrying.
    """

    def __init__(
        self,
        message: str = "",
        *,
        setting_name: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.INFRASTRUCTURE,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.setting_name = setting_name
        super().__init__(
            message, category=category, module=module or "config", **context
        )
