"""Pydantic models for the Slack payloads slackbot reads.

MessageEvent: the subset of an RTM ``message`` event the command
    parser needs. Anything that fails this model is not a command.
SlackUser: one entry of the workspace's known-users directory, as
    returned by ``users.list``.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class MessageEvent(BaseModel):
    """An inbound RTM event of type ``message`` carrying text.

    Strict string fields keep a numeric ``user`` or a structured
    ``text`` from being coerced into something that looks valid.
    """

    model_config = ConfigDict(extra="ignore")

    type: Literal["message"]
    text: StrictStr
    user: StrictStr = Field(..., min_length=1, description="Author's user ID")
    channel: StrictStr = Field(..., min_length=1, description="Originating channel ID")


class SlackUser(BaseModel):
    """A member of the workspace, as known to the session."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(..., description="User ID, e.g. U024BE7LH")
    name: str = Field(..., description="Username (handle)")
    real_name: Optional[str] = Field(default=None)
    is_bot: bool = Field(default=False)
    deleted: bool = Field(default=False)

    @property
    def mention(self) -> str:
        """Slack mention markup that renders as @name in the client."""
        return f"<@{self.id}>"
