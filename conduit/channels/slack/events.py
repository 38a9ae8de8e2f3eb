"""Typed shapes of the raw Slack events the channel listens to.

Raw payloads are decoded once at the boundary; anything that does not match
one of the variants is rejected with ``MalformedEventError``.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from conduit.core.errors import MalformedEventError


class Ref(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str


class SlackFile(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    title: Optional[str] = None


class MessageEvent(BaseModel):
    """A plain ``message`` event from the Events API."""

    model_config = ConfigDict(extra="allow")

    type: Literal["message"]
    subtype: Optional[str] = None
    bot_id: Optional[str] = None
    text: Optional[str] = None
    channel: Union[str, Ref]
    user: Optional[Union[str, Ref]] = None
    files: list[SlackFile] = Field(default_factory=list)

    @property
    def from_bot(self) -> bool:
        return bool(self.bot_id)


class PlainText(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: str = ""


class SelectedOption(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: PlainText = Field(default_factory=PlainText)
    value: str = ""


class Action(BaseModel):
    model_config = ConfigDict(extra="allow")

    action_id: str
    block_id: Optional[str] = None
    type: Optional[str] = None
    text: Optional[PlainText] = None
    value: Optional[str] = None
    selected_option: Optional[SelectedOption] = None


class ActionEvent(BaseModel):
    """A ``block_actions`` payload from the interactivity endpoint."""

    model_config = ConfigDict(extra="allow")

    type: Literal["block_actions"]
    actions: list[Action] = Field(min_length=1)
    response_url: Optional[str] = None
    channel: Optional[Union[str, Ref]] = None
    user: Optional[Union[str, Ref]] = None

    @property
    def action(self) -> Action:
        return self.actions[0]

    @property
    def action_id(self) -> str:
        return self.action.action_id

    @property
    def block_id(self) -> Optional[str]:
        return self.action.block_id

    @property
    def selected_value(self) -> Optional[str]:
        option = self.action.selected_option
        return option.value if option else self.action.value


InboundEvent = Annotated[Union[MessageEvent, ActionEvent], Field(discriminator="type")]

_adapter: TypeAdapter[Any] = TypeAdapter(InboundEvent)


def decode_event(raw: Any) -> Union[MessageEvent, ActionEvent]:
    try:
        return _adapter.validate_python(raw)
    except ValidationError as e:
        kind = raw.get("type") if isinstance(raw, dict) else type(raw).__name__
        raise MalformedEventError(f"unrecognised slack event ({kind}): {e.error_count()} error(s)") from e
