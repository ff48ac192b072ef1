"""
Models for Slack messages and provider conversation turns.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Attachment(BaseModel):
    """A file attached to a Slack message."""
    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Private download URL of the file")
    name: Optional[str] = Field(default=None, description="Original file name")

    @classmethod
    def from_slack(cls, file: Dict[str, Any]) -> "Attachment":
        return cls(url=file["url_private"], name=file.get("name"))


def _attachments(record: Dict[str, Any]) -> List[Attachment]:
    return [Attachment.from_slack(f) for f in record.get("files") or [] if f.get("url_private")]


class ThreadMessage(BaseModel):
    """One message of a Slack thread, as returned by conversations.replies."""
    model_config = ConfigDict(frozen=True)

    author_id: Optional[str] = Field(default=None, description="User ID of the author")
    text: str = Field(default="", description="Raw message text with Slack markup")
    attachments: List[Attachment] = Field(default_factory=list)

    @classmethod
    def from_slack(cls, message: Dict[str, Any]) -> "ThreadMessage":
        return cls(
            author_id=message.get("user"),
            text=message.get("text") or "",
            attachments=_attachments(message),
        )


class TriggerEvent(BaseModel):
    """The inbound message event that caused one relay pass."""
    model_config = ConfigDict(frozen=True)

    channel_id: str = Field(description="Channel the message was posted in")
    text: str = Field(default="", description="Message text")
    author_id: Optional[str] = Field(default=None, description="User ID of the sender")
    event_id: str = Field(description="Deduplication key")
    timestamp: str = Field(description="Message ts")
    thread_root_timestamp: Optional[str] = Field(default=None, description="thread_ts when in a thread")
    attachments: List[Attachment] = Field(default_factory=list)

    @classmethod
    def from_slack(cls, event: Dict[str, Any]) -> "TriggerEvent":
        """
        Build a trigger from a Slack message event.

        Events without a client_msg_id (file shares from some clients) are
        keyed by channel and ts instead.
        """
        channel = event["channel"]
        ts = event["ts"]
        return cls(
            channel_id=channel,
            text=event.get("text") or "",
            author_id=event.get("user"),
            event_id=event.get("client_msg_id") or f"{channel}:{ts}",
            timestamp=ts,
            thread_root_timestamp=event.get("thread_ts"),
            attachments=_attachments(event),
        )

    @property
    def in_thread(self) -> bool:
        return bool(self.thread_root_timestamp)

    def as_thread_message(self) -> ThreadMessage:
        return ThreadMessage(author_id=self.author_id, text=self.text, attachments=self.attachments)


class ContentPart(BaseModel):
    """A text or inline-media part of a conversation turn."""
    model_config = ConfigDict(frozen=True)

    type: Literal["text", "image"]
    text: Optional[str] = None
    media_type: Optional[str] = None
    data: Optional[str] = Field(default=None, description="Base64-encoded payload")

    @classmethod
    def of_text(cls, text: str) -> "ContentPart":
        return cls(type="text", text=text)

    @classmethod
    def of_media(cls, media_type: str, data: str) -> "ContentPart":
        return cls(type="image", media_type=media_type, data=data)

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


class ConversationTurn(BaseModel):
    """A normalized unit exchanged with the provider."""
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant", "system"]
    parts: List[ContentPart]

    @model_validator(mode="after")
    def _require_text_part(self) -> "ConversationTurn":
        if not any(part.type == "text" for part in self.parts):
            raise ValueError("a conversation turn needs at least one text part")
        return self

    @property
    def text(self) -> str:
        return next(part.text for part in self.parts if part.type == "text") or ""
