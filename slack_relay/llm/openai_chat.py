"""OpenAI chat completions provider with multi-part (text + media) turns."""

import base64
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from slack_relay.errors import EmptyReplyError
from slack_relay.models.config import ProviderConfig, ReplyMessages
from slack_relay.models.conversation import ContentPart, ConversationTurn, ThreadMessage
from slack_relay.llm.provider import ChatProvider, media_type_for

logger = logging.getLogger(__name__)

MediaFetcher = Callable[[str], bytes]


def _content_block(part: ContentPart) -> Dict[str, Any]:
    if part.type == "text":
        return {"type": "text", "text": part.text}
    return {"type": "image_url", "image_url": {"url": part.data_url}}


class OpenAIChatProvider(ChatProvider):
    """Sends the whole thread as turns, each with its attachments inlined."""

    name = "openai"

    def __init__(
        self,
        config: ProviderConfig,
        bot_member_id: str,
        fetch_media: Optional[MediaFetcher] = None,
        messages: Optional[ReplyMessages] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        super().__init__(config, bot_member_id, messages=messages, http_client=http_client)
        self.fetch_media = fetch_media

    def media_parts(self, message: ThreadMessage) -> List[ContentPart]:
        """Fetch and inline each supported attachment, keeping their order."""
        parts = []
        for attachment in message.attachments:
            media_type = media_type_for(attachment.url)
            if not media_type:
                logger.debug(f"Skipping attachment with unsupported type: {attachment.url}")
                continue
            if self.fetch_media is None:
                logger.warning("Attachment present but no media fetcher configured")
                continue
            data = base64.b64encode(self.fetch_media(attachment.url)).decode("ascii")
            parts.append(ContentPart.of_media(media_type, data))
        return parts

    def to_turn(self, message: ThreadMessage) -> ConversationTurn:
        turn = super().to_turn(message)
        return ConversationTurn(role=turn.role, parts=turn.parts + self.media_parts(message))

    def build_request(self, messages: List[ThreadMessage]) -> Dict[str, Any]:
        turns = [self.to_turn(message) for message in messages]
        if self.config.system_prompt:
            turns.insert(0, ConversationTurn(
                role="system",
                parts=[ContentPart.of_text(self.config.system_prompt)],
            ))

        body: Dict[str, Any] = {
            "model": self.config.model,
            "messages": [
                {
                    "role": turn.role,
                    # System prompts go as plain strings
                    "content": turn.text if turn.role == "system" else [_content_block(p) for p in turn.parts],
                }
                for turn in turns
            ],
        }
        if self.config.temperature is not None:
            body["temperature"] = self.config.temperature
        return body

    def parse_reply(self, payload: Dict[str, Any]) -> str:
        choices = payload.get("choices") or []
        if not choices:
            raise EmptyReplyError("openai returned no choices")
        content = (choices[0].get("message") or {}).get("content")
        if content is None:
            raise EmptyReplyError("openai returned a choice without content")
        return content.lstrip("\n")
