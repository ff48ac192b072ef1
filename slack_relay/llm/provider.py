"""Base class shared by the chat provider variants."""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from slack_relay.errors import ProviderError, RateLimitedError, RequestFailedError
from slack_relay.models.config import ProviderConfig, ReplyMessages
from slack_relay.models.conversation import ContentPart, ConversationTurn, ThreadMessage

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "txt": "text/plain",
    "pdf": "application/pdf",
}

MENTION_PREFIX = re.compile(r"^<[^>]+> ")


def trim_mention_text(text: str) -> str:
    """Remove a leading "<mention> " token; providers never see Slack mentions."""
    return MENTION_PREFIX.sub("", text).strip()


def media_type_for(url: str) -> Optional[str]:
    """Media type from the URL's file extension, None when unsupported."""
    path = urlparse(url).path
    if "." not in path:
        return None
    return MEDIA_TYPES.get(path.rsplit(".", 1)[-1].lower())


class ChatProvider(ABC):
    """A conversational-AI endpoint reached with a bearer token.

    Variants decide the request shape and where the answer sits in the reply;
    sending, status classification and user-facing error texts are shared.
    """

    name = "base"

    def __init__(
        self,
        config: ProviderConfig,
        bot_member_id: str,
        messages: Optional[ReplyMessages] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config
        self.bot_member_id = bot_member_id
        self.messages = messages or ReplyMessages()
        self.http_client = http_client or httpx.Client(timeout=config.timeout)

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def role_for(self, message: ThreadMessage) -> str:
        return "assistant" if message.author_id == self.bot_member_id else "user"

    def to_turn(self, message: ThreadMessage) -> ConversationTurn:
        return ConversationTurn(
            role=self.role_for(message),
            parts=[ContentPart.of_text(trim_mention_text(message.text))],
        )

    @abstractmethod
    def build_request(self, messages: List[ThreadMessage]) -> Dict[str, Any]:
        """Build the provider JSON body for a non-empty, oldest-first message list."""

    @abstractmethod
    def parse_reply(self, payload: Dict[str, Any]) -> str:
        """Extract the answer text. Raises EmptyReplyError without candidates."""

    def map_transport_error(self, status_code: int) -> ProviderError:
        if status_code == 429:
            return RateLimitedError(f"{self.name} rate limited the request", status_code=status_code)
        return RequestFailedError(f"{self.name} returned HTTP {status_code}", status_code=status_code)

    def request(self, messages: List[ThreadMessage]) -> str:
        """Send the conversation and return the raw answer text.

        Raises:
            ProviderError: On a non-200 status, transport failure, unreadable
                body or empty reply
        """
        body = self.build_request(messages)
        logger.debug(f"Sending {len(messages)} messages to {self.name} ({self.config.model})")

        try:
            response = self.http_client.post(
                str(self.config.endpoint),
                json=body,
                headers=self._get_headers(),
            )
        except httpx.HTTPError as e:
            logger.error(f"{self.name} request failed: {str(e)}")
            raise RequestFailedError(str(e)) from e

        if response.status_code != 200:
            logger.warning(f"{self.name} answered with HTTP {response.status_code}")
            raise self.map_transport_error(response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise RequestFailedError(f"{self.name} reply is not valid JSON", status_code=200) from e

        try:
            return self.parse_reply(payload)
        except (AttributeError, TypeError, KeyError, IndexError) as e:
            logger.error(f"{self.name} reply has an unexpected shape: {str(e)}")
            raise RequestFailedError(f"{self.name} reply has an unexpected shape", status_code=200) from e

    def answer(self, messages: List[ThreadMessage]) -> str:
        """Like request(), but classified provider errors become fixed user texts."""
        try:
            return self.request(messages)
        except ProviderError as e:
            logger.warning(f"Replying with fixed message for {e.kind}: {str(e)}")
            return self.messages.for_error(e)
