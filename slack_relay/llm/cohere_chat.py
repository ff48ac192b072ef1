"""Cohere chat provider: one current message plus a flat chat history."""

from typing import Any, Dict, List

from slack_relay.errors import EmptyReplyError
from slack_relay.models.conversation import ThreadMessage
from slack_relay.llm.provider import ChatProvider

COHERE_ROLES = {
    "user": "USER",
    "assistant": "CHATBOT",
}


class CohereChatProvider(ChatProvider):
    """
    Flat exchange provider.

    Only text reaches Cohere: attachments are ignored and each history entry
    is reduced to role and message.
    """

    name = "cohere"

    def build_request(self, messages: List[ThreadMessage]) -> Dict[str, Any]:
        turns = [self.to_turn(message) for message in messages]

        body: Dict[str, Any] = {
            "model": self.config.model,
            "message": turns[-1].text,
        }
        if len(turns) >= 2:
            body["chat_history"] = [
                {"role": COHERE_ROLES[turn.role], "message": turn.text}
                for turn in turns[:-1]
            ]
        if self.config.connectors:
            body["connectors"] = [{"id": connector} for connector in self.config.connectors]
        if self.config.temperature is not None:
            body["temperature"] = self.config.temperature
        return body

    def parse_reply(self, payload: Dict[str, Any]) -> str:
        text = payload.get("text")
        if text is None:
            raise EmptyReplyError("cohere returned no text")
        return text.lstrip("\n")
