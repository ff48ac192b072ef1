"""
Main orchestrator relaying Slack message events to the AI provider.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from slack_relay.client.slack_client import SlackClient
from slack_relay.llm.factory import create_provider
from slack_relay.llm.provider import ChatProvider
from slack_relay.models.config import AppConfig, ReplyMessages
from slack_relay.models.conversation import TriggerEvent
from slack_relay.processor.markup import to_platform_markup
from slack_relay.processor.scope_resolver import ConversationScopeResolver
from slack_relay.storage.dedup_cache import DedupCache, MemoryDedupCache, RedisDedupCache
from slack_relay.storage.event_gate import EventGate
from slack_relay.storage.redis_setup import setup_redis_client

logger = logging.getLogger(__name__)

OK = "OK"
NG = "NG"
FILE_SHARE_SUBTYPE = "file_share"


class EventRelay:
    """
    Handles one webhook delivery from start to finish.

    Every path ends in a single answer: the verification challenge, "OK" for
    dropped, ignored or answered events, or "NG" when an unexpected failure
    interrupted the answer.
    """

    def __init__(
        self,
        bot_member_id: str,
        gate: EventGate,
        resolver: ConversationScopeResolver,
        provider: ChatProvider,
        slack_client: SlackClient,
        messages: Optional[ReplyMessages] = None,
    ):
        """
        Initialize the relay.

        Args:
            bot_member_id: Member ID of the bot user
            gate: Deduplication gate for event IDs
            resolver: Conversation scope resolver
            provider: Chat provider used to answer
            slack_client: Client used to post replies
            messages: User-facing texts, for the generic failure reply
        """
        self.bot_member_id = bot_member_id
        self.gate = gate
        self.resolver = resolver
        self.provider = provider
        self.slack_client = slack_client
        self.messages = messages or ReplyMessages()

    def handle(self, payload: Dict[str, Any]) -> str:
        """
        Process one webhook body.

        Args:
            payload: Parsed JSON body posted by Slack

        Returns:
            The text to answer the webhook with
        """
        if payload.get("type") == "url_verification":
            logger.info("Answering Slack URL verification")
            return payload.get("challenge", "")

        event = payload.get("event")
        if not isinstance(event, dict):
            return OK
        if payload.get("type") != "event_callback" or event.get("type") != "message":
            return OK

        # Edits and deletions carry a subtype; file shares are new messages
        subtype = event.get("subtype")
        if subtype is not None and subtype != FILE_SHARE_SUBTYPE:
            logger.debug(f"Ignoring message event with subtype {subtype}")
            return OK

        try:
            trigger = TriggerEvent.from_slack(event)
        except (KeyError, ValidationError) as e:
            logger.warning(f"Ignoring malformed message event: {str(e)}")
            return OK

        if trigger.author_id == self.bot_member_id:
            return OK

        try:
            admitted = self.gate.admit(trigger.event_id)
        except Exception as e:
            logger.error(f"Dedup check failed for event {trigger.event_id}: {str(e)}", exc_info=True)
            return NG
        if not admitted:
            return OK

        try:
            self.relay(trigger)
            return OK
        except Exception as e:
            logger.error(f"Error answering event {trigger.event_id}: {str(e)}", exc_info=True)
            self._notify_failure(trigger)
            return NG

    def relay(self, trigger: TriggerEvent) -> bool:
        """
        Resolve the conversation, ask the provider and post the answer.

        Returns:
            True if a reply was posted, False if the event was not for the bot
        """
        messages = self.resolver.resolve(trigger)
        if not messages:
            return False

        answer = self.provider.answer(messages)
        if not answer:
            logger.info(f"Provider returned an empty answer for {trigger.event_id}")
            return False

        self.slack_client.post_message(
            trigger.channel_id,
            to_platform_markup(answer),
            thread_ts=trigger.timestamp,
        )
        logger.info(f"Answered event {trigger.event_id} in {trigger.channel_id}")
        return True

    def _notify_failure(self, trigger: TriggerEvent) -> None:
        try:
            self.slack_client.post_message(
                trigger.channel_id,
                self.messages.unexpected_error,
                thread_ts=trigger.timestamp,
            )
        except Exception as e:
            logger.error(f"Could not post failure notice for {trigger.event_id}: {str(e)}")


def create_dedup_cache(config: AppConfig) -> DedupCache:
    """Create the dedup cache backend named in the configuration."""
    if config.dedup_backend == "memory":
        logger.warning("Using in-process dedup cache; duplicates are only suppressed per worker")
        return MemoryDedupCache()
    return RedisDedupCache(setup_redis_client(config.redis), key_prefix=config.redis.key_prefix)


def build_relay(config: AppConfig) -> EventRelay:
    """
    Wire the relay components from the application configuration.

    Args:
        config: Complete application configuration

    Returns:
        Ready to use EventRelay
    """
    slack_client = SlackClient(config.slack.bot_token)
    resolver = ConversationScopeResolver(
        bot_member_id=config.slack.bot_member_id,
        bot_channel_id=config.slack.bot_channel_id,
        fetch_thread=slack_client.get_thread_messages,
    )
    provider = create_provider(
        config.provider,
        config.slack.bot_member_id,
        fetch_media=slack_client.download_file,
        messages=config.messages,
    )
    gate = EventGate(create_dedup_cache(config), ttl_seconds=config.dedup_ttl_seconds)

    return EventRelay(
        bot_member_id=config.slack.bot_member_id,
        gate=gate,
        resolver=resolver,
        provider=provider,
        slack_client=slack_client,
        messages=config.messages,
    )
