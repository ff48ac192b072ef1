"""
Decide which Slack messages form the conversation sent to the provider.
"""
import logging
from typing import Callable, List

from slack_relay.models.conversation import ThreadMessage, TriggerEvent

logger = logging.getLogger(__name__)

MENTION_MARKER = "<@"

ThreadFetcher = Callable[[str, str], List[ThreadMessage]]


class ConversationScopeResolver:
    """
    Resolves the conversation context for a triggering message.

    A thread the bot has never taken part in is only answered when the bot is
    mentioned. Once the bot is involved, the whole thread is replayed so the
    provider keeps the context.
    """

    def __init__(self, bot_member_id: str, bot_channel_id: str, fetch_thread: ThreadFetcher):
        """
        Args:
            bot_member_id: Member ID of the bot user
            bot_channel_id: Channel ID of the bot's direct-message channel
            fetch_thread: Callable returning a thread's messages oldest first;
                raises ThreadFetchError on failure
        """
        self.bot_member_id = bot_member_id
        self.bot_channel_id = bot_channel_id
        self.fetch_thread = fetch_thread

    def mentions_bot(self, text: str) -> bool:
        return self.bot_member_id in text

    def resolve(self, trigger: TriggerEvent) -> List[ThreadMessage]:
        """
        Return the messages to send, or an empty list to stay silent.

        Raises:
            ThreadFetchError: Propagated unchanged from the thread fetcher
        """
        mentioned_bot = self.mentions_bot(trigger.text)

        if not trigger.in_thread:
            if trigger.channel_id == self.bot_channel_id or mentioned_bot:
                return [trigger.as_thread_message()]
            logger.debug(f"Ignoring unrelated message {trigger.event_id}")
            return []

        if not mentioned_bot and MENTION_MARKER in trigger.text:
            logger.debug(f"Ignoring thread message {trigger.event_id} addressed to someone else")
            return []

        messages = self.fetch_thread(trigger.channel_id, trigger.thread_root_timestamp)

        bot_involved = any(message.author_id == self.bot_member_id for message in messages)
        if not bot_involved and not mentioned_bot:
            logger.debug(f"Ignoring thread {trigger.thread_root_timestamp} without the bot")
            return []

        logger.info(f"Resolved {len(messages)} messages in thread {trigger.thread_root_timestamp}")
        return messages
