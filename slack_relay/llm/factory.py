"""Build the configured chat provider."""

from typing import Callable, Optional

import httpx

from slack_relay.llm.cohere_chat import CohereChatProvider
from slack_relay.llm.openai_chat import OpenAIChatProvider
from slack_relay.llm.provider import ChatProvider
from slack_relay.models.config import ProviderConfig, ReplyMessages
from slack_relay.utils.logger import logger


def create_provider(
    config: ProviderConfig,
    bot_member_id: str,
    fetch_media: Optional[Callable[[str], bytes]] = None,
    messages: Optional[ReplyMessages] = None,
    http_client: Optional[httpx.Client] = None,
) -> ChatProvider:
    """Set up the provider variant named in the configuration.

    Args:
        config: Provider configuration.
        bot_member_id: Member ID used to tell bot turns from user turns.
        fetch_media: Downloads attachment bytes; only multi-part providers use it.
        messages: User-facing texts for classified provider errors.
        http_client: Optional preconfigured httpx client.

    Returns:
        Configured chat provider.
    """
    if config.name == "openai":
        provider = OpenAIChatProvider(
            config, bot_member_id, fetch_media=fetch_media, messages=messages, http_client=http_client
        )
    elif config.name == "cohere":
        provider = CohereChatProvider(config, bot_member_id, messages=messages, http_client=http_client)
    else:
        raise ValueError(f"Unsupported AI provider: {config.name}")

    logger.info(f"Successfully configured {provider.name} provider ({config.model})")
    return provider
