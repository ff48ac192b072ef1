"""Configuration models for the application."""
from typing import Literal, Optional

from pydantic import BaseModel, Field, HttpUrl

from slack_relay.errors import ProviderError

DEFAULT_SYSTEM_PROMPT = (
    "You are an excellent assistant. "
    "Please support university students majoring in information engineering."
)


class SlackConfig(BaseModel):
    """Slack API configuration and bot identity."""
    bot_token: str = Field(..., description="Slack bot token")
    bot_member_id: str = Field(..., description="Member ID of the bot user")
    bot_channel_id: str = Field(..., description="Channel ID of the bot's direct-message channel")


class RedisConfig(BaseModel):
    """Redis configuration settings."""
    host: str = Field(default="localhost", description="Redis host address")
    port: int = Field(default=6379, description="Redis port number")
    password: Optional[str] = Field(default=None, description="Redis password")
    key_prefix: str = Field(default="slack_relay:event:", description="Prefix for dedup keys")


class ProviderConfig(BaseModel):
    """Settings for the conversational-AI provider."""
    name: Literal["openai", "cohere"] = Field(..., description="Provider variant")
    api_key: str = Field(..., description="Bearer token for the provider API")
    endpoint: HttpUrl = Field(..., description="Chat endpoint URL")
    model: str = Field(..., description="Model name sent with each request")
    temperature: Optional[float] = Field(default=None, description="Sampling temperature")
    system_prompt: Optional[str] = Field(default=None, description="System turn sent first")
    connectors: list[str] = Field(default_factory=list, description="Cohere connector IDs")
    timeout: Optional[float] = Field(default=None, description="HTTP timeout in seconds, None waits forever")


class ReplyMessages(BaseModel):
    """Fixed texts posted to Slack instead of raw errors."""
    empty_reply: str = "The AI returned an empty response."
    rate_limited: str = "The usage limit has been reached."
    request_failed: str = "The API request failed."
    unexpected_error: str = "An error occurred while generating a response."

    def for_error(self, error: ProviderError) -> str:
        """Return the user-facing text for a classified provider error."""
        return getattr(self, error.kind)


class AppConfig(BaseModel):
    """Main application configuration."""
    slack: SlackConfig
    provider: ProviderConfig
    redis: RedisConfig = Field(default_factory=RedisConfig)
    messages: ReplyMessages = Field(default_factory=ReplyMessages)
    dedup_backend: Literal["redis", "memory"] = Field(default="redis")
    dedup_ttl_seconds: int = Field(default=300, gt=0)
    log_level: str = Field(default="INFO")
