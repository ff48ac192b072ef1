"""Configuration loading and management."""
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from slack_relay.models.config import (
    DEFAULT_SYSTEM_PROMPT,
    AppConfig,
    ProviderConfig,
    RedisConfig,
    ReplyMessages,
    SlackConfig,
)
from slack_relay.utils.logger import logger

# Project root is two levels up from this file
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_PROVIDER_CONFIG_PATH = PROJECT_ROOT / "config" / "provider.yaml"

PROVIDER_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "openai": {
        "endpoint": "https://api.openai.com/v1/chat/completions",
        "model": "gpt-4o",
        "temperature": 0.5,
        "system_prompt": DEFAULT_SYSTEM_PROMPT,
    },
    "cohere": {
        "endpoint": "https://api.cohere.com/v1/chat",
        "model": "command-r-plus",
        "connectors": ["web-search"],
    },
}

PROVIDER_KEY_VARS = {
    "openai": "OPENAI_API_KEY",
    "cohere": "CO_API_KEY",
}


def _require_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise ValueError(f"Required environment variable {key} is not set")
    return value


def load_env_config(env_path: Optional[str] = None) -> None:
    """Load environment variables from .env file.

    Args:
        env_path: Optional path to .env file. If None, searches in default locations.
    """
    if env_path and not os.path.exists(env_path):
        logger.warning(f"Specified .env file not found at {env_path}")
        return

    load_dotenv(env_path)
    logger.info("Loaded environment variables")


def load_provider_settings(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load provider settings and reply messages from a YAML file.

    Args:
        config_path: Path to the provider YAML file. Defaults to
            config/provider.yaml in the project root.

    Returns:
        The parsed mapping, empty when the file does not exist.
    """
    path = Path(config_path) if config_path else DEFAULT_PROVIDER_CONFIG_PATH
    if not path.exists():
        logger.warning(f"Provider configuration file not found at {path}, using defaults")
        return {}

    try:
        with open(path, 'r') as f:
            settings = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Error loading provider configuration: {str(e)}")
        raise

    if not isinstance(settings, dict):
        raise ValueError(f"Provider configuration at {path} must be a mapping")

    logger.info(f"Loaded provider configuration from {path}")
    return settings


def build_provider_config(name: str, settings: Dict[str, Any]) -> ProviderConfig:
    """Merge built-in defaults, YAML overrides and the API key for one provider."""
    if name not in PROVIDER_DEFAULTS:
        raise ValueError(f"Unsupported AI provider: {name}")

    values = dict(PROVIDER_DEFAULTS[name])
    values.update((settings.get("providers") or {}).get(name) or {})
    values["name"] = name
    values["api_key"] = _require_env(PROVIDER_KEY_VARS[name])
    return ProviderConfig(**values)


def load_app_config(
    env_path: Optional[str] = None,
    provider_config_path: Optional[str] = None
) -> AppConfig:
    """Load complete application configuration.

    Args:
        env_path: Optional path to .env file.
        provider_config_path: Optional path to provider configuration YAML file.

    Returns:
        Complete application configuration.

    Raises:
        ValueError: If a required environment variable is missing.
    """
    load_env_config(env_path)
    settings = load_provider_settings(provider_config_path or os.getenv("PROVIDER_CONFIG_PATH"))

    slack_config = SlackConfig(
        bot_token=_require_env("SLACK_BOT_TOKEN"),
        bot_member_id=_require_env("BOT_MEMBER_ID"),
        bot_channel_id=_require_env("BOT_CHANNEL_ID"),
    )

    redis_config = RedisConfig(
        host=os.getenv("REDIS_HOST", "localhost"),
        port=int(os.getenv("REDIS_PORT", "6379")),
        password=os.getenv("REDIS_PASSWORD") or None,
    )

    provider_name = os.getenv("AI_PROVIDER") or settings.get("provider") or "openai"
    provider_config = build_provider_config(provider_name.lower(), settings)

    config = AppConfig(
        slack=slack_config,
        provider=provider_config,
        redis=redis_config,
        messages=ReplyMessages(**(settings.get("messages") or {})),
        dedup_backend=os.getenv("DEDUP_BACKEND", "redis"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )

    logger.info(f"Loaded complete application configuration (provider: {provider_config.name})")
    return config
