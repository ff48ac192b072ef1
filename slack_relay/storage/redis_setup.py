"""Redis infrastructure setup for the event deduplication cache."""

from redis import Redis

from slack_relay.models.config import RedisConfig
from slack_relay.utils.logger import logger


def setup_redis_client(config: RedisConfig) -> Redis:
    """Set up a Redis client.

    Args:
        config: Redis configuration.

    Returns:
        Configured Redis client.
    """
    try:
        client = Redis(
            host=config.host,
            port=config.port,
            password=config.password,
            decode_responses=True,
        )
        logger.info(f"Successfully configured Redis client for {config.host}:{config.port}")
        return client
    except Exception as e:
        logger.error(f"Error setting up Redis client: {str(e)}")
        raise
