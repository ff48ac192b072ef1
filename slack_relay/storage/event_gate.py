"""
Idempotent gate that drops re-delivered Slack events.
"""
import logging

from slack_relay.storage.dedup_cache import DedupCache

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 5


class EventGate:
    """
    Admits each event ID once per TTL window.

    Duplicate suppression is as strong as the cache's add-if-absent; under
    truly concurrent duplicate deliveries it is best effort, not exactly-once.
    """

    def __init__(self, cache: DedupCache, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    def admit(self, event_id: str) -> bool:
        """
        Check and record an event ID.

        Args:
            event_id: Deduplication key of the event

        Returns:
            True the first time the ID is seen inside the window, False after
        """
        admitted = self.cache.add(event_id, self.ttl_seconds)
        if not admitted:
            logger.info(f"Dropping already handled event {event_id}")
        return admitted
