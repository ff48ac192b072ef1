"""
Slack API client used for thread lookups, file downloads and replies.
"""
from typing import Any, Dict, List, Optional
import logging

import httpx
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from slack_relay.errors import ThreadFetchError
from slack_relay.models.conversation import ThreadMessage

logger = logging.getLogger(__name__)


class SlackClient:
    """
    A thin wrapper around the Slack Web API client.

    Calls are made once; failed calls are not retried because Slack's own
    event re-delivery is the only retry mechanism.
    """

    def __init__(
        self,
        token: str,
        web_client: Optional[WebClient] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the Slack client.

        Args:
            token: Slack bot token
            web_client: Optional preconfigured WebClient
            http_client: Optional httpx client used for file downloads
        """
        self.token = token
        self.client = web_client or WebClient(token=token)
        self.http_client = http_client or httpx.Client(follow_redirects=True, timeout=None)

    def make_api_call(
        self,
        method_name: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Make a single Slack API call.

        Args:
            method_name: Name of the WebClient method to call
            **kwargs: Arguments to pass to the API method

        Returns:
            The API response

        Raises:
            SlackApiError: If Slack reports a failure
        """
        method = getattr(self.client, method_name)
        response = method(**kwargs)

        if not response["ok"]:
            error = response.get("error", "unknown_error")
            raise SlackApiError(f"Slack API returned error: {error}", response)

        return response

    def get_thread_messages(self, channel: str, thread_ts: str) -> List[ThreadMessage]:
        """
        Get every message of a thread, root first.

        Args:
            channel: Channel ID
            thread_ts: Timestamp of the thread root

        Returns:
            List of thread messages in delivery order

        Raises:
            ThreadFetchError: If Slack reports an error for the lookup
        """
        try:
            result = self.make_api_call(
                "conversations_replies",
                channel=channel,
                ts=thread_ts,
            )
        except SlackApiError as e:
            error = e.response.get("error", "unknown_error") if e.response is not None else str(e)
            logger.error(f"Error getting thread {thread_ts} in {channel}: {error}")
            raise ThreadFetchError(error) from e

        return [ThreadMessage.from_slack(message) for message in result["messages"]]

    def download_file(self, url: str) -> bytes:
        """
        Download a private file using the bot token.

        Args:
            url: The file's url_private

        Returns:
            Raw file bytes
        """
        response = self.http_client.get(url, headers={"Authorization": f"Bearer {self.token}"})
        response.raise_for_status()
        return response.content

    def post_message(self, channel: str, text: str, thread_ts: Optional[str] = None) -> Dict[str, Any]:
        """
        Post a message, optionally as a thread reply.

        Args:
            channel: Channel ID
            text: Message text in Slack markup
            thread_ts: Timestamp to reply under

        Returns:
            The API response
        """
        logger.debug(f"Posting reply to {channel} (thread {thread_ts})")
        return self.make_api_call(
            "chat_postMessage",
            channel=channel,
            text=text,
            thread_ts=thread_ts,
        )
