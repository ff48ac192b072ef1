"""Pytest configuration and shared fixtures."""

import pytest

from slack_relay.models.config import ProviderConfig
from slack_relay.models.conversation import ThreadMessage

BOT_ID = "UBOT"
DM_CHANNEL = "DBOT"


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSlackClient:
    """Records posted replies and serves canned threads and files."""

    def __init__(self, threads=None, files=None, fail_post=False):
        self.threads = threads or {}
        self.files = files or {}
        self.fail_post = fail_post
        self.posts = []
        self.fetches = []
        self.downloads = []

    def get_thread_messages(self, channel, thread_ts):
        self.fetches.append((channel, thread_ts))
        return self.threads[(channel, thread_ts)]

    def download_file(self, url):
        self.downloads.append(url)
        return self.files[url]

    def post_message(self, channel, text, thread_ts=None):
        if self.fail_post:
            raise RuntimeError("post failed")
        self.posts.append({"channel": channel, "text": text, "thread_ts": thread_ts})
        return {"ok": True}


def message_event(**overrides):
    """A Slack event_callback body for a plain channel message."""
    event = {
        "type": "message",
        "channel": "C1",
        "user": "U1",
        "text": f"<@{BOT_ID}> hello",
        "ts": "1700000000.000100",
        "client_msg_id": "msg-1",
    }
    event.update(overrides)
    return {"type": "event_callback", "event": event}


def thread_message(author_id, text, files=None):
    return ThreadMessage.from_slack({"user": author_id, "text": text, "files": files or []})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def openai_config():
    return ProviderConfig(
        name="openai",
        api_key="sk-test",
        endpoint="https://api.openai.com/v1/chat/completions",
        model="gpt-4o",
        temperature=0.5,
        system_prompt="You are a helpful assistant.",
    )


@pytest.fixture
def cohere_config():
    return ProviderConfig(
        name="cohere",
        api_key="co-test",
        endpoint="https://api.cohere.com/v1/chat",
        model="command-r-plus",
        connectors=["web-search"],
    )
