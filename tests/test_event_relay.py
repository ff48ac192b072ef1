"""Tests for the EventRelay orchestrator."""

import httpx
import pytest
import redis

from conftest import BOT_ID, DM_CHANNEL, FakeSlackClient, message_event, thread_message
from slack_relay.errors import ThreadFetchError
from slack_relay.llm.openai_chat import OpenAIChatProvider
from slack_relay.models.config import ReplyMessages
from slack_relay.processor.scope_resolver import ConversationScopeResolver
from slack_relay.relay.event_relay import NG, OK, EventRelay
from slack_relay.storage.dedup_cache import MemoryDedupCache
from slack_relay.storage.event_gate import EventGate


class FakeProvider:
    def __init__(self, reply="**Sure**, here it is."):
        self.reply = reply
        self.calls = []

    def answer(self, messages):
        self.calls.append(messages)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


class UnreachableCache:
    def add(self, key, ttl_seconds):
        raise redis.ConnectionError("Error 111 connecting to localhost:6379")


def make_relay(slack=None, provider=None, clock=None, fetch_thread=None, cache=None):
    slack = slack or FakeSlackClient()
    provider = provider or FakeProvider()
    resolver = ConversationScopeResolver(BOT_ID, DM_CHANNEL, fetch_thread or slack.get_thread_messages)
    if cache is None:
        cache = MemoryDedupCache(clock=clock) if clock else MemoryDedupCache()
    gate = EventGate(cache)
    relay = EventRelay(
        bot_member_id=BOT_ID,
        gate=gate,
        resolver=resolver,
        provider=provider,
        slack_client=slack,
    )
    return relay, slack, provider


# ── Classification before the gate ──────────────────────────

class TestClassification:
    def test_url_verification_echoes_challenge(self):
        relay, slack, provider = make_relay()
        assert relay.handle({"type": "url_verification", "challenge": "abc123"}) == "abc123"
        assert provider.calls == []

    @pytest.mark.parametrize("payload", [
        {"type": "app_rate_limited"},
        {"type": "event_callback", "event": {"type": "reaction_added"}},
        {"type": "event_callback"},
        {"type": "event_callback", "event": "message"},
        {"type": "event_callback", "event": ["message"]},
    ])
    def test_other_payloads_are_acknowledged(self, payload):
        relay, slack, provider = make_relay()
        assert relay.handle(payload) == OK
        assert provider.calls == []

    @pytest.mark.parametrize("subtype", ["message_changed", "message_deleted", "bot_message"])
    def test_edits_and_deletions_are_ignored(self, subtype):
        relay, slack, provider = make_relay()
        assert relay.handle(message_event(subtype=subtype)) == OK
        assert provider.calls == []
        assert slack.posts == []

    def test_file_share_is_a_new_message(self):
        relay, slack, provider = make_relay()
        assert relay.handle(message_event(subtype="file_share")) == OK
        assert len(slack.posts) == 1

    def test_bot_own_message_is_ignored(self):
        relay, slack, provider = make_relay()
        assert relay.handle(message_event(user=BOT_ID)) == OK
        assert provider.calls == []
        assert slack.posts == []

    def test_malformed_event_is_acknowledged(self):
        relay, slack, provider = make_relay()
        payload = {"type": "event_callback", "event": {"type": "message", "text": "no channel"}}
        assert relay.handle(payload) == OK
        assert provider.calls == []


# ── Answering ───────────────────────────────────────────────

class TestAnswering:
    def test_reply_is_converted_and_posted_in_thread(self):
        relay, slack, provider = make_relay()

        assert relay.handle(message_event()) == OK

        assert slack.posts == [{
            "channel": "C1",
            "text": " *Sure* , here it is.",
            "thread_ts": "1700000000.000100",
        }]
        assert provider.calls[0][0].text == f"<@{BOT_ID}> hello"

    def test_unrelated_message_is_silent(self):
        relay, slack, provider = make_relay()
        assert relay.handle(message_event(text="just chatting")) == OK
        assert provider.calls == []
        assert slack.posts == []

    def test_empty_answer_posts_nothing(self):
        relay, slack, provider = make_relay(provider=FakeProvider(reply=""))
        assert relay.handle(message_event()) == OK
        assert slack.posts == []

    def test_thread_history_is_sent(self):
        root = "1700000000.000001"
        history = [thread_message("U1", f"<@{BOT_ID}> q1"), thread_message(BOT_ID, "a1")]
        slack = FakeSlackClient(threads={("C1", root): history})
        relay, _, provider = make_relay(slack=slack)

        assert relay.handle(message_event(text="q2", thread_ts=root)) == OK

        assert provider.calls == [history]
        assert slack.posts[0]["thread_ts"] == "1700000000.000100"


# ── Deduplication ───────────────────────────────────────────

class TestDeduplication:
    def test_redelivery_is_answered_once(self):
        relay, slack, provider = make_relay()

        assert relay.handle(message_event()) == OK
        assert relay.handle(message_event()) == OK

        assert len(provider.calls) == 1
        assert len(slack.posts) == 1

    def test_redelivery_after_ttl_is_answered_again(self, clock):
        relay, slack, provider = make_relay(clock=clock)

        relay.handle(message_event())
        clock.advance(301)
        relay.handle(message_event())

        assert len(slack.posts) == 2

    def test_distinct_messages_are_both_answered(self):
        relay, slack, provider = make_relay()

        relay.handle(message_event(client_msg_id="a"))
        relay.handle(message_event(client_msg_id="b"))

        assert len(slack.posts) == 2

    def test_missing_client_msg_id_falls_back_to_ts(self):
        relay, slack, provider = make_relay()
        event = message_event()
        del event["event"]["client_msg_id"]

        relay.handle(event)
        relay.handle(event)

        assert len(slack.posts) == 1


# ── Failures ────────────────────────────────────────────────

class TestFailures:
    def test_thread_fetch_error_answers_ng_with_notice(self):
        def failing_fetch(channel, thread_ts):
            raise ThreadFetchError("thread_not_found")

        relay, slack, provider = make_relay(fetch_thread=failing_fetch)

        assert relay.handle(message_event(text="more", thread_ts="1700000000.000001")) == NG
        assert provider.calls == []
        assert slack.posts[0]["text"] == ReplyMessages().unexpected_error

    def test_unexpected_provider_exception_answers_ng(self):
        relay, slack, provider = make_relay(provider=FakeProvider(reply=RuntimeError("boom")))

        assert relay.handle(message_event()) == NG
        assert slack.posts[0]["text"] == ReplyMessages().unexpected_error

    def test_failed_notice_still_answers_ng(self):
        slack = FakeSlackClient(fail_post=True)
        relay, _, _ = make_relay(slack=slack, provider=FakeProvider(reply=RuntimeError("boom")))

        assert relay.handle(message_event()) == NG

    def test_dedup_store_outage_answers_ng_without_reply(self):
        relay, slack, provider = make_relay(cache=UnreachableCache())

        assert relay.handle(message_event()) == NG
        assert provider.calls == []
        assert slack.posts == []

    def test_empty_provider_reply_posts_fixed_text(self, openai_config):
        client = httpx.Client(transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"choices": []})
        ))
        provider = OpenAIChatProvider(openai_config, BOT_ID, http_client=client)
        relay, slack, _ = make_relay(provider=provider)

        assert relay.handle(message_event()) == OK
        assert slack.posts[0]["text"] == ReplyMessages().empty_reply
