"""
Tests for the in-memory conversation store: lookups, message ordering,
expiry, capacity and concurrent appends.
"""

import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from heavylifter.agents import CLOSING_MESSAGE, GREETING_MESSAGE
from heavylifter.conversation_store import ConversationStore
from heavylifter.errors import NotFound, ValidationError
from heavylifter.schemas.conversation import ConversationStep, Role


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return ConversationStore(clock=clock)


def drive_to_completion(store, conversation_id):
    store.send_message(conversation_id, "I want to build a todo app")
    store.send_message(conversation_id, "It should work on web and mobile")
    store.send_message(conversation_id, "I need reminders and user login")
    return store.send_message(conversation_id, "Yes, that's exactly right")


class TestStart:
    def test_start_greets(self, store):
        result = store.start("user-1")
        state = result.state
        assert result.conversation_id.startswith("conv_")
        assert state.user_id == "user-1"
        assert state.current_step == ConversationStep.GREETING
        assert state.extracted_requirements is None
        assert len(state.messages) == 1
        assert state.messages[0].role == Role.ASSISTANT
        assert state.messages[0].content == GREETING_MESSAGE
        assert result.conversation_id in store

    def test_ids_are_distinct(self, store):
        ids = {store.start().conversation_id for _ in range(50)}
        assert len(ids) == 50

    def test_to_dict(self, store):
        data = store.start("u").to_dict()
        assert set(data) == {"conversationId", "message", "currentState"}
        assert data["currentState"]["currentStep"] == "greeting"
        assert data["message"]["role"] == "assistant"


class TestSendMessage:
    def test_unknown_conversation(self, store):
        store.start()
        with pytest.raises(NotFound, match="Conversation not found"):
            store.send_message("conv_missing", "hello")
        assert len(store) == 1

    def test_missing_id(self, store):
        with pytest.raises(NotFound):
            store.send_message(None, "hello")

    def test_non_text_message_rejected_without_append(self, store):
        conversation_id = store.start().conversation_id
        with pytest.raises(ValidationError):
            store.send_message(conversation_id, None)
        assert len(store.get(conversation_id).messages) == 1

    def test_messages_alternate(self, store):
        conversation_id = store.start().conversation_id
        texts = ["hello", "I want to build a todo app", "hmm", "", "web please"]
        for text in texts:
            store.send_message(conversation_id, text)

        messages = store.get(conversation_id).messages
        assert len(messages) == 2 * len(texts) + 1
        assert messages[0].role == Role.ASSISTANT
        for i, text in enumerate(texts):
            assert messages[2 * i + 1].role == Role.USER
            assert messages[2 * i + 1].content == text
            assert messages[2 * i + 2].role == Role.ASSISTANT

    def test_full_flow(self, store):
        conversation_id = store.start().conversation_id

        result = store.send_message(conversation_id, "I want to build a todo app")
        assert result.state.current_step == ConversationStep.REQUIREMENT_GATHERING

        result = store.send_message(conversation_id, "It should work on web and mobile")
        assert result.state.extracted_requirements["platforms"] == ["web", "android"]

        result = store.send_message(conversation_id, "I need reminders and user login")
        assert result.state.current_step == ConversationStep.CLARIFICATION
        assert result.state.extracted_requirements == {
            "platforms": ["web", "android"],
            "features": ["authentication"],
        }
        assert result.requires_action is False

        result = store.send_message(conversation_id, "Yes, that's exactly right")
        assert result.state.current_step == ConversationStep.COMPLETION
        assert result.requires_action is True

    def test_requirements_kept_when_reply_has_none(self, store):
        conversation_id = store.start().conversation_id
        store.send_message(conversation_id, "I want to build a web app")
        store.send_message(conversation_id, "hmm")
        assert store.get(conversation_id).extracted_requirements == {
            "platforms": ["web"],
            "features": [],
        }

    def test_completion_is_monotonic(self, store):
        conversation_id = store.start().conversation_id
        drive_to_completion(store, conversation_id)
        for text in ["no wait", "I want an android app", "hello"]:
            result = store.send_message(conversation_id, text)
            assert result.state.current_step == ConversationStep.COMPLETION
            assert result.requires_action is True

    def test_to_dict(self, store):
        conversation_id = store.start().conversation_id
        data = store.send_message(conversation_id, "hello").to_dict()
        assert data["userMessage"]["content"] == "hello"
        assert data["assistantMessage"]["role"] == "assistant"
        assert data["requiresAction"] is False
        assert len(data["currentState"]["messages"]) == 3

    def test_results_are_detached_from_later_turns(self, store):
        started = store.start()
        conversation_id = started.conversation_id
        first = store.send_message(conversation_id, "I want to build a web app")
        seen = store.get(conversation_id)

        store.send_message(conversation_id, "It should work on iphone too")

        assert len(started.state.messages) == 1
        assert len(first.state.messages) == 3
        assert len(seen.messages) == 3
        assert seen.extracted_requirements == {"platforms": ["web"], "features": []}
        assert store.get(conversation_id).extracted_requirements["platforms"] == ["ios"]

    def test_mutating_a_result_does_not_touch_the_store(self, store):
        conversation_id = store.start().conversation_id
        result = store.send_message(conversation_id, "I want to build a web app")
        result.state.messages.clear()
        result.state.extracted_requirements["platforms"].append("android")

        state = store.get(conversation_id)
        assert len(state.messages) == 3
        assert state.extracted_requirements["platforms"] == ["web"]

    def test_concurrent_sends_keep_every_message(self, store):
        conversation_id = store.start().conversation_id

        def worker():
            for _ in range(5):
                store.send_message(conversation_id, "hmm")

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        messages = store.get(conversation_id).messages
        assert len(messages) == 101
        roles = [m.role for m in messages[1:]]
        assert roles == [Role.USER, Role.ASSISTANT] * 50


class TestEnd:
    def test_end_summarizes(self, store):
        conversation_id = store.start().conversation_id
        drive_to_completion(store, conversation_id)

        result = store.end(conversation_id)
        assert result.message.content == CLOSING_MESSAGE
        assert result.final_requirements["platforms"] == ["web", "android"]
        assert result.summary["userMessages"] == 4
        assert result.summary["assistantMessages"] == 6
        assert result.summary["durationSeconds"] >= 0
        assert result.summary["text"].startswith(
            "Conversation with 4 user messages and 6 AI responses, lasting "
        )

        state = store.get(conversation_id)
        assert state.current_step == ConversationStep.COMPLETION
        assert state.messages[-1].content == CLOSING_MESSAGE

    def test_end_from_greeting(self, store):
        conversation_id = store.start().conversation_id
        result = store.end(conversation_id)
        assert result.final_requirements is None
        assert result.summary["userMessages"] == 0
        assert result.summary["assistantMessages"] == 2
        assert store.get(conversation_id).current_step == ConversationStep.COMPLETION

    def test_end_unknown(self, store):
        with pytest.raises(NotFound):
            store.end("conv_missing")

    def test_to_dict(self, store):
        conversation_id = store.start().conversation_id
        data = store.end(conversation_id).to_dict()
        assert set(data) == {"message", "finalRequirements", "conversationSummary"}


class TestEviction:
    def test_idle_conversations_expire(self, clock):
        store = ConversationStore(ttl_seconds=60, clock=clock)
        conversation_id = store.start().conversation_id

        clock.advance(30)
        store.send_message(conversation_id, "hello")
        clock.advance(59)
        assert store.get(conversation_id)

        clock.advance(2)
        assert conversation_id not in store
        with pytest.raises(NotFound):
            store.get(conversation_id)

    def test_ttl_zero_disables_expiry(self, clock):
        store = ConversationStore(ttl_seconds=0, clock=clock)
        conversation_id = store.start().conversation_id
        clock.advance(10 ** 9)
        assert store.get(conversation_id)

    def test_capacity_evicts_least_recently_active(self, clock):
        store = ConversationStore(max_conversations=2, clock=clock)
        first = store.start().conversation_id
        clock.advance(1)
        second = store.start().conversation_id
        clock.advance(1)
        store.send_message(first, "hello")
        clock.advance(1)

        third = store.start().conversation_id
        assert first in store
        assert second not in store
        assert third in store
        assert len(store) == 2
