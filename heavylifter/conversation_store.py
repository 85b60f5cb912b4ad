"""
In-memory conversation store.

Owns every ConversationState for the lifetime of the process. One store
instance is created by the web app factory and handed to the routes.

Mutations on a single conversation are serialized by a per-conversation
lock, so concurrent send_message calls never lose an append, and callers
only ever see snapshots taken under that lock. Entries expire after
``ttl_seconds`` without activity and the oldest entries are evicted when
``max_conversations`` is reached (0 disables either limit).
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .agents.conversation_agent import ConversationAgent
from .errors import NotFound, ValidationError
from .schemas.conversation import (
    ConversationMessage,
    ConversationState,
    ConversationStep,
    Role,
    generate_id,
)

logger = logging.getLogger(__name__)


@dataclass
class StartResult:
    conversation_id: str
    message: ConversationMessage
    state: ConversationState

    def to_dict(self) -> dict:
        return {
            "conversationId": self.conversation_id,
            "message": self.message.to_dict(),
            "currentState": self.state.to_dict(),
        }


@dataclass
class SendResult:
    user_message: ConversationMessage
    assistant_message: ConversationMessage
    state: ConversationState
    requires_action: bool = False

    def to_dict(self) -> dict:
        return {
            "userMessage": self.user_message.to_dict(),
            "assistantMessage": self.assistant_message.to_dict(),
            "currentState": self.state.to_dict(),
            "requiresAction": self.requires_action,
        }


@dataclass
class EndResult:
    message: ConversationMessage
    final_requirements: Optional[dict[str, Any]]
    summary: dict

    def to_dict(self) -> dict:
        return {
            "message": self.message.to_dict(),
            "finalRequirements": self.final_requirements,
            "conversationSummary": self.summary,
        }


class _Entry:
    __slots__ = ("state", "lock")

    def __init__(self, state: ConversationState):
        self.state = state
        self.lock = threading.Lock()


class ConversationStore:
    """
    Keyed table of conversations plus the operations that drive them.

    Usage:
        store = ConversationStore()
        started = store.start("user-1")
        result = store.send_message(started.conversation_id, "I want a todo app")
    """

    def __init__(
        self,
        agent: Optional[ConversationAgent] = None,
        ttl_seconds: float = 3600.0,
        max_conversations: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.agent = agent or ConversationAgent()
        self.ttl_seconds = ttl_seconds
        self.max_conversations = max_conversations
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, conversation_id: str) -> bool:
        with self._lock:
            entry = self._entries.get(conversation_id)
            return entry is not None and not self._is_expired(entry, self._clock())

    # ── Eviction ──────────────────────────────────────────────────

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return bool(self.ttl_seconds) and now - entry.state.last_activity > self.ttl_seconds

    def _prune_expired(self, now: float):
        """Drop expired entries. Caller holds ``self._lock``."""
        expired = [cid for cid, e in self._entries.items() if self._is_expired(e, now)]
        for cid in expired:
            del self._entries[cid]
        if expired:
            logger.info("Expired %d idle conversation(s)", len(expired))

    def _make_room(self):
        """Evict least recently active entries until one more fits. Caller holds the lock."""
        if not self.max_conversations:
            return
        while len(self._entries) >= self.max_conversations:
            oldest = min(self._entries, key=lambda cid: self._entries[cid].state.last_activity)
            del self._entries[oldest]
            logger.info("Evicted conversation %s (store at capacity)", oldest)

    def _lookup(self, conversation_id: Optional[str]) -> _Entry:
        if not conversation_id:
            raise NotFound("Conversation not found")
        with self._lock:
            entry = self._entries.get(conversation_id)
            if entry is not None and self._is_expired(entry, self._clock()):
                del self._entries[conversation_id]
                entry = None
        if entry is None:
            raise NotFound("Conversation not found")
        return entry

    # ── Operations ────────────────────────────────────────────────

    def start(self, user_id: Optional[str] = None) -> StartResult:
        """Create a conversation in the greeting step with the canned greeting."""
        now = self._clock()
        state = ConversationState(
            conversation_id=generate_id("conv"),
            user_id=user_id,
            created_at=now,
            last_activity=now,
        )
        greeting = ConversationMessage(role=Role.ASSISTANT, content=self.agent.greeting())
        state.append(greeting)
        snapshot = state.snapshot()

        with self._lock:
            self._prune_expired(now)
            self._make_room()
            self._entries[state.conversation_id] = _Entry(state)

        logger.info("Started conversation %s for user %s", state.conversation_id, user_id)
        return StartResult(conversation_id=state.conversation_id, message=greeting, state=snapshot)

    def send_message(self, conversation_id: Optional[str], text: Optional[str]) -> SendResult:
        """Append the user's message and the agent's reply, then advance the step."""
        entry = self._lookup(conversation_id)
        if not isinstance(text, str):
            raise ValidationError("Message is required")

        with entry.lock:
            state = entry.state
            reply = self.agent.respond(state, text)

            user_message = ConversationMessage(role=Role.USER, content=text)
            assistant_message = ConversationMessage(role=Role.ASSISTANT, content=reply.content)
            state.append(user_message)
            state.append(assistant_message)

            previous = state.current_step
            state.current_step = reply.next_step
            if reply.extracted_requirements is not None:
                state.extracted_requirements = reply.extracted_requirements
            state.last_activity = self._clock()
            snapshot = state.snapshot()

        if previous != reply.next_step:
            logger.info(
                "Conversation %s: %s -> %s", conversation_id, previous.value, reply.next_step.value
            )

        return SendResult(
            user_message=user_message,
            assistant_message=assistant_message,
            state=snapshot,
            requires_action=reply.requires_action,
        )

    def get(self, conversation_id: Optional[str]) -> ConversationState:
        entry = self._lookup(conversation_id)
        with entry.lock:
            return entry.state.snapshot()

    def end(self, conversation_id: Optional[str]) -> EndResult:
        """Append the closing message, mark completion and summarize."""
        entry = self._lookup(conversation_id)

        with entry.lock:
            state = entry.state
            closing = ConversationMessage(role=Role.ASSISTANT, content=self.agent.closing())
            state.append(closing)
            state.current_step = ConversationStep.COMPLETION
            state.last_activity = self._clock()
            summary = state.summary()
            final_requirements = copy.deepcopy(state.extracted_requirements)

        logger.info("Ended conversation %s: %s", conversation_id, summary["text"])
        return EndResult(
            message=closing,
            final_requirements=final_requirements,
            summary=summary,
        )
