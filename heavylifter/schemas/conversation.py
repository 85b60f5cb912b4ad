"""
Conversation data model: messages, steps and per-conversation state.
"""

from __future__ import annotations

import copy
import random
import string
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_id(prefix: str, rng: Optional[random.Random] = None) -> str:
    """``<prefix>_<epoch-ms>_<9 base36 chars>``; unique with high probability only."""
    rng = rng or random
    suffix = "".join(rng.choice(_ID_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ConversationStep(str, Enum):
    """Phases of the requirement-gathering conversation."""
    GREETING = "greeting"
    REQUIREMENT_GATHERING = "requirement_gathering"
    CLARIFICATION = "clarification"
    CONFIRMATION = "confirmation"
    COMPLETION = "completion"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationMessage:
    role: Role
    content: str
    timestamp: str = field(default_factory=utc_now_iso)
    message_id: str = field(default_factory=lambda: generate_id("msg"))

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp,
            "messageId": self.message_id,
        }


@dataclass
class ConversationContext:
    user_preferences: dict[str, Any] = field(default_factory=dict)
    technical_constraints: dict[str, Any] = field(default_factory=dict)
    previous_apps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "userPreferences": dict(self.user_preferences),
            "technicalConstraints": dict(self.technical_constraints),
            "previousApps": list(self.previous_apps),
        }


@dataclass
class ConversationState:
    """One conversation. Messages are append-only and chronological."""
    conversation_id: str
    user_id: Optional[str] = None
    messages: list[ConversationMessage] = field(default_factory=list)
    current_step: ConversationStep = ConversationStep.GREETING
    extracted_requirements: Optional[dict[str, Any]] = None
    context: ConversationContext = field(default_factory=ConversationContext)
    created_at: float = field(default_factory=time.monotonic)
    last_activity: float = field(default_factory=time.monotonic)

    def snapshot(self) -> "ConversationState":
        """Detached copy; later turns on this conversation do not show up in it."""
        return replace(
            self,
            messages=list(self.messages),
            extracted_requirements=copy.deepcopy(self.extracted_requirements),
            context=copy.deepcopy(self.context),
        )

    def append(self, message: ConversationMessage):
        self.messages.append(message)

    def count(self, role: Role) -> int:
        return sum(1 for m in self.messages if m.role == role)

    def summary(self) -> dict:
        """Message counts and elapsed whole seconds between first and last message."""
        user_count = self.count(Role.USER)
        assistant_count = self.count(Role.ASSISTANT)
        duration = 0
        if self.messages:
            first = datetime.fromisoformat(self.messages[0].timestamp)
            last = datetime.fromisoformat(self.messages[-1].timestamp)
            duration = round((last - first).total_seconds())
        return {
            "userMessages": user_count,
            "assistantMessages": assistant_count,
            "durationSeconds": duration,
            "text": (
                f"Conversation with {user_count} user messages and {assistant_count} "
                f"AI responses, lasting {duration} seconds."
            ),
        }

    def to_dict(self) -> dict:
        return {
            "conversationId": self.conversation_id,
            "userId": self.user_id,
            "messages": [m.to_dict() for m in self.messages],
            "currentStep": self.current_step.value,
            "extractedRequirements": (
                dict(self.extracted_requirements) if self.extracted_requirements is not None else None
            ),
            "context": self.context.to_dict(),
        }
