"""
Conversation Agent - keyword-driven requirement gathering.

Conversation Flow:
1. GREETING: wait for an app idea
2. REQUIREMENT_GATHERING: collect platforms, then features
3. CLARIFICATION: restate what was heard, wait for confirmation
4. COMPLETION: requirements are settled, the caller can generate the app

The agent decides the reply and the next step; it never mutates the
conversation. The conversation store applies the reply.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .. import signals
from ..requirements import analyze_user_message
from ..schemas.conversation import ConversationState, ConversationStep

GREETING_MESSAGE = (
    "Hello! I'm your AI app development assistant. I'd love to help you create your "
    "perfect app. To get started, could you tell me what kind of app you'd like to build?"
)

CLOSING_MESSAGE = (
    "Thank you for sharing your app idea! I have a good understanding of what you want "
    "to create. You can now proceed to generate your app, or feel free to ask me any "
    "other questions."
)


@dataclass
class AgentReply:
    """What the agent wants to say and where the conversation goes next."""
    content: str
    next_step: ConversationStep
    extracted_requirements: Optional[dict[str, Any]] = None
    requires_action: bool = False


def _merge(current: Optional[dict[str, Any]], update: dict[str, Any]) -> dict[str, Any]:
    """Shallow field overwrite, the newer turn wins."""
    return {**(current or {}), **update}


def _describe(requirements: dict[str, Any]) -> str:
    features = requirements.get("features") or []
    platforms = requirements.get("platforms") or []
    parts = []
    if features:
        parts.append(", ".join(features))
    else:
        parts.append("the features you described")
    if platforms:
        parts.append(f"running on {', '.join(platforms)}")
    return " ".join(parts)


class ConversationAgent:
    """Maps (current step, user message) to the assistant's reply."""

    def greeting(self) -> str:
        return GREETING_MESSAGE

    def closing(self) -> str:
        return CLOSING_MESSAGE

    def respond(self, state: ConversationState, message: str) -> AgentReply:
        step = state.current_step

        if step == ConversationStep.GREETING:
            return self._greeting(message)
        if step == ConversationStep.REQUIREMENT_GATHERING:
            return self._gathering(state, message)
        if step in (ConversationStep.CLARIFICATION, ConversationStep.CONFIRMATION):
            return self._clarification(message)
        return self._completed()

    def _greeting(self, message: str) -> AgentReply:
        if signals.contains_app_idea(message):
            analysis = analyze_user_message(message)
            return AgentReply(
                content=(
                    "That sounds like a great app idea! I can help you build that. Let me "
                    "ask a few questions to make sure I understand exactly what you need. "
                    "Which platforms would you like this app to work on - web, mobile, or both?"
                ),
                next_step=ConversationStep.REQUIREMENT_GATHERING,
                extracted_requirements=analysis.initial_requirements,
            )
        return AgentReply(
            content=(
                "I'd love to help you create an app! Could you tell me what kind of app you "
                "have in mind? For example, is it a todo app, a fitness tracker, a recipe "
                "manager, or something else entirely?"
            ),
            next_step=ConversationStep.GREETING,
        )

    def _gathering(self, state: ConversationState, message: str) -> AgentReply:
        analysis = analyze_user_message(message)

        if signals.contains_platform_info(message):
            return AgentReply(
                content=(
                    "Perfect! Now, what specific features are most important to you? For "
                    "example, do you need user accounts, data storage, notifications, or "
                    "integration with other services?"
                ),
                next_step=ConversationStep.REQUIREMENT_GATHERING,
                extracted_requirements=_merge(
                    state.extracted_requirements, analysis.platform_requirements
                ),
            )

        if signals.contains_feature_info(message):
            merged = _merge(state.extracted_requirements, analysis.feature_requirements)
            return AgentReply(
                content=(
                    "Excellent! I'm getting a clear picture of what you want. Just to make "
                    f"sure I understand correctly, you want an app with {_describe(merged)}. "
                    "Is that right?"
                ),
                next_step=ConversationStep.CLARIFICATION,
                extracted_requirements=merged,
            )

        return AgentReply(
            content=(
                "I'm listening! Tell me more about what you'd like your app to do. What are "
                "the main features or functionality you need?"
            ),
            next_step=ConversationStep.REQUIREMENT_GATHERING,
        )

    def _clarification(self, message: str) -> AgentReply:
        if signals.contains_confirmation(message):
            return AgentReply(
                content=(
                    "Wonderful! I have all the information I need to create your app. You "
                    "can now generate the app, or if you'd like to make any changes, just "
                    "let me know!"
                ),
                next_step=ConversationStep.COMPLETION,
                requires_action=True,
            )
        return AgentReply(
            content=(
                "I want to make sure I get this exactly right. Could you clarify which "
                "features or platforms I got wrong?"
            ),
            next_step=ConversationStep.CLARIFICATION,
        )

    def _completed(self) -> AgentReply:
        # Terminal: stay in completion
        return AgentReply(
            content=(
                "Your app requirements are all set. Go ahead and generate your app whenever "
                "you're ready."
            ),
            next_step=ConversationStep.COMPLETION,
            requires_action=True,
        )
