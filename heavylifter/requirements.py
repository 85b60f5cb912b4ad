"""
Requirement extraction from free-text app descriptions.

Two entry points:
- extract_requirements(): full RequirementsAnalysis from a transcript, used
  by the stateless process-requirements endpoint.
- analyze_user_message(): the lighter per-turn analysis the conversation
  agent merges into a conversation's extracted requirements.

Both are total functions: missing signals always resolve to defaults.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from . import signals

MAX_CORE_FEATURES = 5
CONFIDENCE_FLOOR = 0.7
CONFIDENCE_CEILING = 0.99
CONFIRMATION_THRESHOLD = 0.8
MIN_CONFIRMED_FEATURES = 3

DEFAULT_STATE = "gathering_requirements"
COMPLETE_STATE = "complete"


@dataclass
class TechnicalRequirements:
    database: bool = False
    authentication: bool = False
    external_apis: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "database": self.database,
            "authentication": self.authentication,
            "externalApis": list(self.external_apis),
        }


@dataclass
class RequirementsAnalysis:
    """Structured requirements derived from one transcript."""
    platforms: list[str]
    core_features: list[str]
    ui_style: str = signals.DEFAULT_UI_STYLE
    complexity: str = signals.DEFAULT_COMPLEXITY
    technical_requirements: TechnicalRequirements = field(default_factory=TechnicalRequirements)

    def to_dict(self) -> dict:
        return {
            "platforms": list(self.platforms),
            "coreFeatures": list(self.core_features),
            "uiStyle": self.ui_style,
            "complexity": self.complexity,
            "technicalRequirements": self.technical_requirements.to_dict(),
        }


@dataclass
class RequirementExtraction:
    requirements: RequirementsAnalysis
    confidence: float


# ── Confidence scoring ───────────────────────────────────────────────────────

class ConfidenceScorer(Protocol):
    def __call__(self, transcript: str, requirements: RequirementsAnalysis) -> float: ...


class RandomConfidence:
    """
    Placeholder confidence: uniform in [0.7, 1.0), independent of the text.

    Pass a seeded ``random.Random`` to make it reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def __call__(self, transcript: str, requirements: RequirementsAnalysis) -> float:
        return self.rng.random() * (1.0 - CONFIDENCE_FLOOR) + CONFIDENCE_FLOOR


class SignalConfidence:
    """Deterministic confidence that grows with the number of keyword signals."""

    def __init__(self, step: float = 0.05):
        self.step = step

    def __call__(self, transcript: str, requirements: RequirementsAnalysis) -> float:
        score = CONFIDENCE_FLOOR + self.step * signals.count_signals(transcript)
        return round(min(score, CONFIDENCE_CEILING), 2)


def get_confidence_scorer(mode: str = "random", rng: Optional[random.Random] = None) -> ConfidenceScorer:
    if mode == "signals":
        return SignalConfidence()
    return RandomConfidence(rng)


# ── Extraction ───────────────────────────────────────────────────────────────

def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def extract_requirements(
    transcript: str,
    history: Optional[list[dict]] = None,
    scorer: Optional[ConfidenceScorer] = None,
) -> RequirementExtraction:
    """
    Analyze a transcript for platforms, features, style and technical needs.

    Args:
        transcript: The user's utterance
        history: Prior turns ({role, content}); accepted for API parity,
            the analysis only looks at the current transcript
        scorer: Confidence scorer, RandomConfidence() when omitted

    Returns:
        RequirementExtraction with the analysis and a confidence in [0.7, 1.0)
    """
    text = (transcript or "").lower()

    platforms = signals.detect_platforms(text) or ["web"]

    core_features = _unique(signals.detect_domain_features(text))[:MAX_CORE_FEATURES]
    if not core_features:
        core_features = list(signals.GENERIC_FEATURES)

    requirements = RequirementsAnalysis(
        platforms=platforms,
        core_features=core_features,
        ui_style=signals.detect_ui_style(text),
        complexity=signals.detect_complexity(text),
        technical_requirements=TechnicalRequirements(
            database=signals.needs_database(text),
            authentication=signals.needs_authentication(text),
            external_apis=signals.detect_external_apis(text),
        ),
    )

    scorer = scorer or RandomConfidence()
    return RequirementExtraction(requirements=requirements, confidence=scorer(text, requirements))


@dataclass
class MessageAnalysis:
    """Per-turn analysis merged into a conversation's requirements."""
    platforms: list[str]
    features: list[str]

    @property
    def initial_requirements(self) -> dict[str, Any]:
        return {"platforms": list(self.platforms), "features": list(self.features)}

    @property
    def platform_requirements(self) -> dict[str, Any]:
        return {"platforms": list(self.platforms)}

    @property
    def feature_requirements(self) -> dict[str, Any]:
        return {"features": list(self.features)}


def analyze_user_message(message: str) -> MessageAnalysis:
    """Platforms (no default) and coarse features mentioned in one message."""
    return MessageAnalysis(
        platforms=signals.detect_platforms(message),
        features=signals.detect_message_features(message),
    )


# ── Response selection ───────────────────────────────────────────────────────

class ResponseType:
    CLARIFICATION = "clarification"
    CONFIRMATION = "confirmation"
    COMPLETION = "completion"


@dataclass
class ConversationResponse:
    type: str
    message: str
    questions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"type": self.type, "message": self.message, "questions": list(self.questions)}


def select_conversation_response(extraction: RequirementExtraction) -> ConversationResponse:
    """Pick the assistant's reply from the extraction and its confidence."""
    requirements = extraction.requirements
    confidence = extraction.confidence

    if confidence < CONFIRMATION_THRESHOLD:
        return ConversationResponse(
            type=ResponseType.CLARIFICATION,
            message=(
                "I want to make sure I understand your requirements correctly. "
                "Could you provide more details about what you'd like your app to do?"
            ),
            questions=[
                "What specific features are most important to you?",
                "Which platforms do you need the app to work on?",
                "Do you need user accounts or data storage?",
            ],
        )

    if not requirements.platforms:
        return ConversationResponse(
            type=ResponseType.CLARIFICATION,
            message="I'd like to know which platforms you need your app to support.",
            questions=[
                "Do you need a web app, mobile app, or both?",
                "Should it work on iOS, Android, or both?",
            ],
        )

    if len(requirements.core_features) >= MIN_CONFIRMED_FEATURES:
        features = ", ".join(requirements.core_features[:3])
        platforms = ", ".join(requirements.platforms)
        return ConversationResponse(
            type=ResponseType.CONFIRMATION,
            message=(
                f"Great! I understand you want to create a {requirements.complexity} "
                f"{requirements.ui_style}-style app for {platforms} with features like "
                f"{features}. Does this sound correct?"
            ),
            questions=[
                "Are these the main features you want?",
                "Would you like to add any other features?",
                "Should I proceed with generating the app?",
            ],
        )

    return ConversationResponse(
        type=ResponseType.CLARIFICATION,
        message=(
            "I'm getting a good understanding of what you want. To make sure I create "
            "the perfect app for you, could you tell me more about:"
        ),
        questions=[
            "What's the primary goal of your app?",
            "Who are the main users?",
            "Are there any specific features you definitely want to include?",
        ],
    )


@dataclass
class ProcessedTranscript:
    extraction: RequirementExtraction
    response: ConversationResponse
    next_state: str

    def to_dict(self) -> dict:
        return {
            "requirements": self.extraction.requirements.to_dict(),
            "confidence": self.extraction.confidence,
            "conversationResponse": self.response.to_dict(),
            "nextState": self.next_state,
        }


def process_transcript(
    transcript: str,
    history: Optional[list[dict]] = None,
    current_state: Optional[str] = None,
    scorer: Optional[ConfidenceScorer] = None,
) -> ProcessedTranscript:
    """Stateless analysis + reply used by the process-requirements endpoint."""
    current_state = current_state or DEFAULT_STATE
    extraction = extract_requirements(transcript, history, scorer)
    response = select_conversation_response(extraction)
    next_state = COMPLETE_STATE if response.type == ResponseType.COMPLETION else current_state
    return ProcessedTranscript(extraction=extraction, response=response, next_state=next_state)
