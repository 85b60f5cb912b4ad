"""
Shared keyword classifiers for user utterances.

Central module for every substring test the conversation flow and the
requirement extractor rely on. Each classifier is a plain function over the
raw text (lower-cased internally) so it can be tested on its own.

Matching is plain substring containment, not word matching: "todo"
contains "do", "website" contains "web". The conversation flow depends on
that behaviour, so it is kept as is.
"""

from __future__ import annotations

from typing import Iterable


# ── Conversation intent patterns ─────────────────────────────────────────────

APP_INTENT_KEYWORDS = ("app", "application", "build", "create", "develop", "make")

PLATFORM_KEYWORDS = ("web", "mobile", "android", "ios", "iphone", "website")

FEATURE_INTENT_KEYWORDS = ("feature", "function", "do", "should", "need", "want")

CONFIRMATION_KEYWORDS = ("yes", "correct", "right", "exactly", "perfect", "good")


# ── Requirement patterns ─────────────────────────────────────────────────────

# Platform name -> substrings that select it. Order is the output order.
PLATFORM_PATTERNS: dict[str, tuple[str, ...]] = {
    "web": ("web", "website"),
    "android": ("android", "mobile"),
    "ios": ("ios", "iphone"),
}

# App domain keyword -> features it implies
DOMAIN_FEATURES: dict[str, list[str]] = {
    "todo": ["task management", "reminders", "categories", "due dates"],
    "recipe": ["ingredients", "cooking instructions", "shopping lists", "meal planning"],
    "fitness": ["workouts", "exercise tracking", "progress charts", "health data"],
    "budget": ["expense tracking", "categories", "spending analysis", "reports"],
    "social": ["user profiles", "posts", "comments", "likes", "sharing"],
    "habit": ["daily tracking", "streaks", "reminders", "progress visualization"],
    "meditation": ["guided sessions", "timer", "progress tracking", "calming sounds"],
    "language": ["flashcards", "lessons", "progress tracking", "quizzes"],
}

GENERIC_FEATURES = ["user interface", "data management", "responsive design"]

# Evaluated in order; a later match overrides an earlier one
UI_STYLE_PATTERNS: list[tuple[str, tuple[str, ...]]] = [
    ("minimalist", ("minimalist", "simple")),
    ("corporate", ("corporate", "professional")),
]
DEFAULT_UI_STYLE = "modern"

COMPLEXITY_PATTERNS: list[tuple[str, tuple[str, ...]]] = [
    ("basic", ("simple", "basic")),
    ("advanced", ("complex", "advanced")),
]
DEFAULT_COMPLEXITY = "intermediate"

DATABASE_KEYWORDS = ("data", "storage", "save", "sync")
AUTHENTICATION_KEYWORDS = ("login", "user", "account", "profile")

EXTERNAL_API_PATTERNS: dict[str, tuple[str, ...]] = {
    "payment processing": ("payment",),
    "maps/geolocation": ("map", "location"),
    "push notifications": ("notification",),
    "social media": ("social", "share"),
}

# Lighter feature patterns used while chatting (no generic fallback)
MESSAGE_FEATURE_PATTERNS: dict[str, tuple[str, ...]] = {
    "authentication": ("login", "user"),
    "database": ("data", "storage"),
    "push notifications": ("notification",),
    "social features": ("social",),
}


# ── Core matching ────────────────────────────────────────────────────────────

def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """True if any keyword occurs as a substring of the lower-cased text."""
    text_lower = text.lower()
    return any(keyword in text_lower for keyword in keywords)


def matched_keywords(text: str, keywords: Iterable[str]) -> list[str]:
    """Keywords that occur in the text, in the order given."""
    text_lower = text.lower()
    return [keyword for keyword in keywords if keyword in text_lower]


# ── Conversation classifiers ─────────────────────────────────────────────────

def contains_app_idea(text: str) -> bool:
    return contains_any(text, APP_INTENT_KEYWORDS)


def contains_platform_info(text: str) -> bool:
    return contains_any(text, PLATFORM_KEYWORDS)


def contains_feature_info(text: str) -> bool:
    return contains_any(text, FEATURE_INTENT_KEYWORDS)


def contains_confirmation(text: str) -> bool:
    return contains_any(text, CONFIRMATION_KEYWORDS)


# ── Requirement detectors ────────────────────────────────────────────────────

def detect_platforms(text: str) -> list[str]:
    """Platforms mentioned in the text, possibly none."""
    return [
        platform for platform, patterns in PLATFORM_PATTERNS.items()
        if contains_any(text, patterns)
    ]


def detect_domain_features(text: str) -> list[str]:
    """
    Features implied by app-domain keywords.

    Union over all matching domains in table order, duplicates kept. The
    caller decides how to de-duplicate and truncate.
    """
    features: list[str] = []
    text_lower = text.lower()
    for keyword, domain_features in DOMAIN_FEATURES.items():
        if keyword in text_lower:
            features.extend(domain_features)
    return features


def detect_ui_style(text: str) -> str:
    style = DEFAULT_UI_STYLE
    for candidate, patterns in UI_STYLE_PATTERNS:
        if contains_any(text, patterns):
            style = candidate
    return style


def detect_complexity(text: str) -> str:
    complexity = DEFAULT_COMPLEXITY
    for candidate, patterns in COMPLEXITY_PATTERNS:
        if contains_any(text, patterns):
            complexity = candidate
    return complexity


def needs_database(text: str) -> bool:
    return contains_any(text, DATABASE_KEYWORDS)


def needs_authentication(text: str) -> bool:
    return contains_any(text, AUTHENTICATION_KEYWORDS)


def detect_external_apis(text: str) -> list[str]:
    return [
        label for label, patterns in EXTERNAL_API_PATTERNS.items()
        if contains_any(text, patterns)
    ]


def detect_message_features(text: str) -> list[str]:
    return [
        label for label, patterns in MESSAGE_FEATURE_PATTERNS.items()
        if contains_any(text, patterns)
    ]


def count_signals(text: str) -> int:
    """
    Number of distinct requirement signals found in the text.

    Counts platforms, app domains, style/complexity hints, technical flags
    and external APIs. Used by the deterministic confidence scorer.
    """
    text_lower = text.lower()
    count = len(detect_platforms(text_lower))
    count += sum(1 for keyword in DOMAIN_FEATURES if keyword in text_lower)
    count += sum(1 for _, patterns in UI_STYLE_PATTERNS if contains_any(text_lower, patterns))
    count += sum(1 for _, patterns in COMPLEXITY_PATTERNS if contains_any(text_lower, patterns))
    count += int(needs_database(text_lower)) + int(needs_authentication(text_lower))
    count += len(detect_external_apis(text_lower))
    return count
