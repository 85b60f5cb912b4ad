"""
Placeholder speech endpoints.

Real recognition and synthesis happen in the browser (Web Speech API). The
server-side endpoints only return canned data with the same shape a cloud
speech service would, so the front-end can be exercised without one.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ValidationError

DEFAULT_LANGUAGE = "en-US"
DEFAULT_SAMPLE_RATE = 16000
WORDS_PER_MINUTE = 150
SSML_GENDERS = ("MALE", "FEMALE", "NEUTRAL")

SAMPLE_APP_IDEAS = [
    "I want to create a todo app that helps users manage their daily tasks with reminders and categories",
    "Can you build me a recipe management app with shopping lists and cooking instructions?",
    "I need a fitness tracker that logs workouts and tracks progress over time",
    "Build me a habit tracker with streaks and daily motivational quotes",
    "Create a budget tracking app that categorizes expenses and shows spending patterns",
    "I want a meditation app with guided sessions and progress tracking",
    "Build a social media scheduler for content creators",
    "Create a language learning app with flashcards and progress tracking",
]

SAMPLE_CLARIFICATIONS = [
    "I'd like it to work on both web and mobile platforms",
    "The design should be modern and minimalist",
    "It needs to have user authentication",
    "I want it to sync data across devices",
    "The app should be fast and responsive",
    "I need offline functionality",
    "It should have push notifications",
    "The interface should be intuitive and easy to use",
]

# Short silent WAV header, base64; stands in for synthesized audio
PLACEHOLDER_AUDIO = (
    "UklGRnoGAABXQVZFZm10IBAAAAABAAEAQB8AAEAfAAABAAgAZGF0YQoGAACBhYqFbF1fdJivrJBhNjVgodDbq2Ec"
    "Bj+a2/LDciUFLIHO8tiJNwgZaLvt559NEAxQp+PwtmMcBjiR1/LMeSwFJHfH8N2QQAoUXrTp66hVFApGn+DyvmwhBTGH"
    "0fPTgjMGHm7A7+OZURE"
)


@dataclass
class TranscriptionResult:
    """Result from (simulated) speech-to-text."""
    transcript: str
    is_final: bool
    confidence: float
    language_code: str = DEFAULT_LANGUAGE
    sample_rate_hertz: int = DEFAULT_SAMPLE_RATE
    alternatives: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "transcript": self.transcript,
            "isFinal": self.is_final,
            "confidence": self.confidence,
            "alternatives": list(self.alternatives),
            "languageCode": self.language_code,
            "sampleRateHertz": self.sample_rate_hertz,
        }


@dataclass
class SynthesisResult:
    """Result from (simulated) text-to-speech."""
    audio_data: str
    text: str
    duration: float
    language_code: str = DEFAULT_LANGUAGE
    ssml_gender: str = "NEUTRAL"
    speaking_rate: float = 1.0
    pitch: float = 0.0
    volume_gain_db: float = 0.0

    def to_dict(self) -> dict:
        return {
            "audioData": self.audio_data,
            "text": self.text,
            "languageCode": self.language_code,
            "ssmlGender": self.ssml_gender,
            "speakingRate": self.speaking_rate,
            "pitch": self.pitch,
            "volumeGainDb": self.volume_gain_db,
            "duration": self.duration,
        }


def transcribe(
    audio_data: Optional[str] = None,
    language_code: str = DEFAULT_LANGUAGE,
    sample_rate_hertz: int = DEFAULT_SAMPLE_RATE,
    rng: Optional[random.Random] = None,
) -> TranscriptionResult:
    """Return a canned app-idea transcript, sometimes with a clarification appended."""
    rng = rng or random.Random()
    transcript = rng.choice(SAMPLE_APP_IDEAS)
    if rng.random() > 0.5:
        transcript = f"{transcript}. {rng.choice(SAMPLE_CLARIFICATIONS)}."

    return TranscriptionResult(
        transcript=transcript,
        is_final=rng.random() > 0.3,
        confidence=rng.random() * 0.3 + 0.7,
        language_code=language_code or DEFAULT_LANGUAGE,
        sample_rate_hertz=sample_rate_hertz or DEFAULT_SAMPLE_RATE,
        alternatives=[transcript],
    )


def estimate_duration(text: str) -> float:
    """Seconds of speech at 150 words per minute, at least one second."""
    words = len(text.split(" "))
    return max(words / WORDS_PER_MINUTE * 60, 1.0)


def synthesize(
    text: Optional[str],
    language_code: str = DEFAULT_LANGUAGE,
    ssml_gender: str = "NEUTRAL",
    speaking_rate: float = 1.0,
    pitch: float = 0.0,
    volume_gain_db: float = 0.0,
) -> SynthesisResult:
    """Placeholder audio for the given text. Blank text is rejected."""
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Text is required")

    gender = (ssml_gender or "NEUTRAL").upper()
    if gender not in SSML_GENDERS:
        raise ValidationError(f"Invalid ssmlGender: {ssml_gender}")

    try:
        speaking_rate = float(speaking_rate)
        pitch = float(pitch)
        volume_gain_db = float(volume_gain_db)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid voice parameter: {exc}") from exc

    return SynthesisResult(
        audio_data=PLACEHOLDER_AUDIO,
        text=text,
        duration=estimate_duration(text),
        language_code=language_code or DEFAULT_LANGUAGE,
        ssml_gender=gender,
        speaking_rate=speaking_rate,
        pitch=pitch,
        volume_gain_db=volume_gain_db,
    )
