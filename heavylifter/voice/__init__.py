"""
Voice endpoints for the Heavy Lifter API.

Recognition and synthesis run in the browser; these return placeholder
results in the shape a cloud speech service would.
"""

from .speech import TranscriptionResult, SynthesisResult, transcribe, synthesize, estimate_duration

__all__ = [
    "TranscriptionResult",
    "SynthesisResult",
    "transcribe",
    "synthesize",
    "estimate_duration",
]
