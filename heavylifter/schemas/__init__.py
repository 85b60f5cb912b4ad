"""
Schema definitions for conversations and generated apps.
"""

from .conversation import (
    ConversationContext,
    ConversationMessage,
    ConversationState,
    ConversationStep,
    Role,
    generate_id,
)
from .generated_app import GeneratedApp, GeneratedFile

__all__ = [
    "ConversationContext",
    "ConversationMessage",
    "ConversationState",
    "ConversationStep",
    "Role",
    "generate_id",
    "GeneratedApp",
    "GeneratedFile",
]
