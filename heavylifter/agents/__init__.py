"""
Conversation agents.
"""

from .conversation_agent import AgentReply, ConversationAgent, CLOSING_MESSAGE, GREETING_MESSAGE

__all__ = ["AgentReply", "ConversationAgent", "CLOSING_MESSAGE", "GREETING_MESSAGE"]
