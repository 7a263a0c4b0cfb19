"""
Clinscribe: turns dictated or typed visit transcripts into structured
clinical notes through a language-generation service.

Each subpackage hides one design decision: section parsing, conversation
state, persistence, the generation service and the exchange cycle.
"""

__version__ = "0.1.0"

from .conversations import Conversation, ConversationDefaults, ConversationStore, Message
from .errors import GenerationError, MessageTooLongError, MissingCredentialError, ScribeError
from .exchange import CancellationToken, Credentials, ExchangeController, ExchangeState
from .sections import Sections, compose_text, extract_sections, replace_document

__all__ = [
    "CancellationToken",
    "Conversation",
    "ConversationDefaults",
    "ConversationStore",
    "Credentials",
    "ExchangeController",
    "ExchangeState",
    "GenerationError",
    "Message",
    "MessageTooLongError",
    "MissingCredentialError",
    "ScribeError",
    "Sections",
    "compose_text",
    "extract_sections",
    "replace_document",
]
