"""Exchange controller and request assembly."""

from .cancellation import CancellationToken
from .controller import ExchangeController, ExchangeState
from .request import Credentials, build_request_messages, build_system_prompt, office_visit_message
from .sanitize import sanitize_response

__all__ = [
    "CancellationToken",
    "Credentials",
    "ExchangeController",
    "ExchangeState",
    "build_request_messages",
    "build_system_prompt",
    "office_visit_message",
    "sanitize_response",
]
