"""Section codec.

Splits a generated clinical note into potential transcription issues,
helpful content and the clinical document, and writes it back.
"""

from .codec import compose_text, extract_sections, replace_document, word_count
from .models import HEADERS, SectionHeader, Sections

__all__ = [
    "HEADERS",
    "SectionHeader",
    "Sections",
    "compose_text",
    "extract_sections",
    "replace_document",
    "word_count",
]
