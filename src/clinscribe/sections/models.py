"""Data models for the three-section clinical output."""

import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class Sections(BaseModel):
    """Structured view of one generated assistant message.

    Derived on demand from the message text and never persisted directly.
    """

    model_config = ConfigDict(frozen=True)

    potential_issues: str = Field(default="", description="Potential transcription errors/recommendations")
    helpful_content: str = Field(default="", description="Guidance for the clinician")
    document: str = Field(default="", description="The clinical document itself")


@dataclass(frozen=True)
class SectionHeader:
    """A recognized section header.

    Attributes:
        field: Name of the ``Sections`` field the header fills
        label: Canonical label written by ``compose_text``
        pattern: Regex alternatives accepted when extracting
        placeholder: Body written when the field is empty
    """

    field: str
    label: str
    pattern: str
    placeholder: str

    def compile(self) -> re.Pattern[str]:
        """Line-anchored, case-insensitive matcher for this header.

        Accepts leading whitespace, markdown ``#`` markers and list numbers
        such as ``1)`` or ``2.`` before the label, and an optional colon after.
        """
        return re.compile(
            rf"^[ \t]*(?:#+[ \t]*)?(?:\d+[.)][ \t]*)?(?:{self.pattern})\b[ \t]*:?",
            re.IGNORECASE | re.MULTILINE,
        )


# Canonical order. Placeholders must never match any header pattern.
HEADERS: tuple[SectionHeader, ...] = (
    SectionHeader(
        field="potential_issues",
        label="Potential Transcription Errors",
        pattern=r"Potential[ \t]+Transcription[ \t]+(?:Errors(?:[ \t]*/[ \t]*Recommendations)?|Recommendations)",
        placeholder="No errors found.",
    ),
    SectionHeader(
        field="helpful_content",
        label="Helpful Content",
        pattern=r"Helpful[ \t]+Content",
        placeholder="(No helpful content)",
    ),
    SectionHeader(
        field="document",
        label="Clinical Document",
        pattern=r"Clinical[ \t]+Document",
        placeholder="(No clinical document)",
    ),
)
