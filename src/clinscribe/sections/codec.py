"""Conversion between generated text and ``Sections``.

Extraction runs one generic segmentation over the ordered ``HEADERS`` table:
find the first occurrence of each header, sort the hits by position, and
slice the text between consecutive hits. Composition writes the same headers
back in canonical order, so ``extract_sections(compose_text(s)) == s`` holds
for normalized fields that do not themselves contain a header line.

A body line that starts with a header label (for example an edited document
that mentions "Clinical Document:" at the start of a line) is taken as a
section boundary on the next extraction. This is a known limitation.
"""

from .models import HEADERS, SectionHeader, Sections

_MATCHERS = tuple((header, header.compile()) for header in HEADERS)


def _locate_headers(text: str) -> list[tuple[int, int, SectionHeader]]:
    """Return (start, end, header) of the first hit of every header, by position."""
    hits = []
    for header, matcher in _MATCHERS:
        match = matcher.search(text)
        if match:
            hits.append((match.start(), match.end(), header))
    hits.sort(key=lambda hit: hit[0])
    return hits


def extract_sections(text: str | None) -> Sections:
    """Split generated text into its three sections.

    Never raises. A missing header, or a body that is just the header's
    placeholder, yields an empty field.

    Args:
        text: Assistant message content

    Returns:
        Sections with stripped bodies
    """
    if not text:
        return Sections()

    hits = _locate_headers(text)
    values: dict[str, str] = {}
    for i, (_, body_start, header) in enumerate(hits):
        body_end = hits[i + 1][0] if i + 1 < len(hits) else len(text)
        body = text[body_start:body_end].strip()
        values[header.field] = "" if body == header.placeholder else body

    return Sections(**values)


def compose_text(sections: Sections) -> str:
    """Render sections back into a single text blob in canonical order.

    Empty fields are written as their placeholder, which ``extract_sections``
    reads back as empty.
    """
    blocks = []
    for header in HEADERS:
        body = getattr(sections, header.field).strip() or header.placeholder
        blocks.append(f"{header.label}:\n{body}\n")
    return "\n".join(blocks)


def replace_document(text: str, document: str) -> str:
    """Re-compose ``text`` with its clinical document replaced by ``document``."""
    sections = extract_sections(text)
    return compose_text(sections.model_copy(update={"document": document}))


def word_count(text: str) -> int:
    """Whitespace-delimited word count, 0 for blank text."""
    return len(text.split()) if text and text.strip() else 0
