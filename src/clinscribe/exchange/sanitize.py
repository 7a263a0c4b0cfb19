import re

_ANNOTATION = re.compile(r"\[.*?\]")


def sanitize_response(text: str | None) -> str:
    """Strip bracketed annotations and ``*`` emphasis markers from generated text."""
    if not text:
        return ""
    return _ANNOTATION.sub("", text).replace("*", "")
