"""Prompt management module.

Externalizes prompts to text files for easy customization.
Prompts can be overridden by placing files in the working directory.
Templates use ``str.format`` placeholders such as ``{transcript}``.
"""

from functools import lru_cache
from pathlib import Path
from string import Formatter

_PROMPTS_DIR = Path(__file__).parent

SCRIBE_SYSTEM = "scribe_system"
OFFICE_VISIT = "office_visit"


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Load a prompt from file.

    Search order:
    1. Current working directory: ./prompts/{name}.txt
    2. Package prompts directory: clinscribe/prompts/{name}.txt

    Args:
        name: Prompt name (without .txt extension)

    Returns:
        Prompt text content

    Raises:
        FileNotFoundError: If prompt file not found in any location
    """
    filename = f"{name}.txt"

    local_path = Path.cwd() / "prompts" / filename
    if local_path.exists():
        return local_path.read_text(encoding="utf-8")

    package_path = _PROMPTS_DIR / filename
    if package_path.exists():
        return package_path.read_text(encoding="utf-8")

    raise FileNotFoundError(
        f"Prompt '{name}' not found. Searched:\n"
        f"  - {local_path}\n"
        f"  - {package_path}"
    )


def template_variables(template: str) -> list[str]:
    """Names of the placeholders in ``template``, in order of first use."""
    names: list[str] = []
    for _, field, _, _ in Formatter().parse(template):
        if field and field not in names:
            names.append(field)
    return names


def render_prompt(name: str, **variables: str) -> str:
    """Load prompt ``name`` and fill its placeholders.

    Raises:
        KeyError: If a placeholder has no value in ``variables``
    """
    template = load_prompt(name)
    missing = [v for v in template_variables(template) if v not in variables]
    if missing:
        raise KeyError(f"Prompt '{name}' is missing values for: {', '.join(missing)}")
    return template.format(**variables).strip()


def clear_cache() -> None:
    """Clear the prompt cache (useful after modifying prompt files)."""
    load_prompt.cache_clear()


__all__ = [
    "OFFICE_VISIT",
    "SCRIBE_SYSTEM",
    "clear_cache",
    "load_prompt",
    "render_prompt",
    "template_variables",
]
