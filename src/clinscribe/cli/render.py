"""Rich renderables for conversations, sections and models."""

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..conversations import Conversation
from ..llm import ModelDescriptor
from ..sections import HEADERS, Sections, extract_sections, word_count


def conversations_table(
    conversations: list[Conversation],
    selected_id: str | None = None,
    title: str = "Conversations",
) -> Table:
    table = Table(title=title)
    table.add_column("", width=1)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Model", style="magenta")
    table.add_column("Messages", justify="right")

    for conversation in conversations:
        table.add_row(
            "*" if conversation.id == selected_id else "",
            conversation.id[:8],
            escape(conversation.name),
            conversation.model.name,
            str(len(conversation.messages)),
        )
    return table


def models_table(models: list[ModelDescriptor], provider: str) -> Table:
    table = Table(title=f"Models ({provider})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Max chars", justify="right")
    table.add_column("Token limit", justify="right")
    for model in models:
        table.add_row(model.id, model.name, f"{model.max_length:,}", f"{model.token_limit:,}")
    return table


def section_panels(sections: Sections) -> list[Panel]:
    """One panel per section; empty sections show their placeholder dimmed."""
    panels = []
    for header in HEADERS:
        body = getattr(sections, header.field)
        content = escape(body) if body else f"[dim]{escape(header.placeholder)}[/dim]"
        subtitle = f"{word_count(body)} words" if header.field == "document" else None
        panels.append(Panel(content, title=header.label, subtitle=subtitle, border_style="blue"))
    return panels


def conversation_renderables(conversation: Conversation) -> list:
    """Transcript followed by the sections of the latest generated note."""
    items: list = [
        Panel(
            escape(conversation.transcript()) or "[dim](No transcript)[/dim]",
            title=f"{escape(conversation.name)} - Transcript",
            border_style="green",
        )
    ]
    last = conversation.last_assistant_message()
    if last is not None:
        items.extend(section_panels(extract_sections(last.content)))
    return items
