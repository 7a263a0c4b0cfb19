"""Main CLI application using Typer."""
import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from ..config import Settings
from ..conversations import Conversation, ConversationStore, Message, export_data, import_data
from ..errors import ScribeError
from ..exchange import ExchangeController, office_visit_message
from ..llm import describe_model, models_for_provider
from ..log import configure_logging
from ..sections import replace_document
from .providers import get_credentials, get_settings, open_store, require_llm
from .render import conversation_renderables, conversations_table, models_table

# Load environment variables
load_dotenv()

app = typer.Typer(
    name="clinscribe",
    help="Clinical scribe: turn visit transcripts into structured clinical notes",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()


@app.callback()
def _configure(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning or error (default: CLINSCRIBE_LOG_LEVEL)"
    ),
):
    configure_logging(log_level or get_settings().log_level)


def _find(store: ConversationStore, ref: str | None) -> Conversation:
    """Resolve a full id or unique id prefix; None means the selected conversation."""
    if ref is None:
        if store.selected is None:
            console.print("[red]Error: No conversation selected[/red]")
            raise typer.Exit(code=1)
        return store.selected

    exact = store.get(ref)
    if exact is not None:
        return exact
    matches = [c for c in store.conversations if c.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        console.print(f"[red]Error: No conversation matches '{escape(ref)}'[/red]")
    else:
        console.print(f"[red]Error: '{escape(ref)}' matches {len(matches)} conversations[/red]")
    raise typer.Exit(code=1)


def _show(conversation: Conversation) -> None:
    for renderable in conversation_renderables(conversation):
        console.print(renderable)


async def _exchange(
    settings: Settings,
    store: ConversationStore,
    run: Callable[[ExchangeController], Awaitable[Conversation | None]],
) -> Conversation | None:
    """Run one exchange with a freshly created provider."""
    credentials = await get_credentials(settings, store)
    llm = require_llm(settings, credentials)
    async with llm:
        controller = ExchangeController(store, llm, credentials, sign_off=settings.sign_off)
        with console.status("[dim]Generating note...[/dim]"):
            return await run(controller)


def _run(command: Callable[[Settings], Awaitable[None]]) -> None:
    """Run an async command, turning domain errors into a red message and exit code 1."""
    settings = get_settings()
    try:
        asyncio.run(command(settings))
    except ScribeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


@app.command()
def new(
    name: str | None = typer.Option(None, "--name", "-n", help="Conversation name"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model id"),
    prompt: str | None = typer.Option(None, "--prompt", "-p", help="Template or transcript"),
):
    """Create a new conversation and select it."""
    async def _new(settings: Settings):
        async with open_store(settings) as store:
            overrides = {}
            if name:
                overrides["name"] = name
            if model:
                overrides["model"] = describe_model(model)
            if prompt:
                overrides["prompt"] = prompt
            conversation = await store.create_conversation(**overrides)
            console.print(
                f"[green]Created[/green] {escape(conversation.name)} "
                f"[dim]({conversation.id})[/dim]"
            )

    _run(_new)


@app.command(name="list")
def list_conversations():
    """List conversations, most recent last."""
    async def _list(settings: Settings):
        async with open_store(settings) as store:
            if not store.conversations:
                console.print("[dim]No conversations yet. Create one with: clinscribe new[/dim]")
                return
            selected = store.selected
            console.print(conversations_table(store.conversations, selected.id if selected else None))

    _run(_list)


@app.command()
def show(
    conversation_id: str | None = typer.Argument(None, help="Conversation id (default: selected)"),
):
    """Show a conversation's transcript and the sections of its latest note."""
    async def _show_command(settings: Settings):
        async with open_store(settings) as store:
            _show(_find(store, conversation_id))

    _run(_show_command)


@app.command()
def select(conversation_id: str = typer.Argument(..., help="Conversation id or prefix")):
    """Select a conversation for subsequent commands."""
    async def _select(settings: Settings):
        async with open_store(settings) as store:
            conversation = store.select(_find(store, conversation_id).id)
            await store.save_selection()
            console.print(f"[green]Selected[/green] {escape(conversation.name)}")

    _run(_select)


@app.command()
def send(
    message: str = typer.Argument(..., help="Message or transcript text"),
    plugin: str | None = typer.Option(None, "--plugin", help="Plugin id (logged only)"),
):
    """Send a message in the selected conversation and show the generated note."""
    async def _send(settings: Settings):
        async with open_store(settings) as store:
            conversation = await _exchange(
                settings, store, lambda c: c.send(message, plugin=plugin)
            )
            _show(conversation)

    _run(_send)


@app.command()
def dictate(
    transcription: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Text file holding a speech-to-text transcription of the visit"
    ),
):
    """Generate a progress note from a visit transcription."""
    async def _dictate(settings: Settings):
        message = office_visit_message(transcription.read_text(encoding="utf-8"))
        async with open_store(settings) as store:
            conversation = await _exchange(settings, store, lambda c: c.send(message))
            _show(conversation)

    _run(_dictate)


@app.command()
def regenerate():
    """Re-send the last message of the selected conversation."""
    async def _regenerate(settings: Settings):
        async with open_store(settings) as store:
            conversation = await _exchange(settings, store, lambda c: c.regenerate())
            if conversation is None or conversation.last_user_message() is None:
                console.print("[yellow]Nothing to regenerate[/yellow]")
                return
            _show(conversation)

    _run(_regenerate)


@app.command()
def rename(
    conversation_id: str = typer.Argument(..., help="Conversation id or prefix"),
    name: str = typer.Argument(..., help="New name"),
):
    """Rename a conversation."""
    async def _rename(settings: Settings):
        async with open_store(settings) as store:
            conversation = await store.update_field(_find(store, conversation_id), "name", name)
            console.print(f"[green]Renamed to[/green] {escape(conversation.name)}")

    _run(_rename)


@app.command(name="set-prompt")
def set_prompt(
    text: str | None = typer.Option(None, "--text", "-t", help="Prompt text"),
    file: Path | None = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, help="Read prompt text from file"
    ),
    conversation_id: str | None = typer.Option(None, "--id", help="Conversation id (default: selected)"),
):
    """Set the template or transcript embedded in every request."""
    if (text is None) == (file is None):
        console.print("[red]Error: Provide exactly one of --text or --file[/red]")
        raise typer.Exit(code=1)

    async def _set_prompt(settings: Settings):
        value = text if text is not None else file.read_text(encoding="utf-8")
        async with open_store(settings) as store:
            await store.update_field(_find(store, conversation_id), "prompt", value)
            console.print(f"[green]Prompt updated[/green] [dim]({len(value)} characters)[/dim]")

    _run(_set_prompt)


@app.command(name="set-model")
def set_model(
    model_id: str = typer.Argument(..., help="Model id (see: clinscribe models)"),
    conversation_id: str | None = typer.Option(None, "--id", help="Conversation id (default: selected)"),
):
    """Change the model of a conversation."""
    async def _set_model(settings: Settings):
        async with open_store(settings) as store:
            model = describe_model(model_id)
            await store.update_field(_find(store, conversation_id), "model", model)
            console.print(f"[green]Model set to[/green] {model.name}")

    _run(_set_model)


@app.command()
def models():
    """List models available for the configured provider."""
    settings = get_settings()
    available = models_for_provider(settings.provider)
    if not available:
        console.print(f"[yellow]No known models for provider: {settings.provider}[/yellow]")
        return
    console.print(models_table(available, settings.provider))


@app.command(name="edit-document")
def edit_document(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File holding the edited document"),
    conversation_id: str | None = typer.Option(None, "--id", help="Conversation id (default: selected)"),
):
    """Replace the clinical document of the latest note, keeping its other sections."""
    async def _edit(settings: Settings):
        async with open_store(settings) as store:
            conversation = _find(store, conversation_id)
            last = conversation.last_assistant_message()
            if last is None:
                console.print("[red]Error: Conversation has no generated note to edit[/red]")
                raise typer.Exit(code=1)
            content = replace_document(last.content, file.read_text(encoding="utf-8"))
            updated = await store.replace_last_assistant_message(conversation, content)
            console.print("[green]Document saved[/green]")
            _show(updated)

    _run(_edit)


@app.command()
def delete(conversation_id: str = typer.Argument(..., help="Conversation id or prefix")):
    """Delete a conversation."""
    async def _delete(settings: Settings):
        async with open_store(settings) as store:
            conversation = _find(store, conversation_id)
            await store.delete_conversation(conversation.id)
            console.print(f"[green]Deleted[/green] {escape(conversation.name)}")

    _run(_delete)


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete every conversation and chat folder."""
    if not yes:
        console.print("[yellow]WARNING: This deletes all conversations![/yellow]")
        if not typer.confirm("Are you sure you want to continue?"):
            console.print("[dim]Aborted.[/dim]")
            return

    async def _clear(settings: Settings):
        async with open_store(settings) as store:
            await store.clear_all()
            console.print("[green]All conversations cleared[/green]")

    _run(_clear)


@app.command()
def search(term: str = typer.Argument(..., help="Text to find in names and messages")):
    """Search conversations by name and message content."""
    async def _search(settings: Settings):
        async with open_store(settings) as store:
            results = store.search(term)
            if not results:
                console.print("[yellow]No matching conversations[/yellow]")
                return
            selected = store.selected
            console.print(conversations_table(
                results, selected.id if selected else None, title=f"Matches for '{escape(term)}'"
            ))

    _run(_search)


@app.command(name="export")
def export_command(output: Path = typer.Argument(..., dir_okay=False, help="Output JSON file")):
    """Export conversations and folders to JSON."""
    async def _export(settings: Settings):
        async with open_store(settings) as store:
            data = export_data(store)
            output.write_text(json.dumps(data, indent=2), encoding="utf-8")
            console.print(f"[green]Exported {len(data['history'])} conversations to {output}[/green]")

    _run(_export)


@app.command(name="import")
def import_command(source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Exported JSON file")):
    """Import conversations and folders, merging by id."""
    async def _import(settings: Settings):
        data = json.loads(source.read_text(encoding="utf-8"))
        async with open_store(settings) as store:
            count = await import_data(store, data)
            console.print(f"[green]Imported {count} conversations[/green]")

    _run(_import)


@app.command(name="set-key")
def set_key(
    api_key: str | None = typer.Argument(None, help="API key (omit with --clear)"),
    clear_key: bool = typer.Option(False, "--clear", help="Remove the stored key"),
):
    """Store the API key used when the environment provides none."""
    if not clear_key and not api_key:
        console.print("[red]Error: Provide an API key or --clear[/red]")
        raise typer.Exit(code=1)

    async def _set_key(settings: Settings):
        async with open_store(settings) as store:
            await store.repository.set_api_key(None if clear_key else api_key)
            console.print("[green]API key cleared[/green]" if clear_key else "[green]API key saved[/green]")

    _run(_set_key)


@app.command()
def chat():
    """Interactive session in the selected conversation."""
    async def _chat(settings: Settings):
        async with open_store(settings) as store:
            credentials = await get_credentials(settings, store)
            llm = require_llm(settings, credentials)
            async with llm:
                controller = ExchangeController(store, llm, credentials, sign_off=settings.sign_off)

                console.print("[bold cyan]Clinscribe Interactive Session[/bold cyan]")
                console.print("[dim]Type '/regenerate' to redo the last note, 'exit', 'quit', or 'q' to leave[/dim]\n")

                while True:
                    try:
                        user_input = console.input("[bold yellow]You:[/bold yellow] ")

                        if not user_input.strip():
                            continue

                        if user_input.strip().lower() in ('exit', 'quit', 'q'):
                            console.print("[dim]Goodbye![/dim]")
                            break

                        with console.status("[dim]Generating note...[/dim]"):
                            if user_input.strip() == "/regenerate":
                                conversation = await controller.regenerate()
                            else:
                                conversation = await controller.send(Message.user(user_input))
                        if conversation is not None:
                            _show(conversation)

                    except ScribeError as e:
                        console.print(f"[red]Error: {escape(str(e))}[/red]")
                    except KeyboardInterrupt:
                        console.print("\n[dim]Goodbye![/dim]")
                        break
                    except EOFError:
                        console.print("\n[dim]Goodbye![/dim]")
                        break

    _run(_chat)


@app.command()
def health():
    """Check persistence, credentials and provider configuration."""
    async def _health(settings: Settings):
        console.print(f"Provider: [cyan]{settings.provider}[/cyan]")
        console.print(f"Store: [cyan]{settings.store_backend}[/cyan] [dim]{settings.store_path}[/dim]")
        ok = True

        try:
            async with open_store(settings) as store:
                console.print(f"[green]Persistence OK[/green] [dim]({len(store)} conversations)[/dim]")
                credentials = await get_credentials(settings, store)
        except Exception as e:
            console.print(f"[red]Persistence failed: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)

        if credentials.host_key:
            console.print("[green]API key provided by environment[/green]")
        elif credentials.user_key:
            console.print("[green]API key stored by user[/green]")
        else:
            console.print("[red]No API key found[/red]")
            ok = False

        if not models_for_provider(settings.provider):
            console.print(f"[red]Unsupported provider: {settings.provider}[/red]")
            ok = False

        if not ok:
            raise typer.Exit(code=1)
        console.print("[green]Ready[/green]")

    _run(_health)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
