"""Main CLI application using Typer."""
import asyncio
import logging
from contextlib import aclosing
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from ..chat import ConversationOrchestrator, TaskRunner, TitleGenerator
from ..render import ConsoleRenderer, HtmlRenderer
from ..store import ConversationFeed, Message, MessageStore, Role, StoreError, StoreWriteError
from .providers import (
    configure_logging,
    get_flush_policy,
    get_store,
    get_system_prompt,
    require_llm,
)

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="streamchat",
    help="Streaming chat with incremental markdown and code rendering",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


@app.callback()
def main_options(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level: debug, info, warning or error (default: STREAMCHAT_LOG_LEVEL)"
    ),
):
    """Streaming chat client."""
    configure_logging(log_level)


def _print_message(renderer: ConsoleRenderer, message: Message) -> None:
    if message.role is Role.USER:
        console.print(Panel(message.content, title="You", title_align="left", border_style="green"))
    else:
        console.print(Rule("Assistant", align="left", style="magenta"))
        console.print(renderer.render_message(message.content, message.is_streaming))
    console.print()


@app.command()
def chat(
    log_panel: str | None = typer.Option(
        None,
        "--log-panel",
        "-p",
        help="Show the log panel with level: debug, info, warning or error"
    ),
):
    """Launch the interactive chat interface."""
    async def _chat():
        from ..ui import run_textual_tui

        llm = require_llm(console)
        store = get_store()
        tasks = TaskRunner()

        try:
            await store.connect()
            orchestrator = ConversationOrchestrator(
                store,
                llm,
                tasks,
                policy=get_flush_policy(console),
                title_generator=TitleGenerator(llm, store),
                system_prompt=get_system_prompt(),
            )
            await run_textual_tui(orchestrator, log_level=log_panel)
        finally:
            await tasks.close()
            await store.disconnect()
            await llm.close()
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        pass


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Message to send"),
    conversation: str | None = typer.Option(
        None,
        "--conversation",
        "-c",
        help="Continue an existing conversation instead of starting a new one"
    ),
):
    """Send one message and watch the reply stream in."""
    async def _ask():
        llm = require_llm(console)
        store = get_store()
        tasks = TaskRunner()
        renderer = ConsoleRenderer()

        try:
            await store.connect()
            orchestrator = ConversationOrchestrator(
                store,
                llm,
                tasks,
                policy=get_flush_policy(console),
                title_generator=TitleGenerator(llm, store),
                system_prompt=get_system_prompt(),
            )

            conversation_id = conversation
            if conversation_id is None:
                conversation_id = (await orchestrator.create_conversation()).id

            reply_id = await orchestrator.send_message(conversation_id, prompt)
            console.print(Panel(prompt, title="You", title_align="left", border_style="green"))
            console.print(Rule("Assistant", align="left", style="magenta"))

            with Live(renderer.render_message("", True), console=console, refresh_per_second=12) as live:
                follower = asyncio.create_task(_follow_reply(store, conversation_id, reply_id, renderer, live))
                await tasks.drain()
                reply = await store.get(reply_id)
                if reply is None or reply.is_streaming:
                    follower.cancel()
                    raise StoreWriteError(f"Reply {reply_id} was not completed")
                await follower

            console.print(f"\n[dim]Conversation: {conversation_id}[/dim]")

        except (StoreError, ValueError) as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await tasks.close()
            await store.disconnect()
            await llm.close()

    asyncio.run(_ask())


async def _follow_reply(
    store: MessageStore,
    conversation_id: str,
    reply_id: str,
    renderer: ConsoleRenderer,
    live: Live,
) -> None:
    """Redraw the reply from conversation snapshots until it stops streaming."""
    async with aclosing(ConversationFeed(store, conversation_id).watch()) as snapshots:
        async for messages in snapshots:
            reply = next((m for m in messages if m.id == reply_id), None)
            if reply is None:
                return
            live.update(renderer.render_message(reply.content, reply.is_streaming))
            if not reply.is_streaming:
                return


@app.command()
def conversations():
    """List stored conversations, newest first."""
    async def _conversations():
        store = get_store()
        try:
            await store.connect()
            items = await store.list_conversations()

            if not items:
                console.print("[yellow]No conversations yet[/yellow]")
                return

            table = Table(show_header=True, header_style="bold cyan")
            table.add_column("ID", style="dim")
            table.add_column("Title", style="cyan")
            table.add_column("Messages", style="green", justify="right")
            table.add_column("Updated", style="yellow")

            for item in items:
                messages = await store.list_by_conversation(item.id)
                table.add_row(
                    item.id,
                    item.title,
                    str(len(messages)),
                    item.updated_at.astimezone().strftime("%Y-%m-%d %H:%M"),
                )

            console.print(table)
        finally:
            await store.disconnect()

    asyncio.run(_conversations())


@app.command()
def show(
    conversation_id: str = typer.Argument(..., help="Conversation to display"),
):
    """Render a stored conversation."""
    async def _show():
        store = get_store()
        renderer = ConsoleRenderer()
        try:
            await store.connect()
            item = await store.get_conversation(conversation_id)
            if item is None:
                console.print(f"[red]Error: Conversation not found: {conversation_id}[/red]")
                raise typer.Exit(code=1)

            console.print(f"[bold cyan]{item.title}[/bold cyan]\n")
            for message in await store.list_by_conversation(conversation_id):
                _print_message(renderer, message)
        finally:
            await store.disconnect()

    asyncio.run(_show())


@app.command()
def delete(
    conversation_id: str = typer.Argument(..., help="Conversation to delete"),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation"
    ),
):
    """Delete a conversation and its messages."""
    async def _delete():
        store = get_store()
        try:
            await store.connect()
            item = await store.get_conversation(conversation_id)
            if item is None:
                console.print(f"[red]Error: Conversation not found: {conversation_id}[/red]")
                raise typer.Exit(code=1)

            if not yes:
                confirm = typer.confirm(f"Delete '{item.title}' and all of its messages?")
                if not confirm:
                    console.print("[dim]Aborted.[/dim]")
                    return

            await store.delete_conversation(conversation_id)
            console.print(f"[green]Deleted conversation {conversation_id}[/green]")
        finally:
            await store.disconnect()

    asyncio.run(_delete())


@app.command()
def render(
    file: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="Markdown file to render"
    ),
    streaming: bool = typer.Option(
        False,
        "--streaming",
        "-s",
        help="Render as a message that is still streaming"
    ),
    html: bool = typer.Option(
        False,
        "--html",
        help="Print HTML instead of terminal output"
    ),
):
    """Segment and render a markdown file as an assistant message."""
    content = file.read_text(encoding="utf-8")
    logger.debug("Rendering %s (%d characters, streaming=%s)", file, len(content), streaming)

    if html:
        typer.echo(HtmlRenderer().render_message(content, streaming))
    else:
        console.print(ConsoleRenderer().render_message(content, streaming))


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
