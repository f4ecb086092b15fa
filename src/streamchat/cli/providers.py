"""Provider factory functions for CLI.

Centralizes creation of the store, LLM and streaming settings from
environment variables. Hides configuration details from command
implementations.
"""

import logging
import os

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..llm import LLMProvider, create_llm_provider
from ..store import MessageStore, create_message_store
from ..streaming import FlushPolicy

# Default console for output
_console = Console()


def get_store() -> MessageStore:
    """Create the message store from environment variables.

    Returns:
        Unconnected message store

    Environment variables:
        STREAMCHAT_STORE: Backend, 'memory' or 'sqlite' (default: sqlite)
        STREAMCHAT_DB_PATH: SQLite file (default: ./streamchat.db)
    """
    backend = os.getenv("STREAMCHAT_STORE", "sqlite").lower()
    if backend == "sqlite":
        return create_message_store(
            "sqlite",
            path=os.getenv("STREAMCHAT_DB_PATH", "./streamchat.db")
        )
    return create_message_store(backend)


def get_llm(console: Console | None = None) -> LLMProvider | None:
    """Create LLM provider from environment variables.

    Args:
        console: Optional Rich console for output

    Returns:
        LLM provider instance, or None if not configured

    Environment variables:
        LLM_PROVIDER: Provider type (openai, anthropic; default: openai)
        OPENAI_API_KEY: OpenAI API key (for openai provider)
        OPENAI_BASE_URL: Any OpenAI-compatible endpoint (optional)
        OPENAI_CHAT_MODEL: OpenAI model (default: gpt-4.1-nano)
        ANTHROPIC_API_KEY: Anthropic API key (for anthropic provider)
        ANTHROPIC_MODEL: Anthropic model (default: claude-sonnet-4-20250514)
    """
    con = console or _console
    llm_provider = os.getenv("LLM_PROVIDER", "openai").lower()

    if llm_provider == "openai":
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            con.print("[yellow]Warning: OPENAI_API_KEY not set, chat disabled[/yellow]")
            return None
        return create_llm_provider(
            "openai",
            api_key=api_key,
            model=os.getenv("OPENAI_CHAT_MODEL", "gpt-4.1-nano"),
            base_url=os.getenv("OPENAI_BASE_URL") or None,
        )

    elif llm_provider in ("anthropic", "claude"):
        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            con.print("[yellow]Warning: ANTHROPIC_API_KEY not set, chat disabled[/yellow]")
            return None
        model = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
        return create_llm_provider("anthropic", api_key=api_key, model=model)

    else:
        con.print(f"[red]Error: Unknown LLM provider: {llm_provider}[/red]")
        return None


def require_llm(console: Console | None = None) -> LLMProvider:
    """Get LLM provider, raising error if not configured.

    Raises:
        typer.Exit: If LLM provider is not configured
    """
    con = console or _console
    llm = get_llm(con)
    if not llm:
        con.print("[red]Error: LLM provider not configured[/red]")
        raise typer.Exit(code=1)
    return llm


def get_flush_policy(console: Console | None = None) -> FlushPolicy:
    """Create the flush policy from environment variables.

    Environment variables:
        STREAMCHAT_FLUSH_CHUNKS: Flush every N deltas (default: 3)
        STREAMCHAT_FLUSH_CHARS: Flush at lengths divisible by M (default: 15)
    """
    con = console or _console
    try:
        return FlushPolicy(
            chunk_interval=int(os.getenv("STREAMCHAT_FLUSH_CHUNKS", "3")),
            length_interval=int(os.getenv("STREAMCHAT_FLUSH_CHARS", "15")),
        )
    except ValueError as e:
        con.print(f"[red]Error: Invalid flush settings: {e}[/red]")
        raise typer.Exit(code=1)


def get_system_prompt() -> str | None:
    """System prompt prepended to every model request, if configured."""
    return os.getenv("STREAMCHAT_SYSTEM_PROMPT") or None


def configure_logging(level: str | None = None) -> int:
    """Route log records to stderr through rich.

    Args:
        level: Level name; falls back to STREAMCHAT_LOG_LEVEL, then WARNING

    Returns:
        Numeric level applied to the root logger
    """
    name = (level or os.getenv("STREAMCHAT_LOG_LEVEL", "WARNING")).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(
        level=numeric,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    return numeric
