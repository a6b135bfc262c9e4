"""Command-line interface for FindOrigin."""

import asyncio
import json
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict

# Set UTF-8 encoding for Windows compatibility
if sys.platform == "win32":
    os.environ["PYTHONIOENCODING"] = "utf-8"

from httpx import AsyncClient
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ...application.analyzer import AIAnalyzer
from ...application.formatter import format_final_message
from ...application.processor import MessageProcessor
from ...config.logging_config import init_logging, instrument_openai
from ...config.settings import Settings, get_settings
from ...domain.models import AnalysisResult
from ...infrastructure.cache import TTLCache
from ...infrastructure.http.client import HTTPClientFactory
from ...infrastructure.llm.client import LLMClient
from ...infrastructure.search.invoker import SearchToolInvoker
from ...infrastructure.search.providers import DuckDuckGoProvider, GoogleSearchProvider
from ...infrastructure.telegram.api import TelegramBotClient
from ...infrastructure.telegram.post_extractor import TelegramPostExtractor
from ..bot.updates import run_polling

console = Console(force_terminal=True, legacy_windows=False)

TEST_STATEMENT = "Coinbase CEO fired engineers who refused to use AI"


@dataclass
class Services:
    """Process-wide objects created once and closed at shutdown."""

    http_client: AsyncClient
    cache: TTLCache
    analyzer: AIAnalyzer
    telegram: TelegramBotClient
    processor: MessageProcessor

    async def aclose(self) -> None:
        await self.cache.stop_cleanup()
        await self.http_client.aclose()


def _create_services(settings: Settings) -> Services:
    """Create and wire all services with dependency injection."""
    http_client = HTTPClientFactory.create(settings.http_timeout_seconds)
    cache = TTLCache()

    search_invoker = SearchToolInvoker(
        providers=[
            GoogleSearchProvider(
                api_key=settings.search_api_key,
                cse_id=settings.google_cse_id,
                http_client=http_client,
            ),
            DuckDuckGoProvider(http_client=http_client),
        ],
        cache=cache,
        result_cap=settings.search_max_results,
        cache_ttl=settings.search_cache_ttl,
    )

    llm_client = LLMClient(
        api_key=settings.openrouter_api_key,
        model=settings.ai_model,
        base_url=settings.openrouter_base_url,
        app_url=settings.app_url,
        app_title=settings.app_title,
    )
    if llm_client.openai_client is not None:
        instrument_openai(llm_client.openai_client)

    analyzer = AIAnalyzer(
        llm_client=llm_client,
        search_invoker=search_invoker,
        cache=cache,
        cache_ttl=settings.analysis_cache_ttl,
    )

    telegram = TelegramBotClient(token=settings.telegram_bot_token, http_client=http_client)
    processor = MessageProcessor(
        analyzer=analyzer,
        telegram=telegram,
        post_extractor=TelegramPostExtractor(http_client),
    )
    return Services(
        http_client=http_client,
        cache=cache,
        analyzer=analyzer,
        telegram=telegram,
        processor=processor,
    )


def build_preview(text: str, result: AnalysisResult) -> Dict[str, Any]:
    """Build the JSON preview payload for an analysis.

    Args:
        text: Analyzed text.
        result: Analysis result.

    Returns:
        Dictionary with the input, sources, analysis and message preview.
    """
    analysis = result.model_dump(mode="json", by_alias=True)
    return {
        "input": {"text": text},
        "results": {"count": len(result.sources), "sources": analysis["sources"]},
        "analysis": analysis,
        "preview": format_final_message(text, result),
    }


def _score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    if score >= 40:
        return "bright_red"
    return "red"


def _print_header(text: str) -> None:
    """Print a header panel for the analyzed text.

    Args:
        text: The claim being analyzed.
    """
    header = Panel(
        Text(text, style="bold bright_white"),
        title="[bold cyan]Finding Sources[/bold cyan]",
        border_style="cyan",
        padding=(1, 2),
    )
    console.print(header)
    console.print()


def _print_result(result: AnalysisResult) -> None:
    """Print analysis result to console with rich formatting.

    Args:
        result: AnalysisResult to print.
    """
    summary_style = "dim white" if result.is_unavailable else "blue"
    console.print(
        Panel(
            Markdown(result.summary),
            title="[bold]Summary[/bold]",
            border_style=summary_style,
            padding=(1, 2),
        )
    )
    console.print()

    if not result.sources:
        console.print("[dim]No sources found.[/dim]")
        return

    table = Table(
        title="[bold]Sources[/bold]",
        show_header=True,
        header_style="bold magenta",
        border_style="magenta",
        padding=(0, 1),
    )
    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("Relevance", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Type", style="dim")
    table.add_column("Title", style="cyan", no_wrap=False)
    table.add_column("URL", style="dim blue", overflow="fold")

    for i, source in enumerate(result.sources, 1):
        table.add_row(
            str(i),
            f"[{_score_style(source.relevance_score)}]{source.relevance_score}%[/]",
            f"{source.confidence}%",
            source.source_type.value if source.source_type else "-",
            source.title,
            source.url,
        )
    console.print(table)


def _print_error(message: str) -> None:
    console.print(
        Panel(
            f"[red]Error:[/red] {message}",
            title="[bold red]Error[/bold red]",
            border_style="red",
        )
    )


async def _analyze_text(text: str, mode: str = "rich") -> int:
    """Analyze a text and print results.

    Args:
        text: Claim to analyze.
        mode: "rich", "json" or "preview".

    Returns:
        Exit code (0 for success, 1 for error).
    """
    services = _create_services(get_settings())
    try:
        if mode == "rich":
            _print_header(text)
            with console.status("[cyan]Searching and analyzing sources...[/cyan]", spinner="dots"):
                result = await services.analyzer.analyze(text)
            _print_result(result)
        elif mode == "json":
            result = await services.analyzer.analyze(text)
            console.print_json(json.dumps(build_preview(text, result), ensure_ascii=False))
        else:
            result = await services.analyzer.analyze(text)
            console.print(format_final_message(text, result), markup=False)
        return 0
    except Exception as e:
        _print_error(str(e))
        return 1
    finally:
        await services.aclose()


async def _run_bot() -> int:
    """Run the Telegram bot with long polling until interrupted."""
    settings = get_settings()
    if not settings.telegram_bot_token:
        _print_error("TELEGRAM_BOT_TOKEN is not set")
        return 1

    services = _create_services(settings)
    services.cache.start_cleanup(settings.cache_cleanup_interval)
    console.print("[bold green]Bot started.[/bold green] Press Ctrl+C to stop.")
    try:
        await run_polling(services.telegram, services.processor)
    finally:
        await services.aclose()
    return 0


def _print_help() -> None:
    """Print help message."""
    help_content = Text()
    help_content.append("FindOrigin CLI", style="bold cyan")
    help_content.append(" - AI-Powered Source Finder\n\n", style="white")

    help_content.append("Usage:\n", style="bold")
    for args, description in (
        (" <text>", "            Find and score sources for a claim\n"),
        (" --json <text>", "     Output the analysis preview as JSON\n"),
        (" --preview <text>", "  Print the Telegram reply\n"),
        (" --test", "            Run a test analysis\n"),
        (" --bot", "             Run the Telegram bot (long polling)\n\n"),
    ):
        help_content.append("  findorigin", style="cyan")
        help_content.append(args, style="yellow")
        help_content.append(description, style="dim")

    help_content.append("Environment Variables:\n", style="bold")
    for name, description in (
        ("OPENROUTER_API_KEY", "  OpenRouter API key (required for AI analysis)\n"),
        ("SEARCH_API_KEY", "      Google Custom Search API key (optional)\n"),
        ("GOOGLE_CSE_ID", "       Google Custom Search engine id (optional)\n"),
        ("TELEGRAM_BOT_TOKEN", "  Telegram bot token (required for --bot)\n"),
    ):
        help_content.append(f"  {name}", style="yellow")
        help_content.append(description, style="dim")

    console.print(
        Panel(
            help_content,
            title="[bold bright_blue]Help[/bold bright_blue]",
            border_style="bright_blue",
            padding=(1, 2),
        )
    )


def main() -> int:
    """Main CLI entry point.

    Usage:
        findorigin <text>            # Analyze a claim
        findorigin --json <text>     # Output as JSON
        findorigin --preview <text>  # Print the Telegram reply
        findorigin --test            # Run test analysis
        findorigin --bot             # Run the Telegram bot
        findorigin --help            # Show help

    Returns:
        Exit code (0 for success, 1 for error).
    """
    args = sys.argv[1:]

    if not args or args[0] in ("-h", "--help"):
        _print_help()
        return 0

    init_logging(get_settings().log_level)

    if args[0] == "--bot":
        try:
            return asyncio.run(_run_bot())
        except KeyboardInterrupt:
            console.print("[dim]Bot stopped.[/dim]")
            return 0

    if args[0] == "--test":
        return asyncio.run(_analyze_text(TEST_STATEMENT))

    mode = "rich"
    if args[0] in ("--json", "--preview"):
        mode = args[0][2:]
        args = args[1:]

    text = " ".join(args)
    if not text.strip():
        _print_error("Text cannot be empty")
        return 1

    return asyncio.run(_analyze_text(text, mode=mode))


if __name__ == "__main__":
    sys.exit(main())
