"""
tweetsearch CLI

Usage:
    tweetsearch ask "What are people saying about AI regulation?"
    tweetsearch interactive
    tweetsearch            # same as interactive
"""

import argparse
import asyncio
import logging
import signal
import sys
import time
from typing import Callable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from . import __version__
from .common.config import TweetSearchConfig, load_config, missing_credentials
from .common.llm_client import LLMClient
from .common.schemas import render_post_line
from .common.twitter_session import TwitterSession
from .retriever import (
    QueryProcessor,
    Searcher,
    Synthesizer,
    SearchPipeline,
    PipelineResult,
)

logger = logging.getLogger("tweetsearch.cli")

EXIT_COMMAND = "exit"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tweetsearch",
        description="Search Twitter and answer questions using an LLM.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )
    subparsers = parser.add_subparsers(dest="command")

    ask = subparsers.add_parser("ask", help="Ask a one-time question")
    ask.add_argument("question", help="The question to answer")

    subparsers.add_parser("interactive", help="Start interactive mode to ask multiple questions")
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_pipeline(
    config: TweetSearchConfig,
    session: TwitterSession,
    llm_client: Optional[LLMClient] = None,
    on_stage=None,
) -> SearchPipeline:
    """Wire the pipeline components from config and a logged-in session."""
    llm_client = llm_client or LLMClient.from_config(config.llm)
    rcfg = config.retriever
    return SearchPipeline(
        query_processor=QueryProcessor(llm_client, max_queries=rcfg.max_queries),
        searcher=Searcher(
            session,
            candidate_count=rcfg.candidate_count,
            max_results=rcfg.max_posts_per_query,
            min_text_length=rcfg.min_text_length,
        ),
        synthesizer=Synthesizer(llm_client, hide_reasoning=rcfg.strip_reasoning),
        concurrent_search=rcfg.concurrent_search,
        on_stage=on_stage,
    )


async def connect(config: TweetSearchConfig, console: Console) -> Optional[TwitterSession]:
    """Log in to Twitter, reporting the outcome on the console."""
    with console.status("Connecting to Twitter..."):
        result = await TwitterSession.login(
            config.twitter.username,
            config.twitter.password,
            config.twitter.email,
            cookies_path=config.twitter.cookies_path or None,
        )
    if not result.ok:
        console.print(f"[red]Failed to connect to Twitter: {escape(result.error)}[/red]")
        return None
    console.print("[green]Connected to Twitter[/green]")
    return result.session


class StageReporter:
    """Prints pipeline progress as each stage finishes."""

    def __init__(self, console: Console):
        self._console = console
        self._status = None

    def attach(self, status) -> None:
        self._status = status

    def __call__(self, stage: str, payload) -> None:
        console = self._console
        if stage == "queries":
            queries = payload.search_queries
            console.print(f"[green]Generated {len(queries)} search queries[/green]")
            for i, q in enumerate(queries, 1):
                console.print(f"[cyan]  Query {i}: {escape(q)}[/cyan]")
            self._update("Searching Twitter...")
        elif stage == "search":
            console.print(f"\n[yellow]Searched for:[/yellow] [cyan]{escape(payload.query)}[/cyan]")
            if payload.posts:
                console.print(f"[green]  Found {len(payload.posts)} tweets[/green]")
            else:
                console.print("[yellow]  No relevant tweets found for this query[/yellow]")
        elif stage == "posts":
            if payload:
                console.print(f"\n[yellow]Found {len(payload)} unique tweets across all queries:[/yellow]")
                for i, post in enumerate(payload, 1):
                    console.print(f"\n[cyan]\\[{i}][/cyan] ", end="")
                    console.print(render_post_line(post), markup=False, highlight=False)
            else:
                console.print("\n[yellow]No relevant tweets found across any queries.[/yellow]")
            self._update("Generating answer based on tweets...")

    def _update(self, text: str) -> None:
        if self._status is not None:
            self._status.update(text)


def render_result(result: PipelineResult, console: Console) -> None:
    t = result.timings
    console.print(
        f"[bright_black]Query generation took {t.query_generation:.2f} seconds | "
        f"Tweet search took {t.retrieval:.2f} seconds[/bright_black]"
    )
    body = (
        f"{escape(result.answer.answer)}\n\n"
        f"[bright_black]Answer generation: {t.synthesis:.2f}s | Total time: {t.total:.2f}s[/bright_black]"
    )
    console.print(Panel(body, title="[green]Answer[/green]", border_style="green", padding=(1, 1)))


async def process_question(pipeline_factory, question: str, console: Console) -> bool:
    """
    Answer one question, reporting any unexpected failure.

    Returns:
        True if an answer was produced
    """
    console.print(Panel(f"[bold]Question: {escape(question)}[/bold]", border_style="blue", padding=(1, 1)))
    start = time.perf_counter()
    reporter = StageReporter(console)
    try:
        pipeline = pipeline_factory(reporter)
        with console.status("Generating search queries...") as status:
            reporter.attach(status)
            result = await pipeline.run(question)
    except Exception as e:
        elapsed = time.perf_counter() - start
        logger.error("Error processing question: %s", e, exc_info=True)
        console.print(f"\n[red]Error processing your question:[/red] {escape(str(e))}")
        console.print("[yellow]Please try again with a different question.[/yellow]")
        console.print(f"[bright_black]Failed after {elapsed:.2f} seconds[/bright_black]")
        return False

    render_result(result, console)
    return True


def _prompt(console: Console) -> str:
    while True:
        question = console.input('[bold]What would you like to know? (type "exit" to quit): [/bold]').strip()
        if question:
            return question
        console.print("[red]Please enter a question[/red]")


def print_session_summary(console: Console, question_count: int, elapsed_seconds: float) -> None:
    console.print("\n[cyan]----- Session Summary -----[/cyan]")
    console.print(f"[cyan]Questions answered: {question_count}[/cyan]")
    console.print(f"[cyan]Total session time: {elapsed_seconds / 60:.2f} minutes[/cyan]")
    console.print("[cyan]Goodbye![/cyan]")


async def run_ask(config: TweetSearchConfig, question: str, console: Console) -> int:
    session = await connect(config, console)
    if session is None:
        console.print("[red]Please check your Twitter credentials in the .env file[/red]")
        return 1
    llm_client = LLMClient.from_config(config.llm)
    await process_question(
        lambda reporter: build_pipeline(config, session, llm_client, on_stage=reporter),
        question,
        console,
    )
    return 0


async def run_interactive(
    config: TweetSearchConfig,
    console: Console,
    prompt: Optional[Callable[[], str]] = None,
) -> int:
    console.print(Panel("[bold cyan]Twitter Search[/bold cyan]", border_style="cyan", expand=False))
    console.print("[yellow]Ask a question and I'll search Twitter to find an answer![/yellow]\n")

    session = await connect(config, console)
    if session is None:
        console.print("[red]Please check your Twitter credentials in the .env file[/red]")
        return 1

    llm_client = LLMClient.from_config(config.llm)
    prompt = prompt or (lambda: _prompt(console))
    session_start = time.perf_counter()
    question_count = 0

    while True:
        try:
            question = prompt()
        except EOFError:
            question = EXIT_COMMAND

        if question.strip().lower() == EXIT_COMMAND:
            print_session_summary(console, question_count, time.perf_counter() - session_start)
            return 0

        await process_question(
            lambda reporter: build_pipeline(config, session, llm_client, on_stage=reporter),
            question,
            console,
        )
        question_count += 1
        console.print("\n")


def install_signal_handlers(console: Console) -> None:
    messages = {signal.SIGINT: "Gracefully shutting down..."}
    if hasattr(signal, "SIGTERM"):
        messages[signal.SIGTERM] = "Process terminated"

    def _handle_shutdown(signum, frame):
        console.print(f"\n[yellow]{messages.get(signum, 'Shutting down...')}[/yellow]")
        raise SystemExit(0)

    for sig in messages:
        signal.signal(sig, _handle_shutdown)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    console = Console()
    config = load_config()

    missing = missing_credentials(config)
    if missing:
        console.print(f"[red]Missing required settings: {', '.join(missing)}[/red]")
        console.print("[red]Set them in the environment or in a .env file[/red]")
        return 1

    install_signal_handlers(console)

    if args.command == "ask":
        return asyncio.run(run_ask(config, args.question, console))
    return asyncio.run(run_interactive(config, console))


if __name__ == "__main__":
    sys.exit(main())
