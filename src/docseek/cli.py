"""Command line entry point for docseek.

Commands:
- docseek dump: retrieve documents with offset or cursor pagination and print them
- docseek seed: fill an index with generated user documents
- docseek create-index: create an index from a JSON mapping file
"""

from __future__ import annotations

import asyncio
import json
import signal
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar

import click

from docseek.config import load_settings
from docseek.exceptions import DocseekError, PaginationError
from docseek.logger import setup_logging
from docseek.mcp.server import AppState
from docseek.search.client import SearchEngineClient
from docseek.search.pagination import paginate_cursor, paginate_offset
from docseek.search.seed import seed_documents

T = TypeVar("T")


async def _cancel_on_signals(aw: Awaitable[T]) -> T:
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, task.cancel)  # type: ignore[union-attr]
            installed.append(sig)
        except (NotImplementedError, RuntimeError, ValueError):
            # No loop signal support here (Windows or not the main thread)
            pass
    try:
        return await aw
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def coro(f: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """Run an async click command; SIGINT/SIGTERM cancel it instead of killing it."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return asyncio.run(_cancel_on_signals(f(*args, **kwargs)))
        except asyncio.CancelledError:
            click.echo("Interrupted, in-flight requests cancelled.", err=True)
            raise click.exceptions.Exit(130)

    return wrapper


def _make_state() -> AppState:
    settings = load_settings()
    setup_logging(settings.app.log_level, settings.app.log_format)
    state = AppState(settings)
    state.init_clients()
    return state


def _require_client(state: AppState) -> SearchEngineClient:
    if state.search is None:
        raise click.ClickException(
            "Search engine is not configured. Set DOCSEEK_SEARCH__HOSTS."
        )
    return state.search


@click.group()
@click.version_option(version="0.1.0", prog_name="docseek")
def cli() -> None:
    """docseek - paginated retrieval from an Elasticsearch/OpenSearch index."""


@cli.command()
@click.option(
    "--strategy",
    type=click.Choice(["offset", "cursor"]),
    default="offset",
    show_default=True,
    help="Pagination strategy",
)
@click.option("--index", default=None, help="Index name (default: configured index)")
@click.option("--page-size", default=10, show_default=True, type=int, help="Documents per request")
@click.option(
    "--bound",
    default=100,
    show_default=True,
    type=int,
    help="Offset strategy: number of records to cover",
)
@click.option(
    "--iterations",
    default=10,
    show_default=True,
    type=int,
    help="Cursor strategy: number of requests",
)
@click.option(
    "--stop-when-exhausted",
    is_flag=True,
    help="Stop on the first empty page or once the reported total is reached",
)
@click.option("--deadline", default=None, type=float, help="Overall deadline in seconds")
@coro
async def dump(
    strategy: str,
    index: Optional[str],
    page_size: int,
    bound: int,
    iterations: int,
    stop_when_exhausted: bool,
    deadline: Optional[float],
) -> None:
    """Retrieve documents page by page and print them as JSON."""
    state = _make_state()
    try:
        client = _require_client(state)
        if strategy == "cursor":
            result = await paginate_cursor(
                client,
                index=index,
                page_size=page_size,
                iterations=iterations,
                stop_when_exhausted=stop_when_exhausted,
                deadline=deadline,
            )
        else:
            result = await paginate_offset(
                client,
                index=index,
                page_size=page_size,
                bound=bound,
                stop_when_exhausted=stop_when_exhausted,
                deadline=deadline,
            )
    except PaginationError as exc:
        click.echo(
            f"Retrieved {len(exc.partial.documents)} document(s) before the failure.",
            err=True,
        )
        raise click.ClickException(str(exc)) from exc
    finally:
        await state.shutdown()

    click.echo(json.dumps([d.to_source() for d in result.documents], indent=4))
    if result.truncated_pages:
        click.echo(
            f"Warning: {result.truncated_pages} page(s) were truncated by undecodable documents.",
            err=True,
        )


@cli.command()
@click.option("--count", default=100_000, show_default=True, type=int, help="Documents to store")
@click.option("--index", default=None, help="Index name (default: configured index)")
@click.option("--prefix", default="user", show_default=True, help="Username prefix")
@coro
async def seed(count: int, index: Optional[str], prefix: str) -> None:
    """Store COUNT generated user documents."""
    state = _make_state()
    try:
        client = _require_client(state)
        stored = await seed_documents(client, count=count, index=index, prefix=prefix)
    except DocseekError as exc:
        raise click.ClickException(f"Seeding failed: {exc}") from exc
    finally:
        await state.shutdown()
    click.echo(f"Stored {stored} document(s) in {client.resolve_index(index)}")


@cli.command(name="create-index")
@click.option("--index", default=None, help="Index name (default: configured index)")
@click.option(
    "--mapping",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Mapping JSON file (default: configured mapping_path)",
)
@coro
async def create_index(index: Optional[str], mapping: Optional[str]) -> None:
    """Create an index from a JSON mapping file."""
    state = _make_state()
    try:
        client = _require_client(state)
        await client.create_index(index, mapping)
    except DocseekError as exc:
        raise click.ClickException(f"Index creation failed: {exc}") from exc
    finally:
        await state.shutdown()
    click.echo(f"Created index {client.resolve_index(index)}")


def main() -> None:  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
