"""
CLI Main - Typer-based command-line interface.

Usage:
    helpbot crawl https://help.example.com/password
    helpbot list
    helpbot search "reset password"
    helpbot ask "How do I reset my password?" --stream
    helpbot serve
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from helpbot.config import get_settings, setup_logging
from helpbot.config.errors import HelpBotError

app = typer.Typer(
    name="helpbot",
    help="HelpBot - Knowledge-base helpdesk assistant",
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Configure logging for all commands."""
    setup_logging("DEBUG" if verbose else get_settings().log_level)


@app.command()
def crawl(
    url: str = typer.Argument(..., help="Page URL to add to the knowledge base"),
) -> None:
    """Crawl a web page into the knowledge base."""
    asyncio.run(_crawl_async(url))


async def _crawl_async(url: str) -> None:
    """Async crawl implementation."""
    from helpbot.interfaces.api import deps

    service = deps.get_knowledge_service()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Crawling {url}...", total=None)
        try:
            result = await service.ingest(url)
        except HelpBotError as e:
            console.print(f"[red]Error:[/red] {e.message}")
            raise typer.Exit(1)
        finally:
            await service.crawler.close()

    if result.is_fallback:
        console.print(f"[yellow]Stored placeholder for[/yellow] {url} [dim](page could not be fetched)[/dim]")
    else:
        console.print(f"[green]Stored:[/green] {result.entry.title}")
    console.print(f"[dim]{result.entry.identifier}[/dim]")


@app.command(name="list")
def list_entries() -> None:
    """List knowledge base pages, newest first."""
    asyncio.run(_list_async())


async def _list_async() -> None:
    """Async listing implementation."""
    from helpbot.interfaces.api import deps

    entries = await deps.get_document_store().list_entries()
    if not entries:
        console.print("[yellow]Knowledge base is empty[/yellow]")
        return

    table = Table(title=f"Knowledge Base ({len(entries)})")
    table.add_column("Title", style="cyan")
    table.add_column("URL")
    table.add_column("Crawled", style="dim")
    table.add_column("Identifier", style="dim")

    for entry in entries:
        crawled = entry.crawled_at.strftime("%Y-%m-%d %H:%M") if entry.crawled_at else "-"
        table.add_row(entry.title, entry.url, crawled, entry.identifier)

    console.print(table)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    limit: int = typer.Option(10, "--limit", "-n", help="Number of results"),
) -> None:
    """Search the knowledge base."""
    asyncio.run(_search_async(query, limit))


async def _search_async(query: str, limit: int) -> None:
    """Async search implementation."""
    from helpbot.interfaces.api import deps

    outcome = await deps.get_knowledge_search().search(query)

    console.print(f"\n[yellow]Searching for:[/yellow] {query}")
    console.print(f"[dim]Terms: {', '.join(outcome.terms.terms) or '(none)'}[/dim]\n")

    if not outcome.results:
        console.print("[yellow]No matching pages[/yellow]")
        return

    table = Table(title="Search Results")
    table.add_column("Relevance", style="green", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Snippet")

    for result in outcome.results[:limit]:
        table.add_row(f"{result.relevance:.2f}", result.title, result.snippet)

    console.print(table)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question for the assistant"),
    stream: bool = typer.Option(True, "--stream/--no-stream", help="Stream the answer"),
    model: str | None = typer.Option(None, "--model", "-m", help="Ollama model"),
    temperature: float | None = typer.Option(None, "--temperature", "-t", help="Sampling temperature"),
) -> None:
    """Ask a question answered from the knowledge base."""
    asyncio.run(_ask_async(question, stream, model, temperature))


async def _ask_async(
    question: str,
    stream: bool,
    model: str | None,
    temperature: float | None,
) -> None:
    """Async question implementation."""
    from helpbot.domains.chat import ChatRequest, GenerationConfig, MetadataEnvelope
    from helpbot.interfaces.api import deps

    request = ChatRequest(
        message=question,
        config=GenerationConfig(model=model, temperature=temperature),
    )
    orchestrator = deps.get_orchestrator()

    try:
        if stream:
            metadata = None
            console.print()
            async for envelope in orchestrator.stream(request):
                if isinstance(envelope, MetadataEnvelope):
                    metadata = envelope
                elif envelope.type == "content":
                    console.print(envelope.content, end="", markup=False, highlight=False)
            console.print("\n")
            source = metadata.source.value if metadata else "unknown"
            references = metadata.references if metadata else []
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                progress.add_task("Thinking...", total=None)
                response = await orchestrator.answer(request)
            console.print(Panel(response.response, title="Answer"))
            source = response.source.value
            references = response.references
    finally:
        await deps.get_ollama_client().close()

    if references:
        console.print("[bold]References:[/bold]")
        for i, reference in enumerate(references, 1):
            console.print(f"  {i}. {reference.title} [dim]{reference.url}[/dim]")
    console.print(f"[dim]Source: {source}[/dim]")


@app.command()
def delete(
    identifier: str = typer.Argument(..., help="Identifier shown by `helpbot list`"),
) -> None:
    """Delete a knowledge base page."""
    from helpbot.interfaces.api import deps

    try:
        asyncio.run(deps.get_document_store().delete(identifier))
    except HelpBotError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    console.print(f"[green]Deleted[/green] {identifier}")


@app.command()
def models() -> None:
    """List models installed in Ollama."""
    asyncio.run(_models_async())


async def _models_async() -> None:
    """Async model listing."""
    from helpbot.interfaces.api import deps

    client = deps.get_ollama_client()
    try:
        names = await client.list_models()
    except HelpBotError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await client.close()

    default = get_settings().ollama_model
    for name in names:
        marker = " [green](default)[/green]" if name == default else ""
        console.print(f"  {name}{marker}")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print("\n[green]Starting HelpBot API server[/green]")
    console.print(f"[dim]http://{host}:{port}[/dim]\n")

    uvicorn.run(
        "helpbot.interfaces.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from helpbot import __version__

    console.print(f"HelpBot v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
