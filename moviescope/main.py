import asyncio
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from typing import Any, Dict, List, Optional
from moviescope.config import config, VALID_KEYS
from moviescope.logger import setup_logging
from moviescope.query import build_search_query
from moviescope.relay import relay, RelayResult
from moviescope.similar import find_similar
from moviescope import browse

app = typer.Typer(
    name="moviescope",
    help="Movie discovery - search OMDb, browse curated lists, view title details and find similar movies.",
    add_completion=False
)
console = Console()

@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Log requests to the console and the log file")
):
    if verbose:
        setup_logging()

DETAIL_FIELDS = ["Year", "Rated", "Runtime", "Genre", "Director", "Actors", "imdbRating", "imdbID"]

def _check(result: RelayResult) -> Dict[str, Any]:
    """Exit non-zero on a failure envelope or an OMDb 'Response: False' body."""
    payload = result.payload if isinstance(result.payload, dict) else {}
    if not result.ok or payload.get("Response") == "False":
        console.print(f"[red]Error: {payload.get('Error', 'Unknown error')}[/red]")
        raise typer.Exit(code=1)
    return payload

def _results_table(title: str, movies: List[Dict[str, Any]]) -> Table:
    table = Table(title=title)
    table.add_column("IMDb ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Year")
    table.add_column("Type", style="magenta")
    for m in movies:
        table.add_row(m.get("imdbID", ""), m.get("Title", ""), m.get("Year", ""), m.get("Type", ""))
    return table

@app.command()
def search(
    term: Optional[str] = typer.Argument(None, help="Free-text search (defaults to DEFAULT_SEARCH_TERM)"),
    year: Optional[str] = typer.Option(None, "--year", help="Release year"),
    page: str = typer.Option("1", "--page", help="Result page"),
    genre: Optional[str] = typer.Option(None, "--genre", help="Restricts results to movies"),
    media_type: Optional[str] = typer.Option(None, "--type", help="movie, series or episode"),
):
    """
    Search OMDb by keyword.
    """
    query = build_search_query(
        free_text=term, year=year, genre=genre, page=page,
        media_type=media_type, default_term=config.DEFAULT_SEARCH_TERM,
    )
    with console.status(f"Searching for [bold]{query.free_text}[/bold]..."):
        result = asyncio.run(relay(query))

    data = _check(result)
    movies = data.get("Search") or []
    console.print(_results_table(f"Results for '{query.free_text}' (page {query.page})", movies))
    console.print(f"[dim]{data.get('totalResults', len(movies))} total results[/dim]")

@app.command()
def show(
    imdb_id: Optional[str] = typer.Argument(None, help="IMDb identifier, e.g. tt0133093"),
    title: Optional[str] = typer.Option(None, "--title", help="Look up by exact title instead"),
):
    """
    Show details for a single title.
    """
    if not imdb_id and not title:
        console.print("[red]Error: Pass an IMDb ID or --title.[/red]")
        raise typer.Exit(code=1)

    query = build_search_query(identifier=imdb_id, title=title)
    with console.status("Fetching details..."):
        result = asyncio.run(relay(query))

    movie = _check(result)
    lines = [f"[bold]{field}:[/bold] {movie[field]}" for field in DETAIL_FIELDS if movie.get(field)]
    if movie.get("Plot") and movie["Plot"] != "N/A":
        lines.append("")
        lines.append(movie["Plot"])
    console.print(Panel("\n".join(lines), title=movie.get("Title", "Unknown")))

@app.command()
def similar(
    imdb_id: str = typer.Argument(..., help="IMDb identifier"),
    limit: Optional[int] = typer.Option(None, "--limit", help="Maximum number of titles"),
):
    """
    List titles sharing the first genre of a movie.
    """
    with console.status("Looking for similar titles..."):
        result = asyncio.run(find_similar(imdb_id, limit=limit or config.SIMILAR_LIMIT))

    data = _check(result)
    movies = data.get("Search") or []
    if not movies:
        console.print("[yellow]No similar titles found.[/yellow]")
        return
    console.print(_results_table(f"Similar to {imdb_id}", movies))

def _print_listing(title: str, result: RelayResult):
    data = _check(result)
    movies = data.get("Search") or []
    if not movies:
        console.print("[yellow]Nothing found.[/yellow]")
        return
    console.print(_results_table(title, movies))

@app.command()
def trending(limit: int = typer.Option(browse.BROWSE_LIMIT, "--limit", help="Maximum number of titles")):
    """
    Show trending titles.
    """
    with console.status("Fetching trending titles..."):
        result = asyncio.run(browse.trending(limit=limit))
    _print_listing("Trending", result)

@app.command()
def top_rated(limit: int = typer.Option(browse.BROWSE_LIMIT, "--limit", help="Maximum number of titles")):
    """
    Show top rated titles.
    """
    with console.status("Fetching top rated titles..."):
        result = asyncio.run(browse.top_rated(limit=limit))
    _print_listing("Top Rated", result)

@app.command()
def genre(
    name: str = typer.Argument(..., help="Genre, e.g. Comedy"),
    limit: int = typer.Option(browse.BROWSE_LIMIT, "--limit", help="Maximum number of titles"),
):
    """
    Browse titles for a genre.
    """
    with console.status(f"Browsing [bold]{name}[/bold]..."):
        result = asyncio.run(browse.by_genre(name, limit=limit))
    _print_listing(f"Genre: {name}", result)

@app.command()
def decade(
    name: str = typer.Argument(..., help="Decade, e.g. 1990s or Classic"),
    limit: int = typer.Option(browse.BROWSE_LIMIT, "--limit", help="Maximum number of titles"),
):
    """
    Browse titles from a decade.
    """
    with console.status(f"Browsing the [bold]{name}[/bold]..."):
        result = asyncio.run(browse.by_decade(name, limit=limit))
    _print_listing(f"Decade: {name}", result)

@app.command()
def config_set(
    key: str = typer.Argument(..., help="Config key (OMDB_API_KEY, DEFAULT_SEARCH_TERM, etc)"),
    value: str = typer.Argument(..., help="Value to set")
):
    """
    Set a configuration value globally (e.g. OMDB_API_KEY).
    """
    key = key.upper()
    if key not in VALID_KEYS:
        console.print(f"[red]Error: Unknown config key {key}. Valid keys: {', '.join(VALID_KEYS)}[/red]")
        raise typer.Exit(code=1)

    config.save(key, value)
    console.print(f"[green]Updated {key}[/green]")

@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind to"),
    port: int = typer.Option(8742, "--port", help="Port to bind to"),
):
    """
    Run the HTTP API.
    """
    from moviescope.api import start_server
    start_server(host, port)

if __name__ == "__main__":
    app()
