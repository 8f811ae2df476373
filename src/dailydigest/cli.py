import logging
from pathlib import Path
from typing import Optional

import typer

from .config import MarketSettings, NewsSettings, load_sources
from .errors import ConfigError, WriteError
from .pipeline.marketcap import run_marketcap
from .pipeline.news import run_news

app = typer.Typer(help="Daily news and market cap data for the static site")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("news")
def news(
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Output JSON. Default src/data/daily-news.json"),
    sources: Optional[Path] = typer.Option(None, "--sources", help="JSON file {category: [{name, url}]}"),
    # remote model
    backend: Optional[str] = typer.Option(None, "--backend", help="openai, ollama, auto or none", case_sensitive=False),
    model: Optional[str] = typer.Option(None, "--model", help="Model name, e.g. gpt-4o-mini or llama3"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="OpenAI compatible or Ollama base URL"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Overrides OPENAI_API_KEY", show_default=False),
    language: Optional[str] = typer.Option(None, "--language", help="Target language of titles and summaries"),
    # summary policy
    min_sentences: int = typer.Option(8, "--min-sentences"),
    max_sentences: int = typer.Option(12, "--max-sentences"),
    per_source: int = typer.Option(5, "--per-source", help="Items kept per feed"),
    # fetch
    delay: float = typer.Option(1.0, "--delay", help="Seconds between sources"),
    attempts: int = typer.Option(3, "--attempts", help="HTTP attempts per feed"),
    timeout: float = typer.Option(10.0, "--timeout", help="Seconds per HTTP attempt"),
    backoff: float = typer.Option(0.0, "--backoff", help="Linear wait between attempts, seconds"),
    backup: bool = typer.Option(False, "--backup/--no-backup", help="Copy the previous file to .prev.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """
    Fetch every configured feed, summarize each item and write one JSON file.
    """
    _setup_logging(verbose)
    try:
        settings = NewsSettings.from_env(
            output_path=out,
            sources=load_sources(str(sources)) if sources else None,
            backend=backend.lower() if backend else None,
            model=model,
            base_url=base_url,
            api_key=api_key,
            target_language=language,
            min_sentences=min_sentences,
            max_sentences=max_sentences,
            items_per_source=per_source,
            source_delay=delay,
            fetch_attempts=attempts,
            fetch_timeout=timeout,
            retry_backoff=backoff,
            backup=backup,
        )
        path = run_news(settings)
    except (ConfigError, WriteError) as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"News written to {path}")


@app.command("marketcap")
def marketcap(
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Output JSON. Default src/data/marketcap-top10.json"),
    attempts: int = typer.Option(2, "--attempts", help="HTTP attempts per page"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """
    Scrape the KR and US market cap top 10, keeping the previous file as .prev.json.
    """
    _setup_logging(verbose)
    settings = MarketSettings(fetch_attempts=attempts)
    if out is not None:
        settings.output_path = out
    try:
        path = run_marketcap(settings)
    except WriteError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Market cap written to {path}")


if __name__ == "__main__":
    app()
