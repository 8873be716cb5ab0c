"""
Command-line interface for the Article Scanner.

Uses Typer to expose a single-cycle `run` command, a recurring
`schedule` command and a `sites` listing. Supports loading .env files
for API keys and database settings.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config import AppConfig, load_config
from .core.errors import ArticleScannerError, ConfigurationError
from .logging_utils import setup_logging
from .runner import run_once, run_scheduled

app = typer.Typer(add_completion=False)
console = Console()


def _read_config(config: Path | None) -> AppConfig:
    load_dotenv()
    try:
        return load_config(str(config) if config else None)
    except ConfigurationError as exc:
        console.print(f"[bold red]Invalid configuration[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc


def _load(config: Path | None, log_level: str | None) -> AppConfig:
    cfg = _read_config(config)
    if log_level:
        cfg.logging.level = log_level
    setup_logging(cfg.logging)
    return cfg


def _parse_day(value: str | None) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    try:
        return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError as exc:
        raise typer.BadParameter("Use the YYYY-MM-DD format.", param_hint="--day") from exc


@app.command()
def run(
    day: str | None = typer.Option(None, "--day", "-d", help="Day to scan (YYYY-MM-DD, UTC)."),
    config: Path | None = typer.Option(
        None, "--config", "-c", exists=True, readable=True, envvar="ARTICLE_SCANNER_CONFIG"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Directory for the digest report."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Run one ingestion cycle.

    Scans every configured site for the requested day, enriches the new
    articles, persists them and delivers the digest to the configured
    channels.

    Args:
        day: Target day, defaults to today in UTC
        config: Optional path to YAML config file
        output: Directory for an HTML/Markdown digest report
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    target = _parse_day(day)
    cfg = _load(config, log_level)

    try:
        digest, report_path = run_once(cfg, target, output)
    except (ArticleScannerError, ValueError) as exc:
        console.print(f"[bold red]Cycle failed[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc

    console.print(f"Processed {len(digest)} new articles for {target.date().isoformat()}")
    if report_path is not None:
        console.print(f"Report generated: {report_path}")


@app.command()
def schedule(
    config: Path | None = typer.Option(
        None, "--config", "-c", exists=True, readable=True, envvar="ARTICLE_SCANNER_CONFIG"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Run a cycle now and then on the configured interval."""
    cfg = _load(config, log_level)
    run_scheduled(cfg, console=console)


@app.command()
def sites(
    config: Path | None = typer.Option(
        None, "--config", "-c", exists=True, readable=True, envvar="ARTICLE_SCANNER_CONFIG"
    ),
):
    """List configured sites and their categories."""
    cfg = _read_config(config)
    table = Table(title="Configured sites")
    table.add_column("Site")
    table.add_column("Scanner")
    table.add_column("Category")
    table.add_column("URL")
    for site in cfg.sites:
        for category in site.categories or []:
            table.add_row(site.name, site.scanner, category.name, category.url)
        if not site.categories:
            table.add_row(site.name, site.scanner, "-", "-")
    console.print(table)


if __name__ == "__main__":
    app()
