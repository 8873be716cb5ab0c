"""
Wiring and execution of ingestion cycles.

This module turns an AppConfig into a Pipeline (only the collaborators
that are configured get wired), runs single cycles with an optional
deadline, writes the digest report, and drives the recurring scheduler.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
import logging
from pathlib import Path
from typing import AsyncIterator

import httpx
from rich.console import Console

from .config import AppConfig
from .core.errors import PipelineError
from .core.types import ArticleReview
from .fetch.downloader import HttpDownloader
from .fetch.fetcher import build_client
from .logging_utils import get_logger, log_event
from .output.renderer import render_html, render_markdown
from .pipeline import Pipeline, PipelineDeps
from .providers.base import ArticleRepository
from .providers.chatgpt import ChatGPTClient
from .providers.ml import MLClient
from .providers.telegram import TelegramNotifier
from .scan.arxiv import ArxivScanner
from .scan.registry import ScannerRegistry
from .scan.source import StrategySource
from .scheduler import DailyScheduler
from .storage.repository import SqlArticleRepository


def build_registry(cfg: AppConfig, client: httpx.AsyncClient) -> ScannerRegistry:
    """Register every available scanner strategy."""
    registry = ScannerRegistry()
    registry.register(
        ArxivScanner(
            client,
            page_size=cfg.fetch.page_size,
            user_agent=cfg.fetch.user_agent,
        )
    )
    return registry


def build_pipeline(
    cfg: AppConfig,
    client: httpx.AsyncClient,
    repository: ArticleRepository | None = None,
) -> Pipeline:
    """Build the pipeline from configuration.

    Args:
        cfg: Application configuration
        client: Shared async HTTP client, owned by the caller
        repository: Overrides the DSN-based repository when given

    Returns:
        Pipeline with every configured collaborator wired in
    """
    source = StrategySource(build_registry(cfg, client), cfg.sites)

    if repository is None and cfg.database.dsn:
        # schema is created by open_pipeline, off the event loop
        repository = SqlArticleRepository.from_dsn(cfg.database.dsn, create_schema=False)

    ml_client = MLClient(cfg.ml, client) if cfg.ml.inference_url else None
    downloader = (
        HttpDownloader(client, user_agent=cfg.fetch.user_agent)
        if cfg.fetch.download_enabled
        else None
    )
    chat_client = ChatGPTClient(cfg.chatgpt, client) if cfg.chatgpt.api_key else None
    notifier = (
        TelegramNotifier(cfg.telegram, client)
        if cfg.telegram.bot_token and cfg.telegram.chat_id
        else None
    )

    return Pipeline(
        PipelineDeps(
            source=source,
            repository=repository,
            analyzer=ml_client,
            summarizer=ml_client,
            downloader=downloader,
            notifier=notifier,
            chat_client=chat_client,
        )
    )


@asynccontextmanager
async def open_pipeline(cfg: AppConfig) -> AsyncIterator[Pipeline]:
    """Yield a pipeline whose HTTP client is closed on exit."""
    async with build_client(cfg.fetch) as client:
        pipeline = build_pipeline(cfg, client)
        if isinstance(pipeline.repository, SqlArticleRepository):
            await pipeline.repository.ensure_schema()
        yield pipeline


async def run_cycle(
    pipeline: Pipeline,
    day: datetime,
    deadline_seconds: float | None,
) -> list[ArticleReview]:
    """Run one cycle, cancelling it when it exceeds the deadline."""
    if deadline_seconds is None:
        return await pipeline.process_day(day)
    try:
        return await asyncio.wait_for(pipeline.process_day(day), timeout=deadline_seconds)
    except asyncio.TimeoutError as exc:
        raise PipelineError("deadline", f"cycle exceeded {deadline_seconds}s") from exc


async def run_once_async(
    cfg: AppConfig,
    day: datetime,
    output_dir: Path | None = None,
) -> tuple[list[ArticleReview], Path | None]:
    logger = get_logger("runner")
    async with open_pipeline(cfg) as pipeline:
        digest = await run_cycle(pipeline, day, cfg.pipeline.deadline_seconds)

    report_path = None
    if output_dir is not None and digest:
        report_path = write_report(digest, output_dir, day, cfg)
        log_event(logger, "Report written", event="report_written", path=str(report_path))
    return digest, report_path


def run_once(
    cfg: AppConfig,
    day: datetime,
    output_dir: Path | None = None,
) -> tuple[list[ArticleReview], Path | None]:
    """Synchronous entry point for a single cycle."""
    return asyncio.run(run_once_async(cfg, day, output_dir))


def write_report(
    digest: list[ArticleReview],
    output_dir: Path,
    day: datetime,
    cfg: AppConfig,
) -> Path:
    """Render the digest report for one day.

    Raises:
        ValueError: If output format is not supported
    """
    title = f"{cfg.output.title} - {day.date().isoformat()}"
    fmt = (cfg.output.format or "html").lower()
    if fmt == "html":
        path = output_dir / f"digest-{day.date().isoformat()}.html"
        render_html(digest, path, title)
    elif fmt == "markdown":
        path = output_dir / f"digest-{day.date().isoformat()}.md"
        render_markdown(digest, path, title)
    else:
        raise ValueError("Unsupported output format. Use 'html' or 'markdown'.")
    return path


async def run_scheduled_async(cfg: AppConfig, max_runs: int | None = None) -> int:
    logger = get_logger("runner")
    scheduler = DailyScheduler(cfg.scheduler.interval_hours, cfg.scheduler.location())

    async with open_pipeline(cfg) as pipeline:

        async def job(trigger: datetime) -> None:
            digest = await run_cycle(pipeline, trigger, cfg.pipeline.deadline_seconds)
            log_event(
                logger,
                "Scheduled cycle done",
                event="scheduled_cycle_done",
                trigger=trigger.isoformat(),
                processed=len(digest),
            )

        return await scheduler.run(job, max_runs=max_runs)


def run_scheduled(cfg: AppConfig, console: Console | None = None) -> None:
    """Block running cycles on the configured interval until interrupted."""
    console = console or Console()
    console.print(
        f"Scheduling cycles every {cfg.scheduler.interval_hours:g}h "
        f"({cfg.scheduler.timezone or 'UTC'})"
    )
    try:
        asyncio.run(run_scheduled_async(cfg))
    except KeyboardInterrupt:
        logging.getLogger("article_scanner").info("Scheduler stopped")
