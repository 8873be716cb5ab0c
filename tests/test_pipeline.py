"""Tests for the ingestion pipeline with in-memory collaborators."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import json

import pytest

from article_scanner.core.digest import build_digest_message, build_digest_payload
from article_scanner.core.errors import PipelineError
from article_scanner.core.types import (
    Article,
    ArticleReview,
    ProcessedArticle,
    ProcessingStatus,
)
from article_scanner.pipeline import Pipeline, PipelineDeps
from article_scanner.providers.base import (
    Analyzer,
    ArticleRepository,
    ArticleSource,
    ChatClient,
    Downloader,
    Notifier,
    Summarizer,
)
from article_scanner.runner import run_cycle

from helpers import make_article

DAY = datetime(2025, 11, 8, tzinfo=timezone.utc)


class StaticSource(ArticleSource):
    def __init__(self, articles: list[Article], error: Exception | None = None, delay: float = 0):
        self.articles = articles
        self.error = error
        self.delay = delay

    async def fetch_daily(self, day: datetime) -> list[Article]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.articles)


class MemoryRepository(ArticleRepository):
    def __init__(
        self,
        known: set[str] | None = None,
        fail_query: bool = False,
        fail_save_on: str | None = None,
    ):
        self.known = set(known or ())
        self.fail_query = fail_query
        self.fail_save_on = fail_save_on
        self.saved: list[ProcessedArticle] = []
        self.queries: list[list[str]] = []

    async def already_processed(self, ids):
        ids = list(ids)
        self.queries.append(ids)
        if self.fail_query:
            raise RuntimeError("database unavailable")
        return {i for i in ids if i in self.known}

    async def save_processed(self, article: ProcessedArticle) -> None:
        if article.article.id == self.fail_save_on:
            raise RuntimeError("write failed")
        self.saved.append(article)


class ScoringAnalyzer(Analyzer):
    def __init__(self, fail_on: str | None = None):
        self.fail_on = fail_on
        self.calls: list[str] = []

    async def rank(self, article: Article) -> ArticleReview:
        self.calls.append(article.id)
        if article.id == self.fail_on:
            raise RuntimeError("ranking service unavailable")
        return ArticleReview(article=article, score=0.9, topics=["ml"], summary=article.abstract)


class RecordingSummarizer(Summarizer):
    def __init__(self, fail_on: str | None = None):
        self.fail_on = fail_on
        self.calls: list[str] = []
        self.payloads: list[bytes] = []

    async def summarize(self, article: Article, content: bytes) -> str:
        self.calls.append(article.id)
        if article.id == self.fail_on:
            raise RuntimeError("summarizer timed out")
        self.payloads.append(content)
        return f"summary of {article.id}"


class NoneDownloader(Downloader):
    async def download(self, article: Article) -> bytes | None:
        return None


class PageDownloader(Downloader):
    def __init__(self, fail_on: str | None = None):
        self.fail_on = fail_on
        self.calls: list[str] = []

    async def download(self, article: Article) -> bytes | None:
        self.calls.append(article.id)
        if article.id == self.fail_on:
            raise RuntimeError("download refused")
        return f"page {article.id}".encode("utf-8")


class RecordingChat(ChatClient):
    def __init__(self, error: Exception | None = None):
        self.payloads: list[bytes] = []
        self.error = error

    async def send_digest(self, payload: bytes) -> None:
        if self.error is not None:
            raise self.error
        self.payloads.append(payload)


class RecordingNotifier(Notifier):
    def __init__(self, error: Exception | None = None):
        self.messages: list[str] = []
        self.error = error

    async def publish_digest(self, digest: str) -> None:
        if self.error is not None:
            raise self.error
        self.messages.append(digest)


def test_process_day_enriches_persists_and_delivers_new_articles():
    repo = MemoryRepository(known={"A"})
    summarizer = RecordingSummarizer()
    chat = RecordingChat()
    notifier = RecordingNotifier()
    pipeline = Pipeline(
        PipelineDeps(
            source=StaticSource([make_article("A"), make_article("B")]),
            repository=repo,
            analyzer=ScoringAnalyzer(),
            summarizer=summarizer,
            chat_client=chat,
            notifier=notifier,
        )
    )

    digest = asyncio.run(pipeline.process_day(DAY))

    assert [r.article.id for r in digest] == ["B"]
    assert digest[0].score == pytest.approx(0.9)
    assert digest[0].summary == "summary of B"
    assert repo.queries == [["A", "B"]]
    assert [p.article.id for p in repo.saved] == ["B"]
    assert repo.saved[0].status is ProcessingStatus.DELIVERED
    assert repo.saved[0].summary == "summary of B"

    assert len(chat.payloads) == 1
    items = json.loads(chat.payloads[0])
    assert items == [
        {
            "id": "B",
            "url": "https://arxiv.org/abs/B",
            "summary": "summary of B",
            "source": "arxiv/cs.AI",
            "title": "Title B",
        }
    ]
    assert notifier.messages == [
        "- Title B\nScore: 0.90\nsummary of B\nhttps://arxiv.org/abs/B\n\n"
    ]


def test_process_day_with_everything_known_skips_delivery():
    repo = MemoryRepository(known={"A", "B"})
    chat = RecordingChat()
    notifier = RecordingNotifier()
    analyzer = ScoringAnalyzer()
    pipeline = Pipeline(
        PipelineDeps(
            source=StaticSource([make_article("A"), make_article("B")]),
            repository=repo,
            analyzer=analyzer,
            chat_client=chat,
            notifier=notifier,
        )
    )

    digest = asyncio.run(pipeline.process_day(DAY))

    assert digest == []
    assert analyzer.calls == []
    assert repo.saved == []
    assert chat.payloads == []
    assert notifier.messages == []


def test_process_day_without_collaborators_returns_abstracts():
    pipeline = Pipeline(PipelineDeps(source=StaticSource([make_article("A")])))

    digest = asyncio.run(pipeline.process_day(DAY))

    assert len(digest) == 1
    assert digest[0].score == 0.0
    assert digest[0].summary == "Abstract A"


def test_process_day_preserves_fetch_order():
    ids = ["c", "a", "b", "d"]
    repo = MemoryRepository()
    pipeline = Pipeline(
        PipelineDeps(
            source=StaticSource([make_article(i) for i in ids]),
            repository=repo,
            analyzer=ScoringAnalyzer(),
        )
    )

    digest = asyncio.run(pipeline.process_day(DAY))

    assert [r.article.id for r in digest] == ids
    assert [p.article.id for p in repo.saved] == ids


def test_process_day_without_source_returns_empty():
    pipeline = Pipeline(PipelineDeps(notifier=RecordingNotifier()))

    assert asyncio.run(pipeline.process_day(DAY)) == []


def test_rank_failure_aborts_with_stage_and_article():
    repo = MemoryRepository()
    notifier = RecordingNotifier()
    pipeline = Pipeline(
        PipelineDeps(
            source=StaticSource([make_article("A"), make_article("B"), make_article("C")]),
            repository=repo,
            analyzer=ScoringAnalyzer(fail_on="B"),
            notifier=notifier,
        )
    )

    with pytest.raises(PipelineError) as excinfo:
        asyncio.run(pipeline.process_day(DAY))

    assert excinfo.value.stage == "rank"
    assert excinfo.value.article_id == "B"
    assert "ranking service unavailable" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert [p.article.id for p in repo.saved] == ["A"]
    assert notifier.messages == []


def test_notify_failure_keeps_persisted_rows():
    repo = MemoryRepository()
    pipeline = Pipeline(
        PipelineDeps(
            source=StaticSource([make_article("A")]),
            repository=repo,
            notifier=RecordingNotifier(error=RuntimeError("telegram down")),
        )
    )

    with pytest.raises(PipelineError) as excinfo:
        asyncio.run(pipeline.process_day(DAY))

    assert excinfo.value.stage == "notify"
    assert excinfo.value.article_id is None
    assert [p.article.id for p in repo.saved] == ["A"]


def test_fetch_failure_stops_before_any_other_stage():
    repo = MemoryRepository()
    pipeline = Pipeline(
        PipelineDeps(
            source=StaticSource([], error=RuntimeError("listing unavailable")),
            repository=repo,
        )
    )

    with pytest.raises(PipelineError) as excinfo:
        asyncio.run(pipeline.process_day(DAY))

    assert excinfo.value.stage == "fetch"
    assert repo.queries == []


def test_missing_download_gives_summarizer_empty_payload():
    summarizer = RecordingSummarizer()
    pipeline = Pipeline(
        PipelineDeps(
            source=StaticSource([make_article("A")]),
            downloader=NoneDownloader(),
            summarizer=summarizer,
        )
    )

    digest = asyncio.run(pipeline.process_day(DAY))

    assert summarizer.payloads == [b""]
    assert digest[0].summary == "summary of A"
    assert digest[0].score == 0.0


def test_summarizer_without_analyzer_keeps_zero_score():
    summarizer = RecordingSummarizer()
    repo = MemoryRepository()
    pipeline = Pipeline(
        PipelineDeps(
            source=StaticSource([make_article("A"), make_article("B")]),
            repository=repo,
            summarizer=summarizer,
            downloader=PageDownloader(),
        )
    )

    digest = asyncio.run(pipeline.process_day(DAY))

    assert [r.summary for r in digest] == ["summary of A", "summary of B"]
    assert [r.score for r in digest] == [0.0, 0.0]
    assert [r.ranked_at for r in digest] == [None, None]
    assert summarizer.payloads == [b"page A", b"page B"]
    assert [p.summary for p in repo.saved] == ["summary of A", "summary of B"]


@pytest.mark.parametrize(
    "stage, article_id, saved",
    [
        ("load_processed", None, []),
        ("download", "B", ["A"]),
        ("summarize", "B", ["A"]),
        ("persist", "B", ["A"]),
        ("chat", None, ["A", "B", "C"]),
    ],
)
def test_stage_failure_aborts_cycle_and_skips_later_stages(stage, article_id, saved):
    repo = MemoryRepository(
        fail_query=stage == "load_processed",
        fail_save_on="B" if stage == "persist" else None,
    )
    downloader = PageDownloader(fail_on="B" if stage == "download" else None)
    summarizer = RecordingSummarizer(fail_on="B" if stage == "summarize" else None)
    chat = RecordingChat(error=RuntimeError("relay down") if stage == "chat" else None)
    notifier = RecordingNotifier()
    pipeline = Pipeline(
        PipelineDeps(
            source=StaticSource([make_article("A"), make_article("B"), make_article("C")]),
            repository=repo,
            downloader=downloader,
            summarizer=summarizer,
            chat_client=chat,
            notifier=notifier,
        )
    )

    with pytest.raises(PipelineError) as excinfo:
        asyncio.run(pipeline.process_day(DAY))

    assert excinfo.value.stage == stage
    assert excinfo.value.article_id == article_id
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert [p.article.id for p in repo.saved] == saved
    assert chat.payloads == []
    assert notifier.messages == []
    if article_id is not None:
        assert "C" not in downloader.calls
        assert "C" not in summarizer.calls


def test_run_cycle_deadline_cancels_slow_cycle():
    pipeline = Pipeline(PipelineDeps(source=StaticSource([make_article("A")], delay=5)))

    with pytest.raises(PipelineError) as excinfo:
        asyncio.run(run_cycle(pipeline, DAY, deadline_seconds=0.05))

    assert excinfo.value.stage == "deadline"


def test_digest_message_and_payload_follow_review_order():
    reviews = [
        ArticleReview(article=make_article("X", title="Zürich"), score=1.0, summary="first"),
        ArticleReview(article=make_article("Y"), score=0.125, summary="second"),
    ]

    message = build_digest_message(reviews)
    payload = build_digest_payload(reviews)

    assert message.index("Zürich") < message.index("Title Y")
    assert "Score: 1.00\n" in message
    assert "Score: 0.12\n" in message or "Score: 0.13\n" in message
    assert "Zürich".encode("utf-8") in payload
    assert [item["id"] for item in json.loads(payload)] == ["X", "Y"]
    assert build_digest_message([]) == ""
    assert json.loads(build_digest_payload([])) == []
