"""
Processed-article repository backed by SQLAlchemy.

One table, `processed_articles`, keyed by the external article id. Rows
are upserted after enrichment; `updated_at` is refreshed on every
upsert. Works with PostgreSQL in production and SQLite in tests.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    select,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..core.errors import PersistenceError
from ..core.types import ProcessedArticle
from ..providers.base import ArticleRepository

metadata = MetaData()

processed_articles = Table(
    "processed_articles",
    metadata,
    Column("external_id", String(255), primary_key=True),
    Column("title", Text, nullable=False, default=""),
    Column("summary", Text, nullable=False, default=""),
    Column("score", Float, nullable=False, default=0.0),
    Column("status", String(32), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


class SqlArticleRepository(ArticleRepository):
    """ArticleRepository over a SQLAlchemy engine.

    Blocking database work runs in a worker thread so the event loop
    stays responsive to cancellation.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_dsn(cls, dsn: str, create_schema: bool = True) -> SqlArticleRepository:
        try:
            engine = create_engine(dsn, future=True)
        except (SQLAlchemyError, ImportError) as exc:
            raise PersistenceError(f"create engine: {exc}") from exc
        repo = cls(engine)
        if create_schema:
            repo.create_schema()
        return repo

    def create_schema(self) -> None:
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"create schema: {exc}") from exc

    async def ensure_schema(self) -> None:
        """Create the table from a worker thread."""
        await asyncio.to_thread(self.create_schema)

    async def already_processed(self, ids: Iterable[str]) -> set[str]:
        ids = list(ids)
        if not ids:
            return set()
        return await asyncio.to_thread(self._already_processed, ids)

    async def save_processed(self, article: ProcessedArticle) -> None:
        await asyncio.to_thread(self._save_processed, article)

    def _already_processed(self, ids: list[str]) -> set[str]:
        stmt = select(processed_articles.c.external_id).where(
            processed_articles.c.external_id.in_(ids)
        )
        try:
            with self.engine.connect() as conn:
                return {row[0] for row in conn.execute(stmt)}
        except SQLAlchemyError as exc:
            raise PersistenceError(f"query processed: {exc}") from exc

    def _save_processed(self, article: ProcessedArticle) -> None:
        now = datetime.now(timezone.utc)
        values = {
            "external_id": article.article.id,
            "title": article.article.title,
            "summary": article.summary,
            "score": article.score,
            "status": article.status.value,
            "created_at": article.created_at or now,
            "updated_at": now,
        }
        insert = self._insert()
        stmt = insert.values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[processed_articles.c.external_id],
            set_={
                "summary": stmt.excluded.summary,
                "score": stmt.excluded.score,
                "status": stmt.excluded.status,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"upsert processed {article.article.id}: {exc}") from exc

    def _insert(self):
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            return postgresql.insert(processed_articles)
        if dialect == "sqlite":
            return sqlite.insert(processed_articles)
        raise PersistenceError(f"unsupported database dialect: {dialect}")
