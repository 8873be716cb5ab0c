"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults and environment overrides. Sections:
- DatabaseConfig: Persistence DSN
- SchedulerConfig: Recurring trigger settings
- MLConfig: Ranking/summarization service
- ChatGPTConfig: Chat relay settings
- TelegramConfig: Notification channel
- FetchConfig: Listing and article fetching
- PipelineConfig: Cycle-level settings
- LoggingConfig: Logging behavior
- OutputConfig: Report output settings
- SiteConfig / CategoryConfig: Sites to scan
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import logging
import os
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .core.errors import ConfigurationError
from .core.types import Category

CONFIG_PATH_ENV = "ARTICLE_SCANNER_CONFIG"
DEFAULT_TIMEZONE = "UTC"
OUTPUT_FORMATS = ("html", "markdown")

# Environment variable -> (section, key)
_ENV_OVERRIDES = {
    "DATABASE_DSN": ("database", "dsn"),
    "CHATGPT_API_KEY": ("chatgpt", "api_key"),
    "CHATGPT_MODEL": ("chatgpt", "model"),
    "TELEGRAM_BOT_TOKEN": ("telegram", "bot_token"),
    "TELEGRAM_CHAT_ID": ("telegram", "chat_id"),
    "ML_INFERENCE_URL": ("ml", "inference_url"),
    "ML_API_KEY": ("ml", "api_key"),
}

logger = logging.getLogger("article_scanner")


@dataclass
class DatabaseConfig:
    """Persistence settings.

    Attributes:
        dsn: SQLAlchemy database URL; empty disables persistence
    """

    dsn: str = ""


@dataclass
class SchedulerConfig:
    """Recurring trigger settings.

    Attributes:
        interval_hours: Hours between two cycles
        timezone: IANA zone used to pick the cycle's day
    """

    interval_hours: float = 24.0
    timezone: str = DEFAULT_TIMEZONE

    def location(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone or DEFAULT_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(
                "Unknown timezone %s, reverting to %s", self.timezone, DEFAULT_TIMEZONE
            )
            return ZoneInfo(DEFAULT_TIMEZONE)


@dataclass
class MLConfig:
    """Ranking and summarization service.

    Attributes:
        inference_url: Base URL; empty disables ranking and summarization
        api_key: Optional bearer token
        timeout_seconds: Request timeout
    """

    inference_url: str = ""
    api_key: str = ""
    timeout_seconds: float = 15.0


@dataclass
class ChatGPTConfig:
    """OpenAI-compatible chat relay.

    Attributes:
        endpoint: Chat completions URL
        model: Model identifier
        api_key: API key; empty disables the relay
        system_prompt: System message sent with every digest
        timeout_seconds: Request timeout
    """

    endpoint: str = "https://api.openai.com/v1/chat/completions"
    model: str = "gpt-4o-mini"
    api_key: str = ""
    system_prompt: str = "You summarize scientific articles."
    timeout_seconds: float = 20.0


@dataclass
class TelegramConfig:
    """Telegram bot notification channel.

    Attributes:
        bot_token: Bot token; empty disables notifications
        chat_id: Target chat identifier
        base_url: Bot API base URL
        timeout_seconds: Request timeout
    """

    bot_token: str = ""
    chat_id: str = ""
    base_url: str = "https://api.telegram.org"
    timeout_seconds: float = 5.0


@dataclass
class FetchConfig:
    """Configuration for HTTP fetching.

    Attributes:
        user_agent: Identifying User-Agent header for listing requests
        timeout_seconds: HTTP request timeout
        page_size: Entries requested per listing page
        trust_env: Whether to respect system proxy settings
        download_enabled: Whether to download full article pages
    """

    user_agent: str = "ArticlesScanner/1.0"
    timeout_seconds: float = 20.0
    page_size: int = 200
    trust_env: bool = True
    download_enabled: bool = False


@dataclass
class PipelineConfig:
    """Cycle-level settings.

    Attributes:
        deadline_seconds: Cancel a cycle that runs longer; None disables
    """

    deadline_seconds: float | None = None


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Path of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "article_scanner.jsonl"


@dataclass
class OutputConfig:
    """Configuration for report output.

    Attributes:
        format: "html" or "markdown"
        title: Report title prefix
    """

    format: str = "html"
    title: str = "Article Digest"


@dataclass
class CategoryConfig:
    name: str
    url: str


@dataclass
class SiteConfig:
    """A single site with its scanner strategy.

    Attributes:
        name: Site name, used as provenance fallback
        scanner: Registered scanner strategy name
        categories: Listing endpoints to walk
        options: Free-form strategy options
    """

    name: str
    scanner: str = "arxiv"
    categories: list[CategoryConfig] = field(default_factory=list)
    options: dict[str, str] = field(default_factory=dict)

    def scan_categories(self) -> list[Category]:
        return [Category(name=cat.name, url=cat.url) for cat in self.categories]


def _default_sites() -> list[SiteConfig]:
    return [
        SiteConfig(
            name="arxiv-default",
            scanner="arxiv",
            categories=[
                CategoryConfig(name="cs.AI", url="https://export.arxiv.org/list/cs.AI/pastweek")
            ],
        )
    ]


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    ml: MLConfig = field(default_factory=MLConfig)
    chatgpt: ChatGPTConfig = field(default_factory=ChatGPTConfig)
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    sites: list[SiteConfig] = field(default_factory=_default_sites)


def load_config(path: str | None = None) -> AppConfig:
    """Load configuration from a YAML file with defaults.

    The path falls back to the ARTICLE_SCANNER_CONFIG environment variable.
    Environment overrides are applied last.

    Raises:
        ConfigurationError: If the output format is not supported
    """
    path = path or os.getenv(CONFIG_PATH_ENV)
    raw: dict[str, Any] = {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    cfg = _merge_config(AppConfig(), raw)
    _apply_env_overrides(cfg)
    if not cfg.sites:
        cfg.sites = _default_sites()
    if (cfg.output.format or "html").lower() not in OUTPUT_FORMATS:
        raise ConfigurationError(
            f"unsupported output format {cfg.output.format!r}. Use 'html' or 'markdown'."
        )
    return cfg


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        database=DatabaseConfig(**data["database"]),
        scheduler=SchedulerConfig(**data["scheduler"]),
        ml=MLConfig(**data["ml"]),
        chatgpt=ChatGPTConfig(**data["chatgpt"]),
        telegram=TelegramConfig(**data["telegram"]),
        fetch=FetchConfig(**data["fetch"]),
        pipeline=PipelineConfig(**data["pipeline"]),
        logging=LoggingConfig(**data["logging"]),
        output=OutputConfig(**data["output"]),
        sites=[_site_fromdict(site) for site in data.get("sites") or []],
    )


def _site_fromdict(raw: dict[str, Any]) -> SiteConfig:
    categories = [CategoryConfig(**cat) for cat in raw.get("categories") or []]
    options = {str(k): str(v) for k, v in (raw.get("options") or {}).items()}
    return SiteConfig(
        name=raw["name"],
        scanner=raw.get("scanner", "arxiv"),
        categories=categories,
        options=options,
    )


def _apply_env_overrides(cfg: AppConfig) -> None:
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            setattr(getattr(cfg, section), key, value)
