"""
Collaborator interfaces and HTTP adapters.

To add a new channel or enrichment service:
1. Inherit from the matching base class in base.py
2. Implement its coroutine method
3. Wire it in runner.build_pipeline() behind a config check
"""

from .base import (
    Analyzer,
    ArticleRepository,
    ArticleSource,
    ChatClient,
    Downloader,
    Notifier,
    Summarizer,
)
from .chatgpt import ChatGPTClient
from .ml import MLClient
from .telegram import TelegramNotifier

__all__ = [
    "Analyzer",
    "ArticleRepository",
    "ArticleSource",
    "ChatClient",
    "Downloader",
    "Notifier",
    "Summarizer",
    "ChatGPTClient",
    "MLClient",
    "TelegramNotifier",
]
