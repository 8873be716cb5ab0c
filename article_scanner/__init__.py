"""
Article Scanner - daily publication listing ingestion.

This package scans paginated listing pages (arxiv categories) for the
articles of one day, skips articles processed in earlier runs, enriches
the new ones through external ranking and summarization services,
persists them and delivers a digest to chat and notification channels.

Main entry point is the CLI via the `article-scanner run` command.

Example:
    $ article-scanner run --day 2025-11-08 -c config.yaml -o out/
"""

__all__ = ["__version__", "Pipeline", "PipelineDeps", "load_config"]
__version__ = "0.1.0"

from .config import load_config
from .pipeline import Pipeline, PipelineDeps
