"""Digest report rendering."""

from .renderer import group_by_source, render_html, render_markdown

__all__ = ["group_by_source", "render_html", "render_markdown"]
