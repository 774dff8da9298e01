"""Reporting package — JSON and Markdown output generation."""

from .json_export import export_json
from .markdown_report import export_markdown, render_markdown

__all__ = [
    "export_json",
    "export_markdown",
    "render_markdown",
]
