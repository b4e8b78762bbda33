"""Input adapters: tabular data, Markdown and grid positioning."""

from .ingestion import (
    chart_from_frame,
    clean_columns,
    detect_encoding,
    load_chart,
    load_table,
    parse_numeric,
    read_csv_auto,
    read_table_file,
    table_from_frame,
)
from .layout import Grid
from .markdown import MarkdownDeckParser, load_markdown, markdown_to_deck

__all__ = [
    "chart_from_frame",
    "clean_columns",
    "detect_encoding",
    "load_chart",
    "load_table",
    "parse_numeric",
    "read_csv_auto",
    "read_table_file",
    "table_from_frame",
    "Grid",
    "MarkdownDeckParser",
    "load_markdown",
    "markdown_to_deck",
]
