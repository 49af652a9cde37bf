"""Game history output."""

from .markdown_logger import MarkdownLogger

__all__ = ["MarkdownLogger"]
