"""Shared helpers."""

from .html import clean_html, find_first_image

__all__ = ["clean_html", "find_first_image"]
