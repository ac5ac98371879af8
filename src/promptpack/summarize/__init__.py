"""Structural digests of source files."""

from promptpack.summarize.core import summarize, summarize_file
from promptpack.summarize.models import Digest, LanguageTag, detect_language
from promptpack.summarize.truncate import TRUNCATION_MARKER, truncate_content

__all__ = [
    "Digest",
    "LanguageTag",
    "TRUNCATION_MARKER",
    "detect_language",
    "summarize",
    "summarize_file",
    "truncate_content",
]
