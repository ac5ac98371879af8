"""Summarizer dispatch - selects the digest strategy for each file."""

from __future__ import annotations

from promptpack.summarize.models import LanguageTag, detect_language
from promptpack.summarize.truncate import truncate_content


def summarize(content: str, language: LanguageTag, max_len: int) -> str:
    """Produce a structural digest of `content`, capped at `max_len`.

    - Java: heuristic line scanner
    - TypeScript / TSX / JavaScript: tree-sitter declaration walk
    - anything else: line-aware truncation

    Never raises for bad input; every strategy falls back to truncation.
    """
    if language == LanguageTag.JAVA:
        from promptpack.summarize.java_scanner import summarize_java

        result = summarize_java(content)
    elif language in (LanguageTag.TYPESCRIPT, LanguageTag.TSX, LanguageTag.JAVASCRIPT):
        from promptpack.summarize.tree_sitter_parser import summarize_script

        result = summarize_script(content, language)
    else:
        result = content

    return truncate_content(result, max_len)


def summarize_file(file_path: str, content: str, max_len: int) -> str:
    """Summarize `content`, picking the strategy from the file extension."""
    return summarize(content, detect_language(file_path), max_len)
