"""Heuristic line scanner for Java sources.

This is not a parser. It makes one forward pass over the lines, tracking brace
depth, block comments and the stack of enclosing types, and recognises
declarations by their shape. Members are judged against the brace depth
*before* the current line's own braces are applied.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from promptpack.summarize.truncate import FALLBACK_LENGTH, truncate_content

logger = logging.getLogger("promptpack.summarize")

_MAX_PARAMS_LENGTH = 50

_CLASS_RE = re.compile(
    r"^(?:(?:public|private|protected|abstract|final|static|sealed|non-sealed|strictfp)\s+)*"
    r"class\s+(\w+)"
)
_INTERFACE_RE = re.compile(
    r"^(?:(?:public|private|protected|abstract|static|sealed)\s+)*interface\s+(\w+)"
)
_EXTENDS_RE = re.compile(r"\bextends\s+(\w+)")
_IMPLEMENTS_RE = re.compile(r"\bimplements\s+([\w\s,]+)")

_LEADING_ANNOTATIONS_RE = re.compile(r"^(?:@\w+(?:\([^)]*\))?\s+)+")
_MODIFIER_RE = re.compile(
    r"\b(?:public|private|protected|static|final|abstract|synchronized)\s"
)
_CONTROL_FLOW_RE = re.compile(
    r"\b(?:if|else|while|for|do|switch|case|catch|try|return|throw|new)\b"
)
_SYNCHRONIZED_BLOCK_RE = re.compile(r"^synchronized\s*\(")

# "ReturnType name(" and "Type name", generics and arrays allowed in the type
_METHOD_SHAPE_RE = re.compile(r"^[\w.]+(?:<.*>)?(?:\[\])*\s+\w+\s*\(")
_FIELD_SHAPE_RE = re.compile(r"^[\w.]+(?:<.*>)?(?:\[\])*\s+\w+")

_METHOD_INFO_RE = re.compile(r"(\w+)\s*\(([^)]*)\)")
_FIELD_INFO_RE = re.compile(
    r"^(?:(?:public|private|protected|static|final|transient|volatile)\s+)*"
    r"([\w.]+(?:<.*>)?(?:\[\])*)\s+(\w+)"
)


@dataclass
class _TypeScope:
    name: str
    depth: int  # brace depth the declaration was found at
    opened: bool = False


def summarize_java(content: str) -> str:
    """Build a digest of packages, imports, types and their members.

    Falls back to a plain truncation when scanning fails or finds nothing.
    """
    try:
        structure = _scan(content)
    except Exception as e:
        logger.warning(f"Java scan failed, falling back to truncated content: {e}")
        return truncate_content(content, FALLBACK_LENGTH)

    if not structure:
        return truncate_content(content, FALLBACK_LENGTH)
    return "\n".join(structure)


def _scan(content: str) -> list[str]:
    structure: list[str] = []
    scopes: list[_TypeScope] = []
    brace_depth = 0
    in_comment = False

    for line in content.split("\n"):
        trimmed = line.strip()

        # Block comments
        if not in_comment and _opens_comment(trimmed):
            in_comment = True
        if in_comment:
            if "*/" in trimmed:
                in_comment = False
            continue
        if trimmed.startswith("//") or not trimmed:
            continue

        line_depth = brace_depth + line.count("{") - line.count("}")

        if trimmed.startswith("package ") or trimmed.startswith("import "):
            structure.append(trimmed)
            continue

        class_match = _CLASS_RE.match(trimmed)
        if class_match and "=" not in trimmed and "new " not in trimmed:
            name = class_match.group(1)
            header = f"\nClass: {name}"
            extends_match = _EXTENDS_RE.search(trimmed)
            if extends_match:
                header += f" extends {extends_match.group(1)}"
            implements_match = _IMPLEMENTS_RE.search(trimmed)
            if implements_match:
                names = [n.strip() for n in implements_match.group(1).split(",") if n.strip()]
                if names:
                    header += f" implements {', '.join(names)}"
            structure.append(header)
            scopes.append(_TypeScope(name, brace_depth, opened="{" in trimmed))
        else:
            interface_match = _INTERFACE_RE.match(trimmed)
            if interface_match:
                name = interface_match.group(1)
                structure.append(f"\nInterface: {name}")
                scopes.append(
                    _TypeScope(name, brace_depth, opened="{" in trimmed)
                )

        if scopes and brace_depth > 0:
            member = _LEADING_ANNOTATIONS_RE.sub("", trimmed)
            current_type = scopes[-1].name
            if _is_method(member):
                info = _method_info(member)
                if info:
                    name, params = info
                    label = "Constructor" if name == current_type else "Method"
                    structure.append(f"  {label}: {name}({params})")
            elif _is_field(member):
                info = _field_info(member)
                if info:
                    structure.append(f"  Field: {info}")

        brace_depth = line_depth

        if scopes and brace_depth > scopes[-1].depth:
            scopes[-1].opened = True
        while scopes and scopes[-1].opened and brace_depth <= scopes[-1].depth:
            scopes.pop()

    return structure


def _opens_comment(line: str) -> bool:
    """A `/*` that is not inside a string literal."""
    start = line.find("/*")
    if start == -1:
        return False
    quote = line.find('"')
    return quote == -1 or start < quote


def _is_method(line: str) -> bool:
    if "(" not in line or ")" not in line or "=" in line:
        return False
    if _CONTROL_FLOW_RE.search(line) or _SYNCHRONIZED_BLOCK_RE.match(line):
        return False
    return bool(_MODIFIER_RE.search(line) or _METHOD_SHAPE_RE.match(line))


def _method_info(line: str) -> tuple[str, str] | None:
    match = _METHOD_INFO_RE.search(line)
    if not match:
        return None
    params = match.group(2).strip()
    if len(params) > _MAX_PARAMS_LENGTH:
        params = params[:_MAX_PARAMS_LENGTH] + "..."
    return match.group(1), params


def _is_field(line: str) -> bool:
    if "(" in line or "{" in line:
        return False
    if ";" not in line and "=" not in line:
        return False
    if _CONTROL_FLOW_RE.search(line):
        return False
    return bool(_MODIFIER_RE.search(line) or _FIELD_SHAPE_RE.match(line))


def _field_info(line: str) -> str | None:
    match = _FIELD_INFO_RE.match(line)
    if not match:
        return None
    return f"{match.group(2)} : {match.group(1)}"
