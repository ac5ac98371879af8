"""Data models for structural digests."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class LanguageTag(str, Enum):
    """Languages the summarizer knows how to digest."""

    JAVA = "java"
    TYPESCRIPT = "typescript"
    TSX = "tsx"
    JAVASCRIPT = "javascript"
    GENERIC = "generic"


class MethodRole(str, Enum):
    """How a class method is labelled in a digest."""

    CONSTRUCTOR = "Constructor"
    GETTER = "Getter"
    SETTER = "Setter"
    STATIC_METHOD = "Static Method"
    METHOD = "Method"


class ImportDecl(BaseModel):
    kind: Literal["import"] = "import"
    source: str

    def render(self) -> str:
        return f"import ... from '{self.source}'"


class ExportDecl(BaseModel):
    """A named export wrapping a variable or function declaration."""

    kind: Literal["export"] = "export"
    keyword: str  # "const", "let", "var" or "function"
    name: str = ""

    def render(self) -> str:
        if self.keyword == "function":
            return f"export function {self.name}"
        return f"export {self.keyword} ..."


class ClassDecl(BaseModel):
    kind: Literal["class"] = "class"
    name: str
    superclass: str | None = None

    def render(self) -> str:
        line = f"\nClass: {self.name}"
        if self.superclass:
            line += f" extends {self.superclass}"
        return line


class InterfaceDecl(BaseModel):
    kind: Literal["interface"] = "interface"
    name: str
    extends: list[str] = Field(default_factory=list)

    def render(self) -> str:
        line = f"\nInterface: {self.name}"
        if self.extends:
            line += f" extends {', '.join(self.extends)}"
        return line


class TypeAliasDecl(BaseModel):
    kind: Literal["type_alias"] = "type_alias"
    name: str

    def render(self) -> str:
        return f"Type: {self.name}"


class FunctionDecl(BaseModel):
    kind: Literal["function"] = "function"
    name: str
    params: list[str] = Field(default_factory=list)

    def render(self) -> str:
        return f"Function: {self.name}({', '.join(self.params)})"


class MethodDecl(BaseModel):
    kind: Literal["method"] = "method"
    name: str
    role: MethodRole = MethodRole.METHOD
    params: list[str] = Field(default_factory=list)

    def render(self) -> str:
        return f"  {self.role.value}: {self.name}({', '.join(self.params)})"


class PropertyDecl(BaseModel):
    kind: Literal["property"] = "property"
    name: str
    static: bool = False

    def render(self) -> str:
        label = "Static Property" if self.static else "Property"
        return f"  {label}: {self.name}"


class VariableDecl(BaseModel):
    kind: Literal["variable"] = "variable"
    keyword: str
    name: str

    def render(self) -> str:
        return f"{self.keyword} {self.name}"


Declaration = Annotated[
    Union[
        ImportDecl,
        ExportDecl,
        ClassDecl,
        InterfaceDecl,
        TypeAliasDecl,
        FunctionDecl,
        MethodDecl,
        PropertyDecl,
        VariableDecl,
    ],
    Field(discriminator="kind"),
]


class Digest(BaseModel):
    """Declarations extracted from one file, in traversal order."""

    language: LanguageTag
    declarations: list[Declaration] = Field(default_factory=list)

    def render(self) -> str:
        return "\n".join(decl.render() for decl in self.declarations)


# Language detection by file extension
EXTENSION_LANGUAGE_MAP: dict[str, LanguageTag] = {
    ".java": LanguageTag.JAVA,
    ".ts": LanguageTag.TYPESCRIPT,
    ".mts": LanguageTag.TYPESCRIPT,
    ".cts": LanguageTag.TYPESCRIPT,
    ".tsx": LanguageTag.TSX,
    ".js": LanguageTag.JAVASCRIPT,
    ".jsx": LanguageTag.JAVASCRIPT,
    ".mjs": LanguageTag.JAVASCRIPT,
    ".cjs": LanguageTag.JAVASCRIPT,
}


def detect_language(file_path: str) -> LanguageTag:
    """Detect the digest language from a file extension."""
    ext = Path(file_path).suffix.lower()
    return EXTENSION_LANGUAGE_MAP.get(ext, LanguageTag.GENERIC)
