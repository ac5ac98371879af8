"""Tree-sitter based digests for TypeScript and JavaScript."""

from __future__ import annotations

import logging

from promptpack.exceptions import ParserError
from promptpack.summarize.models import (
    ClassDecl,
    Declaration,
    Digest,
    ExportDecl,
    FunctionDecl,
    ImportDecl,
    InterfaceDecl,
    LanguageTag,
    MethodDecl,
    MethodRole,
    PropertyDecl,
    TypeAliasDecl,
    VariableDecl,
)
from promptpack.summarize.truncate import FALLBACK_LENGTH, truncate_content

logger = logging.getLogger("promptpack.summarize")

# Grammar module and the function that returns its language pointer
_TS_LANGUAGE_MODULES = {
    LanguageTag.JAVASCRIPT: ("tree_sitter_javascript", "language"),
    LanguageTag.TYPESCRIPT: ("tree_sitter_typescript", "language_typescript"),
    LanguageTag.TSX: ("tree_sitter_typescript", "language_tsx"),
}

# Bodies of these nodes are function scope: variables inside are not top-level
_FUNCTION_SCOPES = {
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
    "method_definition",
}

_CLASS_NODES = {"class_declaration", "abstract_class_declaration"}
_FUNCTION_NODES = {"function_declaration", "generator_function_declaration"}
_VARIABLE_NODES = {"lexical_declaration", "variable_declaration"}
_FIELD_NODES = {"public_field_definition", "field_definition"}

_languages: dict[LanguageTag, object] = {}


def _get_language(language: LanguageTag):
    """Get (and cache) a tree-sitter Language object for the given tag."""
    from tree_sitter import Language

    if language not in _languages:
        grammar = _TS_LANGUAGE_MODULES.get(language)
        if not grammar:
            raise ParserError(f"No tree-sitter grammar for language: {language.value}")
        module_name, factory = grammar
        try:
            module = __import__(module_name)
        except ImportError as e:
            raise ParserError(f"Grammar package '{module_name}' is not installed") from e
        _languages[language] = Language(getattr(module, factory)())
    return _languages[language]


def parse_declarations(source: str, language: LanguageTag) -> Digest:
    """Parse `source` and convert the declarations we care about.

    Raises ParserError when the grammar is missing or the tree contains
    syntax errors.
    """
    from tree_sitter import Parser

    parser = Parser(_get_language(language))
    tree = parser.parse(source.encode("utf-8"))
    if tree.root_node.has_error:
        raise ParserError("syntax errors in source")

    digest = Digest(language=language)
    _walk_tree(tree.root_node, digest.declarations)
    return digest


def summarize_script(content: str, language: LanguageTag) -> str:
    """Digest a TypeScript/JavaScript file, falling back to truncation."""
    try:
        digest = parse_declarations(content, language)
    except Exception as e:
        logger.warning(f"AST parsing failed, falling back to truncated content: {e}")
        return truncate_content(content, FALLBACK_LENGTH)

    if not digest.declarations:
        return truncate_content(content, FALLBACK_LENGTH)
    return digest.render()


def _walk_tree(node, out: list[Declaration], in_function: bool = False) -> None:
    """Pre-order walk emitting one declaration per recognised node."""
    for child in node.named_children:
        node_type = child.type

        if node_type == "import_statement":
            source = child.child_by_field_name("source")
            if source is not None:
                out.append(ImportDecl(source=_string_value(source)))

        elif node_type == "export_statement":
            decl = _export_of(child)
            if decl is not None:
                out.append(decl)

        elif node_type in _CLASS_NODES:
            name = child.child_by_field_name("name")
            if name is not None:
                out.append(ClassDecl(name=_text(name), superclass=_superclass(child)))

        elif node_type == "interface_declaration":
            name = child.child_by_field_name("name")
            if name is not None:
                out.append(InterfaceDecl(name=_text(name), extends=_interface_extends(child)))

        elif node_type == "type_alias_declaration":
            name = child.child_by_field_name("name")
            if name is not None:
                out.append(TypeAliasDecl(name=_text(name)))

        elif node_type in _FUNCTION_NODES:
            name = child.child_by_field_name("name")
            if name is not None:
                params = _params(child, destructure=True)
                out.append(FunctionDecl(name=_text(name), params=params))

        elif node_type == "method_definition" and node.type == "class_body":
            decl = _method_of(child)
            if decl is not None:
                out.append(decl)

        elif node_type in _FIELD_NODES:
            name = child.child_by_field_name("name") or child.child_by_field_name("property")
            if name is not None and name.type == "property_identifier":
                out.append(PropertyDecl(name=_text(name), static=_has_token(child, "static")))

        elif node_type in _VARIABLE_NODES and not in_function:
            keyword = child.children[0].type
            for declarator in child.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                if name is not None and name.type == "identifier":
                    out.append(VariableDecl(keyword=keyword, name=_text(name)))

        _walk_tree(child, out, in_function or node_type in _FUNCTION_SCOPES)


def _text(node) -> str:
    return node.text.decode("utf-8", errors="replace")


def _string_value(node) -> str:
    text = _text(node)
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def _has_token(node, token: str) -> bool:
    return any(not c.is_named and c.type == token for c in node.children)


def _export_of(node) -> ExportDecl | None:
    """Named exports of a variable or function declaration."""
    if _has_token(node, "default"):
        return None
    declaration = node.child_by_field_name("declaration")
    if declaration is None:
        return None
    if declaration.type in _VARIABLE_NODES:
        return ExportDecl(keyword=declaration.children[0].type)
    if declaration.type in _FUNCTION_NODES:
        name = declaration.child_by_field_name("name")
        if name is not None:
            return ExportDecl(keyword="function", name=_text(name))
    return None


def _superclass(node) -> str | None:
    """Name of the base class when it is a plain identifier."""
    for child in node.named_children:
        if child.type != "class_heritage":
            continue
        base = None
        for clause in child.named_children:
            if clause.type == "extends_clause":
                base = clause.child_by_field_name("value")
                if base is None and clause.named_children:
                    base = clause.named_children[0]
                break
            if clause.type != "implements_clause":
                # JavaScript grammar: the expression hangs off class_heritage
                base = clause
                break
        if base is not None and base.type == "identifier":
            return _text(base)
    return None


def _interface_extends(node) -> list[str]:
    names: list[str] = []
    for child in node.named_children:
        if child.type != "extends_type_clause":
            continue
        for ext in child.named_children:
            if ext.type == "generic_type":
                ext = ext.child_by_field_name("name") or ext
            if ext.type in ("type_identifier", "identifier"):
                names.append(_text(ext))
            elif ext.type != "comment":
                names.append("unknown")
    return names


def _method_of(node) -> MethodDecl | None:
    name = node.child_by_field_name("name")
    if name is None or name.type != "property_identifier":
        return None
    method_name = _text(name)

    if method_name == "constructor":
        role = MethodRole.CONSTRUCTOR
    elif _has_token(node, "get"):
        role = MethodRole.GETTER
    elif _has_token(node, "set"):
        role = MethodRole.SETTER
    elif _has_token(node, "static"):
        role = MethodRole.STATIC_METHOD
    else:
        role = MethodRole.METHOD

    return MethodDecl(name=method_name, role=role, params=_params(node, destructure=False))


def _params(node, destructure: bool) -> list[str]:
    """Flatten a parameter list; patterns collapse to placeholders."""
    parameters = node.child_by_field_name("parameters")
    if parameters is None:
        return []
    return [
        _param_label(param, destructure)
        for param in parameters.named_children
        if param.type != "comment"
    ]


def _param_label(param, destructure: bool) -> str:
    if param.type in ("required_parameter", "optional_parameter"):
        # Defaults and constructor parameter properties are not plain names
        if param.child_by_field_name("value") is not None:
            return "..."
        if any(c.type == "accessibility_modifier" for c in param.children):
            return "..."
        pattern = param.child_by_field_name("pattern")
        if pattern is None:
            return "..."
        param = pattern

    if param.type == "identifier":
        return _text(param)
    if destructure and param.type == "object_pattern":
        return "{ ... }"
    if destructure and param.type == "array_pattern":
        return "[ ... ]"
    return "..."
