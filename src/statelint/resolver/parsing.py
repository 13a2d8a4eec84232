"""Tree-sitter parsing for JavaScript, TypeScript and TSX sources.

Grammars are loaded lazily and cached per parser. Tree-sitter parsers are
not safe to share between threads, so ``get_parser`` hands out one parser
per thread.

Syntax errors never abort a parse: tree-sitter recovers and the number of
error nodes is reported alongside the tree.
"""

from __future__ import annotations

import importlib
import threading
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any

import tree_sitter

from statelint.core.errors import ResolutionError
from statelint.resolver.lowering import lower_expression, lower_statements
from statelint.resolver.nodes import Expression, Module

# Extension -> grammar name
LANGUAGE_MAP: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "ts": "typescript",
    "mts": "typescript",
    "cts": "typescript",
    "tsx": "tsx",
}

# Grammar name -> (module, language function)
_GRAMMARS: dict[str, tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
}


@dataclass
class ParseResult:
    """Result of parsing a file."""

    tree: Any  # Tree-sitter Tree
    source: bytes
    language: str
    error_count: int

    @property
    def root_node(self) -> Any:
        return self.tree.root_node


def detect_language(path: str) -> str | None:
    ext = PurePath(path).suffix.lower().lstrip(".")
    return LANGUAGE_MAP.get(ext)


@dataclass
class TreeSitterParser:
    """
    Tree-sitter parser for component and token modules.

    Usage::

        parser = TreeSitterParser()
        result = parser.parse("src/Button.tsx", content)
        statements = lower_statements(result.root_node, result.source)
    """

    _parser: Any = field(default=None, repr=False)
    _languages: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser()
        self._languages = {}

    def _get_language(self, lang_name: str) -> Any:
        """Get or load a Tree-sitter language."""
        if lang_name in self._languages:
            return self._languages[lang_name]

        module_name, func_name = _GRAMMARS[lang_name]
        try:
            mod = importlib.import_module(module_name)
            lang = tree_sitter.Language(getattr(mod, func_name)())
        except (ImportError, AttributeError) as err:
            raise ValueError(f"Language not available: {lang_name}") from err
        self._languages[lang_name] = lang
        return lang

    def parse(self, path: str, content: str | bytes, language: str | None = None) -> ParseResult:
        """
        Parse source text with the grammar matching path's extension.

        Args:
            path: File path (used for language detection)
            content: Source text
            language: Grammar name, overriding detection

        Returns:
            ParseResult with tree, source bytes and error count.

        Raises:
            ResolutionError: No grammar for the file or grammar not installed.
        """
        language = language or detect_language(path)
        if language is None or language not in _GRAMMARS:
            raise ResolutionError.unsupported_language(path)
        try:
            ts_lang = self._get_language(language)
        except ValueError as e:
            raise ResolutionError.parse_failed(path, str(e)) from e

        source = content.encode("utf-8") if isinstance(content, str) else content
        self._parser.language = ts_lang
        tree = self._parser.parse(source)

        return ParseResult(
            tree=tree,
            source=source,
            language=language,
            error_count=_count_errors(tree.root_node),
        )


def _count_errors(root: Any) -> int:
    count = 0
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            count += 1
        if node.has_error:
            stack.extend(node.children)
    return count


_local = threading.local()


def get_parser() -> TreeSitterParser:
    """This thread's parser."""
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = TreeSitterParser()
        _local.parser = parser
    return parser


def parse_source(content: str | bytes, path: str, language: str | None = None) -> ParseResult:
    return get_parser().parse(path, content, language)


def parse_module(content: str | bytes, path: str, language: str | None = None) -> Module:
    """Parse a file and lower it to the resolver's syntax tree."""
    return lower_module(parse_source(content, path, language), path)


def lower_module(result: ParseResult, path: str) -> Module:
    """Lower a parse result to a Module.

    Raises:
        ResolutionError: expressions nest deeper than the interpreter's
            recursion limit.
    """
    try:
        body = lower_statements(result.root_node, result.source)
    except RecursionError as e:
        raise ResolutionError.parse_failed(path, "expression nesting too deep") from e
    return Module(body=body, path=path, error_count=result.error_count)


def parse_expression(text: str, language: str = "tsx") -> Expression:
    """Parse a single expression, e.g. ``variants[size]``.

    Raises:
        ResolutionError: text is not a single expression statement.
    """
    source = f"({text});".encode()
    result = get_parser().parse("<expression>", source, language)
    statement = result.root_node.named_children[0] if result.root_node.named_children else None
    if statement is None or statement.type != "expression_statement" or result.error_count:
        raise ResolutionError.parse_failed("<expression>", f"not an expression: {text!r}")
    return lower_expression(statement.named_children[0], source)
