"""Tree-sitter parsing and conversion into SyntaxNode trees.

Named tree-sitter children are attached under their grammar field name;
children without a field gather in the ``children`` sequence.  Anonymous
keyword tokens are kept in ``tokens`` unless the grammar gives them a
field (``lexical_declaration.kind``), in which case they become scalars.
"""

import logging

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_language

from .errors import ParseError
from .models import Span, SyntaxNode

log = logging.getLogger(__name__)

_PARSERS: dict[str, Parser] = {}

# Nodes whose full source text is kept even though they have children
_TEXT_KINDS = {"string"}


def _get_parser(language: str) -> Parser:
    if language not in _PARSERS:
        lang_obj = get_language(language)
        parser = Parser(lang_obj)
        _PARSERS[language] = parser
    return _PARSERS[language]


def _text(node: Node) -> str:
    return node.text.decode("utf-8", errors="replace") if node.text else ""


def _make_node(ts_node: Node, parent: SyntaxNode | None) -> SyntaxNode:
    keep_text = ts_node.child_count == 0 or ts_node.type in _TEXT_KINDS
    return SyntaxNode(
        kind=ts_node.type,
        span=Span(ts_node.start_point[0] + 1, ts_node.end_point[0] + 1),
        text=_text(ts_node) if keep_text else None,
        parent=parent,
    )


def _attach(node: SyntaxNode, field_name: str | None, child: SyntaxNode) -> None:
    if field_name is None:
        node.fields.setdefault("children", []).append(child)
        return
    existing = node.fields.get(field_name)
    if existing is None:
        node.fields[field_name] = child
    elif isinstance(existing, list):
        existing.append(child)
    else:
        node.fields[field_name] = [existing, child]


def to_syntax_tree(ts_root: Node) -> SyntaxNode:
    """Convert a tree-sitter node (and everything below it) into SyntaxNodes."""
    root = _make_node(ts_root, None)
    stack: list[tuple[Node, SyntaxNode]] = [(ts_root, root)]
    while stack:
        ts_node, node = stack.pop()
        cursor = ts_node.walk()
        if not cursor.goto_first_child():
            continue
        while True:
            child = cursor.node
            field_name = cursor.field_name
            if child.is_named:
                converted = _make_node(child, node)
                _attach(node, field_name, converted)
                stack.append((child, converted))
            elif field_name:
                node.fields[field_name] = _text(child)
            elif child.type.isidentifier():
                node.fields.setdefault("tokens", []).append(child.type)
            if not cursor.goto_next_sibling():
                break
    return root


def _first_error(ts_root: Node) -> Node | None:
    stack = [ts_root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def parse_source(text: str, language: str = "javascript") -> SyntaxNode:
    """
    Parse *text* and return its SyntaxNode tree.

    Raises ParseError when the source contains a syntax error.
    """
    parser = _get_parser(language)
    tree = parser.parse(text.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root)
        line = bad.start_point[0] + 1 if bad is not None else None
        where = f" at line {line}" if line is not None else ""
        raise ParseError(f"Syntax error{where}", line=line)
    syntax_tree = to_syntax_tree(root)
    log.debug("Parsed %d bytes of %s", len(text), language)
    return syntax_tree
