"""Generic pre-order traversal over SyntaxNode trees.

The walker knows nothing about node kinds: it descends into every field
value that is a node or a sequence and stops at scalars.  An explicit
stack replaces recursion so long expression chains cannot exhaust the
interpreter's recursion limit; the visiting order is the same as a
recursive pre-order walk (field order, then sequence order).
"""

from typing import Any, Callable, Iterator

from .models import SyntaxNode

Visitor = Callable[[SyntaxNode, Any], None]
Descend = Callable[[SyntaxNode, Any], Any]

PARENT_FIELD = "parent"


def walk(
    root: Any,
    *visitors: Visitor,
    descend: Descend | None = None,
    scope: Any = None,
) -> None:
    """
    Visit *root* and every node below it exactly once.

    Each visitor is called as ``visitor(node, scope)``.  When *descend* is
    given, ``descend(node, scope)`` returns the scope seen by the node's
    descendants; siblings keep the scope of their parent.
    """
    stack: list[tuple[Any, Any]] = [(root, scope)]
    while stack:
        value, current = stack.pop()
        if isinstance(value, SyntaxNode):
            for visitor in visitors:
                visitor(value, current)
            inner = descend(value, current) if descend else current
            pending = [
                (child, inner)
                for key, child in value.fields.items()
                if key != PARENT_FIELD
            ]
            stack.extend(reversed(pending))
        elif isinstance(value, (list, tuple)):
            stack.extend((item, current) for item in reversed(value))
        # scalars and None end the branch


def iter_nodes(root: Any) -> Iterator[SyntaxNode]:
    """Depth-first generator over all nodes in a tree."""
    stack: list[Any] = [root]
    while stack:
        value = stack.pop()
        if isinstance(value, SyntaxNode):
            yield value
            stack.extend(
                reversed([v for k, v in value.fields.items() if k != PARENT_FIELD])
            )
        elif isinstance(value, (list, tuple)):
            stack.extend(reversed(value))


def child_nodes(node: SyntaxNode) -> list[SyntaxNode]:
    """Direct child nodes in field order, with sequences flattened."""
    children: list[SyntaxNode] = []
    for key, value in node.fields.items():
        if key == PARENT_FIELD:
            continue
        if isinstance(value, SyntaxNode):
            children.append(value)
        elif isinstance(value, (list, tuple)):
            children.extend(v for v in value if isinstance(v, SyntaxNode))
    return children


def field_node(node: SyntaxNode, name: str) -> SyntaxNode | None:
    """Return the node stored under *name*, or the first one if it repeats."""
    value = node.fields.get(name)
    if isinstance(value, SyntaxNode):
        return value
    if isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, SyntaxNode):
                return item
    return None


def tokens(node: SyntaxNode) -> tuple[str, ...]:
    """Anonymous keyword tokens (``static``, ``get``, ``async``...) of *node*."""
    return tuple(node.fields.get("tokens") or ())
