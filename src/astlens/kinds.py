"""Node kinds the analysis consumes, mapped from tree-sitter type names.

Every other kind classifies as ``NodeKind.OTHER``; the walker still
descends into such nodes, so new grammar kinds need no changes here.
"""

from enum import Enum

from .models import SyntaxNode


class NodeKind(Enum):
    FUNCTION_DECLARATION = "function_declaration"
    FUNCTION_EXPRESSION = "function_expression"
    ARROW_FUNCTION = "arrow_function"
    METHOD = "method"
    CALL = "call"
    VARIABLE_DECLARATION = "variable_declaration"
    VARIABLE_DECLARATOR = "variable_declarator"
    CLASS_DECLARATION = "class_declaration"
    CLASS_EXPRESSION = "class_expression"
    IMPORT = "import"
    EXPORT = "export"
    MEMBER = "member"
    IDENTIFIER = "identifier"
    FOR_IN = "for_in"
    OTHER = "other"


_KIND_MAP: dict[str, NodeKind] = {
    "function_declaration": NodeKind.FUNCTION_DECLARATION,
    "generator_function_declaration": NodeKind.FUNCTION_DECLARATION,
    "function_expression": NodeKind.FUNCTION_EXPRESSION,
    "function": NodeKind.FUNCTION_EXPRESSION,  # grammar releases before 0.21
    "generator_function": NodeKind.FUNCTION_EXPRESSION,
    "arrow_function": NodeKind.ARROW_FUNCTION,
    "method_definition": NodeKind.METHOD,
    "call_expression": NodeKind.CALL,
    "lexical_declaration": NodeKind.VARIABLE_DECLARATION,
    "variable_declaration": NodeKind.VARIABLE_DECLARATION,
    "variable_declarator": NodeKind.VARIABLE_DECLARATOR,
    "class_declaration": NodeKind.CLASS_DECLARATION,
    "class": NodeKind.CLASS_EXPRESSION,
    "import_statement": NodeKind.IMPORT,
    "export_statement": NodeKind.EXPORT,
    "member_expression": NodeKind.MEMBER,
    "identifier": NodeKind.IDENTIFIER,
    "for_in_statement": NodeKind.FOR_IN,  # both for-in and for-of
}

DECLARATION_KEYWORDS = ("var", "let", "const")

FUNCTION_VALUE_KINDS = frozenset({NodeKind.FUNCTION_EXPRESSION, NodeKind.ARROW_FUNCTION})

FUNCTION_LIKE_KINDS = frozenset({
    NodeKind.FUNCTION_DECLARATION,
    NodeKind.FUNCTION_EXPRESSION,
    NodeKind.ARROW_FUNCTION,
    NodeKind.METHOD,
})


def classify(node: SyntaxNode) -> NodeKind:
    return _KIND_MAP.get(node.kind, NodeKind.OTHER)


def is_call(node: SyntaxNode) -> bool:
    """True for real calls; tagged templates share the call_expression kind."""
    if classify(node) is not NodeKind.CALL:
        return False
    args = node.fields.get("arguments")
    return not (isinstance(args, SyntaxNode) and args.kind == "template_string")


def member_property(node: SyntaxNode) -> str | None:
    """Name of the accessed property when *node* is a member access."""
    if classify(node) is not NodeKind.MEMBER:
        return None
    prop = node.fields.get("property")
    if isinstance(prop, SyntaxNode) and prop.text:
        return prop.text
    return None


def loop_declaration_kind(node: SyntaxNode) -> str | None:
    """``var``/``let``/``const`` when a for-in/for-of loop declares its binding."""
    if classify(node) is not NodeKind.FOR_IN:
        return None
    kind = node.fields.get("kind")
    if kind in DECLARATION_KEYWORDS:
        return kind
    return next((t for t in node.fields.get("tokens") or () if t in DECLARATION_KEYWORDS), None)
