"""
Structural extraction: classes, functions, variables, calls, imports, exports.

One walk over the tree.  The name of the nearest enclosing named function
is threaded through the walk as its scope, so calls are attributed without
any mutable "current function" state.  Node shapes the rules don't expect
degrade to placeholder names (logged at DEBUG) instead of raising.
"""

import logging

from .kinds import (
    DECLARATION_KEYWORDS,
    FUNCTION_LIKE_KINDS,
    FUNCTION_VALUE_KINDS,
    NodeKind,
    classify,
    is_call,
    loop_declaration_kind,
    member_property,
)
from .models import (
    CallRecord,
    ClassRecord,
    ExportRecord,
    FunctionRecord,
    ImportRecord,
    MethodRecord,
    PropertyRecord,
    StructuralModel,
    SyntaxNode,
    VariableRecord,
)
from .walk import child_nodes, field_node, iter_nodes, tokens, walk

log = logging.getLogger(__name__)

GLOBAL_CALLER = "global"
ANONYMOUS_CLASS = "AnonymousClass"
UNKNOWN_SUPERCLASS = "Unknown"
PARAM_PLACEHOLDER = "param"
COMPUTED_KEY = "[computed]"
UNNAMED = "unnamed"

_FIELD_KINDS = {"field_definition", "public_field_definition"}
_PATTERN_BINDINGS = {"identifier", "shorthand_property_identifier_pattern"}
_EXPORTABLE_KINDS = {
    NodeKind.FUNCTION_DECLARATION,
    NodeKind.CLASS_DECLARATION,
    NodeKind.VARIABLE_DECLARATION,
}


# ── Name helpers ──────────────────────────────────────────────────────────────

def _string_value(node: SyntaxNode | None) -> str:
    if node is None:
        return ""
    text = node.text or ""
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    fragments = [c.text for c in child_nodes(node) if c.text]
    return "".join(fragments) or text


def _key_name(key: SyntaxNode | None) -> str:
    """Display name of a class member key."""
    if key is None:
        return UNNAMED
    if key.kind == "computed_property_name":
        return COMPUTED_KEY
    if key.kind == "string":
        return _string_value(key)
    if key.text:
        return key.text
    log.debug("Unnamed member key of kind %s", key.kind)
    return UNNAMED


def _binding_name(target: SyntaxNode | None) -> str:
    """Name bound by a declarator target; patterns list their identifiers."""
    if target is None:
        return UNNAMED
    if target.kind == "identifier" and target.text:
        return target.text
    if target.kind in ("object_pattern", "array_pattern"):
        names = [n.text for n in iter_nodes(target) if n.kind in _PATTERN_BINDINGS and n.text]
        opening, closing = ("{", "}") if target.kind == "object_pattern" else ("[", "]")
        return f"{opening}{', '.join(names)}{closing}"
    log.debug("Unexpected binding target %s", target.kind)
    return UNNAMED


def _dotted_name(node: SyntaxNode | None) -> str | None:
    if node is None:
        return None
    if node.kind in ("identifier", "property_identifier", "this") and node.text:
        return node.text
    if classify(node) is NodeKind.MEMBER:
        obj = _dotted_name(field_node(node, "object"))
        prop = member_property(node)
        if obj and prop:
            return f"{obj}.{prop}"
    return None


def _param_name(param: SyntaxNode) -> str:
    if param.kind == "identifier" and param.text:
        return param.text
    return PARAM_PLACEHOLDER


def _params(fn: SyntaxNode) -> list[str]:
    single = field_node(fn, "parameter")
    if single is not None:
        return [_param_name(single)]
    params = field_node(fn, "parameters")
    if params is None:
        return []
    return [_param_name(p) for p in child_nodes(params) if p.kind != "comment"]


def _own_name(fn: SyntaxNode) -> str | None:
    name = field_node(fn, "name")
    if name is None:
        return None
    if classify(fn) is NodeKind.METHOD:
        return _key_name(name)
    return name.text or None


def _declaration_kind(declaration: SyntaxNode) -> str:
    kind = declaration.fields.get("kind")
    if isinstance(kind, str):
        return kind
    for token in tokens(declaration):
        if token in DECLARATION_KEYWORDS:
            return token
    return "var"


def _declarators(declaration: SyntaxNode) -> list[SyntaxNode]:
    return [c for c in child_nodes(declaration) if classify(c) is NodeKind.VARIABLE_DECLARATOR]


def _function_value(declarator: SyntaxNode) -> SyntaxNode | None:
    value = field_node(declarator, "value")
    if value is not None and classify(value) in FUNCTION_VALUE_KINDS:
        return value
    return None


def _superclass(cls: SyntaxNode) -> str | None:
    heritage = next((c for c in child_nodes(cls) if c.kind == "class_heritage"), None)
    if heritage is None:
        return None
    expr = next((c for c in child_nodes(heritage) if c.kind != "comment"), None)
    name = _dotted_name(expr)
    if name is None:
        log.debug("Superclass expression %s has no plain name", expr.kind if expr else None)
        return UNKNOWN_SUPERCLASS
    return name


# ── Extractor ─────────────────────────────────────────────────────────────────

class StructureExtractor:
    """Visitor building a StructuralModel; pass ``visit`` and ``descend`` to walk()."""

    def __init__(self) -> None:
        self.model = StructuralModel()
        self._handlers = {
            NodeKind.CLASS_DECLARATION: self._on_class,
            NodeKind.CLASS_EXPRESSION: self._on_class_expression,
            NodeKind.FUNCTION_DECLARATION: self._on_function_declaration,
            NodeKind.VARIABLE_DECLARATION: self._on_declaration,
            NodeKind.FOR_IN: self._on_loop_binding,
            NodeKind.CALL: self._on_call,
            NodeKind.IMPORT: self._on_import,
            NodeKind.EXPORT: self._on_export,
        }

    def visit(self, node: SyntaxNode, scope: str | None) -> None:
        handler = self._handlers.get(classify(node))
        if handler is not None:
            handler(node, scope)

    def descend(self, node: SyntaxNode, scope: str | None) -> str | None:
        """Scope for the children of *node*: anonymous functions inherit theirs."""
        kind = classify(node)
        if kind in FUNCTION_LIKE_KINDS:
            return _own_name(node) or scope
        if kind is NodeKind.VARIABLE_DECLARATOR and _function_value(node) is not None:
            target = field_node(node, "name")
            if target is not None and target.kind == "identifier" and target.text:
                return target.text
        return scope

    # ── Handlers ──────────────────────────────────────────────────────────

    def _on_class(self, node: SyntaxNode, scope: str | None) -> None:
        name_node = field_node(node, "name")
        name = name_node.text if name_node is not None and name_node.text else ANONYMOUS_CLASS
        record = ClassRecord(name=name, extends_name=_superclass(node))

        body = field_node(node, "body")
        for member in child_nodes(body) if body is not None else []:
            is_static = "static" in tokens(member)
            if classify(member) is NodeKind.METHOD:
                method_name = _key_name(field_node(member, "name"))
                record.methods.append(MethodRecord(
                    name=method_name,
                    kind=_method_kind(member, method_name, is_static),
                    is_static=is_static,
                ))
            elif member.kind in _FIELD_KINDS:
                prop = field_node(member, "property") or field_node(member, "name")
                record.properties.append(PropertyRecord(name=_key_name(prop), is_static=is_static))

        self.model.classes.append(record)

    def _on_class_expression(self, node: SyntaxNode, scope: str | None) -> None:
        # `export default class {}` is the only class expression that declares one
        if node.parent is not None and classify(node.parent) is NodeKind.EXPORT:
            self._on_class(node, scope)

    def _on_function_declaration(self, node: SyntaxNode, scope: str | None) -> None:
        name = _own_name(node)
        if name is None:
            log.debug("Function declaration without a name at %s", node.span)
            return
        self.model.functions.append(FunctionRecord(name=name, params=_params(node)))

    def _on_declaration(self, node: SyntaxNode, scope: str | None) -> None:
        declaration_kind = _declaration_kind(node)
        for declarator in _declarators(node):
            name = _binding_name(field_node(declarator, "name"))
            fn = _function_value(declarator)
            if fn is not None:
                self.model.functions.append(FunctionRecord(
                    name=name,
                    params=_params(fn),
                    is_arrow=classify(fn) is NodeKind.ARROW_FUNCTION,
                ))
            else:
                self.model.variables.append(VariableRecord(name=name, declaration_kind=declaration_kind))

    def _on_loop_binding(self, node: SyntaxNode, scope: str | None) -> None:
        declaration_kind = loop_declaration_kind(node)
        if declaration_kind is None:
            return
        name = _binding_name(field_node(node, "left"))
        self.model.variables.append(VariableRecord(name=name, declaration_kind=declaration_kind))

    def _on_call(self, node: SyntaxNode, scope: str | None) -> None:
        if not is_call(node):
            return
        callee = field_node(node, "function")
        if callee is None:
            return
        if classify(callee) is NodeKind.IDENTIFIER:
            name = callee.text
        else:
            name = member_property(callee)
        if not name:
            return
        self.model.calls.append(CallRecord(callee=name, caller=scope or GLOBAL_CALLER))

    def _on_import(self, node: SyntaxNode, scope: str | None) -> None:
        names: list[str] = []
        for clause in child_nodes(node):
            if clause.kind == "import_clause":
                names.extend(_import_bindings(clause))
        source = _string_value(field_node(node, "source"))
        self.model.imports.append(ImportRecord(source=source, names=names))

    def _on_export(self, node: SyntaxNode, scope: str | None) -> None:
        is_default = "default" in tokens(node)
        names = _exported_names(node)
        if not names:
            log.debug("Export without a name at %s", node.span)
        for name in names:
            self.model.exports.append(ExportRecord(name=name, is_default=is_default))


def _method_kind(member: SyntaxNode, name: str, is_static: bool) -> str:
    member_tokens = tokens(member)
    if name == "constructor" and not is_static:
        return "constructor"
    if "get" in member_tokens:
        return "get"
    if "set" in member_tokens:
        return "set"
    return "method"


def _import_bindings(clause: SyntaxNode) -> list[str]:
    names: list[str] = []
    for child in child_nodes(clause):
        if child.kind == "identifier" and child.text:
            names.append(child.text)
        elif child.kind == "namespace_import":
            names.extend(c.text for c in child_nodes(child) if c.kind == "identifier" and c.text)
        elif child.kind == "named_imports":
            for spec in child_nodes(child):
                if spec.kind != "import_specifier":
                    continue
                local = field_node(spec, "alias") or field_node(spec, "name")
                if local is not None:
                    names.append(_string_value(local))
    return names


def _exported_names(node: SyntaxNode) -> list[str]:
    declaration = field_node(node, "declaration")
    if declaration is None:
        declaration = next(
            (c for c in child_nodes(node) if classify(c) in _EXPORTABLE_KINDS), None
        )
    if declaration is not None:
        if classify(declaration) is NodeKind.VARIABLE_DECLARATION:
            return [
                target.text
                for target in (field_node(d, "name") for d in _declarators(declaration))
                if target is not None and target.kind == "identifier" and target.text
            ]
        name = _own_name(declaration)
        return [name] if name else []

    value = field_node(node, "value")
    if value is not None:
        if classify(value) is NodeKind.IDENTIFIER and value.text:
            return [value.text]
        name = field_node(value, "name")
        return [name.text] if name is not None and name.text else []

    names: list[str] = []
    for clause in child_nodes(node):
        if clause.kind != "export_clause":
            continue
        for spec in child_nodes(clause):
            if spec.kind != "export_specifier":
                continue
            exported = field_node(spec, "alias") or field_node(spec, "name")
            if exported is not None:
                names.append(_string_value(exported))
    return names


def extract_structure(tree: SyntaxNode) -> StructuralModel:
    extractor = StructureExtractor()
    walk(tree, extractor.visit, descend=extractor.descend)
    model = extractor.model
    log.info(
        "Structure: %d classes, %d functions, %d variables, %d calls, %d imports, %d exports",
        len(model.classes), len(model.functions), len(model.variables),
        len(model.calls), len(model.imports), len(model.exports),
    )
    return model
