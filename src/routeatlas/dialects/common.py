"""Building blocks shared by the dialect front-ends.

Every front-end reads the same few shapes out of route objects: a static
path, a component reference (identifier, JSX element or lazy-import thunk)
and a children array. The helpers here read those shapes and report anything
else as a general diagnostic on the resolver.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from routeatlas.contracts.enums import Dialect
from routeatlas.contracts.routes import ComponentRef, RawRouteNode
from routeatlas.engine.resolver import ExpressionResolver, ObjectParser, Unresolved
from routeatlas.parsing.syntax import (
    ArrayExpr,
    Arrow,
    Call,
    Conditional,
    ExportDefault,
    Expr,
    Identifier,
    Jsx,
    Member,
    Module,
    ObjectExpr,
    Property,
    string_value,
    unwrap,
)

type Extractor = Callable[[Module, ExpressionResolver], list[RawRouteNode]]


@dataclass(frozen=True, slots=True)
class FrontEnd:
    """One dialect's parse capability.

    ``extract`` discovers the root route declarations of a module and turns
    them into route nodes; ``parse_object`` turns a single route object
    literal into nodes and is also used for objects reached through spreads.
    """

    dialect: Dialect
    detect: Callable[[str], bool]
    extract: Extractor
    parse_object: ObjectParser
    no_routes_message: str


# -- paths -------------------------------------------------------------------


def static_path(prop: Property, resolver: ExpressionResolver) -> str | None:
    """String value of a ``path`` property, or None after a dynamic-path diagnostic."""
    value = string_value(prop.value)
    if value is None:
        node = unwrap(prop.value)
        resolver.warn(
            f"Dynamic path value ({node.kind.value}) at line {prop.line}. "
            "Only string literal paths can be statically analyzed.",
            line=prop.line,
        )
    return value


def static_string(obj: ObjectExpr, key: str) -> str | None:
    value = obj.get(key)
    return string_value(value) if value is not None else None


# -- components --------------------------------------------------------------


def find_dynamic_import(expr: Expr) -> Call | None:
    """The ``import(...)`` call inside a thunk, looking through ``.then``/``.catch`` chains."""
    node = unwrap(expr)
    if isinstance(node, Arrow):
        if node.body is None:
            return None
        node = unwrap(node.body)
    while isinstance(node, Call):
        if node.is_dynamic_import:
            return node
        callee = unwrap(node.callee)
        if not isinstance(callee, Member):
            return None
        node = unwrap(callee.object)
    return None


def then_export_name(expr: Expr) -> str | None:
    """Name picked by ``import(...).then(m => m.Name)``, if the thunk has that shape."""
    node = unwrap(expr)
    if not isinstance(node, Arrow) or node.body is None:
        return None
    body = unwrap(node.body)
    if not isinstance(body, Call) or not body.arguments:
        return None
    callee = unwrap(body.callee)
    if not isinstance(callee, Member) or callee.name != "then":
        return None
    picker = unwrap(body.arguments[0])
    if isinstance(picker, Arrow) and picker.body is not None:
        picked = unwrap(picker.body)
        if isinstance(picked, Member) and picked.name is not None:
            return picked.name
    return None


def lazy_component(
    expr: Expr,
    resolver: ExpressionResolver,
    *,
    pattern: str = "lazy",
    expected: str = "Expected arrow function with import().",
    children: bool = False,
) -> ComponentRef | None:
    """Component reference of a lazy-import thunk.

    The reference always points at the literal ``import()`` argument,
    re-based onto the routes file's directory; an export picked with
    ``.then(m => m.Name)`` becomes the reference's name.
    """
    node = unwrap(expr)
    call = find_dynamic_import(node)
    if call is None:
        resolver.warn(
            f"Unrecognized {pattern} pattern ({node.kind.value}) at line {node.line}. {expected}",
            line=node.line,
        )
        return None
    specifier = string_value(call.arguments[0]) if call.arguments else None
    if specifier is None:
        label = "Lazy import" if pattern == "lazy" else f"Lazy {pattern}"
        resolver.warn(
            f"{label} with dynamic path at line {node.line}. Only string literal imports can be analyzed.",
            line=node.line,
        )
        return None
    return resolver.lazy_ref(specifier, then_export_name(node), children=children)


def jsx_component(element: Jsx, resolver: ExpressionResolver, *, line: int) -> ComponentRef | None:
    """Component rendered by a JSX element; fragments have none."""
    if not element.tag:
        resolver.warn(
            f"JSX Fragment detected at line {line}. Cannot extract component name from fragments.",
            line=line,
        )
        return None
    return resolver.component_ref(element.tag)


def arrow_component(arrow: Arrow, resolver: ExpressionResolver) -> ComponentRef | None:
    """Component of a concise arrow that returns a JSX element directly."""
    line = arrow.line
    if arrow.body is None:
        resolver.warn(
            f"Arrow function with block body at line {line}. "
            "Only concise arrow functions returning JSX directly can be analyzed.",
            line=line,
        )
        return None
    body = unwrap(arrow.body)
    match body:
        case Jsx():
            return jsx_component(body, resolver, line=line)
        case Conditional(consequent=Jsx(tag=first), alternate=Jsx(tag=second)):
            resolver.warn(
                f"Conditional component ({first or 'unknown'} or {second or 'unknown'}) at line {line}. "
                "Only static JSX elements can be analyzed. Consider extracting to a separate component.",
                line=line,
            )
        case Conditional():
            resolver.warn(
                f"Conditional component at line {line}. "
                "Only static JSX elements can be analyzed. Consider extracting to a separate component.",
                line=line,
            )
        case _:
            resolver.warn(
                f"Unrecognized arrow function body ({body.kind.value}) at line {line}. "
                "Component will not be extracted.",
                line=line,
            )
    return None


def identifier_component(expr: Expr, resolver: ExpressionResolver) -> ComponentRef | None:
    node = unwrap(expr)
    if isinstance(node, Identifier):
        return resolver.component_ref(node.name)
    if isinstance(node, Member) and node.name is not None:
        root = unwrap(node.object)
        if isinstance(root, Identifier):
            return resolver.component_ref(f"{root.name}.{node.name}")
    return None


def unrecognized_component(expr: Expr, resolver: ExpressionResolver) -> None:
    node = unwrap(expr)
    resolver.warn(
        f"Unrecognized component pattern ({node.kind.value}) at line {node.line}. Component will not be extracted.",
        line=node.line,
    )


# -- children and roots ------------------------------------------------------


def child_routes(obj: ObjectExpr, resolver: ExpressionResolver, *, allow_object: bool = False) -> tuple[RawRouteNode, ...]:
    """Nodes of a ``children`` property.

    Array literals are resolved element by element; identifiers and other
    composable expressions go through the resolver. With ``allow_object`` a
    single route object is accepted in place of an array.
    """
    value = obj.get("children")
    if value is None:
        return ()
    node = unwrap(value)
    if isinstance(node, ArrayExpr):
        return tuple(resolver.resolve_route_array(node))
    if allow_object and isinstance(node, ObjectExpr):
        return tuple(resolver.object_parser(node, resolver))
    result = resolver.resolve_routes(node)
    if isinstance(result, Unresolved):
        resolver.warn(f"Could not resolve children at line {node.line}: {result.reason}", line=node.line)
        return ()
    return tuple(result)


def make_nodes(
    paths: Sequence[str | None],
    *,
    component: ComponentRef | None = None,
    redirect: str | None = None,
    children: tuple[RawRouteNode, ...] = (),
    name: str | None = None,
    line: int | None = None,
) -> list[RawRouteNode]:
    """One node per path; a node with neither path nor children is dropped."""
    return [
        RawRouteNode(path=path, redirect=redirect, component=component, children=children, name=name, line=line)
        for path in paths
        if path is not None or children
    ]


def resolve_roots(roots: Sequence[Expr], resolver: ExpressionResolver) -> list[RawRouteNode]:
    """Resolve root route expressions in order.

    An identifier bound to a local array and the array itself count as the
    same root, so ``const routes = [...]`` passed to a router factory is only
    expanded once.
    """
    seen: list[ArrayExpr] = []
    routes: list[RawRouteNode] = []
    for expr in roots:
        node = unwrap(expr)
        if isinstance(node, Identifier) and node.name in resolver.context.local_arrays:
            node = resolver.context.local_arrays[node.name]
        if isinstance(node, ArrayExpr):
            if any(node is other for other in seen):
                continue
            seen.append(node)
            routes.extend(resolver.resolve_route_array(node))
            continue
        result = resolver.resolve_routes(node)
        if isinstance(result, Unresolved):
            resolver.warn(f"Could not resolve route array at line {node.line}: {result.reason}", line=node.line)
            continue
        routes.extend(result)
    return routes


def named_array_roots(module: Module, name: str = "routes") -> list[Expr]:
    """Top-level ``[export] const <name> = [...]`` initializers."""
    roots: list[Expr] = []
    for declarator, _exported in module.declarators():
        if declarator.name == name and declarator.init is not None and isinstance(unwrap(declarator.init), ArrayExpr):
            roots.append(declarator.init)
    return roots


def default_export_roots(module: Module) -> list[Expr]:
    """``export default [...]`` and ``export default <local array>``."""
    local_arrays = {d.name for d, _exported in module.declarators() if d.init is not None and isinstance(unwrap(d.init), ArrayExpr)}
    roots: list[Expr] = []
    for stmt in module.body:
        if not isinstance(stmt, ExportDefault) or stmt.expression is None:
            continue
        node = unwrap(stmt.expression)
        if isinstance(node, ArrayExpr) or (isinstance(node, Identifier) and node.name in local_arrays):
            roots.append(stmt.expression)
    return roots
