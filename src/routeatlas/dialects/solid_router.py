"""Solid Router front-end."""

from __future__ import annotations

import re

from routeatlas.contracts.enums import Dialect
from routeatlas.contracts.routes import ComponentRef, RawRouteNode
from routeatlas.dialects.common import (
    FrontEnd,
    arrow_component,
    child_routes,
    default_export_roots,
    identifier_component,
    lazy_component,
    make_nodes,
    named_array_roots,
    resolve_roots,
    static_path,
    unrecognized_component,
)
from routeatlas.engine.resolver import ExpressionResolver
from routeatlas.parsing.syntax import ArrayExpr, Arrow, Call, Expr, Module, ObjectExpr, Property, string_value, unwrap

NO_ROUTES_MESSAGE = "No routes found. Supported patterns: 'export const routes = [...]' or 'export default [...]'"

_LAZY_CALL = re.compile(r"\blazy\s*\(")
_COMPONENT_KEY = re.compile(r"\bcomponent\s*:")
_PATH_KEY = re.compile(r"\bpath\s*:")


def detect(content: str) -> bool:
    if "@solidjs/router" in content or "solid-app-router" in content:
        return True
    return (
        "solid-js" in content
        and bool(_LAZY_CALL.search(content))
        and bool(_COMPONENT_KEY.search(content))
        and bool(_PATH_KEY.search(content))
    )


def extract(module: Module, resolver: ExpressionResolver) -> list[RawRouteNode]:
    return resolve_roots([*named_array_roots(module), *default_export_roots(module)], resolver)


def _paths(prop: Property, resolver: ExpressionResolver) -> list[str] | None:
    """Static paths of a ``path`` property; an array declares one route per entry."""
    value = unwrap(prop.value)
    if not isinstance(value, ArrayExpr):
        path = static_path(prop, resolver)
        return [path] if path is not None else None

    paths: list[str] = []
    entries = [element for element in value.elements if element is not None]
    for element in entries:
        text = string_value(element)
        if text is not None:
            paths.append(text)
            continue
        node = unwrap(element)
        resolver.warn(
            f"Non-string path in array ({node.kind.value}) at line {node.line}. "
            "Only string literal paths can be analyzed.",
            line=node.line,
        )
    if entries and not paths:
        resolver.warn(
            f"Path array contains only dynamic values at line {prop.line}. No static paths could be extracted.",
            line=prop.line,
        )
    return paths or None


def _component(value: Expr, resolver: ExpressionResolver) -> ComponentRef | None:
    component = identifier_component(value, resolver)
    if component is not None:
        return component
    node = unwrap(value)
    match node:
        case Call(callee_name="lazy", arguments=()):
            resolver.warn(
                f"lazy() called without arguments at line {node.line}. Expected arrow function with import().",
                line=node.line,
            )
        case Call(callee_name="lazy", arguments=arguments):
            return lazy_component(arguments[0], resolver)
        case Call(callee_name=callee_name):
            resolver.warn(
                f"Unrecognized component pattern: {callee_name or 'unknown'}(...) at line {node.line}. "
                "Only 'lazy(() => import(...))' is supported.",
                line=node.line,
            )
        case Arrow():
            return arrow_component(node, resolver)
        case _:
            unrecognized_component(node, resolver)
    return None


def parse_route_object(obj: ObjectExpr, resolver: ExpressionResolver) -> list[RawRouteNode]:
    """``{path, component, children}``; ``path`` may be an array of aliases."""
    paths: list[str | None] = [None]
    path_prop = obj.find_property("path")
    if path_prop is not None:
        found = _paths(path_prop, resolver)
        if found is None:
            return []
        paths = list(found)

    component: ComponentRef | None = None
    value = obj.get("component")
    if value is not None:
        component = _component(value, resolver)
    children = child_routes(obj, resolver, allow_object=True)
    return make_nodes(paths, component=component, children=children, line=obj.line)


FRONT_END = FrontEnd(
    dialect=Dialect.SOLID_ROUTER,
    detect=detect,
    extract=extract,
    parse_object=parse_route_object,
    no_routes_message=NO_ROUTES_MESSAGE,
)
