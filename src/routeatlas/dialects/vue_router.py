"""Vue Router front-end."""

from __future__ import annotations

import re

from routeatlas.contracts.enums import Dialect
from routeatlas.contracts.routes import ComponentRef, RawRouteNode
from routeatlas.dialects.common import (
    FrontEnd,
    child_routes,
    default_export_roots,
    find_dynamic_import,
    identifier_component,
    lazy_component,
    make_nodes,
    named_array_roots,
    resolve_roots,
    static_path,
    static_string,
    unrecognized_component,
)
from routeatlas.engine.resolver import ExpressionResolver
from routeatlas.parsing.syntax import Call, Expr, ExportDefault, Module, ObjectExpr, unwrap

NO_ROUTES_MESSAGE = (
    "No routes array found. Supported patterns: 'export const routes = [...]', "
    "'export default [...]', or 'export default [...] satisfies RouteRecordRaw[]'"
)

# ':pathMatch(.*)*' and ':name(.*)' match everything
_CATCHALL_PARAM = re.compile(r":\w+\(\.\*\)[*+]?")
# ':id(\\d+)' -> ':id', keeping a trailing '?', '*' or '+'
_PARAM_PATTERN = re.compile(r"(:\w+)\((?:[^()]|\([^()]*\))*\)")


def detect(content: str) -> bool:
    return any(marker in content for marker in ("RouteRecordRaw", "vue-router", ".vue"))


def normalize_path(path: str) -> str:
    """Collapse catch-all params to ``*`` and strip custom param regexes.

    >>> normalize_path("/:pathMatch(.*)*")
    '/*'
    >>> normalize_path("/users/:id(\\\\d+)")
    '/users/:id'
    """
    return _PARAM_PATTERN.sub(r"\1", _CATCHALL_PARAM.sub("*", path))


def _router_options_routes(expr: Expr | None) -> Expr | None:
    if expr is None:
        return None
    node = unwrap(expr)
    if isinstance(node, Call) and node.callee_name == "createRouter" and node.arguments:
        options = unwrap(node.arguments[0])
        if isinstance(options, ObjectExpr):
            return options.get("routes")
    return None


def extract(module: Module, resolver: ExpressionResolver) -> list[RawRouteNode]:
    roots: list[Expr] = []
    roots.extend(named_array_roots(module))
    roots.extend(default_export_roots(module))
    for declarator, _exported in module.declarators():
        routes = _router_options_routes(declarator.init)
        if routes is not None:
            roots.append(routes)
    for stmt in module.body:
        if isinstance(stmt, ExportDefault):
            routes = _router_options_routes(stmt.expression)
            if routes is not None:
                roots.append(routes)
    return resolve_roots(roots, resolver)


def _component(value: Expr, resolver: ExpressionResolver) -> ComponentRef | None:
    component = identifier_component(value, resolver)
    if component is not None:
        return component
    if find_dynamic_import(value) is not None:
        return lazy_component(value, resolver)
    unrecognized_component(value, resolver)
    return None


def parse_route_object(obj: ObjectExpr, resolver: ExpressionResolver) -> list[RawRouteNode]:
    """``{path, name, redirect, component, children}``."""
    path: str | None = None
    path_prop = obj.find_property("path")
    if path_prop is not None:
        path = static_path(path_prop, resolver)
        if path is None:
            return []
        path = normalize_path(path)
    component: ComponentRef | None = None
    value = obj.get("component")
    if value is not None:
        component = _component(value, resolver)
    redirect: str | None = None
    if obj.get("redirect") is not None:
        # Empty when the target is an object or a function
        redirect = static_string(obj, "redirect") or ""
    return make_nodes(
        [path],
        component=component,
        redirect=redirect,
        children=child_routes(obj, resolver),
        name=static_string(obj, "name"),
        line=obj.line,
    )


FRONT_END = FrontEnd(
    dialect=Dialect.VUE_ROUTER,
    detect=detect,
    extract=extract,
    parse_object=parse_route_object,
    no_routes_message=NO_ROUTES_MESSAGE,
)
