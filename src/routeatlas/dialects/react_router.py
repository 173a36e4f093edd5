"""React Router (data router / route object) front-end."""

from __future__ import annotations

import re

from routeatlas.contracts.enums import Dialect
from routeatlas.contracts.routes import ComponentRef, RawRouteNode
from routeatlas.dialects.common import (
    FrontEnd,
    child_routes,
    default_export_roots,
    identifier_component,
    jsx_component,
    lazy_component,
    make_nodes,
    named_array_roots,
    resolve_roots,
    static_path,
    unrecognized_component,
)
from routeatlas.engine.resolver import ExpressionResolver
from routeatlas.parsing.syntax import Call, Expr, ExportDefault, Jsx, Literal, Module, ObjectExpr, unwrap

ROUTER_FACTORIES = frozenset({"createBrowserRouter", "createHashRouter", "createMemoryRouter"})

NO_ROUTES_MESSAGE = (
    "No routes found. Supported patterns: 'createBrowserRouter([...])', "
    "'export const routes = [...]', or 'export default [...]'"
)

_ELEMENT_JSX = re.compile(r"element:\s*<")
_COMPONENT_IDENTIFIER = re.compile(r"Component:\s*[A-Z]")


def detect(content: str) -> bool:
    if any(marker in content for marker in (*ROUTER_FACTORIES, "RouteObject")):
        return True
    return bool(_ELEMENT_JSX.search(content) or _COMPONENT_IDENTIFIER.search(content))


def _factory_argument(expr: Expr | None) -> Expr | None:
    if expr is None:
        return None
    node = unwrap(expr)
    if isinstance(node, Call) and node.callee_name in ROUTER_FACTORIES and node.arguments:
        return node.arguments[0]
    return None


def extract(module: Module, resolver: ExpressionResolver) -> list[RawRouteNode]:
    roots: list[Expr] = []
    for declarator, _exported in module.declarators():
        argument = _factory_argument(declarator.init)
        if argument is not None:
            roots.append(argument)
    for stmt in module.body:
        if isinstance(stmt, ExportDefault):
            argument = _factory_argument(stmt.expression)
            if argument is not None:
                roots.append(argument)
    roots.extend(named_array_roots(module))
    roots.extend(default_export_roots(module))
    return resolve_roots(roots, resolver)


def _component(obj: ObjectExpr, resolver: ExpressionResolver) -> ComponentRef | None:
    component: ComponentRef | None = None
    element = obj.get("element")
    if element is not None:
        node = unwrap(element)
        if isinstance(node, Jsx):
            component = jsx_component(node, resolver, line=node.line)
        elif not (isinstance(node, Literal) and node.value is None):
            unrecognized_component(node, resolver)
    declared = obj.get("Component")
    if declared is not None:
        component = identifier_component(declared, resolver)
        if component is None:
            unrecognized_component(declared, resolver)
    lazy = obj.get("lazy")
    if lazy is not None and component is None:
        component = lazy_component(lazy, resolver)
    return component


def parse_route_object(obj: ObjectExpr, resolver: ExpressionResolver) -> list[RawRouteNode]:
    """``{path, index, element | Component | lazy, children}``.

    ``index: true`` forces an empty path; a pathless object with children is
    a layout route.
    """
    path: str | None = None
    path_prop = obj.find_property("path")
    if path_prop is not None:
        path = static_path(path_prop, resolver)
        if path is None:
            return []
    index = obj.get("index")
    if index is not None:
        flag = unwrap(index)
        if isinstance(flag, Literal) and flag.value is True:
            path = ""
    component = _component(obj, resolver)
    children = child_routes(obj, resolver)
    return make_nodes([path], component=component, children=children, line=obj.line)


FRONT_END = FrontEnd(
    dialect=Dialect.REACT_ROUTER,
    detect=detect,
    extract=extract,
    parse_object=parse_route_object,
    no_routes_message=NO_ROUTES_MESSAGE,
)
