"""Angular Router front-end.

Roots are route arrays declared at the top level (named like routes or typed
``Routes``), ``export default [...]``, and the arrays handed to
``RouterModule.forRoot/forChild`` or ``provideRouter`` anywhere in decorator
arguments, declarations or expression statements.
"""

from __future__ import annotations

import re

from routeatlas.contracts.enums import Dialect
from routeatlas.contracts.routes import ComponentRef, RawRouteNode
from routeatlas.dialects.common import (
    FrontEnd,
    child_routes,
    default_export_roots,
    identifier_component,
    lazy_component,
    make_nodes,
    resolve_roots,
    static_path,
    static_string,
    unrecognized_component,
)
from routeatlas.engine.resolver import ExpressionResolver
from routeatlas.parsing.syntax import (
    ArrayExpr,
    Call,
    ClassDecl,
    Expr,
    ExprStatement,
    Identifier,
    Member,
    Module,
    ObjectExpr,
    unwrap,
    walk,
)

NO_ROUTES_MESSAGE = (
    "No routes found. Supported patterns: 'export const routes: Routes = [...]', "
    "'RouterModule.forRoot([...])', or 'RouterModule.forChild([...])'"
)

_ROUTER_MODULE_METHODS = frozenset({"forRoot", "forChild"})
_ROUTES_TYPE = re.compile(r":\s*Routes\s*[=\[]")


def detect(content: str) -> bool:
    if "@angular/router" in content:
        return True
    if "RouterModule.forRoot" in content or "RouterModule.forChild" in content:
        return True
    return bool(_ROUTES_TYPE.search(content))


def _router_call_argument(node: Expr) -> Expr | None:
    """Routes argument of ``RouterModule.forRoot/forChild(x)`` or ``provideRouter(x)``."""
    if not isinstance(node, Call) or not node.arguments:
        return None
    if node.callee_name == "provideRouter":
        return node.arguments[0]
    callee = unwrap(node.callee)
    if isinstance(callee, Member) and callee.name in _ROUTER_MODULE_METHODS:
        owner = unwrap(callee.object)
        if isinstance(owner, Identifier) and owner.name == "RouterModule":
            return node.arguments[0]
    return None


def _router_call_roots(expr: Expr) -> list[Expr]:
    roots: list[Expr] = []
    for node in walk(expr):
        argument = _router_call_argument(node)
        if argument is not None:
            roots.append(argument)
    return roots


def _is_routes_declaration(name: str, annotation: str | None) -> bool:
    return "route" in name.lower() or (annotation is not None and annotation.strip() == "Routes")


def extract(module: Module, resolver: ExpressionResolver) -> list[RawRouteNode]:
    declared: dict[str, ArrayExpr] = {}
    for declarator, _exported in module.declarators():
        if declarator.name is None or declarator.init is None:
            continue
        init = unwrap(declarator.init)
        if isinstance(init, ArrayExpr) and _is_routes_declaration(declarator.name, declarator.annotation):
            declared[declarator.name] = init

    # Arrays that are only composed into other route arrays are not roots
    referenced = {
        node.name
        for array in declared.values()
        for node in walk(array)
        if isinstance(node, Identifier) and node.name in declared
    }
    roots: list[Expr] = [array for name, array in declared.items() if name not in referenced]
    roots.extend(default_export_roots(module))

    for stmt in module.body:
        match stmt:
            case ClassDecl(decorators=decorators):
                for decorator in decorators:
                    roots.extend(_router_call_roots(decorator))
            case ExprStatement(expression=expression):
                roots.extend(_router_call_roots(expression))
            case _:
                pass
    for declarator, _exported in module.declarators():
        if declarator.init is not None:
            roots.extend(_router_call_roots(declarator.init))
    return resolve_roots(roots, resolver)


def parse_route_object(obj: ObjectExpr, resolver: ExpressionResolver) -> list[RawRouteNode]:
    """``{path, component | loadComponent | loadChildren, children, redirectTo}``.

    Guards, resolvers, data and the other runtime-only keys are ignored.
    """
    path: str | None = None
    path_prop = obj.find_property("path")
    if path_prop is not None:
        path = static_path(path_prop, resolver)
        if path is None:
            return []

    component: ComponentRef | None = None
    declared = obj.get("component")
    if declared is not None:
        component = identifier_component(declared, resolver)
        if component is None:
            unrecognized_component(declared, resolver)
    load_component = obj.get("loadComponent")
    if load_component is not None:
        component = lazy_component(
            load_component,
            resolver,
            pattern="loadComponent",
            expected="Expected arrow function with import().then().",
        )
    load_children = obj.get("loadChildren")
    if load_children is not None:
        component = lazy_component(load_children, resolver, pattern="loadChildren", children=True)

    redirect: str | None = None
    if obj.get("redirectTo") is not None:
        # Empty when the target is a function
        redirect = static_string(obj, "redirectTo") or ""
    return make_nodes(
        [path],
        component=component,
        redirect=redirect,
        children=child_routes(obj, resolver),
        line=obj.line,
    )


FRONT_END = FrontEnd(
    dialect=Dialect.ANGULAR_ROUTER,
    detect=detect,
    extract=extract,
    parse_object=parse_route_object,
    no_routes_message=NO_ROUTES_MESSAGE,
)
