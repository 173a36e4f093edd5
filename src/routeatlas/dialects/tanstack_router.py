"""TanStack Router (code-based routing) front-end.

Routes are bindings built with ``createRoute``/``createRootRoute`` and wired
into a tree with ``.addChildren(...)``. Parsing takes two passes over the
module: the first collects every route binding by name, the second attaches
children from ``addChildren`` calls. Forward references are therefore legal
and the tree is assembled only once every binding is known.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import structlog

from routeatlas.contracts.enums import Dialect
from routeatlas.contracts.routes import ComponentRef, RawRouteNode
from routeatlas.dialects.common import (
    FrontEnd,
    arrow_component,
    child_routes,
    identifier_component,
    lazy_component,
    make_nodes,
    static_path,
    unrecognized_component,
)
from routeatlas.engine.resolver import ExpressionResolver
from routeatlas.parsing.syntax import (
    ArrayExpr,
    Arrow,
    Call,
    ExportDefault,
    Expr,
    ExprStatement,
    Identifier,
    Member,
    Module,
    ObjectExpr,
    Property,
    Spread,
    child_expressions,
    unwrap,
)

logger = structlog.get_logger(__name__)

NO_ROUTES_MESSAGE = (
    "No routes found. Supported patterns: 'createRootRoute()', 'createRoute()', and '.addChildren([...])'"
)

_ROOT_FACTORIES = frozenset({"createRootRoute", "createRootRouteWithContext"})
_ADD_CHILDREN = re.compile(r"\.addChildren\s*\(")
_TRAILING_SPLAT = re.compile(r"/\$$")
_PARAM = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")


def detect(content: str) -> bool:
    if "@tanstack/react-router" in content or "createRootRoute" in content:
        return True
    if "createRoute" in content and "getParentRoute" in content:
        return True
    return "lazyRouteComponent" in content or bool(_ADD_CHILDREN.search(content))


def normalize_path(path: str) -> str:
    """``$param`` -> ``:param``; a bare ``$`` segment is the splat ``*``.

    >>> normalize_path("/posts/$postId")
    '/posts/:postId'
    >>> normalize_path("/files/$")
    '/files/*'
    """
    if path == "$":
        return "*"
    return _PARAM.sub(r":\1", _TRAILING_SPLAT.sub("/*", path))


@dataclass(slots=True)
class RouteBinding:
    """One ``const x = createRoute(...)`` declaration."""

    name: str
    line: int
    is_root: bool = False
    path: str | None = None
    component: ComponentRef | None = None
    parent: str | None = None
    # None until an addChildren call declares the list explicitly
    children: list[str] | None = None
    resolved_children: list[RawRouteNode] = field(default_factory=list)
    # Path present but not a string literal: the route and its subtree are skipped
    dropped: bool = False


# -- pass 1: bindings --------------------------------------------------------


def _factory_options(call: Call) -> tuple[bool, Expr | None] | None:
    """(is_root, options argument) when ``call`` creates a route, else None."""
    callee = unwrap(call.callee)
    options = call.arguments[0] if call.arguments else None
    if isinstance(callee, Identifier):
        if callee.name == "createRoute":
            return False, options
        if callee.name in _ROOT_FACTORIES:
            return True, options
        return None
    # createRootRouteWithContext<Ctx>()({...})
    if isinstance(callee, Call) and callee.callee_name == "createRootRouteWithContext":
        return True, options
    return None


def _component(value: Expr, resolver: ExpressionResolver) -> ComponentRef | None:
    component = identifier_component(value, resolver)
    if component is not None:
        return component
    node = unwrap(value)
    match node:
        case Call(callee_name="lazyRouteComponent", arguments=()):
            resolver.warn(
                f"lazyRouteComponent called without arguments at line {node.line}. "
                "Expected arrow function with import().",
                line=node.line,
            )
        case Call(callee_name="lazyRouteComponent", arguments=arguments):
            return lazy_component(arguments[0], resolver)
        case Call(callee_name=callee_name):
            resolver.warn(
                f"Unrecognized component pattern: {callee_name or 'unknown'}(...) at line {node.line}. "
                "Only 'lazyRouteComponent(() => import(...))' is supported.",
                line=node.line,
            )
        case Arrow():
            return arrow_component(node, resolver)
        case _:
            unrecognized_component(node, resolver)
    return None


def _parent_name(prop: Property, resolver: ExpressionResolver) -> str | None:
    value = unwrap(prop.value)
    if isinstance(value, Arrow) and value.body is not None:
        body = unwrap(value.body)
        if isinstance(body, Identifier):
            return body.name
    resolver.warn(
        f"Dynamic getParentRoute at line {prop.line}. Only static route references can be analyzed.",
        line=prop.line,
    )
    return None


def _binding_from_call(call: Call, name: str, resolver: ExpressionResolver) -> RouteBinding | None:
    factory = _factory_options(call)
    if factory is None:
        return None
    is_root, options = factory
    binding = RouteBinding(name=name, line=call.line, is_root=is_root)
    if options is None:
        return binding
    opts = unwrap(options)
    if not isinstance(opts, ObjectExpr):
        return binding

    path_prop = opts.find_property("path")
    if path_prop is not None:
        path = static_path(path_prop, resolver)
        if path is None:
            binding.dropped = True
            return binding
        binding.path = normalize_path(path)
    component = opts.get("component")
    if component is not None:
        binding.component = _component(component, resolver)
    parent_prop = opts.find_property("getParentRoute")
    if parent_prop is not None:
        binding.parent = _parent_name(parent_prop, resolver)
    return binding


def collect_bindings(module: Module, resolver: ExpressionResolver) -> dict[str, RouteBinding]:
    """Pass 1: every top-level route binding, in declaration order."""
    bindings: dict[str, RouteBinding] = {}
    for declarator, _exported in module.declarators():
        if declarator.name is None or declarator.init is None:
            continue
        init = unwrap(declarator.init)
        if not isinstance(init, Call):
            continue
        binding = _binding_from_call(init, declarator.name, resolver)
        if binding is None:
            # createRoute({...}).lazy(() => import(...))
            callee = unwrap(init.callee)
            if isinstance(callee, Member) and callee.name == "lazy":
                inner = unwrap(callee.object)
                if isinstance(inner, Call):
                    binding = _binding_from_call(inner, declarator.name, resolver)
                    if binding is not None and init.arguments:
                        lazy = lazy_component(init.arguments[0], resolver)
                        if lazy is not None:
                            binding.component = lazy
        if binding is not None:
            bindings[declarator.name] = binding
    return bindings


# -- pass 2: addChildren -----------------------------------------------------


def _add_children_call(node: Expr) -> Call | None:
    """``node`` itself when it is a ``x.addChildren(...)`` call, else None."""
    if not isinstance(node, Call):
        return None
    callee = unwrap(node.callee)
    if isinstance(callee, Member) and callee.name == "addChildren":
        return node
    return None


def _add_children_calls(expr: Expr) -> list[Call]:
    """Outermost ``addChildren`` calls within ``expr``; nested chains are handled by their parent call."""
    found: list[Call] = []
    stack = [expr]
    while stack:
        node = unwrap(stack.pop())
        call = _add_children_call(node)
        if call is not None:
            found.append(call)
            continue
        stack.extend(reversed(child_expressions(node)))
    return found


class _ChildrenCollector:
    def __init__(self, bindings: dict[str, RouteBinding], resolver: ExpressionResolver) -> None:
        self.bindings = bindings
        self.resolver = resolver

    def process(self, call: Call) -> str | None:
        """Attach the children of one ``parent.addChildren(...)`` call; returns the parent's name."""
        callee = unwrap(call.callee)
        if not isinstance(callee, Member):
            return None
        owner = unwrap(callee.object)
        parent_name: str | None = None
        chained = _add_children_call(owner)
        if isinstance(owner, Identifier):
            parent_name = owner.name
        elif chained is not None:
            parent_name = self.process(chained)
        if parent_name is None:
            return None

        parent = self.bindings.get(parent_name)
        if parent is None:
            self.resolver.warn(
                f'Parent route "{parent_name}" not found at line {call.line}. '
                "Ensure it's defined with createRoute/createRootRoute.",
                line=call.line,
            )
            return None
        if not call.arguments:
            return parent_name

        names: list[str] = []
        resolved: list[RawRouteNode] = []
        argument = unwrap(call.arguments[0])
        if isinstance(argument, ObjectExpr):
            # addChildren({ indexRoute, aboutRoute })
            elements: list[Expr] = [m.argument if isinstance(m, Spread) else m.value for m in argument.members]
        elif isinstance(argument, ArrayExpr):
            elements = [e for e in argument.elements if e is not None]
        else:
            self.resolver.warn(
                f"Unrecognized addChildren argument ({argument.kind.value}) at line {argument.line}. "
                "Expected an array or object of route references.",
                line=argument.line,
            )
            return parent_name

        for element in elements:
            if isinstance(element, Spread):
                resolved.extend(self.resolver.resolve_spread(element))
                continue
            node = unwrap(element)
            chained = _add_children_call(node)
            if isinstance(node, Identifier):
                names.append(node.name)
            elif chained is not None:
                nested = self.process(chained)
                if nested is not None:
                    names.append(nested)
            else:
                self.resolver.warn(
                    f"Unrecognized addChildren element ({node.kind.value}) at line {node.line}. "
                    "Only route variables can be analyzed.",
                    line=node.line,
                )
        parent.children = names
        parent.resolved_children = resolved
        return parent_name


def attach_children(module: Module, bindings: dict[str, RouteBinding], resolver: ExpressionResolver) -> None:
    """Pass 2: walk every top-level declaration and statement for addChildren calls."""
    collector = _ChildrenCollector(bindings, resolver)
    expressions: list[Expr] = [d.init for d, _exported in module.declarators() if d.init is not None]
    for stmt in module.body:
        if isinstance(stmt, ExprStatement):
            expressions.append(stmt.expression)
        elif isinstance(stmt, ExportDefault) and stmt.expression is not None:
            expressions.append(stmt.expression)
    for expr in expressions:
        for call in _add_children_calls(expr):
            collector.process(call)


# -- assembly ----------------------------------------------------------------


class _TreeBuilder:
    def __init__(self, bindings: dict[str, RouteBinding], resolver: ExpressionResolver) -> None:
        self.bindings = bindings
        self.resolver = resolver
        self._on_path: set[str] = set()

    def child_names(self, binding: RouteBinding) -> list[str]:
        if binding.children is not None:
            return binding.children
        # No addChildren list: children are the bindings naming this one in getParentRoute
        return [b.name for b in self.bindings.values() if b.parent == binding.name and not b.is_root]

    def build(self, binding: RouteBinding) -> RawRouteNode | None:
        if binding.dropped:
            return None
        if binding.name in self._on_path:
            self.resolver.warn(
                f'Circular reference detected: route "{binding.name}" references itself in the route tree.',
                identifier=binding.name,
            )
            return None
        self._on_path.add(binding.name)
        try:
            children: list[RawRouteNode] = []
            for name in self.child_names(binding):
                child = self.bindings.get(name)
                if child is None:
                    self.resolver.warn(
                        f'Child route "{name}" not found. Ensure it\'s defined with createRoute.',
                        identifier=name,
                    )
                    continue
                node = self.build(child)
                if node is not None and node.is_meaningful:
                    children.append(node)
            children.extend(binding.resolved_children)
        finally:
            self._on_path.discard(binding.name)
        return RawRouteNode(
            path=binding.path,
            component=binding.component,
            children=tuple(children),
            line=binding.line,
        )


def assemble(bindings: dict[str, RouteBinding], resolver: ExpressionResolver) -> list[RawRouteNode]:
    """Route forest from the collected bindings.

    A root binding is a layout: its children become the top-level routes.
    Without any root binding, bindings with no parent are the roots.
    """
    builder = _TreeBuilder(bindings, resolver)
    routes: list[RawRouteNode] = []
    roots = [b for b in bindings.values() if b.is_root]
    if roots:
        for root in roots:
            node = builder.build(root)
            if node is None:
                continue
            if node.children:
                routes.extend(node.children)
            elif node.path is not None:
                routes.append(node)
        return routes
    for binding in bindings.values():
        if binding.parent is None:
            node = builder.build(binding)
            if node is not None and node.is_meaningful:
                routes.append(node)
    return routes


def extract(module: Module, resolver: ExpressionResolver) -> list[RawRouteNode]:
    bindings = collect_bindings(module, resolver)
    attach_children(module, bindings, resolver)
    logger.debug(
        "tanstack_bindings_collected",
        bindings=len(bindings),
        roots=sum(1 for b in bindings.values() if b.is_root),
    )
    return assemble(bindings, resolver)


def parse_route_object(obj: ObjectExpr, resolver: ExpressionResolver) -> list[RawRouteNode]:
    """Plain ``{path, component, children}`` objects reached through spreads in addChildren."""
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
    return make_nodes([path], component=component, children=child_routes(obj, resolver), line=obj.line)


FRONT_END = FrontEnd(
    dialect=Dialect.TANSTACK_ROUTER,
    detect=detect,
    extract=extract,
    parse_object=parse_route_object,
    no_routes_message=NO_ROUTES_MESSAGE,
)
