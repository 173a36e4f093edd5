"""Static resolution of the expressions route arrays are assembled from.

Only a closed grammar is evaluated: string literals and plain templates,
array literals with spreads, identifiers bound to local arrays or
route-named imports, conditionals (both branches), ``&&`` (right operand)
and ``||`` (both operands). Type assertions are transparent. Everything else
is unresolvable with a reason from SpreadFailure; resolution gaps become
diagnostics and never abort analysis.

Route objects themselves are dialect specific, so the resolver is given an
object parser callback that turns one object literal into route nodes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from routeatlas.contracts.diagnostics import Diagnostic
from routeatlas.contracts.enums import SPREAD_FAILURE_MESSAGES, SpreadFailure
from routeatlas.contracts.routes import ComponentRef, RawRouteNode
from routeatlas.core.config import DEFAULT_EXTENSIONS
from routeatlas.core.paths import rebase_specifier, resolve_import_path
from routeatlas.parsing.syntax import (
    ArrayExpr,
    Call,
    Conditional,
    Expr,
    Identifier,
    ImportDecl,
    Literal,
    Logical,
    Module,
    ObjectExpr,
    Spread,
    Template,
    unwrap,
)

if TYPE_CHECKING:
    from routeatlas.engine.imports import ImportResolver

logger = structlog.get_logger(__name__)

type ObjectParser = Callable[[ObjectExpr, ExpressionResolver], list[RawRouteNode]]
type StaticValue = str | float | bool | None


@dataclass(frozen=True, slots=True)
class ImportBinding:
    """Where an imported identifier comes from.

    ``module_path`` is the absolute specifier path before extension probing;
    ``exported`` is the name exported by that module ("default" for default
    imports).
    """

    module_path: Path
    exported: str


@dataclass(frozen=True, slots=True)
class Unresolved:
    """An expression that could not be statically resolved."""

    failure: SpreadFailure
    reason: str

    @classmethod
    def of(cls, failure: SpreadFailure, *, name: str = "", detail: str = "") -> Unresolved:
        return cls(failure, SPREAD_FAILURE_MESSAGES[failure].format(name=name, detail=detail))


type Resolution = list[RawRouteNode] | Unresolved


class ImportCache:
    """Resolved route lists of imported modules, keyed by (module path, exported name).

    One cache lives for one analysis run and may be shared by every file of
    that run. It has no invalidation of its own: a long-lived host must call
    :meth:`clear` when source files change.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], tuple[RawRouteNode, ...]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, module_path: Path, exported: str) -> tuple[RawRouteNode, ...] | None:
        entry = self._entries.get((str(module_path), exported))
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    def put(self, module_path: Path, exported: str, routes: list[RawRouteNode]) -> None:
        self._entries[(str(module_path), exported)] = tuple(routes)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: tuple[Path, str]) -> bool:
        module_path, exported = key
        return (str(module_path), exported) in self._entries


@dataclass(slots=True)
class ResolutionContext:
    """Per-file scope for resolution.

    ``route_imports`` only tracks imports whose local name contains "route"
    (case-insensitive): unrelated imports are never chased across files.
    ``component_imports`` maps every imported local name to the resolved
    module path (or the bare specifier for package imports).
    """

    file_path: Path
    cache: ImportCache
    local_arrays: dict[str, ArrayExpr] = field(default_factory=dict)
    route_imports: dict[str, ImportBinding] = field(default_factory=dict)
    component_imports: dict[str, str] = field(default_factory=dict)
    depth: int = 0
    max_depth: int = 3
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS

    @property
    def base_dir(self) -> Path:
        return self.file_path.parent

    @classmethod
    def for_module(
        cls,
        module: Module,
        file_path: Path,
        *,
        cache: ImportCache,
        depth: int = 0,
        max_depth: int = 3,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ) -> ResolutionContext:
        """Build the scope of one parsed module."""
        context = cls(file_path=file_path, cache=cache, depth=depth, max_depth=max_depth, extensions=extensions)
        for declarator, _exported in module.declarators():
            if declarator.name is None or declarator.init is None:
                continue
            init = unwrap(declarator.init)
            if isinstance(init, ArrayExpr):
                context.local_arrays[declarator.name] = init
        for decl in module.imports():
            context._add_import(decl)
        return context

    def _add_import(self, decl: ImportDecl) -> None:
        if decl.type_only:
            return
        module_path = resolve_import_path(decl.source, self.base_dir)
        for spec in decl.specifiers:
            self.component_imports[spec.local] = str(module_path) if module_path is not None else decl.source
            if module_path is None or spec.imported == "*":
                continue
            if "route" in spec.local.lower():
                self.route_imports[spec.local] = ImportBinding(module_path, spec.imported)

    def nested(self, module: Module, file_path: Path) -> ResolutionContext:
        """Scope for an imported module, one level deeper, sharing the cache."""
        return ResolutionContext.for_module(
            module,
            file_path,
            cache=self.cache,
            depth=self.depth + 1,
            max_depth=self.max_depth,
            extensions=self.extensions,
        )


class ExpressionResolver:
    """Evaluates route-array expressions within one file's scope.

    Diagnostics from nested resolvers (imported files) are appended to the
    same list, in the order they are produced.
    """

    def __init__(
        self,
        context: ResolutionContext,
        object_parser: ObjectParser,
        *,
        imports: ImportResolver | None = None,
        diagnostics: list[Diagnostic] | None = None,
    ) -> None:
        if imports is None:
            from routeatlas.engine.imports import ImportResolver

            imports = ImportResolver()
        self.context = context
        self.object_parser = object_parser
        self.imports = imports
        self.diagnostics: list[Diagnostic] = diagnostics if diagnostics is not None else []
        # Identifiers currently being expanded; guards `const a = [...a]`
        self._expanding: set[str] = set()

    def child(self, context: ResolutionContext) -> ExpressionResolver:
        """Resolver for another file sharing parser, import resolver and diagnostics."""
        return ExpressionResolver(context, self.object_parser, imports=self.imports, diagnostics=self.diagnostics)

    def warn(self, message: str, *, line: int | None = None, identifier: str | None = None) -> None:
        self.diagnostics.append(Diagnostic.general(message, line=line, identifier=identifier))

    # -- values --------------------------------------------------------------

    def static_value(self, expr: Expr) -> StaticValue | Unresolved:
        """Literal value of a string/number/boolean/null literal or a plain template."""
        node = unwrap(expr)
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Template) and node.value is not None:
            return node.value
        return Unresolved.of(SpreadFailure.UNSUPPORTED_PATTERN, detail=node.kind.value)

    def component_ref(self, name: str) -> ComponentRef:
        """Reference for a component identifier, resolved through the file's imports.

        Namespaced names (``UI.Button``) are looked up by their first part.
        """
        head = name.split(".", 1)[0]
        return ComponentRef(name=name, path=self.context.component_imports.get(head))

    def lazy_ref(self, specifier: str, name: str | None = None, *, children: bool = False) -> ComponentRef:
        """Reference for a dynamic-import thunk argument, re-based onto this file's directory."""
        return ComponentRef(
            name=name,
            path=rebase_specifier(specifier, self.context.base_dir),
            lazy=True,
            lazy_children=children,
        )

    # -- route arrays --------------------------------------------------------

    def resolve_route_array(self, array: ArrayExpr) -> list[RawRouteNode]:
        """Route nodes of an array literal; spreads are expanded in place."""
        routes: list[RawRouteNode] = []
        for element in array.elements:
            if element is None:
                continue
            if isinstance(element, Spread):
                routes.extend(self.resolve_spread(element))
                continue
            node = unwrap(element)
            if isinstance(node, ObjectExpr):
                routes.extend(self.object_parser(node, self))
                continue
            self.warn(
                f"Non-object route element ({node.kind.value}) at line {node.line}. "
                "Only object literals can be statically analyzed.",
                line=node.line,
            )
        return routes

    def resolve_spread(self, spread: Spread) -> list[RawRouteNode]:
        """Expand one spread element, recording a spread diagnostic either way."""
        argument = unwrap(spread.argument)
        identifier = argument.name if isinstance(argument, Identifier) else None
        result = self.resolve_routes(argument)
        if isinstance(result, Unresolved):
            self.diagnostics.append(
                Diagnostic.spread(
                    line=spread.line,
                    identifier=identifier,
                    failure=result.failure,
                    reason=result.reason,
                )
            )
            return []
        self.diagnostics.append(Diagnostic.spread(line=spread.line, identifier=identifier))
        return result

    def resolve_routes(self, expr: Expr) -> Resolution:
        """Resolve an expression expected to evaluate to a route array."""
        node = unwrap(expr)
        match node:
            case ArrayExpr():
                return self.resolve_route_array(node)
            case Identifier(name=name):
                return self.resolve_identifier(name)
            case Conditional(consequent=consequent, alternate=alternate):
                # Either branch may run, so both contribute
                merged = self._merge([consequent, alternate])
                if merged is None:
                    return Unresolved.of(SpreadFailure.CONDITIONAL_UNRESOLVED)
                return merged
            case Logical(operator="&&", right=right):
                # Left operand is treated as the guard condition
                result = self.resolve_routes(right)
                if isinstance(result, Unresolved):
                    return Unresolved.of(SpreadFailure.LOGICAL_UNRESOLVED, detail="&&")
                return result
            case Logical(operator="||", left=left, right=right):
                merged = self._merge([left, right])
                if merged is None:
                    return Unresolved.of(SpreadFailure.LOGICAL_UNRESOLVED, detail="||")
                return merged
            case Logical(operator=operator):
                self.warn(
                    f"Unsupported logical operator '{operator}' in spread expression. "
                    "Only '&&' and '||' are supported.",
                    line=node.line,
                )
                return Unresolved.of(SpreadFailure.UNSUPPORTED_OPERATOR, detail=operator)
            case Call():
                return Unresolved.of(SpreadFailure.FUNCTION_CALL)
            case _:
                return Unresolved.of(SpreadFailure.UNSUPPORTED_PATTERN, detail=node.kind.value)

    def _merge(self, operands: list[Expr]) -> list[RawRouteNode] | None:
        """Concatenate every resolvable operand; None when none resolves.

        Operands skipped next to a resolved one get a general diagnostic each.
        When none resolves the caller's spread diagnostic records the gap.
        """
        routes: list[RawRouteNode] = []
        resolved = False
        skipped: list[tuple[Expr, Unresolved]] = []
        for operand in operands:
            result = self.resolve_routes(operand)
            if isinstance(result, Unresolved):
                skipped.append((operand, result))
                continue
            routes.extend(result)
            resolved = True
        if not resolved:
            return None
        for operand, failure in skipped:
            node = unwrap(operand)
            self.warn(
                f"Skipped unresolvable branch ({node.kind.value}) at line {node.line}: {failure.reason}",
                line=node.line,
            )
        return routes

    def resolve_identifier(self, name: str) -> Resolution:
        """Local array first, then route-named import, else not found."""
        local = self.context.local_arrays.get(name)
        if local is not None:
            if name in self._expanding:
                self.warn(f"Circular reference detected: '{name}' spreads itself.", identifier=name)
                return Unresolved.of(SpreadFailure.RESOLUTION_FAILED, name=name)
            self._expanding.add(name)
            try:
                return self.resolve_route_array(local)
            finally:
                self._expanding.discard(name)

        binding = self.context.route_imports.get(name)
        if binding is not None:
            outcome = self.imports.resolve(self, binding)
            if outcome.routes is None:
                failure = outcome.failure or SpreadFailure.RESOLUTION_FAILED
                return Unresolved.of(failure, name=name)
            return list(outcome.routes)

        if "route" not in name.lower():
            return Unresolved.of(SpreadFailure.NOT_FOUND_NAMING_HINT, name=name)
        return Unresolved.of(SpreadFailure.NOT_FOUND, name=name)
