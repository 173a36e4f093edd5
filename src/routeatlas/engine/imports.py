"""Cross-file resolution of imported route arrays.

An identifier imported from another module is resolved by locating that
module on disk, parsing it independently and looking up the exported array.
The import depth is the only guard against circular or runaway import
graphs: once ``depth >= max_depth`` resolution stops with a diagnostic and
the caller keeps whatever partial tree it has.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from routeatlas.contracts.enums import SpreadFailure
from routeatlas.contracts.routes import RawRouteNode
from routeatlas.core.paths import probe_module_file, resolve_import_path
from routeatlas.engine.resolver import ExpressionResolver, ImportBinding
from routeatlas.parsing.parser import is_jsx_path, parse_module
from routeatlas.parsing.syntax import ArrayExpr, ExportDefault, ExportNamed, Identifier, Module, VarDecl, unwrap
from routeatlas.parsing.tokenizer import SourceSyntaxError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ImportOutcome:
    """Result of resolving one import; ``routes is None`` means partial coverage."""

    routes: tuple[RawRouteNode, ...] | None
    failure: SpreadFailure | None = None

    @classmethod
    def failed(cls, failure: SpreadFailure = SpreadFailure.RESOLUTION_FAILED) -> ImportOutcome:
        return cls(None, failure)


class ImportResolver:
    """Resolves ``(module path, exported name)`` pairs to route lists.

    Stateless apart from a parse counter; caching lives in the ImportCache of
    the resolution context so its lifetime is controlled by the caller.
    """

    def __init__(self) -> None:
        self.files_parsed = 0

    def resolve(self, resolver: ExpressionResolver, binding: ImportBinding) -> ImportOutcome:
        context = resolver.context
        exported = binding.exported
        module_path = binding.module_path

        if context.depth >= context.max_depth:
            resolver.warn(
                f"Maximum import depth ({context.max_depth}) reached while resolving '{exported}' from '{module_path}'"
            )
            logger.warning(
                "import_depth_limit",
                exported=exported,
                module=str(module_path),
                max_depth=context.max_depth,
            )
            return ImportOutcome.failed(SpreadFailure.DEPTH_LIMIT)

        cached = context.cache.get(module_path, exported)
        if cached is not None:
            logger.debug("import_cache_hit", exported=exported, module=str(module_path))
            return ImportOutcome(cached)

        found, tried = probe_module_file(module_path, context.extensions)
        if found is None:
            tried_text = ", ".join(f"'{path}'" for path in tried)
            resolver.warn(f"Could not find imported routes file for '{exported}'. Tried: {tried_text}")
            return ImportOutcome.failed()

        try:
            source = found.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            resolver.warn(f"Failed to read '{found}' while resolving '{exported}': {e}")
            return ImportOutcome.failed()

        try:
            module = parse_module(source, jsx=is_jsx_path(found.name))
        except SourceSyntaxError as e:
            resolver.warn(f"Syntax error in imported routes file '{found}' while resolving '{exported}': {e}")
            return ImportOutcome.failed()
        self.files_parsed += 1
        logger.debug("import_parsed", exported=exported, file=str(found), depth=context.depth + 1)

        nested = resolver.child(context.nested(module, found))
        outcome = self._find_export(module, exported, nested)
        if outcome is None:
            resolver.warn(
                f"Export '{exported}' not found in '{found}'. "
                "The file was parsed successfully but the variable is not exported as an array."
            )
            return ImportOutcome.failed()
        if outcome.routes is not None:
            context.cache.put(module_path, exported, list(outcome.routes))
        return outcome

    def _find_export(self, module: Module, exported: str, nested: ExpressionResolver) -> ImportOutcome | None:
        """Locate ``exported`` among the module's top-level exports.

        Returns None when the module has no matching array export.
        """
        local_for_export: dict[str, str] = {}
        for stmt in module.body:
            if isinstance(stmt, ExportNamed) and stmt.source is None:
                for spec in stmt.specifiers:
                    local_for_export[spec.exported] = spec.local

        for stmt in module.body:
            match stmt:
                case VarDecl(exported=True, declarators=declarators):
                    for declarator in declarators:
                        if declarator.name != exported or declarator.init is None:
                            continue
                        init = unwrap(declarator.init)
                        if isinstance(init, ArrayExpr):
                            return ImportOutcome(tuple(nested.resolve_route_array(init)))
                case ExportDefault(expression=expression) if exported == "default" and expression is not None:
                    node = unwrap(expression)
                    if isinstance(node, ArrayExpr):
                        return ImportOutcome(tuple(nested.resolve_route_array(node)))
                    if isinstance(node, Identifier) and node.name in nested.context.local_arrays:
                        local = nested.context.local_arrays[node.name]
                        return ImportOutcome(tuple(nested.resolve_route_array(local)))
                case ExportNamed(source=str(source), specifiers=specifiers):
                    for spec in specifiers:
                        if spec.exported != exported:
                            continue
                        target = resolve_import_path(source, nested.context.base_dir)
                        if target is None:
                            continue
                        return self.resolve(nested, ImportBinding(target, spec.local))
                case _:
                    pass

        local = local_for_export.get(exported)
        if local is not None and local in nested.context.local_arrays:
            return ImportOutcome(tuple(nested.resolve_route_array(nested.context.local_arrays[local])))
        return None

