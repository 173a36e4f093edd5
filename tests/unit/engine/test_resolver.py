"""Tests for static expression resolution of route arrays."""

from pathlib import Path

from routeatlas.contracts import DiagnosticKind, RawRouteNode, SpreadFailure
from routeatlas.engine.resolver import ExpressionResolver, ImportBinding, ImportCache, Unresolved
from routeatlas.parsing.syntax import Literal, Template
from tests.conftest import make_resolver


def resolve(source: str, name: str = "routes") -> tuple[list[RawRouteNode], ExpressionResolver]:
    resolver = make_resolver(source)
    result = resolver.resolve_identifier(name)
    assert not isinstance(result, Unresolved), result
    return result, resolver


def paths(routes: list[RawRouteNode]) -> list[str | None]:
    return [route.path for route in routes]


class TestArrays:
    """Array literals and local spreads."""

    def test_plain_array(self) -> None:
        """Object elements become route nodes in order."""
        routes, resolver = resolve("const routes = [{ path: '/a' }, { path: '/b' }]")
        assert paths(routes) == ["/a", "/b"]
        assert resolver.diagnostics == []

    def test_local_spread_is_expanded_in_place(self) -> None:
        """A spread of a local array is replaced by its elements."""
        routes, resolver = resolve(
            """
            const base = [{ path: '/a' }]
            const routes = [{ path: '/first' }, ...base, { path: '/b' }]
            """
        )
        assert paths(routes) == ["/first", "/a", "/b"]
        (diagnostic,) = resolver.diagnostics
        assert diagnostic.kind is DiagnosticKind.SPREAD
        assert diagnostic.resolved is True
        assert diagnostic.identifier == "base"

    def test_type_assertion_is_transparent(self) -> None:
        """``...(x as T[])`` resolves like ``...x``."""
        routes, _ = resolve(
            """
            const extraRoutes = [{ path: '/x' }]
            const routes = [...(extraRoutes as RouteObject[])]
            """
        )
        assert paths(routes) == ["/x"]

    def test_non_object_element_is_reported(self) -> None:
        """Elements that are not objects are skipped with a diagnostic."""
        routes, resolver = resolve("const routes = [Home, { path: '/' }]")
        assert paths(routes) == ["/"]
        assert resolver.diagnostics[0].message.startswith("Non-object route element (Identifier)")

    def test_self_reference_is_diagnosed(self) -> None:
        """An array spreading itself stops with a circular-reference diagnostic."""
        routes, resolver = resolve("const routes = [{ path: '/a' }, ...routes]")
        assert paths(routes) == ["/a"]
        assert any("Circular reference" in d.message for d in resolver.diagnostics)
        spread = [d for d in resolver.diagnostics if d.kind is DiagnosticKind.SPREAD]
        assert spread[0].failure is SpreadFailure.RESOLUTION_FAILED


class TestUnresolvableSpreads:
    """Spreads that cannot be expanded are dropped, siblings survive."""

    def test_function_call_spread(self) -> None:
        """A call result is dropped with the function-call reason."""
        routes, resolver = resolve("const routes = [{ path: '/a' }, ...getRoutes(), { path: '/b' }]")
        assert paths(routes) == ["/a", "/b"]
        (diagnostic,) = resolver.diagnostics
        assert diagnostic.resolved is False
        assert diagnostic.failure is SpreadFailure.FUNCTION_CALL
        assert diagnostic.failure_reason == "Function call results cannot be statically resolved"

    def test_unknown_identifier_without_route_in_name(self) -> None:
        """Unknown names without 'route' get the naming hint."""
        _, resolver = resolve("const routes = [...extras]")
        (diagnostic,) = resolver.diagnostics
        assert diagnostic.failure is SpreadFailure.NOT_FOUND_NAMING_HINT
        assert diagnostic.failure_reason == (
            "Variable 'extras' not found. Note: Only imports with 'route' in the name are tracked for resolution."
        )

    def test_unknown_route_identifier(self) -> None:
        """Unknown route-named identifiers are simply not found."""
        _, resolver = resolve("const routes = [...moreRoutes]")
        (diagnostic,) = resolver.diagnostics
        assert diagnostic.failure is SpreadFailure.NOT_FOUND
        assert diagnostic.failure_reason == "Variable 'moreRoutes' not found in local scope or imports"

    def test_member_expression_is_unsupported(self) -> None:
        """Member access is outside the resolvable grammar."""
        _, resolver = resolve("const routes = [...config.routes]")
        (diagnostic,) = resolver.diagnostics
        assert diagnostic.failure is SpreadFailure.UNSUPPORTED_PATTERN
        assert diagnostic.failure_reason == "Unsupported spread pattern: MemberExpression"

    def test_spread_diagnostic_serialization(self) -> None:
        """Unresolved spread diagnostics serialize their reason."""
        _, resolver = resolve("const routes = [...getRoutes()]")
        data = resolver.diagnostics[0].to_dict()
        assert data["type"] == "spread"
        assert data["resolved"] is False
        assert data["resolutionFailureReason"] == "Function call results cannot be statically resolved"
        assert data["line"] == 1


class TestConditionalAndLogical:
    """Conditional and logical spread arguments."""

    SOURCE = """
        const adminRoutes = [{ path: '/admin' }]
        const guestRoutes = [{ path: '/login' }]
        const routes = [{ path: '/' }, ...(EXPR)]
    """

    def resolve_expr(self, expr: str) -> tuple[list[RawRouteNode], ExpressionResolver]:
        return resolve(self.SOURCE.replace("EXPR", expr))

    def test_conditional_includes_both_branches(self) -> None:
        """Both branches of a ternary contribute."""
        routes, _ = self.resolve_expr("isAdmin ? adminRoutes : guestRoutes")
        assert paths(routes) == ["/", "/admin", "/login"]

    def test_conditional_with_one_failing_branch(self) -> None:
        """A failing branch is skipped with a diagnostic; the other branch still contributes."""
        routes, resolver = self.resolve_expr("isAdmin ? adminRoutes : load()")
        assert paths(routes) == ["/", "/admin"]
        general = [d for d in resolver.diagnostics if d.kind is DiagnosticKind.GENERAL]
        (skipped,) = general
        assert skipped.message == (
            "Skipped unresolvable branch (CallExpression) at line 4: "
            "Function call results cannot be statically resolved"
        )
        assert skipped.line == 4
        (spread,) = [d for d in resolver.diagnostics if d.kind is DiagnosticKind.SPREAD]
        assert spread.resolved is True

    def test_or_with_one_failing_operand(self) -> None:
        """An unresolvable ``||`` operand is reported, not silently dropped."""
        routes, resolver = self.resolve_expr("adminRoutes || extras")
        assert paths(routes) == ["/", "/admin"]
        general = [d for d in resolver.diagnostics if d.kind is DiagnosticKind.GENERAL]
        assert len(general) == 1
        assert general[0].message.startswith("Skipped unresolvable branch (Identifier)")
        assert "Variable 'extras' not found" in general[0].message

    def test_conditional_with_both_branches_failing_has_no_branch_warnings(self) -> None:
        """When nothing resolves the spread diagnostic alone records the gap."""
        _, resolver = self.resolve_expr("isAdmin ? load() : other()")
        assert [d.kind for d in resolver.diagnostics] == [DiagnosticKind.SPREAD]

    def test_conditional_with_both_branches_failing(self) -> None:
        """Nothing resolves, so the spread is dropped."""
        routes, resolver = self.resolve_expr("isAdmin ? load() : other()")
        assert paths(routes) == ["/"]
        assert resolver.diagnostics[0].failure is SpreadFailure.CONDITIONAL_UNRESOLVED

    def test_and_uses_right_operand(self) -> None:
        """``guard && routes`` resolves the right operand only."""
        routes, _ = self.resolve_expr("isAdmin && adminRoutes")
        assert paths(routes) == ["/", "/admin"]

    def test_and_ignores_left_operand(self) -> None:
        """A route array on the left of ``&&`` is not considered."""
        routes, resolver = self.resolve_expr("adminRoutes && enabled")
        assert paths(routes) == ["/"]
        diagnostic = resolver.diagnostics[0]
        assert diagnostic.failure is SpreadFailure.LOGICAL_UNRESOLVED
        assert diagnostic.failure_reason == "Could not resolve logical expression (&&) - operands failed to resolve"

    def test_or_merges_both_operands(self) -> None:
        """Both ``||`` operands contribute."""
        routes, _ = self.resolve_expr("adminRoutes || guestRoutes")
        assert paths(routes) == ["/", "/admin", "/login"]

    def test_nullish_is_unsupported(self) -> None:
        """``??`` is reported as an unsupported operator."""
        routes, resolver = self.resolve_expr("adminRoutes ?? guestRoutes")
        assert paths(routes) == ["/"]
        general = [d for d in resolver.diagnostics if d.kind is DiagnosticKind.GENERAL]
        assert "Unsupported logical operator '??'" in general[0].message
        spread = [d for d in resolver.diagnostics if d.kind is DiagnosticKind.SPREAD]
        assert spread[0].failure is SpreadFailure.UNSUPPORTED_OPERATOR


class TestScope:
    """Import bindings and component references."""

    SOURCE = """
        import Home from './pages/Home'
        import { adminRoutes, Settings } from './admin'
        import type { Meta } from './meta'
        import * as UI from '@acme/ui'
        const routes = []
    """

    def test_route_imports_only_track_route_names(self) -> None:
        """Only imports with 'route' in the local name are chased."""
        resolver = make_resolver(self.SOURCE)
        assert resolver.context.route_imports == {
            "adminRoutes": ImportBinding(Path("/project/src/admin"), "adminRoutes"),
        }

    def test_component_ref_for_default_import(self) -> None:
        """Component identifiers resolve to their import path."""
        resolver = make_resolver(self.SOURCE)
        ref = resolver.component_ref("Home")
        assert ref.name == "Home"
        assert ref.path == "/project/src/pages/Home"
        assert ref.lazy is False

    def test_namespaced_component_uses_bare_specifier(self) -> None:
        """Package imports keep their specifier; namespaces resolve by their head."""
        ref = make_resolver(self.SOURCE).component_ref("UI.Page")
        assert ref.path == "@acme/ui"

    def test_type_only_imports_are_ignored(self) -> None:
        """``import type`` contributes nothing."""
        assert "Meta" not in make_resolver(self.SOURCE).context.component_imports

    def test_unknown_component_has_no_path(self) -> None:
        """Locally defined components keep only their name."""
        ref = make_resolver(self.SOURCE).component_ref("Inline")
        assert ref.path is None

    def test_lazy_ref_is_rebased(self) -> None:
        """Relative dynamic imports become absolute; package specifiers are kept."""
        resolver = make_resolver(self.SOURCE)
        assert resolver.lazy_ref("../views/About").path == "/project/views/About"
        assert resolver.lazy_ref("@/views/About", "About").path == "@/views/About"
        assert resolver.lazy_ref("./x").lazy is True


class TestResolverBasics:
    """Literal evaluation and resolver plumbing."""

    def test_literal_and_template(self) -> None:
        """Literals and plain templates have a static value."""
        resolver = make_resolver("const routes = []")
        assert resolver.static_value(Literal("a", 1)) == "a"
        assert resolver.static_value(Literal(None, 1)) is None
        assert resolver.static_value(Template("/about", 1)) == "/about"
        unresolved = resolver.static_value(Template(None, 1))
        assert isinstance(unresolved, Unresolved)
        assert unresolved.failure is SpreadFailure.UNSUPPORTED_PATTERN

    def test_cache_is_shared_with_child(self) -> None:
        """Child resolvers share diagnostics and the import resolver."""
        cache = ImportCache()
        resolver = make_resolver("const routes = []", cache=cache)
        child = resolver.child(resolver.context)
        child.warn("note")
        assert resolver.diagnostics[-1].message == "note"
        assert child.imports is resolver.imports
        assert child.context.cache is cache
