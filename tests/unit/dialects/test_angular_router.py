"""Tests for the Angular Router front-end."""

from routeatlas.contracts import Dialect, ParseResult
from routeatlas.dialects.angular_router import NO_ROUTES_MESSAGE, detect
from routeatlas.engine.flatten import flatten_routes
from tests.conftest import messages, parse_source, route_paths

APP_ROUTING = """
    import { NgModule } from '@angular/core'
    import { RouterModule, Routes } from '@angular/router'
    import { HomeComponent } from './home/home.component'

    const adminRoutes: Routes = [
      { path: 'users', component: UsersComponent },
    ]

    const routes: Routes = [
      { path: '', component: HomeComponent },
      { path: 'admin', children: adminRoutes },
      {
        path: 'reports',
        loadComponent: () => import('./reports/reports.component').then(m => m.ReportsComponent),
      },
      { path: 'orders', loadChildren: () => import('./orders/orders.routes').then(m => m.ORDER_ROUTES) },
      { path: 'old', redirectTo: '', pathMatch: 'full' },
      { path: '**', component: NotFoundComponent, canActivate: [AuthGuard] },
    ]

    @NgModule({
      imports: [RouterModule.forRoot(routes)],
      exports: [RouterModule],
    })
    export class AppRoutingModule {}
"""

FILE_NAME = "/project/src/app/app-routing.module.ts"


def parse(source: str) -> ParseResult:
    return parse_source(source, Dialect.ANGULAR_ROUTER, file_name=FILE_NAME)


class TestRoutingModule:
    """NgModule with RouterModule.forRoot."""

    def test_root_array_parsed_once(self) -> None:
        """The const and the forRoot argument are the same array."""
        assert route_paths(parse(APP_ROUTING)) == ["", "admin", "reports", "orders", "old", "**"]

    def test_composed_array_is_not_a_root(self) -> None:
        """``adminRoutes`` only appears as children of ``admin``."""
        admin = parse(APP_ROUTING).routes[1]
        assert [child.path for child in admin.children] == ["users"]

    def test_component_resolves_through_imports(self) -> None:
        """Imported components carry their module path."""
        home = parse(APP_ROUTING).routes[0]
        assert home.component is not None
        assert home.component.name == "HomeComponent"
        assert home.component.path == "/project/src/app/home/home.component"

    def test_load_component(self) -> None:
        """``loadComponent`` with ``.then`` names the picked export."""
        reports = parse(APP_ROUTING).routes[2]
        assert reports.component is not None
        assert reports.component.name == "ReportsComponent"
        assert reports.component.path == "/project/src/app/reports/reports.component"
        assert reports.component.lazy is True
        assert reports.component.lazy_children is False

    def test_load_children(self) -> None:
        """``loadChildren`` marks a lazily loaded child route module."""
        orders = parse(APP_ROUTING).routes[3]
        assert orders.component is not None
        assert orders.component.lazy_children is True
        assert orders.component.path == "/project/src/app/orders/orders.routes"

    def test_redirect_to(self) -> None:
        """``redirectTo`` is kept and pure redirects are not screens."""
        result = parse(APP_ROUTING)
        assert result.routes[4].redirect == ""
        assert "/old" not in [r.full_path for r in flatten_routes(result.routes)]

    def test_function_redirect_to_is_still_a_redirect(self) -> None:
        """A function ``redirectTo`` gives an empty target, so the route is not a screen."""
        result = parse(
            """
            import { Routes } from '@angular/router'

            export const routes: Routes = [
              { path: 'home', component: HomeComponent },
              { path: 'legacy', redirectTo: () => '/home' },
            ]
            """
        )
        assert result.routes[1].redirect == ""
        assert [r.full_path for r in flatten_routes(result.routes)] == ["/home"]

    def test_flattened_ids(self) -> None:
        """Wildcard and nested routes get dotted ids."""
        ids = [r.screen_id for r in flatten_routes(parse(APP_ROUTING).routes)]
        assert ids == ["home", "admin", "admin.users", "reports", "orders", "catchall"]


class TestRootDiscovery:
    """Other places routes are handed to the router."""

    def test_provide_router_in_bootstrap(self) -> None:
        """``provideRouter([...])`` inside an expression statement is a root."""
        result = parse(
            """
            bootstrapApplication(AppComponent, {
              providers: [provideRouter([{ path: 'standalone', component: StandaloneComponent }])],
            })
            """
        )
        assert route_paths(result) == ["standalone"]

    def test_for_child_in_declaration(self) -> None:
        """``RouterModule.forChild`` in a const initializer is a root."""
        result = parse("export const featureRouting = RouterModule.forChild([{ path: 'feature' }])\n")
        assert route_paths(result) == ["feature"]

    def test_routes_type_annotation(self) -> None:
        """An array typed ``Routes`` is a root even without 'route' in its name."""
        result = parse("export const APP: Routes = [{ path: 'typed' }]\n")
        assert route_paths(result) == ["typed"]

    def test_unrelated_arrays_are_ignored(self) -> None:
        """Other arrays are not route roots."""
        result = parse("export const sizes = [{ path: 'nope' }]\n")
        assert result.routes == ()
        assert messages(result) == [NO_ROUTES_MESSAGE]

    def test_load_component_without_import(self) -> None:
        """A loader that is not a dynamic import cannot be followed."""
        result = parse("export const routes: Routes = [{ path: 'x', loadComponent: loader }]\n")
        assert result.routes[0].component is None
        assert messages(result) == [
            "Unrecognized loadComponent pattern (Identifier) at line 1. Expected arrow function with import().then()."
        ]


class TestDetection:
    """Textual markers."""

    def test_markers(self) -> None:
        assert detect("import { Routes } from '@angular/router'") is True
        assert detect("RouterModule.forChild(routes)") is True
        assert detect("const routes: Routes = []") is True
        assert detect("const routes = []") is False
