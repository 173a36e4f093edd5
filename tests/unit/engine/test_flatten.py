"""Tests for route flattening and path-derived identifiers."""

import pytest

from routeatlas.contracts import ComponentRef, RawRouteNode
from routeatlas.engine.flatten import find_screen_id_collisions, flatten_routes, join_path, screen_id, screen_title


def node(path: str | None = None, *children: RawRouteNode, **kwargs: object) -> RawRouteNode:
    return RawRouteNode(path=path, children=children, **kwargs)  # type: ignore[arg-type]


class TestJoinPath:
    """Full path of a child route."""

    @pytest.mark.parametrize(
        ("parent", "own", "expected"),
        [
            ("", "/", "/"),
            ("", "", "/"),
            ("/", "about", "/about"),
            ("", "about", "/about"),
            ("/dashboard", "settings", "/dashboard/settings"),
            ("/dashboard", "", "/dashboard"),
            ("/dashboard", "/absolute", "/absolute"),
            ("/a", "b/", "/a/b"),
            ("/a//", "b", "/a/b"),
        ],
    )
    def test_join(self, parent: str, own: str, expected: str) -> None:
        """Relative paths join, absolute paths stand alone, index paths reuse the parent."""
        assert join_path(parent, own) == expected


class TestScreenId:
    """Dot-joined identifiers."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/", "home"),
            ("", "home"),
            ("/dashboard", "dashboard"),
            ("/posts/:postId/comments/:commentId", "posts.postId.comments.commentId"),
            ("/users/:id?", "users.id"),
            ("/users/:id(\\d+)", "users.id"),
            ("/files/*", "files.catchall"),
            ("/*", "catchall"),
            ("/docs/**", "docs.catchall"),
            ("/docs/*rest", "docs.catchall"),
            ("/search?q=term", "search"),
            ("/guide#install", "guide"),
        ],
    )
    def test_screen_id(self, path: str, expected: str) -> None:
        """Parameters lose their prefix, catch-alls become 'catchall', root is 'home'."""
        assert screen_id(path) == expected


class TestScreenTitle:
    """Display titles."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/", "Home"),
            ("/:id", "Home"),
            ("/settings", "Settings"),
            ("/user/:id/profile-settings", "Profile Settings"),
            ("/my_account", "My Account"),
            ("/posts/:postId", "Posts"),
            ("/files/*", "Files"),
        ],
    )
    def test_screen_title(self, path: str, expected: str) -> None:
        """The last static segment is split on separators and capitalised."""
        assert screen_title(path) == expected


class TestFlatten:
    """Tree walking."""

    def test_index_child_shares_parent_path(self) -> None:
        """A parent, its index child and a sibling child."""
        tree = [node("dashboard", node(""), node("settings"))]
        flat = flatten_routes(tree)
        assert [r.full_path for r in flat] == ["/dashboard", "/dashboard", "/dashboard/settings"]
        assert [r.screen_id for r in flat] == ["dashboard", "dashboard", "dashboard.settings"]
        assert [r.depth for r in flat] == [0, 1, 1]

    def test_pre_order(self) -> None:
        """Parents come before children, siblings keep declaration order."""
        tree = [node("/a", node("x", node("deep"))), node("/b")]
        assert [r.full_path for r in flatten_routes(tree)] == ["/a", "/a/x", "/a/x/deep", "/b"]

    def test_layout_node_passes_through(self) -> None:
        """A pathless node emits nothing but its children still count its depth."""
        tree = [node("/app", node(None, node("inbox")))]
        flat = flatten_routes(tree)
        assert [(r.full_path, r.depth) for r in flat] == [("/app", 0), ("/app/inbox", 2)]

    def test_pure_redirect_is_skipped(self) -> None:
        """A redirect without a component is not a screen."""
        tree = [node("/old", redirect="/new"), node("/new")]
        assert [r.full_path for r in flatten_routes(tree)] == ["/new"]

    def test_redirect_children_join_redirect_path(self) -> None:
        """Children of a pure redirect are still flattened under its path."""
        tree = [node("/legacy", node("page"), redirect="/")]
        assert [r.full_path for r in flatten_routes(tree)] == ["/legacy/page"]

    def test_redirect_with_component_is_kept(self) -> None:
        """A route rendering a component is kept even with a redirect."""
        tree = [node("/home", redirect="/", component=ComponentRef(name="Home"))]
        assert len(flatten_routes(tree)) == 1

    def test_meaningless_node_is_ignored(self) -> None:
        """A node with neither path nor children contributes nothing."""
        assert flatten_routes([node(None, component=ComponentRef(name="X"))]) == []

    def test_flat_route_carries_component_and_name(self) -> None:
        """Component and name come from the source node."""
        component = ComponentRef(name="About", path="/src/About")
        (route,) = flatten_routes([node("/about", component=component, name="about")])
        assert route.component == component
        assert route.name == "about"
        assert route.screen_title == "About"

    def test_component_display_falls_back_to_module_path(self) -> None:
        """A lazy reference without an export name is labelled by its module path."""
        assert ComponentRef(path="/src/pages/Posts", lazy=True).display == "/src/pages/Posts"
        assert ComponentRef(name="About", path="/src/About").display == "About"


class TestCollisions:
    """Distinct paths sharing a screen id."""

    def test_parameter_and_static_segment_collide(self) -> None:
        """``/a/:x`` and ``/a/x`` both map to ``a.x``."""
        flat = flatten_routes([node("/a/:x"), node("/a/x"), node("/b")])
        assert find_screen_id_collisions(flat) == {"a.x": ("/a/:x", "/a/x")}

    def test_same_full_path_is_not_a_collision(self) -> None:
        """An index route repeating its parent's path is fine."""
        flat = flatten_routes([node("/dashboard", node(""))])
        assert find_screen_id_collisions(flat) == {}
