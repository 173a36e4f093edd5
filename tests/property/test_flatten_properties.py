"""Property-based tests for path joining, screen ids and flattening.

Coverage:
- join_path always yields a normalised absolute path
- screen_id is insensitive to slash noise and never leaks path syntax
- flatten_routes emits one route per node of a plain tree, pre-order,
  with depth equal to the number of ancestors
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from routeatlas.contracts import RawRouteNode
from routeatlas.engine.flatten import flatten_routes, join_path, screen_id

# =============================================================================
# Strategies
# =============================================================================

static_segment = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-", min_size=1, max_size=8)
param_segment = st.builds(
    lambda name, optional: f":{name}{'?' if optional else ''}",
    st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=6),
    st.booleans(),
)
catchall_segment = st.sampled_from(["*", "**", "*rest"])
segment = st.one_of(static_segment, param_segment)
segments = st.lists(segment, max_size=6)


def build_path(parts: list[str]) -> str:
    return "/" + "/".join(parts)


@st.composite
def route_trees(draw: st.DrawFn) -> list[RawRouteNode]:
    """Forests of relative, static-path nodes without redirects."""
    tree = st.recursive(
        st.builds(lambda path: RawRouteNode(path=path), static_segment),
        lambda children: st.builds(
            lambda path, kids: RawRouteNode(path=path, children=tuple(kids)),
            static_segment,
            st.lists(children, max_size=3),
        ),
        max_leaves=20,
    )
    return draw(st.lists(tree, min_size=1, max_size=4))


def count_nodes(routes: tuple[RawRouteNode, ...] | list[RawRouteNode]) -> int:
    return sum(1 + count_nodes(route.children) for route in routes)


# =============================================================================
# Properties
# =============================================================================


class TestJoinPathProperties:
    @given(parent=segments, own=st.lists(static_segment, max_size=3), trailing=st.booleans())
    def test_result_is_normalised(self, parent: list[str], own: list[str], trailing: bool) -> None:
        """Absolute, no empty segments, no trailing slash except the root."""
        own_path = "/".join(own) + ("/" if trailing and own else "")
        full = join_path(build_path(parent) if parent else "", own_path)
        assert full.startswith("/")
        assert "//" not in full
        assert full == "/" or not full.endswith("/")

    @given(parent=st.lists(static_segment, min_size=1, max_size=4))
    def test_empty_child_reuses_parent(self, parent: list[str]) -> None:
        path = build_path(parent)
        assert join_path(path, "") == path


class TestScreenIdProperties:
    @given(parts=segments)
    def test_slash_noise_is_ignored(self, parts: list[str]) -> None:
        clean = build_path(parts)
        noisy = "//" + "//".join(parts) + "/"
        assert screen_id(noisy) == screen_id(clean)

    @given(parts=st.lists(st.one_of(segment, catchall_segment), max_size=6))
    def test_no_path_syntax_in_id(self, parts: list[str]) -> None:
        sid = screen_id(build_path(parts))
        assert sid
        assert "/" not in sid
        assert ":" not in sid
        assert "?" not in sid
        assert "*" not in sid

    @given(parts=st.lists(segment, min_size=1, max_size=6))
    def test_one_id_part_per_segment(self, parts: list[str]) -> None:
        assert len(screen_id(build_path(parts)).split(".")) == len(parts)


class TestFlattenProperties:
    @given(forest=route_trees())
    def test_one_route_per_node(self, forest: list[RawRouteNode]) -> None:
        assert len(flatten_routes(forest)) == count_nodes(forest)

    @given(forest=route_trees())
    def test_depth_matches_path_length(self, forest: list[RawRouteNode]) -> None:
        """Relative paths add exactly one segment per level."""
        for route in flatten_routes(forest):
            assert len(route.full_path.strip("/").split("/")) == route.depth + 1

    @given(forest=route_trees())
    def test_pre_order(self, forest: list[RawRouteNode]) -> None:
        """Every non-root route directly follows its parent or a sibling subtree."""
        flat = flatten_routes(forest)
        for index, route in enumerate(flat):
            if route.depth == 0:
                continue
            parent_path = route.full_path.rsplit("/", 1)[0]
            earlier = [r for r in flat[:index] if r.depth == route.depth - 1]
            assert earlier[-1].full_path == parent_path

    @given(forest=route_trees())
    def test_ids_follow_paths(self, forest: list[RawRouteNode]) -> None:
        for route in flatten_routes(forest):
            assert route.screen_id == route.full_path.strip("/").replace("/", ".")
