"""Property-based tests for cycle detection and impact analysis.

Coverage:
- Every reported cycle is closed and follows real navigation edges
- No cycle is reported twice
- Direct and transitive dependents are disjoint
- Witness paths are real, bounded and end at a direct dependent
- Raising max_depth never loses a transitive dependent
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from routeatlas.contracts import Screen
from routeatlas.engine.navigation import analyze_impact, detect_cycles

API = "InvoiceAPI"

# =============================================================================
# Strategies
# =============================================================================


@st.composite
def catalogs(draw: st.DrawFn) -> list[Screen]:
    """Small catalogs with unique ids, random edges and some API dependents."""
    size = draw(st.integers(min_value=1, max_value=7))
    ids = [f"s{i}" for i in range(size)]
    # A few dangling targets keep unknown ids in play
    targets = [*ids, "ghost"]
    screens = []
    for screen_id in ids:
        screens.append(
            Screen(
                id=screen_id,
                next=tuple(draw(st.lists(st.sampled_from(targets), max_size=3, unique=True))),
                depends_on=(f"{API}.get",) if draw(st.booleans()) else (),
                allow_cycles=draw(st.booleans()),
            )
        )
    return screens


def edges(screens: list[Screen]) -> set[tuple[str, str]]:
    return {(s.id, target) for s in screens for target in s.next}


# =============================================================================
# Properties
# =============================================================================


class TestCycleProperties:
    @given(screens=catalogs())
    def test_cycles_are_closed_walks(self, screens: list[Screen]) -> None:
        graph_edges = edges(screens)
        for info in detect_cycles(screens).cycles:
            cycle = info.cycle
            assert cycle[0] == cycle[-1]
            assert len(set(cycle[:-1])) == len(cycle) - 1
            for a, b in zip(cycle, cycle[1:], strict=False):
                assert (a, b) in graph_edges

    @given(screens=catalogs())
    def test_cycles_are_unique(self, screens: list[Screen]) -> None:
        cycles = [info.cycle for info in detect_cycles(screens).cycles]
        assert len(cycles) == len(set(cycles))

    @given(screens=catalogs())
    def test_allowed_iff_member_allows(self, screens: list[Screen]) -> None:
        allows = {s.id for s in screens if s.allow_cycles}
        for info in detect_cycles(screens).cycles:
            assert info.allowed == any(node in allows for node in info.cycle)


class TestImpactProperties:
    @given(screens=catalogs(), depth=st.integers(min_value=1, max_value=5))
    def test_direct_and_transitive_are_disjoint(self, screens: list[Screen], depth: int) -> None:
        result = analyze_impact(screens, API, max_depth=depth)
        direct = {s.id for s in result.direct}
        transitive = {t.screen.id for t in result.transitive}
        assert not direct & transitive
        assert result.total_count == len(direct) + len(transitive)

    @given(screens=catalogs(), depth=st.integers(min_value=1, max_value=5))
    def test_witness_paths(self, screens: list[Screen], depth: int) -> None:
        result = analyze_impact(screens, API, max_depth=depth)
        direct = {s.id for s in result.direct}
        graph_edges = edges(screens)
        for dependent in result.transitive:
            path = dependent.path
            assert path[0] == dependent.screen.id
            assert path[-1] in direct
            assert 1 <= len(path) - 1 <= depth
            for a, b in zip(path, path[1:], strict=False):
                assert (a, b) in graph_edges

    @given(screens=catalogs(), depth=st.integers(min_value=1, max_value=4))
    def test_monotonic_in_depth(self, screens: list[Screen], depth: int) -> None:
        shallow = {t.screen.id for t in analyze_impact(screens, API, max_depth=depth).transitive}
        deep = {t.screen.id for t in analyze_impact(screens, API, max_depth=depth + 1).transitive}
        assert shallow <= deep
