"""Navigation graph over catalog screens: cycle detection and impact analysis.

Nodes are screen ids; an edge A -> B exists iff ``B in A.next``. Edges to
ids that are not in the catalog are kept as dangling nodes: they have no
outgoing edges, so they can never close a cycle or relay an impact path.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import networkx as nx
import structlog

from routeatlas.contracts.screens import Screen

logger = structlog.get_logger(__name__)

DEFAULT_IMPACT_DEPTH = 3


@dataclass(frozen=True, slots=True)
class CycleInfo:
    """One simple cycle, closed by repeating its start (``("A", "B", "A")``)."""

    cycle: tuple[str, ...]
    allowed: bool

    def to_dict(self) -> dict[str, Any]:
        return {"cycle": list(self.cycle), "allowed": self.allowed}


@dataclass(frozen=True, slots=True)
class CycleDetectionResult:
    cycles: tuple[CycleInfo, ...]

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)

    @property
    def disallowed_cycles(self) -> tuple[CycleInfo, ...]:
        return tuple(c for c in self.cycles if not c.allowed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasCycles": self.has_cycles,
            "cycles": [c.to_dict() for c in self.cycles],
            "disallowedCycles": [c.to_dict() for c in self.disallowed_cycles],
        }


@dataclass(frozen=True, slots=True)
class TransitiveDependent:
    """A screen that can navigate to a direct dependent; ``path`` is one shortest witness."""

    screen: Screen
    path: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ImpactResult:
    api: str
    direct: tuple[Screen, ...]
    transitive: tuple[TransitiveDependent, ...]

    @property
    def total_count(self) -> int:
        return len(self.direct) + len(self.transitive)

    def to_dict(self) -> dict[str, Any]:
        return {
            "api": self.api,
            "summary": {
                "directCount": len(self.direct),
                "transitiveCount": len(self.transitive),
                "totalCount": self.total_count,
            },
            "direct": [_screen_summary(s) for s in self.direct],
            "transitive": [{**_screen_summary(t.screen), "path": list(t.path)} for t in self.transitive],
        }


def _screen_summary(screen: Screen) -> dict[str, Any]:
    return {"id": screen.id, "title": screen.title, "route": screen.route, "owner": list(screen.owner)}


class NavigationGraph:
    """Directed navigation graph built from catalog screens.

    Wraps a NetworkX DiGraph; node order follows first appearance in the
    catalog (screens first, then dangling targets), which makes every result
    deterministic.
    """

    def __init__(self, screens: Sequence[Screen]) -> None:
        self._screens: dict[str, Screen] = {}
        self._graph: nx.DiGraph = nx.DiGraph()
        for screen in screens:
            self._screens.setdefault(screen.id, screen)
            self._graph.add_node(screen.id)
        for screen in screens:
            for target in screen.next:
                self._graph.add_edge(screen.id, target)
        self._order = {node: index for index, node in enumerate(self._graph.nodes)}

    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    def screen(self, screen_id: str) -> Screen | None:
        return self._screens.get(screen_id)

    def dangling_targets(self) -> list[str]:
        """Ids referenced in ``next`` that are not catalog screens."""
        return [node for node in self._graph.nodes if node not in self._screens]

    # -- cycles --------------------------------------------------------------

    def detect_cycles(self) -> CycleDetectionResult:
        """Enumerate every simple cycle, self-loops included.

        Each cycle starts at its member that appears first in the catalog and
        cycles are ordered by those positions.
        """
        found: list[tuple[str, ...]] = []
        for members in nx.simple_cycles(self._graph):
            start = min(range(len(members)), key=lambda k: self._order[members[k]])
            rotated = members[start:] + members[:start]
            found.append((*rotated, rotated[0]))
        found.sort(key=lambda cycle: [self._order[node] for node in cycle])

        cycles = tuple(CycleInfo(cycle, self._cycle_allowed(cycle)) for cycle in found)
        logger.debug("cycles_detected", total=len(cycles), disallowed=sum(1 for c in cycles if not c.allowed))
        return CycleDetectionResult(cycles)

    def _cycle_allowed(self, cycle: tuple[str, ...]) -> bool:
        for node in cycle[:-1]:
            screen = self._screens.get(node)
            if screen is not None and screen.allow_cycles:
                return True
        return False

    # -- impact --------------------------------------------------------------

    def analyze_impact(self, api: str, *, max_depth: int = DEFAULT_IMPACT_DEPTH) -> ImpactResult:
        """Screens affected by a change to dependency ``api``.

        Direct dependents declare a matching dependency. Transitive dependents
        are the other screens with a navigation path of at most ``max_depth``
        edges to a direct dependent; screens further away are not reported.
        """
        if max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {max_depth}")

        direct = [s for s in self._screens.values() if any(matches_dependency(dep, api) for dep in s.depends_on)]
        direct_ids = {s.id for s in direct}

        transitive: list[TransitiveDependent] = []
        for screen in self._screens.values():
            if screen.id in direct_ids:
                continue
            path = self._witness_path(screen.id, direct_ids, max_depth)
            if path is not None:
                transitive.append(TransitiveDependent(screen, path))

        logger.debug("impact_analyzed", api=api, direct=len(direct), transitive=len(transitive), max_depth=max_depth)
        return ImpactResult(api, tuple(direct), tuple(transitive))

    def _witness_path(self, source: str, targets: set[str], max_depth: int) -> tuple[str, ...] | None:
        # Paths come back in breadth-first discovery order, so the first
        # target seen is at minimal distance
        paths = nx.single_source_shortest_path(self._graph, source, cutoff=max_depth)
        for node, path in paths.items():
            if node != source and node in targets:
                return tuple(path)
        return None


def matches_dependency(dependency: str, api: str) -> bool:
    """Exact match, or one name extends the other by a ``.``-separated suffix.

    >>> matches_dependency("InvoiceAPI.getDetail", "InvoiceAPI")
    True
    >>> matches_dependency("InvoiceAPIv2", "InvoiceAPI")
    False
    """
    return dependency == api or dependency.startswith(f"{api}.") or api.startswith(f"{dependency}.")


def detect_cycles(screens: Sequence[Screen]) -> CycleDetectionResult:
    return NavigationGraph(screens).detect_cycles()


def analyze_impact(screens: Sequence[Screen], api: str, *, max_depth: int = DEFAULT_IMPACT_DEPTH) -> ImpactResult:
    return NavigationGraph(screens).analyze_impact(api, max_depth=max_depth)


# -- reporting ---------------------------------------------------------------


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def cycle_summary(result: CycleDetectionResult) -> str:
    """One-line summary of a cycle detection result."""
    if not result.has_cycles:
        return "No circular navigation detected"
    total = len(result.cycles)
    disallowed = len(result.disallowed_cycles)
    allowed = total - disallowed
    if disallowed == 0:
        return f"{_plural(total, 'circular navigation')} detected (all allowed)"
    if allowed == 0:
        return f"{_plural(total, 'circular navigation')} detected"
    return f"{_plural(total, 'circular navigation')} detected ({disallowed} not allowed, {allowed} allowed)"


def format_cycles(cycles: Sequence[CycleInfo]) -> str:
    lines = []
    for index, info in enumerate(cycles, start=1):
        suffix = " (allowed)" if info.allowed else ""
        lines.append(f"  Cycle {index}{suffix}: {' → '.join(info.cycle)}")
    return "\n".join(lines)


def format_impact_text(result: ImpactResult) -> str:
    lines = [f"Impact Analysis: {result.api}", ""]
    if result.direct:
        lines.append(f"Direct ({_plural(len(result.direct), 'screen')}):")
        for screen in result.direct:
            owner = f" [{', '.join(screen.owner)}]" if screen.owner else ""
            lines.append(f"  - {screen.id}  {screen.route or ''}{owner}".rstrip())
        lines.append("")
    if result.transitive:
        lines.append(f"Transitive ({_plural(len(result.transitive), 'screen')}):")
        for dependent in result.transitive:
            lines.append(f"  - {' -> '.join(dependent.path)}")
        lines.append("")
    if result.total_count == 0:
        lines.append("No screens depend on this API.")
    else:
        lines.append(f"Total: {_plural(result.total_count, 'screen')} affected")
    return "\n".join(lines)


def format_impact_json(result: ImpactResult) -> str:
    return json.dumps(result.to_dict(), indent=2)
