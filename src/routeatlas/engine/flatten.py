"""Route tree flattening and path-derived identifiers.

``flatten_routes`` walks a route tree depth-first, pre-order, and emits one
FlatRoute per surviving node. Identifiers and titles are pure functions of
the full path, so two routes with the same full path always share them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from routeatlas.contracts.routes import FlatRoute, RawRouteNode

CATCHALL = "catchall"
HOME_ID = "home"
HOME_TITLE = "Home"

_REPEATED_SLASHES = re.compile(r"/{2,}")
_PARAM_SUFFIX = re.compile(r"\(.*\)[?*+]?$|[?*+]$")
_WORD_SEPARATORS = re.compile(r"[-_]")


def join_path(parent: str, own: str) -> str:
    """Full path of a child given its parent's full path.

    An absolute own path stands alone; an empty own path reuses the parent's
    path (index routes). Repeated slashes collapse and a trailing slash is
    dropped except for the root.
    """
    if own == "":
        return parent or "/"
    if own.startswith("/"):
        full = own
    elif parent in ("", "/"):
        full = f"/{own}"
    else:
        full = f"{parent}/{own}"
    full = _REPEATED_SLASHES.sub("/", full)
    if full != "/" and full.endswith("/"):
        full = full[:-1]
    return full or "/"


def _strip_query_and_fragment(path: str) -> str:
    for marker in ("?", "#"):
        # ':id?' marks an optional parameter, not a query string
        index = path.find(marker)
        while index != -1 and marker == "?" and _is_optional_marker(path, index):
            index = path.find(marker, index + 1)
        if index != -1:
            path = path[:index]
    return path


def _is_optional_marker(path: str, index: int) -> bool:
    segment_start = path.rfind("/", 0, index) + 1
    return path.startswith(":", segment_start) and (index + 1 == len(path) or path[index + 1] == "/")


def _segments(path: str) -> list[str]:
    return [segment for segment in _strip_query_and_fragment(path).split("/") if segment]


def _is_dynamic(segment: str) -> bool:
    return segment.startswith(":") or segment.startswith("*")


def _param_name(segment: str) -> str:
    name = _PARAM_SUFFIX.sub("", segment[1:])
    return name or segment[1:]


def screen_id(path: str) -> str:
    """Dot-joined identifier for a route path.

    ``/posts/:postId/comments`` -> ``posts.postId.comments``; catch-all
    segments (``*``, ``**``, ``*rest``) become ``catchall``; the root is
    ``home``.

    >>> screen_id("/users/:id/edit")
    'users.id.edit'
    """
    parts: list[str] = []
    for segment in _segments(path):
        if segment.startswith("*"):
            parts.append(CATCHALL)
        elif segment.startswith(":"):
            parts.append(_param_name(segment))
        else:
            parts.append(segment)
    return ".".join(parts) if parts else HOME_ID


def screen_title(path: str) -> str:
    """Display title from the last static segment.

    ``/user/:id/profile-settings`` -> ``Profile Settings``; the root and
    all-dynamic paths are ``Home``.
    """
    static = [segment for segment in _segments(path) if not _is_dynamic(segment)]
    if not static:
        return HOME_TITLE
    words = _WORD_SEPARATORS.split(static[-1])
    return " ".join(word[:1].upper() + word[1:] for word in words)


def flatten_routes(routes: Sequence[RawRouteNode]) -> list[FlatRoute]:
    """Flatten a route forest into ordered flat routes.

    - A node without a path (layout wrapper) emits nothing; its children
      join against the parent's path.
    - A pure redirect (redirect target, no component) emits nothing; its
      children join against the redirect's own path.
    - Depth counts every ancestor in the raw tree.
    """
    result: list[FlatRoute] = []
    _flatten_into(result, routes, parent_path="", depth=0)
    return result


def _flatten_into(result: list[FlatRoute], routes: Iterable[RawRouteNode], *, parent_path: str, depth: int) -> None:
    for node in routes:
        if not node.is_meaningful:
            continue
        if node.path is None:
            _flatten_into(result, node.children, parent_path=parent_path, depth=depth + 1)
            continue
        full_path = join_path(parent_path, node.path)
        if not node.is_pure_redirect:
            result.append(
                FlatRoute(
                    full_path=full_path,
                    screen_id=screen_id(full_path),
                    screen_title=screen_title(full_path),
                    component=node.component,
                    depth=depth,
                    source=node,
                )
            )
        _flatten_into(result, node.children, parent_path=full_path, depth=depth + 1)


def find_screen_id_collisions(routes: Iterable[FlatRoute]) -> dict[str, tuple[str, ...]]:
    """Screen ids shared by more than one distinct full path.

    Routes with the same full path (an index route and its parent) are not
    collisions. Full paths are listed in first-seen order.
    """
    paths_by_id: dict[str, list[str]] = {}
    for route in routes:
        paths = paths_by_id.setdefault(route.screen_id, [])
        if route.full_path not in paths:
            paths.append(route.full_path)
    return {sid: tuple(paths) for sid, paths in paths_by_id.items() if len(paths) > 1}
