"""Closed vocabularies used across subsystem boundaries."""

from enum import StrEnum


class Dialect(StrEnum):
    """Router declaration style a routes file is written in.

    Each variant has exactly one front-end in routeatlas.dialects.
    """

    REACT_ROUTER = "react-router"
    VUE_ROUTER = "vue-router"
    ANGULAR_ROUTER = "angular-router"
    SOLID_ROUTER = "solid-router"
    TANSTACK_ROUTER = "tanstack-router"


class DiagnosticKind(StrEnum):
    """Kind of a non-fatal analysis record."""

    SPREAD = "spread"
    GENERAL = "general"


class SpreadFailure(StrEnum):
    """Why a spread element could not be expanded.

    The value is the stable code; the human-readable message lives in
    SPREAD_FAILURE_MESSAGES so callers can branch on the code alone.
    """

    NOT_FOUND = "not_found"
    NOT_FOUND_NAMING_HINT = "not_found_naming_hint"
    RESOLUTION_FAILED = "resolution_failed"
    CONDITIONAL_UNRESOLVED = "conditional_unresolved"
    LOGICAL_UNRESOLVED = "logical_unresolved"
    FUNCTION_CALL = "function_call"
    UNSUPPORTED_PATTERN = "unsupported_pattern"
    UNSUPPORTED_OPERATOR = "unsupported_operator"
    DEPTH_LIMIT = "depth_limit"


# Placeholders are filled with str.format(name=..., detail=...)
SPREAD_FAILURE_MESSAGES: dict[SpreadFailure, str] = {
    SpreadFailure.NOT_FOUND: "Variable '{name}' not found in local scope or imports",
    SpreadFailure.NOT_FOUND_NAMING_HINT: (
        "Variable '{name}' not found. Note: Only imports with 'route' in the name are tracked for resolution."
    ),
    SpreadFailure.RESOLUTION_FAILED: "Failed to resolve '{name}' - see other warnings for details",
    SpreadFailure.CONDITIONAL_UNRESOLVED: "Could not resolve conditional expression - both branches failed to resolve",
    SpreadFailure.LOGICAL_UNRESOLVED: "Could not resolve logical expression ({detail}) - operands failed to resolve",
    SpreadFailure.FUNCTION_CALL: "Function call results cannot be statically resolved",
    SpreadFailure.UNSUPPORTED_PATTERN: "Unsupported spread pattern: {detail}",
    SpreadFailure.UNSUPPORTED_OPERATOR: "Could not resolve logical expression ({detail}) - operator '{detail}' is not supported",
    SpreadFailure.DEPTH_LIMIT: "Maximum import depth reached while resolving '{name}'",
}
