"""Non-fatal analysis records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from routeatlas.contracts.enums import SPREAD_FAILURE_MESSAGES, DiagnosticKind, SpreadFailure


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured record of an analysis gap or a skipped declaration.

    Diagnostics never abort analysis. Spread diagnostics additionally carry
    whether the spread was expanded and, when it was not, a failure code plus
    the rendered reason.
    """

    kind: DiagnosticKind
    message: str
    line: int | None = None
    identifier: str | None = None
    resolved: bool | None = None
    failure: SpreadFailure | None = None
    failure_reason: str | None = None

    @classmethod
    def general(cls, message: str, *, line: int | None = None, identifier: str | None = None) -> Diagnostic:
        return cls(kind=DiagnosticKind.GENERAL, message=message, line=line, identifier=identifier)

    @classmethod
    def spread(
        cls,
        *,
        line: int | None,
        identifier: str | None,
        failure: SpreadFailure | None = None,
        name: str | None = None,
        detail: str | None = None,
        reason: str | None = None,
    ) -> Diagnostic:
        """Build a spread diagnostic.

        With ``failure=None`` the spread was resolved. Otherwise the reason is
        rendered from the failure vocabulary unless an explicit ``reason`` is
        given (import failures carry file-specific text).
        """
        message = f"Spread operator detected at line {line}" if line is not None else "Spread operator detected"
        if failure is None:
            return cls(kind=DiagnosticKind.SPREAD, message=message, line=line, identifier=identifier, resolved=True)
        if reason is None:
            reason = SPREAD_FAILURE_MESSAGES[failure].format(name=name or identifier or "", detail=detail or "")
        return cls(
            kind=DiagnosticKind.SPREAD,
            message=message,
            line=line,
            identifier=identifier,
            resolved=False,
            failure=failure,
            failure_reason=reason,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.kind.value, "message": self.message}
        if self.line is not None:
            data["line"] = self.line
        if self.identifier is not None:
            data["variableName"] = self.identifier
        if self.kind is DiagnosticKind.SPREAD:
            data["resolved"] = self.resolved
            if self.failure_reason is not None:
                data["resolutionFailureReason"] = self.failure_reason
        return data
