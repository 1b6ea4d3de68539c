"""Per-operation diagnostics records.

Every reconciler operation owns one ``Diagnostics`` instance. Records are
appended in the order failures are encountered and are never truncated; the
collection is handed back to the caller inside the ``OperationResult``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List

CLIENT_ERROR_SUMMARY = "Client Error"


class Severity(str, Enum):
    """Diagnostic severity levels."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single structured error or warning.

    Attributes:
        severity: error or warning
        summary: Short, stable headline (e.g. "Client Error")
        detail: Human-readable explanation naming the failed operation
        kind: Error kind name (RequestBuildError, TransportError, RemoteRejected, DecodeError)
    """

    severity: Severity
    summary: str
    detail: str
    kind: str = ""


@dataclass
class Diagnostics:
    """Ordered, append-only collection of diagnostics for one operation."""

    records: List[Diagnostic] = field(default_factory=list)

    def add_error(self, summary: str, detail: str, kind: str = "") -> None:
        self.records.append(Diagnostic(Severity.ERROR, summary, detail, kind))

    def add_warning(self, summary: str, detail: str, kind: str = "") -> None:
        self.records.append(Diagnostic(Severity.WARNING, summary, detail, kind))

    def add_exception(self, action: str, exc: Exception) -> None:
        """Record an operation failure using the exception class as its kind.

        Args:
            action: What was attempted, e.g. "create tenant"
            exc: The exception raised by the transport or codec
        """
        self.add_error(
            CLIENT_ERROR_SUMMARY,
            f"Unable to {action}, got error: {exc}",
            type(exc).__name__,
        )

    def extend(self, other: "Diagnostics") -> None:
        self.records.extend(other.records)

    def has_error(self) -> bool:
        return any(record.severity is Severity.ERROR for record in self.records)

    def errors(self) -> List[Diagnostic]:
        return [record for record in self.records if record.severity is Severity.ERROR]

    def warnings(self) -> List[Diagnostic]:
        return [record for record in self.records if record.severity is Severity.WARNING]

    def kinds(self) -> List[str]:
        return [record.kind for record in self.records]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)
