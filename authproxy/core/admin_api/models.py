"""Desired/observed state descriptors for AuthProxy entities."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterable, Optional, Tuple, TypeVar

from .diagnostics import Diagnostics

StateT = TypeVar("StateT")


def _as_scopes(scopes: Iterable[str]) -> Tuple[str, ...]:
    # Strings are iterable too; a single scope passed as str is a caller bug.
    if isinstance(scopes, str):
        raise TypeError("scopes must be a sequence of strings, not a string")
    return tuple(scopes)


@dataclass(frozen=True)
class Tenant:
    """Tenant descriptor.

    ``name`` is the external key used in request paths; ``id`` is assigned by
    the AuthProxy API and stays None until a remote call confirms it.
    """

    name: str
    id: Optional[str] = None


@dataclass(frozen=True)
class Role:
    """Role descriptor addressed by the compound key ``(tenant, name)``.

    ``scopes`` keeps the caller's order; it is an ordered sequence, not a set.
    """

    name: str
    tenant: str
    scopes: Tuple[str, ...] = field(default_factory=tuple)
    id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "scopes", _as_scopes(self.scopes))


@dataclass
class OperationResult(Generic[StateT]):
    """Outcome of one reconciler operation.

    Attributes:
        state: Observed-state descriptor after the operation; None once an
            entity has been deleted
        diagnostics: Everything that went wrong while performing the operation
    """

    state: Optional[StateT]
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def ok(self) -> bool:
        return not self.diagnostics.has_error()
