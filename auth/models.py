"""
auth/models.py -- Principals: the actors the guard makes decisions about.

Pattern: Protocol + data classes. The guard only depends on the Principal
protocol; callers may return their own user objects from a lookup function as
long as they expose id, authenticated and has_any_role().

Layer rule: no imports from web/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class Principal(Protocol):
    """An entity that can be authenticated and checked for roles."""

    @property
    def id(self) -> str: ...

    @property
    def authenticated(self) -> bool: ...

    def has_any_role(self, *roles: str) -> bool: ...


@dataclass(frozen=True)
class Anonymous:
    """Fallback principal for requests without a session.

    Never authenticated and holds no roles, so it is denied access to every
    protected resource.
    """

    id: str = "anonymous"

    @property
    def authenticated(self) -> bool:
        return False

    def has_any_role(self, *roles: str) -> bool:
        return False


ANONYMOUS = Anonymous()


@dataclass(frozen=True)
class User:
    """An authenticated principal with a fixed set of role names.

    authenticated defaults to True; set it to False for identities that are
    known but not yet verified (e.g. a pending second factor).
    """

    id: str
    roles: frozenset[str] = field(default_factory=frozenset)
    authenticated: bool = True

    def __post_init__(self) -> None:
        # Accept any iterable of role names; store it immutably.
        object.__setattr__(self, "roles", frozenset(self.roles))

    def has_any_role(self, *roles: str) -> bool:
        # No requested roles -> nothing to match -> False.
        return any(role in self.roles for role in roles)
