"""Caller identity as established by the bearer token layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Tuple

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class CallerIdentity:
    """A verified caller.

    Attributes:
        name: Identity string compared against descriptor owners and user lists
        roles: Role claims carried by the token
    """

    name: str
    roles: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable of roles but keep the instance hashable
        if not isinstance(self.roles, tuple):
            object.__setattr__(self, "roles", tuple(self.roles))

    def has_role(self, role: str) -> bool:
        """Case-insensitive role membership."""
        wanted = role.casefold()
        return any(r.casefold() == wanted for r in self.roles)

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return any(self.has_role(r) for r in roles)

    def is_named(self, name: str) -> bool:
        """Case-insensitive identity comparison."""
        return self.name.casefold() == name.casefold()

    @property
    def is_admin(self) -> bool:
        return is_admin(self)


def is_admin(caller: CallerIdentity) -> bool:
    """The single admin override predicate used by every authorization path."""
    return caller.has_role(ADMIN_ROLE)
