from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .roles import Role


@dataclass(frozen=True)
class Principal:
    """The authenticated caller as seen by permission checks.

    Built by the host's authentication layer and passed explicitly into each
    evaluation; nothing here reads ambient request state.
    """

    user_id: int | None
    roles: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_claims(cls, user_id: int | None, roles: Iterable[str]) -> "Principal":
        return cls(user_id=user_id, roles=tuple(roles))

    def is_in_role(self, role: Role | str) -> bool:
        name = role.value if isinstance(role, Role) else role
        return name in self.roles


ANONYMOUS = Principal(user_id=None)
