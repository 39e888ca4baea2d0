"""Identity Context — the resolved actor behind one request.

Invariants:
    - Identity is frozen: built once per request by the shell, never mutated
    - roles is a set; every authenticated identity holds at least Role.USER
    - is_admin reflects role membership at decision time, nothing cached elsewhere

Design Decisions:
    - Multiple roles are allowed and the most-privileged applicable rule wins
      (policy checks is_admin first wherever admin is a grantor)
"""

from dataclasses import dataclass, field

from mutual_aid.core.domain_types import Role, UserId


@dataclass(frozen=True)
class Identity:
    """Authenticated actor — id, role set, and current approval state."""
    id: UserId
    roles: frozenset[Role] = field(default_factory=lambda: frozenset({Role.USER}))
    is_approved: bool = False

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles


def build_identity(
    user_id: str, role_names: list[str], is_approved: bool,
) -> Identity:
    """Build an Identity from raw role labels, ignoring labels we do not know.

    An identity without any recognized role row is an ordinary user.
    """
    known = {role.value for role in Role}
    roles = {Role(name) for name in role_names if name in known}
    roles.add(Role.USER)
    return Identity(
        id=UserId(user_id), roles=frozenset(roles), is_approved=is_approved,
    )
