"""Resource Snapshot — the core's read-only view of a stored record.

Invariants:
    - Snapshots are frozen; the core never writes back to them
    - owner_id is the creating user (rater_id for ratings, user_id elsewhere)
    - parent is set only for TicketMessage (its SupportTicket)

Design Decisions:
    - One generic snapshot instead of a class per table: the policy only needs
      ownership, assignment, status and a handful of domain fields
"""

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class ResourceSnapshot:
    id: str | None
    owner_id: str | None
    status: str | None = None
    assignee_id: str | None = None
    parent: "ResourceSnapshot | None" = None
    fields: Mapping[str, Any] = field(default_factory=dict)

    def value(self, name: str) -> Any:
        return self.fields.get(name)
