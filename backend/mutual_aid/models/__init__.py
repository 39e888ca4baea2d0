"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Profile is keyed by the auth user id; every other row points at a profile

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from mutual_aid.models.profile import Profile  # noqa: F401
from mutual_aid.models.user_role import UserRole  # noqa: F401
from mutual_aid.models.access_token import AccessToken  # noqa: F401
from mutual_aid.models.help_post import HelpPost  # noqa: F401
from mutual_aid.models.grievance import Grievance  # noqa: F401
from mutual_aid.models.support_ticket import SupportTicket  # noqa: F401
from mutual_aid.models.ticket_message import TicketMessage  # noqa: F401
from mutual_aid.models.rating import Rating  # noqa: F401
