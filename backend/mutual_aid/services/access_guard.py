"""Access Guard — runs the core policy and raises the matching MutualAidError on denial.

Invariants:
    - Every denial is logged once, here, with user/resource context
    - Allowed decisions are returned unchanged for callers that care about the reason
"""

import logging
from typing import NoReturn

from mutual_aid.core.access_policy import AccessDecision, evaluate
from mutual_aid.core.domain_types import Action, ResourceType
from mutual_aid.core.errors import ErrorContext, error_from_rejection
from mutual_aid.core.identity import Identity
from mutual_aid.core.rejection import Rejection
from mutual_aid.core.resource import ResourceSnapshot
from mutual_aid.services.rows import RESOURCE_LABELS

logger = logging.getLogger(__name__)


def authorize(
    identity: Identity | None,
    resource_type: ResourceType,
    resource: ResourceSnapshot | None,
    action: Action,
    context: ErrorContext | None = None,
) -> AccessDecision:
    """Evaluate the policy; raise on denial."""
    decision = evaluate(identity, resource_type, resource, action)
    rejection = decision.to_rejection()
    if rejection is not None:
        ctx = context or ErrorContext(
            resource_type=RESOURCE_LABELS[resource_type],
            resource_id=resource.id if resource is not None else None,
        )
        raise_rejection(rejection, identity, ctx, action=action)
    return decision


def raise_rejection(
    rejection: Rejection,
    identity: Identity | None,
    context: ErrorContext,
    action: Action | None = None,
) -> NoReturn:
    context.user_id = identity.id if identity is not None else None
    logger.info(
        f"Rejected {action.value if action else 'request'}: {rejection.code}",
        extra={
            "user_id": context.user_id,
            "resource_type": context.resource_type,
            "resource_id": context.resource_id,
            "error_code": rejection.code,
        },
    )
    raise error_from_rejection(rejection, context)

