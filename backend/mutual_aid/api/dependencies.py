"""Request Dependencies — identity resolution for route handlers.

Invariants:
    - get_identity raises UnauthenticatedError (401) before any policy check
    - get_optional_identity never raises for a missing/unknown credential
    - Identity shares the request's DB session (get_db is cached per request)
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.core.errors import UnauthenticatedError
from mutual_aid.core.identity import Identity
from mutual_aid.infrastructure.database import get_db
from mutual_aid.services.identity_resolver import resolve_identity

_bearer = HTTPBearer(auto_error=False)


async def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db: AsyncSession = Depends(get_db),
) -> Identity | None:
    if credentials is None or not credentials.credentials:
        return None
    return await resolve_identity(db, credentials.credentials)


async def get_identity(
    identity: Identity | None = Depends(get_optional_identity),
) -> Identity:
    if identity is None:
        raise UnauthenticatedError()
    return identity
