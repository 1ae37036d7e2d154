from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from internship.core.config import settings
from internship.core.exceptions import UnauthorizedError
from internship.core.logging_config import logger, set_principal
from internship.core.security import Principal, principal_from_token

# auto_error=False so a missing header surfaces as our 401 instead of Starlette's default
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Principal:
    """Get the authenticated principal from the bearer token"""
    if not credentials:
        raise UnauthorizedError("Missing bearer token")

    try:
        principal = principal_from_token(credentials.credentials)
    except UnauthorizedError as e:
        logger.log_auth_event("token", success=False, reason=e.message)
        raise

    set_principal(principal.email)
    return principal


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[Principal]:
    """Get the principal if a valid token was sent, None if no token was sent"""
    if not credentials:
        return None
    principal = principal_from_token(credentials.credentials)
    set_principal(principal.email)
    return principal


async def get_overview_reader(
    principal: Optional[Principal] = Depends(get_optional_principal)
) -> Optional[Principal]:
    """
    Gate for the admin overview.

    ADMIN_OVERVIEW_PUBLIC keeps the endpoint open; otherwise only admin
    principals may read cross-department data.
    """
    if settings.ADMIN_OVERVIEW_PUBLIC:
        return principal
    if principal is None or not principal.is_admin:
        raise UnauthorizedError("Unauthorized: Admin access required")
    return principal
