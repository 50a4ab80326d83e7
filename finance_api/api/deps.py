# finance_api/api/deps.py
import logging
import uuid
from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from finance_api.core.database import get_async_session
from finance_api.core.errors import Unauthorized
from finance_api.core.security import decode_access_token
from finance_api.crud.user import get_user_by_id
from finance_api.models.user import User

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported through our own 401
bearer_scheme = HTTPBearer(auto_error=False)

async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> uuid.UUID:
    """
    Verify the `Authorization: Bearer <token>` header and return the user id
    it was issued for. Missing, malformed, expired or forged tokens are 401.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Access token required")

    try:
        return decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token has expired")
    except (jwt.InvalidTokenError, ValueError):
        logger.info(f"Rejected invalid token on {request.method} {request.url.path}")
        raise Unauthorized("Invalid token")

async def get_current_user(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    # A valid token for a deleted account is no longer a credential
    user = await get_user_by_id(user_id, db)
    if user is None:
        raise Unauthorized("Invalid token")
    return user
