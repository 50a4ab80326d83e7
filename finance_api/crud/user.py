# finance_api/crud/user.py
import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from finance_api.core.errors import Conflict, NotFound, Unauthorized
from finance_api.core.security import create_access_token, dummy_verify, get_password_hash, verify_password
from finance_api.crud.category import build_default_categories
from finance_api.models.user import User
from finance_api.schemas.user import UserLogin, UserRegister

logger = logging.getLogger(__name__)

# Same message for unknown email and wrong password
INVALID_CREDENTIALS = "Invalid email or password"

async def get_user_by_email(email: str, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()

async def get_user_by_id(user_id: uuid.UUID, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()

async def register_user(user_in: UserRegister, db: AsyncSession) -> Tuple[User, str]:
    """Create the user and its default categories in one database transaction.

    Returns the new user and a freshly signed access token.
    """
    if await get_user_by_email(user_in.email, db) is not None:
        raise Conflict("User already exists with this email")

    user = User(
        name=user_in.name,
        email=user_in.email,
        hashed_password=get_password_hash(user_in.password),
    )
    db.add(user)
    try:
        # Flush first so the categories can reference the generated id
        await db.flush()
        db.add_all(build_default_categories(user.id))
        await db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration with the same email
        await db.rollback()
        raise Conflict("User already exists with this email")

    await db.refresh(user)
    logger.info(f"User {user.id} registered with default categories")
    return user, create_access_token(str(user.id))

async def authenticate_user(credentials: UserLogin, db: AsyncSession) -> Tuple[User, str]:
    user = await get_user_by_email(credentials.email, db)
    if user is None:
        dummy_verify()
        logger.info("Failed login attempt for unknown email")
        raise Unauthorized(INVALID_CREDENTIALS)
    if not verify_password(credentials.password, user.hashed_password):
        logger.info(f"Failed login attempt for user {user.id}")
        raise Unauthorized(INVALID_CREDENTIALS)
    return user, create_access_token(str(user.id))

async def get_profile(user_id: uuid.UUID, db: AsyncSession) -> User:
    user = await get_user_by_id(user_id, db)
    if user is None:
        raise NotFound("User not found")
    return user

async def delete_user(user_id: uuid.UUID, db: AsyncSession) -> None:
    """Hard-delete a user; categories and transactions go with it."""
    result = await db.execute(delete(User).where(User.id == user_id))
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("User not found")
    await db.commit()
    logger.info(f"User {user_id} deleted")
