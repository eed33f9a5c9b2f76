from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dust_gold.database import get_db
from dust_gold.models.user import User
from dust_gold.core.security import verify_access_token
from dust_gold.core.exceptions import UnauthorizedException

# Bearer scheme for the session token; errors are raised by the dependencies
bearer_scheme = HTTPBearer(auto_error=False)


async def _resolve_user(token: str, db: AsyncSession) -> User | None:
    user_id = verify_access_token(token)
    if not user_id:
        return None

    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    return result.scalar_one_or_none()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> User:
    """
    Dependency that extracts and validates the current user from the session token.

    Usage:
        @app.get("/protected")
        async def protected_route(current_user: User = Depends(get_current_user)):
            ...
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    user = await _resolve_user(credentials.credentials, db)
    if user is None:
        raise UnauthorizedException("Invalid or expired session")

    return user


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> User | None:
    """
    Dependency that optionally extracts the current user.
    Returns None if no token or invalid token, instead of raising an exception.
    """
    if credentials is None:
        return None

    return await _resolve_user(credentials.credentials, db)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
