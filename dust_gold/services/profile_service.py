import re

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dust_gold.core.exceptions import ValidationException
from dust_gold.models.user import User

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")

# Public profiles live at /<username>, so these would shadow real routes
RESERVED_USERNAMES = frozenset({
    # site pages
    "add", "profile", "dashboard", "arts", "omdb", "lastfm", "login",
    "register", "signup", "search", "logout", "api", "favicon.ico",
    "robots.txt", "edit", "delete", "update",
    # API segments
    "items", "item", "mine", "vote", "votes", "provider-search",
    "provider_search", "youtube", "health", "docs", "redoc",
    # vote vocabulary
    "upvote", "downvote", "upvotes", "downvotes", "upvoted", "downvoted",
    "upvoters", "downvoters", "art_votes", "item_votes", "downvoted_by",
})


def validate_username(username: str | None) -> str:
    """
    Check a requested username and return it trimmed.

    Raises:
        ValidationException: empty, wrong length, bad characters or reserved
    """
    if username is None or not username.strip():
        raise ValidationException("Username is required")

    username = username.strip()
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationException(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )

    if username.lower() in RESERVED_USERNAMES:
        raise ValidationException("Username is reserved")

    if not USERNAME_RE.match(username):
        raise ValidationException("Username can only contain letters, numbers, and underscores")

    return username


async def set_username(db: AsyncSession, user: User, username: str | None) -> User:
    """
    Validate and store a new username for the user.

    Raises:
        ValidationException: invalid, reserved, or taken by another user
    """
    username = validate_username(username)

    if username == user.username:
        return user

    result = await db.execute(
        select(User.id).where(
            User.username == username,
            User.id != user.id
        )
    )
    if result.scalar_one_or_none() is not None:
        raise ValidationException("Username is already taken")

    user.username = username
    try:
        await db.commit()
    except IntegrityError:
        # Taken between the check and the write
        await db.rollback()
        raise ValidationException("Username is already taken") from None

    await db.refresh(user)
    return user
