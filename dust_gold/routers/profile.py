from fastapi import APIRouter
from sqlalchemy import select, func

from dust_gold.models.item import Item, Vote
from dust_gold.models.user import User
from dust_gold.schemas.user import ProfileResponse, ProfileUpdate
from dust_gold.dependencies import CurrentUser, DbSession
from dust_gold.services.profile_service import set_username

router = APIRouter()


async def _build_profile(db: DbSession, user: User) -> ProfileResponse:
    item_count = await db.execute(
        select(func.count()).select_from(Item).where(Item.submitted_by == user.id)
    )
    vote_count = await db.execute(
        select(func.count()).select_from(Vote).where(Vote.user_id == user.id)
    )
    return ProfileResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        image=user.image,
        username=user.username,
        created_at=user.created_at,
        item_count=item_count.scalar() or 0,
        vote_count=vote_count.scalar() or 0,
    )


@router.get(
    "",
    response_model=ProfileResponse,
    summary="Get my profile",
)
async def get_profile(current_user: CurrentUser, db: DbSession):
    """Get the caller's profile with item and vote counts."""
    return await _build_profile(db, current_user)


@router.put(
    "",
    response_model=ProfileResponse,
    summary="Update my profile",
)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    """
    Set the caller's username.

    - 3 to 20 characters
    - Letters, numbers and underscores only
    - Not reserved and not taken by someone else
    """
    user = await set_username(db, current_user, profile_data.username)
    return await _build_profile(db, user)
