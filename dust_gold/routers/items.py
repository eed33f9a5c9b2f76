import logging
from typing import Optional

from fastapi import APIRouter, Query
from sqlalchemy import select, func, delete

from dust_gold.models.item import Item, Vote
from dust_gold.models.user import User
from dust_gold.schemas.item import (
    ItemCreate,
    ItemUpdate,
    ItemResponse,
    ItemListResponse,
    ItemKind,
    PublicUser,
    SortOption,
    VoteResponse,
)
from dust_gold.schemas.common import MessageResponse
from dust_gold.core.exceptions import (
    NotFoundException,
    ForbiddenException,
    UnauthorizedException,
)
from dust_gold.dependencies import CurrentUser, OptionalUser, DbSession
from dust_gold.services.vote_service import toggle_vote
from dust_gold.utils.batch_queries import build_item_responses_batch

logger = logging.getLogger(__name__)

router = APIRouter()


# ============== Helper Functions ==============

async def _get_item_or_404(db: DbSession, item_id: str) -> Item:
    result = await db.execute(
        select(Item).where(Item.id == item_id)
    )
    item = result.scalar_one_or_none()
    if not item:
        raise NotFoundException("Item not found")
    return item


async def _get_owned_item(db: DbSession, item_id: str, user: User) -> Item:
    """Fetch an item the caller owns, 404 if absent, 403 if someone else's."""
    item = await _get_item_or_404(db, item_id)
    if item.submitted_by != user.id:
        raise ForbiddenException("You can only modify your own items")
    return item


def _url_or_none(value) -> Optional[str]:
    return str(value) if value else None


# ============== Listing ==============

@router.get(
    "",
    response_model=ItemListResponse,
    summary="List items",
)
async def list_items(
    db: DbSession,
    current_user: OptionalUser = None,
    type: Optional[ItemKind] = Query(None, description="Filter by kind"),
    username: Optional[str] = Query(None, description="Only items submitted by this user"),
    mine: bool = Query(False, description="Only the caller's own items"),
    sort: SortOption = Query("newest", description="newest, votes-high or votes-low"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
):
    """
    List submitted items with live vote counts and upvoters.

    - **type**: music, book, movie or misc
    - **username**: adds the user's public profile, 404 if unknown
    - **mine**: requires authentication
    """
    filters = []
    public_user = None

    if type:
        filters.append(Item.type == type)

    if username:
        user_result = await db.execute(
            select(User).where(User.username == username)
        )
        owner = user_result.scalar_one_or_none()
        if not owner:
            raise NotFoundException("User not found")
        filters.append(Item.submitted_by == owner.id)
        public_user = PublicUser(username=owner.username, name=owner.name, image=owner.image)

    if mine:
        if not current_user:
            raise UnauthorizedException("You must be logged in to see your items")
        filters.append(Item.submitted_by == current_user.id)

    total_result = await db.execute(
        select(func.count()).select_from(Item).where(*filters)
    )
    total = total_result.scalar() or 0

    query = select(Item).where(*filters)
    if sort == "newest":
        query = query.order_by(Item.created_at.desc(), Item.id)
    else:
        vote_counts = (
            select(Vote.item_id, func.count(Vote.id).label("vote_count"))
            .group_by(Vote.item_id)
            .subquery()
        )
        vote_count = func.coalesce(vote_counts.c.vote_count, 0)
        query = (
            query.outerjoin(vote_counts, vote_counts.c.item_id == Item.id)
            .order_by(
                vote_count.desc() if sort == "votes-high" else vote_count.asc(),
                Item.created_at.desc(),
                Item.id,
            )
        )

    offset = (page - 1) * per_page
    result = await db.execute(query.offset(offset).limit(per_page))
    items = list(result.scalars().all())

    responses = await build_item_responses_batch(
        items, db, current_user.id if current_user else None
    )

    return ItemListResponse(
        items=responses,
        total=total,
        page=page,
        per_page=per_page,
        has_next=offset + len(items) < total,
        user=public_user,
    )


# ============== Item CRUD ==============

@router.get(
    "/{item_id}",
    response_model=ItemResponse,
    summary="Get an item",
)
async def get_item(
    item_id: str,
    db: DbSession,
    current_user: OptionalUser = None,
):
    item = await _get_item_or_404(db, item_id)
    responses = await build_item_responses_batch(
        [item], db, current_user.id if current_user else None
    )
    return responses[0]


@router.post(
    "",
    response_model=ItemResponse,
    status_code=201,
    summary="Submit an item",
)
async def create_item(
    item_data: ItemCreate,
    current_user: CurrentUser,
    db: DbSession,
):
    """
    Submit a new item.

    The caller becomes the owner regardless of what the body says.
    """
    item = Item(
        type=item_data.type,
        name=item_data.name,
        description=item_data.description,
        url=_url_or_none(item_data.url),
        image_url=_url_or_none(item_data.image_url),
        artist=item_data.artist or [],
        tags=item_data.tags or [],
        published_on=item_data.published_on,
        provider_id=item_data.provider_id or None,
        submitted_by=current_user.id,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)

    logger.info(f"Item {item.id} ({item.type}) submitted by {current_user.id}")

    responses = await build_item_responses_batch([item], db, current_user.id)
    return responses[0]


@router.put(
    "/{item_id}",
    response_model=ItemResponse,
    summary="Update an item",
)
async def update_item(
    item_id: str,
    update_data: ItemUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    """
    Update your own item.

    Kind, owner and votes cannot be changed here.
    """
    item = await _get_owned_item(db, item_id, current_user)

    updates = update_data.model_dump(exclude_unset=True)
    if updates.get("name") is None:
        updates.pop("name", None)

    for field in ("url", "image_url"):
        if field in updates:
            updates[field] = _url_or_none(updates[field])

    for field in ("artist", "tags"):
        if field in updates and updates[field] is None:
            updates[field] = []

    for field, value in updates.items():
        setattr(item, field, value)

    await db.commit()
    await db.refresh(item)

    responses = await build_item_responses_batch([item], db, current_user.id)
    return responses[0]


@router.delete(
    "/{item_id}",
    response_model=MessageResponse,
    summary="Delete an item",
)
async def delete_item(
    item_id: str,
    current_user: CurrentUser,
    db: DbSession,
):
    """Delete your own item and its votes."""
    item = await _get_owned_item(db, item_id, current_user)

    await db.execute(delete(Vote).where(Vote.item_id == item.id))
    await db.delete(item)
    await db.commit()

    logger.info(f"Item {item_id} deleted by {current_user.id}")

    return MessageResponse(message="Item deleted successfully")


# ============== Votes ==============

@router.post(
    "/{item_id}/vote",
    response_model=VoteResponse,
    summary="Toggle vote on an item",
)
async def vote_item(
    item_id: str,
    current_user: CurrentUser,
    db: DbSession,
):
    """Toggle the caller's vote. Voting again removes the vote."""
    return await toggle_vote(db, current_user.id, item_id)
