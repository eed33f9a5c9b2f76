"""
Batch query utilities to avoid N+1 query problems.
"""
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from dust_gold.models.item import Item, Vote
from dust_gold.models.user import User
from dust_gold.schemas.item import ItemResponse, Upvoter


async def batch_load_vote_stats(
    item_ids: list[str],
    db: AsyncSession,
    current_user_id: str | None = None
) -> dict:
    """
    Load vote counts, upvoters and the caller's votes for many items.

    Instead of 3 queries per item (N+1 problem), this does 3 queries total.

    Returns:
        Dict with 'votes', 'upvoters' and 'user_voted' mappings
    """
    if not item_ids:
        return {"votes": {}, "upvoters": {}, "user_voted": set()}

    # Query 1: Vote counts per item
    counts_result = await db.execute(
        select(Vote.item_id, func.count(Vote.id))
        .where(Vote.item_id.in_(item_ids))
        .group_by(Vote.item_id)
    )
    votes_map = dict(counts_result.all())

    # Query 2: Upvoters, oldest vote first
    upvoters_result = await db.execute(
        select(Vote.item_id, User.id, User.name, User.username, User.image)
        .join(User, User.id == Vote.user_id)
        .where(Vote.item_id.in_(item_ids))
        .order_by(Vote.created_at, Vote.id)
    )
    upvoters_map: dict[str, list[Upvoter]] = {}
    for row in upvoters_result.all():
        upvoters_map.setdefault(row.item_id, []).append(
            Upvoter(id=row.id, name=row.name, username=row.username, image=row.image)
        )

    # Query 3: Which items the current user voted for
    user_voted: set[str] = set()
    if current_user_id:
        voted_result = await db.execute(
            select(Vote.item_id)
            .where(
                Vote.item_id.in_(item_ids),
                Vote.user_id == current_user_id
            )
        )
        user_voted = {row[0] for row in voted_result.all()}

    return {
        "votes": votes_map,
        "upvoters": upvoters_map,
        "user_voted": user_voted,
    }


def build_item_response(item: Item, stats: dict, current_user_id: str | None = None) -> ItemResponse:
    return ItemResponse(
        id=item.id,
        type=item.type,
        name=item.name,
        description=item.description,
        url=item.url,
        image_url=item.image_url,
        artist=item.artist or [],
        tags=item.tags or [],
        published_on=item.published_on,
        provider_id=item.provider_id,
        submitted_by=item.submitted_by,
        created_at=item.created_at,
        votes=stats["votes"].get(item.id, 0),
        voted=item.id in stats["user_voted"] if current_user_id else None,
        upvoters=stats["upvoters"].get(item.id, []),
    )


async def build_item_responses_batch(
    items: list[Item],
    db: AsyncSession,
    current_user_id: str | None = None
) -> list[ItemResponse]:
    """
    Build ItemResponse objects for multiple items efficiently.

    Args:
        items: Items to render, in display order
        db: Database session
        current_user_id: Optional current user ID

    Returns:
        List of ItemResponse objects
    """
    if not items:
        return []

    stats = await batch_load_vote_stats([i.id for i in items], db, current_user_id)
    return [build_item_response(item, stats, current_user_id) for item in items]
