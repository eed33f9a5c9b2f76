"""
Vote toggle for items.

Membership lives in the item_votes table, one row per (user, item). The
unique constraint on that pair is what keeps concurrent toggles from
double-voting; the count returned is always a fresh COUNT over the table.
"""
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dust_gold.core.exceptions import NotFoundException
from dust_gold.models.item import Item, Vote
from dust_gold.schemas.item import VoteResponse

logger = logging.getLogger(__name__)


async def count_votes(db: AsyncSession, item_id: str) -> int:
    """Current number of votes for an item."""
    result = await db.execute(
        select(func.count()).select_from(Vote).where(Vote.item_id == item_id)
    )
    return result.scalar() or 0


async def toggle_vote(db: AsyncSession, user_id: str, item_id: str) -> VoteResponse:
    """
    Flip the user's vote on an item and return the new total.

    - No vote yet: insert one, voted=True
    - Already voted: delete it, voted=False

    Raises:
        NotFoundException: the item does not exist
    """
    item_result = await db.execute(
        select(Item.id).where(Item.id == item_id)
    )
    if item_result.scalar_one_or_none() is None:
        raise NotFoundException("Item not found")

    existing = await db.execute(
        select(Vote.id).where(
            Vote.item_id == item_id,
            Vote.user_id == user_id
        )
    )

    if existing.scalar_one_or_none() is not None:
        # A concurrent toggle may have deleted it already; that's a no-op
        await db.execute(
            delete(Vote).where(
                Vote.item_id == item_id,
                Vote.user_id == user_id
            )
        )
        voted = False
    else:
        try:
            async with db.begin_nested():
                db.add(Vote(user_id=user_id, item_id=item_id))
        except IntegrityError:
            # Lost the race to an identical toggle, the vote exists either way
            logger.info(f"[VoteService] Duplicate vote {user_id} -> {item_id} ignored")
        voted = True

    await db.commit()

    votes = await count_votes(db, item_id)
    logger.info(f"[VoteService] {user_id} {'voted' if voted else 'unvoted'} {item_id} ({votes} votes)")

    return VoteResponse(item_id=item_id, voted=voted, votes=votes)
