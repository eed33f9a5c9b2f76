import uuid as uuid_lib
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, String, Text, Date, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dust_gold.database import Base

if TYPE_CHECKING:
    from dust_gold.models.user import User


ITEM_KINDS = ("music", "book", "movie", "misc")


def _new_item_id() -> str:
    return str(uuid_lib.uuid4())


class Item(Base):
    """A media item submitted by a user."""

    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint(
            "type IN (" + ", ".join(f"'{kind}'" for kind in ITEM_KINDS) + ")",
            name="ck_items_type"
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_item_id)
    type: Mapped[str] = mapped_column(String(10), index=True)  # one of ITEM_KINDS, immutable

    # Content
    name: Mapped[str] = mapped_column(String(500))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    artist: Mapped[list[str]] = mapped_column(JSON, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    published_on: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # External identifier from the provider lookup, kept for traceability only
    provider_id: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    submitted_by: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True
    )

    # Relationships
    submitter: Mapped["User"] = relationship(back_populates="items")
    votes: Mapped[list["Vote"]] = relationship(
        back_populates="item",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Item {self.type}:{self.name}>"


class Vote(Base):
    """Upvote membership of one user on one item."""

    __tablename__ = "item_votes"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True
    )
    item_id: Mapped[str] = mapped_column(
        ForeignKey("items.id", ondelete="CASCADE"),
        index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    # Unique constraint: user can only vote for an item once
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="unique_user_item_vote"),
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="votes")
    item: Mapped["Item"] = relationship(back_populates="votes")

    def __repr__(self) -> str:
        return f"<Vote {self.user_id} -> {self.item_id}>"
