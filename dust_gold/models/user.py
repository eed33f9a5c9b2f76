from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dust_gold.database import Base

if TYPE_CHECKING:
    from dust_gold.models.item import Item, Vote


class User(Base):
    """
    User mirrored from the authentication provider.

    The id is the provider's subject claim; only the username is
    managed by this service.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    username: Mapped[Optional[str]] = mapped_column(
        String(20),
        unique=True,
        index=True,
        nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    # Relationships
    items: Mapped[list["Item"]] = relationship(
        back_populates="submitter",
        passive_deletes=True
    )
    votes: Mapped[list["Vote"]] = relationship(
        back_populates="user",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<User {self.username or self.id}>"
