# Import all models so Alembic can detect them
from dust_gold.models.user import User
from dust_gold.models.item import Item, Vote, ITEM_KINDS

__all__ = [
    "User",
    "Item",
    "Vote",
    "ITEM_KINDS",
]
