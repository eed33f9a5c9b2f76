from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ProfileUpdate(BaseModel):
    """
    Schema for updating the caller's profile.

    Username rules (length, charset, reserved words, uniqueness) are
    enforced by the profile service so they report as validation errors.
    """
    username: Optional[str] = None


class ProfileResponse(BaseModel):
    """Schema for the caller's own profile."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    username: Optional[str] = None
    created_at: datetime
    item_count: int = 0
    vote_count: int = 0

    model_config = {"from_attributes": True}
