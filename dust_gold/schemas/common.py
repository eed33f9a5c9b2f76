from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Generic message response."""
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str
    detail: str
