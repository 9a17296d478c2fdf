"""Common Pydantic models shared across routes."""

from typing import Optional

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Body of every error response: {"detail": {"code": ..., "message": ...}}."""

    code: str
    message: str
    session_id: Optional[str] = None


class ServiceStatus(BaseModel):
    available: bool
    message: str
