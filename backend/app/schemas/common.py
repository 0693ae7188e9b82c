from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from app.schemas.user import UserResponse


class Envelope(BaseModel):
    """Wrapper shared by every API response."""
    success: bool
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None
    errors: Optional[Dict[str, List[str]]] = None


class Pagination(BaseModel):
    """Standard pagination block."""
    page: int
    limit: int
    total: int
    total_pages: int


class UserListResponse(BaseModel):
    users: List[UserResponse]
    pagination: Pagination
