"""
Pydantic schemas for caller identity.
"""
from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class TokenData(BaseModel):
    """
    Schema for decoded JWT token data.
    """
    user_id: Optional[UUID] = None
    email: Optional[str] = None
    token_type: str = "access"


class CurrentUser(BaseModel):
    """
    Authenticated caller, resolved from the bearer token.
    """
    id: UUID
    email: Optional[str] = None
