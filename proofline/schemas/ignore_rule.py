"""
Pydantic schemas for ignore rule management.
"""
from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, Field


class IgnoreRuleCreate(BaseModel):
    """
    Schema for registering a new ignore rule.
    """
    token: str = Field(..., min_length=1, max_length=255, description="Flagged text to suppress")
    type: str = Field(..., min_length=1, max_length=50, description="Issue category to suppress")


class IgnoreRuleResponse(BaseModel):
    """
    Schema for an ignore rule in responses.
    """
    id: UUID
    user_id: UUID
    token: str
    type: str
    created_at: datetime

    model_config = {
        "from_attributes": True
    }

    @property
    def key(self) -> tuple[str, str]:
        """Identity matched against Issue.key."""
        return (self.token, self.type)


class IgnoreRuleCreatedResponse(BaseModel):
    """
    Schema for the result of registering an ignore rule.
    """
    success: bool = True
    ignore_rule: IgnoreRuleResponse


class IgnoreRuleListResponse(BaseModel):
    """
    Schema for listing a user's ignore rules.
    """
    success: bool = True
    ignore_rules: List[IgnoreRuleResponse]
    total: int


class IgnoreRuleDeleteResponse(BaseModel):
    """
    Schema for ignore rule removal results.
    """
    success: bool = True
    deleted: int = Field(description="Number of rules removed")
