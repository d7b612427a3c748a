"""
Pydantic schemas for service health.
"""
from datetime import datetime
from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Schema for health check endpoint response."""
    status: str
    database: str
    provider: str
    timestamp: datetime
