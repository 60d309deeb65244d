"""
Common/shared Pydantic schemas.

This module contains reusable schemas used across the application:
- Error responses
- Bulk operation results
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str
    detail: Optional[Any] = None
    error_code: Optional[str] = None
    success: bool = False
    timestamp: datetime = Field(default_factory=_utcnow)


class BulkItemError(BaseModel):
    """A single failed item inside a bulk request."""
    contact_id: int
    error: str


class BulkOperationResponse(BaseModel):
    """Response for bulk operations."""
    success_count: int
    errors: List[BulkItemError] = Field(default_factory=list)
    message: str


class HealthCheckResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    database: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_utcnow)
