"""Generic API response schemas"""

from pydantic import BaseModel
from typing import Optional, Any


class APIResponse(BaseModel):
    """Uniform response envelope"""
    success: bool = True
    message: str
    data: Optional[Any] = None
    errors: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    timestamp: str
    readiness: dict
