"""User Schemas: request/response models for the /users routes.

Invariants:
    - UserCreate only enforces shape (both fields present, strings, bounded);
      business rules (email format, blank names) are checked by UserDirectory
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """User registration payload."""
    email: str = Field(max_length=320)
    name: str = Field(max_length=1_000)


class UserResponse(BaseModel):
    """Public-facing user data."""
    id: UUID
    email: str
    name: str
    created_at: datetime
