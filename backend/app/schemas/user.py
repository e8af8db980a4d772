"""
Accounting Notes Backend: User Schemas
======================================

The password hash never appears in any response model.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, description="Admin username")
    password: str = Field(min_length=1, description="Admin password")

    model_config = {"extra": "forbid"}


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}
