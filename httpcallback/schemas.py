"""
Pydantic schemas for request bodies and JSON responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AddUserRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)


class AddUserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    auth_token: str = Field(..., serialization_alias="authToken")


class UserResponse(BaseModel):
    id: str
    username: str


class CallbackRequest(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048)
    when: Optional[datetime] = None


class PingResponse(BaseModel):
    message: str
