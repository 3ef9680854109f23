"""
Entity records shared by every storage backend.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class User:
    username: str
    auth_token: str
    id: Optional[str] = None

    def as_dict(self) -> dict:
        """Public view of the user; the token is left out."""
        return {"id": self.id, "username": self.username}


@dataclass(frozen=True)
class AuthInfo:
    """Result of a credential lookup. Only id and username, never the token."""

    user_id: str
    username: str


@dataclass
class Callback:
    user_id: str
    url: str
    when: Optional[datetime] = None
    id: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "url": self.url,
            "when": self.when.isoformat() if self.when else None,
            "createdAt": self.created_at,
        }
