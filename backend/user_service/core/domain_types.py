"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - UserId wraps the store-assigned integer primary key
    - TokenClaims is never persisted; it is rebuilt from a decoded token
"""

from dataclasses import dataclass
from datetime import datetime
from typing import NewType


UserId = NewType("UserId", int)


@dataclass(frozen=True)
class TokenClaims:
    """Payload embedded in a signed bearer token."""
    user_id: UserId
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class UserFilters:
    """Optional case-insensitive substring filters for list queries."""
    name: str | None = None
    email: str | None = None

    def is_empty(self) -> bool:
        return not self.name and not self.email
