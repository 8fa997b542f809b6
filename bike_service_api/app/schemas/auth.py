"""
Identity of the authenticated caller.

Built per request from a verified token.  Nothing here is persisted.
"""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class UserRole(str, Enum):
    ADMIN = "admin"
    APP_USER = "appuser"


class TokenPayload(BaseModel):
    id: UUID
    user_id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
