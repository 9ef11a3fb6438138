from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from bson import ObjectId

from taskboard.models.task_model import utcnow


class Role(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


# Fields exposed when a task's assignees are resolved
DISPLAY_FIELDS = ("name", "email", "profileImageUrl")


@dataclass
class User:
    name: str
    email: str
    password: str  # werkzeug hash
    profile_image_url: Optional[str] = None
    role: Role = Role.MEMBER
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[ObjectId] = None

    def to_doc(self) -> dict:
        doc = {
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "profileImageUrl": self.profile_image_url,
            "role": self.role.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.id is not None:
            doc["_id"] = self.id
        return doc


@dataclass(frozen=True)
class Caller:
    """Identity and role of the authenticated user making a request."""

    id: ObjectId
    role: Role = Role.MEMBER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
