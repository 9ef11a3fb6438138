import logging
import re
from typing import Any, Dict, List

from werkzeug.security import check_password_hash, generate_password_hash

from taskboard.errors import NotFound, Unauthenticated, ValidationError
from taskboard.models.task_model import TaskStatus
from taskboard.models.user_model import Role, User
from taskboard.stores.task_store import TaskStore
from taskboard.stores.user_store import UserStore
from taskboard.utils.db import to_object_id

from .dashboard import zero_fill

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Per-member count keys in the users listing
_COUNT_KEYS = {
    TaskStatus.PENDING: "pendingTasks",
    TaskStatus.IN_PROGRESS: "inProgressTasks",
    TaskStatus.COMPLETED: "completedTasks",
}


class UserService:
    def __init__(self, users: UserStore, tasks: TaskStore) -> None:
        self.users = users
        self.tasks = tasks

    def list_members(self) -> List[Dict[str, Any]]:
        """Members with how many of their assigned tasks sit in each status."""
        out = []
        for user in self.users.find({"role": Role.MEMBER.value}):
            counts = zero_fill(
                self.tasks.group_count("status", {"assignedTo": user["_id"]}), TaskStatus
            )
            out.append({**user, **{_COUNT_KEYS[s]: counts[s.value] for s in TaskStatus}})
        return out

    def get_user(self, user_id) -> Dict[str, Any]:
        oid = to_object_id(user_id)
        user = self.users.find_by_id(oid) if oid is not None else None
        if user is None:
            raise NotFound("User not found!")
        return user

    def register(self, fields: Dict[str, Any], admin_invite_token: str = "") -> Dict[str, Any]:
        name = fields.get("name")
        email = fields.get("email")
        password = fields.get("password")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Name is required")
        if not isinstance(email, str) or not _EMAIL_RE.match(email.strip()):
            raise ValidationError("A valid email is required")
        if not isinstance(password, str) or len(password) < 6:
            raise ValidationError("Password must be at least 6 characters")

        if self.users.find_by_email(email) is not None:
            raise ValidationError("User already exists")

        invite = fields.get("adminInviteToken")
        role = Role.ADMIN if admin_invite_token and invite == admin_invite_token else Role.MEMBER

        user = User(
            name=name.strip(),
            email=email.strip().lower(),
            password=generate_password_hash(password),
            profile_image_url=fields.get("profileImageUrl") or None,
            role=role,
        )
        return self.users.insert(user.to_doc())

    def authenticate(self, email, password) -> Dict[str, Any]:
        if not isinstance(email, str) or not isinstance(password, str):
            raise Unauthenticated("Invalid email or password")
        user = self.users.find_by_email(email, with_password=True)
        if user is None or not check_password_hash(user.get("password", ""), password):
            logger.info("Failed login for email=%s", email.strip().lower())
            raise Unauthenticated("Invalid email or password")
        user.pop("password", None)
        return user
