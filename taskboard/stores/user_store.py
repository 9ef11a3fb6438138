import logging
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from taskboard.errors import ValidationError
from taskboard.models.user_model import DISPLAY_FIELDS

from .task_store import store_errors

logger = logging.getLogger(__name__)

_NO_PASSWORD = {"password": 0}


class UserStore:
    """User documents. Password hashes are only returned when asked for."""

    def __init__(self, collection: Collection) -> None:
        self._col = collection

    def find_by_id(self, user_id: ObjectId) -> Optional[Dict[str, Any]]:
        with store_errors("find_one"):
            return self._col.find_one({"_id": user_id}, _NO_PASSWORD)

    def find_by_email(self, email: str, *, with_password: bool = False) -> Optional[Dict[str, Any]]:
        projection = None if with_password else _NO_PASSWORD
        with store_errors("find_one"):
            return self._col.find_one({"email": email.strip().lower()}, projection)

    def find(self, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        with store_errors("find"):
            return list(self._col.find(query or {}, _NO_PASSWORD))

    def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        with store_errors("insert"):
            try:
                res = self._col.insert_one(doc)
            except DuplicateKeyError:
                raise ValidationError("User already exists") from None
        logger.info("User registered id=%s role=%s", res.inserted_id, doc.get("role"))
        return self.find_by_id(res.inserted_id)

    def display_fields(self, user_ids: Iterable[ObjectId]) -> Dict[ObjectId, Dict[str, Any]]:
        """Map each existing id to ``{_id, name, email, profileImageUrl}``."""
        ids = list(user_ids)
        if not ids:
            return {}
        projection = {name: 1 for name in DISPLAY_FIELDS}
        with store_errors("find"):
            rows = self._col.find({"_id": {"$in": ids}}, projection)
            return {row["_id"]: row for row in rows}
