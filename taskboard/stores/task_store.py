import contextlib
import logging
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from taskboard.errors import StoreError
from taskboard.models.task_model import utcnow

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def store_errors(operation: str):
    """Turn driver failures into StoreError; the cause goes to the log only."""
    try:
        yield
    except PyMongoError as exc:
        logger.exception("MongoDB %s failed", operation)
        raise StoreError() from exc


class TaskStore:
    """
    Task documents in a MongoDB collection.

    Exposes the query shapes the services need: filtered lookup, counts and
    grouped counts. Each call is a single independent round-trip; there is
    no cross-call transaction.
    """

    def __init__(self, collection: Collection) -> None:
        self._col = collection

    def find(
        self,
        query: Optional[Dict[str, Any]] = None,
        *,
        sort: Optional[List[Tuple[str, int]]] = None,
        limit: int = 0,
        projection: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        with store_errors("find"):
            cursor = self._col.find(query or {}, projection)
            if sort:
                cursor = cursor.sort(sort)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)

    def find_by_id(self, task_id: ObjectId) -> Optional[Dict[str, Any]]:
        with store_errors("find_one"):
            return self._col.find_one({"_id": task_id})

    def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        with store_errors("count"):
            return self._col.count_documents(query or {})

    def group_count(self, field: str, query: Optional[Dict[str, Any]] = None) -> Dict[Any, int]:
        """Count documents per distinct value of ``field``; absent groups are absent."""
        pipeline: List[Dict[str, Any]] = []
        if query:
            pipeline.append({"$match": query})
        pipeline.append({"$group": {"_id": f"${field}", "count": {"$sum": 1}}})
        with store_errors("aggregate"):
            rows = list(self._col.aggregate(pipeline))
        return {row["_id"]: int(row["count"]) for row in rows}

    def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        with store_errors("insert"):
            res = self._col.insert_one(doc)
            created = self._col.find_one({"_id": res.inserted_id})
        logger.debug("Task inserted id=%s", res.inserted_id)
        return created

    def update(self, task_id: ObjectId, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Set ``updates`` on the task and return the stored result (None if absent)."""
        fields = dict(updates)
        fields["updatedAt"] = utcnow()
        with store_errors("update"):
            return self._col.find_one_and_update(
                {"_id": task_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )

    def delete(self, task_id: ObjectId) -> bool:
        with store_errors("delete"):
            res = self._col.delete_one({"_id": task_id})
        return res.deleted_count == 1
