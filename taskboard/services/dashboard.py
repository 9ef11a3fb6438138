import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable

from bson import ObjectId

from taskboard.models.task_model import TaskPriority, TaskStatus, utcnow
from taskboard.stores.task_store import TaskStore

logger = logging.getLogger(__name__)

RECENT_FIELDS = ("title", "status", "priority", "dueDate", "createdAt")


def zero_fill(raw: Dict[Any, int], members: Iterable[Enum], key=lambda m: m.value) -> Dict[str, int]:
    """Fixed-key table: every enum member present, missing groups count 0."""
    return {key(m): int(raw.get(m.value, 0)) for m in members}


class DashboardAggregator:
    """
    Read-only statistics over tasks, either global or for one assignee.

    Each count is its own query, so a view is a snapshot that may straddle
    concurrent writes.
    """

    def __init__(
        self,
        tasks: TaskStore,
        *,
        recent_limit: int = 10,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self.tasks = tasks
        self.recent_limit = recent_limit
        self.now = now

    def global_view(self) -> Dict[str, Any]:
        return self._build({})

    def user_view(self, user_id: ObjectId) -> Dict[str, Any]:
        return self._build({"assignedTo": user_id})

    def _build(self, scope: Dict[str, Any]) -> Dict[str, Any]:
        total = self.tasks.count(scope)
        overdue = self.tasks.count(
            {
                **scope,
                "status": {"$ne": TaskStatus.COMPLETED.value},
                "dueDate": {"$lt": self.now()},
            }
        )

        by_status = zero_fill(
            self.tasks.group_count("status", scope), TaskStatus, key=lambda s: s.key
        )
        by_priority = zero_fill(self.tasks.group_count("priority", scope), TaskPriority)

        distribution = dict(by_status)
        distribution["All"] = total

        projection = {name: 1 for name in RECENT_FIELDS}
        projection["_id"] = 0
        recent = self.tasks.find(
            scope,
            sort=[("createdAt", -1)],
            limit=self.recent_limit,
            projection=projection,
        )

        logger.debug("Dashboard scope=%s total=%s overdue=%s", scope, total, overdue)
        return {
            "statistics": {
                "totalTasks": total,
                "pendingTasks": by_status[TaskStatus.PENDING.key],
                "completedTasks": by_status[TaskStatus.COMPLETED.key],
                "overdueTasks": overdue,
            },
            "charts": {
                "taskDistribution": distribution,
                "tasksPriorityLevels": by_priority,
            },
            "recentTasks": recent,
        }
