import logging
from typing import Any, Dict, List, Optional

from taskboard.errors import Forbidden, NotFound, ValidationError
from taskboard.models.task_model import (
    ChecklistItem,
    Task,
    TaskPriority,
    TaskStatus,
    parse_attachments,
    parse_checklist,
    parse_due_date,
    parse_user_ids,
)
from taskboard.models.user_model import Caller
from taskboard.stores.task_store import TaskStore
from taskboard.stores.user_store import UserStore
from taskboard.utils.db import to_object_id

from . import access
from .progress import completed_count, transition_by_checklist, transition_by_status

logger = logging.getLogger(__name__)


def stored_checklist(task: Dict[str, Any]) -> List[ChecklistItem]:
    return [
        ChecklistItem(text=str(item.get("text", "")), completed=bool(item.get("completed")))
        for item in task.get("todoChecklist") or []
    ]


def _require_title(raw) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Title is required")
    return raw.strip()


def _description(raw) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise ValidationError("description must be a string")
    return raw


class TaskService:
    """
    Task lifecycle: listing, CRUD and the status / checklist transitions.

    Stores are passed in; the service keeps no state between calls.
    Read-then-write operations are last-write-wins against concurrent
    updates of the same task.
    """

    def __init__(self, tasks: TaskStore, users: UserStore) -> None:
        self.tasks = tasks
        self.users = users

    # ---- helpers ----

    def _load(self, task_id) -> Dict[str, Any]:
        oid = to_object_id(task_id)
        task = self.tasks.find_by_id(oid) if oid is not None else None
        if task is None:
            raise NotFound("Task not found!")
        return task

    def _populate(self, tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Replace assignee ids with display fields; unknown users are dropped."""
        ids = {uid for t in tasks for uid in t.get("assignedTo") or []}
        people = self.users.display_fields(ids)
        out = []
        for t in tasks:
            resolved = [people[uid] for uid in t.get("assignedTo") or [] if uid in people]
            out.append({**t, "assignedTo": resolved})
        return out

    def _populate_one(self, task: Dict[str, Any]) -> Dict[str, Any]:
        return self._populate([task])[0]

    # ---- queries ----

    def list_tasks(self, caller: Caller, status: Optional[str] = None) -> Dict[str, Any]:
        scope = access.visibility_filter(caller)
        query = dict(scope)
        if status:
            query["status"] = TaskStatus.parse(status).value

        found = self.tasks.find(query, sort=[("createdAt", -1)])
        tasks = [
            {**t, "completedCount": completed_count(stored_checklist(t))}
            for t in self._populate(found)
        ]

        def count_status(s: TaskStatus) -> int:
            # The optional filter and the counted status must both hold.
            if "status" in query and query["status"] != s.value:
                return 0
            return self.tasks.count({**scope, "status": s.value})

        summary = {
            "all": self.tasks.count(scope),
            "pending": count_status(TaskStatus.PENDING),
            "inProgress": count_status(TaskStatus.IN_PROGRESS),
            "completed": count_status(TaskStatus.COMPLETED),
        }
        return {"tasks": tasks, "statusSummary": summary}

    def get_task(self, task_id, caller: Caller) -> Dict[str, Any]:
        task = self._load(task_id)
        if not access.can_read(caller, task):
            raise Forbidden()
        return self._populate_one(task)

    # ---- commands ----

    def create_task(self, fields: Dict[str, Any], caller: Caller) -> Dict[str, Any]:
        if not access.can_administer(caller):
            raise Forbidden("Access denied, admin only")

        progress = fields.get("progress")
        if not isinstance(progress, int) or isinstance(progress, bool) or not 0 <= progress <= 100:
            progress = 0

        task = Task(
            title=_require_title(fields.get("title")),
            description=_description(fields.get("description")),
            priority=TaskPriority.parse(fields.get("priority") or TaskPriority.MEDIUM),
            due_date=parse_due_date(fields.get("dueDate")),
            assigned_to=parse_user_ids(fields.get("assignedTo")),
            created_by=caller.id,
            todo_checklist=parse_checklist(fields.get("todoChecklist") or []),
            attachments=parse_attachments(fields.get("attachments") or []),
            progress=progress,
        )
        created = self.tasks.insert(task.to_doc())
        logger.info("Task created id=%s by=%s", created["_id"], caller.id)
        return created

    def update_task(self, task_id, fields: Dict[str, Any], caller: Caller) -> Dict[str, Any]:
        task = self._load(task_id)
        if not access.can_update_fields(caller, task):
            raise Forbidden()

        updates: Dict[str, Any] = {}
        if "title" in fields:
            updates["title"] = _require_title(fields["title"])
        if "description" in fields:
            updates["description"] = _description(fields["description"])
        if "priority" in fields:
            updates["priority"] = TaskPriority.parse(fields["priority"]).value
        if "dueDate" in fields:
            updates["dueDate"] = parse_due_date(fields["dueDate"])
        if "todoChecklist" in fields:
            updates["todoChecklist"] = [i.to_doc() for i in parse_checklist(fields["todoChecklist"])]
        if "attachments" in fields:
            updates["attachments"] = parse_attachments(fields["attachments"])
        if "assignedTo" in fields:
            updates["assignedTo"] = parse_user_ids(fields["assignedTo"])

        if not updates:
            return task

        updated = self.tasks.update(task["_id"], updates)
        if updated is None:
            raise NotFound("Task not found!")
        logger.info("Task updated id=%s fields=%s", task["_id"], sorted(updates))
        return updated

    def delete_task(self, task_id, caller: Caller) -> None:
        if not access.can_administer(caller):
            raise Forbidden("Access denied, admin only")
        task = self._load(task_id)
        if not self.tasks.delete(task["_id"]):
            raise NotFound("Task not found!")
        logger.info("Task deleted id=%s by=%s", task["_id"], caller.id)

    def update_status(self, task_id, new_status, caller: Caller) -> Dict[str, Any]:
        task = self._load(task_id)
        if not access.can_write_status(caller, task):
            raise Forbidden()
        status = TaskStatus.parse(new_status)

        transition = transition_by_status(
            stored_checklist(task), status, int(task.get("progress") or 0)
        )
        updated = self.tasks.update(task["_id"], transition.to_updates())
        if updated is None:
            raise NotFound("Task not found!")
        logger.info("Task status id=%s status=%s", task["_id"], status.value)
        return updated

    def update_checklist(self, task_id, raw_checklist, caller: Caller) -> Dict[str, Any]:
        task = self._load(task_id)
        if not access.can_write_checklist(caller, task):
            raise Forbidden("Not authorized to update checklist!")
        if raw_checklist is None:
            raise ValidationError("todoChecklist is required")
        checklist = parse_checklist(raw_checklist)

        transition = transition_by_checklist(checklist)
        updated = self.tasks.update(task["_id"], transition.to_updates())
        if updated is None:
            raise NotFound("Task not found!")
        logger.info(
            "Task checklist id=%s progress=%s status=%s",
            task["_id"],
            transition.progress,
            transition.status.value,
        )
        return self._populate_one(updated)
