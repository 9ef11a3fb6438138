"""Authorization predicates, one per kind of operation."""

from typing import Any, Dict

from taskboard.models.user_model import Caller


def is_assignee(caller: Caller, task: Dict[str, Any]) -> bool:
    return any(str(uid) == str(caller.id) for uid in task.get("assignedTo") or [])


def can_administer(caller: Caller) -> bool:
    return caller.is_admin


def can_read(caller: Caller, task: Dict[str, Any]) -> bool:
    # Any authenticated user may fetch a task by id.
    return True


def can_write_status(caller: Caller, task: Dict[str, Any]) -> bool:
    return caller.is_admin or is_assignee(caller, task)


def can_write_checklist(caller: Caller, task: Dict[str, Any]) -> bool:
    return caller.is_admin or is_assignee(caller, task)


def can_update_fields(caller: Caller, task: Dict[str, Any]) -> bool:
    return caller.is_admin or is_assignee(caller, task)


def visibility_filter(caller: Caller) -> Dict[str, Any]:
    """Query restricting tasks to what ``caller`` may list."""
    if caller.is_admin:
        return {}
    return {"assignedTo": caller.id}
