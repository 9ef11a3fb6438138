from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from bson import ObjectId

from taskboard.errors import ValidationError


def utcnow() -> datetime:
    """Naive UTC timestamp, the form MongoDB hands datetimes back in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TaskStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @property
    def key(self) -> str:
        # Response keys drop the space: "In Progress" -> "InProgress"
        return self.value.replace(" ", "")

    @classmethod
    def parse(cls, raw) -> "TaskStatus":
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            wanted = raw.replace(" ", "").lower()
            for status in cls:
                if status.key.lower() == wanted:
                    return status
        raise ValidationError(f"Invalid status: {raw!r}")


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, raw) -> "TaskPriority":
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            for priority in cls:
                if priority.value.lower() == raw.strip().lower():
                    return priority
        raise ValidationError(f"Invalid priority: {raw!r}")


@dataclass
class ChecklistItem:
    text: str
    completed: bool = False

    def to_doc(self) -> dict:
        return {"text": self.text, "completed": self.completed}


def parse_checklist(raw) -> List[ChecklistItem]:
    if not isinstance(raw, list):
        raise ValidationError("todoChecklist must be an array")
    items = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise ValidationError("Checklist items must be objects")
        text = entry.get("text", "")
        completed = entry.get("completed", False)
        if not isinstance(text, str):
            raise ValidationError("Checklist item text must be a string")
        if not isinstance(completed, bool):
            raise ValidationError("Checklist item completed must be a boolean")
        items.append(ChecklistItem(text=text, completed=completed))
    return items


def parse_due_date(raw) -> datetime:
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, str) and raw.strip():
        try:
            value = datetime.fromisoformat(raw.strip())
        except ValueError:
            raise ValidationError("Invalid dueDate format") from None
    else:
        raise ValidationError("dueDate is required")
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_user_ids(raw) -> List[ObjectId]:
    """Validate an assignee list; duplicates collapse, first occurrence wins."""
    if not isinstance(raw, list):
        raise ValidationError("AssignedTo must be an array of user IDs")
    ids: List[ObjectId] = []
    for value in raw:
        if not ObjectId.is_valid(value):
            raise ValidationError(f"Invalid user ID: {value!r}")
        oid = ObjectId(value)
        if oid not in ids:
            ids.append(oid)
    return ids


def parse_attachments(raw) -> List[str]:
    if not isinstance(raw, list) or not all(isinstance(a, str) for a in raw):
        raise ValidationError("attachments must be an array of strings")
    return list(raw)


@dataclass
class Task:
    title: str
    due_date: datetime
    created_by: ObjectId
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    assigned_to: List[ObjectId] = field(default_factory=list)
    todo_checklist: List[ChecklistItem] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)
    progress: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[ObjectId] = None

    def to_doc(self) -> dict:
        doc = {
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "status": self.status.value,
            "dueDate": self.due_date,
            "assignedTo": list(self.assigned_to),
            "createdBy": self.created_by,
            "todoChecklist": [item.to_doc() for item in self.todo_checklist],
            "attachments": list(self.attachments),
            "progress": self.progress,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.id is not None:
            doc["_id"] = self.id
        return doc
