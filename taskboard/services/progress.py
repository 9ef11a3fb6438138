"""
Checklist-driven progress and the two status transitions.

Status and checklist can each be the authority for a task's state:

- a direct status update wins over the checklist (Completed ticks every item)
- a checklist update wins over the status (status is re-derived)

Everything here is pure; callers persist the resulting Transition.
"""

from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple

from taskboard.models.task_model import ChecklistItem, TaskStatus


@dataclass(frozen=True)
class Transition:
    status: TaskStatus
    progress: int
    checklist: List[ChecklistItem]

    def to_updates(self) -> dict:
        return {
            "status": self.status.value,
            "progress": self.progress,
            "todoChecklist": [item.to_doc() for item in self.checklist],
        }


def completed_count(checklist: Sequence[ChecklistItem]) -> int:
    return sum(1 for item in checklist if item.completed)


def compute_progress(checklist: Sequence[ChecklistItem]) -> Tuple[int, TaskStatus]:
    """
    Progress is done / total * 100 rounded half up; an empty checklist is 0.

    A checklist with any open item reports at most 99, even where rounding
    alone would give 100 (from 200 items up, e.g. 199/200), so 100 and
    Completed always mean every item is ticked.
    """
    total = len(checklist)
    if total == 0:
        return 0, TaskStatus.PENDING

    done = completed_count(checklist)
    # Integer half-up rounding of done / total * 100
    progress = (done * 200 + total) // (2 * total)
    if progress == 100 and done < total:
        # Only a fully ticked checklist may report 100 (and Completed).
        progress = 99

    if progress == 100:
        return progress, TaskStatus.COMPLETED
    if progress > 0:
        return progress, TaskStatus.IN_PROGRESS
    return progress, TaskStatus.PENDING


def transition_by_status(
    checklist: Sequence[ChecklistItem], new_status: TaskStatus, progress: int
) -> Transition:
    if new_status == TaskStatus.COMPLETED:
        done = [replace(item, completed=True) for item in checklist]
        return Transition(status=new_status, progress=100, checklist=done)
    return Transition(status=new_status, progress=progress, checklist=list(checklist))


def transition_by_checklist(checklist: Sequence[ChecklistItem]) -> Transition:
    progress, status = compute_progress(checklist)
    return Transition(status=status, progress=progress, checklist=list(checklist))
