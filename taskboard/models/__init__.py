from .task_model import ChecklistItem, Task, TaskPriority, TaskStatus
from .user_model import Caller, Role, User
