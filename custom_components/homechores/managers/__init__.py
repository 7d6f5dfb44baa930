"""Manager modules for HomeChores integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and handle cross-cutting concerns.
"""

from .base_manager import BaseManager
from .generation_guard import GenerationGuard
from .generation_manager import GenerationManager
from .reminder_manager import ReminderManager
from .task_manager import TaskManager

__all__ = [
    "BaseManager",
    "GenerationGuard",
    "GenerationManager",
    "ReminderManager",
    "TaskManager",
]
