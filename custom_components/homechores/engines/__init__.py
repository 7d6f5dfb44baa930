"""Engine modules for HomeChores integration.

Contains pure computation engines (no Home Assistant imports):
- recurrence_engine: Recurrence rules and occurrence calculation
- generation_engine: Deduplication index and instance planning
- urgency_engine: Urgency bucket classification and date ranges
- reminder_engine: Reminder firing times
"""

# Use relative imports within package to avoid mypy module resolution issues
from .generation_engine import DeduplicationIndex, GenerationEngine
from .recurrence_engine import (
    CustomRule,
    DailyRule,
    MonthlyRule,
    RecurrenceEngine,
    RecurrenceRule,
    TimesPerWeekRule,
    WeeklyRule,
    build_recurrence_rule,
)
from .reminder_engine import ReminderEngine
from .urgency_engine import UrgencyEngine

__all__ = [
    "CustomRule",
    "DailyRule",
    "DeduplicationIndex",
    "GenerationEngine",
    "MonthlyRule",
    "RecurrenceEngine",
    "RecurrenceRule",
    "ReminderEngine",
    "TimesPerWeekRule",
    "UrgencyEngine",
    "WeeklyRule",
    "build_recurrence_rule",
]
