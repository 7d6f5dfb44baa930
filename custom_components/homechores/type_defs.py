"""Type definitions for HomeChores data structures.

Templates and tasks are stored as plain dicts (JSON documents in Home
Assistant storage). The TypedDicts below document their fixed keys for static
analysis only; runtime code still reads optional fields with `.get()` because
stored documents may predate a field.

IMPORTANT: This file must NOT import from coordinator.py or managers to avoid
circular dependencies. Only import from typing.
"""

from typing import NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

TemplateId = str  # UUID string
TaskId = str  # UUID string
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
DedupKey = tuple[TemplateId, ISODate]


# =============================================================================
# Stored Entities
# =============================================================================


class TemplateData(TypedDict):
    """A recurring chore definition."""

    id: TemplateId
    template_name: str
    description: str
    category: str
    priority: str
    assigned_to: str
    estimated_duration: int | None
    room_location: str | None
    frequency_type: str  # daily | weekly | monthly | times_per_week | custom
    frequency_interval: int
    frequency_custom: str | None
    selected_days: list[int] | None  # 0 = Sunday ... 6 = Saturday
    is_active: bool
    auto_generate: bool
    generation_offset: int  # days before due date the instance is created
    notification_offset_hours: int
    created_at: NotRequired[ISODatetime]
    updated_at: NotRequired[ISODatetime]


class TaskData(TypedDict):
    """A concrete, dated task (materialized from a template or manual)."""

    id: TaskId
    template_id: TemplateId | None
    title: str
    description: str
    category: str
    priority: str
    assigned_to: str
    due_date: ISODate | None
    due_time: NotRequired[str | None]  # "HH:MM"
    scheduled_date: NotRequired[ISODate | None]
    status: str  # pending | in_progress | completed
    is_archived: bool
    completion_date: ISODatetime | None
    defer_until: ISODate | None
    defer_count: int
    auto_generated: bool
    estimated_duration: NotRequired[int | None]
    room_location: NotRequired[str | None]
    notification_offset_hours: NotRequired[int]
    postponed_from_date: NotRequired[ISODate | None]
    postponed_date: NotRequired[ISODate | None]
    created_at: NotRequired[ISODatetime]
    updated_at: NotRequired[ISODatetime]


class UrgencyBuckets(TypedDict):
    """Open tasks partitioned by urgency, most urgent first."""

    overdue: list[TaskData]
    today: list[TaskData]
    this_week: list[TaskData]
    coming_soon: list[TaskData]
    later: list[TaskData]
