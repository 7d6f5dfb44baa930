"""Generation Engine - Pure planning logic for materializing task instances.

This engine provides stateless, pure Python functions for:
- Deduplication keys: one instance slot per (template_id, due_date)
- Scheduling dates: instances are created `generation_offset` days early
- Window planning: which occurrence dates still need an instance
- Instance payloads: template fields copied onto a new pending task

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
Reading and writing the task/template collections belongs in GenerationManager.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from datetime import date, datetime, timedelta
from typing import Any

from .. import const
from ..type_defs import DedupKey, TaskData
from ..utils.dt_utils import dt_parse_date
from .recurrence_engine import RecurrenceEngine, RecurrenceRule

# =============================================================================
# DEDUPLICATION INDEX
# =============================================================================


class DeduplicationIndex:
    """In-memory set of (template_id, due_date) keys for existing instances.

    Built once per generation pass from persisted tasks and extended as new
    instances are created, so a single pass never creates the same slot
    twice. The index is advisory: the backing store has no unique constraint,
    so two concurrent passes can still race.
    """

    def __init__(self, keys: Iterable[DedupKey] | None = None) -> None:
        """Initialize the index with optional pre-existing keys."""
        self._keys: set[DedupKey] = set(keys or ())

    @staticmethod
    def make_key(template_id: str, due: date | datetime | str) -> DedupKey | None:
        """Build the key for a slot, or None when the due date is unusable."""
        due_day = dt_parse_date(due)
        if not template_id or due_day is None:
            return None
        return (template_id, due_day.isoformat())

    @classmethod
    def from_tasks(cls, tasks: Iterable[Mapping[str, Any]]) -> DeduplicationIndex:
        """Index every non-archived templated task.

        Completed instances are indexed too so that a finished chore inside
        the horizon is not materialized again.
        """
        index = cls()
        for task in tasks:
            if task.get(const.DATA_TASK_IS_ARCHIVED):
                continue
            key = cls.make_key(
                task.get(const.DATA_TASK_TEMPLATE_ID) or "",
                task.get(const.DATA_TASK_DUE_DATE),
            )
            if key is not None:
                index._keys.add(key)
        return index

    def contains(self, template_id: str, due: date | datetime | str) -> bool:
        """Return True when an instance already occupies the slot."""
        key = self.make_key(template_id, due)
        return key is not None and key in self._keys

    def add(self, template_id: str, due: date | datetime | str) -> None:
        """Record that an instance now occupies the slot."""
        key = self.make_key(template_id, due)
        if key is not None:
            self._keys.add(key)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[DedupKey]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)


# =============================================================================
# GENERATION ENGINE
# =============================================================================


class GenerationEngine:
    """Pure planning helpers used by GenerationManager.

    All methods are static - no instance state.
    """

    @staticmethod
    def generation_offset(template: Mapping[str, Any]) -> int:
        """Days before the due date an instance should be created (never negative)."""
        try:
            offset = int(template.get(const.DATA_TEMPLATE_GENERATION_OFFSET) or 0)
        except (TypeError, ValueError):
            return 0
        return max(offset, 0)

    @staticmethod
    def scheduling_date(due: date, template: Mapping[str, Any]) -> date:
        """Return the day on which the instance for `due` should be created."""
        return due - timedelta(days=GenerationEngine.generation_offset(template))

    @staticmethod
    def is_too_early(due: date, template: Mapping[str, Any], today: date) -> bool:
        """Return True when the scheduling date has not arrived yet."""
        return GenerationEngine.scheduling_date(due, template) > today

    @staticmethod
    def last_completion_date(tasks: Iterable[Mapping[str, Any]]) -> date | None:
        """Most recent completion day among completed tasks, if any."""
        completions = [
            completed
            for task in tasks
            if task.get(const.DATA_TASK_STATUS) == const.TASK_STATUS_COMPLETED
            and (completed := dt_parse_date(task.get(const.DATA_TASK_COMPLETION_DATE)))
        ]
        return max(completions, default=None)

    @staticmethod
    def farthest_due_date(tasks: Iterable[Mapping[str, Any]]) -> date | None:
        """Latest due date among non-archived tasks, if any."""
        due_dates = [
            due
            for task in tasks
            if not task.get(const.DATA_TASK_IS_ARCHIVED)
            and (due := dt_parse_date(task.get(const.DATA_TASK_DUE_DATE)))
        ]
        return max(due_dates, default=None)

    @staticmethod
    def catch_up_anchor(rule: RecurrenceRule, anchor: date, today: date) -> date:
        """Advance a stale anchor to the last occurrence before `today`.

        Keeps the sequence phase (e.g. the weekday of a weekly chore) when a
        template's newest instance lies far in the past.
        """
        following = RecurrenceEngine.next_occurrence(rule, anchor)
        while following < today:
            anchor = following
            following = RecurrenceEngine.next_occurrence(rule, anchor)
        return anchor

    @staticmethod
    def plan_window(
        template_id: str,
        rule: RecurrenceRule,
        start: date,
        end: date,
        index: DeduplicationIndex,
        anchor: date | None = None,
    ) -> list[date]:
        """Occurrence dates in [start, end] that have no instance yet.

        Args:
            template_id: Template owning the slots.
            rule: The template's recurrence rule.
            start: First day of the window (inclusive).
            end: Last day of the window (inclusive).
            index: Existing slots; not modified.
            anchor: Last materialized occurrence before the window, if any.
        """
        occurrences = RecurrenceEngine.occurrences_in_range(
            rule, start, end + timedelta(days=1), anchor=anchor
        )
        return [day for day in occurrences if not index.contains(template_id, day)]

    @staticmethod
    def build_task_from_template(
        template: Mapping[str, Any], due: date
    ) -> dict[str, Any]:
        """Build the payload for a new pending instance (without id/timestamps)."""
        task: dict[str, Any] = {
            const.DATA_TASK_TEMPLATE_ID: template.get(const.DATA_ID),
            const.DATA_TASK_TITLE: template.get(const.DATA_TEMPLATE_NAME, ""),
            const.DATA_TASK_DUE_DATE: due.isoformat(),
            const.DATA_TASK_DUE_TIME: None,
            const.DATA_TASK_SCHEDULED_DATE: GenerationEngine.scheduling_date(
                due, template
            ).isoformat(),
            const.DATA_TASK_STATUS: const.TASK_STATUS_PENDING,
            const.DATA_TASK_IS_ARCHIVED: False,
            const.DATA_TASK_COMPLETION_DATE: None,
            const.DATA_TASK_DEFER_UNTIL: None,
            const.DATA_TASK_DEFER_COUNT: 0,
            const.DATA_TASK_AUTO_GENERATED: True,
            const.DATA_TASK_NOTIFICATION_OFFSET_HOURS: template.get(
                const.DATA_TEMPLATE_NOTIFICATION_OFFSET_HOURS,
                const.DEFAULT_NOTIFICATION_OFFSET_HOURS,
            ),
        }
        for template_field, task_field in const.TEMPLATE_TO_TASK_FIELDS.items():
            task[task_field] = template.get(template_field)

        task[const.DATA_TASK_CATEGORY] = (
            task[const.DATA_TASK_CATEGORY] or const.DEFAULT_CATEGORY
        )
        task[const.DATA_TASK_PRIORITY] = (
            task[const.DATA_TASK_PRIORITY] or const.DEFAULT_PRIORITY
        )
        task[const.DATA_TASK_DESCRIPTION] = task[const.DATA_TASK_DESCRIPTION] or ""
        task[const.DATA_TASK_ASSIGNED_TO] = task[const.DATA_TASK_ASSIGNED_TO] or ""
        return task

    @staticmethod
    def open_tasks(tasks: Iterable[TaskData]) -> list[TaskData]:
        """Tasks that are neither completed nor archived."""
        return [
            task
            for task in tasks
            if task.get(const.DATA_TASK_STATUS) != const.TASK_STATUS_COMPLETED
            and not task.get(const.DATA_TASK_IS_ARCHIVED)
        ]
