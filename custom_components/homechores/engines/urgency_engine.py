"""Urgency Engine - Pure logic for bucketing open tasks by how soon they are due.

Buckets, most urgent first: overdue, today, this_week, coming_soon, later.
A task deferred past today is hidden from the urgent buckets and routed by its
defer date instead of its due date.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
Malformed tasks never raise; anything without a usable date lands in `later`.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from .. import const
from ..type_defs import TaskData, UrgencyBuckets
from ..utils.dt_utils import dt_parse_date
from .generation_engine import GenerationEngine


class UrgencyEngine:
    """Stateless task classification helpers."""

    @staticmethod
    def classify(tasks: Iterable[TaskData], now: datetime | date) -> UrgencyBuckets:
        """Partition open tasks into ordered urgency buckets.

        Args:
            tasks: Tasks in any state; completed and archived ones are dropped.
            now: Current time (local) or today's date.

        Returns:
            Five disjoint buckets, each sorted by due date with undated tasks last.
        """
        today = dt_parse_date(now) or date.today()
        week_end = today + timedelta(days=const.URGENCY_WEEK_DAYS)
        two_weeks_end = today + timedelta(days=const.URGENCY_TWO_WEEKS_DAYS)

        buckets: UrgencyBuckets = {
            const.BUCKET_OVERDUE: [],
            const.BUCKET_TODAY: [],
            const.BUCKET_THIS_WEEK: [],
            const.BUCKET_COMING_SOON: [],
            const.BUCKET_LATER: [],
        }  # type: ignore[misc]

        for task in GenerationEngine.open_tasks(tasks):
            defer_until = dt_parse_date(task.get(const.DATA_TASK_DEFER_UNTIL))
            if defer_until is not None and defer_until > today:
                if defer_until < week_end:
                    buckets[const.BUCKET_THIS_WEEK].append(task)
                elif defer_until < two_weeks_end:
                    buckets[const.BUCKET_COMING_SOON].append(task)
                else:
                    buckets[const.BUCKET_LATER].append(task)
                continue

            due = dt_parse_date(task.get(const.DATA_TASK_DUE_DATE))
            if due is None:
                bucket = const.BUCKET_LATER
            elif due == today:
                bucket = const.BUCKET_TODAY
            elif due < today:
                bucket = const.BUCKET_OVERDUE
            elif due < week_end:
                bucket = const.BUCKET_THIS_WEEK
            elif due < two_weeks_end:
                bucket = const.BUCKET_COMING_SOON
            else:
                bucket = const.BUCKET_LATER
            buckets[bucket].append(task)

        for bucket_tasks in buckets.values():
            bucket_tasks.sort(key=UrgencyEngine._due_sort_key)

        return buckets

    @staticmethod
    def _due_sort_key(task: TaskData) -> tuple[int, date]:
        """Sort by due date ascending; tasks without one sort last."""
        due = dt_parse_date(task.get(const.DATA_TASK_DUE_DATE))
        if due is None:
            return (1, date.max)
        return (0, due)

    @staticmethod
    def tasks_in_date_range(
        tasks: Iterable[TaskData], start: date | str, end: date | str
    ) -> list[TaskData]:
        """Tasks whose due day falls within [start, end] (inclusive)."""
        start_day = dt_parse_date(start)
        end_day = dt_parse_date(end)
        if start_day is None or end_day is None:
            return []

        result = []
        for task in tasks:
            due = dt_parse_date(task.get(const.DATA_TASK_DUE_DATE))
            if due is not None and start_day <= due <= end_day:
                result.append(task)
        return result

    @staticmethod
    def week_range(day: date) -> tuple[date, date]:
        """Monday-to-Sunday week containing `day`."""
        monday = day - timedelta(days=day.weekday())
        return monday, monday + timedelta(days=6)

    @staticmethod
    def month_range(day: date) -> tuple[date, date]:
        """First and last day of the month containing `day`."""
        first = day.replace(day=1)
        next_month = (first + timedelta(days=32)).replace(day=1)
        return first, next_month - timedelta(days=1)
