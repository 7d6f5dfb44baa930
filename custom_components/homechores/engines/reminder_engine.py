"""Reminder Engine - Pure logic for reminder firing times.

A reminder fires `notification_offset_hours` before the task's due instant
(due_date combined with due_time in the local timezone). Tasks without a
due time never get a reminder.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta
import math
from typing import Any
from zoneinfo import ZoneInfo

from .. import const
from ..utils.dt_utils import as_local, dt_parse_date, dt_parse_time, get_default_timezone


class ReminderEngine:
    """Stateless reminder time calculations."""

    @staticmethod
    def lead_hours(task: Mapping[str, Any]) -> float:
        """Reminder lead time in hours.

        Missing, non-numeric, non-finite or out-of-range values fall back to
        the default lead.
        """
        raw = task.get(const.DATA_TASK_NOTIFICATION_OFFSET_HOURS)
        if raw is None or isinstance(raw, bool):
            return const.DEFAULT_NOTIFICATION_OFFSET_HOURS
        try:
            hours = float(raw)
        except (TypeError, ValueError, OverflowError):
            return const.DEFAULT_NOTIFICATION_OFFSET_HOURS
        if not math.isfinite(hours):
            return const.DEFAULT_NOTIFICATION_OFFSET_HOURS
        if not 0 <= hours <= const.MAX_NOTIFICATION_OFFSET_HOURS:
            return const.DEFAULT_NOTIFICATION_OFFSET_HOURS
        return hours

    @staticmethod
    def due_instant(
        task: Mapping[str, Any], tz: ZoneInfo | None = None
    ) -> datetime | None:
        """Combine due_date and due_time into an aware local datetime."""
        due_day = dt_parse_date(task.get(const.DATA_TASK_DUE_DATE), tz)
        due_time = dt_parse_time(task.get(const.DATA_TASK_DUE_TIME))
        if due_day is None or due_time is None:
            return None
        return datetime.combine(due_day, due_time, tzinfo=tz or get_default_timezone())

    @staticmethod
    def notification_time(
        task: Mapping[str, Any], tz: ZoneInfo | None = None
    ) -> datetime | None:
        """Instant the reminder for `task` should fire, or None."""
        due = ReminderEngine.due_instant(task, tz)
        if due is None:
            return None
        try:
            return due - timedelta(hours=ReminderEngine.lead_hours(task))
        except (OverflowError, ValueError):
            # Due dates near datetime.min cannot be shifted back
            return None

    @staticmethod
    def is_reminder_due_now(
        task: Mapping[str, Any], now: datetime, tz: ZoneInfo | None = None
    ) -> bool:
        """True when the reminder fires within the next hour (inclusive)."""
        fire_at = ReminderEngine.notification_time(task, tz)
        if fire_at is None:
            return False
        delta = fire_at - as_local(now, tz)
        return timedelta(0) <= delta <= timedelta(hours=const.REMINDER_WINDOW_HOURS)
