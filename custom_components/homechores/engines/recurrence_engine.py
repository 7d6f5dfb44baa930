"""Recurrence Engine for HomeChores.

Turns a declarative recurrence rule into concrete occurrence dates:
- `dateutil.relativedelta` (via dt_utils) for month clamping (Jan 31 + 1 month = Feb 28)
- A fixed gap table for "N times per week" rules without pinned weekdays
- Weekday pinning for "N times per week" rules with selected days
- Best-effort bilingual (English/Hebrew) parsing of free-text frequencies

Recurrence rules are a tagged union of frozen dataclasses. Build them from
stored template dicts with `build_recurrence_rule()`; the builder is the only
place where stored values are normalized, so every rule instance is valid.

IMPORTANT: This module must NOT import from coordinator.py or managers.
Only import from const.py, utils, and standard libraries.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
import re
from typing import Any, ClassVar

from .. import const
from ..utils.dt_utils import (
    TIME_UNIT_DAYS,
    TIME_UNIT_MONTHS,
    TIME_UNIT_WEEKS,
    dt_add_interval,
    dt_parse_date,
    dt_start_of_week,
    dt_today_local,
    dt_weekday_sunday_first,
)

# =============================================================================
# RECURRENCE RULES (tagged union)
# =============================================================================


@dataclass(frozen=True)
class DailyRule:
    """Every `interval` days."""

    interval: int = 1


@dataclass(frozen=True)
class WeeklyRule:
    """Every `interval` weeks."""

    interval: int = 1


@dataclass(frozen=True)
class MonthlyRule:
    """Every `interval` months (clamped to month end)."""

    interval: int = 1


@dataclass(frozen=True)
class TimesPerWeekRule:
    """`times` occurrences per week.

    Attributes:
        times: Occurrences per week, always within 1-7
        selected_days: Sorted Sunday-first weekday numbers (0-6) whose count
            equals `times`, or None to spread occurrences with the gap table
    """

    times: int = 1
    selected_days: tuple[int, ...] | None = None


@dataclass(frozen=True)
class CustomRule:
    """Free-text frequency such as "every 3 days" or "כל 2 שבועות"."""

    expression: str = ""


RecurrenceRule = DailyRule | WeeklyRule | MonthlyRule | TimesPerWeekRule | CustomRule


def _positive_int(value: Any, default: int = 1) -> int:
    """Coerce a stored interval to a positive integer (<=0 or garbage -> default)."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _normalize_selected_days(raw_days: Any, times: int) -> tuple[int, ...] | None:
    """Validate pinned weekdays; a set whose size differs from `times` is ignored."""
    if not raw_days or not isinstance(raw_days, (list, tuple, set)):
        return None

    days: set[int] = set()
    for day in raw_days:
        try:
            number = int(day)
        except (TypeError, ValueError):
            continue
        if 0 <= number <= 6:
            days.add(number)

    if len(days) != times:
        const.LOGGER.debug(
            "Ignoring selected_days %s: %s days selected for %s times per week",
            raw_days,
            len(days),
            times,
        )
        return None
    return tuple(sorted(days))


def build_recurrence_rule(template: Mapping[str, Any]) -> RecurrenceRule:
    """Build a recurrence rule from a stored template dict.

    Args:
        template: Template data with frequency_type / frequency_interval /
            selected_days / frequency_custom keys.

    Returns:
        A normalized RecurrenceRule. Unknown frequency types recur every
        DEFAULT_CUSTOM_INTERVAL_DAYS days.
    """
    frequency_type = template.get(const.DATA_TEMPLATE_FREQUENCY_TYPE)
    interval = _positive_int(template.get(const.DATA_TEMPLATE_FREQUENCY_INTERVAL))

    if frequency_type == const.FREQUENCY_DAILY:
        return DailyRule(interval)
    if frequency_type == const.FREQUENCY_WEEKLY:
        return WeeklyRule(interval)
    if frequency_type == const.FREQUENCY_MONTHLY:
        return MonthlyRule(interval)
    if frequency_type == const.FREQUENCY_TIMES_PER_WEEK:
        times = min(max(interval, 1), 7)
        return TimesPerWeekRule(
            times=times,
            selected_days=_normalize_selected_days(
                template.get(const.DATA_TEMPLATE_SELECTED_DAYS), times
            ),
        )
    if frequency_type == const.FREQUENCY_CUSTOM:
        return CustomRule(template.get(const.DATA_TEMPLATE_FREQUENCY_CUSTOM) or "")

    const.LOGGER.warning(
        "Unknown frequency type '%s' on template '%s', defaulting to every %s days",
        frequency_type,
        template.get(const.DATA_ID),
        const.DEFAULT_CUSTOM_INTERVAL_DAYS,
    )
    return DailyRule(const.DEFAULT_CUSTOM_INTERVAL_DAYS)


def rule_to_template_fields(rule: RecurrenceRule) -> dict[str, Any]:
    """Flatten a rule back into stored template fields."""
    fields: dict[str, Any] = {
        const.DATA_TEMPLATE_FREQUENCY_INTERVAL: 1,
        const.DATA_TEMPLATE_SELECTED_DAYS: None,
        const.DATA_TEMPLATE_FREQUENCY_CUSTOM: None,
    }
    if isinstance(rule, DailyRule):
        fields[const.DATA_TEMPLATE_FREQUENCY_TYPE] = const.FREQUENCY_DAILY
        fields[const.DATA_TEMPLATE_FREQUENCY_INTERVAL] = rule.interval
    elif isinstance(rule, WeeklyRule):
        fields[const.DATA_TEMPLATE_FREQUENCY_TYPE] = const.FREQUENCY_WEEKLY
        fields[const.DATA_TEMPLATE_FREQUENCY_INTERVAL] = rule.interval
    elif isinstance(rule, MonthlyRule):
        fields[const.DATA_TEMPLATE_FREQUENCY_TYPE] = const.FREQUENCY_MONTHLY
        fields[const.DATA_TEMPLATE_FREQUENCY_INTERVAL] = rule.interval
    elif isinstance(rule, TimesPerWeekRule):
        fields[const.DATA_TEMPLATE_FREQUENCY_TYPE] = const.FREQUENCY_TIMES_PER_WEEK
        fields[const.DATA_TEMPLATE_FREQUENCY_INTERVAL] = rule.times
        if rule.selected_days:
            fields[const.DATA_TEMPLATE_SELECTED_DAYS] = list(rule.selected_days)
    else:
        fields[const.DATA_TEMPLATE_FREQUENCY_TYPE] = const.FREQUENCY_CUSTOM
        fields[const.DATA_TEMPLATE_FREQUENCY_CUSTOM] = rule.expression
    return fields


# =============================================================================
# RECURRENCE ENGINE
# =============================================================================

_NUMBER_PATTERN = re.compile(r"(\d+)")
_EVERY_N_DAYS_PATTERN = re.compile(
    r"כל\s*(\d+)\s*יום|every\s*(\d+)\s*days?|(\d+)\s*יום|(\d+)\s*days?",
    re.IGNORECASE,
)


def _contains_keyword(text: str, keywords: tuple[str, ...]) -> bool:
    """Match English keywords as whole words ("week", "weeks", "weekly"), others as substrings."""
    for keyword in keywords:
        if keyword.isascii():
            if re.search(rf"\b{keyword}(?:s|ly)?\b", text):
                return True
        elif keyword in text:
            return True
    return False


def _first_number(text: str, default: int = 1) -> int:
    """Return the first integer in `text`, or `default`."""
    match = _NUMBER_PATTERN.search(text)
    return _positive_int(match.group(1), default) if match else default


class RecurrenceEngine:
    """Pure date arithmetic for recurrence rules.

    All methods are static - no instance state. Dates are compared at day
    granularity; any time-of-day on an input is dropped.
    """

    # Day gaps that spread N occurrences evenly over a 7-day week.
    # Each pattern sums to 7; `step` walks the pattern cyclically.
    TIMES_PER_WEEK_GAPS: ClassVar[dict[int, tuple[int, ...]]] = {
        1: (7,),
        2: (3, 4),
        3: (2, 3, 2),
        4: (2, 1, 2, 2),
        5: (1, 2, 1, 1, 2),
        6: (1, 1, 1, 1, 1, 2),
        7: (1,),
    }

    @staticmethod
    def parse_custom_expression(expression: str | None) -> tuple[str, int]:
        """Extract an interval from a free-text frequency.

        Matching is heuristic: day keywords win over week keywords, which win
        over month keywords; the first number in the text is the count.

        Args:
            expression: Text such as "every 3 days", "2 weeks", "כל חודש".

        Returns:
            (interval_unit, count). Unrecognized text yields
            (days, DEFAULT_CUSTOM_INTERVAL_DAYS).
        """
        text = (expression or "").lower().strip()
        if text:
            if any(keyword in text for keyword in const.CUSTOM_DAILY_KEYWORDS):
                return TIME_UNIT_DAYS, 1
            if _contains_keyword(text, const.CUSTOM_DAY_KEYWORDS):
                return TIME_UNIT_DAYS, _first_number(text)
            if _contains_keyword(text, const.CUSTOM_WEEK_KEYWORDS):
                return TIME_UNIT_WEEKS, _first_number(text)
            if _contains_keyword(text, const.CUSTOM_MONTH_KEYWORDS):
                return TIME_UNIT_MONTHS, _first_number(text)

        const.LOGGER.debug(
            "Unrecognized custom frequency '%s', using %s days",
            expression,
            const.DEFAULT_CUSTOM_INTERVAL_DAYS,
        )
        return TIME_UNIT_DAYS, const.DEFAULT_CUSTOM_INTERVAL_DAYS

    @staticmethod
    def parse_frequency(text: str | None) -> RecurrenceRule:
        """Convert an imported free-text frequency into a structured rule.

        Examples:
            "daily" / "יומי" -> DailyRule(1)
            "every 3 days" / "כל 3 יום" -> DailyRule(3)
            "2 weeks" -> WeeklyRule(2)
            "monthly" -> MonthlyRule(1)
            anything else -> CustomRule(text)
        """
        if not text or not text.strip():
            return WeeklyRule(1)

        freq = text.lower().strip()

        if any(keyword in freq for keyword in const.CUSTOM_DAILY_KEYWORDS):
            return DailyRule(1)

        match = _EVERY_N_DAYS_PATTERN.search(freq)
        if match:
            days = next(group for group in match.groups() if group)
            return DailyRule(_positive_int(days))

        if _contains_keyword(freq, const.CUSTOM_WEEK_KEYWORDS):
            return WeeklyRule(_first_number(freq))

        if _contains_keyword(freq, const.CUSTOM_MONTH_KEYWORDS):
            return MonthlyRule(_first_number(freq))

        return CustomRule(text)

    @staticmethod
    def next_occurrence(
        rule: RecurrenceRule,
        anchor: date | datetime | str | None = None,
        step: int = 0,
    ) -> date:
        """Calculate the occurrence following `anchor`.

        Args:
            rule: Recurrence rule.
            anchor: Reference date (completion date, previous occurrence).
                None or unparsable values mean today.
            step: Position in the times-per-week gap pattern (ignored by
                other rules).

        Returns:
            The next occurrence date, always strictly after the anchor day.
        """
        anchor_day = dt_parse_date(anchor) or dt_today_local()

        if isinstance(rule, DailyRule):
            return dt_add_interval(anchor_day, TIME_UNIT_DAYS, rule.interval)
        if isinstance(rule, WeeklyRule):
            return dt_add_interval(anchor_day, TIME_UNIT_WEEKS, rule.interval)
        if isinstance(rule, MonthlyRule):
            return dt_add_interval(anchor_day, TIME_UNIT_MONTHS, rule.interval)
        if isinstance(rule, TimesPerWeekRule):
            if rule.selected_days:
                for offset in range(1, 8):
                    candidate = anchor_day + timedelta(days=offset)
                    if dt_weekday_sunday_first(candidate) in rule.selected_days:
                        return candidate
            gaps = RecurrenceEngine.TIMES_PER_WEEK_GAPS[rule.times]
            return anchor_day + timedelta(days=gaps[step % len(gaps)])
        if isinstance(rule, CustomRule):
            unit, count = RecurrenceEngine.parse_custom_expression(rule.expression)
            return dt_add_interval(anchor_day, unit, count)

        raise TypeError(f"Unsupported recurrence rule: {rule!r}")

    @staticmethod
    def occurrences_in_range(
        rule: RecurrenceRule,
        start: date | datetime | str,
        end: date | datetime | str,
        anchor: date | datetime | str | None = None,
    ) -> list[date]:
        """Generate occurrences within the half-open range [start, end).

        Times-per-week rules with pinned weekdays produce an exact
        day-of-week schedule. All other rules walk `next_occurrence`
        sequentially: from `start` itself when no anchor is given, or from
        the occurrence after `anchor` when one is.

        Args:
            rule: Recurrence rule.
            start: First day of the range (inclusive).
            end: Day after the range (exclusive).
            anchor: Last known occurrence preceding the range, if any.

        Returns:
            Ordered, de-duplicated dates, at most MAX_OCCURRENCES long.
        """
        start_day = dt_parse_date(start)
        end_day = dt_parse_date(end)
        if start_day is None or end_day is None or end_day <= start_day:
            return []

        if isinstance(rule, TimesPerWeekRule) and rule.selected_days:
            return RecurrenceEngine._pinned_weekday_occurrences(
                rule.selected_days, start_day, end_day
            )
        return RecurrenceEngine._sequential_occurrences(
            rule, start_day, end_day, dt_parse_date(anchor)
        )

    @staticmethod
    def _pinned_weekday_occurrences(
        selected_days: tuple[int, ...], start: date, end: date
    ) -> list[date]:
        """Selected weekdays of every Sunday-started week overlapping [start, end)."""
        occurrences: list[date] = []
        week_start = dt_start_of_week(start)

        while week_start < end and len(occurrences) < const.MAX_OCCURRENCES:
            for weekday in selected_days:
                candidate = week_start + timedelta(days=weekday)
                if start <= candidate < end:
                    occurrences.append(candidate)
            week_start += timedelta(days=7)

        return occurrences[: const.MAX_OCCURRENCES]

    @staticmethod
    def _sequential_occurrences(
        rule: RecurrenceRule, start: date, end: date, anchor: date | None
    ) -> list[date]:
        """Walk next_occurrence until passing `end`."""
        occurrences: list[date] = []
        seen: set[date] = set()

        step = 0
        if anchor is None:
            current = start
        else:
            current = RecurrenceEngine.next_occurrence(rule, anchor, step)
            step += 1

        iteration = 0
        while (
            current < end
            and iteration < const.MAX_SEQUENTIAL_ITERATIONS
            and len(occurrences) < const.MAX_OCCURRENCES
        ):
            if current >= start and current not in seen:
                occurrences.append(current)
                seen.add(current)
            current = RecurrenceEngine.next_occurrence(rule, current, step)
            step += 1
            iteration += 1

        if current < end and iteration >= const.MAX_SEQUENTIAL_ITERATIONS:
            const.LOGGER.warning(
                "RecurrenceEngine: Maximum iterations reached for %s between %s and %s",
                rule,
                start,
                end,
            )

        return occurrences
