"""Task Manager - Stateful task operations for HomeChores.

Handles every user-driven change to an existing task or template:
- Deferral (hide from the urgent view until a date, due date untouched)
- Calendar moves and bi-weekly postponement
- Status transitions pending -> in_progress -> completed
- Manual task and template creation

Completion emits SIGNAL_SUFFIX_TASK_COMPLETED; GenerationManager listens and
schedules the next occurrence of recurring chores.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError, ServiceValidationError

from .. import const
from ..engines.recurrence_engine import (
    RecurrenceEngine,
    WeeklyRule,
    build_recurrence_rule,
    rule_to_template_fields,
)
from ..utils.dt_utils import dt_now_utc, dt_parse_date, dt_parse_time, dt_today_local
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from homeassistant.core import HomeAssistant

    from ..coordinator import HomeChoresDataCoordinator
    from ..type_defs import TaskData, TemplateData

__all__ = ["TaskManager"]

# Allowed status transitions (from -> to)
_TRANSITIONS: dict[str, tuple[str, ...]] = {
    const.TASK_STATUS_PENDING: (
        const.TASK_STATUS_IN_PROGRESS,
        const.TASK_STATUS_COMPLETED,
    ),
    const.TASK_STATUS_IN_PROGRESS: (const.TASK_STATUS_COMPLETED,),
    const.TASK_STATUS_COMPLETED: (),
}


def _require_date(value: Any) -> date:
    parsed = dt_parse_date(value)
    if parsed is None:
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_INVALID_DATE,
            translation_placeholders={"value": str(value)},
        )
    return parsed


class TaskManager(BaseManager):
    """Manager for task mutations and creation."""

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: HomeChoresDataCoordinator,
        *,
        today: Callable[[], date] = dt_today_local,
    ) -> None:
        """Initialize TaskManager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator managing this integration
            today: Clock returning the local calendar day
        """
        super().__init__(hass, coordinator)
        self._today = today

    async def async_setup(self) -> None:
        """No subscriptions; TaskManager is only driven by service calls."""

    # =========================================================================
    # Lookups
    # =========================================================================

    async def async_get_task_or_raise(self, task_id: str) -> TaskData:
        """Return the stored task or raise HomeAssistantError."""
        task = await self.coordinator.store.tasks.async_get_by_id(task_id)
        if task is None:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_TASK_NOT_FOUND,
                translation_placeholders={"task_id": task_id},
            )
        return task  # type: ignore[return-value]

    async def async_get_template_or_raise(self, template_id: str) -> TemplateData:
        """Return the stored template or raise HomeAssistantError."""
        template = await self.coordinator.store.templates.async_get_by_id(template_id)
        if template is None:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_TEMPLATE_NOT_FOUND,
                translation_placeholders={"template_id": template_id},
            )
        return template  # type: ignore[return-value]

    async def _async_update(self, task_id: str, changes: dict[str, Any]) -> TaskData:
        task = await self.coordinator.store.tasks.async_update(task_id, changes)
        self.emit(
            const.SIGNAL_SUFFIX_TASK_UPDATED,
            task_id=task_id,
            fields=sorted(changes),
        )
        return task  # type: ignore[return-value]

    # =========================================================================
    # Scheduling changes
    # =========================================================================

    async def async_defer_task(self, task_id: str, until_date: date | str) -> TaskData:
        """Hide a task from the urgent view until `until_date`.

        Only `defer_until` and `defer_count` change; due date, status and the
        recurrence anchor are untouched.
        """
        until = _require_date(until_date)
        task = await self.async_get_task_or_raise(task_id)
        defer_count = int(task.get(const.DATA_TASK_DEFER_COUNT) or 0) + 1

        const.LOGGER.info(
            "INFO: Deferring task '%s' until %s (count %s)",
            task.get(const.DATA_TASK_TITLE),
            until,
            defer_count,
        )
        return await self._async_update(
            task_id,
            {
                const.DATA_TASK_DEFER_UNTIL: until.isoformat(),
                const.DATA_TASK_DEFER_COUNT: defer_count,
            },
        )

    async def async_move_task_to_date(
        self, task_id: str, new_date: date | str
    ) -> TaskData:
        """Move a task to another day (due and scheduled date)."""
        target = _require_date(new_date)
        task = await self.async_get_task_or_raise(task_id)

        const.LOGGER.info(
            "INFO: Moving task '%s' from %s to %s",
            task.get(const.DATA_TASK_TITLE),
            task.get(const.DATA_TASK_DUE_DATE),
            target,
        )
        return await self._async_update(
            task_id,
            {
                const.DATA_TASK_DUE_DATE: target.isoformat(),
                const.DATA_TASK_SCHEDULED_DATE: target.isoformat(),
            },
        )

    async def async_postpone_task(self, task_id: str) -> TaskData:
        """Push a bi-weekly chore back by one week.

        `postponed_from_date` keeps the first original due date across
        repeated postponements; `postponed_date` records when it happened.

        Raises:
            ServiceValidationError: Task is not bi-weekly or has no due date.
        """
        task = await self.async_get_task_or_raise(task_id)

        template_id = task.get(const.DATA_TASK_TEMPLATE_ID)
        template = (
            await self.coordinator.store.templates.async_get_by_id(template_id)
            if template_id
            else None
        )
        if template is None or build_recurrence_rule(template) != WeeklyRule(2):
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_POSTPONE_NOT_BIWEEKLY,
                translation_placeholders={"task_id": task_id},
            )

        due = dt_parse_date(task.get(const.DATA_TASK_DUE_DATE))
        if due is None:
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_POSTPONE_NO_DUE_DATE,
                translation_placeholders={"task_id": task_id},
            )

        new_due = due + timedelta(weeks=1)
        return await self._async_update(
            task_id,
            {
                const.DATA_TASK_DUE_DATE: new_due.isoformat(),
                const.DATA_TASK_POSTPONED_FROM_DATE: task.get(
                    const.DATA_TASK_POSTPONED_FROM_DATE
                )
                or due.isoformat(),
                const.DATA_TASK_POSTPONED_DATE: self._today().isoformat(),
            },
        )

    # =========================================================================
    # Status transitions
    # =========================================================================

    async def _async_transition(self, task_id: str, new_status: str) -> TaskData:
        task = await self.async_get_task_or_raise(task_id)
        current = task.get(const.DATA_TASK_STATUS) or const.TASK_STATUS_PENDING
        if new_status not in _TRANSITIONS.get(current, ()):
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INVALID_TRANSITION,
                translation_placeholders={
                    "task_id": task_id,
                    "current": current,
                    "target": new_status,
                },
            )

        changes: dict[str, Any] = {const.DATA_TASK_STATUS: new_status}
        if new_status == const.TASK_STATUS_COMPLETED:
            changes[const.DATA_TASK_COMPLETION_DATE] = dt_now_utc().isoformat()
        return await self._async_update(task_id, changes)

    async def async_start_task(self, task_id: str) -> TaskData:
        """Mark a pending task as in progress."""
        return await self._async_transition(task_id, const.TASK_STATUS_IN_PROGRESS)

    async def async_complete_task(self, task_id: str) -> TaskData:
        """Complete a task and announce it for next-occurrence generation."""
        task = await self._async_transition(task_id, const.TASK_STATUS_COMPLETED)
        const.LOGGER.info("INFO: Completed task '%s'", task.get(const.DATA_TASK_TITLE))
        self.emit(
            const.SIGNAL_SUFFIX_TASK_COMPLETED,
            task_id=task_id,
            template_id=task.get(const.DATA_TASK_TEMPLATE_ID),
            completion_date=task.get(const.DATA_TASK_COMPLETION_DATE),
        )
        return task

    # =========================================================================
    # Creation
    # =========================================================================

    async def async_create_task(self, data: Mapping[str, Any]) -> TaskData:
        """Create a manual (template-less) task."""
        due = dt_parse_date(data.get(const.DATA_TASK_DUE_DATE))
        raw_time = data.get(const.DATA_TASK_DUE_TIME)
        due_time = dt_parse_time(raw_time)
        if raw_time and due_time is None:
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INVALID_TIME,
                translation_placeholders={"value": str(raw_time)},
            )

        payload: dict[str, Any] = {
            const.DATA_TASK_TEMPLATE_ID: None,
            const.DATA_TASK_TITLE: data[const.DATA_TASK_TITLE],
            const.DATA_TASK_DESCRIPTION: data.get(const.DATA_TASK_DESCRIPTION, ""),
            const.DATA_TASK_CATEGORY: data.get(
                const.DATA_TASK_CATEGORY, const.DEFAULT_CATEGORY
            ),
            const.DATA_TASK_PRIORITY: data.get(
                const.DATA_TASK_PRIORITY, const.DEFAULT_PRIORITY
            ),
            const.DATA_TASK_ASSIGNED_TO: data.get(const.DATA_TASK_ASSIGNED_TO, ""),
            const.DATA_TASK_ESTIMATED_DURATION: data.get(
                const.DATA_TASK_ESTIMATED_DURATION
            ),
            const.DATA_TASK_ROOM_LOCATION: data.get(const.DATA_TASK_ROOM_LOCATION, ""),
            const.DATA_TASK_DUE_DATE: due.isoformat() if due else None,
            const.DATA_TASK_DUE_TIME: due_time.strftime("%H:%M") if due_time else None,
            const.DATA_TASK_SCHEDULED_DATE: due.isoformat() if due else None,
            const.DATA_TASK_STATUS: const.TASK_STATUS_PENDING,
            const.DATA_TASK_IS_ARCHIVED: False,
            const.DATA_TASK_COMPLETION_DATE: None,
            const.DATA_TASK_DEFER_UNTIL: None,
            const.DATA_TASK_DEFER_COUNT: 0,
            const.DATA_TASK_AUTO_GENERATED: False,
            const.DATA_TASK_NOTIFICATION_OFFSET_HOURS: data.get(
                const.DATA_TASK_NOTIFICATION_OFFSET_HOURS,
                const.DEFAULT_NOTIFICATION_OFFSET_HOURS,
            ),
        }
        task = await self.coordinator.store.tasks.async_create(payload)
        const.LOGGER.info("INFO: Created task '%s'", task[const.DATA_TASK_TITLE])
        self.emit(const.SIGNAL_SUFFIX_TASK_CREATED, task_id=task[const.DATA_ID])
        return task  # type: ignore[return-value]

    async def async_create_template(self, data: Mapping[str, Any]) -> TemplateData:
        """Create a recurring chore template.

        A free-text `frequency` (e.g. "every 3 days") takes precedence over
        the structured frequency fields.
        """
        if data.get(const.FIELD_FREQUENCY):
            rule = RecurrenceEngine.parse_frequency(data[const.FIELD_FREQUENCY])
        else:
            rule = build_recurrence_rule(data)

        payload: dict[str, Any] = {
            const.DATA_TEMPLATE_NAME: data[const.DATA_TEMPLATE_NAME],
            const.DATA_TEMPLATE_DESCRIPTION: data.get(
                const.DATA_TEMPLATE_DESCRIPTION, ""
            ),
            const.DATA_TEMPLATE_CATEGORY: data.get(
                const.DATA_TEMPLATE_CATEGORY, const.DEFAULT_CATEGORY
            ),
            const.DATA_TEMPLATE_PRIORITY: data.get(
                const.DATA_TEMPLATE_PRIORITY, const.DEFAULT_PRIORITY
            ),
            const.DATA_TEMPLATE_ASSIGNED_TO: data.get(
                const.DATA_TEMPLATE_ASSIGNED_TO, ""
            ),
            const.DATA_TEMPLATE_ESTIMATED_DURATION: data.get(
                const.DATA_TEMPLATE_ESTIMATED_DURATION
            ),
            const.DATA_TEMPLATE_ROOM_LOCATION: data.get(
                const.DATA_TEMPLATE_ROOM_LOCATION
            ),
            const.DATA_TEMPLATE_IS_ACTIVE: data.get(const.DATA_TEMPLATE_IS_ACTIVE, True),
            const.DATA_TEMPLATE_AUTO_GENERATE: data.get(
                const.DATA_TEMPLATE_AUTO_GENERATE, False
            ),
            const.DATA_TEMPLATE_GENERATION_OFFSET: max(
                int(data.get(const.DATA_TEMPLATE_GENERATION_OFFSET) or 0), 0
            ),
            const.DATA_TEMPLATE_NOTIFICATION_OFFSET_HOURS: data.get(
                const.DATA_TEMPLATE_NOTIFICATION_OFFSET_HOURS,
                const.DEFAULT_NOTIFICATION_OFFSET_HOURS,
            ),
            **rule_to_template_fields(rule),
        }
        template = await self.coordinator.store.templates.async_create(payload)
        const.LOGGER.info(
            "INFO: Created template '%s' (%s)",
            template[const.DATA_TEMPLATE_NAME],
            rule,
        )
        return template  # type: ignore[return-value]
