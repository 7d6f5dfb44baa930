"""Reminder Manager - Polls open tasks and sends due reminders.

Every `reminder_interval` minutes the manager asks ReminderEngine which open
tasks have a reminder firing within the next hour and sends each one once.
The fire instant of every sent reminder is kept in meta.reminders_sent so
restarts and overlapping polls do not repeat it; moving or rescheduling a
task changes the instant and re-arms its reminder.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.event import async_track_time_interval

from .. import const
from ..engines.generation_engine import GenerationEngine
from ..engines.reminder_engine import ReminderEngine
from ..notification_helper import (
    async_send_notification,
    send_persistent_notification,
)
from ..utils.dt_utils import dt_now_local
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import HomeChoresDataCoordinator
    from ..type_defs import TaskData

__all__ = ["ReminderManager"]


class ReminderManager(BaseManager):
    """Manager for time-based task reminders."""

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: HomeChoresDataCoordinator,
        *,
        now: Callable[[], datetime] = dt_now_local,
    ) -> None:
        """Initialize ReminderManager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator managing this integration
            now: Clock returning the current local datetime
        """
        super().__init__(hass, coordinator)
        self._now = now

    async def async_setup(self) -> None:
        """Register the reminder polling timer."""
        minutes = self.coordinator.config_entry.options.get(
            const.CONF_REMINDER_INTERVAL, const.DEFAULT_REMINDER_INTERVAL
        )
        self.coordinator.config_entry.async_on_unload(
            async_track_time_interval(
                self.hass, self._async_on_interval, timedelta(minutes=minutes)
            )
        )

    async def _async_on_interval(self, _now: datetime) -> None:
        await self.async_check_reminders()

    @property
    def notify_service(self) -> str:
        """Configured notify service ("" = persistent notification)."""
        return self.coordinator.config_entry.options.get(
            const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE
        )

    async def async_check_reminders(self) -> list[str]:
        """Send every reminder that is due now and not sent yet.

        Returns:
            Ids of the tasks reminded in this poll.
        """
        store = self.coordinator.store
        now = self._now()
        open_tasks = GenerationEngine.open_tasks(await store.tasks.async_filter())

        sent: dict[str, str] = store.meta.setdefault(const.DATA_META_REMINDERS_SENT, {})
        open_ids = {task[const.DATA_ID] for task in open_tasks}
        changed = False

        # Closed tasks no longer need their bookkeeping
        for task_id in [task_id for task_id in sent if task_id not in open_ids]:
            del sent[task_id]
            changed = True

        reminded: list[str] = []
        for task in open_tasks:
            if not ReminderEngine.is_reminder_due_now(task, now):
                continue
            fire_at = ReminderEngine.notification_time(task)
            if fire_at is None:
                continue
            task_id = task[const.DATA_ID]
            if sent.get(task_id) == fire_at.isoformat():
                continue

            await self._async_send_reminder(task)
            sent[task_id] = fire_at.isoformat()
            reminded.append(task_id)
            changed = True

        if changed:
            await store.async_save()
        if reminded:
            const.LOGGER.debug("DEBUG: Reminders sent for tasks: %s", reminded)
        return reminded

    async def _async_send_reminder(self, task: TaskData) -> None:
        due = ReminderEngine.due_instant(task)
        message = const.REMINDER_MESSAGE_FMT.format(
            title=task.get(const.DATA_TASK_TITLE, ""),
            due=due.strftime("%Y-%m-%d %H:%M") if due else "",
        )
        notification_id = const.NOTIFICATION_ID_FMT.format(task[const.DATA_ID])

        if self.notify_service:
            extra_data: dict[str, Any] = {const.NOTIFY_TAG: notification_id}
            await async_send_notification(
                self.hass,
                self.notify_service,
                const.REMINDER_TITLE,
                message,
                extra_data=extra_data,
            )
        else:
            send_persistent_notification(
                self.hass, const.REMINDER_TITLE, message, notification_id
            )
