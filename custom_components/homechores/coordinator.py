# File: coordinator.py
"""Coordinator for the HomeChores integration.

Owns the store, the managers and the generation guard for one config entry.
Coordinator data is the current urgency classification of open tasks; it is
recomputed on every periodic refresh and whenever the task collection
changes. Each refresh also requests a (guarded) horizon generation pass.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .engines.urgency_engine import UrgencyEngine
from .managers import GenerationGuard, GenerationManager, ReminderManager, TaskManager
from .type_defs import UrgencyBuckets
from .utils.dt_utils import dt_now_local

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Coroutine

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .store import HomeChoresStore


class HomeChoresDataCoordinator(DataUpdateCoordinator[UrgencyBuckets]):
    """Coordinator for HomeChores integration."""

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: HomeChoresStore,
    ) -> None:
        """Initialize the HomeChoresDataCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.store = store

        self.generation_manager = GenerationManager(hass, self)
        self.task_manager = TaskManager(hass, self)
        self.reminder_manager = ReminderManager(hass, self)
        self.generation_guard = GenerationGuard(
            self.generation_manager.async_generate_for_horizon,
            create_task=self._create_generation_task,
        )

    def _create_generation_task(
        self, coro: Coroutine[Any, Any, None]
    ) -> asyncio.Task[None]:
        # Entry-scoped background task: cancelled automatically on unload
        return self.config_entry.async_create_background_task(
            self.hass, coro, f"{const.DOMAIN}_horizon_generation"
        )

    async def async_setup_managers(self) -> None:
        """Set up managers and subscribe to task changes."""
        for manager in (
            self.generation_manager,
            self.task_manager,
            self.reminder_manager,
        ):
            await manager.async_setup()

        self.config_entry.async_on_unload(
            self.store.tasks.subscribe(self._on_tasks_changed)
        )

    @callback
    def _on_tasks_changed(self, tasks: list[dict[str, Any]]) -> None:
        """Reclassify immediately so sensors follow task changes."""
        self.async_set_updated_data(UrgencyEngine.classify(tasks, dt_now_local()))

    async def _async_update_data(self) -> UrgencyBuckets:
        """Periodic update: classify tasks and extend the horizon."""
        try:
            tasks = await self.store.tasks.async_filter()
            buckets = UrgencyEngine.classify(tasks, dt_now_local())
        except (KeyError, TypeError, ValueError) as err:
            raise UpdateFailed(f"Error updating HomeChores data: {err}") from err

        self.generation_guard.request_horizon_generation()
        return buckets

    def request_horizon_generation(self) -> asyncio.Task[None] | None:
        """Start a guarded horizon generation pass (fire-and-forget)."""
        return self.generation_guard.request_horizon_generation()
