"""Base manager class for HomeChores managers.

Managers talk to each other through dispatcher signals scoped to one config
entry, e.g. TaskManager emits `task_completed` and GenerationManager listens
for it to schedule the next occurrence of a recurring chore.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import HomeChoresDataCoordinator


def task_signal(entry_id: str, suffix: str) -> str:
    """Dispatcher signal name: 'homechores_{entry_id}_{suffix}'."""
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


class BaseManager(ABC):
    """Shared plumbing for the generation, task and reminder managers."""

    def __init__(
        self, hass: HomeAssistant, coordinator: HomeChoresDataCoordinator
    ) -> None:
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    def emit(self, suffix: str, **payload: Any) -> None:
        """Send a task event (created / updated / completed) to other managers.

        Listeners receive the keyword payload as a single dict, e.g.
        {"task_id": ..., "template_id": ..., "completion_date": ...}.
        """
        const.LOGGER.debug(
            "DEBUG: Task event '%s' (%s)", suffix, ", ".join(sorted(payload))
        )
        async_dispatcher_send(self.hass, task_signal(self.entry_id, suffix), payload)

    def listen(self, suffix: str, callback: Callable[..., Any]) -> None:
        """Subscribe to a task event until the config entry unloads."""
        unsub = async_dispatcher_connect(
            self.hass, task_signal(self.entry_id, suffix), callback
        )
        self.coordinator.config_entry.async_on_unload(unsub)

    @abstractmethod
    async def async_setup(self) -> None:
        """Register listeners and timers; called once by the coordinator."""
