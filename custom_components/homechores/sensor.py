# File: sensor.py
"""Sensors for the HomeChores integration.

One sensor per urgency bucket (overdue, today, this_week, coming_soon,
later). The state is the number of open tasks in the bucket; attributes list
a summary of each task in display order.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import HomeChoresDataCoordinator
from .entity import HomeChoresCoordinatorEntity, create_system_device_info


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up urgency bucket sensors for HomeChores."""
    coordinator: HomeChoresDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    async_add_entities(
        TaskBucketSensor(coordinator, entry, bucket) for bucket in const.URGENCY_BUCKETS
    )


class TaskBucketSensor(HomeChoresCoordinatorEntity, SensorEntity):
    """Number of open tasks in one urgency bucket."""

    _attr_has_entity_name = True
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = "tasks"

    def __init__(
        self,
        coordinator: HomeChoresDataCoordinator,
        entry: ConfigEntry,
        bucket: str,
    ) -> None:
        """Initialize the sensor.

        Args:
            coordinator: HomeChoresDataCoordinator instance for data access.
            entry: ConfigEntry for this integration instance.
            bucket: Urgency bucket key (const.URGENCY_BUCKETS).
        """
        super().__init__(coordinator)
        self._bucket = bucket
        self._attr_unique_id = (
            f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_FMT.format(bucket)}"
        )
        self._attr_translation_key = const.TRANS_KEY_SENSOR_BUCKET_FMT.format(bucket)
        self._attr_icon = const.SENSOR_ICONS[bucket]
        self._attr_device_info = create_system_device_info(entry)

    def _bucket_tasks(self) -> list[dict[str, Any]]:
        if not self.coordinator.data:
            return []
        return list(self.coordinator.data.get(self._bucket, []))

    @property
    def native_value(self) -> int:
        """State: number of tasks in the bucket."""
        return len(self._bucket_tasks())

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Bucket name plus a summary of each task."""
        return {
            const.ATTR_BUCKET: self._bucket,
            const.ATTR_TASKS: [
                {
                    const.ATTR_TASK_ID: task.get(const.DATA_ID),
                    const.ATTR_TITLE: task.get(const.DATA_TASK_TITLE),
                    const.ATTR_DUE_DATE: task.get(const.DATA_TASK_DUE_DATE),
                    const.ATTR_DEFER_UNTIL: task.get(const.DATA_TASK_DEFER_UNTIL),
                    const.ATTR_ASSIGNED_TO: task.get(const.DATA_TASK_ASSIGNED_TO),
                }
                for task in self._bucket_tasks()
            ],
        }
