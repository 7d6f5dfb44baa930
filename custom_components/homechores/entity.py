"""Base entity classes for HomeChores integration."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from . import const
from .coordinator import HomeChoresDataCoordinator


def create_system_device_info(config_entry: ConfigEntry) -> DeviceInfo:
    """Create device info grouping all entities of one HomeChores instance."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, f"{config_entry.entry_id}_system")},
        name=config_entry.title,
        manufacturer=const.HOMECHORES_TITLE,
        model="Household Tasks",
        entry_type=DeviceEntryType.SERVICE,
    )


class HomeChoresCoordinatorEntity(CoordinatorEntity[HomeChoresDataCoordinator]):
    """Base entity class for HomeChores sensors with typed coordinator access."""

    @property
    def coordinator(self) -> HomeChoresDataCoordinator:
        """Return typed coordinator."""
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: HomeChoresDataCoordinator) -> None:
        """Set coordinator with proper typing."""
        object.__setattr__(self, "_coordinator", value)
