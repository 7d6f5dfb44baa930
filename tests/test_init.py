"""Tests for HomeChores integration setup, unload and removal."""

from unittest.mock import AsyncMock, patch

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.homechores import const
from custom_components.homechores.coordinator import HomeChoresDataCoordinator
from custom_components.homechores.store import HomeChoresStore


async def test_setup_entry(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Setup stores the coordinator and registers services."""
    assert init_integration.state is ConfigEntryState.LOADED

    entry_data = hass.data[const.DOMAIN][init_integration.entry_id]
    assert isinstance(entry_data[const.COORDINATOR], HomeChoresDataCoordinator)
    assert isinstance(entry_data[const.STORE], HomeChoresStore)
    assert entry_data[const.COORDINATOR].data == {
        bucket: [] for bucket in const.URGENCY_BUCKETS
    }

    for service in (
        const.SERVICE_GENERATE_HORIZON,
        const.SERVICE_GENERATE_TASK,
        const.SERVICE_CREATE_TEMPLATE,
        const.SERVICE_CREATE_TASK,
        const.SERVICE_DEFER_TASK,
        const.SERVICE_MOVE_TASK,
        const.SERVICE_POSTPONE_TASK,
        const.SERVICE_START_TASK,
        const.SERVICE_COMPLETE_TASK,
    ):
        assert hass.services.has_service(const.DOMAIN, service)


async def test_unload_entry(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Unload removes services and entry data."""
    assert await hass.config_entries.async_unload(init_integration.entry_id)
    await hass.async_block_till_done()

    assert init_integration.state is ConfigEntryState.NOT_LOADED
    assert init_integration.entry_id not in hass.data[const.DOMAIN]
    assert not hass.services.has_service(const.DOMAIN, const.SERVICE_CREATE_TASK)


async def test_remove_entry_deletes_storage(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Removing the entry deletes the storage file."""
    with patch.object(
        HomeChoresStore, "async_delete_storage", new=AsyncMock()
    ) as mock_delete:
        assert await hass.config_entries.async_remove(init_integration.entry_id)
        await hass.async_block_till_done()

    mock_delete.assert_awaited_once()


async def test_existing_storage_loaded(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Stored templates and tasks are available after setup."""
    stored = {
        const.DATA_META: {const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION},
        const.DATA_TEMPLATES: {
            "tmpl-1": {
                const.DATA_ID: "tmpl-1",
                const.DATA_TEMPLATE_NAME: "Mop floors",
                const.DATA_TEMPLATE_FREQUENCY_TYPE: const.FREQUENCY_WEEKLY,
                const.DATA_TEMPLATE_FREQUENCY_INTERVAL: 1,
                const.DATA_TEMPLATE_IS_ACTIVE: True,
                const.DATA_TEMPLATE_AUTO_GENERATE: False,
            }
        },
        const.DATA_TASKS: {},
    }
    mock_config_entry.add_to_hass(hass)
    with patch("homeassistant.helpers.storage.Store.async_load", return_value=stored):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    store: HomeChoresStore = hass.data[const.DOMAIN][mock_config_entry.entry_id][
        const.STORE
    ]
    template = await store.templates.async_get_by_id("tmpl-1")
    assert template[const.DATA_TEMPLATE_NAME] == "Mop floors"
