"""Shared fixtures for HomeChores tests."""

from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.homechores import const
from custom_components.homechores.config_flow import default_options
from custom_components.homechores.store import HomeChoresStore

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title=const.HOMECHORES_TITLE,
        data={},
        options=default_options(),
        entry_id="test_entry_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any] | None:
    """Return the storage document seen by the integration (None = fresh install)."""
    return None


@pytest.fixture
async def store(hass: HomeAssistant) -> HomeChoresStore:
    """Return an initialized, empty HomeChoresStore."""
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=None,
    ):
        store = HomeChoresStore(hass, const.STORAGE_KEY)
        await store.async_initialize()
    return store


@pytest.fixture
def mock_coordinator(store: HomeChoresStore) -> MagicMock:  # pylint: disable=redefined-outer-name
    """Return a mock coordinator backed by a real store."""
    coordinator = MagicMock()
    coordinator.config_entry.entry_id = "test_entry_id"
    coordinator.config_entry.options = default_options()
    coordinator.store = store
    return coordinator


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any] | None,  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the HomeChores integration for testing with mocked storage."""
    mock_config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry
