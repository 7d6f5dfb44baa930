"""Tests for HomeChoresStore and EntityCollection."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant

from custom_components.homechores import const
from custom_components.homechores.store import HomeChoresStore, NotEqual

# ============================================================================
# Test Class: Initialization
# ============================================================================


class TestInitialization:
    """Tests for loading the storage document."""

    async def test_fresh_install_uses_default_structure(
        self, store: HomeChoresStore
    ) -> None:
        """No stored data yields empty buckets and default meta."""
        assert store.data == HomeChoresStore.get_default_structure()
        assert len(store.templates) == 0
        assert len(store.tasks) == 0
        assert store.meta[const.DATA_META_REMINDERS_SENT] == {}

    async def test_existing_document_merged_with_defaults(
        self, hass: HomeAssistant
    ) -> None:
        """Missing sections of an older document are filled in."""
        stored = {
            const.DATA_META: {const.DATA_META_LAST_GENERATION: "2024-01-01"},
            const.DATA_TASKS: {"task-1": {const.DATA_ID: "task-1"}},
        }
        with patch(
            "homeassistant.helpers.storage.Store.async_load", return_value=stored
        ):
            store = HomeChoresStore(hass, const.STORAGE_KEY)
            await store.async_initialize()

        assert store.meta[const.DATA_META_LAST_GENERATION] == "2024-01-01"
        assert store.meta[const.DATA_META_REMINDERS_SENT] == {}
        assert store.data[const.DATA_TEMPLATES] == {}
        assert await store.tasks.async_get_by_id("task-1") == {const.DATA_ID: "task-1"}


# ============================================================================
# Test Class: Collection Operations
# ============================================================================


class TestEntityCollection:
    """Tests for filter/create/update/subscribe."""

    async def test_create_assigns_id_and_timestamps(
        self, store: HomeChoresStore
    ) -> None:
        """Created items get a uuid and created/updated timestamps."""
        task = await store.tasks.async_create({const.DATA_TASK_TITLE: "Dishes"})

        assert task[const.DATA_ID]
        assert task[const.DATA_CREATED_AT] == task[const.DATA_UPDATED_AT]
        assert store.data[const.DATA_TASKS][task[const.DATA_ID]][
            const.DATA_TASK_TITLE
        ] == "Dishes"

    async def test_returned_items_are_copies(self, store: HomeChoresStore) -> None:
        """Mutating a returned item does not touch the store."""
        task = await store.tasks.async_create({const.DATA_TASK_TITLE: "Dishes"})
        task[const.DATA_TASK_TITLE] = "Changed"

        stored = await store.tasks.async_get_by_id(task[const.DATA_ID])
        assert stored[const.DATA_TASK_TITLE] == "Dishes"

    async def test_filter_equality_and_not_equal(self, store: HomeChoresStore) -> None:
        """Predicates combine equality and NotEqual."""
        await store.tasks.async_create(
            {const.DATA_TASK_TEMPLATE_ID: "t1", const.DATA_TASK_STATUS: "pending"}
        )
        await store.tasks.async_create(
            {const.DATA_TASK_TEMPLATE_ID: "t1", const.DATA_TASK_STATUS: "completed"}
        )
        await store.tasks.async_create(
            {const.DATA_TASK_TEMPLATE_ID: None, const.DATA_TASK_STATUS: "pending"}
        )

        assert len(await store.tasks.async_filter()) == 3
        assert len(
            await store.tasks.async_filter({const.DATA_TASK_TEMPLATE_ID: "t1"})
        ) == 2
        assert len(
            await store.tasks.async_filter(
                {const.DATA_TASK_TEMPLATE_ID: NotEqual(None)}
            )
        ) == 2
        open_templated = await store.tasks.async_filter(
            {
                const.DATA_TASK_TEMPLATE_ID: "t1",
                const.DATA_TASK_STATUS: NotEqual("completed"),
            }
        )
        assert [task[const.DATA_TASK_STATUS] for task in open_templated] == ["pending"]

    async def test_update_merges_fields(self, store: HomeChoresStore) -> None:
        """Partial updates keep other fields and the id."""
        task = await store.tasks.async_create(
            {const.DATA_TASK_TITLE: "Dishes", const.DATA_TASK_DEFER_COUNT: 0}
        )
        updated = await store.tasks.async_update(
            task[const.DATA_ID],
            {const.DATA_TASK_DEFER_COUNT: 1, const.DATA_ID: "hijack"},
        )

        assert updated[const.DATA_ID] == task[const.DATA_ID]
        assert updated[const.DATA_TASK_TITLE] == "Dishes"
        assert updated[const.DATA_TASK_DEFER_COUNT] == 1

    async def test_update_unknown_raises(self, store: HomeChoresStore) -> None:
        """Updating a missing id raises KeyError."""
        with pytest.raises(KeyError):
            await store.tasks.async_update("missing", {const.DATA_TASK_TITLE: "x"})

    async def test_get_by_id_missing(self, store: HomeChoresStore) -> None:
        """Missing ids return None."""
        assert await store.templates.async_get_by_id("missing") is None

    async def test_subscribe_receives_initial_and_changes(
        self, store: HomeChoresStore
    ) -> None:
        """Subscribers get the current list immediately and after each change."""
        received: list[list[dict[str, Any]]] = []
        unsubscribe = store.tasks.subscribe(
            received.append, {const.DATA_TASK_STATUS: "pending"}
        )
        assert received == [[]]

        task = await store.tasks.async_create({const.DATA_TASK_STATUS: "pending"})
        assert len(received[-1]) == 1

        await store.tasks.async_update(
            task[const.DATA_ID], {const.DATA_TASK_STATUS: "completed"}
        )
        assert received[-1] == []

        unsubscribe()
        await store.tasks.async_create({const.DATA_TASK_STATUS: "pending"})
        assert len(received) == 3


# ============================================================================
# Test Class: Persistence
# ============================================================================


class TestPersistence:
    """Tests for save and delete."""

    async def test_create_persists_document(self, store: HomeChoresStore) -> None:
        """Every write saves the whole document."""
        with patch.object(store._store, "async_save") as mock_save:  # pylint: disable=protected-access
            await store.templates.async_create({const.DATA_TEMPLATE_NAME: "Laundry"})

        mock_save.assert_awaited_once_with(store.data)

    async def test_save_errors_are_logged_not_raised(
        self, store: HomeChoresStore
    ) -> None:
        """A failing disk write does not propagate."""
        with patch.object(
            store._store,  # pylint: disable=protected-access
            "async_save",
            side_effect=OSError("disk full"),
        ):
            await store.async_save()

    async def test_delete_storage_resets_data(self, store: HomeChoresStore) -> None:
        """Deleting storage clears in-memory data."""
        await store.tasks.async_create({const.DATA_TASK_TITLE: "Dishes"})
        with patch.object(store._store, "async_remove") as mock_remove:  # pylint: disable=protected-access
            await store.async_delete_storage()

        mock_remove.assert_awaited_once()
        assert len(store.tasks) == 0
