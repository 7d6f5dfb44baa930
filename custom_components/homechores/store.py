# File: store.py
"""Handles persistent data storage for the HomeChores integration.

Uses Home Assistant's Storage helper to save and load templates and tasks,
ensuring the state is preserved across restarts. Each bucket is exposed as an
EntityCollection offering the small query contract the scheduling engine
relies on: filter, create, update, get-by-id and subscribe.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
import uuid

from homeassistant.helpers.storage import Store

from . import const
from .utils.dt_utils import dt_now_utc

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from homeassistant.core import HomeAssistant


@dataclass(frozen=True, slots=True)
class NotEqual:
    """Filter predicate matching items whose field differs from `value`."""

    value: Any


def _matches(item: Mapping[str, Any], predicates: Mapping[str, Any] | None) -> bool:
    """Return True when `item` satisfies every predicate."""
    if not predicates:
        return True
    for field, expected in predicates.items():
        actual = item.get(field)
        if isinstance(expected, NotEqual):
            if actual == expected.value:
                return False
        elif actual != expected:
            return False
    return True


class EntityCollection:
    """Dict-backed collection of stored entities keyed by id.

    Items handed out are copies; mutate through async_update so that the
    change is persisted and subscribers are notified.
    """

    def __init__(
        self,
        bucket: dict[str, dict[str, Any]],
        save_callback: Callable[[], Awaitable[None]],
    ) -> None:
        """Initialize the collection over a storage bucket.

        Args:
            bucket: The dict inside the storage document holding the items.
            save_callback: Coroutine function persisting the whole document.
        """
        self._bucket = bucket
        self._save = save_callback
        self._subscribers: list[
            tuple[Callable[[list[dict[str, Any]]], None], Mapping[str, Any] | None]
        ] = []

    def __len__(self) -> int:
        return len(self._bucket)

    def _select(self, predicates: Mapping[str, Any] | None) -> list[dict[str, Any]]:
        return [
            deepcopy(item)
            for item in self._bucket.values()
            if _matches(item, predicates)
        ]

    async def async_filter(
        self, predicates: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Return copies of all items matching the predicate map."""
        return self._select(predicates)

    async def async_get_by_id(self, entity_id: str) -> dict[str, Any] | None:
        """Return a copy of the item with `entity_id`, or None."""
        item = self._bucket.get(entity_id)
        return deepcopy(item) if item is not None else None

    async def async_create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Store a new item, assigning its id and timestamps."""
        now_iso = dt_now_utc().isoformat()
        item = deepcopy(dict(data))
        item[const.DATA_ID] = str(uuid.uuid4())
        item[const.DATA_CREATED_AT] = now_iso
        item[const.DATA_UPDATED_AT] = now_iso
        self._bucket[item[const.DATA_ID]] = item
        await self._save()
        self._notify()
        return deepcopy(item)

    async def async_update(
        self, entity_id: str, partial: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Merge `partial` into an existing item.

        Raises:
            KeyError: No item with `entity_id` exists.
        """
        if entity_id not in self._bucket:
            raise KeyError(entity_id)
        item = self._bucket[entity_id]
        item.update(deepcopy(dict(partial)))
        item[const.DATA_ID] = entity_id
        item[const.DATA_UPDATED_AT] = dt_now_utc().isoformat()
        await self._save()
        self._notify()
        return deepcopy(item)

    def subscribe(
        self,
        callback: Callable[[list[dict[str, Any]]], None],
        predicates: Mapping[str, Any] | None = None,
    ) -> Callable[[], None]:
        """Push the matching items to `callback` now and after every change.

        Returns:
            Function removing the subscription.
        """
        entry = (callback, predicates)
        self._subscribers.append(entry)
        callback(self._select(predicates))

        def _unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return _unsubscribe

    def _notify(self) -> None:
        for callback, predicates in list(self._subscribers):
            callback(self._select(predicates))


class HomeChoresStore:
    """Handles persistent storage operations for HomeChores data.

    Thin wrapper around Home Assistant's Store API. The document holds a
    `meta` section plus one bucket per entity type, keyed by id.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).

        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = self.get_default_structure()
        self.templates = EntityCollection(self._data[const.DATA_TEMPLATES], self.async_save)
        self.tasks = EntityCollection(self._data[const.DATA_TASKS], self.async_save)

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_REMINDERS_SENT: {},
                const.DATA_META_LAST_GENERATION: None,
            },
            const.DATA_TEMPLATES: {},
            const.DATA_TASKS: {},
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure.
        """
        const.LOGGER.debug("DEBUG: HomeChoresStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._set_data(self.get_default_structure())
            return

        # Fill in sections missing from older documents
        data = self.get_default_structure()
        data[const.DATA_META].update(existing_data.get(const.DATA_META) or {})
        data[const.DATA_TEMPLATES] = existing_data.get(const.DATA_TEMPLATES) or {}
        data[const.DATA_TASKS] = existing_data.get(const.DATA_TASKS) or {}
        self._set_data(data)
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                "templates": len(self.templates),
                "tasks": len(self.tasks),
            },
        )

    def _set_data(self, new_data: dict[str, Any]) -> None:
        self._data = new_data
        self.templates = EntityCollection(new_data[const.DATA_TEMPLATES], self.async_save)
        self.tasks = EntityCollection(new_data[const.DATA_TASKS], self.async_save)

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    @property
    def meta(self) -> dict[str, Any]:
        """Retrieve the mutable meta section."""
        return self._data[const.DATA_META]

    def get_storage_path(self) -> str:
        """Get the storage file path."""
        return self._store.path

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Raises:
            No exceptions raised - errors are logged but do not stop execution.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s",
                err,
            )

    async def async_delete_storage(self) -> None:
        """Reset in-memory data and remove the storage file."""
        const.LOGGER.warning("WARNING: Clearing all HomeChores data and storage")
        self._set_data(self.get_default_structure())
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s", self._store.path
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
