"""Tests for TaskManager - deferral, moves, postponement and transitions."""

from __future__ import annotations

from datetime import date
from typing import Any
from unittest.mock import MagicMock

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
import pytest

from custom_components.homechores import const
from custom_components.homechores.managers.task_manager import TaskManager
from custom_components.homechores.store import HomeChoresStore

TODAY = date(2024, 1, 10)

# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def task_manager(hass: HomeAssistant, mock_coordinator: MagicMock) -> TaskManager:
    """Create TaskManager with a fixed 'today'."""
    manager = TaskManager(hass, mock_coordinator, today=lambda: TODAY)
    manager.emit = MagicMock()
    return manager


async def _create_task(store: HomeChoresStore, **fields: Any) -> dict[str, Any]:
    task = {
        const.DATA_TASK_TEMPLATE_ID: None,
        const.DATA_TASK_TITLE: "Take out trash",
        const.DATA_TASK_DUE_DATE: "2024-01-10",
        const.DATA_TASK_SCHEDULED_DATE: "2024-01-10",
        const.DATA_TASK_STATUS: const.TASK_STATUS_PENDING,
        const.DATA_TASK_IS_ARCHIVED: False,
        const.DATA_TASK_DEFER_UNTIL: None,
        const.DATA_TASK_DEFER_COUNT: 0,
    }
    task.update(fields)
    return await store.tasks.async_create(task)


async def _create_biweekly_task(store: HomeChoresStore, interval: int = 2) -> dict:
    template = await store.templates.async_create(
        {
            const.DATA_TEMPLATE_NAME: "Change sheets",
            const.DATA_TEMPLATE_FREQUENCY_TYPE: const.FREQUENCY_WEEKLY,
            const.DATA_TEMPLATE_FREQUENCY_INTERVAL: interval,
        }
    )
    return await _create_task(
        store, **{const.DATA_TASK_TEMPLATE_ID: template[const.DATA_ID]}
    )


# ============================================================================
# Test Class: Lookups
# ============================================================================


class TestLookups:
    """Tests for not-found handling."""

    async def test_missing_task_raises(self, task_manager: TaskManager) -> None:
        """Unknown task ids raise a translated error."""
        with pytest.raises(HomeAssistantError) as exc_info:
            await task_manager.async_get_task_or_raise("missing")

        assert exc_info.value.translation_key == const.TRANS_KEY_ERROR_TASK_NOT_FOUND

    async def test_missing_template_raises(self, task_manager: TaskManager) -> None:
        """Unknown template ids raise a translated error."""
        with pytest.raises(HomeAssistantError) as exc_info:
            await task_manager.async_get_template_or_raise("missing")

        assert (
            exc_info.value.translation_key == const.TRANS_KEY_ERROR_TEMPLATE_NOT_FOUND
        )


# ============================================================================
# Test Class: Deferral
# ============================================================================


class TestDefer:
    """Tests for deferring tasks."""

    async def test_defer_sets_date_and_counts(
        self, task_manager: TaskManager, store: HomeChoresStore
    ) -> None:
        """Deferral records the date and increments the counter only."""
        task = await _create_task(store)

        updated = await task_manager.async_defer_task(
            task[const.DATA_ID], date(2024, 1, 15)
        )
        updated = await task_manager.async_defer_task(task[const.DATA_ID], "2024-01-20")

        assert updated[const.DATA_TASK_DEFER_UNTIL] == "2024-01-20"
        assert updated[const.DATA_TASK_DEFER_COUNT] == 2
        assert updated[const.DATA_TASK_DUE_DATE] == "2024-01-10"
        assert updated[const.DATA_TASK_STATUS] == const.TASK_STATUS_PENDING
        task_manager.emit.assert_called_with(
            const.SIGNAL_SUFFIX_TASK_UPDATED,
            task_id=task[const.DATA_ID],
            fields=[const.DATA_TASK_DEFER_COUNT, const.DATA_TASK_DEFER_UNTIL],
        )

    async def test_defer_invalid_date(
        self, task_manager: TaskManager, store: HomeChoresStore
    ) -> None:
        """Unparsable dates are rejected before touching the task."""
        task = await _create_task(store)

        with pytest.raises(ServiceValidationError) as exc_info:
            await task_manager.async_defer_task(task[const.DATA_ID], "someday")

        assert exc_info.value.translation_key == const.TRANS_KEY_ERROR_INVALID_DATE
        stored = await store.tasks.async_get_by_id(task[const.DATA_ID])
        assert stored[const.DATA_TASK_DEFER_COUNT] == 0


# ============================================================================
# Test Class: Moves and Postponement
# ============================================================================


class TestMoveAndPostpone:
    """Tests for calendar moves and bi-weekly postponement."""

    async def test_move_sets_due_and_scheduled(
        self, task_manager: TaskManager, store: HomeChoresStore
    ) -> None:
        """Moving changes both due and scheduled dates."""
        task = await _create_task(store)

        updated = await task_manager.async_move_task_to_date(
            task[const.DATA_ID], date(2024, 1, 13)
        )

        assert updated[const.DATA_TASK_DUE_DATE] == "2024-01-13"
        assert updated[const.DATA_TASK_SCHEDULED_DATE] == "2024-01-13"

    async def test_postpone_biweekly_by_one_week(
        self, task_manager: TaskManager, store: HomeChoresStore
    ) -> None:
        """Bi-weekly tasks move a week; the first original date is kept."""
        task = await _create_biweekly_task(store)

        first = await task_manager.async_postpone_task(task[const.DATA_ID])
        second = await task_manager.async_postpone_task(task[const.DATA_ID])

        assert first[const.DATA_TASK_DUE_DATE] == "2024-01-17"
        assert second[const.DATA_TASK_DUE_DATE] == "2024-01-24"
        assert second[const.DATA_TASK_POSTPONED_FROM_DATE] == "2024-01-10"
        assert second[const.DATA_TASK_POSTPONED_DATE] == "2024-01-10"

    async def test_postpone_rejects_weekly(
        self, task_manager: TaskManager, store: HomeChoresStore
    ) -> None:
        """Only every-2-weeks templates can be postponed."""
        task = await _create_biweekly_task(store, interval=1)

        with pytest.raises(ServiceValidationError) as exc_info:
            await task_manager.async_postpone_task(task[const.DATA_ID])

        assert (
            exc_info.value.translation_key
            == const.TRANS_KEY_ERROR_POSTPONE_NOT_BIWEEKLY
        )

    async def test_postpone_rejects_manual_task(
        self, task_manager: TaskManager, store: HomeChoresStore
    ) -> None:
        """Template-less tasks cannot be postponed."""
        task = await _create_task(store)

        with pytest.raises(ServiceValidationError):
            await task_manager.async_postpone_task(task[const.DATA_ID])

    async def test_postpone_requires_due_date(
        self, task_manager: TaskManager, store: HomeChoresStore
    ) -> None:
        """A bi-weekly task without a due date cannot be postponed."""
        task = await _create_biweekly_task(store)
        await store.tasks.async_update(
            task[const.DATA_ID], {const.DATA_TASK_DUE_DATE: None}
        )

        with pytest.raises(ServiceValidationError) as exc_info:
            await task_manager.async_postpone_task(task[const.DATA_ID])

        assert (
            exc_info.value.translation_key == const.TRANS_KEY_ERROR_POSTPONE_NO_DUE_DATE
        )


# ============================================================================
# Test Class: Status Transitions
# ============================================================================


class TestTransitions:
    """Tests for pending -> in_progress -> completed."""

    async def test_start_then_complete(
        self, task_manager: TaskManager, store: HomeChoresStore
    ) -> None:
        """A task can be started and then completed."""
        task = await _create_task(store, **{const.DATA_TASK_TEMPLATE_ID: "tmpl-1"})

        started = await task_manager.async_start_task(task[const.DATA_ID])
        completed = await task_manager.async_complete_task(task[const.DATA_ID])

        assert started[const.DATA_TASK_STATUS] == const.TASK_STATUS_IN_PROGRESS
        assert completed[const.DATA_TASK_STATUS] == const.TASK_STATUS_COMPLETED
        assert completed[const.DATA_TASK_COMPLETION_DATE]
        task_manager.emit.assert_called_with(
            const.SIGNAL_SUFFIX_TASK_COMPLETED,
            task_id=task[const.DATA_ID],
            template_id="tmpl-1",
            completion_date=completed[const.DATA_TASK_COMPLETION_DATE],
        )

    async def test_pending_can_complete_directly(
        self, task_manager: TaskManager, store: HomeChoresStore
    ) -> None:
        """Starting is optional."""
        task = await _create_task(store)
        completed = await task_manager.async_complete_task(task[const.DATA_ID])
        assert completed[const.DATA_TASK_STATUS] == const.TASK_STATUS_COMPLETED

    @pytest.mark.parametrize(
        ("status", "action"),
        [
            (const.TASK_STATUS_COMPLETED, "async_complete_task"),
            (const.TASK_STATUS_COMPLETED, "async_start_task"),
            (const.TASK_STATUS_IN_PROGRESS, "async_start_task"),
        ],
    )
    async def test_invalid_transitions_rejected(
        self,
        task_manager: TaskManager,
        store: HomeChoresStore,
        status: str,
        action: str,
    ) -> None:
        """Completed tasks are final; started tasks cannot be restarted."""
        task = await _create_task(store, **{const.DATA_TASK_STATUS: status})

        with pytest.raises(ServiceValidationError) as exc_info:
            await getattr(task_manager, action)(task[const.DATA_ID])

        assert exc_info.value.translation_key == const.TRANS_KEY_ERROR_INVALID_TRANSITION
        task_manager.emit.assert_not_called()


# ============================================================================
# Test Class: Creation
# ============================================================================


class TestCreation:
    """Tests for manual task and template creation."""

    async def test_create_task_normalizes_fields(
        self, task_manager: TaskManager, store: HomeChoresStore
    ) -> None:
        """Dates become ISO strings and times HH:MM."""
        task = await task_manager.async_create_task(
            {
                const.FIELD_TITLE: "Buy bulbs",
                const.FIELD_DUE_DATE: date(2024, 1, 12),
                const.FIELD_DUE_TIME: "18:30:00",
                const.DATA_TASK_ESTIMATED_DURATION: 15,
                const.DATA_TASK_ROOM_LOCATION: "hallway",
            }
        )

        assert task[const.DATA_TASK_TEMPLATE_ID] is None
        assert task[const.DATA_TASK_DUE_DATE] == "2024-01-12"
        assert task[const.DATA_TASK_DUE_TIME] == "18:30"
        assert task[const.DATA_TASK_AUTO_GENERATED] is False
        assert task[const.DATA_TASK_PRIORITY] == const.PRIORITY_MEDIUM
        assert task[const.DATA_TASK_ESTIMATED_DURATION] == 15
        assert task[const.DATA_TASK_ROOM_LOCATION] == "hallway"
        assert len(store.tasks) == 1

    async def test_create_task_invalid_time(self, task_manager: TaskManager) -> None:
        """An unparsable due time is rejected."""
        with pytest.raises(ServiceValidationError) as exc_info:
            await task_manager.async_create_task(
                {const.FIELD_TITLE: "Buy bulbs", const.FIELD_DUE_TIME: "25:99"}
            )

        assert exc_info.value.translation_key == const.TRANS_KEY_ERROR_INVALID_TIME

    async def test_create_template_from_free_text(
        self, task_manager: TaskManager
    ) -> None:
        """A free-text frequency overrides the structured fields."""
        template = await task_manager.async_create_template(
            {
                const.FIELD_NAME: "Water plants",
                const.FIELD_FREQUENCY: "every 3 days",
                const.DATA_TEMPLATE_FREQUENCY_TYPE: const.FREQUENCY_MONTHLY,
            }
        )

        assert template[const.DATA_TEMPLATE_FREQUENCY_TYPE] == const.FREQUENCY_DAILY
        assert template[const.DATA_TEMPLATE_FREQUENCY_INTERVAL] == 3
        assert template[const.DATA_TEMPLATE_IS_ACTIVE] is True
        assert template[const.DATA_TEMPLATE_AUTO_GENERATE] is False

    async def test_create_template_structured(self, task_manager: TaskManager) -> None:
        """Structured frequency fields are normalized."""
        template = await task_manager.async_create_template(
            {
                const.FIELD_NAME: "Gym",
                const.DATA_TEMPLATE_FREQUENCY_TYPE: const.FREQUENCY_TIMES_PER_WEEK,
                const.DATA_TEMPLATE_FREQUENCY_INTERVAL: 2,
                const.DATA_TEMPLATE_SELECTED_DAYS: [4, 0],
                const.DATA_TEMPLATE_GENERATION_OFFSET: -2,
                const.DATA_TEMPLATE_AUTO_GENERATE: True,
            }
        )

        assert template[const.DATA_TEMPLATE_SELECTED_DAYS] == [0, 4]
        assert template[const.DATA_TEMPLATE_GENERATION_OFFSET] == 0
        assert template[const.DATA_TEMPLATE_AUTO_GENERATE] is True
