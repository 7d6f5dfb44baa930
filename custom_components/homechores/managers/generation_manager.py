"""Generation Manager - Materializes task instances from recurring templates.

This manager owns every write that turns a template into dated tasks:
- Single generation (explicit calendar placement or "next occurrence")
- Window generation over a date range with deduplication
- Horizon generation: the background pass extending every active template
  up to `horizon_days` ahead of today

ARCHITECTURE:
- GenerationManager = STATEFUL orchestration (reads/writes the store)
- RecurrenceEngine / GenerationEngine = pure date math and planning
- GenerationGuard (coordinator) decides WHEN a horizon pass may run

Deduplication is best-effort: the store offers no conditional create, so two
passes racing on the same (template_id, due_date) slot can both write. Passes
started through the guard never overlap within one process.
"""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError

from .. import const
from ..engines.generation_engine import DeduplicationIndex, GenerationEngine
from ..engines.recurrence_engine import RecurrenceEngine, build_recurrence_rule
from ..store import NotEqual
from ..utils.dt_utils import dt_today_local
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from homeassistant.core import HomeAssistant

    from ..coordinator import HomeChoresDataCoordinator
    from ..type_defs import TaskData

__all__ = ["GenerationManager"]

# Per-template failures that must not abort a pass
GENERATION_ERRORS = (
    HomeAssistantError,
    OSError,
    ArithmeticError,
    ValueError,
    KeyError,
    TypeError,
)


class GenerationManager(BaseManager):
    """Manager creating task instances from templates.

    Responsibilities:
    - Create instances for explicit or next-occurrence dates
    - Fill each template's horizon without re-walking covered days
    - React to completed templated tasks by scheduling the next occurrence

    NOT responsible for:
    - Throttling / mutual exclusion (GenerationGuard)
    - Task status transitions (TaskManager)
    """

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: HomeChoresDataCoordinator,
        *,
        today: Callable[[], date] = dt_today_local,
        template_delay: float = const.GENERATION_TEMPLATE_DELAY,
    ) -> None:
        """Initialize GenerationManager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator managing this integration
            today: Clock returning the local calendar day
            template_delay: Seconds to yield between templates in a horizon pass
        """
        super().__init__(hass, coordinator)
        self._today = today
        self._template_delay = template_delay

    async def async_setup(self) -> None:
        """Subscribe to task completion to keep recurring chores going."""
        self.listen(const.SIGNAL_SUFFIX_TASK_COMPLETED, self._on_task_completed)

    @property
    def horizon_days(self) -> int:
        """Days ahead of today the horizon pass fills."""
        return int(
            self.coordinator.config_entry.options.get(
                const.CONF_HORIZON_DAYS, const.DEFAULT_HORIZON_DAYS
            )
        )

    # =========================================================================
    # Single generation
    # =========================================================================

    async def async_generate_from_template(
        self,
        template: Mapping[str, Any],
        explicit_due_date: date | None = None,
    ) -> TaskData | None:
        """Create one instance of `template`.

        With `explicit_due_date` the instance is always created for that day.
        Otherwise the next occurrence after the latest completion (or today)
        is used, and nothing is created while its scheduling date
        (due - generation_offset) is still in the future.

        Returns:
            The created task, or None when there was nothing to do.
        """
        store = self.coordinator.store
        template_id = template.get(const.DATA_ID)
        if not template_id:
            const.LOGGER.warning(
                "WARNING: Generate From Template - Template without id skipped"
            )
            return None

        existing = await store.tasks.async_filter(
            {const.DATA_TASK_TEMPLATE_ID: template_id}
        )
        today = self._today()

        if explicit_due_date is not None:
            due = explicit_due_date
        else:
            rule = build_recurrence_rule(template)
            anchor = GenerationEngine.last_completion_date(existing) or today
            due = RecurrenceEngine.next_occurrence(rule, anchor)
            if GenerationEngine.is_too_early(due, template, today):
                const.LOGGER.debug(
                    "DEBUG: Generate From Template - Too early for '%s' due %s "
                    "(scheduling date %s)",
                    template.get(const.DATA_TEMPLATE_NAME),
                    due,
                    GenerationEngine.scheduling_date(due, template),
                )
                return None

        index = DeduplicationIndex.from_tasks(existing)
        if index.contains(template_id, due):
            const.LOGGER.debug(
                "DEBUG: Generate From Template - '%s' already has a task due %s",
                template.get(const.DATA_TEMPLATE_NAME),
                due,
            )
            return None

        return await self._async_create_instance(template, due)

    async def _async_create_instance(
        self, template: Mapping[str, Any], due: date
    ) -> TaskData:
        payload = GenerationEngine.build_task_from_template(template, due)
        task = await self.coordinator.store.tasks.async_create(payload)
        const.LOGGER.info(
            "INFO: Generated task '%s' due %s", task[const.DATA_TASK_TITLE], due
        )
        self.emit(
            const.SIGNAL_SUFFIX_TASK_CREATED,
            task_id=task[const.DATA_ID],
            template_id=task[const.DATA_TASK_TEMPLATE_ID],
            due_date=task[const.DATA_TASK_DUE_DATE],
        )
        return task  # type: ignore[return-value]

    # =========================================================================
    # Window / horizon generation
    # =========================================================================

    async def async_generate_for_window(
        self,
        template: Mapping[str, Any],
        start: date,
        end: date,
        existing_keys: DeduplicationIndex,
        anchor: date | None = None,
    ) -> list[TaskData]:
        """Create instances for every missing occurrence in [start, end].

        `existing_keys` is extended with each created slot so later calls in
        the same pass see them.
        """
        template_id = template.get(const.DATA_ID)
        if not template_id:
            return []

        rule = build_recurrence_rule(template)
        planned = GenerationEngine.plan_window(
            template_id, rule, start, end, existing_keys, anchor=anchor
        )

        created: list[TaskData] = []
        for due in planned:
            task = await self._async_create_instance(template, due)
            existing_keys.add(template_id, due)
            created.append(task)
        return created

    async def async_generate_for_horizon(self) -> list[TaskData]:
        """Extend every active auto-generating template up to the horizon.

        Templates are processed one after another so the shared dedup index
        is updated deterministically. A failing template is logged and
        skipped.
        """
        store = self.coordinator.store
        today = self._today()
        horizon_end = today + timedelta(days=self.horizon_days)

        templates = await store.templates.async_filter(
            {
                const.DATA_TEMPLATE_IS_ACTIVE: True,
                const.DATA_TEMPLATE_AUTO_GENERATE: True,
            }
        )
        all_tasks = await store.tasks.async_filter(
            {const.DATA_TASK_TEMPLATE_ID: NotEqual(None)}
        )
        existing_keys = DeduplicationIndex.from_tasks(all_tasks)

        created: list[TaskData] = []
        for position, template in enumerate(templates):
            if position and self._template_delay:
                await asyncio.sleep(self._template_delay)
            try:
                created.extend(
                    await self._async_fill_template(
                        template, all_tasks, existing_keys, today, horizon_end
                    )
                )
            except GENERATION_ERRORS as err:
                const.LOGGER.error(
                    "ERROR: Horizon Generation - Failed for template '%s': %s",
                    template.get(const.DATA_TEMPLATE_NAME),
                    err,
                )

        store.meta[const.DATA_META_LAST_GENERATION] = today.isoformat()
        await store.async_save()

        const.LOGGER.debug(
            "DEBUG: Horizon Generation - %s templates, %s tasks created",
            len(templates),
            len(created),
        )
        self.emit(const.SIGNAL_SUFFIX_HORIZON_GENERATED, created=len(created))
        return created

    async def _async_fill_template(
        self,
        template: Mapping[str, Any],
        all_tasks: list[dict[str, Any]],
        existing_keys: DeduplicationIndex,
        today: date,
        horizon_end: date,
    ) -> list[TaskData]:
        template_id = template.get(const.DATA_ID)
        own_tasks = [
            task
            for task in all_tasks
            if task.get(const.DATA_TASK_TEMPLATE_ID) == template_id
        ]
        farthest = GenerationEngine.farthest_due_date(own_tasks)

        if farthest is None:
            start, anchor = today, None
        elif farthest >= horizon_end:
            return []
        elif farthest < today:
            rule = build_recurrence_rule(template)
            start = today
            anchor = GenerationEngine.catch_up_anchor(rule, farthest, today)
        else:
            start, anchor = farthest + timedelta(days=1), farthest

        return await self.async_generate_for_window(
            template, start, horizon_end, existing_keys, anchor=anchor
        )

    # =========================================================================
    # Event handlers
    # =========================================================================

    async def _on_task_completed(self, payload: dict[str, Any]) -> None:
        """Generate the next occurrence after a templated task is completed.

        Skipped when the template still has an open instance (e.g. one the
        horizon pass already created) or is inactive.
        """
        template_id = payload.get("template_id")
        if not template_id:
            return

        store = self.coordinator.store
        template = await store.templates.async_get_by_id(template_id)
        if template is None or not template.get(const.DATA_TEMPLATE_IS_ACTIVE, True):
            return

        siblings = await store.tasks.async_filter(
            {
                const.DATA_TASK_TEMPLATE_ID: template_id,
                const.DATA_TASK_STATUS: NotEqual(const.TASK_STATUS_COMPLETED),
                const.DATA_TASK_IS_ARCHIVED: NotEqual(True),
            }
        )
        if siblings:
            const.LOGGER.debug(
                "DEBUG: Task Completed - '%s' still has %s open tasks",
                template.get(const.DATA_TEMPLATE_NAME),
                len(siblings),
            )
            return

        try:
            await self.async_generate_from_template(template)
        except GENERATION_ERRORS as err:
            const.LOGGER.error(
                "ERROR: Task Completed - Next occurrence for '%s' failed: %s",
                template.get(const.DATA_TEMPLATE_NAME),
                err,
            )

