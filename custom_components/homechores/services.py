# File: services.py
"""Defines custom services for the HomeChores integration.

These services allow direct actions through scripts or automations:
horizon and single-task generation, template/task creation, deferral,
calendar moves, bi-weekly postponement and status changes.
"""

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from .coordinator import HomeChoresDataCoordinator

# --- Service Schemas ---
GENERATE_HORIZON_SCHEMA = vol.Schema({})

GENERATE_TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TEMPLATE_ID): cv.string,
        vol.Optional(const.FIELD_DUE_DATE): cv.date,
    }
)

CREATE_TEMPLATE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_FREQUENCY): cv.string,
        vol.Optional(const.DATA_TEMPLATE_FREQUENCY_TYPE): vol.In(
            const.FREQUENCY_TYPES
        ),
        vol.Optional(const.DATA_TEMPLATE_FREQUENCY_INTERVAL): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=const.MAX_FREQUENCY_INTERVAL)
        ),
        vol.Optional(const.DATA_TEMPLATE_SELECTED_DAYS): vol.All(
            cv.ensure_list, [vol.All(vol.Coerce(int), vol.Range(min=0, max=6))]
        ),
        vol.Optional(const.DATA_TEMPLATE_FREQUENCY_CUSTOM): cv.string,
        vol.Optional(const.DATA_TEMPLATE_DESCRIPTION): cv.string,
        vol.Optional(const.DATA_TEMPLATE_CATEGORY): cv.string,
        vol.Optional(const.DATA_TEMPLATE_PRIORITY): vol.In(const.PRIORITIES),
        vol.Optional(const.DATA_TEMPLATE_ASSIGNED_TO): cv.string,
        vol.Optional(const.DATA_TEMPLATE_ESTIMATED_DURATION): vol.All(
            vol.Coerce(int), vol.Range(min=0)
        ),
        vol.Optional(const.DATA_TEMPLATE_ROOM_LOCATION): cv.string,
        vol.Optional(const.DATA_TEMPLATE_IS_ACTIVE): cv.boolean,
        vol.Optional(const.DATA_TEMPLATE_AUTO_GENERATE): cv.boolean,
        vol.Optional(const.DATA_TEMPLATE_GENERATION_OFFSET): vol.All(
            vol.Coerce(int), vol.Range(min=0, max=const.MAX_GENERATION_OFFSET_DAYS)
        ),
        vol.Optional(const.DATA_TEMPLATE_NOTIFICATION_OFFSET_HOURS): vol.All(
            vol.Coerce(int), vol.Range(min=0, max=const.MAX_NOTIFICATION_OFFSET_HOURS)
        ),
    }
)

CREATE_TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_DUE_DATE): cv.date,
        vol.Optional(const.FIELD_DUE_TIME): cv.string,
        vol.Optional(const.DATA_TASK_DESCRIPTION): cv.string,
        vol.Optional(const.DATA_TASK_CATEGORY): cv.string,
        vol.Optional(const.DATA_TASK_PRIORITY): vol.In(const.PRIORITIES),
        vol.Optional(const.DATA_TASK_ASSIGNED_TO): cv.string,
        vol.Optional(const.DATA_TASK_ESTIMATED_DURATION): vol.All(
            vol.Coerce(int), vol.Range(min=0)
        ),
        vol.Optional(const.DATA_TASK_ROOM_LOCATION): cv.string,
        vol.Optional(const.DATA_TASK_NOTIFICATION_OFFSET_HOURS): vol.All(
            vol.Coerce(int), vol.Range(min=0, max=const.MAX_NOTIFICATION_OFFSET_HOURS)
        ),
    }
)

DEFER_TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TASK_ID): cv.string,
        vol.Required(const.FIELD_UNTIL_DATE): cv.date,
    }
)

MOVE_TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TASK_ID): cv.string,
        vol.Required(const.FIELD_NEW_DATE): cv.date,
    }
)

TASK_ID_SCHEMA = vol.Schema({vol.Required(const.FIELD_TASK_ID): cv.string})


def _get_coordinator(hass: HomeAssistant) -> HomeChoresDataCoordinator:
    """Return the coordinator of the (single) loaded HomeChores entry."""
    for entry_data in hass.data.get(const.DOMAIN, {}).values():
        return entry_data[const.COORDINATOR]
    raise HomeAssistantError(
        translation_domain=const.DOMAIN,
        translation_key=const.TRANS_KEY_ERROR_NO_ENTRY,
    )


def async_setup_services(hass: HomeAssistant) -> None:
    """Register HomeChores services."""

    async def handle_generate_horizon(call: ServiceCall) -> None:
        """Request a guarded horizon generation pass."""
        coordinator = _get_coordinator(hass)
        if coordinator.request_horizon_generation() is None:
            const.LOGGER.info(
                "INFO: Generate Horizon: Skipped, a pass is running or ran recently"
            )

    async def handle_generate_task(call: ServiceCall) -> None:
        """Create one task from a template (explicit date or next occurrence)."""
        coordinator = _get_coordinator(hass)
        template = await coordinator.task_manager.async_get_template_or_raise(
            call.data[const.FIELD_TEMPLATE_ID]
        )
        task = await coordinator.generation_manager.async_generate_from_template(
            template, call.data.get(const.FIELD_DUE_DATE)
        )
        if task is None:
            const.LOGGER.info(
                "INFO: Generate Task: Nothing to generate for template '%s'",
                template.get(const.DATA_TEMPLATE_NAME),
            )

    async def handle_create_template(call: ServiceCall) -> None:
        """Create a recurring template."""
        coordinator = _get_coordinator(hass)
        template = await coordinator.task_manager.async_create_template(call.data)
        if template.get(const.DATA_TEMPLATE_AUTO_GENERATE):
            coordinator.request_horizon_generation()

    async def handle_create_task(call: ServiceCall) -> None:
        """Create a manual task."""
        coordinator = _get_coordinator(hass)
        await coordinator.task_manager.async_create_task(call.data)

    async def handle_defer_task(call: ServiceCall) -> None:
        """Defer a task until a date."""
        coordinator = _get_coordinator(hass)
        await coordinator.task_manager.async_defer_task(
            call.data[const.FIELD_TASK_ID], call.data[const.FIELD_UNTIL_DATE]
        )

    async def handle_move_task(call: ServiceCall) -> None:
        """Move a task to another day."""
        coordinator = _get_coordinator(hass)
        await coordinator.task_manager.async_move_task_to_date(
            call.data[const.FIELD_TASK_ID], call.data[const.FIELD_NEW_DATE]
        )

    async def handle_postpone_task(call: ServiceCall) -> None:
        """Postpone a bi-weekly task by one week."""
        coordinator = _get_coordinator(hass)
        await coordinator.task_manager.async_postpone_task(
            call.data[const.FIELD_TASK_ID]
        )

    async def handle_start_task(call: ServiceCall) -> None:
        """Mark a task as in progress."""
        coordinator = _get_coordinator(hass)
        await coordinator.task_manager.async_start_task(call.data[const.FIELD_TASK_ID])

    async def handle_complete_task(call: ServiceCall) -> None:
        """Complete a task."""
        coordinator = _get_coordinator(hass)
        await coordinator.task_manager.async_complete_task(
            call.data[const.FIELD_TASK_ID]
        )

    services = [
        (const.SERVICE_GENERATE_HORIZON, handle_generate_horizon, GENERATE_HORIZON_SCHEMA),
        (const.SERVICE_GENERATE_TASK, handle_generate_task, GENERATE_TASK_SCHEMA),
        (const.SERVICE_CREATE_TEMPLATE, handle_create_template, CREATE_TEMPLATE_SCHEMA),
        (const.SERVICE_CREATE_TASK, handle_create_task, CREATE_TASK_SCHEMA),
        (const.SERVICE_DEFER_TASK, handle_defer_task, DEFER_TASK_SCHEMA),
        (const.SERVICE_MOVE_TASK, handle_move_task, MOVE_TASK_SCHEMA),
        (const.SERVICE_POSTPONE_TASK, handle_postpone_task, TASK_ID_SCHEMA),
        (const.SERVICE_START_TASK, handle_start_task, TASK_ID_SCHEMA),
        (const.SERVICE_COMPLETE_TASK, handle_complete_task, TASK_ID_SCHEMA),
    ]
    for name, handler, schema in services:
        hass.services.async_register(const.DOMAIN, name, handler, schema=schema)

    const.LOGGER.info("INFO: HomeChores services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister HomeChores services when unloading the integration."""
    services = [
        const.SERVICE_GENERATE_HORIZON,
        const.SERVICE_GENERATE_TASK,
        const.SERVICE_CREATE_TEMPLATE,
        const.SERVICE_CREATE_TASK,
        const.SERVICE_DEFER_TASK,
        const.SERVICE_MOVE_TASK,
        const.SERVICE_POSTPONE_TASK,
        const.SERVICE_START_TASK,
        const.SERVICE_COMPLETE_TASK,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: HomeChores services have been unregistered")
