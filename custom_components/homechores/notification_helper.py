# File: notification_helper.py
"""Sends notifications using Home Assistant's notify services.

Reminders go to the configured notify service (e.g. "notify.mobile_app_phone"
or just "mobile_app_phone"). A `tag` is attached so that a newer reminder for
the same task replaces the older one on Companion app devices.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components import persistent_notification
from homeassistant.core import HomeAssistant, callback

from . import const


async def async_send_notification(
    hass: HomeAssistant,
    notify_service: str,
    title: str,
    message: str,
    extra_data: dict[str, Any] | None = None,
) -> bool:
    """Send a notification using the specified notify service.

    Gracefully handles missing notification services (common in fresh
    installs or when the mobile app isn't configured yet). If the service
    doesn't exist, logs a warning and returns without raising an exception.

    Returns:
        True when the service call was made successfully.
    """
    if const.DISPLAY_DOT not in notify_service:
        domain = const.NOTIFY_DOMAIN
        service = notify_service
    else:
        domain, service = notify_service.split(const.DISPLAY_DOT, 1)

    if not hass.services.has_service(domain, service):
        const.LOGGER.warning(
            "Notification service '%s.%s' not available - skipping notification. "
            "Configure the '%s' integration or update the HomeChores options.",
            domain,
            service,
            domain,
        )
        return False

    payload: dict[str, Any] = {const.NOTIFY_TITLE: title, const.NOTIFY_MESSAGE: message}
    if extra_data:
        payload[const.NOTIFY_DATA] = dict(extra_data)

    try:
        await hass.services.async_call(domain, service, payload, blocking=True)
        const.LOGGER.debug("DEBUG: Notification sent via '%s.%s'", domain, service)
    except Exception as err:  # pylint: disable=broad-exception-caught
        # Runs from a timer callback; a failing notify target must not
        # break the reminder loop.
        const.LOGGER.error(
            "ERROR: Unexpected error sending notification via '%s.%s': %s",
            domain,
            service,
            err,
        )
        return False
    return True


@callback
def send_persistent_notification(
    hass: HomeAssistant, title: str, message: str, notification_id: str
) -> None:
    """Show a notification in the Home Assistant UI.

    Used when no notify service is configured. Reusing `notification_id`
    replaces the previous notification for the same task.
    """
    persistent_notification.async_create(
        hass, message, title=title, notification_id=notification_id
    )
