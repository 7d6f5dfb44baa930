# File: config_flow.py
"""Config Flow and Options Flow for the HomeChores integration.

HomeChores is a single-instance integration. Templates and tasks live in
storage and are managed through services; the flows only handle the
integration options (notify target, polling intervals, horizon length).
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.config_entries import ConfigFlowResult
from homeassistant.core import callback
from homeassistant.helpers import selector

from . import const


def _options_schema(options: dict[str, Any]) -> vol.Schema:
    """Build the options form, pre-filled with current values."""
    return vol.Schema(
        {
            vol.Optional(
                const.CONF_NOTIFY_SERVICE,
                default=options.get(
                    const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE
                ),
            ): selector.TextSelector(),
            vol.Required(
                const.CONF_UPDATE_INTERVAL,
                default=options.get(
                    const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
                ),
            ): vol.All(vol.Coerce(int), vol.Range(min=1, max=1440)),
            vol.Required(
                const.CONF_REMINDER_INTERVAL,
                default=options.get(
                    const.CONF_REMINDER_INTERVAL, const.DEFAULT_REMINDER_INTERVAL
                ),
            ): vol.All(vol.Coerce(int), vol.Range(min=1, max=1440)),
            vol.Required(
                const.CONF_HORIZON_DAYS,
                default=options.get(const.CONF_HORIZON_DAYS, const.DEFAULT_HORIZON_DAYS),
            ): vol.All(vol.Coerce(int), vol.Range(min=1, max=365)),
        }
    )


def default_options() -> dict[str, Any]:
    """Options stored on a freshly created entry."""
    return {
        const.CONF_NOTIFY_SERVICE: const.DEFAULT_NOTIFY_SERVICE,
        const.CONF_UPDATE_INTERVAL: const.DEFAULT_UPDATE_INTERVAL,
        const.CONF_REMINDER_INTERVAL: const.DEFAULT_REMINDER_INTERVAL,
        const.CONF_HORIZON_DAYS: const.DEFAULT_HORIZON_DAYS,
    }


class HomeChoresConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for HomeChores."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Confirm creation of the HomeChores entry."""
        if self._async_current_entries():
            return self.async_abort(reason=const.TRANS_KEY_ABORT_SINGLE_INSTANCE)

        if user_input is not None:
            const.LOGGER.info("INFO: Creating HomeChores config entry")
            return self.async_create_entry(
                title=const.HOMECHORES_TITLE, data={}, options=default_options()
            )

        return self.async_show_form(step_id="user", data_schema=vol.Schema({}))

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> HomeChoresOptionsFlowHandler:
        """Return the Options Flow."""
        return HomeChoresOptionsFlowHandler()


class HomeChoresOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow editing the integration settings."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Show and save the general options."""
        if user_input is not None:
            options = {**self.config_entry.options, **user_input}
            const.LOGGER.debug("DEBUG: General Options Updated: %s", options)
            return self.async_create_entry(data=options)

        return self.async_show_form(
            step_id="init",
            data_schema=_options_schema(dict(self.config_entry.options)),
        )
