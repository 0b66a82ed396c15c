# File: config_flow.py
"""Config flow for the ParenTime integration.

A single confirmation step creates the one allowed entry with default options;
children and reminders are managed through services afterwards.
"""

from typing import Any, Optional

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from .options_flow import ParenTimeOptionsFlowHandler


class ParenTimeConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for ParenTime."""

    VERSION = 1

    async def async_step_user(self, user_input: Optional[dict[str, Any]] = None):
        """Confirm and create the ParenTime entry."""
        # Check if there's an existing ParenTime entry
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            const.LOGGER.info("INFO: Creating ParenTime config entry")
            return self.async_create_entry(
                title=const.PARENTIME_TITLE,
                data={},
                options=dict(const.DEFAULT_OPTIONS),
            )

        return self.async_show_form(step_id=const.CONFIG_FLOW_STEP_USER)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return ParenTimeOptionsFlowHandler(config_entry)
