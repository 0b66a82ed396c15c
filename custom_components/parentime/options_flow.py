# File: options_flow.py
"""Options Flow for the ParenTime integration.

One form edits every tunable. Saving the options reloads the entry through
the update listener registered in __init__.py.
"""

from typing import Any, Optional

from homeassistant import config_entries

from . import const
from . import flow_helpers as fh


class ParenTimeOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for notification and presentation settings."""

    def __init__(self, _config_entry: config_entries.ConfigEntry):
        """Initialize the options flow."""
        self._entry_options: dict[str, Any] = {}

    async def async_step_init(self, user_input: Optional[dict[str, Any]] = None):
        """Display and validate the options form."""
        self._entry_options = dict(self.config_entry.options)
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = fh.validate_options_input(user_input)
            if not errors:
                new_options = {
                    **self._entry_options,
                    **fh.normalize_options_input(user_input),
                }
                const.LOGGER.debug("DEBUG: Options updated: %s", new_options)
                return self.async_create_entry(title="", data=new_options)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=fh.build_options_schema(user_input or self._entry_options),
            errors=errors,
        )
