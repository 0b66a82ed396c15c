"""Shared fixtures for ParenTime tests."""

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.parentime import const
from custom_components.parentime.models import Child, ReminderTemplate
from custom_components.parentime.store import ParenTimeStore
from tests.helpers import CHILD_ID, make_child, make_template

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
        title="ParenTime",
        data={},
        options=dict(const.DEFAULT_OPTIONS),
        entry_id="test_entry_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Return storage data with one child born 2026-01-01."""
    data = ParenTimeStore.get_default_structure()
    data[const.DATA_CHILDREN][CHILD_ID] = {
        const.DATA_CHILD_INTERNAL_ID: CHILD_ID,
        const.DATA_CHILD_FIRST_NAME: "Emma",
        const.DATA_CHILD_LAST_NAME: "Martin",
        const.DATA_CHILD_BIRTH_DATE: "2026-01-01",
    }
    return data


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the ParenTime integration for testing with mocked storage.

    The entry is unloaded on teardown so pending alert timers are cancelled.
    """
    mock_config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    yield mock_config_entry

    if mock_config_entry.state is ConfigEntryState.LOADED:
        await hass.config_entries.async_unload(mock_config_entry.entry_id)
        await hass.async_block_till_done()


@pytest.fixture
def coordinator(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,  # pylint: disable=redefined-outer-name
):
    """Return the coordinator of the loaded entry."""
    return hass.data[const.DOMAIN][init_integration.entry_id][const.COORDINATOR]


@pytest.fixture
def child() -> Child:
    """Child born 2026-01-01."""
    return make_child()


@pytest.fixture
def dtp_template() -> ReminderTemplate:
    """Required DTP series at 2, 4 and 11 months."""
    return make_template("dtp_series", title="DTP", months=(2, 4, 11), series_id="dtp")
