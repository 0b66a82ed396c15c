# File: notification_manager.py
"""Notification Manager for ParenTime integration.

This manager is the notification authority used by the reminder lifecycle:
- Authorization status and the permission request step
- Scheduling single fire-and-forget alerts at a point in time
- Cancelling alerts by their deterministic id
- Re-arming pending alerts after a restart

Delivery uses the configured `notify.*` service when one is set, otherwise a
persistent notification whose notification_id is the alert id (so scheduling
the same id twice replaces rather than duplicates it).

Authorization mapping:
- notify service configured and present -> authorized
- notify service configured but missing -> denied
- persistent notifications explicitly disabled -> denied
- persistent notifications enabled, or consent recorded -> provisional
- nothing decided yet -> undetermined
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.event import async_track_point_in_utc_time

from .. import const
from ..utils.dt_utils import as_utc, dt_now_utc
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import ParenTimeDataCoordinator
    from ..type_defs import PendingNotificationData


# =============================================================================
# Module-level helpers for testability
# =============================================================================


def split_service(service: str) -> tuple[str, str]:
    """Split "notify.mobile_app_x" (or "mobile_app_x") into domain and service."""
    if const.DISPLAY_DOT in service:
        domain, svc = service.split(const.DISPLAY_DOT, 1)
        return domain, svc
    return const.NOTIFY_DOMAIN, service


async def async_send_notification(
    hass: HomeAssistant,
    service: str,
    title: str,
    message: str,
    extra_data: dict[str, Any] | None = None,
) -> None:
    """Send a notification via a Home Assistant notify service call.

    Args:
        hass: Home Assistant instance
        service: Notification service, "notify.service_name" or just the name
        title: Notification title
        message: Notification message
        extra_data: Optional extra data (e.g., tag)
    """
    domain, svc = split_service(service)
    payload: dict[str, Any] = {
        const.NOTIFY_TITLE: title,
        const.NOTIFY_MESSAGE: message,
    }
    if extra_data:
        payload[const.NOTIFY_DATA] = dict(extra_data)

    const.LOGGER.debug(
        "async_send_notification: %s.%s - title='%s'", domain, svc, title
    )
    await hass.services.async_call(domain, svc, payload, blocking=True)


class NotificationManager(BaseManager):
    """Notification authority: authorization, scheduling and cancellation."""

    def __init__(
        self, hass: HomeAssistant, coordinator: ParenTimeDataCoordinator
    ) -> None:
        """Initialize notification manager."""
        super().__init__(hass, coordinator)
        self._timers: dict[str, Callable[[], None]] = {}

    async def async_setup(self) -> None:
        """Re-arm alerts persisted before the last shutdown."""
        self.coordinator.config_entry.async_on_unload(self._cancel_timers)

        now = dt_now_utc()
        expired: list[str] = []
        for alert_id, pending in list(self.store.notifications.items()):
            fire_at = _parse_fire_at(pending)
            if fire_at is None or fire_at <= now:
                expired.append(alert_id)
                continue
            self._arm(alert_id, fire_at)

        for alert_id in expired:
            const.LOGGER.debug(
                "DEBUG: Dropping pending notification '%s' (fire time passed)",
                alert_id,
            )
            self.store.notifications.pop(alert_id, None)
        if expired:
            await self.coordinator._persist()

        const.LOGGER.debug(
            "NotificationManager async_setup complete: %s alerts re-armed",
            len(self._timers),
        )

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def notify_service(self) -> str:
        """Return the configured notify service, or an empty string."""
        return str(self.coordinator.options.get(const.CONF_NOTIFY_SERVICE) or "")

    @property
    def persistent_enabled(self) -> bool | None:
        """Return the persistent notifications option (None when never set)."""
        return self.coordinator.options.get(const.CONF_ENABLE_PERSISTENT_NOTIFICATIONS)

    def _persistent_available(self) -> bool:
        return self.hass.services.has_service(
            const.PERSISTENT_NOTIFICATION_DOMAIN, const.PERSISTENT_NOTIFICATION_CREATE
        )

    # =========================================================================
    # Authorization
    # =========================================================================

    def authorization_status(self) -> str:
        """Return undetermined, authorized, denied or provisional."""
        if self.notify_service:
            domain, svc = split_service(self.notify_service)
            if self.hass.services.has_service(domain, svc):
                return const.AUTH_STATUS_AUTHORIZED
            return const.AUTH_STATUS_DENIED

        if self.persistent_enabled is False:
            return const.AUTH_STATUS_DENIED
        consent = self.store.data.get(const.DATA_META, {}).get(
            const.DATA_META_NOTIFICATION_CONSENT
        )
        if self.persistent_enabled or consent:
            return const.AUTH_STATUS_PROVISIONAL
        return const.AUTH_STATUS_UNDETERMINED

    async def async_request_authorization(self) -> bool:
        """Ask for permission to deliver alerts.

        Grants the persistent-notification channel when it is available and
        records the consent. Returns False when no channel can be granted.
        """
        if not self._persistent_available():
            const.LOGGER.warning(
                "WARNING: Notification permission refused: no notify service "
                "configured and persistent notifications unavailable"
            )
            return False

        snapshot = self.store.snapshot()
        self.store.data.setdefault(const.DATA_META, {})[
            const.DATA_META_NOTIFICATION_CONSENT
        ] = True
        await self._async_persist_or_restore(snapshot)
        const.LOGGER.info("INFO: Persistent notifications granted for reminders")
        return True

    # =========================================================================
    # Scheduling
    # =========================================================================

    async def async_schedule(
        self, alert_id: str, title: str, body: str, fire_at: datetime
    ) -> bool:
        """Schedule a single alert, replacing any pending alert with the same id.

        The store is written before the timer changes, so a failed write
        leaves the previous alert (if any) pending and armed.

        Returns:
            True when the alert was scheduled (and the store written); False
            when fire_at has already passed and nothing was scheduled.

        Raises:
            HomeAssistantError: When the write fails.
        """
        fire_at = as_utc(fire_at)
        if fire_at <= dt_now_utc():
            const.LOGGER.info(
                "INFO: Not scheduling notification '%s': fire time %s already passed",
                alert_id,
                fire_at.isoformat(),
            )
            await self.async_cancel(alert_id)
            return False

        pending: PendingNotificationData = {
            "id": alert_id,
            "title": title,
            "body": body,
            "fire_at": fire_at.isoformat(),
        }
        snapshot = self.store.snapshot()
        self.store.notifications[alert_id] = pending
        await self._async_persist_or_restore(snapshot)

        self._disarm(alert_id)
        self._arm(alert_id, fire_at)
        const.LOGGER.debug(
            "DEBUG: Scheduled notification '%s' at %s", alert_id, fire_at.isoformat()
        )
        return True

    async def async_cancel(self, alert_id: str) -> bool:
        """Cancel a pending alert and dismiss it if already shown. Idempotent.

        Returns:
            True when a pending alert was removed (and the store written).

        Raises:
            HomeAssistantError: When the write fails; the alert stays armed.
        """
        removed = alert_id in self.store.notifications
        if removed:
            snapshot = self.store.snapshot()
            self.discard_pending(alert_id)
            await self._async_persist_or_restore(snapshot)
            const.LOGGER.debug("DEBUG: Cancelled notification '%s'", alert_id)

        await self.async_dismiss(alert_id)
        return removed

    def discard_pending(self, alert_id: str) -> None:
        """Drop a pending alert from the store without writing it.

        The caller persists, then calls async_dismiss once the write succeeded.
        """
        self.store.notifications.pop(alert_id, None)

    async def async_dismiss(self, alert_id: str) -> None:
        """Stop an alert's timer and dismiss its persistent notification."""
        self._disarm(alert_id)
        if self.hass.services.has_service(
            const.PERSISTENT_NOTIFICATION_DOMAIN, const.PERSISTENT_NOTIFICATION_DISMISS
        ):
            await self.hass.services.async_call(
                const.PERSISTENT_NOTIFICATION_DOMAIN,
                const.PERSISTENT_NOTIFICATION_DISMISS,
                {const.NOTIFICATION_ID: alert_id},
                blocking=True,
            )

    # =========================================================================
    # Delivery
    # =========================================================================

    def _arm(self, alert_id: str, fire_at: datetime) -> None:
        async def _async_fire(_now: datetime) -> None:
            self._timers.pop(alert_id, None)
            await self._async_deliver(alert_id)

        self._timers[alert_id] = async_track_point_in_utc_time(
            self.hass, _async_fire, fire_at
        )

    def _disarm(self, alert_id: str) -> None:
        unsub = self._timers.pop(alert_id, None)
        if unsub is not None:
            unsub()

    def _cancel_timers(self) -> None:
        """Stop every timer; pending alerts stay persisted for the next start."""
        for unsub in self._timers.values():
            unsub()
        self._timers.clear()

    async def _async_deliver(self, alert_id: str) -> None:
        pending = self.store.notifications.pop(alert_id, None)
        if pending is None:
            return

        title = pending.get(const.DATA_NOTIFICATION_TITLE, "")
        body = pending.get(const.DATA_NOTIFICATION_BODY, "")
        try:
            if self.authorization_status() == const.AUTH_STATUS_AUTHORIZED:
                await async_send_notification(
                    self.hass,
                    self.notify_service,
                    title,
                    body,
                    extra_data={const.NOTIFY_TAG: alert_id},
                )
            elif self._persistent_available():
                await self.hass.services.async_call(
                    const.PERSISTENT_NOTIFICATION_DOMAIN,
                    const.PERSISTENT_NOTIFICATION_CREATE,
                    {
                        const.NOTIFY_TITLE: title,
                        const.NOTIFY_MESSAGE: body,
                        const.NOTIFICATION_ID: alert_id,
                    },
                    blocking=True,
                )
            else:
                const.LOGGER.warning(
                    "WARNING: No delivery channel for notification '%s'", alert_id
                )
            await self.coordinator._persist()
        except HomeAssistantError as err:
            # Timer callback: nothing upstream can handle the failure
            const.LOGGER.error(
                "ERROR: Failed to deliver notification '%s': %s", alert_id, err
            )


def _parse_fire_at(
    pending: PendingNotificationData | dict[str, Any],
) -> datetime | None:
    raw = pending.get(const.DATA_NOTIFICATION_FIRE_AT)
    if not raw:
        return None
    try:
        return as_utc(datetime.fromisoformat(raw))
    except (TypeError, ValueError):
        return None
