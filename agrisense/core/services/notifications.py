# core/services/notifications.py
import asyncio
import datetime as dt
import logging
from typing import List, NamedTuple, Optional, Set

from ..adapters.base import Notifier, Permission
from ..models.domain import AdvisoryNotification, AgrochemicalEntry, ValidatedLocation

log = logging.getLogger("agrisense.advisory")

DEFAULT_DELAY_SEC = 120.0

INVALID_AREA_TITLE = "🚫 Invalid Area"
INVALID_AREA_BODY = "Not a farming zone. Showing N/A data."


class AdvisoryContent(NamedTuple):
    title: str
    body: str


def recommendation_content(location: ValidatedLocation, crops: List[str],
                           entries: List[AgrochemicalEntry]) -> AdvisoryContent:
    fertilizers = "; ".join(", ".join(e.fertilizers) for e in entries)
    return AdvisoryContent(
        title=f"🌾 {location.name}",
        body=f"Crops: {', '.join(crops)}\nFertilizers: {fertilizers}",
    )


def rejection_content() -> AdvisoryContent:
    return AdvisoryContent(title=INVALID_AREA_TITLE, body=INVALID_AREA_BODY)


async def deliver(notifier: Notifier, notification: AdvisoryNotification) -> bool:
    """
    Best-effort delivery. Undecided permission triggers a request first;
    anything but GRANTED is a silent no-op. Returns True if shown.
    """
    try:
        permission = notifier.permission
        if permission == Permission.DEFAULT:
            permission = await notifier.request_permission()
        if permission != Permission.GRANTED:
            log.debug("Advisory dropped, permission=%s", getattr(permission, "value", permission))
            return False
        await notifier.show(notification)
    except Exception:
        # no retry
        log.exception("Advisory delivery failed: %s", notification.title)
        return False
    return True


class AdvisoryHandle:
    """Handle for one scheduled advisory. Cancelling an already fired advisory is a no-op."""

    def __init__(self, notification: AdvisoryNotification, task: "asyncio.Task[bool]"):
        self.notification = notification
        self._task = task

    def cancel(self) -> bool:
        if self._task.done():
            return False
        return self._task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._task.cancelled()

    @property
    def done(self) -> bool:
        return self._task.done()

    @property
    def delivered(self) -> Optional[bool]:
        """True/False once fired, None while pending or when cancelled."""
        if not self._task.done() or self._task.cancelled():
            return None
        return self._task.result()

    async def wait(self) -> Optional[bool]:
        try:
            return await self._task
        except asyncio.CancelledError:
            return None


class NotificationScheduler:
    """Fire-once deferred advisories on the running event loop."""

    def __init__(self, notifier: Notifier, delay_sec: float = DEFAULT_DELAY_SEC):
        self.notifier = notifier
        self.delay_sec = delay_sec
        self._pending: Set[AdvisoryHandle] = set()

    def schedule_advisory(self, content: AdvisoryContent,
                          delay: Optional[float] = None) -> AdvisoryHandle:
        delay = self.delay_sec if delay is None else delay
        fire_at = dt.datetime.now(dt.timezone.utc) + dt.timedelta(seconds=delay)
        notification = AdvisoryNotification(title=content.title, body=content.body, fire_at=fire_at)

        task = asyncio.get_running_loop().create_task(self._fire_later(notification, delay))
        handle = AdvisoryHandle(notification, task)
        self._pending.add(handle)
        task.add_done_callback(lambda _t: self._pending.discard(handle))
        log.info("⏰ Advisory '%s' scheduled for %s", content.title, fire_at.isoformat())
        return handle

    async def _fire_later(self, notification: AdvisoryNotification, delay: float) -> bool:
        await asyncio.sleep(delay)
        return await deliver(self.notifier, notification)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def cancel_all(self) -> int:
        """Cancel every pending advisory (used on shutdown)."""
        n = 0
        for handle in list(self._pending):
            if handle.cancel():
                n += 1
        return n
