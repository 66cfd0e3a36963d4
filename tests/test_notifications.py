import asyncio
import datetime as dt

from agrisense.core.adapters.base import Permission
from agrisense.core.adapters.outbox import OutboxNotifier
from agrisense.core.models.domain import AdvisoryNotification, GeoPoint, ValidatedLocation
from agrisense.core.services.agrochem import resolve
from agrisense.core.services.notifications import (
    NotificationScheduler,
    deliver,
    recommendation_content,
    rejection_content,
)
from tests.conftest import RecordingNotifier

LOCATION = ValidatedLocation(point=GeoPoint(latitude=20.9, longitude=77.7),
                             name="Amravati", is_valid=True)


def test_recommendation_content():
    crops = ["Rice", "Quinoa"]
    content = recommendation_content(LOCATION, crops, resolve(crops))
    assert content.title == "🌾 Amravati"
    assert content.body == ("Crops: Rice, Quinoa\n"
                            "Fertilizers: Urea, Superphosphate, Potash; NPK (Balanced Fertilizer)")


def test_rejection_content():
    content = rejection_content()
    assert content.title == "🚫 Invalid Area"
    assert content.body == "Not a farming zone. Showing N/A data."


def test_granted_advisory_fires_after_delay():
    notifier = RecordingNotifier(Permission.GRANTED)

    async def scenario():
        scheduler = NotificationScheduler(notifier, delay_sec=0)
        before = dt.datetime.now(dt.timezone.utc)
        handle = scheduler.schedule_advisory(rejection_content())
        assert scheduler.pending == 1
        assert handle.notification.fire_at >= before
        assert await handle.wait() is True
        assert handle.delivered is True
        await asyncio.sleep(0)
        assert scheduler.pending == 0

    asyncio.run(scenario())
    assert [n.title for n in notifier.delivered] == ["🚫 Invalid Area"]


def test_fire_at_reflects_delay():
    async def scenario():
        scheduler = NotificationScheduler(RecordingNotifier(), delay_sec=120)
        now = dt.datetime.now(dt.timezone.utc)
        handle = scheduler.schedule_advisory(rejection_content())
        offset = (handle.notification.fire_at - now).total_seconds()
        handle.cancel()
        return offset

    offset = asyncio.run(scenario())
    assert 119 <= offset <= 121


def test_denied_permission_is_silent():
    notifier = RecordingNotifier(Permission.DENIED)

    async def scenario():
        handle = NotificationScheduler(notifier, delay_sec=0).schedule_advisory(rejection_content())
        return await handle.wait()

    assert asyncio.run(scenario()) is False
    assert notifier.delivered == []
    assert notifier.requests == 0


def test_default_permission_requests_first():
    granted = RecordingNotifier(Permission.DEFAULT, grant=True)
    refused = RecordingNotifier(Permission.DEFAULT, grant=False)

    async def scenario():
        a = NotificationScheduler(granted, delay_sec=0).schedule_advisory(rejection_content())
        b = NotificationScheduler(refused, delay_sec=0).schedule_advisory(rejection_content())
        return await a.wait(), await b.wait()

    assert asyncio.run(scenario()) == (True, False)
    assert granted.requests == 1 and len(granted.delivered) == 1
    assert refused.requests == 1 and refused.delivered == []
    assert refused.permission == Permission.DENIED


def test_cancelled_advisory_never_fires():
    notifier = RecordingNotifier(Permission.GRANTED)

    async def scenario():
        scheduler = NotificationScheduler(notifier, delay_sec=0.05)
        handle = scheduler.schedule_advisory(rejection_content())
        assert handle.cancel() is True
        assert await handle.wait() is None
        await asyncio.sleep(0.1)
        return handle

    handle = asyncio.run(scenario())
    assert handle.cancelled
    assert handle.delivered is None
    assert notifier.delivered == []


def test_cancel_after_fire_is_noop():
    async def scenario():
        handle = NotificationScheduler(RecordingNotifier(), delay_sec=0).schedule_advisory(rejection_content())
        await handle.wait()
        return handle.cancel()

    assert asyncio.run(scenario()) is False


def test_cancel_all():
    notifier = RecordingNotifier()

    async def scenario():
        scheduler = NotificationScheduler(notifier, delay_sec=60)
        handles = [scheduler.schedule_advisory(rejection_content()) for _ in range(2)]
        n = scheduler.cancel_all()
        for h in handles:
            await h.wait()
        return n, scheduler.pending

    assert asyncio.run(scenario()) == (2, 0)
    assert notifier.delivered == []


def test_show_failure_is_swallowed():
    class Broken(RecordingNotifier):
        async def show(self, notification):
            raise RuntimeError("host gone")

    async def scenario():
        handle = NotificationScheduler(Broken(), delay_sec=0).schedule_advisory(rejection_content())
        return await handle.wait()

    assert asyncio.run(scenario()) is False


def test_permission_request_failure_is_swallowed():
    class NoHost(RecordingNotifier):
        async def request_permission(self):
            raise RuntimeError("no notification host")

    notifier = NoHost(Permission.DEFAULT)

    async def scenario():
        handle = NotificationScheduler(notifier, delay_sec=0).schedule_advisory(rejection_content())
        return await handle.wait(), handle

    result, handle = asyncio.run(scenario())
    assert result is False
    assert handle.delivered is False
    assert notifier.delivered == []


def test_outbox_notifier_keeps_newest():
    outbox = OutboxNotifier(permission=Permission.DEFAULT, grant_on_request=True, max_items=2)

    async def scenario():
        scheduler = NotificationScheduler(outbox, delay_sec=0)
        for name in ("A", "B", "C"):
            loc = LOCATION.model_copy(update={"name": name})
            await scheduler.schedule_advisory(recommendation_content(loc, [], [])).wait()

    asyncio.run(scenario())
    assert outbox.permission == Permission.GRANTED
    assert [n.title for n in outbox.delivered] == ["🌾 B", "🌾 C"]


def test_outbox_refusal():
    outbox = OutboxNotifier(permission=Permission.DEFAULT, grant_on_request=False)
    delivered = asyncio.run(deliver(outbox, _notification()))
    assert delivered is False
    assert outbox.permission == Permission.DENIED


def _notification():
    return AdvisoryNotification(title="t", body="b", fire_at=dt.datetime.now(dt.timezone.utc))
