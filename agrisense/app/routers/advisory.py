"""
Location, sensor and recommendation endpoints

There is one AdvisorySession per process (see di.get_session), the same as the
single-farm dashboard: every client reads and moves the same location and
sensor state.
"""
from fastapi import APIRouter, Depends

from agrisense.app.di import get_notifier, get_scheduler, get_session
from agrisense.app.schemas import (
    NotificationsResponse,
    PointRequest,
    RecommendationResponse,
    SearchRequest,
    SensorUpdate,
)
from agrisense.core.adapters.outbox import OutboxNotifier
from agrisense.core.services.advisory import AdvisorySession
from agrisense.core.services.notifications import NotificationScheduler

router = APIRouter(tags=["advisory"])


@router.post("/location/click", response_model=RecommendationResponse)
async def location_click(req: PointRequest, session: AdvisorySession = Depends(get_session)):
    """Map click: reverse geocode, validate (fail-closed), then weather + crops."""
    rec = await session.select_point(req.lat, req.lon)
    return RecommendationResponse.from_recommendation(rec)


@router.post("/location/device", response_model=RecommendationResponse)
async def location_device(req: PointRequest, session: AdvisorySession = Depends(get_session)):
    """'Use my location' from the device's geolocation."""
    rec = await session.use_device_location(req.lat, req.lon)
    return RecommendationResponse.from_recommendation(rec)


@router.post("/location/search", response_model=RecommendationResponse)
async def location_search(req: SearchRequest, session: AdvisorySession = Depends(get_session)):
    rec = await session.search(req.query)
    return RecommendationResponse.from_recommendation(rec)


@router.put("/sensors", response_model=RecommendationResponse)
async def update_sensors(req: SensorUpdate, session: AdvisorySession = Depends(get_session)):
    """Live readings from the field device; crops are recomputed immediately."""
    rec = await session.update_sensors(req.to_readings())
    return RecommendationResponse.from_recommendation(rec)


@router.get("/recommendation", response_model=RecommendationResponse)
async def recommendation(session: AdvisorySession = Depends(get_session)):
    return RecommendationResponse.from_recommendation(session.current())


@router.get("/notifications", response_model=NotificationsResponse)
async def notifications(notifier: OutboxNotifier = Depends(get_notifier),
                        scheduler: NotificationScheduler = Depends(get_scheduler)):
    return NotificationsResponse(
        permission=notifier.permission.value,
        pending=scheduler.pending,
        delivered=list(reversed(notifier.delivered)),
    )
