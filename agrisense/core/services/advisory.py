# core/services/advisory.py
"""
Advisory session: owns the current location, sensor readings and the outputs
derived from them.

Every location-change event (map click, device location, a search that found
a match) takes a new sequence token. Geocode results are applied only while
their token is still the latest issued one; forecast results only while their
location is still the current one. A slow response for an older click can
never overwrite the newer location, and a search that finds nothing does not
disturb the forecast still loading for the current one. Entering a location
also cancels any advisory still pending from the previous one.
"""
import logging
import time
from typing import Optional

from .agrochem import resolve
from .crops import recommend
from .location import UNKNOWN_LOCATION, unknown_location, validate
from .notifications import (
    AdvisoryHandle,
    NotificationScheduler,
    recommendation_content,
    rejection_content,
)
from .weather import normalize
from ..adapters.base import Forecaster, Geocoder
from ..errors import DataUnavailable, ForecastUnavailable, GeocodeUnavailable
from ..models.domain import GeoPoint, Recommendation, SensorReadings, ValidatedLocation

log = logging.getLogger("agrisense.session")

def t(): return time.perf_counter()

MY_LOCATION = "My Location"

WEATHER_ERROR = "Failed to fetch weather data."
NOT_FOUND_ERROR = "Location not found."
SEARCH_ERROR = "Search failed."


class AdvisorySession:

    def __init__(self, geocoder: Geocoder, forecaster: Forecaster,
                 scheduler: NotificationScheduler,
                 search_reverse_fail_open: bool = True):
        self.geocoder = geocoder
        self.forecaster = forecaster
        self.scheduler = scheduler
        self.search_reverse_fail_open = search_reverse_fail_open

        self._state = Recommendation()
        self._issued = 0
        self._advisory: Optional[AdvisoryHandle] = None

    # ---------- read side ----------

    def current(self) -> Recommendation:
        return self._state.model_copy(deep=True)

    @property
    def pending_advisory(self) -> Optional[AdvisoryHandle]:
        if self._advisory is not None and self._advisory.done:
            return None
        return self._advisory

    # ---------- location-change triggers ----------

    async def select_point(self, lat: float, lon: float) -> Recommendation:
        """Map click."""
        return await self._locate(GeoPoint(latitude=lat, longitude=lon), UNKNOWN_LOCATION)

    async def use_device_location(self, lat: float, lon: float) -> Recommendation:
        """Browser/device geolocation."""
        return await self._locate(GeoPoint(latitude=lat, longitude=lon), MY_LOCATION)

    async def search(self, query: str) -> Recommendation:
        """
        Forward search followed by a reverse check of the match.

        When the reverse check itself fails the location is accepted or rejected
        according to `search_reverse_fail_open`, unlike the click path which
        always rejects.
        """
        query = (query or "").strip()
        if not query:
            return self.current()

        # a search that finds nothing leaves the current location and its fetch alone,
        # so the token is only taken once there is a match
        seen = self._issued
        try:
            found = await self.geocoder.search(query)
        except GeocodeUnavailable as e:
            log.warning("Search '%s' failed: %s", query, e)
            return self._set_error(seen, SEARCH_ERROR)

        if found is None:
            return self._set_error(seen, NOT_FOUND_ERROR)

        token = self._next_token()
        point, display_name = found
        try:
            candidate = await self.geocoder.reverse(point)
        except GeocodeUnavailable as e:
            is_valid = self.search_reverse_fail_open
            log.warning(
                "Reverse check failed for search '%s' (%s); accepting=%s",
                query, e, is_valid,
            )
        else:
            if not candidate.display_name:
                candidate = candidate.model_copy(update={"display_name": display_name})
            is_valid = validate(candidate).is_valid

        if self._is_stale(token):
            log.info("Dropping search result for '%s' (superseded)", query)
            return self.current()

        location = ValidatedLocation(point=point, name=display_name, is_valid=is_valid)
        return await self._enter(location, token)

    # ---------- sensor updates ----------

    async def update_sensors(self, readings: SensorReadings) -> Recommendation:
        """Replace the readings and recompute from the current snapshot, if any."""
        self._state.sensors = readings.model_copy()
        if self._state.latest is not None:
            self._recompute()
        return self.current()

    def close(self) -> None:
        self._cancel_advisory()

    # ---------- internals ----------

    def _next_token(self) -> int:
        self._issued += 1
        return self._issued

    def _is_stale(self, token: int) -> bool:
        """A newer location event was issued after `token`."""
        return token != self._issued

    def _displaced(self, token: int) -> bool:
        """The location entered under `token` is no longer the current one."""
        loc = self._state.location
        return loc is None or loc.token != token

    def _set_error(self, seen: int, message: str) -> Recommendation:
        if not self._is_stale(seen):
            self._state.error = message
        return self.current()

    def _cancel_advisory(self) -> None:
        if self._advisory is not None:
            if self._advisory.cancel():
                log.info("Cancelled pending advisory '%s'", self._advisory.notification.title)
            self._advisory = None

    async def _locate(self, point: GeoPoint, default_name: str) -> Recommendation:
        token = self._next_token()
        try:
            candidate = await self.geocoder.reverse(point)
        except GeocodeUnavailable as e:
            log.warning("Reverse geocode failed for %s,%s: %s", point.latitude, point.longitude, e)
            location = unknown_location(point)
        else:
            location = validate(candidate, default_name=default_name)

        if self._is_stale(token):
            log.info("Dropping geocode result for %s,%s (superseded)", point.latitude, point.longitude)
            return self.current()
        return await self._enter(location, token)

    async def _enter(self, location: ValidatedLocation, token: int) -> Recommendation:
        location = location.model_copy(update={"token": token})

        # replace everything before any fetch so no stale data stays visible
        self._cancel_advisory()
        self._state = Recommendation(location=location, sensors=self._state.sensors)

        if not location.is_valid:
            log.info("📍 %s rejected as non-farmland", location.name)
            self._advisory = self.scheduler.schedule_advisory(rejection_content())
            return self.current()

        start = t()
        try:
            raw = await self.forecaster.daily_forecast(location.point)
            series, latest = normalize(raw)
        except (ForecastUnavailable, DataUnavailable) as e:
            if self._displaced(token):
                return self.current()
            log.warning("Weather unavailable for %s: %s", location.name, e)
            self._state.error = WEATHER_ERROR
            return self.current()

        if self._displaced(token):
            log.info("Dropping forecast for '%s' (token %d superseded)", location.name, token)
            return self.current()

        self._state.series = series
        self._state.latest = latest
        self._recompute()
        log.info("⏱️  Advisory for '%s': %dms, crops=%s",
                 location.name, round((t() - start) * 1000), self._state.crops)

        self._advisory = self.scheduler.schedule_advisory(
            recommendation_content(location, self._state.crops, self._state.agrochemicals)
        )
        return self.current()

    def _recompute(self) -> None:
        crops = recommend(self._state.latest, self._state.sensors)
        self._state.crops = crops
        self._state.agrochemicals = resolve(crops)
