# agrisense/app/tools/weather_cached.py
import datetime as dt
import logging
from time import perf_counter
from typing import Any, Dict

from agrisense.app.utils.cache import get_json, set_json
from agrisense.core.models.domain import GeoPoint
from .weather import OpenMeteoForecaster

log = logging.getLogger("agrisense.weather")

def t(): return perf_counter()

def _daykey(point: GeoPoint, tz: str) -> str:
    today = dt.datetime.now(dt.timezone.utc).date().isoformat()
    # round to ~1km cell to increase hit-rate
    latr = round(point.latitude, 2)
    lonr = round(point.longitude, 2)
    return f"wx:daily:{latr}:{lonr}:{today}:{tz}"


class CachedForecaster:
    """Wraps a forecaster with the 'weather' cache (6h TTL, per UTC day)."""

    def __init__(self, inner: OpenMeteoForecaster):
        self.inner = inner

    async def daily_forecast(self, point: GeoPoint, tz: str = "auto") -> Dict[str, Any]:
        start = t()
        key = _daykey(point, tz)

        hit = await get_json(key, "weather")
        if hit:
            log.info("⏱️  Weather forecast: %dms (cached)", round((t() - start) * 1000))
            return hit

        fresh = await self.inner.daily_forecast(point, tz=tz)
        # only cache payloads that carry a daily block
        if fresh.get("daily"):
            await set_json(key, fresh, "weather")
        return fresh
