# agrisense/app/tools/weather.py
import logging
import time
from typing import Any, Dict, Optional

import httpx

from agrisense.app.config import settings
from agrisense.app.http import get_http_client
from agrisense.core.errors import ForecastUnavailable
from agrisense.core.models.domain import GeoPoint

log = logging.getLogger("agrisense.weather")

def t(): return time.perf_counter()

DAILY_FIELDS = "temperature_2m_max,precipitation_sum,relative_humidity_2m_max"


class OpenMeteoForecaster:
    """Daily max temperature / max humidity / rain sum from Open-Meteo (no API key)."""

    def __init__(self, url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.url = url or settings.OPEN_METEO_URL
        self._client = client

    async def daily_forecast(self, point: GeoPoint, tz: str = "auto") -> Dict[str, Any]:
        """Raw payload; shape checks are left to the normalizer."""
        start = t()
        params = {
            "latitude": point.latitude,
            "longitude": point.longitude,
            "daily": DAILY_FIELDS,
            "timezone": tz,
        }
        client = self._client or get_http_client()
        try:
            r = await client.get(self.url, params=params)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("Open-Meteo request failed for %s,%s: %s", point.latitude, point.longitude, e)
            raise ForecastUnavailable(str(e)) from e

        log.info("⏱️  Weather forecast: %dms", round((t() - start) * 1000))
        return data if isinstance(data, dict) else {}
