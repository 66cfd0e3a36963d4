# agrisense/app/tools/geocode.py
import logging
import time
from typing import Optional, Tuple

import httpx

from agrisense.app.config import settings
from agrisense.app.http import get_http_client
from agrisense.app.utils.cache import get_json, set_json
from agrisense.core.errors import GeocodeUnavailable
from agrisense.core.models.domain import GeoPoint, PlaceCandidate

log = logging.getLogger("agrisense.geocode")

def t(): return time.perf_counter()


class NominatimGeocoder:
    """Reverse and forward lookups against Nominatim (no API key)."""

    def __init__(self, base_url: Optional[str] = None,
                 client: Optional[httpx.AsyncClient] = None,
                 user_agent: Optional[str] = None):
        self.base_url = (base_url or settings.NOMINATIM_BASE_URL).rstrip("/")
        self._client = client
        self.headers = {
            "User-Agent": user_agent or settings.GEOCODE_USER_AGENT,
            "Accept": "application/json",
            "Accept-Language": "en-IN",
        }

    def _http(self) -> httpx.AsyncClient:
        return self._client or get_http_client()

    async def _get(self, path: str, params: dict):
        try:
            r = await self._http().get(f"{self.base_url}/{path}", params=params, headers=self.headers)
            r.raise_for_status()
            return r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("Nominatim %s failed: %s", path, e)
            raise GeocodeUnavailable(f"nominatim {path}: {e}") from e

    async def reverse(self, point: GeoPoint) -> PlaceCandidate:
        """
        Returns the raw place for a point: display name + address tags.
        A point with no address (sea, desert) comes back with empty tags.
        """
        key = f"geo:rev:{round(point.latitude, 4)}:{round(point.longitude, 4)}"
        cached = await get_json(key, cache_type="geocode")
        if cached:
            return PlaceCandidate.model_validate(cached)

        start = t()
        data = await self._get("reverse", {
            "format": "json",
            "lat": str(point.latitude),
            "lon": str(point.longitude),
        })
        if not isinstance(data, dict):
            raise GeocodeUnavailable("nominatim reverse: unexpected payload")

        addr = data.get("address") or {}
        candidate = PlaceCandidate(
            point=point,
            display_name=data.get("display_name") or "",
            address_tags={k: str(v) for k, v in addr.items() if v is not None},
        )
        await set_json(key, candidate.model_dump(), cache_type="geocode")
        log.info("⏱️  Reverse geocode %s,%s: %dms -> %s",
                 point.latitude, point.longitude, round((t() - start) * 1000), candidate.display_name)
        return candidate

    async def search(self, query: str) -> Optional[Tuple[GeoPoint, str]]:
        start = t()
        arr = await self._get("search", {"format": "json", "q": query, "limit": 1})
        if not arr:
            log.info("⏱️  Geocoding '%s': %dms -> no match", query, round((t() - start) * 1000))
            return None
        try:
            top = arr[0]
            point = GeoPoint(latitude=float(top["lat"]), longitude=float(top["lon"]))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise GeocodeUnavailable(f"nominatim search: malformed result ({e})") from e

        name = top.get("display_name") or query
        log.info("⏱️  Geocoding '%s': %dms -> %s", query, round((t() - start) * 1000), name)
        return point, name
