import asyncio
from typing import Dict, Optional, Tuple

import pytest

from agrisense.app.utils.cache import flush_all
from agrisense.core.adapters.base import Permission
from agrisense.core.errors import ForecastUnavailable, GeocodeUnavailable
from agrisense.core.models.domain import GeoPoint, PlaceCandidate

Key = Tuple[float, float]

# Amravati-ish farmland and a hospital in a city
FARM = (20.9374, 77.7796)
HOSPITAL = (19.0760, 72.8777)
FIELD_B = (21.1458, 79.0882)


def daily_payload(temps, hums, rains, start_day=1):
    return {
        "daily": {
            "time": [f"2026-10-{start_day + i:02d}" for i in range(len(temps))],
            "temperature_2m_max": list(temps),
            "relative_humidity_2m_max": list(hums),
            "precipitation_sum": list(rains),
        }
    }


def farm_place(point: Key, name: str = "Amravati, Maharashtra, India") -> PlaceCandidate:
    return PlaceCandidate(
        point=GeoPoint(latitude=point[0], longitude=point[1]),
        display_name=name,
        address_tags={"city": "Amravati", "state": "Maharashtra", "country": "India"},
    )


class FakeGeocoder:
    def __init__(self, places: Optional[Dict[Key, PlaceCandidate]] = None,
                 matches: Optional[Dict[str, Tuple[Key, str]]] = None,
                 fail_reverse: bool = False, fail_search: bool = False):
        self.places = places or {}
        self.matches = matches or {}
        self.fail_reverse = fail_reverse
        self.fail_search = fail_search
        self.reverse_calls = []

    async def reverse(self, point: GeoPoint) -> PlaceCandidate:
        self.reverse_calls.append((point.latitude, point.longitude))
        if self.fail_reverse:
            raise GeocodeUnavailable("nominatim down")
        place = self.places.get((point.latitude, point.longitude))
        if place is None:
            return PlaceCandidate(point=point)
        return place

    async def search(self, query: str):
        if self.fail_search:
            raise GeocodeUnavailable("nominatim down")
        hit = self.matches.get(query)
        if hit is None:
            return None
        (lat, lon), name = hit
        return GeoPoint(latitude=lat, longitude=lon), name


class FakeForecaster:
    """Returns canned payloads; a gate (asyncio.Event) holds a fetch open."""

    def __init__(self, payloads: Optional[Dict[Key, dict]] = None, fail: bool = False):
        self.payloads = payloads or {}
        self.fail = fail
        self.gates: Dict[Key, asyncio.Event] = {}
        self.calls = []

    async def daily_forecast(self, point: GeoPoint):
        key = (point.latitude, point.longitude)
        self.calls.append(key)
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        if self.fail:
            raise ForecastUnavailable("open-meteo down")
        return self.payloads.get(key, {})


class RecordingNotifier:
    def __init__(self, permission: Permission = Permission.GRANTED, grant: bool = True):
        self.permission = permission
        self.grant = grant
        self.requests = 0
        self.delivered = []

    async def request_permission(self) -> Permission:
        self.requests += 1
        self.permission = Permission.GRANTED if self.grant else Permission.DENIED
        return self.permission

    async def show(self, notification):
        self.delivered.append(notification)


@pytest.fixture(autouse=True)
def _clean_cache():
    flush_all()
    yield
    flush_all()
