import asyncio

import httpx
import pytest

from agrisense.app.tools.geocode import NominatimGeocoder
from agrisense.app.tools.weather import DAILY_FIELDS, OpenMeteoForecaster
from agrisense.app.tools.weather_cached import CachedForecaster
from agrisense.core.errors import ForecastUnavailable, GeocodeUnavailable
from agrisense.core.models.domain import GeoPoint
from tests.conftest import daily_payload

POINT = GeoPoint(latitude=20.9374, longitude=77.7796)

REVERSE_BODY = {
    "display_name": "Amravati, Amravati District, Maharashtra, India",
    "address": {"city": "Amravati", "state_district": "Amravati District",
                "state": "Maharashtra", "country": "India"},
}


def _run(handler, fn):
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fn(client)
    return asyncio.run(scenario())


def test_reverse_maps_address_and_caches():
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, json=REVERSE_BODY)

    async def fn(client):
        geocoder = NominatimGeocoder(base_url="https://nominatim.test/", client=client, user_agent="tests")
        first = await geocoder.reverse(POINT)
        second = await geocoder.reverse(POINT)
        return first, second

    first, second = _run(handler, fn)
    assert first.display_name.startswith("Amravati")
    assert first.address_tags["city"] == "Amravati"
    assert second == first
    assert len(seen) == 1
    req = seen[0]
    assert req.url.path == "/reverse"
    assert req.url.params["format"] == "json"
    assert req.url.params["lat"] == "20.9374"
    assert req.headers["user-agent"] == "tests"


def test_reverse_without_address_has_empty_tags():
    def handler(request):
        return httpx.Response(200, json={"error": "Unable to geocode"})

    async def fn(client):
        return await NominatimGeocoder(base_url="https://nominatim.test", client=client).reverse(POINT)

    place = _run(handler, fn)
    assert place.address_tags == {}
    assert place.display_name == ""


@pytest.mark.parametrize("response", [
    httpx.Response(503, text="busy"),
    httpx.Response(200, text="<html>not json</html>"),
])
def test_reverse_failures_raise_geocode_unavailable(response):
    def handler(request):
        return response

    async def fn(client):
        return await NominatimGeocoder(base_url="https://nominatim.test", client=client).reverse(POINT)

    with pytest.raises(GeocodeUnavailable):
        _run(handler, fn)


def test_reverse_transport_error():
    def handler(request):
        raise httpx.ConnectError("no route", request=request)

    async def fn(client):
        return await NominatimGeocoder(base_url="https://nominatim.test", client=client).reverse(POINT)

    with pytest.raises(GeocodeUnavailable):
        _run(handler, fn)


def test_search_returns_top_match():
    def handler(request):
        assert request.url.path == "/search"
        assert request.url.params["q"] == "Amravati"
        assert request.url.params["limit"] == "1"
        return httpx.Response(200, json=[{"lat": "20.93", "lon": "77.75", "display_name": "Amravati, India"}])

    async def fn(client):
        return await NominatimGeocoder(base_url="https://nominatim.test", client=client).search("Amravati")

    point, name = _run(handler, fn)
    assert (point.latitude, point.longitude) == (20.93, 77.75)
    assert name == "Amravati, India"


def test_search_no_match():
    async def fn(client):
        return await NominatimGeocoder(base_url="https://nominatim.test", client=client).search("zzz")

    assert _run(lambda r: httpx.Response(200, json=[]), fn) is None


def test_search_malformed_match():
    async def fn(client):
        return await NominatimGeocoder(base_url="https://nominatim.test", client=client).search("x")

    with pytest.raises(GeocodeUnavailable):
        _run(lambda r: httpx.Response(200, json=[{"display_name": "no coords"}]), fn)


def test_forecast_request_shape():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=daily_payload([30], [55], [120]))

    async def fn(client):
        return await OpenMeteoForecaster(url="https://meteo.test/v1/forecast", client=client).daily_forecast(POINT)

    raw = _run(handler, fn)
    assert raw["daily"]["precipitation_sum"] == [120]
    params = seen[0].url.params
    assert params["daily"] == DAILY_FIELDS
    assert params["timezone"] == "auto"
    assert params["latitude"] == "20.9374"


def test_forecast_http_error():
    async def fn(client):
        return await OpenMeteoForecaster(url="https://meteo.test/v1/forecast", client=client).daily_forecast(POINT)

    with pytest.raises(ForecastUnavailable):
        _run(lambda r: httpx.Response(500, json={"error": True}), fn)


def test_cached_forecaster_reuses_daily_payload():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=daily_payload([30], [55], [120]))

    async def fn(client):
        cached = CachedForecaster(OpenMeteoForecaster(url="https://meteo.test/v1/forecast", client=client))
        a = await cached.daily_forecast(POINT)
        # same ~1km cell
        b = await cached.daily_forecast(GeoPoint(latitude=20.9401, longitude=77.7812))
        return a, b

    a, b = _run(handler, fn)
    assert a == b
    assert len(calls) == 1


def test_cached_forecaster_skips_payload_without_daily():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"reason": "maintenance"})

    async def fn(client):
        cached = CachedForecaster(OpenMeteoForecaster(url="https://meteo.test/v1/forecast", client=client))
        await cached.daily_forecast(POINT)
        await cached.daily_forecast(POINT)

    _run(handler, fn)
    assert len(calls) == 2
