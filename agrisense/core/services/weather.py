# core/services/weather.py
from typing import Any, Dict, List, Tuple

from ..errors import ForecastMalformed
from ..models.domain import DailyWeatherPoint, WeatherSnapshot

# Open-Meteo daily keys, in the order they are zipped
TIME_KEY = "time"
TEMPERATURE_KEY = "temperature_2m_max"
HUMIDITY_KEY = "relative_humidity_2m_max"
RAINFALL_KEY = "precipitation_sum"


def normalize(raw: Dict[str, Any]) -> Tuple[List[DailyWeatherPoint], WeatherSnapshot]:
    """
    Zip the daily arrays of a forecast payload into a chronological series.

    Returns (series, latest) where `latest` is the last element of the series.
    Order is taken as delivered by the upstream source; nothing is re-sorted.

    Raises ForecastMalformed when the daily block, its time axis or any metric
    array is missing, when the arrays differ in length, or when there are no days.
    """
    daily = (raw or {}).get("daily")
    if not isinstance(daily, dict):
        raise ForecastMalformed("forecast has no daily block")

    dates = daily.get(TIME_KEY)
    if not isinstance(dates, list) or not dates:
        raise ForecastMalformed("forecast has no daily time axis")

    metrics = {}
    for key in (TEMPERATURE_KEY, HUMIDITY_KEY, RAINFALL_KEY):
        values = daily.get(key)
        if values is None:
            raise ForecastMalformed(f"forecast is missing '{key}'")
        if not isinstance(values, list):
            raise ForecastMalformed(f"'{key}' is not an array")
        if len(values) != len(dates):
            raise ForecastMalformed(
                f"'{key}' has {len(values)} values for {len(dates)} days"
            )
        metrics[key] = values

    try:
        series = [
            DailyWeatherPoint(
                date=str(dates[i]),
                temperature_c=float(metrics[TEMPERATURE_KEY][i]),
                humidity_pct=float(metrics[HUMIDITY_KEY][i]),
                rainfall_mm=float(metrics[RAINFALL_KEY][i]),
            )
            for i in range(len(dates))
        ]
    except (TypeError, ValueError) as e:
        # e.g. a null reading in one of the arrays
        raise ForecastMalformed(f"forecast has a non-numeric reading: {e}") from e

    last = series[-1]
    latest = WeatherSnapshot(
        temperature_c=last.temperature_c,
        humidity_pct=last.humidity_pct,
        rainfall_mm=last.rainfall_mm,
    )
    return series, latest
