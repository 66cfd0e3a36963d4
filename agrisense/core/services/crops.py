# core/services/crops.py
"""
Crop selection: a climate decision list plus sensor-driven adjustments.

Both the initial forecast fetch and the sensor recompute go through
`recommend()`, so the rule tables live here only.
"""
from typing import Iterable, List, NamedTuple, Optional

from ..models.domain import SensorReadings, WeatherSnapshot


class ClimateRule(NamedTuple):
    temp_min: float
    temp_max: float
    humidity_min: float
    rain_min: Optional[float]
    rain_max: Optional[float]
    crops: tuple

    def matches(self, temperature: float, humidity: float, rainfall: float) -> bool:
        if not (self.temp_min <= temperature <= self.temp_max):
            return False
        if humidity < self.humidity_min:
            return False
        if self.rain_min is not None and rainfall < self.rain_min:
            return False
        if self.rain_max is not None and rainfall > self.rain_max:
            return False
        return True


# Evaluated top to bottom, first match wins. Ranges overlap on purpose.
CLIMATE_RULES = (
    ClimateRule(10, 25, 60, 80, None, ("Wheat", "Barley", "Peas")),
    ClimateRule(20, 35, 50, 100, None, ("Rice", "Sugarcane", "Jute")),
    ClimateRule(25, 40, 30, None, 50, ("Cotton", "Millets", "Sorghum")),
    ClimateRule(15, 30, 40, 60, None, ("Maize", "Soybean", "Groundnut")),
    ClimateRule(18, 28, 50, 70, None, ("Mustard", "Chickpea", "Lentil")),
)
DEFAULT_CROPS = ("General Vegetables", "Pulses", "Fruits")

# Sensor thresholds
DRY_SOIL_MOISTURE_PCT = 20
ACIDIC_PH = 6
ALKALINE_PH = 7.5
HIGH_WIND_MS = 20

DROUGHT_TOLERANT = ("Millets", "Sorghum", "Cotton")
ACID_TOLERANT = ("Rice", "Jute")
ALKALI_TOLERANT = ("Barley", "Cotton")
WIND_SENSITIVE = ("Sugarcane",)


def select_by_climate(temperature_c: float, humidity_pct: float, rainfall_mm: float) -> List[str]:
    for rule in CLIMATE_RULES:
        if rule.matches(temperature_c, humidity_pct, rainfall_mm):
            return list(rule.crops)
    return list(DEFAULT_CROPS)


def _union(crops: List[str], extra: Iterable[str]) -> List[str]:
    out = list(crops)
    for c in extra:
        if c not in out:
            out.append(c)
    return out


def adjust(base: Iterable[str], readings: SensorReadings) -> List[str]:
    """
    Apply the sensor heuristics to a base crop set, in fixed order:
    dry soil, acidic soil, alkaline soil, then high-wind removal.
    A soil pH of 0 means "not measured" and skips both pH rules.
    """
    crops = _union([], base)

    if readings.soil_moisture_pct < DRY_SOIL_MOISTURE_PCT:
        crops = _union(crops, DROUGHT_TOLERANT)
    if readings.soil_ph and readings.soil_ph < ACIDIC_PH:
        crops = _union(crops, ACID_TOLERANT)
    if readings.soil_ph and readings.soil_ph > ALKALINE_PH:
        crops = _union(crops, ALKALI_TOLERANT)
    # must run last so it also drops anything the steps above added
    if readings.wind_speed_ms > HIGH_WIND_MS:
        crops = [c for c in crops if c not in WIND_SENSITIVE]

    return crops


def recommend(latest: Optional[WeatherSnapshot], readings: SensorReadings) -> List[str]:
    if latest is None:
        return []
    base = select_by_climate(latest.temperature_c, latest.humidity_pct, latest.rainfall_mm)
    return adjust(base, readings)
