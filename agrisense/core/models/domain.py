from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Domain models for the advisory pipeline

class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

class PlaceCandidate(BaseModel):
    point: GeoPoint
    display_name: str = ""
    address_tags: Dict[str, str] = {}

class ValidatedLocation(BaseModel):
    point: GeoPoint
    name: str
    is_valid: bool
    token: int = 0  # session sequence number; stale fetches are matched against it

class DailyWeatherPoint(BaseModel):
    date: str
    temperature_c: float
    humidity_pct: float
    rainfall_mm: float

class WeatherSnapshot(BaseModel):
    temperature_c: float
    humidity_pct: float
    rainfall_mm: float

class SensorReadings(BaseModel):
    soil_moisture_pct: float = 0.0
    soil_ph: float = 0.0  # 0 means unset
    wind_speed_ms: float = 0.0

class AgrochemicalEntry(BaseModel):
    crop: str
    fertilizers: List[str]
    pesticides: List[str]

class AdvisoryNotification(BaseModel):
    title: str
    body: str
    fire_at: datetime

class Recommendation(BaseModel):
    location: Optional[ValidatedLocation] = None
    series: List[DailyWeatherPoint] = Field(default_factory=list)
    latest: Optional[WeatherSnapshot] = None
    sensors: SensorReadings = Field(default_factory=SensorReadings)
    crops: List[str] = Field(default_factory=list)
    agrochemicals: List[AgrochemicalEntry] = Field(default_factory=list)
    error: Optional[str] = None
