from typing import Optional, List
from pydantic import BaseModel, Field

from agrisense.core.models.domain import (
    AdvisoryNotification,
    AgrochemicalEntry,
    DailyWeatherPoint,
    Recommendation,
    SensorReadings,
    ValidatedLocation,
    WeatherSnapshot,
)
from agrisense.app.utils.sms_messages import format_crops, format_fertilizers


# ---------- Request models ----------

class PointRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90, description="Latitude in WGS84")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in WGS84")

class SearchRequest(BaseModel):
    query: str = Field(..., description="Free-text place name, e.g. 'Amravati, Maharashtra'")

class SensorUpdate(BaseModel):
    soil_moisture_pct: float = Field(0.0, ge=0, le=100, description="Soil moisture in %")
    soil_ph: float = Field(0.0, ge=0, le=14, description="Soil pH; 0 means not measured")
    wind_speed_ms: float = Field(0.0, ge=0, description="Wind speed in m/s")

    def to_readings(self) -> SensorReadings:
        return SensorReadings(**self.model_dump())

class SmsRequest(BaseModel):
    phone: str = Field(..., description="10-digit Indian mobile number")


# ---------- Response models ----------

class RecommendationResponse(BaseModel):
    location: Optional[ValidatedLocation] = None
    latest: Optional[WeatherSnapshot] = None
    series: List[DailyWeatherPoint] = Field(default_factory=list)  # for charts
    sensors: SensorReadings = Field(default_factory=SensorReadings)
    crops: List[str] = Field(default_factory=list)
    agrochemicals: List[AgrochemicalEntry] = Field(default_factory=list)
    crops_text: str = "N/A"
    fertilizers_text: str = "N/A"
    error: Optional[str] = None

    @classmethod
    def from_recommendation(cls, rec: Recommendation) -> "RecommendationResponse":
        return cls(
            location=rec.location,
            latest=rec.latest,
            series=rec.series,
            sensors=rec.sensors,
            crops=rec.crops,
            agrochemicals=rec.agrochemicals,
            crops_text=format_crops(rec),
            fertilizers_text=format_fertilizers(rec),
            error=rec.error,
        )

class NotificationsResponse(BaseModel):
    permission: str
    pending: int = 0
    delivered: List[AdvisoryNotification] = Field(default_factory=list)

class SmsResponse(BaseModel):
    success: bool
    sid: Optional[str] = None
    message: str
