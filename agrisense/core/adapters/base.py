from enum import Enum
from typing import Any, Dict, Optional, Protocol, Tuple

from ..models.domain import AdvisoryNotification, GeoPoint, PlaceCandidate


class Permission(str, Enum):
    DEFAULT = "default"   # not decided yet; a request is issued before delivery
    GRANTED = "granted"
    DENIED = "denied"


class Notifier(Protocol):
    permission: Permission

    async def request_permission(self) -> Permission:
        """Ask the host for notification permission and return the outcome."""
        ...

    async def show(self, notification: AdvisoryNotification) -> None:
        """Display/deliver a notification."""
        ...


class Geocoder(Protocol):
    async def reverse(self, point: GeoPoint) -> PlaceCandidate:
        """Reverse lookup. Raises GeocodeUnavailable on any failure."""
        ...

    async def search(self, query: str) -> Optional[Tuple[GeoPoint, str]]:
        """Forward lookup: (point, display name) of the best match, or None."""
        ...


class Forecaster(Protocol):
    async def daily_forecast(self, point: GeoPoint) -> Dict[str, Any]:
        """Raw daily forecast payload. Raises ForecastUnavailable on transport errors."""
        ...
