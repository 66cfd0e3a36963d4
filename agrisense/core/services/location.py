# core/services/location.py
from typing import Mapping

from ..models.domain import GeoPoint, PlaceCandidate, ValidatedLocation

UNKNOWN_LOCATION = "Unknown Location"

# Words in a display name that indicate non-agricultural zones
RESTRICTED_KEYWORDS = (
    "hospital",
    "clinic",
    "school",
    "college",
    "university",
    "temple",
    "church",
    "mosque",
    "police",
    "office",
    "market",
    "mall",
    "restaurant",
    "hotel",
    "bank",
    "atm",
    "library",
    "airport",
    "station",
    "bus",
)

# Nominatim address fields that mark a recognised populated place
SETTLEMENT_TAGS = ("city", "town", "village", "hamlet")


def is_restricted(display_name: str) -> bool:
    """Case-insensitive substring match against the restricted keyword list."""
    text = (display_name or "").lower()
    return any(word in text for word in RESTRICTED_KEYWORDS)


def has_settlement(address_tags: Mapping[str, str]) -> bool:
    return any(bool(address_tags.get(tag)) for tag in SETTLEMENT_TAGS)


def validate(candidate: PlaceCandidate, default_name: str = UNKNOWN_LOCATION) -> ValidatedLocation:
    """
    Classify a reverse-geocode result as farmland (valid) or restricted.

    A location is valid only when its address carries a settlement tag AND its
    display name has no restricted keyword. An empty address is never valid.
    """
    tags = candidate.address_tags or {}
    if not tags:
        return ValidatedLocation(point=candidate.point, name=default_name, is_valid=False)

    valid = has_settlement(tags) and not is_restricted(candidate.display_name)
    return ValidatedLocation(
        point=candidate.point,
        name=candidate.display_name or default_name,
        is_valid=valid,
    )


def unknown_location(point: GeoPoint) -> ValidatedLocation:
    """Fail-closed result for a failed lookup."""
    return ValidatedLocation(point=point, name=UNKNOWN_LOCATION, is_valid=False)
