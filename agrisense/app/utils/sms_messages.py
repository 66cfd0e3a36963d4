"""
SMS text for a recommendation, in the same layout the dashboard sends.
"""
import re

from agrisense.core.errors import InvalidPhoneNumber
from agrisense.core.models.domain import Recommendation

NA = "N/A"

# 10-digit Indian mobile number
PHONE_RE = re.compile(r"^[6-9]\d{9}$")


def validate_phone(phone: str) -> str:
    phone = (phone or "").strip()
    if not PHONE_RE.match(phone):
        raise InvalidPhoneNumber("Enter a valid 10-digit Indian number")
    return phone


def format_crops(rec: Recommendation) -> str:
    valid = rec.location is not None and rec.location.is_valid
    if not valid or not rec.crops:
        return NA
    return ", ".join(rec.crops)


def format_fertilizers(rec: Recommendation) -> str:
    valid = rec.location is not None and rec.location.is_valid
    if not valid or not rec.agrochemicals:
        return NA
    return " | ".join(f"{e.crop}: {', '.join(e.fertilizers)}" for e in rec.agrochemicals)


def compose_crop_sms(rec: Recommendation) -> str:
    """Crop + fertilizer summary; invalid locations get N/A in both lines."""
    name = rec.location.name if rec.location else "Unknown Location"
    return (f"🌾 AgriSense ({name})\n"
            f"Crops: {format_crops(rec)}\n"
            f"Fertilizers: {format_fertilizers(rec)}")
