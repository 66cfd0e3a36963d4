# core/services/agrochem.py
from typing import Dict, Iterable, List

from ..models.domain import AgrochemicalEntry

FALLBACK_FERTILIZERS = ["NPK (Balanced Fertilizer)"]
FALLBACK_PESTICIDES = ["General Crop Protector"]

# crop -> fertilizers / pesticides
AGROCHEMICALS: Dict[str, Dict[str, List[str]]] = {
    "Wheat":     {"fertilizers": ["Urea", "DAP", "MOP"], "pesticides": ["Chlorpyrifos", "Imidacloprid"]},
    "Rice":      {"fertilizers": ["Urea", "Superphosphate", "Potash"], "pesticides": ["Carbofuran", "Monocrotophos"]},
    "Cotton":    {"fertilizers": ["Nitrogen", "Phosphorus", "Potassium"], "pesticides": ["Cypermethrin", "Thiamethoxam"]},
    "Maize":     {"fertilizers": ["Urea", "Zinc Sulphate", "SSP"], "pesticides": ["Atrazine", "Malathion"]},
    "Sugarcane": {"fertilizers": ["Nitrogen", "Phosphate", "Potash"], "pesticides": ["Chlorpyrifos", "Fipronil"]},
    "Barley":    {"fertilizers": ["Ammonium Sulphate", "Superphosphate"], "pesticides": ["Lambda-cyhalothrin", "Carbendazim"]},
    "Mustard":   {"fertilizers": ["Urea", "MOP", "Sulphur"], "pesticides": ["Dimethoate", "Imidacloprid"]},
    "Soybean":   {"fertilizers": ["SSP", "Urea", "Potash"], "pesticides": ["Quinalphos", "Thiodicarb"]},
    "Groundnut": {"fertilizers": ["Gypsum", "Phosphate", "Urea"], "pesticides": ["Malathion", "Endosulfan"]},
    "Jute":      {"fertilizers": ["Urea", "Superphosphate"], "pesticides": ["Carbaryl", "Endrin"]},
    "Lentil":    {"fertilizers": ["Urea", "MOP", "SSP"], "pesticides": ["Imidacloprid", "Carbendazim"]},
    "Peas":      {"fertilizers": ["Urea", "Potash"], "pesticides": ["Chlorpyrifos", "Dithane M-45"]},
    "Millets":   {"fertilizers": ["Nitrogen", "Phosphorus"], "pesticides": ["Dichlorvos", "Carbaryl"]},
    "Sorghum":   {"fertilizers": ["Urea", "Phosphorus", "Zinc"], "pesticides": ["Malathion", "Endrin"]},
}


def resolve(crops: Iterable[str]) -> List[AgrochemicalEntry]:
    """One entry per crop, in the given order. Unknown crops get the balanced fallback."""
    out = []
    for crop in crops:
        row = AGROCHEMICALS.get(crop)
        out.append(AgrochemicalEntry(
            crop=crop,
            fertilizers=list(row["fertilizers"]) if row else list(FALLBACK_FERTILIZERS),
            pesticides=list(row["pesticides"]) if row else list(FALLBACK_PESTICIDES),
        ))
    return out
