"""
PPE field mapping.

Compliance records store one entry per PPE item, keyed by a field name such as
``HardHatCompliance``. Team configuration refers to the catalogue display name
(``Hard Hat``) and the compliance-data endpoint reports camelCase keys
(``hardHat``). This table is the only place the three are tied together.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

COMPLIANT = "Yes"
NON_COMPLIANT = "No"

_FIELD_SUFFIX = "Compliance"


@dataclass(frozen=True)
class PPEField:
    """One PPE item as seen by the catalogue, the records and the API."""
    display_name: str
    field_name: str
    api_key: str
    description: str = ""


PPE_FIELDS: List[PPEField] = [
    PPEField("Vest", "VestCompliance", "vest",
             "High visibility vest for hazardous environments"),
    PPEField("Gloves", "GlovesCompliance", "gloves",
             "Hand protection for various industrial applications"),
    PPEField("Hard Hat", "HardHatCompliance", "hardHat",
             "Standard construction hard hat for head protection"),
    PPEField("Ear Protection", "EarProtectionCompliance", "earProtection",
             "Reduces harmful impact of loud noise on hearing"),
    PPEField("Safety Glasses", "SafetyGlassesCompliance", "safetyGlasses",
             "Eye protection from debris and harmful materials"),
    PPEField("Steel-toe Boots", "Steel-toeBootsCompliance", "steelToeBoots",
             "Foot protection against falling or rolling objects"),
    PPEField("Respiratory Mask", "RespiratoryMaskCompliance", "respiratoryMask",
             "Protection from airborne particulates and chemicals"),
]

_BY_DISPLAY: Dict[str, PPEField] = {f.display_name: f for f in PPE_FIELDS}
_BY_FIELD: Dict[str, PPEField] = {f.field_name: f for f in PPE_FIELDS}


def field_for_display(display_name: str) -> Optional[str]:
    """Record field name for a catalogue item, or None if it is not tracked."""
    entry = _BY_DISPLAY.get(display_name)
    return entry.field_name if entry else None


def display_for_field(field_name: str) -> str:
    """Display name for a record field; unknown fields lose their suffix."""
    entry = _BY_FIELD.get(field_name)
    if entry:
        return entry.display_name
    if field_name.endswith(_FIELD_SUFFIX):
        return field_name[: -len(_FIELD_SUFFIX)]
    return field_name


def api_key_for_field(field_name: str) -> Optional[str]:
    """camelCase response key for a record field."""
    entry = _BY_FIELD.get(field_name)
    return entry.api_key if entry else None


def all_fields() -> List[str]:
    """Every known record field name, in catalogue order."""
    return [f.field_name for f in PPE_FIELDS]
