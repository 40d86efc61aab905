"""
InspectPilot Finding Classification

Groups a finding by electrical system, space and tags using keyword
tables matched against the normalized finding id. Group tables are
ordered and the first match wins; every matching tag rule contributes.
"""
from __future__ import annotations

from ..models import FindingClassification


DEFAULT_SYSTEM_GROUP = "other"
DEFAULT_SPACE_GROUP = "general"

SYSTEM_GROUP_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("switchboard", ("SWITCHBOARD", "MAIN_SWITCH", "SERVICE_FUSE", "BOARD_AT_CAPACITY",
                     "NO_EXPANSION_MARGIN", "LABELING")),
    ("earthing", ("EARTH", "MEN_", "BONDING", "GROUND")),
    ("rcd", ("RCD", "RCBO", "TEST_BUTTON", "TRIP_TIME")),
    ("lighting", ("LIGHT", "LAMP", "FITTING", "CEILING", "SWITCH_ARCING")),
    ("power", ("GPO", "POWER_POINT", "OUTLET", "PLUG_", "SOCKET")),
    ("smoke_alarm", ("SMOKE_ALARM", "ALARM_SOUNDED", "TYPE_OBSERVED_PHOTOELECTRIC",
                     "UNIT_TESTED_AS_INTERCONNECTED")),
    ("roof_space", ("ROOF_SPACE", "TRANSFORMER", "INSULATION_CONTACT", "ROOF_")),
    ("thermal", ("THERMAL", "HEAT_DAMAGE", "SURFACE_FEELS_ABNORMALLY", "OVERHEATING", "HOTSPOT")),
    ("appliances", ("COOKTOP", "OVEN", "RANGEHOOD", "RANGE_HOOD", "SUPPLY_CABLE_LOCATED",
                    "DISHWASHER", "WASHING_MACHINE", "DRYER", "EXHAUST_FAN", "HEATED_TOWEL")),
    ("cabling", ("CABLE", "WIRING", "INSULATION", "FLEXIBLE_LEAD", "TAPED_CONNECTION",
                 "BARE_METAL")),
    # Hazards, portable equipment and checklist items
    ("other", ("ASBESTOS", "COVER_BROKEN", "CERAMIC_FUSE", "BAKELITE", "DAMAGE_CORROSION",
               "EXTENSION_LEAD", "POWER_BOARD", "NUMBER_OF_POWER", "GARAGE_DOOR",
               "LOCATION_PHOTOGRAPHED", "MANUFACTURE_DATE", "ALL_CHECKLIST",
               "ALL_REQUIRED_PHOTOS", "NO_ADVICE", "LIMITATION")),
)

SPACE_GROUP_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("kitchen", ("KITCHEN", "COOKTOP", "OVEN", "RANGEHOOD", "DISHWASHER")),
    ("bathroom", ("BATHROOM", "BATH_", "SHOWER", "SINK_", "WATER_TAP", "HEATED_TOWEL")),
    ("living", ("LIVING", "COMMON")),
    ("bedroom", ("BEDROOM", "BED_")),
    ("exterior", ("EXTERIOR", "OUTDOOR", "OUTSIDE")),
    ("roof_space", ("ROOF_SPACE", "ROOF_", "CEILING", "ATTIC", "VOID")),
    ("switchboard_area", ("SWITCHBOARD", "MAIN_SWITCH", "METER", "METERBOX")),
    ("laundry", ("LAUNDRY", "WASHING_MACHINE", "DRYER")),
    ("garage", ("GARAGE", "CARPORT")),
    ("general", ("POWER_POINT", "OUTLET", "LIGHT_", "GPO")),
)

TAG_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("safety", ("SAFETY", "ALARM", "RCD", "EARTH_PIN", "BURN_", "HEAT_DAMAGE", "ASBESTOS", "HAZARD")),
    ("compliance", ("COMPLIANCE", "LIABILITY", "MEN_", "LABEL", "CLEARANCE", "NON_STANDARD")),
    ("thermal", ("THERMAL", "HEAT_", "OVERHEAT", "SURFACE_FEELS", "HOTSPOT")),
    ("moisture", ("WATER", "MOISTURE", "BATHROOM", "SINK", "WEATHERPROOF", "WET")),
    ("cabling", ("CABLE", "WIRING", "INSULATION", "DAMAGE_VISIBLE", "BARE_METAL")),
    ("switchboard", ("SWITCHBOARD", "FUSE", "BOARD", "MAIN_SWITCH")),
    ("earthing", ("EARTH", "MEN_", "BONDING", "GROUND")),
    ("rcd", ("RCD", "RCBO", "RESIDUAL")),
    ("lighting", ("LIGHT", "LAMP", "FITTING", "SWITCH")),
    ("power", ("GPO", "POWER_POINT", "OUTLET", "SOCKET")),
    ("appliance", ("COOKTOP", "OVEN", "RANGEHOOD", "DISHWASHER", "WASHING_MACHINE", "DRYER",
                   "APPLIANCE")),
    ("budget", ("BUDGET", "CAPEX", "COST")),
    ("urgent", ("IMMEDIATE", "URGENT", "CRITICAL")),
    ("legacy", ("CERAMIC_FUSE", "BAKELITE", "LEGACY", "OLD")),
    ("hazard", ("ASBESTOS", "HAZARD", "DANGEROUS")),
)


def normalize_finding_id(finding_id: str) -> str:
    """Upper-case, trimmed, hyphens as underscores."""
    return finding_id.strip().upper().replace("-", "_")


def _first_match(key: str, rules: tuple[tuple[str, tuple[str, ...]], ...], default: str) -> str:
    for value, keywords in rules:
        if any(keyword in key for keyword in keywords):
            return value
    return default


def classify_finding(finding_id: str) -> FindingClassification:
    """
    Classify a finding by id.

    Example:
        >>> classify_finding("RCD_TEST_FAIL_KITCHEN").system_group
        'rcd'
    """
    key = normalize_finding_id(finding_id)
    tags: list[str] = []
    for tag, keywords in TAG_RULES:
        if tag not in tags and any(keyword in key for keyword in keywords):
            tags.append(tag)
    return FindingClassification(
        system_group=_first_match(key, SYSTEM_GROUP_RULES, DEFAULT_SYSTEM_GROUP),
        space_group=_first_match(key, SPACE_GROUP_RULES, DEFAULT_SPACE_GROUP),
        tags=tuple(tags),
    )
