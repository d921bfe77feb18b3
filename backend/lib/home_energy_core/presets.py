from typing import List, Optional
from .models import AppliancePreset, Month, PriceSlab, UsageType

_SUMMER = frozenset({Month.APR, Month.MAY, Month.JUN, Month.JUL, Month.AUG, Month.SEP})
_WINTER = frozenset({Month.DEC, Month.JAN, Month.FEB})
_COLD = frozenset({Month.NOV, Month.DEC, Month.JAN, Month.FEB, Month.MAR})

APPLIANCE_PRESETS: List[AppliancePreset] = [
    AppliancePreset("LED Bulb", "Lighting", 10, 5),
    AppliancePreset("Incandescent Bulb", "Lighting", 60, 4),
    AppliancePreset("Tube Light", "Lighting", 40, 6),
    AppliancePreset("LED TV", "Entertainment", 80, 5),
    AppliancePreset("LCD TV", "Entertainment", 150, 4),
    AppliancePreset("Ceiling Fan", "Cooling", 75, 8),
    AppliancePreset("Table Fan", "Cooling", 50, 6),
    AppliancePreset("Laptop", "Electronics", 50, 6),
    AppliancePreset("Desktop Computer", "Electronics", 200, 5),
    AppliancePreset("Phone Charger", "Electronics", 5, 3),
    AppliancePreset("Refrigerator", "Appliances", 150, 24),
    AppliancePreset("Washing Machine", "Appliances", 500, 1),
    AppliancePreset("Air Conditioner", "Cooling", 1500, 6, UsageType.SEASONAL, _SUMMER),
    AppliancePreset("Room Heater", "Appliances", 2000, 4, UsageType.SEASONAL, _WINTER),
    AppliancePreset("Microwave", "Appliances", 1000, 0.5),
    AppliancePreset("Water Heater (Geyser)", "Appliances", 2000, 1, UsageType.SEASONAL, _COLD),
    AppliancePreset("Iron Box", "Appliances", 1000, 0.5, UsageType.OCCASIONAL),
    AppliancePreset("Vacuum Cleaner", "Appliances", 1400, 0.5, UsageType.OCCASIONAL),
    AppliancePreset("Mixer Grinder", "Appliances", 500, 0.5),
    AppliancePreset("Water Pump", "Appliances", 750, 1),
]

DEFAULT_SLABS: List[PriceSlab] = [
    PriceSlab(0, 100, 3, id="1"),
    PriceSlab(101, 200, 5, id="2"),
    PriceSlab(201, 400, 7, id="3"),
    PriceSlab(401, None, 9, id="4"),
]


def find_preset(name: str) -> Optional[AppliancePreset]:
    for preset in APPLIANCE_PRESETS:
        if preset.name.lower() == name.strip().lower():
            return preset
    return None
