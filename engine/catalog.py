"""
Static game catalog: herbs, potions, tiers and recipes.

Herbs are the raw resources bought each day at a generated price.
Potions are crafted from exactly two herbs of the same tier and sold
into the market. Nothing in this module is mutated at runtime.
"""

import re
from typing import Literal

Tier = Literal["T1", "T2", "T3"]

TIERS: tuple[Tier, ...] = ("T1", "T2", "T3")

HerbId = Literal[
    "H01", "H02", "H03", "H04",
    "H05", "H06", "H07", "H08",
    "H09", "H10", "H11", "H12",
]

PotionId = Literal[
    "P01", "P02", "P03", "P04", "P05", "P06",
    "P07", "P08", "P09", "P10", "P11", "P12",
    "P13", "P14", "P15", "P16", "P17", "P18",
]

HERB_NAMES: dict[str, str] = {
    "H01": "Dreamleaf",
    "H02": "Stormvine",
    "H03": "Ashen Thistle",
    "H04": "Moonpetal",
    "H05": "Ironbark Needles",
    "H06": "Starbloom",
    "H07": "Embermoss",
    "H08": "Marrowmint",
    "H09": "Whispering Tansy",
    "H10": "Frostcap Fern",
    "H11": "Silverdew Grass",
    "H12": "Crystalline Sage",
}

POTION_NAMES: dict[str, str] = {
    "P01": "Minor Potion of Healing",
    "P02": "Potion of Healing",
    "P03": "Greater Potion of Healing",
    "P04": "Minor Potion of Strength",
    "P05": "Potion of Strength",
    "P06": "Greater Potion of Strength",
    "P07": "Minor Potion of Agility",
    "P08": "Potion of Agility",
    "P09": "Greater Potion of Agility",
    "P10": "Minor Potion of Intelligence",
    "P11": "Potion of Intelligence",
    "P12": "Greater Potion of Intelligence",
    "P13": "Minor Potion of Endurance",
    "P14": "Potion of Endurance",
    "P15": "Greater Potion of Endurance",
    "P16": "Minor Potion of Willpower",
    "P17": "Potion of Willpower",
    "P18": "Greater Potion of Willpower",
}

HERB_IDS: tuple[str, ...] = tuple(HERB_NAMES)
POTION_IDS: tuple[str, ...] = tuple(POTION_NAMES)

HERB_TIERS: dict[str, tuple[str, ...]] = {
    "T1": ("H01", "H02", "H03", "H04"),
    "T2": ("H05", "H06", "H07", "H08"),
    "T3": ("H09", "H10", "H11", "H12"),
}

POTION_TIERS: dict[str, tuple[str, ...]] = {
    "T1": ("P01", "P04", "P07", "P10", "P13", "P16"),
    "T2": ("P02", "P05", "P08", "P11", "P14", "P17"),
    "T3": ("P03", "P06", "P09", "P12", "P15", "P18"),
}

POTION_TIER_LOOKUP: dict[str, str] = {
    potion_id: tier
    for tier, potion_ids in POTION_TIERS.items()
    for potion_id in potion_ids
}

# Each potion uses exactly two herbs of its own tier
RECIPES: dict[str, tuple[str, str]] = {
    # Healing
    "P01": ("H01", "H02"),
    "P02": ("H05", "H06"),
    "P03": ("H09", "H10"),
    # Strength
    "P04": ("H02", "H03"),
    "P05": ("H06", "H07"),
    "P06": ("H10", "H11"),
    # Agility
    "P07": ("H03", "H04"),
    "P08": ("H07", "H08"),
    "P09": ("H11", "H12"),
    # Intelligence
    "P10": ("H04", "H01"),
    "P11": ("H08", "H05"),
    "P12": ("H12", "H09"),
    # Endurance
    "P13": ("H01", "H03"),
    "P14": ("H05", "H07"),
    "P15": ("H09", "H11"),
    # Willpower
    "P16": ("H02", "H04"),
    "P17": ("H06", "H08"),
    "P18": ("H10", "H12"),
}

_POTION_PATTERN = re.compile(r"P(0[1-9]|1[0-8])")
_HERB_PATTERN = re.compile(r"H(0[1-9]|1[0-2])")


def humanize(text: str) -> str:
    """Replace herb and potion ids in a message with their display names."""
    text = _POTION_PATTERN.sub(lambda m: POTION_NAMES.get(m.group(0), m.group(0)), text)
    return _HERB_PATTERN.sub(lambda m: HERB_NAMES.get(m.group(0), m.group(0)), text)
