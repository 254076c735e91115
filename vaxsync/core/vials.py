"""
Doses-per-vial catalogue.

Stock and sessions are counted in doses; this table converts dose counts to
vials for display and seeds the vaccine catalogue.
"""

import math

VACCINE_VIAL_MAPPING: dict[str, int | None] = {
    # Multi-dose vials (20 doses per vial)
    "BCG": 20,
    "BCG Diluent": 20,
    "bOPV": 20,
    # Standard vials (10 doses per vial)
    "Pentavalent": 10,
    "IPV 10 dose": 10,
    "PCV10 (4 dose)": 10,
    "Hep B (10 dose)": 10,
    "MMR": 10,
    "MR": 10,
    "HPV": 10,
    "Td10": 10,
    # Single dose or special
    "Tt1": 1,
    "PPV23": 1,
    "FLU vaccines": 1,
    "MMR diluent": 1,
    "MR diluent": 1,
    # Supplies
    "dropper": None,
}


def get_doses_per_vial(vaccine_name: str) -> int | None:
    """Doses per vial for a catalogued vaccine, None if unknown or N/A."""
    return VACCINE_VIAL_MAPPING.get(vaccine_name) or None


def calculate_vials_needed(doses_per_vial: int | None, doses: int) -> int:
    """
    Vials needed to cover ``doses`` (rounded up).
    Without a doses-per-vial figure the dose count is returned as-is.
    """
    if not doses_per_vial:
        return doses
    return math.ceil(doses / doses_per_vial)


def vial_info() -> list[dict]:
    return [
        {
            "vaccine": name,
            "doses_per_vial": per_vial,
            "label": f"{per_vial} doses/vial" if per_vial else "N/A",
        }
        for name, per_vial in VACCINE_VIAL_MAPPING.items()
    ]
