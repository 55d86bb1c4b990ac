"""
Core Utilities Package

Helpers shared by the provider transform modules.

Modules:
    - time: Epoch and ISO-8601 date normalization
    - money: Minor/major currency unit conversion
"""

from core.utils.time import epoch_to_iso, normalize_date, to_utc_datetime
from core.utils.money import to_major_units

__all__ = ["epoch_to_iso", "normalize_date", "to_utc_datetime", "to_major_units"]
