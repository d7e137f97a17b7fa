"""
Validation Utilities for the Employee Vaccination Inventory
"""

from datetime import date
from typing import Any, Optional

from app.core.config import settings
from app.core.exceptions import ValidationError

# Valid province codes for Ecuadorian cedulas: 01-24 plus 30 for
# citizens registered abroad
CEDULA_PROVINCES = set(range(1, 25)) | {30}
CEDULA_COEFFICIENTS = [2, 1, 2, 1, 2, 1, 2, 1, 2]


def validate_cedula(cedula: str) -> bool:
    """Validate a 10-digit Ecuadorian cedula with the modulo 10 algorithm."""
    if not cedula or not cedula.isdigit() or len(cedula) != 10:
        return False

    province = int(cedula[0:2])
    if province not in CEDULA_PROVINCES:
        return False

    # Third digit identifies natural persons (0-5)
    if int(cedula[2]) > 5:
        return False

    total = 0
    for digit, coefficient in zip(cedula[:9], CEDULA_COEFFICIENTS):
        value = int(digit) * coefficient
        if value >= 10:
            value -= 9
        total += value

    remainder = total % 10
    expected = 0 if remainder == 0 else 10 - remainder
    return int(cedula[9]) == expected


def validate_dni(dni: Any, strict: Optional[bool] = None) -> bool:
    """Check whether a dni is acceptable.

    Integers lose leading zeros, so numeric values are zero-padded to ten
    digits before the cedula check. Without the strict checksum any positive
    number within the configured length bounds is accepted.
    """
    if dni is None or isinstance(dni, bool):
        return False

    strict = settings.dni_strict_checksum if strict is None else strict
    text = str(dni).strip()
    if not text.isdigit() or int(text) <= 0:
        return False

    if strict:
        return validate_cedula(text.zfill(10))

    digits = text.lstrip("0")
    return settings.dni_min_length <= len(digits) <= settings.dni_max_length


def validate_date_range(start_date: date, finish_date: date):
    """Validate a vaccination date range."""
    if start_date > finish_date:
        raise ValidationError(
            detail="Start date must not be after finish date",
            error_data={
                "start_date": start_date.isoformat(),
                "finish_date": finish_date.isoformat()
            }
        )
