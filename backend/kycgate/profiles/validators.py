"""
profiles/validators.py

Profile Detail Validators

Validates personal, business and driver details:
- Names: letters, spaces, hyphens and apostrophes only, bounded length
- Date of birth: applicant must be of age and plausibly alive
- Street address: bounded length
- Registration, tax, license and plate numbers: letters, digits and separators
- Vehicle year and license expiry: plausible dates
"""

import re
from datetime import date
from typing import Final

from kycgate.core.config import settings

# -------------------------------
# Constants
# -------------------------------
MIN_NAME_LENGTH: Final[int] = 2
MAX_NAME_LENGTH: Final[int] = 50
MAX_APPLICANT_AGE: Final[int] = 120
MIN_STREET_LENGTH: Final[int] = 10
MAX_STREET_LENGTH: Final[int] = 200

NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z\s\-']+$")
IDENTIFIER_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 \-/]*$")
MIN_VEHICLE_YEAR: Final[int] = 1950


def age_on(born: date, today: date) -> int:
    """Whole years between `born` and `today`."""
    years = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        years -= 1
    return years


# -------------------------------
# Validator Functions
# -------------------------------
def name_validator(value: str) -> str:
    """
    Validates a first or last name.

    Raises:
        ValueError: If the name is too short, too long or has invalid characters
    """
    value = value.strip()
    if len(value) < MIN_NAME_LENGTH:
        raise ValueError(f"Name must be at least {MIN_NAME_LENGTH} characters long.")
    if len(value) > MAX_NAME_LENGTH:
        raise ValueError(f"Name must not exceed {MAX_NAME_LENGTH} characters.")
    if not NAME_PATTERN.match(value):
        raise ValueError("Name can only contain letters, spaces, hyphens, and apostrophes.")
    return value


def date_of_birth_validator(value: date, today: date | None = None) -> date:
    """
    Validates a date of birth against the minimum applicant age.

    Raises:
        ValueError: If the applicant is under age or the date is implausible
    """
    today = today or date.today()
    if value > today:
        raise ValueError("Date of birth cannot be in the future.")
    age = age_on(value, today)
    if age < settings.MIN_APPLICANT_AGE:
        raise ValueError(f"You must be at least {settings.MIN_APPLICANT_AGE} years old.")
    if age > MAX_APPLICANT_AGE:
        raise ValueError("Please enter a valid date of birth.")
    return value


def street_validator(value: str) -> str:
    value = value.strip()
    if len(value) < MIN_STREET_LENGTH:
        raise ValueError("Please enter a complete street address.")
    if len(value) > MAX_STREET_LENGTH:
        raise ValueError(f"Street address must not exceed {MAX_STREET_LENGTH} characters.")
    return value


def identifier_validator(value: str) -> str:
    """
    Validates an official number (registration, tax id, license, plate).

    Normalized to upper case with surrounding whitespace removed.
    """
    value = value.strip().upper()
    if len(value) < 3:
        raise ValueError("Number must be at least 3 characters long.")
    if not IDENTIFIER_PATTERN.match(value):
        raise ValueError("Number can only contain letters, digits, spaces, hyphens and slashes.")
    return value


def vehicle_year_validator(value: int, today: date | None = None) -> int:
    today = today or date.today()
    if value < MIN_VEHICLE_YEAR or value > today.year + 1:
        raise ValueError(f"Vehicle year must be between {MIN_VEHICLE_YEAR} and {today.year + 1}.")
    return value


def license_expiry_validator(value: date, today: date | None = None) -> date:
    """Raises ValueError for a license that has already expired."""
    today = today or date.today()
    if value < today:
        raise ValueError("Driver's license has expired.")
    return value
