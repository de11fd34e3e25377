"""Shared validation utilities"""

import re
from typing import Optional

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")
_UELN_PATTERN = re.compile(r"^[0-9A-Z]{15}$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not _EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize an international phone number to E.164 format.

    Numbers without a leading "+" are assumed to already carry a country code.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)
    if len(digits) < 7 or len(digits) > 15:
        raise ValueError("Phone number must have between 7 and 15 digits")
    return f"+{digits}"


def validate_time_of_day(value: Optional[str]) -> Optional[str]:
    """Validate a 24-hour HH:MM time"""
    if value is None:
        return value
    if not _TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM format")
    return value


def validate_hex_color(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    if not _HEX_COLOR_PATTERN.match(value):
        raise ValueError("Color must be a hex value like #A1B2C3")
    return value.upper()


def validate_ueln(value: Optional[str]) -> Optional[str]:
    """Universal Equine Life Number: 15 alphanumeric characters"""
    if not value:
        return value
    normalized = value.replace(" ", "").upper()
    if not _UELN_PATTERN.match(normalized):
        raise ValueError("UELN must be 15 alphanumeric characters")
    return normalized


def minutes_of_day(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)
