import re

from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

PHONE_REGEX = re.compile(r"^\+\d{7,15}$")  # E.164: +[country][number], up to 15 digits
LOCAL_NUMBER_REGEX = re.compile(r"^\d{9}$")


def validate_phone_number(value: str | None) -> None:
    """Validate phone number.

    Args:
        value (str): phone number, international or in the local nine-digit format.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(_("Phone number must be a string."))

    normalized = normalize_phone_number(value)

    if not PHONE_REGEX.fullmatch(normalized):
        raise ValidationError(_("Number format is incorrect."))
    return None


def normalize_phone_number(value: str) -> str:
    """Normalize phone number to E.164.

    Separators are dropped, a ``00`` international prefix becomes ``+`` and a local
    nine-digit number gets the default country code. The same number typed in any of
    these ways normalizes to the same string, which makes it usable as a buyer key.

    Args:
        value (str): phone number.

    Returns:
        str: normalized phone number.
    """
    number = re.sub(r"[ .\-()]", "", value.strip())
    if number.startswith("00"):
        number = "+" + number[2:]
    elif LOCAL_NUMBER_REGEX.fullmatch(number):
        number = f"+{settings.PHONE_DEFAULT_COUNTRY_CODE}{number}"
    return number
