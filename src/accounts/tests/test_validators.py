import pytest
from django.core.exceptions import ValidationError

from accounts.models import BoxofficeUser
from accounts.validators import normalize_phone_number, validate_phone_number


def test_validate_phone_number_not_string() -> None:
    with pytest.raises(ValidationError, match="Phone number must be a string."):
        validate_phone_number(123)  # type: ignore[arg-type]


def test_validate_phone_number_invalid() -> None:
    with pytest.raises(ValidationError, match="Number format is incorrect."):
        validate_phone_number("123")


def test_validate_phone_number_rejects_letters() -> None:
    with pytest.raises(ValidationError, match="Number format is incorrect."):
        validate_phone_number("+22177abc4567")


def test_validate_phone_number_valid() -> None:
    validate_phone_number("+39328125621")


def test_validate_phone_number_local_format_is_valid() -> None:
    validate_phone_number("77 123 45 67")


def test_validate_phone_number_none() -> None:
    validate_phone_number(None)


@pytest.mark.parametrize(
    "raw",
    ["+221771234567", "+221 77 123 45 67", "00221771234567", "771234567", "77-123-45-67", "(77) 123.45.67"],
)
def test_normalize_phone_number_spellings_agree(raw: str) -> None:
    assert normalize_phone_number(raw) == "+221771234567"


def test_normalize_phone_number_uses_configured_country_code(settings: object) -> None:
    settings.PHONE_DEFAULT_COUNTRY_CODE = "225"  # type: ignore[attr-defined]
    assert normalize_phone_number("071234567") == "+225071234567"


@pytest.mark.django_db
def test_phone_number_field() -> None:
    number_none_user = BoxofficeUser.objects.create_user(
        username="test_no_number",
        password="<PASSWORD>",
    )
    assert number_none_user.phone_number is None

    actual_number_user = BoxofficeUser.objects.create(
        username="test_number",
        phone_number="+39 328 (125)62-1",
        password="<PASSWORD>",
    )
    assert actual_number_user.phone_number == "+39328125621"
