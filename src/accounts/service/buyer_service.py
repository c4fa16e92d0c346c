"""Buyer identity resolution."""

import structlog
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils.translation import gettext_lazy as _

from accounts.models import BoxofficeUser
from accounts.validators import normalize_phone_number, validate_phone_number

logger = structlog.get_logger(__name__)


def find_or_create_buyer(
    phone_number: str,
    *,
    first_name: str,
    last_name: str,
    email: str | None = None,
) -> tuple[BoxofficeUser, bool]:
    """Return the buyer identified by a phone number, creating a supporter account if needed.

    The phone number is the natural key: repeated calls with the same number (in any
    formatting) resolve to the same user and never update an existing profile.

    Runs in the caller's transaction, so a buyer created for a purchase that later
    fails is rolled back together with the purchase.

    Raises:
        ValidationError: If the phone number is malformed.
    """
    validate_phone_number(phone_number)
    normalized = normalize_phone_number(phone_number)

    if buyer := BoxofficeUser.objects.by_phone_number(normalized).first():
        return buyer, False

    buyer = BoxofficeUser(
        username=normalized,
        phone_number=normalized,
        first_name=first_name,
        last_name=last_name,
        email=email or "",
        role=BoxofficeUser.Role.SUPPORTER,
    )
    buyer.set_unusable_password()
    try:
        # A concurrent purchase may register the same phone number first.
        with transaction.atomic():
            buyer.save()
    except IntegrityError:
        existing = BoxofficeUser.objects.by_phone_number(normalized).first()
        if existing is None:
            raise ValidationError({"phone": [_("A user with this username already exists.")]}) from None
        return existing, False

    logger.info("buyer_created", user_id=str(buyer.id))
    return buyer, True
