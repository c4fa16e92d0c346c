import secrets
import typing as t

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from common.models import TimeStampedModel

ACCESS_CARD_CODE_PREFIX = "CARD"


def generate_card_number() -> str:
    return f"{secrets.randbelow(10**10):010d}"


def generate_card_code() -> str:
    return f"{ACCESS_CARD_CODE_PREFIX}-{secrets.token_hex(8).upper()}"


class AccessCardQuerySet(models.QuerySet["AccessCard"]):
    def sold(self) -> t.Self:
        return self.filter(is_sold=True)

    def unsold(self) -> t.Self:
        return self.filter(is_sold=False)


class AccessCard(TimeStampedModel):
    """A season-style pass held by one supporter, not tied to a single event.

    ``status`` and ``is_sold`` are independent: a blocked or disabled card keeps its sold flag,
    and an active card may still be unsold. ``is_sold`` only ever goes from False to True.
    """

    class CardStatus(models.TextChoices):
        ACTIVE = "active", "Active"
        BLOCKED = "blocked", "Blocked"
        DISABLED = "disabled", "Disabled"

    holder = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="access_cards")
    card_number = models.CharField(max_length=32, unique=True, default=generate_card_number)
    code = models.CharField(max_length=64, unique=True, default=generate_card_code, editable=False)
    code_image = models.FileField(upload_to="codes/cards/", null=True, blank=True, editable=False)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    status = models.CharField(max_length=20, choices=CardStatus.choices, default=CardStatus.ACTIVE, db_index=True)
    is_sold = models.BooleanField(default=False, db_index=True)
    sold_at = models.DateTimeField(null=True, blank=True, editable=False)

    objects = AccessCardQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(status__in=["active", "blocked", "disabled"]),
                name="access_card_status_valid",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Card {self.card_number} ({self.status})"


class AccessCardEntry(TimeStampedModel):
    """Append-only record of an access card admitted at the gate."""

    card = models.ForeignKey(AccessCard, on_delete=models.PROTECT, related_name="entries")
    operator = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="card_entries")
    entered_at = models.DateTimeField(default=timezone.now, db_index=True, editable=False)

    class Meta:
        ordering = ["-entered_at"]
        verbose_name_plural = "access card entries"
