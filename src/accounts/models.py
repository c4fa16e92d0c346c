import re
import typing as t
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models

from accounts.validators import normalize_phone_number, validate_phone_number


class BoxofficeUserQueryset(models.QuerySet["BoxofficeUser"]):
    """Queryset for BoxofficeUser."""

    def by_phone_number(self, phone_number: str) -> t.Self:
        """Match on the normalised form, whatever the spelling of the number."""
        return self.filter(phone_number=normalize_phone_number(phone_number))


class BoxofficeUserManager(UserManager["BoxofficeUser"]):
    def get_queryset(self) -> BoxofficeUserQueryset:
        """Get queryset for BoxofficeUser."""
        return BoxofficeUserQueryset(self.model, using=self._db)

    def by_phone_number(self, phone_number: str) -> BoxofficeUserQueryset:
        return self.get_queryset().by_phone_number(phone_number)


class BoxofficeUser(AbstractUser):
    class Role(models.TextChoices):
        SUPER_ADMIN = "super_admin", "Super Admin"
        ADMIN = "admin", "Admin"
        CLUB_MANAGER = "club_manager", "Club Manager"
        GATEKEEPER = "gatekeeper", "Gatekeeper"
        SUPPORTER = "supporter", "Supporter"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    phone_number = models.CharField(
        max_length=20, unique=True, null=True, blank=True, validators=[validate_phone_number], help_text="Phone number"
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.SUPPORTER,
        db_index=True,
        help_text="Determines which ticketing operations the user may perform.",
    )
    language = models.CharField(
        max_length=7,
        choices=settings.LANGUAGES,
        default=settings.LANGUAGE_CODE,
        help_text="User's preferred language",
    )

    objects = BoxofficeUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(role__in=["super_admin", "admin", "club_manager", "gatekeeper", "supporter"]),
                name="user_role_valid",
            ),
        ]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Normalize the phone number before saving."""
        if self.phone_number:
            self.phone_number = normalize_phone_number(self.phone_number)
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's full name, falling back to a prettified username."""
        return self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
