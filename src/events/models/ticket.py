import typing as t
import uuid
from datetime import datetime, timedelta

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from common.models import TimeStampedModel

from .event import Event, TicketCategory

TICKET_CODE_PREFIX = "TKT"


def derive_ticket_code(ticket_id: uuid.UUID) -> str:
    """Return the machine-readable code of a ticket.

    The code is derived from the ticket identity. It is unique but not a secret.
    """
    return f"{TICKET_CODE_PREFIX}-{ticket_id.hex.upper()}"


class TicketQuerySet(models.QuerySet["Ticket"]):
    def available(self) -> t.Self:
        """Tickets that can still be claimed."""
        return self.filter(status=Ticket.TicketStatus.AVAILABLE)

    def for_category(self, category: TicketCategory, event: Event | None = None) -> t.Self:
        """Inventory of one category, optionally narrowed to a single event."""
        qs = self.filter(category=category)
        if event is not None:
            qs = qs.filter(event=event)
        return qs

    def in_claim_order(self) -> t.Self:
        """Oldest inventory first, so old tickets are not starved."""
        return self.order_by("created_at", "id")

    def full(self) -> t.Self:
        """Select all commonly needed related objects."""
        return self.select_related("event", "category", "sale")


class TicketManager(models.Manager["Ticket"]):
    def get_queryset(self) -> TicketQuerySet:
        """Get base queryset."""
        return TicketQuerySet(self.model, using=self._db)

    def available(self) -> TicketQuerySet:
        """Tickets that can still be claimed."""
        return self.get_queryset().available()

    def for_category(self, category: TicketCategory, event: Event | None = None) -> TicketQuerySet:
        """Inventory of one category."""
        return self.get_queryset().for_category(category, event)

    def in_claim_order(self) -> TicketQuerySet:
        return self.get_queryset().in_claim_order()

    def full(self) -> TicketQuerySet:
        """Returns a queryset with all related objects selected."""
        return self.get_queryset().full()


class Ticket(TimeStampedModel):
    """A numbered admission ticket for an event.

    Lifecycle: available -> sold (reservation) -> used (check-in), and sold -> available
    when the owning sale is cancelled. ``used`` is terminal.
    A ticket references a sale exactly when it is sold or used.
    """

    class TicketStatus(models.TextChoices):
        AVAILABLE = "available", "Available"
        SOLD = "sold", "Sold"
        USED = "used", "Used"

    class Channel(models.TextChoices):
        PRINT = "print", "Print"
        ONLINE = "online", "Online"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    category = models.ForeignKey(TicketCategory, on_delete=models.CASCADE, related_name="tickets")
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    channel = models.CharField(max_length=10, choices=Channel.choices, default=Channel.ONLINE, db_index=True)
    code = models.CharField(max_length=64, unique=True, blank=True, editable=False)
    code_image = models.FileField(upload_to="codes/tickets/", null=True, blank=True, editable=False)
    status = models.CharField(
        max_length=20, choices=TicketStatus.choices, default=TicketStatus.AVAILABLE, db_index=True
    )
    sale = models.ForeignKey(
        "events.Sale",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="tickets",
    )

    objects = TicketManager()

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["category", "event", "status", "created_at"], name="ticket_claim_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(status__in=["available", "sold", "used"]),
                name="ticket_status_valid",
            ),
            models.CheckConstraint(
                condition=Q(channel__in=["print", "online"]),
                name="ticket_channel_valid",
            ),
            models.CheckConstraint(
                condition=(Q(status="available") & Q(sale__isnull=True))
                | (Q(status__in=["sold", "used"]) & Q(sale__isnull=False)),
                name="ticket_sale_iff_sold_or_used",
            ),
        ]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Derive the code from the identity on first save."""
        if not self.code:
            self.code = derive_ticket_code(self.id)
        super().save(*args, **kwargs)

    def __str__(self) -> str:  # pragma: no cover
        return f"Ticket {self.code} ({self.status})"


def _get_sale_default_expiry() -> datetime:
    return timezone.now() + timedelta(minutes=settings.PAYMENT_DEFAULT_EXPIRY_MINUTES)


class SaleQuerySet(models.QuerySet["Sale"]):
    def paid(self) -> t.Self:
        """Sales whose payment was confirmed."""
        return self.filter(status=Sale.SaleStatus.PAID)

    def stale(self) -> t.Self:
        """Pending sales whose reservation window has passed.

        A sale holding a ticket that was already admitted at the gate can no longer
        be cancelled, so it is left for its payment outcome to settle.
        """
        return self.filter(status=Sale.SaleStatus.PENDING, expires_at__lt=timezone.now()).exclude(
            tickets__status=Ticket.TicketStatus.USED
        )


class Sale(TimeStampedModel):
    """One buyer's reservation of a quantity of tickets, awaiting or holding payment.

    Status only moves forward: pending -> paid or pending -> cancelled.
    """

    class SaleStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"
        CANCELLED = "cancelled", "Cancelled"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="sales")
    category = models.ForeignKey(TicketCategory, on_delete=models.CASCADE, related_name="sales")
    buyer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="sales")
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY, help_text="ISO 4217 currency code")
    status = models.CharField(max_length=20, choices=SaleStatus.choices, default=SaleStatus.PENDING, db_index=True)
    payment_token = models.CharField(
        max_length=255, null=True, blank=True, db_index=True, help_text="Payment provider reference"
    )
    payment_requested_at = models.DateTimeField(
        null=True, blank=True, editable=False, help_text="Set when a payment was first requested; never cleared."
    )
    paid_at = models.DateTimeField(null=True, blank=True, editable=False)
    cancelled_at = models.DateTimeField(null=True, blank=True, editable=False)
    expires_at = models.DateTimeField(default=_get_sale_default_expiry, db_index=True, editable=False)

    objects = SaleQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(status__in=["pending", "paid", "cancelled"]),
                name="sale_status_valid",
            ),
            models.CheckConstraint(condition=Q(quantity__gte=1), name="sale_quantity_positive"),
            models.CheckConstraint(
                condition=~Q(status="cancelled") | (Q(amount=0) & Q(payment_token__isnull=True)),
                name="sale_cancelled_is_voided",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Sale {self.id} ({self.status})"

    @property
    def reference(self) -> str:
        """Reference shown to the payment provider."""
        return f"TICKET-{self.id}"


class CheckInQuerySet(models.QuerySet["CheckIn"]):
    def by_operator(self, operator_id: t.Any) -> t.Self:
        """Entries recorded by one gate operator, oldest first."""
        return self.filter(operator_id=operator_id).order_by("checked_in_at", "id")


class CheckIn(TimeStampedModel):
    """Immutable record of a ticket being admitted at the gate."""

    ticket = models.OneToOneField(Ticket, on_delete=models.PROTECT, related_name="check_in")
    operator = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="check_ins")
    checked_in_at = models.DateTimeField(default=timezone.now, db_index=True, editable=False)

    objects = CheckInQuerySet.as_manager()

    class Meta:
        ordering = ["-checked_in_at"]
        verbose_name = "check-in"

    def __str__(self) -> str:  # pragma: no cover
        return f"Check-in of {self.ticket_id} at {self.checked_in_at:%Y-%m-%d %H:%M}"
