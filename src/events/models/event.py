from django.db import models

from common.models import TimeStampedModel


class Event(TimeStampedModel):
    """A scheduled event tickets are sold for.

    Event metadata is maintained through the admin; the ticketing core only references it.
    """

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    date = models.DateField(db_index=True)
    start_time = models.TimeField(null=True, blank=True)
    venue_name = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["-date", "name"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} ({self.date:%Y-%m-%d})"


class TicketCategory(TimeStampedModel):
    """A pricing tier (e.g. VIP) scoping ticket inventory."""

    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "ticket categories"

    def __str__(self) -> str:  # pragma: no cover
        return self.name
