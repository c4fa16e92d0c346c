"""Admin classes for the ticketing models.

Events and categories are maintained here. Tickets, sales and check-ins are
read-only: their lifecycle is driven by the services, never by hand.
"""

import typing as t

from django.contrib import admin
from django.http import HttpRequest
from django.urls import reverse
from django.utils.html import format_html
from unfold.admin import ModelAdmin, TabularInline

from events import models


class EventLinkMixin:
    """Mixin to add a link to an event."""

    @admin.display(description="Event")
    def event_link(self, obj: t.Any) -> str:
        url = reverse("admin:events_event_change", args=[obj.event_id])
        return format_html('<a href="{}">{}</a>', url, obj.event.name)


class ReadOnlyAdminMixin:
    def has_add_permission(self, request: HttpRequest, obj: t.Any = None) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj: t.Any = None) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj: t.Any = None) -> bool:
        return False


@admin.register(models.Event)
class EventAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["name", "date", "start_time", "venue_name", "available_tickets"]
    search_fields = ["name", "venue_name"]
    date_hierarchy = "date"

    @admin.display(description="Available")
    def available_tickets(self, obj: models.Event) -> int:
        return obj.tickets.filter(status=models.Ticket.TicketStatus.AVAILABLE).count()


@admin.register(models.TicketCategory)
class TicketCategoryAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["name", "created_at"]
    search_fields = ["name"]


@admin.register(models.Ticket)
class TicketAdmin(ReadOnlyAdminMixin, ModelAdmin, EventLinkMixin):  # type: ignore[misc]
    list_display = ["code", "event_link", "category", "price", "channel", "status", "created_at"]
    list_filter = ["status", "channel", "category", "event"]
    search_fields = ["code", "event__name"]
    date_hierarchy = "created_at"


class SaleTicketInline(ReadOnlyAdminMixin, TabularInline):  # type: ignore[misc]
    model = models.Ticket
    fields = ["code", "price", "status"]
    readonly_fields = ["code", "price", "status"]
    extra = 0


@admin.register(models.Sale)
class SaleAdmin(ReadOnlyAdminMixin, ModelAdmin, EventLinkMixin):  # type: ignore[misc]
    list_display = ["id", "event_link", "category", "buyer", "quantity", "amount", "currency", "status", "created_at"]
    list_filter = ["status", "category", "event"]
    search_fields = ["id", "buyer__phone_number", "buyer__last_name", "payment_token"]
    date_hierarchy = "created_at"
    inlines = [SaleTicketInline]


@admin.register(models.CheckIn)
class CheckInAdmin(ReadOnlyAdminMixin, ModelAdmin):  # type: ignore[misc]
    list_display = ["ticket", "operator", "checked_in_at"]
    list_filter = ["operator"]
    search_fields = ["ticket__code"]
    date_hierarchy = "checked_in_at"


@admin.register(models.AccessCard)
class AccessCardAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["card_number", "holder", "price", "status", "is_sold", "created_at"]
    list_filter = ["status", "is_sold"]
    search_fields = ["card_number", "code", "holder__phone_number", "holder__last_name"]
    readonly_fields = ["code", "is_sold", "sold_at"]


@admin.register(models.AccessCardEntry)
class AccessCardEntryAdmin(ReadOnlyAdminMixin, ModelAdmin):  # type: ignore[misc]
    list_display = ["card", "operator", "entered_at"]
    date_hierarchy = "entered_at"
