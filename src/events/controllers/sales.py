import typing as t
from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route

from accounts.policy import Action
from common.authentication import I18nJWTAuth
from common.throttling import PurchaseThrottle
from events import models, schema
from events.service import payment_service, reservation_service, sales_stats_service, ticket_service

from .permissions import ActionPermission


@api_controller("/sales", auth=None, tags=["Sales"])
class SaleController:
    @route.post("/reserve", url_name="reserve", response={201: schema.SaleSchema}, throttle=PurchaseThrottle())
    def reserve(self, payload: schema.ReserveSchema) -> tuple[int, models.Sale]:
        """Reserve tickets for a buyer identified by phone number.

        The sale stays pending until the payment is confirmed; fetch the payment URL next.
        """
        sale = reservation_service.reserve(
            event_id=payload.event_id,
            category_id=payload.category_id,
            phone_number=payload.phone_number,
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            quantity=payload.quantity,
        )
        return 201, sale

    @route.get(
        "/stats",
        url_name="sales_stats",
        response=schema.SalesStatsSchema,
        auth=I18nJWTAuth(),
        permissions=[ActionPermission(Action.VIEW_SALES_STATS)],
    )
    def stats(self, params: schema.SalesStatsFilterSchema = Query(...)) -> dict[str, t.Any]:  # type: ignore[type-arg]
        """Totals of paid sales with per-event and per-category shares."""
        return sales_stats_service.sales_stats(params.start_date, params.end_date)

    @route.get("/{sale_id}/payment-url", url_name="payment_url", response=schema.PaymentUrlSchema)
    def payment_url(self, sale_id: UUID) -> dict[str, t.Any]:
        """Get the checkout URL of a pending sale."""
        return {"sale_id": sale_id, "payment_url": payment_service.request_payment(sale_id)}

    @route.get("/{sale_id}/tickets", url_name="sale_tickets", response=list[schema.TicketSchema])
    def tickets(self, sale_id: UUID) -> QuerySet[models.Ticket]:
        """The tickets of a paid sale."""
        return ticket_service.list_sale_tickets(sale_id)
