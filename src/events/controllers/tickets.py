from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from accounts.policy import Action
from common.authentication import I18nJWTAuth
from common.throttling import WriteThrottle
from events import models, schema
from events.service import inventory_service, ticket_service

from .permissions import ActionPermission


@api_controller(
    "/tickets",
    auth=I18nJWTAuth(),
    tags=["Tickets"],
    permissions=[ActionPermission(Action.MANAGE_TICKETS)],
)
class TicketController:
    @route.post(
        "/issue",
        url_name="issue_tickets",
        response={201: schema.TicketIssueResponseSchema},
        permissions=[ActionPermission(Action.ISSUE_TICKETS)],
        throttle=WriteThrottle(),
    )
    def issue(self, payload: schema.TicketIssueSchema) -> tuple[int, dict[str, object]]:
        """Issue a batch of available tickets for an event and category."""
        tickets = inventory_service.issue_batch(
            payload.category_id, payload.event_id, payload.quantity, payload.unit_price, payload.channel
        )
        tickets = list(models.Ticket.objects.full().filter(pk__in=[ticket.pk for ticket in tickets]))
        return 201, {"issued": len(tickets), "tickets": tickets}

    @route.get("/", url_name="list_tickets", response=PaginatedResponseSchema[schema.TicketSchema])
    @paginate(PageNumberPaginationExtra, page_size=50)
    def list_tickets(
        self,
        params: schema.TicketFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Ticket]:
        """List tickets, optionally filtered by event, category and status."""
        return ticket_service.list_tickets(
            event_id=params.event_id, category_id=params.category_id, status=params.status
        )

    @route.get("/{ticket_id}", url_name="get_ticket", response=schema.TicketSchema)
    def get_ticket(self, ticket_id: UUID) -> models.Ticket:
        """Retrieve a ticket."""
        return ticket_service.get_ticket(ticket_id)

    @route.patch("/{ticket_id}", url_name="update_ticket", response=schema.TicketSchema, throttle=WriteThrottle())
    def update_ticket(self, ticket_id: UUID, payload: schema.TicketUpdateSchema) -> models.Ticket:
        """Change the price of an available ticket."""
        ticket_service.update_price(ticket_id, payload.price)
        return ticket_service.get_ticket(ticket_id)

    @route.delete("/{ticket_id}", url_name="delete_ticket", response={204: None}, throttle=WriteThrottle())
    def delete_ticket(self, ticket_id: UUID) -> tuple[int, None]:
        """Withdraw an available ticket."""
        ticket_service.delete_ticket(ticket_id)
        return 204, None
