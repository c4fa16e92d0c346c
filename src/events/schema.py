import typing as t
from datetime import date
from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import EmailStr, Field, model_validator

from accounts.models import BoxofficeUser
from common.schema import OneToOneFiftyString, StrippedString
from events.models import AccessCard, AccessCardEntry, CheckIn, Event, Sale, Ticket, TicketCategory


class MinimalUserSchema(ModelSchema):
    display_name: str

    class Meta:
        model = BoxofficeUser
        fields = ["id", "first_name", "last_name", "phone_number"]


class MinimalEventSchema(ModelSchema):
    class Meta:
        model = Event
        fields = ["id", "name", "date", "venue_name"]


class TicketCategorySchema(ModelSchema):
    class Meta:
        model = TicketCategory
        fields = ["id", "name"]


# ---- Tickets ----


class TicketIssueSchema(Schema):
    event_id: UUID
    category_id: UUID
    quantity: int = Field(..., ge=1, le=10_000)
    unit_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    channel: Ticket.Channel = Ticket.Channel.ONLINE


class TicketSchema(ModelSchema):
    """A ticket as seen by staff."""

    event: MinimalEventSchema
    category: TicketCategorySchema
    status: Ticket.TicketStatus
    channel: Ticket.Channel
    sale_id: UUID | None = None
    code_image_url: str | None = None

    class Meta:
        model = Ticket
        fields = ["id", "price", "code", "created_at"]

    @staticmethod
    def resolve_code_image_url(obj: Ticket) -> str | None:
        """Resolve the URL of the rendered code, if any."""
        return obj.code_image.url if obj.code_image else None


class TicketIssueResponseSchema(Schema):
    issued: int
    tickets: list[TicketSchema]


class TicketUpdateSchema(Schema):
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class TicketFilterSchema(Schema):
    event_id: UUID | None = None
    category_id: UUID | None = None
    status: Ticket.TicketStatus | None = None


# ---- Sales ----


class ReserveSchema(Schema):
    event_id: UUID
    category_id: UUID
    quantity: int = Field(..., ge=1, le=100)
    phone_number: StrippedString
    first_name: OneToOneFiftyString
    last_name: OneToOneFiftyString
    email: EmailStr | None = None


class SaleSchema(ModelSchema):
    status: Sale.SaleStatus
    event_id: UUID
    category_id: UUID

    class Meta:
        model = Sale
        fields = ["id", "quantity", "amount", "currency", "created_at", "expires_at"]


class PaymentUrlSchema(Schema):
    sale_id: UUID
    payment_url: str


class SalesStatsFilterSchema(Schema):
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def check_range(self) -> t.Self:
        """Both bounds are required together, in order."""
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be given together.")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date.")
        return self


class SalesBreakdownSchema(Schema):
    id: UUID
    name: str
    total_sales: int
    total_revenue: Decimal
    total_tickets: int
    sales_percentage: float
    revenue_percentage: float
    tickets_percentage: float


class SalesStatsSchema(Schema):
    total_sales: int
    total_revenue: Decimal
    total_tickets: int
    sales_by_event: list[SalesBreakdownSchema]
    sales_by_category: list[SalesBreakdownSchema]


# ---- Check-in ----


class CheckInRequestSchema(Schema):
    """Schema for ticket and card check-in requests."""

    code: StrippedString = Field(..., min_length=1, max_length=64)


class CheckedInTicketSchema(ModelSchema):
    event: MinimalEventSchema
    category: TicketCategorySchema

    class Meta:
        model = Ticket
        fields = ["id", "code", "price"]


class CheckInSchema(ModelSchema):
    ticket: CheckedInTicketSchema
    operator_id: UUID

    class Meta:
        model = CheckIn
        fields = ["id", "checked_in_at"]


# ---- Access cards ----


class AccessCardCreateSchema(Schema):
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    holder_id: UUID | None = None
    phone_number: StrippedString | None = None
    first_name: StrippedString = ""
    last_name: StrippedString = ""

    @model_validator(mode="after")
    def check_holder(self) -> t.Self:
        """A new holder needs a phone number and a name."""
        if self.holder_id is None and not (self.phone_number and self.first_name and self.last_name):
            raise ValueError("Provide holder_id, or phone_number with first_name and last_name.")
        return self


class AccessCardSchema(ModelSchema):
    holder: MinimalUserSchema
    status: AccessCard.CardStatus
    code_image_url: str | None = None

    class Meta:
        model = AccessCard
        fields = ["id", "card_number", "code", "price", "is_sold", "sold_at", "created_at"]

    @staticmethod
    def resolve_code_image_url(obj: AccessCard) -> str | None:
        """Resolve the URL of the rendered code, if any."""
        return obj.code_image.url if obj.code_image else None


class AccessCardStatsSchema(Schema):
    total_cards: int
    sold_cards: int
    unsold_cards: int


class AccessCardEntrySchema(ModelSchema):
    card_id: UUID
    operator_id: UUID

    class Meta:
        model = AccessCardEntry
        fields = ["id", "entered_at"]
