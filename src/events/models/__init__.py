from .access_card import AccessCard, AccessCardEntry
from .event import Event, TicketCategory
from .ticket import CheckIn, Sale, Ticket

__all__ = [
    "AccessCard",
    "AccessCardEntry",
    "CheckIn",
    "Event",
    "Sale",
    "Ticket",
    "TicketCategory",
]
