"""Errors raised by the ticket lifecycle operations.

Malformed input raises Django's own ``ValidationError``; everything else a caller
can act on derives from ``TicketingError`` and carries the HTTP status it maps to.
"""

import typing as t


class TicketingError(Exception):
    """Base class for ticketing errors."""

    status_code: int = 400
    default_message: str = "The operation could not be completed."

    def __init__(self, message: str | None = None) -> None:
        """Store the user-facing message."""
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, t.Any]:
        """Serializable details for the API response."""
        return {"detail": self.message}


class NotFoundError(TicketingError):
    """A referenced entity does not exist."""

    status_code = 404
    default_message = "Not found."

    def __init__(self, entity: str, identifier: t.Any) -> None:
        """Remember which entity was looked up."""
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found.")


class InsufficientInventoryError(TicketingError):
    """Fewer tickets are available than were requested."""

    status_code = 409

    def __init__(self, requested: int, available: int) -> None:
        """Remember the requested and available counts."""
        self.requested = requested
        self.available = available
        super().__init__(f"Only {available} ticket(s) available, {requested} requested.")

    def to_dict(self) -> dict[str, t.Any]:
        """Include the counts so the buyer can retry with a smaller quantity."""
        return {"detail": self.message, "requested": self.requested, "available": self.available}


class InvalidStateError(TicketingError):
    """The operation is not valid for the entity's current lifecycle state."""

    status_code = 409

    def __init__(self, entity: str, state: str, message: str | None = None) -> None:
        """Remember the entity and its current state."""
        self.entity = entity
        self.state = state
        super().__init__(message or f"{entity} is {state}.")

    def to_dict(self) -> dict[str, t.Any]:
        """Include the entity and its state."""
        return {"detail": self.message, "entity": self.entity, "state": self.state}


class TicketNotAdmissibleError(InvalidStateError):
    """The presented ticket or card cannot be admitted.

    Deliberately says nothing about why, so a forged code and a replayed one look the same.
    """

    status_code = 400
    default_message = "This ticket is not admissible."

    def __init__(self) -> None:
        """Use the constant message."""
        super().__init__("ticket", "not_admissible", self.default_message)

    def to_dict(self) -> dict[str, t.Any]:
        """Only the constant message."""
        return {"detail": self.message}


class NoPendingPaymentError(TicketingError):
    """A payment outcome arrived for a sale that never requested a payment."""

    status_code = 404
    default_message = "No payment was requested for this sale."


class ExternalServiceError(TicketingError):
    """A collaborator (payment provider, SMS gateway) failed."""

    status_code = 502

    def __init__(self, service: str, message: str | None = None) -> None:
        """Remember which service failed."""
        self.service = service
        super().__init__(message or f"The {service} service is unavailable.")

    def to_dict(self) -> dict[str, t.Any]:
        """Include the service name."""
        return {"detail": self.message, "service": self.service}
