from django.http import HttpRequest
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

from accounts.policy import authorize


class ActionPermission(BasePermission):
    """Grants access when the access policy allows the request user to perform ``action``."""

    def __init__(self, action: str) -> None:
        """Store the action."""
        self.action = action

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """Ask the access policy."""
        return authorize(getattr(request, "user", None), self.action)
