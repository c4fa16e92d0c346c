import typing as t

from ninja_extra import ControllerBase

from accounts.models import BoxofficeUser


class UserAwareController(ControllerBase):
    def user(self) -> BoxofficeUser:
        """Get the user for this request."""
        return t.cast(BoxofficeUser, self.context.request.user)  # type: ignore[union-attr]
