from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.exceptions import PermissionDenied
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from accounts.policy import Action, authorize
from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.throttling import GateThrottle
from events import models, schema
from events.service import check_in_service

from .permissions import ActionPermission


@api_controller("/check-in", auth=I18nJWTAuth(), tags=["Check-in"], permissions=[ActionPermission(Action.CHECK_IN)])
class CheckInController(UserAwareController):
    @route.post("/", url_name="check_in", response={201: schema.CheckInSchema}, throttle=GateThrottle())
    def check_in(self, payload: schema.CheckInRequestSchema) -> tuple[int, models.CheckIn]:
        """Admit a ticket by its code.

        Fails with the same response whether the ticket was never bought or was already used.
        """
        return 201, check_in_service.check_in(payload.code, self.user())

    @route.get(
        "/mine",
        url_name="my_check_ins",
        response=PaginatedResponseSchema[schema.CheckInSchema],
        permissions=[ActionPermission(Action.VIEW_CHECK_INS)],
    )
    @paginate(PageNumberPaginationExtra, page_size=50)
    def my_check_ins(self) -> QuerySet[models.CheckIn]:
        """The check-ins recorded by the current operator."""
        operator = self.user()
        if not authorize(operator, Action.VIEW_CHECK_INS, operator):
            raise PermissionDenied()
        return check_in_service.list_check_ins_by_operator(operator)

    @route.post(
        "/access-card",
        url_name="check_in_access_card",
        response={201: schema.AccessCardEntrySchema},
        throttle=GateThrottle(),
    )
    def check_in_access_card(self, payload: schema.CheckInRequestSchema) -> tuple[int, models.AccessCardEntry]:
        """Admit the holder of an active, sold access card."""
        return 201, check_in_service.validate_access_card(payload.code, self.user())
