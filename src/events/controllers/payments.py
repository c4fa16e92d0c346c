from uuid import UUID

import stripe
import structlog
from django.conf import settings
from django.http import HttpRequest
from ninja.errors import HttpError
from ninja_extra import api_controller, route

from events import models, schema
from events.service import payment_service
from events.service.stripe_webhooks import StripeEventHandler

logger = structlog.get_logger(__name__)


@api_controller("/payments", auth=None, tags=["Payments"])
class PaymentController:
    @route.post("/notify", url_name="payment_notify", response={200: None})
    def notify(self, request: HttpRequest) -> tuple[int, None]:
        """Handle incoming Stripe webhooks."""
        payload = request.body
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE")
        if not sig_header:
            raise HttpError(400, "Invalid Stripe signature")
        try:
            event = stripe.Webhook.construct_event(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning("stripe_webhook_rejected", error=str(e))
            raise HttpError(400, "Invalid Stripe signature") from e

        StripeEventHandler(event).handle()

        return 200, None

    @route.get("/callback/{sale_id}", url_name="payment_callback", response=schema.SaleSchema)
    def callback(self, sale_id: UUID, status: str = "cancelled") -> models.Sale:
        """Buyer's browser returning from the checkout. The provider is asked for the real outcome."""
        return payment_service.handle_callback(sale_id, status)
