import asyncio
import logging
from datetime import datetime, timezone

import aiohttp

import config
from enums.webhook_event import WebhookEvent
from exceptions.webhook import WebhookDeliveryException
from models.checkout_session import CheckoutSessionDTO
from services.pricing import PricingService

logger = logging.getLogger(__name__)


class WebhookRelayService:
    """
    Posts checkout lifecycle events to the webhook relay.

    Delivery is best-effort: one POST per event, no retries (the relay owns
    retries and the abandonment timer). Failures are logged and reported as
    False, never raised, so checkout never blocks on the relay.
    """

    def __init__(
        self,
        checkout_started_url: str = config.WEBHOOK_CHECKOUT_STARTED_URL,
        purchase_completed_url: str = config.WEBHOOK_PURCHASE_COMPLETED_URL,
        timeout_seconds: float = config.WEBHOOK_TIMEOUT_SECONDS,
        source: str = config.WEBHOOK_SOURCE
    ):
        self.checkout_started_url = checkout_started_url
        self.purchase_completed_url = purchase_completed_url
        self.timeout_seconds = timeout_seconds
        self.source = source

    @staticmethod
    def _timestamp() -> str:
        return datetime.now(timezone.utc).isoformat()

    def build_checkout_started_payload(self, checkout: CheckoutSessionDTO) -> dict:
        """
        Build the "checkout started" payload.

        Item prices are the unit prices the customer pays (product discount or
        coupon, whichever is lower), the relay uses them verbatim in follow-up
        messages.
        """
        items = []
        for line in checkout.lines:
            items.append({
                "id": line.product_id,
                "name": line.name,
                "price": round(PricingService.best_price(line, checkout.coupon), 2),
                "quantity": line.quantity,
                "total": round(PricingService.line_total(line, checkout.coupon), 2),
            })

        customer = checkout.customer
        return {
            "type": WebhookEvent.CHECKOUT_STARTED.value,
            "timestamp": self._timestamp(),
            "source": self.source,
            "session_id": checkout.session_id,
            "customer": {
                "name": customer.name,
                "email": customer.email,
                "phone": customer.phone,
                "address": customer.address,
                "city": customer.city,
                "postalCode": customer.postal_code,
            },
            "cart": {
                "items": items,
                "subtotal": checkout.subtotal,
                "shipping": checkout.shipping,
                "total": checkout.total,
                "itemCount": sum(line.quantity for line in checkout.lines),
            },
        }

    def build_purchase_completed_payload(self, session_id: str) -> dict:
        return {
            "type": WebhookEvent.PURCHASE_COMPLETED.value,
            "timestamp": self._timestamp(),
            "source": self.source,
            "session_id": session_id,
        }

    async def send_checkout_started(self, checkout: CheckoutSessionDTO) -> bool:
        payload = self.build_checkout_started_payload(checkout)
        return await self._post(WebhookEvent.CHECKOUT_STARTED, self.checkout_started_url, payload)

    async def send_purchase_completed(self, session_id: str) -> bool:
        payload = self.build_purchase_completed_payload(session_id)
        return await self._post(WebhookEvent.PURCHASE_COMPLETED, self.purchase_completed_url, payload)

    async def _post(self, event: WebhookEvent, url: str, payload: dict) -> bool:
        if not url:
            logger.warning(f"Webhook for '{event.value}' not configured, event skipped")
            return False

        try:
            await self._deliver(event, url, payload)
        except WebhookDeliveryException as e:
            logger.error(f"[Webhook] {e} (session {payload.get('session_id')})")
            return False

        logger.info(f"[Webhook] '{event.value}' delivered for session {payload.get('session_id')}")
        return True

    async def _deliver(self, event: WebhookEvent, url: str, payload: dict) -> None:
        """
        POST the payload as JSON.

        Raises:
            WebhookDeliveryException: On transport errors, timeouts and non-2xx/3xx responses
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=payload) as response:
                    if response.status >= 400:
                        body = await response.text()
                        raise WebhookDeliveryException(
                            event.value,
                            body[:200] or (response.reason or "error response"),
                            status=response.status
                        )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise WebhookDeliveryException(event.value, str(e) or e.__class__.__name__) from e
