"""
Unit Tests: WebhookRelayService

Posts against a local aiohttp test server standing in for the webhook relay.
"""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils

from models.cart_line import CartLineDTO
from models.checkout_session import CheckoutSessionDTO, CustomerContactDTO
from models.discount import DiscountDTO
from services.webhook import WebhookRelayService


@pytest_asyncio.fixture
async def relay_server():
    received = []

    async def ok(request):
        received.append(await request.json())
        return web.json_response({"status": "queued"})

    async def broken(request):
        return web.Response(status=500, text="relay exploded")

    async def slow(request):
        await asyncio.sleep(0.5)
        return web.json_response({})

    app = web.Application()
    app.router.add_post("/started", ok)
    app.router.add_post("/completed", ok)
    app.router.add_post("/broken", broken)
    app.router.add_post("/slow", slow)

    server = test_utils.TestServer(app)
    await server.start_server()
    server.received = received
    yield server
    await server.close()


@pytest.fixture
def checkout_session(valid_contact):
    discount = DiscountDTO(id=3, discount_type="percentage", discount_value=10.0)
    return CheckoutSessionDTO(
        session_id="6f1c2b9e-1111-4222-8333-944445555666",
        customer=valid_contact,
        lines=[
            CartLineDTO(product_id="prod-1", name="Vitamin D3", price=150.0, quantity=2, discount=discount),
            CartLineDTO(product_id="prod-2", name="Omega 3", price=80.0, quantity=1),
        ],
        subtotal=350.0,
        shipping=168.0,
        total=518.0,
    )


class TestCheckoutStarted:

    @pytest.mark.asyncio
    async def test_payload_shape(self, relay_server, checkout_session):
        relay = WebhookRelayService(checkout_started_url=str(relay_server.make_url("/started")))

        assert await relay.send_checkout_started(checkout_session) is True

        payload = relay_server.received[0]
        assert payload["type"] == "checkout_started"
        assert payload["source"] == "checkout_form"
        assert payload["session_id"] == checkout_session.session_id
        assert payload["customer"]["email"] == "thandi@example.co.za"
        assert payload["customer"]["postalCode"] == "0002"
        assert payload["cart"]["items"][0] == {
            "id": "prod-1", "name": "Vitamin D3", "price": 135.0, "quantity": 2, "total": 270.0
        }
        assert payload["cart"]["itemCount"] == 3
        assert payload["cart"]["subtotal"] == 350.0
        assert payload["cart"]["shipping"] == 168.0
        assert payload["cart"]["total"] == 518.0
        assert "timestamp" in payload

    @pytest.mark.asyncio
    async def test_missing_url_is_skipped(self, checkout_session):
        relay = WebhookRelayService(checkout_started_url="")
        assert await relay.send_checkout_started(checkout_session) is False

    @pytest.mark.asyncio
    async def test_error_status_returns_false(self, relay_server, checkout_session):
        relay = WebhookRelayService(checkout_started_url=str(relay_server.make_url("/broken")))
        assert await relay.send_checkout_started(checkout_session) is False

    @pytest.mark.asyncio
    async def test_timeout_returns_false(self, relay_server, checkout_session):
        relay = WebhookRelayService(
            checkout_started_url=str(relay_server.make_url("/slow")),
            timeout_seconds=0.1
        )
        assert await relay.send_checkout_started(checkout_session) is False

    @pytest.mark.asyncio
    async def test_unreachable_relay_returns_false(self, checkout_session):
        relay = WebhookRelayService(checkout_started_url="http://127.0.0.1:9/started", timeout_seconds=1)
        assert await relay.send_checkout_started(checkout_session) is False


class TestPurchaseCompleted:

    @pytest.mark.asyncio
    async def test_payload_references_session(self, relay_server):
        relay = WebhookRelayService(purchase_completed_url=str(relay_server.make_url("/completed")))

        assert await relay.send_purchase_completed("session-42") is True
        assert relay_server.received == [{
            "type": "purchase_completed",
            "timestamp": relay_server.received[0]["timestamp"],
            "source": "checkout_form",
            "session_id": "session-42",
        }]

    def test_build_payload_without_network(self):
        relay = WebhookRelayService(source="storefront_test")
        payload = relay.build_purchase_completed_payload("session-1")
        assert payload["type"] == "purchase_completed"
        assert payload["source"] == "storefront_test"


def test_started_payload_with_empty_customer():
    relay = WebhookRelayService()
    payload = relay.build_checkout_started_payload(
        CheckoutSessionDTO(session_id="s", customer=CustomerContactDTO())
    )
    assert payload["cart"]["items"] == []
    assert payload["cart"]["itemCount"] == 0
    assert payload["customer"]["address"] is None


def test_started_payload_prices_items_with_cart_coupon(checkout_session):
    coupon = DiscountDTO(id=9, name="SAVE20", discount_type="percentage", discount_value=20.0)
    payload = WebhookRelayService().build_checkout_started_payload(
        checkout_session.model_copy(update={"coupon": coupon})
    )

    assert [(item["price"], item["total"]) for item in payload["cart"]["items"]] == [
        (120.0, 240.0),
        (64.0, 64.0),
    ]
