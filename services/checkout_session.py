import asyncio
import logging
import uuid
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Callable

from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

import config
from db import session_commit
from enums.checkout_state import CheckoutState
from models.checkout_session import CheckoutSessionDTO, CustomerContactDTO
from models.client import ClientDTO
from repositories.client import ClientRepository
from services.cart import CartStore
from services.webhook import WebhookRelayService
from utils.checkout_validation import is_checkout_contact_complete

logger = logging.getLogger(__name__)


class CheckoutSessionTracker:
    """
    Abandoned-checkout tracking for one checkout attempt.

    State machine:
    - IDLE -> PENDING: checkout form became valid (name, email, phone, cart)
    - PENDING -> PENDING: any field change restarts the quiet period
    - PENDING -> STARTED: quiet period elapsed, "checkout_started" emitted
    - IDLE/PENDING -> STARTED: tab hidden or page unloading with valid data
    - STARTED -> COMPLETED: purchase completed, "purchase_completed" emitted
    - any -> IDLE: checkout dismissed, or form no longer valid before STARTED

    ABANDONED is decided by the webhook relay and never entered here.

    Every path that emits "checkout_started" goes through _claim_started(),
    a check-and-set without an await in between, so the event is sent at
    most once per session id however the triggers interleave.
    """

    def __init__(
        self,
        cart: CartStore,
        relay: WebhookRelayService,
        redis: Redis,
        quiescent_delay: float = config.CHECKOUT_QUIESCENT_DELAY_SECONDS,
        min_phone_digits: int = config.CHECKOUT_PHONE_MIN_DIGITS,
        storage_key: str = config.CHECKOUT_SESSION_STORAGE_KEY,
        db_session_factory: Callable[[], AbstractAsyncContextManager] | None = None
    ):
        self.cart = cart
        self.relay = relay
        self.redis = redis
        self.quiescent_delay = quiescent_delay
        self.min_phone_digits = min_phone_digits
        self.storage_key = storage_key
        self.db_session_factory = db_session_factory

        self.state = CheckoutState.IDLE
        self.session_id: str | None = None
        self.contact = CustomerContactDTO()
        self.created_at: datetime | None = None
        self._started_sent = False
        self._timer: asyncio.Task | None = None

    @property
    def started_key(self) -> str:
        return f"{self.storage_key}:started"

    @classmethod
    async def load(cls, cart: CartStore, relay: WebhookRelayService, redis: Redis, **kwargs) -> 'CheckoutSessionTracker':
        """
        Create a tracker and restore the stored session id, if any.

        A restored session that already emitted "checkout_started" resumes in
        STARTED so a reload neither re-sends it nor loses the completion event.
        """
        tracker = cls(cart, relay, redis, **kwargs)
        try:
            session_id = await redis.get(tracker.storage_key)
            started = await redis.get(tracker.started_key) if session_id else None
        except RedisError as e:
            logger.warning(f"Could not restore checkout session, starting fresh: {e}")
            return tracker
        if session_id:
            tracker.session_id = session_id.decode() if isinstance(session_id, bytes) else session_id
            if started:
                tracker._started_sent = True
                tracker.state = CheckoutState.STARTED
            logger.debug(f"Restored checkout session {tracker.session_id} in state {tracker.state.value}")
        return tracker

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def update_contact(self, contact: CustomerContactDTO) -> CheckoutState:
        """
        Take a new checkout form snapshot.

        Returns:
            The state after the update
        """
        self.contact = contact

        if self.state == CheckoutState.STARTED:
            # Already emitted for this session, nothing to debounce
            return self.state

        if self.state == CheckoutState.COMPLETED:
            logger.info("New checkout attempt after completed purchase")
            self.state = CheckoutState.IDLE

        if not self.is_ready():
            if self.state == CheckoutState.PENDING:
                logger.debug(f"Checkout form no longer valid, session {self.session_id} back to IDLE")
            self._cancel_timer()
            self.state = CheckoutState.IDLE
            return self.state

        await self._ensure_session_id()
        self._restart_timer()
        self.state = CheckoutState.PENDING
        return self.state

    async def on_visibility_hidden(self) -> bool:
        """Tab hidden: emit "checkout_started" now if the form is valid."""
        return await self._force_emit("visibility_hidden")

    async def on_before_unload(self) -> bool:
        """Page unloading: emit "checkout_started" now if the form is valid."""
        return await self._force_emit("before_unload")

    async def complete_purchase(self) -> bool:
        """
        Mark the purchase as completed.

        Only a STARTED session emits "purchase_completed", so the relay never
        sees a completion for a session it was not told about. In any case the
        session id is cleared and the next attempt gets a fresh one.

        Returns:
            True if "purchase_completed" was emitted
        """
        self._cancel_timer()

        if self.state != CheckoutState.STARTED or self.session_id is None:
            logger.info(f"Purchase completed without a started checkout session (state {self.state.value})")
            await self._clear_session()
            self.state = CheckoutState.IDLE
            return False

        session_id = self.session_id
        await self.relay.send_purchase_completed(session_id)
        await self._clear_session()
        self.state = CheckoutState.COMPLETED
        logger.info(f"Checkout session {session_id} completed")
        return True

    async def dismiss(self) -> None:
        """Checkout UI closed: drop the pending timer and the session."""
        self._cancel_timer()
        if self.session_id is not None:
            logger.info(f"Checkout session {self.session_id} dismissed in state {self.state.value}")
        await self._clear_session()
        self.state = CheckoutState.IDLE

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def is_ready(self) -> bool:
        return is_checkout_contact_complete(self.contact, len(self.cart.lines), self.min_phone_digits)

    def build_session_snapshot(self) -> CheckoutSessionDTO:
        return CheckoutSessionDTO(
            session_id=self.session_id,
            customer=self.contact.model_copy(),
            lines=self.cart.lines,
            coupon=self.cart.coupon,
            subtotal=self.cart.total(),
            shipping=self.cart.shipping_total(),
            total=self.cart.grand_total(),
            started_sent=self._started_sent,
            created_at=self.created_at,
        )

    def _claim_started(self) -> bool:
        if self._started_sent or self.session_id is None:
            return False
        self._started_sent = True
        self.state = CheckoutState.STARTED
        return True

    async def _force_emit(self, trigger: str) -> bool:
        if self.state not in (CheckoutState.IDLE, CheckoutState.PENDING):
            return False
        if not self.is_ready():
            return False
        await self._ensure_session_id()
        return await self._emit_started(trigger)

    async def _emit_started(self, trigger: str) -> bool:
        if not self._claim_started():
            logger.debug(f"'checkout_started' already claimed for session {self.session_id} ({trigger})")
            return False

        self._cancel_timer()
        snapshot = self.build_session_snapshot()
        logger.info(f"Checkout session {self.session_id} started ({trigger})")
        await self._save_lead(snapshot.customer)
        await self.relay.send_checkout_started(snapshot)
        if self.session_id == snapshot.session_id:
            await self._store("started marker", self.started_key, "1")
        return True

    async def _wait_quiet_period(self) -> None:
        await asyncio.sleep(self.quiescent_delay)
        self._timer = None
        if not self.is_ready():
            logger.debug("Quiet period elapsed with an invalid checkout form")
            self.state = CheckoutState.IDLE
            return
        await self._emit_started("quiet_period")

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self._timer = asyncio.create_task(self._wait_quiet_period())
        self._timer.add_done_callback(self._log_timer_failure)

    @staticmethod
    def _log_timer_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Checkout quiet-period timer failed: {error!r}")

    def _cancel_timer(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None and not timer.done() and timer is not asyncio.current_task():
            timer.cancel()

    async def _ensure_session_id(self) -> str:
        if self.session_id is None:
            self.session_id = str(uuid.uuid4())
            self.created_at = datetime.now()
            self._started_sent = False
            await self._store("session id", self.storage_key, self.session_id)
            logger.debug(f"New checkout session {self.session_id}")
        return self.session_id

    async def _clear_session(self) -> None:
        self.session_id = None
        self.created_at = None
        self._started_sent = False
        try:
            await self.redis.delete(self.storage_key, self.started_key)
        except RedisError as e:
            logger.warning(f"Could not clear stored checkout session: {e}")

    async def _store(self, what: str, key: str, value: str) -> None:
        """Write tracker state to Redis. The in-memory state stays authoritative when Redis is down."""
        try:
            await self.redis.set(key, value)
        except RedisError as e:
            logger.warning(f"Could not store checkout {what} for session {self.session_id}: {e}")

    async def _save_lead(self, contact: CustomerContactDTO) -> None:
        """Store the customer as a lead unless a client with that email exists. Best-effort."""
        if self.db_session_factory is None:
            return
        try:
            async with self.db_session_factory() as session:
                existing = await ClientRepository.get_by_email(contact.email, session)
                if existing is not None:
                    logger.debug(f"Client {existing.id} already exists, lead not saved")
                    return
                client_id = await ClientRepository.create(ClientDTO(
                    name=contact.name.strip(),
                    email=contact.email.strip().lower(),
                    phone=contact.phone.strip(),
                    address=contact.address,
                    city=contact.city,
                    postal_code=contact.postal_code,
                    client_type="lead",
                    source="abandoned_cart",
                    notes=f"Checkout session {self.session_id}",
                ), session)
                await session_commit(session)
                logger.info(f"Saved abandoned-checkout lead as client {client_id}")
        except SQLAlchemyError as e:
            logger.warning(f"Could not save abandoned-checkout lead: {e}")
