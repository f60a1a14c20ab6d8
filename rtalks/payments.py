from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple, TypedDict
import hashlib
import hmac

import httpx
from loguru import logger

from .helpers import ct_equal
from .settings import Settings


CURRENCY = "INR"


class PaymentLinkRequest(TypedDict):
    order_id: int
    name: str
    email: str
    phone: str
    package: str
    amount: Decimal


class PaymentLink(TypedDict):
    id: str
    short_url: str


class PaymentProviderError(Exception):
    """The provider could not be reached or refused the request."""


def sign(secret: str, order_id, payment_id) -> str:
    payload = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def verify_signature(secret: str, order_id, payment_id, signature) -> bool:
    expected = sign(secret, order_id, payment_id)
    return ct_equal(expected, str(signature or ""))


def to_minor_units(amount: Decimal) -> int:
    # rupees -> paise
    return int((Decimal(amount) * 100).quantize(Decimal(1), ROUND_HALF_UP))


# ----------------------------
# Payment Adapter Interface
# ----------------------------
class PaymentAdapter(ABC):
    @abstractmethod
    async def create_payment_link(
            self, req: PaymentLinkRequest) -> PaymentLink: ...


# ----------------------------
# Razorpay payment links
# ----------------------------
class RazorpayLinks(PaymentAdapter):

    def __init__(self, *, key_id: str, key_secret: str, api_url: str,
                 callback_base_url: str, http: httpx.AsyncClient) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.api_url = api_url.rstrip("/")
        self.callback_base_url = callback_base_url.rstrip("/")
        self.http = http

    def callback_url(self, order_id) -> str:
        return (f"{self.callback_base_url}/api/payment-success"
                f"?order_id={order_id}")

    def link_body(self, req: PaymentLinkRequest) -> dict:
        return {
            "amount": to_minor_units(req["amount"]),
            "currency": CURRENCY,
            "accept_partial": False,
            "description": f"R-Talks {req['package']} Ticket",
            "customer": {
                "name": req["name"],
                "email": req["email"],
                "contact": req["phone"],
            },
            "notify": {"sms": True, "email": True},
            "reminder_enable": True,
            "notes": {
                "order_id": req["order_id"],
                "package": req["package"],
            },
            "callback_url": self.callback_url(req["order_id"]),
            "callback_method": "get",
        }

    async def create_payment_link(
            self, req: PaymentLinkRequest) -> PaymentLink:
        try:
            r = await self.http.post(
                f"{self.api_url}/payment_links",
                json=self.link_body(req),
                auth=(self.key_id, self.key_secret),
            )
            r.raise_for_status()
            body = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PaymentProviderError(str(e)) from e

        if not body.get("id") or not body.get("short_url"):
            raise PaymentProviderError(
                f"unexpected payment link response: {body!r}"
            )
        return {"id": body["id"], "short_url": body["short_url"]}


def build_adapter(
    settings: Settings, http: httpx.AsyncClient
) -> Optional[PaymentAdapter]:
    """Returns None in test mode (no usable provider credentials)."""
    if not settings.payments_configured:
        logger.warning("Razorpay not configured - using test mode")
        return None
    logger.info("Razorpay initialized successfully")
    return RazorpayLinks(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        api_url=settings.razorpay_api_url,
        callback_base_url=settings.callback_base_url,
        http=http,
    )


# ----------------------------
# Webhook envelopes
# ----------------------------
PAID_EVENT = "payment_link.paid"


def _entity(obj) -> dict:
    # the provider wraps objects as {"entity": {...}}; accept both forms
    if not isinstance(obj, dict):
        return {}
    inner = obj.get("entity")
    return inner if isinstance(inner, dict) else obj


def event_kind(envelope: dict) -> str:
    return str(envelope.get("event") or "")


def event_ids(envelope: dict) -> Tuple[Optional[str], Optional[str]]:
    """(order_id, payment_id) carried by a payment_link.paid envelope."""
    payload = envelope.get("payload") or {}
    link = _entity(payload.get("payment_link"))
    payment = _entity(payload.get("payment"))
    notes = link.get("notes") or {}
    return notes.get("order_id"), payment.get("id")
