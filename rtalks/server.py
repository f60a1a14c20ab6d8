from __future__ import annotations
import os
import random
import time
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

import httpx
import redis.asyncio as redis
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from . import admin
from .deps import get_db, get_payments, get_settings
from .errors import ApiError, DB_DOWN_ERRORS, install_error_handlers
from .helpers import utcnow
from .infra.sql import backend_name, make_async_engine
from .logs import configure_logging
from .model import catalog, content, contact, orders
from .model.db import Package, Speaker, create_schema
from .model.ratelimit import BACKENDS, new_limiter
from .model.seed import seed_defaults
from .payments import (
    PAID_EVENT, PaymentAdapter, PaymentProviderError, build_adapter,
    event_ids, event_kind, verify_signature,
)
from .schemas import ContactIn, OrderIn, VerifyPaymentIn
from .settings import SERVICE_NAME, VERSION, Settings, load_settings


MAX_UPLOAD_BYTES = 5 * 1024 * 1024
PROVIDER_TIMEOUT_SECONDS = 10.0


# ----------------------------
# Public content
# -{28}
router = APIRouter()


@router.get("/api/health")
async def health(request: Request, settings: Settings = Depends(get_settings)):
    database = "connected"
    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except DB_DOWN_ERRORS:
        database = "disconnected"
    return {
        "status": "ok",
        "timestamp": utcnow().isoformat(),
        "environment": settings.environment,
        "database": database,
        "service": SERVICE_NAME,
        "version": VERSION,
    }


@router.get("/api/config")
async def payment_config(
    settings: Settings = Depends(get_settings),
    payments: Optional[PaymentAdapter] = Depends(get_payments),
):
    return {
        "razorpayKeyId": settings.public_key_id,
        "testMode": payments is None,
        "useHostedPage": True,
    }


@router.get("/api/event")
async def get_event(db: AsyncSession = Depends(get_db)):
    event = await content.latest_event(db)
    return event or dict(content.PLACEHOLDER_EVENT)


@router.get("/api/stats")
async def get_stats(db: AsyncSession = Depends(get_db)):
    stats = await content.first_stats(db)
    return stats or dict(content.DEFAULT_STATS)


@router.get("/api/content")
async def get_all_content(db: AsyncSession = Depends(get_db)):
    return await content.all_sections(db)


@router.get("/api/content/{section}")
async def get_content_section(section: str, db: AsyncSession = Depends(get_db)):
    # null, not 404, for a section nobody has written yet
    return await content.get_section(db, section)


@router.get("/api/packages")
async def get_packages(db: AsyncSession = Depends(get_db)):
    return await catalog.list_active(db, Package)


@router.get("/api/speakers")
async def get_speakers(db: AsyncSession = Depends(get_db)):
    return await catalog.list_active(db, Speaker)


@router.get("/api/contact-info")
async def get_contact_info(db: AsyncSession = Depends(get_db)):
    return await content.get_contact_info(db)


@router.post("/api/upload/speaker-image")
async def upload_speaker_image(
    image: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
):
    if image is None:
        raise ApiError(400, "No image file provided")
    if not (image.content_type or "").startswith("image/"):
        raise ApiError(400, "Only image files are allowed!",
                       code="FILE_TYPE_ERROR")

    data = await image.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise ApiError(400, "File too large",
                       message="Please upload a file smaller than 5MB",
                       code="FILE_SIZE_ERROR")

    suffix = Path(image.filename or "").suffix
    filename = (f"speaker-{int(time.time() * 1000)}-"
                f"{random.randint(0, 10**9)}{suffix}")
    target = Path(settings.upload_dir) / filename
    try:
        await run_in_threadpool(target.write_bytes, data)
    except OSError:
        logger.exception(f"Could not store speaker image {filename}")
        raise ApiError(500, "Failed to store image",
                       message="Please try again later",
                       code="UPLOAD_ERROR")
    logger.info(f"Stored speaker image {filename} ({len(data)} bytes)")
    return {
        "success": True,
        "imageUrl": f"/uploads/{filename}",
        "filename": filename,
    }


# ----------------------------
# Orders & payments
# ----------------------------
@router.post("/api/orders")
async def create_order(
    body: OrderIn,
    db: AsyncSession = Depends(get_db),
    payments: Optional[PaymentAdapter] = Depends(get_payments),
    settings: Settings = Depends(get_settings),
):
    payment_link = None
    link_id = None
    try:
        # one transaction: insert, provider call, payment reference update
        async with db.begin():
            order = await orders.insert_pending_order(
                db,
                name=body.name,
                email=body.email,
                phone=body.phone,
                package=body.package,
                amount=body.price,
            )
            order_id = order.id

            if payments is not None:
                try:
                    link = await payments.create_payment_link({
                        "order_id": order_id,
                        "name": body.name,
                        "email": body.email,
                        "phone": body.phone,
                        "package": body.package,
                        "amount": body.price,
                    })
                except PaymentProviderError:
                    # order stays pending without a link; not an error
                    logger.exception(
                        f"Razorpay payment link creation failed "
                        f"for order {order_id}"
                    )
                else:
                    payment_link = link["short_url"]
                    link_id = link["id"]
                    await orders.attach_payment_reference(
                        db, order_id, link_id
                    )
    except IntegrityError as e:
        logger.warning(f"Duplicate order rejected: {e.orig!r}")
        raise ApiError(
            409, "Duplicate order",
            message="An order with these details already exists",
            code="DUPLICATE_ORDER_ERROR",
        )
    except DB_DOWN_ERRORS:
        raise
    except SQLAlchemyError as e:
        logger.exception("Order creation error")
        raise ApiError(
            500, "Unable to process your request. Please try again.",
            message="Order creation failed. Please check your details "
                    "and try again.",
            code="ORDER_CREATION_ERROR",
            details=None if settings.is_production else str(e),
        )

    logger.info(
        f"Order {order_id} created ({body.package}, "
        f"{'link ' + link_id if link_id else 'no payment link'})"
    )
    return {
        "orderId": order_id,
        "paymentLink": payment_link,
        "razorpayOrderId": link_id,
        "amount": body.price,
        "testMode": payments is None,
        "useHostedPage": True,
    }


@router.post("/api/verify-payment")
async def verify_payment(
    body: VerifyPaymentIn,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    secret = settings.razorpay_key_secret
    if not secret:
        raise ApiError(500, "Internal server error",
                       message="Payment verification is not configured",
                       code="PAYMENT_NOT_CONFIGURED")

    if not verify_signature(secret, body.orderId, body.paymentId,
                            body.signature):
        logger.warning(f"Invalid payment signature for order {body.orderId}")
        raise ApiError(400, "Invalid signature")

    try:
        async with db.begin():
            await orders.complete_order(db, body.orderId, body.paymentId)
    except orders.InvalidOrderId:
        raise ApiError(400, "Invalid order id", code="INVALID_ORDER_ID")
    logger.info(f"Order {body.orderId} completed via signature check")
    return {"success": True}


@router.get("/api/payment-success")
async def payment_success(
    order_id: Optional[str] = None,
    razorpay_payment_id: Optional[str] = None,
    razorpay_payment_link_id: Optional[str] = None,
    razorpay_payment_link_reference_id: Optional[str] = None,
    razorpay_payment_link_status: Optional[str] = None,
    razorpay_signature: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # the query string is trusted as-is; razorpay_signature is not checked
    frontend_url = settings.frontend_url.rstrip("/")
    try:
        if razorpay_payment_link_status == "paid" and order_id:
            async with db.begin():
                await orders.complete_order(
                    db, order_id,
                    razorpay_payment_id or razorpay_payment_link_id,
                )
            outcome = "success"
            logger.info(f"Order {order_id} completed via redirect")
        else:
            outcome = "failed"
            logger.info(
                f"Payment for order {order_id} not paid "
                f"(status={razorpay_payment_link_status!r})"
            )
    except Exception:
        logger.exception(f"Payment callback error for order {order_id}")
        outcome = "error"

    query = urlencode({"payment": outcome, "order": order_id or ""})
    return RedirectResponse(url=f"{frontend_url}/?{query}", status_code=302)


@router.post("/api/razorpay-webhook")
async def razorpay_webhook(request: Request, db: AsyncSession = Depends(get_db)):
    try:
        envelope = await request.json()
    except ValueError:
        raise ApiError(400, "Invalid JSON",
                       message="Please check your request format",
                       code="JSON_PARSE_ERROR")
    if not isinstance(envelope, dict):
        envelope = {}

    kind = event_kind(envelope)
    try:
        if kind == PAID_EVENT:
            order_id, payment_id = event_ids(envelope)
            if order_id:
                if not payment_id:
                    raise ValueError(
                        f"{kind} for order {order_id} carries no payment id"
                    )
                async with db.begin():
                    touched = await orders.complete_order(
                        db, order_id, payment_id
                    )
                logger.info(
                    f"Webhook {kind}: order {order_id} -> completed "
                    f"({touched} row(s))"
                )
    except Exception:
        # 500 makes the provider retry the delivery
        logger.exception(f"Webhook error ({kind})")
        return ORJSONResponse(
            status_code=500, content={"error": "Webhook processing failed"}
        )

    # always 200 otherwise, matched or not
    return {"status": "ok"}


@router.post("/api/contact")
async def submit_contact(body: ContactIn, db: AsyncSession = Depends(get_db)):
    async with db.begin():
        form_id = await contact.add_submission(
            db, name=body.name, phone=body.phone, email=body.email,
            message=body.message,
        )
    logger.info(f"Contact form {form_id} received")
    return {
        "success": True,
        "message": "Contact form submitted successfully",
        "id": form_id,
    }


# ----------------------------
# App factory
# ----------------------------
def _install_rate_limit(app: FastAPI) -> None:

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        limiter = getattr(request.app.state, "limiter", None)
        if limiter is None:
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        hit = await limiter.hit(client)
        headers = {
            "RateLimit-Limit": str(hit.limit),
            "RateLimit-Remaining": str(hit.remaining),
            "RateLimit-Reset": str(max(0, hit.reset_at - int(time.time()))),
        }
        if not hit.allowed:
            logger.warning(f"Rate limit exceeded for {client}")
            return ORJSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests",
                    "message": "Please try again later",
                    "code": "RATE_LIMIT_EXCEEDED",
                },
                headers=headers,
            )
        response = await call_next(request)
        response.headers.update(headers)
        return response


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    if settings.ratelimit_backend not in BACKENDS:
        raise ValueError(
            f"RATELIMIT_BACKEND must be one of {BACKENDS}, "
            f"got {settings.ratelimit_backend!r}"
        )

    app = FastAPI(
        title="R-Talks",
        version=VERSION,
        default_response_class=ORJSONResponse,
    )
    app.state.settings = settings

    engine, SessionAsync = make_async_engine(settings)
    app.state.engine = engine
    app.state.SessionAsync = SessionAsync

    if settings.ratelimit_backend == "memory":
        app.state.limiter = new_limiter(
            "memory",
            limit=settings.ratelimit_max,
            window_seconds=settings.ratelimit_window_seconds,
        )

    install_error_handlers(app, production=settings.is_production)
    _install_rate_limit(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Cookie",
                       "X-Requested-With"],
        expose_headers=["Set-Cookie", "Authorization"],
        max_age=86400,
    )

    os.makedirs(settings.upload_dir, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir),
              name="uploads")

    app.include_router(router)
    app.include_router(admin.router)
    app.include_router(admin.protected)

    # ---
    # startup / shutdown
    # ---
    @app.on_event("startup")
    async def _say_hello():
        configure_logging(settings)
        logger.info("=" * 50)
        logger.info("R-Talks backend is starting up...")
        logger.info(f"   - Environment: {settings.environment}")
        logger.info(f"   - Database:    {backend_name(settings.database_url)}")
        logger.info(
            "   - Razorpay:    "
            + ("configured" if settings.payments_configured else "test mode")
        )
        logger.info(f"   - Rate limit:  {settings.ratelimit_backend}")
        logger.info("=" * 50)

    @app.on_event("startup")
    async def _db_init():
        try:
            async with engine.begin() as conn:
                await create_schema(conn)
            if settings.seed_defaults:
                async with SessionAsync() as session:
                    async with session.begin():
                        await seed_defaults(session)
            logger.info("Database initialization completed")
        except (SQLAlchemyError, OSError):
            # keep serving; requests answer 503 until the store is back
            logger.exception(
                "Database initialization failed, starting without it"
            )

    @app.on_event("startup")
    async def _http_client_start():
        app.state.http = httpx.AsyncClient(timeout=PROVIDER_TIMEOUT_SECONDS)
        app.state.payments = build_adapter(settings, app.state.http)

    @app.on_event("startup")
    async def _redis_start():
        if settings.ratelimit_backend == "redis":
            app.state.redis = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_timeout=2.0,
                socket_connect_timeout=2.0,
                retry_on_timeout=True,
            )
            app.state.limiter = new_limiter(
                "redis",
                r=app.state.redis,
                limit=settings.ratelimit_max,
                window_seconds=settings.ratelimit_window_seconds,
            )

    @app.on_event("shutdown")
    async def _http_client_stop():
        http = getattr(app.state, "http", None)
        if http is not None:
            await http.aclose()
            app.state.http = None
        app.state.payments = None

    @app.on_event("shutdown")
    async def _redis_stop():
        r = getattr(app.state, "redis", None)
        if r is not None:
            await r.aclose()
            app.state.redis = None

    @app.on_event("shutdown")
    async def _db_stop():
        await engine.dispose()
        logger.info("Database pool closed")

    return app


def main():
    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
