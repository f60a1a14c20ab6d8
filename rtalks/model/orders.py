"""
Order rows and the three completion writers.

Orders are inserted as ``pending`` and move to ``completed`` through one of:
manual signature verification, the browser redirect from the hosted payment
page, or the provider webhook. None of them looks at the current status
first: the update is unconditional and the last writer's ``payment_id`` wins.
"""
from __future__ import annotations
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..helpers import row_dict
from .db import Order, STATUS_COMPLETED, STATUS_PENDING


class InvalidOrderId(ValueError):
    """The order id is not a row id (not an integer)."""


def order_pk(value: Any) -> Optional[int]:
    # ids arrive as JSON numbers, query strings or provider notes
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


async def insert_pending_order(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    phone: str,
    package: str,
    amount: Decimal,
) -> Order:
    order = Order(
        customer_name=name,
        customer_email=email,
        customer_phone=phone,
        package_name=package,
        amount=amount,
        status=STATUS_PENDING,
    )
    db.add(order)
    await db.flush()
    return order


async def attach_payment_reference(
        db: AsyncSession, order_id: int, reference: str) -> None:
    await db.execute(
        update(Order).where(Order.id == order_id).values(payment_id=reference)
    )


async def complete_order(
        db: AsyncSession, order_id: Any, payment_id: Optional[str]) -> int:
    """Mark an order completed. Returns the number of rows touched."""
    pk = order_pk(order_id)
    if pk is None:
        raise InvalidOrderId(f"not an order id: {order_id!r}")
    result = await db.execute(
        update(Order)
        .where(Order.id == pk)
        .values(status=STATUS_COMPLETED, payment_id=payment_id)
    )
    return result.rowcount or 0


async def list_recent_orders(db: AsyncSession, limit: int = 50) -> List[Dict]:
    rows = (await db.execute(
        select(
            Order.id,
            Order.customer_name,
            Order.customer_email,
            Order.amount,
            Order.status,
            Order.created_at,
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
    )).mappings().all()
    return [row_dict(r) for r in rows]


async def sales_stats(db: AsyncSession, today: datetime) -> Dict[str, Any]:
    completed = Order.status == STATUS_COMPLETED
    total_tickets, total_revenue = (await db.execute(
        select(func.count(Order.id), func.sum(Order.amount)).where(completed)
    )).one()

    day_start = today.replace(
        hour=0, minute=0, second=0, microsecond=0, tzinfo=None
    )
    today_sales = (await db.execute(
        select(func.count(Order.id)).where(
            completed,
            Order.created_at >= day_start,
            Order.created_at < day_start + timedelta(days=1),
        )
    )).scalar_one()

    return {
        "totalTickets": int(total_tickets or 0),
        "totalRevenue": float(total_revenue or 0),
        "todaySales": int(today_sales or 0),
    }
