"""
Packages and speakers: admin-ordered, soft-deleted catalog rows.

Both tables share one contract. Listing returns active rows only, ordered by
``(display_order, id)``. New rows go to the end (``max(display_order) + 1``
over all rows, active or not). Deleting flips ``is_active``; rows are never
removed.
"""
from __future__ import annotations
from typing import Any, Dict, List, Type, Union

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..helpers import row_dict
from .db import Package, Speaker

CatalogModel = Union[Type[Package], Type[Speaker]]


async def list_active(db: AsyncSession, model: CatalogModel) -> List[Dict]:
    rows = (await db.execute(
        select(model.__table__)
        .where(model.is_active.is_(True))
        .order_by(model.display_order, model.id)
    )).mappings().all()
    return [row_dict(r) for r in rows]


async def next_display_order(db: AsyncSession, model: CatalogModel) -> int:
    current = (await db.execute(
        select(func.coalesce(func.max(model.display_order), 0))
    )).scalar_one()
    return int(current) + 1


async def create(
        db: AsyncSession, model: CatalogModel, values: Dict[str, Any]) -> Dict:
    row = model(**values, display_order=await next_display_order(db, model),
                is_active=True)
    db.add(row)
    await db.flush()
    created = (await db.execute(
        select(model.__table__).where(model.id == row.id)
    )).mappings().one()
    return row_dict(created)


async def replace(db: AsyncSession, model: CatalogModel, row_id: int,
                  values: Dict[str, Any]) -> bool:
    result = await db.execute(
        update(model)
        .where(model.id == row_id)
        .values(**values, updated_at=func.now())
    )
    return bool(result.rowcount)


async def soft_delete(
        db: AsyncSession, model: CatalogModel, row_id: int) -> bool:
    result = await db.execute(
        update(model).where(model.id == row_id).values(is_active=False)
    )
    return bool(result.rowcount)


async def set_display_order(db: AsyncSession, model: CatalogModel,
                            row_id: int, display_order: int) -> bool:
    result = await db.execute(
        update(model)
        .where(model.id == row_id)
        .values(display_order=display_order)
    )
    return bool(result.rowcount)

