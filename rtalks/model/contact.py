from __future__ import annotations
from typing import Dict, List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..helpers import row_dict
from .db import ContactForm


EXPORT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


async def add_submission(db: AsyncSession, *, name: str, phone: str,
                         email: str, message: str) -> int:
    form = ContactForm(name=name, phone=phone, email=email, message=message)
    db.add(form)
    await db.flush()
    return form.id


async def list_submissions(db: AsyncSession) -> List[Dict]:
    rows = (await db.execute(
        select(ContactForm.__table__)
        .order_by(ContactForm.created_at.desc(), ContactForm.id.desc())
    )).mappings().all()
    return [row_dict(r) for r in rows]


async def export_submissions(db: AsyncSession) -> List[Dict]:
    rows = (await db.execute(
        select(ContactForm.__table__)
        .order_by(ContactForm.created_at.desc(), ContactForm.id.desc())
    )).mappings().all()
    return [
        {
            "id": r["id"],
            "name": r["name"],
            "phone": r["phone"],
            "email": r["email"],
            "message": r["message"],
            "submitted_at": (
                r["created_at"].strftime(EXPORT_TIME_FORMAT)
                if r["created_at"] is not None else None
            ),
        }
        for r in rows
    ]


async def delete_submission(db: AsyncSession, form_id: int) -> bool:
    result = await db.execute(
        delete(ContactForm).where(ContactForm.id == form_id)
    )
    return bool(result.rowcount)
