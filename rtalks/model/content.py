from __future__ import annotations
import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..helpers import row_dict
from .db import ContactInfo, Event, SiteContent, Stats


MAIN_SECTION = "main"

# what the front end renders while the tables are still empty
PLACEHOLDER_EVENT = {
    "title": "R-Talks Summit 2025",
    "description": "Event details will be updated soon",
    "date": "2025-03-15",
    "time": "09:00:00",
    "location": "Virtual Event",
    "price": 0,
}
DEFAULT_STATS = {"attendees": 500, "partners": 20, "speakers": 50}


# ----------------------------
# Event + stats
# ----------------------------
async def latest_event(db: AsyncSession) -> Optional[Dict]:
    row = (await db.execute(
        select(Event.__table__)
        .order_by(Event.date.desc(), Event.id.desc())
        .limit(1)
    )).mappings().first()
    return row_dict(row) if row else None


async def save_event(db: AsyncSession, *, title: str,
                     description: Optional[str], date: datetime.date,
                     time: datetime.time,
                     location: Optional[str], price: Decimal) -> None:
    values = dict(title=title, description=description, date=date,
                  time=time, location=location, price=price)
    current = (await db.execute(
        select(Event.id).order_by(Event.date.desc(), Event.id.desc()).limit(1)
    )).scalar()
    if current is None:
        db.add(Event(**values))
        await db.flush()
    else:
        await db.execute(
            update(Event).where(Event.id == current).values(**values)
        )


async def first_stats(db: AsyncSession) -> Optional[Dict]:
    row = (await db.execute(
        select(Stats.__table__).order_by(Stats.id).limit(1)
    )).mappings().first()
    return row_dict(row) if row else None


# ----------------------------
# Site content
# ----------------------------
async def all_sections(db: AsyncSession) -> List[Dict]:
    rows = (await db.execute(
        select(SiteContent.__table__).order_by(SiteContent.section)
    )).mappings().all()
    return [row_dict(r) for r in rows]


async def get_section(db: AsyncSession, section: str) -> Optional[Dict]:
    row = (await db.execute(
        select(SiteContent.__table__).where(SiteContent.section == section)
    )).mappings().first()
    return row_dict(row) if row else None


async def upsert_section(db: AsyncSession, section: str, *,
                         title: Optional[str], subtitle: Optional[str],
                         description: Optional[str],
                         content_data: Any) -> bool:
    """Returns True when a new section row was created."""
    values = dict(title=title, subtitle=subtitle, description=description,
                  content_data=content_data)
    result = await db.execute(
        update(SiteContent)
        .where(SiteContent.section == section)
        .values(**values, updated_at=func.now())
    )
    if result.rowcount:
        return False
    db.add(SiteContent(section=section, **values))
    await db.flush()
    return True


# ----------------------------
# Contact info (one row, section "main")
# ----------------------------
def _shape_contact_info(row) -> Dict:
    phones = row.get("phone_numbers")
    location = row.get("location")
    return {
        "phone_numbers": phones if isinstance(phones, list) else [],
        "email": row.get("email") or "",
        "location": location if isinstance(location, dict) else {},
    }


async def get_contact_info(db: AsyncSession) -> Dict:
    row = (await db.execute(
        select(ContactInfo.__table__)
        .where(ContactInfo.section == MAIN_SECTION)
    )).mappings().first()
    if row is None:
        return _shape_contact_info({})
    return _shape_contact_info(row)


async def upsert_contact_info(db: AsyncSession, *, phone_numbers: List[str],
                              email: Optional[str],
                              location: Dict[str, Any]) -> None:
    values = dict(phone_numbers=phone_numbers, email=email, location=location)
    existing = (await db.execute(
        select(ContactInfo.id).where(ContactInfo.section == MAIN_SECTION)
    )).scalar()
    if existing is None:
        db.add(ContactInfo(section=MAIN_SECTION, **values))
        await db.flush()
    else:
        await db.execute(
            update(ContactInfo)
            .where(ContactInfo.id == existing)
            .values(**values, updated_at=func.now())
        )
