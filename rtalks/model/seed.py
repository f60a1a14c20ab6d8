# model/seed.py
"""
Default rows for a fresh database.

Every block only fills a table that is still empty, so seeding is safe to run
on each startup.
"""
from __future__ import annotations
from datetime import date, time
from decimal import Decimal
from typing import List

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from . import admins
from .db import (
    ContactInfo, Event, Package, SiteContent, Speaker, Stats,
)


DEFAULT_ADMIN_EMAIL = "admin@rtalks.com"
DEFAULT_ADMIN_PASSWORD = "admin123"

DEFAULT_EVENT = dict(
    title="R-TALKS SUMMIT 2025",
    description="TALENT ACQUISITION LEADER'S KNOWLEDGE SUMMIT",
    date=date(2025, 3, 15),
    time=time(9, 0, 0),
    location="Virtual Event",
    price=Decimal("2999.00"),
)

DEFAULT_STATS = dict(attendees=500, partners=20, speakers=50)

DEFAULT_PACKAGES = [
    dict(
        name="Professional Pass",
        category="Aspiring Professional",
        price=Decimal("299"),
        features=[
            "Certificate of Participation",
            "Internship & Placement Prospects",
            "Career Guidance",
        ],
        package_type="professional",
        display_order=1,
    ),
    dict(
        name="Executive Pass",
        category="Executive",
        price=Decimal("2999"),
        features=[
            "AI & Digital Tools in HR",
            "Industry Networking",
            "Talent Acquisition Strategies",
        ],
        package_type="executive",
        display_order=2,
    ),
    dict(
        name="Leadership Pass",
        category="Leadership",
        price=Decimal("4999"),
        features=[
            "Institutional Growth Insights",
            "Corporate Collaborations",
            "Workforce Trend Analysis",
        ],
        package_type="leadership",
        display_order=3,
    ),
]

DEFAULT_CONTENT = [
    dict(
        section="hero",
        title="Buy Event Tickets",
        subtitle="RAISE - TALENT ACQUISITION LEADER'S KNOWLEDGE SUMMIT",
        description=(
            "Join us for the biggest R programming conference of the year. "
            "Learn from industry experts and connect with fellow developers."
        ),
        content_data={
            "buttons": [{"text": "Browse Events", "action": "scrollToTickets"}]
        },
    ),
    dict(
        section="event_info",
        title="Our Event Passes",
        subtitle="",
        description=(
            "Choose the pass that best suits your professional goals and "
            "aspirations."
        ),
        content_data={
            "packages": [
                {k: (float(v) if k == "price" else v) for k, v in p.items()
                 if k in ("name", "category", "price", "features")}
                for p in DEFAULT_PACKAGES
            ]
        },
    ),
]

DEFAULT_SPEAKERS = [
    dict(
        name="Dr. Sarah Johnson",
        title="Chief People Officer",
        company="TechCorp Global",
        bio="Leading expert in digital transformation and talent "
            "acquisition with 15+ years of experience.",
        image_url="https://randomuser.me/api/portraits/women/1.jpg",
        display_order=1,
    ),
    dict(
        name="Michael Chen",
        title="Director of Talent Strategy",
        company="Innovation Labs",
        bio="Specialist in AI-driven recruitment and modern workplace "
            "culture development.",
        image_url="https://randomuser.me/api/portraits/men/1.jpg",
        display_order=2,
    ),
    dict(
        name="Rachel Martinez",
        title="VP of Human Resources",
        company="Future Enterprises",
        bio="Pioneer in remote work strategies and inclusive hiring "
            "practices.",
        image_url="https://randomuser.me/api/portraits/women/2.jpg",
        display_order=3,
    ),
    dict(
        name="David Kumar",
        title="Head of Recruitment",
        company="StartupHub",
        bio="Expert in scaling tech teams and building high-performance "
            "cultures.",
        image_url="https://randomuser.me/api/portraits/men/2.jpg",
        display_order=4,
    ),
]

DEFAULT_CONTACT_INFO = dict(
    section="main",
    phone_numbers=[
        "+91 99406 25080",
        "+91 78100 78717",
        "+91 63699 97015",
        "+91 99522 47355",
    ],
    email="manikandan@aicraise.com",
    location={
        "venue": "Rathinam Grand Hall",
        "area": "Eachanari - 021",
        "building": "Rathinam Tech Park",
        "address": "Pollachi Main Rd, Eachanari",
        "city": "Coimbatore, Tamil Nadu 641021",
    },
)


async def _is_empty(db: AsyncSession, model) -> bool:
    count = (await db.execute(select(func.count(model.id)))).scalar_one()
    return count == 0


async def seed_defaults(db: AsyncSession) -> List[str]:
    """Fill empty tables with defaults. Returns the tables that were seeded."""
    seeded = []

    if await _is_empty(db, Event):
        db.add(Event(**DEFAULT_EVENT))
        seeded.append("events")

    if await _is_empty(db, Stats):
        db.add(Stats(**DEFAULT_STATS))
        seeded.append("stats")

    if await admins.count_admins(db) == 0:
        await admins.add_admin(db, DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD)
        logger.warning(
            f"Default admin user created ({DEFAULT_ADMIN_EMAIL}); "
            f"change its password"
        )
        seeded.append("admins")

    if await _is_empty(db, SiteContent):
        db.add_all([SiteContent(**c) for c in DEFAULT_CONTENT])
        seeded.append("site_content")

    if await _is_empty(db, Package):
        db.add_all([Package(**p) for p in DEFAULT_PACKAGES])
        seeded.append("event_packages")

    if await _is_empty(db, Speaker):
        db.add_all([Speaker(**s) for s in DEFAULT_SPEAKERS])
        seeded.append("speakers")

    if await _is_empty(db, ContactInfo):
        db.add(ContactInfo(**DEFAULT_CONTACT_INFO))
        seeded.append("contact_info")

    await db.flush()
    for table in seeded:
        logger.info(f"Seeded default {table}")
    return seeded
