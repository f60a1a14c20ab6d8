from __future__ import annotations
from typing import Optional

import bcrypt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from .db import Admin


BCRYPT_ROUNDS = 10


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"), password_hash.encode("utf-8")
        )
    except ValueError:
        # malformed stored hash
        return False


async def find_by_email(db: AsyncSession, email: str) -> Optional[Admin]:
    return (await db.execute(
        select(Admin).where(Admin.email == email)
    )).scalar_one_or_none()


async def authenticate(
        db: AsyncSession, email: str, password: str) -> Optional[Admin]:
    admin = await find_by_email(db, email)
    if admin is None:
        return None
    # bcrypt runs in the threadpool, not on the event loop
    ok = await run_in_threadpool(check_password, password, admin.password_hash)
    return admin if ok else None


async def count_admins(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(Admin.id)))).scalar_one()


async def add_admin(db: AsyncSession, email: str, password: str) -> Admin:
    password_hash = await run_in_threadpool(hash_password, password)
    admin = Admin(email=email, password_hash=password_hash)
    db.add(admin)
    await db.flush()
    return admin
