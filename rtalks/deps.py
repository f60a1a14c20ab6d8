from typing import Optional

from fastapi import Request

from .payments import PaymentAdapter
from .settings import Settings


async def get_db(request: Request):
    async with request.app.state.SessionAsync() as session:
        yield session


def get_payments(request: Request) -> Optional[PaymentAdapter]:
    # None means test mode
    return getattr(request.app.state, "payments", None)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
