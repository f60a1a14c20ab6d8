import asyncio

from loguru import logger

from rtalks.infra.sql import backend_name, make_async_engine
from rtalks.model.db import create_schema
from rtalks.model.seed import seed_defaults
from rtalks.settings import load_settings


async def init_db(settings):
    engine, SessionAsync = make_async_engine(settings)
    try:
        async with engine.begin() as conn:
            await create_schema(conn)
        logger.info(f"Tables ready on {backend_name(settings.database_url)}")

        async with SessionAsync() as session:
            async with session.begin():
                seeded = await seed_defaults(session)
        if not seeded:
            logger.info("All tables already populated, nothing seeded")
    finally:
        await engine.dispose()


if __name__ == '__main__':
    asyncio.run(init_db(load_settings()))
