from __future__ import annotations
import os
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from conduit.config import Settings
from conduit.persistence.schema import Base

def make_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(f"sqlite+aiosqlite:///{settings.sqlite_path}", echo=False)

def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)

async def init_db(engine: AsyncEngine) -> None:
    database = engine.url.database
    if database and database != ":memory:" and os.path.dirname(database):
        os.makedirs(os.path.dirname(database), exist_ok=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
