"""
Database session dependency.
Yields one AsyncSession per request, committed when the handler returns and
rolled back when it raises.
"""
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from techelons.models.base import AsyncSessionFactory


async def get_session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
