# exam_logistics/api/deps.py
import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db

logger = logging.getLogger(__name__)


async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get a database session."""
    async for session in get_db():
        yield session
