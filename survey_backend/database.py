from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from survey_backend.config import DATABASE_URL, LOG_LEVEL

engine = create_async_engine(DATABASE_URL, echo=LOG_LEVEL == "DEBUG")
async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    async with async_session() as session:
        yield session
