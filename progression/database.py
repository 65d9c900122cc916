from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.dialects import postgresql, sqlite

from progression.config import get_settings

settings = get_settings()


class Base(DeclarativeBase):
    pass


engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """Одна сессия на запрос"""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db():
    """Создать таблицы, если их нет"""
    # Register models on Base.metadata
    import progression.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def dialect_insert(db: AsyncSession, table):
    """
    INSERT с поддержкой ON CONFLICT для СУБД текущей сессии

    PostgreSQL и SQLite дают on_conflict_do_nothing / on_conflict_do_update,
    на них держатся идемпотентные записи.
    """
    dialect = db.bind.dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise ValueError(f"Unsupported database dialect for upsert: {dialect!r}")
