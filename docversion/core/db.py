import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from docversion.core.config import settings
from docversion.core.errors import InternalError

logger = logging.getLogger(__name__)

# Базовый класс для моделей
Base = declarative_base()

# Асинхронный движок
engine = create_async_engine(settings.database_url, future=True, echo=settings.sql_echo)

# Сессии
SessionLocal = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def init_models() -> None:
    """Создание таблиц, если их еще нет (для локального запуска без миграций)"""
    # Импорт регистрирует модели в metadata
    import docversion.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Функция для dependency injection в FastAPI
async def get_db():
    async with SessionLocal() as session:
        yield session


async def commit(session: AsyncSession) -> None:
    """Фиксация транзакции; сбой хранилища превращается в InternalError"""
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Failed to commit transaction")
        raise InternalError("Failed to persist changes") from e
