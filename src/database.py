import os

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from src.config import DATABASE_URL

engine = create_async_engine(DATABASE_URL)

async_session = async_sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def ensure_data_dir(database_url: str = DATABASE_URL) -> None:
    """Создает каталог для файла sqlite, если его еще нет."""
    if not database_url.startswith("sqlite") or ":memory:" in database_url:
        return
    data_dir = os.path.dirname(database_url.split("///", 1)[-1]) or "."
    if not os.path.exists(data_dir):
        os.makedirs(data_dir)
