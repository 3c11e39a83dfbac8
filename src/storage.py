from abc import ABC, abstractmethod
from typing import Optional

from redis import asyncio as aioredis

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from src.models.models import Base, Blob


class BlobStore(ABC):
    """
    Хранилище сериализованных коллекций по известному ключу.

    Значение хранится целиком как текст, частичных обновлений нет.
    """

    @abstractmethod
    async def read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def write(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        ...


class SqlBlobStore(BlobStore):
    """Хранилище в таблице `blob` через асинхронную сессию SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker, engine: Optional[AsyncEngine] = None):
        self.session_factory = session_factory
        self.engine = engine

    async def init(self) -> None:
        """Создает таблицы, если передан движок."""
        if self.engine is None:
            return
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def read(self, key: str) -> Optional[str]:
        async with self.session_factory() as session:
            result = await session.execute(select(Blob.value).where(Blob.key == key))
            return result.scalars().first()

    async def write(self, key: str, value: str) -> None:
        async with self.session_factory() as session:
            blob = await session.get(Blob, key)
            if blob is None:
                session.add(Blob(key=key, value=value))
            else:
                blob.value = value
            await session.commit()

    async def remove(self, key: str) -> None:
        async with self.session_factory() as session:
            await session.execute(delete(Blob).where(Blob.key == key))
            await session.commit()


class RedisBlobStore(BlobStore):
    """Хранилище в Redis: один ключ, одна строка."""

    def __init__(self, client: aioredis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisBlobStore":
        return cls(aioredis.from_url(url, decode_responses=True))

    async def read(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def write(self, key: str, value: str) -> None:
        await self.client.set(key, value)

    async def remove(self, key: str) -> None:
        await self.client.delete(key)
