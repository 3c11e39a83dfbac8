import pytest
import httpx
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from src.storage import SqlBlobStore
from src.links.location import UnknownLocationProvider, get_locator
from src.links.store import LinkStore, get_store
from src.logs.journal import LogJournal, get_journal
from main import app

DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def blob_store():
    engine = create_async_engine(
        DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    session_factory = async_sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    blob_store = SqlBlobStore(session_factory, engine)
    await blob_store.init()
    yield blob_store
    await engine.dispose()


@pytest.fixture(scope="function")
async def store(blob_store) -> LinkStore:
    store = LinkStore(blob_store)
    await store.load()
    return store


@pytest.fixture(scope="function")
async def journal(blob_store) -> LogJournal:
    journal = LogJournal(blob_store, max_entries=5)
    await journal.load()
    return journal


@pytest.fixture(scope="function")
async def client(store, journal) -> httpx.AsyncClient:
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_journal] = lambda: journal
    app.dependency_overrides[get_locator] = lambda: UnknownLocationProvider()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://localhost:9999") as ac:
        yield ac
    app.dependency_overrides.clear()
