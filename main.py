import uvicorn
import logging

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.config import (
    BLOB_BACKEND, REDIS_URL, LOG_LEVEL, CREATE_DELAY_SECONDS, LOCATION_PROVIDER
)
from src.database import engine, async_session, ensure_data_dir
from src.storage import BlobStore, SqlBlobStore, RedisBlobStore
from src.links.location import get_location_provider
from src.links.store import LinkStore
from src.logs.journal import LogJournal, JournalHandler

from src.links.routes import router as links_router, redirect_router
from src.logs.routes import router as logs_router

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=LOG_LEVEL
)

logger = logging.getLogger("src.main")


async def create_blob_store() -> BlobStore:
    if BLOB_BACKEND == "redis":
        return RedisBlobStore.from_url(REDIS_URL)
    ensure_data_dir()
    blob_store = SqlBlobStore(async_session, engine)
    await blob_store.init()
    return blob_store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    blob_store = await create_blob_store()

    journal = LogJournal(blob_store)
    await journal.load()
    handler = JournalHandler(journal)
    logging.getLogger("src").addHandler(handler)

    store = LinkStore(blob_store, create_delay=CREATE_DELAY_SECONDS)
    await store.load()

    app.state.journal = journal
    app.state.store = store
    app.state.location_provider = get_location_provider(LOCATION_PROVIDER)
    logger.info("Приложение запущено", extra={"data": {"backend": BLOB_BACKEND}})
    yield

    await journal.flush()
    logging.getLogger("src").removeHandler(handler)


app = FastAPI(
    title="Link Shortener API",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)


@app.middleware("http")
async def flush_journal(request: Request, call_next):
    response = await call_next(request)
    journal = getattr(request.app.state, "journal", None)
    if journal is not None:
        await journal.flush()
    return response


@app.get("/")
async def read_root():
    return {"message": "API is running!"}


app.include_router(links_router, prefix="/links", tags=["Links"])
app.include_router(logs_router, prefix="/logs", tags=["Logs"])
app.include_router(redirect_router, tags=["Redirect"])


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
