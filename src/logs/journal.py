import json
import logging
import uuid

from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import Request
from pydantic import BaseModel, TypeAdapter

from src.config import LOGS_KEY, MAX_LOG_ENTRIES
from src.storage import BlobStore

# не под "src": записи этого логгера в журнал не попадают
logger = logging.getLogger("journal")


class LogEntry(BaseModel):
    id: str
    timestamp: datetime
    level: str
    message: str
    data: Optional[Any] = None


entries_adapter = TypeAdapter(List[LogEntry])


def as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class LogJournal:
    """
    Журнал событий приложения, сохраняемый в хранилище под отдельным ключом.

    Хранит только последние max_entries записей.
    """

    def __init__(self, blob_store: BlobStore, key: str = LOGS_KEY, max_entries: int = MAX_LOG_ENTRIES):
        self.blob_store = blob_store
        self.key = key
        self.max_entries = max_entries
        self.entries: List[LogEntry] = []
        self.dirty = False

    def add(self, level: str, message: str, data: Any = None,
            timestamp: Optional[datetime] = None) -> LogEntry:
        entry = LogEntry(
            id=uuid.uuid4().hex[:9],
            timestamp=timestamp or datetime.now(timezone.utc),
            level=level,
            message=message,
            data=data,
        )
        self.entries.append(entry)
        if len(self.entries) > self.max_entries:
            self.entries = self.entries[-self.max_entries:]
        self.dirty = True
        return entry

    def filter(
            self,
            level: Optional[str] = None,
            search: Optional[str] = None,
            start: Optional[datetime] = None,
            end: Optional[datetime] = None
    ) -> List[LogEntry]:
        """
        Отбирает записи журнала.

        :param level: Уровень (DEBUG, INFO, WARNING, ERROR)
        :param search: Подстрока в сообщении или данных, без учета регистра
        :param start: Начало интервала включительно
        :param end: Конец интервала включительно
        """
        entries = self.entries
        if level:
            entries = [entry for entry in entries if entry.level == level.upper()]
        if search:
            needle = search.lower()
            entries = [
                entry for entry in entries
                if needle in entry.message.lower()
                or (entry.data is not None and needle in json.dumps(entry.data, default=str).lower())
            ]
        if start:
            start = as_utc(start)
            entries = [entry for entry in entries if entry.timestamp >= start]
        if end:
            end = as_utc(end)
            entries = [entry for entry in entries if entry.timestamp <= end]
        return list(entries)

    def export(self) -> str:
        return json.dumps(
            [entry.model_dump(mode="json") for entry in self.entries],
            indent=2,
            ensure_ascii=False,
        )

    async def load(self) -> None:
        try:
            raw = await self.blob_store.read(self.key)
            self.entries = entries_adapter.validate_json(raw) if raw else []
        except Exception:
            logger.exception("Не удалось загрузить журнал из хранилища")
            self.entries = []
        self.dirty = False

    async def flush(self) -> None:
        """Сохраняет журнал, если в нем есть несохраненные записи."""
        if not self.dirty:
            return
        self.dirty = False
        try:
            await self.blob_store.write(self.key, entries_adapter.dump_json(self.entries).decode())
        except Exception:
            self.dirty = True
            logger.exception("Не удалось сохранить журнал в хранилище")

    async def clear(self) -> None:
        self.entries = []
        self.dirty = False
        try:
            await self.blob_store.remove(self.key)
        except Exception:
            logger.exception("Не удалось очистить журнал в хранилище")


class JournalHandler(logging.Handler):
    """Копирует записи логгера в журнал. Данные берутся из extra={"data": ...}."""

    def __init__(self, journal: LogJournal, level: int = logging.NOTSET):
        super().__init__(level)
        self.journal = journal

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.journal.add(
                level=record.levelname,
                message=record.getMessage(),
                data=getattr(record, "data", None),
                timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
            )
        except Exception:
            self.handleError(record)


def get_journal(request: Request) -> LogJournal:
    return request.app.state.journal
