import json
import logging
import pytest
from datetime import datetime, timedelta, timezone

from src.logs.journal import LogJournal, JournalHandler

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_journal_keeps_last_entries(journal: LogJournal):
    for i in range(8):
        journal.add("INFO", f"message {i}")

    assert len(journal.entries) == 5
    assert journal.entries[0].message == "message 3"
    assert journal.entries[-1].message == "message 7"


def test_journal_filter(journal: LogJournal):
    journal.add("INFO", "Ссылка создана", data={"short_code": "abc123"}, timestamp=NOW)
    journal.add("WARNING", "Ошибка валидации", timestamp=NOW + timedelta(minutes=1))
    journal.add("INFO", "Переход записан", timestamp=NOW + timedelta(minutes=2))

    assert [e.message for e in journal.filter(level="warning")] == ["Ошибка валидации"]
    assert [e.message for e in journal.filter(search="ABC123")] == ["Ссылка создана"]
    assert [e.message for e in journal.filter(search="переход")] == ["Переход записан"]
    assert len(journal.filter(start=NOW + timedelta(minutes=1))) == 2
    assert len(journal.filter(start=NOW, end=NOW + timedelta(minutes=1))) == 2
    # время без зоны считается UTC
    assert len(journal.filter(end=datetime(2026, 10, 19, 12, 0))) == 1


@pytest.mark.asyncio
async def test_journal_flush_and_load(journal: LogJournal, blob_store):
    journal.add("ERROR", "boom", data={"code": 1}, timestamp=NOW)
    await journal.flush()
    assert not journal.dirty

    restored = LogJournal(blob_store)
    await restored.load()

    assert len(restored.entries) == 1
    assert restored.entries[0].timestamp == NOW
    assert restored.entries[0].data == {"code": 1}


@pytest.mark.asyncio
async def test_journal_clear(journal: LogJournal, blob_store):
    journal.add("INFO", "one")
    await journal.flush()

    await journal.clear()

    assert journal.entries == []
    assert await blob_store.read(journal.key) is None


def test_journal_export(journal: LogJournal):
    journal.add("INFO", "exported", timestamp=NOW)

    exported = json.loads(journal.export())

    assert exported[0]["message"] == "exported"
    assert exported[0]["timestamp"] == "2026-10-19T12:00:00Z"


def test_journal_handler(journal: LogJournal):
    logger = logging.getLogger("src.tests.journal")
    logger.setLevel(logging.DEBUG)
    handler = JournalHandler(journal)
    logger.addHandler(handler)
    try:
        logger.warning("Переход по %s", "истекшей ссылке", extra={"data": {"short_code": "old"}})
    finally:
        logger.removeHandler(handler)

    entry = journal.entries[-1]
    assert entry.level == "WARNING"
    assert entry.message == "Переход по истекшей ссылке"
    assert entry.data == {"short_code": "old"}
    assert journal.dirty
