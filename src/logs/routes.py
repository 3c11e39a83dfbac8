import logging

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from src.logs.journal import LogEntry, LogJournal, get_journal

router = APIRouter()

logger = logging.getLogger(__name__)


@router.get("", response_model=List[LogEntry])
async def get_logs(
        level: Optional[str] = None,
        search: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        journal: LogJournal = Depends(get_journal),
):
    """
    Получение записей журнала.
    :param level: Уровень записи
    :param search: Поиск по сообщению и данным
    :param start: Начало интервала
    :param end: Конец интервала
    :return: Список записей
    """
    return journal.filter(level=level, search=search, start=start, end=end)


@router.get("/export")
async def export_logs(journal: LogJournal = Depends(get_journal)):
    """Выгрузка всего журнала в JSON-файл."""
    return Response(
        content=journal.export(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="logs.json"'},
    )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_logs(journal: LogJournal = Depends(get_journal)):
    await journal.clear()
    logger.info("Logs cleared")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
