from datetime import datetime
from typing import Iterable

from src.links.errors import NotFoundError
from src.links.models import LinkRecord, Summary, DetailView


def is_expired(record: LinkRecord, now: datetime) -> bool:
    """
    Проверяет, истек ли срок действия ссылки.
    В момент expires_at ссылка еще активна.
    """
    return now > record.expires_at


def summarize(records: Iterable[LinkRecord], now: datetime) -> Summary:
    """
    Считает общую статистику по ссылкам.

    Arguments:
    - records: Ссылки
    - now: Момент, на который определяется истечение срока

    Returns:
    - Summary: всего ссылок, переходов, активных и истекших
    """
    records = list(records)
    total_links = len(records)
    active_links = sum(1 for record in records if not is_expired(record, now))
    return Summary(
        total_links=total_links,
        total_clicks=sum(record.clicks for record in records),
        active_links=active_links,
        expired_links=total_links - active_links,
    )


def detail(record: LinkRecord, now: datetime) -> DetailView:
    """Статистика по одной ссылке, переходы от новых к старым."""
    recent_clicks = list(reversed(record.click_history))
    return DetailView(
        link=record,
        expired=is_expired(record, now),
        last_clicked_at=recent_clicks[0].timestamp if recent_clicks else None,
        recent_clicks=recent_clicks,
    )


async def resolve_redirect(store, short_code: str, source: str, location: str, now: datetime) -> LinkRecord:
    """
    Находит ссылку по коду и записывает переход.

    :param store: LinkStore
    :param short_code: Короткий код из пути
    :param source: origin реферера или "direct"
    :param location: примерное местоположение
    :param now: время перехода
    :return: Обновленная запись, original_url для перенаправления
    :raises NotFoundError: кода нет
    :raises ExpiredError: срок действия истек
    """
    record = store.find_by_code(short_code)
    if record is None:
        raise NotFoundError()
    return await store.record_click(record.id, source, location, now)
