import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse, Response

from datetime import datetime, timezone
from typing import List

from src.config import BASE_URL
from src.utils import referrer_origin
from src.links.errors import ValidationError, NotFoundError, ExpiredError
from src.links.location import LocationProvider, get_locator
from src.links.models import LinkCreate, LinkResponse, Summary, DetailView, to_response
from src.links.services import summarize, detail, resolve_redirect
from src.links.store import LinkStore, get_store

router = APIRouter()
redirect_router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/shorten", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
async def create_link(link_data: LinkCreate, store: LinkStore = Depends(get_store)):
    """
        Создание коротких ссылок.
        Принимает JSON с полями:
        :param original_url: URL для сокращения,
        :param validity_minutes: Срок действия ссылки в минутах, по умолчанию 30,
        :param custom_code: Необязательное поле - собственный короткий код.

        Если custom_code указан, то он проверяется на уникальность и формат.
        Если custom_code не указан, то генерируется случайный код.

        :return: Созданная ссылка с полем shortUrl
    """
    try:
        record = await store.create(
            original_url=link_data.original_url,
            validity_minutes=link_data.validity_minutes,
            custom_code=link_data.custom_code,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.errors)
    return to_response(record, BASE_URL)


@router.get("", response_model=List[LinkResponse])
async def list_links(store: LinkStore = Depends(get_store)):
    """Все ссылки, новые первыми."""
    return [to_response(record, BASE_URL) for record in store.records(newest_first=True)]


@router.get("/stats", response_model=Summary)
async def get_summary(store: LinkStore = Depends(get_store)):
    """
    Общая статистика: всего ссылок и переходов, активные и истекшие ссылки.
    """
    return summarize(store.records(), datetime.now(timezone.utc))


@router.get("/{link_id}", response_model=DetailView)
async def get_link_stats(link_id: str, store: LinkStore = Depends(get_store)):
    """
    Получение статистики для ссылки.
    :param link_id: id ссылки
    :return: Ссылка и ее переходы, последние первыми
    """
    record = store.get(link_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NotFoundError.message)
    return detail(record, datetime.now(timezone.utc))


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(link_id: str, store: LinkStore = Depends(get_store)):
    """
        Удаляет ссылку. Повторное удаление не считается ошибкой.
        :param link_id: id ссылки
        :return: HTTP 204 No Content
    """
    await store.delete(link_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@redirect_router.get("/{short_code}")
async def redirect_to_original_url(
        short_code: str,
        request: Request,
        store: LinkStore = Depends(get_store),
        locator: LocationProvider = Depends(get_locator),
):
    """
        Переход по сокращенной ссылке на оригинальный URL.
        Переход записывается только для активной ссылки.
        :param short_code: Короткий код
        :return: Редирект на оригинальный URL
    """
    client_host = request.client.host if request.client else None
    try:
        record = await resolve_redirect(
            store,
            short_code,
            source=referrer_origin(request.headers.get("referer")),
            location=locator.locate(client_host),
            now=datetime.now(timezone.utc),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ExpiredError as e:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=e.message)

    return RedirectResponse(url=record.original_url)
