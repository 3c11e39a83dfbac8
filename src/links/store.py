import asyncio
import logging
import uuid

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import Request

from src.config import LINKS_KEY, SHORT_CODE_LENGTH
from src.storage import BlobStore
from src.utils import (
    generate_short_code, is_reserved_short_code, is_short_code_unique, is_valid_short_code, is_valid_url
)
from src.links.errors import ValidationError, NotFoundError, ExpiredError
from src.links.models import LinkRecord, ClickEvent, dump_records, load_records
from src.links.services import is_expired

logger = logging.getLogger(__name__)


class LinkStore:
    """
    Коллекция сокращенных ссылок в памяти, синхронизированная с хранилищем.

    Каждое изменение (создание, переход, удаление) целиком пересериализует
    коллекцию. Изменения выполняются под одной блокировкой.
    """

    def __init__(self, blob_store: BlobStore, key: str = LINKS_KEY,
                 create_delay: float = 0, code_length: int = SHORT_CODE_LENGTH):
        self.blob_store = blob_store
        self.key = key
        self.create_delay = create_delay
        self.code_length = code_length
        self._records: List[LinkRecord] = []
        self._lock = asyncio.Lock()

    async def load(self) -> None:
        """
        Загружает коллекцию из хранилища при старте.
        Если загрузить не удалось, коллекция остается пустой.
        """
        try:
            raw = await self.blob_store.read(self.key)
            self._records = load_records(raw) if raw else []
        except Exception:
            logger.exception("Не удалось загрузить ссылки из хранилища")
            self._records = []
            return
        logger.info("Ссылки загружены", extra={"data": {"count": len(self._records)}})

    async def persist(self) -> bool:
        """
        Сохраняет всю коллекцию в хранилище.

        :return: True, если запись прошла успешно
        """
        try:
            await self.blob_store.write(self.key, dump_records(self._records))
        except Exception:
            logger.exception("Не удалось сохранить ссылки в хранилище")
            return False
        logger.debug("Ссылки сохранены", extra={"data": {"count": len(self._records)}})
        return True

    def records(self, newest_first: bool = False) -> List[LinkRecord]:
        if newest_first:
            return list(reversed(self._records))
        return list(self._records)

    def get(self, link_id: str) -> Optional[LinkRecord]:
        for record in self._records:
            if record.id == link_id:
                return record
        return None

    def find_by_code(self, short_code: str) -> Optional[LinkRecord]:
        for record in self._records:
            if record.short_code == short_code:
                return record
        return None

    def validate(
            self,
            original_url: str,
            validity_minutes: int,
            custom_code: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> None:
        """
        Проверяет данные для создания ссылки. Первая ошибка прерывает проверку.

        :raises ValidationError: если данные некорректны
        """
        if not original_url:
            raise ValidationError(["Укажите URL"])
        if not is_valid_url(original_url):
            raise ValidationError(["Некорректный формат URL"])
        if validity_minutes <= 0:
            raise ValidationError(["Срок действия должен быть больше 0"])
        try:
            (now or datetime.now(timezone.utc)) + timedelta(minutes=validity_minutes)
        except OverflowError:
            raise ValidationError(["Срок действия слишком большой"])
        if custom_code and not is_short_code_unique(custom_code, self._records):
            raise ValidationError(["Такой код уже занят"])
        if custom_code and not is_valid_short_code(custom_code):
            raise ValidationError(["Код может содержать только латинские буквы и цифры"])
        if custom_code and is_reserved_short_code(custom_code):
            raise ValidationError(["Такой код зарезервирован"])

    def _new_short_code(self) -> str:
        short_code = generate_short_code(self.code_length)
        while not is_short_code_unique(short_code, self._records) or is_reserved_short_code(short_code):
            short_code = generate_short_code(self.code_length)
        logger.debug("Сгенерирован код", extra={"data": {"short_code": short_code}})
        return short_code

    async def create(
            self,
            original_url: str,
            validity_minutes: int,
            custom_code: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> LinkRecord:
        """
        Создает сокращенную ссылку.

        Arguments:
        - original_url: Оригинальный URL
        - validity_minutes: Срок действия в минутах
        - custom_code: Необязательный собственный код
        - now: Время создания, по умолчанию текущее

        Returns:
        - Созданная запись

        Raises:
        - ValidationError: если данные некорректны, коллекция не меняется
        """
        logger.info("Создание ссылки", extra={"data": {
            "original_url": original_url,
            "validity_minutes": validity_minutes,
            "custom_code": custom_code,
        }})
        async with self._lock:
            created_at = now or datetime.now(timezone.utc)
            try:
                self.validate(original_url, validity_minutes, custom_code, now=created_at)
            except ValidationError as e:
                logger.warning("Ошибка валидации: %s", e.message, extra={"data": {"errors": e.errors}})
                raise

            if self.create_delay:
                await asyncio.sleep(self.create_delay)

            record = LinkRecord(
                id=str(uuid.uuid4()),
                original_url=original_url,
                short_code=custom_code or self._new_short_code(),
                created_at=created_at,
                expires_at=created_at + timedelta(minutes=validity_minutes),
            )
            self._records.append(record)
            await self.persist()

        logger.info("Ссылка создана", extra={"data": {"id": record.id, "short_code": record.short_code}})
        return record

    async def delete(self, link_id: str) -> bool:
        """
        Удаляет ссылку. Удаление несуществующей ссылки ничего не делает.

        :return: True, если ссылка была удалена
        """
        async with self._lock:
            remaining = [record for record in self._records if record.id != link_id]
            if len(remaining) == len(self._records):
                return False
            self._records = remaining
            await self.persist()
        logger.info("Ссылка удалена", extra={"data": {"id": link_id}})
        return True

    async def record_click(self, link_id: str, source: str, location: str, now: datetime) -> LinkRecord:
        """
        Записывает переход по ссылке.

        :param link_id: id ссылки
        :param source: origin реферера или "direct"
        :param location: примерное местоположение
        :param now: время перехода
        :raises NotFoundError: ссылки нет
        :raises ExpiredError: срок действия истек, переход не записывается
        """
        async with self._lock:
            for index, record in enumerate(self._records):
                if record.id == link_id:
                    break
            else:
                raise NotFoundError()

            if is_expired(record, now):
                logger.warning("Переход по истекшей ссылке", extra={"data": {"short_code": record.short_code}})
                raise ExpiredError()

            updated = record.with_click(ClickEvent(
                timestamp=now,
                referrer_source=source,
                approximate_location=location,
            ))
            self._records[index] = updated
            await self.persist()

        logger.info("Переход записан", extra={"data": {"short_code": updated.short_code, "clicks": updated.clicks}})
        return updated


def get_store(request: Request) -> LinkStore:
    return request.app.state.store
