import re
import random
import string
from typing import Iterable, Optional
from urllib.parse import urlsplit

from pydantic import AnyUrl, TypeAdapter, ValidationError as PydanticValidationError

SHORT_CODE_ALPHABET = string.ascii_letters + string.digits
SHORT_CODE_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
RESERVED_SHORT_CODES = frozenset({"links", "logs", "docs", "redoc"})

url_adapter = TypeAdapter(AnyUrl)

DIRECT_SOURCE = "direct"


def generate_short_code(length: int = 6) -> str:
    """
    Генерирует случайный короткий код.

    Уникальность не проверяется, повторная генерация на стороне вызывающего.
    """
    return ''.join(random.choice(SHORT_CODE_ALPHABET) for _ in range(length))


def is_short_code_unique(short_code: str, records: Iterable) -> bool:
    """Проверяет, что код не занят ни одной из живых ссылок."""
    return not any(record.short_code == short_code for record in records)


def is_valid_short_code(short_code: str) -> bool:
    return bool(SHORT_CODE_PATTERN.match(short_code))


def is_reserved_short_code(short_code: str) -> bool:
    """Код совпадает с первым сегментом пути служебных маршрутов."""
    return short_code in RESERVED_SHORT_CODES


def is_valid_url(url: str) -> bool:
    """
    Проверяет, что строка разбирается как абсолютный URL.

    :param url: Строка для проверки
    :return: True, если pydantic разбирает строку как AnyUrl
    """
    if not url:
        return False
    try:
        url_adapter.validate_python(url)
    except PydanticValidationError:
        return False
    return True


def referrer_origin(referer: Optional[str]) -> str:
    """Возвращает origin реферера или "direct", если его нет."""
    if not referer:
        return DIRECT_SOURCE
    try:
        parts = urlsplit(referer)
    except ValueError:
        return DIRECT_SOURCE
    if not parts.scheme or not parts.netloc:
        return DIRECT_SOURCE
    return f"{parts.scheme}://{parts.netloc}"
