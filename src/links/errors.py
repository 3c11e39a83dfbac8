from typing import List, Optional


class LinkError(Exception):
    """Базовая ошибка работы со ссылками."""

    message = "Ошибка работы со ссылкой"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(LinkError):
    """Некорректные данные для создания ссылки. Ничего не изменено."""

    message = "Некорректные данные"

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class NotFoundError(LinkError):
    message = "Ссылка не найдена"


class ExpiredError(LinkError):
    message = "Срок действия ссылки истек"
