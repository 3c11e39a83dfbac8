from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime

from src.config import DEFAULT_VALIDITY_MINUTES


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LinkCreate(CamelModel):
    original_url: str
    validity_minutes: int = DEFAULT_VALIDITY_MINUTES
    custom_code: Optional[str] = None


class ClickEvent(CamelModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    referrer_source: str
    approximate_location: str


class LinkRecord(CamelModel):
    """
    Сокращенная ссылка вместе с историей переходов.

    После создания меняются только clicks и click_history,
    и только через запись перехода.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    original_url: str
    short_code: str
    created_at: datetime
    expires_at: datetime
    clicks: int = Field(default=0, ge=0)
    click_history: List[ClickEvent] = Field(default_factory=list)

    def build_short_url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/{self.short_code}"

    def with_click(self, click: ClickEvent) -> "LinkRecord":
        """Возвращает копию записи с добавленным переходом."""
        return self.model_copy(update={
            "clicks": self.clicks + 1,
            "click_history": [*self.click_history, click],
        })


class LinkResponse(LinkRecord):
    short_url: str


class Summary(CamelModel):
    total_links: int
    total_clicks: int
    active_links: int
    expired_links: int


class DetailView(CamelModel):
    link: LinkRecord
    expired: bool
    last_clicked_at: Optional[datetime] = None
    # самые свежие переходы первыми
    recent_clicks: List[ClickEvent]


records_adapter = TypeAdapter(List[LinkRecord])


def dump_records(records: List[LinkRecord]) -> str:
    """Сериализует коллекцию ссылок в JSON с camelCase-полями и ISO-8601 датами."""
    return records_adapter.dump_json(records, by_alias=True).decode()


def load_records(raw: str) -> List[LinkRecord]:
    """Восстанавливает коллекцию ссылок из JSON, даты разбираются обратно в datetime."""
    return records_adapter.validate_json(raw)


def to_response(record: LinkRecord, base_url: str) -> LinkResponse:
    return LinkResponse(**record.model_dump(), short_url=record.build_short_url(base_url))
