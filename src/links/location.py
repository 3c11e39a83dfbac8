import random
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from fastapi import Request

SAMPLE_LOCATIONS = ["New York, US", "London, UK", "Tokyo, JP", "Mumbai, IN", "Sydney, AU"]


class LocationProvider(ABC):
    """Определяет примерное местоположение посетителя."""

    @abstractmethod
    def locate(self, client_host: Optional[str]) -> str:
        ...


class UnknownLocationProvider(LocationProvider):
    def locate(self, client_host: Optional[str]) -> str:
        return "Unknown"


class SampleLocationProvider(LocationProvider):
    """Заглушка без геолокации: случайный город из списка."""

    def __init__(self, locations: Sequence[str] = SAMPLE_LOCATIONS):
        self.locations = list(locations)

    def locate(self, client_host: Optional[str]) -> str:
        return random.choice(self.locations)


def get_location_provider(name: str) -> LocationProvider:
    if name == "sample":
        return SampleLocationProvider()
    if name == "unknown":
        return UnknownLocationProvider()
    raise ValueError(f"Неизвестный LOCATION_PROVIDER: {name}")


def get_locator(request: Request) -> LocationProvider:
    return request.app.state.location_provider
