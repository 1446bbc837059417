"""
Data Sources

Fetch the live value that ends up on the token. One HTTP call per fetch,
validated before anything is drawn or written on chain.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, List, Optional

import httpx
from pydantic import ValidationError

from live_nft.core.config import Settings
from live_nft.core.exceptions import DataValidationError, ExternalAPIError
from live_nft.core.logging import get_logger
from live_nft.engines.data.schemas import (
    DataRecord,
    OpenWeatherResponse,
    ParamData,
    WeatherData,
)

logger = get_logger(__name__)


class DataSource(ABC):
    """A remote API that yields one DataRecord per fetch."""

    name: ClassVar[str]
    service: ClassVar[str]
    attribute_names: ClassVar[List[str]]

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self._transport = transport

    @abstractmethod
    async def fetch(self) -> DataRecord:
        pass

    async def _get_json(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None
    ) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, headers=headers, params=params)
        except httpx.TimeoutException as e:
            raise ExternalAPIError(f"{self.service} timeout", service=self.service) from e
        except httpx.HTTPError as e:
            raise ExternalAPIError(f"{self.service} request failed: {e}", service=self.service) from e

        if response.status_code >= 400:
            raise ExternalAPIError(
                f"{self.service} error: {response.text}",
                service=self.service,
                http_status=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise DataValidationError("Data from API is not valid", details={"reason": "not JSON"}) from e


class ParamApiSource(DataSource):
    """Bearer-token API whose JSON body carries a numeric ``param``."""

    name = "api"
    service = "data_api"
    attribute_names = ParamData.ATTRIBUTE_NAMES

    def __init__(self, api_url: str, api_key: str, **kwargs):
        super().__init__(**kwargs)
        self.api_url = api_url
        self.api_key = api_key

    async def fetch(self) -> ParamData:
        payload = await self._get_json(
            self.api_url,
            headers={"Authorization": f"Bearer {self.api_key}"}
        )
        if not isinstance(payload, dict):
            raise DataValidationError("Data from API is not valid")

        try:
            return ParamData.model_validate(payload)
        except ValidationError as e:
            raise DataValidationError("Data from API is not valid", details={"errors": e.errors()}) from e


class WeatherSource(DataSource):
    """OpenWeatherMap current weather, authenticated by the appid query parameter."""

    name = "weather"
    service = "weather_api"
    attribute_names = WeatherData.ATTRIBUTE_NAMES

    def __init__(self, api_url: str, api_key: str, city: str, units: str = "metric", **kwargs):
        super().__init__(**kwargs)
        self.api_url = api_url
        self.api_key = api_key
        self.city = city
        self.units = units

    async def fetch(self) -> WeatherData:
        payload = await self._get_json(
            self.api_url,
            params={"q": self.city, "appid": self.api_key, "units": self.units}
        )

        try:
            parsed = OpenWeatherResponse.model_validate(payload)
        except ValidationError as e:
            raise DataValidationError("Weather data from API is not valid", details={"errors": e.errors()}) from e

        return WeatherData.from_openweather(parsed, city=self.city, units=self.units)


SOURCES = {
    ParamApiSource.name: ParamApiSource,
    WeatherSource.name: WeatherSource,
}


def get_data_source(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> DataSource:
    """Build the source selected by DATA_SOURCE, checking its env vars."""
    if settings.DATA_SOURCE == WeatherSource.name:
        return WeatherSource(
            api_url=settings.WEATHER_API_URL,
            api_key=settings.require("WEATHER_API_KEY"),
            city=settings.require("WEATHER_CITY"),
            units=settings.WEATHER_UNITS,
            timeout=settings.HTTP_TIMEOUT,
            transport=transport,
        )

    return ParamApiSource(
        api_url=settings.require("API_URL"),
        api_key=settings.require("API_KEY"),
        timeout=settings.HTTP_TIMEOUT,
        transport=transport,
    )


def attribute_names_for(settings: Settings) -> List[str]:
    """Attribute names of the configured source, without touching its credentials."""
    return list(SOURCES[settings.DATA_SOURCE].attribute_names)
