"""
Weather oracle

Weather achievements are verified against an external provider. The
evaluator only depends on the WeatherOracle interface; any provider
failure is surfaced as an exception so the caller can fail closed.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from badger_claims.exceptions import WeatherAPIError
from badger_claims.resilience.retry import retry_with_backoff

logger = logging.getLogger(__name__)

# OpenWeatherMap "main" groups that satisfy each condition
CONDITION_GROUPS: Dict[str, set[str]] = {
    "rain": {"Rain", "Drizzle", "Thunderstorm"},
    "snow": {"Snow"},
    "clear": {"Clear"},
    "fog": {"Fog", "Mist", "Haze"},
    "sun_shower": {"Rain", "Drizzle"},
    "blizzard": {"Snow"},
}

# Blizzard: snow with sustained wind of at least 35 mph
BLIZZARD_MIN_WIND_MPS = 15.6
# Sun shower: raining with at most this much cloud cover
SUN_SHOWER_MAX_CLOUDS_PERCENT = 50


class WeatherOracle(ABC):
    """Answers whether a weather condition holds at a place and time"""

    @abstractmethod
    async def check(self, condition: str, lat: float, lng: float, when: datetime) -> bool:
        """
        Returns:
            True if the condition holds

        Raises:
            WeatherAPIError: If the provider cannot answer
        """

    def supports(self, condition: str) -> bool:
        return True

    async def close(self) -> None:
        return None


class UnavailableWeatherOracle(WeatherOracle):
    """Used when no provider is configured; every check fails closed"""

    async def check(self, condition: str, lat: float, lng: float, when: datetime) -> bool:
        raise WeatherAPIError("Weather provider not configured (set WEATHER_API_KEY)")


class OpenWeatherMapOracle(WeatherOracle):
    """
    OpenWeatherMap current-conditions client

    Only current weather is available, so `when` must be the claim instant;
    historical claims are not supported by this provider.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openweathermap.org/data/2.5/weather",
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.api_key = api_key
        self.base_url = base_url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    def supports(self, condition: str) -> bool:
        return condition in CONDITION_GROUPS

    async def _fetch_current(self, lat: float, lng: float) -> Dict[str, Any]:
        response = await self._client.get(
            self.base_url,
            params={"lat": lat, "lon": lng, "appid": self.api_key}
        )
        response.raise_for_status()
        return response.json()

    async def check(self, condition: str, lat: float, lng: float, when: datetime) -> bool:
        if not self.supports(condition):
            raise WeatherAPIError(f"Condition '{condition}' cannot be verified by OpenWeatherMap")

        try:
            data = await retry_with_backoff(self._fetch_current, lat, lng)
        except httpx.HTTPStatusError as e:
            raise WeatherAPIError(
                f"Weather API returned error: {e.response.status_code}",
                status_code=e.response.status_code,
                operation="weather_check",
                cause=e
            )
        except httpx.HTTPError as e:
            raise WeatherAPIError(
                f"Weather API request failed: {type(e).__name__}",
                operation="weather_check",
                cause=e
            )
        except ValueError as e:
            raise WeatherAPIError(
                "Weather API returned a body that is not JSON",
                operation="weather_check",
                cause=e
            )

        if not isinstance(data, dict):
            raise WeatherAPIError(
                f"Weather API returned unexpected payload: {type(data).__name__}",
                operation="weather_check"
            )

        return matches_condition(condition, data)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def matches_condition(condition: str, data: Dict[str, Any]) -> bool:
    """
    Compare an OpenWeatherMap current-weather payload to a catalog condition

    Raises:
        WeatherAPIError: If the payload has no weather entries
    """
    entries = data.get("weather")
    if not isinstance(entries, list):
        entries = []
    groups = {entry.get("main") for entry in entries if isinstance(entry, dict)} - {None}
    if not groups:
        raise WeatherAPIError("Weather API response has no conditions")

    if not groups & CONDITION_GROUPS.get(condition, set()):
        return False

    if condition == "blizzard":
        wind = (data.get("wind") or {}).get("speed", 0)
        return wind >= BLIZZARD_MIN_WIND_MPS

    if condition == "sun_shower":
        clouds = (data.get("clouds") or {}).get("all", 100)
        return clouds <= SUN_SHOWER_MAX_CLOUDS_PERCENT

    return True
