"""Eligibility rules: location, event codes, time windows and weather"""

from badger_claims.eligibility.evaluator import EligibilityEvaluator
from badger_claims.eligibility.event_codes import EventCodeRegistry
from badger_claims.eligibility.geo import haversine_distance
from badger_claims.eligibility.weather import (
    OpenWeatherMapOracle,
    UnavailableWeatherOracle,
    WeatherOracle,
)

__all__ = [
    "EligibilityEvaluator",
    "EventCodeRegistry",
    "haversine_distance",
    "OpenWeatherMapOracle",
    "UnavailableWeatherOracle",
    "WeatherOracle",
]
