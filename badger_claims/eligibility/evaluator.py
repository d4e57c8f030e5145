"""
Eligibility Evaluator

Maps (achievement rules, claim context) to Eligible / Ineligible(reason).

Checks per rule type, short-circuiting on the first failure:
- weather:        bounding box -> date window -> weather oracle
- event_code:     event code -> bounding box or radius
- time_location:  hour window (rule timezone) -> radius
- test:           always eligible
- academic_record / manual_verification: never automatically eligible

Evaluation has no side effects. The weather lookup is the only await; it
runs under a timeout and any failure makes the claim ineligible.
"""

import asyncio
import logging
from typing import Optional

from badger_claims.eligibility.event_codes import EventCodeRegistry
from badger_claims.eligibility.geo import haversine_distance
from badger_claims.eligibility.weather import UnavailableWeatherOracle, WeatherOracle
from badger_claims.exceptions import ExternalAPIError
from badger_claims.models.achievement import (
    Achievement,
    BoundingBox,
    DateWindow,
    HourWindow,
    RadiusArea,
    ValidationRules,
    ValidationType,
)
from badger_claims.models.claim import ClaimContext, EligibilityResult
from badger_claims.monitoring.prometheus_metrics import track_weather_lookup
from badger_claims.utils.datetime_helpers import ensure_utc, hour_in_window, local_hour

logger = logging.getLogger(__name__)


def check_bounding_box(box: BoundingBox, lat: float, lng: float) -> Optional[str]:
    if not box.contains(lat, lng):
        return "You are not within the required location bounds"
    return None


def check_radius(area: RadiusArea, lat: float, lng: float) -> Optional[str]:
    distance = haversine_distance(lat, lng, area.lat, area.lng)
    if distance > area.radius_meters:
        return (
            f"You are {round(distance)} meters from the target location, "
            f"need to be within {area.radius_meters:g} meters"
        )
    return None


def check_hour_window(window: HourWindow, context: ClaimContext) -> Optional[str]:
    hour = local_hour(context.now, window.timezone)
    if not hour_in_window(hour, window.hour_start, window.hour_end):
        return (
            f"This achievement can only be claimed between {window.hour_start}:00 "
            f"and {window.hour_end}:00 ({window.timezone})"
        )
    return None


def check_date_window(window: DateWindow, context: ClaimContext) -> Optional[str]:
    now = ensure_utc(context.now)
    if now < ensure_utc(window.start) or now > ensure_utc(window.end):
        return (
            f"This achievement can only be claimed between "
            f"{window.start.date().isoformat()} and {window.end.date().isoformat()}"
        )
    return None


class EligibilityEvaluator:
    """Pure eligibility decision over the catalog's validation rules"""

    def __init__(
        self,
        event_codes: Optional[EventCodeRegistry] = None,
        weather_oracle: Optional[WeatherOracle] = None,
        weather_timeout: float = 5.0
    ):
        self.event_codes = event_codes or EventCodeRegistry()
        self.weather_oracle = weather_oracle or UnavailableWeatherOracle()
        self.weather_timeout = weather_timeout

    async def evaluate(self, achievement: Achievement, context: ClaimContext) -> EligibilityResult:
        """
        Decide whether the claim satisfies the achievement's rules

        Args:
            achievement: Catalog entry being claimed
            context: Claimant location, event code and evaluation instant

        Returns:
            EligibilityResult with a user-facing reason when ineligible
        """
        rules = achievement.validation_rules
        rule_type = rules.type.value

        if rules.type == ValidationType.TEST:
            return EligibilityResult.passed()

        if rules.type in (ValidationType.ACADEMIC_RECORD, ValidationType.MANUAL_VERIFICATION):
            return EligibilityResult.failed(
                "This achievement requires manual verification and cannot be claimed automatically",
                rule_type
            )

        if rules.type == ValidationType.WEATHER:
            reason = (
                self._check_location(rules, context)
                or (check_date_window(rules.date_window, context) if rules.date_window else None)
                or await self._check_weather(rules, context)
            )
        elif rules.type == ValidationType.EVENT_CODE:
            reason = (
                self._check_event_code(rules, achievement, context)
                or self._check_location(rules, context)
            )
        elif rules.type == ValidationType.TIME_LOCATION:
            reason = (
                check_hour_window(rules.hour_window, context)
                or self._check_location(rules, context)
            )
        else:
            reason = f"Unknown validation type: {rule_type}"

        if reason:
            logger.info(f"Claim for {achievement.id} ineligible ({rule_type}): {reason}")
            return EligibilityResult.failed(reason, rule_type)

        return EligibilityResult.passed()

    def _check_location(self, rules: ValidationRules, context: ClaimContext) -> Optional[str]:
        if rules.area is None and rules.radius is None:
            return None
        if context.lat is None or context.lng is None:
            return "Location is required for this achievement"
        if rules.area is not None:
            reason = check_bounding_box(rules.area, context.lat, context.lng)
            if reason:
                return reason
        if rules.radius is not None:
            return check_radius(rules.radius, context.lat, context.lng)
        return None

    def _check_event_code(
        self,
        rules: ValidationRules,
        achievement: Achievement,
        context: ClaimContext
    ) -> Optional[str]:
        if not rules.requires_event_code:
            return None
        if not context.event_code:
            return "Event code required"
        if not self.event_codes.is_valid(context.event_code, achievement.id):
            return "Invalid event code"
        return None

    async def _check_weather(self, rules: ValidationRules, context: ClaimContext) -> Optional[str]:
        condition = rules.condition
        if not condition:
            return None
        if not self.weather_oracle.supports(condition):
            track_weather_lookup("unsupported")
            return f"Weather condition '{condition}' cannot be verified automatically"

        try:
            holds = await asyncio.wait_for(
                self.weather_oracle.check(condition, context.lat, context.lng, context.now),
                timeout=self.weather_timeout
            )
        except asyncio.TimeoutError:
            track_weather_lookup("timeout")
            logger.warning(f"Weather lookup timed out after {self.weather_timeout}s")
            return "Weather verification timed out, please try again"
        except ExternalAPIError as e:
            track_weather_lookup("error")
            return f"Weather verification unavailable: {e.message}"
        except Exception as e:
            track_weather_lookup("error")
            logger.error(f"Weather lookup failed unexpectedly: {e}", exc_info=True)
            return "Weather verification unavailable"

        track_weather_lookup("match" if holds else "mismatch")
        if not holds:
            return f"Current weather is not {condition}"
        return None
