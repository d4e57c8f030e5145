"""Achievement models for the claim catalog"""
from enum import Enum
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class AchievementCategory(str, Enum):
    """Achievement categories"""
    ENVIRONMENT = "environment"
    EVENT = "event"
    TIME_LOCATION = "time_location"
    ACADEMIC = "academic"
    TEST = "test"


class ValidationType(str, Enum):
    """How the backend decides eligibility for an achievement"""
    WEATHER = "weather"
    EVENT_CODE = "event_code"
    TIME_LOCATION = "time_location"
    TEST = "test"
    MANUAL_VERIFICATION = "manual_verification"
    ACADEMIC_RECORD = "academic_record"


class BoundingBox(BaseModel):
    """Rectangular area, bounds inclusive"""
    model_config = ConfigDict(frozen=True)

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


class RadiusArea(BaseModel):
    """Circle around a point"""
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    radius_meters: float = Field(..., gt=0)


class HourWindow(BaseModel):
    """Wall-clock hours [hour_start, hour_end) in a named IANA timezone"""
    model_config = ConfigDict(frozen=True)

    hour_start: int = Field(..., ge=0, le=23)
    hour_end: int = Field(..., ge=1, le=24)
    timezone: str = "UTC"


class DateWindow(BaseModel):
    """Absolute claim period"""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime


class ValidationRules(BaseModel):
    """Eligibility rules, tagged by type"""
    model_config = ConfigDict(frozen=True)

    type: ValidationType
    area: Optional[BoundingBox] = None
    radius: Optional[RadiusArea] = None
    condition: Optional[str] = None
    hour_window: Optional[HourWindow] = None
    date_window: Optional[DateWindow] = None
    requires_event_code: bool = False

    @model_validator(mode="after")
    def _check_shape(self) -> "ValidationRules":
        if self.type == ValidationType.WEATHER and self.area is None:
            raise ValueError("weather rules need a bounding box")
        if self.type == ValidationType.EVENT_CODE and self.area is None and self.radius is None:
            raise ValueError("event_code rules need a bounding box or a radius")
        if self.type == ValidationType.TIME_LOCATION and (self.radius is None or self.hour_window is None):
            raise ValueError("time_location rules need a radius and an hour window")
        return self


class Achievement(BaseModel):
    """Achievement definition"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: AchievementCategory
    icon: str
    validation_rules: ValidationRules
    is_test_nft: bool = False
    max_supply: Optional[int] = None

    @property
    def is_test(self) -> bool:
        return self.is_test_nft or self.validation_rules.type == ValidationType.TEST
