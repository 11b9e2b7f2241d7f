"""
API schemas for request validation.

Responses are built from the domain records' ``to_dict`` output.
"""

import datetime as dt
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.activity import ActivitySummary


Intensity = Literal["easy", "moderate", "hard", "max"]


# ============================================================================
# Base Response Models
# ============================================================================

class ErrorDetail(BaseModel):
    """Error detail for API responses."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "ANALYTICS_NOT_FOUND",
                    "message": "WorkoutAnalytics not found: xyz",
                }
            }
        }
    )


# ============================================================================
# Workout Schemas
# ============================================================================

class ActivitySummaryModel(BaseModel):
    """Aggregate activity fields."""

    distance: float = Field(0.0, ge=0, description="Distance in meters")
    moving_time: float = Field(0.0, ge=0, description="Moving time in seconds")
    elapsed_time: float = Field(0.0, ge=0, description="Elapsed time in seconds")
    average_heartrate: Optional[float] = Field(None, gt=0)
    max_heartrate: Optional[float] = Field(None, gt=0)
    total_elevation_gain: Optional[float] = None
    average_speed: Optional[float] = Field(None, ge=0, description="Average speed in m/s")
    average_watts: Optional[float] = Field(None, ge=0)
    weighted_average_watts: Optional[float] = Field(None, ge=0)

    def to_summary(self) -> ActivitySummary:
        return ActivitySummary(**self.model_dump())


class AnalyzeWorkoutRequest(BaseModel):
    """Request to analyze and store a completed workout."""

    user_id: str = Field(..., min_length=1)
    workout_date: dt.date
    discipline: str = Field(..., description="run, bike, swim or brick")
    stream: Optional[Dict[str, List[Optional[float]]]] = Field(
        None,
        description="Channel name to samples; must contain a non-empty 'time' channel when given",
    )
    summary: ActivitySummaryModel = Field(default_factory=ActivitySummaryModel)
    prescribed_intensity: Optional[Intensity] = None


# ============================================================================
# Training Load Schemas
# ============================================================================

class TrainingLoadUpdateRequest(BaseModel):
    """TSS to add to one day of the load chain."""

    date: dt.date
    tss: float = Field(..., ge=0)


class DailyTssEntry(BaseModel):
    date: dt.date
    tss: float = Field(..., ge=0)


class TrainingLoadReplayRequest(BaseModel):
    """Historical daily TSS to rebuild the load chain from."""

    entries: List[DailyTssEntry] = Field(..., min_length=1)


# ============================================================================
# Zone Schemas
# ============================================================================

class BreakthroughCheckRequest(BaseModel):
    """Workout to check for zone breakthroughs."""

    workout_id: str = Field(..., min_length=1)
    workout_date: dt.date
    discipline: str
    stream: Optional[Dict[str, List[Optional[float]]]] = None
    summary: ActivitySummaryModel = Field(default_factory=ActivitySummaryModel)


class ProfileUpdateRequest(BaseModel):
    """Fields of the athlete profile to change."""

    experience_level: Optional[Literal["beginner", "intermediate", "advanced", "elite"]] = None
    max_hr: Optional[int] = Field(None, gt=0, le=250)
    resting_hr: Optional[int] = Field(None, gt=0, le=150)
    lactate_threshold_hr: Optional[int] = Field(None, gt=0, le=250)
    gender: Optional[Literal["male", "female"]] = None
    bike_ftp: Optional[int] = Field(None, gt=0)
    run_pace_per_km: Optional[int] = Field(None, gt=0, description="Easy pace in sec/km")
    swim_pace_per_100m: Optional[int] = Field(None, gt=0, description="CSS in sec/100m")


# ============================================================================
# Recovery Schemas
# ============================================================================

class RecoveryReadingRequest(BaseModel):
    """One day's recovery reading from a wearable."""

    date: dt.date
    hrv_ms: Optional[float] = Field(None, gt=0)
    resting_hr: Optional[float] = Field(None, gt=0)
