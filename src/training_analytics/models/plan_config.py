"""Versioned zone configuration of an athlete's active training plan."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..exceptions import ZoneConfigError
from ..metrics.pace import PLAN_PACE_ZONE_RATIOS, calculate_plan_pace_zones
from ..metrics.power import PLAN_POWER_ZONE_RATIOS, calculate_plan_power_zones


PLAN_ZONE_CONFIG_VERSION = 1


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


class ZoneRange(BaseModel):
    """Inclusive range for one zone (watts or sec/km)."""

    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "ZoneRange":
        if self.min > self.max:
            raise ValueError(f"zone min {self.min} exceeds max {self.max}")
        return self


class PlanZoneConfig(BaseModel):
    """
    Zone tables stored with the active plan.

    Power zones are keyed z1-z5, pace zones by workout type (easy,
    moderate, tempo, threshold, interval, longRun). Serialized with
    camelCase keys.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    version: int = Field(default=PLAN_ZONE_CONFIG_VERSION, description="Schema version")
    ftp_watts: Optional[int] = Field(None, description="FTP the power zones derive from")
    easy_pace_sec_per_km: Optional[int] = Field(None, description="Easy pace the pace zones derive from")
    power_zones: Optional[Dict[str, ZoneRange]] = Field(None, description="Power zones in watts")
    pace_zones: Optional[Dict[str, ZoneRange]] = Field(None, description="Pace zones in sec/km")
    swim_css_sec_per_100m: Optional[int] = Field(None, description="Critical swim speed pace")
    updated_at: Optional[datetime] = None

    @field_validator("version")
    @classmethod
    def check_version(cls, v: int) -> int:
        if v < 1 or v > PLAN_ZONE_CONFIG_VERSION:
            raise ValueError(f"unsupported zone config version {v}")
        return v

    @field_validator("power_zones")
    @classmethod
    def check_power_zone_keys(cls, v: Optional[Dict[str, ZoneRange]]) -> Optional[Dict[str, ZoneRange]]:
        if v is not None and set(v) != set(PLAN_POWER_ZONE_RATIOS):
            raise ValueError(f"power zones must be {sorted(PLAN_POWER_ZONE_RATIOS)}")
        return v

    @field_validator("pace_zones")
    @classmethod
    def check_pace_zone_keys(cls, v: Optional[Dict[str, ZoneRange]]) -> Optional[Dict[str, ZoneRange]]:
        if v is not None and set(v) != set(PLAN_PACE_ZONE_RATIOS):
            raise ValueError(f"pace zones must be {sorted(PLAN_PACE_ZONE_RATIOS)}")
        return v

    def with_ftp(self, ftp: int) -> "PlanZoneConfig":
        """Copy with power zones recomputed from a new FTP."""
        zones = {
            name: ZoneRange(min=low, max=high)
            for name, (low, high) in calculate_plan_power_zones(ftp).items()
        }
        return self.model_copy(update={
            "ftp_watts": ftp,
            "power_zones": zones,
            "updated_at": datetime.now(),
        })

    def with_easy_pace(self, easy_pace: int) -> "PlanZoneConfig":
        """Copy with pace zones recomputed from a new easy pace."""
        zones = {
            name: ZoneRange(min=low, max=high)
            for name, (low, high) in calculate_plan_pace_zones(easy_pace).items()
        }
        return self.model_copy(update={
            "easy_pace_sec_per_km": easy_pace,
            "pace_zones": zones,
            "updated_at": datetime.now(),
        })

    def with_swim_css(self, css: int) -> "PlanZoneConfig":
        return self.model_copy(update={
            "swim_css_sec_per_100m": css,
            "updated_at": datetime.now(),
        })

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def parse_plan_zone_config(raw: Optional[str]) -> Optional[PlanZoneConfig]:
    """
    Validate a stored zone configuration.

    Raises:
        ZoneConfigError: If the stored JSON does not match the schema
    """
    if not raw:
        return None
    try:
        return PlanZoneConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ZoneConfigError(
            "Stored plan zone configuration is invalid",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
