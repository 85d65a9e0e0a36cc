"""Pydantic schemas for specialist availability windows."""

from pydantic import Field, model_validator

from .common import CamelModel

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class AvailabilityCreate(CamelModel):
    """Schema for adding a weekly availability window."""

    specialist_id: int = Field(..., gt=0, description="Specialist user ID")
    day_of_week: int = Field(..., ge=0, le=6, description="0 (Sunday) to 6 (Saturday)")
    start_time: str = Field(..., pattern=HHMM_PATTERN, description="Window start, HH:MM")
    end_time: str = Field(..., pattern=HHMM_PATTERN, description="Window end, HH:MM")

    @model_validator(mode="after")
    def validate_window(self) -> "AvailabilityCreate":
        # Zero-padded HH:MM strings compare in time order
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class AvailabilityRead(CamelModel):
    id: int
    specialist_id: int
    day_of_week: int
    start_time: str
    end_time: str
