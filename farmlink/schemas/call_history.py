"""Pydantic schemas for call history entries."""

from pydantic import Field, model_validator

from .common import CamelModel, UtcDatetime


class CallHistoryCreate(CamelModel):
    """Schema for recording how a call went."""

    call_id: int = Field(..., gt=0, description="Call ID")
    start_time: UtcDatetime = Field(..., description="When the call started")
    end_time: UtcDatetime | None = Field(None, description="When the call ended")
    duration: int | None = Field(None, ge=0, description="Duration in seconds")
    feedback: int | None = Field(None, ge=1, le=5, description="Rating from 1 to 5")
    feedback_notes: str | None = Field(None, description="Feedback comments")

    @model_validator(mode="after")
    def validate_time_order(self) -> "CallHistoryCreate":
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError("endTime must not be before startTime")
        return self


class CallHistoryRead(CamelModel):
    id: int
    call_id: int
    start_time: UtcDatetime
    end_time: UtcDatetime | None = None
    duration: int | None = None
    feedback: int | None = None
    feedback_notes: str | None = None
