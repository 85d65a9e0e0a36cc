"""
Pydantic schemas for call records.

CallCreate and CallStatusUpdate validate REST input; CallRead and
CallWithParticipants shape responses.
"""

from pydantic import Field, model_validator

from ..models.call import CallStatus
from .common import CamelModel, UtcDatetime
from .user import UserSummary


class CallCreate(CamelModel):
    """Schema for scheduling a new call."""

    farmer_id: int = Field(..., gt=0, description="Farmer user ID")
    specialist_id: int = Field(..., gt=0, description="Specialist user ID")
    scheduled_time: UtcDatetime = Field(..., description="Scheduled start time")
    duration: int = Field(..., gt=0, le=24 * 60, description="Planned duration in minutes")
    status: CallStatus = Field(default=CallStatus.SCHEDULED, description="Initial status")
    topic: str | None = Field(None, max_length=500, description="Consultation topic")
    notes: str | None = Field(None, description="Free-form notes")

    @model_validator(mode="after")
    def validate_distinct_participants(self) -> "CallCreate":
        if self.farmer_id == self.specialist_id:
            raise ValueError("farmerId and specialistId must differ")
        return self

    model_config = CamelModel.model_config | {
        "json_schema_extra": {
            "example": {
                "farmerId": 1,
                "specialistId": 2,
                "scheduledTime": "2025-05-01T09:00:00.000Z",
                "duration": 30,
                "topic": "Corn leaf disease identification",
            }
        }
    }


class CallStatusUpdate(CamelModel):
    status: CallStatus = Field(..., description="New call status")


class CallRead(CamelModel):
    id: int = Field(..., description="Call ID")
    farmer_id: int
    specialist_id: int
    scheduled_time: UtcDatetime
    duration: int
    status: CallStatus
    topic: str | None = None
    notes: str | None = None


class CallWithParticipants(CallRead):
    """Call listing entry with both participants' summaries attached."""

    farmer: UserSummary | None = None
    specialist: UserSummary | None = None
