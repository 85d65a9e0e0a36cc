"""
Shared schema helpers.

REST payloads use camelCase on the wire, matching the web client, while the
Python side keeps snake_case attribute names.
"""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


def format_utc(value: datetime) -> str:
    """ISO 8601 UTC with millisecond precision and a 'Z' suffix."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def to_naive_utc(value: datetime) -> datetime:
    """Normalize to the naive UTC datetimes the database stores."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


# Inbound: accepts any ISO 8601 value and stores it as naive UTC. Outbound: "...Z".
UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc), PlainSerializer(format_utc, return_type=str)]


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
