"""Specialist availability endpoints."""

from fastapi import APIRouter, status

from ..dependencies import CallDirectoryDep
from ..directory import CallDirectory
from ..schemas import AvailabilityCreate, AvailabilityRead

availability_router = APIRouter(prefix="/api/availability", tags=["availability"])


@availability_router.post("", response_model=AvailabilityRead, status_code=status.HTTP_201_CREATED)
async def create_availability(
    payload: AvailabilityCreate, directory: CallDirectory = CallDirectoryDep
) -> AvailabilityRead:
    window = await directory.create_availability(payload)
    return AvailabilityRead.model_validate(window)


@availability_router.get("/{specialist_id}", response_model=list[AvailabilityRead])
async def list_availability(
    specialist_id: int, directory: CallDirectory = CallDirectoryDep
) -> list[AvailabilityRead]:
    """Weekly windows, ordered by day of week then start time."""
    windows = await directory.get_availability_by_specialist(specialist_id)
    return [AvailabilityRead.model_validate(window) for window in windows]
