"""Pydantic schemas for users as exposed by the REST API."""

from pydantic import Field

from ..models.user import User
from .common import CamelModel


class UserSummary(CamelModel):
    """Compact participant card embedded in call and message listings."""

    id: int = Field(..., description="User ID")
    full_name: str = Field(..., description="Display name")
    role: str = Field(..., description="farmer or specialist")
    specialization: str | None = Field(None, description="Specialist's field")
    profile_picture: str | None = Field(None, description="Profile picture URL")


class UserRead(CamelModel):
    """Public user profile."""

    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Login name")
    full_name: str = Field(..., description="Display name")
    email: str = Field(..., description="Contact email")
    role: str = Field(..., description="farmer or specialist")
    specialization: str | None = Field(None, description="Specialist's field")
    bio: str | None = Field(None, description="Profile text")
    profile_picture: str | None = Field(None, description="Profile picture URL")
    rating: float | None = Field(None, ge=0, le=5, description="Average rating, 0-5")
    total_calls: int = Field(0, ge=0, description="Number of calls taken")

    @classmethod
    def from_user(cls, user: User) -> "UserRead":
        return cls(
            id=user.id,
            username=user.username,
            full_name=user.full_name,
            email=user.email,
            role=user.role,
            specialization=user.specialization,
            bio=user.bio,
            profile_picture=user.profile_picture,
            rating=user.display_rating,
            total_calls=user.total_calls,
        )
