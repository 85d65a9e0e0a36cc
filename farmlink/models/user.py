"""User model: farmers and the specialists they consult."""

from enum import Enum

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class UserRole(str, Enum):
    """Account roles."""

    FARMER = "farmer"
    SPECIALIST = "specialist"


class User(Base):
    """
    A FarmLink account.

    Credentials live with the external authentication service, so no
    password material is stored here.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(length=255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(length=255), nullable=False)
    email: Mapped[str] = mapped_column(String(length=255), nullable=False)
    role: Mapped[str] = mapped_column(String(length=32), nullable=False, default=UserRole.FARMER.value)
    specialization: Mapped[str | None] = mapped_column(String(length=255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_picture: Mapped[str | None] = mapped_column(String(length=1024), nullable=True)
    # Stored multiplied by 10 (45 means 4.5 stars)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_calls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def display_rating(self) -> float | None:
        """Rating on the 0-5 scale shown to clients."""
        if self.rating is None:
            return None
        return self.rating / 10

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r}, role={self.role!r})>"
