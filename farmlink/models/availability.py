"""Weekly availability windows for specialists."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Availability(Base):
    """One weekly window. day_of_week is 0 (Sunday) to 6; times are HH:MM."""

    __tablename__ = "availability"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    specialist_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[str] = mapped_column(String(length=5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(length=5), nullable=False)
