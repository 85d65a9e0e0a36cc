"""
Demo data for local development.

Loads one farmer, five specialists, their weekly availability and two
sample calls into an empty directory. Does nothing when users already exist.
"""

from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models import Availability, Call, CallStatus, User, UserRole
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

_PICTURE = "https://images.unsplash.com/photo-{}?auto=format&fit=crop&w=100&q=80"

DEMO_FARMER = {
    "username": "john_farmer",
    "full_name": "John Peterson",
    "email": "john@example.com",
    "bio": "Corn and soybean farmer from Iowa",
    "profile_picture": _PICTURE.format("1560343776-97e7d202ff0e"),
}

# (username, full name, specialization, bio, picture id, rating x10, total calls)
DEMO_SPECIALISTS = [
    (
        "maria_specialist",
        "Dr. Maria Rodriguez",
        "Crop Disease",
        "Plant pathologist with 10 years of experience in crop disease management",
        "1580489944761-15a19d654956",
        45,
        48,
    ),
    (
        "james_specialist",
        "Dr. James Wilson",
        "Soil Expert",
        "Soil scientist specializing in soil health and fertility management",
        "1568602471122-7832951cc4c5",
        50,
        32,
    ),
    (
        "sarah_specialist",
        "Dr. Sarah Chen",
        "Irrigation Systems",
        "Agricultural engineer focusing on efficient irrigation systems and water conservation techniques",
        "1573496359142-b8d87734a5a2",
        48,
        39,
    ),
    (
        "michael_specialist",
        "Dr. Michael Taylor",
        "Livestock Management",
        "Veterinarian with expertise in livestock health, nutrition, and sustainable farming practices",
        "1566492031773-4f4e44671857",
        47,
        41,
    ),
    (
        "priya_specialist",
        "Dr. Priya Patel",
        "Organic Farming",
        "Agricultural scientist specializing in organic farming methods and sustainable agriculture",
        "1551836022-d5d88e9218df",
        49,
        36,
    ),
]

# username -> (start, end), every day of the week
DEMO_AVAILABILITY = {
    "sarah_specialist": ("08:00", "16:00"),
    "michael_specialist": ("07:00", "15:00"),
    "priya_specialist": ("11:00", "19:00"),
}


async def seed_demo_data(session_maker: async_sessionmaker[AsyncSession]) -> bool:
    """
    Insert the demo data set if the users table is empty.

    Returns:
        True if data was inserted, False if the directory already had users
    """
    async with session_maker() as session:
        existing = await session.scalar(select(func.count()).select_from(User))
        if existing:
            logger.debug("Skipping demo seed, directory already populated", user_count=existing)
            return False

        farmer = User(role=UserRole.FARMER.value, total_calls=0, **DEMO_FARMER)
        session.add(farmer)

        specialists: dict[str, User] = {}
        for username, full_name, specialization, bio, picture, rating, total_calls in DEMO_SPECIALISTS:
            specialist = User(
                username=username,
                full_name=full_name,
                email=f"{username.split('_', 1)[0]}@example.com",
                role=UserRole.SPECIALIST.value,
                specialization=specialization,
                bio=bio,
                profile_picture=_PICTURE.format(picture),
                rating=rating,
                total_calls=total_calls,
            )
            session.add(specialist)
            specialists[username] = specialist

        await session.flush()

        for username, (start_time, end_time) in DEMO_AVAILABILITY.items():
            for day in range(7):
                session.add(
                    Availability(
                        specialist_id=specialists[username].id,
                        day_of_week=day,
                        start_time=start_time,
                        end_time=end_time,
                    )
                )

        now = datetime.now(UTC).replace(tzinfo=None)
        session.add(
            Call(
                farmer_id=farmer.id,
                specialist_id=specialists["maria_specialist"].id,
                scheduled_time=now + timedelta(days=1),
                duration=30,
                status=CallStatus.SCHEDULED.value,
                topic="Corn leaf disease identification",
            )
        )
        session.add(
            Call(
                farmer_id=farmer.id,
                specialist_id=specialists["james_specialist"].id,
                scheduled_time=now - timedelta(days=1),
                duration=45,
                status=CallStatus.COMPLETED.value,
                topic="Soil nutrient analysis discussion",
            )
        )
        await session.commit()

    logger.info("Demo data seeded", specialists=len(specialists), availability_windows=7 * len(DEMO_AVAILABILITY))
    return True
