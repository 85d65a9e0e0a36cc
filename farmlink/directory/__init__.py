"""Call Directory: durable record of users, calls and chat messages."""

from .call_directory import CallDirectory
from .seed import seed_demo_data
from .sqlalchemy_directory import SqlAlchemyCallDirectory

__all__ = ["CallDirectory", "SqlAlchemyCallDirectory", "seed_demo_data"]
