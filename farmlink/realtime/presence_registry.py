"""
Presence registry: which live connection currently speaks for an identity.

The registry holds at most one connection per identity. Registering again
replaces the previous association (last connection wins). Removal is
conditional on the stored connection being the one that closed, so a late
close event from a superseded connection cannot evict a newer one.
"""

import threading
from typing import TYPE_CHECKING

from ..structured_logging.enhanced_logging_config import get_logger

if TYPE_CHECKING:
    from .connection import SignalingConnection

logger = get_logger(__name__)


class PresenceRegistry:
    """Thread-safe identity to connection mapping."""

    def __init__(self) -> None:
        self._connections: dict[int, "SignalingConnection"] = {}
        self._lock = threading.Lock()

    def register(self, identity: int, connection: "SignalingConnection") -> "SignalingConnection | None":
        """
        Bind identity to connection, replacing any previous binding.

        Returns:
            The connection that was superseded, or None
        """
        with self._lock:
            previous = self._connections.get(identity)
            self._connections[identity] = connection
        if previous is connection:
            return None
        return previous

    def lookup(self, identity: int) -> "SignalingConnection | None":
        with self._lock:
            return self._connections.get(identity)

    def unregister(self, identity: int, connection: "SignalingConnection") -> bool:
        """
        Remove identity's binding only if it still points at connection.

        Returns:
            True if the entry was removed
        """
        with self._lock:
            if self._connections.get(identity) is not connection:
                return False
            del self._connections[identity]
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
