import logging
from typing import Awaitable, Callable, List

from clothing_inventory.core.observability import log_event

logger = logging.getLogger("clothing_inventory.sync")

NetworkListener = Callable[[bool], Awaitable[None]]


class NetworkMonitor:
    """Holds the connectivity state reported by the host and fans out transitions."""

    def __init__(self, online: bool = True):
        self._online = online
        self._listeners: List[NetworkListener] = []

    @property
    def online(self) -> bool:
        return self._online

    def add_listener(self, listener: NetworkListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def set_online(self, online: bool) -> bool:
        """Record the new state; listeners only hear about real transitions."""
        if online == self._online:
            return False
        self._online = online
        log_event(logger, "network_online" if online else "network_offline")
        for listener in list(self._listeners):
            await listener(online)
        return True
