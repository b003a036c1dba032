import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventBus:
    """Simple in-process event bus for game events.

    Subscribers are keyed by event class; events are emitted by instance.
    Dispatch is synchronous so every handler has run by the time ``emit`` returns.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._subscribers: Dict[Type[Any], List[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        with self._lock:
            self._subscribers.setdefault(event_type, []).append(handler)  # type: ignore[arg-type]


    def emit(self, event: Any) -> None:
        with self._lock:
            targets = [
                h
                for event_type, handlers in self._subscribers.items()
                if isinstance(event, event_type)
                for h in handlers
            ]
        logger.debug("Emitting %s to %d handlers", type(event).__name__, len(targets))
        for h in targets:
            h(event)


@dataclass(frozen=True)
class InventoryChanged:
    size: int
    token_ids: Tuple[str, ...]
    reason: str  # "collect", "deposit", "reset", "restore"


@dataclass(frozen=True)
class CacheChanged:
    i: int
    j: int
    count: int
    reason: str  # "collect", "deposit"


@dataclass(frozen=True)
class CacheSpawned:
    i: int
    j: int
    count: int


@dataclass(frozen=True)
class PlayerMoved:
    lat: float
    lng: float
    i: int
    j: int


@dataclass(frozen=True)
class WorldRestored:
    cells: int
    player_coins: int
