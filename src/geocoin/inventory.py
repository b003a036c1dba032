from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional

from .coins import CoinToken
from .events import EventBus, InventoryChanged

logger = logging.getLogger(__name__)


class Inventory:
    """Coins held by the player, most recently collected last.

    Removal is LIFO: a deposit always gives back the coin picked up last.
    Every change emits InventoryChanged on the bus so displays can refresh.
    """

    def __init__(self, event_bus: Optional[EventBus] = None) -> None:
        self.event_bus = event_bus or EventBus()
        self._tokens: List[CoinToken] = []

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[CoinToken]:
        return iter(list(self._tokens))

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    @property
    def size(self) -> int:
        return len(self._tokens)

    @property
    def tokens(self) -> List[CoinToken]:
        return list(self._tokens)

    def add(self, token: CoinToken, reason: str = "collect") -> None:
        self._tokens.append(token)
        logger.debug("Inventory +%s (size=%d)", token.id, len(self._tokens))
        self._notify(reason)

    def remove_last(self, reason: str = "deposit") -> Optional[CoinToken]:
        if not self._tokens:
            return None
        token = self._tokens.pop()
        logger.debug("Inventory -%s (size=%d)", token.id, len(self._tokens))
        self._notify(reason)
        return token

    def replace(self, tokens: Iterable[CoinToken], reason: str = "restore") -> None:
        self._tokens = list(tokens)
        self._notify(reason)

    def clear(self, reason: str = "reset") -> None:
        self._tokens = []
        self._notify(reason)

    def _notify(self, reason: str) -> None:
        self.event_bus.emit(
            InventoryChanged(
                size=len(self._tokens),
                token_ids=tuple(t.id for t in self._tokens),
                reason=reason,
            )
        )
