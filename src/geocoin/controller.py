from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .cache import CacheRegistry
from .coins import CoinToken
from .config import GameplayConfig
from .events import CacheChanged, CacheSpawned, EventBus, PlayerMoved, WorldRestored
from .grid import Cell, LatLng, cell_for, neighborhood
from .inventory import Inventory
from .luck import HashLuck, Luck, cell_key
from .snapshot import capture, restore

logger = logging.getLogger(__name__)


class Direction(Enum):
    """One grid step in each compass direction, as (lat steps, lng steps)."""

    NORTH = (1, 0)
    SOUTH = (-1, 0)
    EAST = (0, 1)
    WEST = (0, -1)


class CacheView:
    """What the UI sees of one cache: its coins and the two buttons."""

    def __init__(self, controller: "GameController", i: int, j: int) -> None:
        self._controller = controller
        self.i = i
        self.j = j

    @property
    def cell(self) -> Cell:
        return Cell(self.i, self.j)

    @property
    def tokens(self) -> List[CoinToken]:
        return list(self._controller.registry.get_cache(self.i, self.j))

    @property
    def count(self) -> int:
        return len(self._controller.registry.get_cache(self.i, self.j))

    def collect(self) -> Optional[CoinToken]:
        return self._controller.collect(self.i, self.j)

    def deposit(self) -> Optional[CoinToken]:
        return self._controller.deposit(self.i, self.j)

    def __repr__(self) -> str:
        return f"CacheView({self.i},{self.j} count={self.count})"


class GameController:
    """Owns one game session: player, inventory, cache registry and luck oracle.

    All operations are synchronous and run to completion, so the registry is
    never observed mid-transaction.
    """

    def __init__(
        self,
        config: Optional[GameplayConfig] = None,
        luck: Optional[Luck] = None,
        registry: Optional[CacheRegistry] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.config = config or GameplayConfig()
        self.luck: Luck = luck or HashLuck(self.config.seed)
        self.registry = registry or CacheRegistry(max_initial_coins=self.config.max_initial_coins)
        self.event_bus = event_bus or EventBus()
        self.inventory = Inventory(self.event_bus)
        self.origin = LatLng(self.config.origin_lat, self.config.origin_lng)
        self.position = self.origin
        self._visible: Dict[Tuple[int, int], CacheView] = {}
        self.regenerate()
        logger.info("Game session started at %s", self.position)

    # -- player ---------------------------------------------------------

    @property
    def player_coins(self) -> int:
        """The player's coin count, always equal to the inventory size."""
        return len(self.inventory)

    @property
    def player_cell(self) -> Cell:
        return cell_for(self.position, self.config.tile_degrees)

    def move(self, direction: Direction) -> List[CacheView]:
        dlat, dlng = direction.value
        step = self.config.tile_degrees
        return self._set_position(self.position.offset(dlat * step, dlng * step))

    def reset(self) -> List[CacheView]:
        """Return to the origin and drop every coin the player holds."""
        dropped = len(self.inventory)
        self.inventory.clear(reason="reset")
        logger.info("Player reset to origin; %d held coins discarded", dropped)
        return self._set_position(self.origin)

    def _set_position(self, position: LatLng) -> List[CacheView]:
        self.position = position
        cell = self.player_cell
        self.event_bus.emit(PlayerMoved(lat=position.lat, lng=position.lng, i=cell.i, j=cell.j))
        return self.regenerate()

    # -- caches ---------------------------------------------------------

    def spawn_roll(self, i: int, j: int) -> bool:
        return self.luck(cell_key(i, j)) < self.config.spawn_probability

    def should_display(self, i: int, j: int) -> bool:
        """Decide whether a cell shows a cache, generating it on first sight.

        A cell holding coins always shows. A never generated cell shows (and is
        generated) when its spawn roll passes. A generated, emptied cell stays
        hidden unless regrowth is enabled and the roll passes again. A batch
        whose coin roll floors to zero shows nothing: the cell is generated and
        already depleted.
        """
        record = self.registry.get(i, j)
        if record is not None and record.tokens:
            return True
        if record is None or not record.generated:
            if not self.spawn_roll(i, j):
                return False
            tokens = self.registry.generate(i, j, self.luck)
            if not tokens:
                return False
            self.event_bus.emit(CacheSpawned(i=i, j=j, count=len(tokens)))
            return True
        if self.config.allow_regrowth and self.spawn_roll(i, j):
            fresh = self.registry.regrow(i, j, self.luck)
            if not fresh:
                return False
            self.event_bus.emit(CacheSpawned(i=i, j=j, count=len(fresh)))
            return True
        return False

    def regenerate(self) -> List[CacheView]:
        """Recompute the caches shown around the player."""
        visible: Dict[Tuple[int, int], CacheView] = {}
        for cell in neighborhood(self.player_cell, self.config.neighborhood_size):
            if self.should_display(cell.i, cell.j):
                visible[(cell.i, cell.j)] = self._visible.get((cell.i, cell.j)) or CacheView(self, cell.i, cell.j)
        self._visible = visible
        logger.debug("Regenerated around %s: %d caches visible", self.player_cell, len(visible))
        return list(visible.values())

    def visible_caches(self) -> List[CacheView]:
        return list(self._visible.values())

    def view(self, i: int, j: int) -> CacheView:
        return self._visible.get((i, j)) or CacheView(self, i, j)

    # -- transactions ---------------------------------------------------

    def collect(self, i: int, j: int) -> Optional[CoinToken]:
        """Move the cache's last coin into the inventory.

        Returns the coin, or None (and changes nothing) when the cache is empty.
        """
        coins = list(self.registry.get_cache(i, j))
        if not coins:
            logger.debug("Collect ignored: cache %s,%s is empty", i, j)
            return None
        token = coins.pop()
        self.registry.save(i, j, coins)
        self.inventory.add(token, reason="collect")
        self.event_bus.emit(CacheChanged(i=i, j=j, count=len(coins), reason="collect"))
        return token

    def deposit(self, i: int, j: int) -> Optional[CoinToken]:
        """Move the most recently collected coin into the cache.

        Returns the coin, or None (and changes nothing) when the player has none.
        """
        if self.player_coins <= 0:
            logger.debug("Deposit ignored: player holds no coins")
            return None
        token = self.inventory.remove_last(reason="deposit")
        if token is None:  # pragma: no cover - coin count is the inventory size
            return None
        coins = list(self.registry.get_cache(i, j))
        coins.append(token)
        self.registry.save(i, j, coins)
        self.event_bus.emit(CacheChanged(i=i, j=j, count=len(coins), reason="deposit"))
        return token

    # -- memento --------------------------------------------------------

    def save_state(self) -> str:
        return capture(self.position, self.player_coins, self.registry, self.inventory.tokens)

    def restore_state(self, text: str) -> None:
        """Load a snapshot string. Raises SnapshotValidationError, leaving state untouched."""
        snapshot = restore(text, self.registry)
        self.position = snapshot.player_position
        self.inventory.replace(snapshot.player_inventory or [], reason="restore")
        self._visible = {}
        self.regenerate()
        self.event_bus.emit(WorldRestored(cells=len(snapshot.cache_states), player_coins=self.player_coins))
