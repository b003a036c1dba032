"""World save/restore (memento).

A snapshot is a single JSON string::

    {
      "playerPosition": {"lat": ..., "lng": ...},
      "playerCoins": 3,
      "cacheStates": [["i,j", "<cache JSON>"], ...],
      "playerInventory": "<cache JSON>",
      "ungeneratedCells": ["i,j", ...]
    }

where ``<cache JSON>`` is the per-cell encoding of ``geocoin.cache``.
``playerInventory`` is optional on input so that snapshots written without
token identities still load when the player holds no coins.

Cells that were only looked at (never generated, empty) are left out; they
are indistinguishable from cells never visited. Cells holding deposited coins
but never generated are listed in ``ungeneratedCells`` so they can still
spawn after a restore. Every other restored cell counts as generated.

Restoring is all-or-nothing: the whole string is parsed, schema-checked and
every cell decoded before the registry is touched.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from importlib.resources import files as resource_files
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft202012Validator

from .cache import CacheRegistry, decode_tokens, encode_tokens
from .coins import CoinToken
from .errors import SnapshotValidationError
from .grid import Cell, LatLng

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _snapshot_validator() -> Draft202012Validator:
    text = resource_files("geocoin.schemas").joinpath("snapshot.schema.json").read_text(encoding="utf-8")
    schema = json.loads(text)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_snapshot_dict(data: Any) -> None:
    """Validate decoded snapshot JSON against the bundled schema.

    Raises SnapshotValidationError describing the first error found.
    """
    errors = sorted(_snapshot_validator().iter_errors(data), key=lambda e: list(e.path))
    if errors:
        for err in errors:
            logger.debug("Snapshot schema error at %s: %s", list(err.path) or "<root>", err.message)
        first = errors[0]
        where = "/".join(str(p) for p in first.path) or "<root>"
        raise SnapshotValidationError(f"Invalid snapshot at {where}: {first.message}")


@dataclass
class WorldSnapshot:
    player_position: LatLng
    player_coins: int
    cache_states: Dict[str, str] = field(default_factory=dict)
    player_inventory: Optional[List[CoinToken]] = None
    ungenerated_cells: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "playerPosition": self.player_position.to_dict(),
            "playerCoins": self.player_coins,
            "cacheStates": [[key, state] for key, state in self.cache_states.items()],
        }
        if self.player_inventory is not None:
            data["playerInventory"] = encode_tokens(self.player_inventory)
        if self.ungenerated_cells:
            data["ungeneratedCells"] = list(self.ungenerated_cells)
        return data

    def to_string(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return self.to_string()

    @staticmethod
    def from_string(text: str) -> "WorldSnapshot":
        try:
            data = json.loads(text)
        except (TypeError, json.JSONDecodeError) as e:
            raise SnapshotValidationError(f"Invalid snapshot JSON: {e}") from e
        validate_snapshot_dict(data)

        pos = data["playerPosition"]
        inventory: Optional[List[CoinToken]] = None
        if "playerInventory" in data:
            inventory = decode_tokens(data["playerInventory"])
        snapshot = WorldSnapshot(
            player_position=LatLng(float(pos["lat"]), float(pos["lng"])),
            player_coins=int(data["playerCoins"]),
            cache_states={key: state for key, state in data["cacheStates"]},
            player_inventory=inventory,
            ungenerated_cells=list(data.get("ungeneratedCells", [])),
        )
        snapshot.check_coins()
        return snapshot

    def check_coins(self) -> None:
        """Ensure the coin count can be backed by actual tokens."""
        if self.player_inventory is None:
            if self.player_coins > 0:
                raise SnapshotValidationError(
                    f"Snapshot holds {self.player_coins} coins but no inventory tokens"
                )
        elif len(self.player_inventory) != self.player_coins:
            raise SnapshotValidationError(
                f"playerCoins={self.player_coins} does not match "
                f"{len(self.player_inventory)} inventory tokens"
            )

    def decode_cells(self) -> List[Tuple[Cell, List[CoinToken]]]:
        """Decode every cell entry. Raises before returning anything if one is bad."""
        cells: List[Tuple[Cell, List[CoinToken]]] = []
        for key, state in self.cache_states.items():
            try:
                cell = Cell.from_key(key)
            except ValueError as e:
                raise SnapshotValidationError(str(e)) from e
            cells.append((cell, decode_tokens(state)))
        missing = [key for key in self.ungenerated_cells if key not in self.cache_states]
        if missing:
            raise SnapshotValidationError(f"ungeneratedCells without cache state: {missing}")
        return cells


def capture(
    position: LatLng,
    coin_count: int,
    registry: CacheRegistry,
    inventory: Optional[List[CoinToken]] = None,
) -> str:
    """Serialize the player and every record the registry holds.

    Records that were only looked at are skipped.
    """
    kept = [record for record in registry.records() if not record.untouched]
    snapshot = WorldSnapshot(
        player_position=position,
        player_coins=coin_count,
        cache_states={record.key: registry.serialize(record.i, record.j) for record in kept},
        player_inventory=list(inventory) if inventory is not None else None,
        ungenerated_cells=[record.key for record in kept if not record.generated],
    )
    logger.info("Captured snapshot: %d cells, %d coins", len(snapshot.cache_states), coin_count)
    return snapshot.to_string()


def restore(text: str, registry: CacheRegistry) -> WorldSnapshot:
    """Write a snapshot's caches back into ``registry`` and return the snapshot.

    The caller applies position, coin count and inventory from the result.
    On SnapshotValidationError the registry is unchanged.
    """
    snapshot = WorldSnapshot.from_string(text)
    cells = snapshot.decode_cells()

    ungenerated = set(snapshot.ungenerated_cells)
    for cell, tokens in cells:
        registry.restore_record(cell.i, cell.j, tokens, generated=cell.key not in ungenerated)
    if snapshot.player_inventory:
        registry.note_serials(snapshot.player_inventory)
    for _, tokens in cells:
        registry.note_serials(tokens)
    logger.info("Restored snapshot: %d cells, %d coins", len(cells), snapshot.player_coins)
    return snapshot


__all__ = ["WorldSnapshot", "capture", "restore", "validate_snapshot_dict"]
