from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .coins import CoinToken
from .errors import CacheAlreadyGenerated, SnapshotValidationError
from .luck import INITIAL_COINS_TAG, Luck, cell_key

logger = logging.getLogger(__name__)

DEFAULT_MAX_INITIAL_COINS = 10


def encode_tokens(tokens: Iterable[CoinToken]) -> str:
    """Encode an ordered token sequence as a compact JSON list of {i, j, serial}."""
    return json.dumps([t.to_dict() for t in tokens], separators=(",", ":"))


def decode_tokens(text: str) -> List[CoinToken]:
    """Decode the output of :func:`encode_tokens`, preserving order."""
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise SnapshotValidationError(f"Invalid cache JSON: {e}") from e
    if not isinstance(data, list):
        raise SnapshotValidationError("Cache state must be a JSON list of coins")
    return [CoinToken.from_dict(item) for item in data]


@dataclass
class CacheRecord:
    """The coins currently resident in one cell.

    ``next_serial`` is the lowest serial this cell has not minted yet; it only
    ever grows, so a serial is never handed out twice for the same cell.
    """

    i: int
    j: int
    tokens: List[CoinToken] = field(default_factory=list)
    generated: bool = False
    next_serial: int = 0

    @property
    def key(self) -> str:
        return cell_key(self.i, self.j)

    @property
    def count(self) -> int:
        return len(self.tokens)

    @property
    def untouched(self) -> bool:
        """Only looked at: never generated and holding no coins."""
        return not self.generated and not self.tokens


class CacheRegistry:
    """Coordinate-indexed table of cache records.

    Exactly one record exists per coordinate; records are created lazily on
    first access and live as long as the registry. The registry is a plain
    object owned by the game session and passed to whoever needs it.
    """

    def __init__(self, max_initial_coins: int = DEFAULT_MAX_INITIAL_COINS) -> None:
        self.max_initial_coins = max_initial_coins
        self._records: Dict[Tuple[int, int], CacheRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, coord: object) -> bool:
        return coord in self._records

    def records(self) -> Iterator[CacheRecord]:
        """Iterate records in the order they were first created."""
        return iter(list(self._records.values()))

    def get(self, i: int, j: int) -> Optional[CacheRecord]:
        return self._records.get((i, j))

    def get_or_create(self, i: int, j: int) -> CacheRecord:
        record = self._records.get((i, j))
        if record is None:
            record = CacheRecord(i, j)
            self._records[(i, j)] = record
            logger.debug("Created cache record for cell %s", record.key)
        return record

    def get_cache(self, i: int, j: int) -> List[CoinToken]:
        return self.get_or_create(i, j).tokens

    def save(self, i: int, j: int, tokens: Sequence[CoinToken]) -> None:
        """Replace the resident coins of a cell. Provenance is not checked."""
        self.get_or_create(i, j).tokens = list(tokens)

    def is_generated(self, i: int, j: int) -> bool:
        record = self._records.get((i, j))
        return record is not None and record.generated

    def initial_count(self, i: int, j: int, luck: Luck) -> int:
        return math.floor(luck(cell_key(i, j, INITIAL_COINS_TAG)) * self.max_initial_coins)

    def generate(self, i: int, j: int, luck: Luck) -> List[CoinToken]:
        """Populate a never-generated cell with its deterministic coins.

        The coin count comes from the ``"i,j,initialCoins"`` luck roll and the
        serials run from 0. A second call for the same cell would mint
        serials that may already be held elsewhere, so it is refused.
        """
        record = self.get_or_create(i, j)
        if record.generated:
            raise CacheAlreadyGenerated(f"Cache {record.key} was already generated")
        count = self.initial_count(i, j, luck)
        record.tokens = [CoinToken(i, j, serial) for serial in range(count)]
        record.generated = True
        record.next_serial = count
        logger.debug("Generated cache %s with %d coins", record.key, count)
        return list(record.tokens)

    def regrow(self, i: int, j: int, luck: Luck) -> List[CoinToken]:
        """Mint another batch of coins for an already generated cell.

        The batch has the same deterministic size as the initial one; its
        serials continue from ``next_serial``. Returns the new coins only.
        """
        record = self.get_or_create(i, j)
        if not record.generated:
            return self.generate(i, j, luck)
        count = self.initial_count(i, j, luck)
        start = record.next_serial
        fresh = [CoinToken(i, j, serial) for serial in range(start, start + count)]
        record.tokens.extend(fresh)
        record.next_serial = start + count
        logger.debug("Regrew cache %s with %d coins (serials from %d)", record.key, count, start)
        return fresh

    def serialize(self, i: int, j: int) -> str:
        return encode_tokens(self.get_cache(i, j))

    def deserialize(self, i: int, j: int, text: str) -> None:
        """Replace a cell's coins with the decoded ``text``.

        The record is marked generated so the cell is never populated again.
        """
        tokens = decode_tokens(text)
        self.restore_record(i, j, tokens)

    def restore_record(
        self, i: int, j: int, tokens: Sequence[CoinToken], generated: bool = True
    ) -> CacheRecord:
        record = self.get_or_create(i, j)
        record.tokens = list(tokens)
        record.generated = generated
        own = [t.serial for t in tokens if t.i == i and t.j == j]
        if own:
            record.next_serial = max(record.next_serial, max(own) + 1)
        return record

    def note_serials(self, tokens: Iterable[CoinToken]) -> None:
        """Raise ``next_serial`` of known origin cells past the given coins.

        Used after a restore so coins held outside their origin cell (in the
        inventory or another cache) still reserve their serials.
        """
        for t in tokens:
            record = self._records.get((t.i, t.j))
            if record is not None and record.next_serial <= t.serial:
                record.next_serial = t.serial + 1
