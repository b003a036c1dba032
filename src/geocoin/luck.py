from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, Union

logger = logging.getLogger(__name__)

# Any deterministic ``str -> float in [0, 1)`` callable can act as the oracle.
Luck = Callable[[str], float]

INITIAL_COINS_TAG = "initialCoins"


def cell_key(i: int, j: int, *extra: Any) -> str:
    """Compose an oracle key the way the original game does (``"i,j[,extra]"``).

    Saved games and recorded test vectors depend on this exact format.
    """
    return ",".join(str(part) for part in (i, j, *extra))


@dataclass(frozen=True)
class HashLuck:
    """Default deterministic luck oracle.

    Hashes ``seed`` and the key with BLAKE2b and maps the first 53 bits onto
    [0, 1), so the same seed and key always produce the same float, on any
    platform and Python version.
    """

    seed: Union[str, bytes] = ""

    def __post_init__(self) -> None:
        seed = self.seed.encode("utf-8") if isinstance(self.seed, str) else bytes(self.seed)
        object.__setattr__(self, "_seed_bytes", seed)
        logger.debug("Luck oracle seeded with %r", self.seed)

    def __call__(self, key: str) -> float:
        data = self._seed_bytes + b"\x1f" + key.encode("utf-8")
        h = hashlib.blake2b(data, digest_size=8)
        value = int.from_bytes(h.digest(), "big") >> 11
        return value / float(1 << 53)
