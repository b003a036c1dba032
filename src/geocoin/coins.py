from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .errors import SnapshotValidationError


@dataclass(frozen=True)
class CoinToken:
    """One collectible coin, identified by the cell that minted it and a serial.

    The id ``"i:j#serial"`` is unique for the lifetime of a game as long as a
    cell never mints the same serial twice (see ``CacheRegistry``).
    """

    i: int
    j: int
    serial: int
    id: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for name in ("i", "j", "serial"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"CoinToken.{name} must be an integer, got {value!r}")
        if self.serial < 0:
            raise ValueError("CoinToken.serial must be non-negative")
        object.__setattr__(self, "id", f"{self.i}:{self.j}#{self.serial}")

    def __str__(self) -> str:
        return self.id

    def to_dict(self) -> Dict[str, int]:
        return {"i": self.i, "j": self.j, "serial": self.serial}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "CoinToken":
        if not isinstance(data, dict):
            raise SnapshotValidationError(f"Coin record must be an object, got {type(data).__name__}")
        try:
            token = CoinToken(i=data["i"], j=data["j"], serial=data["serial"])
        except KeyError as e:
            raise SnapshotValidationError(f"Coin record missing field {e}") from e
        except ValueError as e:
            raise SnapshotValidationError(str(e)) from e
        claimed = data.get("id")
        if claimed is not None and claimed != token.id:
            raise SnapshotValidationError(f"Coin id {claimed!r} does not match {token.id!r}")
        return token
