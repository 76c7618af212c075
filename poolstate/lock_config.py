"""Lock records for positions whose liquidity has been locked."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from poolstate.common import Pubkey


class LockType(Enum):
    """How a position is locked."""

    Permanent = 0


class LockTypeLabel(Enum):
    """The stored label of a lock type; its parameters are kept flat in the record."""

    Permanent = 0


_LABELS = {LockType.Permanent: LockTypeLabel.Permanent}


@dataclass
class LockConfig:
    """The lock placed on one position."""

    LEN = 8 + 32 + 32 + 32 + 8 + 1 + 128

    position: Pubkey = field(default_factory=Pubkey)
    position_owner: Pubkey = field(default_factory=Pubkey)
    whirlpool: Pubkey = field(default_factory=Pubkey)
    locked_timestamp: int = 0
    lock_type: LockTypeLabel = LockTypeLabel.Permanent

    def initialize(
        self,
        position: Pubkey,
        position_owner: Pubkey,
        whirlpool: Pubkey,
        locked_timestamp: int,
        lock_type: LockType,
    ) -> None:
        """Record the lock of a position."""
        self.position = position
        self.position_owner = position_owner
        self.whirlpool = whirlpool
        self.locked_timestamp = locked_timestamp
        self.lock_type = _LABELS[lock_type]

    def update_position_owner(self, position_owner: Pubkey) -> None:
        """Record a new owner of the locked position."""
        self.position_owner = position_owner