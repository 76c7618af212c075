"""The common interface of tick arrays and the search-range arithmetic they share."""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import Optional

from poolstate.common import ErrorCode, Pubkey, WhirlpoolError
from poolstate.tick import (
    MAX_TICK_INDEX,
    MIN_TICK_INDEX,
    TICK_ARRAY_SIZE,
    Tick,
    TickUpdate,
)

DISCRIMINATOR_LEN = 8


def account_discriminator(name: str) -> bytes:
    """The 8-byte type tag that prefixes an account of the named type."""
    return hashlib.sha256(f"account:{name}".encode()).digest()[:DISCRIMINATOR_LEN]


FIXED_TICK_ARRAY_DISCRIMINATOR = account_discriminator("TickArray")
DYNAMIC_TICK_ARRAY_DISCRIMINATOR = account_discriminator("DynamicTickArray")


def get_offset(tick_index: int, start_tick_index: int, tick_spacing: int) -> int:
    """Floor of the tick distance from the array start, in units of tick spacing."""
    return (tick_index - start_tick_index) // tick_spacing


class TickArrayType(ABC):
    """A run of TICK_ARRAY_SIZE ticks starting at a fixed tick index."""

    @abstractmethod
    def is_variable_size(self) -> bool:
        """True when the array's storage grows with initialized ticks."""

    @abstractmethod
    def start_tick_index(self) -> int:
        """The tick index of the first tick in the array."""

    @abstractmethod
    def whirlpool(self) -> Pubkey:
        """The pool the array belongs to."""

    @abstractmethod
    def get_next_init_tick_index(
        self, tick_index: int, tick_spacing: int, a_to_b: bool
    ) -> Optional[int]:
        """The next initialized tick in the search direction, or None."""

    @abstractmethod
    def get_tick(self, tick_index: int, tick_spacing: int) -> Tick:
        """A copy of the tick at the given index."""

    @abstractmethod
    def update_tick(self, tick_index: int, tick_spacing: int, update: TickUpdate) -> None:
        """Store the update at the given index."""

    def in_search_range(self, tick_index: int, tick_spacing: int, shifted: bool) -> bool:
        """Whether this array holds the next tick for the index.

        Unshifted covers [start, start + size * spacing); shifted moves the
        range left by one tick spacing, for searches moving to the right.
        """
        lower = self.start_tick_index()
        upper = lower + TICK_ARRAY_SIZE * tick_spacing
        if shifted:
            lower -= tick_spacing
            upper -= tick_spacing
        return lower <= tick_index < upper

    def check_in_array_bounds(self, tick_index: int, tick_spacing: int) -> bool:
        """Whether the tick index falls inside this array."""
        return self.in_search_range(tick_index, tick_spacing, False)

    def is_min_tick_array(self) -> bool:
        """Whether this array contains the minimum tick index."""
        return self.start_tick_index() <= MIN_TICK_INDEX

    def is_max_tick_array(self, tick_spacing: int) -> bool:
        """Whether this array reaches beyond the maximum tick index."""
        return self.start_tick_index() + TICK_ARRAY_SIZE * tick_spacing > MAX_TICK_INDEX

    def tick_offset(self, tick_index: int, tick_spacing: int) -> int:
        """Position of the tick index within this array; may be negative."""
        if tick_spacing == 0:
            raise WhirlpoolError(ErrorCode.InvalidTickSpacing)
        return get_offset(tick_index, self.start_tick_index(), tick_spacing)