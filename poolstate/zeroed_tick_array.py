"""A stand-in tick array for accounts that have not been created yet."""

from __future__ import annotations

from typing import Optional

from poolstate.common import ErrorCode, Pubkey, WhirlpoolError
from poolstate.tick import Tick, TickUpdate, check_is_usable_tick
from poolstate.tick_array import TickArrayType


class ZeroedTickArray(TickArrayType):
    """A tick array whose every tick is uninitialized and which cannot be written."""

    def __init__(self, start_tick_index: int) -> None:
        self._start_tick_index = start_tick_index

    def is_variable_size(self) -> bool:
        return False

    def start_tick_index(self) -> int:
        return self._start_tick_index

    def whirlpool(self) -> Pubkey:
        raise RuntimeError("a zeroed tick array belongs to no pool")

    def get_next_init_tick_index(
        self, tick_index: int, tick_spacing: int, a_to_b: bool
    ) -> Optional[int]:
        if not self.in_search_range(tick_index, tick_spacing, not a_to_b):
            raise WhirlpoolError(ErrorCode.InvalidTickArraySequence)
        self.tick_offset(tick_index, tick_spacing)
        return None

    def get_tick(self, tick_index: int, tick_spacing: int) -> Tick:
        if not self.check_in_array_bounds(tick_index, tick_spacing) or not check_is_usable_tick(
            tick_index, tick_spacing
        ):
            raise WhirlpoolError(ErrorCode.TickNotFound)
        if self.tick_offset(tick_index, tick_spacing) < 0:
            raise WhirlpoolError(ErrorCode.TickNotFound)
        return Tick()

    def update_tick(self, tick_index: int, tick_spacing: int, update: TickUpdate) -> None:
        raise RuntimeError("a zeroed tick array must not be updated")