"""The ordered tick arrays a swap walks through."""

from __future__ import annotations

from typing import Optional

from poolstate.common import ErrorCode, WhirlpoolError
from poolstate.tick import MAX_TICK_INDEX, MIN_TICK_INDEX, TICK_ARRAY_SIZE, Tick, TickUpdate
from poolstate.tick_array import TickArrayType


class SwapTickSequence:
    """Up to three consecutive tick arrays in swap direction order."""

    def __init__(
        self,
        ta0: TickArrayType,
        ta1: Optional[TickArrayType] = None,
        ta2: Optional[TickArrayType] = None,
    ) -> None:
        self.arrays: list[TickArrayType] = [ta for ta in (ta0, ta1, ta2) if ta is not None]

    def _array(self, array_index: int) -> TickArrayType:
        if not 0 <= array_index < len(self.arrays):
            raise WhirlpoolError(ErrorCode.TickArrayIndexOutofBounds)
        return self.arrays[array_index]

    def get_tick(self, array_index: int, tick_index: int, tick_spacing: int) -> Tick:
        """The tick at the index within the array at array_index."""
        return self._array(array_index).get_tick(tick_index, tick_spacing)

    def update_tick(
        self, array_index: int, tick_index: int, tick_spacing: int, update: TickUpdate
    ) -> None:
        """Store an update at the index within the array at array_index."""
        self._array(array_index).update_tick(tick_index, tick_spacing, update)

    def get_tick_offset(self, array_index: int, tick_index: int, tick_spacing: int) -> int:
        """The tick's offset within the array at array_index."""
        return self._array(array_index).tick_offset(tick_index, tick_spacing)

    def get_next_initialized_tick_index(
        self, tick_index: int, tick_spacing: int, a_to_b: bool, start_array_index: int
    ) -> tuple[int, int]:
        """Find the next initialized tick, moving across arrays as needed.

        Returns the array index and tick index found. When no initialized tick
        remains, the minimum/maximum tick index is returned at the edge arrays,
        otherwise the far end of the last array in the sequence.
        """
        ticks_in_array = TICK_ARRAY_SIZE * tick_spacing
        search_index = tick_index
        array_index = start_array_index

        while True:
            if not 0 <= array_index < len(self.arrays):
                raise WhirlpoolError(ErrorCode.TickArraySequenceInvalidIndex)
            next_array = self.arrays[array_index]

            next_index = next_array.get_next_init_tick_index(search_index, tick_spacing, a_to_b)
            if next_index is not None:
                return array_index, next_index

            if a_to_b and next_array.is_min_tick_array():
                return array_index, MIN_TICK_INDEX
            if not a_to_b and next_array.is_max_tick_array(tick_spacing):
                return array_index, MAX_TICK_INDEX

            start = next_array.start_tick_index()
            if array_index + 1 == len(self.arrays):
                if a_to_b:
                    return array_index, start
                return array_index, start + ticks_in_array - 1

            search_index = start - 1 if a_to_b else start + ticks_in_array - 1
            array_index += 1