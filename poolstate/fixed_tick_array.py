"""Tick arrays stored as a fixed run of fully laid-out ticks."""

from __future__ import annotations

from typing import Optional, Union

from poolstate.common import PUBKEY_LEN, ErrorCode, Pubkey, WhirlpoolError
from poolstate.tick import (
    TICK_ARRAY_SIZE,
    Tick,
    TickUpdate,
    check_is_usable_tick,
    check_is_valid_start_tick,
)
from poolstate.tick_array import (
    DISCRIMINATOR_LEN,
    FIXED_TICK_ARRAY_DISCRIMINATOR,
    TickArrayType,
)

_START_TICK_INDEX_OFFSET = 0
_TICKS_OFFSET = _START_TICK_INDEX_OFFSET + 4
_WHIRLPOOL_OFFSET = _TICKS_OFFSET + Tick.LEN * TICK_ARRAY_SIZE
_BODY_LEN = _WHIRLPOOL_OFFSET + PUBKEY_LEN

Buffer = Union[bytearray, memoryview]


class FixedTickArray(TickArrayType):
    """A tick array laid out as start index, every tick, then the pool key.

    The array is a view over a byte buffer (without the account
    discriminator); changes are written straight into that buffer.
    """

    LEN = DISCRIMINATOR_LEN + _BODY_LEN
    DISCRIMINATOR = FIXED_TICK_ARRAY_DISCRIMINATOR

    def __init__(self, buffer: Optional[Buffer] = None) -> None:
        if buffer is None:
            buffer = bytearray(_BODY_LEN)
        view = memoryview(buffer)
        if len(view) != _BODY_LEN:
            raise ValueError(f"a fixed tick array is {_BODY_LEN} bytes, got {len(view)}")
        self._data = view

    @classmethod
    def from_bytes(cls, data: bytes) -> "FixedTickArray":
        """A tick array holding a copy of the given layout."""
        return cls(bytearray(data))

    def to_bytes(self) -> bytes:
        """The packed layout of this tick array."""
        return bytes(self._data)

    def initialize(self, whirlpool_key: Pubkey, tick_spacing: int, start_tick_index: int) -> None:
        """Bind the array to a pool and a start tick index."""
        if not check_is_valid_start_tick(start_tick_index, tick_spacing):
            raise WhirlpoolError(ErrorCode.InvalidStartTick)
        self._data[_WHIRLPOOL_OFFSET:_BODY_LEN] = bytes(whirlpool_key)
        self._data[_START_TICK_INDEX_OFFSET:_TICKS_OFFSET] = start_tick_index.to_bytes(
            4, "little", signed=True
        )

    def is_variable_size(self) -> bool:
        return False

    def start_tick_index(self) -> int:
        return int.from_bytes(
            self._data[_START_TICK_INDEX_OFFSET:_TICKS_OFFSET], "little", signed=True
        )

    def whirlpool(self) -> Pubkey:
        return Pubkey(bytes(self._data[_WHIRLPOOL_OFFSET:_BODY_LEN]))

    def _tick_slice(self, offset: int) -> slice:
        start = _TICKS_OFFSET + offset * Tick.LEN
        return slice(start, start + Tick.LEN)

    def _is_initialized(self, offset: int) -> bool:
        return self._data[_TICKS_OFFSET + offset * Tick.LEN] != 0

    def get_next_init_tick_index(
        self, tick_index: int, tick_spacing: int, a_to_b: bool
    ) -> Optional[int]:
        """Search this array for the next initialized tick.

        Moving left (a_to_b) the starting tick is included; moving right it is not.
        """
        if not self.in_search_range(tick_index, tick_spacing, not a_to_b):
            raise WhirlpoolError(ErrorCode.InvalidTickArraySequence)
        offset = self.tick_offset(tick_index, tick_spacing)
        offsets = range(offset, -1, -1) if a_to_b else range(offset + 1, TICK_ARRAY_SIZE)
        found = next((o for o in offsets if self._is_initialized(o)), None)
        if found is None:
            return None
        return found * tick_spacing + self.start_tick_index()

    def _checked_offset(self, tick_index: int, tick_spacing: int) -> int:
        if not self.check_in_array_bounds(tick_index, tick_spacing) or not check_is_usable_tick(
            tick_index, tick_spacing
        ):
            raise WhirlpoolError(ErrorCode.TickNotFound)
        offset = self.tick_offset(tick_index, tick_spacing)
        if offset < 0:
            raise WhirlpoolError(ErrorCode.TickNotFound)
        return offset

    def get_tick(self, tick_index: int, tick_spacing: int) -> Tick:
        offset = self._checked_offset(tick_index, tick_spacing)
        return Tick.from_bytes(bytes(self._data[self._tick_slice(offset)]))

    def update_tick(self, tick_index: int, tick_spacing: int, update: TickUpdate) -> None:
        offset = self._checked_offset(tick_index, tick_spacing)
        tick = Tick.from_bytes(bytes(self._data[self._tick_slice(offset)]))
        tick.update(update)
        self._data[self._tick_slice(offset)] = tick.to_bytes()