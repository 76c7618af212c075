"""Tick arrays whose storage only holds data for initialized ticks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from poolstate.common import PUBKEY_LEN, ErrorCode, Pubkey, WhirlpoolError
from poolstate.tick import (
    NUM_REWARDS,
    TICK_ARRAY_SIZE,
    Tick,
    TickUpdate,
    check_is_usable_tick,
    check_is_valid_start_tick,
)
from poolstate.tick_array import (
    DISCRIMINATOR_LEN,
    DYNAMIC_TICK_ARRAY_DISCRIMINATOR,
    TickArrayType,
)

_START_TICK_INDEX_OFFSET = 0
_WHIRLPOOL_OFFSET = _START_TICK_INDEX_OFFSET + 4
_TICK_BITMAP_OFFSET = _WHIRLPOOL_OFFSET + PUBKEY_LEN
_TICK_DATA_OFFSET = _TICK_BITMAP_OFFSET + 16

_TAG_UNINITIALIZED = 0
_TAG_INITIALIZED = 1

Buffer = Union[bytearray, memoryview]


def _zero_rewards() -> tuple[int, ...]:
    return (0,) * NUM_REWARDS


@dataclass
class DynamicTickData:
    """The stored values of an initialized tick."""

    LEN = 112

    liquidity_net: int = 0
    liquidity_gross: int = 0
    fee_growth_outside_a: int = 0
    fee_growth_outside_b: int = 0
    reward_growths_outside: tuple[int, ...] = field(default_factory=_zero_rewards)

    @classmethod
    def from_update(cls, update: TickUpdate) -> "DynamicTickData":
        """The stored values carried by an update."""
        return cls(
            liquidity_net=update.liquidity_net,
            liquidity_gross=update.liquidity_gross,
            fee_growth_outside_a=update.fee_growth_outside_a,
            fee_growth_outside_b=update.fee_growth_outside_b,
            reward_growths_outside=tuple(update.reward_growths_outside),
        )

    def to_tick(self) -> Tick:
        """An initialized tick holding these values."""
        return Tick(
            initialized=True,
            liquidity_net=self.liquidity_net,
            liquidity_gross=self.liquidity_gross,
            fee_growth_outside_a=self.fee_growth_outside_a,
            fee_growth_outside_b=self.fee_growth_outside_b,
            reward_growths_outside=tuple(self.reward_growths_outside),
        )


UNINITIALIZED_LEN = 1
INITIALIZED_LEN = DynamicTickData.LEN + 1


def _encode(update: TickUpdate) -> bytes:
    if not update.initialized:
        return bytes([_TAG_UNINITIALIZED])
    data = DynamicTickData.from_update(update)
    parts = [
        bytes([_TAG_INITIALIZED]),
        data.liquidity_net.to_bytes(16, "little", signed=True),
        data.liquidity_gross.to_bytes(16, "little"),
        data.fee_growth_outside_a.to_bytes(16, "little"),
        data.fee_growth_outside_b.to_bytes(16, "little"),
    ]
    parts.extend(growth.to_bytes(16, "little") for growth in data.reward_growths_outside)
    return b"".join(parts)


def _decode(raw: bytes) -> Tick:
    if not raw:
        raise ValueError("no tick data to read")
    tag = raw[0]
    if tag == _TAG_UNINITIALIZED:
        return Tick()
    if tag != _TAG_INITIALIZED:
        raise ValueError(f"invalid tick tag {tag}")
    if len(raw) < INITIALIZED_LEN:
        raise ValueError("tick data is truncated")
    chunks = [raw[1 + 16 * i : 17 + 16 * i] for i in range(4 + NUM_REWARDS)]
    return DynamicTickData(
        liquidity_net=int.from_bytes(chunks[0], "little", signed=True),
        liquidity_gross=int.from_bytes(chunks[1], "little"),
        fee_growth_outside_a=int.from_bytes(chunks[2], "little"),
        fee_growth_outside_b=int.from_bytes(chunks[3], "little"),
        reward_growths_outside=tuple(int.from_bytes(c, "little") for c in chunks[4:]),
    ).to_tick()


class DynamicTickArray(TickArrayType):
    """A tick array that stores one tag byte per empty tick and full data otherwise.

    Layout: start index, pool key, a 128-bit bitmap of initialized ticks,
    then the tick entries in order. The array is a view over a byte buffer
    (without the account discriminator); changes go straight into it.
    """

    DISCRIMINATOR = DYNAMIC_TICK_ARRAY_DISCRIMINATOR
    MIN_LEN = DISCRIMINATOR_LEN + _TICK_DATA_OFFSET + UNINITIALIZED_LEN * TICK_ARRAY_SIZE
    MAX_LEN = DISCRIMINATOR_LEN + _TICK_DATA_OFFSET + INITIALIZED_LEN * TICK_ARRAY_SIZE

    def __init__(self, buffer: Optional[Buffer] = None) -> None:
        if buffer is None:
            buffer = bytearray(self.MAX_LEN - DISCRIMINATOR_LEN)
        view = memoryview(buffer)
        minimum = self.MIN_LEN - DISCRIMINATOR_LEN
        if len(view) < minimum:
            raise ValueError(f"a dynamic tick array needs at least {minimum} bytes")
        self._data = view

    def initialize(self, whirlpool_key: Pubkey, tick_spacing: int, start_tick_index: int) -> None:
        """Bind the array to a pool and a start tick index."""
        if not check_is_valid_start_tick(start_tick_index, tick_spacing):
            raise WhirlpoolError(ErrorCode.InvalidStartTick)
        self._data[_START_TICK_INDEX_OFFSET:_WHIRLPOOL_OFFSET] = start_tick_index.to_bytes(
            4, "little", signed=True
        )
        self._data[_WHIRLPOOL_OFFSET:_TICK_BITMAP_OFFSET] = bytes(whirlpool_key)

    def tick_bitmap(self) -> int:
        """Bit n is set when the tick at offset n is initialized."""
        return int.from_bytes(self._data[_TICK_BITMAP_OFFSET:_TICK_DATA_OFFSET], "little")

    def _set_tick_bitmap(self, bitmap: int) -> None:
        self._data[_TICK_BITMAP_OFFSET:_TICK_DATA_OFFSET] = bitmap.to_bytes(16, "little")

    def is_variable_size(self) -> bool:
        return True

    def start_tick_index(self) -> int:
        return int.from_bytes(
            self._data[_START_TICK_INDEX_OFFSET:_WHIRLPOOL_OFFSET], "little", signed=True
        )

    def whirlpool(self) -> Pubkey:
        return Pubkey(bytes(self._data[_WHIRLPOOL_OFFSET:_TICK_BITMAP_OFFSET]))

    def get_next_init_tick_index(
        self, tick_index: int, tick_spacing: int, a_to_b: bool
    ) -> Optional[int]:
        """Search this array for the next initialized tick.

        Moving left (a_to_b) the starting tick is included; moving right it is not.
        """
        if not self.in_search_range(tick_index, tick_spacing, not a_to_b):
            raise WhirlpoolError(ErrorCode.InvalidTickArraySequence)
        offset = self.tick_offset(tick_index, tick_spacing)
        bitmap = self.tick_bitmap()
        offsets = range(offset, -1, -1) if a_to_b else range(offset + 1, TICK_ARRAY_SIZE)
        found = next((o for o in offsets if bitmap >> o & 1), None)
        if found is None:
            return None
        return found * tick_spacing + self.start_tick_index()

    def _byte_offset(self, tick_offset: int) -> int:
        if tick_offset < 0:
            raise WhirlpoolError(ErrorCode.TickNotFound)
        initialized = (self.tick_bitmap() & ((1 << tick_offset) - 1)).bit_count()
        uninitialized = tick_offset - initialized
        return initialized * INITIALIZED_LEN + uninitialized * UNINITIALIZED_LEN

    def _locate(self, tick_index: int, tick_spacing: int) -> tuple[int, int]:
        if not self.check_in_array_bounds(tick_index, tick_spacing) or not check_is_usable_tick(
            tick_index, tick_spacing
        ):
            raise WhirlpoolError(ErrorCode.TickNotFound)
        tick_offset = self.tick_offset(tick_index, tick_spacing)
        return tick_offset, _TICK_DATA_OFFSET + self._byte_offset(tick_offset)

    def _read(self, position: int) -> Tick:
        return _decode(bytes(self._data[position : position + INITIALIZED_LEN]))

    def _rotate(self, position: int, shift_right: bool) -> None:
        tail = bytes(self._data[position:])
        size = DynamicTickData.LEN
        if len(tail) < size:
            raise ValueError("tick data does not fit in the buffer")
        rotated = tail[-size:] + tail[:-size] if shift_right else tail[size:] + tail[:size]
        self._data[position:] = rotated

    def get_tick(self, tick_index: int, tick_spacing: int) -> Tick:
        _, position = self._locate(tick_index, tick_spacing)
        return self._read(position)

    def update_tick(self, tick_index: int, tick_spacing: int, update: TickUpdate) -> None:
        tick_offset, position = self._locate(tick_index, tick_spacing)
        current = self._read(position)
        bit = 1 << tick_offset

        if not current.initialized and update.initialized:
            self._rotate(position, shift_right=True)
            self._set_tick_bitmap(self.tick_bitmap() | bit)
        elif current.initialized and not update.initialized:
            self._rotate(position, shift_right=False)
            self._set_tick_bitmap(self.tick_bitmap() & ~bit)

        encoded = _encode(update)
        self._data[position : position + len(encoded)] = encoded