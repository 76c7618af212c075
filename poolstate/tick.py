"""Ticks: per-price-point liquidity and growth records, and tick index rules."""

from __future__ import annotations

from dataclasses import dataclass, field

# Max & min tick index based on sqrt(1.0001) and the max/min price of 2^64.
MAX_TICK_INDEX = 443636
MIN_TICK_INDEX = -443636

NUM_REWARDS = 3
TICK_ARRAY_SIZE = 88


def _zero_rewards() -> tuple[int, ...]:
    return (0,) * NUM_REWARDS


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _trunc_rem(a: int, b: int) -> int:
    return a - b * _trunc_div(a, b)


@dataclass
class TickUpdate:
    """New values to store in a tick."""

    initialized: bool = False
    liquidity_net: int = 0
    liquidity_gross: int = 0
    fee_growth_outside_a: int = 0
    fee_growth_outside_b: int = 0
    reward_growths_outside: tuple[int, ...] = field(default_factory=_zero_rewards)

    @classmethod
    def from_tick(cls, tick: "Tick") -> "TickUpdate":
        """An update that reproduces the given tick."""
        return cls(
            initialized=tick.initialized,
            liquidity_net=tick.liquidity_net,
            liquidity_gross=tick.liquidity_gross,
            fee_growth_outside_a=tick.fee_growth_outside_a,
            fee_growth_outside_b=tick.fee_growth_outside_b,
            reward_growths_outside=tuple(tick.reward_growths_outside),
        )


@dataclass
class Tick:
    """Liquidity and Q64.64 growth values recorded at one tick index."""

    LEN = 113

    initialized: bool = False
    liquidity_net: int = 0
    liquidity_gross: int = 0
    fee_growth_outside_a: int = 0
    fee_growth_outside_b: int = 0
    reward_growths_outside: tuple[int, ...] = field(default_factory=_zero_rewards)

    @classmethod
    def from_update(cls, update: TickUpdate) -> "Tick":
        """A tick holding the values of the update."""
        tick = cls()
        tick.update(update)
        return tick

    def update(self, update: TickUpdate) -> None:
        """Apply an update to this tick."""
        self.initialized = update.initialized
        self.liquidity_net = update.liquidity_net
        self.liquidity_gross = update.liquidity_gross
        self.fee_growth_outside_a = update.fee_growth_outside_a
        self.fee_growth_outside_b = update.fee_growth_outside_b
        self.reward_growths_outside = tuple(update.reward_growths_outside)

    def to_bytes(self) -> bytes:
        """The packed little-endian layout of this tick."""
        parts = [
            bytes([1 if self.initialized else 0]),
            self.liquidity_net.to_bytes(16, "little", signed=True),
            self.liquidity_gross.to_bytes(16, "little"),
            self.fee_growth_outside_a.to_bytes(16, "little"),
            self.fee_growth_outside_b.to_bytes(16, "little"),
        ]
        parts.extend(growth.to_bytes(16, "little") for growth in self.reward_growths_outside)
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Tick":
        """Parse the packed layout written by to_bytes."""
        data = bytes(data)
        if len(data) != cls.LEN:
            raise ValueError(f"a tick is {cls.LEN} bytes, got {len(data)}")
        fields = [data[1 + 16 * i : 17 + 16 * i] for i in range(4 + NUM_REWARDS)]
        return cls(
            initialized=data[0] != 0,
            liquidity_net=int.from_bytes(fields[0], "little", signed=True),
            liquidity_gross=int.from_bytes(fields[1], "little"),
            fee_growth_outside_a=int.from_bytes(fields[2], "little"),
            fee_growth_outside_b=int.from_bytes(fields[3], "little"),
            reward_growths_outside=tuple(int.from_bytes(chunk, "little") for chunk in fields[4:]),
        )


def check_is_out_of_bounds(tick_index: int) -> bool:
    """True when the tick index lies outside the supported range."""
    return not MIN_TICK_INDEX <= tick_index <= MAX_TICK_INDEX


def check_is_valid_start_tick(tick_index: int, tick_spacing: int) -> bool:
    """True when the index can start a tick array for this tick spacing."""
    ticks_in_array = TICK_ARRAY_SIZE * tick_spacing
    if check_is_out_of_bounds(tick_index):
        # The left-edge tick array may start below the minimum tick index.
        if tick_index > MIN_TICK_INDEX:
            return False
        min_array_start_index = MIN_TICK_INDEX - (
            _trunc_rem(MIN_TICK_INDEX, ticks_in_array) + ticks_in_array
        )
        return tick_index == min_array_start_index
    return tick_index % ticks_in_array == 0


def check_is_usable_tick(tick_index: int, tick_spacing: int) -> bool:
    """True when the index is in bounds and a multiple of the tick spacing."""
    if check_is_out_of_bounds(tick_index):
        return False
    return tick_index % tick_spacing == 0


def full_range_indexes(tick_spacing: int) -> tuple[int, int]:
    """The lowest and highest usable tick indexes for the tick spacing."""
    lower_index = _trunc_div(MIN_TICK_INDEX, tick_spacing) * tick_spacing
    upper_index = _trunc_div(MAX_TICK_INDEX, tick_spacing) * tick_spacing
    return lower_index, upper_index


def bound_tick_index(tick_index: int) -> int:
    """Clamp a tick index to the supported range."""
    return max(MIN_TICK_INDEX, min(MAX_TICK_INDEX, tick_index))