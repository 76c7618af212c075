"""Liquidity positions: a tick range, its liquidity and what it is owed."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence

from poolstate.common import ErrorCode, Pubkey, WhirlpoolError
from poolstate.tick import NUM_REWARDS, check_is_usable_tick, full_range_indexes

# Pools with a tick spacing at or above 2^15 only allow full range positions.
FULL_RANGE_ONLY_TICK_SPACING_THRESHOLD = 32768


@dataclass
class PositionRewardInfo:
    """Position-level state of one reward."""

    growth_inside_checkpoint: int = 0
    amount_owed: int = 0


def _default_reward_infos() -> list[PositionRewardInfo]:
    return [PositionRewardInfo() for _ in range(NUM_REWARDS)]


def _copy_reward_infos(reward_infos: Sequence[PositionRewardInfo]) -> list[PositionRewardInfo]:
    if len(reward_infos) != NUM_REWARDS:
        raise ValueError(f"expected {NUM_REWARDS} reward infos, got {len(reward_infos)}")
    return [replace(info) for info in reward_infos]


@dataclass
class PositionUpdate:
    """New liquidity, checkpoints and amounts owed for a position."""

    liquidity: int = 0
    fee_growth_checkpoint_a: int = 0
    fee_owed_a: int = 0
    fee_growth_checkpoint_b: int = 0
    fee_owed_b: int = 0
    reward_infos: list[PositionRewardInfo] = field(default_factory=_default_reward_infos)


def validate_tick_range(tick_spacing: int, tick_lower_index: int, tick_upper_index: int) -> None:
    """Require a usable, ordered tick range, full range on full-range-only pools."""
    if (
        not check_is_usable_tick(tick_lower_index, tick_spacing)
        or not check_is_usable_tick(tick_upper_index, tick_spacing)
        or tick_lower_index >= tick_upper_index
    ):
        raise WhirlpoolError(ErrorCode.InvalidTickIndex)
    if tick_spacing >= FULL_RANGE_ONLY_TICK_SPACING_THRESHOLD:
        if (tick_lower_index, tick_upper_index) != full_range_indexes(tick_spacing):
            raise WhirlpoolError(ErrorCode.FullRangeOnlyPool)


@dataclass
class Position:
    """A liquidity position in a pool."""

    LEN = 8 + 136 + 72

    whirlpool: Pubkey = field(default_factory=Pubkey)
    position_mint: Pubkey = field(default_factory=Pubkey)
    liquidity: int = 0
    tick_lower_index: int = 0
    tick_upper_index: int = 0
    fee_growth_checkpoint_a: int = 0
    fee_owed_a: int = 0
    fee_growth_checkpoint_b: int = 0
    fee_owed_b: int = 0
    reward_infos: list[PositionRewardInfo] = field(default_factory=_default_reward_infos)

    def is_position_empty(self) -> bool:
        """True when the position holds no liquidity and is owed nothing."""
        return (
            self.liquidity == 0
            and self.fee_owed_a == 0
            and self.fee_owed_b == 0
            and all(info.amount_owed == 0 for info in self.reward_infos)
        )

    def update(self, update: PositionUpdate) -> None:
        """Apply new liquidity, checkpoints and amounts owed."""
        self.liquidity = update.liquidity
        self.fee_growth_checkpoint_a = update.fee_growth_checkpoint_a
        self.fee_growth_checkpoint_b = update.fee_growth_checkpoint_b
        self.fee_owed_a = update.fee_owed_a
        self.fee_owed_b = update.fee_owed_b
        self.reward_infos = _copy_reward_infos(update.reward_infos)

    def open_position(
        self,
        whirlpool_key: Pubkey,
        tick_spacing: int,
        position_mint: Pubkey,
        tick_lower_index: int,
        tick_upper_index: int,
    ) -> None:
        """Bind the position to a pool, mint and tick range."""
        validate_tick_range(tick_spacing, tick_lower_index, tick_upper_index)
        self.whirlpool = whirlpool_key
        self.position_mint = position_mint
        self.tick_lower_index = tick_lower_index
        self.tick_upper_index = tick_upper_index

    def reset_fees_owed(self) -> None:
        """Clear the fees owed in both tokens."""
        self.fee_owed_a = 0
        self.fee_owed_b = 0

    def update_reward_owed(self, index: int, amount_owed: int) -> None:
        """Set the amount owed of the reward at the index."""
        if not 0 <= index < NUM_REWARDS:
            raise IndexError(f"reward index {index} out of range")
        self.reward_infos[index].amount_owed = amount_owed

    def reset_position_range(
        self, tick_spacing: int, new_tick_lower_index: int, new_tick_upper_index: int
    ) -> None:
        """Move an empty position to a new tick range and clear its checkpoints."""
        # Locked positions always hold liquidity, so this also rejects them.
        if not self.is_position_empty():
            raise WhirlpoolError(ErrorCode.ClosePositionNotEmpty)
        if (new_tick_lower_index, new_tick_upper_index) == (
            self.tick_lower_index,
            self.tick_upper_index,
        ):
            raise WhirlpoolError(ErrorCode.SameTickRangeNotAllowed)
        validate_tick_range(tick_spacing, new_tick_lower_index, new_tick_upper_index)

        self.tick_lower_index = new_tick_lower_index
        self.tick_upper_index = new_tick_upper_index
        self.fee_growth_checkpoint_a = 0
        self.fee_growth_checkpoint_b = 0
        for info in self.reward_infos:
            info.growth_inside_checkpoint = 0