"""Fee tiers: the tick spacing and fee a new pool may be created with."""

from __future__ import annotations

from dataclasses import dataclass, field

from poolstate.common import ErrorCode, Pubkey, WhirlpoolError
from poolstate.oracle import validate_constants
from poolstate.whirlpool import MAX_FEE_RATE


@dataclass
class FeeTier:
    """A static fee tier, identified by its tick spacing."""

    LEN = 8 + 32 + 4

    whirlpools_config: Pubkey = field(default_factory=Pubkey)
    tick_spacing: int = 0
    default_fee_rate: int = 0

    def initialize(self, whirlpools_config: Pubkey, tick_spacing: int, default_fee_rate: int) -> None:
        """Bind the tier to a config with its tick spacing and fee."""
        if tick_spacing == 0:
            raise WhirlpoolError(ErrorCode.InvalidTickSpacing)
        self.whirlpools_config = whirlpools_config
        self.tick_spacing = tick_spacing
        self.update_default_fee_rate(default_fee_rate)

    def update_default_fee_rate(self, default_fee_rate: int) -> None:
        """Set the fee rate pools of this tier start with."""
        if default_fee_rate > MAX_FEE_RATE:
            raise WhirlpoolError(ErrorCode.FeeRateMaxExceeded)
        self.default_fee_rate = default_fee_rate


@dataclass
class AdaptiveFeeTier:
    """A fee tier whose pools charge a volatility-dependent fee on top of a base fee."""

    LEN = 8 + 32 + 2 + 2 + 32 + 32 + 2 + 2 + 2 + 2 + 4 + 4 + 2 + 2 + 128

    whirlpools_config: Pubkey = field(default_factory=Pubkey)
    fee_tier_index: int = 0
    tick_spacing: int = 0
    initialize_pool_authority: Pubkey = field(default_factory=Pubkey)
    delegated_fee_authority: Pubkey = field(default_factory=Pubkey)
    default_base_fee_rate: int = 0
    filter_period: int = 0
    decay_period: int = 0
    reduction_factor: int = 0
    adaptive_fee_control_factor: int = 0
    max_volatility_accumulator: int = 0
    tick_group_size: int = 0
    major_swap_threshold_ticks: int = 0

    def initialize(
        self,
        whirlpools_config: Pubkey,
        fee_tier_index: int,
        tick_spacing: int,
        initialize_pool_authority: Pubkey,
        delegated_fee_authority: Pubkey,
        default_base_fee_rate: int,
        filter_period: int,
        decay_period: int,
        reduction_factor: int,
        adaptive_fee_control_factor: int,
        max_volatility_accumulator: int,
        tick_group_size: int,
        major_swap_threshold_ticks: int,
    ) -> None:
        """Set up the tier; an index equal to the tick spacing is reserved for static tiers."""
        if fee_tier_index == tick_spacing:
            raise WhirlpoolError(ErrorCode.InvalidFeeTierIndex)
        if tick_spacing == 0:
            raise WhirlpoolError(ErrorCode.InvalidTickSpacing)

        self.whirlpools_config = whirlpools_config
        self.fee_tier_index = fee_tier_index
        self.tick_spacing = tick_spacing

        self.update_default_base_fee_rate(default_base_fee_rate)
        self.update_initialize_pool_authority(initialize_pool_authority)
        self.update_delegated_fee_authority(delegated_fee_authority)
        self.update_adaptive_fee_constants(
            filter_period,
            decay_period,
            reduction_factor,
            adaptive_fee_control_factor,
            max_volatility_accumulator,
            tick_group_size,
            major_swap_threshold_ticks,
        )

    def update_initialize_pool_authority(self, initialize_pool_authority: Pubkey) -> None:
        """Set who may create pools of this tier; the default key allows anyone."""
        self.initialize_pool_authority = initialize_pool_authority

    def update_delegated_fee_authority(self, delegated_fee_authority: Pubkey) -> None:
        """Set the authority delegated to manage fees."""
        self.delegated_fee_authority = delegated_fee_authority

    def update_default_base_fee_rate(self, default_base_fee_rate: int) -> None:
        """Set the base fee rate pools of this tier start with."""
        if default_base_fee_rate > MAX_FEE_RATE:
            raise WhirlpoolError(ErrorCode.FeeRateMaxExceeded)
        self.default_base_fee_rate = default_base_fee_rate

    def update_adaptive_fee_constants(
        self,
        filter_period: int,
        decay_period: int,
        reduction_factor: int,
        adaptive_fee_control_factor: int,
        max_volatility_accumulator: int,
        tick_group_size: int,
        major_swap_threshold_ticks: int,
    ) -> None:
        """Replace the adaptive fee constants after validating them."""
        if not validate_constants(
            self.tick_spacing,
            filter_period,
            decay_period,
            reduction_factor,
            adaptive_fee_control_factor,
            max_volatility_accumulator,
            tick_group_size,
            major_swap_threshold_ticks,
        ):
            raise WhirlpoolError(ErrorCode.InvalidAdaptiveFeeConstants)
        self.filter_period = filter_period
        self.decay_period = decay_period
        self.reduction_factor = reduction_factor
        self.adaptive_fee_control_factor = adaptive_fee_control_factor
        self.max_volatility_accumulator = max_volatility_accumulator
        self.tick_group_size = tick_group_size
        self.major_swap_threshold_ticks = major_swap_threshold_ticks

    def is_valid_initialize_pool_authority(self, initialize_pool_authority: Pubkey) -> bool:
        """Whether the key may create a pool of this tier."""
        if self.initialize_pool_authority.is_default():
            return True
        return self.initialize_pool_authority == initialize_pool_authority

    def is_permissioned(self) -> bool:
        """True when only a set authority may create pools of this tier."""
        return not self.initialize_pool_authority.is_default()