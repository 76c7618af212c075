"""The pool account: price, liquidity, fee settings, fee growth and rewards."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence

from poolstate.common import ErrorCode, Pubkey, WhirlpoolError
from poolstate.tick import NUM_REWARDS

# Fee rate is stored in hundredths of a basis point.
MAX_FEE_RATE = 60_000
# Protocol fee rate is stored in basis points of the fee.
MAX_PROTOCOL_FEE_RATE = 2_500

_U64_MAX = 2**64 - 1


@dataclass
class WhirlpoolRewardInfo:
    """Pool-level state of one liquidity mining reward."""

    mint: Pubkey = field(default_factory=Pubkey)
    vault: Pubkey = field(default_factory=Pubkey)
    authority: Pubkey = field(default_factory=Pubkey)
    emissions_per_second_x64: int = 0
    growth_global_x64: int = 0

    @classmethod
    def with_authority(cls, authority: Pubkey) -> "WhirlpoolRewardInfo":
        """An empty reward whose authority is set."""
        return cls(authority=authority)

    def initialized(self) -> bool:
        """True once a reward mint has been set; it never reverts."""
        return not self.mint.is_default()


def to_reward_growths(reward_infos: Sequence[WhirlpoolRewardInfo]) -> tuple[int, ...]:
    """The global growth accumulators of the rewards, in order."""
    return tuple(info.growth_global_x64 for info in reward_infos)


def _default_reward_infos() -> list[WhirlpoolRewardInfo]:
    return [WhirlpoolRewardInfo() for _ in range(NUM_REWARDS)]


def _copy_reward_infos(reward_infos: Sequence[WhirlpoolRewardInfo]) -> list[WhirlpoolRewardInfo]:
    if len(reward_infos) != NUM_REWARDS:
        raise ValueError(f"expected {NUM_REWARDS} reward infos, got {len(reward_infos)}")
    return [replace(info) for info in reward_infos]


def _check_reward_index(index: int) -> None:
    if not 0 <= index < NUM_REWARDS:
        raise WhirlpoolError(ErrorCode.InvalidRewardIndex)


@dataclass
class Whirlpool:
    """The state of one liquidity pool."""

    LEN = 8 + 261 + 384

    whirlpools_config: Pubkey = field(default_factory=Pubkey)
    whirlpool_bump: bytes = bytes(1)
    tick_spacing: int = 0
    fee_tier_index_seed: bytes = bytes(2)
    fee_rate: int = 0
    protocol_fee_rate: int = 0
    liquidity: int = 0
    sqrt_price: int = 0
    tick_current_index: int = 0
    protocol_fee_owed_a: int = 0
    protocol_fee_owed_b: int = 0
    token_mint_a: Pubkey = field(default_factory=Pubkey)
    token_vault_a: Pubkey = field(default_factory=Pubkey)
    fee_growth_global_a: int = 0
    token_mint_b: Pubkey = field(default_factory=Pubkey)
    token_vault_b: Pubkey = field(default_factory=Pubkey)
    fee_growth_global_b: int = 0
    reward_last_updated_timestamp: int = 0
    reward_infos: list[WhirlpoolRewardInfo] = field(default_factory=_default_reward_infos)

    def seeds(self) -> list[bytes]:
        """The seeds the pool's address is derived from, bump last."""
        return [
            b"whirlpool",
            bytes(self.whirlpools_config),
            bytes(self.token_mint_a),
            bytes(self.token_mint_b),
            bytes(self.fee_tier_index_seed),
            bytes(self.whirlpool_bump),
        ]

    def input_token_mint(self, a_to_b: bool) -> Pubkey:
        """The mint of the token paid in for a swap in this direction."""
        return self.token_mint_a if a_to_b else self.token_mint_b

    def input_token_vault(self, a_to_b: bool) -> Pubkey:
        """The vault receiving the input token."""
        return self.token_vault_a if a_to_b else self.token_vault_b

    def output_token_mint(self, a_to_b: bool) -> Pubkey:
        """The mint of the token paid out for a swap in this direction."""
        return self.token_mint_b if a_to_b else self.token_mint_a

    def output_token_vault(self, a_to_b: bool) -> Pubkey:
        """The vault paying out the output token."""
        return self.token_vault_b if a_to_b else self.token_vault_a

    def update_rewards(
        self, reward_infos: Sequence[WhirlpoolRewardInfo], reward_last_updated_timestamp: int
    ) -> None:
        """Replace all reward state and the time it was last brought up to date."""
        self.reward_last_updated_timestamp = reward_last_updated_timestamp
        self.reward_infos = _copy_reward_infos(reward_infos)

    def update_rewards_and_liquidity(
        self,
        reward_infos: Sequence[WhirlpoolRewardInfo],
        liquidity: int,
        reward_last_updated_timestamp: int,
    ) -> None:
        """Replace reward state and set the active liquidity."""
        self.update_rewards(reward_infos, reward_last_updated_timestamp)
        self.liquidity = liquidity

    def update_reward_authority(self, index: int, authority: Pubkey) -> None:
        """Set the authority of the reward at the index."""
        _check_reward_index(index)
        self.reward_infos[index].authority = authority

    def update_emissions(
        self,
        index: int,
        reward_infos: Sequence[WhirlpoolRewardInfo],
        timestamp: int,
        emissions_per_second_x64: int,
    ) -> None:
        """Replace reward state, then set the emission rate of one reward."""
        _check_reward_index(index)
        self.update_rewards(reward_infos, timestamp)
        self.reward_infos[index].emissions_per_second_x64 = emissions_per_second_x64

    def initialize_reward(self, index: int, mint: Pubkey, vault: Pubkey) -> None:
        """Set up the reward at the index; rewards must be set up in order."""
        _check_reward_index(index)
        lowest_index = next(
            (i for i, info in enumerate(self.reward_infos) if not info.initialized()), None
        )
        if lowest_index is None or lowest_index != index:
            raise WhirlpoolError(ErrorCode.InvalidRewardIndex)
        self.reward_infos[index].mint = mint
        self.reward_infos[index].vault = vault

    def update_after_swap(
        self,
        liquidity: int,
        tick_index: int,
        sqrt_price: int,
        fee_growth_global: int,
        reward_infos: Sequence[WhirlpoolRewardInfo],
        protocol_fee: int,
        is_token_fee_in_a: bool,
        reward_last_updated_timestamp: int,
    ) -> None:
        """Record the pool state reached by a swap and accrue the protocol fee."""
        if is_token_fee_in_a:
            owed = self.protocol_fee_owed_a + protocol_fee
        else:
            owed = self.protocol_fee_owed_b + protocol_fee
        if owed > _U64_MAX:
            raise OverflowError("protocol fee owed exceeds 64 bits")

        self.tick_current_index = tick_index
        self.sqrt_price = sqrt_price
        self.liquidity = liquidity
        self.reward_infos = _copy_reward_infos(reward_infos)
        self.reward_last_updated_timestamp = reward_last_updated_timestamp
        if is_token_fee_in_a:
            self.fee_growth_global_a = fee_growth_global
            self.protocol_fee_owed_a = owed
        else:
            self.fee_growth_global_b = fee_growth_global
            self.protocol_fee_owed_b = owed

    def update_fee_rate(self, fee_rate: int) -> None:
        """Set the swap fee rate."""
        if fee_rate > MAX_FEE_RATE:
            raise WhirlpoolError(ErrorCode.FeeRateMaxExceeded)
        self.fee_rate = fee_rate

    def update_protocol_fee_rate(self, protocol_fee_rate: int) -> None:
        """Set the share of the fee taken by the protocol."""
        if protocol_fee_rate > MAX_PROTOCOL_FEE_RATE:
            raise WhirlpoolError(ErrorCode.ProtocolFeeRateMaxExceeded)
        self.protocol_fee_rate = protocol_fee_rate

    def reset_protocol_fees_owed(self) -> None:
        """Clear the protocol fees owed in both tokens."""
        self.protocol_fee_owed_a = 0
        self.protocol_fee_owed_b = 0

    def fee_tier_index(self) -> int:
        """The fee tier index the pool was created with."""
        return int.from_bytes(self.fee_tier_index_seed, "little")

    def is_initialized_with_adaptive_fee_tier(self) -> bool:
        """True when the pool came from an adaptive fee tier."""
        return self.fee_tier_index() != self.tick_spacing