"""Pool configuration accounts: the authorities and default protocol fee."""

from __future__ import annotations

from dataclasses import dataclass, field

from poolstate.common import ErrorCode, Pubkey, WhirlpoolError
from poolstate.whirlpool import MAX_PROTOCOL_FEE_RATE


@dataclass
class WhirlpoolsConfig:
    """The authorities shared by every pool under one config."""

    LEN = 8 + 96 + 4

    fee_authority: Pubkey = field(default_factory=Pubkey)
    collect_protocol_fees_authority: Pubkey = field(default_factory=Pubkey)
    reward_emissions_super_authority: Pubkey = field(default_factory=Pubkey)
    default_protocol_fee_rate: int = 0

    def initialize(
        self,
        fee_authority: Pubkey,
        collect_protocol_fees_authority: Pubkey,
        reward_emissions_super_authority: Pubkey,
        default_protocol_fee_rate: int,
    ) -> None:
        """Set the authorities and the default protocol fee rate."""
        self.fee_authority = fee_authority
        self.collect_protocol_fees_authority = collect_protocol_fees_authority
        self.reward_emissions_super_authority = reward_emissions_super_authority
        self.update_default_protocol_fee_rate(default_protocol_fee_rate)

    def update_fee_authority(self, fee_authority: Pubkey) -> None:
        """Replace the fee authority."""
        self.fee_authority = fee_authority

    def update_collect_protocol_fees_authority(
        self, collect_protocol_fees_authority: Pubkey
    ) -> None:
        """Replace the authority that collects protocol fees."""
        self.collect_protocol_fees_authority = collect_protocol_fees_authority

    def update_reward_emissions_super_authority(
        self, reward_emissions_super_authority: Pubkey
    ) -> None:
        """Replace the reward emissions super authority."""
        self.reward_emissions_super_authority = reward_emissions_super_authority

    def update_default_protocol_fee_rate(self, default_protocol_fee_rate: int) -> None:
        """Set the protocol fee rate new pools start with."""
        if default_protocol_fee_rate > MAX_PROTOCOL_FEE_RATE:
            raise WhirlpoolError(ErrorCode.ProtocolFeeRateMaxExceeded)
        self.default_protocol_fee_rate = default_protocol_fee_rate


@dataclass
class WhirlpoolsConfigExtension:
    """Further authorities attached to a config."""

    LEN = 8 + 32 + 32 + 32 + 512

    whirlpools_config: Pubkey = field(default_factory=Pubkey)
    config_extension_authority: Pubkey = field(default_factory=Pubkey)
    token_badge_authority: Pubkey = field(default_factory=Pubkey)

    def initialize(self, whirlpools_config: Pubkey, default_authority: Pubkey) -> None:
        """Bind to a config, giving both authorities to the default one."""
        self.whirlpools_config = whirlpools_config
        self.config_extension_authority = default_authority
        self.token_badge_authority = default_authority

    def update_config_extension_authority(self, config_extension_authority: Pubkey) -> None:
        """Replace the extension authority."""
        self.config_extension_authority = config_extension_authority

    def update_token_badge_authority(self, token_badge_authority: Pubkey) -> None:
        """Replace the token badge authority."""
        self.token_badge_authority = token_badge_authority