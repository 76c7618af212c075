"""Per-pool oracle state: trade enabling time and the adaptive fee inputs."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, replace
from typing import Optional

from poolstate.common import (
    PUBKEY_LEN,
    SYSTEM_PROGRAM_ID,
    AccountInfo,
    ErrorCode,
    Pubkey,
    WhirlpoolError,
)
from poolstate.tick import TICK_ARRAY_SIZE
from poolstate.tick_array import DISCRIMINATOR_LEN, account_discriminator

MAX_TRADE_ENABLE_TIMESTAMP_DELTA = 60 * 60 * 72  # 72 hours

# Scales the volatility accumulator so that decaying a single tick group
# crossing by the reduction factor does not immediately round down to zero.
VOLATILITY_ACCUMULATOR_SCALE_FACTOR = 10_000

# Denominator of the reduction factor: 5_000 acts as 0.5.
REDUCTION_FACTOR_DENOMINATOR = 10_000

# Denominator of the adaptive fee control factor: 1_000 acts as 0.01.
ADAPTIVE_FEE_CONTROL_FACTOR_DENOMINATOR = 100_000

# Seconds after which a stale reference is forcibly reset.
MAX_REFERENCE_AGE = 3_600

_U32_MAX = 2**32 - 1
_RESERVED_LEN = 16
_ORACLE_RESERVED_LEN = 128

_CONSTANTS_FORMAT = struct.Struct("<HHHIIHH16s")
_VARIABLES_FORMAT = struct.Struct("<QQIiI16s")
_HEADER_FORMAT = struct.Struct("<32sQ")
_TAIL_FORMAT = struct.Struct("<128s")

ORACLE_DISCRIMINATOR = account_discriminator("Oracle")


def validate_constants(
    tick_spacing: int,
    filter_period: int,
    decay_period: int,
    reduction_factor: int,
    adaptive_fee_control_factor: int,
    max_volatility_accumulator: int,
    tick_group_size: int,
    major_swap_threshold_ticks: int,
) -> bool:
    """True when the adaptive fee constants are acceptable for the tick spacing."""
    if filter_period == 0:
        return False
    if decay_period == 0 or decay_period <= filter_period:
        return False
    if adaptive_fee_control_factor >= ADAPTIVE_FEE_CONTROL_FACTOR_DENOMINATOR:
        return False
    # Keeps the adaptive fee rate computation from overflowing.
    if max_volatility_accumulator * tick_group_size > _U32_MAX:
        return False
    if reduction_factor >= REDUCTION_FACTOR_DENOMINATOR:
        return False
    if tick_group_size == 0 or tick_group_size > tick_spacing or tick_spacing % tick_group_size:
        return False
    # No natural upper limit; the ticks of one tick array serve as a safeguard.
    ticks_in_tick_array = tick_spacing * TICK_ARRAY_SIZE
    if major_swap_threshold_ticks == 0 or major_swap_threshold_ticks > ticks_in_tick_array:
        return False
    return True


@dataclass
class AdaptiveFeeConstants:
    """Parameters of the adaptive fee."""

    LEN = _CONSTANTS_FORMAT.size

    filter_period: int = 0
    decay_period: int = 0
    reduction_factor: int = 0
    adaptive_fee_control_factor: int = 0
    max_volatility_accumulator: int = 0
    tick_group_size: int = 0
    major_swap_threshold_ticks: int = 0
    reserved: bytes = bytes(_RESERVED_LEN)

    def to_bytes(self) -> bytes:
        """The packed little-endian layout."""
        return _CONSTANTS_FORMAT.pack(
            self.filter_period,
            self.decay_period,
            self.reduction_factor,
            self.adaptive_fee_control_factor,
            self.max_volatility_accumulator,
            self.tick_group_size,
            self.major_swap_threshold_ticks,
            bytes(self.reserved),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "AdaptiveFeeConstants":
        """Parse the packed layout."""
        return cls(*_CONSTANTS_FORMAT.unpack(bytes(data)))


@dataclass
class AdaptiveFeeVariables:
    """The moving state of the adaptive fee."""

    LEN = _VARIABLES_FORMAT.size

    last_reference_update_timestamp: int = 0
    last_major_swap_timestamp: int = 0
    volatility_reference: int = 0
    tick_group_index_reference: int = 0
    volatility_accumulator: int = 0
    reserved: bytes = bytes(_RESERVED_LEN)

    def to_bytes(self) -> bytes:
        """The packed little-endian layout."""
        return _VARIABLES_FORMAT.pack(
            self.last_reference_update_timestamp,
            self.last_major_swap_timestamp,
            self.volatility_reference,
            self.tick_group_index_reference,
            self.volatility_accumulator,
            bytes(self.reserved),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "AdaptiveFeeVariables":
        """Parse the packed layout."""
        return cls(*_VARIABLES_FORMAT.unpack(bytes(data)))

    def update_volatility_accumulator(
        self, tick_group_index: int, adaptive_fee_constants: AdaptiveFeeConstants
    ) -> None:
        """Accumulate the tick groups crossed since the reference, capped."""
        index_delta = abs(self.tick_group_index_reference - tick_group_index)
        accumulator = (
            self.volatility_reference + index_delta * VOLATILITY_ACCUMULATOR_SCALE_FACTOR
        )
        self.volatility_accumulator = min(
            accumulator, adaptive_fee_constants.max_volatility_accumulator
        )

    def update_reference(
        self,
        tick_group_index: int,
        current_timestamp: int,
        adaptive_fee_constants: AdaptiveFeeConstants,
    ) -> None:
        """Move, decay or reset the reference depending on time elapsed."""
        max_timestamp = max(self.last_reference_update_timestamp, self.last_major_swap_timestamp)
        if current_timestamp < max_timestamp:
            raise WhirlpoolError(ErrorCode.InvalidTimestamp)

        reference_age = current_timestamp - self.last_reference_update_timestamp
        if reference_age > MAX_REFERENCE_AGE:
            self.tick_group_index_reference = tick_group_index
            self.volatility_reference = 0
            self.last_reference_update_timestamp = current_timestamp
            return

        elapsed = current_timestamp - max_timestamp
        if elapsed < adaptive_fee_constants.filter_period:
            # High frequency trade: the reference stays.
            return
        self.tick_group_index_reference = tick_group_index
        if elapsed < adaptive_fee_constants.decay_period:
            self.volatility_reference = (
                self.volatility_accumulator
                * adaptive_fee_constants.reduction_factor
                // REDUCTION_FACTOR_DENOMINATOR
            )
        else:
            self.volatility_reference = 0
        self.last_reference_update_timestamp = current_timestamp


@dataclass
class AdaptiveFeeInfo:
    """Adaptive fee constants together with the current variables."""

    constants: AdaptiveFeeConstants = field(default_factory=AdaptiveFeeConstants)
    variables: AdaptiveFeeVariables = field(default_factory=AdaptiveFeeVariables)


_ORACLE_BODY_LEN = (
    _HEADER_FORMAT.size
    + AdaptiveFeeConstants.LEN
    + AdaptiveFeeVariables.LEN
    + _TAIL_FORMAT.size
)


@dataclass
class Oracle:
    """The oracle account of one pool."""

    LEN = DISCRIMINATOR_LEN + _ORACLE_BODY_LEN
    DISCRIMINATOR = ORACLE_DISCRIMINATOR

    whirlpool: Pubkey = field(default_factory=Pubkey)
    trade_enable_timestamp: int = 0
    adaptive_fee_constants: AdaptiveFeeConstants = field(default_factory=AdaptiveFeeConstants)
    adaptive_fee_variables: AdaptiveFeeVariables = field(default_factory=AdaptiveFeeVariables)
    reserved: bytes = bytes(_ORACLE_RESERVED_LEN)

    def initialize(
        self,
        whirlpool: Pubkey,
        trade_enable_timestamp: Optional[int],
        tick_spacing: int,
        filter_period: int,
        decay_period: int,
        reduction_factor: int,
        adaptive_fee_control_factor: int,
        max_volatility_accumulator: int,
        tick_group_size: int,
        major_swap_threshold_ticks: int,
    ) -> None:
        """Bind the oracle to a pool, set its constants and clear its variables."""
        self.whirlpool = whirlpool
        self.trade_enable_timestamp = trade_enable_timestamp or 0
        constants = AdaptiveFeeConstants(
            filter_period=filter_period,
            decay_period=decay_period,
            reduction_factor=reduction_factor,
            adaptive_fee_control_factor=adaptive_fee_control_factor,
            max_volatility_accumulator=max_volatility_accumulator,
            tick_group_size=tick_group_size,
            major_swap_threshold_ticks=major_swap_threshold_ticks,
        )
        self.initialize_adaptive_fee_constants(constants, tick_spacing)
        self.adaptive_fee_variables = AdaptiveFeeVariables()

    def initialize_adaptive_fee_constants(
        self, constants: AdaptiveFeeConstants, tick_spacing: int
    ) -> None:
        """Set the constants after validating them for the tick spacing."""
        if not validate_constants(
            tick_spacing,
            constants.filter_period,
            constants.decay_period,
            constants.reduction_factor,
            constants.adaptive_fee_control_factor,
            constants.max_volatility_accumulator,
            constants.tick_group_size,
            constants.major_swap_threshold_ticks,
        ):
            raise WhirlpoolError(ErrorCode.InvalidAdaptiveFeeConstants)
        self.adaptive_fee_constants = replace(constants)

    def update_adaptive_fee_variables(self, variables: AdaptiveFeeVariables) -> None:
        """Replace the adaptive fee variables."""
        self.adaptive_fee_variables = replace(variables)

    def to_bytes(self) -> bytes:
        """The packed layout, without the account discriminator."""
        return b"".join(
            [
                _HEADER_FORMAT.pack(bytes(self.whirlpool), self.trade_enable_timestamp),
                self.adaptive_fee_constants.to_bytes(),
                self.adaptive_fee_variables.to_bytes(),
                _TAIL_FORMAT.pack(bytes(self.reserved)),
            ]
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Oracle":
        """Parse the packed layout written by to_bytes."""
        data = bytes(data)
        if len(data) != _ORACLE_BODY_LEN:
            raise ValueError(f"an oracle is {_ORACLE_BODY_LEN} bytes, got {len(data)}")
        whirlpool_raw, timestamp = _HEADER_FORMAT.unpack_from(data, 0)
        offset = _HEADER_FORMAT.size
        constants = AdaptiveFeeConstants.from_bytes(
            data[offset : offset + AdaptiveFeeConstants.LEN]
        )
        offset += AdaptiveFeeConstants.LEN
        variables = AdaptiveFeeVariables.from_bytes(
            data[offset : offset + AdaptiveFeeVariables.LEN]
        )
        offset += AdaptiveFeeVariables.LEN
        (reserved,) = _TAIL_FORMAT.unpack_from(data, offset)
        return cls(
            whirlpool=Pubkey(whirlpool_raw),
            trade_enable_timestamp=timestamp,
            adaptive_fee_constants=constants,
            adaptive_fee_variables=variables,
            reserved=reserved,
        )


class OracleAccessor:
    """Reads and writes a pool's oracle account, which may not exist yet."""

    def __init__(
        self, whirlpool_key: Pubkey, oracle_account_info: AccountInfo, program_id: Pubkey
    ) -> None:
        self._account = oracle_account_info
        self._initialized = self._is_oracle_account_initialized(
            oracle_account_info, whirlpool_key, program_id
        )

    @staticmethod
    def _is_oracle_account_initialized(
        account: AccountInfo, whirlpool_key: Pubkey, program_id: Pubkey
    ) -> bool:
        # Writability is checked only when writing.
        if account.owner == SYSTEM_PROGRAM_ID and account.data_is_empty():
            return False
        if account.owner != program_id:
            raise WhirlpoolError(
                ErrorCode.AccountOwnedByWrongProgram, f"{account.owner} != {program_id}"
            )
        if len(account.data) < DISCRIMINATOR_LEN:
            raise WhirlpoolError(ErrorCode.AccountDiscriminatorNotFound)
        if bytes(account.data[:DISCRIMINATOR_LEN]) != ORACLE_DISCRIMINATOR:
            raise WhirlpoolError(ErrorCode.AccountDiscriminatorMismatch)
        if OracleAccessor._read(account).whirlpool != whirlpool_key:
            # The oracle address derives from the pool, so this cannot happen.
            raise RuntimeError("oracle account belongs to a different pool")
        return True

    @staticmethod
    def _read(account: AccountInfo) -> Oracle:
        body = bytes(account.data[DISCRIMINATOR_LEN : DISCRIMINATOR_LEN + _ORACLE_BODY_LEN])
        return Oracle.from_bytes(body)

    def is_trade_enabled(self, current_timestamp: int) -> bool:
        """True when trading is allowed at the timestamp."""
        if not self._initialized:
            return True
        return self._read(self._account).trade_enable_timestamp <= current_timestamp

    def get_adaptive_fee_info(self) -> Optional[AdaptiveFeeInfo]:
        """The stored adaptive fee state, or None when there is no oracle."""
        if not self._initialized:
            return None
        oracle = self._read(self._account)
        return AdaptiveFeeInfo(
            constants=oracle.adaptive_fee_constants, variables=oracle.adaptive_fee_variables
        )

    def update_adaptive_fee_variables(self, adaptive_fee_info: Optional[AdaptiveFeeInfo]) -> None:
        """Store the variables back; nothing is written when there is no oracle."""
        if self._initialized and adaptive_fee_info is not None:
            if not self._account.is_writable:
                raise WhirlpoolError(ErrorCode.AccountNotMutable)
            oracle = self._read(self._account)
            oracle.update_adaptive_fee_variables(adaptive_fee_info.variables)
            self._account.data[DISCRIMINATOR_LEN : DISCRIMINATOR_LEN + _ORACLE_BODY_LEN] = (
                oracle.to_bytes()
            )
            return
        if not self._initialized and adaptive_fee_info is None:
            return
        raise ValueError("adaptive fee info does not match the oracle account state")


__all__ = [
    "ADAPTIVE_FEE_CONTROL_FACTOR_DENOMINATOR",
    "MAX_REFERENCE_AGE",
    "MAX_TRADE_ENABLE_TIMESTAMP_DELTA",
    "PUBKEY_LEN",
    "REDUCTION_FACTOR_DENOMINATOR",
    "VOLATILITY_ACCUMULATOR_SCALE_FACTOR",
    "AdaptiveFeeConstants",
    "AdaptiveFeeInfo",
    "AdaptiveFeeVariables",
    "Oracle",
    "OracleAccessor",
    "validate_constants",
]