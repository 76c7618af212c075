"""Shared primitives: error codes, public keys, account views and authority checks."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Optional

_BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX = {char: index for index, char in enumerate(_BASE58_ALPHABET)}

PUBKEY_LEN = 32
MAX_SEEDS = 16
MAX_SEED_LEN = 32
_PDA_MARKER = b"ProgramDerivedAddress"

# Curve parameters for the ed25519 on-curve test used by address derivation.
_P = 2**255 - 19
_D = (-121665 * pow(121666, -1, _P)) % _P


class ErrorCode(Enum):
    """Every error condition the pool state can report."""

    InvalidFeeTierIndex = auto()
    InvalidTickSpacing = auto()
    FeeRateMaxExceeded = auto()
    ProtocolFeeRateMaxExceeded = auto()
    InvalidAdaptiveFeeConstants = auto()
    InvalidStartTick = auto()
    InvalidTickArraySequence = auto()
    TickNotFound = auto()
    InvalidTickIndex = auto()
    InvalidTimestamp = auto()
    InvalidTimestampConversion = auto()
    ClosePositionNotEmpty = auto()
    SameTickRangeNotAllowed = auto()
    FullRangeOnlyPool = auto()
    InvalidBundleIndex = auto()
    BundledPositionAlreadyOpened = auto()
    BundledPositionAlreadyClosed = auto()
    DifferentWhirlpoolTickArrayAccount = auto()
    InvalidTokenMintOrder = auto()
    SqrtPriceOutOfBounds = auto()
    InvalidRewardIndex = auto()
    TickArrayIndexOutofBounds = auto()
    TickArraySequenceInvalidIndex = auto()
    RemainingAccountsInvalidSlice = auto()
    RemainingAccountsInsufficient = auto()
    RemainingAccountsDuplicatedAccountsType = auto()
    TooManySupplementalTickArrays = auto()
    InvalidPositionTokenAmount = auto()
    MissingOrInvalidDelegate = auto()
    NumberDowncastError = auto()
    AccountOwnedByWrongProgram = auto()
    AccountDiscriminatorNotFound = auto()
    AccountDiscriminatorMismatch = auto()
    AccountNotMutable = auto()


class WhirlpoolError(Exception):
    """An error carrying one of the pool's error codes."""

    def __init__(self, code: ErrorCode, detail: Optional[str] = None) -> None:
        self.code = code
        self.detail = detail
        super().__init__(code.name if detail is None else f"{code.name}: {detail}")


def _b58encode(raw: bytes) -> str:
    number = int.from_bytes(raw, "big")
    chars = []
    while number:
        number, remainder = divmod(number, 58)
        chars.append(_BASE58_ALPHABET[remainder])
    leading = len(raw) - len(raw.lstrip(b"\x00"))
    return "1" * leading + "".join(reversed(chars))


def _b58decode(text: str) -> bytes:
    number = 0
    for char in text:
        try:
            number = number * 58 + _BASE58_INDEX[char]
        except KeyError:
            raise ValueError(f"invalid base58 character {char!r}") from None
    leading = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\x00" * leading + body


@dataclass(frozen=True, order=True)
class Pubkey:
    """A 32-byte account address, ordered by its raw bytes."""

    raw: bytes = bytes(PUBKEY_LEN)

    def __post_init__(self) -> None:
        raw = bytes(self.raw)
        if len(raw) != PUBKEY_LEN:
            raise ValueError(f"a public key is {PUBKEY_LEN} bytes, got {len(raw)}")
        object.__setattr__(self, "raw", raw)

    @classmethod
    def from_base58(cls, text: str) -> "Pubkey":
        """Parse the base58 text form of a key."""
        return cls(_b58decode(text))

    def is_default(self) -> bool:
        """True for the all-zero key."""
        return self.raw == bytes(PUBKEY_LEN)

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return _b58encode(self.raw)


SYSTEM_PROGRAM_ID = Pubkey()


@dataclass
class AccountInfo:
    """A view of an account handed to an instruction."""

    key: Pubkey
    owner: Pubkey = field(default_factory=Pubkey)
    data: bytearray = field(default_factory=bytearray)
    is_signer: bool = False
    is_writable: bool = False
    lamports: int = 0

    def data_is_empty(self) -> bool:
        """True when the account holds no data."""
        return len(self.data) == 0


@dataclass
class TokenAccount:
    """The fields of a token account that authority checks look at."""

    mint: Pubkey = field(default_factory=Pubkey)
    owner: Pubkey = field(default_factory=Pubkey)
    amount: int = 0
    delegate: Optional[Pubkey] = None
    delegated_amount: int = 0
    frozen: bool = False


def _is_on_curve(raw: bytes) -> bool:
    y = (int.from_bytes(raw, "little") & ((1 << 255) - 1)) % _P
    yy = y * y % _P
    u = (yy - 1) % _P
    v = (_D * yy + 1) % _P
    w = u * pow(v, -1, _P) % _P
    return w == 0 or pow(w, (_P - 1) // 2, _P) == 1


def _check_seeds(seeds: list[bytes]) -> None:
    if len(seeds) > MAX_SEEDS:
        raise ValueError(f"at most {MAX_SEEDS} seeds are allowed")
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise ValueError(f"a seed is at most {MAX_SEED_LEN} bytes")


def _derive(seeds: list[bytes], program_id: Pubkey) -> Optional[Pubkey]:
    digest = hashlib.sha256()
    for seed in seeds:
        digest.update(seed)
    digest.update(bytes(program_id))
    digest.update(_PDA_MARKER)
    raw = digest.digest()
    return None if _is_on_curve(raw) else Pubkey(raw)


def create_program_address(seeds: Iterable[bytes], program_id: Pubkey) -> Pubkey:
    """Derive a program address from seeds; raises ValueError if it lies on the curve."""
    seed_list = [bytes(seed) for seed in seeds]
    _check_seeds(seed_list)
    address = _derive(seed_list, program_id)
    if address is None:
        raise ValueError("derived address lies on the ed25519 curve")
    return address


def find_program_address(seeds: Iterable[bytes], program_id: Pubkey) -> tuple[Pubkey, int]:
    """Find the first off-curve program address, trying bump seeds from 255 down."""
    seed_list = [bytes(seed) for seed in seeds]
    _check_seeds(seed_list + [b"\x00"])
    for bump in range(255, -1, -1):
        address = _derive(seed_list + [bytes([bump])], program_id)
        if address is not None:
            return address, bump
    raise ValueError("no viable bump seed found")


def validate_owner(expected_owner: Pubkey, owner_account_info: AccountInfo) -> None:
    """Require the account to be the expected owner and to have signed."""
    if expected_owner != owner_account_info.key or not owner_account_info.is_signer:
        raise WhirlpoolError(ErrorCode.MissingOrInvalidDelegate)


def verify_position_authority(
    position_token_account: TokenAccount, position_authority: AccountInfo
) -> None:
    """Check that the signer owns, or is the single-token delegate of, the position token."""
    delegate = position_token_account.delegate
    if delegate is not None and position_authority.key == delegate:
        validate_owner(delegate, position_authority)
        if position_token_account.delegated_amount != 1:
            raise WhirlpoolError(ErrorCode.InvalidPositionTokenAmount)
    else:
        validate_owner(position_token_account.owner, position_authority)


def verify_position_bundle_authority(
    position_bundle_token_account: TokenAccount, position_bundle_authority: AccountInfo
) -> None:
    """Check authority over a position bundle token; same rules as for a position."""
    verify_position_authority(position_bundle_token_account, position_bundle_authority)


def to_timestamp_u64(t: int) -> int:
    """Convert a signed clock timestamp to an unsigned one."""
    if not 0 <= t < 2**64:
        raise WhirlpoolError(ErrorCode.InvalidTimestampConversion)
    return t


def is_locked_position(position_token_account: TokenAccount) -> bool:
    """A position is locked while its token account is frozen."""
    return position_token_account.frozen