"""Splitting an instruction's extra accounts into typed slices."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

from poolstate.common import ErrorCode, WhirlpoolError

MAX_SUPPLEMENTAL_TICK_ARRAYS_LEN = 3


class AccountsType(Enum):
    """What a slice of remaining accounts is for; the value names its parsed field."""

    TransferHookA = "transfer_hook_a"
    TransferHookB = "transfer_hook_b"
    TransferHookReward = "transfer_hook_reward"
    TransferHookInput = "transfer_hook_input"
    TransferHookIntermediate = "transfer_hook_intermediate"
    TransferHookOutput = "transfer_hook_output"
    SupplementalTickArrays = "supplemental_tick_arrays"
    SupplementalTickArraysOne = "supplemental_tick_arrays_one"
    SupplementalTickArraysTwo = "supplemental_tick_arrays_two"


_SUPPLEMENTAL_TYPES = frozenset(
    {
        AccountsType.SupplementalTickArrays,
        AccountsType.SupplementalTickArraysOne,
        AccountsType.SupplementalTickArraysTwo,
    }
)


@dataclass
class RemainingAccountsSlice:
    """A run of `length` consecutive accounts of one type."""

    accounts_type: AccountsType
    length: int


@dataclass
class RemainingAccountsInfo:
    """How the remaining accounts are split, in order."""

    slices: list[RemainingAccountsSlice] = field(default_factory=list)


@dataclass
class ParsedRemainingAccounts:
    """The remaining accounts grouped by type; None where no slice was given."""

    transfer_hook_a: Optional[list[Any]] = None
    transfer_hook_b: Optional[list[Any]] = None
    transfer_hook_reward: Optional[list[Any]] = None
    transfer_hook_input: Optional[list[Any]] = None
    transfer_hook_intermediate: Optional[list[Any]] = None
    transfer_hook_output: Optional[list[Any]] = None
    supplemental_tick_arrays: Optional[list[Any]] = None
    supplemental_tick_arrays_one: Optional[list[Any]] = None
    supplemental_tick_arrays_two: Optional[list[Any]] = None


def parse_remaining_accounts(
    remaining_accounts: Sequence[Any],
    remaining_accounts_info: Optional[RemainingAccountsInfo],
    valid_accounts_type_list: Sequence[AccountsType],
) -> ParsedRemainingAccounts:
    """Assign the remaining accounts to their slices, in order.

    Slices of an unlisted type, more accounts than remain, a type given twice
    or too many supplemental tick arrays are errors. Empty slices are skipped.
    """
    parsed = ParsedRemainingAccounts()
    if remaining_accounts_info is None:
        return parsed

    accounts_iter = iter(remaining_accounts)
    for piece in remaining_accounts_info.slices:
        if piece.accounts_type not in valid_accounts_type_list:
            raise WhirlpoolError(ErrorCode.RemainingAccountsInvalidSlice)
        if piece.length == 0:
            continue

        accounts = []
        for _ in range(piece.length):
            account = next(accounts_iter, None)
            if account is None:
                raise WhirlpoolError(ErrorCode.RemainingAccountsInsufficient)
            accounts.append(account)

        if (
            piece.accounts_type in _SUPPLEMENTAL_TYPES
            and len(accounts) > MAX_SUPPLEMENTAL_TICK_ARRAYS_LEN
        ):
            raise WhirlpoolError(ErrorCode.TooManySupplementalTickArrays)

        name = piece.accounts_type.value
        if getattr(parsed, name) is not None:
            raise WhirlpoolError(ErrorCode.RemainingAccountsDuplicatedAccountsType)
        setattr(parsed, name, accounts)

    return parsed