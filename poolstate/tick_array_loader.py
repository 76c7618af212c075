"""Loading tick arrays of either layout from account data."""

from __future__ import annotations

from typing import Optional

from poolstate.common import AccountInfo, ErrorCode, Pubkey, WhirlpoolError
from poolstate.dynamic_tick_array import DynamicTickArray
from poolstate.fixed_tick_array import FixedTickArray
from poolstate.tick_array import (
    DISCRIMINATOR_LEN,
    DYNAMIC_TICK_ARRAY_DISCRIMINATOR,
    FIXED_TICK_ARRAY_DISCRIMINATOR,
    TickArrayType,
)


def _view_tick_array(data: memoryview, whirlpool: Pubkey) -> TickArrayType:
    if len(data) < DISCRIMINATOR_LEN:
        raise WhirlpoolError(ErrorCode.AccountDiscriminatorNotFound)
    discriminator = bytes(data[:DISCRIMINATOR_LEN])
    body = data[DISCRIMINATOR_LEN:]
    tick_array: TickArrayType
    if discriminator == FIXED_TICK_ARRAY_DISCRIMINATOR:
        tick_array = FixedTickArray(body)
    elif discriminator == DYNAMIC_TICK_ARRAY_DISCRIMINATOR:
        tick_array = DynamicTickArray(body)
    else:
        raise WhirlpoolError(ErrorCode.AccountDiscriminatorMismatch)
    if tick_array.whirlpool() != whirlpool:
        raise WhirlpoolError(ErrorCode.DifferentWhirlpoolTickArrayAccount)
    return tick_array


def load_tick_array(account: AccountInfo, whirlpool: Pubkey, program_id: Pubkey) -> TickArrayType:
    """A read-only tick array over the account's data."""
    if account.owner != program_id:
        raise WhirlpoolError(ErrorCode.AccountOwnedByWrongProgram)
    return _view_tick_array(memoryview(account.data).toreadonly(), whirlpool)


def load_tick_array_mut(
    account: AccountInfo, whirlpool: Pubkey, program_id: Pubkey
) -> TickArrayType:
    """A tick array whose updates are written into the account's data."""
    if not account.is_writable:
        raise WhirlpoolError(ErrorCode.AccountNotMutable)
    if account.owner != program_id:
        raise WhirlpoolError(ErrorCode.AccountOwnedByWrongProgram)
    return _view_tick_array(memoryview(account.data), whirlpool)


class TickArraysMut:
    """The lower and upper tick arrays of a position, loaded for writing.

    When both refer to the same account only one array is loaded.
    """

    def __init__(self, lower: TickArrayType, upper: Optional[TickArrayType] = None) -> None:
        self._lower = lower
        self._upper = upper

    @classmethod
    def load(
        cls,
        lower_tick_array_info: AccountInfo,
        upper_tick_array_info: AccountInfo,
        whirlpool: Pubkey,
        program_id: Pubkey,
    ) -> "TickArraysMut":
        """Load both arrays, sharing one when the accounts are the same."""
        lower = load_tick_array_mut(lower_tick_array_info, whirlpool, program_id)
        if lower_tick_array_info.key == upper_tick_array_info.key:
            upper = None
        else:
            upper = load_tick_array_mut(upper_tick_array_info, whirlpool, program_id)
        return cls(lower, upper)

    def deref(self) -> tuple[TickArrayType, TickArrayType]:
        """The lower and upper arrays; the same object twice when shared."""
        return self._lower, self._upper if self._upper is not None else self._lower

    def deref_mut(self) -> tuple[TickArrayType, Optional[TickArrayType]]:
        """The lower array and the upper one, or None when it is the same account."""
        return self._lower, self._upper