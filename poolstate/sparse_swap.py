"""Assembling a swap's tick array sequence from accounts given in any order."""

from __future__ import annotations

from typing import Iterable, Optional

from poolstate.common import (
    SYSTEM_PROGRAM_ID,
    AccountInfo,
    ErrorCode,
    Pubkey,
    WhirlpoolError,
    find_program_address,
)
from poolstate.swap_tick_sequence import SwapTickSequence
from poolstate.tick import TICK_ARRAY_SIZE, check_is_valid_start_tick
from poolstate.tick_array import TickArrayType
from poolstate.tick_array_loader import load_tick_array_mut
from poolstate.whirlpool import Whirlpool
from poolstate.zeroed_tick_array import ZeroedTickArray


def get_start_tick_indexes(tick_current_index: int, tick_spacing: int, a_to_b: bool) -> list[int]:
    """Start indexes of the (up to three) tick arrays a swap from the current tick needs."""
    ticks_in_array = TICK_ARRAY_SIZE * tick_spacing
    base = (tick_current_index // ticks_in_array) * ticks_in_array
    if a_to_b:
        offsets = (0, -1, -2)
    elif tick_current_index + tick_spacing >= base + ticks_in_array:
        offsets = (1, 2, 3)
    else:
        offsets = (0, 1, 2)
    candidates = (base + offset * ticks_in_array for offset in offsets)
    return [start for start in candidates if check_is_valid_start_tick(start, tick_spacing)]


def derive_tick_array_pda(whirlpool_key: Pubkey, start_tick_index: int, program_id: Pubkey) -> Pubkey:
    """The address of the tick array account starting at the index."""
    seeds = [b"tick_array", bytes(whirlpool_key), str(start_tick_index).encode()]
    return find_program_address(seeds, program_id)[0]


def _maybe_load_tick_array(
    account_info: AccountInfo, whirlpool_key: Pubkey, program_id: Pubkey
) -> Optional[TickArrayType]:
    if account_info.owner == SYSTEM_PROGRAM_ID and account_info.data_is_empty():
        return None
    return load_tick_array_mut(account_info, whirlpool_key, program_id)


class SparseSwapTickSequenceBuilder:
    """Collects candidate tick array accounts, deduplicated by key.

    Accounts may be given in any order; extra ones act as a fallback in
    case the price has moved. At most three arrays are used in one swap.
    """

    def __init__(
        self,
        static_tick_array_account_infos: Iterable[AccountInfo],
        supplemental_tick_array_account_infos: Optional[Iterable[AccountInfo]] = None,
    ) -> None:
        accounts = list(static_tick_array_account_infos)
        if supplemental_tick_array_account_infos is not None:
            accounts.extend(supplemental_tick_array_account_infos)
        unique: dict[Pubkey, AccountInfo] = {}
        for account in sorted(accounts, key=lambda a: a.key):
            unique.setdefault(account.key, account)
        self.tick_array_accounts: list[AccountInfo] = list(unique.values())

    def try_build(
        self, whirlpool_key: Pubkey, whirlpool: Whirlpool, a_to_b: bool, program_id: Pubkey
    ) -> SwapTickSequence:
        """Build the sequence of tick arrays the swap walks, in swap order.

        Uncreated arrays whose address was supplied are stood in for by
        zeroed arrays. Raises InvalidTickArraySequence if not even the first
        array is available.
        """
        loaded: list[TickArrayType] = []
        for account_info in self.tick_array_accounts:
            tick_array = _maybe_load_tick_array(account_info, whirlpool_key, program_id)
            if tick_array is not None:
                loaded.append(tick_array)

        supplied_keys = {account.key for account in self.tick_array_accounts}
        required: list[TickArrayType] = []
        for start_tick_index in get_start_tick_indexes(
            whirlpool.tick_current_index, whirlpool.tick_spacing, a_to_b
        ):
            match = next(
                (ta for ta in loaded if ta.start_tick_index() == start_tick_index), None
            )
            if match is not None:
                loaded.remove(match)
                required.append(match)
                continue
            pda = derive_tick_array_pda(whirlpool_key, start_tick_index, program_id)
            if pda in supplied_keys:
                required.append(ZeroedTickArray(start_tick_index))
                continue
            break

        if not required:
            raise WhirlpoolError(ErrorCode.InvalidTickArraySequence)
        return SwapTickSequence(*required[:3])