# poolstate

`poolstate` models the state accounts of a concentrated-liquidity pool. It covers the pool account
itself, ticks and the three tick-array layouts (fixed, dynamic and zeroed), and positions and
position bundles. It also covers fee tiers, the oracle that holds adaptive fee state, the
configuration, token-badge and lock accounts, and the helpers a swap uses to walk across tick arrays.

It depends only on the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Overview

- `poolstate.common`: `Pubkey` (32 raw bytes, base58 text form), `AccountInfo`, `TokenAccount`,
  the `ErrorCode` enum and the `WhirlpoolError` exception. It also has program-address derivation
  (`create_program_address`, `find_program_address`), authority checks (`validate_owner`,
  `verify_position_authority`, `verify_position_bundle_authority`), `to_timestamp_u64` and
  `is_locked_position`.
- `poolstate.tick`: `Tick` (with `to_bytes`/`from_bytes`), `TickUpdate`, and the index rules
  `check_is_out_of_bounds`, `check_is_usable_tick`, `check_is_valid_start_tick`,
  `full_range_indexes` and `bound_tick_index`.
- `poolstate.tick_array`: the `TickArrayType` base class with the offset and search-range logic,
  `get_offset` and `account_discriminator`.
- `poolstate.fixed_tick_array`: `FixedTickArray`, which stores every tick in full.
- `poolstate.dynamic_tick_array`: `DynamicTickArray` and `DynamicTickData`. This layout stores full
  data only for initialized ticks and tracks them in a bitmap.
- `poolstate.zeroed_tick_array`: `ZeroedTickArray`, a read-only stand-in for an array account that
  does not exist yet.
- `poolstate.tick_array_loader`: `load_tick_array`, `load_tick_array_mut` and `TickArraysMut`. These
  pick the layout from the account's discriminator and work directly on the account's data.
- `poolstate.swap_tick_sequence`: `SwapTickSequence`, which finds the next initialized tick across up
  to three arrays.
- `poolstate.sparse_swap`: `SparseSwapTickSequenceBuilder`, `get_start_tick_indexes` and
  `derive_tick_array_pda`. These assemble a swap's arrays from accounts given in any order.
- `poolstate.whirlpool`: `Whirlpool`, `WhirlpoolRewardInfo`, `to_reward_growths`, and the limits
  `MAX_FEE_RATE` and `MAX_PROTOCOL_FEE_RATE`.
- `poolstate.position`: `Position`, `PositionUpdate`, `PositionRewardInfo` and `validate_tick_range`.
- `poolstate.position_bundle`: `PositionBundle`, a 256-slot bitmap of bundled positions.
- `poolstate.oracle`: `AdaptiveFeeConstants`, `AdaptiveFeeVariables`, `AdaptiveFeeInfo`, `Oracle`,
  `OracleAccessor` and `validate_constants`.
- `poolstate.config`: `WhirlpoolsConfig` and `WhirlpoolsConfigExtension`.
- `poolstate.fee_tier`: `FeeTier` and `AdaptiveFeeTier`.
- `poolstate.token_badge`: `TokenBadge`.
- `poolstate.lock_config`: `LockConfig`, `LockType` and `LockTypeLabel`.
- `poolstate.remaining_accounts`: `parse_remaining_accounts`, which splits extra accounts into typed
  slices described by `RemainingAccountsInfo`.

Failures are raised as `WhirlpoolError`. Its `code` attribute holds the `ErrorCode`.

## Example

```python
from poolstate.common import Pubkey, WhirlpoolError
from poolstate.fixed_tick_array import FixedTickArray
from poolstate.tick import TickUpdate

pool = Pubkey(bytes(range(32)))
array = FixedTickArray()
array.initialize(pool, 64, 0)

array.update_tick(128, 64, TickUpdate(initialized=True, liquidity_gross=10))
print(array.get_next_init_tick_index(0, 64, False))  # 128

try:
    array.get_tick(130, 64)
except WhirlpoolError as exc:
    print(exc.code)  # ErrorCode.TickNotFound
```

## What it does not do

The package holds and validates state. It does not compute swaps or liquidity amounts, and it does
not convert between prices and tick indexes. It does not transfer or mint tokens, and it does not
process instructions. Accounts are plain in-memory objects (`AccountInfo` wraps a `bytearray`). The
package provides no storage, network access or command-line tool.