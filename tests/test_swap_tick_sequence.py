import pytest

from poolstate.common import ErrorCode, Pubkey, WhirlpoolError
from poolstate.fixed_tick_array import FixedTickArray
from poolstate.swap_tick_sequence import SwapTickSequence
from poolstate.tick import MAX_TICK_INDEX, MIN_TICK_INDEX, TICK_ARRAY_SIZE, Tick, TickUpdate
from poolstate.zeroed_tick_array import ZeroedTickArray

SPACING = 64
TICKS = TICK_ARRAY_SIZE * SPACING
POOL = Pubkey(bytes([7]) * 32)


def fixed(start: int) -> FixedTickArray:
    array = FixedTickArray()
    array.initialize(POOL, SPACING, start)
    return array


def init_update(liquidity: int = 10) -> TickUpdate:
    return TickUpdate(initialized=True, liquidity_net=liquidity, liquidity_gross=liquidity)


def test_arrays_skip_missing():
    seq = SwapTickSequence(fixed(0), None, fixed(TICKS))
    assert len(seq.arrays) == 2


def test_get_and_update_tick():
    seq = SwapTickSequence(fixed(0), fixed(TICKS))
    seq.update_tick(1, TICKS + SPACING, SPACING, init_update(42))
    tick = seq.get_tick(1, TICKS + SPACING, SPACING)
    assert tick == Tick.from_update(init_update(42))
    assert seq.get_tick(0, SPACING, SPACING) == Tick()


def test_array_index_out_of_bounds():
    seq = SwapTickSequence(fixed(0))
    for call in (
        lambda: seq.get_tick(1, 0, SPACING),
        lambda: seq.update_tick(3, 0, SPACING, init_update()),
        lambda: seq.get_tick_offset(2, 0, SPACING),
    ):
        with pytest.raises(WhirlpoolError) as info:
            call()
        assert info.value.code is ErrorCode.TickArrayIndexOutofBounds


def test_get_tick_offset():
    seq = SwapTickSequence(fixed(0))
    assert seq.get_tick_offset(0, 5 * SPACING, SPACING) == 5
    assert seq.get_tick_offset(0, -1, SPACING) == -1


def test_found_in_first_array_a_to_b():
    array = fixed(0)
    array.update_tick(10 * SPACING, SPACING, init_update())
    seq = SwapTickSequence(array, fixed(-TICKS))
    assert seq.get_next_initialized_tick_index(20 * SPACING, SPACING, True, 0) == (0, 10 * SPACING)


def test_found_in_second_array_b_to_a():
    second = fixed(TICKS)
    second.update_tick(TICKS + 2 * SPACING, SPACING, init_update())
    seq = SwapTickSequence(fixed(0), second, fixed(2 * TICKS))
    result = seq.get_next_initialized_tick_index(0, SPACING, False, 0)
    assert result == (1, TICKS + 2 * SPACING)


def test_b_to_a_start_tick_of_next_array_is_found():
    second = fixed(TICKS)
    second.update_tick(TICKS, SPACING, init_update())
    seq = SwapTickSequence(fixed(0), second)
    assert seq.get_next_initialized_tick_index(0, SPACING, False, 0) == (1, TICKS)


def test_exhausted_b_to_a_returns_last_tick_of_last_array():
    seq = SwapTickSequence(fixed(0), fixed(TICKS), fixed(2 * TICKS))
    result = seq.get_next_initialized_tick_index(0, SPACING, False, 0)
    assert result == (2, 2 * TICKS + TICKS - 1)


def test_exhausted_a_to_b_returns_start_of_last_array():
    seq = SwapTickSequence(fixed(0), fixed(-TICKS), fixed(-2 * TICKS))
    result = seq.get_next_initialized_tick_index(SPACING, SPACING, True, 0)
    assert result == (2, -2 * TICKS)


def test_min_tick_array_returns_min_tick_index():
    start = -444928
    seq = SwapTickSequence(ZeroedTickArray(start))
    assert seq.get_next_initialized_tick_index(-440000, SPACING, True, 0) == (0, MIN_TICK_INDEX)


def test_max_tick_array_returns_max_tick_index():
    start = 439296
    seq = SwapTickSequence(ZeroedTickArray(start))
    assert seq.get_next_initialized_tick_index(440000, SPACING, False, 0) == (0, MAX_TICK_INDEX)


def test_mixed_zeroed_and_fixed_arrays():
    third = fixed(2 * TICKS)
    third.update_tick(2 * TICKS + 3 * SPACING, SPACING, init_update())
    seq = SwapTickSequence(fixed(0), ZeroedTickArray(TICKS), third)
    result = seq.get_next_initialized_tick_index(0, SPACING, False, 0)
    assert result == (2, 2 * TICKS + 3 * SPACING)


def test_invalid_start_array_index():
    seq = SwapTickSequence(fixed(0))
    with pytest.raises(WhirlpoolError) as info:
        seq.get_next_initialized_tick_index(0, SPACING, True, 5)
    assert info.value.code is ErrorCode.TickArraySequenceInvalidIndex


def test_search_outside_array_range():
    seq = SwapTickSequence(fixed(0))
    with pytest.raises(WhirlpoolError) as info:
        seq.get_next_initialized_tick_index(TICKS + 5, SPACING, True, 0)
    assert info.value.code is ErrorCode.InvalidTickArraySequence


def test_out_of_order_arrays_rejected():
    seq = SwapTickSequence(fixed(0), fixed(2 * TICKS))
    with pytest.raises(WhirlpoolError) as info:
        seq.get_next_initialized_tick_index(0, SPACING, False, 0)
    assert info.value.code is ErrorCode.InvalidTickArraySequence