import pytest

from poolstate.common import ErrorCode, WhirlpoolError
from poolstate.tick import TICK_ARRAY_SIZE, Tick, TickUpdate
from poolstate.zeroed_tick_array import ZeroedTickArray

SPACING = 2
START = TICK_ARRAY_SIZE * SPACING


def test_start_and_size():
    array = ZeroedTickArray(START)
    assert array.start_tick_index() == START
    assert array.is_variable_size() is False


def test_search_in_range_finds_nothing():
    array = ZeroedTickArray(START)
    assert array.get_next_init_tick_index(START + 10, SPACING, True) is None
    assert array.get_next_init_tick_index(START - 1, SPACING, False) is None


def test_search_out_of_range_raises():
    array = ZeroedTickArray(START)
    with pytest.raises(WhirlpoolError) as err:
        array.get_next_init_tick_index(START - 1, SPACING, True)
    assert err.value.code is ErrorCode.InvalidTickArraySequence


def test_zero_spacing_search_raises_sequence_error():
    with pytest.raises(WhirlpoolError) as err:
        ZeroedTickArray(0).get_next_init_tick_index(0, 0, True)
    assert err.value.code is ErrorCode.InvalidTickArraySequence


def test_get_tick_returns_fresh_zero_tick():
    array = ZeroedTickArray(START)
    tick = array.get_tick(START + SPACING * 3, SPACING)
    assert tick == Tick()
    tick.liquidity_gross = 5
    assert array.get_tick(START + SPACING * 3, SPACING) == Tick()


def test_get_tick_unusable_index():
    with pytest.raises(WhirlpoolError) as err:
        ZeroedTickArray(START).get_tick(START + 1, SPACING)
    assert err.value.code is ErrorCode.TickNotFound


def test_get_tick_outside_array():
    with pytest.raises(WhirlpoolError) as err:
        ZeroedTickArray(START).get_tick(START - SPACING, SPACING)
    assert err.value.code is ErrorCode.TickNotFound


def test_update_and_whirlpool_are_refused():
    array = ZeroedTickArray(START)
    with pytest.raises(RuntimeError):
        array.update_tick(START, SPACING, TickUpdate())
    with pytest.raises(RuntimeError):
        array.whirlpool()