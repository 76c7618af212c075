import pytest

from poolstate.common import ErrorCode, Pubkey, WhirlpoolError
from poolstate.fixed_tick_array import FixedTickArray
from poolstate.tick import TICK_ARRAY_SIZE, Tick, TickUpdate

POOL = Pubkey(bytes([5]) * 32)


def _update(net=-5000, gross=5000, initialized=True):
    return TickUpdate(
        initialized=initialized,
        liquidity_net=net,
        liquidity_gross=gross,
        fee_growth_outside_a=1 << 70,
        fee_growth_outside_b=3,
        reward_growths_outside=(1, 2, 3),
    )


def _array(spacing=1, start=0):
    array = FixedTickArray()
    array.initialize(POOL, spacing, start)
    return array


def test_default_array_is_empty():
    array = FixedTickArray()
    assert array.start_tick_index() == 0
    assert array.whirlpool().is_default()
    assert array.is_variable_size() is False
    assert array.get_tick(0, 1) == Tick()


def test_initialize_sets_header():
    start = TICK_ARRAY_SIZE * 64
    array = _array(spacing=64, start=start)
    assert array.start_tick_index() == start
    assert array.whirlpool() == POOL


def test_initialize_rejects_invalid_start():
    with pytest.raises(WhirlpoolError) as info:
        FixedTickArray().initialize(POOL, 64, 1)
    assert info.value.code is ErrorCode.InvalidStartTick


def test_update_then_get_round_trip():
    array = _array()
    update = _update()
    array.update_tick(10, 1, update)
    assert TickUpdate.from_tick(array.get_tick(10, 1)) == update
    assert array.get_tick(11, 1) == Tick()


def test_get_tick_out_of_array_raises():
    array = _array()
    with pytest.raises(WhirlpoolError) as info:
        array.get_tick(TICK_ARRAY_SIZE, 1)
    assert info.value.code is ErrorCode.TickNotFound


def test_get_tick_not_usable_raises():
    array = _array(spacing=4)
    with pytest.raises(WhirlpoolError) as info:
        array.get_tick(3, 4)
    assert info.value.code is ErrorCode.TickNotFound


def test_update_tick_out_of_array_raises():
    array = _array()
    with pytest.raises(WhirlpoolError) as info:
        array.update_tick(-1, 1, _update())
    assert info.value.code is ErrorCode.TickNotFound


def test_next_init_tick_a_to_b_is_inclusive():
    array = _array()
    array.update_tick(10, 1, _update())
    assert array.get_next_init_tick_index(20, 1, True) == 10
    assert array.get_next_init_tick_index(10, 1, True) == 10
    assert array.get_next_init_tick_index(9, 1, True) is None


def test_next_init_tick_b_to_a_is_exclusive():
    array = _array()
    array.update_tick(10, 1, _update())
    assert array.get_next_init_tick_index(5, 1, False) == 10
    assert array.get_next_init_tick_index(10, 1, False) is None


def test_b_to_a_search_range_is_shifted():
    array = _array()
    array.update_tick(0, 1, _update())
    assert array.get_next_init_tick_index(-1, 1, False) == 0
    with pytest.raises(WhirlpoolError) as info:
        array.get_next_init_tick_index(TICK_ARRAY_SIZE - 1, 1, False)
    assert info.value.code is ErrorCode.InvalidTickArraySequence


def test_a_to_b_outside_range_raises():
    array = _array()
    with pytest.raises(WhirlpoolError) as info:
        array.get_next_init_tick_index(TICK_ARRAY_SIZE, 1, True)
    assert info.value.code is ErrorCode.InvalidTickArraySequence


def test_bytes_round_trip():
    array = _array(spacing=8, start=TICK_ARRAY_SIZE * 8)
    tick_index = TICK_ARRAY_SIZE * 8 + 16
    array.update_tick(tick_index, 8, _update())
    copy = FixedTickArray.from_bytes(array.to_bytes())
    assert copy.to_bytes() == array.to_bytes()
    assert copy.get_tick(tick_index, 8) == array.get_tick(tick_index, 8)
    assert len(array.to_bytes()) == FixedTickArray.LEN - len(FixedTickArray.DISCRIMINATOR)


def test_layout_places_fields_in_order():
    start = -TICK_ARRAY_SIZE
    array = _array(spacing=1, start=start)
    array.update_tick(start + 2, 1, _update())
    raw = array.to_bytes()
    assert raw[:4] == start.to_bytes(4, "little", signed=True)
    assert raw[4 + 2 * Tick.LEN : 4 + 3 * Tick.LEN] == Tick.from_update(_update()).to_bytes()
    assert raw[-32:] == bytes(POOL)


def test_from_bytes_rejects_wrong_size():
    with pytest.raises(ValueError):
        FixedTickArray.from_bytes(bytes(10))


def test_uninitializing_update_clears_flag():
    array = _array()
    array.update_tick(4, 1, _update())
    array.update_tick(4, 1, TickUpdate())
    assert array.get_tick(4, 1) == Tick()
    assert array.get_next_init_tick_index(TICK_ARRAY_SIZE - 1, 1, True) is None