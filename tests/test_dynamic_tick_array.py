import pytest

from poolstate.common import ErrorCode, Pubkey, WhirlpoolError
from poolstate.dynamic_tick_array import DynamicTickArray, DynamicTickData
from poolstate.fixed_tick_array import FixedTickArray
from poolstate.tick import TICK_ARRAY_SIZE, Tick, TickUpdate

POOL = Pubkey(bytes([6]) * 32)


def _update(net=-5000, gross=5000, initialized=True):
    return TickUpdate(
        initialized=initialized,
        liquidity_net=net,
        liquidity_gross=gross,
        fee_growth_outside_a=1 << 70,
        fee_growth_outside_b=3,
        reward_growths_outside=(1, 2, 3),
    )


def _array(spacing=1, start=0, buffer=None):
    array = DynamicTickArray(buffer)
    array.initialize(POOL, spacing, start)
    return array


def test_tick_data_round_trip():
    update = _update()
    tick = DynamicTickData.from_update(update).to_tick()
    assert tick.initialized is True
    assert TickUpdate.from_tick(tick) == update


def test_fresh_array_is_empty():
    array = DynamicTickArray()
    assert array.tick_bitmap() == 0
    assert array.start_tick_index() == 0
    assert array.whirlpool().is_default()
    assert array.is_variable_size() is True
    assert array.get_tick(5, 1) == Tick()


def test_initialize_writes_header():
    buffer = bytearray(DynamicTickArray.MAX_LEN - len(DynamicTickArray.DISCRIMINATOR))
    start = -TICK_ARRAY_SIZE * 2
    array = _array(spacing=2, start=start, buffer=buffer)
    assert array.start_tick_index() == start
    assert array.whirlpool() == POOL
    assert bytes(buffer[0:4]) == start.to_bytes(4, "little", signed=True)
    assert bytes(buffer[4:36]) == bytes(POOL)


def test_initialize_rejects_invalid_start():
    with pytest.raises(WhirlpoolError) as info:
        DynamicTickArray().initialize(POOL, 4, 3)
    assert info.value.code is ErrorCode.InvalidStartTick


def test_update_sets_bitmap_and_round_trips():
    array = _array()
    update = _update()
    array.update_tick(3, 1, update)
    assert array.tick_bitmap() == 1 << 3
    assert TickUpdate.from_tick(array.get_tick(3, 1)) == update
    assert array.get_tick(2, 1) == Tick()
    assert array.get_tick(4, 1) == Tick()


def test_several_ticks_in_any_order():
    array = _array()
    updates = {40: _update(net=-1), 0: _update(net=2), 87: _update(net=-3), 20: _update(net=4)}
    for index, update in updates.items():
        array.update_tick(index, 1, update)
    for index, update in updates.items():
        assert TickUpdate.from_tick(array.get_tick(index, 1)) == update
    assert array.tick_bitmap() == sum(1 << index for index in updates)


def test_rewriting_initialized_tick_keeps_neighbours():
    array = _array()
    array.update_tick(5, 1, _update(net=1))
    array.update_tick(6, 1, _update(net=2))
    array.update_tick(5, 1, _update(net=9))
    assert array.get_tick(5, 1).liquidity_net == 9
    assert array.get_tick(6, 1).liquidity_net == 2


def test_uninitializing_removes_tick():
    array = _array()
    array.update_tick(5, 1, _update(net=1))
    array.update_tick(6, 1, _update(net=2))
    array.update_tick(5, 1, TickUpdate())
    assert array.get_tick(5, 1) == Tick()
    assert array.get_tick(6, 1).liquidity_net == 2
    assert array.tick_bitmap() == 1 << 6
    array.update_tick(6, 1, TickUpdate())
    assert array.tick_bitmap() == 0
    assert all(array.get_tick(i, 1) == Tick() for i in range(TICK_ARRAY_SIZE))


def test_matches_fixed_array_behaviour():
    spacing = 4
    fixed = FixedTickArray()
    fixed.initialize(POOL, spacing, 0)
    dynamic = _array(spacing=spacing)
    steps = [
        (8, _update(net=1)),
        (0, _update(net=2)),
        (40, _update(net=3)),
        (8, TickUpdate()),
        (348, _update(net=5)),
        (0, _update(net=7)),
        (12, TickUpdate()),
    ]
    for index, update in steps:
        fixed.update_tick(index, spacing, update)
        dynamic.update_tick(index, spacing, update)
    for index in range(0, TICK_ARRAY_SIZE * spacing, spacing):
        assert dynamic.get_tick(index, spacing) == fixed.get_tick(index, spacing)
    for index in range(0, TICK_ARRAY_SIZE * spacing):
        assert dynamic.get_next_init_tick_index(index, spacing, True) == (
            fixed.get_next_init_tick_index(index, spacing, True)
        )
    for index in range(-spacing, TICK_ARRAY_SIZE * spacing - spacing):
        assert dynamic.get_next_init_tick_index(index, spacing, False) == (
            fixed.get_next_init_tick_index(index, spacing, False)
        )


def test_next_init_tick_directions():
    array = _array()
    array.update_tick(10, 1, _update())
    assert array.get_next_init_tick_index(10, 1, True) == 10
    assert array.get_next_init_tick_index(10, 1, False) is None
    assert array.get_next_init_tick_index(9, 1, False) == 10
    assert array.get_next_init_tick_index(9, 1, True) is None


def test_search_outside_range_raises():
    array = _array()
    with pytest.raises(WhirlpoolError) as info:
        array.get_next_init_tick_index(-1, 1, True)
    assert info.value.code is ErrorCode.InvalidTickArraySequence


def test_tick_not_found_errors():
    array = _array(spacing=4)
    with pytest.raises(WhirlpoolError) as info:
        array.get_tick(2, 4)
    assert info.value.code is ErrorCode.TickNotFound
    with pytest.raises(WhirlpoolError) as info:
        array.update_tick(TICK_ARRAY_SIZE * 4, 4, _update())
    assert info.value.code is ErrorCode.TickNotFound


def test_corrupt_tag_is_rejected():
    buffer = bytearray(DynamicTickArray.MAX_LEN - len(DynamicTickArray.DISCRIMINATOR))
    array = _array(buffer=buffer)
    array.update_tick(0, 1, _update())
    array.update_tick(0, 1, TickUpdate())
    # First tick entry sits right after start index, pool key and bitmap.
    buffer[4 + 32 + 16] = 7
    with pytest.raises(ValueError):
        array.get_tick(0, 1)


def test_buffer_too_small_is_rejected():
    with pytest.raises(ValueError):
        DynamicTickArray(bytearray(10))