import pytest

from poolstate.common import (
    AccountInfo,
    ErrorCode,
    Pubkey,
    TokenAccount,
    WhirlpoolError,
    create_program_address,
    find_program_address,
    is_locked_position,
    to_timestamp_u64,
    validate_owner,
    verify_position_authority,
    verify_position_bundle_authority,
)


def key(n):
    return Pubkey(bytes([n]) * 32)


def test_default_pubkey_is_all_ones_in_base58():
    assert Pubkey().is_default()
    assert str(Pubkey()) == "1" * 32


def test_base58_round_trip():
    k = Pubkey(bytes(range(32)))
    assert Pubkey.from_base58(str(k)) == k
    assert not k.is_default()


def test_base58_rejects_bad_character():
    with pytest.raises(ValueError):
        Pubkey.from_base58("0" * 32)


def test_pubkey_length_is_checked():
    with pytest.raises(ValueError):
        Pubkey(b"\x01" * 31)


def test_pubkey_ordering_follows_bytes():
    assert sorted([key(3), key(1), key(2)]) == [key(1), key(2), key(3)]


def test_find_program_address_matches_create():
    program = key(7)
    seeds = [b"tick_array", bytes(key(9)), b"0"]
    address, bump = find_program_address(seeds, program)
    assert 0 <= bump <= 255
    assert create_program_address(seeds + [bytes([bump])], program) == address
    assert find_program_address(seeds, program) == (address, bump)


def test_find_program_address_depends_on_seeds():
    program = key(7)
    first, _ = find_program_address([b"a"], program)
    second, _ = find_program_address([b"b"], program)
    assert first != second


def test_seed_too_long_rejected():
    with pytest.raises(ValueError):
        create_program_address([b"x" * 33], key(1))


def test_too_many_seeds_rejected():
    with pytest.raises(ValueError):
        find_program_address([b"s"] * 16, key(1))


def test_validate_owner_wrong_key():
    with pytest.raises(WhirlpoolError) as err:
        validate_owner(key(1), AccountInfo(key=key(2), is_signer=True))
    assert err.value.code is ErrorCode.MissingOrInvalidDelegate


def test_validate_owner_not_signer():
    with pytest.raises(WhirlpoolError) as err:
        validate_owner(key(1), AccountInfo(key=key(1), is_signer=False))
    assert err.value.code is ErrorCode.MissingOrInvalidDelegate


def test_delegate_must_hold_exactly_one_token():
    account = TokenAccount(owner=key(1), delegate=key(2), delegated_amount=2)
    with pytest.raises(WhirlpoolError) as err:
        verify_position_authority(account, AccountInfo(key=key(2), is_signer=True))
    assert err.value.code is ErrorCode.InvalidPositionTokenAmount


def test_delegate_must_sign():
    account = TokenAccount(owner=key(1), delegate=key(2), delegated_amount=1)
    with pytest.raises(WhirlpoolError) as err:
        verify_position_authority(account, AccountInfo(key=key(2), is_signer=False))
    assert err.value.code is ErrorCode.MissingOrInvalidDelegate


def test_stranger_is_rejected_for_bundle():
    account = TokenAccount(owner=key(1), delegate=key(2), delegated_amount=1)
    with pytest.raises(WhirlpoolError) as err:
        verify_position_bundle_authority(account, AccountInfo(key=key(3), is_signer=True))
    assert err.value.code is ErrorCode.MissingOrInvalidDelegate


def test_to_timestamp_u64():
    assert to_timestamp_u64(1_700_000_000) == 1_700_000_000
    with pytest.raises(WhirlpoolError) as err:
        to_timestamp_u64(-1)
    assert err.value.code is ErrorCode.InvalidTimestampConversion


def test_is_locked_position():
    assert is_locked_position(TokenAccount(frozen=True)) is True
    assert is_locked_position(TokenAccount()) is False


def test_data_is_empty():
    assert AccountInfo(key=key(1)).data_is_empty() is True
    assert AccountInfo(key=key(1), data=bytearray(b"\x00")).data_is_empty() is False