from poolstate.common import Pubkey
from poolstate.token_badge import TokenBadge


def test_default_badge_is_empty():
    badge = TokenBadge()
    assert badge.whirlpools_config.is_default()
    assert badge.token_mint.is_default()


def test_initialize_sets_config_and_mint():
    config = Pubkey(bytes([4]) * 32)
    mint = Pubkey(bytes([5]) * 32)
    badge = TokenBadge()
    badge.initialize(config, mint)
    assert badge.whirlpools_config == config
    assert badge.token_mint == mint


def test_initialize_overwrites():
    badge = TokenBadge()
    badge.initialize(Pubkey(bytes([1]) * 32), Pubkey(bytes([2]) * 32))
    badge.initialize(Pubkey(bytes([3]) * 32), Pubkey(bytes([6]) * 32))
    assert badge == TokenBadge(Pubkey(bytes([3]) * 32), Pubkey(bytes([6]) * 32))