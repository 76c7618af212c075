"""Token badges: a config's approval of a token mint."""

from __future__ import annotations

from dataclasses import dataclass, field

from poolstate.common import Pubkey


@dataclass
class TokenBadge:
    """Marks a token mint as approved under a pool config."""

    LEN = 8 + 32 + 32 + 128

    whirlpools_config: Pubkey = field(default_factory=Pubkey)
    token_mint: Pubkey = field(default_factory=Pubkey)

    def initialize(self, whirlpools_config: Pubkey, token_mint: Pubkey) -> None:
        """Bind the badge to a config and a mint."""
        self.whirlpools_config = whirlpools_config
        self.token_mint = token_mint