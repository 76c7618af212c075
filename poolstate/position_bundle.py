"""Position bundles: one token holding up to 256 positions, tracked in a bitmap."""

from __future__ import annotations

from dataclasses import dataclass, field

from poolstate.common import ErrorCode, Pubkey, WhirlpoolError

POSITION_BITMAP_USIZE = 32
POSITION_BUNDLE_SIZE = 8 * POSITION_BITMAP_USIZE


def is_valid_bundle_index(bundle_index: int) -> bool:
    """True when the index addresses a slot in a bundle."""
    return 0 <= bundle_index < POSITION_BUNDLE_SIZE


@dataclass
class PositionBundle:
    """A bundle mint and the bitmap of its open positions."""

    LEN = 8 + 32 + 32 + 64

    position_bundle_mint: Pubkey = field(default_factory=Pubkey)
    position_bitmap: bytearray = field(default_factory=lambda: bytearray(POSITION_BITMAP_USIZE))

    def initialize(self, position_bundle_mint: Pubkey) -> None:
        """Set the bundle's mint."""
        self.position_bundle_mint = position_bundle_mint

    def is_deletable(self) -> bool:
        """True when no bundled position is open."""
        return not any(self.position_bitmap)

    def open_bundled_position(self, bundle_index: int) -> None:
        """Mark the slot as open."""
        self._update_bitmap(bundle_index, True)

    def close_bundled_position(self, bundle_index: int) -> None:
        """Mark the slot as closed."""
        self._update_bitmap(bundle_index, False)

    def _update_bitmap(self, bundle_index: int, open_: bool) -> None:
        if not is_valid_bundle_index(bundle_index):
            raise WhirlpoolError(ErrorCode.InvalidBundleIndex)
        byte_index, bit_offset = divmod(bundle_index, 8)
        mask = 1 << bit_offset
        opened = bool(self.position_bitmap[byte_index] & mask)
        if open_ and opened:
            raise WhirlpoolError(ErrorCode.BundledPositionAlreadyOpened)
        if not open_ and not opened:
            raise WhirlpoolError(ErrorCode.BundledPositionAlreadyClosed)
        self.position_bitmap[byte_index] ^= mask