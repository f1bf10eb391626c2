"""
Runtime configuration for a game session.

Card and stage data live in JSON files (see cards.py and stages.py). This
module holds the knobs that are not per-card or per-stage: the board mode,
the numbered-mode tile distribution and the deck/exclusion limits.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from menagerie.types import (
    DECK_UNIQUE_LIMIT,
    EXCLUDE_TURN_COUNT,
    SHOP_OFFER_COUNT,
)


@dataclass(frozen=True, slots=True)
class TileNumberRule:
    """Distribution rule for one tile-number value in numbered mode."""

    value: int
    """The decay counter value."""

    cap: int
    """At most this many tiles may carry the value before it leaves the pool."""

    weight: float
    """Relative likelihood while under the cap."""


def _default_tile_rules() -> tuple[TileNumberRule, ...]:
    return (
        TileNumberRule(value=0, cap=2, weight=1.0),
        TileNumberRule(value=1, cap=3, weight=2.0),
        TileNumberRule(value=2, cap=2, weight=2.0),
        TileNumberRule(value=3, cap=2, weight=1.0),
    )


@dataclass(frozen=True, slots=True)
class GameConfig:
    """
    Immutable session configuration.

    Defaults match the shipped game balance.
    """

    use_numbers_mode: bool = False
    """Start in numbered mode (tiles decay) instead of clearing every turn."""

    tile_number_rules: tuple[TileNumberRule, ...] = field(default_factory=_default_tile_rules)
    """Caps and weights for each tile-number value, in ascending value order."""

    exclude_turn_count: int = EXCLUDE_TURN_COUNT
    """How many recent turns of used types are blocked from selection."""

    deck_unique_limit: int = DECK_UNIQUE_LIMIT
    """Maximum number of distinct types in the owned deck."""

    shop_offer_count: int = SHOP_OFFER_COUNT
    """Number of unowned types the shop presents."""

    carry_over_hand: bool = False
    """Keep unplayed active cards when the next turn's hand is drawn."""

    def is_valid(self) -> bool:
        """Check the configuration for values the engine cannot work with."""
        if self.exclude_turn_count < 1:
            return False
        if self.deck_unique_limit < 1:
            return False
        if self.shop_offer_count < 0:
            return False
        if not self.tile_number_rules:
            return False
        return all(rule.cap >= 0 and rule.weight > 0 for rule in self.tile_number_rules)

    @property
    def tile_number_values(self) -> tuple[int, ...]:
        """All tile-number values, used for the uniform fallback draw."""
        return tuple(rule.value for rule in self.tile_number_rules)
