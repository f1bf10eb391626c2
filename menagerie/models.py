"""
Data models for the game engine.

Value objects (card definitions, card instances, snapshots, score reports)
are frozen dataclasses. Tiles and turn data are the only mutable records;
they are owned by the board and the turn controller and never handed out
directly -- callers receive TileView snapshots instead.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from menagerie.types import (
    CardType,
    Score,
    StageId,
    TurnNumber,
)


# =============================================================================
# Card Definitions
# =============================================================================


@dataclass(frozen=True, slots=True)
class CardDef:
    """
    Immutable catalog entry for a card type.

    Loaded from cards.json; one entry per CardType.
    """

    card_type: CardType
    """The type this entry describes."""

    name: str
    """Display name of the card."""

    base_score: Score
    """Score before the type's rule is applied."""

    copies: int
    """How many copies of the type enter the deck and the hand."""

    text: str = ""
    """Rule text shown to the player."""


@dataclass(frozen=True, slots=True)
class CardInstance:
    """
    A card in play.

    Instances carry no identity beyond their type: two instances of the
    same type are interchangeable.
    """

    card_type: CardType
    """The card's type."""

    base_score: Score
    """Base score copied from the catalog when the instance was created."""


# =============================================================================
# Board
# =============================================================================


@dataclass(slots=True)
class Tile:
    """
    One cell of the board. Mutable; owned by the Board.
    """

    x: int
    """Column index."""

    y: int
    """Row index."""

    card: CardInstance | None = None
    """The occupant, if any."""

    tile_number: int = 0
    """Decay counter (numbered mode only)."""

    calculated_score: int = 0
    """Score from the last scoring pass (0 while empty)."""

    placed_turn: int = 0
    """Turn in which the occupant was placed (0 while empty)."""

    @property
    def is_empty(self) -> bool:
        return self.card is None

    @property
    def has_card(self) -> bool:
        return self.card is not None

    def is_removable(self, current_turn: int) -> bool:
        """Cards can only be taken back in the turn they were placed."""
        return self.card is not None and self.placed_turn == current_turn

    def clear(self) -> None:
        """Drop the occupant and its per-placement bookkeeping."""
        self.card = None
        self.calculated_score = 0
        self.placed_turn = 0

    def view(self) -> TileView:
        """Return a read-only snapshot of this tile."""
        return TileView(
            x=self.x,
            y=self.y,
            card_type=self.card.card_type if self.card is not None else None,
            base_score=self.card.base_score if self.card is not None else Score(0),
            tile_number=self.tile_number,
            calculated_score=self.calculated_score,
            placed_turn=self.placed_turn,
        )


@dataclass(frozen=True, slots=True)
class TileView:
    """Read-only snapshot of a tile, handed to callers and renderers."""

    x: int
    y: int
    card_type: CardType | None
    base_score: Score
    tile_number: int
    calculated_score: int
    placed_turn: int

    @property
    def is_empty(self) -> bool:
        return self.card_type is None

    def is_removable(self, current_turn: int) -> bool:
        return self.card_type is not None and self.placed_turn == current_turn


# =============================================================================
# Turns and Stages
# =============================================================================


@dataclass(slots=True)
class TurnData:
    """
    State of the turn in progress. Replaced at the start of every turn.
    """

    turn_number: TurnNumber
    """The turn this record describes."""

    target_score: Score
    """The stage's cumulative target."""

    available_cards: list[CardInstance] = field(default_factory=list)
    """The hand: card copies still available to place this turn."""

    turn_score: Score = Score(0)
    """Board score recorded when the turn ended."""

    def take(self, card_type: CardType) -> CardInstance | None:
        """Remove one card of the type from the hand."""
        for i, card in enumerate(self.available_cards):
            if card.card_type == card_type:
                return self.available_cards.pop(i)
        return None

    def give_back(self, card: CardInstance) -> None:
        self.available_cards.append(card)

    def available_types(self) -> tuple[CardType, ...]:
        return tuple(card.card_type for card in self.available_cards)


@dataclass(frozen=True, slots=True)
class StageDef:
    """
    Immutable stage configuration, loaded from stages.json.
    """

    stage_id: StageId
    """Stage identifier (ordering key)."""

    end_turn: int
    """Last turn of the stage; the target is checked when it ends."""

    target_score: Score
    """Cumulative score needed to clear the stage."""

    first_draw: int = 4
    """Number of card types drawn on turn 1."""

    second_draw: int = 2
    """Number of card types drawn on turn 2."""

    last_draw: int = 1
    """Number of card types drawn on the final turn."""

    exclude_previous_turn_types: bool = True
    """Block types used in recent turns from being drawn or selected."""

    unlock_schedule: tuple[tuple[CardType, ...], ...] = ()
    """Entry i lists the types added to the deck at the start of turn i + 1."""

    def unlocks_for_turn(self, turn_number: int) -> tuple[CardType, ...]:
        index = turn_number - 1
        if 0 <= index < len(self.unlock_schedule):
            return self.unlock_schedule[index]
        return ()

    def is_valid(self) -> bool:
        """A stage needs at least one turn and non-negative draw counts."""
        if self.end_turn <= 0:
            return False
        return min(self.first_draw, self.second_draw, self.last_draw) >= 0


# =============================================================================
# Scoring Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class GlobalScoreData:
    """
    Board-wide aggregates computed once per scoring pass.
    """

    empty_tile_count: int
    """Number of empty tiles."""

    type_counts: Mapping[CardType, int]
    """Number of cards of each type on the board."""

    unique_type_count: int
    """Number of distinct types on the board."""

    unique_type_count_excluding_angel: int
    """Number of distinct types on the board, not counting Angel."""

    def count(self, card_type: CardType) -> int:
        return self.type_counts.get(card_type, 0)


@dataclass(frozen=True, slots=True)
class ScoreModifier:
    """One contribution to a tile's score."""

    description: str
    """What was observed on the board."""

    delta: int
    """Score change (may be 0 for informational entries)."""

    rationale: str
    """The rule that produced the change."""


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    """
    Full explanation of a tile's score.

    Invariant: base_score + sum(m.delta for m in modifiers) == final_score.
    """

    card_type: CardType
    base_score: int
    modifiers: tuple[ScoreModifier, ...]
    final_score: int

    @property
    def modifier_total(self) -> int:
        return sum(m.delta for m in self.modifiers)


@dataclass(frozen=True, slots=True)
class BoardPreview:
    """
    Result of a what-if placement: every tile's score before and after.

    Score grids are indexed [x][y].
    """

    x: int
    y: int
    card_type: CardType
    original_scores: tuple[tuple[int, ...], ...]
    preview_scores: tuple[tuple[int, ...], ...]
    total_score_change: int

    def score_change(self, x: int, y: int) -> int:
        return self.preview_scores[x][y] - self.original_scores[x][y]
