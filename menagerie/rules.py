"""
Game rules and validation logic.

This module implements the rule checks shared by the turn controller and
the inventory:
- Command validation (legality checks)
- Draw-count policy per stage turn
- End-of-turn bookkeeping helpers
- Stage clear condition
"""

from __future__ import annotations

from dataclasses import dataclass

from menagerie.types import (
    CardType,
    DEFAULT_DRAW_COUNT,
    GamePhase,
)
from menagerie.models import StageDef
from menagerie.board import Board


# =============================================================================
# Command Validation
# =============================================================================


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of validating a command."""

    valid: bool
    """Whether the command is valid."""

    reason: str
    """Explanation (for invalid commands)."""


_OK = ValidationResult(valid=True, reason="")


def validate_phase(phase: GamePhase, required: GamePhase) -> ValidationResult:
    if phase != required:
        return ValidationResult(valid=False, reason=f"Not allowed during {phase.name}")
    return _OK


def validate_placement(
    board: Board,
    x: int,
    y: int,
    card_type: CardType,
    can_use: bool,
) -> ValidationResult:
    """
    Check whether card_type may be placed at (x, y).

    Checks:
    - Position is on the board
    - Tile is empty
    - The hand holds a selectable copy of the type
    """
    tile = board.get_tile(x, y)
    if tile is None:
        return ValidationResult(valid=False, reason=f"Invalid position: ({x}, {y})")

    if tile.has_card:
        return ValidationResult(valid=False, reason=f"Tile ({x}, {y}) is occupied")

    if not can_use:
        return ValidationResult(valid=False, reason=f"No selectable {card_type.name.title()} in hand")

    return _OK


def validate_removal(board: Board, x: int, y: int, current_turn: int) -> ValidationResult:
    """A card can be taken back only in the turn it was placed."""
    tile = board.get_tile(x, y)
    if tile is None:
        return ValidationResult(valid=False, reason=f"Invalid position: ({x}, {y})")

    if tile.is_empty:
        return ValidationResult(valid=False, reason=f"Tile ({x}, {y}) is empty")

    if not tile.is_removable(current_turn):
        return ValidationResult(valid=False, reason=f"Card at ({x}, {y}) was placed in an earlier turn")

    return _OK


def validate_replacement(
    board: Board,
    x: int,
    y: int,
    card_type: CardType,
    current_turn: int,
    can_use: bool,
) -> ValidationResult:
    """Swap a card placed this turn for another type from the hand."""
    removal = validate_removal(board, x, y, current_turn)
    if not removal.valid:
        return removal

    tile = board.get_tile(x, y)
    if tile is not None and tile.card is not None and tile.card.card_type == card_type:
        return ValidationResult(valid=False, reason=f"Tile ({x}, {y}) already holds {card_type.name.title()}")

    if not can_use:
        return ValidationResult(valid=False, reason=f"No selectable {card_type.name.title()} in hand")

    return _OK


# =============================================================================
# Turn Policy
# =============================================================================


def compute_draw_count(stage: StageDef | None, turn_number: int) -> int:
    """
    Number of distinct card types drawn at the start of a turn.

    Turn 1 uses first_draw and turn 2 second_draw, even in short stages.
    From the stage's last turn on it is last_draw; turns in between use the
    largest of the three.
    """
    if stage is None:
        return DEFAULT_DRAW_COUNT

    if turn_number == 1:
        return stage.first_draw
    if turn_number == 2:
        return stage.second_draw
    if turn_number >= stage.end_turn:
        return stage.last_draw
    return max(stage.first_draw, stage.second_draw, stage.last_draw)


def collect_used_types(board: Board, turn_number: int) -> frozenset[CardType]:
    """Types of the cards placed during turn_number that are still on the board."""
    return frozenset(
        tile.card.card_type
        for tile in board.occupied_tiles()
        if tile.card is not None and tile.placed_turn == turn_number
    )


def is_stage_cleared(cumulative_score: int, stage: StageDef) -> bool:
    return cumulative_score >= stage.target_score
