"""
Scoring engine.

Every occupied tile starts from its card's base score and applies the one
rule for its type. The rule bodies always record what they did into a
tally; calculate_all() keeps only the totals while breakdown() keeps the
itemised modifiers, so both paths share a single implementation.

Scoring never emits events. Callers decide when a recalculation is worth
announcing.
"""

from __future__ import annotations

import logging
from collections import Counter

from menagerie.types import BOARD_SIZE, CardType, Score
from menagerie.board import Board
from menagerie.cards import CardCatalog
from menagerie.models import (
    BoardPreview,
    CardInstance,
    GlobalScoreData,
    ScoreBreakdown,
    ScoreModifier,
    Tile,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Aggregates
# =============================================================================


def compute_global_data(board: Board) -> GlobalScoreData:
    """Board-wide statistics shared by every tile in one pass."""
    counts: Counter[CardType] = Counter()
    for tile in board.tiles():
        if tile.card is not None:
            counts[tile.card.card_type] += 1

    return GlobalScoreData(
        empty_tile_count=len(board.empty_tiles()),
        type_counts=dict(counts),
        unique_type_count=len(counts),
        unique_type_count_excluding_angel=len([t for t in counts if t != CardType.ANGEL]),
    )


# =============================================================================
# Rule Bodies
# =============================================================================


class _Tally:
    """Running score for one tile plus the modifiers that produced it."""

    __slots__ = ("score", "modifiers")

    def __init__(self, base_score: int) -> None:
        self.score = base_score
        self.modifiers: list[ScoreModifier] = []

    def add(self, description: str, delta: int, rationale: str) -> None:
        self.score += delta
        self.modifiers.append(ScoreModifier(description, delta, rationale))


def _name(card_type: CardType) -> str:
    return card_type.name.title()


def _count_type(tiles: list[Tile], card_type: CardType) -> int:
    return sum(1 for t in tiles if t.card is not None and t.card.card_type == card_type)


def _count_other_types(tiles: list[Tile], card_type: CardType) -> int:
    return sum(1 for t in tiles if t.card is not None and t.card.card_type != card_type)


def _unique_penalty(card_type: CardType, data: GlobalScoreData, tally: _Tally) -> None:
    others = data.count(card_type) - 1
    if others > 0:
        tally.add(
            f"{others} other {_name(card_type)} on the board",
            -others,
            "Unique: -1 per other copy",
        )


def _apply_rule(board: Board, tile: Tile, card: CardInstance, data: GlobalScoreData, tally: _Tally) -> None:
    card_type = card.card_type
    adjacent = board.neighbors4(tile.x, tile.y)

    match card_type:
        case CardType.ORC:
            orcs = _count_type(adjacent, CardType.ORC)
            if orcs >= 1:
                tally.add(f"{orcs} adjacent Orc", -1, "-1 with an adjacent Orc")

        case CardType.WEREWOLF:
            others = _count_other_types(adjacent, CardType.WEREWOLF)
            if others >= 2:
                tally.add(f"{others} adjacent non-Werewolves", 1, "+1 with two or more")
            elif others > 0:
                tally.add(f"{others} adjacent non-Werewolf", 0, "No bonus below two")

        case CardType.GOBLIN:
            goblins = _count_type(adjacent, CardType.GOBLIN)
            if goblins > 0:
                tally.add(f"{goblins} adjacent Goblin", goblins * 2, "+2 per adjacent Goblin")

        case CardType.ELF:
            _unique_penalty(CardType.ELF, data, tally)
            if data.empty_tile_count > 0:
                tally.add(
                    f"{data.empty_tile_count} empty tiles",
                    -data.empty_tile_count,
                    "-1 per empty tile",
                )

        case CardType.DWARF:
            dwarves = _count_type(adjacent, CardType.DWARF)
            if dwarves == 1:
                tally.add("1 adjacent Dwarf", 1, "+1 with exactly one")
            elif dwarves >= 2:
                tally.add(f"{dwarves} adjacent Dwarves", -1, "-1 with two or more")
            else:
                tally.add("No adjacent Dwarf", 0, "No bonus")

        case CardType.ANGEL:
            kinds = data.unique_type_count_excluding_angel
            if kinds > 0:
                tally.add(f"{kinds} other creature types", kinds, "+1 per type")
            _unique_penalty(CardType.ANGEL, data, tally)

        case CardType.DRAGON:
            ring = len(board.neighbors_ring8(tile.x, tile.y))
            if ring > 0:
                tally.add(f"{ring} surrounding tiles", ring, "+1 per surrounding tile")
            _unique_penalty(CardType.DRAGON, data, tally)
            occupied = sum(1 for t in adjacent if t.has_card)
            if occupied > 0:
                tally.add(f"{occupied} adjacent cards", -occupied, "-1 per adjacent card")

        case CardType.DEVIL:
            others = _count_type(board.row(tile.y), CardType.DEVIL) - 1
            if others == 0:
                tally.add("No other Devil in this row", 1, "+1 when alone in the row")
            else:
                tally.add(f"{others} other Devil in this row", 0, "No bonus")

        case CardType.VAMPIRE:
            others = _count_other_types(board.column(tile.x), CardType.VAMPIRE)
            if others > 0:
                tally.add(f"{others} other creatures in this column", others, "+1 per creature")

        case CardType.NAGA:
            ring_types = {t.card.card_type for t in board.neighbors_ring8(tile.x, tile.y) if t.card is not None}
            if ring_types:
                tally.add(
                    f"{len(ring_types)} creature types around",
                    len(ring_types) * 2,
                    "+2 per surrounding type",
                )

        case CardType.ROBOT:
            if board.center().is_empty:
                tally.add("Centre tile is empty", 7, "+7 while the centre is empty")
            else:
                tally.add("Centre tile is occupied", 0, "No bonus")

        case CardType.SLIME:
            slimes = data.count(CardType.SLIME)
            tally.add(f"{slimes} Slime on the board", slimes * 5, "+5 per Slime, itself included")
            same_turn = sum(
                1
                for t in board.occupied_tiles()
                if t.card is not None and t.card.card_type == CardType.SLIME and t.placed_turn == tile.placed_turn
            )
            if same_turn >= 2:
                tally.add(f"{same_turn} Slimes placed in one turn", -10, "-10 for two or more in a turn")


def _score_tile(board: Board, tile: Tile, card: CardInstance, data: GlobalScoreData) -> _Tally:
    tally = _Tally(card.base_score)
    _apply_rule(board, tile, card, data, tally)
    return tally


# =============================================================================
# Public API
# =============================================================================


def calculate_all(board: Board) -> None:
    """Recalculate every tile's score in place. Empty tiles score 0."""
    data = compute_global_data(board)
    for tile in board.tiles():
        if tile.card is not None:
            tile.calculated_score = _score_tile(board, tile, tile.card, data).score
        else:
            tile.calculated_score = 0


def breakdown(board: Board, x: int, y: int) -> ScoreBreakdown | None:
    """Itemised score of the card at (x, y), or None for an empty tile."""
    tile = board.get_tile(x, y)
    if tile is None or tile.card is None:
        return None

    tally = _score_tile(board, tile, tile.card, compute_global_data(board))
    return ScoreBreakdown(
        card_type=tile.card.card_type,
        base_score=tile.card.base_score,
        modifiers=tuple(tally.modifiers),
        final_score=tally.score,
    )


def total_score(board: Board) -> Score:
    return Score(sum(tile.calculated_score for tile in board.occupied_tiles()))


def _score_grid(board: Board) -> tuple[tuple[int, ...], ...]:
    return tuple(tuple(tile.calculated_score for tile in board.column(x)) for x in range(BOARD_SIZE))


def _preview(
    board: Board,
    tile: Tile,
    card_type: CardType,
    turn: int,
    catalog: CardCatalog,
) -> BoardPreview | None:
    card = catalog.create_instance(card_type)
    if card is None:
        return None

    calculate_all(board)
    original = _score_grid(board)

    saved_card, saved_turn = tile.card, tile.placed_turn
    try:
        tile.card = card
        tile.placed_turn = turn
        calculate_all(board)
        previewed = _score_grid(board)
    finally:
        tile.card = saved_card
        tile.placed_turn = saved_turn
        calculate_all(board)

    change = sum(map(sum, previewed)) - sum(map(sum, original))
    logger.debug("Preview %s at (%d, %d): %+d", card_type.name, tile.x, tile.y, change)
    return BoardPreview(
        x=tile.x,
        y=tile.y,
        card_type=card_type,
        original_scores=original,
        preview_scores=previewed,
        total_score_change=change,
    )


def preview_placement(
    board: Board,
    x: int,
    y: int,
    card_type: CardType,
    turn: int,
    catalog: CardCatalog | None = None,
) -> BoardPreview | None:
    """What-if scores for placing card_type on the empty tile at (x, y)."""
    tile = board.get_tile(x, y)
    if tile is None or tile.has_card:
        return None
    return _preview(board, tile, card_type, turn, catalog if catalog is not None else CardCatalog())


def preview_replacement(
    board: Board,
    x: int,
    y: int,
    card_type: CardType,
    turn: int,
    catalog: CardCatalog | None = None,
) -> BoardPreview | None:
    """What-if scores for swapping the card placed this turn at (x, y)."""
    tile = board.get_tile(x, y)
    if tile is None or not tile.is_removable(turn):
        return None
    return _preview(board, tile, card_type, turn, catalog if catalog is not None else CardCatalog())
