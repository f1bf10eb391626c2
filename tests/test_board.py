"""
Tests for the Board: placement, retraction, neighbourhoods and the
numbered-mode tile counters.
"""

import random

from menagerie.types import CardType, TileMode
from menagerie.config import GameConfig, TileNumberRule
from menagerie.cards import CardCatalog
from menagerie.models import CardInstance
from menagerie.board import Board
from menagerie.events import BoardUpdatedEvent, CardExpiredEvent


CATALOG = CardCatalog()


def make_card(card_type: CardType) -> CardInstance:
    """Helper to create a CardInstance for tests."""
    card = CATALOG.create_instance(card_type)
    assert card is not None
    return card


def fixed_number_config(value: int) -> GameConfig:
    """Numbered-mode config whose weighted pool only ever yields `value`."""
    rules = tuple(
        TileNumberRule(value=v, cap=9 if v == value else 0, weight=1.0)
        for v in range(4)
    )
    return GameConfig(use_numbers_mode=True, tile_number_rules=rules)


# =============================================================================
# Placement and Removal
# =============================================================================


class TestPlacement:
    """Tests for place() and remove()."""

    def test_place_then_remove_restores_empty_tile(self) -> None:
        """Removing in the same turn returns the placed card and empties the tile."""
        board = Board(rng=random.Random(1))
        card = make_card(CardType.GOBLIN)

        assert board.place(1, 1, card, current_turn=1)
        removed = board.remove(1, 1, current_turn=1)

        tile = board.get_tile(1, 1)
        assert removed is not None
        assert removed.card_type == CardType.GOBLIN
        assert tile is not None and tile.is_empty
        assert tile.calculated_score == 0
        assert tile.placed_turn == 0

    def test_place_on_occupied_tile_fails(self) -> None:
        """A tile holds at most one card."""
        board = Board()
        assert board.place(0, 0, make_card(CardType.ORC), 1)
        assert not board.place(0, 0, make_card(CardType.ELF), 1)

        tile = board.get_tile(0, 0)
        assert tile is not None and tile.card is not None
        assert tile.card.card_type == CardType.ORC

    def test_invalid_positions(self) -> None:
        """Coordinates off the board are rejected without raising."""
        board = Board()
        assert board.get_tile(3, 0) is None
        assert board.get_tile(-1, 2) is None
        assert not board.place(0, 3, make_card(CardType.ORC), 1)
        assert board.remove(5, 5, 1) is None

    def test_remove_requires_current_turn(self) -> None:
        """Cards placed in an earlier turn stay put."""
        board = Board()
        board.place(2, 2, make_card(CardType.DWARF), current_turn=1)

        assert board.remove(2, 2, current_turn=2) is None
        tile = board.get_tile(2, 2)
        assert tile is not None and tile.has_card

    def test_remove_empty_tile_fails(self) -> None:
        board = Board()
        assert board.remove(0, 0, 1) is None

    def test_remove_keeps_counter_in_numbered_mode(self) -> None:
        """Only plain mode zeroes the tile counter on removal."""
        board = Board(fixed_number_config(3), random.Random(0))
        board.place(0, 0, make_card(CardType.ORC), 1)
        board.remove(0, 0, 1)

        tile = board.get_tile(0, 0)
        assert tile is not None
        assert tile.tile_number == 3

    def test_place_emits_board_updated(self) -> None:
        board = Board()
        board.place(0, 0, make_card(CardType.ORC), 1)
        assert board.events.drain() == [BoardUpdatedEvent()]


# =============================================================================
# Neighbourhoods
# =============================================================================


class TestNeighbourhoods:
    """Tests for neighbour, row and column queries."""

    def test_orthogonal_neighbour_counts(self) -> None:
        """Corners have 2 neighbours, edges 3 and the centre 4."""
        board = Board()
        assert len(board.neighbors4(0, 0)) == 2
        assert len(board.neighbors4(1, 0)) == 3
        assert len(board.neighbors4(1, 1)) == 4

    def test_ring_counts(self) -> None:
        """Corners have 3 surrounding tiles, edges 5 and the centre 8."""
        board = Board()
        assert len(board.neighbors_ring8(0, 0)) == 3
        assert len(board.neighbors_ring8(0, 1)) == 5
        assert len(board.neighbors_ring8(1, 1)) == 8

    def test_row_and_column(self) -> None:
        """A row fixes y and a column fixes x."""
        board = Board()
        assert [(t.x, t.y) for t in board.row(2)] == [(0, 2), (1, 2), (2, 2)]
        assert [(t.x, t.y) for t in board.column(1)] == [(1, 0), (1, 1), (1, 2)]

    def test_center(self) -> None:
        board = Board()
        assert (board.center().x, board.center().y) == (1, 1)

    def test_empty_and_occupied(self) -> None:
        board = Board()
        board.place(0, 0, make_card(CardType.ORC), 1)
        board.place(2, 1, make_card(CardType.ELF), 1)

        assert len(board.occupied_tiles()) == 2
        assert len(board.empty_tiles()) == 7

    def test_snapshot_is_detached(self) -> None:
        """Snapshots do not change when the board does."""
        board = Board()
        snapshot = board.snapshot()
        board.place(0, 0, make_card(CardType.ORC), 1)

        assert snapshot[0][0].is_empty
        assert board.snapshot()[0][0].card_type == CardType.ORC


# =============================================================================
# Tile Counters
# =============================================================================


class TestTileNumbers:
    """Tests for numbered mode."""

    def test_initial_numbers_follow_caps(self) -> None:
        """With caps 2/3/2/2 the nine tiles use exactly the capped pool."""
        board = Board(GameConfig(use_numbers_mode=True), random.Random(3))
        numbers = sorted(tile.tile_number for tile in board.tiles())
        assert numbers == [0, 0, 1, 1, 1, 2, 2, 3, 3]

    def test_plain_mode_starts_at_zero(self) -> None:
        board = Board(GameConfig(), random.Random(3))
        assert board.tile_mode == TileMode.NO_NUMBERS
        assert all(tile.tile_number == 0 for tile in board.tiles())

    def test_weighted_pool_only_uses_values_under_cap(self) -> None:
        """Values whose cap is met never come out of the weighted pool."""
        board = Board(fixed_number_config(1), random.Random(5))
        assert {board.generate_tile_number() for _ in range(50)} == {1}

    def test_uniform_fallback_when_all_caps_met(self) -> None:
        """With every cap at zero the draw is uniform over all values."""
        rules = tuple(TileNumberRule(value=v, cap=0, weight=1.0) for v in range(4))
        board = Board(GameConfig(tile_number_rules=rules), random.Random(11))
        drawn = {board.generate_tile_number() for _ in range(200)}
        assert drawn == {0, 1, 2, 3}

    def test_decay_counts_down_occupied_tiles(self) -> None:
        board = Board(fixed_number_config(3), random.Random(0))
        board.place(0, 0, make_card(CardType.ORC), 1)
        board.decay_all_tiles()

        tile = board.get_tile(0, 0)
        assert tile is not None
        assert tile.has_card
        assert tile.tile_number == 2

    def test_decay_expires_card_at_zero(self) -> None:
        """A card whose counter is already 0 is destroyed and the tile re-dealt."""
        board = Board(fixed_number_config(0), random.Random(0))
        board.place(1, 1, make_card(CardType.ROBOT), 1)
        board.events.drain()

        expired = board.decay_all_tiles()

        tile = board.get_tile(1, 1)
        assert [card.card_type for card in expired] == [CardType.ROBOT]
        assert tile is not None and tile.is_empty
        assert tile.placed_turn == 0
        assert CardExpiredEvent(CardType.ROBOT, 1, 1) in board.events.drain()

    def test_clear_all_keeps_counters(self) -> None:
        board = Board(fixed_number_config(2), random.Random(0))
        board.place(0, 0, make_card(CardType.ORC), 1)
        board.clear_all()

        assert not board.occupied_tiles()
        assert all(tile.tile_number == 2 for tile in board.tiles())

    def test_switching_modes(self) -> None:
        """Switching on numbers occupied tiles only; switching off zeroes all."""
        board = Board(fixed_number_config(2), random.Random(0))
        board.set_tile_mode(False)
        board.place(0, 0, make_card(CardType.ORC), 1)

        board.set_tile_mode(True)
        assert board.tile_mode == TileMode.WITH_NUMBERS
        numbered = {(t.x, t.y): t.tile_number for t in board.tiles()}
        assert numbered[(0, 0)] == 2
        assert all(n == 0 for pos, n in numbered.items() if pos != (0, 0))

        board.set_tile_mode(False)
        assert all(tile.tile_number == 0 for tile in board.tiles())
