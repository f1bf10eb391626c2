"""
The 3x3 board.

The Board owns its Tiles. Every coordinate lookup goes through get_tile(),
which returns None for positions off the board; callers outside the engine
only ever receive TileView snapshots.

In numbered mode each tile carries a decay counter. At the end of a turn
occupied tiles count down, and a card whose counter is already 0 expires.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterator

from menagerie.types import (
    BOARD_SIZE,
    CENTER,
    ORTHOGONAL_OFFSETS,
    RING_OFFSETS,
    TileMode,
)
from menagerie.config import GameConfig
from menagerie.models import CardInstance, Tile, TileView
from menagerie.events import (
    BoardUpdatedEvent,
    CardExpiredEvent,
    EventQueue,
)

logger = logging.getLogger(__name__)


class Board:
    """Fixed-size grid of tiles, indexed [x][y]."""

    def __init__(
        self,
        config: GameConfig | None = None,
        rng: random.Random | None = None,
        events: EventQueue | None = None,
    ) -> None:
        self.config = config if config is not None else GameConfig()
        self.rng = rng if rng is not None else random.Random()
        self.events = events if events is not None else EventQueue()
        self._use_numbers = self.config.use_numbers_mode
        self._tiles: list[list[Tile]] = []
        self.initialize()

    # =========================================================================
    # Setup
    # =========================================================================

    def initialize(self) -> None:
        """Rebuild every tile; in numbered mode deal starting counters."""
        self._tiles = [[Tile(x, y) for y in range(BOARD_SIZE)] for x in range(BOARD_SIZE)]
        if self._use_numbers:
            self._assign_initial_tile_numbers()

    def _assign_initial_tile_numbers(self) -> None:
        pool = [rule.value for rule in self.config.tile_number_rules for _ in range(rule.cap)]
        self.rng.shuffle(pool)

        values = self.config.tile_number_values
        for i, tile in enumerate(self.tiles()):
            if i < len(pool):
                tile.tile_number = pool[i]
            else:
                tile.tile_number = self.rng.choice(values)

    @property
    def tile_mode(self) -> TileMode:
        return TileMode.WITH_NUMBERS if self._use_numbers else TileMode.NO_NUMBERS

    @property
    def uses_numbers(self) -> bool:
        return self._use_numbers

    def set_tile_mode(self, use_numbers: bool) -> None:
        """
        Switch between plain and numbered mode.

        Switching on deals a fresh counter to every occupied tile and 0 to
        empty ones; switching off zeroes all counters.
        """
        self._use_numbers = use_numbers
        for tile in self.tiles():
            if use_numbers:
                tile.tile_number = self.generate_tile_number() if tile.has_card else 0
            else:
                tile.tile_number = 0
        logger.debug("Tile mode set to %s", self.tile_mode.name)
        self.events.emit(BoardUpdatedEvent())

    # =========================================================================
    # Access
    # =========================================================================

    def is_valid_position(self, x: int, y: int) -> bool:
        return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE

    def get_tile(self, x: int, y: int) -> Tile | None:
        if not self.is_valid_position(x, y):
            return None
        return self._tiles[x][y]

    def tiles(self) -> Iterator[Tile]:
        """All tiles, x-major."""
        for column in self._tiles:
            yield from column

    def center(self) -> Tile:
        return self._tiles[CENTER[0]][CENTER[1]]

    def neighbors4(self, x: int, y: int) -> list[Tile]:
        """Orthogonal neighbours that lie on the board."""
        result = []
        for dx, dy in ORTHOGONAL_OFFSETS:
            tile = self.get_tile(x + dx, y + dy)
            if tile is not None:
                result.append(tile)
        return result

    def neighbors_ring8(self, x: int, y: int) -> list[Tile]:
        """The up to eight surrounding tiles that lie on the board."""
        result = []
        for dx, dy in RING_OFFSETS:
            tile = self.get_tile(x + dx, y + dy)
            if tile is not None:
                result.append(tile)
        return result

    def row(self, y: int) -> list[Tile]:
        """Tiles sharing row y."""
        return [self._tiles[x][y] for x in range(BOARD_SIZE)]

    def column(self, x: int) -> list[Tile]:
        """Tiles sharing column x."""
        return list(self._tiles[x])

    def empty_tiles(self) -> list[Tile]:
        return [tile for tile in self.tiles() if tile.is_empty]

    def occupied_tiles(self) -> list[Tile]:
        return [tile for tile in self.tiles() if tile.has_card]

    def snapshot(self) -> tuple[tuple[TileView, ...], ...]:
        """Read-only copy of the whole board, indexed [x][y]."""
        return tuple(tuple(tile.view() for tile in column) for column in self._tiles)

    # =========================================================================
    # Placement
    # =========================================================================

    def place(self, x: int, y: int, card: CardInstance, current_turn: int) -> bool:
        tile = self.get_tile(x, y)
        if tile is None or tile.has_card:
            return False

        tile.card = card
        tile.placed_turn = current_turn
        self.events.emit(BoardUpdatedEvent())
        return True

    def remove(self, x: int, y: int, current_turn: int) -> CardInstance | None:
        """Take back a card placed this turn. Returns the removed card."""
        tile = self.get_tile(x, y)
        if tile is None or tile.is_empty:
            return None
        if not tile.is_removable(current_turn):
            logger.info("Card at (%d, %d) was placed in an earlier turn", x, y)
            return None

        card = tile.card
        tile.clear()
        if not self._use_numbers:
            tile.tile_number = 0

        self.events.emit(BoardUpdatedEvent())
        return card

    # =========================================================================
    # End of turn processing
    # =========================================================================

    def clear_all(self) -> None:
        """Empty every tile. Tile counters are kept."""
        for tile in self.tiles():
            tile.clear()
        self.events.emit(BoardUpdatedEvent())

    def decay_all_tiles(self) -> list[CardInstance]:
        """
        Count down every tile.

        An occupied tile at 0 loses its card (the card does not return to the
        inventory) and receives a fresh counter; other occupied tiles count
        down by one. Empty tiles at or below 0 receive a fresh counter.

        Returns the expired cards.
        """
        expired: list[CardInstance] = []
        for tile in self.tiles():
            if tile.card is not None:
                if tile.tile_number == 0:
                    card = tile.card
                    tile.clear()
                    tile.tile_number = self.generate_tile_number()
                    expired.append(card)
                    logger.debug("%s at (%d, %d) expired", card.card_type.name, tile.x, tile.y)
                    self.events.emit(CardExpiredEvent(card.card_type, tile.x, tile.y))
                else:
                    tile.tile_number -= 1
            elif tile.tile_number <= 0:
                tile.tile_number = self.generate_tile_number()

        self.events.emit(BoardUpdatedEvent())
        return expired

    def generate_tile_number(self) -> int:
        """
        Draw a counter value.

        Each value under its cap contributes round(weight * 10) entries to
        the pool; once every cap is met the draw is uniform over all values.
        """
        counts: dict[int, int] = {}
        for tile in self.tiles():
            counts[tile.tile_number] = counts.get(tile.tile_number, 0) + 1

        pool: list[int] = []
        for rule in self.config.tile_number_rules:
            if counts.get(rule.value, 0) < rule.cap:
                pool.extend([rule.value] * round(rule.weight * 10))

        if not pool:
            return self.rng.choice(self.config.tile_number_values)
        return self.rng.choice(pool)
