"""
Core type definitions for the game engine.

This module defines:
- NewType aliases for turn, stage and score values
- Enums for card types, game phases and tile modes
- Board and deck constants
"""

from enum import Enum, auto
from typing import Literal, NewType

# =============================================================================
# Strong Value Types
# =============================================================================

StageId = NewType("StageId", int)
"""Stage identifier, as listed in stages.json."""

TurnNumber = NewType("TurnNumber", int)
"""Turn number within a stage: 1 through the stage's end turn (0 = not started)."""

Score = NewType("Score", int)
"""Signed score value. Never clamped at zero."""

Coord = tuple[int, int]
"""Board coordinate as (x, y)."""


# =============================================================================
# Enums
# =============================================================================


class CardType(Enum):
    """The twelve creature types. Each one has exactly one scoring rule."""

    ORC = auto()
    """-1 when an orthogonal neighbour is also an Orc."""

    WEREWOLF = auto()
    """+1 with two or more orthogonal neighbours of another type."""

    GOBLIN = auto()
    """+2 per orthogonal Goblin neighbour."""

    ELF = auto()
    """Unique; -1 per empty tile on the board."""

    DWARF = auto()
    """+1 with exactly one Dwarf neighbour, -1 with two or more."""

    ANGEL = auto()
    """Unique; +1 per other creature type on the board."""

    DRAGON = auto()
    """Unique; +1 per surrounding tile, -1 per occupied orthogonal neighbour."""

    DEVIL = auto()
    """+1 when no other Devil shares its row."""

    VAMPIRE = auto()
    """+1 per tile in its column holding another type."""

    NAGA = auto()
    """+2 per distinct type in the surrounding ring."""

    ROBOT = auto()
    """+7 while the centre tile is empty."""

    SLIME = auto()
    """+5 per Slime on the board, -10 if two or more were placed in one turn."""


class GamePhase(Enum):
    """Phases of a game session."""

    IDLE = auto()
    """No stage has been started yet."""

    PLAYING = auto()
    """A stage is in progress; cards can be placed and removed."""

    SHOP = auto()
    """Between stages: owned card types can be swapped for shop offers."""

    GAME_OVER = auto()
    """The stage ended below its target score."""

    VICTORY = auto()
    """The stage ended at or above its target score."""


class TileMode(Enum):
    """Board variants."""

    NO_NUMBERS = auto()
    """The board is cleared at the end of every turn."""

    WITH_NUMBERS = auto()
    """Tiles carry a decay counter; cards survive until it runs out."""


# =============================================================================
# Constants
# =============================================================================

BOARD_SIZE: Literal[3] = 3
"""Width and height of the square board."""

CENTER: Coord = (BOARD_SIZE // 2, BOARD_SIZE // 2)
"""Coordinate of the centre tile."""

DECK_UNIQUE_LIMIT: Literal[7] = 7
"""Maximum number of distinct card types a deck may hold."""

EXCLUDE_TURN_COUNT: Literal[2] = 2
"""Default length of the recently-used exclusion window, in turns."""

SHOP_OFFER_COUNT: Literal[3] = 3
"""Number of card types offered by the shop."""

DEFAULT_DRAW_COUNT: Literal[9] = 9
"""Draw count used when no stage is set."""

ORTHOGONAL_OFFSETS: tuple[Coord, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
"""Offsets of the four orthogonal neighbours."""

RING_OFFSETS: tuple[Coord, ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)
"""Offsets of the eight surrounding tiles."""
