"""
Menagerie Grid - Core Game Engine

A data-driven rules engine for a 3x3 creature-placement board game with
stage progression, a card economy and typed event notifications.
This package contains pure game logic with no I/O dependencies.
"""

from menagerie.types import (
    StageId,
    TurnNumber,
    Score,
    Coord,
    CardType,
    GamePhase,
    TileMode,
    BOARD_SIZE,
)
from menagerie.config import GameConfig, TileNumberRule
from menagerie.models import (
    CardDef,
    CardInstance,
    Tile,
    TileView,
    TurnData,
    StageDef,
    GlobalScoreData,
    ScoreModifier,
    ScoreBreakdown,
    BoardPreview,
)
from menagerie.cards import CardCatalog
from menagerie.stages import StageCatalog
from menagerie.events import EventQueue, GameEvent
from menagerie.board import Board
from menagerie.inventory import CardInventory
from menagerie.shop import Shop
from menagerie.turns import TurnController
from menagerie.controller import GameManager

__all__ = [
    # Types
    "StageId",
    "TurnNumber",
    "Score",
    "Coord",
    "CardType",
    "GamePhase",
    "TileMode",
    "BOARD_SIZE",
    # Configuration
    "GameConfig",
    "TileNumberRule",
    # Models
    "CardDef",
    "CardInstance",
    "Tile",
    "TileView",
    "TurnData",
    "StageDef",
    "GlobalScoreData",
    "ScoreModifier",
    "ScoreBreakdown",
    "BoardPreview",
    # Catalogs
    "CardCatalog",
    "StageCatalog",
    # Events
    "EventQueue",
    "GameEvent",
    # Components
    "Board",
    "CardInventory",
    "Shop",
    "TurnController",
    # Controller
    "GameManager",
]
