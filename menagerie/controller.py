"""
Game Manager - the single entry point into a game session.

The manager wires one of each engine component around a shared event
queue and exposes:
- Commands that advance the game (place, remove, end turn, shop swaps)
- Read-only queries that return snapshots
- Listener registration for UI layers

Every command runs to completion before its events are delivered, in the
order they were emitted. Listeners may query the session but must not
issue commands; such calls are refused.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import random
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from menagerie.types import (
    CardType,
    Coord,
    GamePhase,
    Score,
    TileMode,
    TurnNumber,
)
from menagerie.config import GameConfig
from menagerie.cards import CardCatalog
from menagerie.stages import StageCatalog
from menagerie.models import (
    BoardPreview,
    ScoreBreakdown,
    StageDef,
    TileView,
    TurnData,
)
from menagerie.events import (
    ActionInvalidEvent,
    EventQueue,
    GameEvent,
)
from menagerie.board import Board
from menagerie.inventory import CardInventory
from menagerie.shop import Shop
from menagerie.turns import TurnController
from menagerie import scoring

logger = logging.getLogger(__name__)

Listener = Callable[[GameEvent], None]
"""Callback receiving each event after the command that caused it."""

_F = TypeVar("_F", bound=Callable[..., Any])


def _command(method: _F) -> _F:
    """Refuse re-entrant calls, then deliver the queued events."""

    @functools.wraps(method)
    def wrapper(self: GameManager, *args: Any, **kwargs: Any) -> Any:
        if self._dispatching:
            logger.warning("%s called from an event listener, ignored", method.__name__)
            return False
        try:
            return method(self, *args, **kwargs)
        finally:
            self._dispatch()

    return wrapper  # type: ignore[return-value]


class GameManager:
    """
    A game session.

    Usage:
        game = GameManager(seed=42)
        game.subscribe(print)
        game.start_game()
        game.place_block(0, 0, CardType.ORC)
        game.end_turn()
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        cards: CardCatalog | None = None,
        stages: StageCatalog | None = None,
        seed: int | None = None,
    ) -> None:
        self.config = config if config is not None else GameConfig()
        if not self.config.is_valid():
            raise ValueError(f"Invalid game configuration: {self.config}")

        self.seed = seed
        self.rng = random.Random(seed)
        self.cards = cards if cards is not None else CardCatalog()
        self.stages = stages if stages is not None else StageCatalog()
        self.events = EventQueue()

        self.board = Board(self.config, self.rng, self.events)
        self.inventory = CardInventory(self.config, self.cards, self.rng, self.events)
        self.shop = Shop(self.inventory, self.config, self.cards, self.rng, self.events)
        self.turns = TurnController(
            self.board,
            self.inventory,
            self.stages,
            config=self.config,
            catalog=self.cards,
            events=self.events,
        )

        self._listeners: list[Listener] = []
        self._dispatching = False

    # =========================================================================
    # Observers
    # =========================================================================

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _dispatch(self) -> None:
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while len(self.events):
                for event in self.events.drain():
                    for listener in list(self._listeners):
                        listener(event)
        finally:
            self._dispatching = False

    def _reject(self, action: str, reason: str, level: int = logging.WARNING) -> bool:
        logger.log(level, "%s rejected: %s", action, reason)
        self.events.emit(ActionInvalidEvent(action=action, reason=reason))
        return False

    # =========================================================================
    # Commands
    # =========================================================================

    @_command
    def start_game(self) -> bool:
        """Start a new run from the first stage."""
        if self.turns.phase != GamePhase.IDLE:
            return self._reject("start_game", "A game is already running; use restart()")
        return self._start_first_stage("start_game")

    @_command
    def restart(self) -> bool:
        """Abandon the current run and start again from the first stage."""
        logger.info("Restarting from the first stage")
        return self._start_first_stage("restart")

    def _start_first_stage(self, action: str) -> bool:
        stage = self.stages.first_stage()
        if stage is None:
            return self._reject(action, "No stages are configured", logging.ERROR)
        self.shop.clear()
        return self.turns.start_stage(stage)

    @_command
    def start_stage(self, stage_id: int) -> bool:
        stage = self.stages.get_stage(stage_id)
        if stage is None:
            return self._reject("start_stage", f"Unknown stage {stage_id}", logging.ERROR)
        self.shop.clear()
        return self.turns.start_stage(stage)

    @_command
    def place_block(self, x: int, y: int, card_type: CardType) -> bool:
        return self.turns.place_block(x, y, card_type)

    @_command
    def remove_block(self, x: int, y: int) -> bool:
        return self.turns.remove_block(x, y)

    @_command
    def replace_block(self, x: int, y: int, card_type: CardType) -> bool:
        return self.turns.replace_block(x, y, card_type)

    @_command
    def end_turn(self) -> bool:
        return self.turns.end_turn()

    @_command
    def set_tile_mode(self, use_numbers: bool) -> bool:
        self.board.set_tile_mode(use_numbers)
        self.turns.rescore()
        return True

    @_command
    def open_shop(self) -> bool:
        if not self.turns.open_shop():
            return False
        self.shop.roll_offers()
        return True

    @_command
    def shop_swap(self, out_type: CardType, in_type: CardType) -> bool:
        if self.turns.phase != GamePhase.SHOP:
            return self._reject("shop_swap", f"Not allowed during {self.turns.phase.name}")
        if not self.shop.swap(out_type, in_type):
            return self._reject("shop_swap", f"Cannot swap {out_type.name} for {in_type.name}", logging.INFO)
        return True

    @_command
    def shop_swap_at(self, deck_index: int, offer_index: int) -> bool:
        if self.turns.phase != GamePhase.SHOP:
            return self._reject("shop_swap_at", f"Not allowed during {self.turns.phase.name}")
        if not self.shop.swap_at(deck_index, offer_index):
            return self._reject(
                "shop_swap_at",
                f"Cannot swap deck slot {deck_index} for offer {offer_index}",
                logging.INFO,
            )
        return True

    @_command
    def exit_shop(self) -> bool:
        """Leave the shop and start the next stage."""
        current = self.turns.stage
        if self.turns.phase != GamePhase.SHOP or current is None:
            return self._reject("exit_shop", f"Not allowed during {self.turns.phase.name}")

        next_stage = self.stages.next_stage(current.stage_id)
        if next_stage is None:
            return self._reject("exit_shop", "No stage left after this one", logging.ERROR)

        self.shop.clear()
        return self.turns.start_stage(next_stage)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_tile(self, x: int, y: int) -> TileView | None:
        tile = self.board.get_tile(x, y)
        return tile.view() if tile is not None else None

    def get_board(self) -> tuple[tuple[TileView, ...], ...]:
        """Snapshot of the whole board, indexed [x][y]."""
        return self.board.snapshot()

    def get_current_turn(self) -> TurnData | None:
        """A copy of the turn in progress."""
        turn = self.turns.turn
        if turn is None:
            return None
        return dataclasses.replace(turn, available_cards=list(turn.available_cards))

    def get_current_turn_number(self) -> TurnNumber:
        return self.turns.turn_number

    def get_cumulative_score(self) -> Score:
        return self.turns.cumulative_score

    def get_total_score(self) -> Score:
        return scoring.total_score(self.board)

    def get_score_breakdown(self, x: int, y: int) -> ScoreBreakdown | None:
        return scoring.breakdown(self.board, x, y)

    def get_board_preview(self, x: int, y: int, card_type: CardType) -> BoardPreview | None:
        """
        What-if scores for putting card_type at (x, y).

        Empty tiles preview a placement; tiles holding a card placed this
        turn preview a replacement. Anything else has no preview.
        """
        tile = self.board.get_tile(x, y)
        if tile is None:
            return None
        turn = self.turns.turn_number
        if tile.is_empty:
            return scoring.preview_placement(self.board, x, y, card_type, turn, self.cards)
        return scoring.preview_replacement(self.board, x, y, card_type, turn, self.cards)

    def get_owned_cards(self) -> tuple[tuple[CardType, int], ...]:
        return self.inventory.owned_cards()

    def get_active_cards(self) -> tuple[CardType, ...]:
        return self.inventory.active_cards()

    def can_select(self, card_type: CardType) -> bool:
        return self.inventory.can_select(card_type)

    def get_card_status(self, card_type: CardType) -> tuple[bool, bool]:
        return self.inventory.card_status(card_type)

    def get_current_stage(self) -> StageDef | None:
        return self.turns.stage

    def get_phase(self) -> GamePhase:
        return self.turns.phase

    def get_tile_mode(self) -> TileMode:
        return self.board.tile_mode

    def get_shop_offers(self) -> tuple[CardType, ...]:
        return self.shop.offers()

    def get_card_base_score(self, card_type: CardType) -> Score | None:
        card_def = self.cards.get(card_type)
        return card_def.base_score if card_def is not None else None

    def get_remaining_turns(self) -> int:
        return self.turns.remaining_turns()

    def is_game_complete(self) -> bool:
        """True once the last stage has been cleared."""
        stage = self.turns.stage
        if self.turns.phase != GamePhase.VICTORY or stage is None:
            return False
        return self.stages.next_stage(stage.stage_id) is None


# =============================================================================
# Utility Functions
# =============================================================================


def create_test_board(
    cards: Mapping[Coord, CardType],
    placed_turn: int = 1,
    config: GameConfig | None = None,
    catalog: CardCatalog | None = None,
) -> Board:
    """
    Create a scored Board with cards already in place.

    This is a convenience function for tests that need specific layouts.
    """
    catalog = catalog if catalog is not None else CardCatalog()
    board = Board(config, random.Random(0))
    for (x, y), card_type in cards.items():
        card = catalog.create_instance(card_type)
        if card is None or not board.place(x, y, card, placed_turn):
            raise ValueError(f"Cannot place {card_type.name} at ({x}, {y})")
    scoring.calculate_all(board)
    board.events.drain()
    return board
