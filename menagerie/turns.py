"""
Turn and stage controller.

Runs the phase machine:

    IDLE -> PLAYING -> VICTORY -> SHOP -> PLAYING -> ...
                    -> GAME_OVER

A stage is a fixed number of turns. Each turn draws a hand, lets the
player place, remove and replace cards, then banks the board score into
the stage's cumulative total. After the last turn the total is compared
with the stage target.
"""

from __future__ import annotations

import logging

from menagerie.types import (
    CardType,
    GamePhase,
    Score,
    TurnNumber,
)
from menagerie.config import GameConfig
from menagerie.cards import CardCatalog
from menagerie.stages import StageCatalog
from menagerie.models import StageDef, TurnData
from menagerie.board import Board
from menagerie.inventory import CardInventory
from menagerie.events import (
    ActionInvalidEvent,
    CardPlacedEvent,
    CardRemovedEvent,
    EventQueue,
    GameStateChangedEvent,
    ScoreUpdatedEvent,
    StageEndedEvent,
    StageStartedEvent,
    TurnEndedEvent,
    TurnStartedEvent,
)
from menagerie.rules import (
    ValidationResult,
    collect_used_types,
    is_stage_cleared,
    validate_phase,
    validate_placement,
    validate_removal,
    validate_replacement,
)
from menagerie import scoring

logger = logging.getLogger(__name__)


class TurnController:
    """Owns the phase, the current stage and turn, and the cumulative score."""

    def __init__(
        self,
        board: Board,
        inventory: CardInventory,
        stages: StageCatalog,
        config: GameConfig | None = None,
        catalog: CardCatalog | None = None,
        events: EventQueue | None = None,
    ) -> None:
        self.board = board
        self.inventory = inventory
        self.stages = stages
        self.config = config if config is not None else GameConfig()
        self.catalog = catalog if catalog is not None else CardCatalog()
        self.events = events if events is not None else EventQueue()

        self.phase = GamePhase.IDLE
        self.stage: StageDef | None = None
        self.turn: TurnData | None = None
        self.turn_number = TurnNumber(0)
        self.cumulative_score = Score(0)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _reject(self, action: str, reason: str, level: int = logging.INFO) -> bool:
        logger.log(level, "%s rejected: %s", action, reason)
        self.events.emit(ActionInvalidEvent(action=action, reason=reason))
        return False

    def _playing_turn(self, action: str) -> TurnData | None:
        """The turn in progress, or None (rejected) outside PLAYING."""
        check = validate_phase(self.phase, GamePhase.PLAYING)
        if not check.valid:
            self._reject(action, check.reason, logging.WARNING)
            return None
        if self.stage is None or self.turn is None:
            self._reject(action, "No turn in progress", logging.WARNING)
            return None
        return self.turn

    def set_phase(self, phase: GamePhase) -> None:
        if phase == self.phase:
            return
        logger.debug("Phase %s -> %s", self.phase.name, phase.name)
        self.phase = phase
        self.events.emit(GameStateChangedEvent(phase))

    def rescore(self) -> Score:
        """Recalculate every tile and announce the new board total."""
        scoring.calculate_all(self.board)
        total = scoring.total_score(self.board)
        self.events.emit(ScoreUpdatedEvent(total))
        return total

    # =========================================================================
    # Stage lifecycle
    # =========================================================================

    def start_stage(self, stage: StageDef) -> bool:
        """
        Begin a stage and its first turn.

        The board is cleared (and re-dealt in numbered mode). The deck is
        reset only for the first stage of the run; later stages keep the
        deck built so far.
        """
        if not stage.is_valid():
            return self._reject("start_stage", f"Stage {stage.stage_id} is misconfigured", logging.ERROR)

        self.stage = stage
        self.cumulative_score = Score(0)
        self.turn = None
        self.turn_number = TurnNumber(0)

        self.board.clear_all()
        if self.board.uses_numbers:
            self.board.initialize()

        if self.stages.is_first(stage):
            self.inventory.reset_deck()
        self.inventory.set_stage(stage)

        logger.info(
            "Stage %d started: %d turns, target %d",
            stage.stage_id,
            stage.end_turn,
            stage.target_score,
        )
        self.events.emit(StageStartedEvent(stage.stage_id, stage.end_turn, stage.target_score))
        self.set_phase(GamePhase.PLAYING)
        self.start_next_turn()
        self.rescore()
        return True

    def start_next_turn(self) -> bool:
        """Advance to the next turn: apply unlocks and draw the hand."""
        if self.stage is None or self.phase != GamePhase.PLAYING:
            return self._reject("start_next_turn", "No stage in progress", logging.WARNING)

        if self.turn_number >= self.stage.end_turn:
            return self._reject(
                "start_next_turn",
                f"Stage {self.stage.stage_id} has only {self.stage.end_turn} turns",
                logging.WARNING,
            )

        leftover = []
        if self.config.carry_over_hand and self.turn is not None:
            leftover = list(self.turn.available_cards)

        self.turn_number = TurnNumber(self.turn_number + 1)
        self.turn = TurnData(turn_number=self.turn_number, target_score=self.stage.target_score)

        self.inventory.unlock_for_turn(self.turn_number)
        drawn = self.inventory.activate_for_turn(self.turn_number)
        self.turn.available_cards = leftover + drawn

        self.events.emit(
            TurnStartedEvent(
                turn_number=self.turn_number,
                target_score=self.stage.target_score,
                available_cards=self.turn.available_types(),
            )
        )
        return True

    def end_turn(self) -> bool:
        """Score the board, bank it and move on."""
        if self._playing_turn("end_turn") is None:
            return False

        self.rescore()
        board_score = scoring.total_score(self.board)
        used_types = collect_used_types(self.board, self.turn_number)
        return self.complete_turn(board_score, used_types)

    def complete_turn(self, board_score: Score, used_types: frozenset[CardType]) -> bool:
        """
        Bank board_score and either process the board for the next turn or,
        on the stage's last turn, decide the stage.

        Only valid while PLAYING; a decided stage stays decided.
        """
        turn = self._playing_turn("complete_turn")
        stage = self.stage
        if turn is None or stage is None:
            return False

        turn.turn_score = board_score
        self.inventory.on_turn_end(used_types)
        self.cumulative_score = Score(self.cumulative_score + board_score)

        logger.info(
            "Turn %d ended: %d points, %d cumulative",
            self.turn_number,
            board_score,
            self.cumulative_score,
        )
        self.events.emit(TurnEndedEvent(self.turn_number, board_score, self.cumulative_score))

        if self.is_last_turn():
            cleared = is_stage_cleared(self.cumulative_score, stage)
            logger.info(
                "Stage %d %s: %d / %d",
                stage.stage_id,
                "cleared" if cleared else "failed",
                self.cumulative_score,
                stage.target_score,
            )
            self.events.emit(
                StageEndedEvent(
                    stage_id=stage.stage_id,
                    cleared=cleared,
                    cumulative_score=self.cumulative_score,
                    target_score=stage.target_score,
                )
            )
            self.set_phase(GamePhase.VICTORY if cleared else GamePhase.GAME_OVER)
            return True

        if self.board.uses_numbers:
            self.board.decay_all_tiles()
        else:
            self.board.clear_all()
        self.rescore()
        self.start_next_turn()
        return True

    def open_shop(self) -> bool:
        """Move from a cleared stage to the shop, if another stage follows."""
        if self.phase != GamePhase.VICTORY or self.stage is None:
            return self._reject("open_shop", f"Not allowed during {self.phase.name}", logging.WARNING)

        if self.stages.next_stage(self.stage.stage_id) is None:
            return self._reject("open_shop", "No stage left after this one")

        self.set_phase(GamePhase.SHOP)
        return True

    # =========================================================================
    # Card commands
    # =========================================================================

    def place_block(self, x: int, y: int, card_type: CardType) -> bool:
        turn = self._playing_turn("place_block")
        if turn is None:
            return False

        check = validate_placement(self.board, x, y, card_type, self.inventory.can_use(card_type))
        if not check.valid:
            return self._reject("place_block", check.reason)

        if not self.inventory.try_use(card_type):
            return self._reject("place_block", f"{card_type.name.title()} cannot be used")

        card = turn.take(card_type) or self.catalog.create_instance(card_type)
        if card is None or not self.board.place(x, y, card, self.turn_number):
            self.inventory.return_card(card_type)
            if card is not None:
                turn.give_back(card)
            return self._reject("place_block", f"Could not place at ({x}, {y})")

        logger.debug("Placed %s at (%d, %d)", card_type.name, x, y)
        self.events.emit(CardPlacedEvent(card_type, x, y, self.turn_number))
        self.rescore()
        return True

    def remove_block(self, x: int, y: int) -> bool:
        turn = self._playing_turn("remove_block")
        if turn is None:
            return False

        check = validate_removal(self.board, x, y, self.turn_number)
        if not check.valid:
            return self._reject("remove_block", check.reason)

        card = self.board.remove(x, y, self.turn_number)
        if card is None:
            return self._reject("remove_block", f"Could not remove from ({x}, {y})")

        self.inventory.return_card(card.card_type)
        turn.give_back(card)

        logger.debug("Removed %s from (%d, %d)", card.card_type.name, x, y)
        self.events.emit(CardRemovedEvent(card.card_type, x, y))
        self.rescore()
        return True

    def replace_block(self, x: int, y: int, card_type: CardType) -> bool:
        """
        Swap the card placed this turn at (x, y) for card_type from the hand.

        Either both halves happen or neither does.
        """
        turn = self._playing_turn("replace_block")
        if turn is None:
            return False

        check: ValidationResult = validate_replacement(
            self.board, x, y, card_type, self.turn_number, self.inventory.can_use(card_type)
        )
        if not check.valid:
            return self._reject("replace_block", check.reason)

        old_card = self.board.remove(x, y, self.turn_number)
        if old_card is None:
            return self._reject("replace_block", f"Could not remove the card at ({x}, {y})")

        used = self.inventory.try_use(card_type)
        new_card = None
        if used:
            new_card = turn.take(card_type) or self.catalog.create_instance(card_type)

        if new_card is None or not self.board.place(x, y, new_card, self.turn_number):
            if used:
                self.inventory.return_card(card_type)
            if new_card is not None:
                turn.give_back(new_card)
            self.board.place(x, y, old_card, self.turn_number)
            return self._reject("replace_block", f"Could not replace the card at ({x}, {y})")

        self.inventory.return_card(old_card.card_type)
        turn.give_back(old_card)

        logger.debug("Replaced %s with %s at (%d, %d)", old_card.card_type.name, card_type.name, x, y)
        self.events.emit(CardRemovedEvent(old_card.card_type, x, y))
        self.events.emit(CardPlacedEvent(card_type, x, y, self.turn_number))
        self.rescore()
        return True

    # =========================================================================
    # Queries
    # =========================================================================

    def is_last_turn(self) -> bool:
        return self.stage is not None and self.turn_number >= self.stage.end_turn

    def remaining_turns(self) -> int:
        if self.stage is None:
            return 0
        return max(0, self.stage.end_turn - self.turn_number)
