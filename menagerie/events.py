"""
Event types for the game engine.

Events form a typed log of everything that happens during a session.
Components push them onto an EventQueue; the GameManager drains the queue
at the end of each command and hands the events to its listeners, so UI
layers only ever see a consistent state.
"""

from __future__ import annotations

from dataclasses import dataclass

from menagerie.types import (
    CardType,
    GamePhase,
    Score,
    StageId,
    TurnNumber,
)


# =============================================================================
# Stage Events
# =============================================================================


@dataclass(frozen=True, slots=True)
class StageStartedEvent:
    """A stage has begun."""

    stage_id: StageId
    """The stage that started."""

    end_turn: int
    """Number of turns in the stage."""

    target_score: Score
    """Cumulative score needed to clear it."""

    @property
    def event_type(self) -> str:
        return "stage_started"


@dataclass(frozen=True, slots=True)
class StageEndedEvent:
    """The last turn of a stage has ended."""

    stage_id: StageId
    """The stage that ended."""

    cleared: bool
    """Whether the cumulative score reached the target."""

    cumulative_score: Score
    """Final cumulative score."""

    target_score: Score
    """The stage's target."""

    @property
    def event_type(self) -> str:
        return "stage_ended"


# =============================================================================
# Turn Events
# =============================================================================


@dataclass(frozen=True, slots=True)
class TurnStartedEvent:
    """A new turn has begun and the hand has been drawn."""

    turn_number: TurnNumber
    """The turn number that started."""

    target_score: Score
    """The stage's cumulative target."""

    available_cards: tuple[CardType, ...]
    """Types in the hand, one entry per copy."""

    @property
    def event_type(self) -> str:
        return "turn_started"


@dataclass(frozen=True, slots=True)
class TurnEndedEvent:
    """A turn has ended and its board score was banked."""

    turn_number: TurnNumber
    """The turn number that ended."""

    turn_score: Score
    """Board score at the end of the turn."""

    cumulative_score: Score
    """Cumulative stage score after banking the turn."""

    @property
    def event_type(self) -> str:
        return "turn_ended"


# =============================================================================
# Board Events
# =============================================================================


@dataclass(frozen=True, slots=True)
class CardPlacedEvent:
    """A card was placed on the board."""

    card_type: CardType
    x: int
    y: int
    turn_number: TurnNumber

    @property
    def event_type(self) -> str:
        return "card_placed"


@dataclass(frozen=True, slots=True)
class CardRemovedEvent:
    """A card was taken back into the hand."""

    card_type: CardType
    x: int
    y: int

    @property
    def event_type(self) -> str:
        return "card_removed"


@dataclass(frozen=True, slots=True)
class CardExpiredEvent:
    """A card was destroyed because its tile counter ran out."""

    card_type: CardType
    x: int
    y: int

    @property
    def event_type(self) -> str:
        return "card_expired"


@dataclass(frozen=True, slots=True)
class BoardUpdatedEvent:
    """The board changed; renderers should refresh tiles."""

    @property
    def event_type(self) -> str:
        return "board_updated"


@dataclass(frozen=True, slots=True)
class ScoreUpdatedEvent:
    """All tile scores were recalculated."""

    total_score: Score
    """Sum of the occupied tiles' scores."""

    @property
    def event_type(self) -> str:
        return "score_updated"


# =============================================================================
# Game Events
# =============================================================================


@dataclass(frozen=True, slots=True)
class GameStateChangedEvent:
    """The session moved to a new phase."""

    phase: GamePhase

    @property
    def event_type(self) -> str:
        return "game_state_changed"


@dataclass(frozen=True, slots=True)
class ActionInvalidEvent:
    """A command was rejected."""

    action: str
    """Name of the rejected command."""

    reason: str
    """Why it was rejected."""

    @property
    def event_type(self) -> str:
        return "action_invalid"


# =============================================================================
# Deck Events
# =============================================================================


@dataclass(frozen=True, slots=True)
class DeckChangedEvent:
    """The owned deck composition changed."""

    owned_types: tuple[CardType, ...]

    @property
    def event_type(self) -> str:
        return "deck_changed"


@dataclass(frozen=True, slots=True)
class ActiveCardsChangedEvent:
    """The set of active (in-hand) cards changed."""

    active_types: tuple[CardType, ...]

    @property
    def event_type(self) -> str:
        return "active_cards_changed"


@dataclass(frozen=True, slots=True)
class ShopOffersRolledEvent:
    """The shop presented a new set of offers."""

    offers: tuple[CardType, ...]

    @property
    def event_type(self) -> str:
        return "shop_offers_rolled"


@dataclass(frozen=True, slots=True)
class CardsSwappedEvent:
    """An owned type was exchanged for a shop offer."""

    out_type: CardType
    in_type: CardType

    @property
    def event_type(self) -> str:
        return "cards_swapped"


# =============================================================================
# Event Union Type
# =============================================================================

GameEvent = (
    StageStartedEvent
    | StageEndedEvent
    | TurnStartedEvent
    | TurnEndedEvent
    | CardPlacedEvent
    | CardRemovedEvent
    | CardExpiredEvent
    | BoardUpdatedEvent
    | ScoreUpdatedEvent
    | GameStateChangedEvent
    | ActionInvalidEvent
    | DeckChangedEvent
    | ActiveCardsChangedEvent
    | ShopOffersRolledEvent
    | CardsSwappedEvent
)


# =============================================================================
# Event Queue
# =============================================================================


class EventQueue:
    """
    FIFO buffer of pending events.

    Components emit into it while a command runs; the owner drains it once
    the command has finished.
    """

    def __init__(self) -> None:
        self._pending: list[GameEvent] = []

    def emit(self, event: GameEvent) -> None:
        self._pending.append(event)

    def drain(self) -> list[GameEvent]:
        """Return all pending events in emission order and empty the queue."""
        events, self._pending = self._pending, []
        return events

    def __len__(self) -> int:
        return len(self._pending)
