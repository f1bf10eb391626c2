"""
Card inventory: the owned deck, the active hand and the exclusion history.

A type moves through these states:
    Locked -> Owned (in the deck) -> Active (copies drawn this turn)
           -> Selectable (not used in a recent turn) -> Used (placed)

The deck never holds more than GameConfig.deck_unique_limit distinct
types. Deck swaps are transactional: on any violation the deck is restored
to what it was before the call.
"""

from __future__ import annotations

import logging
import random
from collections import deque

from menagerie.types import CardType
from menagerie.config import GameConfig
from menagerie.cards import CardCatalog
from menagerie.models import CardInstance, StageDef
from menagerie.events import (
    ActiveCardsChangedEvent,
    DeckChangedEvent,
    EventQueue,
)
from menagerie.rules import compute_draw_count

logger = logging.getLogger(__name__)


class CardInventory:
    """Owns the deck, the active cards, the usage history and selectability."""

    def __init__(
        self,
        config: GameConfig | None = None,
        catalog: CardCatalog | None = None,
        rng: random.Random | None = None,
        events: EventQueue | None = None,
    ) -> None:
        self.config = config if config is not None else GameConfig()
        self.catalog = catalog if catalog is not None else CardCatalog()
        self.rng = rng if rng is not None else random.Random()
        self.events = events if events is not None else EventQueue()

        self._owned: list[tuple[CardType, int]] = []
        self._active: list[CardType] = []
        self._history: deque[frozenset[CardType]] = deque(maxlen=self.config.exclude_turn_count)
        self._can_select: dict[CardType, bool] = {}
        self._stage: StageDef | None = None

    # =========================================================================
    # Stage and deck lifecycle
    # =========================================================================

    def set_stage(self, stage: StageDef) -> None:
        """Start tracking a new stage. History and selectability are reset."""
        self._stage = stage
        self._history.clear()
        self._can_select.clear()
        logger.debug("Inventory set to stage %d", stage.stage_id)

    def reset_deck(self) -> None:
        """Empty the deck for a new run. Stages provide the cards."""
        self._owned.clear()
        self._active.clear()
        self._history.clear()
        self._can_select.clear()
        self._emit_deck_changed()

    def add_to_deck(self, card_type: CardType) -> bool:
        """
        Add a type with its catalog copy count.

        Already-owned types are skipped, so applying an unlock twice has no
        effect. Fails when the type has no catalog entry or the deck is full.
        """
        if self.has_type(card_type):
            logger.info("%s is already in the deck, skipping", card_type.name)
            return False

        copies = self.catalog.copies_of(card_type)
        if copies is None:
            return False

        if self.unique_type_count() >= self.config.deck_unique_limit:
            logger.warning(
                "Cannot add %s: deck already holds %d types",
                card_type.name,
                self.config.deck_unique_limit,
            )
            return False

        self._owned.append((card_type, copies))
        logger.debug("Added %s x%d to the deck", card_type.name, copies)
        self._emit_deck_changed()
        return True

    def unlock_for_turn(self, turn_number: int) -> list[CardType]:
        """Apply the current stage's unlock entry for turn_number."""
        if self._stage is None:
            return []
        return [t for t in self._stage.unlocks_for_turn(turn_number) if self.add_to_deck(t)]

    # =========================================================================
    # Turn lifecycle
    # =========================================================================

    def activate_for_turn(self, turn_number: int) -> list[CardInstance]:
        """
        Draw the hand for a turn.

        Picks distinct owned types at random, skipping recently used ones
        when the stage asks for it, and activates every copy of each.
        """
        if not self.config.carry_over_hand:
            self._active.clear()

        draw_count = compute_draw_count(self._stage, turn_number)
        pool = self._candidate_pool()
        self.rng.shuffle(pool)
        selected = pool[: min(draw_count, len(pool))]

        drawn: list[CardInstance] = []
        copies_by_type = dict(self._owned)
        for card_type in selected:
            card_def = self.catalog.get(card_type)
            if card_def is None:
                logger.error("No catalog entry for %s, not drawn", card_type.name)
                continue
            for _ in range(copies_by_type[card_type]):
                self._active.append(card_type)
                drawn.append(CardInstance(card_type=card_type, base_score=card_def.base_score))

        self._update_can_select()
        logger.info(
            "Turn %d: drew %d types, %d cards (%s)",
            turn_number,
            len(selected),
            len(drawn),
            ", ".join(t.name for t in selected) or "none",
        )
        self._emit_active_changed()
        return drawn

    def _candidate_pool(self) -> list[CardType]:
        owned = [card_type for card_type, _ in self._owned]
        if not owned:
            logger.warning("No owned card types to draw from")
            return []

        excluded = self.excluded_types()
        if not excluded:
            return owned

        filtered = [t for t in owned if t not in excluded]
        if not filtered:
            logger.info("Every owned type is excluded, drawing from the whole deck")
            return owned
        return filtered

    def _update_can_select(self) -> None:
        excluded = self.excluded_types()
        self._can_select = {card_type: card_type not in excluded for card_type in self._active}

    def excluded_types(self) -> frozenset[CardType]:
        """Types used within the exclusion window, if the stage excludes them."""
        if self._stage is None or not self._stage.exclude_previous_turn_types:
            return frozenset()
        return frozenset().union(*self._history)

    def can_use(self, card_type: CardType) -> bool:
        return card_type in self._active and self._can_select.get(card_type, True)

    def try_use(self, card_type: CardType) -> bool:
        """Take one copy out of the active cards."""
        if card_type not in self._active:
            logger.info("%s is not an active card", card_type.name)
            return False

        if not self._can_select.get(card_type, True):
            logger.info("%s was used recently and cannot be selected", card_type.name)
            return False

        self._active.remove(card_type)
        self._emit_active_changed()
        return True

    def return_card(self, card_type: CardType) -> None:
        """Put one copy back into the active cards."""
        self._active.append(card_type)
        self._update_can_select()
        self._emit_active_changed()

    def on_turn_end(self, used_types: frozenset[CardType] | set[CardType]) -> None:
        """Record the types used this turn; the oldest record falls out of the window."""
        if self._stage is None or not self._stage.exclude_previous_turn_types:
            return
        if not used_types:
            return

        self._history.append(frozenset(used_types))
        logger.debug("Recorded used types: %s", ", ".join(sorted(t.name for t in used_types)))

    # =========================================================================
    # Deck swaps
    # =========================================================================

    def replace_type(self, out_type: CardType, in_type: CardType) -> bool:
        """Remove out_type from the deck and add in_type in its place."""
        if not self.has_type(out_type):
            logger.info("Swap failed: %s is not in the deck", out_type.name)
            return False
        if self.has_type(in_type):
            logger.info("Swap failed: %s is already in the deck", in_type.name)
            return False

        copies = self.catalog.copies_of(in_type)
        if copies is None:
            return False

        snapshot = list(self._owned)
        self._owned = [(t, n) for t, n in self._owned if t != out_type]
        self._owned.append((in_type, copies))

        if self.unique_type_count() > self.config.deck_unique_limit:
            logger.error("Swap would exceed %d types, rolling back", self.config.deck_unique_limit)
            self._owned = snapshot
            return False

        logger.info("Swapped %s for %s", out_type.name, in_type.name)
        self._emit_deck_changed()
        return True

    def replace_type_at_index(self, deck_index: int, in_type: CardType) -> CardType | None:
        """
        Replace the deck slot at deck_index with in_type, keeping the slot.

        Returns the type that was swapped out, or None on failure.
        """
        if not 0 <= deck_index < len(self._owned):
            logger.info("Swap failed: no deck slot %d", deck_index)
            return None

        out_type = self._owned[deck_index][0]
        if out_type == in_type:
            logger.info("Swap failed: slot %d already holds %s", deck_index, in_type.name)
            return None
        if self.has_type(in_type):
            logger.info("Swap failed: %s is already in the deck", in_type.name)
            return None

        copies = self.catalog.copies_of(in_type)
        if copies is None:
            return None

        snapshot = list(self._owned)
        self._owned[deck_index] = (in_type, copies)

        if self.unique_type_count() > self.config.deck_unique_limit:
            logger.error("Swap would exceed %d types, rolling back", self.config.deck_unique_limit)
            self._owned = snapshot
            return None

        logger.info("Deck slot %d: %s -> %s", deck_index, out_type.name, in_type.name)
        self._emit_deck_changed()
        return out_type

    # =========================================================================
    # Queries
    # =========================================================================

    def owned_cards(self) -> tuple[tuple[CardType, int], ...]:
        return tuple(self._owned)

    def owned_types(self) -> tuple[CardType, ...]:
        """Owned types in deck order."""
        return tuple(card_type for card_type, _ in self._owned)

    def has_type(self, card_type: CardType) -> bool:
        return any(t == card_type for t, _ in self._owned)

    def unique_type_count(self) -> int:
        return len({t for t, _ in self._owned})

    def active_cards(self) -> tuple[CardType, ...]:
        return tuple(self._active)

    def active_count(self, card_type: CardType) -> int:
        return self._active.count(card_type)

    def can_select(self, card_type: CardType) -> bool:
        """Selectability flag; types never drawn default to selectable."""
        return self._can_select.get(card_type, True)

    def card_status(self, card_type: CardType) -> tuple[bool, bool]:
        """(is_active, can_select) for display. Inactive types report not selectable."""
        return card_type in self._active, self._can_select.get(card_type, False)

    # =========================================================================
    # Events
    # =========================================================================

    def _emit_deck_changed(self) -> None:
        self.events.emit(DeckChangedEvent(self.owned_types()))

    def _emit_active_changed(self) -> None:
        self.events.emit(ActiveCardsChangedEvent(self.active_cards()))
