"""
Between-stage shop.

The shop offers a few card types the player does not own. Swapping puts
an offer into the deck and the outgoing type into the offer's slot, so it
can be bought back in the same visit.
"""

from __future__ import annotations

import logging
import random

from menagerie.types import CardType
from menagerie.config import GameConfig
from menagerie.cards import CardCatalog
from menagerie.inventory import CardInventory
from menagerie.events import (
    CardsSwappedEvent,
    EventQueue,
    ShopOffersRolledEvent,
)

logger = logging.getLogger(__name__)


class Shop:
    def __init__(
        self,
        inventory: CardInventory,
        config: GameConfig | None = None,
        catalog: CardCatalog | None = None,
        rng: random.Random | None = None,
        events: EventQueue | None = None,
    ) -> None:
        self.inventory = inventory
        self.config = config if config is not None else GameConfig()
        self.catalog = catalog if catalog is not None else CardCatalog()
        self.rng = rng if rng is not None else random.Random()
        self.events = events if events is not None else EventQueue()
        self._offers: list[CardType] = []

    def roll_offers(self) -> tuple[CardType, ...]:
        """Pick up to shop_offer_count unowned catalog types at random."""
        candidates = [t for t in self.catalog.types() if not self.inventory.has_type(t)]
        if not candidates:
            logger.info("Every card type is already owned, nothing to offer")

        self.rng.shuffle(candidates)
        self._offers = candidates[: self.config.shop_offer_count]
        self.events.emit(ShopOffersRolledEvent(self.offers()))
        return self.offers()

    def offers(self) -> tuple[CardType, ...]:
        return tuple(self._offers)

    def clear(self) -> None:
        self._offers = []

    def swap(self, out_type: CardType, in_type: CardType) -> bool:
        """Exchange an owned type for an offered one."""
        if in_type not in self._offers:
            logger.info("Swap failed: %s is not on offer", in_type.name)
            return False

        if not self.inventory.replace_type(out_type, in_type):
            return False

        self._offers[self._offers.index(in_type)] = out_type
        self.events.emit(CardsSwappedEvent(out_type, in_type))
        return True

    def swap_at(self, deck_index: int, offer_index: int) -> bool:
        """Exchange the deck slot at deck_index for the offer at offer_index."""
        if not 0 <= offer_index < len(self._offers):
            logger.info("Swap failed: no offer slot %d", offer_index)
            return False

        in_type = self._offers[offer_index]
        out_type = self.inventory.replace_type_at_index(deck_index, in_type)
        if out_type is None:
            return False

        self._offers[offer_index] = out_type
        self.events.emit(CardsSwappedEvent(out_type, in_type))
        return True
