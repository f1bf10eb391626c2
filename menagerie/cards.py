"""
Card catalog for Menagerie Grid.

This module loads card definitions from data/cards.json, providing a single
source of truth for base scores, copy counts and rule text.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from menagerie.types import CardType, Score
from menagerie.models import CardDef, CardInstance

logger = logging.getLogger(__name__)


# =============================================================================
# JSON Loading and Parsing
# =============================================================================

# Path to the cards.json file (relative to this module)
CARDS_JSON_PATH = Path(__file__).parent / "data" / "cards.json"


def parse_card_type(type_str: str) -> CardType:
    """Parse a card type name (case-insensitive) into a CardType."""
    return CardType[type_str.strip().upper()]


def _parse_card_def(card_data: dict[str, Any]) -> CardDef:
    """Parse a card dictionary into a CardDef object."""
    copies = int(card_data.get("copies", 1))
    if copies < 1:
        raise ValueError(f"Card {card_data['type']} must have at least one copy, got {copies}")

    return CardDef(
        card_type=parse_card_type(card_data["type"]),
        name=card_data["name"],
        base_score=Score(card_data["base_score"]),
        copies=copies,
        text=card_data.get("text", ""),
    )


def load_card_defs(path: Path = CARDS_JSON_PATH) -> tuple[CardDef, ...]:
    """Load all card definitions from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return tuple(_parse_card_def(card_data) for card_data in data["cards"])


# =============================================================================
# Card Data (loaded from JSON)
# =============================================================================

# Load cards once at module import time
ALL_CARDS: tuple[CardDef, ...] = load_card_defs()

# Registry for quick lookup by type
CARD_REGISTRY: dict[CardType, CardDef] = {card.card_type: card for card in ALL_CARDS}


# =============================================================================
# Public API
# =============================================================================


class CardCatalog:
    """
    Lookup from card type to its catalog entry.

    Sessions receive a catalog explicitly; the default one wraps the
    module-level registry loaded from cards.json.
    """

    def __init__(self, card_defs: tuple[CardDef, ...] | None = None) -> None:
        defs = ALL_CARDS if card_defs is None else card_defs
        self._defs: dict[CardType, CardDef] = {card.card_type: card for card in defs}

    def get(self, card_type: CardType) -> CardDef | None:
        return self._defs.get(card_type)

    def __contains__(self, card_type: object) -> bool:
        return card_type in self._defs

    def __len__(self) -> int:
        return len(self._defs)

    def types(self) -> tuple[CardType, ...]:
        """All catalogued types, in enum order."""
        return tuple(t for t in CardType if t in self._defs)

    def name_of(self, card_type: CardType) -> str:
        card_def = self._defs.get(card_type)
        return card_def.name if card_def is not None else card_type.name.title()

    def copies_of(self, card_type: CardType) -> int | None:
        card_def = self._defs.get(card_type)
        if card_def is None:
            logger.error("No catalog entry for %s", card_type.name)
            return None
        return card_def.copies

    def create_instance(self, card_type: CardType) -> CardInstance | None:
        """Create a fresh card instance, or None for an uncatalogued type."""
        card_def = self._defs.get(card_type)
        if card_def is None:
            logger.error("No catalog entry for %s", card_type.name)
            return None
        return CardInstance(card_type=card_type, base_score=card_def.base_score)


def get_card_def(card_type: CardType) -> CardDef | None:
    """Get a card definition by type."""
    return CARD_REGISTRY.get(card_type)


def reload_cards() -> None:
    """
    Reload card definitions from the JSON file.

    Catalogs created afterwards see the new data; existing ones keep theirs.
    """
    global ALL_CARDS, CARD_REGISTRY

    ALL_CARDS = load_card_defs()
    CARD_REGISTRY = {card.card_type: card for card in ALL_CARDS}
