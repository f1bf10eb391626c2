"""
Tests for the between-stage shop.
"""

import random

from menagerie.types import CardType
from menagerie.config import GameConfig
from menagerie.inventory import CardInventory
from menagerie.shop import Shop
from menagerie.events import CardsSwappedEvent, ShopOffersRolledEvent


def make_shop(*owned: CardType, seed: int = 0, config: GameConfig | None = None) -> Shop:
    """Helper to create a shop over an inventory owning the given types."""
    rng = random.Random(seed)
    inventory = CardInventory(config=config, rng=rng)
    for card_type in owned:
        inventory.add_to_deck(card_type)
    return Shop(inventory, config=config, rng=rng, events=inventory.events)


STARTER = (
    CardType.ORC, CardType.WEREWOLF, CardType.GOBLIN, CardType.ELF,
    CardType.DWARF, CardType.ANGEL, CardType.DRAGON,
)


class TestOffers:
    """Tests for roll_offers()."""

    def test_offers_are_unowned(self) -> None:
        shop = make_shop(*STARTER)
        offers = shop.roll_offers()

        assert len(offers) == 3
        assert len(set(offers)) == 3
        assert not set(offers) & set(STARTER)

    def test_fewer_candidates_than_slots(self) -> None:
        shop = make_shop(*STARTER, config=GameConfig(deck_unique_limit=12))
        for card_type in (CardType.DEVIL, CardType.VAMPIRE, CardType.NAGA):
            shop.inventory.add_to_deck(card_type)

        assert sorted(t.name for t in shop.roll_offers()) == ["ROBOT", "SLIME"]

    def test_offer_count_from_config(self) -> None:
        shop = make_shop(*STARTER, config=GameConfig(shop_offer_count=1))
        assert len(shop.roll_offers()) == 1

    def test_roll_emits_event(self) -> None:
        shop = make_shop(*STARTER)
        shop.events.drain()
        offers = shop.roll_offers()
        assert shop.events.drain() == [ShopOffersRolledEvent(offers)]


class TestSwap:
    """Tests for swap() and swap_at()."""

    def test_swap_moves_outgoing_type_into_offer_slot(self) -> None:
        shop = make_shop(*STARTER)
        offers = shop.roll_offers()
        shop.events.drain()

        assert shop.swap(CardType.ORC, offers[1])

        assert shop.offers()[1] == CardType.ORC
        assert shop.inventory.has_type(offers[1])
        assert not shop.inventory.has_type(CardType.ORC)
        assert shop.inventory.unique_type_count() == 7
        assert CardsSwappedEvent(CardType.ORC, offers[1]) in shop.events.drain()

    def test_swap_requires_offer(self) -> None:
        shop = make_shop(*STARTER)
        offers = shop.roll_offers()
        not_offered = next(t for t in CardType if t not in offers and t not in STARTER)

        assert not shop.swap(CardType.ORC, not_offered)
        assert shop.inventory.owned_types() == STARTER

    def test_swap_of_unowned_type_leaves_offers(self) -> None:
        shop = make_shop(CardType.ORC, CardType.ELF)
        offers = shop.roll_offers()

        assert not shop.swap(CardType.GOBLIN, offers[0])
        assert shop.offers() == offers

    def test_swap_at_keeps_deck_slot(self) -> None:
        shop = make_shop(*STARTER)
        offers = shop.roll_offers()

        assert shop.swap_at(2, 0)

        assert shop.inventory.owned_types()[2] == offers[0]
        assert shop.offers()[0] == CardType.GOBLIN

    def test_swap_back_in_same_visit(self) -> None:
        shop = make_shop(*STARTER)
        shop.roll_offers()

        shop.swap_at(0, 0)
        shop.swap_at(0, 0)

        assert shop.inventory.owned_types() == STARTER

    def test_swap_at_bad_indices(self) -> None:
        shop = make_shop(*STARTER)
        offers = shop.roll_offers()

        assert not shop.swap_at(0, 3)
        assert not shop.swap_at(9, 0)
        assert shop.offers() == offers
        assert shop.inventory.owned_types() == STARTER
