"""
Tests for the card inventory: deck building, hand draws, the exclusion
window and transactional deck swaps.

Copy counts (cards.json): Orc 3, Werewolf 2, Goblin 3, Elf 2, Dwarf 3,
Angel 1, Dragon 1, Devil 2, Vampire 2, Naga 2, Robot 1, Slime 2.
"""

import random

from menagerie.types import CardType, StageId, Score
from menagerie.config import GameConfig
from menagerie.cards import CardCatalog, get_card_def
from menagerie.models import StageDef
from menagerie.inventory import CardInventory
from menagerie.events import DeckChangedEvent


def make_stage(
    draw: int = 9,
    exclude: bool = True,
    unlocks: tuple[tuple[CardType, ...], ...] = (),
    end_turn: int = 6,
) -> StageDef:
    """Helper to create a stage that draws the same number of types every turn."""
    return StageDef(
        stage_id=StageId(1),
        end_turn=end_turn,
        target_score=Score(10),
        first_draw=draw,
        second_draw=draw,
        last_draw=draw,
        exclude_previous_turn_types=exclude,
        unlock_schedule=unlocks,
    )


def make_inventory(
    *types: CardType,
    stage: StageDef | None = None,
    config: GameConfig | None = None,
    seed: int = 0,
) -> CardInventory:
    inventory = CardInventory(config=config, rng=random.Random(seed))
    inventory.set_stage(stage if stage is not None else make_stage())
    for card_type in types:
        assert inventory.add_to_deck(card_type)
    return inventory


# =============================================================================
# Deck Building
# =============================================================================


class TestAddToDeck:
    """Tests for add_to_deck()."""

    def test_adds_catalog_copies(self) -> None:
        inventory = make_inventory(CardType.ORC, CardType.ROBOT)
        assert inventory.owned_cards() == ((CardType.ORC, 3), (CardType.ROBOT, 1))

    def test_adding_an_owned_type_is_skipped(self) -> None:
        """Re-adding is a no-op rather than stacking more copies."""
        inventory = make_inventory(CardType.ORC)
        assert not inventory.add_to_deck(CardType.ORC)
        assert inventory.owned_cards() == ((CardType.ORC, 3),)

    def test_missing_catalog_entry(self) -> None:
        orc = get_card_def(CardType.ORC)
        assert orc is not None
        inventory = CardInventory(catalog=CardCatalog((orc,)))

        assert not inventory.add_to_deck(CardType.GOBLIN)
        assert inventory.owned_cards() == ()

    def test_unique_limit(self) -> None:
        inventory = make_inventory(CardType.ORC, CardType.ELF, config=GameConfig(deck_unique_limit=2))
        assert not inventory.add_to_deck(CardType.GOBLIN)
        assert inventory.unique_type_count() == 2

    def test_add_emits_deck_changed(self) -> None:
        inventory = CardInventory()
        inventory.add_to_deck(CardType.SLIME)
        assert inventory.events.drain() == [DeckChangedEvent((CardType.SLIME,))]

    def test_unlock_schedule(self) -> None:
        stage = make_stage(unlocks=((CardType.ORC, CardType.ELF), (), (CardType.DRAGON,)))
        inventory = make_inventory(stage=stage)

        assert inventory.unlock_for_turn(1) == [CardType.ORC, CardType.ELF]
        assert inventory.unlock_for_turn(2) == []
        assert inventory.unlock_for_turn(3) == [CardType.DRAGON]
        assert inventory.unlock_for_turn(4) == []
        assert inventory.unlock_for_turn(1) == []
        assert inventory.owned_types() == (CardType.ORC, CardType.ELF, CardType.DRAGON)

    def test_reset_deck(self) -> None:
        inventory = make_inventory(CardType.ORC)
        inventory.activate_for_turn(1)
        inventory.reset_deck()

        assert inventory.owned_cards() == ()
        assert inventory.active_cards() == ()


# =============================================================================
# Drawing
# =============================================================================


class TestActivate:
    """Tests for activate_for_turn()."""

    def test_draws_distinct_types_with_all_copies(self) -> None:
        inventory = make_inventory(
            CardType.ORC, CardType.ELF, CardType.ROBOT, CardType.DWARF,
            stage=make_stage(draw=2),
        )
        drawn = inventory.activate_for_turn(1)

        active = inventory.active_cards()
        drawn_types = set(active)
        assert len(drawn_types) == 2
        for card_type in drawn_types:
            card_def = get_card_def(card_type)
            assert card_def is not None
            assert inventory.active_count(card_type) == card_def.copies
        assert sorted(c.card_type.name for c in drawn) == sorted(t.name for t in active)

    def test_draw_is_capped_by_owned_types(self) -> None:
        inventory = make_inventory(CardType.ORC, stage=make_stage(draw=4))
        inventory.activate_for_turn(1)
        assert inventory.active_cards() == (CardType.ORC,) * 3

    def test_same_seed_same_hand(self) -> None:
        types = (CardType.ORC, CardType.ELF, CardType.ROBOT, CardType.DWARF, CardType.NAGA)
        first = make_inventory(*types, stage=make_stage(draw=2), seed=42)
        second = make_inventory(*types, stage=make_stage(draw=2), seed=42)
        assert first.activate_for_turn(1) == second.activate_for_turn(1)

    def test_hand_is_replaced_each_turn(self) -> None:
        inventory = make_inventory(CardType.ORC, stage=make_stage(exclude=False))
        inventory.activate_for_turn(1)
        inventory.try_use(CardType.ORC)
        inventory.activate_for_turn(2)
        assert inventory.active_count(CardType.ORC) == 3

    def test_carry_over_hand(self) -> None:
        inventory = make_inventory(
            CardType.ROBOT,
            stage=make_stage(exclude=False),
            config=GameConfig(carry_over_hand=True),
        )
        inventory.activate_for_turn(1)
        inventory.activate_for_turn(2)
        assert inventory.active_count(CardType.ROBOT) == 2

    def test_empty_deck_draws_nothing(self) -> None:
        inventory = make_inventory()
        assert inventory.activate_for_turn(1) == []


class TestUseAndReturn:
    """Tests for try_use() and return_card()."""

    def test_use_removes_one_copy(self) -> None:
        inventory = make_inventory(CardType.GOBLIN)
        inventory.activate_for_turn(1)

        assert inventory.try_use(CardType.GOBLIN)
        assert inventory.active_count(CardType.GOBLIN) == 2

    def test_use_inactive_type_fails(self) -> None:
        inventory = make_inventory(CardType.GOBLIN)
        inventory.activate_for_turn(1)
        assert not inventory.try_use(CardType.ELF)
        assert not inventory.can_use(CardType.ELF)

    def test_last_copy(self) -> None:
        inventory = make_inventory(CardType.ROBOT)
        inventory.activate_for_turn(1)

        assert inventory.try_use(CardType.ROBOT)
        assert not inventory.try_use(CardType.ROBOT)

    def test_return_card(self) -> None:
        inventory = make_inventory(CardType.ROBOT)
        inventory.activate_for_turn(1)
        inventory.try_use(CardType.ROBOT)
        inventory.return_card(CardType.ROBOT)

        assert inventory.card_status(CardType.ROBOT) == (True, True)

    def test_card_status_of_inactive_type(self) -> None:
        inventory = make_inventory(CardType.ROBOT)
        assert inventory.card_status(CardType.ORC) == (False, False)


# =============================================================================
# Exclusion Window
# =============================================================================


class TestExclusionWindow:
    """A type used in turn N is blocked in turns N+1 and N+2."""

    def test_window_of_two_turns(self) -> None:
        inventory = make_inventory(CardType.ORC, CardType.GOBLIN, CardType.ELF)

        inventory.activate_for_turn(1)
        inventory.on_turn_end({CardType.ORC})

        inventory.activate_for_turn(2)
        assert CardType.ORC not in inventory.active_cards()
        inventory.on_turn_end({CardType.GOBLIN})

        inventory.activate_for_turn(3)
        assert CardType.ORC not in inventory.active_cards()
        assert inventory.active_cards() == (CardType.ELF,) * 2
        inventory.on_turn_end({CardType.ELF})

        inventory.activate_for_turn(4)
        assert inventory.active_cards() == (CardType.ORC,) * 3
        assert inventory.can_select(CardType.ORC)

    def test_excluded_types(self) -> None:
        inventory = make_inventory(CardType.ORC, CardType.GOBLIN)
        inventory.on_turn_end({CardType.ORC})
        inventory.on_turn_end({CardType.GOBLIN})
        assert inventory.excluded_types() == frozenset({CardType.ORC, CardType.GOBLIN})

    def test_empty_turns_are_not_recorded(self) -> None:
        inventory = make_inventory(CardType.ORC, CardType.GOBLIN)
        inventory.on_turn_end({CardType.ORC})
        inventory.on_turn_end(set())
        inventory.on_turn_end(set())
        assert inventory.excluded_types() == frozenset({CardType.ORC})

    def test_fallback_when_everything_is_excluded(self) -> None:
        """The whole deck is drawn, but recently used types stay unselectable."""
        inventory = make_inventory(CardType.ORC)
        inventory.on_turn_end({CardType.ORC})

        inventory.activate_for_turn(2)
        assert inventory.active_count(CardType.ORC) == 3
        assert not inventory.can_select(CardType.ORC)
        assert not inventory.try_use(CardType.ORC)
        assert inventory.card_status(CardType.ORC) == (True, False)

    def test_exclusion_disabled_by_stage(self) -> None:
        inventory = make_inventory(CardType.ORC, stage=make_stage(exclude=False))
        inventory.on_turn_end({CardType.ORC})

        inventory.activate_for_turn(2)
        assert inventory.excluded_types() == frozenset()
        assert inventory.try_use(CardType.ORC)

    def test_set_stage_clears_history(self) -> None:
        inventory = make_inventory(CardType.ORC)
        inventory.on_turn_end({CardType.ORC})
        inventory.set_stage(make_stage())
        assert inventory.excluded_types() == frozenset()


# =============================================================================
# Deck Swaps
# =============================================================================


class TestReplaceType:
    """Swaps keep at most deck_unique_limit types and roll back on failure."""

    def test_replace_type(self) -> None:
        inventory = make_inventory(CardType.ORC, CardType.ELF)
        assert inventory.replace_type(CardType.ORC, CardType.ROBOT)
        assert inventory.owned_cards() == ((CardType.ELF, 2), (CardType.ROBOT, 1))

    def test_replace_unowned_type_fails(self) -> None:
        inventory = make_inventory(CardType.ORC, CardType.ELF)
        before = inventory.owned_cards()
        assert not inventory.replace_type(CardType.GOBLIN, CardType.ROBOT)
        assert inventory.owned_cards() == before

    def test_replace_with_owned_type_fails(self) -> None:
        inventory = make_inventory(CardType.ORC, CardType.ELF)
        before = inventory.owned_cards()
        assert not inventory.replace_type(CardType.ORC, CardType.ELF)
        assert inventory.owned_cards() == before

    def test_replace_at_index_keeps_slot(self) -> None:
        inventory = make_inventory(CardType.ORC, CardType.ELF, CardType.DWARF)
        assert inventory.replace_type_at_index(1, CardType.SLIME) == CardType.ELF
        assert inventory.owned_types() == (CardType.ORC, CardType.SLIME, CardType.DWARF)
        assert inventory.owned_cards()[1] == (CardType.SLIME, 2)

    def test_replace_at_index_failures_leave_deck_untouched(self) -> None:
        inventory = make_inventory(CardType.ORC, CardType.ELF)
        before = inventory.owned_cards()

        assert inventory.replace_type_at_index(5, CardType.SLIME) is None
        assert inventory.replace_type_at_index(-1, CardType.SLIME) is None
        assert inventory.replace_type_at_index(0, CardType.ORC) is None
        assert inventory.replace_type_at_index(0, CardType.ELF) is None
        assert inventory.owned_cards() == before

    def test_full_deck_stays_at_limit(self) -> None:
        types = (
            CardType.ORC, CardType.WEREWOLF, CardType.GOBLIN, CardType.ELF,
            CardType.DWARF, CardType.ANGEL, CardType.DRAGON,
        )
        inventory = make_inventory(*types)
        assert not inventory.add_to_deck(CardType.ROBOT)

        rng = random.Random(9)
        for _ in range(30):
            unowned = [t for t in CardType if not inventory.has_type(t)]
            inventory.replace_type_at_index(rng.randrange(7), rng.choice(unowned))
            assert inventory.unique_type_count() == 7

    def test_swap_over_limit_rolls_back(self) -> None:
        """A deck already over a lowered limit is restored when a swap is checked."""
        inventory = make_inventory(CardType.ORC, CardType.ELF, CardType.DWARF)
        inventory.config = GameConfig(deck_unique_limit=2)
        inventory.events.drain()
        before = inventory.owned_cards()

        assert not inventory.replace_type(CardType.ORC, CardType.ROBOT)
        assert inventory.owned_cards() == before

        assert inventory.replace_type_at_index(1, CardType.SLIME) is None
        assert inventory.owned_cards() == before
        assert inventory.events.drain() == []
