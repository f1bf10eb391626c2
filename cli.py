#!/usr/bin/env python3
"""
Command-Line Interface for Menagerie Grid.

This is a presentation layer adapter that:
- Renders board and hand snapshots to the terminal
- Forwards player commands to the GameManager
- Displays the events each command produced

The CLI can be replaced with any other UI (web, mobile, GUI) by driving
the same GameManager interface.

Usage:
    python cli.py [--seed N] [--numbers] [--verbose]
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from typing import TextIO

from menagerie.types import BOARD_SIZE, CardType, GamePhase, TileMode
from menagerie.cards import parse_card_type
from menagerie.config import GameConfig
from menagerie.controller import GameManager
from menagerie.events import (
    GameEvent,
    StageStartedEvent,
    StageEndedEvent,
    TurnStartedEvent,
    TurnEndedEvent,
    CardPlacedEvent,
    CardRemovedEvent,
    CardExpiredEvent,
    ScoreUpdatedEvent,
    GameStateChangedEvent,
    ActionInvalidEvent,
    DeckChangedEvent,
    ShopOffersRolledEvent,
    CardsSwappedEvent,
)

HELP_TEXT = """\
Commands:
  place <x> <y> <type>    - Place a card from your hand
  remove <x> <y>          - Take back a card placed this turn
  replace <x> <y> <type>  - Swap a card placed this turn for another
  preview <x> <y> <type>  - Show the score change of a placement
  info <x> <y>            - Explain the score of a tile
  end                     - End the turn
  shop                    - Visit the shop after clearing a stage
  swap <slot> <offer>     - Swap a deck slot for a shop offer
  leave                   - Leave the shop and start the next stage
  mode numbers|plain      - Switch the board mode
  restart                 - Start over from the first stage
  help                    - Show this help
  quit                    - Exit
"""


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration.

    Args:
        verbose: Enable verbose (DEBUG) logging
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


# =============================================================================
# Display Functions
# =============================================================================


def print_header(game: GameManager, output: TextIO = sys.stdout) -> None:
    """Print stage and turn header."""
    stage = game.get_current_stage()
    output.write("\n")
    output.write("=" * 60 + "\n")
    if stage is None:
        output.write("                    NO STAGE\n")
    else:
        output.write(
            f"   STAGE {stage.stage_id}   TURN {game.get_current_turn_number()} / {stage.end_turn}"
            f"   SCORE {game.get_cumulative_score()} / {stage.target_score}\n"
        )
    output.write("=" * 60 + "\n")


def print_board(game: GameManager, output: TextIO = sys.stdout) -> None:
    """Print the board, one row per line. Numbered mode shows tile counters."""
    numbered = game.get_tile_mode() == TileMode.WITH_NUMBERS
    board = game.get_board()

    output.write("\n      " + "".join(f"x={x:<12}" for x in range(BOARD_SIZE)) + "\n")
    for y in range(BOARD_SIZE):
        cells = []
        for x in range(BOARD_SIZE):
            tile = board[x][y]
            if tile.card_type is None:
                cell = "."
            else:
                cell = f"{game.cards.name_of(tile.card_type)}({tile.calculated_score})"
            if numbered:
                cell += f"[{tile.tile_number}]"
            cells.append(f"{cell:<14}")
        output.write(f"y={y}   " + "".join(cells).rstrip() + "\n")

    output.write(f"\nBoard score: {game.get_total_score()}\n")


def print_hand(game: GameManager, output: TextIO = sys.stdout) -> None:
    """Print the active cards. Types blocked by recent use are marked."""
    counts = Counter(game.get_active_cards())
    output.write("Hand: ")
    if not counts:
        output.write("(empty)\n")
        return

    entries = []
    for card_type in CardType:
        if card_type in counts:
            mark = "" if game.can_select(card_type) else " (used recently)"
            entries.append(f"{card_type.name.lower()} x{counts[card_type]}{mark}")
    output.write(", ".join(entries) + "\n")


def print_deck(game: GameManager, output: TextIO = sys.stdout) -> None:
    owned = game.get_owned_cards()
    output.write("Deck:\n")
    for i, (card_type, copies) in enumerate(owned):
        output.write(f"  [{i}] {card_type.name.lower()} x{copies}\n")


def print_shop(game: GameManager, output: TextIO = sys.stdout) -> None:
    output.write("\n" + "-" * 60 + "\n")
    output.write("                       SHOP\n")
    output.write("-" * 60 + "\n")
    print_deck(game, output)
    output.write("Offers:\n")
    offers = game.get_shop_offers()
    if not offers:
        output.write("  (none)\n")
    for i, card_type in enumerate(offers):
        output.write(f"  [{i}] {card_type.name.lower()}\n")


def print_breakdown(game: GameManager, x: int, y: int, output: TextIO = sys.stdout) -> None:
    breakdown = game.get_score_breakdown(x, y)
    if breakdown is None:
        output.write(f"No card at ({x}, {y}).\n")
        return

    output.write(f"{game.cards.name_of(breakdown.card_type)} at ({x}, {y}): base {breakdown.base_score}\n")
    for modifier in breakdown.modifiers:
        output.write(f"  {modifier.delta:+d}  {modifier.description} ({modifier.rationale})\n")
    output.write(f"  = {breakdown.final_score}\n")


def print_preview(game: GameManager, x: int, y: int, card_type: CardType, output: TextIO = sys.stdout) -> None:
    preview = game.get_board_preview(x, y, card_type)
    if preview is None:
        output.write(f"Cannot preview {card_type.name.lower()} at ({x}, {y}).\n")
        return

    output.write(f"{game.cards.name_of(card_type)} at ({x}, {y}): total {preview.total_score_change:+d}\n")
    for ty in range(BOARD_SIZE):
        row = " ".join(f"{preview.score_change(tx, ty):+3d}" for tx in range(BOARD_SIZE))
        output.write(f"  {row}\n")


def print_events(events: list[GameEvent], output: TextIO = sys.stdout) -> None:
    """Print the events produced by the last command."""
    for event in events:
        msg = _format_event(event)
        if msg:
            output.write(f"  > {msg}\n")


def _format_event(event: GameEvent) -> str:
    """Format a single event for display."""
    match event:
        case StageStartedEvent(stage_id=stage_id, end_turn=end_turn, target_score=target):
            return f"Stage {stage_id} started: reach {target} points in {end_turn} turns"

        case StageEndedEvent(stage_id=stage_id, cleared=cleared, cumulative_score=score, target_score=target):
            outcome = "cleared" if cleared else "failed"
            return f"Stage {stage_id} {outcome} with {score} / {target} points"

        case TurnStartedEvent(turn_number=turn):
            return f"Turn {turn} started"

        case TurnEndedEvent(turn_number=turn, turn_score=score, cumulative_score=total):
            return f"Turn {turn} ended: {score} points ({total} total)"

        case CardPlacedEvent(card_type=card_type, x=x, y=y):
            return f"{card_type.name.title()} placed at ({x}, {y})"

        case CardRemovedEvent(card_type=card_type, x=x, y=y):
            return f"{card_type.name.title()} taken back from ({x}, {y})"

        case CardExpiredEvent(card_type=card_type, x=x, y=y):
            return f"{card_type.name.title()} at ({x}, {y}) expired"

        case ScoreUpdatedEvent():
            return ""

        case GameStateChangedEvent(phase=phase):
            match phase:
                case GamePhase.VICTORY:
                    return "Stage clear!"
                case GamePhase.GAME_OVER:
                    return "GAME OVER"
                case GamePhase.SHOP:
                    return "Welcome to the shop"
                case _:
                    return ""

        case ActionInvalidEvent(action=action, reason=reason):
            return f"Cannot {action.replace('_', ' ')}: {reason}"

        case DeckChangedEvent(owned_types=owned):
            return "Deck: " + ", ".join(t.name.lower() for t in owned)

        case ShopOffersRolledEvent(offers=offers):
            return "Offers: " + (", ".join(t.name.lower() for t in offers) or "none")

        case CardsSwappedEvent(out_type=out_type, in_type=in_type):
            return f"Swapped {out_type.name.lower()} for {in_type.name.lower()}"

        case _:
            return ""


# =============================================================================
# Input Functions
# =============================================================================


def _parse_coords(parts: list[str]) -> tuple[int, int]:
    return int(parts[0]), int(parts[1])


def handle_command(game: GameManager, line: str, output: TextIO = sys.stdout) -> bool:
    """
    Execute one command line.

    Returns False when the player asked to quit.
    """
    parts = line.strip().lower().split()
    if not parts:
        return True

    command, args = parts[0], parts[1:]
    try:
        match command, len(args):
            case "place", 3:
                x, y = _parse_coords(args)
                game.place_block(x, y, parse_card_type(args[2]))
            case "remove", 2:
                x, y = _parse_coords(args)
                game.remove_block(x, y)
            case "replace", 3:
                x, y = _parse_coords(args)
                game.replace_block(x, y, parse_card_type(args[2]))
            case "preview", 3:
                x, y = _parse_coords(args)
                print_preview(game, x, y, parse_card_type(args[2]), output)
            case "info", 2:
                x, y = _parse_coords(args)
                print_breakdown(game, x, y, output)
            case "end", 0:
                game.end_turn()
            case "shop", 0:
                game.open_shop()
            case "swap", 2:
                game.shop_swap_at(int(args[0]), int(args[1]))
            case "leave", 0:
                game.exit_shop()
            case "mode", 1 if args[0] in ("numbers", "plain"):
                game.set_tile_mode(args[0] == "numbers")
            case "restart", 0:
                game.restart()
            case "help", 0:
                output.write(HELP_TEXT)
            case "quit", 0:
                return False
            case _:
                output.write("Unknown command. Type 'help' for a list.\n")
    except ValueError:
        output.write("Coordinates and slots must be numbers.\n")
    except KeyError:
        output.write("Unknown card type. Types: " + ", ".join(t.name.lower() for t in CardType) + "\n")

    return True


def print_state(game: GameManager, output: TextIO = sys.stdout) -> None:
    match game.get_phase():
        case GamePhase.PLAYING:
            print_header(game, output)
            print_board(game, output)
            print_hand(game, output)
        case GamePhase.SHOP:
            print_shop(game, output)
        case GamePhase.VICTORY:
            if game.is_game_complete():
                output.write("\n*** ALL STAGES CLEARED! ***\n")
            else:
                output.write("\nType 'shop' to visit the shop before the next stage.\n")
        case GamePhase.GAME_OVER:
            output.write("\nType 'restart' to try again or 'quit' to exit.\n")
        case _:
            pass


# =============================================================================
# Game Loop
# =============================================================================


def run_game(
    input_stream: TextIO = sys.stdin,
    output: TextIO = sys.stdout,
    seed: int | None = None,
    use_numbers: bool = False,
) -> GameManager:
    """
    Run a game in the terminal until the player quits or clears every stage.

    Args:
        input_stream: Source for player input (default: stdin)
        output: Destination for game output (default: stdout)
        seed: Seed for the session's random draws
        use_numbers: Start in numbered mode

    Returns:
        The GameManager, for inspection by callers
    """
    game = GameManager(GameConfig(use_numbers_mode=use_numbers), seed=seed)
    pending: list[GameEvent] = []
    game.subscribe(pending.append)

    game.start_game()
    while True:
        print_events(pending, output)
        pending.clear()
        if game.is_game_complete():
            print_state(game, output)
            break
        print_state(game, output)

        output.write("> ")
        output.flush()
        try:
            line = input_stream.readline()
        except KeyboardInterrupt:
            output.write("\nGame interrupted.\n")
            break
        if not line:
            break
        if not handle_command(game, line, output):
            break

    return game


def main() -> int:
    """Entry point for CLI."""
    parser = argparse.ArgumentParser(
        description='Place creatures on a 3x3 grid and reach each stage target',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible draws'
    )
    parser.add_argument(
        '--numbers',
        action='store_true',
        help='Play in numbered mode (cards stay until their tile counter runs out)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )
    args = parser.parse_args()

    setup_logging(args.verbose)

    print("=" * 60)
    print("              MENAGERIE GRID")
    print("=" * 60)
    print()
    print(HELP_TEXT)

    run_game(seed=args.seed, use_numbers=args.numbers)
    return 0


if __name__ == "__main__":
    sys.exit(main())
