"""
Replay a finished game from a hanab.live JSON export through one seat's eyes,
then scrub to any turn to see what that seat believed.

    python replay.py game.json --seat Bob --turn 12 -i
"""
import argparse
import json
import logging
import sys

from fuzzywuzzy import process

from basics.identity_set import Identity
from conventions import CONVENTIONS
from game import Game
from hanabi import Table
from utils import NullStream, PerformAction, log_hand
from variants import find_variant

logger = logging.getLogger(__name__)

COMMANDS = ["navigate", "hand", "notes", "quit"]

# hanab.live action type for the end of a game
GAME_OVER_TYPE = 4


def load_replay(path: str) -> dict:
    with open(path) as file:
        data = json.load(file)
    for key in ("players", "deck", "actions"):
        if key not in data:
            raise ValueError(f"replay is missing '{key}'")
    return data


def replay_game(data: dict, seat: int, convention: str = "HGroup", level: int | None = None) -> Game:
    """Every action of the export replayed for all seats. Returns `seat`'s game."""
    players = data["players"]
    variant = find_variant(data.get("options", {}).get("variant", "No Variant"))
    deck = [Identity(card["suitIndex"], card["rank"]) for card in data["deck"]]

    table = Table(convention, len(players), variant, level, log=NullStream(), deck=deck, player_names=players)
    for entry in data["actions"]:
        if entry["type"] == GAME_OVER_TYPE or table.done():
            break
        perform = PerformAction(PerformAction.ActionType(entry["type"]), entry["target"], entry.get("value"))
        table.perform(perform)

    logger.info("replayed %d turns, score %d", table.turn, table.score())
    return table.games[seat]


def match_player(game: Game, name: str) -> int:
    names = game.state.player_names
    match = process.extractOne(name, names)
    if match is None:
        raise ValueError(f"no player matching {name!r}")
    return names.index(match[0])


def print_hand(game: Game, player_index: int, out=sys.stdout) -> None:
    state = game.state
    print(f"{state.player_names[player_index]}'s hand (turn {state.turn_count}):", file=out)
    for line in log_hand(state, game.me.thoughts, player_index):
        print(f"  {line}", file=out)


def print_notes(game: Game, out=sys.stdout) -> None:
    game.update_notes()
    if not game.notes:
        print("no notes", file=out)
    for order, note in sorted(game.notes.items()):
        print(f"  {order}: {note.full}", file=out)


def console(game: Game, current: Game, stdin=sys.stdin, out=sys.stdout) -> None:
    """
    A prompt over the replayed game. `game` holds the whole history and
    `current` is the turn being looked at.
    """
    for line in stdin:
        parts = line.split()
        if not parts:
            continue

        found = process.extractOne(parts[0], COMMANDS)
        if found is None or found[1] < 50:
            print(f"unknown command {parts[0]!r}, try one of {', '.join(COMMANDS)}", file=out)
            continue

        match found[0]:
            case "navigate":
                if len(parts) < 2 or not parts[1].isdigit():
                    print("usage: navigate <turn>", file=out)
                    continue
                current = game.navigate(int(parts[1]))
                print_hand(current, current.state.our_player_index, out)
            case "hand":
                player_index = current.state.our_player_index
                if len(parts) > 1:
                    player_index = match_player(current, " ".join(parts[1:]))
                print_hand(current, player_index, out)
            case "notes":
                print_notes(current, out)
            case "quit":
                return


def parse_args(argv):
    parser = argparse.ArgumentParser(description="Replay a hanab.live game export.")
    parser.add_argument("file")
    parser.add_argument("--seat", default=None, help="player to replay as (default: the first)")
    parser.add_argument("--turn", type=int, default=None)
    parser.add_argument("--convention", choices=sorted(CONVENTIONS), default="HGroup")
    parser.add_argument("--level", type=int, default=None)
    parser.add_argument("-i", "--interactive", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    data = load_replay(args.file)
    seat = 0
    if args.seat is not None:
        seat = data["players"].index(process.extractOne(args.seat, data["players"])[0])

    game = replay_game(data, seat, args.convention, args.level)
    current = game if args.turn is None else game.navigate(args.turn)
    print_hand(current, seat)

    if args.interactive:
        console(game, current)


if __name__ == "__main__":
    main(sys.argv[1:])
