"""
Self-play: seat one bot per player at a table with a shuffled deck and let
them play out whole games.

    python hanabi.py --convention HGroup --players 3 --games 100 --out results.csv
"""
import argparse
import logging
import random
import sys
import time
from typing import Any

import numpy
import pandas as pd

from basics.identity_set import Identity
from conventions import CONVENTIONS
from conventions.base import Convention
from game import Game
from utils import (
    HAND_SIZE,
    MAX_CLUE_TOKENS,
    MAX_STRIKES,
    Action,
    NullStream,
    PerformAction,
    log_card,
    log_perform_action,
)
from variants import MAX_RANK, Variant, all_identities, card_count, card_touched, find_variant

logger = logging.getLogger(__name__)

names = ["Alice", "Bob", "Cathy", "Donald", "Emily", "Frank"]


class IllegalAction(ValueError):
    pass


def make_deck(variant: Variant) -> list[Identity]:
    return [identity for identity in all_identities(variant) for _ in range(card_count(variant, identity))]


def make_convention(name: str, level: int | None = None) -> Convention:
    convention_type = CONVENTIONS[name]
    return convention_type() if level is None else convention_type(level)


class Table:
    """
    The authoritative game. Every seat has its own Game that is told about
    each action the way that seat would see it: its own draws arrive hidden.
    """

    def __init__(
        self,
        convention: str,
        num_players: int,
        variant: Variant,
        level: int | None = None,
        seed: int | None = None,
        log=sys.stdout,
        deck: list[Identity] | None = None,
        player_names: list[str] | None = None,
    ):
        """A fixed `deck` (in draw order) replaces the shuffled one."""
        assert 2 <= num_players < len(HAND_SIZE)
        self.variant = variant
        self.num_players = num_players
        self.player_names = list(player_names) if player_names is not None else names[:num_players]
        self.log = log

        if deck is None:
            deck = make_deck(variant)
            random.Random(seed).shuffle(deck)
        self.deck = list(deck)
        self.next_order = 0

        self.hands: list[list[int]] = [[] for _ in range(num_players)]
        self.play_stacks = [0] * variant.num_suits
        self.discards: list[Identity] = []
        self.clue_tokens = MAX_CLUE_TOKENS
        self.strikes = 0
        self.turn = 0
        self.current_player = 0
        self.endgame_turns = -1

        self.games = [
            Game(self.player_names, i, variant, make_convention(convention, level), log=NullStream())
            for i in range(num_players)
        ]

        for pnr in range(num_players):
            for _ in range(HAND_SIZE[num_players]):
                self.draw_card(pnr)

    @property
    def cards_left(self) -> int:
        return len(self.deck) - self.next_order

    def broadcast(self, action: Action, hidden_from: int | None = None) -> None:
        for i, game in enumerate(self.games):
            if i == hidden_from:
                observed = Action.draw(action.player_index, action.order)
            else:
                observed = action
            game.handle_action(observed, catchup=True)

    def draw_card(self, pnr: int) -> None:
        if self.cards_left == 0:
            return
        order = self.next_order
        identity = self.deck[order]
        self.next_order += 1
        self.hands[pnr].insert(0, order)
        self.broadcast(Action.draw(pnr, order, identity.suit_index, identity.rank), hidden_from=pnr)

        if self.cards_left == 0:
            self.endgame_turns = self.num_players + 1

    def to_action(self, perform: PerformAction) -> Action:
        """
        The game action a bot's request turns into.

        Raises IllegalAction if the request breaks the rules.
        """
        pnr = self.current_player
        hand = self.hands[pnr]

        if perform.type in (PerformAction.ActionType.PLAY, PerformAction.ActionType.DISCARD):
            if perform.target not in hand:
                raise IllegalAction(f"{self.player_names[pnr]} doesn't hold card {perform.target}")
            identity = self.deck[perform.target]

            if perform.type == PerformAction.ActionType.DISCARD:
                if self.clue_tokens == MAX_CLUE_TOKENS:
                    raise IllegalAction("cannot discard at max clue tokens")
                return Action.discard(pnr, perform.target, identity.suit_index, identity.rank)

            if identity.rank == self.play_stacks[identity.suit_index] + 1:
                return Action.play(pnr, perform.target, identity.suit_index, identity.rank)
            return Action.discard(pnr, perform.target, identity.suit_index, identity.rank, failed=True)

        if self.clue_tokens == 0:
            raise IllegalAction("no clue tokens left")
        if perform.target == pnr or not 0 <= perform.target < self.num_players:
            raise IllegalAction(f"cannot clue player {perform.target}")

        clue = perform.to_clue()
        touched = [o for o in self.hands[perform.target] if card_touched(self.deck[o], self.variant, clue)]
        if not touched:
            raise IllegalAction(f"clue {clue} touches no cards")
        return Action.make_clue(pnr, perform.target, touched, clue)

    def perform(self, perform: PerformAction) -> None:
        pnr = self.current_player
        state = self.games[pnr].state
        print(f"{self.player_names[pnr]}: {log_perform_action(perform, state)}", file=self.log)

        action = self.to_action(perform)
        self.broadcast(action)

        match action.action_type:
            case Action.ActionType.CLUE:
                self.clue_tokens -= 1

            case Action.ActionType.PLAY:
                self.hands[pnr].remove(action.order)
                self.play_stacks[action.suit_index] = action.rank
                if action.rank == MAX_RANK and self.clue_tokens < MAX_CLUE_TOKENS:
                    self.clue_tokens += 1
                self.draw_card(pnr)

            case Action.ActionType.DISCARD:
                self.hands[pnr].remove(action.order)
                self.discards.append(Identity(action.suit_index, action.rank))
                if action.failed:
                    self.strikes += 1
                    print(f"and fails. Board was {self.format_board()}", file=self.log)
                elif self.clue_tokens < MAX_CLUE_TOKENS:
                    self.clue_tokens += 1
                self.draw_card(pnr)

        self.turn += 1
        self.current_player = (pnr + 1) % self.num_players
        if self.endgame_turns > 0:
            self.endgame_turns -= 1
        self.broadcast(Action.turn(self.turn, self.current_player))

    def format_board(self) -> str:
        return " ".join(log_card(Identity(s, r), self.variant) for s, r in enumerate(self.play_stacks) if r > 0)

    def score(self) -> int:
        return sum(self.play_stacks)

    def done(self) -> bool:
        return (
            self.strikes == MAX_STRIKES
            or self.score() == self.variant.num_suits * MAX_RANK
            or self.endgame_turns == 0
        )

    def run(self) -> int:
        while not self.done():
            perform = self.games[self.current_player].take_action()
            self.perform(perform)

        self.broadcast(Action.game_over())
        print(f"Game done, strikes: {self.strikes}", file=self.log)
        print(f"Points: {self.score()}", file=self.log)
        return self.score()


def parse_args(argv):
    parser = argparse.ArgumentParser(description="Self-play Hanabi bots.")
    parser.add_argument("--convention", choices=sorted(CONVENTIONS), default="HGroup")
    parser.add_argument("--players", type=int, default=3)
    parser.add_argument("--games", type=int, default=10)
    parser.add_argument("--seed", type=int, default=1)
    parser.add_argument("--variant", default="No Variant")
    parser.add_argument("--level", type=int, default=None)
    parser.add_argument("--out", default=None, help="write per-game results to this CSV file")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    variant = find_variant(args.variant)

    out: Any = NullStream()
    if args.verbose or args.games < 3:
        out = sys.stdout

    results = []
    for i in range(args.games):
        seed = args.seed + i
        if (i + 1) % 100 == 0:
            print("Starting game", i + 1)

        t0 = time.time()
        table = Table(args.convention, args.players, variant, args.level, seed=seed, log=out)
        try:
            table.run()
            error = ""
        except Exception as err:
            logger.exception("game %d (seed %d) crashed", i + 1, seed)
            error = repr(err)

        results.append(
            {
                "game": i + 1,
                "seed": seed,
                "score": table.score(),
                "strikes": table.strikes,
                "turns": table.turn,
                "seconds": time.time() - t0,
                "error": error,
            }
        )

    pts = [r["score"] for r in results]
    if len(pts) < 10:
        print(pts)
    print("average:", numpy.mean(pts))
    if len(pts) > 1:
        print("stddev:", numpy.std(pts, ddof=1))
    print("range", min(pts), max(pts))

    if args.out is not None:
        pd.DataFrame(results).to_csv(args.out, index=False)
    return results


if __name__ == "__main__":
    main(sys.argv[1:])
