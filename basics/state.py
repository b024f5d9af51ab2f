import copy
from typing import Final

from basics.card import ActualCard
from basics.hand import Hand
from basics.identity_set import Identity
from utils import HAND_SIZE, MAX_CLUE_TOKENS, Action
from variants import MAX_RANK, Variant, card_count


class State:
    """
    The table as one seat sees it: stacks, discards, hands of card orders and
    the deck of physical cards indexed by order.
    """

    player_names: list[str]
    hands: list[Hand]
    deck: list[ActualCard]
    action_list: list[Action]

    def __init__(self, player_names: list[str], our_player_index: int, variant: Variant) -> None:
        self.player_names = list(player_names)
        self.num_players: Final[int] = len(player_names)
        self.our_player_index = our_player_index
        self.variant = variant

        self.turn_count = 1
        self.clue_tokens = MAX_CLUE_TOKENS
        self.strikes = 0
        self.early_game = True
        self.endgame_turns = -1

        self.hands = [Hand() for _ in range(self.num_players)]
        self.deck = []
        self.play_stacks = [0] * variant.num_suits
        self.discard_stacks = [[0] * MAX_RANK for _ in range(variant.num_suits)]
        self.max_ranks = [MAX_RANK] * variant.num_suits

        self.action_list = []
        self.current_player_index = 0
        self.cards_left = sum(
            card_count(variant, Identity(s, r))
            for s in range(variant.num_suits)
            for r in range(1, MAX_RANK + 1)
        )
        self.card_order = 0

    @property
    def hand_size(self) -> int:
        return HAND_SIZE[self.num_players]

    @property
    def our_hand(self) -> Hand:
        return self.hands[self.our_player_index]

    def base_count(self, identity) -> int:
        """Copies of the identity already played or discarded."""
        s, r = identity.suit_index, identity.rank
        played = 1 if self.play_stacks[s] >= r else 0
        return played + self.discard_stacks[s][r - 1]

    def is_basic_trash(self, identity) -> bool:
        s, r = identity.suit_index, identity.rank
        return r <= self.play_stacks[s] or r > self.max_ranks[s]

    def is_critical(self, identity) -> bool:
        if self.is_basic_trash(identity):
            return False
        s, r = identity.suit_index, identity.rank
        return self.discard_stacks[s][r - 1] == card_count(self.variant, identity) - 1

    def is_playable(self, identity) -> bool:
        s, r = identity.suit_index, identity.rank
        return r == self.play_stacks[s] + 1 and r <= self.max_ranks[s]

    def playable_away(self, identity) -> int:
        return identity.rank - (self.play_stacks[identity.suit_index] + 1)

    def remaining_copies(self, identity) -> int:
        return card_count(self.variant, identity) - self.base_count(identity)

    def score(self) -> int:
        return sum(self.play_stacks)

    def max_score(self) -> int:
        return sum(self.max_ranks)

    @property
    def pace(self) -> int:
        return self.score() + self.cards_left + self.num_players - self.max_score()

    @property
    def ended(self) -> bool:
        return (
            self.strikes >= 3
            or self.score() == self.max_score()
            or self.endgame_turns == 0
        )

    def holder_of(self, order: int) -> int | None:
        for i, hand in enumerate(self.hands):
            if order in hand:
                return i
        return None

    def next_player_index(self, player_index: int) -> int:
        return (player_index + 1) % self.num_players

    def last_player_index(self, player_index: int) -> int:
        return (player_index + self.num_players - 1) % self.num_players

    def create_blank(self) -> "State":
        return State(self.player_names, self.our_player_index, self.variant)

    def minimal_copy(self) -> "State":
        """
        A copy that can be mutated freely. Cards in the deck are frozen, so they
        are shared rather than copied.
        """
        new = copy.copy(self)
        new.hands = [hand.clone() for hand in self.hands]
        new.deck = list(self.deck)
        new.play_stacks = list(self.play_stacks)
        new.discard_stacks = [list(stack) for stack in self.discard_stacks]
        new.max_ranks = list(self.max_ranks)
        new.action_list = list(self.action_list)
        return new
