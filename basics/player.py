import contextlib
import copy
import logging
from typing import TYPE_CHECKING, Callable

from basics.card import Card
from basics.connection import Link, WaitingConnection
from basics.identity_set import Identity, IdentitySet
from basics.player_elim import PlayerElim
from state_proxy import DraftScope, produce
from utils import log_card

if TYPE_CHECKING:
    from basics.state import State

logger = logging.getLogger(__name__)

COMMON_INDEX = -1


class Player(PlayerElim):
    """
    One observer's beliefs about every card, keyed by card order. The common
    player (index -1) holds what everyone at the table knows.
    """

    def __init__(self, player_index: int, num_suits: int, num_players: int) -> None:
        self.player_index = player_index
        self.num_players = num_players

        self.thoughts: list[Card] = []
        self.all_possible = IdentitySet(num_suits)
        self.all_inferred = IdentitySet(num_suits)

        self.hypo_stacks: list[int] = [0] * num_suits
        self.hypo_plays: set[int] = set()
        self.unknown_plays: set[int] = set()

        self.links: list[Link] = []
        self.play_links: list[Link] = []
        self.waiting_connections: list[WaitingConnection] = []
        self.elims: dict[Identity, set[int]] = {}

    @property
    def is_common(self) -> bool:
        return self.player_index == COMMON_INDEX

    def name(self, state: "State") -> str:
        return "common" if self.is_common else state.player_names[self.player_index]

    def clone(self) -> "Player":
        """
        A copy whose beliefs can diverge from this one. Cards are frozen and
        shared, everything that is edited in place is copied.
        """
        new = copy.copy(self)
        new.thoughts = list(self.thoughts)
        new.hypo_stacks = list(self.hypo_stacks)
        new.hypo_plays = set(self.hypo_plays)
        new.unknown_plays = set(self.unknown_plays)
        new.links = copy.deepcopy(self.links)
        new.play_links = copy.deepcopy(self.play_links)
        new.waiting_connections = copy.deepcopy(self.waiting_connections)
        new.elims = {k: set(v) for k, v in self.elims.items()}
        return new

    def id_of(self, card: Card, infer: bool = False) -> Identity | None:
        """
        The identity this player can attribute to a card. The common player
        only counts what everyone can deduce, not what we happen to see.
        """
        return card.identity(infer=infer, symmetric=self.is_common)

    def update_thoughts(self, order: int, recipe: Callable) -> Card:
        self.thoughts[order] = produce(self.thoughts[order], recipe)
        return self.thoughts[order]

    @contextlib.contextmanager
    def edit(self, order: int):
        """
        Edit one card's belief record through a draft:

            with player.edit(order) as card:
                card.finessed = True
        """
        scope = DraftScope(self.thoughts[order])
        with scope as draft:
            yield draft
        self.thoughts[order] = scope.result

    def linked_orders(self, state: "State") -> set[int]:
        """Orders in an unresolved link."""
        orders = set()
        for link in self.links:
            if len(link.orders) > len(link.identities) or link.promised:
                orders.update(o for o in link.orders if state.holder_of(o) is not None)
        return orders

    def _doubted(self, order: int) -> bool:
        return any(
            wc.symmetric and wc.involves(order) for wc in self.waiting_connections
        )

    def thinks_playables(self, state: "State", player_index: int) -> list[int]:
        """
        Cards in a hand that this player believes are playable right now: every
        inference is one above its stack.
        """
        linked = self.linked_orders(state)
        playables = []

        for order in state.hands[player_index]:
            card = self.thoughts[order]
            if self._doubted(order):
                continue

            identity = self.id_of(card, infer=True)
            if identity is not None:
                if state.is_playable(identity) and (order not in linked or len(card.possible) == 1):
                    playables.append(order)
                continue

            if order in linked:
                continue

            possibilities = card.possibilities
            if len(possibilities) > 0 and possibilities.every(state.is_playable):
                playables.append(order)

        return playables

    def _duplicated(self, state: "State", identity: Identity, order: int, hand_index: int) -> bool:
        for i, hand in enumerate(state.hands):
            for other in hand:
                if other == order:
                    continue
                card = self.thoughts[other]
                if not card.touched or not card.matches(identity, infer=True, symmetric=self.is_common):
                    continue
                if i != hand_index or other > order:
                    return True
        return False

    def thinks_trash(self, state: "State", player_index: int) -> list[int]:
        """
        Cards whose every possibility is basic trash or a duplicate of a touched
        card elsewhere.
        """
        trash = []
        for order in state.hands[player_index]:
            card = self.thoughts[order]
            if card.trash:
                trash.append(order)
                continue

            identity = self.id_of(card, infer=True)
            possibilities = [identity] if identity is not None else card.possibilities.array
            if all(
                state.is_basic_trash(i) or self._duplicated(state, i, order, player_index)
                for i in possibilities
            ):
                trash.append(order)
        return trash

    def thinks_loaded(self, state: "State", player_index: int) -> bool:
        return bool(self.thinks_playables(state, player_index)) or bool(
            self.thinks_trash(state, player_index)
        )

    def thinks_locked(self, state: "State", player_index: int) -> bool:
        hand = state.hands[player_index]
        return (
            len(hand) > 0
            and all(self.thoughts[o].saved for o in hand)
            and not self.thinks_loaded(state, player_index)
        )

    def locked_discard(self, state: "State", player_index: int) -> int:
        """
        The card to discard from a locked hand: the least likely to be critical,
        then the highest rank, then the oldest.
        """
        hand = state.hands[player_index]

        def crit_percent(order):
            possibilities = self.thoughts[order].possibilities
            if len(possibilities) == 0:
                return 0
            return sum(1 for i in possibilities if state.is_critical(i)) / len(possibilities)

        def average_rank(order):
            possibilities = self.thoughts[order].possibilities
            if len(possibilities) == 0:
                return 0
            return sum(i.rank for i in possibilities) / len(possibilities)

        ranked = sorted(
            range(len(hand)),
            key=lambda i: (crit_percent(hand[i]), -average_rank(hand[i]), -i),
        )
        return hand[ranked[0]]

    def update_hypo_stacks(self, state: "State") -> None:
        """
        Advance speculative stacks as far as the cards this player believes
        playable would take them, repeating until a pass finds nothing new.
        """
        hypo_stacks = list(state.play_stacks)
        unknown_plays: set[int] = set()
        already_played: set[int] = set()
        played_ids = IdentitySet.empty(state.variant.num_suits)
        linked = self.linked_orders(state)

        def delayed_playable(identities) -> bool:
            return len(identities) > 0 and all(
                hypo_stacks[i.suit_index] + 1 == i.rank and i.rank <= state.max_ranks[i.suit_index]
                for i in identities
            )

        found = True
        while found:
            found = False
            for hand in state.hands:
                for order in hand:
                    if order in already_played:
                        continue

                    card = self.thoughts[order]
                    if not card.touched or self._doubted(order):
                        continue

                    identity = self.id_of(card, infer=True)

                    if identity is None:
                        if order in linked:
                            continue
                        possibilities = card.possibilities.subtract(played_ids)
                        if not delayed_playable(possibilities):
                            continue

                        already_played.add(order)
                        unknown_plays.add(order)
                        found = True
                        if len(possibilities) == 1:
                            only = possibilities.array[0]
                            hypo_stacks[only.suit_index] = only.rank
                            played_ids = played_ids.union(only)
                        continue

                    actual = state.deck[order].identity()
                    if self.is_common and actual is not None and not actual.matches(identity):
                        logger.debug(
                            "not advancing hypo stacks on card %d, thought %s but is %s",
                            order,
                            log_card(identity, state.variant),
                            log_card(actual, state.variant),
                        )
                        continue

                    if not delayed_playable([identity]) or played_ids.has(identity):
                        continue

                    hypo_stacks[identity.suit_index] = identity.rank
                    played_ids = played_ids.union(identity)
                    already_played.add(order)
                    if len(card.possible) != 1:
                        unknown_plays.add(order)
                    found = True

        self.hypo_stacks = hypo_stacks
        self.hypo_plays = already_played
        self.unknown_plays = unknown_plays
