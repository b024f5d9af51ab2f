import logging
from typing import TYPE_CHECKING, NamedTuple

from basics.connection import Connection, ConnectionType
from basics.identity_set import Identity
from conventions.h_group.connecting_cards import find_connecting
from conventions.h_group.h_constants import CLUE_INTERP, MAX_CONNECTION_DEPTH
from conventions.h_group.hanabi_logic import save2
from utils import Action, ClueType, log_card, log_identities
from variants import card_touched

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


class FocusPossibility(NamedTuple):
    identity: Identity
    connections: list[Connection]
    interp: CLUE_INTERP

    @property
    def save(self) -> bool:
        return self.interp == CLUE_INTERP.SAVE


class _Chain:
    """Connections found so far on the way up one suit."""

    def __init__(self, game: "Game", focus: int, suit_index: int) -> None:
        self.stacks = list(game.state.play_stacks)
        self.connections: list[Connection] = []
        self.connected = [focus]
        self.next_rank = self.stacks[suit_index] + 1
        self.suit_index = suit_index
        self.layers = 0

    def extend(self, found: list[Connection]) -> bool:
        """Add connections, returning False if they only delayed this rank."""
        for conn in found:
            self.connections.append(conn)
            self.connected.append(conn.order)
            if conn.hidden:
                played = conn.identities[0]
                self.stacks[played.suit_index] = played.rank

        if found[-1].hidden:
            self.layers += 1
            return False

        if not found[-1].bluff:
            self.stacks[self.suit_index] = self.next_rank
        self.next_rank += 1
        return True


def _next_connection(game: "Game", action: Action, chain: _Chain, focus: int, bluffable: bool) -> list[Connection]:
    if chain.layers > MAX_CONNECTION_DEPTH:
        return []

    identity = Identity(chain.suit_index, chain.next_rank)
    found = find_connecting(game, action, identity, chain.stacks, True, chain.connected, bluffable=bluffable)
    if not found or found[0].type == ConnectionType.TERMINATE:
        return []

    focus_card = game.common.thoughts[focus]
    first = found[0]
    if (
        first.type == ConnectionType.KNOWN
        and game.common.thoughts[first.order].newly_clued
        and len(game.common.thoughts[first.order].possible) > 1
        and focus_card.inferred.has(identity)
    ):
        # the focus could be this card itself
        logger.warning("blocked connection, focused card could be %s", log_card(identity, game.state.variant))
        return []
    return found


def find_colour_focus(game: "Game", action: Action, focus: int, suit_index: int, chop: bool) -> list[FocusPossibility]:
    state = game.state
    possibilities = []
    chain = _Chain(game, focus, suit_index)

    while chain.next_rank <= state.max_ranks[suit_index]:
        found = _next_connection(game, action, chain, focus, bluffable=not chain.connections)
        if not found:
            break

        if any(c.type == ConnectionType.FINESSE and not c.hidden for c in found):
            # even if a finesse is possible, the focus might be this rank directly
            possibilities.append(
                FocusPossibility(Identity(suit_index, chain.next_rank), list(chain.connections), CLUE_INTERP.PLAY)
            )

        if chain.extend(found) and found[-1].bluff:
            break

    if chain.next_rank <= state.max_ranks[suit_index]:
        possibilities.append(
            FocusPossibility(Identity(suit_index, chain.next_rank), list(chain.connections), CLUE_INTERP.PLAY)
        )

    if chop:
        # 5s are saved with rank
        for rank in range(chain.next_rank + 1, 5):
            identity = Identity(suit_index, rank)
            if state.is_critical(identity):
                possibilities.append(FocusPossibility(identity, [], CLUE_INTERP.SAVE))

    return possibilities


def find_rank_focus(game: "Game", action: Action, focus: int, rank: int, chop: bool) -> list[FocusPossibility]:
    state = game.state
    possibilities = []

    for suit_index in range(state.variant.num_suits):
        identity = Identity(suit_index, rank)
        if not card_touched(identity, state.variant, action.clue):
            continue

        chain = _Chain(game, focus, suit_index)
        if rank < chain.next_rank or rank > state.max_ranks[suit_index]:
            continue

        while chain.next_rank < rank:
            bluffable = not chain.connections and chain.next_rank + 1 == rank
            found = _next_connection(game, action, chain, focus, bluffable)
            if not found:
                break
            chain.extend(found)

        if chain.next_rank == rank:
            possibilities.append(FocusPossibility(identity, list(chain.connections), CLUE_INTERP.PLAY))

        if chop and not state.is_playable(identity):
            if state.is_critical(identity) or save2(state, game.common, identity, focus, action.giver):
                possibilities.append(FocusPossibility(identity, [], CLUE_INTERP.SAVE))

    return possibilities


def find_focus_possible(game: "Game", action: Action, focus: int, chop: bool) -> list[FocusPossibility]:
    """
    Every identity the focused card could be under the convention, with the
    connections each would need. A save of an identity overrides a play of it.
    """
    state = game.state
    clue = action.clue
    logger.info("play/hypo/max stacks in clue interpretation: %s %s %s", state.play_stacks, game.common.hypo_stacks, state.max_ranks)

    if clue.type == ClueType.COLOUR:
        possibilities = []
        for suit_index in range(state.variant.num_suits):
            if any(
                card_touched(Identity(suit_index, rank), state.variant, clue)
                for rank in range(1, state.max_ranks[suit_index] + 1)
            ):
                possibilities += find_colour_focus(game, action, focus, suit_index, chop)
    else:
        possibilities = find_rank_focus(game, action, focus, clue.value, chop)

    possible = game.common.thoughts[focus].possible
    possibilities = [
        fp for fp in possibilities if possible.has(fp.identity)
    ]
    deduped = [
        fp
        for i, fp in enumerate(possibilities)
        if not any(other.identity == fp.identity for other in possibilities[i + 1 :])
    ]
    logger.info("focus possible: %s", log_identities([fp.identity for fp in deduped], state.variant))
    return deduped
