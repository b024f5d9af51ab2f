import logging
from typing import TYPE_CHECKING

from basics.connection import Connection, ConnectionType
from basics.identity_set import Identity
from conventions.h_group.connecting_cards import find_connecting, stack_playable
from conventions.h_group.h_constants import LEVEL, MAX_CONNECTION_DEPTH
from conventions.h_group.hanabi_logic import find_finesse, find_prompt
from utils import Action, ClueType, log_card

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


class IllegalInterpretation(ValueError):
    """A focus possibility that cannot be connected."""


def find_own_finesses(
    game: "Game", action: Action, focus: int, identity: Identity, looks_direct: bool
) -> list[Connection]:
    """
    Connect `identity` from the current stacks, using our own hand for whatever
    nobody else can provide.

    Raises IllegalInterpretation if some rank in between cannot be found.
    """
    state = game.state
    giver, target = action.giver, action.target
    variant = state.variant

    if giver == state.our_player_index:
        raise IllegalInterpretation("cannot finesse ourselves")

    suit_index = identity.suit_index
    stacks = list(state.play_stacks)
    connections: list[Connection] = []
    connected = [focus]
    direct = looks_direct
    hidden = 0

    next_rank = stacks[suit_index] + 1
    while next_rank < identity.rank:
        next_identity = Identity(suit_index, next_rank)
        bluffable = not connections and next_rank + 1 == identity.rank

        found = find_connecting(game, action, next_identity, stacks, direct, connected, bluffable=bluffable)
        if found and found[0].type == ConnectionType.TERMINATE:
            raise IllegalInterpretation(
                f"{state.player_names[found[0].reacting]} would misplay a prompt for {log_card(next_identity, variant)}"
            )
        if not found:
            found = own_connection(game, action, next_identity, stacks, direct, connected)
        if not found:
            raise IllegalInterpretation(f"no connecting cards found for {log_card(next_identity, variant)}")

        for conn in found:
            connections.append(conn)
            connected.append(conn.order)

            if conn.hidden:
                played = conn.identities[0]
                stacks[played.suit_index] = played.rank
            elif (
                conn.type == ConnectionType.FINESSE
                and not conn.bluff
                and conn.reacting != target
                and action.clue.type != ClueType.COLOUR
            ):
                # someone else playing into a finesse shows the clue was not direct
                direct = False

        if found[-1].hidden:
            hidden += 1
            if hidden > MAX_CONNECTION_DEPTH:
                raise IllegalInterpretation(f"too many layers looking for {log_card(next_identity, variant)}")
            continue

        if not found[-1].bluff:
            stacks[suit_index] = next_rank
        next_rank += 1

    logger.info("found connections for %s: %s", log_card(identity, variant), connections)
    return connections


def own_connection(
    game: "Game",
    action: Action,
    identity: Identity,
    stacks: list[int],
    looks_direct: bool,
    connected: list[int],
) -> list[Connection]:
    """A prompt or finesse on our own hand that would play `identity`."""
    state, common, me = game.state, game.common, game.me
    us = state.our_player_index
    our_hand = state.hands[us]
    level = game.convention.level

    if action.target == us and looks_direct:
        return []

    prompt = find_prompt(state, common, our_hand, identity, connected)
    if prompt is not None:
        card = me.thoughts[prompt]
        known = card.identity()

        if card.rewinded and known is not None and not known.matches(identity) and stack_playable(stacks, known):
            if level < LEVEL.INTERMEDIATE_FINESSES:
                raise IllegalInterpretation(f"blocked hidden prompt at level {level}")
            return [Connection(ConnectionType.KNOWN, us, prompt, [known], self_finesse=True, hidden=True)]

        if card.matches(identity, assume=True):
            return [Connection(ConnectionType.PROMPT, us, prompt, [identity], self_finesse=True)]
        return []

    finesse = find_finesse(common, our_hand, connected)
    if finesse is None:
        raise IllegalInterpretation("no finesse slot")

    card = me.thoughts[finesse]
    known = card.identity()

    if known is not None:
        if known.matches(identity):
            return [Connection(ConnectionType.FINESSE, us, finesse, [identity], self_finesse=True)]

        if stack_playable(stacks, known):
            if level < LEVEL.INTERMEDIATE_FINESSES:
                raise IllegalInterpretation(f"blocked layered finesse at level {level}")
            return [Connection(ConnectionType.FINESSE, us, finesse, [known], self_finesse=True, hidden=True)]

        raise IllegalInterpretation(f"card {finesse} is {log_card(known, state.variant)}, not a finesse")

    if card.inferred.has(identity):
        return [Connection(ConnectionType.FINESSE, us, finesse, [identity], self_finesse=True)]

    return []
