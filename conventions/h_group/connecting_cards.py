"""
Search for the cards that have to be played before a clued card becomes
playable. Searches run against a list of hypothetical play stacks so that a
chain can be built one rank at a time without touching the game.
"""
import logging
from typing import TYPE_CHECKING, Iterable

from basics.connection import Connection, ConnectionType
from basics.identity_set import Identity
from conventions.h_group.h_constants import LEVEL, MAX_CONNECTION_DEPTH
from conventions.h_group.hanabi_logic import find_finesse, find_prompt
from utils import Action, log_card
from variants import card_count

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def stack_playable(stacks: list[int], identity: Identity) -> bool:
    return identity.rank == stacks[identity.suit_index] + 1


def visible_identity(game: "Game", order: int) -> Identity | None:
    """What we can tell a card is: seen in another hand, or identified in ours."""
    card = game.state.deck[order]
    identity = card.identity()
    if identity is None:
        identity = game.me.thoughts[order].identity()
    return identity


def find_known_connecting(
    game: "Game",
    giver: int,
    identity: Identity,
    stacks: list[int],
    connected: Iterable[int] = (),
    ignore: Iterable[int] = (),
) -> Connection | None:
    """
    A card everyone already knows is `identity`, or knows is playable and that
    we can see is `identity`.
    """
    state, common = game.state, game.common
    skip = set(connected) | set(ignore)

    for i, hand in enumerate(state.hands):
        for order in hand:
            if order in skip:
                continue
            card = common.thoughts[order]
            actual = visible_identity(game, order)

            known = common.id_of(card, infer=True)
            if known is not None and known.matches(identity) and (actual is None or actual.matches(identity)):
                logger.info("found known %s in %s's hand", log_card(identity, state.variant), state.player_names[i])
                return Connection(ConnectionType.KNOWN, i, order, [identity])

    for i, hand in enumerate(state.hands):
        if i == giver:
            continue
        for order in hand:
            if order in skip:
                continue
            card = common.thoughts[order]
            if not card.touched or len(card.inferred) == 0:
                continue
            if not card.inferred.every(lambda inf: stack_playable(stacks, inf)):
                continue

            actual = visible_identity(game, order)
            if actual is not None and not actual.matches(identity):
                continue
            if actual is None and not card.inferred.has(identity):
                continue

            logger.info("found playable %s in %s's hand", log_card(identity, state.variant), state.player_names[i])
            return Connection(ConnectionType.PLAYABLE, i, order, [identity])

    return None


def find_connecting(
    game: "Game",
    action: Action,
    identity: Identity,
    stacks: list[int],
    looks_direct: bool,
    connected: Iterable[int] = (),
    ignore: Iterable[int] = (),
    bluffable: bool = False,
) -> list[Connection]:
    """
    The connections through other players' hands (never ours) that would play
    `identity`. An empty list means nothing was found; a single terminate
    connection means a candidate was found but is visibly wrong, so the reacting
    player would misplay.
    """
    state, common = game.state, game.common
    giver, target = action.giver, action.target
    connected = list(connected)
    ignore = list(ignore)

    if state.discard_stacks[identity.suit_index][identity.rank - 1] == card_count(state.variant, identity):
        logger.info("all copies of %s are discarded", log_card(identity, state.variant))
        return []

    known = find_known_connecting(game, giver, identity, stacks, connected, ignore)
    if known is not None:
        return [known]

    # the giver may be counting on a copy they know they hold
    for order in state.hands[giver]:
        if order in connected or not common.thoughts[order].touched:
            continue
        actual = visible_identity(game, order)
        giver_id = game.players[giver].id_of(game.players[giver].thoughts[order], infer=True)
        if actual is not None and actual.matches(identity) and giver_id is not None and giver_id.matches(identity):
            logger.warning(
                "assuming %s knows about their own %s",
                state.player_names[giver],
                log_card(identity, state.variant),
            )
            return [Connection(ConnectionType.KNOWN, giver, order, [identity])]

    wrong_prompt = None
    num_players = state.num_players

    for offset in range(1, num_players):
        i = (giver + offset) % num_players
        if i == state.our_player_index:
            continue

        hand = state.hands[i]
        prompt = find_prompt(state, common, hand, identity, connected, ignore)

        if prompt is not None:
            actual = visible_identity(game, prompt)
            if actual is not None and actual.matches(identity):
                logger.info("found prompt %s in %s's hand", log_card(identity, state.variant), state.player_names[i])
                return [Connection(ConnectionType.PROMPT, i, prompt, [identity])]

            # a wrong prompt blocks finesses in the same hand
            logger.debug("couldn't prompt %s, card %d is %s", log_card(identity, state.variant), prompt, log_card(actual, state.variant))
            wrong_prompt = wrong_prompt or Connection(ConnectionType.TERMINATE, i, prompt, [])
            continue

        if i == target and looks_direct:
            continue

        finesse = find_finesse(common, hand, connected, ignore)
        if finesse is None:
            continue

        actual = visible_identity(game, finesse)
        if actual is None:
            continue

        if actual.matches(identity):
            if _giver_holds(game, giver, identity):
                logger.info("not finessing %s, the giver has a touched copy", log_card(identity, state.variant))
                continue
            logger.info("found finesse %s in %s's hand", log_card(identity, state.variant), state.player_names[i])
            return [Connection(ConnectionType.FINESSE, i, finesse, [identity])]

        if not stack_playable(stacks, actual):
            continue

        if (
            bluffable
            and game.convention.level >= LEVEL.BLUFFS
            and i == state.next_player_index(giver)
            and i != target
        ):
            logger.info("found bluff %s in %s's hand", log_card(actual, state.variant), state.player_names[i])
            # the bluffed player only learns that their card is playable
            playable = [
                Identity(suit_index, stacks[suit_index] + 1)
                for suit_index in range(state.variant.num_suits)
                if stacks[suit_index] < state.max_ranks[suit_index]
            ]
            return [Connection(ConnectionType.FINESSE, i, finesse, playable, bluff=True)]

        if game.convention.level >= LEVEL.INTERMEDIATE_FINESSES:
            layered = _layered_finesse(game, i, finesse, identity, stacks, connected, ignore)
            if layered:
                return layered

    return [wrong_prompt] if wrong_prompt is not None else []


def _giver_holds(game: "Game", giver: int, identity: Identity) -> bool:
    state = game.state
    return any(
        game.common.thoughts[o].touched and state.deck[o].matches(identity)
        for o in state.hands[giver]
    )


def _layered_finesse(
    game: "Game",
    reacting: int,
    first: int,
    identity: Identity,
    stacks: list[int],
    connected: list[int],
    ignore: list[int],
) -> list[Connection]:
    """
    The reacting player blind plays `first`, which is playable but not
    `identity`, and keeps playing finesse positions until `identity` comes up.
    """
    state, common = game.state, game.common
    hypo_stacks = list(stacks)
    layered_connected = list(connected)
    connections = []
    order = first

    while order is not None and len(connections) < MAX_CONNECTION_DEPTH:
        actual = visible_identity(game, order)
        if actual is None:
            return []

        if actual.matches(identity):
            connections.append(Connection(ConnectionType.FINESSE, reacting, order, [identity]))
            logger.info(
                "found layered finesse %s in %s's hand",
                log_card(identity, state.variant),
                state.player_names[reacting],
            )
            return connections

        if not stack_playable(hypo_stacks, actual):
            return []

        connections.append(Connection(ConnectionType.FINESSE, reacting, order, [actual], hidden=True))
        hypo_stacks[actual.suit_index] = actual.rank
        layered_connected.append(order)
        order = find_finesse(common, state.hands[reacting], layered_connected, ignore)

    return []
