import logging
from typing import TYPE_CHECKING

from basics.hanabi_util import visible_find
from basics.identity_set import Identity
from utils import Action, log_card

if TYPE_CHECKING:
    from basics.player import Player
    from game import Game

logger = logging.getLogger(__name__)


def find_sarcastic(game: "Game", player_index: int, player: "Player", identity: Identity) -> list[int]:
    """The cards in a hand that a sarcastic discard of `identity` could be about."""
    state = game.state
    hand = state.hands[player_index]

    known = [o for o in hand if player.thoughts[o].matches(identity, infer=True)]
    if known:
        return known

    def candidate(order):
        card = player.thoughts[order]
        # connecting cards are not sarcastic targets
        return (
            card.clued
            and card.possible.has(identity)
            and not (len(card.inferred) == 1 and card.inferred.array[0].rank < identity.rank)
        )

    return [o for o in hand if candidate(o)]


def apply_unknown_sarcastic(game: "Game", sarcastic: list[int], identity: Identity) -> None:
    for order in sarcastic:
        with game.common.edit(order) as draft:
            draft.union("inferred", identity)


def interpret_sarcastic(game: "Game", action: Action) -> list[int]:
    """
    A useful clued card was discarded because another clued copy exists: give
    that copy the identity. Returns the possible targets.
    """
    state, common, me = game.state, game.common, game.me
    identity = Identity(action.suit_index, action.rank)
    us = state.our_player_index

    duplicates = visible_find(state, me, identity)
    receivers = [(us + i) % state.num_players for i in range(state.num_players)]
    if not duplicates:
        receivers = [us]

    for receiver in receivers:
        if receiver == action.player_index:
            continue

        sarcastic = find_sarcastic(game, receiver, me, identity)
        if receiver != us and not any(me.thoughts[o].matches(identity) for o in sarcastic):
            continue

        if len(sarcastic) == 1:
            with common.edit(sarcastic[0]) as draft:
                draft.inferred = draft.possible.intersect(identity)
            logger.info("writing %s from sarcastic discard on card %d", log_card(identity, state.variant), sarcastic[0])
        else:
            apply_unknown_sarcastic(game, sarcastic, identity)
            logger.info("unknown sarcastic discard, could be any of %s", sarcastic)
        return sarcastic

    logger.warning("couldn't find a valid target for sarcastic discard")
    return []
