import logging
from typing import TYPE_CHECKING

from action_handler import RewindEscape, attempt_rewind
from basics.identity_set import Identity
from utils import Action, log_card

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def check_rewind(game: "Game", action: Action) -> None:
    """
    If one of our cards turned out to be something we had ruled out, replay the
    game knowing its identity from when it was drawn.

    Raises RewindEscape if the game was rewound, since the rewind already
    handled this action.
    """
    state = game.state
    order = action.order
    if action.player_index != state.our_player_index:
        return

    card = game.me.thoughts[order]
    identity = Identity(action.suit_index, action.rank)
    if card.rewinded or len(card.inferred) == 0 or card.inferred.has(identity):
        return

    logger.info(
        "card %d was %s, not one of our inferences, rewinding",
        order,
        log_card(identity, state.variant),
    )
    rewind_action = Action.identify(order, action.player_index, [identity])
    if attempt_rewind(game, card.drawn_index, rewind_action):
        raise RewindEscape
