import logging
from typing import TYPE_CHECKING, Final

from conventions.h_group.hanabi_logic import save2
from utils import Action, log_card, log_clue

if TYPE_CHECKING:
    from basics.player import Player
    from basics.state import State
    from game import Game

logger = logging.getLogger(__name__)

# players looked past when following saves around the table
MAX_SAVE_DEPTH: Final[int] = 3


def chop_unsafe(state: "State", player: "Player", player_index: int, clue_tokens: int) -> bool:
    """
    Whether the player would have to throw away something that needs saving:
    a critical card or an unseen 2 on chop, or a locked hand with no clues.
    """
    chop = state.hands[player_index].chop(player.thoughts)
    if chop is None:
        return clue_tokens == 0 and not player.thinks_loaded(state, player_index)

    identity = state.deck[chop].identity()
    if identity is None:
        return False
    return state.is_critical(identity) or save2(state, player, identity, chop, state.our_player_index)


def save_safe(
    hypo_game: "Game", start: int, clue_tokens: int, cluers: int = 0, depth: int = 0
) -> tuple[bool, int | None]:
    """
    Walk around the table after `start`. Players with something to play pass
    the turn on, but each could instead spend a clue on a save. The first
    player with nothing to do discards their chop; if that needs saving, some
    earlier player has to give the save, leaving one clue fewer for the players
    after them.
    """
    state, common = hypo_game.state, hypo_game.common
    us = state.our_player_index
    index = state.next_player_index(start)

    while index != us:
        if common.thinks_loaded(state, index):
            cluers += 1
            index = state.next_player_index(index)
            continue

        chop = state.hands[index].chop(common.thoughts)
        if not chop_unsafe(state, common, index, clue_tokens):
            return True, chop

        if clue_tokens == 0 or cluers == 0:
            logger.debug("%s cannot be saved in time", state.player_names[index])
            return False, chop

        if depth >= MAX_SAVE_DEPTH:
            return True, chop
        return save_safe(hypo_game, index, clue_tokens - 1, cluers - 1, depth + 1)

    return True, None


def clue_safe(game: "Game", action: Action) -> tuple[bool, int | None]:
    """
    Whether the clue can be given without someone being forced to discard a
    card that needs saving. Also returns the card that would be discarded next:
    the chop of the first player with nothing better to do.
    """
    hypo_game = game.simulate_clue(action)
    state = hypo_game.state

    safe, discard = save_safe(hypo_game, action.giver, state.clue_tokens)
    if not safe:
        logger.info(
            "not giving clue %s, as %s would be discarded",
            log_clue(action, game.state),
            "a locked hand" if discard is None else log_card(state.deck[discard], state.variant),
        )
    return safe, discard
