import logging
from typing import TYPE_CHECKING

from basics.clue_result import clue_value, get_result
from basics.hanabi_util import in_endgame
from conventions.ref_sieve.rs_logic import rs_chop
from conventions.shared.endgame import find_endgame_action
from utils import MAX_CLUE_TOKENS, Action, ClueType, PerformAction, log_clue
from variants import all_clues, card_touched

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def _misled(game: "Game", hypo_game: "Game", target: int) -> bool:
    """
    Whether the clue would get the target to play a card that isn't playable,
    or to discard one that is critical.
    """
    state = game.state
    hypo_common = hypo_game.common

    for order in state.hands[target]:
        identity = state.deck[order].identity()
        card = hypo_common.thoughts[order]
        if identity is None:
            continue
        if card.called_to_discard and state.is_critical(identity):
            return True
        if not card.reset and len(card.inferred) > 0 and not card.inferred.has(identity):
            return True
    return False


def find_clue(game: "Game", allow_zero: bool = False) -> tuple[PerformAction, float] | None:
    """The clue with the best value that the team would read correctly."""
    state = game.state
    us = state.our_player_index
    best = None

    for offset in range(1, state.num_players):
        target = (us + offset) % state.num_players
        for clue in all_clues(state.variant):
            touched = [o for o in state.hands[target] if card_touched(state.deck[o], state.variant, clue)]
            if not touched:
                continue

            action = Action.make_clue(us, target, touched, clue)
            hypo_game = game.simulate_clue(action)
            if _misled(game, hypo_game, target):
                logger.debug("%s would be misread", log_clue(action, state))
                continue

            value = clue_value(get_result(game, hypo_game, action))
            if best is None or value > best[1]:
                action_type = PerformAction.ActionType.COLOUR if clue.type == ClueType.COLOUR else PerformAction.ActionType.RANK
                best = (PerformAction(action_type, target, clue.value), value)

    if best is None or (best[1] <= 0 and not allow_zero):
        return None
    return best


def take_action(game: "Game") -> PerformAction:
    """
    Play, then the best clue, then known trash, then a called discard, then
    chop. A locked hand discards its least valuable card.
    """
    state, me, common = game.state, game.me, game.common
    us = state.our_player_index
    hand = state.our_hand

    playables = me.thinks_playables(state, us)
    trash = [o for o in me.thinks_trash(state, us) if common.thoughts[o].saved]

    if in_endgame(state):
        action = find_endgame_action(game)
        if action is not None and not action.is_clue:
            return action
        if action is not None:
            found = find_clue(game, allow_zero=True)
            if found is not None:
                return found[0]

    if playables:
        def key(order):
            lowest = min((i.rank for i in me.thoughts[order].possibilities), default=0)
            return (lowest, hand.index(order))

        return PerformAction(PerformAction.ActionType.PLAY, min(playables, key=key))

    if state.clue_tokens > 0:
        found = find_clue(game, allow_zero=state.clue_tokens == MAX_CLUE_TOKENS or not hand)
        if found is not None:
            logger.info("giving clue with value %.1f", found[1])
            return found[0]

    if state.clue_tokens == MAX_CLUE_TOKENS:
        def chance(order):
            possibilities = me.thoughts[order].possibilities
            return sum(1 for i in possibilities if state.is_playable(i)) / max(len(possibilities), 1)

        return PerformAction(PerformAction.ActionType.PLAY, max(hand, key=chance))

    if trash:
        return PerformAction(PerformAction.ActionType.DISCARD, trash[0])

    chop = rs_chop(hand, common.thoughts)
    if chop is not None:
        return PerformAction(PerformAction.ActionType.DISCARD, chop)

    return PerformAction(PerformAction.ActionType.DISCARD, me.locked_discard(state, us))
