import logging
from typing import TYPE_CHECKING

from basics.hanabi_util import in_endgame
from conventions.h_group.clue_finder import (
    ClueCandidate,
    any_clue,
    current_severity,
    find_clues,
    find_stall_clue,
)
from conventions.h_group.fix_clues import find_fix_clues
from conventions.h_group.h_constants import ACTION_PRIORITY, LEVEL, PRIORITY_SIZE
from conventions.h_group.hanabi_logic import order_1s
from conventions.h_group.urgent_actions import clue_to_perform, find_urgent_actions
from conventions.shared.endgame import find_endgame_action
from utils import MAX_CLUE_TOKENS, PerformAction, log_perform_action

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def _pick_playable(game: "Game", playables: list[int]) -> int:
    """Finessed cards first, then the lowest rank, then unknown 1s in order."""
    state, me, common = game.state, game.me, game.common
    ordered = order_1s(state, common, playables)
    if ordered and len(ordered) == len(playables):
        return ordered[0]

    def key(order):
        card = me.thoughts[order]
        lowest = min((i.rank for i in card.possibilities), default=0)
        return (not common.thoughts[order].finessed, lowest, state.our_hand.index(order))

    return min(playables, key=key)


def _most_likely_playable(game: "Game") -> int:
    state, me = game.state, game.me

    def chance(order):
        possibilities = me.thoughts[order].possibilities
        if len(possibilities) == 0:
            return 0
        return sum(1 for i in possibilities if state.is_playable(i)) / len(possibilities)

    return max(state.our_hand, key=chance)


def _best_play_clue(play_clues: dict[int, list[ClueCandidate]]) -> ClueCandidate | None:
    all_play_clues = [c for clues in play_clues.values() for c in clues]
    if not all_play_clues:
        return None
    return max(all_play_clues, key=lambda c: c.value)


def _urgent(game: "Game", actions: list[PerformAction]) -> PerformAction | None:
    """The first action that can be taken with the clue tokens we have."""
    for action in actions:
        if not action.is_clue or game.state.clue_tokens > 0:
            logger.info("urgent action: %s", log_perform_action(action, game.state))
            return action
    return None


def take_action(game: "Game") -> PerformAction:
    """
    What to do on our turn. Urgent actions for players we must reach this
    round come first, then the endgame line and our own plays, then play clues
    and less urgent actions, then stalls and discards.
    """
    state, me, common = game.state, game.me, game.common
    us = state.our_player_index
    level = game.convention.level
    hand = state.our_hand

    trash = me.thinks_trash(state, us)
    # cards we could also discard sarcastically are not played
    playables = [o for o in me.thinks_playables(state, us) if o not in trash]

    if state.clue_tokens > 0:
        play_clues, save_clues = find_clues(game)
        fix_clues = find_fix_clues(game, play_clues, save_clues)
    else:
        play_clues, save_clues, fix_clues = {}, {}, {}

    urgent_actions = find_urgent_actions(game, play_clues, save_clues, fix_clues, playables)
    logger.info("playables %s, trash %s", playables, trash)

    for priority in ACTION_PRIORITY:
        action = _urgent(game, urgent_actions[priority])
        if action is not None:
            return action

    if level >= LEVEL.ENDGAME and in_endgame(state):
        action = find_endgame_action(game)
        if action is not None:
            if not action.is_clue:
                return action
            candidate = any_clue(game)
            if candidate is not None:
                return clue_to_perform(candidate)

    if playables:
        return PerformAction(PerformAction.ActionType.PLAY, _pick_playable(game, playables))

    action = _urgent(game, urgent_actions[ACTION_PRIORITY.UNLOCK + PRIORITY_SIZE])
    if action is not None:
        return action

    if state.clue_tokens > 0:
        best = _best_play_clue(play_clues)
        minimum_value = 1 - (0.5 if state.num_players == 2 else 0) - (10 if in_endgame(state) else 0)
        give_play = best is not None and best.value >= minimum_value
        if best is not None and not give_play:
            logger.info("play clue %s too low value %.1f", best.clue, best.value)

        if give_play and state.clue_tokens > 1:
            logger.info("best play clue %s with value %.1f", best.clue, best.value)
            return clue_to_perform(best)

        # at one clue, saves and fixes for later players come before play clues
        for index in range(PRIORITY_SIZE + 1, PRIORITY_SIZE * 2):
            if urgent_actions[index]:
                return urgent_actions[index][0]

        if give_play:
            return clue_to_perform(best)

    if state.clue_tokens == MAX_CLUE_TOKENS or (not hand and state.clue_tokens > 0):
        stall = find_stall_clue(game, 4) or any_clue(game)
        if stall is not None:
            return clue_to_perform(stall)
        return PerformAction(PerformAction.ActionType.PLAY, _most_likely_playable(game))

    if trash:
        return PerformAction(PerformAction.ActionType.DISCARD, trash[0])

    if state.clue_tokens > 0:
        early_save = urgent_actions[PRIORITY_SIZE * 2]
        if early_save:
            return early_save[0]

        stall = find_stall_clue(game, current_severity(game))
        if stall is not None:
            return clue_to_perform(stall)

    chop = hand.chop(common.thoughts)
    if chop is not None:
        return PerformAction(PerformAction.ActionType.DISCARD, chop)

    return PerformAction(PerformAction.ActionType.DISCARD, me.locked_discard(state, us))
