"""
Actions that cannot wait: unlocking or saving a player who is about to discard
something important, and fixing cards that are about to be misplayed.

Actions are bucketed by ACTION_PRIORITY. A player is high priority if
nobody between us and them can take care of it; everyone else's actions are
offset by PRIORITY_SIZE. Saves for players who have something else to do
anyway go in the last bucket as early saves.
"""
import logging
from typing import TYPE_CHECKING

from basics.clue_result import clue_value
from basics.hanabi_util import card_value
from basics.identity_set import Identity
from conventions.h_group.clue_finder import ClueCandidate, evaluate
from conventions.h_group.fix_clues import FixClue
from conventions.h_group.h_constants import ACTION_PRIORITY, LEVEL, PRIORITY_SIZE
from conventions.h_group.hanabi_logic import order_1s
from utils import Action, ClueType, PerformAction

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def clue_to_perform(candidate: ClueCandidate) -> PerformAction:
    clue = candidate.clue
    action_type = PerformAction.ActionType.COLOUR if clue.type == ClueType.COLOUR else PerformAction.ActionType.RANK
    return PerformAction(action_type, candidate.target, clue.value)


def find_unlock(game: "Game", target: int) -> PerformAction | None:
    """A card we know we hold that makes one of the target's cards playable to them."""
    state, me = game.state, game.me
    us = state.our_player_index

    for order in state.hands[target]:
        identity = state.deck[order].identity()
        if identity is None or state.playable_away(identity) != 1:
            continue

        connecting = Identity(identity.suit_index, identity.rank - 1)
        ours = next((o for o in state.our_hand if me.thoughts[o].matches(connecting, infer=True)), None)
        if ours is None:
            continue

        hypo_game = game.simulate_action(Action.play(us, ours, connecting.suit_index, connecting.rank))
        if order in hypo_game.common.thinks_playables(hypo_game.state, target):
            logger.info("playing %d unlocks %s", ours, state.player_names[target])
            return PerformAction(PerformAction.ActionType.PLAY, ours)
    return None


def _reaches_target(game: "Game", target: int, order: int, result_playables: list[int]) -> bool:
    """
    Whether the card becomes playable by the time the target acts, counting
    plays from everyone in between.
    """
    state, common = game.state, game.common
    identity = state.deck[order].raw()
    stack_rank = state.play_stacks[identity.suit_index]

    player_index = state.next_player_index(state.our_player_index)
    while player_index != target:
        wanted = Identity(identity.suit_index, stack_rank + 1)
        playables = common.thinks_playables(state, player_index) + [
            o for o in result_playables if state.holder_of(o) == player_index
        ]
        if any(state.deck[o].matches(wanted) for o in playables):
            stack_rank += 1
        player_index = state.next_player_index(player_index)

    return stack_rank + 1 == identity.rank


def find_play_over_save(
    game: "Game",
    target: int,
    all_play_clues: list[ClueCandidate],
    locked: bool,
    remainder_boost: float = 0,
) -> PerformAction | None:
    """A play clue that gets the target playing instead of discarding."""
    state = game.state
    play_clues = []

    for candidate in all_play_clues:
        value = clue_value(candidate.result) + remainder_boost
        if value < (0 if locked else 1):
            continue

        target_cards = [o for o in candidate.result.playables if state.holder_of(o) == target]
        if any(state.is_playable(state.deck[o].raw()) for o in target_cards):
            play_clues.append(candidate)
            continue

        if any(_reaches_target(game, target, o, candidate.result.playables) for o in target_cards):
            play_clues.append(candidate)

    min_tokens = 1 if state.num_players > 2 else 2
    safe = [c for c in play_clues if c.result.trash > 0 or state.clue_tokens >= min_tokens]
    if not safe:
        return None
    return clue_to_perform(max(safe, key=lambda c: clue_value(c.result)))


def _chop_value(game: "Game", target: int) -> int:
    state = game.state
    chop = state.hands[target].chop(game.common.thoughts)
    if chop is None:
        return 0
    return card_value(state, game.me, state.deck[chop].identity(), chop)


def _next_chop_value(game: "Game", target: int) -> int:
    """Value of the card that would be chop if the current chop were moved."""
    state, common = game.state, game.common
    hand = state.hands[target]
    chop_index = hand.chop_index(common.thoughts)
    if chop_index == -1:
        return 0

    for order in reversed(hand[:chop_index]):
        if not common.thoughts[order].saved:
            return card_value(state, game.me, state.deck[order].identity(), order)
    return 0


def _order_chop_move(game: "Game", target: int, our_playables: list[int]) -> PerformAction | None:
    """
    Playing the right one of several unknown 1s moves the target's chop instead
    of spending a clue, as long as the card that becomes chop is no better.
    """
    state, common = game.state, game.common
    ordered = order_1s(state, common, our_playables)
    if not ordered or len(ordered) != len(our_playables):
        return None

    distance = (target - state.our_player_index) % state.num_players
    if len(ordered) <= distance:
        return None

    if _chop_value(game, target) < _next_chop_value(game, target):
        return None

    logger.info("order chop move on %s", state.player_names[target])
    return PerformAction(PerformAction.ActionType.PLAY, ordered[distance])


def _high_priority(game: "Game", target: int) -> bool:
    """Everyone between us and the target is busy playing into a finesse."""
    state, common = game.state, game.common
    player_index = state.next_player_index(state.our_player_index)

    while player_index != target:
        if not any(
            common.thoughts[o].finessed and state.is_playable(state.deck[o].raw())
            for o in state.hands[player_index]
        ):
            return False
        player_index = state.next_player_index(player_index)
    return True


def _best_fix(fixes: list[FixClue]) -> PerformAction:
    return clue_to_perform(max(fixes, key=lambda fix: fix.candidate.value).candidate)


def find_urgent_actions(
    game: "Game",
    play_clues: dict[int, list[ClueCandidate]],
    save_clues: dict[int, ClueCandidate | None],
    fix_clues: dict[int, list[FixClue]],
    our_playables: list[int],
) -> list[list[PerformAction]]:
    state, common = game.state, game.common
    us = state.our_player_index
    urgent_actions: list[list[PerformAction]] = [[] for _ in range(PRIORITY_SIZE * 2 + 1)]
    all_play_clues = [c for clues in play_clues.values() for c in clues]

    for offset in range(1, state.num_players):
        target = (us + offset) % state.num_players
        priority = 0 if _high_priority(game, target) else PRIORITY_SIZE
        trash_fixes = [fix for fix in fix_clues.get(target, []) if fix.trash]

        if common.thinks_locked(state, target):
            unlock = find_unlock(game, target)
            if unlock is not None:
                urgent_actions[ACTION_PRIORITY.UNLOCK + priority].append(unlock)
                continue

            play_over_save = find_play_over_save(game, target, all_play_clues, locked=True)
            if play_over_save is not None:
                urgent_actions[ACTION_PRIORITY.PLAY_OVER_SAVE + priority].append(play_over_save)
                continue

            if trash_fixes:
                urgent_actions[ACTION_PRIORITY.TRASH_FIX + priority].append(_best_fix(trash_fixes))
            continue

        save = save_clues.get(target)
        if save is not None:
            if common.thinks_loaded(state, target):
                urgent_actions[PRIORITY_SIZE * 2].append(clue_to_perform(save))
                continue

            unlock = find_unlock(game, target)
            if unlock is not None:
                urgent_actions[ACTION_PRIORITY.UNLOCK + priority].append(unlock)
                continue

            if trash_fixes:
                urgent_actions[ACTION_PRIORITY.TRASH_FIX + priority].append(_best_fix(trash_fixes))
                continue

            if game.convention.level >= LEVEL.BASIC_CM and our_playables:
                ocm = _order_chop_move(game, target, our_playables)
                if ocm is not None:
                    urgent_actions[ACTION_PRIORITY.ONLY_SAVE + priority].append(ocm)
                    continue

            evaluated = evaluate(game, target, save.clue)
            if evaluated is None:
                continue
            hypo_game, _ = evaluated

            candidates = list(all_play_clues)
            # the save itself may get something played
            if hypo_game.common.thinks_playables(hypo_game.state, target):
                candidates.append(save)

            play_over_save = find_play_over_save(
                game, target, candidates, locked=False, remainder_boost=_chop_value(hypo_game, target)
            )
            if play_over_save is not None:
                urgent_actions[ACTION_PRIORITY.PLAY_OVER_SAVE + priority].append(play_over_save)
                continue

            # at 1 clue, a save that exposes something better is not worth it
            if state.clue_tokens == 1 and _chop_value(game, target) < _chop_value(hypo_game, target):
                logger.info("not saving %s at 1 clue, the new chop is worth more", state.player_names[target])
                continue

            urgent_actions[ACTION_PRIORITY.ONLY_SAVE + priority].append(clue_to_perform(save))

        fixes = fix_clues.get(target, [])
        if fixes:
            urgent_fixes = [fix for fix in fixes if fix.urgent]
            if urgent_fixes:
                urgent_actions[ACTION_PRIORITY.URGENT_FIX + priority].append(_best_fix(urgent_fixes))
            else:
                urgent_actions[ACTION_PRIORITY.URGENT_FIX + PRIORITY_SIZE].append(_best_fix(fixes))

    logger.debug("urgent actions %s", urgent_actions)
    return urgent_actions
