"""
Referential Sieve clue interpretation. A clue that doesn't simply reveal a
safe action points at another card: colour clues call the card left of the
newly touched cards to play, rank clues call the card right of the focus to
discard (or lock the hand if there is none).
"""
import logging
from typing import TYPE_CHECKING

from basics.helper import check_fix, on_clue
from conventions.ref_sieve.rs_constants import CLUE_INTERP
from conventions.ref_sieve.rs_logic import newest, ref_discard_target, refer
from utils import Action, ClueType, log_identities

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def target_play(game: "Game", action: Action, target: int) -> bool:
    """
    Call `target` to play: it must be one of the identities that will be
    playable once the known plays are made. Returns False if the call doesn't
    make sense.
    """
    state, common = game.state, game.common
    card = common.thoughts[target]

    if card.finessed:
        logger.info("targeting an already known playable!")
        return False
    if card.called_to_discard:
        logger.info("targeting a card called to discard!")
        return False

    possibilities = card.inferred.filter(
        lambda i: i.rank == common.hypo_stacks[i.suit_index] + 1 and i.rank <= state.max_ranks[i.suit_index]
    )
    logger.info("target possibilities [%s]", log_identities(possibilities, state.variant))

    actual = state.deck[target].identity()
    if len(possibilities) == 0 or (actual is not None and not possibilities.has(actual)):
        logger.info("targeting an unplayable card!")
        return False

    with common.edit(target) as draft:
        draft.old_inferred = card.inferred
        draft.inferred = possibilities
        draft.finessed = True
        if draft.finesse_index == -1:
            draft.finesse_index = len(state.action_list) - 1
    return True


def ref_play(game: "Game", action: Action, newly_touched: list[int], right: bool = False) -> CLUE_INTERP:
    state, common = game.state, game.common
    hand = state.hands[action.target]

    if right:
        target = min(refer(hand, common.thoughts, o, "right") for o in newly_touched)
    else:
        target = max(refer(hand, common.thoughts, o, "left") for o in newly_touched)

    focus = newest(newly_touched)
    with common.edit(focus) as draft:
        draft.focused = True

    if not target_play(game, action, target):
        return CLUE_INTERP.NONE

    logger.info(
        "ref play on %s's slot %d, inferences %s",
        state.player_names[action.target],
        hand.index(target) + 1,
        log_identities(common.thoughts[target].inferred, state.variant),
    )
    return CLUE_INTERP.REF_PLAY


def ref_discard(game: "Game", action: Action, newly_touched: list[int]) -> CLUE_INTERP:
    state, common = game.state, game.common
    hand = state.hands[action.target]
    focus = newest(newly_touched)

    with common.edit(focus) as draft:
        draft.focused = True

    target = ref_discard_target(hand, common.thoughts, focus)
    if target is None:
        logger.info("lock!")
        for order in hand:
            if not common.thoughts[order].saved:
                with common.edit(order) as draft:
                    draft.chop_moved = True
        return CLUE_INTERP.LOCK

    logger.info("ref discard on %s's slot %d", state.player_names[action.target], hand.index(target) + 1)
    with common.edit(target) as draft:
        draft.called_to_discard = True
    return CLUE_INTERP.REF_DC


def interpret_clue(game: "Game", action: Action) -> CLUE_INTERP:
    state, common = game.state, game.common
    target, clue = action.target, action.clue
    hand = state.hands[target]

    newly_touched = [o for o in action.touched if not common.thoughts[o].clued]
    old_thoughts = list(common.thoughts)
    prev_playables = common.thinks_playables(state, target)
    prev_loaded = (
        len(prev_playables) > 0
        or len(common.thinks_trash(state, target)) > 0
        or any(common.thoughts[o].called_to_discard for o in hand)
    )

    on_clue(game, action)
    resets = common.good_touch_elim(state)
    fix = check_fix(game, old_thoughts, action, resets)

    trash_push = (
        not fix
        and len(newly_touched) > 0
        and all(common.thoughts[o].possible.every(state.is_basic_trash) for o in newly_touched)
    )

    interp = _interpret(game, action, newly_touched, prev_playables, prev_loaded, fix, trash_push)
    logger.info("clue interpreted as %s", interp)

    common.good_touch_elim(state)
    common.refresh_links(state)
    common.update_hypo_stacks(state)
    game.convention.team_elim(game)
    return interp


def _interpret(
    game: "Game",
    action: Action,
    newly_touched: list[int],
    prev_playables: list[int],
    prev_loaded: bool,
    fix: bool,
    trash_push: bool,
) -> CLUE_INTERP:
    state, common = game.state, game.common
    target, clue = action.target, action.clue

    if fix:
        logger.info("fix clue, not inferring anything else")
        return CLUE_INTERP.FIX

    if prev_loaded:
        # a loaded player's clues are all play clues
        if newly_touched:
            return ref_play(game, action, newly_touched, right=clue.type == ClueType.RANK and not trash_push)
        return CLUE_INTERP.RECLUE if target_play(game, action, newest(action.touched)) else CLUE_INTERP.NONE

    new_playables = [o for o in common.thinks_playables(state, target) if o not in prev_playables]
    loaded = common.thinks_loaded(state, target)

    if not newly_touched:
        if loaded:
            logger.info("revealed a safe action, not continuing")
            return CLUE_INTERP.REVEAL
        return CLUE_INTERP.RECLUE if target_play(game, action, newest(action.touched)) else CLUE_INTERP.NONE

    if trash_push:
        logger.info("trash push")
        return ref_play(game, action, newly_touched)

    direct = all(o in newly_touched for o in new_playables)
    if loaded and not (clue.type == ClueType.COLOUR and direct):
        logger.info("revealed a safe action, not continuing")
        if clue.type == ClueType.RANK and direct:
            with common.edit(newest(newly_touched)) as draft:
                draft.focused = True
        return CLUE_INTERP.REVEAL

    if clue.type == ClueType.COLOUR:
        return ref_play(game, action, newly_touched)
    return ref_discard(game, action, newly_touched)
