"""
Finding clues to give: play clues, save clues and stalls. Every candidate is
simulated so that only clues the team would read correctly are suggested.
"""
import logging
from typing import TYPE_CHECKING, NamedTuple

from basics.clue_result import ClueResult, clue_value, get_result
from basics.hanabi_util import visible_find
from conventions.h_group.clue_safe import clue_safe
from conventions.h_group.h_constants import LEVEL
from conventions.h_group.hanabi_logic import determine_focus, save2, stall_severity
from utils import Action, Clue, ClueType, log_card, log_clue
from variants import all_clues, card_touched

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


class ClueCandidate(NamedTuple):
    target: int
    clue: Clue
    result: ClueResult
    value: float


def touched_orders(game: "Game", target: int, clue: Clue) -> list[int]:
    state = game.state
    return [o for o in state.hands[target] if card_touched(state.deck[o], state.variant, clue)]


def clue_action(game: "Game", target: int, clue: Clue) -> Action:
    return Action.make_clue(game.state.our_player_index, target, touched_orders(game, target, clue), clue)


def direct_clues(game: "Game", target: int, order: int) -> list[Clue]:
    """Clues that touch the card and would focus it."""
    state, common = game.state, game.common
    clues = []
    for clue in all_clues(state.variant):
        touched = touched_orders(game, target, clue)
        if order not in touched:
            continue
        focus, _ = determine_focus(state.hands[target], common, touched, before_clue=True)
        if focus == order:
            clues.append(clue)
    return clues


def evaluate(game: "Game", target: int, clue: Clue) -> tuple["Game", ClueCandidate] | None:
    action = clue_action(game, target, clue)
    if not action.touched:
        return None
    hypo_game = game.simulate_clue(action)
    result = get_result(game, hypo_game, action)
    return hypo_game, ClueCandidate(target, clue, result, clue_value(result))


def _misread(game: "Game", hypo_game: "Game", target: int, touched: list[int]) -> bool:
    """Whether the clue leaves any touched card with inferences that exclude what it is."""
    state = game.state
    for order in touched:
        card = hypo_game.common.thoughts[order]
        identity = state.deck[order].identity()
        if identity is None or card.reset or state.is_basic_trash(identity):
            continue
        if not card.inferred.has(identity):
            return True
    return False


def determine_clue(game: "Game", target: int, order: int, save: bool = False) -> ClueCandidate | None:
    """
    The best clue that gets `order` understood. Ties are broken by fewer bad
    touches, then more new cards touched, then more elimination, then fewer
    interpretations of the focus.
    """
    state = game.state
    scored = []

    for clue in direct_clues(game, target, order):
        evaluated = evaluate(game, target, clue)
        if evaluated is None:
            continue
        hypo_game, candidate = evaluated
        touched = touched_orders(game, target, clue)

        if _misread(game, hypo_game, target, touched):
            logger.debug("%s has incorrect interpretation, ignoring", log_clue(clue_action(game, target, clue), state))
            continue
        if not save and order not in hypo_game.common.hypo_plays:
            continue

        result = candidate.result
        interpretations = len(hypo_game.common.thoughts[order].inferred)
        key = (result.bad_touch, -len(result.new_touched), -result.elim, interpretations)
        scored.append((key, candidate))

    if not scored:
        return None
    return min(scored, key=lambda pair: pair[0])[1]


def find_save(game: "Game", target: int, order: int) -> ClueCandidate | None:
    state, common = game.state, game.common
    identity = state.deck[order].identity()
    if identity is None or state.is_basic_trash(identity):
        return None

    visible = visible_find(state, game.me, identity)
    if common.hypo_stacks[identity.suit_index] + 1 == identity.rank and len(visible) == 1:
        return determine_clue(game, target, order)

    if state.is_critical(identity):
        logger.info("saving critical card %s", log_card(identity, state.variant))
        if identity.rank == 5:
            evaluated = evaluate(game, target, Clue(ClueType.RANK, 5))
            return evaluated[1] if evaluated is not None else None
        return determine_clue(game, target, order, save=True)

    if save2(state, common, identity, order, state.our_player_index) and not any(
        game.me.thoughts[o].matches(identity, infer=True) for o in state.our_hand
    ):
        clue = Clue(ClueType.RANK, 2)
        if clue_safe(game, clue_action(game, target, clue))[0]:
            evaluated = evaluate(game, target, clue)
            return evaluated[1] if evaluated is not None else None
    return None


def find_tcm(game: "Game", target: int, order: int) -> ClueCandidate | None:
    """A clue that makes `order` known trash and so chop moves the cards right of it."""
    state = game.state
    hand = state.hands[target]
    saved = [o for o in hand[hand.index(order) + 1 :] if not game.common.thoughts[o].saved]
    useful = [o for o in saved if not state.is_basic_trash(state.deck[o].raw())]
    if not useful or len(useful) <= len(saved) - len(useful):
        return None

    for clue in direct_clues(game, target, order):
        evaluated = evaluate(game, target, clue)
        if evaluated is None:
            continue
        hypo_game, candidate = evaluated
        if all(hypo_game.common.thoughts[o].chop_moved for o in saved):
            logger.info("found trash chop move with %s", log_clue(clue_action(game, target, clue), state))
            return candidate
    return None


def _possibly_connecting(game: "Game", order: int) -> bool:
    identity = game.state.deck[order].identity()
    return identity is not None and any(
        wc.inference.suit_index == identity.suit_index and identity.rank <= wc.inference.rank
        for wc in game.common.waiting_connections
    )


def find_clues(game: "Game") -> tuple[dict[int, list[ClueCandidate]], dict[int, ClueCandidate | None]]:
    """Play clues and the save clue (if needed) for every other player."""
    state, common = game.state, game.common
    level = game.convention.level
    play_clues: dict[int, list[ClueCandidate]] = {}
    save_clues: dict[int, ClueCandidate | None] = {}
    logger.info("play/hypo/max stacks in clue finder: %s %s %s", state.play_stacks, common.hypo_stacks, state.max_ranks)

    for target in range(state.num_players):
        if target == state.our_player_index:
            continue

        hand = state.hands[target]
        chop = hand.chop(common.thoughts)
        play_clues[target] = []
        save_clues[target] = None
        found_tcm = False
        tried = set()

        for order in reversed(hand):
            card = common.thoughts[order]
            identity = state.deck[order].identity()
            if identity is None or card.finessed or _possibly_connecting(game, order):
                continue

            duplicates = [o for o in visible_find(state, game.me, identity) if o != order]
            if any(common.thoughts[o].touched for o in duplicates):
                continue

            if order == chop:
                save_clues[target] = find_save(game, target, order)

            if state.is_basic_trash(identity):
                if level >= LEVEL.BASIC_CM and not card.saved and order != chop and not found_tcm:
                    found_tcm = True
                    save_clues[target] = save_clues[target] or find_tcm(game, target, order)
                continue

            if card.clued or identity.rank > common.hypo_stacks[identity.suit_index] + 2:
                continue

            candidate = determine_clue(game, target, order)
            if candidate is None or candidate.clue in tried:
                continue
            tried.add(candidate.clue)
            if clue_safe(game, clue_action(game, target, candidate.clue))[0]:
                play_clues[target].append(candidate)

    return play_clues, save_clues


def find_stall_clue(game: "Game", severity: int) -> ClueCandidate | None:
    """5 stall first, then a tempo clue on a touched card, then any clue that touches a clued card."""
    state, common = game.state, game.common
    others = [t for t in range(state.num_players) if t != state.our_player_index]

    five = Clue(ClueType.RANK, 5)
    for target in others:
        if any(state.deck[o].rank == 5 and not common.thoughts[o].clued for o in state.hands[target]):
            evaluated = evaluate(game, target, five)
            if evaluated is not None:
                return evaluated[1]

    if severity < 2:
        return None

    burns = []
    for target in others:
        for clue in all_clues(state.variant):
            touched = touched_orders(game, target, clue)
            if touched and all(common.thoughts[o].clued for o in touched):
                evaluated = evaluate(game, target, clue)
                if evaluated is not None:
                    burns.append(evaluated[1])
    if burns:
        return max(burns, key=lambda c: c.value)
    return None


def any_clue(game: "Game") -> ClueCandidate | None:
    """Some legal clue, preferring the least harmful."""
    state = game.state
    candidates = []
    for offset in range(1, state.num_players):
        target = (state.our_player_index + offset) % state.num_players
        for clue in all_clues(state.variant):
            evaluated = evaluate(game, target, clue)
            if evaluated is not None:
                candidates.append(evaluated[1])
    if not candidates:
        return None
    return max(candidates, key=lambda c: (-c.result.bad_touch, c.value))


def current_severity(game: "Game") -> int:
    return stall_severity(game.state, game.common, game.state.our_player_index)
