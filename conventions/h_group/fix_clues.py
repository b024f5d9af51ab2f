"""
Clues that correct a teammate's touched card: one they believe is something
it isn't, or one that secretly duplicates a card already touched elsewhere.
"""
import logging
from typing import TYPE_CHECKING, Callable, NamedTuple

from basics.hanabi_util import visible_find
from basics.identity_set import Identity
from conventions.h_group.clue_finder import ClueCandidate, clue_action, evaluate
from utils import ClueType, log_card, log_clue
from variants import all_clues, card_touched

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


class FixClue(NamedTuple):
    candidate: ClueCandidate
    order: int
    # the card is known to be trash afterwards
    trash: bool
    # the card looks playable, so the target may misplay it soon
    urgent: bool


def _seems_playable(game: "Game", order: int) -> bool:
    """Every inference is playable now, or right after a card we know we hold."""
    state = game.state
    inferred = game.common.thoughts[order].inferred

    def connects(identity: Identity) -> bool:
        away = state.playable_away(identity)
        if away == 0:
            return True
        prev = Identity(identity.suit_index, identity.rank - 1)
        return away == 1 and any(game.me.thoughts[o].matches(prev, infer=True) for o in state.our_hand)

    return len(inferred) > 0 and inferred.every(connects)


def saved_elsewhere(game: "Game", identity: Identity, order: int) -> bool:
    """Another touched copy is visible outside our hand."""
    state = game.state
    return any(
        o != order and game.common.thoughts[o].touched
        for o in visible_find(state, game.me, identity, ignore=[state.our_player_index])
    )


def _known_trash(hypo_game: "Game", target: int, order: int) -> bool:
    return order in hypo_game.common.thinks_trash(hypo_game.state, target)


def _find_fix(
    game: "Game",
    target: int,
    order: int,
    fixed: Callable[["Game"], bool],
    play_clues: dict[int, list[ClueCandidate]],
    save_clues: dict[int, ClueCandidate | None],
) -> tuple[ClueCandidate, bool] | None:
    """
    A play or save clue that fixes the card without touching it, otherwise a
    rank or colour clue on the card itself. Rank is preferred.
    """
    state = game.state
    identity = state.deck[order].raw()

    others = list(play_clues.get(target, []))
    if save_clues.get(target) is not None:
        others.append(save_clues[target])

    for other in others:
        # touching the card would make the clue read as nothing but a fix
        if order in clue_action(game, target, other.clue).touched:
            continue
        evaluated = evaluate(game, target, other.clue)
        if evaluated is not None and fixed(evaluated[0]):
            return other, _known_trash(evaluated[0], target, order)

    direct = [clue for clue in all_clues(state.variant) if card_touched(identity, state.variant, clue)]
    direct.sort(key=lambda clue: clue.type != ClueType.RANK)

    for clue in direct:
        evaluated = evaluate(game, target, clue)
        if evaluated is not None and fixed(evaluated[0]):
            return evaluated[1], _known_trash(evaluated[0], target, order)
    return None


def find_fix_clues(
    game: "Game",
    play_clues: dict[int, list[ClueCandidate]],
    save_clues: dict[int, ClueCandidate | None],
) -> dict[int, list[FixClue]]:
    state, common = game.state, game.common
    fix_clues: dict[int, list[FixClue]] = {}

    for target in range(state.num_players):
        if target == state.our_player_index:
            continue
        fix_clues[target] = []

        for order in state.hands[target]:
            card = common.thoughts[order]
            identity = state.deck[order].identity()

            if identity is None or not card.clued:
                continue
            if len(card.possible) == 1 or card.possible.every(state.is_basic_trash):
                continue

            if len(card.inferred) == 0:
                logger.error("card %d (%s) has no inferences", order, log_card(identity, state.variant))
                continue

            wrong_inference = not card.matches_inferences() and state.playable_away(identity) != 0
            # a copy we hold can be sarcastically discarded instead
            duplicated = len(card.inferred) > 1 and saved_elsewhere(game, identity, order)

            if not wrong_inference and not duplicated:
                continue

            def fixed(hypo_game: "Game", order=order, identity=identity, wrong_inference=wrong_inference) -> bool:
                hypo_card = hypo_game.common.thoughts[order]
                if wrong_inference:
                    return hypo_card.matches_inferences()
                return len(hypo_card.possible) == 1 and saved_elsewhere(hypo_game, identity, order)

            found = _find_fix(game, target, order, fixed, play_clues, save_clues)
            if found is None:
                logger.info("couldn't find a fix for card %s", log_card(identity, state.variant))
                continue

            candidate, trash = found
            logger.info(
                "found fix %s for card %s",
                log_clue(clue_action(game, target, candidate.clue), state),
                log_card(identity, state.variant),
            )
            fix_clues[target].append(FixClue(candidate, order, trash, _seems_playable(game, order)))

    return fix_clues
