"""
Counts what a clue would achieve by comparing a player's beliefs before and
after the clue is simulated.
"""
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from basics.player import Player
    from game import Game


class ClueResult(NamedTuple):
    elim: int
    new_touched: list[int]
    bad_touch: int
    trash: int
    finesses: list[int]
    playables: list[int]
    remainder: float


def elim_result(player: "Player", hypo_player: "Player", hand: list[int], touched: list[int]) -> tuple[list[int], int, int]:
    """Newly touched cards, fill-ins on touched cards and eliminations on others."""
    new_touched, fill, elim = [], 0, 0

    for order in hand:
        old_card = player.thoughts[order]
        hypo_card = hypo_player.thoughts[order]

        if not hypo_card.clued or len(hypo_card.possible) >= len(old_card.possible):
            continue
        if not hypo_card.matches_inferences():
            continue

        if hypo_card.newly_clued and not hypo_card.finessed:
            new_touched.append(order)
        elif order in touched:
            fill += 1
        else:
            elim += 1

    return new_touched, fill, elim


def bad_touch_result(game: "Game", hypo_game: "Game", target: int, focus: int = -1) -> tuple[int, int]:
    """
    Newly touched cards that are useless: `trash` if everyone can tell, `bad_touch`
    if only we can see it.
    """
    state = hypo_game.state
    hypo_common = hypo_game.common
    bad_touch, trash = 0, 0
    seen = set()

    for order in state.hands[target]:
        card = state.deck[order]
        if not hypo_common.thoughts[order].newly_clued or order == focus:
            continue

        if hypo_common.thoughts[order].possible.every(state.is_basic_trash):
            trash += 1
            continue

        identity = card.identity()
        if identity is None:
            continue

        duplicated = any(
            o != order and game.common.thoughts[o].touched and state.deck[o].matches(identity)
            for hand in state.hands
            for o in hand
        )
        if state.is_basic_trash(identity) or duplicated or identity in seen:
            bad_touch += 1
        seen.add(identity)

    return bad_touch, trash


def playables_result(game: "Game", hypo_game: "Game") -> tuple[list[int], list[int]]:
    """Cards that become playable because of the clue, and which of those are blind plays."""
    common, hypo_common = game.common, hypo_game.common
    finesses, playables = [], []

    for order in hypo_common.hypo_plays:
        if order in common.hypo_plays:
            continue
        playables.append(order)
        if hypo_common.thoughts[order].finessed and not common.thoughts[order].finessed:
            finesses.append(order)

    return finesses, playables


def get_result(game: "Game", hypo_game: "Game", action) -> ClueResult:
    """
    Precondition:
      - hypo_game is game after `action` (a clue) was interpreted
    """
    state = game.state
    target = action.target
    hand = state.hands[target]

    new_touched, fill, elim = elim_result(game.common, hypo_game.common, hand, action.touched)
    focus = next(
        (o for o in hand if hypo_game.common.thoughts[o].focused and o in action.touched),
        -1,
    )
    bad_touch, trash = bad_touch_result(game, hypo_game, target, focus)
    finesses, playables = playables_result(game, hypo_game)

    # unknown playables the target will not be able to play this rotation
    remainder = sum(
        0.5
        for order in hypo_game.common.unknown_plays
        if order not in game.common.unknown_plays and hypo_game.state.holder_of(order) == target
    )

    return ClueResult(elim + fill, new_touched, bad_touch, trash, finesses, playables, remainder)


def clue_value(result: ClueResult) -> float:
    """Single score for comparing clues."""
    return (
        0.5 * result.elim
        + len(result.new_touched)
        + len(result.finesses)
        + 1.5 * len(result.playables)
        - 2 * result.bad_touch
        - 0.5 * result.trash
        - result.remainder
    )
