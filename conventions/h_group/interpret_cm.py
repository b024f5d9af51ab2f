import logging
from typing import TYPE_CHECKING, Iterable

from utils import Action, ClueType, log_card

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def chop_move(game: "Game", orders: Iterable[int]) -> None:
    """Mark cards as saved without touching them, for every player."""
    for order in orders:
        for player in game.all_players:
            with player.edit(order) as draft:
                draft.chop_moved = True
        logger.info("chop moved %s (order %d)", log_card(game.state.deck[order], game.state.variant), order)


def interpret_tcm(game: "Game", target: int) -> list[int]:
    """
    Trash chop move: every untouched card to the right of the oldest newly
    clued trash card is saved.
    """
    state, common = game.state, game.common
    hand = state.hands[target]

    oldest_trash = next(
        (
            i
            for i in range(len(hand) - 1, -1, -1)
            if common.thoughts[hand[i]].newly_clued
            and common.thoughts[hand[i]].possible.every(state.is_basic_trash)
        ),
        None,
    )
    if oldest_trash is None:
        return []

    logger.info("oldest trash card is %s", log_card(state.deck[hand[oldest_trash]], state.variant))
    moved = [
        order
        for order in hand[oldest_trash + 1 :]
        if not common.thoughts[order].saved
    ]
    chop_move(game, moved)
    return moved


def interpret_5cm(game: "Game", action: Action) -> bool:
    """
    5's chop move: a newly clued 5 directly left of chop saves chop.
    Returns whether the clue was one.
    """
    state, common = game.state, game.common
    target, giver = action.target, action.giver
    hand = state.hands[target]
    chop = None

    logger.info("interpreting potential 5cm")
    for i in range(len(hand) - 1, -1, -1):
        order = hand[i]
        card = common.thoughts[order]

        if card.finessed or card.chop_moved or (card.clued and not card.newly_clued):
            continue

        if chop is None:
            # we can see whether the chop is worth saving
            identity = state.deck[order].identity()
            if target != state.our_player_index and identity is not None and (
                state.is_basic_trash(identity) or order in game.players[giver].thinks_trash(state, target)
            ):
                logger.info("chop %s is trash, not interpreting 5cm", log_card(identity, state.variant))
                return False
            if card.newly_clued:
                logger.info("5 was clued on chop, not interpreting 5cm")
                return False
            chop = order
            continue

        if card.newly_clued and any(c.type == ClueType.RANK and c.value == 5 for c in card.clues):
            logger.info("5cm, saving %s", log_card(state.deck[chop], state.variant))
            chop_move(game, [chop])
            return True

        logger.info("not 5cm")
        return False

    return False


def interpret_ocm(game: "Game", action: Action, ordered: list[int]) -> int | None:
    """
    Order chop move: playing a 1 other than the one that should be played first
    saves the chop of the next player who is not loaded. `ordered` is the
    unknown 1s in the order they should be played. Returns the moved order.
    """
    state, common = game.state, game.common
    offset = ordered.index(action.order)
    if offset == 0:
        return None

    logger.info("order chop move with offset %d", offset)
    target = (action.player_index + offset) % state.num_players

    if target == action.player_index:
        logger.warning("double order chop move, ignoring")
        return None

    chop = state.hands[target].chop(common.thoughts)
    if chop is None:
        logger.warning("target %s for order chop move has no chop", state.player_names[target])
        return None

    chop_move(game, [chop])
    return chop
