import logging
from typing import TYPE_CHECKING

from conventions.h_group.h_constants import CLUE_INTERP, LEVEL
from utils import Action, ClueType

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def is_stall(game: "Game", action: Action, severity: int, focus: int, chop: bool) -> CLUE_INTERP | None:
    state, common = game.state, game.common
    clue, target = action.clue, action.target
    hand = state.hands[target]
    level = game.convention.level

    if clue.type == ClueType.RANK and clue.value == 5 and common.thoughts[focus].newly_clued:
        logger.info("5 stall!")
        return CLUE_INTERP.STALL_5

    if severity < 2:
        return None

    if any(state.deck[o].rank == 5 and not common.thoughts[o].clued for o in hand):
        logger.info("5 stall was available but not given, so must not be stall")
        return None

    if severity >= 3 and level >= LEVEL.STALLING:
        if chop and hand.index(focus) != 0:
            logger.info("locked hand stall!")
            return CLUE_INTERP.STALL_LOCKED

        if severity == 4 and hand[0] not in action.touched:
            logger.info("8 clue stall!")
            return CLUE_INTERP.STALL_8CLUES

    if not common.thoughts[focus].newly_clued:
        logger.info("hard burn!")
        return CLUE_INTERP.STALL_BURN

    return None


def stalling_situation(game: "Game", action: Action, severity: int, focus: int, chop: bool) -> CLUE_INTERP | None:
    """
    The kind of stall a clue was, if the giver was under pressure to stall.
    `severity` is measured before the clue was given.
    """
    if severity == 0:
        return None

    logger.info("stall severity %d", severity)
    return is_stall(game, action, severity, focus, chop)
