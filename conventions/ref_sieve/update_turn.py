import logging
from typing import TYPE_CHECKING

from utils import Action, log_identities

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def update_turn(game: "Game", action: Action) -> None:
    """
    Drop play calls that can no longer be right: every identity the called
    card could have been has since been played or made unreachable.
    """
    state, common = game.state, game.common
    changed = False

    for hand in state.hands:
        for order in hand:
            card = common.thoughts[order]
            if not card.finessed or not card.inferred.every(state.is_basic_trash):
                continue

            logger.info(
                "play call on card %d is stale (inferences %s), removing",
                order,
                log_identities(card.inferred, state.variant),
            )
            base = card.old_inferred if card.old_inferred is not None else card.possible
            restored = base.filter(lambda i: not state.is_basic_trash(i))
            with common.edit(order) as draft:
                draft.finessed = False
                draft.inferred = restored if len(restored) > 0 else card.possible
                draft.old_inferred = None
            changed = True

    if changed:
        common.good_touch_elim(state)
        common.update_hypo_stacks(state)
        game.convention.team_elim(game)
