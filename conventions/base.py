import logging
from abc import ABCMeta, abstractmethod
from typing import TYPE_CHECKING

from state_proxy import produce
from utils import Action, PerformAction

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


class Convention(metaclass=ABCMeta):
    """
    A shared protocol for what actions mean. The engine only ever talks to a
    game's convention through these hooks.
    """

    name: str = "convention"

    def __init__(self, level: int = 1) -> None:
        self.level = level

    @abstractmethod
    def interpret_clue(self, game: "Game", action: Action) -> None:
        pass

    @abstractmethod
    def interpret_play(self, game: "Game", action: Action) -> None:
        pass

    @abstractmethod
    def interpret_discard(self, game: "Game", action: Action) -> None:
        pass

    @abstractmethod
    def update_turn(self, game: "Game", action: Action) -> None:
        pass

    @abstractmethod
    def take_action(self, game: "Game") -> PerformAction:
        pass

    def team_elim(self, game: "Game") -> None:
        """
        Copy the common beliefs into every player, keeping what each player can
        see for themselves, then let each player eliminate on top of that.
        """
        state, common = game.state, game.common

        for player in game.players:
            for hand in state.hands:
                for order in hand:
                    common_card = common.thoughts[order]
                    card = player.thoughts[order]
                    if card is common_card:
                        continue

                    def recipe(draft, card=card, common_card=common_card):
                        draft.suit_index = card.suit_index
                        draft.rank = card.rank
                        draft.possible = common_card.possible.intersect(card.possible)
                        inferred = common_card.inferred.intersect(card.possible)
                        draft.inferred = inferred if len(inferred) > 0 else common_card.inferred

                    player.thoughts[order] = produce(common_card, recipe)

            player.waiting_connections = list(common.waiting_connections)
            player.links = list(common.links)

            player.card_elim(state)
            player.good_touch_elim(state)
            player.refresh_links(state)
            player.update_hypo_stacks(state)

        common.update_hypo_stacks(state)

    def __repr__(self):
        return f"{type(self).__name__}(level={self.level})"
