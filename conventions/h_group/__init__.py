from typing import override

from conventions.base import Convention
from conventions.h_group.h_constants import LEVEL
from conventions.h_group.interpret_clue import interpret_clue
from conventions.h_group.interpret_discard import interpret_discard
from conventions.h_group.interpret_play import interpret_play
from conventions.h_group.take_action import take_action
from conventions.h_group.update_turn import update_turn
from utils import PerformAction


class HGroup(Convention):
    """The H-Group conventions, with features switched on by level."""

    name = "HGroup"

    def __init__(self, level: int = LEVEL.BLUFFS) -> None:
        super().__init__(level)

    @override
    def interpret_clue(self, game, action) -> None:
        interpret_clue(game, action)

    @override
    def interpret_play(self, game, action) -> None:
        interpret_play(game, action)

    @override
    def interpret_discard(self, game, action) -> None:
        interpret_discard(game, action)

    @override
    def update_turn(self, game, action) -> None:
        update_turn(game, action)

    @override
    def take_action(self, game) -> PerformAction:
        return take_action(game)


__all__ = ["HGroup", "LEVEL"]
