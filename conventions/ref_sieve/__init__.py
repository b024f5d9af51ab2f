from typing import override

from conventions.base import Convention
from conventions.ref_sieve.interpret_clue import interpret_clue
from conventions.ref_sieve.interpret_discard import interpret_discard
from conventions.ref_sieve.interpret_play import interpret_play
from conventions.ref_sieve.take_action import take_action
from conventions.ref_sieve.update_turn import update_turn
from utils import PerformAction


class RefSieve(Convention):
    """Referential Sieve, without finesses or the two-player rules."""

    name = "RefSieve"

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


__all__ = ["RefSieve"]
