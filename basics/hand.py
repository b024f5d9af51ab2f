from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from basics.card import Card
    from basics.player import Player
    from basics.state import State


class Hand(list):
    """
    Card orders held by one player, newest first. Slot 1 is index 0 and chop
    sits towards the end.
    """

    def find_index(self, order: int) -> int:
        try:
            return self.index(order)
        except ValueError:
            return -1

    def remove_order(self, order: int) -> None:
        """
        Precondition:
          - order is in this hand
        """
        index = self.find_index(order)
        if index == -1:
            raise KeyError(f"card {order} is not in hand {list(self)}")
        del self[index]

    def clone(self) -> "Hand":
        return Hand(self)

    def chop_index(self, thoughts: Sequence["Card"], after_clue: bool = False) -> int:
        """
        Index of the oldest card that is not clued, finessed or chop moved, or -1
        if there is none. With after_clue, cards clued by the clue being
        processed are not counted as clued yet.
        """
        for i in range(len(self) - 1, -1, -1):
            card = thoughts[self[i]]
            clued = card.clued and (not after_clue or not card.newly_clued)
            if not (clued or card.finessed or card.chop_moved):
                return i
        return -1

    def chop(self, thoughts: Sequence["Card"], after_clue: bool = False) -> int | None:
        """Order of the chop card, if there is one."""
        index = self.chop_index(thoughts, after_clue)
        return None if index == -1 else self[index]

    def clued_orders(self, thoughts: Sequence["Card"]) -> list[int]:
        return [o for o in self if thoughts[o].clued]

    def find_playables(self, player: "Player", state: "State", player_index: int) -> list[int]:
        return [o for o in player.thinks_playables(state, player_index) if o in self]

    def find_known_trash(self, player: "Player", state: "State", player_index: int) -> list[int]:
        return [o for o in player.thinks_trash(state, player_index) if o in self]

    def is_loaded(self, player: "Player", state: "State", player_index: int) -> bool:
        return player.thinks_loaded(state, player_index)

    def is_locked(self, player: "Player", state: "State", player_index: int) -> bool:
        return player.thinks_locked(state, player_index)
