from typing import TYPE_CHECKING

from basics.identity_set import Identity, IdentitySet
from state_proxy import Freezable
from utils import Clue, log_card

if TYPE_CHECKING:
    from variants import Variant


class ActualCard(Freezable):
    """
    A physical card. suit_index and rank are -1 while the observer cannot see it.
    """

    def __init__(
        self,
        suit_index: int,
        rank: int,
        order: int = -1,
        drawn_index: int = -1,
        clued: bool = False,
        newly_clued: bool = False,
        clues: list[Clue] | None = None,
    ) -> None:
        self.suit_index = suit_index
        self.rank = rank
        self.order = order
        self.drawn_index = drawn_index
        self.clued = clued
        self.newly_clued = newly_clued
        self.clues = clues if clues is not None else []

    def raw(self) -> Identity:
        return Identity(self.suit_index, self.rank)

    def identity(self) -> Identity | None:
        if self.suit_index == -1 or self.rank == -1:
            return None
        return self.raw()

    def matches(self, identity) -> bool:
        mine = self.identity()
        return mine is not None and identity is not None and mine.matches(identity)

    def __repr__(self):
        return f"ActualCard({self.suit_index}, {self.rank}, order={self.order})"


class Card(ActualCard):
    """
    One observer's belief about a physical card, keyed by the card's order.
    """

    def __init__(
        self,
        suit_index: int,
        rank: int,
        possible: IdentitySet,
        inferred: IdentitySet | None = None,
        order: int = -1,
        drawn_index: int = -1,
        **kwargs,
    ) -> None:
        super().__init__(suit_index, rank, order, drawn_index)
        self.possible = possible
        self.inferred = inferred if inferred is not None else possible
        self.old_inferred: IdentitySet | None = None

        self.finessed = False
        self.chop_moved = False
        self.reset = False
        self.focused = False
        self.hidden = False
        self.superposition = False
        self.certain_finessed = False
        self.uncertain = False
        self.bluffed = False
        self.rewinded = False
        self.trash = False
        self.called_to_discard = False

        self.finesse_index = -1
        self.reasoning: list[int] = []
        self.reasoning_turn: list[int] = []

        for key, value in kwargs.items():
            assert hasattr(self, key), f"unknown card field {key}"
            setattr(self, key, value)

    @property
    def touched(self) -> bool:
        return self.clued or self.finessed

    @property
    def saved(self) -> bool:
        return self.touched or self.chop_moved

    @property
    def possibilities(self) -> IdentitySet:
        """Inferences if there are any left, otherwise possibilities."""
        return self.inferred if len(self.inferred) > 0 else self.possible

    @property
    def num_suits(self) -> int:
        return self.possible.num_suits

    def identity(self, infer: bool = False, symmetric: bool = False) -> Identity | None:
        """
        The card's identity as far as this observer is concerned:
          - the only possibility, if there is one
          - else the visible identity, unless asked for what everyone can deduce
          - else the only inference, if asked to infer
        """
        if len(self.possible) == 1:
            return self.possible.array[0]
        if not symmetric and self.suit_index != -1 and self.rank != -1:
            return self.raw()
        if infer and len(self.inferred) == 1:
            return self.inferred.array[0]
        return None

    def matches(self, identity, infer: bool = False, symmetric: bool = False, assume: bool = False) -> bool:
        """
        With `assume`, an unknown card matches anything it could still be.
        """
        mine = self.identity(infer=infer, symmetric=symmetric)
        if mine is None:
            return assume and identity is not None and self.possible.has(identity)
        return identity is not None and mine.matches(identity)

    def matches_inferences(self) -> bool:
        """Whether the visible identity is still among the inferences."""
        return self.identity() is None or self.possibilities.has(self.identity())

    def intersect(self, field: str, identities) -> None:
        setattr(self, field, getattr(self, field).intersect(identities))

    def subtract(self, field: str, identities) -> None:
        setattr(self, field, getattr(self, field).subtract(identities))

    def union(self, field: str, identities) -> None:
        setattr(self, field, getattr(self, field).union(identities))

    def get_note(self, variant: "Variant") -> str:
        if len(self.inferred) == 0:
            note = "??"
        elif len(self.inferred) <= 3:
            note = ",".join(log_card(i, variant) for i in self.inferred)
        else:
            note = "..."

        if self.finessed:
            note = f"[f] [{note}]"
        elif self.chop_moved:
            note = f"[cm] [{note}]"
        return note

    def __repr__(self):
        return (
            f"Card(order={self.order}, id=({self.suit_index}, {self.rank}), "
            f"inferred={[(i.suit_index, i.rank) for i in self.inferred]})"
        )
