from typing import Final, Iterable, NamedTuple


MAX_RANK: Final[int] = 5


class Identity(NamedTuple):
    suit_index: int
    rank: int

    def matches(self, other) -> bool:
        return (
            other is not None
            and self.suit_index == other.suit_index
            and self.rank == other.rank
        )

    def __str__(self):
        return f"({self.suit_index}, {self.rank})"


def to_mask(identity) -> int:
    return 1 << (identity.suit_index * MAX_RANK + (identity.rank - 1))


class IdentitySet:
    """
    An immutable set of card identities packed into a bitmask, one bit per
    (suit, rank) pair. All operations return new sets.
    """

    __slots__ = ("num_suits", "value", "_array")

    def __init__(self, num_suits: int, value: int | None = None):
        self.num_suits = num_suits
        self.value = (1 << (num_suits * MAX_RANK)) - 1 if value is None else value
        self._array: list[Identity] | None = None

    @classmethod
    def create(cls, num_suits: int, identities=None) -> "IdentitySet":
        """
        Build a set from an identity, an iterable of identities or another set.
        With no identities, the set of everything is returned.
        """
        if identities is None:
            return cls(num_suits)
        return cls(num_suits, cls.to_mask(identities))

    @classmethod
    def empty(cls, num_suits: int) -> "IdentitySet":
        return cls(num_suits, 0)

    @staticmethod
    def to_mask(identities) -> int:
        if isinstance(identities, IdentitySet):
            return identities.value
        if hasattr(identities, "suit_index"):
            if identities.suit_index == -1 or identities.rank == -1:
                return 0
            return to_mask(identities)

        mask = 0
        for identity in identities:
            if identity.suit_index != -1 and identity.rank != -1:
                mask |= to_mask(identity)
        return mask

    @property
    def array(self) -> list[Identity]:
        if self._array is None:
            self._array = [
                Identity(suit_index, rank)
                for suit_index in range(self.num_suits)
                for rank in range(1, MAX_RANK + 1)
                if self.value & (1 << (suit_index * MAX_RANK + rank - 1))
            ]
        return self._array

    def __len__(self) -> int:
        return self.value.bit_count()

    @property
    def length(self) -> int:
        return len(self)

    def __iter__(self):
        return iter(self.array)

    def __bool__(self) -> bool:
        return self.value != 0

    def has(self, identity) -> bool:
        if identity is None or identity.suit_index == -1 or identity.rank == -1:
            return False
        return bool(self.value & to_mask(identity))

    def __contains__(self, identity) -> bool:
        return self.has(identity)

    def intersect(self, identities: "IdentitySet | Iterable | Identity") -> "IdentitySet":
        return IdentitySet(self.num_suits, self.value & IdentitySet.to_mask(identities))

    def subtract(self, identities: "IdentitySet | Iterable | Identity") -> "IdentitySet":
        return IdentitySet(self.num_suits, self.value & ~IdentitySet.to_mask(identities))

    def union(self, identities: "IdentitySet | Iterable | Identity") -> "IdentitySet":
        return IdentitySet(self.num_suits, self.value | IdentitySet.to_mask(identities))

    def equals(self, identities: "IdentitySet | Iterable | Identity") -> bool:
        return self.value == IdentitySet.to_mask(identities)

    __and__ = intersect
    __or__ = union
    __sub__ = subtract

    def __eq__(self, other):
        if not isinstance(other, IdentitySet):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash((self.num_suits, self.value))

    def filter(self, predicate) -> "IdentitySet":
        return IdentitySet.create(self.num_suits, [i for i in self.array if predicate(i)])

    def every(self, predicate) -> bool:
        return all(predicate(i) for i in self.array)

    def some(self, predicate) -> bool:
        return any(predicate(i) for i in self.array)

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __repr__(self):
        return f"IdentitySet({[(i.suit_index, i.rank) for i in self.array]})"
