from enum import Enum, unique

from basics.identity_set import Identity


@unique
class ConnectionType(Enum):
    KNOWN = "known"
    PLAYABLE = "playable"
    PROMPT = "prompt"
    FINESSE = "finesse"
    TERMINATE = "terminate"

    def __str__(self) -> str:
        return self.value


class Connection:
    """
    One step of a chain that makes a clued card playable: `reacting` plays
    `order`, which is believed to be one of `identities`.

    hidden: the card is playable but not one of the identities the chain needs
        (a layered finesse); it only delays the real connection.
    self_finesse: the reacting player has to find the card in their own hand.
    """

    def __init__(
        self,
        type: ConnectionType,
        reacting: int,
        order: int,
        identities: list[Identity],
        self_finesse: bool = False,
        hidden: bool = False,
        bluff: bool = False,
        certain: bool = False,
    ) -> None:
        self.type = type
        self.reacting = reacting
        self.order = order
        self.identities = list(identities)
        self.self_finesse = self_finesse
        self.hidden = hidden
        self.bluff = bluff
        self.certain = certain

    def __eq__(self, other):
        return isinstance(other, Connection) and (
            self.type,
            self.reacting,
            self.order,
            self.identities,
            self.hidden,
        ) == (other.type, other.reacting, other.order, other.identities, other.hidden)

    def __repr__(self):
        flags = "".join(
            f" {name}"
            for name in ("self_finesse", "hidden", "bluff", "certain")
            if getattr(self, name)
        )
        return f"<{self.type} {self.order} by {self.reacting} as {[tuple(i) for i in self.identities]}{flags}>"


class WaitingConnection:
    """
    A clue whose meaning depends on other players acting first. The chain is
    consumed one connection at a time as the reacting players demonstrate it.
    """

    def __init__(
        self,
        connections: list[Connection],
        giver: int,
        target: int,
        focused_card: int,
        inference: Identity,
        action_index: int,
        turn: int,
        conn_index: int = 0,
        symmetric: bool = False,
    ) -> None:
        self.connections = connections
        self.giver = giver
        self.target = target
        self.focused_card = focused_card
        self.inference = inference
        self.action_index = action_index
        self.turn = turn
        self.conn_index = conn_index
        # held only because others cannot yet tell it apart from the true meaning
        self.symmetric = symmetric

    @property
    def current(self) -> Connection | None:
        if self.conn_index >= len(self.connections):
            return None
        return self.connections[self.conn_index]

    @property
    def remaining(self) -> list[Connection]:
        return self.connections[self.conn_index :]

    @property
    def done(self) -> bool:
        return self.conn_index >= len(self.connections)

    def involves(self, order: int) -> bool:
        return self.focused_card == order or any(
            conn.order == order for conn in self.remaining
        )

    def __repr__(self):
        return (
            f"WaitingConnection(focus={self.focused_card}, inference={tuple(self.inference)}, "
            f"connections={self.remaining})"
        )


class Link:
    """Cards that between them hold `identities`, without knowing which is which."""

    def __init__(self, orders: list[int], identities: list[Identity], promised: bool = False) -> None:
        self.orders = list(orders)
        self.identities = list(identities)
        self.promised = promised

    def __eq__(self, other):
        return (
            isinstance(other, Link)
            and sorted(self.orders) == sorted(other.orders)
            and sorted(self.identities) == sorted(other.identities)
            and self.promised == other.promised
        )

    def __repr__(self):
        return f"Link({self.orders}, {[tuple(i) for i in self.identities]}, promised={self.promised})"
