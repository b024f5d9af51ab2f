import contextlib
import logging
from enum import Enum, IntEnum, unique
from typing import Final


MAX_CLUE_TOKENS: Final[int] = 8
MAX_STRIKES: Final[int] = 3

# indexed by number of players
HAND_SIZE: Final[list[int]] = [-1, -1, 5, 5, 4, 4, 3]


@unique
class ClueType(IntEnum):
    COLOUR = 0
    RANK = 1

    @property
    def display_name(self) -> str:
        return self.name.lower()


class Clue:
    def __init__(self, clue_type: ClueType, value: int) -> None:
        self.type = clue_type
        self.value = value

    def __eq__(self, other):
        return isinstance(other, Clue) and (self.type, self.value) == (
            other.type,
            other.value,
        )

    def __hash__(self):
        return hash((self.type, self.value))

    def __repr__(self):
        return f"Clue({self.type.display_name}, {self.value})"


class Action:
    """
    A game event as observed by one seat. Cards the observer cannot see carry
    suit_index and rank of -1.
    """

    @unique
    class ActionType(Enum):
        DRAW = 0
        CLUE = 1
        PLAY = 2
        DISCARD = 3
        TURN = 4
        GAME_OVER = 5
        IDENTIFY = 6
        IGNORE = 7

        @property
        def display_name(self) -> str:
            return self.name.replace("_", " ").title()

        def __str__(self) -> str:
            return str(self.value)

    action_type: ActionType

    def __init__(
        self,
        action_type: ActionType,
        player_index: int | None = None,
        order: int | None = None,
        suit_index: int = -1,
        rank: int = -1,
        failed: bool = False,
        giver: int | None = None,
        target: int | None = None,
        touched: list[int] | None = None,
        clue: Clue | None = None,
        num: int | None = None,
        current_player_index: int | None = None,
        identities: list | None = None,
        infer: bool = False,
        conv_index: int | None = None,
    ) -> None:
        self.action_type = action_type
        self.player_index = player_index
        self.order = order
        self.suit_index = suit_index
        self.rank = rank
        self.failed = failed
        self.giver = giver
        self.target = target
        self.touched = touched if touched is not None else []
        self.clue = clue
        self.num = num
        self.current_player_index = current_player_index
        self.identities = identities if identities is not None else []
        self.infer = infer
        self.conv_index = conv_index

    @classmethod
    def draw(cls, player_index, order, suit_index=-1, rank=-1):
        return cls(
            Action.ActionType.DRAW,
            player_index=player_index,
            order=order,
            suit_index=suit_index,
            rank=rank,
        )

    @classmethod
    def make_clue(cls, giver, target, touched, clue):
        return cls(
            Action.ActionType.CLUE,
            giver=giver,
            target=target,
            touched=list(touched),
            clue=clue,
        )

    @classmethod
    def play(cls, player_index, order, suit_index, rank):
        return cls(
            Action.ActionType.PLAY,
            player_index=player_index,
            order=order,
            suit_index=suit_index,
            rank=rank,
        )

    @classmethod
    def discard(cls, player_index, order, suit_index, rank, failed=False):
        return cls(
            Action.ActionType.DISCARD,
            player_index=player_index,
            order=order,
            suit_index=suit_index,
            rank=rank,
            failed=failed,
        )

    @classmethod
    def turn(cls, num, current_player_index):
        return cls(
            Action.ActionType.TURN, num=num, current_player_index=current_player_index
        )

    @classmethod
    def game_over(cls):
        return cls(Action.ActionType.GAME_OVER)

    @classmethod
    def identify(cls, order, player_index, identities, infer=False):
        return cls(
            Action.ActionType.IDENTIFY,
            order=order,
            player_index=player_index,
            identities=list(identities),
            infer=infer,
        )

    @classmethod
    def ignore(cls, order, player_index, conv_index):
        return cls(
            Action.ActionType.IGNORE,
            order=order,
            player_index=player_index,
            conv_index=conv_index,
        )

    @property
    def synthetic(self) -> bool:
        """Whether this action was injected by a rewind rather than received."""
        return self.action_type in (Action.ActionType.IDENTIFY, Action.ActionType.IGNORE)

    def _key(self):
        return (
            self.action_type,
            self.player_index,
            self.order,
            self.suit_index,
            self.rank,
            self.failed,
            self.giver,
            self.target,
            tuple(self.touched),
            self.clue,
            self.num,
            self.current_player_index,
            tuple(tuple(i) for i in self.identities),
            self.infer,
            self.conv_index,
        )

    def __eq__(self, other):
        return isinstance(other, Action) and self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        fields = {
            k: v
            for k, v in vars(self).items()
            if v is not None and v is not False and v != -1 and v != []
        }
        fields.pop("action_type", None)
        return f"Action({self.action_type.display_name}, {fields})"


class PerformAction:
    """An action the bot asks the table to perform on its behalf."""

    @unique
    class ActionType(IntEnum):
        PLAY = 0
        DISCARD = 1
        COLOUR = 2
        RANK = 3

    def __init__(self, action_type: ActionType, target: int, value: int | None = None):
        # target is a card order for plays and discards, a player index for clues
        self.type = action_type
        self.target = target
        self.value = value

    @property
    def is_clue(self) -> bool:
        return self.type in (PerformAction.ActionType.COLOUR, PerformAction.ActionType.RANK)

    def to_clue(self) -> Clue:
        assert self.is_clue and self.value is not None
        if self.type == PerformAction.ActionType.COLOUR:
            return Clue(ClueType.COLOUR, self.value)
        return Clue(ClueType.RANK, self.value)

    def __eq__(self, other):
        return isinstance(other, PerformAction) and (
            self.type,
            self.target,
            self.value,
        ) == (other.type, other.target, other.value)

    def __repr__(self):
        return f"PerformAction({self.type.name}, {self.target}, {self.value})"


class bcolors:
    HEADER = "\033[95m"
    OKBLUE = "\033[94m"
    OKCYAN = "\033[96m"
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"
    UNDERLINE = "\033[4m"


def highlight(colour: str, text: str) -> str:
    return f"{colour}{text}{bcolors.ENDC}"


class NullStream:
    def write(self, _):
        pass

    def flush(self):
        pass

    def writelines(self, _):
        pass


@contextlib.contextmanager
def log_level(level: int):
    """
    Temporarily raise the root logger's threshold to `level`. The previous level
    is restored even if the body raises.
    """
    root = logging.getLogger()
    previous = root.level
    root.setLevel(max(level, previous))
    try:
        yield
    finally:
        root.setLevel(previous)


def log_card(card, variant) -> str:
    """
    Short form of a card or identity, such as "r1". Unknown cards print as "xx".
    """
    from variants import short_forms

    if card is None or card.suit_index == -1 or card.rank == -1:
        return "xx"
    return short_forms(variant)[card.suit_index] + str(card.rank)


def log_identities(identities, variant) -> str:
    return ",".join(log_card(i, variant) for i in identities)


def log_hand(state, thoughts, player_index: int) -> list[str]:
    """
    One line per card in the given hand, newest first: the visible card (if any)
    followed by the observer's note on it.
    """
    lines = []
    for order in state.hands[player_index]:
        card = thoughts[order]
        visible = log_card(state.deck[order], state.variant)
        lines.append(f"{order}: {visible} [{card.get_note(state.variant)}]")
    return lines


def log_clue(action: Action, state) -> str:
    assert action.clue is not None
    clue = action.clue
    if clue.type == ClueType.COLOUR:
        value = state.variant.suits[clue.value].lower()
    else:
        value = str(clue.value)
    return f"{state.player_names[action.giver]} clues {value} to {state.player_names[action.target]}"


def log_perform_action(action: PerformAction, state) -> str:
    if action.type == PerformAction.ActionType.PLAY:
        holder = state.holder_of(action.target)
        slot = state.hands[holder].index(action.target) + 1
        return f"Play slot {slot} ({log_card(state.deck[action.target], state.variant)})"
    if action.type == PerformAction.ActionType.DISCARD:
        holder = state.holder_of(action.target)
        slot = state.hands[holder].index(action.target) + 1
        return f"Discard slot {slot} ({log_card(state.deck[action.target], state.variant)})"

    clue_action = Action.make_clue(state.our_player_index, action.target, [], action.to_clue())
    return log_clue(clue_action, state)


class Note:
    def __init__(self, turn: int, last: str, full: str) -> None:
        self.turn = turn
        self.last = last
        self.full = full

    def __repr__(self):
        return f"Note(t{self.turn}, {self.full!r})"


class NoteLog:
    outfile: str
    num_notes: int

    def __init__(self, outfile):
        """
        Appends every note the bot writes to `outfile`, one per line.
        """
        self.outfile = outfile
        self.num_notes = 0

    def log_game_start(self, player_names):
        with open(self.outfile, "a") as file:
            file.write(f"NEW: starting a new game with players {', '.join(player_names)}\n")

    def log_note(self, order: int, note: str):
        self.num_notes += 1
        with open(self.outfile, "a") as file:
            file.write(f"card {order}: {note}\n")
