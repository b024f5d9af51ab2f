from enum import Enum, IntEnum, unique
from typing import Final


class LEVEL(IntEnum):
    """Convention levels at which features switch on."""

    BASICS = 1
    FIX = 3
    SARCASTIC = 3
    BASIC_CM = 4
    INTERMEDIATE_FINESSES = 5
    TEMPO_CLUES = 6
    LAST_RESORTS = 7
    ENDGAME = 8
    STALLING = 9
    SPECIAL_DISCARDS = 10
    BLUFFS = 11
    CONTEXT = 12


@unique
class CLUE_INTERP(Enum):
    NONE = "none"
    MISTAKE = "mistake"
    PLAY = "play"
    SAVE = "save"
    STALL_5 = "5 stall"
    STALL_TEMPO = "tempo stall"
    STALL_LOCKED = "locked save"
    STALL_FILLIN = "fill-in"
    STALL_8CLUES = "8cs"
    STALL_BURN = "hard burn"
    FIX = "fix"
    CM_TRASH = "trash cm"
    CM_5 = "5cm"

    def __str__(self) -> str:
        return self.value


@unique
class PLAY_INTERP(Enum):
    NONE = "none"
    CM_ORDER = "order cm"


@unique
class DISCARD_INTERP(Enum):
    NONE = "none"
    SARCASTIC = "sarcastic"
    POS_DISCARD = "pos dc"
    MISPLAY = "misplay"


STALL_INDICES: Final[dict[CLUE_INTERP, int]] = {
    CLUE_INTERP.STALL_5: 0,
    CLUE_INTERP.STALL_TEMPO: 1,
    CLUE_INTERP.STALL_FILLIN: 2,
    CLUE_INTERP.STALL_LOCKED: 3,
    CLUE_INTERP.STALL_8CLUES: 4,
    CLUE_INTERP.STALL_BURN: 5,
}

# bound on layered finesses found while connecting a single identity
MAX_CONNECTION_DEPTH: Final[int] = 3


class ACTION_PRIORITY(IntEnum):
    """
    Kinds of urgent action, most pressing first. Actions for players we can
    still reach in time take these indices; the rest are offset by
    PRIORITY_SIZE.
    """

    UNLOCK = 0
    ONLY_SAVE = 1
    TRASH_FIX = 2
    URGENT_FIX = 3
    PLAY_OVER_SAVE = 4


PRIORITY_SIZE: Final[int] = len(ACTION_PRIORITY)
