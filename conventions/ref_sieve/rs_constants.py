from enum import Enum, unique


@unique
class CLUE_INTERP(Enum):
    NONE = "none"
    REF_PLAY = "ref play"
    REF_DC = "ref dc"
    LOCK = "lock"
    REVEAL = "reveal"
    RECLUE = "reclue"
    FIX = "fix"

    def __str__(self) -> str:
        return self.value


@unique
class DISCARD_INTERP(Enum):
    NONE = "none"
    SARCASTIC = "sarcastic"
    MISPLAY = "misplay"
