from .endgame import ENDGAME_TIMEOUT, UnsolvedGame, find_endgame_action
from .rewind import check_rewind
from .sarcastic import find_sarcastic, interpret_sarcastic

__all__ = [
    "ENDGAME_TIMEOUT",
    "UnsolvedGame",
    "find_endgame_action",
    "check_rewind",
    "find_sarcastic",
    "interpret_sarcastic",
]
