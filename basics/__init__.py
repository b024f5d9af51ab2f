from .identity_set import Identity, IdentitySet
from .card import ActualCard, Card
from .hand import Hand
from .connection import Connection, ConnectionType, Link, WaitingConnection
from .state import State
from .player import COMMON_INDEX, Player
from .clue_result import ClueResult, clue_value, get_result

__all__ = [
    "Identity",
    "IdentitySet",
    "ActualCard",
    "Card",
    "Hand",
    "Connection",
    "ConnectionType",
    "Link",
    "WaitingConnection",
    "State",
    "COMMON_INDEX",
    "Player",
    "ClueResult",
    "clue_value",
    "get_result",
]
