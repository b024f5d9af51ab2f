"""
H-Group rules that only depend on the table and the common beliefs: focus,
chop, stall severity and where prompts and finesses land.
"""
import logging
from typing import TYPE_CHECKING, Iterable

from basics.hanabi_util import in_endgame, visible_find
from basics.identity_set import Identity
from utils import MAX_CLUE_TOKENS, ClueType, log_card
from variants import card_touched

if TYPE_CHECKING:
    from basics.hand import Hand
    from basics.player import Player
    from basics.state import State

logger = logging.getLogger(__name__)


def determine_focus(
    hand: "Hand", player: "Player", touched: Iterable[int], before_clue: bool = False
) -> tuple[int, bool]:
    """
    The card a clue is about and whether it was on chop:
      1. chop, if the clue touches it
      2. else the leftmost newly touched card
      3. else the leftmost chop moved card
      4. else the leftmost touched card

    Precondition:
      - at least one order in `touched` is in `hand`
    """
    touched = set(touched)
    thoughts = player.thoughts
    chop = hand.chop(thoughts, after_clue=not before_clue)

    if chop is not None and chop in touched:
        return chop, True

    def is_new(order):
        card = thoughts[order]
        if before_clue:
            return not card.clued and not card.finessed
        return card.newly_clued and not card.finessed

    for rule in (is_new, lambda o: thoughts[o].chop_moved, lambda o: True):
        for order in hand:
            if order in touched and rule(order):
                return order, False

    raise AssertionError(f"no focus among {sorted(touched)} in hand {list(hand)}")


def stall_severity(state: "State", common: "Player", giver: int) -> int:
    """
    How much pressure the giver was under before giving a clue:
      4 - 8 clue tokens
      3 - locked hand
      2 - endgame
      1 - early game
      0 - no stalling situation
    """
    if state.clue_tokens == MAX_CLUE_TOKENS and state.turn_count > 1:
        return 4
    if common.thinks_locked(state, giver):
        return 3
    if in_endgame(state):
        return 2
    if state.early_game:
        return 1
    return 0


def clue_matches(state: "State", clue, identity: Identity) -> bool:
    """Whether a clue already on a card is consistent with it being `identity`."""
    return card_touched(identity, state.variant, clue)


def find_prompt(
    state: "State",
    player: "Player",
    hand: "Hand",
    identity: Identity,
    connected: Iterable[int] = (),
    ignore: Iterable[int] = (),
) -> int | None:
    """
    The card that would be prompted as `identity`: the leftmost clued card that
    could be it and whose clues are consistent with it.
    """
    skip = set(connected) | set(ignore)
    for order in hand:
        card = player.thoughts[order]
        if not card.clued or order in skip:
            continue
        if player.id_of(card, infer=True) is not None:
            continue
        if not card.possible.has(identity):
            continue
        if all(clue_matches(state, clue, identity) for clue in card.clues):
            return order
    return None


def find_finesse(
    player: "Player", hand: "Hand", connected: Iterable[int] = (), ignore: Iterable[int] = ()
) -> int | None:
    """The leftmost card that is not clued, finessed or chop moved."""
    skip = set(connected) | set(ignore)
    for order in hand:
        card = player.thoughts[order]
        if card.clued or card.finessed or card.chop_moved or order in skip:
            continue
        return order
    return None


def order_1s(state: "State", player: "Player", orders: Iterable[int]) -> list[int]:
    """
    Unknown 1s in the order they should be played: finessed cards first, then
    from oldest to newest.
    """
    unknown_1s = [
        o for o in orders if player.thoughts[o].clues and all(
            c.type == ClueType.RANK and c.value == 1 for c in player.thoughts[o].clues
        )
    ]
    return sorted(unknown_1s, key=lambda o: (not player.thoughts[o].finessed, o))


def save2(state: "State", player: "Player", identity: Identity, order: int = -1, giver: int | None = None) -> bool:
    """
    A 2 with no other copy visible is worth saving. The giver cannot see their
    own hand, so a copy there only counts once everyone knows it.
    """
    if identity.rank != 2 or state.is_basic_trash(identity):
        return False
    symmetric = () if giver is None else (giver,)
    others = [o for o in visible_find(state, player, identity, symmetric=symmetric) if o != order]
    return len(others) == 0


def log_focus(state: "State", order: int) -> str:
    return f"{order} ({log_card(state.deck[order], state.variant)})"
