from typing import TYPE_CHECKING, Iterable

from variants import card_count

if TYPE_CHECKING:
    from basics.identity_set import Identity
    from basics.player import Player
    from basics.state import State


def visible_find(
    state: "State",
    player: "Player",
    identity: "Identity",
    infer: Iterable[int] = (),
    ignore: Iterable[int] = (),
    symmetric: Iterable[int] = (),
) -> list[int]:
    """
    Orders of every card in a hand that `player` believes is `identity`.
    Hands listed in `infer` count inferred identities, hands in `ignore` are
    skipped, and hands in `symmetric` only count what everyone can deduce.
    """
    infer, ignore, symmetric = set(infer), set(ignore), set(symmetric)
    found = []
    for i, hand in enumerate(state.hands):
        if i in ignore:
            continue
        for order in hand:
            card = player.thoughts[order]
            if card.matches(identity, infer=i in infer, symmetric=i in symmetric):
                found.append(order)
    return found


def unknown_identities(state: "State", player: "Player", identity: "Identity") -> int:
    """Copies of an identity that are neither gone nor visible to the player."""
    visible = len(visible_find(state, player, identity))
    return card_count(state.variant, identity) - state.base_count(identity) - visible


def card_value(state: "State", player: "Player", identity: "Identity | None", order: int = -1) -> int:
    """
    How much the team loses if this card is discarded, from 0 (trash) to 5
    (critical).
    """
    if identity is None or identity.suit_index == -1:
        return 0

    if state.is_basic_trash(identity):
        return 0

    duplicates = [o for o in visible_find(state, player, identity, infer=range(state.num_players)) if o != order]
    if any(player.thoughts[o].touched for o in duplicates):
        return 0

    if state.is_critical(identity):
        return 5

    away = state.playable_away(identity)
    if not duplicates:
        return max(1, 4 - away)
    return max(1, 3 - away)


def get_pace(state: "State") -> int:
    return state.score() + state.cards_left + state.num_players - state.max_score()


def in_endgame(state: "State") -> bool:
    return state.cards_left == 0 or get_pace(state) < state.num_players
