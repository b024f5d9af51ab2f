"""
Primitive updates every convention applies for each kind of action: what
the rules of the game say happens, with no interpretation.
"""
import logging
from typing import TYPE_CHECKING

from basics.card import ActualCard, Card
from basics.identity_set import Identity, IdentitySet
from state_proxy import freeze, produce
from utils import MAX_CLUE_TOKENS, Action, log_card
from variants import card_count, find_possibilities

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def on_clue(game: "Game", action: Action) -> None:
    state = game.state
    assert action.clue is not None and action.target is not None
    new_possible = find_possibilities(action.clue, state.variant)
    action_index = len(state.action_list) - 1

    for order in state.hands[action.target]:
        touched = order in action.touched

        if touched:
            state.deck[order] = produce(state.deck[order], lambda d: _mark_clued(d, action))

        for player in game.all_players:
            card = player.thoughts[order]
            with player.edit(order) as draft:
                if touched:
                    draft.intersect("possible", new_possible)
                    draft.intersect("inferred", new_possible)
                    _mark_clued(draft, action)
                    if len(draft.inferred) < len(card.inferred):
                        draft.reasoning = card.reasoning + [action_index]
                        draft.reasoning_turn = card.reasoning_turn + [state.turn_count]
                else:
                    draft.subtract("possible", new_possible)
                    draft.subtract("inferred", new_possible)

            if len(player.thoughts[order].inferred) == 0 and not player.thoughts[order].reset:
                player.reset_card(order)

    state.clue_tokens -= 1

    for player in game.all_players:
        player.card_elim(state)


def _mark_clued(draft, action: Action) -> None:
    if not draft.clued:
        draft.newly_clued = True
        draft.clued = True
    draft.clues = list(draft.clues) + [action.clue]


def clear_newly_clued(game: "Game", orders: list[int]) -> None:
    state = game.state
    for order in orders:
        if state.deck[order].newly_clued:
            state.deck[order] = produce(state.deck[order], _unmark_newly_clued)
        for player in game.all_players:
            if player.thoughts[order].newly_clued:
                player.update_thoughts(order, _unmark_newly_clued)


def _unmark_newly_clued(draft) -> None:
    draft.newly_clued = False


def reveal(game: "Game", order: int, identity: Identity) -> None:
    """
    Record a card's true identity in the deck and in every player's beliefs,
    so that all observers hold the same record for it.
    """
    state = game.state
    num_suits = state.variant.num_suits
    single = IdentitySet.create(num_suits, identity)

    def assign(draft):
        draft.suit_index = identity.suit_index
        draft.rank = identity.rank

    def assign_belief(draft):
        assign(draft)
        draft.possible = single
        draft.inferred = single

    state.deck[order] = produce(state.deck[order], assign)
    for player in game.all_players:
        player.update_thoughts(order, assign_belief)


def on_discard(game: "Game", action: Action) -> None:
    state = game.state
    identity = Identity(action.suit_index, action.rank)
    assert action.player_index is not None and action.order is not None

    state.hands[action.player_index].remove_order(action.order)
    reveal(game, action.order, identity)

    s, r = identity
    state.discard_stacks[s][r - 1] += 1

    if state.discard_stacks[s][r - 1] == card_count(state.variant, identity) and state.max_ranks[s] > r - 1:
        state.max_ranks[s] = r - 1
        logger.info("all copies of %s discarded, max rank now %d", log_card(identity, state.variant), r - 1)

    # bombs count as discards but give no clue token
    if action.failed:
        state.strikes += 1
    elif state.clue_tokens < MAX_CLUE_TOKENS:
        state.clue_tokens += 1

    for player in game.all_players:
        player.card_elim(state)
        player.refresh_links(state)


def on_play(game: "Game", action: Action) -> None:
    state = game.state
    identity = Identity(action.suit_index, action.rank)
    assert action.player_index is not None and action.order is not None

    state.hands[action.player_index].remove_order(action.order)
    reveal(game, action.order, identity)

    state.play_stacks[identity.suit_index] = identity.rank

    if identity.rank == 5 and state.clue_tokens < MAX_CLUE_TOKENS:
        state.clue_tokens += 1

    for player in game.all_players:
        player.card_elim(state)
        player.refresh_links(state)


def on_draw(game: "Game", action: Action) -> None:
    state = game.state
    order, player_index = action.order, action.player_index
    assert order is not None and player_index is not None
    drawn_index = len(state.action_list) - 1

    state.hands[player_index].insert(0, order)
    while len(state.deck) <= order:
        state.deck.append(freeze(ActualCard(-1, -1)))
    state.deck[order] = freeze(
        ActualCard(action.suit_index, action.rank, order=order, drawn_index=drawn_index)
    )

    for player in game.all_players:
        # players cannot see their own cards
        visible = player.player_index != player_index
        card = Card(
            action.suit_index if visible else -1,
            action.rank if visible else -1,
            possible=player.all_possible,
            inferred=player.all_inferred,
            order=order,
            drawn_index=drawn_index,
        )
        while len(player.thoughts) <= order:
            player.thoughts.append(None)
        player.thoughts[order] = freeze(card)

    state.card_order = max(state.card_order, order + 1)
    state.cards_left -= 1

    # everyone gets one more turn after the turn the last card is drawn on
    if state.cards_left == 0:
        state.endgame_turns = state.num_players + 1

    for player in game.all_players:
        player.card_elim(state)


def check_fix(game: "Game", old_thoughts: list[Card], action: Action, resets=()) -> bool:
    """
    Whether a clue fixes a card the team had the wrong idea about: a touched
    card lost every inference, was believed to be something it can't be, or
    turned out to duplicate another touched card.
    """
    state, common = game.state, game.common
    fix = False

    for order in action.touched:
        old_card = old_thoughts[order]
        card = common.thoughts[order]

        if old_card.touched:
            identity = common.id_of(old_card, infer=True)
            if order in resets or (card.reset and not old_card.reset):
                logger.info("card %d lost all inferences, fix clue", order)
                fix = True
            elif identity is not None and not card.possible.has(identity):
                logger.info("card %d is not %s, fix clue", order, log_card(identity, state.variant))
                fix = True

        if len(card.possible) != 1:
            continue
        identity = card.possible.array[0]
        duplicates = [
            o
            for hand in state.hands
            for o in hand
            if o != order
            and common.thoughts[o].touched
            and common.thoughts[o].matches(identity, infer=True, symmetric=True)
        ]
        if duplicates:
            logger.info("card %d revealed to duplicate %s, fix clue", order, duplicates)
            fix = True

    return fix
