"""
Build a game from hand lists and push actions through it the way the table
would. Hands are listed from slot 1; our own hand is always drawn unseen.
"""
from basics.identity_set import Identity
from game import Game
from utils import Action, Clue, ClueType, NullStream
from variants import NO_VARIANT, Variant, card_touched, short_forms

PLAYER_NAMES = ["Alice", "Bob", "Cathy", "Donald", "Emily"]
ALICE, BOB, CATHY, DONALD, EMILY = range(5)


def expand_short_card(short: str, variant: Variant = NO_VARIANT) -> Identity | None:
    if short == "xx":
        return None
    return Identity(short_forms(variant).index(short[0]), int(short[1]))


def setup_game(convention, hands: list[list[str]], our_player_index: int = ALICE, level: int | None = None, variant: Variant = NO_VARIANT) -> Game:
    names = PLAYER_NAMES[: len(hands)]
    game = Game(names, our_player_index, variant, convention() if level is None else convention(level), log=NullStream())
    game.catchup = True

    for player_index, hand in enumerate(hands):
        for short in reversed(hand):
            draw_card(game, player_index, None if player_index == our_player_index else short)
    return game


def draw_card(game: Game, player_index: int, short: str | None) -> int:
    order = game.state.card_order
    identity = None if short is None else expand_short_card(short, game.state.variant)
    if identity is None:
        game.handle_action(Action.draw(player_index, order), catchup=True)
    else:
        game.handle_action(Action.draw(player_index, order, identity.suit_index, identity.rank), catchup=True)
    return order


def end_turn(game: Game, player_index: int) -> None:
    state = game.state
    game.handle_action(Action.turn(state.turn_count, state.next_player_index(player_index)), catchup=True)


def clue(game: Game, giver: int, target: int, value: str | int, slots: list[int] | None = None) -> Action:
    """
    A colour (by name) or rank clue. Cards we can't see must be given by slot.
    """
    state = game.state
    if isinstance(value, int):
        given = Clue(ClueType.RANK, value)
    else:
        given = Clue(ClueType.COLOUR, [s.lower() for s in state.variant.suits].index(value))

    hand = state.hands[target]
    if slots is not None:
        touched = [hand[slot - 1] for slot in slots]
    else:
        touched = [o for o in hand if card_touched(state.deck[o], state.variant, given)]

    action = Action.make_clue(giver, target, touched, given)
    game.handle_action(action, catchup=True)
    end_turn(game, giver)
    return action


def play(game: Game, player_index: int, slot: int, short: str, draw: str | None = None) -> Action:
    return _leave_hand(game, player_index, slot, short, draw, Action.play)


def discard(game: Game, player_index: int, slot: int, short: str, draw: str | None = None, failed: bool = False) -> Action:
    def make(player_index, order, suit_index, rank):
        return Action.discard(player_index, order, suit_index, rank, failed=failed)

    return _leave_hand(game, player_index, slot, short, draw, make)


def _leave_hand(game, player_index, slot, short, draw, make) -> Action:
    """Our own draws are always unseen; other players only draw if told what."""
    state = game.state
    order = state.hands[player_index][slot - 1]
    identity = expand_short_card(short, state.variant)
    action = make(player_index, order, identity.suit_index, identity.rank)
    game.handle_action(action, catchup=True)

    if state.cards_left > 0 and (player_index == state.our_player_index or draw is not None):
        draw_card(game, player_index, None if player_index == state.our_player_index else draw)
    end_turn(game, player_index)
    return action
