import logging
from typing import TYPE_CHECKING

from basics.helper import clear_newly_clued, on_draw
from basics.identity_set import Identity, IdentitySet
from state_proxy import produce
from utils import Action, bcolors, highlight, log_card, log_clue

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


class RewindError(RuntimeError):
    pass


class RewindEscape(Exception):
    """The game was rebuilt by a rewind while an action was being interpreted."""


def handle_action(game: "Game", action: Action, catchup: bool = False) -> None:
    """
    Apply one received action to the game. During catchup nothing is sent back
    to the table: no notes, no suggested actions.
    """
    state = game.state
    state.action_list.append(action)
    action_type = action.action_type

    if action_type in (Action.ActionType.PLAY, Action.ActionType.DISCARD):
        if action.order not in state.hands[action.player_index]:
            logger.error(
                "%s cannot %s card %s, it is not in their hand",
                state.player_names[action.player_index],
                action_type.display_name.lower(),
                action.order,
            )
            state.action_list.pop()
            return

    if action_type == Action.ActionType.CLUE:
        hand = state.hands[action.target]
        missing = [o for o in action.touched if o not in hand]
        if not action.touched or missing:
            logger.error(
                "clue to %s touches %s, not cards in their hand %s",
                state.player_names[action.target],
                missing or "nothing",
                list(hand),
            )
            state.action_list.pop()
            return

    try:
        match action_type:
            case Action.ActionType.CLUE:
                print(log_clue(action, state), file=game.log)
                game.convention.interpret_clue(game, action)
                game.last_actions[action.giver] = action
                clear_newly_clued(game, action.touched)

            case Action.ActionType.PLAY:
                name = state.player_names[action.player_index]
                print(f"{name} plays {log_card(action, state.variant)}", file=game.log)
                game.convention.interpret_play(game, action)
                game.last_actions[action.player_index] = action

            case Action.ActionType.DISCARD:
                name = state.player_names[action.player_index]
                verb = "bombs" if action.failed else "discards"
                print(f"{name} {verb} {log_card(action, state.variant)}", file=game.log)
                game.convention.interpret_discard(game, action)
                game.last_actions[action.player_index] = action

            case Action.ActionType.DRAW:
                on_draw(game, action)

            case Action.ActionType.TURN:
                game.convention.update_turn(game, action)
                state.turn_count += 1
                state.current_player_index = action.current_player_index
                if state.endgame_turns > 0:
                    state.endgame_turns -= 1

                if action.current_player_index == state.our_player_index and not catchup:
                    game.update_notes()
                    suggested = game.take_action()
                    logger.info(highlight(bcolors.OKCYAN, f"Suggested action: {suggested}"))

            case Action.ActionType.GAME_OVER:
                game.in_progress = False
                print(f"game over, score {state.score()}", file=game.log)

            case Action.ActionType.IDENTIFY:
                identify(game, action)

            case Action.ActionType.IGNORE:
                game.ignored_orders.add(action.order)

    except RewindEscape:
        logger.debug("stopped handling %s after rewind", action)
    except (RewindError, RecursionError) as err:
        logger.error("aborted handling %s: %s", action, err)
        action_list = game.state.action_list
        if action_list and action_list[-1] is action:
            action_list.pop()


def identify(game: "Game", action: Action) -> None:
    """
    Give a card its true identity retroactively. With `infer`, only the
    inferences change and the card stays unseen.
    """
    state = game.state
    order = action.order
    identities = [Identity(*i) for i in action.identities]
    assert state.holder_of(order) is not None, f"card {order} to identify is not in any hand"

    if len(identities) == 1 and not action.infer:
        identity = identities[0]
        state.deck[order] = _assign(state.deck[order], identity)

    inferred = IdentitySet.create(state.variant.num_suits, identities)
    for player in game.all_players:
        with player.edit(order) as draft:
            if len(identities) == 1 and not action.infer:
                draft.suit_index, draft.rank = identities[0]
            draft.inferred = inferred
            draft.rewinded = True

    logger.info(
        "identified card %d as %s",
        order,
        ",".join(log_card(i, state.variant) for i in identities),
    )


def _assign(card, identity: Identity):
    def recipe(draft):
        draft.suit_index, draft.rank = identity

    return produce(card, recipe)


def attempt_rewind(game: "Game", action_index: int, rewind_action: Action) -> bool:
    """Rewind, logging rather than raising if the rewind is refused."""
    try:
        return game.rewind(action_index, rewind_action)
    except RewindError as err:
        logger.error("rewind failed: %s", err)
        return False
