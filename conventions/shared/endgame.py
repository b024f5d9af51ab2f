"""
Searching for a winning line once the deck has run out. The search runs on a
worker thread over a snapshot of the table, so the live game is never touched
and a slow search can simply be abandoned.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import TYPE_CHECKING, Final, NamedTuple

from basics.identity_set import Identity
from utils import MAX_CLUE_TOKENS, PerformAction, log_card

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)

ENDGAME_TIMEOUT: Final[float] = 5.0
ENDGAME_MAX_DEPTH: Final[int] = 12


class UnsolvedGame(Exception):
    pass


class EndgameCard(NamedTuple):
    order: int
    identity: Identity | None
    # whether the holder knows what it is
    known: bool


class EndgameState(NamedTuple):
    play_stacks: tuple[int, ...]
    max_ranks: tuple[int, ...]
    hands: tuple[tuple[EndgameCard, ...], ...]
    clue_tokens: int
    turns_left: int
    current: int

    def playable(self, identity: Identity) -> bool:
        return identity.rank == self.play_stacks[identity.suit_index] + 1 and identity.rank <= self.max_ranks[identity.suit_index]

    def score(self) -> int:
        return sum(self.play_stacks)

    def won(self) -> bool:
        return self.score() == sum(self.max_ranks)


def snapshot(game: "Game", player_index: int) -> EndgameState:
    """
    The table with every card identity we can determine filled in.

    Raises UnsolvedGame if some identity is missing or cards are left to draw.
    """
    state = game.state
    if state.cards_left > 0:
        raise UnsolvedGame(f"{state.cards_left} cards left in the deck")

    hands = []
    for i, hand in enumerate(state.hands):
        cards = []
        for order in hand:
            identity = state.deck[order].identity()
            if identity is None:
                identity = game.me.thoughts[order].identity(infer=True)
            if identity is None:
                raise UnsolvedGame(f"couldn't determine card {order}")
            known = game.players[i].thoughts[order].identity(infer=True) is not None
            cards.append(EndgameCard(order, identity, known))
        hands.append(tuple(cards))

    turns_left = state.endgame_turns if state.endgame_turns >= 0 else state.num_players
    return EndgameState(
        tuple(state.play_stacks),
        tuple(state.max_ranks),
        tuple(hands),
        state.clue_tokens,
        turns_left,
        player_index,
    )


def _critical(es: EndgameState, identity: Identity) -> bool:
    if identity.rank <= es.play_stacks[identity.suit_index] or identity.rank > es.max_ranks[identity.suit_index]:
        return False
    return sum(1 for hand in es.hands for c in hand if c.identity == identity) <= 1


def _next_states(es: EndgameState) -> list[tuple[PerformAction, EndgameState]]:
    """
    Plays of known playable cards, a clue (only the turn it spends matters
    this late) and a discard of the oldest card that isn't critical.
    """
    num_players = len(es.hands)
    nxt = (es.current + 1) % num_players
    hand = es.hands[es.current]
    options = []

    def with_hand(i):
        new_hand = hand[:i] + hand[i + 1 :]
        return es.hands[: es.current] + (new_hand,) + es.hands[es.current + 1 :]

    for i, card in enumerate(hand):
        if card.known and es.playable(card.identity):
            stacks = list(es.play_stacks)
            stacks[card.identity.suit_index] = card.identity.rank
            tokens = es.clue_tokens
            if card.identity.rank == 5 and tokens < MAX_CLUE_TOKENS:
                tokens += 1
            options.append(
                (
                    PerformAction(PerformAction.ActionType.PLAY, card.order),
                    es._replace(
                        play_stacks=tuple(stacks),
                        hands=with_hand(i),
                        clue_tokens=tokens,
                        turns_left=es.turns_left - 1,
                        current=nxt,
                    ),
                )
            )

    if es.clue_tokens > 0:
        options.append(
            (
                PerformAction(PerformAction.ActionType.RANK, nxt),
                es._replace(clue_tokens=es.clue_tokens - 1, turns_left=es.turns_left - 1, current=nxt),
            )
        )

    if es.clue_tokens < MAX_CLUE_TOKENS:
        for i in range(len(hand) - 1, -1, -1):
            if not _critical(es, hand[i].identity):
                options.append(
                    (
                        PerformAction(PerformAction.ActionType.DISCARD, hand[i].order),
                        es._replace(
                            hands=with_hand(i),
                            clue_tokens=es.clue_tokens + 1,
                            turns_left=es.turns_left - 1,
                            current=nxt,
                        ),
                    )
                )
                break

    return options


def winnable(es: EndgameState, depth: int, deadline: float, cache: dict[EndgameState, bool]) -> bool:
    """Whether some line from here reaches the maximum score."""
    if es.won():
        return True
    if es.turns_left <= 0 or depth <= 0:
        return False
    if es in cache:
        return cache[es]
    if time.monotonic() > deadline:
        raise UnsolvedGame("timed out")

    # each missing card needs a turn of its own
    if sum(es.max_ranks) - es.score() > es.turns_left:
        cache[es] = False
        return False

    result = any(winnable(next_state, depth - 1, deadline, cache) for _, next_state in _next_states(es))
    cache[es] = result
    return result


def solve_game(es: EndgameState, deadline: float) -> PerformAction:
    """
    The first action of a winning line. A clue is returned without a value:
    any clue will do.

    Raises UnsolvedGame if there is no winning line within the search depth.
    """
    cache: dict[EndgameState, bool] = {}
    for action, next_state in _next_states(es):
        if winnable(next_state, ENDGAME_MAX_DEPTH - 1, deadline, cache):
            return action
    raise UnsolvedGame("couldn't find a winning strategy")


def find_endgame_action(game: "Game", timeout: float = ENDGAME_TIMEOUT) -> PerformAction | None:
    """
    A winning action for us, or None if none was found in time. The search
    runs on a worker thread and is abandoned on timeout.
    """
    try:
        es = snapshot(game, game.state.our_player_index)
    except UnsolvedGame as err:
        logger.info("not solving endgame: %s", err)
        return None

    deadline = time.monotonic() + timeout
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(solve_game, es, deadline)
    try:
        action = future.result(timeout=timeout)
    except UnsolvedGame as err:
        logger.info("endgame unsolved: %s", err)
        return None
    except FutureTimeout:
        logger.warning("endgame search timed out after %.1fs", timeout)
        return None
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    if action.type == PerformAction.ActionType.PLAY:
        logger.info("endgame winnable! playing %s", log_card(game.state.deck[action.target], game.state.variant))
    else:
        logger.info("endgame winnable! found action %s", action)
    return action
