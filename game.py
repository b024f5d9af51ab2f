import contextlib
import copy
import logging
import sys
from typing import TYPE_CHECKING, Final

from action_handler import RewindError, handle_action
from basics.player import COMMON_INDEX, Player
from basics.state import State
from utils import Action, Note, NoteLog, NullStream, bcolors, highlight, log_level
from variants import Variant

if TYPE_CHECKING:
    from conventions.base import Convention
    from utils import PerformAction

logger = logging.getLogger(__name__)

MAX_REWINDS: Final[int] = 50
MAX_REWIND_DEPTH: Final[int] = 2
MAX_COPY_DEPTH: Final[int] = 3


class Game:
    """
    One seat's view of a game: the table state, a Player per seat holding that
    seat's beliefs, and the common player holding what everyone knows.
    """

    state: State
    players: list[Player]
    common: Player

    def __init__(
        self,
        player_names: list[str],
        our_player_index: int,
        variant: Variant,
        convention: "Convention",
        log=sys.stdout,
        note_log: NoteLog | None = None,
    ):
        self.state = State(player_names, our_player_index, variant)
        num_suits, num_players = variant.num_suits, len(player_names)
        self.players = [Player(i, num_suits, num_players) for i in range(num_players)]
        self.common = Player(COMMON_INDEX, num_suits, num_players)
        self.convention = convention
        self.log = log
        self.note_log = note_log

        self.in_progress = True
        self.catchup = False
        self.last_actions: list[Action | None] = [None] * num_players
        self.ignored_orders: set[int] = set()
        self.notes: dict[int, Note] = {}

        self.rewinds = 0
        self.rewind_depth = 0
        self.copy_depth = 0

    @property
    def me(self) -> Player:
        return self.players[self.state.our_player_index]

    @property
    def all_players(self) -> list[Player]:
        return self.players + [self.common]

    @property
    def action_list(self) -> list[Action]:
        return self.state.action_list

    def handle_action(self, action: Action, catchup: bool = False) -> None:
        handle_action(self, action, catchup)

    def take_action(self) -> "PerformAction":
        return self.convention.take_action(self)

    def create_blank(self) -> "Game":
        """A fresh game with the same seats and convention, before any action."""
        blank = Game(
            self.state.player_names,
            self.state.our_player_index,
            self.state.variant,
            self.convention,
            log=NullStream(),
        )
        blank.note_log = None
        return blank

    def minimal_copy(self) -> "Game":
        """
        A copy that hypothetical actions can be applied to without touching this
        game. Card records are frozen and shared between the two.
        """
        if self.copy_depth > MAX_COPY_DEPTH:
            raise RecursionError("Maximum recursive depth reached")

        new = copy.copy(self)
        new.state = self.state.minimal_copy()
        new.players = [player.clone() for player in self.players]
        new.common = self.common.clone()
        new.last_actions = list(self.last_actions)
        new.ignored_orders = set(self.ignored_orders)
        new.notes = {}
        new.log = NullStream()
        new.note_log = None
        new.copy_depth = self.copy_depth + 1
        return new

    def simulate_clue(self, action: Action, enable_logs: bool = False) -> "Game":
        """The game as it would be after the clue is given and interpreted."""
        assert action.action_type == Action.ActionType.CLUE
        hypo_game = self.minimal_copy()
        hypo_game.catchup = True

        with contextlib.nullcontext() if enable_logs else log_level(logging.ERROR):
            hypo_game.handle_action(action, catchup=True)

        hypo_game.catchup = False
        return hypo_game

    def simulate_action(self, action: Action, draw: Action | None = None) -> "Game":
        """
        The game as it would be after any action, optionally followed by the
        draw that replaces a played or discarded card.
        """
        hypo_game = self.minimal_copy()
        hypo_game.catchup = True

        with log_level(logging.ERROR):
            hypo_game.handle_action(action, catchup=True)
            if draw is not None:
                hypo_game.handle_action(draw, catchup=True)

        hypo_game.catchup = False
        return hypo_game

    def _replay(self, actions: list[Action]) -> None:
        with log_level(logging.ERROR):
            for action in actions:
                self.handle_action(action, catchup=True)

    def rewind(self, action_index: int, rewind_action: Action | None = None) -> bool:
        """
        Rebuild this game from scratch, inserting `rewind_action` right after the
        action at `action_index` and replaying everything after it. Returns
        False if the index is out of range.
        """
        self.rewinds += 1
        if self.rewinds > MAX_REWINDS:
            raise RewindError("Attempted to rewind too many times!")

        if self.rewind_depth >= MAX_REWIND_DEPTH:
            raise RewindError("Rewind depth went too deep!")

        action_list = list(self.state.action_list)
        if action_index is None or not 0 <= action_index < len(action_list):
            logger.error("attempted to rewind to invalid action index %s", action_index)
            return False

        if rewind_action is not None and rewind_action in action_list[action_index : action_index + 2]:
            raise RewindError(f"Attempted to rewind {rewind_action} that was already rewinded!")

        logger.info(highlight(bcolors.OKCYAN, f"Rewinding to insert {rewind_action} after action {action_index}"))

        new_game = self.create_blank()
        new_game.rewinds = self.rewinds
        new_game.rewind_depth = self.rewind_depth + 1
        new_game.notes = self.notes
        new_game.catchup = True

        history = action_list[: action_index + 1]
        future = action_list[action_index + 1 :]

        new_game._replay(history)
        if rewind_action is not None:
            new_game._replay([rewind_action])
        new_game._replay(future[:-1])

        new_game.catchup = self.catchup
        new_game.log = self.log
        new_game.note_log = self.note_log
        if future:
            new_game.handle_action(future[-1], catchup=self.catchup)

        new_game.rewind_depth = self.rewind_depth
        new_game.copy_depth = self.copy_depth
        logger.info(highlight(bcolors.OKCYAN, "Rewind complete"))

        self.__dict__.update(new_game.__dict__)
        return True

    def navigate(self, turn: int) -> "Game":
        """
        A new game scrubbed to the start of `turn`, replaying received actions
        only. Corrections a rewind had inserted are derived again if the
        replayed actions call for them.
        """
        logger.info(highlight(bcolors.OKCYAN, f"Navigating to turn {turn}"))

        actions = [a for a in self.state.action_list if not a.synthetic]
        new_game = self.create_blank()
        new_game.catchup = True
        new_game.log = self.log

        with log_level(logging.ERROR):
            index = 0
            while index < len(actions) and new_game.state.turn_count < turn:
                new_game.handle_action(actions[index], catchup=True)
                index += 1
            # draws that happen before the next player acts belong to this turn
            while index < len(actions) and actions[index].action_type == Action.ActionType.DRAW:
                new_game.handle_action(actions[index], catchup=True)
                index += 1

        new_game.catchup = False
        return new_game

    def update_notes(self) -> None:
        """Append a line to each card's note whose text changed since last turn."""
        state = self.state
        for hand in state.hands:
            for order in hand:
                card = self.common.thoughts[order]
                if not card.saved:
                    continue

                text = card.get_note(state.variant)
                note = self.notes.get(order)
                if note is not None and note.last == text:
                    continue

                line = f"t{state.turn_count}: {text}"
                full = line if note is None else f"{note.full} | {line}"
                self.notes[order] = Note(state.turn_count, text, full)
                if self.note_log is not None:
                    self.note_log.log_note(order, line)
