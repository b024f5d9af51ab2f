import io
import json

from hanabi import make_deck
from replay import console, load_replay, match_player, replay_game
from variants import NO_VARIANT

PLAYERS = ["Alice", "Bob", "Cathy"]


def export(actions):
    deck = [{"suitIndex": i.suit_index, "rank": i.rank} for i in make_deck(NO_VARIANT)]
    return {"players": PLAYERS, "deck": deck, "actions": actions, "options": {"variant": "No Variant"}}


# Alice plays her oldest card, a red 1, then the game is called off
DATA = export([{"type": 0, "target": 0}, {"type": 4, "target": 0, "value": 0}])


def test_load_replay(tmp_path):
    path = tmp_path / "game.json"
    path.write_text(json.dumps(DATA))
    assert load_replay(str(path))["players"] == PLAYERS


def test_replay_as_a_seat():
    game = replay_game(DATA, seat=1)
    assert game.state.our_player_index == 1
    assert game.state.play_stacks[0] == 1
    assert game.state.deck[5].identity() is None
    assert game.state.deck[0].identity() is not None


def test_navigate_back_to_the_start():
    game = replay_game(DATA, seat=0)
    assert game.navigate(1).state.play_stacks[0] == 0
    assert game.navigate(2).state.play_stacks[0] == 1


def test_match_player_is_fuzzy():
    game = replay_game(DATA, seat=0)
    assert match_player(game, "bob") == 1
    assert match_player(game, "Cathie") == 2


def test_console_commands():
    game = replay_game(DATA, seat=0)
    out = io.StringIO()
    console(game, game, io.StringIO("hnd Bob\nzzz\nnavigate 1\nnotes\nquit\nhand\n"), out)

    text = out.getvalue()
    assert "Bob's hand" in text
    assert "unknown command 'zzz'" in text
    assert "Alice's hand (turn 1)" in text
    # nothing after quit is read
    assert text.count("hand (turn") == 2
