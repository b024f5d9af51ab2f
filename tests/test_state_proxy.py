import pytest

from basics.card import Card
from basics.identity_set import Identity, IdentitySet
from basics.player import Player
from state_proxy import DraftRevokedError, Freezable, FrozenError, current_scope, freeze, original, produce


class Record(Freezable):
    def __init__(self, name, tags):
        self.name = name
        self.tags = tags


def make_record():
    return freeze(Record("a", ["x"]))


def test_no_writes_returns_base():
    base = make_record()
    assert produce(base, lambda draft: None) is base


def test_writes_copy_and_freeze():
    base = make_record()

    def recipe(draft):
        draft.name = "b"
        draft.tags.append("y")

    result = produce(base, recipe)
    assert result is not base
    assert result.name == "b" and result.tags == ["x", "y"]
    assert base.name == "a" and base.tags == ["x"]
    assert result.frozen


def test_frozen_results_reject_writes():
    result = produce(make_record(), lambda draft: setattr(draft, "name", "b"))
    with pytest.raises(FrozenError):
        result.name = "c"
    with pytest.raises(FrozenError):
        result.tags.append("z")


def test_untouched_children_are_shared():
    base = freeze(Record("a", [["x"], ["y"]]))

    def recipe(draft):
        draft.tags[1].append("z")

    result = produce(base, recipe)
    assert result.tags[0] is base.tags[0]
    assert result.tags[1] == ["y", "z"]


def test_records_assigned_in_the_recipe_are_frozen():
    result = produce(make_record(), lambda draft: setattr(draft, "child", Record("fresh", ["z"])))

    assert result.child.frozen
    with pytest.raises(FrozenError):
        result.child.name = "mutated"
    with pytest.raises(FrozenError):
        result.child.tags.append("w")


def test_nested_produce_keeps_each_scope():
    base = freeze(Record("outer", [freeze(Record("inner", []))]))
    seen = []

    def inner_recipe(draft):
        seen.append(current_scope())
        draft.name = "inner2"

    def outer_recipe(draft):
        outer = current_scope()
        draft.tags[0] = produce(original(draft.tags[0]), inner_recipe)
        assert current_scope() is outer
        draft.name = "outer2"

    result = produce(base, outer_recipe)

    assert current_scope() is None
    assert seen[0] is not None
    assert result.name == "outer2"
    assert result.tags[0].name == "inner2" and result.tags[0].frozen
    assert base.tags[0].name == "inner"


def test_drafts_are_revoked_afterwards():
    leaked = []
    produce(make_record(), leaked.append)
    with pytest.raises(DraftRevokedError):
        leaked[0].name


def test_patches_are_reported():
    patches = []
    produce(make_record(), lambda draft: setattr(draft, "name", "b"), on_patches=patches.extend)
    assert patches == [(["name"], "a", "b")]


def test_player_edit_replaces_only_the_edited_card():
    player = Player(0, 5, 3)
    possible = IdentitySet.create(5)
    player.thoughts = [freeze(Card(-1, -1, possible, order=0)), freeze(Card(-1, -1, possible, order=1))]
    before = list(player.thoughts)

    with player.edit(0) as draft:
        draft.finessed = True
        draft.intersect("inferred", [Identity(0, 1)])

    assert player.thoughts[0].finessed
    assert player.thoughts[0].inferred.array == [Identity(0, 1)]
    assert not before[0].finessed
    assert player.thoughts[1] is before[1]
