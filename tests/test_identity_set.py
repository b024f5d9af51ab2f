from basics.identity_set import Identity, IdentitySet

R1, R2, Y1, P5 = Identity(0, 1), Identity(0, 2), Identity(1, 1), Identity(4, 5)


def test_create_defaults_to_everything():
    everything = IdentitySet.create(5)
    assert len(everything) == 25
    assert everything.has(P5)
    assert not IdentitySet.empty(5)


def test_set_algebra():
    ones = IdentitySet.create(5, [R1, Y1])
    assert ones.union(R2).array == [R1, R2, Y1]
    assert ones.subtract(R1).array == [Y1]
    assert ones.intersect([Y1, P5]).array == [Y1]
    assert (ones | R2) - R1 == IdentitySet.create(5, [R2, Y1])


def test_operations_return_new_sets():
    ones = IdentitySet.create(5, [R1, Y1])
    ones.subtract(R1)
    assert ones.has(R1)


def test_unknown_identities_are_ignored():
    unknown = Identity(-1, -1)
    assert len(IdentitySet.create(5, [unknown, R1])) == 1
    assert not IdentitySet.create(5).has(unknown)
    assert not IdentitySet.create(5).has(None)


def test_filter_and_predicates():
    reds = IdentitySet.create(5, [Identity(0, r) for r in range(1, 6)])
    low = reds.filter(lambda i: i.rank <= 2)
    assert low.equals([R1, R2])
    assert low.every(lambda i: i.suit_index == 0)
    assert not low.some(lambda i: i.rank == 5)


def test_iterates_in_suit_then_rank_order():
    mixed = IdentitySet.create(5, [P5, Y1, R2])
    assert list(mixed) == [R2, Y1, P5]
    assert R2 in mixed
