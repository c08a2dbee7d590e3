from __future__ import annotations

from ringside_core import (
    Competitor,
    EngineConfig,
    EventEntry,
    ExplicitDivision,
    RingKey,
    interleave_by_school,
    order_pool_members,
    order_ring,
    rank_between,
    seed_by_height,
    set_rank_order,
    sub_ring_status,
)


def _forms(pool: str = "P1", rank: float | None = None) -> EventEntry:
    return EventEntry(
        participating=True,
        division=ExplicitDivision("Black Belt"),
        category_id="cat1",
        pool=pool,
        rank_order=rank,
    )


def _sparring(pool: str = "P1", sub_ring: str = "", rank: float | None = None) -> EventEntry:
    return EventEntry(
        participating=True,
        division=ExplicitDivision("Black Belt"),
        category_id="cat2",
        pool=pool,
        sub_ring=sub_ring,
        rank_order=rank,
    )


def _competitor(
    cid: str,
    school: str = "Alpha",
    branch: str | None = None,
    feet: int = 4,
    inches: int = 6,
    age: int = 10,
    forms: EventEntry | None = None,
    sparring: EventEntry | None = None,
) -> Competitor:
    return Competitor(
        id=cid,
        first_name=f"Name{cid}",
        last_name="Tester",
        age=age,
        gender="Male",
        height_feet=feet,
        height_inches=inches,
        school=school,
        branch=branch,
        forms=forms or _forms(),
        sparring=sparring or EventEntry(),
    )


def _ranks(ranked, event_type="forms"):
    return {c.id: c.entry(event_type).rank_order for c in ranked}


def _by_rank(ranked, event_type="forms"):
    return sorted(ranked, key=lambda c: c.entry(event_type).rank_order)


def test_forms_ranks_are_contiguous_from_one():
    members = [_competitor(str(i), school=f"S{i % 3}") for i in range(7)]
    ranked = order_pool_members(members, "forms")
    assert sorted(c.forms.rank_order for c in ranked) == [1, 2, 3, 4, 5, 6, 7]


def test_forms_order_is_independent_of_input_permutation():
    members = [
        _competitor("a1", school="Alpha", branch="North"),
        _competitor("a2", school="Alpha", branch="North"),
        _competitor("a3", school="Alpha", branch="South"),
        _competitor("b1", school="Beta"),
        _competitor("b2", school="Beta"),
        _competitor("c1", school="Gamma"),
        _competitor("d1", school="Delta"),
    ]
    first = _ranks(order_pool_members(members, "forms"))
    second = _ranks(order_pool_members(list(reversed(members)), "forms"))
    shuffled = members[3:] + members[:3]
    third = _ranks(order_pool_members(shuffled, "forms"))
    assert first == second == third


def test_two_schools_example_places_one_beta_in_first_three():
    members = [_competitor(f"a{i}", school="Alpha") for i in range(10)]
    members += [_competitor(f"b{i}", school="Beta") for i in range(3)]
    ordered = interleave_by_school(members)
    schools = [c.school for c in ordered]
    assert len(ordered) == 13
    assert schools[:3].count("Beta") == 1
    # Beta competitors never compete back-to-back.
    for left, right in zip(schools, schools[1:]):
        assert not (left == "Beta" and right == "Beta")


def test_first_three_are_distinct_schools_when_three_exist():
    members = [_competitor(f"a{i}", school="Alpha") for i in range(6)]
    members += [_competitor("b1", school="Beta"), _competitor("c1", school="Gamma")]
    ordered = interleave_by_school(members)
    assert len({c.school for c in ordered[:3]}) == 3


def test_school_comparison_ignores_case_and_whitespace():
    members = [
        _competitor("a1", school="Alpha"),
        _competitor("a2", school=" alpha "),
        _competitor("b1", school="Beta"),
    ]
    ordered = interleave_by_school(members)
    assert ordered[1].id == "b1"


def test_branches_of_same_school_alternate_when_only_one_school():
    members = [
        _competitor("n1", school="Alpha", branch="North"),
        _competitor("n2", school="Alpha", branch="North"),
        _competitor("s1", school="Alpha", branch="South"),
        _competitor("s2", school="Alpha", branch="South"),
    ]
    ordered = interleave_by_school(members)
    branches = [c.branch for c in ordered]
    for left, right in zip(branches, branches[1:]):
        assert left != right


def test_single_affiliation_ring_is_hash_ordered_and_complete():
    members = [_competitor(str(i), school="Solo") for i in range(5)]
    ordered = interleave_by_school(members)
    assert sorted(c.id for c in ordered) == sorted(c.id for c in members)
    assert [c.id for c in interleave_by_school(list(reversed(members)))] == [
        c.id for c in ordered
    ]


def test_diversity_seed_can_be_disabled():
    members = [_competitor(f"a{i}", school="Alpha") for i in range(4)]
    members.append(_competitor("b1", school="Beta"))
    ordered = interleave_by_school(members, EngineConfig(diversity_seed_size=0))
    assert len(ordered) == 5


def test_sparring_orders_by_height_ascending():
    members = [
        _competitor("p1", feet=4, inches=6, sparring=_sparring()),
        _competitor("p2", feet=5, inches=0, sparring=_sparring()),
        _competitor("p3", feet=4, inches=0, sparring=_sparring()),
    ]
    ranked = _by_rank(order_pool_members(members, "sparring"), "sparring")
    assert [c.id for c in ranked] == ["p3", "p1", "p2"]
    heights = [c.total_height_inches for c in ranked]
    assert heights == sorted(heights)
    assert [c.sparring.rank_order for c in ranked] == [1, 2, 3]


def test_sparring_order_is_deterministic_for_equal_heights():
    members = [_competitor(str(i), feet=5, inches=0, sparring=_sparring()) for i in range(4)]
    first = _ranks(order_pool_members(members, "sparring"), "sparring")
    second = _ranks(order_pool_members(list(reversed(members)), "sparring"), "sparring")
    assert first == second


def test_sparring_split_numbers_a_then_b_contiguously():
    members = [
        _competitor("a_tall", feet=5, inches=6, sparring=_sparring(sub_ring="a")),
        _competitor("b_short", feet=4, inches=0, sparring=_sparring(sub_ring="b")),
        _competitor("a_short", feet=4, inches=2, sparring=_sparring(sub_ring="a")),
        _competitor("b_tall", feet=5, inches=8, sparring=_sparring(sub_ring="b")),
        _competitor("b_mid", feet=5, inches=0, sparring=_sparring(sub_ring="b")),
    ]
    ranked = _by_rank(order_pool_members(members, "sparring"), "sparring")
    assert [c.id for c in ranked] == ["a_short", "a_tall", "b_short", "b_mid", "b_tall"]
    assert [c.sparring.sub_ring for c in ranked] == ["a", "a", "b", "b", "b"]
    assert [c.sparring.rank_order for c in ranked] == [1, 2, 3, 4, 5]


def test_mixed_sub_ring_tags_fall_back_to_whole_ring_height_order():
    members = [
        _competitor("p1", feet=5, inches=6, sparring=_sparring(sub_ring="a")),
        _competitor("p2", feet=4, inches=0, sparring=_sparring(sub_ring="")),
        _competitor("p3", feet=4, inches=9, sparring=_sparring(sub_ring="b")),
    ]
    ordered = seed_by_height(members)
    assert [c.id for c in ordered] == ["p2", "p3", "p1"]


def test_strict_mode_leaves_mixed_ring_unordered():
    members = [
        _competitor("p1", sparring=_sparring(sub_ring="a", rank=7)),
        _competitor("p2", sparring=_sparring(sub_ring="")),
    ]
    config = EngineConfig(strict_sub_rings=True)
    assert seed_by_height(members, config) is None
    ranked = order_pool_members(members, "sparring", config)
    assert _ranks(ranked, "sparring") == {"p1": 7, "p2": None}


def test_sub_ring_status_reports_counts():
    none = sub_ring_status([_competitor("p1", sparring=_sparring())])
    assert none.status == "none" and none.count_empty == 1

    split = sub_ring_status(
        [
            _competitor("p1", sparring=_sparring(sub_ring="a")),
            _competitor("p2", sparring=_sparring(sub_ring="b")),
        ]
    )
    assert split.status == "all" and split.is_split
    assert (split.count_a, split.count_b, split.count_empty) == (1, 1, 0)

    mixed = sub_ring_status(
        [
            _competitor("p1", sparring=_sparring(sub_ring="a")),
            _competitor("p2", sparring=_sparring(sub_ring="")),
        ]
    )
    assert mixed.status == "mixed" and mixed.needs_attention


def test_order_ring_only_touches_that_ring():
    competitors = [
        _competitor("p1", forms=_forms("P1")),
        _competitor("p2", school="Beta", forms=_forms("P1")),
        _competitor("p3", forms=_forms("P2", rank=3)),
    ]
    result = order_ring(competitors, RingKey("forms", "cat1", "P1"))
    assert [c.id for c in result] == ["p1", "p2", "p3"]
    assert sorted(c.forms.rank_order for c in result[:2]) == [1, 2]
    assert result[2].forms.rank_order == 3
    # Inputs are never mutated.
    assert competitors[0].forms.rank_order is None


def test_order_ring_with_no_members_returns_input():
    competitors = [_competitor("p1", forms=_forms("P1", rank=5))]
    result = order_ring(competitors, RingKey("forms", "other", "P1"))
    assert result == competitors


def test_rank_between_supports_fractional_insertion():
    assert rank_between(1, 2) == 1.5
    assert rank_between(None, 1) == 0.5
    assert rank_between(4, None) == 5
    assert rank_between(None, None) == 1


def test_set_rank_order_does_not_renumber_neighbours():
    competitors = [
        _competitor("p1", forms=_forms(rank=1)),
        _competitor("p2", forms=_forms(rank=2)),
        _competitor("p3", forms=_forms(rank=3)),
    ]
    result = set_rank_order(competitors, "p3", "forms", rank_between(1, 2))
    assert _ranks(result) == {"p1": 1, "p2": 2, "p3": 1.5}
