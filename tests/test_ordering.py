from __future__ import annotations

import pytest

from moonshot.screener.models import SortDirection, SortKey, SortSpec
from moonshot.screener.ordering import alert_rank, sort_records

from conftest import make_alert


def _ids(records) -> list[str]:
    return [r.id for r in records]


def test_pinned_records_should_precede_higher_scores(scored_factory) -> None:
    records = [scored_factory("bitcoin", score=50), scored_factory("dogecoin", score=-5)]
    ordered = sort_records(records, frozenset({"dogecoin"}), SortSpec(key=SortKey.SCORE, direction=SortDirection.DESC))
    assert _ids(ordered) == ["dogecoin", "bitcoin"]


@pytest.mark.parametrize("key", list(SortKey))
@pytest.mark.parametrize("direction", list(SortDirection))
def test_pins_should_win_for_every_key_and_direction(scored_factory, key, direction) -> None:
    records = [
        scored_factory("a", score=3, name="Alpha", current_price=3, holders=3),
        scored_factory("b", score=1, name="Beta", current_price=1, holders=1),
        scored_factory("c", score=2, name="Gamma", current_price=2, holders=2),
    ]
    ordered = sort_records(records, {"b"}, SortSpec(key=key, direction=direction))
    assert ordered[0].id == "b"


def test_sort_should_not_modify_input(scored_factory) -> None:
    records = [scored_factory("a", score=1), scored_factory("b", score=2)]
    before = list(records)
    result = sort_records(records, frozenset(), SortSpec())
    assert records == before
    assert result is not records


def test_numeric_sort_should_treat_missing_as_zero(scored_factory) -> None:
    records = [
        scored_factory("neg", total_volume=None, change_24h=-3),
        scored_factory("pos", total_volume=10, change_24h=4),
        scored_factory("none"),
    ]
    asc = sort_records(records, frozenset(), SortSpec(key=SortKey.CHANGE_24H, direction=SortDirection.ASC))
    assert _ids(asc) == ["neg", "none", "pos"]
    desc = sort_records(records, frozenset(), SortSpec(key=SortKey.VOLUME, direction=SortDirection.DESC))
    assert _ids(desc) == ["pos", "neg", "none"]


def test_name_sort_should_ignore_case(scored_factory) -> None:
    records = [scored_factory("z", name="zeta"), scored_factory("a", name="Alpha"), scored_factory("b", name="beta")]
    asc = sort_records(records, frozenset(), SortSpec(key=SortKey.NAME, direction=SortDirection.ASC))
    assert _ids(asc) == ["a", "b", "z"]
    desc = sort_records(records, frozenset(), SortSpec(key=SortKey.NAME, direction=SortDirection.DESC))
    assert _ids(desc) == ["z", "b", "a"]


def test_name_sort_should_collate_accented_names(scored_factory) -> None:
    records = [
        scored_factory("zeta", name="Zeta"),
        scored_factory("ether", name="Éther"),
        scored_factory("alpha", name="Alpha"),
    ]
    asc = sort_records(records, frozenset(), SortSpec(key=SortKey.NAME, direction=SortDirection.ASC))
    assert _ids(asc) == ["alpha", "ether", "zeta"]


def test_ties_should_keep_input_order_in_both_directions(scored_factory) -> None:
    records = [scored_factory(i, score=1.0) for i in ["c", "a", "b"]]
    for direction in SortDirection:
        ordered = sort_records(records, frozenset(), SortSpec(key=SortKey.SCORE, direction=direction))
        assert _ids(ordered) == ["c", "a", "b"]


def test_alert_rank_should_sort_as_plain_number(scored_factory) -> None:
    records = [
        scored_factory("first", alerts=(make_alert(1),)),
        scored_factory("none"),
        scored_factory("fifth", alerts=(make_alert(5), make_alert(2))),
    ]
    assert alert_rank(records[1]) == 0
    assert alert_rank(records[2]) == 5
    desc = sort_records(records, frozenset(), SortSpec(key=SortKey.ALERT_RANK, direction=SortDirection.DESC))
    assert _ids(desc) == ["fifth", "first", "none"]
    asc = sort_records(records, frozenset(), SortSpec(key=SortKey.ALERT_RANK, direction=SortDirection.ASC))
    assert _ids(asc) == ["none", "first", "fifth"]


def test_pinned_group_should_follow_sort_spec_internally(scored_factory) -> None:
    records = [
        scored_factory("a", score=1),
        scored_factory("b", score=9),
        scored_factory("c", score=5),
        scored_factory("d", score=7),
    ]
    ordered = sort_records(records, frozenset({"a", "c"}), SortSpec(key=SortKey.SCORE, direction=SortDirection.DESC))
    assert _ids(ordered) == ["c", "a", "b", "d"]


def test_sort_spec_toggle_should_flip_or_reset_direction() -> None:
    spec = SortSpec()
    assert spec.toggled(SortKey.SCORE).direction == SortDirection.ASC
    assert spec.toggled(SortKey.NAME) == SortSpec(key=SortKey.NAME, direction=SortDirection.DESC)
