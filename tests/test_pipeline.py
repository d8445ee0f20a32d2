import io

import pytest
import simdjson

from lazyseq import Pipeline, seq
from lazyseq.errors import ConfigurationError, OutOfBoundsError
from lazyseq.transformations import map_t


def counting(log, values):
    """Generator function recording every value it produces."""

    def produce():
        for value in values:
            log.append(value)
            yield value

    return produce


class TestLaziness:
    def test_building_a_pipeline_pulls_nothing(self):
        log = []
        pipeline = seq.from_callable(counting(log, [1, 2, 3])).map(lambda v: v * 2).filter()
        assert log == []
        assert pipeline.to_list() == [2, 4, 6]
        assert log == [1, 2, 3]

    def test_first_pulls_a_single_pair(self):
        log = []
        mapped = []
        pipeline = seq.from_callable(counting(log, range(100))).map(
            lambda v: mapped.append(v) or v
        )
        assert pipeline.first() == 0
        assert log == [0]
        assert mapped == [0]

    def test_infinite_source_with_limit(self):
        assert seq.range().map(lambda v: v * 2).limit(3).to_list() == [0.0, 2.0, 4.0]

    def test_repr_does_not_evaluate(self):
        def boom():
            raise AssertionError("evaluated")
            yield  # pragma: no cover

        pipeline = seq.from_callable(boom).map(str).limit(2)
        text = repr(pipeline)
        assert "map(str)" in text
        assert "limit(2, 0)" in text


class TestImmutability:
    def test_operations_do_not_touch_the_parent(self):
        base = seq([3, 1, 2])
        ordered = base.sort()
        assert base.to_list() == [3, 1, 2]
        assert ordered.to_list() == [1, 2, 3]
        assert base.lineage is None
        assert len(ordered.lineage) == 1

    def test_branches_share_a_prefix_independently(self):
        base = seq(range(6)).map(lambda v: v + 1)
        evens = base.filter(lambda v: v % 2 == 0)
        odds = base.filter(lambda v: v % 2 == 1)
        assert evens.to_list() == [2, 4, 6]
        assert odds.to_list() == [1, 3, 5]
        assert base.to_list() == [1, 2, 3, 4, 5, 6]
        assert evens.lineage.parent is base.lineage
        assert odds.lineage.parent is base.lineage

    def test_iterating_twice_gives_the_same_result(self):
        pipeline = seq({"a": 1, "b": 2}).flip().distinct()
        assert pipeline.to_pairs() == pipeline.to_pairs()

    def test_chain_rejects_non_operations(self):
        with pytest.raises(ConfigurationError):
            seq([1]).chain(lambda pairs: pairs)

    def test_chain_accepts_transformations(self):
        assert seq([1, 2]).chain(map_t(lambda v: -v)).to_list() == [-1, -2]

    def test_pipeline_accepts_raw_input(self):
        assert Pipeline([1, 2]).to_list() == [1, 2]


class TestProperties:
    def test_sort_is_idempotent(self):
        pipeline = seq.from_pairs([("a", 3), ("b", 1), ("c", 2), ("d", 1)])
        assert pipeline.sort().sort().to_pairs() == pipeline.sort().to_pairs()

    def test_distinct_is_idempotent(self):
        pipeline = seq([1, 2, 1, 3, 2])
        assert pipeline.distinct().distinct().to_pairs() == pipeline.distinct().to_pairs()

    def test_flip_twice_restores_pairs(self):
        pipeline = seq({"a": 1, "b": 2})
        assert pipeline.flip().flip().to_pairs() == [("a", 1), ("b", 2)]

    def test_unzip_reverses_zip(self):
        zipped = seq([1, 2, 3]).zip(["a", "b"], [True])
        assert zipped.unzip().to_list() == [
            [1, 2, 3],
            ["a", "b", None],
            [True, None, None],
        ]

    def test_chunk_boundaries(self):
        assert seq("ABCDEF").chunk(2).to_list() == [["A", "B"], ["C", "D"], ["E", "F"]]
        assert seq("ABCDEF").chunk(0).to_list() == []

    def test_limit_zero_is_out_of_bounds(self):
        with pytest.raises(OutOfBoundsError):
            seq([1, 2, 3]).limit(0)
        assert issubclass(OutOfBoundsError, ConfigurationError)
        assert issubclass(OutOfBoundsError, IndexError)

    def test_distinct_keeps_first_seen_keys(self):
        assert seq([1, 1, 2, 2, 3, 3]).distinct().to_pairs() == [(0, 1), (2, 2), (4, 3)]

    def test_window_grows_then_slides(self):
        assert seq("abcdef").window(2).to_list() == [
            ["a"],
            ["a", "b"],
            ["a", "b", "c"],
            ["b", "c", "d"],
            ["c", "d", "e"],
            ["d", "e", "f"],
        ]


class TestTerminals:
    def test_count(self):
        assert seq("abc").count() == 3
        assert seq.empty().count() == 0

    def test_fold_left_and_reduce(self):
        assert seq("ABC").fold_left(lambda carry, v: carry + v, "") == "ABC"
        assert seq({"a": 1, "b": 2}).reduce(lambda carry, v, k: carry + k, "") == "ab"
        assert seq([1, 2, 3]).reduce(lambda carry, v: carry + v, 0) == 6

    def test_fold_right_reverses(self):
        assert seq("ABC").fold_right(lambda carry, v: carry + v, "") == "CBA"

    def test_first_head_last(self):
        assert seq([4, 5, 6]).first() == 4
        assert seq([4, 5, 6]).head() == 4
        assert seq([4, 5, 6]).last() == 6
        assert seq.empty().first("none") == "none"
        assert seq.empty().last("none") == "none"

    def test_current_and_key(self):
        assert seq("ABC").current(2) == "C"
        assert seq("ABC").current(5, "?") == "?"
        assert seq({"a": 1, "b": 2}).key(1) == "b"
        assert seq({"a": 1}).key(3) is None

    def test_current_and_key_reject_negative_positions(self):
        with pytest.raises(ConfigurationError):
            seq.range().current(-1)
        with pytest.raises(ConfigurationError):
            seq.range().key(-1)
        with pytest.raises(ConfigurationError):
            seq("ab").current("1")
        assert issubclass(ConfigurationError, ValueError)

    def test_get_uses_strict_keys(self):
        assert seq("ABCDE").get(4) == "E"
        assert seq.from_pairs([(1, "int"), (True, "bool")]).get(True) == "bool"
        assert seq({"a": 1}).get("z", 0) == 0

    def test_get_stops_on_infinite_sequences(self):
        assert seq.range().get(5) == 5.0

    def test_contains_requires_every_value(self):
        assert seq("ABC").contains("C", "A")
        assert not seq("ABC").contains("A", "Z")
        assert not seq([1.0]).contains(1)
        assert "B" in seq("ABC")
        assert seq.range().contains(3.0, 5.0)
        with pytest.raises(ConfigurationError):
            seq("ABC").contains()

    def test_has(self):
        assert seq([1, 2, 3]).has(lambda v: v > 2)
        assert not seq([1, 2, 3]).has(lambda v, k: k > 2)

    def test_truthy_falsy_nullsy(self):
        assert seq([1, "a"]).truthy()
        assert not seq([1, 0]).truthy()
        assert seq([0, None, ""]).falsy()
        assert seq([None, None]).nullsy()
        assert not seq([None, 0]).nullsy()
        assert seq.empty().truthy()

    def test_implode(self):
        assert seq(["A", "B", "C"]).implode("-") == "A-B-C"
        assert seq([1, 2]).implode(",") == "1,2"
        assert seq(b"abc").implode() == b"abc"

    def test_all_collapses_duplicate_keys(self):
        pipeline = seq.from_pairs([("a", 1), ("b", 2), ("a", 3)])
        assert pipeline.all() == {"a": 3, "b": 2}
        assert pipeline.to_pairs() == [("a", 1), ("b", 2), ("a", 3)]

    def test_to_json(self):
        assert simdjson.loads(seq({"a": 1, "b": [1, 2]}).to_json()) == {"a": 1, "b": [1, 2]}

    def test_for_each(self):
        seen = []
        seq({"a": 1, "b": 2}).for_each(lambda v, k: seen.append((k, v)))
        assert seen == [("a", 1), ("b", 2)]

    def test_callback_exceptions_propagate(self):
        def boom(value):
            raise KeyError(value)

        with pytest.raises(KeyError):
            seq([1]).map(boom).to_list()

    def test_short_circuit_releases_resources(self):
        handle = io.StringIO("abcdef")
        assert seq(handle).first() == "a"
        assert handle.closed
