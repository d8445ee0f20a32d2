import io

import pytest

from lazyseq import seq
from lazyseq.errors import InvalidSourceError
from lazyseq.sources import (
    CallableSource,
    EmptySource,
    IterableSource,
    ResourceSource,
    ScalarSource,
    StringSource,
    from_any,
)


class TestFromAny:
    @pytest.mark.parametrize(
        "data, expected",
        [
            (None, EmptySource),
            ("abc", StringSource),
            (b"abc", StringSource),
            ([1, 2], IterableSource),
            ({"a": 1}, IterableSource),
            (range(3), IterableSource),
            (lambda: iter([1]), CallableSource),
            (5, ScalarSource),
            (2.5, ScalarSource),
        ],
    )
    def test_dispatch(self, data, expected):
        assert isinstance(from_any(data), expected)

    def test_handles_become_resources(self):
        assert isinstance(from_any(io.StringIO("x")), ResourceSource)

    def test_sources_are_returned_as_is(self):
        source = EmptySource()
        assert from_any(source) is source

    def test_unknown_shapes_are_rejected(self):
        with pytest.raises(InvalidSourceError):
            from_any(object())
        assert issubclass(InvalidSourceError, TypeError)


class TestSources:
    def test_scalar_is_keyed_zero(self):
        assert seq(5).to_pairs() == [(0, 5)]

    def test_mapping_keeps_keys(self):
        assert seq({"b": 1, "a": 2}).to_pairs() == [("b", 1), ("a", 2)]

    def test_string_with_and_without_separator(self):
        assert seq("ab").to_list() == ["a", "b"]
        assert seq("a,b,c", ",").to_list() == ["a", "b", "c"]
        assert seq.from_string("a b", " ").to_list() == ["a", "b"]
        assert seq(b"ab").to_list() == [b"a", b"b"]

    def test_callable_with_arguments(self):
        assert seq(lambda n: range(n), 3).to_list() == [0, 1, 2]
        assert seq.from_callable(lambda n, step=1: range(0, n, step), 6, step=2).to_list() == [
            0,
            2,
            4,
        ]

    def test_callable_is_invoked_per_iteration(self):
        calls = []

        def produce():
            calls.append(1)
            yield "x"

        pipeline = seq(produce)
        assert calls == []
        assert pipeline.to_list() == ["x"]
        assert pipeline.to_list() == ["x"]
        assert len(calls) == 2

    def test_callable_must_return_an_iterable(self):
        with pytest.raises(InvalidSourceError):
            seq(lambda: 5).to_list()

    def test_pipeline_as_input(self):
        inner = seq({"a": 1}).map(lambda v: v + 1)
        assert seq(inner).to_pairs() == [("a", 2)]

    def test_lists_are_rewindable(self):
        pipeline = seq([1, 2])
        assert pipeline.source.rewindable
        assert pipeline.to_list() == pipeline.to_list()

    def test_iterators_can_only_be_read_once(self):
        pipeline = seq(x for x in range(3))
        assert not pipeline.source.rewindable
        assert pipeline.to_list() == [0, 1, 2]
        with pytest.raises(InvalidSourceError):
            pipeline.to_list()

    def test_from_pairs_keeps_duplicate_keys(self):
        assert seq.from_pairs([("a", 1), ("a", 2)]).keys().to_list() == ["a", "a"]


class TestResourceSource:
    def test_reads_characters_and_closes(self):
        handle = io.StringIO("abc")
        assert seq(handle).to_list() == ["a", "b", "c"]
        assert handle.closed

    def test_reads_bytes(self):
        assert seq.from_resource(io.BytesIO(b"ab")).to_pairs() == [(0, b"a"), (1, b"b")]

    def test_reads_larger_units(self):
        assert seq.from_resource(io.StringIO("abcde"), 2).to_list() == ["ab", "cd", "e"]

    def test_is_single_use(self):
        pipeline = seq(io.StringIO("abc"))
        assert not pipeline.source.rewindable
        assert pipeline.count() == 3
        with pytest.raises(InvalidSourceError):
            pipeline.count()

    def test_abandoned_iteration_closes_the_handle(self):
        handle = io.StringIO("abcdef")
        iterator = seq(handle).iterate()
        assert next(iterator) == (0, "a")
        assert not handle.closed
        iterator.close()
        assert handle.closed
