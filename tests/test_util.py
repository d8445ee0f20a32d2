from collections import namedtuple

from lazyseq import seq
from lazyseq.util import (
    StrictSet,
    bind_arity,
    is_namedtuple,
    is_nested,
    is_primitive,
    name,
    pairs_of,
    split_every,
    strict_equals,
    strict_key,
)


class TestStrictEquality:
    def test_types_must_match(self):
        assert strict_equals(1, 1)
        assert not strict_equals(1, 1.0)
        assert not strict_equals(1, True)
        assert not strict_equals([1], (1,))

    def test_containers_are_compared_recursively(self):
        assert strict_equals({"a": [1, (2, "b")]}, {"a": [1, (2, "b")]})
        assert not strict_equals({"a": [1]}, {"a": [True]})
        assert not strict_equals([1, 2], [1, 2, 3])
        assert strict_equals({1, 2}, {2, 1})
        assert not strict_equals({1}, {1.0})

    def test_strict_key(self):
        assert strict_key(1) != strict_key(True)
        assert strict_key((1, "a")) == strict_key((1, "a"))
        assert strict_key(frozenset([1])) == strict_key(frozenset([1]))

    def test_strict_set(self):
        values = StrictSet([1, [1], {"a": 1}])
        assert 1 in values
        assert True not in values
        assert [1] in values
        assert [True] not in values
        assert {"a": 1} in values
        assert len(values) == 3


class TestHelpers:
    def test_is_primitive(self):
        assert is_primitive(1)
        assert is_primitive("a")
        assert not is_primitive([])

    def test_is_namedtuple(self):
        Point = namedtuple("Point", ["x", "y"])
        assert is_namedtuple(Point(1, 2))
        assert not is_namedtuple((1, 2))

    def test_is_nested(self):
        assert is_nested([1])
        assert is_nested((1,))
        assert is_nested({"a": 1})
        assert is_nested(seq([1]))
        assert not is_nested("ab")
        assert not is_nested(1)

    def test_pairs_of(self):
        assert list(pairs_of({"a": 1})) == [("a", 1)]
        assert list(pairs_of(["x"])) == [(0, "x")]
        assert list(pairs_of(seq({"k": "v"}))) == [("k", "v")]

    def test_split_every(self):
        assert list(split_every(2, iter([1, 2, 3]))) == [[1, 2], [3]]

    def test_name(self):
        def named():
            pass

        assert name(named) == "named"
        assert name(str) == "str"


class TestBindArity:
    def test_trims_arguments(self):
        assert bind_arity(lambda v: v)(1, "k") == 1
        assert bind_arity(lambda v, k: (v, k))(1, "k", "extra") == (1, "k")
        assert bind_arity(lambda: "none")(1, "k") == "none"

    def test_variadic_callbacks_get_everything(self):
        assert bind_arity(lambda *args: args)(1, "k") == (1, "k")

    def test_keyword_only_parameters_are_ignored(self):
        assert bind_arity(lambda v, *, scale=2: v * scale)(3, "k") == 6

    def test_bound_methods(self):
        class Box:
            def __init__(self):
                self.seen = []

            def add(self, value, key):
                self.seen.append((key, value))

        box = Box()
        bind_arity(box.add)(1, "k", "extra")
        assert box.seen == [("k", 1)]

    def test_optional_parameters_keep_their_defaults(self):
        assert bind_arity(str.strip)(" a ", 0) == "a"
        assert bind_arity(str.split)("a b", 0) == ["a", "b"]
        assert bind_arity(round)(2.567, 0) == 3
        assert bind_arity(lambda v, k=None: (v, k))(1, "k") == (1, None)
        assert bind_arity(lambda v=5: v)(1, "k") == 1

    def test_builtin_callbacks_in_pipelines(self):
        assert seq([" a ", "b "]).map(str.strip).to_list() == ["a", "b"]
        assert seq(["a b"]).map(str.split).to_list() == [["a", "b"]]
        assert seq([2.567]).map(round).to_list() == [3]
        assert isinstance(seq([2.567]).map(round).first(), int)
        assert seq(["", "x"]).filter(str.strip).to_list() == ["x"]
