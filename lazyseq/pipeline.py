"""
The Pipeline class, an immutable chain of operations over a lazily produced sequence of
(key, value) pairs.
"""
from contextlib import closing

import simdjson as json

from lazyseq import transformations
from lazyseq.base import Operation
from lazyseq.cache import Cache
from lazyseq.errors import ConfigurationError
from lazyseq.lineage import Lineage
from lazyseq.runner import run
from lazyseq.sources import Source, from_any
from lazyseq.transformations import BY_KEYS, BY_VALUES
from lazyseq.util import bind_arity, strict_equals

_MISSING = object()


def _check_position(index):
    # A negative position never matches, so it would drain the whole pipeline
    transformations._check_count("index", index)


class Pipeline(object):
    """
    Pipeline is a wrapper around a source of (key, value) pairs and the lineage of operations
    chained onto it.

    Pipelines are immutable: every operation returns a new Pipeline sharing the lineage of its
    parent, and iterating a pipeline never affects another. No operation runs before the
    pipeline is iterated or a terminal method (count, reduce, first, all, ...) is called.

    Keys are not unique. Iterating a pipeline yields its values, iterate() yields its pairs.
    """

    def __init__(self, source, lineage=None):
        """
        Takes a Source (or anything lazyseq.sources.from_any accepts) and an optional Lineage
        :param source: root of the pipeline
        :param lineage: operations applied to the source
        """
        self._source = source if isinstance(source, Source) else from_any(source)
        self._lineage = lineage

    def __iter__(self):
        """
        Iterate the values of the pipeline
        :return: iterator of values
        """
        return (value for _, value in self.iterate())

    def __contains__(self, value):
        return self.contains(value)

    def __repr__(self):
        lineage = repr(self._lineage) if self._lineage is not None else "Lineage: source"
        return "Pipeline({0!r}, {1})".format(self._source, lineage)

    def __str__(self):
        return self.__repr__()

    @property
    def source(self):
        return self._source

    @property
    def lineage(self):
        return self._lineage

    def iterate(self):
        """
        Iterate the (key, value) pairs of the pipeline. Operations are folded over the source
        when the first pair is pulled, never before.
        :return: generator of (key, value) tuples
        """
        sequence = self._source.iterate()
        if self._lineage is not None:
            sequence = self._lineage.evaluate(sequence)
        yield from sequence

    def chain(self, operation):
        """
        Return a new pipeline applying operation after the operations of this one. This
        pipeline is left untouched.
        :param operation: Operation to append
        :return: new Pipeline
        """
        if not isinstance(operation, Operation):
            raise ConfigurationError("expected an Operation, got {0!r}".format(operation))
        if self._lineage is None:
            lineage = Lineage(operation)
        else:
            lineage = self._lineage.chain(operation)
        return Pipeline(self._source, lineage)

    def _transform(self, *transforms):
        pipeline = self
        for transform in transforms:
            pipeline = pipeline.chain(transform)
        return pipeline

    def run(self, *operations):
        """
        Chain user supplied operations, see lazyseq.runner.run
        :param operations: Operation instances or callables over (key, value) pairs
        :return: new Pipeline
        """
        return run(self, *operations)

    def cache(self):
        """
        Wrap this pipeline into a replay buffer. The pairs it produces are computed once and
        shared by every consumer of the returned pipeline, which makes single pass sources such
        as file handles safe to iterate several times.

        >>> cached = seq(io.StringIO("abc")).cache()
        >>> cached.to_list()
        ['a', 'b', 'c']
        >>> cached.count()
        3

        :return: new Pipeline rooted on a Cache
        """
        return Pipeline(Cache(self))

    # Streaming operations

    def map(self, *funcs):
        """
        Maps each value with every func, in order. Callbacks receive (value, key) trimmed to
        their arity.

        >>> seq([1, 2, 3]).map(lambda x: x * 2).to_list()
        [2, 4, 6]

        :param funcs: functions to map with
        :return: new Pipeline
        """
        return self._transform(transformations.map_t(*funcs))

    def filter(self, *funcs):
        """
        Keeps the pairs for which every func is truthy, or truthy values when no func is given.

        >>> seq([1, 0, 2, None]).filter().to_list()
        [1, 2]

        :param funcs: predicates
        :return: new Pipeline
        """
        return self._transform(transformations.filter_t(*funcs))

    def limit(self, count, offset=0):
        """
        Keeps count pairs after skipping offset pairs. limit(0) raises OutOfBoundsError.

        >>> seq(range(10)).limit(3, 2).to_list()
        [2, 3, 4]

        :param count: number of pairs
        :param offset: pairs skipped first
        :return: new Pipeline
        """
        return self._transform(transformations.limit_t(count, offset))

    def drop(self, *counts):
        return self._transform(transformations.drop_t(*counts))

    def slice(self, offset, length=None):
        return self._transform(transformations.slice_t(offset, length))

    def drop_while(self, *funcs):
        return self._transform(transformations.drop_while_t(*funcs))

    def take_while(self, *funcs):
        return self._transform(transformations.take_while_t(*funcs))

    def until(self, *funcs):
        return self._transform(transformations.until_t(*funcs))

    def since(self, *funcs):
        return self._transform(transformations.since_t(*funcs))

    def append(self, *items):
        """
        Appends items, keyed from 0

        >>> seq(["a"]).append("b", "c").to_pairs()
        [(0, 'a'), (0, 'b'), (1, 'c')]

        :param items: values to append
        :return: new Pipeline
        """
        return self._transform(transformations.append_t(*items))

    def prepend(self, *items):
        return self._transform(transformations.prepend_t(*items))

    def merge(self, *sources):
        return self._transform(transformations.merge_t(*sources))

    def keys(self):
        """
        The keys of the pipeline become its values

        >>> seq({"a": 1, "b": 2}).keys().to_list()
        ['a', 'b']

        :return: new Pipeline
        """
        return self._transform(transformations.keys_t())

    def flip(self):
        return self._transform(transformations.flip_t())

    def normalize(self):
        """
        Re-key the pairs sequentially from 0
        :return: new Pipeline
        """
        return self._transform(transformations.normalize_t())

    def zip(self, *iterables):
        """
        Zips values with the values of each iterable, padding with None

        >>> seq(["A", "C", "E"]).zip(["B", "D", "F", "H"]).to_list()
        [['A', 'B'], ['C', 'D'], ['E', 'F'], [None, 'H']]

        :param iterables: iterables to zip with
        :return: new Pipeline
        """
        return self._transform(transformations.zip_t(*iterables))

    def unzip(self):
        return self._transform(transformations.unzip_t())

    def intersperse(self, element, every=1, start_at=0):
        """
        Inserts element before every value whose counter is a multiple of every. Output is
        keyed by original position.

        >>> seq("ABC").intersperse("-").to_list()
        ['-', 'A', '-', 'B', '-', 'C']

        :param element: value to insert
        :param every: cadence, must be >= 1
        :param start_at: initial counter, must be >= 0
        :return: new Pipeline
        """
        return self._transform(transformations.intersperse_t(element, every, start_at))

    def nth(self, step, offset=0):
        return self._transform(transformations.nth_t(step, offset))

    def pad(self, size, element):
        return self._transform(transformations.pad_t(size, element))

    def compact(self, *values):
        """
        Removes values strictly equal to one of values, None by default

        >>> seq(["a", None, False, 0]).compact(None, 0).to_list()
        ['a', False]

        :param values: values to remove
        :return: new Pipeline
        """
        return self._transform(transformations.compact_t(*values))

    def apply(self, *funcs):
        return self._transform(transformations.apply_t(*funcs))

    def if_then_else(self, condition, then, otherwise=None):
        return self._transform(transformations.if_then_else_t(condition, then, otherwise))

    def associate(self, key_func=None, value_func=None):
        return self._transform(transformations.associate_t(key_func, value_func))

    def column(self, column):
        return self._transform(transformations.column_t(column))

    def pluck(self, path, default=None):
        """
        Extracts a key or a dotted path from each value

        >>> seq([{"a": {"b": 1}}, {"a": {}}]).pluck("a.b", 0).to_list()
        [1, 0]

        :param path: key or dotted path, * walks every element of a level
        :param default: value used when the path does not resolve
        :return: new Pipeline
        """
        return self._transform(transformations.pluck_t(path, default))

    def diff(self, *values):
        return self._transform(transformations.diff_t(*values))

    def diff_keys(self, *keys):
        return self._transform(transformations.diff_keys_t(*keys))

    def forget(self, *keys):
        return self._transform(transformations.diff_keys_t(*keys))

    def intersect(self, *values):
        return self._transform(transformations.intersect_t(*values))

    def intersect_keys(self, *keys):
        return self._transform(transformations.intersect_keys_t(*keys))

    def combine(self, *keys):
        return self._transform(transformations.combine_t(*keys))

    def flatten(self, depth=float("inf")):
        return self._transform(transformations.flatten_t(depth))

    def collapse(self):
        return self._transform(transformations.collapse_t())

    def wrap(self):
        return self._transform(transformations.wrap_t())

    def unwrap(self):
        return self._transform(transformations.unwrap_t())

    def pack(self):
        return self._transform(transformations.pack_t())

    def unpack(self):
        return self._transform(transformations.unpack_t())

    def pair(self):
        return self._transform(transformations.pair_t())

    def unpair(self):
        return self._transform(transformations.unpair_t())

    def reduction(self, func, initial=None):
        """
        Emits the running result of a left fold

        >>> seq(range(1, 6)).reduction(lambda carry, v: carry + v, 0).to_list()
        [1, 3, 6, 10, 15]

        :param func: callback receiving (carry, value, key)
        :param initial: initial carry
        :return: new Pipeline
        """
        return self._transform(transformations.reduction_t(func, initial))

    def scale(self, lower, upper, wanted_lower=0.0, wanted_upper=1.0, base=None):
        return self._transform(
            transformations.scale_t(lower, upper, wanted_lower, wanted_upper, base)
        )

    def product(self, *iterables):
        return self._transform(transformations.product_t(*iterables))

    def rsample(self, probability, seed=None):
        return self._transform(transformations.rsample_t(probability, seed))

    def init(self):
        return self._transform(transformations.init_t())

    def tail(self):
        return self._transform(transformations.tail_t())

    # Buffering operations

    def distinct(self):
        """
        Keeps the first pair of each value under strict structural equality (1, 1.0 and True
        are three different values). Keys are preserved.

        >>> seq([1, 1, 2, 2, 3, 3]).distinct().to_pairs()
        [(0, 1), (2, 2), (4, 3)]

        :return: new Pipeline
        """
        return self._transform(transformations.distinct_t())

    def window(self, size):
        """
        Emits each value together with the size values preceding it. window(0) is a
        passthrough.

        >>> seq("abcd").window(1).to_list()
        [['a'], ['a', 'b'], ['b', 'c'], ['c', 'd']]

        :param size: number of preceding values
        :return: new Pipeline
        """
        return self._transform(transformations.window_t(size))

    def split(self, *funcs):
        """
        Starts a new chunk at every value matching one of funcs

        >>> seq(range(1, 8)).split(lambda v: v % 3 == 0).to_list()
        [[1, 2], [3, 4, 5], [6, 7]]

        :param funcs: predicates receiving (value, key)
        :return: new Pipeline
        """
        return self._transform(transformations.split_t(*funcs))

    def explode(self, *values):
        return self._transform(transformations.explode_t(*values))

    def chunk(self, size, step=None):
        """
        Groups values in lists of size, each starting step values after the previous one

        >>> seq("ABCDEF").chunk(2).to_list()
        [['A', 'B'], ['C', 'D'], ['E', 'F']]
        >>> seq("ABCDEF").chunk(0).to_list()
        []

        :param size: values per chunk
        :param step: distance between chunk starts, defaults to size
        :return: new Pipeline
        """
        return self._transform(transformations.chunk_t(size, step))

    def cycle(self, times=None):
        """
        Repeats the pipeline forever, or times times. The first pass is recorded in memory.

        >>> seq([1, 2]).cycle().limit(5).to_list()
        [1, 2, 1, 2, 1]

        :param times: number of passes, None for infinite
        :return: new Pipeline
        """
        return self._transform(transformations.cycle_t(times))

    def sort(self, by=BY_VALUES, comparator=None):
        """
        Stable sort of the pairs by value or by key. Materializes the pipeline.

        >>> seq({"a": 3, "b": 1}).sort().to_pairs()
        [('b', 1), ('a', 3)]

        :param by: transformations.BY_VALUES or transformations.BY_KEYS
        :param comparator: cmp style function (left, right) -> int
        :return: new Pipeline
        """
        return self._transform(transformations.sort_t(by, comparator))

    def sort_keys(self, comparator=None):
        return self.sort(BY_KEYS, comparator)

    def reverse(self):
        return self._transform(transformations.reverse_t())

    def group(self, func=None):
        return self._transform(transformations.group_t(func))

    def frequency(self):
        return self._transform(transformations.frequency_t())

    def transpose(self):
        return self._transform(transformations.transpose_t())

    def permutate(self):
        return self._transform(transformations.permutate_t())

    def combinate(self, length=None):
        return self._transform(transformations.combinate_t(length))

    def shuffle(self, seed=None):
        return self._transform(transformations.shuffle_t(seed))

    def random(self, size=1, seed=None):
        return self._transform(transformations.random_t(size, seed))

    # Terminals

    def count(self):
        """
        Counts the pairs, consuming the whole pipeline

        >>> seq("abc").count()
        3

        :return: number of pairs
        """
        return sum(1 for _ in self.iterate())

    def fold_left(self, func, initial=None):
        """
        Reduces the pipeline from the left

        >>> seq("ABC").fold_left(lambda carry, v: carry + v, "")
        'ABC'

        :param func: callback receiving (carry, value, key)
        :param initial: initial carry
        :return: folded value
        """
        callback = bind_arity(func)
        carry = initial
        for key, value in self.iterate():
            carry = callback(carry, value, key)
        return carry

    def reduce(self, func, initial=None):
        return self.fold_left(func, initial)

    def fold_right(self, func, initial=None):
        """
        Reduces the pipeline from the right. This is a left fold over the reversed pipeline, so
        the whole pipeline is materialized first and an infinite pipeline never returns.

        >>> seq("ABC").fold_right(lambda carry, v: carry + v, "")
        'CBA'

        :param func: callback receiving (carry, value, key)
        :param initial: initial carry
        :return: folded value
        """
        return self.reverse().fold_left(func, initial)

    def for_each(self, func):
        """
        Calls func with (value, key) on every pair, consuming the pipeline
        :param func: callback
        """
        callback = bind_arity(func)
        for key, value in self.iterate():
            callback(value, key)

    def first(self, default=None):
        """
        Returns the first value, only pulling a single pair

        >>> seq([1, 2, 3]).first()
        1

        :param default: returned when the pipeline is empty
        :return: first value
        """
        return self.current(0, default)

    def head(self, default=None):
        return self.first(default)

    def last(self, default=None):
        value = default
        for value in self:
            pass
        return value

    def current(self, index=0, default=None):
        """
        Returns the value at position index, pulling no further
        :param index: position
        :param default: returned when the pipeline is shorter
        :return: value
        """
        _check_position(index)
        with closing(self.iterate()) as pairs:
            for position, (_, value) in enumerate(pairs):
                if position == index:
                    return value
        return default

    def key(self, index=0, default=None):
        """
        Returns the key at position index, pulling no further
        :param index: position
        :param default: returned when the pipeline is shorter
        :return: key
        """
        _check_position(index)
        with closing(self.iterate()) as pairs:
            for position, (key, _) in enumerate(pairs):
                if position == index:
                    return key
        return default

    def get(self, key, default=None):
        """
        Returns the value of the first pair whose key is key, stopping as soon as it is found

        >>> seq("ABCDE").get(4)
        'E'

        :param key: key to look for
        :param default: returned when no pair has key
        :return: value
        """
        with closing(self.iterate()) as pairs:
            for candidate, value in pairs:
                if strict_equals(candidate, key):
                    return value
        return default

    def contains(self, *values):
        """
        True when every value is in the pipeline, under strict structural equality. Stops
        pulling as soon as all values were seen, so it terminates on infinite pipelines
        containing them.

        >>> seq("ABC").contains("C", "A")
        True

        :param values: values to look for
        :return: bool
        """
        if not values:
            raise ConfigurationError("contains requires at least one value")
        missing = list(values)
        with closing(self.iterate()) as pairs:
            for _, value in pairs:
                missing = [wanted for wanted in missing if not strict_equals(wanted, value)]
                if not missing:
                    return True
        return False

    def has(self, func):
        """
        True when func is truthy for at least one pair, stops at the first match
        :param func: predicate receiving (value, key)
        :return: bool
        """
        callback = bind_arity(func)
        with closing(self.iterate()) as pairs:
            return any(callback(value, key) for key, value in pairs)

    def truthy(self):
        with closing(self.iterate()) as pairs:
            return all(value for _, value in pairs)

    def falsy(self):
        with closing(self.iterate()) as pairs:
            return not any(value for _, value in pairs)

    def nullsy(self):
        with closing(self.iterate()) as pairs:
            return all(value is None for _, value in pairs)

    def implode(self, separator=""):
        """
        Joins the values into a string, or into bytes when every value is bytes

        >>> seq(["A", "B", "C"]).implode("-")
        'A-B-C'

        :param separator: string put between values
        :return: str or bytes
        """
        values = self.to_list()
        if values and all(isinstance(value, bytes) for value in values):
            if isinstance(separator, str):
                separator = separator.encode()
            return separator.join(values)
        return separator.join(str(value) for value in values)

    def all(self):
        """
        Materializes the pipeline into a dict. Duplicate keys collapse and the last pair
        written wins, unlike the pipeline itself which keeps every pair.

        >>> seq.from_pairs([("a", 1), ("a", 2)]).all()
        {'a': 2}

        :return: dict
        """
        return dict(self.iterate())

    def to_list(self):
        """
        Materializes the values of the pipeline into a list
        :return: list
        """
        return list(self)

    def list(self):
        return self.to_list()

    def to_pairs(self):
        """
        Materializes the pairs of the pipeline into a list of tuples, keeping duplicate keys
        :return: list of (key, value) tuples
        """
        return list(self.iterate())

    def to_json(self):
        """
        Encodes all() as JSON
        :return: JSON string
        """
        return json.dumps(self.all())
