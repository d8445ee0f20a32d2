"""
Operations that can be chained onto a Pipeline.

Every factory in this module validates its parameters eagerly and returns a Transformation, an
immutable (name, function) pair where function maps an iterator of (key, value) tuples to a new
iterator of (key, value) tuples. The functions are generators: nothing is read from upstream
until the first pair is pulled from the result.

Operations are split in two families. Streaming operations keep O(1) state and only pull from
upstream as far as they need to produce their next output. Buffering operations (distinct,
window, split, chunk, cycle, sort, reverse, group, ...) accumulate state; the cost of each is
documented on its factory.
"""
import collections.abc
import math
import random
from contextlib import closing
from functools import cmp_to_key, partial
from itertools import (
    combinations,
    dropwhile,
    islice,
    permutations,
    product,
    takewhile,
    zip_longest,
)
from operator import itemgetter

from lazyseq.base import Operation
from lazyseq.errors import ConfigurationError, OutOfBoundsError
from lazyseq.util import (
    StrictSet,
    bind_arity,
    is_namedtuple,
    is_nested,
    name,
    pairs_of,
    split_every,
    strict_equals,
    strict_key,
)

BY_VALUES = "values"
BY_KEYS = "keys"
SORT_MODES = (BY_VALUES, BY_KEYS)

_MISSING = object()


class Transformation(collections.namedtuple("Transformation", ["name", "function"]), Operation):
    """
    Operation defined by a plain function over an iterator of (key, value) pairs
    """

    __slots__ = ()

    def apply(self, sequence):
        return self.function(sequence)


def _values(sequence):
    return (value for _, value in sequence)


def _names(functions):
    return ", ".join(name(function) for function in functions)


def _check_count(label, value, minimum=0):
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigurationError("{0} must be an int, got {1!r}".format(label, value))
    if value < minimum:
        raise ConfigurationError(
            "{0} must be >= {1}, got {2}".format(label, minimum, value)
        )


def _require_callbacks(label, funcs):
    if not funcs:
        raise ConfigurationError("{0} requires at least one callback".format(label))
    for func in funcs:
        if not callable(func):
            raise ConfigurationError(
                "{0} callbacks must be callable, got {1!r}".format(label, func)
            )
    return [bind_arity(func) for func in funcs]


# Streaming operations


def _map(callbacks, sequence):
    for key, value in sequence:
        for callback in callbacks:
            value = callback(value, key)
        yield key, value


def map_t(*funcs):
    """
    Transformation for Pipeline.map, callbacks are applied in order to each value
    :param funcs: callbacks called with (value, key)
    :return: transformation
    """
    return Transformation(
        "map({0})".format(_names(funcs)), partial(_map, _require_callbacks("map", funcs))
    )


def _filter(callbacks, sequence):
    for key, value in sequence:
        if callbacks is None:
            if value:
                yield key, value
        elif all(callback(value, key) for callback in callbacks):
            yield key, value


def filter_t(*funcs):
    """
    Transformation for Pipeline.filter. Keeps pairs for which every callback is truthy, or
    truthy values when no callback is given
    :param funcs: predicates called with (value, key)
    :return: transformation
    """
    callbacks = _require_callbacks("filter", funcs) if funcs else None
    return Transformation("filter({0})".format(_names(funcs)), partial(_filter, callbacks))


def limit_t(count, offset=0):
    """
    Transformation for Pipeline.limit. limit(0) is out of bounds.
    :param count: number of pairs to keep
    :param offset: number of pairs to skip first
    :return: transformation
    """
    _check_count("limit", count)
    _check_count("limit offset", offset)
    if count == 0:
        raise OutOfBoundsError("limit must be greater than 0")
    return Transformation(
        "limit({0}, {1})".format(count, offset),
        lambda sequence: islice(sequence, offset, offset + count),
    )


def drop_t(*counts):
    """
    Transformation for Pipeline.drop, skips the sum of counts pairs
    :param counts: number of pairs to skip
    :return: transformation
    """
    for count in counts:
        _check_count("drop", count)
    total = sum(counts)
    return Transformation(
        "drop({0})".format(total), lambda sequence: islice(sequence, total, None)
    )


def slice_t(offset, length=None):
    """
    Transformation for Pipeline.slice, keys are preserved
    :param offset: position of the first pair kept
    :param length: number of pairs kept, None for all remaining
    :return: transformation
    """
    _check_count("slice offset", offset)
    if length is not None:
        _check_count("slice length", length)
    stop = None if length is None else offset + length
    return Transformation(
        "slice({0}, {1})".format(offset, length),
        lambda sequence: islice(sequence, offset, stop),
    )


def drop_while_t(*funcs):
    callbacks = _require_callbacks("drop_while", funcs)
    return Transformation(
        "drop_while({0})".format(_names(funcs)),
        lambda sequence: dropwhile(
            lambda pair: all(callback(pair[1], pair[0]) for callback in callbacks), sequence
        ),
    )


def take_while_t(*funcs):
    callbacks = _require_callbacks("take_while", funcs)
    return Transformation(
        "take_while({0})".format(_names(funcs)),
        lambda sequence: takewhile(
            lambda pair: all(callback(pair[1], pair[0]) for callback in callbacks), sequence
        ),
    )


def _until(callbacks, sequence):
    for key, value in sequence:
        yield key, value
        if any(callback(value, key) for callback in callbacks):
            return


def until_t(*funcs):
    """
    Transformation for Pipeline.until, stops right after the first pair matching any callback
    :param funcs: predicates called with (value, key)
    :return: transformation
    """
    return Transformation(
        "until({0})".format(_names(funcs)), partial(_until, _require_callbacks("until", funcs))
    )


def _since(callbacks, sequence):
    started = False
    for key, value in sequence:
        if not started:
            started = all(callback(value, key) for callback in callbacks)
        if started:
            yield key, value


def since_t(*funcs):
    """
    Transformation for Pipeline.since, starts at the first pair matching every callback
    :param funcs: predicates called with (value, key)
    :return: transformation
    """
    return Transformation(
        "since({0})".format(_names(funcs)), partial(_since, _require_callbacks("since", funcs))
    )


def _append(items, sequence):
    yield from sequence
    yield from enumerate(items)


def append_t(*items):
    return Transformation("append", partial(_append, items))


def _prepend(items, sequence):
    yield from enumerate(items)
    yield from sequence


def prepend_t(*items):
    return Transformation("prepend", partial(_prepend, items))


def _merge(sources, sequence):
    yield from sequence
    for source in sources:
        yield from pairs_of(source)


def merge_t(*sources):
    """
    Transformation for Pipeline.merge. The pairs of each source follow the pairs of the
    sequence, keys are kept as is
    :param sources: mappings, iterables or pipelines
    :return: transformation
    """
    return Transformation("merge", partial(_merge, sources))


def keys_t():
    return Transformation(
        "keys", lambda sequence: ((index, key) for index, (key, _) in enumerate(sequence))
    )


def flip_t():
    return Transformation("flip", lambda sequence: ((value, key) for key, value in sequence))


def normalize_t():
    return Transformation("normalize", lambda sequence: enumerate(_values(sequence)))


def _zip(iterables, sequence):
    others = [_values(pairs_of(iterable)) for iterable in iterables]
    for index, row in enumerate(zip_longest(_values(sequence), *others)):
        yield index, list(row)


def zip_t(*iterables):
    """
    Transformation for Pipeline.zip. Emits lists of one value from the sequence and one from
    each iterable, padded with None up to the longest input
    :param iterables: iterables to zip with
    :return: transformation
    """
    return Transformation("zip", partial(_zip, iterables))


def _intersperse(element, every, start_at, sequence):
    for position, value in enumerate(_values(sequence)):
        if (position + start_at) % every == 0:
            yield position, element
        yield position, value


def intersperse_t(element, every=1, start_at=0):
    """
    Transformation for Pipeline.intersperse. Output is keyed by original position; element is
    inserted before every value whose counter (starting at start_at) is a multiple of every
    :param element: value to insert
    :param every: insertion cadence
    :param start_at: initial counter value
    :return: transformation
    """
    _check_count("intersperse every", every, minimum=1)
    _check_count("intersperse start_at", start_at)
    return Transformation(
        "intersperse({0!r}, {1}, {2})".format(element, every, start_at),
        partial(_intersperse, element, every, start_at),
    )


def nth_t(step, offset=0):
    _check_count("nth step", step, minimum=1)
    _check_count("nth offset", offset)
    return Transformation(
        "nth({0}, {1})".format(step, offset),
        lambda sequence: (
            pair for position, pair in enumerate(sequence) if position % step == offset
        ),
    )


def _pad(size, element, sequence):
    position = 0
    for pair in sequence:
        yield pair
        position += 1
    for position in range(position, size):
        yield position, element


def pad_t(size, element):
    """
    Transformation for Pipeline.pad. Appends element until the sequence holds size pairs; the
    padding pairs are keyed by their position in the output
    :param size: minimum length of the output
    :param element: padding value
    :return: transformation
    """
    _check_count("pad size", size)
    return Transformation("pad({0}, {1!r})".format(size, element), partial(_pad, size, element))


def compact_t(*values):
    """
    Transformation for Pipeline.compact, removes values strictly equal to one of values
    :param values: values to remove, None when not given
    :return: transformation
    """
    removed = StrictSet(values or (None,))
    return Transformation(
        "compact",
        lambda sequence: ((key, value) for key, value in sequence if value not in removed),
    )


def _apply(callbacks, sequence):
    for key, value in sequence:
        for callback in callbacks:
            callback(value, key)
        yield key, value


def apply_t(*funcs):
    """
    Transformation for Pipeline.apply, calls each callback for its side effects and passes the
    pair through unchanged
    :param funcs: callbacks called with (value, key)
    :return: transformation
    """
    return Transformation(
        "apply({0})".format(_names(funcs)), partial(_apply, _require_callbacks("apply", funcs))
    )


def if_then_else_t(condition, then, otherwise=None):
    condition_, then_ = _require_callbacks("if_then_else", (condition, then))
    otherwise_ = bind_arity(otherwise) if otherwise is not None else None

    def _if_then_else(sequence):
        for key, value in sequence:
            if condition_(value, key):
                yield key, then_(value, key)
            elif otherwise_ is not None:
                yield key, otherwise_(value, key)
            else:
                yield key, value

    return Transformation("if_then_else({0})".format(_names((condition, then))), _if_then_else)


def associate_t(key_func=None, value_func=None):
    """
    Transformation for Pipeline.associate. Unlike other callbacks, key_func and value_func are
    called with (key, value)
    :param key_func: builds the new key
    :param value_func: builds the new value
    :return: transformation
    """
    key_callback = bind_arity(key_func) if key_func is not None else (lambda key, value: key)
    value_callback = (
        bind_arity(value_func) if value_func is not None else (lambda key, value: value)
    )
    return Transformation(
        "associate",
        lambda sequence: (
            (key_callback(key, value), value_callback(key, value)) for key, value in sequence
        ),
    )


def _lookup(target, segment, default=_MISSING):
    if isinstance(target, collections.abc.Mapping):
        if segment in target:
            return target[segment]
        if isinstance(segment, str) and segment.lstrip("-").isdigit():
            return target.get(int(segment), default)
        return default
    if isinstance(target, (list, tuple)) and not is_namedtuple(target):
        try:
            return target[int(segment)]
        except (ValueError, IndexError):
            return default
    if hasattr(target, "iterate") and hasattr(target, "_lineage"):
        with closing(target.iterate()) as pairs:
            for key, value in pairs:
                if strict_equals(key, segment):
                    return value
        return default
    if isinstance(segment, str):
        return getattr(target, segment, default)
    return default


def _column(column, sequence):
    index = 0
    for _, value in sequence:
        found = _lookup(value, column)
        if found is not _MISSING:
            yield index, found
            index += 1


def column_t(column):
    """
    Transformation for Pipeline.column. Rows without the column are skipped and the output is
    keyed sequentially
    :param column: mapping key, index or attribute name
    :return: transformation
    """
    return Transformation("column({0!r})".format(column), partial(_column, column))


def _dig(target, segments, default):
    for position, segment in enumerate(segments):
        if segment == "*":
            if not is_nested(target):
                return default
            rest = segments[position + 1:]
            return [_dig(value, rest, default) for _, value in pairs_of(target)]
        target = _lookup(target, segment)
        if target is _MISSING:
            return default
    return target


def pluck_t(path, default=None):
    """
    Transformation for Pipeline.pluck. path is a single key or a dotted path where * walks
    every element of the current level, eg "users.*.name"
    :param path: key or dotted path
    :param default: value used when the path does not resolve
    :return: transformation
    """
    if isinstance(path, str):
        segments = [segment for segment in path.split(".") if segment]
    else:
        segments = [path]
    return Transformation(
        "pluck({0!r})".format(path),
        lambda sequence: ((key, _dig(value, segments, default)) for key, value in sequence),
    )


def diff_t(*values):
    excluded = StrictSet(values)
    return Transformation(
        "diff", lambda sequence: ((k, v) for k, v in sequence if v not in excluded)
    )


def intersect_t(*values):
    kept = StrictSet(values)
    return Transformation(
        "intersect", lambda sequence: ((k, v) for k, v in sequence if v in kept)
    )


def diff_keys_t(*keys):
    excluded = StrictSet(keys)
    return Transformation(
        "diff_keys", lambda sequence: ((k, v) for k, v in sequence if k not in excluded)
    )


def intersect_keys_t(*keys):
    kept = StrictSet(keys)
    return Transformation(
        "intersect_keys", lambda sequence: ((k, v) for k, v in sequence if k in kept)
    )


def _combine(keys, sequence):
    remaining = iter(keys)
    for _, value in sequence:
        key = next(remaining, _MISSING)
        if key is _MISSING:
            raise ConfigurationError("combine received fewer keys than values")
        yield key, value
    if next(remaining, _MISSING) is not _MISSING:
        raise ConfigurationError("combine received more keys than values")


def combine_t(*keys):
    """
    Transformation for Pipeline.combine, uses keys as the new keys of the values. A length
    mismatch can only be seen while iterating and raises ConfigurationError at that point
    :param keys: new keys
    :return: transformation
    """
    return Transformation("combine", partial(_combine, keys))


def _flatten(depth, sequence):
    for key, value in sequence:
        if not is_nested(value):
            yield key, value
        elif depth == 1:
            yield from pairs_of(value)
        else:
            yield from _flatten(depth - 1, pairs_of(value))


def flatten_t(depth=math.inf):
    """
    Transformation for Pipeline.flatten, inner pairs keep their own keys
    :param depth: levels of nesting to remove
    :return: transformation
    """
    if depth != math.inf:
        _check_count("flatten depth", depth, minimum=1)
    return Transformation("flatten({0})".format(depth), partial(_flatten, depth))


def collapse_t():
    """
    Transformation for Pipeline.collapse, yields the pairs of nested values and drops the rest
    :return: transformation
    """
    return Transformation(
        "collapse",
        lambda sequence: (
            pair for _, value in sequence if is_nested(value) for pair in pairs_of(value)
        ),
    )


def _unwrap(sequence):
    for key, value in sequence:
        if is_nested(value):
            yield from pairs_of(value)
        else:
            yield key, value


def unwrap_t():
    return Transformation("unwrap", _unwrap)


def wrap_t():
    return Transformation(
        "wrap",
        lambda sequence: ((index, {key: value}) for index, (key, value) in enumerate(sequence)),
    )


def pack_t():
    return Transformation(
        "pack",
        lambda sequence: ((index, [key, value]) for index, (key, value) in enumerate(sequence)),
    )


def _unpack(sequence):
    for _, value in sequence:
        if not is_nested(value):
            continue
        for chunk in split_every(2, _values(pairs_of(value))):
            if len(chunk) == 2:
                yield chunk[0], chunk[1]


def unpack_t():
    """
    Transformation for Pipeline.unpack. Each nested value is read as a flat list of alternating
    keys and values; scalars and a dangling trailing key are dropped
    :return: transformation
    """
    return Transformation("unpack", _unpack)


def _pair(sequence):
    for chunk in split_every(2, _values(sequence)):
        if len(chunk) == 2:
            yield chunk[0], chunk[1]
        else:
            yield chunk[0], None


def pair_t():
    return Transformation("pair", _pair)


def _unpair(sequence):
    index = 0
    for key, value in sequence:
        yield index, key
        yield index + 1, value
        index += 2


def unpair_t():
    return Transformation("unpair", _unpair)


def _reduction(callback, initial, sequence):
    carry = initial
    for key, value in sequence:
        carry = callback(carry, value, key)
        yield key, carry


def reduction_t(func, initial=None):
    """
    Transformation for Pipeline.reduction, emits each intermediate result of a left fold
    :param func: callback called with (carry, value, key)
    :param initial: initial carry
    :return: transformation
    """
    callback = _require_callbacks("reduction", (func,))[0]
    return Transformation(
        "reduction({0})".format(name(func)), partial(_reduction, callback, initial)
    )


def _scale(lower, upper, wanted_lower, wanted_upper, base, sequence):
    for key, value in sequence:
        if value < lower or value > upper:
            continue
        normalized = (value - lower) / (upper - lower)
        if base is not None:
            normalized = math.log(1 + normalized * (base - 1), base)
        yield key, wanted_lower + normalized * (wanted_upper - wanted_lower)


def scale_t(lower, upper, wanted_lower=0.0, wanted_upper=1.0, base=None):
    """
    Transformation for Pipeline.scale. Values in [lower, upper] are mapped linearly, or
    logarithmically when base is given, onto [wanted_lower, wanted_upper]. Values outside
    [lower, upper] are dropped.
    :return: transformation
    """
    if upper <= lower:
        raise ConfigurationError("scale upper bound must be greater than lower bound")
    if base is not None and base <= 1:
        raise ConfigurationError("scale base must be greater than 1")
    return Transformation(
        "scale({0}, {1})".format(lower, upper),
        partial(_scale, lower, upper, wanted_lower, wanted_upper, base),
    )


def _product(iterables, sequence):
    others = [list(_values(pairs_of(iterable))) for iterable in iterables]
    index = 0
    for value in _values(sequence):
        for combination in product(*others):
            yield index, [value, *combination]
            index += 1


def product_t(*iterables):
    """
    Transformation for Pipeline.product. The iterables are read in full when iteration starts,
    the sequence itself is streamed
    :param iterables: finite iterables to combine with
    :return: transformation
    """
    return Transformation("product", partial(_product, iterables))


def _rsample(probability, seed, sequence):
    rng = random.Random(seed)
    for pair in sequence:
        if rng.random() < probability:
            yield pair


def rsample_t(probability, seed=None):
    """
    Transformation for Pipeline.rsample, keeps each pair with the given probability
    :param probability: float in [0, 1]
    :param seed: seed of the random source, unseeded runs are not reproducible
    :return: transformation
    """
    if not 0 <= probability <= 1:
        raise ConfigurationError("rsample probability must be within [0, 1]")
    return Transformation(
        "rsample({0})".format(probability), partial(_rsample, probability, seed)
    )


def _init(sequence):
    previous = _MISSING
    for pair in sequence:
        if previous is not _MISSING:
            yield previous
        previous = pair


def init_t():
    """
    Transformation for Pipeline.init, every pair but the last one. Holds a single pair of
    lookahead.
    :return: transformation
    """
    return Transformation("init", _init)


def tail_t():
    return Transformation("tail", lambda sequence: islice(sequence, 1, None))


# Buffering operations


def _distinct(sequence):
    seen = StrictSet()
    for key, value in sequence:
        if value in seen:
            continue
        seen.add(value)
        yield key, value


def distinct_t():
    """
    Transformation for Pipeline.distinct. Keeps the first pair carrying each value, under
    strict structural equality. The seen set grows with the number of distinct values; lookups
    are O(1) for hashable values and linear for unhashable ones.
    :return: transformation
    """
    return Transformation("distinct", _distinct)


def _window(size, sequence):
    if size == 0:
        yield from sequence
        return
    window = collections.deque(maxlen=size + 1)
    for key, value in sequence:
        window.append(value)
        yield key, list(window)


def window_t(size):
    """
    Transformation for Pipeline.window. Each value is emitted with the size values before it,
    so windows grow until they hold size + 1 values and then slide by one. window(0) passes
    values through untouched. Keeps at most size + 1 values in memory.
    :param size: number of preceding values in each window
    :return: transformation
    """
    _check_count("window size", size)
    return Transformation("window({0})".format(size), partial(_window, size))


def _split(callbacks, sequence):
    index = 0
    buffer = []
    for key, value in sequence:
        matched = any(callback(value, key) for callback in callbacks)
        if matched and buffer:
            yield index, buffer
            index += 1
            buffer = []
        buffer.append(value)
    if buffer:
        yield index, buffer


def split_t(*funcs):
    """
    Transformation for Pipeline.split. Values are accumulated in a buffer; a value matching any
    callback flushes the buffer as one chunk and opens the next one. Empty chunks are never
    emitted and a trailing chunk is flushed at the end of the input. Memory grows with the
    longest chunk.
    :param funcs: predicates called with (value, key)
    :return: transformation
    """
    return Transformation(
        "split({0})".format(_names(funcs)), partial(_split, _require_callbacks("split", funcs))
    )


def explode_t(*values):
    """
    Transformation for Pipeline.explode, split on values strictly equal to one of values
    :param values: separators
    :return: transformation
    """
    if not values:
        raise ConfigurationError("explode requires at least one value")
    separators = StrictSet(values)
    return Transformation(
        "explode", partial(_split, [lambda value, key: value in separators])
    )


def _chunk(size, step, sequence):
    if size == 0:
        return
    if step == size:
        yield from enumerate(split_every(size, _values(sequence)))
        return
    index = 0
    buffer = []
    fresh = False
    skip = 0
    for value in _values(sequence):
        if skip:
            skip -= 1
            continue
        buffer.append(value)
        fresh = True
        if len(buffer) == size:
            yield index, list(buffer)
            index += 1
            fresh = False
            if step >= size:
                buffer = []
                skip = step - size
            else:
                buffer = buffer[step:]
    if buffer and fresh:
        yield index, buffer


def chunk_t(size, step=None):
    """
    Transformation for Pipeline.chunk. Emits lists of size values, each starting step values
    after the previous one, so chunks overlap when step < size. A trailing partial chunk is
    only emitted when it holds values no earlier chunk held. chunk(0) is an empty sequence.
    Keeps at most size values in memory.
    :param size: values per chunk
    :param step: distance between chunk starts, defaults to size
    :return: transformation
    """
    _check_count("chunk size", size)
    if step is None:
        step = size
    elif size > 0:
        _check_count("chunk step", step, minimum=1)
    return Transformation("chunk({0}, {1})".format(size, step), partial(_chunk, size, step))


def _cycle(times, sequence):
    if times == 0:
        return
    recorded = []
    for pair in sequence:
        recorded.append(pair)
        yield pair
    if not recorded:
        return
    repeat = 1
    while times is None or repeat < times:
        yield from recorded
        repeat += 1


def cycle_t(times=None):
    """
    Transformation for Pipeline.cycle. The first pass over the sequence is recorded and
    replayed, so upstream is read once and the whole sequence is held in memory. Repeats
    forever when times is None.
    :param times: number of passes
    :return: transformation
    """
    if times is not None:
        _check_count("cycle times", times)
    return Transformation("cycle({0})".format(times), partial(_cycle, times))


def _sort(by, comparator, sequence):
    index = 1 if by == BY_VALUES else 0
    if comparator is None:
        sort_key = itemgetter(index)
    else:
        sort_key = cmp_to_key(lambda left, right: comparator(left[index], right[index]))
    yield from sorted(sequence, key=sort_key)


def sort_t(by=BY_VALUES, comparator=None):
    """
    Transformation for Pipeline.sort. Stable; materializes the whole sequence before the first
    pair is emitted.
    :param by: BY_VALUES or BY_KEYS
    :param comparator: cmp style function (left, right) -> int, natural ordering when None
    :return: transformation
    """
    if by not in SORT_MODES:
        raise ConfigurationError(
            "sort mode must be one of {0}, got {1!r}".format(SORT_MODES, by)
        )
    if comparator is not None and not callable(comparator):
        raise ConfigurationError("sort comparator must be callable")
    return Transformation("sort({0})".format(by), partial(_sort, by, comparator))


def _reverse(sequence):
    yield from reversed(list(sequence))


def reverse_t():
    return Transformation("reverse", _reverse)


def _group(callback, sequence):
    groups = {}
    order = []
    for key, value in sequence:
        group = key if callback is None else callback(value, key)
        if group is None:
            order.append((False, key, value))
            continue
        if group not in groups:
            groups[group] = []
            order.append((True, group, None))
        groups[group].append(value)
    for is_group, key, value in order:
        yield (key, groups[key]) if is_group else (key, value)


def group_t(func=None):
    """
    Transformation for Pipeline.group. Values are grouped by key, or by the result of func;
    groups are emitted in order of first appearance, keyed by the group. Pairs for which func
    returns None are emitted untouched. Materializes the sequence.
    :param func: callback called with (value, key)
    :return: transformation
    """
    callback = bind_arity(func) if func is not None else None
    return Transformation("group({0})".format(name(func) if func else ""), partial(_group, callback))


def _frequency(sequence):
    counts = []
    hashed = {}
    for value in _values(sequence):
        try:
            marker = strict_key(value)
        except TypeError:
            position = next(
                (i for i, (seen, _) in enumerate(counts) if strict_equals(seen, value)), None
            )
        else:
            position = hashed.setdefault(marker, len(counts))
            if position == len(counts):
                position = None
        if position is None:
            counts.append([value, 1])
        else:
            counts[position][1] += 1
    for value, count in counts:
        yield count, value


def frequency_t():
    """
    Transformation for Pipeline.frequency, emits (count, value) pairs in order of first
    appearance. Materializes the sequence.
    :return: transformation
    """
    return Transformation("frequency", _frequency)


def _transpose(sequence):
    columns = {}
    rows = 0
    for value in _values(sequence):
        for key, item in pairs_of(value):
            if key not in columns:
                columns[key] = [None] * rows
            columns[key].append(item)
        rows += 1
        for column in columns.values():
            if len(column) < rows:
                column.append(None)
    yield from columns.items()


def transpose_t():
    """
    Transformation for Pipeline.transpose, rows become columns keyed by the inner keys. Missing
    cells are None. Materializes the sequence.
    :return: transformation
    """
    return Transformation("transpose", _transpose)


def _unzip(sequence):
    rows = [list(_values(pairs_of(row))) for row in _values(sequence)]
    width = max((len(row) for row in rows), default=0)
    for index in range(width):
        yield index, [row[index] if index < len(row) else None for row in rows]


def unzip_t():
    return Transformation("unzip", _unzip)


def permutate_t():
    return Transformation(
        "permutate",
        lambda sequence: (
            (index, list(permutation))
            for index, permutation in enumerate(permutations(list(_values(sequence))))
        ),
    )


def _combinate(length, sequence):
    values = list(_values(sequence))
    size = length if length else len(values)
    for index, combination in enumerate(combinations(values, size)):
        yield index, list(combination)


def combinate_t(length=None):
    """
    Transformation for Pipeline.combinate, combinations of length values (all values when
    length is None or 0). Materializes the sequence.
    :return: transformation
    """
    if length is not None:
        _check_count("combinate length", length)
    return Transformation("combinate({0})".format(length), partial(_combinate, length))


def _shuffle(seed, sequence):
    pairs = list(sequence)
    random.Random(seed).shuffle(pairs)
    yield from pairs


def shuffle_t(seed=None):
    return Transformation("shuffle", partial(_shuffle, seed))


def random_t(size=1, seed=None):
    """
    Transformation for Pipeline.random, size pairs drawn without replacement
    :param size: number of pairs, capped by the length of the sequence
    :param seed: seed of the random source
    :return: transformation
    """
    _check_count("random size", size, minimum=1)
    return Transformation(
        "random({0})".format(size),
        lambda sequence: islice(_shuffle(seed, sequence), size),
    )
