import collections.abc
import inspect
from itertools import count, islice, takewhile


def is_primitive(val):
    """
    Checks if the passed value is a primitive type.

    >>> is_primitive(1)
    True

    >>> is_primitive("abc")
    True

    >>> is_primitive(True)
    True

    >>> is_primitive({})
    False

    >>> is_primitive([])
    False

    >>> is_primitive(set([]))
    False

    :param val: value to check
    :return: True if value is a primitive, else False
    """
    return isinstance(val, (str, bool, float, complex, bytes, int))


def is_namedtuple(val):
    """
    Use Duck Typing to check if val is a named tuple. Checks that val is of type tuple and contains
    the attribute _fields which is defined for named tuples.
    :param val: value to check type of
    :return: True if val is a namedtuple
    """
    val_type = type(val)
    bases = val_type.__bases__
    if len(bases) != 1 or bases[0] != tuple:
        return False
    fields = getattr(val_type, "_fields", None)
    if fields is None:
        return False
    return all(isinstance(n, str) for n in fields)


def is_nested(val):
    """
    Check if val is a container whose elements lazyseq walks into when flattening, unwrapping or
    plucking. Strings and bytes are treated as atoms.

    >>> is_nested([1, 2])
    True
    >>> is_nested({"a": 1})
    True
    >>> is_nested("ab")
    False

    :param val: value to check
    :return: True if val is a list, tuple, mapping or pipeline
    """
    if isinstance(val, (list, tuple, collections.abc.Mapping)):
        return True
    return hasattr(val, "iterate") and hasattr(val, "_lineage")


def pairs_of(val):
    """
    Iterate the (key, value) pairs of a nested container. Mappings give their items, pipelines
    give their own pairs and anything else is enumerated.

    >>> list(pairs_of({"a": 1}))
    [('a', 1)]
    >>> list(pairs_of(["x", "y"]))
    [(0, 'x'), (1, 'y')]

    :param val: container to iterate
    :return: iterator of (key, value) tuples
    """
    if isinstance(val, collections.abc.Mapping):
        return iter(val.items())
    if hasattr(val, "iterate") and hasattr(val, "_lineage"):
        return val.iterate()
    return enumerate(val)


def split_every(parts, iterable):
    """
    Split an iterable into parts of length parts

    >>> l = iter([1, 2, 3, 4])
    >>> list(split_every(2, l))
    [[1, 2], [3, 4]]

    :param iterable: iterable to split
    :param parts: number of chunks
    :return: return the iterable split in parts
    """
    return takewhile(bool, (list(islice(iterable, parts)) for _ in count()))


def strict_equals(left, right):
    """
    Strict structural equality: both values must be of the exact same type and compare equal,
    recursively for lists, tuples, dicts and sets. Unlike ==, 1, 1.0 and True are all different.

    >>> strict_equals(1, 1)
    True
    >>> strict_equals(1, True)
    False
    >>> strict_equals([1, (2, "a")], [1, (2, "a")])
    True
    >>> strict_equals([0], [False])
    False

    :param left: first value
    :param right: second value
    :return: True if left and right are strictly equal
    """
    if type(left) is not type(right):
        return False
    if isinstance(left, (list, tuple)):
        return len(left) == len(right) and all(
            strict_equals(l, r) for l, r in zip(left, right)
        )
    if isinstance(left, dict):
        if left.keys() != right.keys():
            return False
        return all(strict_equals(value, right[key]) for key, value in left.items())
    if isinstance(left, (set, frozenset)):
        return strict_key(left) == strict_key(right)
    return left == right


def strict_key(val):
    """
    Build a hashable key such that two values get equal keys exactly when they are
    strict_equals. Sets are keyed by their content, other unhashable values raise TypeError.

    >>> strict_key(1) == strict_key(True)
    False
    >>> strict_key((1, 2)) == strict_key((1, 2))
    True

    :param val: value to build the key of
    :return: hashable key
    """
    if isinstance(val, tuple):
        return (type(val), tuple(strict_key(item) for item in val))
    if isinstance(val, (set, frozenset)):
        return (type(val), frozenset(strict_key(item) for item in val))
    hash(val)
    return (type(val), val)


class StrictSet(object):
    """
    Membership set keyed by strict structural equality. Hashable values are looked up in O(1),
    unhashable ones (lists, dicts, ...) fall back to a linear scan.
    """

    def __init__(self, values=()):
        self._hashed = set()
        self._unhashable = []
        for value in values:
            self.add(value)

    def add(self, value):
        try:
            self._hashed.add(strict_key(value))
        except TypeError:
            self._unhashable.append(value)

    def __contains__(self, value):
        try:
            return strict_key(value) in self._hashed
        except TypeError:
            return any(strict_equals(value, seen) for seen in self._unhashable)

    def __len__(self):
        return len(self._hashed) + len(self._unhashable)


def _positional_arity(func):
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return 1
    required = 0
    optional = 0
    for parameter in signature.parameters.values():
        if parameter.kind == parameter.VAR_POSITIONAL:
            return None
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            if parameter.default is parameter.empty:
                required += 1
            else:
                optional += 1
    # Optional parameters such as str.strip(chars) or round(ndigits) never receive the key
    if required == 0 and optional:
        return 1
    return required


def bind_arity(func):
    """
    Adapt a user callback so it can always be called with the full argument list lazyseq
    provides, eg (value, key). Arguments past the number of required positional parameters the
    callback declares are dropped, so parameters with a default are left to their default.
    Callbacks taking *args receive everything, callables whose signature cannot be inspected
    receive the first argument only.

    >>> bind_arity(lambda v: v * 2)(3, "key")
    6
    >>> bind_arity(lambda v, k: (k, v))(3, "key")
    ('key', 3)
    >>> bind_arity(round)(2.567, "key")
    3

    :param func: callback to adapt
    :return: function accepting any number of positional arguments
    """
    arity = _positional_arity(func)
    if arity is None:
        return func
    if arity == 0:
        return lambda *args: func()
    if arity == 1:
        return lambda *args: func(args[0])
    return lambda *args: func(*args[:arity])


def name(function):
    """
    Retrieve a pretty name for the function
    :param function: function to get name from
    :return: pretty name
    """
    if isinstance(function, type):
        return function.__name__
    return getattr(function, "__name__", repr(function))
