"""
Adapters normalizing the inputs lazyseq accepts into sequences of (key, value) pairs.

A source is rewindable when iterating it again replays the same pairs (lists, mappings, strings,
pure generator functions). Resource backed sources (open file handles, sockets) are not: they
are consumed by the first iteration, and need Pipeline.cache to be read more than once.
"""
import collections.abc
from abc import ABC, abstractmethod

from lazyseq.errors import InvalidSourceError
from lazyseq.logger import get_logger
from lazyseq.util import is_primitive, pairs_of

_logger = get_logger()


class Source(ABC):
    """
    Root of a pipeline, owns the raw producer
    """

    rewindable = True

    @abstractmethod
    def iterate(self):
        """
        :return: iterator of (key, value) tuples
        """

    def __repr__(self):
        return "<{0}>".format(type(self).__name__)


class EmptySource(Source):
    def iterate(self):
        return iter(())


class ScalarSource(Source):
    def __init__(self, value):
        self.value = value

    def iterate(self):
        yield 0, self.value


class IterableSource(Source):
    """
    Source over a mapping, an iterable or a pipeline. Mappings yield their items, pipelines their
    own pairs and other iterables are enumerated. A plain iterator (eg a generator object) can
    only be read once, reading it again raises InvalidSourceError.
    """

    def __init__(self, iterable):
        self.iterable = iterable
        self.rewindable = (
            isinstance(iterable, collections.abc.Mapping) or iter(iterable) is not iterable
        )
        self._consumed = False

    def iterate(self):
        if not self.rewindable:
            if self._consumed:
                raise InvalidSourceError(
                    "{0!r} is an iterator and has already been consumed, cache the pipeline "
                    "to read it again".format(self.iterable)
                )
            self._consumed = True
        return pairs_of(self.iterable)


class PairSource(Source):
    """
    Source over an iterable of explicit (key, value) tuples, keys may repeat
    """

    def __init__(self, pairs):
        self.pairs = pairs
        self.rewindable = iter(pairs) is not pairs

    def iterate(self):
        for pair in self.pairs:
            key, value = pair
            yield key, value


class CallableSource(Source):
    """
    Source calling a generator function, or any function returning an iterable, each time it is
    iterated. Infinite generators are supported.
    """

    def __init__(self, func, *args, **kwargs):
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def iterate(self):
        result = self.func(*self.args, **self.kwargs)
        if is_primitive(result) or result is None:
            raise InvalidSourceError(
                "{0!r} must return an iterable, got {1!r}".format(self.func, result)
            )
        yield from pairs_of(result)


class StringSource(Source):
    """
    Source over the characters of a string, or over its pieces when a delimiter is given
    """

    def __init__(self, string, delimiter=None):
        self.string = string
        self.delimiter = delimiter

    def iterate(self):
        if self.delimiter is None:
            if isinstance(self.string, bytes):
                return enumerate(self.string[i:i + 1] for i in range(len(self.string)))
            return enumerate(self.string)
        return enumerate(self.string.split(self.delimiter))


class ResourceSource(Source):
    """
    Source reading an open byte or character stream one unit at a time until end of stream.

    The handle is closed as soon as the sequence is drained, abandoned (the generator is closed
    or collected) or an error is raised downstream. It can only be iterated once: iterating it
    again raises InvalidSourceError. Use Pipeline.cache to share a stream between consumers.
    """

    rewindable = False

    def __init__(self, handle, unit=1):
        self.handle = handle
        self.unit = unit
        self._consumed = False

    def iterate(self):
        if self._consumed:
            raise InvalidSourceError(
                "{0!r} has already been consumed, cache the pipeline to read it again".format(
                    self.handle
                )
            )
        self._consumed = True
        return self._read()

    def _read(self):
        _logger.d("acquired resource %r", self.handle)
        try:
            position = 0
            while True:
                unit = self.handle.read(self.unit)
                if not unit:
                    return
                yield position, unit
                position += 1
        finally:
            self.handle.close()
            _logger.d("released resource %r", self.handle)


def from_any(data, *args):
    """
    Adapt any supported input into a Source
    :param data: input to adapt
    :param args: separator for strings, arguments for callables
    :return: Source
    """
    if data is None:
        return EmptySource()
    if isinstance(data, Source):
        return data
    if isinstance(data, (str, bytes)):
        return StringSource(data, *args)
    if hasattr(data, "read") and callable(data.read):
        return ResourceSource(data)
    if isinstance(data, collections.abc.Iterable):
        return IterableSource(data)
    if callable(data):
        return CallableSource(data, *args)
    if is_primitive(data):
        return ScalarSource(data)
    raise InvalidSourceError("cannot build a sequence from {0!r}".format(data))
