import math

from lazyseq import io
from lazyseq.errors import ConfigurationError
from lazyseq.pipeline import Pipeline
from lazyseq.sources import (
    CallableSource,
    EmptySource,
    IterableSource,
    PairSource,
    ResourceSource,
    StringSource,
    from_any,
)
from lazyseq.util import bind_arity


class Stream(object):
    """
    Represents and implements a stream which separates the responsibilities of Pipeline and
    the entry points of lazyseq. seq is an instance of Stream.
    """

    def __call__(self, *args):
        """
        Create a Pipeline from its arguments, see lazyseq.sources.from_any for the accepted shapes.

        >>> seq([1, 2, 3]).to_list()
        [1, 2, 3]
        >>> seq({"a": 1}).to_pairs()
        [('a', 1)]
        >>> seq("a,b", ",").to_list()
        ['a', 'b']
        >>> seq(None).to_list()
        []

        :param args: input, followed by a separator for strings or arguments for callables
        :return: wrapped input as Pipeline
        """
        if not args:
            return self.empty()
        return Pipeline(from_any(*args))

    def empty(self):
        return Pipeline(EmptySource())

    def from_iterable(self, iterable):
        """
        Mappings give their items, other iterables are keyed by position
        :param iterable: iterable to wrap
        :return: Pipeline
        """
        return Pipeline(IterableSource(iterable))

    def from_pairs(self, pairs):
        """
        Create a Pipeline from explicit (key, value) tuples, keys may repeat

        >>> seq.from_pairs([("a", 1), ("a", 2)]).keys().to_list()
        ['a', 'a']

        :param pairs: iterable of (key, value) tuples
        :return: Pipeline
        """
        return Pipeline(PairSource(pairs))

    def from_callable(self, func, *args, **kwargs):
        """
        Create a Pipeline calling func with args every time it is iterated. func can be an
        infinite generator function.
        :param func: function returning an iterable
        :return: Pipeline
        """
        return Pipeline(CallableSource(func, *args, **kwargs))

    def from_string(self, string, delimiter=None):
        return Pipeline(StringSource(string, delimiter))

    def from_resource(self, handle, unit=1):
        """
        Create a Pipeline reading an open stream unit by unit. The stream is closed once
        iteration stops and can only be read once, use Pipeline.cache to read it again.
        :param handle: object with read and close methods
        :param unit: size passed to read
        :return: Pipeline
        """
        return Pipeline(ResourceSource(handle, unit))

    def range(self, start=0, end=math.inf, step=1):
        """
        Float values from start, up to end excluded. A step of 0 repeats start forever.

        >>> seq.range(1, 10, 2).to_list()
        [1.0, 3.0, 5.0, 7.0, 9.0]
        >>> seq.range().limit(3).to_list()
        [0.0, 1.0, 2.0]

        :param start: first value
        :param end: exclusive bound
        :param step: increment
        :return: Pipeline
        """

        def _range(start, end, step):
            current = float(start)
            if step == 0:
                while True:
                    yield current
            while (current < end) if step > 0 else (current > end):
                yield current
                current += step

        return self.from_callable(_range, start, end, step)

    def times(self, number=1, callback=None):
        """
        The numbers 1 to number, or the result of callback for each of them

        >>> seq.times(3).to_list()
        [1, 2, 3]

        :param number: how many values to produce
        :param callback: function of the current number
        :return: Pipeline
        """
        if isinstance(number, bool) or not isinstance(number, int) or number < 0:
            raise ConfigurationError("times expects a non negative integer, got {0!r}".format(number))

        def _times(number, callback):
            mapper = bind_arity(callback) if callback is not None else None
            for current in range(1, number + 1):
                yield mapper(current) if mapper is not None else current

        return self.from_callable(_times, number, callback)

    def unfold(self, func, *parameters):
        """
        Repeatedly apply func to its own result, starting from parameters. A tuple or list
        result is spread as the arguments of the next call. The seed itself is not emitted.

        >>> seq.unfold(lambda n: n * 2, 1).limit(4).to_list()
        [2, 4, 8, 16]

        :param func: function to iterate
        :param parameters: arguments of the first call
        :return: infinite Pipeline
        """

        def _unfold(func, parameters):
            while True:
                current = func(*parameters)
                yield current
                parameters = current if isinstance(current, (tuple, list)) else (current,)

        return self.from_callable(_unfold, func, parameters)

    def open(self, path, mode="r", encoding=None, errors=None, newline=None, compression=True):
        """
        Lines of a file. gzip, bz2 and xz files are detected and decompressed. The file is opened
        again on each iteration, so the Pipeline is rewindable, and closed when iteration stops.
        :param path: file path
        :param mode: "r" for text lines or "rb" for byte lines
        :param encoding: text encoding
        :param errors: passed to open
        :param newline: passed to open
        :param compression: detect compressed files
        :return: Pipeline of lines
        """
        return self.from_iterable(
            io.open_file(
                path,
                mode=mode,
                encoding=encoding,
                errors=errors,
                newline=newline,
                compression=compression,
            )
        )

    def jsonl(self, path, encoding=None, compression=True):
        """
        One parsed JSON document per non blank line of a JSON lines file
        :param path: file path
        :param encoding: text encoding
        :param compression: detect compressed files
        :return: Pipeline of parsed documents
        """
        lines = io.open_file(path, encoding=encoding, compression=compression)
        return self.from_iterable(io.JsonLinesFile(lines))

    def csv(self, path, header=True, encoding=None, compression=True, **fmtparams):
        """
        Rows of a CSV file
        :param path: file path
        :param header: read the first row as field names and yield dicts
        :param encoding: text encoding
        :param compression: detect compressed files
        :param fmtparams: passed to the csv reader
        :return: Pipeline of rows
        """
        lines = io.open_file(path, encoding=encoding, newline="", compression=compression)
        return self.from_iterable(io.CsvFile(lines, header=header, **fmtparams))


# pylint: disable=invalid-name
seq = Stream()
