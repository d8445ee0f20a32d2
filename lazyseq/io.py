"""
Rewindable file readers backing seq.open, seq.jsonl and seq.csv.

Unlike a raw file handle, which a pipeline can only read once, each iteration of these readers
opens the file again and closes it when iteration stops, so pipelines built on them stay lazy
and can be iterated any number of times.
"""
import builtins
import bz2
import csv
import gzip
import io
import lzma

import simdjson as json

from lazyseq.errors import InvalidSourceError
from lazyseq.logger import get_logger

_logger = get_logger()


class ReusableFile(object):
    """
    Iterable over the lines of a file where every call to iter() opens a fresh handle, closed as
    soon as that iteration stops
    """

    # pylint: disable=too-many-instance-attributes
    def __init__(self, path, mode="r", buffering=-1, encoding=None, errors=None, newline=None):
        """
        Constructor arguments are passed to the underlying open call
        :param path: file path
        :param mode: open mode, text or binary
        :param buffering: passed to open
        :param encoding: passed to open
        :param errors: passed to open
        :param newline: passed to open
        """
        self.path = path
        self.mode = mode
        self.buffering = buffering
        self.encoding = encoding
        self.errors = errors
        self.newline = newline

    def _open(self):
        return builtins.open(
            self.path,
            mode=self.mode,
            buffering=self.buffering,
            encoding=self.encoding,
            errors=self.errors,
            newline=self.newline,
        )

    def __iter__(self):
        """
        Returns a new iterator over the file, independent of all others
        :return: iterator over lines
        """
        _logger.d("opening %s with %s", self.path, type(self).__name__)
        with self._open() as file_content:
            yield from file_content

    def __repr__(self):
        return "{0}({1!r})".format(type(self).__name__, self.path)


class CompressedFile(ReusableFile):
    magic_bytes = None

    def __init__(self, path, mode="rt", compresslevel=9, encoding=None, errors=None, newline=None):
        super(CompressedFile, self).__init__(
            path, mode=mode, encoding=encoding, errors=errors, newline=newline
        )
        self.compresslevel = compresslevel

    @classmethod
    def is_compressed(cls, data):
        return data.startswith(cls.magic_bytes)

    def _text_options(self):
        if "b" in self.mode:
            return {}
        return {"encoding": self.encoding, "errors": self.errors, "newline": self.newline}


class GZFile(CompressedFile):
    magic_bytes = b"\x1f\x8b\x08"

    def _open(self):
        if "b" in self.mode:
            return gzip.open(self.path, mode=self.mode, compresslevel=self.compresslevel)
        return io.TextIOWrapper(
            gzip.GzipFile(self.path, compresslevel=self.compresslevel), **self._text_options()
        )


class BZ2File(CompressedFile):
    magic_bytes = b"\x42\x5a\x68"

    def _open(self):
        return bz2.open(
            self.path, mode=self.mode, compresslevel=self.compresslevel, **self._text_options()
        )


class XZFile(CompressedFile):
    magic_bytes = b"\xfd\x37\x7a\x58\x5a\x00"

    def _open(self):
        return lzma.open(self.path, mode=self.mode, **self._text_options())


COMPRESSION_CLASSES = [GZFile, BZ2File, XZFile]
N_COMPRESSION_CHECK_BYTES = max(len(cls.magic_bytes) for cls in COMPRESSION_CLASSES)


def get_read_function(filename, disable_compression=False):
    """
    Pick the reader class for filename by sniffing its leading magic bytes
    :param filename: path of the file
    :param disable_compression: always read the file as is
    :return: ReusableFile subclass
    """
    if disable_compression:
        return ReusableFile
    try:
        with open(filename, "rb") as f:
            start_bytes = f.read(N_COMPRESSION_CHECK_BYTES)
    except OSError as e:
        raise InvalidSourceError("cannot read {0}: {1}".format(filename, e)) from e
    for cls in COMPRESSION_CLASSES:
        if cls.is_compressed(start_bytes):
            return cls
    return ReusableFile


def open_file(path, mode="r", encoding=None, errors=None, newline=None, compression=True):
    """
    Build a rewindable reader over path, decompressing gzip, bz2 and xz files transparently
    :param path: file path
    :param mode: "r" for text lines, "rb" for byte lines
    :param encoding: text encoding
    :param errors: passed to open
    :param newline: passed to open
    :param compression: detect compressed files
    :return: ReusableFile
    """
    reader = get_read_function(path, not compression)
    if reader is ReusableFile:
        return ReusableFile(path, mode=mode, encoding=encoding, errors=errors, newline=newline)
    if "b" not in mode and "t" not in mode:
        mode += "t"
    return reader(path, mode=mode, encoding=encoding, errors=errors, newline=newline)


class JsonLinesFile(object):
    """
    Iterable over the records of a JSON lines file. Blank lines are skipped, a line that does not
    parse raises ValueError naming the line number.
    """

    def __init__(self, lines):
        """
        :param lines: rewindable iterable of lines, usually a ReusableFile
        """
        self.lines = lines

    def __iter__(self):
        parser = json.Parser()
        for number, line in enumerate(self.lines, 1):
            if not line.strip():
                continue
            try:
                record = parser.parse(line)
            except ValueError as e:
                raise ValueError("{0!r} line {1}: {2}".format(self.lines, number, e)) from e
            # Parser results are proxies over a buffer reused by the next parse call
            if isinstance(record, json.Object):
                record = record.as_dict()
            elif isinstance(record, json.Array):
                record = record.as_list()
            yield record


class CsvFile(object):
    """
    Iterable over the rows of a CSV file, as dicts when a header is used and lists otherwise
    """

    def __init__(self, lines, header=True, **fmtparams):
        """
        :param lines: rewindable iterable of lines, usually a ReusableFile
        :param header: read the first row as field names
        :param fmtparams: passed to csv.reader or csv.DictReader
        """
        self.lines = lines
        self.header = header
        self.fmtparams = fmtparams

    def __iter__(self):
        if self.header:
            yield from csv.DictReader(iter(self.lines), **self.fmtparams)
        else:
            yield from csv.reader(iter(self.lines), **self.fmtparams)
