"""
Replay buffer letting a single pass source be iterated by several consumers.
"""
import threading

from lazyseq.errors import CacheMisuseError
from lazyseq.logger import get_logger
from lazyseq.sources import Source

_logger = get_logger()


class Cache(Source):
    """
    Source wrapping another source or pipeline. Pairs are appended to an append only buffer as
    they are pulled from upstream, and every consumer first replays the buffer before resuming
    upstream exactly where the previous consumer stopped. Upstream is therefore read at most
    once, in order, however many consumers iterate the cache.

    Consumers may interleave freely as long as only one of them advances upstream at a time. A
    second advance starting while another is in progress (from a callback re-entering the cache,
    or from another thread) is a programming error and raises CacheMisuseError.

    An exception raised by upstream is remembered: consumers still replay the pairs buffered
    before it, then get the same exception again rather than a shortened sequence.
    """

    rewindable = True

    def __init__(self, upstream):
        """
        :param upstream: Source or Pipeline to buffer
        """
        self._upstream = upstream
        self._buffer = []
        self._iterator = None
        self._exhausted = False
        self._failure = None
        self._advance_lock = threading.Lock()

    @property
    def buffered(self):
        """
        Number of pairs read from upstream so far
        """
        return len(self._buffer)

    @property
    def exhausted(self):
        return self._exhausted

    @property
    def failure(self):
        """
        Exception raised by upstream, if any. Once set, every advance past the buffered pairs
        raises it again instead of reporting the sequence as complete.
        """
        return self._failure

    def iterate(self):
        return self._replay()

    def _replay(self):
        position = 0
        while True:
            if position < len(self._buffer):
                yield self._buffer[position]
                position += 1
            elif self._exhausted or not self._advance():
                return

    def _advance(self):
        if not self._advance_lock.acquire(blocking=False):
            raise CacheMisuseError(
                "another consumer is already advancing the upstream of this cache"
            )
        try:
            if self._failure is not None:
                raise self._failure
            if self._exhausted:
                return False
            if self._iterator is None:
                _logger.d("cache opening upstream %r", self._upstream)
                self._iterator = iter(self._upstream.iterate())
            try:
                pair = next(self._iterator)
            except StopIteration:
                self._exhausted = True
                self._iterator = None
                _logger.d("cache exhausted upstream after %d pairs", len(self._buffer))
                return False
            except Exception as e:
                self._failure = e
                self._iterator = None
                _logger.d("cache upstream failed after %d pairs: %r", len(self._buffer), e)
                raise
            self._buffer.append(pair)
            return True
        finally:
            self._advance_lock.release()

    def close(self):
        """
        Stop reading upstream and release it. Consumers can still replay what was buffered.
        """
        iterator, self._iterator = self._iterator, None
        self._exhausted = True
        if iterator is not None and hasattr(iterator, "close"):
            iterator.close()
        _logger.d("cache closed with %d pairs buffered", len(self._buffer))

    def __repr__(self):
        return "<Cache buffered={0} exhausted={1}>".format(len(self._buffer), self._exhausted)
