"""
Exceptions raised by lazyseq.

Exceptions raised inside user supplied callbacks (predicates, mappers, comparators) are never
wrapped: they propagate unmodified to the pull or terminal call that triggered them.
"""


class LazySeqError(Exception):
    """
    Base class of every error raised by lazyseq itself
    """


class ConfigurationError(LazySeqError, ValueError):
    """
    Raised when an operation is bound with invalid parameters. Detected when the operation is
    created, never deferred to iteration when it can be checked eagerly.
    """


class OutOfBoundsError(ConfigurationError, IndexError):
    """
    Raised when a bound count falls outside the range an operation accepts, eg limit(0)
    """


class InvalidSourceError(LazySeqError, TypeError):
    """
    Raised when an input cannot be adapted into a sequence, or when a single use resource is
    iterated again after it has been consumed
    """


class CacheMisuseError(LazySeqError, RuntimeError):
    """
    Raised when two consumers try to advance the upstream of the same cache at the same time
    """
