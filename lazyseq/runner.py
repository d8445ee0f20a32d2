from lazyseq.base import Operation
from lazyseq.errors import ConfigurationError
from lazyseq.logger import get_logger
from lazyseq.transformations import Transformation
from lazyseq.util import name

_logger = get_logger()


def as_operation(operation):
    """
    Accept an Operation as is, and wrap a plain callable taking an iterator of (key, value)
    pairs into a Transformation
    :param operation: Operation or callable
    :return: Operation
    """
    if isinstance(operation, Operation):
        return operation
    if callable(operation):
        return Transformation(name(operation), operation)
    raise ConfigurationError(
        "expected an Operation or a callable over (key, value) pairs, got {0!r}".format(
            operation
        )
    )


def run(pipeline, *operations):
    """
    Chain user supplied operations onto pipeline in call order. Nothing executes until the
    returned pipeline is iterated.

    >>> from lazyseq import seq
    >>> square = lambda pairs: ((k, v ** 2) for k, v in pairs)
    >>> run(seq([1, 2, 3]), square).to_list()
    [1, 4, 9]

    :param pipeline: Pipeline to extend
    :param operations: Operation instances or callables over pairs
    :return: new Pipeline
    """
    resolved = [as_operation(operation) for operation in operations]
    for operation in resolved:
        _logger.d("chaining %s onto %r", operation.name, pipeline)
        pipeline = pipeline.chain(operation)
    return pipeline
