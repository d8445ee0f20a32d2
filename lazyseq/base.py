from abc import ABC, abstractmethod


class Operation(ABC):
    """
    A configured transformation from a sequence of (key, value) pairs to a new sequence of pairs.

    Parameters are bound once when the operation is created and never change afterwards. All
    working state (buffers, seen sets, counters) lives in the generator returned by apply, so a
    single operation can be applied to any number of sequences, including several runs of the
    same pipeline.

    Subclass this to extend lazyseq without touching the pipeline, then hand instances to
    Pipeline.run or Pipeline.chain.
    """

    @property
    def name(self):
        return type(self).__name__

    @abstractmethod
    def apply(self, sequence):
        """
        Transform sequence lazily. Must not consume sequence before the result is pulled from,
        unless the transformation is inherently non-streaming.
        :param sequence: iterator of (key, value) tuples
        :return: iterator of (key, value) tuples
        """

    def __call__(self, sequence):
        return self.apply(sequence)

    def __repr__(self):
        return "<Operation {0}>".format(self.name)
