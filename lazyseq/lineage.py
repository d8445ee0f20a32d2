class Lineage(object):
    """
    Immutable cons list recording the operations chained onto a pipeline. Each node references
    its parent and the operation it adds, so pipelines branching off a common prefix share that
    prefix without copying it and never see each other's operations.
    """

    __slots__ = ("operation", "parent", "_length")

    def __init__(self, operation, parent=None):
        """
        :param operation: operation added by this node
        :param parent: lineage the operation is appended to, None at the root
        """
        self.operation = operation
        self.parent = parent
        self._length = 1 if parent is None else len(parent) + 1

    def chain(self, operation):
        """
        Return a new lineage with operation appended, self is left untouched
        :param operation: operation to append
        :return: new Lineage
        """
        return Lineage(operation, self)

    def __iter__(self):
        """
        Iterate operations in the order they were chained, root first
        """
        operations = []
        node = self
        while node is not None:
            operations.append(node.operation)
            node = node.parent
        return reversed(operations)

    def __len__(self):
        return self._length

    def __repr__(self):
        return "Lineage: " + " -> ".join(["source"] + [op.name for op in self])

    def evaluate(self, sequence):
        """
        Fold every operation over sequence, left to right. Operations only build generators here,
        no pair is pulled from sequence.
        :param sequence: iterator of (key, value) tuples
        :return: iterator of transformed (key, value) tuples
        """
        for operation in self:
            sequence = operation.apply(sequence)
        return sequence
