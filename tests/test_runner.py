import pytest

from lazyseq import seq
from lazyseq.base import Operation
from lazyseq.errors import ConfigurationError
from lazyseq.runner import as_operation, run
from lazyseq.transformations import Transformation


class Double(Operation):
    def apply(self, sequence):
        return ((key, value * 2) for key, value in sequence)


class Recorder(Operation):
    def __init__(self):
        self.applied = 0

    def apply(self, sequence):
        self.applied += 1
        return sequence


class TestRunner:
    def test_runs_operations_in_call_order(self):
        square = lambda pairs: ((k, v ** 2) for k, v in pairs)  # noqa: E731
        assert run(seq([1, 2, 3]), Double(), square).to_list() == [4, 16, 36]
        assert run(seq([1, 2, 3]), square, Double()).to_list() == [2, 8, 18]

    def test_pipeline_run(self):
        assert seq([1, 2]).run(Double()).to_list() == [2, 4]

    def test_nothing_runs_before_iteration(self):
        recorder = Recorder()
        pipeline = seq([1]).run(recorder)
        assert recorder.applied == 0
        pipeline.to_list()
        pipeline.to_list()
        assert recorder.applied == 2

    def test_operation_names_show_in_lineage(self):
        pipeline = seq([1]).map(str).run(Double())
        assert repr(pipeline.lineage) == "Lineage: source -> map(str) -> Double"
        assert repr(Double()) == "<Operation Double>"

    def test_callables_are_wrapped(self):
        def negate(pairs):
            return ((k, -v) for k, v in pairs)

        operation = as_operation(negate)
        assert isinstance(operation, Transformation)
        assert operation.name == "negate"

    def test_rejects_non_operations(self):
        with pytest.raises(ConfigurationError):
            run(seq([1]), 42)

    def test_original_pipeline_is_untouched(self):
        base = seq([1, 2])
        doubled = base.run(Double())
        assert base.to_list() == [1, 2]
        assert doubled.to_list() == [2, 4]
