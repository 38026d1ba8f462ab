"""Unit tests for scan operator descriptors.

Run with: pytest tests/test_operators.py -v
"""

import pytest
import torch

from scanbench.errors import ConfigurationError
from scanbench.operators import dtype_minimum, get_operator, max_operator, sum_operator


class TestSumOperator:
    """Test the summation operator."""

    def test_combine_and_identity(self):
        op = sum_operator(torch.int32)
        assert op.combine(2, 3) == 5
        assert op.identity() == 0
        assert op.combine(op.identity(), 7) == 7

    def test_float_identity_is_float(self):
        op = sum_operator(torch.float32)
        assert isinstance(op.identity(), float)

    def test_accumulate_keeps_dtype(self):
        op = sum_operator(torch.int32)
        out = op.accumulate(torch.ones(4, dtype=torch.int32))
        assert out.dtype == torch.int32
        assert out.tolist() == [1, 2, 3, 4]


class TestMaxOperator:
    """Test the maximum operator and its identity resolution."""

    def test_combine(self):
        op = max_operator(torch.int32)
        assert op.combine(3, 5) == 5
        assert op.combine(5, 3) == 5

    def test_combine_tensors_elementwise(self):
        op = max_operator(torch.int32)
        a = torch.tensor([1, 9, 3], dtype=torch.int32)
        b = torch.tensor([4, 2, 3], dtype=torch.int32)
        assert op.combine(a, b).tolist() == [4, 9, 3]

    def test_integer_identity_is_dtype_minimum(self):
        assert max_operator(torch.int32).identity() == -(2 ** 31)
        assert max_operator(torch.int64).identity() == -(2 ** 63)
        assert max_operator(torch.int8).identity() == -128

    def test_float_identity_is_negative_infinity(self):
        assert max_operator(torch.float32).identity() == float("-inf")

    def test_identity_neutral_for_negative_inputs(self):
        op = max_operator(torch.int32)
        values = torch.tensor([-5, -3, -7], dtype=torch.int32)
        assert op.is_identity_for(values)
        for v in values.tolist():
            assert op.combine(op.identity(), v) == v

    def test_explicit_zero_identity_is_kept_and_detectable(self):
        op = max_operator(torch.int32, identity=0)
        assert op.identity() == 0
        assert not op.is_identity_for(torch.tensor([-5, -3], dtype=torch.int32))
        assert op.is_identity_for(torch.tensor([0, 3], dtype=torch.int32))

    def test_accumulate(self):
        op = max_operator(torch.int32)
        out = op.accumulate(torch.tensor([3, 1, 4, 1, 5], dtype=torch.int32))
        assert out.tolist() == [3, 3, 4, 4, 5]

    def test_complex_dtype_rejected(self):
        with pytest.raises(ConfigurationError):
            dtype_minimum(torch.complex64)


class TestOperatorLookup:
    def test_lookup_by_name(self):
        assert get_operator("sum").name == "sum"
        assert get_operator("max", torch.float64).dtype == torch.float64

    def test_unknown_operator(self):
        with pytest.raises(ConfigurationError, match="Unknown scan operator"):
            get_operator("prod")

    def test_empty_values_trivially_neutral(self):
        assert max_operator(torch.int32, identity=100).is_identity_for(torch.empty(0, dtype=torch.int32))
