"""
Matrix/Vector Primitive Tests

Tests need derivation, comparisons, arithmetic, copying and value validation.
"""

import sys
from copy import deepcopy
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.errors import DimensionMismatchError, InvalidArgumentError
from utils.matrix_utils import (
    add_vectors,
    as_numeric_array,
    clone_matrix,
    clone_vector,
    is_matrix_rectangular,
    is_vector_less_or_equal,
    matrices_equal,
    matrix_column_sums,
    need_matrix,
    subtract_vectors,
    validate_allocation_constraints,
    validate_matrix_values,
    validate_vector_values,
    vector_sum,
    vectors_equal,
    zero_matrix,
    zero_vector,
)


def test_need_matrix_is_max_minus_allocation():
    """Need = Max - Allocation, element-wise."""
    max_demand = [[7, 5, 3], [3, 2, 2], [9, 0, 2]]
    allocation = [[0, 1, 0], [2, 0, 0], [3, 0, 2]]

    need = need_matrix(max_demand, allocation)

    assert need == [[7, 4, 3], [1, 2, 2], [6, 0, 0]]


def test_need_matrix_is_idempotent_and_pure():
    """Two derivations agree and neither input is modified."""
    max_demand = [[2, 1, 1], [1, 2, 1]]
    allocation = [[1, 0, 0], [0, 1, 0]]
    max_before = deepcopy(max_demand)
    alloc_before = deepcopy(allocation)

    first = need_matrix(max_demand, allocation)
    second = need_matrix(max_demand, allocation)

    assert first == second
    assert first is not second
    assert max_demand == max_before
    assert allocation == alloc_before


def test_need_matrix_does_not_clamp():
    """Inconsistent input gives negative need instead of an error."""
    assert need_matrix([[0, 2]], [[1, 1]]) == [[-1, 1]]


def test_need_matrix_dimension_mismatch():
    """Shapes must match."""
    with pytest.raises(DimensionMismatchError):
        need_matrix([[1, 2, 3]], [[1, 2]])
    with pytest.raises(DimensionMismatchError):
        need_matrix([[1, 2], [3, 4]], [[1, 2]])


def test_need_matrix_ragged_rows():
    """Ragged matrices are a dimension error."""
    with pytest.raises(DimensionMismatchError):
        need_matrix([[1, 2], [3]], [[0, 0], [0]])


def test_need_matrix_returns_plain_ints():
    """Results are Python ints even for integral float input."""
    need = need_matrix([[2.0, 1.0]], [[1, 0]])
    assert need == [[1, 1]]
    assert all(type(v) is int for v in need[0])


def test_is_vector_less_or_equal():
    """Component-wise comparison."""
    assert is_vector_less_or_equal([1, 2, 2], [3, 3, 2])
    assert is_vector_less_or_equal([0, 0, 0], [0, 0, 0])
    assert not is_vector_less_or_equal([1, 2, 3], [3, 3, 2])
    assert is_vector_less_or_equal([], [])


def test_is_vector_less_or_equal_length_mismatch_is_false():
    """Different lengths compare as False without raising."""
    assert not is_vector_less_or_equal([1, 2], [1, 2, 3])
    assert not is_vector_less_or_equal([1, 2, 3], [5, 5])


def test_add_and_subtract_vectors():
    """Vector arithmetic."""
    assert add_vectors([3, 3, 2], [2, 0, 0]) == [5, 3, 2]
    assert subtract_vectors([3, 3, 2], [1, 0, 2]) == [2, 3, 0]


def test_vector_arithmetic_dimension_mismatch():
    """Arithmetic on different lengths raises."""
    with pytest.raises(DimensionMismatchError):
        add_vectors([1, 2], [1, 2, 3])
    with pytest.raises(DimensionMismatchError):
        subtract_vectors([1, 2, 3], [1])


def test_clone_is_deep():
    """Clones share no lists with the original."""
    matrix = [[1, 2], [3, 4]]
    vector = [5, 6]

    matrix_copy = clone_matrix(matrix)
    vector_copy = clone_vector(vector)
    matrix_copy[0][0] = 99
    vector_copy[0] = 99

    assert matrix == [[1, 2], [3, 4]]
    assert vector == [5, 6]


def test_zero_construction():
    """Zero matrices and vectors have the requested shape."""
    assert zero_matrix(2, 3) == [[0, 0, 0], [0, 0, 0]]
    assert zero_vector(4) == [0, 0, 0, 0]
    assert zero_matrix(0, 3) == []

    rows = zero_matrix(2, 2)
    rows[0][0] = 1
    assert rows[1][0] == 0, "Rows must not be shared"


def test_validate_vector_values_flags_bad_entries():
    """Negative, fractional, NaN, infinite and non-numeric entries are flagged."""
    errors = validate_vector_values([1, -1, 1.5, float('nan'), float('inf'), "3"], "available")

    print(f"\n  Errors: {[str(e) for e in errors]}")
    assert [e.field for e in errors] == [
        "available[1]", "available[2]", "available[3]", "available[4]", "available[5]"
    ]
    assert [e.code for e in errors] == [
        "negative", "not_integer", "not_finite", "not_finite", "not_numeric"
    ]
    assert all("non-negative integer" in e.message for e in errors)


def test_validate_values_accepts_clean_data():
    """Valid data produces no errors."""
    assert validate_vector_values([0, 1, 2]) == []
    assert validate_matrix_values([[0, 1], [2, 3]]) == []
    assert validate_vector_values([2.0]) == [], "Integral floats are integers"


def test_validate_matrix_values_reports_every_problem():
    """All bad cells are reported, with their coordinates."""
    errors = validate_matrix_values([[0, -2], [-1, 4]], "allocation")

    assert [e.field for e in errors] == ["allocation[0][1]", "allocation[1][0]"]


def test_validate_allocation_constraints():
    """Allocation must not exceed Max."""
    errors = validate_allocation_constraints([[1, 3], [0, 0]], [[2, 2], [0, 0]])

    assert len(errors) == 1
    assert errors[0].field == "allocation[0][1]"
    assert "cannot exceed" in errors[0].message


def test_validate_allocation_constraints_shape_problems():
    """Row and column mismatches are reported instead of compared."""
    rows = validate_allocation_constraints([[1]], [[1], [2]])
    assert len(rows) == 1 and rows[0].field == "matrices"

    cols = validate_allocation_constraints([[1, 2]], [[1]])
    assert len(cols) == 1 and cols[0].field == "row[0]"


def test_sums_and_equality_helpers():
    """Helpers used by statistics and validation."""
    assert vector_sum([1, 2, 3]) == 6
    assert matrix_column_sums([[1, 0, 2], [3, 1, 0]]) == [4, 1, 2]
    assert matrix_column_sums([]) == []
    assert is_matrix_rectangular([[1, 2], [3, 4]])
    assert not is_matrix_rectangular([[1, 2], [3]])
    assert vectors_equal([1, 2], [1, 2])
    assert not vectors_equal([1, 2], [1, 2, 0])
    assert matrices_equal([[1], [2]], [[1], [2]])
    assert not matrices_equal([[1], [2]], [[1], [3]])


def test_as_numeric_array_rejects_non_numeric():
    """Strings are malformed input, not a dimension problem."""
    with pytest.raises(InvalidArgumentError):
        as_numeric_array([["a", "b"]], 2)


def test_as_numeric_array_keeps_nan_as_float():
    """Non-finite values survive conversion so comparisons against them fail."""
    array = as_numeric_array([1, float('nan')], 1)

    assert array.dtype.kind == "f"
    assert not is_vector_less_or_equal(array, [5, 5])


def test_validate_values_accepts_huge_integers():
    """Integers beyond 64 bits are still non-negative integers; validation never raises."""
    assert validate_vector_values([10**30]) == []
    assert validate_matrix_values([[0, 10**30]]) == []

    errors = validate_vector_values([-(10**30)], "available")
    assert [e.code for e in errors] == ["negative"]


def test_as_numeric_array_reports_huge_integers():
    """Arithmetic on integers that do not fit int64 is refused with a clear message."""
    with pytest.raises(InvalidArgumentError, match="too large"):
        as_numeric_array([10**30], 1)
