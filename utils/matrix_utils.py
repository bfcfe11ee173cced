"""
Matrix and vector operations for the Banker's Algorithm Safety Calculator.

Matrices are lists of rows and vectors are flat lists. Arithmetic goes
through numpy but every function returns fresh Python lists, so callers never
receive a reference into data they passed in.
"""

from typing import List, Sequence

import numpy as np

from models.errors import DimensionMismatchError, InvalidArgumentError
from models.results import ValidationError


Matrix = List[List[int]]
Vector = List[int]


def as_numeric_array(values, ndim: int, name: str = "values") -> np.ndarray:
    """
    Convert a vector or matrix into a new numpy array.

    Integral values come back as int64. Fractional or non-finite floats are
    kept as floats so comparisons against them simply fail.

    Args:
        values: Nested sequence or ndarray
        ndim: Expected number of dimensions (1 for vectors, 2 for matrices)
        name: Name used in error messages

    Returns:
        New ndarray (never a view of the input)

    Raises:
        DimensionMismatchError: If rows are ragged or ndim is wrong
        InvalidArgumentError: If values are not numeric or do not fit in int64
    """
    try:
        array = np.array(values)
    except OverflowError:
        raise InvalidArgumentError(f"{name} contains integers too large for 64-bit arithmetic")
    except ValueError as e:
        raise DimensionMismatchError(f"{name} is not rectangular: {e}")

    if array.size == 0 and array.ndim < ndim:
        array = array.reshape((0,) * ndim)

    if array.ndim != ndim:
        raise DimensionMismatchError(
            f"{name} must have {ndim} dimension(s), got shape {array.shape}"
        )

    if array.dtype.kind in "iu":
        return array.astype(np.int64)
    if array.dtype.kind == "f":
        if array.size == 0:
            return array.astype(np.int64)
        if np.all(np.isfinite(array)) and np.all(array == np.floor(array)):
            return array.astype(np.int64)
        return array
    if array.dtype.kind == "O" and all(
        isinstance(v, int) and not isinstance(v, bool) for v in array.flat
    ):
        raise InvalidArgumentError(f"{name} contains integers too large for 64-bit arithmetic")
    raise InvalidArgumentError(f"{name} contains non-numeric values")


def zero_matrix(rows: int, cols: int) -> Matrix:
    """Create a rows x cols matrix filled with zeros."""
    return np.zeros((rows, cols), dtype=np.int64).tolist()


def zero_vector(length: int) -> Vector:
    """Create a vector of zeros."""
    return np.zeros(length, dtype=np.int64).tolist()


def need_matrix(max_demand: Sequence, allocation: Sequence) -> Matrix:
    """
    Calculate the Need matrix: Need[i][j] = Max[i][j] - Allocation[i][j].

    The result is not clamped; inconsistent inputs give negative entries.

    Raises:
        DimensionMismatchError: If the two matrices differ in shape
    """
    max_arr = as_numeric_array(max_demand, 2, "max")
    alloc_arr = as_numeric_array(allocation, 2, "allocation")

    if max_arr.shape != alloc_arr.shape:
        raise DimensionMismatchError(
            f"Matrix dimensions do not match: max {max_arr.shape}, "
            f"allocation {alloc_arr.shape}"
        )

    return (max_arr - alloc_arr).tolist()


def is_vector_less_or_equal(a: Sequence, b: Sequence) -> bool:
    """
    Check a <= b component-wise.

    Vectors of different length are never <= each other; this returns False
    instead of raising.
    """
    if len(a) != len(b):
        return False
    return bool(np.all(np.asarray(a) <= np.asarray(b)))


def add_vectors(a: Sequence, b: Sequence) -> Vector:
    """Add two vectors component-wise."""
    if len(a) != len(b):
        raise DimensionMismatchError(
            f"Vector dimensions do not match: {len(a)} vs {len(b)}"
        )
    return (np.asarray(a) + np.asarray(b)).tolist()


def subtract_vectors(a: Sequence, b: Sequence) -> Vector:
    """Subtract vector b from vector a component-wise."""
    if len(a) != len(b):
        raise DimensionMismatchError(
            f"Vector dimensions do not match: {len(a)} vs {len(b)}"
        )
    return (np.asarray(a) - np.asarray(b)).tolist()


def clone_matrix(matrix: Sequence) -> Matrix:
    """Deep copy of a matrix."""
    if isinstance(matrix, np.ndarray):
        return matrix.tolist()
    return [clone_vector(row) for row in matrix]


def clone_vector(vector: Sequence) -> list:
    """Copy of a vector."""
    if isinstance(vector, np.ndarray):
        return vector.tolist()
    return list(vector)


def _value_problem(value) -> str:
    """Return why value is not a non-negative integer, or '' if it is."""
    if isinstance(value, (bool, np.bool_)):
        return "not_integer"
    if isinstance(value, (int, np.integer)):
        return "negative" if value < 0 else ""
    if not isinstance(value, (float, np.floating)):
        return "not_numeric"
    if not np.isfinite(value):
        return "not_finite"
    if value != int(value):
        return "not_integer"
    if value < 0:
        return "negative"
    return ""


def validate_vector_values(vector: Sequence, field: str = "vector") -> List[ValidationError]:
    """
    Validate that all vector values are non-negative integers.

    Flags negatives, fractions, NaN, infinities and non-numeric entries.
    Never raises.
    """
    errors = []

    for i, value in enumerate(vector):
        problem = _value_problem(value)
        if problem:
            errors.append(ValidationError(
                field=f"{field}[{i}]",
                message=f"Value must be a non-negative integer, got {value}",
                code=problem
            ))

    return errors


def validate_matrix_values(matrix: Sequence, field: str = "matrix") -> List[ValidationError]:
    """Validate that all matrix values are non-negative integers."""
    errors = []

    for i, row in enumerate(matrix):
        errors.extend(validate_vector_values(row, f"{field}[{i}]"))

    return errors


def validate_allocation_constraints(allocation: Sequence, max_demand: Sequence) -> List[ValidationError]:
    """Validate that Allocation[i][j] <= Max[i][j] for all i, j."""
    errors = []

    if len(allocation) != len(max_demand):
        errors.append(ValidationError(
            field="matrices",
            message="Allocation and Max matrices must have the same number of rows",
            code="dimension"
        ))
        return errors

    for i, (alloc_row, max_row) in enumerate(zip(allocation, max_demand)):
        if len(alloc_row) != len(max_row):
            errors.append(ValidationError(
                field=f"row[{i}]",
                message="Allocation and Max matrices must have the same number of columns",
                code="dimension"
            ))
            continue

        for j, (alloc, max_d) in enumerate(zip(alloc_row, max_row)):
            # Non-numeric entries are reported by the value checks
            if _value_problem(alloc) == "not_numeric" or _value_problem(max_d) == "not_numeric":
                continue
            if alloc > max_d:
                errors.append(ValidationError(
                    field=f"allocation[{i}][{j}]",
                    message=f"Allocation ({alloc}) cannot exceed Max ({max_d})",
                    code="constraint"
                ))

    return errors


def vector_sum(vector: Sequence) -> int:
    """Sum of all elements in a vector."""
    return int(np.sum(np.asarray(vector, dtype=np.int64)))


def matrix_column_sums(matrix: Sequence) -> Vector:
    """Sum of each column (total allocated per resource type)."""
    if len(matrix) == 0:
        return []
    return np.sum(as_numeric_array(matrix, 2, "matrix"), axis=0).tolist()


def is_matrix_rectangular(matrix: Sequence) -> bool:
    """Check that every row has the same length."""
    if len(matrix) == 0:
        return True
    expected = len(matrix[0])
    return all(len(row) == expected for row in matrix)


def vectors_equal(a: Sequence, b: Sequence) -> bool:
    """Check two vectors for equality."""
    if len(a) != len(b):
        return False
    return bool(np.array_equal(np.asarray(a), np.asarray(b)))


def matrices_equal(a: Sequence, b: Sequence) -> bool:
    """Check two matrices for equality row by row."""
    if len(a) != len(b):
        return False
    return all(vectors_equal(row_a, row_b) for row_a, row_b in zip(a, b))
