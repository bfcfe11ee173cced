"""
State construction and maintenance for the Banker's Algorithm Safety Calculator.

Factories for default and fresh states, matrix resizing, single-cell edits,
process completion and whole-state validation. Every function returns a new
SystemState; the input state is never modified.
"""

from typing import Dict, List

import numpy as np

from algorithms.avoidance import apply_safety_check, check_safety
from models.errors import InvalidArgumentError, InvalidProcessIdError
from models.results import ValidationError
from models.system_state import SystemState
from utils.matrix_utils import (
    add_vectors,
    clone_matrix,
    clone_vector,
    is_matrix_rectangular,
    need_matrix,
    validate_allocation_constraints,
    validate_matrix_values,
    validate_vector_values,
    vectors_equal,
    zero_matrix,
    zero_vector,
)


PROCESS_COUNT_LIMITS = {"min": 1, "max": 10}
RESOURCE_COUNT_LIMITS = {"min": 1, "max": 10}

DEFAULT_PROCESS_COUNT = 2
DEFAULT_RESOURCE_COUNT = 3


def clamp_count(value: int, limits: Dict[str, int]) -> int:
    """Clamp a process/resource count into limits["min"]..limits["max"]."""
    return max(limits["min"], min(limits["max"], value))


def create_default_state() -> SystemState:
    """
    Create the built-in example state.

    Two processes, three resource types. The safety algorithm is run on it
    immediately and its result is stored in the returned state.
    """
    allocation = [
        [1, 0, 0],  # P0
        [0, 1, 0],  # P1
    ]
    max_demand = [
        [2, 1, 1],  # P0
        [1, 2, 1],  # P1
    ]
    available = [2, 2, 3]

    safety = check_safety(available, allocation, need_matrix(max_demand, allocation))

    return SystemState(
        process_count=DEFAULT_PROCESS_COUNT,
        resource_count=DEFAULT_RESOURCE_COUNT,
        allocation=allocation,
        max_demand=max_demand,
        available=available,
        finish=[False] * DEFAULT_PROCESS_COUNT,
        safe_sequence=list(safety.safe_sequence),
        algorithm_steps=list(safety.steps),
        is_safe=safety.is_safe
    )


def create_fresh_state(
    process_count: int = DEFAULT_PROCESS_COUNT,
    resource_count: int = DEFAULT_RESOURCE_COUNT
) -> SystemState:
    """Create an all-zero state with no evaluation results."""
    return SystemState(
        process_count=process_count,
        resource_count=resource_count,
        allocation=zero_matrix(process_count, resource_count),
        max_demand=zero_matrix(process_count, resource_count),
        available=zero_vector(resource_count)
    )


def resize_matrices(state: SystemState, new_process_count: int, new_resource_count: int) -> SystemState:
    """
    Resize all matrices when the process or resource count changes.

    The overlapping top-left block of allocation and max, and the overlapping
    prefix of available, are preserved. New cells are zero. Previous
    evaluation results are discarded.

    Raises:
        InvalidArgumentError: If either count is negative or not an integer
    """
    for name, count in (("process", new_process_count), ("resource", new_resource_count)):
        if isinstance(count, bool) or not isinstance(count, (int, np.integer)) or count < 0:
            raise InvalidArgumentError(f"Invalid {name} count: {count!r}")

    new_allocation = zero_matrix(new_process_count, new_resource_count)
    new_max = zero_matrix(new_process_count, new_resource_count)
    new_available = zero_vector(new_resource_count)

    min_processes = min(state.process_count, new_process_count, len(state.allocation), len(state.max_demand))
    min_resources = min(state.resource_count, new_resource_count)

    for i in range(min_processes):
        for j in range(min(min_resources, len(state.allocation[i]))):
            new_allocation[i][j] = state.allocation[i][j]
        for j in range(min(min_resources, len(state.max_demand[i]))):
            new_max[i][j] = state.max_demand[i][j]

    for j in range(min(min_resources, len(state.available))):
        new_available[j] = state.available[j]

    return state.evolve(
        process_count=new_process_count,
        resource_count=new_resource_count,
        allocation=new_allocation,
        max_demand=new_max,
        available=new_available,
        finish=[False] * new_process_count,
        safe_sequence=[],
        algorithm_steps=[],
        is_safe=None
    )


def reset_state(state: SystemState) -> SystemState:
    """Zero every value but keep the current process and resource counts."""
    return resize_matrices(create_fresh_state(), state.process_count, state.resource_count)


def update_allocation(state: SystemState, process_id: int, resource_id: int, value: int) -> SystemState:
    """Return a new state with allocation[process_id][resource_id] = value."""
    allocation = clone_matrix(state.allocation)
    allocation[process_id][resource_id] = value
    return state.evolve(allocation=allocation)


def update_max(state: SystemState, process_id: int, resource_id: int, value: int) -> SystemState:
    """Return a new state with max[process_id][resource_id] = value."""
    max_demand = clone_matrix(state.max_demand)
    max_demand[process_id][resource_id] = value
    return state.evolve(max_demand=max_demand)


def update_available(state: SystemState, resource_id: int, value: int) -> SystemState:
    """Return a new state with available[resource_id] = value."""
    available = clone_vector(state.available)
    available[resource_id] = value
    return state.evolve(available=available)


def complete_process(state: SystemState, process_id: int) -> SystemState:
    """
    Simulate a process finishing and releasing everything it holds.

    Only a process whose need is all zero can complete. If the process is
    already finished or still needs resources, the same state object is
    returned unchanged.

    Raises:
        InvalidProcessIdError: If process_id is not an integer in 0..P-1
    """
    if (
        isinstance(process_id, bool)
        or not isinstance(process_id, (int, np.integer))
        or process_id < 0
        or process_id >= state.process_count
    ):
        raise InvalidProcessIdError(process_id, state.process_count)

    if state.finish[process_id]:
        return state

    if not vectors_equal(state.need[process_id], zero_vector(state.resource_count)):
        return state

    new_allocation = clone_matrix(state.allocation)
    new_available = add_vectors(state.available, state.allocation[process_id])
    new_allocation[process_id] = zero_vector(state.resource_count)

    new_finish = list(state.finish)
    new_finish[process_id] = True

    new_need = need_matrix(state.max_demand, new_allocation)
    safety = check_safety(new_available, new_allocation, new_need)

    return state.evolve(
        allocation=new_allocation,
        available=new_available,
        finish=new_finish,
        safe_sequence=list(safety.safe_sequence),
        algorithm_steps=list(safety.steps),
        is_safe=safety.is_safe
    )


def evaluate_state(state: SystemState) -> SystemState:
    """
    Validate state and, if it is well formed, fold a safety check into it.

    Raises:
        InvalidArgumentError: If validate_system_data reports problems
    """
    errors = validate_system_data(state)
    if errors:
        raise InvalidArgumentError("Invalid system state: " + "; ".join(str(e) for e in errors))
    return apply_safety_check(state)


def validate_system_data(state: SystemState) -> List[ValidationError]:
    """
    Validate all system constraints and data integrity.

    Collects every problem found instead of stopping at the first one.
    Does not check allocation + available against any fixed total.
    """
    errors = []

    # Basic dimension validation
    if state.process_count <= 0:
        errors.append(ValidationError(
            field="process_count", message="Process count must be positive", code="dimension"
        ))

    if state.resource_count <= 0:
        errors.append(ValidationError(
            field="resource_count", message="Resource count must be positive", code="dimension"
        ))

    # Matrix dimension validation
    for name, matrix in (("allocation", state.allocation), ("max", state.max_demand)):
        if len(matrix) != state.process_count:
            errors.append(ValidationError(
                field=name,
                message=f"{name.capitalize()} matrix must have {state.process_count} rows",
                code="dimension"
            ))
        if not is_matrix_rectangular(matrix) or any(len(row) != state.resource_count for row in matrix):
            errors.append(ValidationError(
                field=name,
                message=f"{name.capitalize()} matrix rows must have {state.resource_count} columns",
                code="dimension"
            ))

    # Resource vector validation
    if len(state.available) != state.resource_count:
        errors.append(ValidationError(
            field="available",
            message=f"Available vector must have {state.resource_count} elements",
            code="dimension"
        ))

    # Validate all values are non-negative integers
    errors.extend(validate_matrix_values(state.allocation, "allocation"))
    errors.extend(validate_matrix_values(state.max_demand, "max"))
    errors.extend(validate_vector_values(state.available, "available"))

    # Validate allocation constraints (Allocation <= Maximum)
    errors.extend(validate_allocation_constraints(state.allocation, state.max_demand))

    return errors
