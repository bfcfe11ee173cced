"""
Deadlock Avoidance Algorithm (Banker's Algorithm) for the Safety Calculator.

Implements the safety algorithm and the resource-request algorithm. Both are
pure: they copy what they read and return new values, leaving the caller's
matrices untouched.
"""

from typing import List, Sequence

import numpy as np

from analysis.steps import AlgorithmStep, StepType
from models.errors import DimensionMismatchError, InvalidArgumentError, InvalidProcessIdError
from models.process import process_label
from models.results import DenialReason, RequestResult, ResourceRequest, SafetyResult
from models.system_state import SystemState
from utils.matrix_utils import (
    add_vectors,
    as_numeric_array,
    clone_matrix,
    is_vector_less_or_equal,
    need_matrix,
    subtract_vectors,
    validate_vector_values,
)


def _fmt(vector) -> str:
    """Format a vector as "(a, b, c)"."""
    if isinstance(vector, np.ndarray):
        vector = vector.tolist()
    return "(" + ", ".join(str(v) for v in vector) + ")"


def check_safety(available: Sequence, allocation: Sequence, need: Sequence) -> SafetyResult:
    """
    Check if a state is safe using Banker's Algorithm.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Find process i where Finish[i] == False and Need[i] <= Work
    3. If found: Finish[i] = True, Work += Allocation[i], add Pi to sequence,
       then restart the scan from P0
    4. Repeat step 2 until no process qualifies; SAFE iff every Finish[i]

    The scan always restarts from index 0 after a process finishes, so the
    reported sequence prefers the lowest eligible index at every point. At
    most 2 * num_processes passes are made.

    Time Complexity: O(P^2 x R)

    Args:
        available: Available vector [R]
        allocation: Allocation matrix [P][R]
        need: Need matrix [P][R]

    Returns:
        SafetyResult with the full step trace

    Raises:
        DimensionMismatchError: If inputs are ragged or row counts differ
        InvalidArgumentError: If inputs contain non-numeric values

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 7.5: Deadlock Avoidance.
    """
    # Step 1: Initialize Work and Finish vectors
    # Work = copy of Available (prevents modification of original)
    work = as_numeric_array(available, 1, "available")
    allocation_arr = as_numeric_array(allocation, 2, "allocation")
    need_arr = as_numeric_array(need, 2, "need")

    num_processes = allocation_arr.shape[0]
    if need_arr.shape[0] != num_processes:
        raise DimensionMismatchError(
            f"Need has {need_arr.shape[0]} rows but allocation has {num_processes}"
        )

    finish = [False] * num_processes
    safe_sequence = []
    steps = [AlgorithmStep(
        step_number=1,
        description="init: work = available",
        work_vector=work.tolist(),
        is_highlighted=True,
        step_type=StepType.INITIALIZATION
    )]

    if num_processes == 0:
        return SafetyResult(is_safe=True, safe_sequence=[], steps=steps, final_finish_state=[])

    # Step 2-4: Find processes that can finish with available resources
    found_process = True
    iteration_count = 0
    max_iterations = num_processes * 2

    while found_process and iteration_count < max_iterations:
        found_process = False
        iteration_count += 1

        for i in range(num_processes):
            if finish[i]:
                continue

            label = process_label(i)
            can_finish = is_vector_less_or_equal(need_arr[i], work)

            steps.append(AlgorithmStep(
                step_number=2,
                description=(
                    f"need[{label}] <= work: {_fmt(need_arr[i])} "
                    f"{'<=' if can_finish else 'not <='} {_fmt(work)}"
                ),
                work_vector=work.tolist(),
                process_checked=label,
                can_finish=can_finish,
                is_highlighted=can_finish,
                step_type=StepType.PROCESS_CHECK
            ))

            if can_finish:
                # Process can finish: add its allocation back to work
                previous_work = work.tolist()
                work = np.array(add_vectors(work, allocation_arr[i]))
                finish[i] = True
                safe_sequence.append(label)
                found_process = True

                steps.append(AlgorithmStep(
                    step_number=3,
                    description=(
                        f"work = work + allocation[{label}]: {_fmt(previous_work)} + "
                        f"{_fmt(allocation_arr[i])} = {_fmt(work)}"
                    ),
                    work_vector=work.tolist(),
                    process_checked=label,
                    can_finish=True,
                    is_highlighted=True,
                    step_type=StepType.RESOURCE_ALLOCATION
                ))
                break  # Restart search from beginning for determinism

        if not found_process:
            stuck = [process_label(i) for i, done in enumerate(finish) if not done]
            if stuck:
                steps.append(AlgorithmStep(
                    step_number=2,
                    description=(
                        f"No more processes can finish. Remaining processes "
                        f"{', '.join(stuck)} cannot satisfy their needs with "
                        f"current available resources."
                    ),
                    work_vector=work.tolist(),
                    is_highlighted=False,
                    step_type=StepType.FAILURE
                ))
        elif all(finish):
            break

    is_safe = all(finish)

    if is_safe:
        steps.append(AlgorithmStep(
            step_number=4,
            description=f"All processes can finish safely. Safe sequence: {' -> '.join(safe_sequence)}",
            work_vector=work.tolist(),
            is_highlighted=True,
            step_type=StepType.COMPLETION
        ))
    else:
        unfinished = [process_label(i) for i, done in enumerate(finish) if not done]
        steps.append(AlgorithmStep(
            step_number=4,
            description=(
                f"System is UNSAFE: processes {', '.join(unfinished)} "
                f"cannot finish (potential deadlock)"
            ),
            work_vector=work.tolist(),
            is_highlighted=True,
            step_type=StepType.FAILURE
        ))

    return SafetyResult(
        is_safe=is_safe,
        safe_sequence=safe_sequence if is_safe else [],
        steps=steps,
        final_finish_state=finish
    )


def check_state_safety(state: SystemState) -> SafetyResult:
    """Run check_safety on a state's available, allocation and need."""
    return check_safety(state.available, state.allocation, state.need)


def apply_safety_check(state: SystemState) -> SystemState:
    """
    Run the safety algorithm and fold the result into a new state.

    Returns:
        New SystemState with finish, safe_sequence, algorithm_steps and
        is_safe taken from the safety run
    """
    return fold_safety_result(state, check_state_safety(state))


def fold_safety_result(state: SystemState, result: SafetyResult) -> SystemState:
    """Return a new state carrying the finish vector, sequence, trace and verdict of result."""
    return state.evolve(
        finish=list(result.final_finish_state),
        safe_sequence=list(result.safe_sequence),
        algorithm_steps=list(result.steps),
        is_safe=result.is_safe,
        is_calculating=False
    )


def find_safe_sequence(state: SystemState) -> List[str]:
    """Return the safe sequence for state, or [] if the state is unsafe."""
    return check_state_safety(state).safe_sequence


def _validate_request_shape(request: ResourceRequest, state: SystemState) -> List[int]:
    """
    Check request and state structure before any phase runs.

    Returns:
        The request vector as a plain list of ints

    Raises:
        InvalidArgumentError, InvalidProcessIdError, DimensionMismatchError
    """
    if state is None or state.allocation is None or state.max_demand is None or state.available is None:
        raise InvalidArgumentError("Invalid system state: missing required matrices")

    process_id = request.process_id
    if (
        isinstance(process_id, bool)
        or not isinstance(process_id, (int, np.integer))
        or process_id < 0
        or process_id >= state.process_count
    ):
        raise InvalidProcessIdError(process_id, state.process_count)

    if len(state.allocation) <= process_id or len(state.max_demand) <= process_id:
        raise InvalidArgumentError("Invalid system state: allocation matrix is malformed")

    errors = validate_vector_values(request.request_vector, "request")
    if errors:
        raise InvalidArgumentError("; ".join(str(e) for e in errors))

    request_vector = as_numeric_array(request.request_vector, 1, "request").tolist()
    if len(request_vector) != state.resource_count or len(state.available) != state.resource_count:
        raise DimensionMismatchError(
            f"Request has {len(request_vector)} entries but the system has "
            f"{state.resource_count} resource types"
        )

    return request_vector


def process_request(request: ResourceRequest, state: SystemState) -> RequestResult:
    """
    Handle resource request using Banker's Algorithm.

    Steps:
    1. Validate: request <= need (otherwise deny, process exceeded its claim)
    2. Check: request <= available (otherwise deny, process must wait)
    3. Tentatively allocate resources on copies of the matrices
    4. Run safety algorithm on the tentative state
    5. If safe: grant and return the new state
       If unsafe: deny and discard the tentative state

    Denials are returned, not raised. The state passed in is never modified.

    Args:
        request: Process index and request vector
        state: Current system state

    Returns:
        RequestResult

    Raises:
        InvalidProcessIdError: If process_id is out of range
        DimensionMismatchError: If the request length does not match R
        InvalidArgumentError: If the state or request is malformed
    """
    request_vector = _validate_request_shape(request, state)
    process_id = int(request.process_id)
    label = process_label(process_id)
    need = state.need
    need_row = need[process_id]
    available = list(state.available)
    request_steps = []

    # Step 1: Validate request doesn't exceed need
    within_need = is_vector_less_or_equal(request_vector, need_row)
    request_steps.append(AlgorithmStep(
        step_number=1,
        description=(
            f"Check if Request[{label}] <= Need[{label}]: {_fmt(request_vector)} "
            f"{'<=' if within_need else 'not <='} {_fmt(need_row)}"
        ),
        work_vector=list(available),
        can_finish=within_need,
        is_highlighted=within_need,
        step_type=StepType.PROCESS_CHECK
    ))

    if not within_need:
        return RequestResult(
            can_grant=False,
            error_message=(
                f"Request DENIED: Process {label} request {_fmt(request_vector)} exceeds "
                f"declared maximum need {_fmt(need_row)}. A process cannot request more "
                f"resources than it declared as its maximum requirement."
            ),
            simulation_steps=request_steps,
            denial_reason=DenialReason.EXCEEDS_DECLARED_MAXIMUM
        )

    # Step 2: Check if resources are available
    within_available = is_vector_less_or_equal(request_vector, available)
    request_steps.append(AlgorithmStep(
        step_number=2,
        description=(
            f"Check if Request[{label}] <= Available: {_fmt(request_vector)} "
            f"{'<=' if within_available else 'not <='} {_fmt(available)}"
        ),
        work_vector=list(available),
        can_finish=within_available,
        is_highlighted=within_available,
        step_type=StepType.PROCESS_CHECK
    ))

    if not within_available:
        return RequestResult(
            can_grant=False,
            error_message=(
                f"Request DENIED: Insufficient resources available. Process {label} "
                f"requested {_fmt(request_vector)} but only {_fmt(available)} are "
                f"currently available. Process must wait until more resources become "
                f"available."
            ),
            simulation_steps=request_steps,
            denial_reason=DenialReason.INSUFFICIENT_AVAILABLE
        )

    # Step 3: Tentatively allocate resources on copies
    new_allocation = clone_matrix(state.allocation)
    new_allocation[process_id] = add_vectors(new_allocation[process_id], request_vector)
    new_available = subtract_vectors(available, request_vector)
    new_need = need_matrix(state.max_demand, new_allocation)

    request_steps.append(AlgorithmStep(
        step_number=3,
        description=(
            f"Temporarily allocate resources:\n"
            f"Available = {_fmt(available)} - {_fmt(request_vector)} = {_fmt(new_available)}\n"
            f"Allocation[{label}] = {_fmt(state.allocation[process_id])} + "
            f"{_fmt(request_vector)} = {_fmt(new_allocation[process_id])}\n"
            f"Need[{label}] = {_fmt(need_row)} - {_fmt(request_vector)} = "
            f"{_fmt(new_need[process_id])}"
        ),
        work_vector=list(new_available),
        is_highlighted=True,
        step_type=StepType.RESOURCE_ALLOCATION
    ))

    # Step 4: Run safety algorithm on the tentative state
    safety = check_safety(new_available, new_allocation, new_need)

    request_steps.append(AlgorithmStep(
        step_number=4,
        description=f"Run Safety Algorithm: System is {'SAFE' if safety.is_safe else 'UNSAFE'}",
        work_vector=list(new_available),
        can_finish=safety.is_safe,
        is_highlighted=True,
        step_type=StepType.COMPLETION if safety.is_safe else StepType.FAILURE
    ))

    all_steps = request_steps + list(safety.steps)

    if not safety.is_safe:
        # UNSAFE: tentative matrices are dropped
        return RequestResult(
            can_grant=False,
            error_message=(
                f"Request DENIED: Granting request {_fmt(request_vector)} to Process "
                f"{label} would lead to an UNSAFE state (potential deadlock). The system "
                f"cannot guarantee that all processes can complete their execution. "
                f"Process must wait for a safer system state."
            ),
            simulation_steps=all_steps,
            denial_reason=DenialReason.WOULD_CAUSE_UNSAFE_STATE
        )

    new_state = state.evolve(
        allocation=new_allocation,
        available=new_available,
        finish=list(safety.final_finish_state),
        safe_sequence=list(safety.safe_sequence),
        algorithm_steps=all_steps,
        is_safe=True,
        is_calculating=False
    )

    return RequestResult(
        can_grant=True,
        new_state=new_state,
        error_message=(
            f"Request GRANTED: Process {label} successfully allocated "
            f"{_fmt(request_vector)} resources. System remains in SAFE state with "
            f"execution sequence: {' -> '.join(safety.safe_sequence)}."
        ),
        simulation_steps=all_steps
    )
