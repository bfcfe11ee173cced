"""
Trace analysis for the Banker's Algorithm Safety Calculator.

Replays a step trace into per-step views for step-by-step display, and
independently re-checks a reported safe sequence.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from analysis.steps import AlgorithmStep, StepType
from models.process import parse_process_label
from models.system_state import SystemState
from utils.matrix_utils import add_vectors, is_vector_less_or_equal


@dataclass
class StepState:
    """What the matrices and vectors look like at one step of a trace."""
    work: List[int]
    finish: List[bool]
    allocation: List[List[int]]
    need: List[List[int]]
    available: List[int]


def _is_tentative_allocation(step: AlgorithmStep) -> bool:
    """Request phase 3; safety release steps always name their process."""
    return (
        step.step_number == 3
        and step.step_type == StepType.RESOURCE_ALLOCATION
        and step.process_checked is None
    )


def build_step_states(
    steps: Sequence[AlgorithmStep],
    state: SystemState,
    new_state: Optional[SystemState] = None,
    is_granted_request: bool = False
) -> List[StepState]:
    """
    Replay a trace into one StepState per step.

    Allocation, need and available switch to new_state at the tentative
    allocation step of a granted request. Finish flags are set as processes
    are shown able to finish, and cleared again when a safety run starts.

    Args:
        steps: Trace from check_safety or process_request
        state: State the trace started from
        new_state: State produced by a granted request
        is_granted_request: Whether the trace belongs to a granted request

    Returns:
        List with one StepState per step, in order
    """
    states = []

    current_work = list(state.available)
    current_finish = [False] * state.process_count
    current_allocation = state.allocation
    current_need = state.need
    current_available = state.available

    for step in steps:
        if step.step_type == StepType.INITIALIZATION:
            current_finish = [False] * state.process_count

        if _is_tentative_allocation(step):
            if is_granted_request and new_state is not None:
                current_allocation = new_state.allocation
                current_need = new_state.need
                current_available = new_state.available

        if step.work_vector:
            current_work = list(step.work_vector)

        if step.process_checked and step.can_finish:
            index = parse_process_label(step.process_checked)
            if index is not None and index < len(current_finish):
                current_finish = list(current_finish)
                current_finish[index] = True

        states.append(StepState(
            work=current_work,
            finish=current_finish,
            allocation=current_allocation,
            need=current_need,
            available=current_available
        ))

    return states


def verify_safe_sequence(
    available: Sequence,
    allocation: Sequence,
    need: Sequence,
    sequence: Sequence[str]
) -> Tuple[bool, str]:
    """
    Re-check a safe sequence from scratch.

    Starting from available, each process in sequence must have need <= work
    before its allocation is added to work. Every process must appear
    exactly once.

    Returns:
        Tuple of (valid, reason)
    """
    work = list(available)
    seen = set()

    for label in sequence:
        index = parse_process_label(label)
        if index is None or index >= len(allocation):
            return False, f"Unknown process label {label}"
        if index in seen:
            return False, f"{label} appears more than once"
        if not is_vector_less_or_equal(need[index], work):
            return False, f"need[{label}] = {list(need[index])} exceeds work = {work}"
        work = add_vectors(work, allocation[index])
        seen.add(index)

    if len(seen) != len(allocation):
        return False, f"Sequence covers {len(seen)} of {len(allocation)} processes"

    return True, "Sequence is valid"
