"""
Analysis Tests

Tests statistics, snapshots, trace replay and safe-sequence verification.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.avoidance import check_state_safety, process_request
from algorithms.state_builder import create_default_state, create_fresh_state
from analysis.analyzer import build_step_states, verify_safe_sequence
from analysis.metrics import compute_statistics, get_system_snapshot, process_info, resource_info
from analysis.steps import AlgorithmStep, StepTrace, StepType
from models.process import ProcessInfo, parse_process_label, process_label
from models.resource import ResourceInfo
from models.results import ResourceRequest
from models.system_state import SystemState


def textbook_state():
    """Five processes, three resource types."""
    return SystemState(
        process_count=5,
        resource_count=3,
        allocation=[[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]],
        max_demand=[[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2], [4, 3, 3]],
        available=[3, 3, 2]
    )


# ============================================================================
# Statistics
# ============================================================================

def test_compute_statistics():
    """Totals and utilization per resource type."""
    stats = compute_statistics(create_default_state())
    print(stats.display())

    assert stats.total_processes == 2
    assert stats.total_resource_types == 3
    assert stats.completed_processes == 0
    assert stats.total_allocated_resources == [1, 1, 0]
    assert stats.resource_utilization == pytest.approx([100 / 3, 100 / 3, 0.0])
    assert stats.average_utilization == pytest.approx(200 / 9)


def test_statistics_with_nothing_in_the_system():
    """Zero totals give zero utilization instead of dividing by zero."""
    stats = compute_statistics(create_fresh_state(2, 2))

    assert stats.total_allocated_resources == [0, 0]
    assert stats.resource_utilization == [0.0, 0.0]
    assert stats.average_utilization == 0.0


def test_process_and_resource_info():
    """Per-row and per-column summaries."""
    state = create_default_state()

    processes = process_info(state)
    assert [p.name for p in processes] == ["P0", "P1"]
    assert processes[0].need == [1, 1, 1]
    assert processes[0].can_finish_now is True
    assert not processes[0].has_completed_task()

    resources = resource_info(state)
    assert [r.name for r in resources] == ["R0", "R1", "R2"]
    assert [r.total_instances for r in resources] == [3, 3, 3]
    assert resources[2].allocated_instances == 0


def test_process_info_completed_task():
    """Zero need means the process has everything it declared."""
    info = ProcessInfo(id=0, name="P0", allocation=[2], maximum=[2], need=[0], is_finished=False)

    assert info.has_completed_task()


def test_resource_info_invariant():
    """Allocated + available must equal the total."""
    with pytest.raises(ValueError):
        ResourceInfo(
            id=0, name="R0", total_instances=5,
            available_instances=2, allocated_instances=2, utilization_percentage=40.0
        )


def test_system_snapshot():
    """Snapshot carries matrices, vectors, safety and statistics."""
    state = create_default_state()

    snapshot = get_system_snapshot(state)

    assert snapshot['process_count'] == 2
    assert snapshot['resource_count'] == 3
    assert snapshot['matrices']['need'] == [[1, 1, 1], [1, 1, 1]]
    assert snapshot['vectors']['available'] == [2, 2, 3]
    assert snapshot['safety_info'] == {'is_safe': True, 'safe_sequence': ['P0', 'P1']}
    assert snapshot['statistics']['total_allocated_resources'] == [1, 1, 0]

    # Snapshot owns its data
    snapshot['matrices']['allocation'][0][0] = 42
    assert state.allocation[0][0] == 1


def test_snapshot_recomputes_safety():
    """Safety info does not trust the cached verdict on the state."""
    state = create_fresh_state().evolve(is_safe=False)

    snapshot = get_system_snapshot(state)

    assert snapshot['safety_info']['is_safe'] is True


# ============================================================================
# Trace replay
# ============================================================================

def test_step_trace_queries():
    """Filtering a trace by phase and by process."""
    trace = StepTrace()
    trace.extend(create_default_state().algorithm_steps)

    assert len(trace) == 6
    assert len(trace.get_steps_by_number(3)) == 2
    assert len(trace.get_steps_for_process("P0")) == 2
    assert len(trace.display().split("\n")) == 6


def test_build_step_states_for_safety_trace():
    """Finish flags fill in as processes are shown able to finish."""
    state = create_default_state()

    states = build_step_states(state.algorithm_steps, state)

    assert len(states) == len(state.algorithm_steps)
    assert states[0].finish == [False, False]
    assert states[0].work == [2, 2, 3]
    assert states[1].finish == [True, False]
    assert states[-1].finish == [True, True]
    assert states[-1].work == [3, 3, 3]


def test_build_step_states_for_granted_request():
    """Matrices switch to the new state at the tentative allocation step."""
    state = textbook_state()
    result = process_request(ResourceRequest(1, [1, 0, 2]), state)

    states = build_step_states(result.simulation_steps, state, result.new_state, is_granted_request=True)

    assert states[0].available == [3, 3, 2]
    assert states[1].available == [3, 3, 2]
    assert states[2].available == [2, 3, 0]
    assert states[2].need[1] == [0, 2, 0]
    # Request phases never mark the requester finished
    assert states[3].finish == [False] * 5
    assert states[-1].finish == [True] * 5


def test_build_step_states_for_denied_request():
    """Denied requests keep showing the original matrices."""
    state = textbook_state()
    result = process_request(ResourceRequest(0, [8, 0, 0]), state)

    states = build_step_states(result.simulation_steps, state)

    assert len(states) == 1
    assert states[0].allocation == state.allocation


def test_build_step_states_ignores_wording():
    """The tentative allocation step is found by phase and type, not by its text."""
    state = textbook_state()
    new_state = process_request(ResourceRequest(1, [1, 0, 2]), state).new_state
    steps = [
        AlgorithmStep(1, "need ok", work_vector=[3, 3, 2], step_type=StepType.PROCESS_CHECK),
        AlgorithmStep(3, "provisional grant", work_vector=[2, 3, 0], step_type=StepType.RESOURCE_ALLOCATION),
        AlgorithmStep(
            3, "release", work_vector=[5, 3, 2], process_checked="P1",
            can_finish=True, step_type=StepType.RESOURCE_ALLOCATION
        ),
    ]

    states = build_step_states(steps, state, new_state, is_granted_request=True)

    assert states[0].available == [3, 3, 2]
    assert states[1].available == [2, 3, 0]
    assert states[1].allocation[1] == [3, 0, 2]
    assert states[2].finish[1] is True

    # Safety release steps never switch matrices
    replay = build_step_states(steps[2:], state, new_state, is_granted_request=True)
    assert replay[0].available == [3, 3, 2]


# ============================================================================
# Sequence verification
# ============================================================================

def test_verify_reported_sequence():
    """The algorithm's own answer replays cleanly."""
    state = textbook_state()
    sequence = check_state_safety(state).safe_sequence

    assert verify_safe_sequence(state.available, state.allocation, state.need, sequence) == (True, "Sequence is valid")


def test_verify_rejects_bad_sequences():
    """Wrong order, duplicates, gaps and unknown labels are rejected."""
    state = textbook_state()
    args = (state.available, state.allocation, state.need)

    valid, reason = verify_safe_sequence(*args, ["P0", "P1", "P2", "P3", "P4"])
    assert not valid and "exceeds work" in reason

    valid, reason = verify_safe_sequence(*args, ["P1", "P1"])
    assert not valid and "more than once" in reason

    valid, reason = verify_safe_sequence(*args, ["P1", "P3"])
    assert not valid and "2 of 5" in reason

    valid, reason = verify_safe_sequence(*args, ["X1"])
    assert not valid and "Unknown" in reason


def test_process_labels():
    """Labels round-trip through the parser."""
    assert process_label(3) == "P3"
    assert parse_process_label("P12") == 12
    assert parse_process_label("R1") is None
    assert parse_process_label("") is None
    assert textbook_state().process_labels == ["P0", "P1", "P2", "P3", "P4"]


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
