"""
Metrics for the Banker's Algorithm Safety Calculator.

Builds a read-only snapshot of a system state: matrices, safety verdict and
resource statistics.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from algorithms.avoidance import check_state_safety
from models.process import ProcessInfo, process_label
from models.resource import ResourceInfo, resource_label
from models.system_state import SystemState
from utils.matrix_utils import clone_matrix, clone_vector, is_vector_less_or_equal, matrix_column_sums


@dataclass
class SystemStatistics:
    """
    Aggregate statistics for one state.

    Tracks:
    1. Completed processes: count of finish[i] == True
    2. Total allocated per resource type
    3. Resource utilization %: allocated / (allocated + available) x 100
    4. Average utilization across resource types
    """
    total_processes: int
    total_resource_types: int
    completed_processes: int = 0
    total_allocated_resources: List[int] = field(default_factory=list)
    resource_utilization: List[float] = field(default_factory=list)

    @property
    def average_utilization(self) -> float:
        """Mean of resource_utilization, 0.0 if there are no resources."""
        if not self.resource_utilization:
            return 0.0
        return sum(self.resource_utilization) / len(self.resource_utilization)

    def display(self) -> str:
        """Format statistics for display."""
        result = "\nSystem Statistics:\n"
        result += f"  Processes: {self.total_processes} ({self.completed_processes} completed)\n"
        result += f"  Resource types: {self.total_resource_types}\n"
        for j, (allocated, util) in enumerate(zip(self.total_allocated_resources, self.resource_utilization)):
            result += f"  {resource_label(j)}: allocated={allocated}, utilization={util:.2f}%\n"
        result += f"  Average Utilization: {self.average_utilization:.2f}%"
        return result


def compute_statistics(state: SystemState) -> SystemStatistics:
    """Compute SystemStatistics for state."""
    totals = matrix_column_sums(state.allocation) or [0] * state.resource_count

    utilization = []
    for allocated, available in zip(totals, state.available):
        total = allocated + available
        utilization.append((allocated / total) * 100 if total > 0 else 0.0)

    return SystemStatistics(
        total_processes=state.process_count,
        total_resource_types=state.resource_count,
        completed_processes=sum(1 for done in state.finish if done),
        total_allocated_resources=totals,
        resource_utilization=utilization
    )


def process_info(state: SystemState) -> List[ProcessInfo]:
    """Per-process summaries for state."""
    need = state.need
    return [
        ProcessInfo(
            id=i,
            name=process_label(i),
            allocation=list(state.allocation[i]),
            maximum=list(state.max_demand[i]),
            need=list(need[i]),
            is_finished=bool(state.finish[i]),
            can_finish_now=is_vector_less_or_equal(need[i], state.available)
        )
        for i in range(state.process_count)
    ]


def resource_info(state: SystemState) -> List[ResourceInfo]:
    """Per-resource summaries for state."""
    stats = compute_statistics(state)
    return [
        ResourceInfo(
            id=j,
            name=resource_label(j),
            total_instances=stats.total_allocated_resources[j] + state.available[j],
            available_instances=state.available[j],
            allocated_instances=stats.total_allocated_resources[j],
            utilization_percentage=stats.resource_utilization[j]
        )
        for j in range(state.resource_count)
    ]


def get_system_snapshot(state: SystemState) -> Dict:
    """
    Create a snapshot of the current state.

    Safety info comes from a fresh safety run, not from the cached
    safe_sequence on the state.

    Returns:
        Dictionary with counts, matrices, vectors, safety info and statistics
    """
    safety = check_state_safety(state)
    stats = compute_statistics(state)

    return {
        'process_count': state.process_count,
        'resource_count': state.resource_count,
        'matrices': {
            'allocation': clone_matrix(state.allocation),
            'maximum': clone_matrix(state.max_demand),
            'need': clone_matrix(state.need),
        },
        'vectors': {
            'available': clone_vector(state.available),
            'finish': list(state.finish),
        },
        'safety_info': {
            'is_safe': safety.is_safe,
            'safe_sequence': list(safety.safe_sequence),
        },
        'statistics': {
            'completed_processes': stats.completed_processes,
            'total_allocated_resources': stats.total_allocated_resources,
            'resource_utilization': stats.resource_utilization,
            'average_utilization': stats.average_utilization,
        },
    }
