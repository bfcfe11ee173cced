"""
Resource model for the Banker's Algorithm Safety Calculator.

Summarises one resource type (one column of the matrices).
"""

from dataclasses import dataclass


def resource_label(index: int) -> str:
    """Label used for resource column index, e.g. 0 -> "R0"."""
    return f"R{index}"


@dataclass
class ResourceInfo:
    """
    Read-only summary of one resource type.

    Attributes:
        id: Resource index
        name: Resource label ("R0", "R1", ...)
        total_instances: allocated + available
        available_instances: Currently free instances
        allocated_instances: Instances held by processes
        utilization_percentage: allocated / total * 100 (0 when total is 0)

    Invariant:
        total_instances == allocated_instances + available_instances
    """
    id: int
    name: str
    total_instances: int
    available_instances: int
    allocated_instances: int
    utilization_percentage: float

    def __post_init__(self):
        """Validate resource summary."""
        if self.available_instances < 0:
            raise ValueError(f"{self.name}: available_instances cannot be negative")
        if self.allocated_instances + self.available_instances != self.total_instances:
            raise ValueError(
                f"{self.name}: allocated ({self.allocated_instances}) + available "
                f"({self.available_instances}) != total ({self.total_instances})"
            )
