"""
Process model for the Banker's Algorithm Safety Calculator.

Processes are identified by their row index; the label shown in traces and
safe sequences is "P" followed by that index.
"""

from dataclasses import dataclass
from typing import List, Optional


def process_label(index: int) -> str:
    """Label used for process index in traces, e.g. 0 -> "P0"."""
    return f"P{index}"


def parse_process_label(label: str) -> Optional[int]:
    """
    Inverse of process_label.

    Returns:
        Process index, or None if label is not of the form "P<n>"
    """
    if not label or label[0] != "P" or not label[1:].isdigit():
        return None
    return int(label[1:])


@dataclass
class ProcessInfo:
    """
    Read-only summary of one process row.

    Attributes:
        id: Process index
        name: Process label ("P0", "P1", ...)
        allocation: Current allocation [R]
        maximum: Declared maximum demand [R]
        need: Remaining need [R]
        is_finished: Finish flag from the latest safety evaluation
        can_finish_now: Whether need <= available right now
    """
    id: int
    name: str
    allocation: List[int]
    maximum: List[int]
    need: List[int]
    is_finished: bool
    can_finish_now: Optional[bool] = None

    def has_completed_task(self) -> bool:
        """
        Check if process has received everything it declared.

        Returns:
            True if need is zero for every resource type
        """
        return all(n == 0 for n in self.need)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"ProcessInfo(name={self.name}, alloc={self.allocation}, "
            f"max={self.maximum}, need={self.need}, finished={self.is_finished})"
        )
