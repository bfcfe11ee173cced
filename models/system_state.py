"""
System State model for the Banker's Algorithm Safety Calculator.

Holds the matrices and vectors the Banker's Algorithm works on, together
with the result of the most recent safety evaluation.
"""

from copy import deepcopy
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import List, Optional

from analysis.steps import AlgorithmStep
from models.process import process_label
from utils.matrix_utils import need_matrix


@dataclass
class SystemState:
    """
    Complete Banker's Algorithm state.

    Attributes:
        process_count: Number of processes P
        resource_count: Number of resource types R
        allocation: [P][R] Resources currently held by each process
        max_demand: [P][R] Maximum resources each process may ever hold
        available: [R] Free resource instances by type
        finish: [P] Finish vector from the latest safety evaluation
        safe_sequence: Process labels in completion order (latest evaluation)
        algorithm_steps: Trace of the latest evaluation
        is_calculating: Set by callers while a check is in progress
        is_safe: Verdict of the latest evaluation, None if not evaluated
        last_updated: When this state value was produced

    Need (Max - Allocation) is derived on first access and cached. It has no
    setter. Assigning allocation or max_demand drops the cache; after editing
    their rows in place, call refresh_matrices (or build a new state with
    evolve).
    """
    process_count: int
    resource_count: int
    allocation: List[List[int]]
    max_demand: List[List[int]]
    available: List[int]
    finish: List[bool] = field(default_factory=list)
    safe_sequence: List[str] = field(default_factory=list)
    algorithm_steps: List[AlgorithmStep] = field(default_factory=list)
    is_calculating: bool = False
    is_safe: Optional[bool] = None
    last_updated: Optional[datetime] = None

    _need: Optional[List[List[int]]] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Fill in the finish vector if not provided."""
        if not self.finish:
            self.finish = [False] * self.process_count
        if self.last_updated is None:
            self.last_updated = datetime.now()

    def __setattr__(self, name, value):
        super().__setattr__(name, value)
        if name in ("allocation", "max_demand"):
            super().__setattr__("_need", None)

    @property
    def need(self) -> List[List[int]]:
        """
        Get need matrix [P][R].
        Computed as: Need = Max - Allocation
        """
        if self._need is None:
            self._need = need_matrix(self.max_demand, self.allocation)
        return self._need

    @property
    def process_labels(self) -> List[str]:
        """Labels P0..P(n-1) in index order."""
        return [process_label(i) for i in range(self.process_count)]

    def refresh_matrices(self) -> None:
        """Drop the cached need matrix after allocation or max changed in place."""
        self._need = None

    def evolve(self, **changes) -> "SystemState":
        """
        Return a new state with the given fields replaced.

        Fields that are not replaced are deep-copied, so the new state never
        shares a list with this one.
        """
        values = {}
        for f in fields(self):
            if not f.init:
                continue
            if f.name in changes:
                values[f.name] = changes[f.name]
            else:
                values[f.name] = deepcopy(getattr(self, f.name))
        if "last_updated" not in changes:
            values["last_updated"] = datetime.now()
        return SystemState(**values)

    def copy(self) -> "SystemState":
        """Deep copy of this state."""
        return self.evolve(last_updated=self.last_updated)

    def display(self) -> str:
        """
        Generate readable string representation of system state.

        Returns:
            Formatted string showing all matrices and vectors
        """
        output = []
        output.append("\n" + "=" * 60)
        output.append("SYSTEM STATE")
        output.append("=" * 60)

        header = "      " + " ".join([f"R{j:<3}" for j in range(self.resource_count)])

        output.append("\nAvailable Resources:")
        output.append("  [" + ", ".join(
            f"R{j}:{value:2}" for j, value in enumerate(self.available)
        ) + "]")

        for title, matrix in (
            ("Allocation Matrix:", self.allocation),
            ("Max Demand Matrix:", self.max_demand),
            ("Need Matrix (Max - Allocation):", self.need),
        ):
            output.append("\n" + title)
            output.append(header)
            for i, row in enumerate(matrix):
                output.append(f"  P{i}: " + " ".join(f"{value:<4}" for value in row))

        output.append("\nFinish: " + ", ".join(
            f"P{i}={'T' if done else 'F'}" for i, done in enumerate(self.finish)
        ))

        if self.is_safe is None:
            output.append("Safety: not evaluated")
        elif self.is_safe:
            output.append("Safety: SAFE, sequence " + " -> ".join(self.safe_sequence))
        else:
            output.append("Safety: UNSAFE")

        output.append("\n" + "=" * 60)
        return "\n".join(output)
