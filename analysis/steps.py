"""
Step trace model for the Banker's Algorithm Safety Calculator.

Every safety check and request evaluation produces an ordered list of
AlgorithmStep records that a caller can print or replay step by step.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class StepType(Enum):
    """Kinds of trace entries."""
    INITIALIZATION = "initialization"
    PROCESS_CHECK = "process_check"
    RESOURCE_ALLOCATION = "resource_allocation"
    COMPLETION = "completion"
    FAILURE = "failure"


@dataclass(frozen=True)
class AlgorithmStep:
    """
    One row of an execution trace.

    Attributes:
        step_number: Algorithm phase (safety: 1=init, 2=check, 3=release,
            4=conclusion; request: 1..4 for the four request phases)
        description: Human-readable explanation of the step
        work_vector: Snapshot of the work (or available) vector at this point
        process_checked: Label of the process involved, e.g. "P1"
        can_finish: Verdict of the comparison made in this step, if any
        is_highlighted: Emphasis flag for display
        step_type: Optional classification of the entry
    """
    step_number: int
    description: str
    work_vector: List[int] = field(default_factory=list)
    process_checked: Optional[str] = None
    can_finish: Optional[bool] = None
    is_highlighted: bool = False
    step_type: Optional[StepType] = None

    def __str__(self) -> str:
        """Format step for logging."""
        work = ", ".join(str(v) for v in self.work_vector)
        base = f"[{self.step_number}] {self.description}"
        if self.work_vector:
            base += f" | work = ({work})"
        return base


@dataclass
class StepTrace:
    """Ordered collection of algorithm steps."""
    steps: list = None

    def __post_init__(self):
        if self.steps is None:
            self.steps = []

    def add(self, step: AlgorithmStep) -> None:
        """Append a step to the trace."""
        self.steps.append(step)

    def extend(self, steps: List[AlgorithmStep]) -> None:
        """Append several steps, keeping their order."""
        self.steps.extend(steps)

    def get_steps_by_number(self, step_number: int) -> list:
        """Get all steps recorded for one algorithm phase."""
        return [s for s in self.steps if s.step_number == step_number]

    def get_steps_for_process(self, label: str) -> list:
        """Get all steps that checked the given process label."""
        return [s for s in self.steps if s.process_checked == label]

    def display(self) -> str:
        """Format all steps for display."""
        return "\n".join(str(step) for step in self.steps)

    def __len__(self) -> int:
        return len(self.steps)
