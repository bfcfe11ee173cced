"""
Value types exchanged with the Banker's Algorithm engine.

ResourceRequest goes in; SafetyResult, RequestResult and ValidationError
come out. None of them hold references back into a SystemState.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, TYPE_CHECKING

from analysis.steps import AlgorithmStep

if TYPE_CHECKING:
    from models.system_state import SystemState


class DenialReason(Enum):
    """Why a resource request was refused."""
    EXCEEDS_DECLARED_MAXIMUM = "exceeds_declared_maximum"
    INSUFFICIENT_AVAILABLE = "insufficient_available"
    WOULD_CAUSE_UNSAFE_STATE = "would_cause_unsafe_state"


@dataclass
class ValidationError:
    """
    A single problem found while validating matrices or a system state.

    Attributes:
        field: Location of the problem, e.g. "allocation[0][2]"
        message: Human-readable explanation
        code: Machine-readable category
        severity: "error", "warning" or "info"
    """
    field: str
    message: str
    code: Optional[str] = None
    severity: str = "error"

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class ResourceRequest:
    """A request by one process for additional resource instances."""
    process_id: int
    request_vector: List[int]


@dataclass(frozen=True)
class SafetyResult:
    """
    Outcome of one run of the safety algorithm.

    Attributes:
        is_safe: True if every process can finish
        safe_sequence: Completion order found (empty when unsafe)
        steps: Full execution trace
        final_finish_state: Finish vector at the end of the run
    """
    is_safe: bool
    safe_sequence: List[str] = field(default_factory=list)
    steps: List[AlgorithmStep] = field(default_factory=list)
    final_finish_state: List[bool] = field(default_factory=list)


@dataclass(frozen=True)
class RequestResult:
    """
    Outcome of evaluating a resource request.

    Attributes:
        can_grant: True if the request was granted
        new_state: Resulting state (grants only)
        error_message: Human-readable verdict, for grants and denials alike
        simulation_steps: Request phases followed by any safety steps
        denial_reason: Which phase refused the request (denials only)
    """
    can_grant: bool
    new_state: Optional["SystemState"] = None
    error_message: Optional[str] = None
    simulation_steps: Optional[List[AlgorithmStep]] = None
    denial_reason: Optional[DenialReason] = None
