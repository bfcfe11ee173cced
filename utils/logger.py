"""
Logger utility for the Banker's Algorithm Safety Calculator.

Provides step-by-step logging with verbosity levels.
"""

from typing import Optional
from datetime import datetime

from analysis.steps import AlgorithmStep
from models.process import process_label
from models.results import RequestResult, ResourceRequest, SafetyResult


class CalculatorLogger:
    """
    Logger for calculator runs.

    Format: "Step N: description", work vector shown in verbose mode
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Banker's Algorithm Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        # Console output
        print(formatted)

        # File output
        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_step(self, step: AlgorithmStep) -> None:
        """Log one trace step; multi-line descriptions are indented."""
        lines = step.description.split("\n")
        self.log(f"Step {step.step_number}: {lines[0]}")
        for line in lines[1:]:
            self.log(f"    {line}")
        self.log(f"    work = {step.work_vector}", "debug")

    def log_safety_result(self, result: SafetyResult) -> None:
        """
        Log a safety check with its trace.

        Args:
            result: Result of check_safety
        """
        for step in result.steps:
            self.log_step(step)

        if result.is_safe:
            self.log(f"SAFE - sequence: {' -> '.join(result.safe_sequence)}")
        else:
            stuck = [process_label(i) for i, done in enumerate(result.final_finish_state) if not done]
            self.log(f"UNSAFE - cannot finish: {', '.join(stuck)}", "warning")

    def log_request(self, request: ResourceRequest, result: RequestResult) -> None:
        """
        Log a resource request and its verdict.

        Args:
            request: The request that was evaluated
            result: Result of process_request
        """
        status = "GRANTED" if result.can_grant else "DENIED"
        reason = result.denial_reason.value if result.denial_reason else "safe"
        self.log(f"{process_label(request.process_id)} requests {list(request.request_vector)} - {status} ({reason})")

        for step in result.simulation_steps or []:
            self.log_step(step)

        self.log(result.error_message or "", "info" if result.can_grant else "warning")

    def log_system_state(self, state_str: str) -> None:
        """
        Log system state snapshot.

        Args:
            state_str: Formatted system state
        """
        self.log(f"System State:\n{state_str}")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
