#!/usr/bin/env python3
"""
Banker's Algorithm Safety Calculator
Main entry point for the calculator.

Educational tool for checking whether a resource-allocation state is safe
and whether a resource request can be granted without risking deadlock.
"""

import argparse
import sys
from typing import Dict, List, Optional

from algorithms.avoidance import check_state_safety, fold_safety_result, process_request
from algorithms.state_builder import (
    PROCESS_COUNT_LIMITS,
    RESOURCE_COUNT_LIMITS,
    clamp_count,
    complete_process,
    create_default_state,
    create_fresh_state,
    resize_matrices,
    validate_system_data,
)
from analysis.metrics import compute_statistics
from models.errors import BankersError
from models.results import ResourceRequest
from models.system_state import SystemState
from utils.logger import CalculatorLogger
from utils.scenario_loader import ScenarioLoadError, load_scenario


def parse_request(text: str) -> ResourceRequest:
    """
    Parse a "PID:a,b,c" command-line request.

    Raises:
        argparse.ArgumentTypeError: If text is not in that form
    """
    try:
        pid_text, vector_text = text.split(":", 1)
        process_id = int(pid_text.strip().lstrip("Pp"))
        request_vector = [int(v) for v in vector_text.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid request '{text}', expected PID:a,b,c (e.g. 1:1,0,2)"
        )
    return ResourceRequest(process_id=process_id, request_vector=request_vector)


def run_calculator(
    state: SystemState,
    events: List[Dict],
    logger: CalculatorLogger,
    show_snapshot: bool = False
) -> SystemState:
    """
    Evaluate a state, then apply events in order.

    Order of operations:
    1. Validate the state (abort on errors)
    2. Run the safety algorithm and log its trace
    3. Apply each event: requests carry the new state forward only when
       granted, completions replace the state when they take effect
    4. Optionally log statistics for the final state

    Args:
        state: Starting state
        events: Request/complete events (scenario format)
        logger: Logger instance
        show_snapshot: Log statistics at the end

    Returns:
        Final state

    Raises:
        BankersError: If the state is invalid or an event is malformed
    """
    errors = validate_system_data(state)
    if errors:
        for error in errors:
            logger.log(str(error), "error")
        raise BankersError(f"System state has {len(errors)} validation error(s)")

    _display_state(state, logger)

    logger.log(f"\n{'-'*60}")
    logger.log("SAFETY CHECK")
    logger.log(f"{'-'*60}")
    safety = check_state_safety(state)
    logger.log_safety_result(safety)
    state = fold_safety_result(state, safety)
    completed_ids = set()

    for index, event in enumerate(events, start=1):
        logger.log(f"\n{'-'*60}")
        logger.log(f"Event {index}: {event['type'].upper()} P{event['process_id']}")
        logger.log(f"{'-'*60}")

        if event['type'] == 'request':
            request = ResourceRequest(
                process_id=event['process_id'],
                request_vector=list(event['request'])
            )
            result = process_request(request, state)
            logger.log_request(request, result)
            if result.can_grant:
                state = result.new_state
                logger.log(f"  Available now: {state.available}", "debug")

        elif event['type'] == 'complete':
            # finish on a safety-checked state is simulated, not real completion
            candidate = state.evolve(finish=[i in completed_ids for i in range(state.process_count)])
            completed = complete_process(candidate, event['process_id'])
            if completed is candidate:
                logger.log(
                    f"P{event['process_id']} cannot complete yet "
                    f"(completed={candidate.finish[event['process_id']]}, "
                    f"need={candidate.need[event['process_id']]})",
                    "warning"
                )
            else:
                completed_ids.add(event['process_id'])
                state = completed
                logger.log(
                    f"P{event['process_id']} completed and released its resources; "
                    f"available now {state.available}"
                )
                logger.log("SAFE" if state.is_safe else "UNSAFE")

    if show_snapshot:
        logger.log(compute_statistics(state).display())

    return state


def _display_state(state: SystemState, logger: CalculatorLogger) -> None:
    """Display current state."""
    logger.log(f"Processes: {state.process_count}, Resource types: {state.resource_count}")
    logger.log_system_state(state.display())


def _build_state(args: argparse.Namespace) -> Optional[SystemState]:
    """Build the starting state from command-line options (None when loading a scenario)."""
    if args.scenario:
        return None
    if args.fresh:
        return create_fresh_state()
    return create_default_state()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the calculator."""
    parser = argparse.ArgumentParser(
        description="Banker's Algorithm Safety Calculator"
    )
    parser.add_argument(
        '--scenario',
        type=str,
        help='Path to scenario JSON file (default: built-in example)'
    )
    parser.add_argument(
        '--fresh',
        action='store_true',
        help='Start from an all-zero state instead of the built-in example'
    )
    parser.add_argument(
        '--processes',
        type=int,
        help=f"Resize to this many processes "
             f"({PROCESS_COUNT_LIMITS['min']}-{PROCESS_COUNT_LIMITS['max']})"
    )
    parser.add_argument(
        '--resources',
        type=int,
        help=f"Resize to this many resource types "
             f"({RESOURCE_COUNT_LIMITS['min']}-{RESOURCE_COUNT_LIMITS['max']})"
    )
    parser.add_argument(
        '--request',
        type=parse_request,
        action='append',
        default=[],
        metavar='PID:a,b,c',
        help='Resource request to evaluate after the safety check (repeatable)'
    )
    parser.add_argument(
        '--complete',
        type=int,
        action='append',
        default=[],
        metavar='PID',
        help='Complete a process whose need is zero (repeatable)'
    )
    parser.add_argument(
        '--snapshot',
        action='store_true',
        help='Show resource statistics for the final state'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write the log to this file'
    )

    args = parser.parse_args(argv)

    if args.scenario and args.fresh:
        parser.error('--fresh cannot be combined with --scenario')

    logger = CalculatorLogger(verbose=args.verbose, log_file=args.log_file)

    try:
        state = _build_state(args)
        events = []
        if state is None:
            state, events = load_scenario(args.scenario)
            logger.log(f"Scenario: {args.scenario}")

        if args.processes is not None or args.resources is not None:
            process_count = clamp_count(
                args.processes if args.processes is not None else state.process_count,
                PROCESS_COUNT_LIMITS
            )
            resource_count = clamp_count(
                args.resources if args.resources is not None else state.resource_count,
                RESOURCE_COUNT_LIMITS
            )
            state = resize_matrices(state, process_count, resource_count)

        events.extend(
            {'type': 'request', 'process_id': r.process_id, 'request': r.request_vector}
            for r in args.request
        )
        events.extend({'type': 'complete', 'process_id': pid} for pid in args.complete)

        run_calculator(state, events, logger, show_snapshot=args.snapshot)
    except (ScenarioLoadError, BankersError) as e:
        logger.log(str(e), "error")
        return 1
    finally:
        logger.close()

    return 0


if __name__ == '__main__':
    sys.exit(main())
