"""
Scenario Loader for the Banker's Algorithm Safety Calculator.

Loads and validates JSON scenario files describing an allocation state and
an optional list of events (requests and completions) to apply in order.

Format:
    {
        "description": "optional text",
        "allocation": [[0, 1, 0], ...],
        "max": [[7, 5, 3], ...],
        "available": [3, 3, 2],
        "events": [
            {"type": "request", "process_id": 1, "request": [1, 0, 2]},
            {"type": "complete", "process_id": 1}
        ]
    }
"""

import json
from typing import Dict, List, Any, Tuple

from algorithms.state_builder import validate_system_data
from models.system_state import SystemState


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


EVENT_TYPES = ("request", "complete")


def load_scenario(file_path: str) -> Tuple[SystemState, List[Dict]]:
    """
    Load scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Tuple of (SystemState, events)
        - SystemState: State built from the matrices, not yet evaluated
        - events: Validated events in file order

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}")

    return parse_scenario(data)


def parse_scenario(data: Dict[str, Any]) -> Tuple[SystemState, List[Dict]]:
    """
    Build a state and event list from already-decoded scenario data.

    Raises:
        ScenarioLoadError: If required fields are missing or the matrices fail
            validation
    """
    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")

    # Validate required fields
    for required in ('allocation', 'max', 'available'):
        if required not in data:
            raise ScenarioLoadError(f"Scenario missing '{required}' field")

    allocation = data['allocation']
    max_demand = data['max']
    available = data['available']

    if not isinstance(allocation, list) or not all(isinstance(row, list) for row in allocation):
        raise ScenarioLoadError("'allocation' must be a list of rows")
    if not isinstance(max_demand, list) or not all(isinstance(row, list) for row in max_demand):
        raise ScenarioLoadError("'max' must be a list of rows")
    if not isinstance(available, list):
        raise ScenarioLoadError("'available' must be a list")

    state = SystemState(
        process_count=len(allocation),
        resource_count=len(available),
        allocation=allocation,
        max_demand=max_demand,
        available=available
    )

    errors = validate_system_data(state)
    if errors:
        details = "\n".join(f"  {e}" for e in errors)
        raise ScenarioLoadError(f"VALIDATION FAILED:\n{details}")

    raw_events = data.get('events', [])
    if not isinstance(raw_events, list):
        raise ScenarioLoadError("'events' must be a list")
    events = [_validate_event(event, state) for event in raw_events]

    return state, events


def _validate_event(event: Dict, state: SystemState) -> Dict:
    """
    Validate one event against the loaded state.

    Args:
        event: Event dictionary
        state: Loaded state (for dimension checks)

    Returns:
        The event

    Raises:
        ScenarioLoadError: If event is invalid
    """
    if not isinstance(event, dict):
        raise ScenarioLoadError(f"Event must be an object, got {event!r}")
    if 'type' not in event:
        raise ScenarioLoadError("Event missing 'type' field")
    if event['type'] not in EVENT_TYPES:
        raise ScenarioLoadError(f"Unknown event type '{event['type']}'")
    if 'process_id' not in event:
        raise ScenarioLoadError(f"{event['type']} event missing 'process_id'")

    process_id = event['process_id']
    if not isinstance(process_id, int) or process_id < 0 or process_id >= state.process_count:
        raise ScenarioLoadError(f"Event has invalid process_id {process_id}")

    if event['type'] == 'request':
        if 'request' not in event:
            raise ScenarioLoadError(f"P{process_id}: request event missing 'request'")
        if len(event['request']) != state.resource_count:
            raise ScenarioLoadError(
                f"P{process_id}: request length ({len(event['request'])}) does not "
                f"match resource count ({state.resource_count})"
            )

    return event


def get_scenario_description(file_path: str) -> str:
    """
    Get description from scenario file without full loading.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Description string, or empty string if not present
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return ''
    if not isinstance(data, dict):
        return ''
    return data.get('description', '')
