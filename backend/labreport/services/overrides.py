"""Manual highlight overrides layered on top of automatic classification.

Each toggle on a parameter cycles:

    (auto) -> off -> on -> warn -> (auto)

Overrides are presentation state for one report-viewing session. They are
keyed by parameter id and owned by the caller; nothing here is global or
persisted.
"""

from collections.abc import Mapping

from labreport.schemas.report import OverrideState
from labreport.schemas.results import Classification

_NEXT_STATE: dict[OverrideState | None, OverrideState | None] = {
    None: OverrideState.OFF,
    OverrideState.OFF: OverrideState.ON,
    OverrideState.ON: OverrideState.WARN,
    OverrideState.WARN: None,
}

# off: no highlight, on: abnormal highlight, warn: "cannot judge" highlight
_OVERRIDE_STATUS: dict[OverrideState, Classification] = {
    OverrideState.OFF: Classification.IN_RANGE,
    OverrideState.ON: Classification.OUT_OF_RANGE,
    OverrideState.WARN: Classification.INDETERMINATE,
}


def next_state(current: OverrideState | None) -> OverrideState | None:
    """Return the override state following current in the toggle cycle."""
    return _NEXT_STATE[current]


def effective_status(
    overrides: Mapping[str, OverrideState],
    parameter_id: str,
    auto_status: Classification,
) -> Classification:
    """Resolve the status to display for a parameter.

    Args:
        overrides: Caller-owned override map keyed by parameter id.
        parameter_id: Parameter to resolve.
        auto_status: Automatic classification from the range evaluator.

    Returns:
        The override's fixed status if one is set, otherwise auto_status.
    """
    state = overrides.get(str(parameter_id))
    if state is None:
        return auto_status
    return _OVERRIDE_STATUS[OverrideState(state)]


class OverrideStateMachine:
    """Per-parameter override state for one report session."""

    def __init__(self) -> None:
        self._states: dict[str, OverrideState] = {}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, OverrideState | str] | None) -> "OverrideStateMachine":
        """Restore overrides the caller kept between requests."""
        machine = cls()
        for parameter_id, state in (mapping or {}).items():
            machine.set(parameter_id, OverrideState(state) if state is not None else None)
        return machine

    def get(self, parameter_id: str) -> OverrideState | None:
        return self._states.get(str(parameter_id))

    def set(self, parameter_id: str, state: OverrideState | None) -> None:
        """Set an override directly; None returns the parameter to automatic."""
        key = str(parameter_id)
        if state is None:
            self._states.pop(key, None)
        else:
            self._states[key] = state

    def toggle(self, parameter_id: str) -> OverrideState | None:
        """Advance the parameter's override one step and return the new state.

        None means the parameter is back on its automatic classification.
        """
        state = next_state(self.get(parameter_id))
        self.set(parameter_id, state)
        return state

    def effective_status(self, parameter_id: str, auto_status: Classification) -> Classification:
        return effective_status(self._states, parameter_id, auto_status)

    def clear(self) -> None:
        self._states.clear()

    def snapshot(self) -> dict[str, OverrideState]:
        return dict(self._states)

    def __len__(self) -> int:
        return len(self._states)
