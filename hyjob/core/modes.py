"""Simulation mode resolution and the per-mode field matrix."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from hyjob.core.errors import UnsupportedModeError

CONCENTRATION = "CONCENTRATION"
TRAJECTORY = "TRAJECTORY"
FORWARD = "FORWARD"
BACKWARD = "BACKWARD"

# Mode-gated fields, in the order errors are reported
GATED_FIELDS = (
    "pollutantMatrixConfig",
    "concentrationGrids",
    "emissionScenarios",
    "emitimesFilePath",
)


class Presence(Enum):
    """Whether a mode-gated field must, or must not, carry a value."""
    REQUIRED = "required"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class FieldRule:
    """Required/forbidden matrix row for one simulation mode."""

    pollutant_matrix: Presence
    concentration_grids: Presence
    emission_scenarios: Presence
    emitimes_file: Presence
    complete_emission_matrix: bool = False
    zero_emission_rate: bool = False

    def presence(self, field_name: str) -> Presence:
        return {
            "pollutantMatrixConfig": self.pollutant_matrix,
            "concentrationGrids": self.concentration_grids,
            "emissionScenarios": self.emission_scenarios,
            "emitimesFilePath": self.emitimes_file,
        }[field_name]


R, F = Presence.REQUIRED, Presence.FORBIDDEN


class Mode(Enum):
    """The four supported (modelType, direction) combinations."""
    CONC_FWD = "ConcFwd"
    CONC_BWD = "ConcBwd"
    TRAJ_FWD = "TrajFwd"
    TRAJ_BWD = "TrajBwd"

    @property
    def rule(self) -> FieldRule:
        return FIELD_MATRIX[self]

    @property
    def is_concentration(self) -> bool:
        return self in (Mode.CONC_FWD, Mode.CONC_BWD)

    @property
    def is_backward(self) -> bool:
        return self in (Mode.CONC_BWD, Mode.TRAJ_BWD)

    def __str__(self) -> str:
        return self.value


FIELD_MATRIX: Dict[Mode, FieldRule] = {
    Mode.CONC_FWD: FieldRule(R, R, R, R, complete_emission_matrix=True),
    Mode.CONC_BWD: FieldRule(R, R, F, F, zero_emission_rate=True),
    Mode.TRAJ_FWD: FieldRule(F, F, F, F),
    Mode.TRAJ_BWD: FieldRule(F, F, F, F),
}

_MODES: Dict[Tuple[str, str], Mode] = {
    (CONCENTRATION, FORWARD): Mode.CONC_FWD,
    (CONCENTRATION, BACKWARD): Mode.CONC_BWD,
    (TRAJECTORY, FORWARD): Mode.TRAJ_FWD,
    (TRAJECTORY, BACKWARD): Mode.TRAJ_BWD,
}


def resolve_mode(model_type: str, direction: str) -> Mode:
    """Determine the simulation mode from modelType and direction.

    Args:
        model_type: "CONCENTRATION" or "TRAJECTORY"
        direction: "FORWARD" or "BACKWARD"

    Returns:
        The matching Mode

    Raises:
        UnsupportedModeError: If the pair is not one of the four modes
    """
    try:
        return _MODES[(model_type, direction)]
    except (KeyError, TypeError):
        raise UnsupportedModeError(model_type, direction) from None
