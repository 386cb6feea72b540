"""Core job model, validation and configuration for HYSPLIT jobs."""

from hyjob.core.config import PhysicsDefaults, SetupConfigComposer, set_defaults
from hyjob.core.emissions import EmissionCycle, EmissionMatrixBuilder
from hyjob.core.models import Job, parse_job
from hyjob.core.modes import Mode, resolve_mode
from hyjob.core.references import ReferenceResolver
from hyjob.core.units import UnitRegistry
from hyjob.core.validator import ConfigValidator, ValidationReport

__all__ = [
    "Job",
    "parse_job",
    "Mode",
    "resolve_mode",
    "UnitRegistry",
    "ReferenceResolver",
    "EmissionCycle",
    "EmissionMatrixBuilder",
    "ConfigValidator",
    "ValidationReport",
    "PhysicsDefaults",
    "SetupConfigComposer",
    "set_defaults",
]
