"""
hyjob - HYSPLIT job description translator.

Validates structured job descriptions and turns them into the CONTROL,
SETUP.CFG and EMITIMES files consumed by the HYSPLIT model.
"""

__version__ = "0.1.0"

from hyjob.core.config import PhysicsDefaults, SetupConfigComposer, set_defaults
from hyjob.core.emissions import EmissionMatrixBuilder
from hyjob.core.models import Job, parse_job
from hyjob.core.modes import Mode, resolve_mode
from hyjob.core.references import ReferenceResolver
from hyjob.core.units import UnitRegistry
from hyjob.core.validator import ConfigValidator, ValidationReport
from hyjob.core import errors
from hyjob.io import ControlFileComposer, EmitimesComposer, read_control
from hyjob.met import resolve_met_files
from hyjob.workflows import (
    JobArtifacts,
    compose_artifacts,
    load_job,
    translate_job,
    translate_batch,
)

__all__ = [
    # Job model and validation
    "Job",
    "parse_job",
    "Mode",
    "resolve_mode",
    "UnitRegistry",
    "ReferenceResolver",
    "EmissionMatrixBuilder",
    "ConfigValidator",
    "ValidationReport",
    "errors",
    # Configuration
    "PhysicsDefaults",
    "set_defaults",
    # Composition
    "ControlFileComposer",
    "SetupConfigComposer",
    "EmitimesComposer",
    "read_control",
    # Meteorological data
    "resolve_met_files",
    # Workflows
    "JobArtifacts",
    "compose_artifacts",
    "load_job",
    "translate_job",
    "translate_batch",
]
