"""Job validation: mode matrix, references, emission completeness and ranges.

Structural problems abort immediately with MalformedJobError. An
unsupported mode is reported on its own since nothing else can be checked
without one. Every other problem is collected into a single report and
the job is rejected as a whole.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import warnings
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Mapping, Optional

import numpy as np

from hyjob.core.config import CONFIG_MODE_CODES, VERTICAL_MOTION_CODES
from hyjob.core.emissions import EmissionMatrixBuilder
from hyjob.core.errors import (
    EpochOrderingError,
    ForbiddenFieldPresentError,
    InconsistentKeyError,
    InvalidValueError,
    JobValidationError,
    MissingRequiredFieldError,
    UnsupportedModeError,
    ValidationError,
)
from hyjob.core.models import Job, control_pollutant_id, parse_job
from hyjob.core.modes import GATED_FIELDS, Mode, Presence, resolve_mode
from hyjob.core.references import ReferenceResolver
from hyjob.core.units import UnitRegistry

logger = logging.getLogger(__name__)

# CONTROL writes two-digit years, so epochs are limited to 1900-2099 UTC
MIN_EPOCH_UTC = -2208988800  # 1900-01-01T00:00:00Z
MAX_EPOCH_UTC = 4102444799   # 2099-12-31T23:59:59Z
EPOCH_RANGE_REASON = "must fall between 1900-01-01 and 2099-12-31 UTC"


@dataclass
class ValidationReport:
    """Outcome of validating one job.

    ``job`` is set only when ``errors`` is empty.
    """
    errors: List[ValidationError] = field(default_factory=list)
    job: Optional[Job] = None
    mode: Optional[Mode] = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def of_type(self, error_type: type) -> List[ValidationError]:
        return [e for e in self.errors if isinstance(e, error_type)]

    def summary(self) -> str:
        if self.ok:
            return f"Job is valid ({self.mode})"
        lines = [f"Job rejected with {len(self.errors)} error(s):"]
        lines.extend(f"  [{e.code}] {e}" for e in self.errors)
        return "\n".join(lines)


def _epoch_in_range(epoch: int) -> bool:
    return MIN_EPOCH_UTC <= epoch <= MAX_EPOCH_UTC


def _strictly_increasing(values) -> bool:
    return bool(np.all(np.diff(np.asarray(values, dtype=float)) > 0))


class ConfigValidator:
    """Validate raw job descriptions into immutable Job models."""

    def check(self, payload: Mapping[str, Any]) -> ValidationReport:
        """Validate a job description and return the full report.

        Raises:
            MalformedJobError: On structural parse failures
        """
        job = parse_job(payload)
        meta = job.simulation_meta

        try:
            mode = resolve_mode(meta.model_type, meta.direction)
        except UnsupportedModeError as e:
            logger.info(f"Rejecting job {job.job_id}: {e}")
            return ValidationReport(errors=[e])

        errors: List[ValidationError] = []
        errors.extend(self._check_field_matrix(job, mode))
        errors.extend(self._check_keys(job))
        errors.extend(UnitRegistry(job.units).check())
        errors.extend(ReferenceResolver(job).check_job(job))
        if mode.rule.complete_emission_matrix and "emissionScenarios" in job.present:
            errors.extend(EmissionMatrixBuilder(job).check())
        errors.extend(self._check_epochs(job, mode))
        errors.extend(self._check_values(job))

        report = ValidationReport(errors=errors, mode=mode)
        if report.ok:
            report.job = dataclasses.replace(job, mode=mode)
            logger.info(f"Validated job {job.job_id} as {mode}")
        else:
            logger.info(f"Rejecting job {job.job_id}: {len(errors)} validation error(s)")
        return report

    def validate(self, payload: Mapping[str, Any]) -> Job:
        """Validate a job description.

        Returns:
            The validated Job, with its mode resolved

        Raises:
            MalformedJobError: On structural parse failures
            JobValidationError: If any semantic check fails; the exception
                carries the complete ValidationReport
        """
        report = self.check(payload)
        if not report.ok:
            raise JobValidationError(report)
        return report.job

    # ------------------- Individual checks -------------------

    @staticmethod
    def _check_field_matrix(job: Job, mode: Mode) -> Iterator[ValidationError]:
        rule = mode.rule
        for name in GATED_FIELDS:
            present = name in job.present
            presence = rule.presence(name)
            if presence is Presence.REQUIRED and not present:
                yield MissingRequiredFieldError(name, str(mode))
            elif presence is Presence.FORBIDDEN and present:
                yield ForbiddenFieldPresentError(name, str(mode))

        if not job.met_files:
            yield MissingRequiredFieldError("metFiles", str(mode))
        if not job.points:
            yield MissingRequiredFieldError("points", str(mode))

    @staticmethod
    def _check_keys(job: Job) -> Iterator[ValidationError]:
        for key, unit in job.units.items():
            if unit.unit_id != key:
                yield InconsistentKeyError("units", key, unit.unit_id)
        for key, pollutant in job.pollutants.items():
            if pollutant.pollutant_id != key:
                yield InconsistentKeyError("pollutantMatrixConfig", key, pollutant.pollutant_id)

        seen = set()
        for i, point in enumerate(job.points):
            if point.point_id in seen:
                yield InvalidValueError(f"points[{i}].pointId", point.point_id, "duplicate pointId")
            seen.add(point.point_id)

    @staticmethod
    def _check_epochs(job: Job, mode: Mode) -> Iterator[ValidationError]:
        meta = job.simulation_meta
        start, end = meta.start_epoch_utc, meta.end_epoch_utc
        for name, value in (("startEpochUTC", start), ("endEpochUTC", end)):
            if not _epoch_in_range(value):
                yield InvalidValueError(f"simulationMeta.{name}", value, EPOCH_RANGE_REASON)
        if mode.is_backward and end > start:
            yield EpochOrderingError("simulationMeta", start, end, "endEpochUTC <= startEpochUTC for BACKWARD")
        elif not mode.is_backward and end < start:
            yield EpochOrderingError("simulationMeta", start, end, "endEpochUTC >= startEpochUTC for FORWARD")

        window = (min(start, end), max(start, end))
        for i, scenario in enumerate(job.emission_scenarios):
            s, e = scenario.interval
            out_of_range = False
            for name, value in (("releaseStartEpochUTC", s), ("releaseEndEpochUTC", e)):
                if not _epoch_in_range(value):
                    out_of_range = True
                    yield InvalidValueError(f"emissionScenarios[{i}].{name}", value, EPOCH_RANGE_REASON)
            if out_of_range:
                continue
            if s >= e:
                yield EpochOrderingError(
                    f"emissionScenarios[{i}]", s, e, "releaseStartEpochUTC < releaseEndEpochUTC"
                )
            elif s < window[0] or s >= window[1]:
                warnings.warn(f"emissionScenarios[{i}] starts outside the simulation window")

    @staticmethod
    def _check_values(job: Job) -> Iterator[ValidationError]:
        meta = job.simulation_meta
        if not meta.output_file.directory:
            yield InvalidValueError("simulationMeta.outputFile.directory", "", "must not be empty")
        if not meta.output_file.file_name:
            yield InvalidValueError("simulationMeta.outputFile.fileName", "", "must not be empty")

        for i, met in enumerate(job.met_files):
            if not met.file_name:
                yield InvalidValueError(f"metFiles[{i}].fileName", met.file_name, "must not be empty")

        phys = job.physics_config
        if phys.config_mode is not None and phys.config_mode not in CONFIG_MODE_CODES:
            yield InvalidValueError("physicsConfig.configMode", phys.config_mode,
                                    f"must be one of {sorted(CONFIG_MODE_CODES)}")
        if phys.max_particles is not None and phys.max_particles <= 0:
            yield InvalidValueError("physicsConfig.maxParticles", phys.max_particles, "must be > 0")
        if phys.vertical_motion_code is not None and phys.vertical_motion_code not in VERTICAL_MOTION_CODES:
            yield InvalidValueError("physicsConfig.verticalMotionCode", phys.vertical_motion_code,
                                    "must be between 0 and 8")
        if phys.top_of_model_m_agl is not None and not phys.top_of_model_m_agl > 0:
            yield InvalidValueError("physicsConfig.topOfModelMAgl", phys.top_of_model_m_agl, "must be > 0")

        for i, p in enumerate(job.points):
            if not -90.0 <= p.latitude <= 90.0:
                yield InvalidValueError(f"points[{i}].latitude", p.latitude, "must be within [-90, 90]")
            if not -180.0 <= p.longitude <= 180.0:
                yield InvalidValueError(f"points[{i}].longitude", p.longitude, "must be within [-180, 180]")
            if not p.height_m_agl >= 0.0:
                yield InvalidValueError(f"points[{i}].heightMAgl", p.height_m_agl, "must be >= 0")

        for key, pollutant in job.pollutants.items():
            if not pollutant.initial_mass_g >= 0.0:
                yield InvalidValueError(f"pollutantMatrixConfig.{key}.initialMassG",
                                        pollutant.initial_mass_g, "must be >= 0")

        tags = {}
        for key in job.pollutants:
            tag = control_pollutant_id(key)
            if tag in tags:
                yield InvalidValueError("pollutantMatrixConfig", [tags[tag], key],
                                        f"identifiers collide as {tag!r} in CONTROL")
            else:
                tags[tag] = key

        for i, g in enumerate(job.concentration_grids):
            path = f"concentrationGrids[{i}]"
            for name, value in (("spacingLat", g.spacing_lat), ("spacingLon", g.spacing_lon),
                                ("spanLat", g.span_lat), ("spanLon", g.span_lon)):
                if not value > 0:
                    yield InvalidValueError(f"{path}.{name}", value, "must be > 0")
            if not g.output_levels_m_agl:
                yield InvalidValueError(f"{path}.outputLevelsMAgl", [], "must not be empty")
            elif not _strictly_increasing(g.output_levels_m_agl):
                yield InvalidValueError(f"{path}.outputLevelsMAgl", list(g.output_levels_m_agl),
                                        "must be strictly increasing")

        for i, s in enumerate(job.emission_scenarios):
            path = f"emissionScenarios[{i}]"
            if not (math.isfinite(s.rate.value) and s.rate.value >= 0.0):
                yield InvalidValueError(f"{path}.rate.value", s.rate.value, "must be >= 0")
            if not (math.isfinite(s.area.value) and s.area.value >= 0.0):
                yield InvalidValueError(f"{path}.area.value", s.area.value, "must be >= 0")

        plot = job.plot_config
        if plot is not None and len(plot.contour_levels) > 1:
            values = [c.value for c in plot.contour_levels]
            if not _strictly_increasing(values):
                yield InvalidValueError("plotConfig.contourLevels", values, "values must be strictly increasing")
