"""Cross-reference checks for point, pollutant and unit identifiers."""

from __future__ import annotations

from typing import Any, Iterator

from hyjob.core.errors import (
    UnknownPointError,
    UnknownPollutantError,
    UnknownUnitError,
    ValidationError,
)
from hyjob.core.models import Job


class ReferenceResolver:
    """O(1) existence checks against indexes built once from a Job."""

    def __init__(self, job: Job):
        self._points = frozenset(p.point_id for p in job.points)
        self._pollutants = frozenset(job.pollutants)
        self._units = frozenset(job.units)

    def point_exists(self, point_id: Any) -> bool:
        return point_id in self._points

    def pollutant_exists(self, pollutant_id: Any) -> bool:
        return pollutant_id in self._pollutants

    def unit_exists(self, unit_id: Any) -> bool:
        return unit_id in self._units

    def check_job(self, job: Job) -> Iterator[ValidationError]:
        """Yield an error for every reference that does not resolve."""
        for key, pollutant in job.pollutants.items():
            if not self.unit_exists(pollutant.unit_id):
                yield UnknownUnitError(pollutant.unit_id, f"pollutantMatrixConfig.{key}")

        for i, scenario in enumerate(job.emission_scenarios):
            where = f"emissionScenarios[{i}]"
            if not self.point_exists(scenario.point_id):
                yield UnknownPointError(scenario.point_id, where)
            if not self.pollutant_exists(scenario.pollutant_id):
                yield UnknownPollutantError(scenario.pollutant_id, where)
            if not self.unit_exists(scenario.rate.unit_id):
                yield UnknownUnitError(scenario.rate.unit_id, f"{where}.rate")
            if not self.unit_exists(scenario.area.unit_id):
                yield UnknownUnitError(scenario.area.unit_id, f"{where}.area")

        plot = job.plot_config
        if plot is not None and plot.pollutant_id is not None:
            if not self.pollutant_exists(plot.pollutant_id):
                yield UnknownPollutantError(plot.pollutant_id, "plotConfig")
