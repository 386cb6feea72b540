"""Emission cycle grouping and completeness checks for forward concentration runs.

A cycle is the set of emission records sharing exactly the same
``[releaseStartEpochUTC, releaseEndEpochUTC)`` interval. Every cycle must
carry one record per (point, pollutant) pair; missing records are never
filled in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

import pandas as pd

from hyjob.core.errors import (
    DuplicateEmissionRecordError,
    IncompleteEmissionCycleError,
    OverlappingEmissionCycleError,
    ValidationError,
)
from hyjob.core.models import EmissionScenario, Job

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmissionCycle:
    """A group of emission records sharing one release interval."""

    start_epoch_utc: int
    end_epoch_utc: int
    records: Tuple[EmissionScenario, ...]

    @property
    def interval(self) -> Tuple[int, int]:
        return (self.start_epoch_utc, self.end_epoch_utc)

    @property
    def duration_seconds(self) -> int:
        return self.end_epoch_utc - self.start_epoch_utc


def scenarios_frame(scenarios: Sequence[EmissionScenario]) -> pd.DataFrame:
    """Tabulate scenarios with their position in the payload sequence."""
    return pd.DataFrame(
        {
            "order": range(len(scenarios)),
            "point_id": [s.point_id for s in scenarios],
            "pollutant_id": [s.pollutant_id for s in scenarios],
            "start": [s.release_start_epoch_utc for s in scenarios],
            "end": [s.release_end_epoch_utc for s in scenarios],
        },
        columns=["order", "point_id", "pollutant_id", "start", "end"],
    )


def group_cycles(scenarios: Sequence[EmissionScenario]) -> List[EmissionCycle]:
    """Group scenarios into cycles by exact interval equality.

    Records keep their first-seen order inside a cycle; cycles are ordered
    by release start (then end).
    """
    if not scenarios:
        return []

    df = scenarios_frame(scenarios)
    cycles = []
    for (start, end), group in df.groupby(["start", "end"], sort=True):
        records = tuple(scenarios[i] for i in group.sort_values("order")["order"])
        cycles.append(EmissionCycle(int(start), int(end), records))
    return cycles


class EmissionMatrixBuilder:
    """Check that every emission cycle covers all point x pollutant pairs.

    Args:
        job: Parsed job; its points and pollutant matrix define the
            expected record set of every cycle
    """

    def __init__(self, job: Job):
        self.point_ids = list(dict.fromkeys(p.point_id for p in job.points))
        self.pollutant_ids = list(job.pollutants)
        self.scenarios = job.emission_scenarios

    def expected_pairs(self) -> pd.MultiIndex:
        return pd.MultiIndex.from_product(
            [self.point_ids, self.pollutant_ids], names=["point_id", "pollutant_id"]
        )

    def cycles(self) -> List[EmissionCycle]:
        return group_cycles(self.scenarios)

    def check(self) -> Iterator[ValidationError]:
        """Yield overlap, duplicate and completeness errors, cycle by cycle."""
        cycles = self.cycles()
        logger.debug(f"Grouped {len(self.scenarios)} emission records into {len(cycles)} cycles")

        yield from self._check_overlaps(cycles)

        expected = self.expected_pairs()
        for cycle in cycles:
            frame = scenarios_frame(cycle.records)
            present = pd.MultiIndex.from_frame(frame[["point_id", "pollutant_id"]])

            for pair in present[present.duplicated()].unique():
                yield DuplicateEmissionRecordError(cycle.interval, (int(pair[0]), pair[1]))

            missing = expected.difference(present, sort=False)
            if len(missing):
                # Report in expected (point-major) order
                missing_set = set(missing)
                pairs = [(int(p), q) for p, q in expected if (p, q) in missing_set]
                yield IncompleteEmissionCycleError(cycle.interval, pairs)

    @staticmethod
    def _check_overlaps(cycles: Sequence[EmissionCycle]) -> Iterator[ValidationError]:
        # Cycles are sorted by start, so any overlap shows up between a
        # cycle and one of the cycles after it that starts before it ends.
        for i, first in enumerate(cycles):
            for second in cycles[i + 1:]:
                if second.start_epoch_utc >= first.end_epoch_utc:
                    break
                yield OverlappingEmissionCycleError(first.interval, second.interval)

    def build(self) -> List[EmissionCycle]:
        """Return the cycles with records sorted point-major in matrix order.

        Only meaningful once check() has reported no errors.
        """
        point_rank = {p: i for i, p in enumerate(self.point_ids)}
        pollutant_rank = {q: i for i, q in enumerate(self.pollutant_ids)}
        ordered = []
        for cycle in self.cycles():
            records = sorted(
                cycle.records,
                key=lambda s: (point_rank[s.point_id], pollutant_rank[s.pollutant_id]),
            )
            ordered.append(EmissionCycle(cycle.start_epoch_utc, cycle.end_epoch_utc, tuple(records)))
        return ordered
