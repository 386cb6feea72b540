"""EMITIMES composition for forward concentration runs."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from hyjob.core.emissions import EmissionCycle, EmissionMatrixBuilder
from hyjob.core.models import Job
from hyjob.core.modes import Mode

# HYSPLIT skips the first two records, they are for comment purposes only
HEADER = [
    "YYYY MM DD HH    DURATION(hhhh) #RECORDS",
    "YYYY MM DD HH MM DURATION(hhmm) LAT LON HGT(m) RATE(/h) AREA(m2) HEAT(w)",
]

# No heat release; heights come from the source points
HEAT_WATTS = 0.0


def _utc(epoch: int) -> datetime:
    return datetime.fromtimestamp(epoch, tz=timezone.utc)


def _hhmm(seconds: int) -> str:
    minutes = seconds // 60
    return f"{minutes // 60:02d}{minutes % 60:02d}"


def _cycle_hours(cycle: EmissionCycle) -> int:
    # Cycle headers count whole hours, rounded up so the cycle covers every record
    return -(-cycle.duration_seconds // 3600)


class EmitimesComposer:
    """Render the emission cycles of a validated ConcFwd job as EMITIMES text."""

    def compose_lines(self, job: Job) -> List[str]:
        if job.mode is not Mode.CONC_FWD:
            raise ValueError(f"EMITIMES only applies to {Mode.CONC_FWD} runs, got {job.mode}")

        points = {p.point_id: p for p in job.points}
        lines = list(HEADER)
        for cycle in EmissionMatrixBuilder(job).build():
            start = _utc(cycle.start_epoch_utc)
            lines.append(
                f"{start:%Y %m %d %H} {_cycle_hours(cycle):04d} {len(cycle.records)}"
            )
            for record in cycle.records:
                p = points[record.point_id]
                lines.append(
                    f"{start:%Y %m %d %H %M} {_hhmm(cycle.duration_seconds)} "
                    f"{p.latitude:.4f} {p.longitude:.4f} {p.height_m_agl:.1f} "
                    f"{record.rate.value} {record.area.value} {HEAT_WATTS}"
                )
        return lines

    def compose(self, job: Job) -> str:
        return "\n".join(self.compose_lines(job)) + "\n"
