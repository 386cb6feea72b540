"""CONTROL file composition and parsing.

The line grammar is fixed: every job of a given mode produces the same
sequence of records, and the concentration sections are left out
entirely for trajectory runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from hyjob.core.config import DEFAULTS, PhysicsDefaults
from hyjob.core.emissions import EmissionMatrixBuilder
from hyjob.core.models import Job, control_pollutant_id
from hyjob.core.modes import CONCENTRATION, TRAJECTORY, Mode

# Release start used when the emission is defined elsewhere or suppressed
ZERO_TIME = "00 00 00 00 00"

# Sampling interval: type hour minute (0 = average every hour)
SAMPLING_INTERVAL = "0 1 0"

# Deposition block for a non-depositing pollutant
NO_DEPOSITION = [
    "0.0 0.0 0.0",          # Particle diameter (um), density (g/cc), shape
    "0.0 0.0 0.0 0.0 0.0",  # Dry deposition velocity, MW, reactivity, diffusivity, Henry's
    "0.0 0.0 0.0",          # Wet removal: Henry's, in-cloud, below-cloud
    "0.0",                  # Radioactive decay half-life (days)
    "0.0",                  # Pollutant resuspension (1/m)
]


def epoch_to_hysplit_time(epoch: int) -> str:
    """Convert a Unix epoch to the CONTROL format "YY MM DD HH MM"."""
    return datetime.fromtimestamp(epoch, tz=timezone.utc).strftime("%y %m %d %H %M")


def run_hours(start_epoch: int, end_epoch: int, backward: bool) -> int:
    """Signed total run time in hours, negative for backward runs."""
    hours = int(round(abs(end_epoch - start_epoch) / 3600.0))
    return -hours if backward else hours


def relative_time(hours: int) -> str:
    """Offset in "YY MM DD HH MM" form, whole days carried into the DD field."""
    days, hours = divmod(hours, 24)
    return f"00 00 {days:02d} {hours:02d} 00"


def as_directory(path: str) -> str:
    """HYSPLIT expects directory records to end with a slash."""
    return path if path.endswith("/") else path + "/"


def _number(value: float) -> str:
    return str(float(value))


class ControlFileComposer:
    """Serialize a validated Job into CONTROL file lines.

    Args:
        defaults: Values used for absent physicsConfig keys
    """

    def __init__(self, defaults: PhysicsDefaults = DEFAULTS):
        self.defaults = defaults

    def compose(self, job: Job) -> str:
        """Return the CONTROL text for a validated job."""
        return "\n".join(self.compose_lines(job)) + "\n"

    def compose_lines(self, job: Job) -> List[str]:
        mode = job.mode
        if mode is None:
            raise ValueError("ControlFileComposer requires a validated job")

        meta = job.simulation_meta
        phys = job.physics_config
        d = self.defaults

        vertical_motion = phys.vertical_motion_code
        if vertical_motion is None:
            vertical_motion = d.vertical_motion_code
        top = phys.top_of_model_m_agl
        if top is None:
            top = d.top_of_model_m_agl

        lines = [
            # Start time: release time (forward) or arrival time (backward)
            epoch_to_hysplit_time(meta.start_epoch_utc),
            # Number of source/receptor locations
            str(len(job.points)),
        ]
        for p in job.points:
            lines.append(f"{p.latitude:.6f} {p.longitude:.6f} {p.height_m_agl:.2f}")

        lines.extend([
            # Total run time (hours), negative for backward
            str(run_hours(meta.start_epoch_utc, meta.end_epoch_utc, mode.is_backward)),
            # Vertical motion method
            str(vertical_motion),
            # Top of model domain (m AGL)
            f"{top:.1f}",
            # Number of input meteorological data files
            str(len(job.met_files)),
        ])
        for met in job.met_files:
            lines.append(as_directory(met.directory))
            lines.append(met.file_name)

        if mode.is_concentration:
            lines.extend(self._pollutant_lines(job, mode))
            lines.extend(self._grid_lines(job, mode))
            lines.extend(self._deposition_lines(job))
        else:
            lines.append(as_directory(meta.output_file.directory))
            lines.append(meta.output_file.file_name)

        return lines

    @staticmethod
    def _pollutant_lines(job: Job, mode: Mode) -> List[str]:
        first_cycle = None
        if mode is Mode.CONC_FWD:
            cycles = EmissionMatrixBuilder(job).build()
            first_cycle = cycles[0] if cycles else None

        lines = [str(len(job.pollutants))]
        for pollutant_id in job.pollutants:
            rate, hours, release = 0.0, 0.0, ZERO_TIME
            if first_cycle is not None:
                record = next(r for r in first_cycle.records if r.pollutant_id == pollutant_id)
                rate = record.rate.value
                hours = first_cycle.duration_seconds / 3600.0
                release = epoch_to_hysplit_time(first_cycle.start_epoch_utc)
            lines.extend([
                control_pollutant_id(pollutant_id),
                _number(rate),
                _number(hours),
                release,
            ])
        return lines

    @staticmethod
    def _grid_lines(job: Job, mode: Mode) -> List[str]:
        meta = job.simulation_meta
        duration = abs(run_hours(meta.start_epoch_utc, meta.end_epoch_utc, mode.is_backward))

        lines = [str(len(job.concentration_grids))]
        for i, grid in enumerate(job.concentration_grids):
            file_name = meta.output_file.file_name
            if i > 0:
                file_name = f"{file_name}_{i + 1}"
            lines.extend([
                f"{grid.center_lat:.4f} {grid.center_lon:.4f}",
                f"{grid.spacing_lat:.4f} {grid.spacing_lon:.4f}",
                f"{grid.span_lat:d} {grid.span_lon:d}",
                as_directory(meta.output_file.directory),
                file_name,
                str(len(grid.output_levels_m_agl)),
                " ".join(f"{level:.1f}" for level in grid.output_levels_m_agl),
                # Sampling start matches the start (arrival) time
                epoch_to_hysplit_time(meta.start_epoch_utc),
                # Sampling stop, relative to the start
                relative_time(duration),
                SAMPLING_INTERVAL,
            ])
        return lines

    @staticmethod
    def _deposition_lines(job: Job) -> List[str]:
        lines = [str(len(job.pollutants))]
        for _ in job.pollutants:
            lines.extend(NO_DEPOSITION)
        return lines


# ------------------- Reading -------------------


@dataclass
class ControlPollutant:
    pollutant_id: str
    rate: float
    hours: float
    release_start: str


@dataclass
class ControlGrid:
    center: Tuple[float, float]
    spacing: Tuple[float, float]
    span: Tuple[int, int]
    output_directory: str
    output_file: str
    levels: List[float]
    sampling_start: str
    sampling_stop: str
    sampling_interval: str


@dataclass
class ControlFile:
    """Parsed contents of a CONTROL file."""
    start_time: str
    points: List[Tuple[float, float, float]]
    run_hours: int
    vertical_motion: int
    top_of_model: float
    met_files: List[Tuple[str, str]]
    pollutants: List[ControlPollutant] = field(default_factory=list)
    grids: List[ControlGrid] = field(default_factory=list)
    n_depositing: int = 0
    output_directory: Optional[str] = None
    output_file: Optional[str] = None


def _pair(line: str, conv) -> tuple:
    a, b = line.split()[:2]
    return conv(a), conv(b)


def read_control(text: str, model_type: str = CONCENTRATION) -> ControlFile:
    """Parse CONTROL text produced for the given model type.

    Args:
        text: CONTROL file contents
        model_type: "CONCENTRATION" or "TRAJECTORY"

    Returns:
        ControlFile record
    """
    lines = [line.strip() for line in text.splitlines()]
    pos = 0

    def take() -> str:
        nonlocal pos
        if pos >= len(lines):
            raise ValueError(f"CONTROL ended early at line {pos + 1}")
        line = lines[pos]
        pos += 1
        return line

    start_time = take()
    points = []
    for _ in range(int(take())):
        lat, lon, height = take().split()[:3]
        points.append((float(lat), float(lon), float(height)))

    control = ControlFile(
        start_time=start_time,
        points=points,
        run_hours=int(take()),
        vertical_motion=int(take()),
        top_of_model=float(take()),
        met_files=[],
    )
    for _ in range(int(take())):
        control.met_files.append((take(), take()))

    if model_type == TRAJECTORY:
        control.output_directory = take()
        control.output_file = take()
        return control

    for _ in range(int(take())):
        control.pollutants.append(ControlPollutant(
            pollutant_id=take(),
            rate=float(take()),
            hours=float(take()),
            release_start=take(),
        ))

    for _ in range(int(take())):
        center = _pair(take(), float)
        spacing = _pair(take(), float)
        span = _pair(take(), int)
        out_dir, out_file = take(), take()
        n_levels = int(take())
        levels = [float(v) for v in take().split()[:n_levels]]
        control.grids.append(ControlGrid(
            center=center,
            spacing=spacing,
            span=span,
            output_directory=out_dir,
            output_file=out_file,
            levels=levels,
            sampling_start=take(),
            sampling_stop=take(),
            sampling_interval=take(),
        ))

    control.n_depositing = int(take())
    pos += control.n_depositing * len(NO_DEPOSITION)
    return control
