"""Job data model and structural parsing of raw job descriptions.

Parsing here is purely structural: required keys must be present and
values must have the right types. Anything else (ranges, references,
mode-dependent presence) is left to the validator so that semantic
errors can be collected into one report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from hyjob.core.errors import MalformedJobError

if TYPE_CHECKING:
    from hyjob.core.modes import Mode

# Top-level keys every job must carry regardless of mode
REQUIRED_TOP_LEVEL = ("simulationMeta", "metFiles", "physicsConfig", "points", "units")


class ReadOnlyDict(dict):
    """Dict that rejects mutation once built; pickles as a plain copy."""

    def _readonly(self, *args, **kwargs):
        raise TypeError(f"{type(self).__name__} is read-only")

    __setitem__ = __delitem__ = __ior__ = _readonly
    clear = pop = popitem = setdefault = update = _readonly

    def __reduce__(self):
        return (type(self), (dict(self),))


@dataclass(frozen=True)
class OutputFile:
    """Directory and file name pair used for outputs and met files."""

    directory: str
    file_name: str


@dataclass(frozen=True)
class SimulationMeta:
    model_type: str
    direction: str
    start_epoch_utc: int
    end_epoch_utc: int
    output_file: OutputFile


@dataclass(frozen=True)
class PhysicsConfig:
    """Maps to SETUP.CFG. None means the key was absent in the payload."""

    config_mode: Optional[str] = None
    max_particles: Optional[int] = None
    vertical_motion_code: Optional[int] = None
    emitimes_file_path: Optional[str] = None
    top_of_model_m_agl: Optional[float] = None


@dataclass(frozen=True)
class Point:
    """Source location (forward runs) or receptor location (backward runs)."""

    point_id: int
    latitude: float
    longitude: float
    height_m_agl: float


@dataclass(frozen=True)
class ColorZone:
    upper: float
    color: Optional[str] = None
    inverted_color: Optional[str] = None


@dataclass(frozen=True)
class Unit:
    unit_id: str
    label: Optional[str]
    conversion_type: str
    multiplier: float
    lower: float = 0.0
    zones: Tuple[ColorZone, ...] = ()
    description: Optional[str] = None


@dataclass(frozen=True)
class Pollutant:
    pollutant_id: str
    initial_mass_g: float
    unit_id: str


@dataclass(frozen=True)
class ConcentrationGrid:
    center_lat: float
    center_lon: float
    spacing_lat: float
    spacing_lon: float
    span_lat: int               # Number of grid cells
    span_lon: int
    output_levels_m_agl: Tuple[float, ...]


@dataclass(frozen=True)
class Quantity:
    value: float
    unit_id: str


@dataclass(frozen=True)
class EmissionScenario:
    point_id: int
    pollutant_id: str
    release_start_epoch_utc: int
    release_end_epoch_utc: int
    rate: Quantity
    area: Quantity

    @property
    def interval(self) -> Tuple[int, int]:
        return (self.release_start_epoch_utc, self.release_end_epoch_utc)


@dataclass(frozen=True)
class ContourLevel:
    value: float
    color_index: int


@dataclass(frozen=True)
class PlotConfig:
    """Handed verbatim to the plot renderer once validated."""

    pollutant_id: Optional[str]
    plot_level_m_agl: Optional[float]
    output_plot_file: Optional[OutputFile]
    contour_levels: Tuple[ContourLevel, ...] = ()


@dataclass(frozen=True)
class Job:
    """Root entity of a job description.

    Mode-gated collections are empty when absent from the payload. The
    ``present`` set records which mode-gated keys carried a non-empty
    value, which is what the mode field matrix is checked against.
    ``units`` and ``pollutants`` are ReadOnlyDict instances.
    """

    simulation_meta: SimulationMeta
    met_files: Tuple[OutputFile, ...]
    physics_config: PhysicsConfig
    points: Tuple[Point, ...]
    units: Dict[str, Unit]
    pollutants: Dict[str, Pollutant] = field(default_factory=ReadOnlyDict)
    concentration_grids: Tuple[ConcentrationGrid, ...] = ()
    emission_scenarios: Tuple[EmissionScenario, ...] = ()
    plot_config: Optional[PlotConfig] = None
    job_id: Optional[str] = None
    present: frozenset = frozenset()
    # Set by the validator once the job has passed every check
    mode: Optional[Mode] = None


# ------------------- Structural parsing -------------------


def _get(data: Mapping[str, Any], key: str, path: str, required: bool = True) -> Any:
    if not isinstance(data, Mapping):
        raise MalformedJobError(path, f"expected an object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        if required:
            raise MalformedJobError(f"{path}.{key}", "required field is missing")
        return None
    return data[key]


def _as_int(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        # Accept integral floats such as 1764547200.0 from loose JSON producers
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise MalformedJobError(path, f"expected an integer, got {value!r}")
    return value


def _as_float(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedJobError(path, f"expected a number, got {value!r}")
    return float(value)


def _as_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise MalformedJobError(path, f"expected a string, got {value!r}")
    return value


def _as_list(value: Any, path: str) -> list:
    if not isinstance(value, (list, tuple)):
        raise MalformedJobError(path, f"expected an array, got {type(value).__name__}")
    return list(value)


def _as_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedJobError(path, f"expected an object, got {type(value).__name__}")
    return value


def _parse_file(data: Any, path: str, name_key: str = "fileName") -> OutputFile:
    return OutputFile(
        directory=_as_str(_get(data, "directory", path), f"{path}.directory"),
        file_name=_as_str(_get(data, name_key, path), f"{path}.{name_key}"),
    )


def _parse_meta(data: Any) -> SimulationMeta:
    path = "simulationMeta"
    return SimulationMeta(
        model_type=_as_str(_get(data, "modelType", path), f"{path}.modelType"),
        direction=_as_str(_get(data, "direction", path), f"{path}.direction"),
        start_epoch_utc=_as_int(_get(data, "startEpochUTC", path), f"{path}.startEpochUTC"),
        end_epoch_utc=_as_int(_get(data, "endEpochUTC", path), f"{path}.endEpochUTC"),
        output_file=_parse_file(_get(data, "outputFile", path), f"{path}.outputFile"),
    )


def _parse_physics(data: Any) -> PhysicsConfig:
    path = "physicsConfig"
    data = _as_mapping(data, path)

    def optional(key, conv):
        value = _get(data, key, path, required=False)
        return None if value is None else conv(value, f"{path}.{key}")

    return PhysicsConfig(
        config_mode=optional("configMode", _as_str),
        max_particles=optional("maxParticles", _as_int),
        vertical_motion_code=optional("verticalMotionCode", _as_int),
        emitimes_file_path=optional("emitimesFilePath", _as_str),
        top_of_model_m_agl=optional("topOfModelMAgl", _as_float),
    )


def _parse_point(data: Any, path: str) -> Point:
    return Point(
        point_id=_as_int(_get(data, "pointId", path), f"{path}.pointId"),
        latitude=_as_float(_get(data, "latitude", path), f"{path}.latitude"),
        longitude=_as_float(_get(data, "longitude", path), f"{path}.longitude"),
        height_m_agl=_as_float(_get(data, "heightMAgl", path), f"{path}.heightMAgl"),
    )


def _parse_unit(data: Any, path: str) -> Unit:
    strategy = _get(data, "conversion_strategy", path)
    zones_data = _get(data, "custom_zones", path, required=False) or {}
    zones_data = _as_mapping(zones_data, f"{path}.custom_zones")

    zones = []
    for i, zone in enumerate(_as_list(zones_data.get("next") or [], f"{path}.custom_zones.next")):
        zpath = f"{path}.custom_zones.next[{i}]"
        color = _get(zone, "color", zpath, required=False)
        inverted = _get(zone, "inverted_color", zpath, required=False)
        zones.append(ColorZone(
            upper=_as_float(_get(zone, "upper", zpath), f"{zpath}.upper"),
            color=None if color is None else _as_str(color, f"{zpath}.color"),
            inverted_color=None if inverted is None else _as_str(inverted, f"{zpath}.inverted_color"),
        ))

    lower = zones_data.get("lower")
    label = _get(data, "label", path, required=False)
    description = _get(data, "description", path, required=False)
    return Unit(
        unit_id=_as_str(_get(data, "unitId", path), f"{path}.unitId"),
        label=None if label is None else _as_str(label, f"{path}.label"),
        conversion_type=_as_str(_get(strategy, "type", f"{path}.conversion_strategy"),
                                f"{path}.conversion_strategy.type"),
        multiplier=_as_float(_get(strategy, "m", f"{path}.conversion_strategy"),
                             f"{path}.conversion_strategy.m"),
        lower=0.0 if lower is None else _as_float(lower, f"{path}.custom_zones.lower"),
        zones=tuple(zones),
        description=None if description is None else _as_str(description, f"{path}.description"),
    )


def _parse_pollutant(data: Any, path: str) -> Pollutant:
    return Pollutant(
        pollutant_id=_as_str(_get(data, "pollutantId", path), f"{path}.pollutantId"),
        initial_mass_g=_as_float(_get(data, "initialMassG", path), f"{path}.initialMassG"),
        unit_id=_as_str(_get(data, "unitId", path), f"{path}.unitId"),
    )


def _parse_grid(data: Any, path: str) -> ConcentrationGrid:
    levels = _as_list(_get(data, "outputLevelsMAgl", path), f"{path}.outputLevelsMAgl")
    return ConcentrationGrid(
        center_lat=_as_float(_get(data, "centerLat", path), f"{path}.centerLat"),
        center_lon=_as_float(_get(data, "centerLon", path), f"{path}.centerLon"),
        spacing_lat=_as_float(_get(data, "spacingLat", path), f"{path}.spacingLat"),
        spacing_lon=_as_float(_get(data, "spacingLon", path), f"{path}.spacingLon"),
        span_lat=_as_int(_get(data, "spanLat", path), f"{path}.spanLat"),
        span_lon=_as_int(_get(data, "spanLon", path), f"{path}.spanLon"),
        output_levels_m_agl=tuple(
            _as_float(v, f"{path}.outputLevelsMAgl[{i}]") for i, v in enumerate(levels)
        ),
    )


def _parse_quantity(data: Any, path: str) -> Quantity:
    return Quantity(
        value=_as_float(_get(data, "value", path), f"{path}.value"),
        unit_id=_as_str(_get(data, "unitId", path), f"{path}.unitId"),
    )


def _parse_scenario(data: Any, path: str) -> EmissionScenario:
    return EmissionScenario(
        point_id=_as_int(_get(data, "pointId", path), f"{path}.pointId"),
        pollutant_id=_as_str(_get(data, "pollutantId", path), f"{path}.pollutantId"),
        release_start_epoch_utc=_as_int(_get(data, "releaseStartEpochUTC", path),
                                        f"{path}.releaseStartEpochUTC"),
        release_end_epoch_utc=_as_int(_get(data, "releaseEndEpochUTC", path),
                                      f"{path}.releaseEndEpochUTC"),
        rate=_parse_quantity(_get(data, "rate", path), f"{path}.rate"),
        area=_parse_quantity(_get(data, "area", path), f"{path}.area"),
    )


def _parse_plot(data: Any) -> PlotConfig:
    path = "plotConfig"
    data = _as_mapping(data, path)
    pollutant_id = _get(data, "pollutantId", path, required=False)
    level = _get(data, "plotLevelMAgl", path, required=False)
    plot_file = _get(data, "outputPlotFile", path, required=False)
    contours = []
    for i, c in enumerate(_as_list(data.get("contourLevels") or [], f"{path}.contourLevels")):
        cpath = f"{path}.contourLevels[{i}]"
        contours.append(ContourLevel(
            value=_as_float(_get(c, "value", cpath), f"{cpath}.value"),
            color_index=_as_int(_get(c, "colorIndex", cpath), f"{cpath}.colorIndex"),
        ))
    return PlotConfig(
        pollutant_id=None if pollutant_id is None else _as_str(pollutant_id, f"{path}.pollutantId"),
        plot_level_m_agl=None if level is None else _as_float(level, f"{path}.plotLevelMAgl"),
        output_plot_file=None if plot_file is None else _parse_file(plot_file, f"{path}.outputPlotFile"),
        contour_levels=tuple(contours),
    )


def _parse_keyed(data: Any, path: str, parse) -> ReadOnlyDict:
    """Parse a mapping of id -> entry, keeping the payload order."""
    data = _as_mapping(data, path)
    return ReadOnlyDict({str(key): parse(entry, f"{path}.{key}") for key, entry in data.items()})


def control_pollutant_id(pollutant_id: str) -> str:
    """Pollutant identifier as written to CONTROL: upper case, at most 4 characters."""
    return pollutant_id.upper()[:4]


def parse_job(payload: Mapping[str, Any]) -> Job:
    """Parse a raw job description into a Job.

    Args:
        payload: Job description as decoded from JSON

    Returns:
        Job with every present section parsed

    Raises:
        MalformedJobError: On missing top-level keys or wrong value types
    """
    payload = _as_mapping(payload, "job")
    for key in REQUIRED_TOP_LEVEL:
        _get(payload, key, "job")

    met_files = tuple(
        _parse_file(m, f"metFiles[{i}]")
        for i, m in enumerate(_as_list(payload["metFiles"], "metFiles"))
    )
    points = tuple(
        _parse_point(p, f"points[{i}]")
        for i, p in enumerate(_as_list(payload["points"], "points"))
    )
    units = _parse_keyed(payload["units"], "units", _parse_unit)

    present = set()

    pollutants = ReadOnlyDict()
    raw = payload.get("pollutantMatrixConfig")
    if raw:
        pollutants = _parse_keyed(raw, "pollutantMatrixConfig", _parse_pollutant)
        present.add("pollutantMatrixConfig")

    grids = ()
    raw = payload.get("concentrationGrids")
    if raw:
        grids = tuple(
            _parse_grid(g, f"concentrationGrids[{i}]")
            for i, g in enumerate(_as_list(raw, "concentrationGrids"))
        )
        present.add("concentrationGrids")

    scenarios = ()
    raw = payload.get("emissionScenarios")
    if raw:
        scenarios = tuple(
            _parse_scenario(s, f"emissionScenarios[{i}]")
            for i, s in enumerate(_as_list(raw, "emissionScenarios"))
        )
        present.add("emissionScenarios")

    physics = _parse_physics(payload["physicsConfig"])
    if physics.emitimes_file_path:
        present.add("emitimesFilePath")

    plot = None
    if payload.get("plotConfig") is not None:
        plot = _parse_plot(payload["plotConfig"])

    job_id = payload.get("jobId")
    return Job(
        simulation_meta=_parse_meta(payload["simulationMeta"]),
        met_files=met_files,
        physics_config=physics,
        points=points,
        units=units,
        pollutants=pollutants,
        concentration_grids=grids,
        emission_scenarios=scenarios,
        plot_config=plot,
        job_id=None if job_id is None else _as_str(job_id, "jobId"),
        present=frozenset(present),
    )
