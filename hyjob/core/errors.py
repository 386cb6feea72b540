"""Exceptions raised while validating and translating HYSPLIT jobs."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple


class HyjobError(Exception):
    """Base exception for hyjob errors."""


class MalformedJobError(HyjobError, ValueError):
    """Structural parse failure: missing top-level keys or wrong types.

    Always fatal; validation stops immediately.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class MetFileNotFoundError(HyjobError, FileNotFoundError):
    """A meteorological file could not be resolved to an existing path."""

    def __init__(self, directory: str, file_name: str):
        self.directory = directory
        self.file_name = file_name
        super().__init__(f"Meteorological file not found: {directory}{file_name}")


class ValidationError(HyjobError):
    """A semantic validation failure collected into a ValidationReport."""

    code = "validation"

    def __eq__(self, other: Any) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class UnsupportedModeError(ValidationError):
    code = "unsupported_mode"

    def __init__(self, model_type: Any, direction: Any):
        self.model_type = model_type
        self.direction = direction
        super().__init__(f"Unsupported simulation mode: modelType={model_type!r}, direction={direction!r}")


class MissingRequiredFieldError(ValidationError):
    code = "missing_field"

    def __init__(self, field: str, mode: str):
        self.field = field
        self.mode = mode
        super().__init__(f"{field} is required for {mode} runs")


class ForbiddenFieldPresentError(ValidationError):
    code = "forbidden_field"

    def __init__(self, field: str, mode: str):
        self.field = field
        self.mode = mode
        super().__init__(f"{field} must be omitted for {mode} runs")


class UnknownUnitError(ValidationError, KeyError):
    code = "unknown_unit"

    def __init__(self, unit_id: str, where: Optional[str] = None):
        self.unit_id = unit_id
        self.where = where
        suffix = f" (referenced by {where})" if where else ""
        super().__init__(f"Unknown unitId {unit_id!r}{suffix}")

    __str__ = Exception.__str__


class UnknownPointError(ValidationError):
    code = "unknown_point"

    def __init__(self, point_id: Any, where: Optional[str] = None):
        self.point_id = point_id
        self.where = where
        suffix = f" (referenced by {where})" if where else ""
        super().__init__(f"Unknown pointId {point_id!r}{suffix}")


class UnknownPollutantError(ValidationError):
    code = "unknown_pollutant"

    def __init__(self, pollutant_id: str, where: Optional[str] = None):
        self.pollutant_id = pollutant_id
        self.where = where
        suffix = f" (referenced by {where})" if where else ""
        super().__init__(f"Unknown pollutantId {pollutant_id!r}{suffix}")


class InvalidZoneOrderingError(ValidationError):
    code = "zone_ordering"

    def __init__(self, unit_id: str, uppers: Sequence[float]):
        self.unit_id = unit_id
        self.uppers = tuple(uppers)
        super().__init__(
            f"custom_zones.next of unit {unit_id!r} must be strictly increasing by upper, got {list(uppers)}"
        )


class UnsupportedConversionError(ValidationError):
    code = "unsupported_conversion"

    def __init__(self, unit_id: str, strategy: Any):
        self.unit_id = unit_id
        self.strategy = strategy
        super().__init__(f"Unsupported conversion_strategy type {strategy!r} for unit {unit_id!r}")


class IncompleteEmissionCycleError(ValidationError):
    """Raised when an emission cycle lacks records for some (point, pollutant) pairs."""

    code = "incomplete_cycle"

    def __init__(self, cycle: Tuple[int, int], missing_pairs: List[Tuple[int, str]]):
        self.cycle = tuple(cycle)
        self.missing_pairs = list(missing_pairs)
        start, end = self.cycle
        pairs = ", ".join(f"({p}, {q!r})" for p, q in self.missing_pairs)
        super().__init__(f"Emission cycle [{start}, {end}) is missing records for: {pairs}")


class OverlappingEmissionCycleError(ValidationError):
    code = "overlapping_cycles"

    def __init__(self, first: Tuple[int, int], second: Tuple[int, int]):
        self.first = tuple(first)
        self.second = tuple(second)
        super().__init__(
            f"Emission cycles [{first[0]}, {first[1]}) and [{second[0]}, {second[1]}) partially overlap"
        )


class DuplicateEmissionRecordError(ValidationError):
    code = "duplicate_record"

    def __init__(self, cycle: Tuple[int, int], pair: Tuple[int, str]):
        self.cycle = tuple(cycle)
        self.pair = tuple(pair)
        super().__init__(
            f"Emission cycle [{cycle[0]}, {cycle[1]}) has more than one record for ({pair[0]}, {pair[1]!r})"
        )


class EpochOrderingError(ValidationError):
    code = "epoch_ordering"

    def __init__(self, field: str, start: int, end: int, expected: str):
        self.field = field
        self.start = start
        self.end = end
        self.expected = expected
        super().__init__(f"{field}: expected {expected}, got start={start}, end={end}")


class InvalidValueError(ValidationError):
    code = "invalid_value"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field}={value!r}: {reason}")


class InconsistentKeyError(ValidationError):
    code = "inconsistent_key"

    def __init__(self, collection: str, key: str, declared: Any):
        self.collection = collection
        self.key = key
        self.declared = declared
        super().__init__(f"{collection}[{key!r}] declares id {declared!r}")


class JobValidationError(HyjobError, ValueError):
    """Raised by ConfigValidator.validate() when the report holds errors."""

    def __init__(self, report):
        self.report = report
        super().__init__(report.summary())


__all__ = [
    "HyjobError",
    "MalformedJobError",
    "MetFileNotFoundError",
    "ValidationError",
    "UnsupportedModeError",
    "MissingRequiredFieldError",
    "ForbiddenFieldPresentError",
    "UnknownUnitError",
    "UnknownPointError",
    "UnknownPollutantError",
    "InvalidZoneOrderingError",
    "UnsupportedConversionError",
    "IncompleteEmissionCycleError",
    "OverlappingEmissionCycleError",
    "DuplicateEmissionRecordError",
    "EpochOrderingError",
    "InvalidValueError",
    "InconsistentKeyError",
    "JobValidationError",
]
