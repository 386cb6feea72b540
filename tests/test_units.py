import pytest

from hyjob.core.errors import (
    InvalidZoneOrderingError,
    UnknownUnitError,
    UnsupportedConversionError,
)
from hyjob.core.models import ColorZone, Unit
from hyjob.core.units import UnitRegistry, zones_strictly_increasing
from hyjob.core.validator import ConfigValidator


def _unit(unit_id="u1", uppers=(1.0, 2.0), conversion_type="mx", m=1.0):
    return Unit(
        unit_id=unit_id,
        label="g/m3",
        conversion_type=conversion_type,
        multiplier=m,
        lower=0.0,
        zones=tuple(ColorZone(upper=u, color=f"#00000{i}") for i, u in enumerate(uppers)),
    )


def test_resolve_known_unit():
    unit = _unit()
    registry = UnitRegistry({"u1": unit})
    assert registry.resolve("u1") is unit
    assert "u1" in registry
    assert len(registry) == 1


def test_resolve_unknown_unit():
    registry = UnitRegistry({"u1": _unit()})
    with pytest.raises(UnknownUnitError) as excinfo:
        registry.resolve("ppb")
    assert excinfo.value.unit_id == "ppb"
    assert "ppb" in str(excinfo.value)


def test_convert_multiplier():
    registry = UnitRegistry({"u1": _unit(m=0.0019631)})
    assert registry.convert(1000.0, "u1") == pytest.approx(1.9631)


def test_convert_unsupported_strategy():
    registry = UnitRegistry({"log": _unit("log", conversion_type="log10")})
    with pytest.raises(UnsupportedConversionError):
        registry.convert(10.0, "log")
    assert [type(e) for e in registry.check()] == [UnsupportedConversionError]


def test_zone_ordering():
    assert zones_strictly_increasing(_unit(uppers=(1, 2)))
    assert not zones_strictly_increasing(_unit(uppers=(2, 1)))
    assert not zones_strictly_increasing(_unit(uppers=(1, 1)))
    assert zones_strictly_increasing(_unit(uppers=()))

    assert list(UnitRegistry({"u1": _unit(uppers=(1, 2))}).check()) == []
    errors = list(UnitRegistry({"u1": _unit(uppers=(2, 1))}).check())
    assert len(errors) == 1
    assert isinstance(errors[0], InvalidZoneOrderingError)
    assert errors[0].uppers == (2.0, 1.0)


def test_zone_for():
    registry = UnitRegistry({"u1": _unit(uppers=(1.0, 2.0))})
    assert registry.zone_for(0.5, "u1").upper == 1.0
    assert registry.zone_for(1.0, "u1").upper == 1.0
    assert registry.zone_for(1.5, "u1").upper == 2.0
    assert registry.zone_for(3.0, "u1") is None
    assert registry.zone_for(-1.0, "u1") is None


def test_zone_for_unordered_zones():
    registry = UnitRegistry({"u1": _unit(uppers=(2.0, 1.0))})
    with pytest.raises(InvalidZoneOrderingError):
        registry.zone_for(0.5, "u1")


def test_validator_reports_unordered_zones(conc_fwd_payload):
    zones = conc_fwd_payload["units"]["u1"]["custom_zones"]["next"]
    zones[0]["upper"], zones[1]["upper"] = 2, 1

    report = ConfigValidator().check(conc_fwd_payload)
    assert [e.unit_id for e in report.of_type(InvalidZoneOrderingError)] == ["u1"]
