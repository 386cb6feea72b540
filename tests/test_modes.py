import pytest

from hyjob.core.errors import (
    ForbiddenFieldPresentError,
    MissingRequiredFieldError,
    UnsupportedModeError,
)
from hyjob.core.modes import GATED_FIELDS, Mode, Presence, resolve_mode
from hyjob.core.validator import ConfigValidator


@pytest.mark.parametrize("model_type, direction, expected", [
    ("CONCENTRATION", "FORWARD", Mode.CONC_FWD),
    ("CONCENTRATION", "BACKWARD", Mode.CONC_BWD),
    ("TRAJECTORY", "FORWARD", Mode.TRAJ_FWD),
    ("TRAJECTORY", "BACKWARD", Mode.TRAJ_BWD),
])
def test_resolve_mode(model_type, direction, expected):
    assert resolve_mode(model_type, direction) is expected


@pytest.mark.parametrize("model_type, direction", [
    ("CONCENTRATION", "SIDEWAYS"),
    ("ENSEMBLE", "FORWARD"),
    ("concentration", "forward"),
])
def test_unsupported_mode(model_type, direction):
    with pytest.raises(UnsupportedModeError):
        resolve_mode(model_type, direction)


def test_mode_tags():
    assert [str(m) for m in Mode] == ["ConcFwd", "ConcBwd", "TrajFwd", "TrajBwd"]
    assert Mode.CONC_BWD.rule.zero_emission_rate
    assert Mode.CONC_FWD.rule.complete_emission_matrix
    assert not Mode.TRAJ_FWD.is_concentration
    assert Mode.TRAJ_BWD.is_backward


SAMPLE_VALUES = {
    "pollutantMatrixConfig": {"sox": {"pollutantId": "sox", "initialMassG": 1.0, "unitId": "u1"}},
    "concentrationGrids": [{
        "centerLat": 25.0, "centerLon": 55.0, "spacingLat": 0.1, "spacingLon": 0.1,
        "spanLat": 10, "spanLon": 10, "outputLevelsMAgl": [100.0],
    }],
    "emissionScenarios": [{
        "pointId": 10, "pollutantId": "sox",
        "releaseStartEpochUTC": 1764547200, "releaseEndEpochUTC": 1764550800,
        "rate": {"value": 1.0, "unitId": "u1"}, "area": {"value": 0.0, "unitId": "m2"},
    }],
    "emitimesFilePath": "./EMITIMES",
}


def _set_field(payload, name, value):
    if name == "emitimesFilePath":
        if value is None:
            payload["physicsConfig"].pop(name, None)
        else:
            payload["physicsConfig"][name] = value
    elif value is None:
        payload.pop(name, None)
    else:
        payload[name] = value


@pytest.mark.parametrize("mode", list(Mode))
@pytest.mark.parametrize("field_name", GATED_FIELDS)
def test_field_matrix_enforced(make_payload, mode, field_name):
    payload = make_payload(str(mode))
    presence = mode.rule.presence(field_name)

    if presence is Presence.REQUIRED:
        _set_field(payload, field_name, None)
        report = ConfigValidator().check(payload)
        missing = report.of_type(MissingRequiredFieldError)
        assert [(e.field, e.mode) for e in missing] == [(field_name, str(mode))]
    else:
        _set_field(payload, field_name, SAMPLE_VALUES[field_name])
        report = ConfigValidator().check(payload)
        forbidden = report.of_type(ForbiddenFieldPresentError)
        assert [(e.field, e.mode) for e in forbidden] == [(field_name, str(mode))]


@pytest.mark.parametrize("mode", ["TrajFwd", "TrajBwd"])
def test_empty_forbidden_sections_are_ignored(make_payload, mode):
    payload = make_payload(mode)
    payload["pollutantMatrixConfig"] = {}
    payload["concentrationGrids"] = []
    payload["emissionScenarios"] = []

    report = ConfigValidator().check(payload)
    assert report.ok, report.summary()


def test_traj_fwd_rejects_concentration_grids(traj_fwd_payload):
    traj_fwd_payload["concentrationGrids"] = SAMPLE_VALUES["concentrationGrids"]
    report = ConfigValidator().check(traj_fwd_payload)
    assert not report.ok
    assert isinstance(report.errors[0], ForbiddenFieldPresentError)
    assert report.errors[0].field == "concentrationGrids"


def test_conc_fwd_requires_emitimes(conc_fwd_payload):
    del conc_fwd_payload["physicsConfig"]["emitimesFilePath"]
    report = ConfigValidator().check(conc_fwd_payload)
    assert [e.field for e in report.of_type(MissingRequiredFieldError)] == ["emitimesFilePath"]
