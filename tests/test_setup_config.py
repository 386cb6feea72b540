import dataclasses

import pytest

from hyjob.core.config import SetupConfigComposer, set_defaults
from hyjob.core.validator import ConfigValidator


def _setup(payload, **defaults):
    job = ConfigValidator().validate(payload)
    composer = SetupConfigComposer(set_defaults(**defaults)) if defaults else SetupConfigComposer()
    return composer.compose(job)


def test_conc_fwd_setup(conc_fwd_payload):
    assert _setup(conc_fwd_payload).splitlines() == [
        "&SETUP",
        "initd = 0,",
        "maxpar = 100000,",
        "vmotion = 0,",
        "efile = './EMITIMES',",
        "ztop = 10000.0,",
        "/",
    ]


@pytest.mark.parametrize("mode", ["ConcBwd", "TrajFwd", "TrajBwd"])
def test_efile_omitted_outside_conc_fwd(make_payload, mode):
    text = _setup(make_payload(mode))
    assert "efile" not in text
    assert text.startswith("&SETUP\n")
    assert text.endswith("/\n")


def test_puff_mode_code(traj_fwd_payload):
    traj_fwd_payload["physicsConfig"]["configMode"] = "Puff"
    assert "initd = 1," in _setup(traj_fwd_payload)


def test_absent_keys_use_defaults(traj_bwd_payload):
    traj_bwd_payload["physicsConfig"] = {}
    assert _setup(traj_bwd_payload).splitlines()[1:-1] == [
        "initd = 0,",
        "maxpar = 10000,",
        "vmotion = 0,",
        "ztop = 10000.0,",
    ]


def test_custom_defaults(traj_bwd_payload):
    traj_bwd_payload["physicsConfig"] = {"verticalMotionCode": 2}
    lines = _setup(traj_bwd_payload, max_particles=5000, config_mode="Puff").splitlines()
    assert "maxpar = 5000," in lines
    assert "initd = 1," in lines
    assert "vmotion = 2," in lines


def test_defaults_are_immutable():
    defaults = set_defaults()
    with pytest.raises(dataclasses.FrozenInstanceError):
        defaults.max_particles = 1


def test_setup_is_byte_identical(conc_fwd_payload):
    assert _setup(conc_fwd_payload) == _setup(conc_fwd_payload)
