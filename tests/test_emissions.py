from hyjob.core.emissions import EmissionMatrixBuilder, group_cycles
from hyjob.core.errors import (
    DuplicateEmissionRecordError,
    IncompleteEmissionCycleError,
    OverlappingEmissionCycleError,
)
from hyjob.core.models import parse_job
from hyjob.core.validator import ConfigValidator

from conftest import HOUR, START


def test_group_cycles_by_interval(conc_fwd_payload):
    # Put the second cycle first; cycles still come out ordered by start
    scenarios = conc_fwd_payload["emissionScenarios"]
    conc_fwd_payload["emissionScenarios"] = scenarios[4:] + scenarios[:4]
    job = parse_job(conc_fwd_payload)

    cycles = group_cycles(job.emission_scenarios)
    assert [c.interval for c in cycles] == [(START, START + HOUR), (START + HOUR, START + 2 * HOUR)]
    assert [len(c.records) for c in cycles] == [4, 4]
    assert [r.rate.value for r in cycles[0].records] == [500.0, 300.0, 450.0, 250.0]
    assert cycles[0].duration_seconds == HOUR


def test_non_contiguous_records_join_one_cycle(conc_fwd_payload):
    scenarios = conc_fwd_payload["emissionScenarios"]
    conc_fwd_payload["emissionScenarios"] = [scenarios[0], scenarios[4], scenarios[1]]
    job = parse_job(conc_fwd_payload)

    cycles = group_cycles(job.emission_scenarios)
    assert [len(c.records) for c in cycles] == [2, 1]
    assert [r.pollutant_id for r in cycles[0].records] == ["sox", "nox"]


def test_complete_matrix_has_no_errors(conc_fwd_payload):
    builder = EmissionMatrixBuilder(parse_job(conc_fwd_payload))
    assert list(builder.check()) == []
    assert len(builder.expected_pairs()) == 4


def test_missing_pair_is_named(conc_fwd_payload):
    # Drop (14, "nox") from the second cycle only
    del conc_fwd_payload["emissionScenarios"][7]
    errors = list(EmissionMatrixBuilder(parse_job(conc_fwd_payload)).check())

    assert len(errors) == 1
    error = errors[0]
    assert isinstance(error, IncompleteEmissionCycleError)
    assert error.cycle == (START + HOUR, START + 2 * HOUR)
    assert error.missing_pairs == [(14, "nox")]


def test_several_missing_pairs(conc_fwd_payload):
    conc_fwd_payload["emissionScenarios"] = conc_fwd_payload["emissionScenarios"][:1]
    errors = list(EmissionMatrixBuilder(parse_job(conc_fwd_payload)).check())

    assert len(errors) == 1
    assert errors[0].missing_pairs == [(10, "nox"), (14, "sox"), (14, "nox")]


def test_partial_overlap_is_an_error(conc_fwd_payload):
    for scenario in conc_fwd_payload["emissionScenarios"][4:]:
        scenario["releaseStartEpochUTC"] = START + HOUR // 2
    errors = list(EmissionMatrixBuilder(parse_job(conc_fwd_payload)).check())

    assert errors == [
        OverlappingEmissionCycleError((START, START + HOUR), (START + HOUR // 2, START + 2 * HOUR))
    ]


def test_duplicate_record_is_an_error(conc_fwd_payload):
    conc_fwd_payload["emissionScenarios"].append(dict(conc_fwd_payload["emissionScenarios"][0]))
    errors = list(EmissionMatrixBuilder(parse_job(conc_fwd_payload)).check())

    assert len(errors) == 1
    assert isinstance(errors[0], DuplicateEmissionRecordError)
    assert errors[0].pair == (10, "sox")


def test_build_orders_records_point_major(conc_fwd_payload):
    conc_fwd_payload["emissionScenarios"].reverse()
    cycles = EmissionMatrixBuilder(parse_job(conc_fwd_payload)).build()

    pairs = [(r.point_id, r.pollutant_id) for r in cycles[0].records]
    assert pairs == [(10, "sox"), (10, "nox"), (14, "sox"), (14, "nox")]


def test_validator_reports_incomplete_cycle(conc_fwd_payload):
    del conc_fwd_payload["emissionScenarios"][2]
    report = ConfigValidator().check(conc_fwd_payload)

    assert not report.ok
    assert [e.missing_pairs for e in report.of_type(IncompleteEmissionCycleError)] == [[(14, "sox")]]
