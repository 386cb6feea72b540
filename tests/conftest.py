from __future__ import annotations

import copy

import pytest

# 2025-12-01 00:00 UTC and 20 hours later
START = 1764547200
END = 1764619200
HOUR = 3600


def _scenario(point_id, pollutant_id, start, end, rate):
    return {
        "pointId": point_id,
        "pollutantId": pollutant_id,
        "releaseStartEpochUTC": start,
        "releaseEndEpochUTC": end,
        "rate": {"value": rate, "unitId": "u1"},
        "area": {"value": 100.0, "unitId": "m2"},
    }


BASE_PAYLOAD = {
    "jobId": "HysplitGenericRun001",
    "simulationMeta": {
        "modelType": "CONCENTRATION",
        "direction": "FORWARD",
        "startEpochUTC": START,
        "endEpochUTC": END,
        "outputFile": {"directory": "./output/", "fileName": "hysplit_output"},
    },
    "metFiles": [{"directory": "./", "fileName": "gfs0p25"}],
    "physicsConfig": {
        "configMode": "Particle",
        "maxParticles": 100000,
        "verticalMotionCode": 0,
        "emitimesFilePath": "./EMITIMES",
        "topOfModelMAgl": 10000.0,
    },
    "points": [
        {"pointId": 10, "latitude": 25.1227, "longitude": 55.2385, "heightMAgl": 5.0},
        {"pointId": 14, "latitude": 24.9783, "longitude": 55.202, "heightMAgl": 6.0},
    ],
    "units": {
        "u1": {
            "unitId": "u1",
            "label": "g/m3",
            "description": "grams per cubic meter",
            "conversion_strategy": {"m": 0.0019631, "type": "mx"},
            "custom_zones": {
                "next": [
                    {"color": "#6ecc58", "upper": 1, "inverted_color": "#000000"},
                    {"color": "#bbcf4c", "upper": 2, "inverted_color": "#000000"},
                ],
                "lower": 0,
            },
        },
        "m2": {
            "unitId": "m2",
            "label": "m2",
            "conversion_strategy": {"m": 1.0, "type": "mx"},
        },
    },
    "pollutantMatrixConfig": {
        "sox": {"pollutantId": "sox", "initialMassG": 10000.0, "unitId": "u1"},
        "nox": {"pollutantId": "nox", "initialMassG": 10000.0, "unitId": "u1"},
    },
    "concentrationGrids": [
        {
            "centerLat": 25.0,
            "centerLon": 55.0,
            "spacingLat": 0.02,
            "spacingLon": 0.02,
            "spanLat": 50,
            "spanLon": 50,
            "outputLevelsMAgl": [10.0, 100.0],
        }
    ],
    "emissionScenarios": [
        _scenario(10, "sox", START, START + HOUR, 500.0),
        _scenario(10, "nox", START, START + HOUR, 300.0),
        _scenario(14, "sox", START, START + HOUR, 450.0),
        _scenario(14, "nox", START, START + HOUR, 250.0),
        _scenario(10, "sox", START + HOUR, START + 2 * HOUR, 400.0),
        _scenario(10, "nox", START + HOUR, START + 2 * HOUR, 200.0),
        _scenario(14, "sox", START + HOUR, START + 2 * HOUR, 350.0),
        _scenario(14, "nox", START + HOUR, START + 2 * HOUR, 150.0),
    ],
    "plotConfig": {
        "pollutantId": "sox",
        "plotLevelMAgl": 10.0,
        "outputPlotFile": {"directory": "./plots/", "fileName": "concentration_plot.png"},
        "contourLevels": [{"value": 1.0, "colorIndex": 5}],
    },
}


def build_payload(mode: str = "ConcFwd") -> dict:
    """Return a fresh, valid payload for the given mode tag."""
    payload = copy.deepcopy(BASE_PAYLOAD)
    meta = payload["simulationMeta"]

    if mode in ("ConcBwd", "TrajBwd"):
        meta["direction"] = "BACKWARD"
        meta["startEpochUTC"], meta["endEpochUTC"] = END, START

    if mode != "ConcFwd":
        del payload["emissionScenarios"]
        del payload["physicsConfig"]["emitimesFilePath"]

    if mode in ("TrajFwd", "TrajBwd"):
        meta["modelType"] = "TRAJECTORY"
        del payload["pollutantMatrixConfig"]
        del payload["concentrationGrids"]
        del payload["plotConfig"]

    return payload


@pytest.fixture
def make_payload():
    return build_payload


@pytest.fixture
def conc_fwd_payload():
    return build_payload("ConcFwd")


@pytest.fixture
def conc_bwd_payload():
    return build_payload("ConcBwd")


@pytest.fixture
def traj_fwd_payload():
    return build_payload("TrajFwd")


@pytest.fixture
def traj_bwd_payload():
    return build_payload("TrajBwd")
