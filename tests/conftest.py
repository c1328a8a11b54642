"""Shared fixtures for the SETT Pro test suite."""

import copy

import pytest

from sett_pro.state_equations import Inputs

# Hydrogen at 10 MPa mid-compression: compression space at 330 K, cold HX
# at 340 K, regenerator 350-390 K, hot HX and expansion space at 400 K.
_SNAPSHOT = {
    "pres": 10e6,
    "enth_norm": 2.156e6,
    "comp": {
        "vol": 2.5e-4,
        "dens": 7.3476,
        "inte": 814064.0,
        "enth": 1.144e6,
        "dd_dP_T": 7.3476e-7,
        "dd_dT_P": -0.022265,
        "du_dP_T": 0.0,
        "du_dT_P": 10150.0,
        "dV_dt": -0.08,
        "Q_dot": 0.0,
    },
    "chx": {
        "vol": 4e-5,
        "dens": 7.1315,
        "inte": 915300.0,
        "enth": 1.287e6,
        "dd_dP_T": 7.1315e-7,
        "du_dP_T": 0.0,
    },
    "regen": {
        "vol": 1e-4,
        "dens": 6.5532,
        "inte": 1.224e6,
        "enth_cold": 1.433e6,
        "enth_hot": 2.009e6,
        "dd_dP_T": 6.5532e-7,
        "du_dP_T": 0.0,
    },
    "hhx": {
        "vol": 1e-4,
        "dens": 6.0618,
        "inte": 1.5375e6,
        "enth": 2.157e6,
        "dd_dP_T": 6.0618e-7,
        "du_dP_T": 0.0,
    },
    "exp": {
        "vol": 3.2e-4,
        "dens": 6.0618,
        "inte": 1.5375e6,
        "enth": 2.157e6,
        "dd_dP_T": 6.0618e-7,
        "dd_dT_P": -0.015155,
        "du_dP_T": 0.0,
        "du_dT_P": 10250.0,
        "dV_dt": 0.06,
        "Q_dot": 0.0,
    },
}


@pytest.fixture
def snapshot():
    """Frozen volume inputs as a nested dictionary."""
    return copy.deepcopy(_SNAPSHOT)


@pytest.fixture
def reference_inputs(snapshot):
    """Frozen volume inputs."""
    return Inputs.from_dict(snapshot)
