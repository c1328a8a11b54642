"""Run configuration and results I/O for SETT Pro.

Engine configurations are JSON documents::

    {
      "name": "Reference engine",
      "engine": {
        "fluid": {"model": "ideal_gas", "name": "hydrogen"},
        "components": {
          "chx":   {"type": "fixed_approach", "params": {"vol": "40 cm^3", "DT": 40}},
          "hhx":   {"type": "fixed_approach", "params": {"vol": 1e-4, "DT": 100}},
          "regen": {"type": "fixed_approach", "params": {"vol": 1e-4, "DT": 10}},
          "ws":    {"type": "sinusoidal_drive", "params": {"frequency": "66.6667 Hz"}}
        }
      },
      "solver": {
        "resolution": 30,
        "decomposition": "lu",
        "inner_loop": {"abs_tol": 1e-2, "rel_tol": 1e-4, "max_iters": 20},
        "outer_loop": {"abs_tol": 1e-2, "rel_tol": 1e-4, "max_iters": 20},
        "ode": {"abs_tol": 1e-6, "rel_tol": 1e-6}
      },
      "conditions": {"T_cold": 300, "T_hot": 500, "P_0": "10 MPa"}
    }

Numeric values may be plain SI numbers or strings with units, which are
converted with pint. Results are saved as JSON (scalars) with the time
series in a companion HDF5 file when h5py is available.
"""

from __future__ import annotations

import copy
import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from sett_pro.components.base import Components, ParasiticPower
from sett_pro.components.heat_exchanger import FixedApproach, FixedConductance
from sett_pro.components.regenerator import (
    FixedApproachRegenerator,
    FixedConductanceRegenerator,
)
from sett_pro.components.working_spaces import SinusoidalDrive
from sett_pro.core.fluids import FluidPropertyError, WorkingFluid, get_fluid
from sett_pro.core.settings import (
    ConvergenceTolerance,
    LoopTolerance,
    MaxIters,
    OdeTolerance,
    RunInputs,
    RunSettings,
)
from sett_pro.state_equations.decomposition import list_decompositions
from sett_pro.utils.units import to_si

if TYPE_CHECKING:
    from sett_pro.engine.results import RunResults

logger = logging.getLogger(__name__)

# Attempt HDF5 import; gracefully degrade if not installed
try:
    import h5py

    _HAS_H5PY = True
except ImportError:
    _HAS_H5PY = False
    logger.info("h5py not available, HDF5 features disabled")


class ConfigError(ValueError):
    """Raised when a run configuration is missing or invalid."""


# --- Component schemas: parameter -> (unit, default) ---

_R_HYD_UNIT = "1/(m*s)"

_HX_SCHEMAS: dict[str, dict[str, dict[str, tuple[str, float | None]]]] = {
    "chx": {
        "fixed_approach": {
            "vol": ("m^3", 4e-5),
            "DT": ("K", 40.0),
            "R_hyd": (_R_HYD_UNIT, 0.0),
            "W_parasitic": ("W", 0.0),
            "Q_parasitic": ("W", 0.0),
        },
        "fixed_conductance": {
            "vol": ("m^3", 4e-5),
            "UA": ("W/K", 100.0),
            "R_hyd": (_R_HYD_UNIT, 0.0),
            "W_parasitic": ("W", 0.0),
            "Q_parasitic": ("W", 0.0),
        },
    },
    "hhx": {
        "fixed_approach": {
            "vol": ("m^3", 1e-4),
            "DT": ("K", 100.0),
            "R_hyd": (_R_HYD_UNIT, 0.0),
            "W_parasitic": ("W", 0.0),
            "Q_parasitic": ("W", 0.0),
        },
        "fixed_conductance": {
            "vol": ("m^3", 1e-4),
            "UA": ("W/K", 100.0),
            "R_hyd": (_R_HYD_UNIT, 0.0),
            "W_parasitic": ("W", 0.0),
            "Q_parasitic": ("W", 0.0),
        },
    },
}

_REGEN_SCHEMAS: dict[str, dict[str, tuple[str, float | None]]] = {
    "fixed_approach": {
        "vol": ("m^3", 1e-4),
        "DT": ("K", 10.0),
        "R_hyd": (_R_HYD_UNIT, 0.0),
        "Q_parasitic": ("W", 0.0),
    },
    "fixed_conductance": {
        "vol": ("m^3", 1e-4),
        "UA": ("W/K", 1000.0),
        "R_hyd": (_R_HYD_UNIT, 0.0),
        "Q_parasitic": ("W", 0.0),
    },
}

_WS_SCHEMAS: dict[str, dict[str, tuple[str, float | None]]] = {
    "sinusoidal_drive": {
        "frequency": ("Hz", 66.6667),
        "phase_angle": ("deg", 90.0),
        "V_swept_c": ("m^3", 1.128e-4),
        "V_clearance_c": ("m^3", 4.68e-5),
        "V_swept_e": ("m^3", 1.128e-4),
        "V_clearance_e": ("m^3", 1.68e-5),
        "R_c": ("K/W", math.inf),
        "R_e": ("K/W", math.inf),
        "W_parasitic_c": ("W", 0.0),
        "W_parasitic_e": ("W", 0.0),
        "Q_parasitic_e": ("W", 0.0),
    },
}


def component_types() -> dict[str, list[str]]:
    """Component model names available for each engine slot."""
    return {
        "chx": list(_HX_SCHEMAS["chx"]),
        "hhx": list(_HX_SCHEMAS["hhx"]),
        "regen": list(_REGEN_SCHEMAS),
        "ws": list(_WS_SCHEMAS),
    }


def _read_params(
    slot: str,
    model: str,
    schema: dict[str, tuple[str, float | None]],
    raw: dict[str, Any],
) -> dict[str, float]:
    unknown = set(raw) - set(schema)
    if unknown:
        raise ConfigError(
            f"Unknown parameter(s) {sorted(unknown)} for {slot} model '{model}'. "
            f"Expected: {sorted(schema)}"
        )
    params: dict[str, float] = {}
    for key, (unit, default) in schema.items():
        value = raw.get(key, default)
        try:
            params[key] = to_si(value, unit)
        except ValueError as exc:
            raise ConfigError(f"{slot}.{key}: {exc}") from exc
    return params


def _component_entry(components: dict[str, Any], slot: str) -> tuple[str, dict[str, Any]]:
    entry = components.get(slot)
    if entry is None:
        raise ConfigError(f"Missing engine component '{slot}'")
    if "type" not in entry:
        raise ConfigError(f"Component '{slot}' has no 'type'")
    return str(entry["type"]).lower(), dict(entry.get("params") or {})


def build_heat_exchanger(slot: str, model: str, raw: dict[str, Any]):
    """Create the cold (``slot="chx"``) or hot (``slot="hhx"``) heat exchanger."""
    schemas = _HX_SCHEMAS[slot]
    if model not in schemas:
        raise ConfigError(f"Unknown {slot} type '{model}'. Available: {list(schemas)}")
    p = _read_params(slot, model, schemas[model], raw)
    parasitics = ParasiticPower(thermal=p["Q_parasitic"], mechanical=p["W_parasitic"])
    if model == "fixed_approach":
        return FixedApproach(
            vol=p["vol"], approach=p["DT"], R_hyd=p["R_hyd"], parasitics=parasitics, name=slot
        )
    return FixedConductance(
        vol=p["vol"], UA=p["UA"], R_hyd=p["R_hyd"], parasitics=parasitics, name=slot
    )


def build_regenerator(model: str, raw: dict[str, Any]):
    """Create the regenerator model."""
    if model not in _REGEN_SCHEMAS:
        raise ConfigError(f"Unknown regen type '{model}'. Available: {list(_REGEN_SCHEMAS)}")
    p = _read_params("regen", model, _REGEN_SCHEMAS[model], raw)
    if model == "fixed_approach":
        return FixedApproachRegenerator(
            vol=p["vol"], approach=p["DT"], R_hyd=p["R_hyd"], Q_parasitic=p["Q_parasitic"]
        )
    return FixedConductanceRegenerator(
        vol=p["vol"], UA=p["UA"], R_hyd=p["R_hyd"], Q_parasitic=p["Q_parasitic"]
    )


def build_working_spaces(model: str, raw: dict[str, Any]):
    """Create the working-space drive model."""
    if model not in _WS_SCHEMAS:
        raise ConfigError(f"Unknown ws type '{model}'. Available: {list(_WS_SCHEMAS)}")
    p = _read_params("ws", model, _WS_SCHEMAS[model], raw)
    return SinusoidalDrive(**p)


def build_components(data: dict[str, Any]) -> Components:
    """Create all component models from the ``engine.components`` section."""
    chx_type, chx_params = _component_entry(data, "chx")
    hhx_type, hhx_params = _component_entry(data, "hhx")
    regen_type, regen_params = _component_entry(data, "regen")
    ws_type, ws_params = _component_entry(data, "ws")
    try:
        return Components(
            chx=build_heat_exchanger("chx", chx_type, chx_params),
            hhx=build_heat_exchanger("hhx", hhx_type, hhx_params),
            regen=build_regenerator(regen_type, regen_params),
            ws=build_working_spaces(ws_type, ws_params),
        )
    except ConfigError:
        raise
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def build_fluid(data: dict[str, Any]) -> WorkingFluid:
    """Create the working fluid from the ``engine.fluid`` section."""
    params = dict(data)
    model = params.pop("model", "ideal_gas")
    try:
        return get_fluid(model, **params)
    except FluidPropertyError as exc:
        raise ConfigError(str(exc)) from exc


def _tolerance(section: dict[str, Any], cls: Callable, defaults) -> Any:
    return cls(
        abs=float(section.get("abs_tol", defaults.abs)),
        rel=float(section.get("rel_tol", defaults.rel)),
    )


def build_settings(data: dict[str, Any]) -> RunSettings:
    """Create the solver settings from the ``solver`` section."""
    defaults = RunSettings()
    inner = data.get("inner_loop", {})
    outer = data.get("outer_loop", {})
    ode = data.get("ode", {})
    solver = str(data.get("decomposition", defaults.solver)).lower()
    if solver not in list_decompositions():
        raise ConfigError(f"Unknown decomposition '{solver}'. Available: {list_decompositions()}")
    try:
        return RunSettings(
            resolution=int(data.get("resolution", defaults.resolution)),
            loop_tol=LoopTolerance(
                inner=_tolerance(inner, ConvergenceTolerance, defaults.loop_tol.inner),
                outer=_tolerance(outer, ConvergenceTolerance, defaults.loop_tol.outer),
            ),
            ode_tol=_tolerance(ode, OdeTolerance, defaults.ode_tol),
            max_iters=MaxIters(
                inner=int(inner.get("max_iters", defaults.max_iters.inner)),
                outer=int(outer.get("max_iters", defaults.max_iters.outer)),
            ),
            solver=solver,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid solver settings: {exc}") from exc


def build_inputs(data: dict[str, Any]) -> RunInputs:
    """Create the boundary conditions from the ``conditions`` section."""
    missing = {"T_cold", "T_hot", "P_0"} - set(data)
    if missing:
        raise ConfigError(f"Missing condition(s): {sorted(missing)}")
    try:
        return RunInputs(
            pres_zero=to_si(data["P_0"], "Pa"),
            temp_sink=to_si(data["T_cold"], "K"),
            temp_source=to_si(data["T_hot"], "K"),
        )
    except ValueError as exc:
        raise ConfigError(f"Invalid conditions: {exc}") from exc


# --- Run configuration ---


@dataclass
class RunConfig:
    """A fully built run configuration."""

    name: str
    fluid: WorkingFluid
    components: Components
    inputs: RunInputs
    settings: RunSettings
    raw: dict[str, Any]


def run_config_from_dict(data: dict[str, Any]) -> RunConfig:
    """Build a RunConfig from a parsed configuration document.

    Raises:
        ConfigError: If a section is missing or a value is invalid.
    """
    engine = data.get("engine")
    if not isinstance(engine, dict):
        raise ConfigError("Configuration has no 'engine' section")
    if "conditions" not in data:
        raise ConfigError("Configuration has no 'conditions' section")
    return RunConfig(
        name=str(data.get("name", "Untitled")),
        fluid=build_fluid(engine.get("fluid", {})),
        components=build_components(engine.get("components", {})),
        inputs=build_inputs(data["conditions"]),
        settings=build_settings(data.get("solver", {})),
        raw=copy.deepcopy(data),
    )


def load_run_config(path: str | Path) -> RunConfig:
    """Load and build a run configuration from a JSON file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path} is not valid JSON: {exc}") from exc
    logger.info("Loaded run configuration from %s", path)
    return run_config_from_dict(data)


def default_config() -> dict[str, Any]:
    """The reference hydrogen engine configuration."""
    return {
        "name": "Reference hydrogen engine",
        "engine": {
            "fluid": {"model": "ideal_gas", "name": "hydrogen"},
            "components": {
                "chx": {"type": "fixed_approach", "params": {"vol": 4e-5, "DT": 40.0}},
                "hhx": {"type": "fixed_approach", "params": {"vol": 1e-4, "DT": 100.0}},
                "regen": {"type": "fixed_approach", "params": {"vol": 1e-4, "DT": 10.0}},
                "ws": {
                    "type": "sinusoidal_drive",
                    "params": {
                        "frequency": 66.6667,
                        "phase_angle": 90.0,
                        "V_swept_c": 1.128e-4,
                        "V_clearance_c": 4.68e-5,
                        "V_swept_e": 1.128e-4,
                        "V_clearance_e": 1.68e-5,
                    },
                },
            },
        },
        "solver": {
            "resolution": 30,
            "decomposition": "lu",
            "inner_loop": {"abs_tol": 1e-2, "rel_tol": 1e-4, "max_iters": 20},
            "outer_loop": {"abs_tol": 1e-2, "rel_tol": 1e-4, "max_iters": 20},
            "ode": {"abs_tol": 1e-6, "rel_tol": 1e-6},
        },
        "conditions": {"T_cold": 300.0, "T_hot": 500.0, "P_0": 10e6},
    }


def save_config_json(data: dict[str, Any], path: str | Path) -> None:
    """Write a configuration document to a JSON file."""
    path = Path(path)
    with open(path, "w") as f:
        json.dump(data, f, indent=2, cls=_NumpyEncoder)
    logger.info("Saved configuration to %s", path)


# --- JSON serialization ---


class _NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, (np.integer,)):
            return int(obj)
        if isinstance(obj, (np.floating,)):
            return float(obj)
        return super().default(obj)


def save_results_json(results: RunResults, path: str | Path) -> None:
    """Save run results to JSON.

    The time series are written to a companion HDF5 file (same name,
    ``.h5`` suffix) if h5py is available, otherwise they are embedded in
    the JSON document.
    """
    path = Path(path)
    data = results.summary()
    data["saved"] = datetime.now(timezone.utc).isoformat()
    arrays = results.time_series

    if arrays and not _HAS_H5PY:
        data["time_series"] = {k: np.asarray(v).tolist() for k, v in arrays.items()}

    with open(path, "w") as f:
        json.dump(data, f, indent=2, cls=_NumpyEncoder)
    logger.info("Saved results to %s", path)

    if arrays and _HAS_H5PY:
        save_arrays_hdf5(arrays, path.with_suffix(".h5"))


def load_results_json(path: str | Path) -> tuple[dict[str, Any], dict[str, np.ndarray]]:
    """Load a results summary and its time series.

    Returns:
        (summary, arrays). Arrays come from the companion HDF5 file if
        present, else from an embedded ``time_series`` entry.
    """
    path = Path(path)
    with open(path) as f:
        data = json.load(f)

    embedded = data.pop("time_series", None)
    h5_path = path.with_suffix(".h5")
    if _HAS_H5PY and h5_path.exists():
        arrays = load_arrays_hdf5(h5_path)
    elif embedded:
        arrays = {k: np.asarray(v) for k, v in embedded.items()}
    else:
        arrays = {}
    return data, arrays


# --- HDF5 helpers ---


def save_arrays_hdf5(arrays: dict[str, np.ndarray], path: str | Path) -> None:
    """Save a dictionary of numpy arrays to HDF5."""
    if not _HAS_H5PY:
        logger.warning("h5py not available, skipping HDF5 save")
        return
    path = Path(path)
    with h5py.File(path, "w") as f:
        for key, arr in arrays.items():
            f.create_dataset(key, data=arr)
        f.attrs["created"] = datetime.now(timezone.utc).isoformat()
    logger.info("Saved %d arrays to %s", len(arrays), path)


def load_arrays_hdf5(path: str | Path) -> dict[str, np.ndarray]:
    """Load all datasets from an HDF5 file into a dictionary."""
    if not _HAS_H5PY:
        logger.warning("h5py not available, skipping HDF5 load")
        return {}
    path = Path(path)
    arrays: dict[str, np.ndarray] = {}
    with h5py.File(path, "r") as f:
        for key in f.keys():
            arrays[key] = f[key][:]
    return arrays
