"""Value types shared by the state-equation solver layers.

All types are immutable: Inputs are built fresh for each derivative
evaluation and Solutions come out of a single linear solve.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Iterator, Sequence

import numpy as np


@dataclass(frozen=True)
class Conditions:
    """Pressure and working-space temperatures at one instant."""

    P: float  # Pa
    T_c: float  # K, compression space
    T_e: float  # K, expansion space

    def to_array(self) -> np.ndarray:
        return np.array([self.P, self.T_c, self.T_e])

    @classmethod
    def from_array(cls, y: Sequence[float]) -> Conditions:
        return cls(P=float(y[0]), T_c=float(y[1]), T_e=float(y[2]))


# --- Per-volume inputs ---


@dataclass(frozen=True)
class WorkingSpaceInputs:
    """Thermophysical snapshot of a variable-volume working space."""

    vol: float  # m³
    dens: float  # kg/m³
    inte: float  # J/kg
    enth: float  # J/kg
    dd_dP_T: float
    dd_dT_P: float
    du_dP_T: float
    du_dT_P: float
    dV_dt: float  # m³/s
    Q_dot: float  # W, heat leaving the gas


@dataclass(frozen=True)
class HeatExchangerInputs:
    """Thermophysical snapshot of a fixed-volume heat exchanger."""

    vol: float  # m³
    dens: float  # kg/m³
    inte: float  # J/kg
    enth: float  # J/kg
    dd_dP_T: float
    du_dP_T: float


@dataclass(frozen=True)
class RegeneratorInputs:
    """Thermophysical snapshot of the regenerator.

    Enthalpies at both ends are carried because the fluid leaving the
    regenerator does so at the end temperature, not the average.
    """

    vol: float  # m³
    dens: float  # kg/m³
    inte: float  # J/kg
    enth_cold: float  # J/kg
    enth_hot: float  # J/kg
    dd_dP_T: float
    du_dP_T: float


@dataclass(frozen=True)
class Inputs:
    """Complete set of volume inputs for one state-equation solve."""

    pres: float  # Pa
    enth_norm: float  # J/kg, normalisation for the energy rows
    comp: WorkingSpaceInputs
    chx: HeatExchangerInputs
    regen: RegeneratorInputs
    hhx: HeatExchangerInputs
    exp: WorkingSpaceInputs

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Inputs:
        """Build Inputs from a nested dictionary (e.g. a JSON snapshot)."""
        return cls(
            pres=float(data["pres"]),
            enth_norm=float(data["enth_norm"]),
            comp=WorkingSpaceInputs(**data["comp"]),
            chx=HeatExchangerInputs(**data["chx"]),
            regen=RegeneratorInputs(**data["regen"]),
            hhx=HeatExchangerInputs(**data["hhx"]),
            exp=WorkingSpaceInputs(**data["exp"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# --- Solver output ---


@dataclass(frozen=True)
class Solution:
    """Mass flows, heat flows and state derivatives from one linear solve.

    Mass flows are positive from the compression space towards the
    expansion space. ``Q_dot_k`` is heat rejected by the gas to the cold
    heat exchanger, ``Q_dot_r`` heat deposited in the regenerator matrix
    and ``Q_dot_l`` heat delivered to the gas by the hot heat exchanger.
    """

    m_dot_ck: float  # kg/s
    m_dot_kr: float
    m_dot_rl: float
    m_dot_le: float
    Q_dot_k: float  # W
    Q_dot_r: float
    Q_dot_l: float
    dTc_dt: float  # K/s
    dTe_dt: float  # K/s
    dP_dt: float  # Pa/s

    @classmethod
    def from_vector(cls, x: Sequence[float]) -> Solution:
        """Map the solved unknown vector onto named fields."""
        return cls(*(float(v) for v in x))

    def to_vector(self) -> np.ndarray:
        return np.array([getattr(self, f.name) for f in fields(self)])

    def derivatives(self) -> np.ndarray:
        """Return ``[dP/dt, dT_c/dt, dT_e/dt]`` in Conditions order."""
        return np.array([self.dP_dt, self.dTc_dt, self.dTe_dt])


@dataclass(frozen=True)
class Values:
    """Conditions and Solution at one sample time."""

    time: float  # s
    conditions: Conditions
    solution: Solution


SOLUTION_FIELDS = tuple(f.name for f in fields(Solution))


class Trajectory(Sequence[Values]):
    """Immutable, time-ordered samples spanning one cycle.

    The first and last samples are the cycle boundaries. Column access
    (``traj.P``, ``traj.m_dot_ck``, ...) returns numpy arrays.
    """

    def __init__(self, values: Sequence[Values]):
        values = tuple(values)
        if len(values) < 2:
            raise ValueError("A trajectory needs at least two samples")
        times = np.array([v.time for v in values])
        if np.any(np.diff(times) <= 0.0):
            raise ValueError("Trajectory times must be strictly increasing")
        self._values = values
        self._time = times

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index):  # type: ignore[override]
        return self._values[index]

    def __iter__(self) -> Iterator[Values]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"Trajectory({len(self)} samples, period={self.period:.6g} s)"

    @property
    def time(self) -> np.ndarray:
        return self._time.copy()

    @property
    def period(self) -> float:
        return float(self._time[-1] - self._time[0])

    @property
    def first(self) -> Values:
        return self._values[0]

    @property
    def last(self) -> Values:
        return self._values[-1]

    @property
    def P(self) -> np.ndarray:
        return np.array([v.conditions.P for v in self._values])

    @property
    def T_c(self) -> np.ndarray:
        return np.array([v.conditions.T_c for v in self._values])

    @property
    def T_e(self) -> np.ndarray:
        return np.array([v.conditions.T_e for v in self._values])

    def __getattr__(self, name: str) -> np.ndarray:
        if name in SOLUTION_FIELDS:
            return np.array([getattr(v.solution, name) for v in self._values])
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def to_arrays(self) -> dict[str, np.ndarray]:
        """Return every column as a dictionary of numpy arrays."""
        arrays = {"time": self.time, "P": self.P, "T_c": self.T_c, "T_e": self.T_e}
        for name in SOLUTION_FIELDS:
            arrays[name] = getattr(self, name)
        return arrays
