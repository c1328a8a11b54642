"""Cycle performance of a converged engine.

Powers, heat flows, torque and efficiency are obtained by integrating the
trajectory over one cycle and multiplying by the frequency. Pressure drops
through the heat exchangers are applied after the fact: the state
equations assume a uniform pressure, and the drops split it into
compression-space and expansion-space pressures for the work integral.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
from scipy.integrate import trapezoid

from sett_pro.utils.constants import TWO_PI

if TYPE_CHECKING:
    from sett_pro.core.fluids import WorkingFluid
    from sett_pro.engine.run import Engine


def cycle_integral(time: np.ndarray, values: np.ndarray) -> float:
    """Integral of a sampled quantity over the cycle (trapezoid rule)."""
    return float(trapezoid(values, time))


def hx_pressure_drop(
    R_hyd: float,
    m_dot_in: np.ndarray,
    m_dot_out: np.ndarray,
    dens: float | np.ndarray,
) -> np.ndarray:
    """Pressure drop [Pa] across one heat exchanger, positive along positive flow.

    Args:
        R_hyd: Hydraulic resistance [1/(m·s)].
        m_dot_in: Mass flow into the heat exchanger [kg/s].
        m_dot_out: Mass flow out of the heat exchanger [kg/s].
        dens: Gas density [kg/m³], a scalar or one value per sample.
    """
    m_dot_avg = 0.5 * (np.asarray(m_dot_in) + np.asarray(m_dot_out))
    return R_hyd * m_dot_avg / np.asarray(dens)


@dataclass(frozen=True)
class PressureDrops:
    """Pressure drop time series through each heat exchanger [Pa]."""

    chx: np.ndarray
    regen: np.ndarray
    hhx: np.ndarray

    @property
    def total(self) -> np.ndarray:
        return self.chx + self.regen + self.hhx


@dataclass(frozen=True)
class Powers:
    """Cycle-average powers [W]."""

    indicated: float
    indicated_zero_dP: float  # without flow losses
    shaft: float  # after working-space mechanical parasitics
    net: float  # after heat exchanger mechanical parasitics


@dataclass(frozen=True)
class Heats:
    """Cycle-average heat flows [W]."""

    input: float
    rejected: float
    Q_dot_e: float  # expansion space to its wall
    Q_dot_l: float  # hot heat exchanger to the gas
    Q_dot_c: float  # compression space to its wall
    Q_dot_k: float  # gas to the cold heat exchanger
    Q_dot_dP: float  # flow friction
    external_loss: float
    internal_loss: float


@dataclass(frozen=True)
class Performance:
    """Engine-level performance summary."""

    powers: Powers
    heats: Heats
    torque: float  # N·m
    efficiency: float

    @classmethod
    def from_engine(cls, engine: Engine) -> Performance:
        """Evaluate the performance of a converged engine.

        Args:
            engine: Converged engine from :func:`~sett_pro.engine.run.run_engine`.

        Returns:
            Performance with powers, heats, torque and efficiency.
        """
        components = engine.components
        state = engine.state
        traj = engine.trajectory
        t = traj.time
        temp = state.temp

        ws_state = state.ws_state()
        frequency = components.ws.frequency(ws_state)
        volume_fn = components.ws.volumes(ws_state)
        volumes = [volume_fn(ti) for ti in t]
        dVc_dt = np.array([v.dVc_dt for v in volumes])
        dVe_dt = np.array([v.dVe_dt for v in volumes])

        chx_state = state.chx_state()
        regen_state = state.regen_state()
        hhx_state = state.hhx_state()
        P = traj.P

        drops = PressureDrops(
            chx=hx_pressure_drop(
                components.chx.hydraulic_resistance(chx_state),
                traj.m_dot_ck,
                traj.m_dot_kr,
                _density_series(engine.fluid, temp.chx, P),
            ),
            regen=hx_pressure_drop(
                components.regen.hydraulic_resistance(regen_state),
                traj.m_dot_kr,
                traj.m_dot_rl,
                _density_series(engine.fluid, temp.regen.avg, P),
            ),
            hhx=hx_pressure_drop(
                components.hhx.hydraulic_resistance(hhx_state),
                traj.m_dot_rl,
                traj.m_dot_le,
                _density_series(engine.fluid, temp.hhx, P),
            ),
        )
        P_c = P + 0.5 * drops.total
        P_e = P - 0.5 * drops.total

        ws_parasitics = components.ws.parasitics(ws_state)
        chx_parasitics = components.chx.parasitics(chx_state)
        regen_parasitics = components.regen.parasitics(regen_state)
        hhx_parasitics = components.hhx.parasitics(hhx_state)

        indicated = frequency * cycle_integral(t, P_c * dVc_dt + P_e * dVe_dt)
        indicated_zero_dP = frequency * cycle_integral(t, P * (dVc_dt + dVe_dt))
        shaft = indicated - ws_parasitics.comp.mechanical - ws_parasitics.exp.mechanical
        # regenerator included; its built-in models carry no mechanical parasitics
        net = (
            shaft
            - chx_parasitics.mechanical
            - regen_parasitics.mechanical
            - hhx_parasitics.mechanical
        )
        powers = Powers(
            indicated=indicated,
            indicated_zero_dP=indicated_zero_dP,
            shaft=shaft,
            net=net,
        )

        resistance = components.ws.thermal_resistance(ws_state)
        Q_dot_e = frequency * _wall_heat(t, traj.T_e, temp.hhx, resistance.exp)
        Q_dot_c = frequency * _wall_heat(t, traj.T_c, temp.chx, resistance.comp)
        Q_dot_l = frequency * cycle_integral(t, traj.Q_dot_l)
        Q_dot_k = frequency * cycle_integral(t, traj.Q_dot_k)
        Q_dot_dP = indicated_zero_dP - indicated

        external_loss = hhx_parasitics.thermal + regen_parasitics.thermal + ws_parasitics.exp.thermal
        internal_loss = ws_parasitics.comp.mechanical + ws_parasitics.exp.mechanical

        heats = Heats(
            input=Q_dot_l - Q_dot_e + external_loss,
            rejected=Q_dot_c + Q_dot_k + Q_dot_dP + internal_loss + external_loss,
            Q_dot_e=Q_dot_e,
            Q_dot_l=Q_dot_l,
            Q_dot_c=Q_dot_c,
            Q_dot_k=Q_dot_k,
            Q_dot_dP=Q_dot_dP,
            external_loss=external_loss,
            internal_loss=internal_loss,
        )

        efficiency = net / heats.input if heats.input != 0.0 else math.nan
        return cls(
            powers=powers,
            heats=heats,
            torque=shaft / (TWO_PI * frequency),
            efficiency=efficiency,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _density_series(fluid: WorkingFluid, temp: float, pres: np.ndarray) -> np.ndarray:
    """Gas density at a fixed temperature for every sampled pressure."""
    return np.array([fluid.dens(temp, p) for p in pres])


def _wall_heat(time: np.ndarray, temp: np.ndarray, temp_wall: float, resistance: float) -> float:
    """Cycle integral of the heat flow from a working space to its wall."""
    if math.isinf(resistance):
        return 0.0
    return cycle_integral(time, (temp - temp_wall) / resistance)
