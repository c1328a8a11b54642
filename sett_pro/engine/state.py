"""Engine-level state for the outer thermal-balance loop.

An :class:`EngineState` holds the heat exchanger and regenerator
temperatures together with cycle-averaged pressures, mass flows and heat
flows. Each outer round replaces it wholesale with :meth:`EngineState.update`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

import numpy as np
from scipy.integrate import trapezoid

from sett_pro.components.base import (
    Components,
    HeatExchangerState,
    RegeneratorState,
    WorkingSpacesState,
)
from sett_pro.core.fluids import WorkingFluid
from sett_pro.core.settings import ConvergenceTolerance, RunInputs
from sett_pro.errors import InconsistentTemperatures
from sett_pro.state_equations.types import Trajectory

logger = logging.getLogger(__name__)


def cycle_average(time: np.ndarray, values: np.ndarray) -> float:
    """Time average of a sampled quantity over the sampled interval (trapezoid rule)."""
    return float(trapezoid(values, time) / (time[-1] - time[0]))


def log_mean(cold: float, hot: float) -> float:
    """Logarithmic mean temperature, falling back to the arithmetic mean."""
    if math.isclose(cold, hot, rel_tol=1e-9):
        return 0.5 * (cold + hot)
    return (hot - cold) / math.log(hot / cold)


# --- State components ---


@dataclass(frozen=True)
class Pressure:
    """Pressure summary over one cycle."""

    avg: float  # Pa
    max: float  # Pa
    min: float  # Pa
    t_zero: float  # Pa, value at t = 0

    @classmethod
    def constant(cls, value: float) -> Pressure:
        return cls(avg=value, max=value, min=value, t_zero=value)

    @classmethod
    def from_trajectory(cls, trajectory: Trajectory) -> Pressure:
        P = trajectory.P
        return cls(
            avg=cycle_average(trajectory.time, P),
            max=float(P.max()),
            min=float(P.min()),
            t_zero=float(P[0]),
        )


@dataclass(frozen=True)
class RegenTemperatures:
    """Regenerator end and mean temperatures."""

    cold: float  # K
    avg: float  # K, log-mean of the ends
    hot: float  # K

    @classmethod
    def from_approach(
        cls,
        temp_chx: float,
        temp_hhx: float,
        approach: float,
        imbalance: float = 0.0,
    ) -> RegenTemperatures:
        """End temperatures from the approach and the imbalance.

        The imbalance widens the approach at one end only: the hot end when
        positive, the cold end when negative.
        """
        if imbalance >= 0.0:
            cold = temp_chx + approach
            hot = temp_hhx - approach - imbalance
        else:
            cold = temp_chx + approach - imbalance
            hot = temp_hhx - approach
        return cls(cold=cold, avg=log_mean(cold, hot), hot=hot)


@dataclass(frozen=True)
class Temperatures:
    """Boundary, heat exchanger and regenerator temperatures."""

    sink: float  # K
    chx: float  # K
    regen: RegenTemperatures
    hhx: float  # K
    source: float  # K

    @classmethod
    def from_approaches(
        cls,
        sink: float,
        source: float,
        chx_approach: float,
        regen_approach: float,
        hhx_approach: float,
        imbalance: float = 0.0,
    ) -> Temperatures:
        """Temperatures implied by the approach of each component.

        Raises:
            InconsistentTemperatures: If the approaches leave no
                temperature rise across the regenerator.
        """
        chx = sink + chx_approach
        hhx = source - hhx_approach
        regen = RegenTemperatures.from_approach(chx, hhx, regen_approach, imbalance)
        if not (chx <= regen.cold < regen.hot <= hhx):
            raise InconsistentTemperatures(
                f"Approach temperatures are inconsistent with the sink/source span: "
                f"chx {chx:.2f} K, regen {regen.cold:.2f}-{regen.hot:.2f} K, hhx {hhx:.2f} K"
            )
        return cls(sink=sink, chx=chx, regen=regen, hhx=hhx, source=source)

    def as_dict(self) -> dict[str, float]:
        return {
            "sink": self.sink,
            "chx": self.chx,
            "regen_cold": self.regen.cold,
            "regen_avg": self.regen.avg,
            "regen_hot": self.regen.hot,
            "hhx": self.hhx,
            "source": self.source,
        }


@dataclass(frozen=True)
class MassFlows:
    """Cycle-average mass flow magnitude through each heat exchanger [kg/s]."""

    chx: float
    regen: float
    hhx: float

    @classmethod
    def zero(cls) -> MassFlows:
        return cls(chx=0.0, regen=0.0, hhx=0.0)

    @classmethod
    def from_trajectory(cls, trajectory: Trajectory) -> MassFlows:
        t = trajectory.time
        m_ck = np.abs(trajectory.m_dot_ck)
        m_kr = np.abs(trajectory.m_dot_kr)
        m_rl = np.abs(trajectory.m_dot_rl)
        m_le = np.abs(trajectory.m_dot_le)
        return cls(
            chx=cycle_average(t, 0.5 * (m_ck + m_kr)),
            regen=cycle_average(t, 0.5 * (m_kr + m_rl)),
            hhx=cycle_average(t, 0.5 * (m_rl + m_le)),
        )


@dataclass(frozen=True)
class HeatFlows:
    """Cycle-average heat flow at each heat exchanger [W].

    ``chx`` is heat rejected by the gas, ``regen`` net heat deposited in the
    regenerator matrix and ``hhx`` heat delivered to the gas.
    """

    chx: float
    regen: float
    hhx: float

    @classmethod
    def zero(cls) -> HeatFlows:
        return cls(chx=0.0, regen=0.0, hhx=0.0)

    @classmethod
    def from_trajectory(cls, trajectory: Trajectory) -> HeatFlows:
        t = trajectory.time
        return cls(
            chx=cycle_average(t, trajectory.Q_dot_k),
            regen=cycle_average(t, trajectory.Q_dot_r),
            hhx=cycle_average(t, trajectory.Q_dot_l),
        )


# --- Engine state ---


@dataclass(frozen=True)
class EngineState:
    """Engine-level state for one round of the outer loop."""

    fluid: WorkingFluid
    pres: Pressure
    temp: Temperatures
    mass_flow: MassFlows
    heat_flow: HeatFlows
    regen_imbalance: float = 0.0  # K

    @classmethod
    def new_hint(
        cls, components: Components, fluid: WorkingFluid, inputs: RunInputs
    ) -> EngineState:
        """Initial state from the boundary conditions and initial approaches."""
        temp = Temperatures.from_approaches(
            sink=inputs.temp_sink,
            source=inputs.temp_source,
            chx_approach=components.chx.initial_approach(),
            regen_approach=components.regen.initial_approach(),
            hhx_approach=components.hhx.initial_approach(),
        )
        return cls(
            fluid=fluid,
            pres=Pressure.constant(inputs.pres_zero),
            temp=temp,
            mass_flow=MassFlows.zero(),
            heat_flow=HeatFlows.zero(),
        )

    # --- Component state snapshots ---

    def ws_state(self) -> WorkingSpacesState:
        return WorkingSpacesState(pres=self.pres.avg, temp_chx=self.temp.chx, temp_hhx=self.temp.hhx)

    def chx_state(self) -> HeatExchangerState:
        props = self.fluid.properties(self.temp.chx, self.pres.avg)
        return HeatExchangerState(
            temp=self.temp.chx,
            pres=self.pres.avg,
            dens=props.dens,
            cp=props.cp,
            m_dot=self.mass_flow.chx,
            Q_dot=self.heat_flow.chx,
            ext_temp=self.temp.sink,
        )

    def hhx_state(self) -> HeatExchangerState:
        props = self.fluid.properties(self.temp.hhx, self.pres.avg)
        return HeatExchangerState(
            temp=self.temp.hhx,
            pres=self.pres.avg,
            dens=props.dens,
            cp=props.cp,
            m_dot=self.mass_flow.hhx,
            Q_dot=self.heat_flow.hhx,
            ext_temp=self.temp.source,
        )

    def regen_state(self) -> RegeneratorState:
        props = self.fluid.properties(self.temp.regen.avg, self.pres.avg)
        return RegeneratorState(
            temp=self.temp.regen.avg,
            pres=self.pres.avg,
            dens=props.dens,
            cp=props.cp,
            m_dot=self.mass_flow.regen,
            Q_dot=self.heat_flow.regen,
            temp_chx=self.temp.chx,
            temp_hhx=self.temp.hhx,
        )

    # --- Outer-loop update ---

    def update(self, components: Components, trajectory: Trajectory) -> EngineState:
        """Derive the next state from a converged cycle trajectory.

        Averages are taken from the trajectory; heat exchanger temperatures
        follow from each component's approach at those averages. The
        regenerator imbalance is corrected by the temperature shift that
        cancels the matrix's net heat absorption over the cycle, assuming
        about half of the cycle-average flow leaves through each end.

        Args:
            components: Component models queried for approaches.
            trajectory: Converged cycle from the inner loop.

        Returns:
            The updated EngineState.

        Raises:
            InconsistentTemperatures: If the new approaches are inconsistent
                with the sink/source span.
        """
        averaged = replace(
            self,
            pres=Pressure.from_trajectory(trajectory),
            mass_flow=MassFlows.from_trajectory(trajectory),
            heat_flow=HeatFlows.from_trajectory(trajectory),
        )

        chx_approach = components.chx.approach(averaged.chx_state())
        hhx_approach = components.hhx.approach(averaged.hhx_state())
        temp_chx = self.temp.sink + chx_approach
        temp_hhx = self.temp.source - hhx_approach

        regen_state = replace(averaged.regen_state(), temp_chx=temp_chx, temp_hhx=temp_hhx)
        regen_approach = components.regen.approach(regen_state)

        imbalance = self.regen_imbalance
        capacity = 0.5 * regen_state.m_dot * regen_state.cp
        if capacity > 0.0:
            imbalance -= regen_state.Q_dot / capacity

        temp = Temperatures.from_approaches(
            sink=self.temp.sink,
            source=self.temp.source,
            chx_approach=chx_approach,
            regen_approach=regen_approach,
            hhx_approach=hhx_approach,
            imbalance=imbalance,
        )
        return replace(averaged, temp=temp, regen_imbalance=imbalance)

    def is_converged(self, other: EngineState, tol: ConvergenceTolerance) -> bool:
        """True if every heat exchanger and regenerator temperature is within *tol*."""
        pairs = (
            (self.temp.chx, other.temp.chx),
            (self.temp.regen.cold, other.temp.regen.cold),
            (self.temp.regen.avg, other.temp.regen.avg),
            (self.temp.regen.hot, other.temp.regen.hot),
            (self.temp.hhx, other.temp.hhx),
        )
        return all(tol.is_converged(old, new) for old, new in pairs)
