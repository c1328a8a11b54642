"""Engine run: the outer thermal-balance loop.

:class:`Run` is the concrete cycle for one engine state: it evaluates the
fluid properties of every control volume at a given time and conditions.
:func:`run_engine` iterates steady-state searches and state updates until
the engine temperatures stop changing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable

from sett_pro.components.base import Components
from sett_pro.core.fluids import FluidPropertyError, WorkingFluid
from sett_pro.core.settings import RunInputs, RunSettings
from sett_pro.engine.state import EngineState
from sett_pro.errors import EngineNotConverged, SolverError
from sett_pro.state_equations.cycle import Cycle, SteadyStateInputs
from sett_pro.state_equations.decomposition import MatrixDecomposition, get_decomposition
from sett_pro.state_equations.types import (
    Conditions,
    HeatExchangerInputs,
    Inputs,
    RegeneratorInputs,
    Trajectory,
    WorkingSpaceInputs,
)

logger = logging.getLogger(__name__)


class Run(Cycle):
    """Engine cycle at a fixed engine state.

    Heat exchanger and regenerator inputs depend only on pressure, since
    their temperatures are fixed for the duration of the run.

    Args:
        components: Component models.
        state: Engine state supplying temperatures and averages.
        decomposition: Linear-solve strategy for the state equations.
    """

    def __init__(
        self,
        components: Components,
        state: EngineState,
        decomposition: MatrixDecomposition | None = None,
    ):
        if decomposition is not None:
            self.decomposition = decomposition
        self.components = components
        self.state = state
        fluid = state.fluid
        temp = state.temp

        ws_state = state.ws_state()
        frequency = components.ws.frequency(ws_state)
        if not frequency > 0:
            raise ValueError(f"Engine frequency must be positive, got {frequency}")
        self._period = 1.0 / frequency
        self._volumes = components.ws.volumes(ws_state)
        self._thermal_res = components.ws.thermal_resistance(ws_state)
        self._ws_parasitics = components.ws.parasitics(ws_state)

        self._vol_chx = components.chx.volume()
        self._vol_regen = components.regen.volume()
        self._vol_hhx = components.hhx.volume()

        pres_avg = state.pres.avg
        self._enth_norm = 0.5 * (
            fluid.enth(temp.sink, pres_avg) + fluid.enth(temp.source, pres_avg)
        )

    def period(self) -> float:
        return self._period

    def pres_zero(self) -> float:
        return self.state.pres.t_zero

    def calculate_inputs(self, time: float, conditions: Conditions) -> Inputs:
        fluid = self.state.fluid
        temp = self.state.temp
        P = conditions.P
        vols = self._volumes(time)

        comp = self._working_space(
            vols.V_c,
            vols.dVc_dt,
            conditions.T_c,
            P,
            temp.chx,
            self._thermal_res.comp,
            self._ws_parasitics.comp.thermal,
        )
        exp = self._working_space(
            vols.V_e,
            vols.dVe_dt,
            conditions.T_e,
            P,
            temp.hhx,
            self._thermal_res.exp,
            self._ws_parasitics.exp.thermal,
        )

        chx = self._heat_exchanger(self._vol_chx, temp.chx, P)
        hhx = self._heat_exchanger(self._vol_hhx, temp.hhx, P)

        regen_props = fluid.properties(temp.regen.avg, P)
        regen = RegeneratorInputs(
            vol=self._vol_regen,
            dens=regen_props.dens,
            inte=regen_props.inte,
            enth_cold=fluid.enth(temp.regen.cold, P),
            enth_hot=fluid.enth(temp.regen.hot, P),
            dd_dP_T=regen_props.dd_dP_T,
            du_dP_T=regen_props.du_dP_T,
        )

        return Inputs(
            pres=P,
            enth_norm=self._enth_norm,
            comp=comp,
            chx=chx,
            regen=regen,
            hhx=hhx,
            exp=exp,
        )

    def _working_space(
        self,
        vol: float,
        dV_dt: float,
        temp: float,
        pres: float,
        temp_wall: float,
        thermal_res: float,
        Q_parasitic: float,
    ) -> WorkingSpaceInputs:
        props = self.state.fluid.properties(temp, pres)
        Q_dot = Q_parasitic
        if math.isfinite(thermal_res):
            Q_dot += (temp - temp_wall) / thermal_res
        return WorkingSpaceInputs(
            vol=vol,
            dens=props.dens,
            inte=props.inte,
            enth=props.enth,
            dd_dP_T=props.dd_dP_T,
            dd_dT_P=props.dd_dT_P,
            du_dP_T=props.du_dP_T,
            du_dT_P=props.du_dT_P,
            dV_dt=dV_dt,
            Q_dot=Q_dot,
        )

    def _heat_exchanger(self, vol: float, temp: float, pres: float) -> HeatExchangerInputs:
        props = self.state.fluid.properties(temp, pres)
        return HeatExchangerInputs(
            vol=vol,
            dens=props.dens,
            inte=props.inte,
            enth=props.enth,
            dd_dP_T=props.dd_dP_T,
            du_dP_T=props.du_dP_T,
        )


@dataclass(frozen=True)
class Engine:
    """A converged engine: its components, final state and cycle trajectory."""

    components: Components
    state: EngineState
    trajectory: Trajectory
    iterations: int  # outer-loop rounds used

    @property
    def fluid(self) -> WorkingFluid:
        return self.state.fluid


def run_engine(
    components: Components,
    fluid: WorkingFluid,
    inputs: RunInputs,
    settings: RunSettings | None = None,
) -> Engine:
    """Find the thermally consistent cyclic steady state of an engine.

    Args:
        components: Heat exchanger, regenerator and working-space models.
        fluid: Working fluid property model.
        inputs: Sink/source temperatures and pressure at t = 0.
        settings: Resolution, tolerances, iteration caps and solver.

    Returns:
        Converged Engine with its state and trajectory.

    Raises:
        EngineNotConverged: If the outer loop exhausts its iteration limit.
        InconsistentTemperatures: If the approaches leave no temperature
            rise across the regenerator.
        SteadyStateNotConverged: If an inner loop does not converge.
        IntegrationFailure: If a cycle integration fails.
        FlowDirectionDivergence: If flow directions do not settle.
        NumericalFailure: If a state-equation solve fails.
    """
    settings = settings or RunSettings()
    decomposition = get_decomposition(settings.solver)
    state = EngineState.new_hint(components, fluid, inputs)
    tol = settings.loop_tol

    for iteration in range(1, settings.max_iters.outer + 1):
        run = Run(components, state, decomposition)
        trajectory = run.find_steady_state(
            SteadyStateInputs(
                pres_zero=state.pres.t_zero,
                temp_comp_hint=state.temp.chx,
                temp_exp_hint=state.temp.hhx,
                num_points=settings.resolution,
                ode_tol=settings.ode_tol,
                conv_tol=tol.inner,
                max_iters=settings.max_iters.inner,
            )
        )
        updated = state.update(components, trajectory)
        logger.info(
            "Outer round %d: T_chx %.3f K, T_regen %.3f-%.3f K, T_hhx %.3f K, imbalance %.4f K",
            iteration,
            updated.temp.chx,
            updated.temp.regen.cold,
            updated.temp.regen.hot,
            updated.temp.hhx,
            updated.regen_imbalance,
        )

        if state.is_converged(updated, tol.outer):
            logger.info("Engine converged after %d outer rounds", iteration)
            # temperatures the trajectory was solved with, averages taken from it
            final = replace(
                state,
                pres=updated.pres,
                mass_flow=updated.mass_flow,
                heat_flow=updated.heat_flow,
            )
            return Engine(components, final, trajectory, iteration)

        state = updated

    logger.warning("Engine did not converge in %d outer rounds", settings.max_iters.outer)
    raise EngineNotConverged(
        f"Engine temperatures did not converge within {settings.max_iters.outer} rounds"
    )


# --- Parameter sweeps ---


@dataclass(frozen=True)
class SweepPoint:
    """Outcome of one run within a sweep."""

    inputs: RunInputs
    engine: Engine | None
    error: str | None = None

    @property
    def converged(self) -> bool:
        return self.engine is not None


def sweep_source_temperatures(
    components: Components,
    fluid: WorkingFluid,
    inputs: RunInputs,
    temps_source: Iterable[float],
    settings: RunSettings | None = None,
) -> list[SweepPoint]:
    """Run the engine once per source temperature.

    Runs are independent. A run that fails is recorded with its error
    message and the sweep continues.
    """
    points: list[SweepPoint] = []
    for temp_source in temps_source:
        point_inputs = replace(inputs, temp_source=float(temp_source))
        try:
            engine = run_engine(components, fluid, point_inputs, settings)
        except (SolverError, FluidPropertyError) as exc:
            logger.warning("Run at T_source = %.1f K failed: %s", temp_source, exc)
            points.append(SweepPoint(point_inputs, None, f"{type(exc).__name__}: {exc}"))
            continue
        points.append(SweepPoint(point_inputs, engine))
    return points
