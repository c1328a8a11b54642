"""Tests for the engine-level thermal-balance loop."""

import math

import numpy as np
import pytest
from scipy.integrate import trapezoid

from sett_pro.components import (
    Components,
    FixedApproach,
    FixedApproachRegenerator,
    SinusoidalDrive,
)
from sett_pro.core.fluids import IdealGas
from sett_pro.core.settings import (
    ConvergenceTolerance,
    LoopTolerance,
    MaxIters,
    OdeTolerance,
    RunInputs,
    RunSettings,
)
from sett_pro.engine import Engine, EngineState, Run, run_engine, sweep_source_temperatures
from sett_pro.engine.state import (
    HeatFlows,
    MassFlows,
    Pressure,
    RegenTemperatures,
    Temperatures,
    cycle_average,
    log_mean,
)
from sett_pro.errors import EngineNotConverged, InconsistentTemperatures
from sett_pro.state_equations import Conditions


def reference_components(**ws_params):
    return Components(
        chx=FixedApproach(vol=4e-5, approach=40.0, name="chx"),
        hhx=FixedApproach(vol=1e-4, approach=100.0, name="hhx"),
        regen=FixedApproachRegenerator(vol=1e-4, approach=10.0),
        ws=SinusoidalDrive(**ws_params),
    )


@pytest.fixture(scope="module")
def engine():
    """The reference hydrogen engine, solved once for the module."""
    return run_engine(reference_components(), IdealGas("hydrogen"), RunInputs(), RunSettings())


def _total_mass(engine, index):
    """Gas mass in all five volumes at one trajectory sample."""
    values = engine.trajectory[index]
    fluid, temp = engine.fluid, engine.state.temp
    P = values.conditions.P
    vols = engine.components.ws.volumes(engine.state.ws_state())(values.time)
    return (
        vols.V_c * fluid.dens(values.conditions.T_c, P)
        + engine.components.chx.volume() * fluid.dens(temp.chx, P)
        + engine.components.regen.volume() * fluid.dens(temp.regen.avg, P)
        + engine.components.hhx.volume() * fluid.dens(temp.hhx, P)
        + vols.V_e * fluid.dens(values.conditions.T_e, P)
    )


class TestHelpers:
    def test_log_mean(self):
        assert log_mean(300.0, 600.0) == pytest.approx(300.0 / math.log(2.0))
        assert log_mean(400.0, 400.0) == 400.0

    def test_log_mean_between_ends(self):
        value = log_mean(350.0, 390.0)
        assert 350.0 < value < 370.0

    def test_cycle_average(self):
        t = np.linspace(0.0, 2.0, 201)
        assert cycle_average(t, np.full_like(t, 3.0)) == pytest.approx(3.0)
        assert cycle_average(t, np.sin(np.pi * t)) == pytest.approx(0.0, abs=1e-12)

    def test_constant_pressure(self):
        pres = Pressure.constant(5e6)
        assert pres.avg == pres.max == pres.min == pres.t_zero == 5e6

    def test_zero_flows(self):
        assert MassFlows.zero() == MassFlows(0.0, 0.0, 0.0)
        assert HeatFlows.zero() == HeatFlows(0.0, 0.0, 0.0)


class TestTemperatures:
    def test_balanced_regenerator(self):
        regen = RegenTemperatures.from_approach(340.0, 400.0, 10.0)
        assert regen.cold == 350.0
        assert regen.hot == 390.0
        assert regen.avg == pytest.approx(log_mean(350.0, 390.0))

    def test_positive_imbalance_lowers_hot_end(self):
        regen = RegenTemperatures.from_approach(340.0, 400.0, 10.0, imbalance=5.0)
        assert regen.cold == 350.0
        assert regen.hot == 385.0

    def test_negative_imbalance_raises_cold_end(self):
        regen = RegenTemperatures.from_approach(340.0, 400.0, 10.0, imbalance=-5.0)
        assert regen.cold == 355.0
        assert regen.hot == 390.0

    def test_from_approaches(self):
        temp = Temperatures.from_approaches(300.0, 500.0, 40.0, 10.0, 100.0)
        assert temp.chx == 340.0
        assert temp.hhx == 400.0
        assert temp.regen.cold == 350.0
        assert temp.as_dict()["regen_hot"] == 390.0

    def test_inconsistent_approaches(self):
        with pytest.raises(InconsistentTemperatures):
            Temperatures.from_approaches(300.0, 420.0, 40.0, 10.0, 100.0)


class TestEngineState:
    def test_new_hint(self):
        state = EngineState.new_hint(reference_components(), IdealGas(), RunInputs())
        assert state.temp.chx == 340.0
        assert state.temp.hhx == 400.0
        assert state.pres == Pressure.constant(10e6)
        assert state.mass_flow == MassFlows.zero()
        assert state.regen_imbalance == 0.0

    def test_component_states(self):
        fluid = IdealGas()
        state = EngineState.new_hint(reference_components(), fluid, RunInputs())
        chx = state.chx_state()
        assert chx.temp == 340.0
        assert chx.ext_temp == 300.0
        assert chx.dens == pytest.approx(fluid.dens(340.0, 10e6))
        assert state.hhx_state().ext_temp == 500.0
        regen = state.regen_state()
        assert regen.temp_chx == 340.0 and regen.temp_hhx == 400.0

    def test_is_converged(self):
        components = reference_components()
        a = EngineState.new_hint(components, IdealGas(), RunInputs())
        b = EngineState.new_hint(components, IdealGas(), RunInputs(temp_source=500.001))
        c = EngineState.new_hint(components, IdealGas(), RunInputs(temp_source=501.0))
        tol = RunSettings().loop_tol.outer
        assert a.is_converged(b, tol)
        assert not a.is_converged(c, tol)


class TestRun:
    def test_inputs_at_start(self):
        components = reference_components()
        fluid = IdealGas()
        state = EngineState.new_hint(components, fluid, RunInputs())
        run = Run(components, state)
        inputs = run.calculate_inputs(0.0, Conditions(P=10e6, T_c=340.0, T_e=400.0))
        assert run.period() == pytest.approx(1.0 / 66.6667)
        assert run.pres_zero() == 10e6
        assert inputs.comp.vol == pytest.approx(4.68e-5 + 1.128e-4)
        assert inputs.chx.dens == pytest.approx(fluid.dens(340.0, 10e6))
        assert inputs.regen.enth_hot == pytest.approx(fluid.enth(390.0, 10e6))
        assert inputs.comp.Q_dot == 0.0
        expected_norm = 0.5 * (fluid.enth(300.0, 10e6) + fluid.enth(500.0, 10e6))
        assert inputs.enth_norm == pytest.approx(expected_norm)

    def test_wall_heat(self):
        components = reference_components(R_e=0.5, Q_parasitic_e=4.0)
        state = EngineState.new_hint(components, IdealGas(), RunInputs())
        inputs = Run(components, state).calculate_inputs(
            0.0, Conditions(P=10e6, T_c=340.0, T_e=410.0)
        )
        assert inputs.exp.Q_dot == pytest.approx((410.0 - 400.0) / 0.5 + 4.0)


class TestReferenceEngine:
    def test_converges_within_outer_limit(self, engine):
        assert isinstance(engine, Engine)
        assert 1 <= engine.iterations <= 20

    def test_trajectory_resolution(self, engine):
        assert len(engine.trajectory) == 30
        assert engine.trajectory.period == pytest.approx(1.0 / 66.6667)

    def test_boundary_closure(self, engine):
        """The converged cycle returns to its starting conditions."""
        first = engine.trajectory.first.conditions
        last = engine.trajectory.last.conditions
        assert last.T_c == pytest.approx(first.T_c, abs=2e-2)
        assert last.T_e == pytest.approx(first.T_e, abs=2e-2)
        assert last.P == pytest.approx(first.P, rel=1e-3)

    def test_starts_at_charge_pressure(self, engine):
        assert engine.trajectory.first.conditions.P == 10e6

    def test_total_mass_conserved(self, engine):
        start = _total_mass(engine, 0)
        for i in range(1, len(engine.trajectory)):
            assert _total_mass(engine, i) == pytest.approx(start, rel=1e-3)

    def test_instantaneous_mass_balances(self, engine):
        """Heat exchanger storage matches the flow difference at every sample."""
        fluid, temp = engine.fluid, engine.state.temp
        chx_vol = engine.components.chx.volume()
        for values in engine.trajectory:
            sol, P = values.solution, values.conditions.P
            storage = chx_vol * fluid.properties(temp.chx, P).dd_dP_T * sol.dP_dt
            assert sol.m_dot_ck - sol.m_dot_kr == pytest.approx(storage, rel=1e-6, abs=1e-9)

    def test_temperatures_ordered(self, engine):
        temp = engine.state.temp
        assert temp.sink < temp.chx <= temp.regen.cold < temp.regen.hot <= temp.hhx < temp.source

    def test_regenerator_balanced(self, engine):
        """Converged regenerator exchanges little net heat over the cycle."""
        heat = engine.state.heat_flow
        assert abs(heat.regen) < 0.05 * abs(heat.hhx)

    def test_pressure_swings(self, engine):
        pres = engine.state.pres
        assert pres.min < pres.avg < pres.max
        assert pres.t_zero == 10e6

    def test_cyclic_mass_balance_per_volume(self, engine):
        """Net mass entering each volume over the cycle vanishes."""
        traj = engine.trajectory
        t = traj.time
        zero = np.zeros_like(t)
        flows = {
            "comp": (zero, traj.m_dot_ck),
            "chx": (traj.m_dot_ck, traj.m_dot_kr),
            "regen": (traj.m_dot_kr, traj.m_dot_rl),
            "hhx": (traj.m_dot_rl, traj.m_dot_le),
            "exp": (traj.m_dot_le, zero),
        }
        for name, (m_in, m_out) in flows.items():
            net = trapezoid(m_in - m_out, t)
            throughput = trapezoid(np.abs(m_in) + np.abs(m_out), t)
            assert abs(net) < 1e-2 * throughput, name

    def test_first_law(self, engine):
        """Cycle work equals the net heat delivered to the gas."""
        traj = engine.trajectory
        ws = engine.components.ws
        fn = ws.volumes(engine.state.ws_state())
        t = traj.time
        dV = np.array([fn(ti).dVc_dt + fn(ti).dVe_dt for ti in t])
        work = cycle_average(t, traj.P * dV)
        heat = cycle_average(t, traj.Q_dot_l - traj.Q_dot_k - traj.Q_dot_r)
        assert work > 0
        assert abs(work - heat) < 0.02 * cycle_average(t, traj.Q_dot_l)


class TestRunFailures:
    def test_inconsistent_start(self):
        """The initial hint is rejected before any cycle is integrated."""
        with pytest.raises(InconsistentTemperatures) as excinfo:
            run_engine(reference_components(), IdealGas(), RunInputs(temp_source=420.0))
        assert not isinstance(excinfo.value, EngineNotConverged)

    def test_outer_limit_exhausted(self):
        settings = RunSettings(
            resolution=10,
            loop_tol=LoopTolerance(outer=ConvergenceTolerance(abs=1e-12, rel=1e-12)),
            ode_tol=OdeTolerance(abs=1e-5, rel=1e-5),
            max_iters=MaxIters(inner=20, outer=1),
        )
        with pytest.raises(EngineNotConverged):
            run_engine(reference_components(), IdealGas(), RunInputs(), settings)


class TestSweep:
    def test_mixed_outcomes(self):
        settings = RunSettings(resolution=10, ode_tol=OdeTolerance(abs=1e-5, rel=1e-5))
        points = sweep_source_temperatures(
            reference_components(), IdealGas(), RunInputs(), [420.0, 500.0], settings
        )
        assert [p.inputs.temp_source for p in points] == [420.0, 500.0]
        assert not points[0].converged
        assert "InconsistentTemperatures" in points[0].error
        assert points[1].converged
        assert points[1].engine.state.temp.hhx == pytest.approx(400.0)
